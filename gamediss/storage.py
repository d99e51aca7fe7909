"""JSON-file counters for dislikes and reactions.

The whole document is small and rewritten on each increment, guarded by a
lock so concurrent requests on the thread pool do not lose updates.
"""
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

COUNTERS_FILE = "_counters.json"


def _utc_now_z() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _empty() -> dict:
    return {"games": {}, "emoji": {}, "dead_games": {}}


class CounterStore:
    def __init__(self, data_dir: Path):
        self.path = Path(data_dir) / COUNTERS_FILE
        self._lock = threading.Lock()

    def _load(self) -> dict:
        if not self.path.exists():
            return _empty()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("counter file unreadable, starting empty: %s", self.path)
            return _empty()
        if not isinstance(data, dict):
            return _empty()
        for section in ("games", "emoji", "dead_games"):
            if not isinstance(data.get(section), dict):
                data[section] = {}
        return data

    def _save(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def _increment(self, section: str, key: str, by: int) -> int:
        with self._lock:
            data = self._load()
            entry = data[section].get(key, {"count": 0, "updated_at": None})
            entry["count"] = entry.get("count", 0) + by
            entry["updated_at"] = _utc_now_z()
            data[section][key] = entry
            self._save(data)
            return entry["count"]

    def _get(self, section: str, key: str) -> int:
        with self._lock:
            return self._load()[section].get(key, {}).get("count", 0)

    def increment_dislike(self, igdb_id: int, by: int) -> int:
        return self._increment("games", str(igdb_id), by)

    def dislike_count(self, igdb_id: int) -> int:
        return self._get("games", str(igdb_id))

    def total_dislikes(self) -> int:
        with self._lock:
            games = self._load()["games"]
        return sum(v.get("count", 0) for v in games.values())

    def top_disliked(self, limit: int = 10) -> list[dict]:
        with self._lock:
            games = self._load()["games"]
        ranked = sorted(games.items(), key=lambda kv: (-kv[1].get("count", 0), kv[0]))
        return [
            {"igdbId": int(k), "dislikeCount": v.get("count", 0)}
            for k, v in ranked[:limit]
        ]

    def increment_emoji(self, game_id: int, emoji_name: str, by: int) -> int:
        return self._increment("emoji", f"{game_id}:{emoji_name}", by)

    def emoji_counts(self, game_id: int) -> dict[str, int]:
        prefix = f"{game_id}:"
        with self._lock:
            emoji = self._load()["emoji"]
        return {
            k[len(prefix):]: v.get("count", 0)
            for k, v in emoji.items()
            if k.startswith(prefix)
        }

    def increment_dead_game(self, dead_game_id: str, by: int) -> int:
        return self._increment("dead_games", dead_game_id, by)

    def dead_game_count(self, dead_game_id: str) -> int:
        return self._get("dead_games", dead_game_id)
