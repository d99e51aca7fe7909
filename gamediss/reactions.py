from __future__ import annotations

from typing import Callable

import aiohttp

from gamediss.batcher import DEFAULT_QUIET_PERIOD_MS, FlushError, ThrottledMutation

DISLIKE_PATH = "/api/games/dislike"
EMOJI_REACTION_PATH = "/api/games/emoji-reaction"
DEAD_GAME_REACT_PATH = "/api/dead-games/react"


def _url(base_url: str, path: str, session: aiohttp.ClientSession | None) -> str:
    # An owned session has no base URL, so the endpoint must be absolute.
    if not base_url and session is None:
        raise ValueError("base_url is required when no session is given")
    return f"{base_url.rstrip('/')}{path}"


class ThrottledDislike:
    """Batched dislike clicks, one request per game per quiet period."""

    def __init__(
        self,
        base_url: str = "",
        *,
        on_optimistic_update: Callable[[int], None] | None = None,
        on_error: Callable[[FlushError, int], None] | None = None,
        on_success: Callable[[], None] | None = None,
        quiet_period_ms: float = DEFAULT_QUIET_PERIOD_MS,
        session: aiohttp.ClientSession | None = None,
    ):
        self.mutation = ThrottledMutation(
            _url(base_url, DISLIKE_PATH, session),
            lambda key, increment: {"igdbId": int(key), "incrementBy": increment},
            on_optimistic_update=on_optimistic_update,
            on_error=on_error,
            on_success=on_success,
            quiet_period_ms=quiet_period_ms,
            session=session,
        )

    def send_dislike(self, igdb_id: int, increment: int = 1) -> None:
        self.mutation.mutate(str(igdb_id), increment)

    def clear_pending(self) -> None:
        self.mutation.clear_pending()

    async def aclose(self) -> None:
        await self.mutation.aclose()


class ThrottledEmojiReaction:
    """Batched emoji reactions keyed by "gameId:emojiName".

    The callbacks also receive the emoji name, recovered from the key.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        on_optimistic_update: Callable[[str, int], None] | None = None,
        on_error: Callable[[FlushError, str, int], None] | None = None,
        on_success: Callable[[], None] | None = None,
        quiet_period_ms: float = DEFAULT_QUIET_PERIOD_MS,
        session: aiohttp.ClientSession | None = None,
    ):
        self._on_optimistic_update = on_optimistic_update
        self._on_error = on_error
        self.mutation = ThrottledMutation(
            _url(base_url, EMOJI_REACTION_PATH, session),
            self._build_payload,
            on_error=self._handle_error if on_error else None,
            on_success=on_success,
            quiet_period_ms=quiet_period_ms,
            session=session,
        )

    def _build_payload(self, key: str, increment: int) -> dict:
        game_id, emoji_name = split_emoji_key(key)
        return {"gameId": game_id, "emojiName": emoji_name, "incrementBy": increment}

    def _handle_error(self, error: FlushError, increment: int) -> None:
        emoji_name = split_emoji_key(error.key)[1] if error.key else ""
        self._on_error(error, emoji_name, increment)

    def send_emoji_reaction(self, game_id: int, emoji_name: str) -> None:
        if self._on_optimistic_update:
            self._on_optimistic_update(emoji_name, 1)
        self.mutation.mutate(emoji_key(game_id, emoji_name), 1)

    def clear_pending(self) -> None:
        self.mutation.clear_pending()

    async def aclose(self) -> None:
        await self.mutation.aclose()


def emoji_key(game_id: int, emoji_name: str) -> str:
    return f"{game_id}:{emoji_name}"


def split_emoji_key(key: str) -> tuple[int, str]:
    game_id, _, emoji_name = key.partition(":")
    return int(game_id), emoji_name


class ThrottledDeadGameReaction:
    def __init__(
        self,
        base_url: str = "",
        *,
        on_optimistic_update: Callable[[int], None] | None = None,
        on_error: Callable[[FlushError, int], None] | None = None,
        on_success: Callable[[], None] | None = None,
        quiet_period_ms: float = DEFAULT_QUIET_PERIOD_MS,
        session: aiohttp.ClientSession | None = None,
    ):
        self.mutation = ThrottledMutation(
            _url(base_url, DEAD_GAME_REACT_PATH, session),
            lambda key, increment: {"deadGameId": key, "incrementBy": increment},
            on_optimistic_update=on_optimistic_update,
            on_error=on_error,
            on_success=on_success,
            quiet_period_ms=quiet_period_ms,
            session=session,
        )

    def send_reaction(self, dead_game_id: str, increment: int = 1) -> None:
        self.mutation.mutate(dead_game_id, increment)

    def clear_pending(self) -> None:
        self.mutation.clear_pending()

    async def aclose(self) -> None:
        await self.mutation.aclose()
