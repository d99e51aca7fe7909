import os
import subprocess
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("DATA_DIR", str(_PROJECT_ROOT / "data"))).resolve()
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
TRUSTED_PROXY_NETS = os.environ.get("TRUSTED_PROXY_NETS", "127.0.0.1/32,::1/128")
RATE_LIMIT_CLEANUP_INTERVAL_S = float(os.environ.get("RATE_LIMIT_CLEANUP_INTERVAL_S", "300"))
MAX_BODY_BYTES = int(os.environ.get("MAX_BODY_BYTES", str(1 * 1024 * 1024)))


def _resolve_app_version() -> str:
    env_version = (os.environ.get("APP_VERSION") or "").strip()
    if env_version:
        return env_version
    file_version = (_PROJECT_ROOT / ".version")
    if file_version.exists():
        from_file = file_version.read_text(encoding="utf-8").strip()
        if from_file:
            return from_file
    try:
        commit = subprocess.check_output(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=str(_PROJECT_ROOT),
            text=True,
            stderr=subprocess.DEVNULL,
        ).strip()
        return commit or "dev"
    except Exception:
        return "dev"


APP_VERSION = _resolve_app_version()
