"""Health check endpoint."""
from fastapi import APIRouter, Request

from gamediss.config import APP_VERSION

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    checks = {"app": "ok"}

    # Counter storage must be writable
    data_dir = request.app.state.store.path.parent
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
        test_file = data_dir / ".health_check"
        test_file.write_text("ok")
        test_file.unlink()
        checks["storage"] = "ok"
    except OSError as e:
        checks["storage"] = f"error: {e}"
        return {"success": False, "status": "unhealthy", "checks": checks}

    checks["rate_limit_identifiers"] = request.app.state.rate_limiter.tracked()
    return {"success": True, "status": "ok", "version": APP_VERSION, "checks": checks}
