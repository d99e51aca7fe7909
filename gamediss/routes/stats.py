from fastapi import APIRouter, Request

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/total-dislikes")
def api_total_dislikes(request: Request):
    return {"success": True, "data": {"totalDislikes": request.app.state.store.total_dislikes()}}
