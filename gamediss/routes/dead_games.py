from fastapi import APIRouter, Depends, Request

from gamediss.guard import rate_limited
from gamediss.models import DeadGameReactPayload

router = APIRouter(prefix="/api/dead-games", tags=["dead-games"])


@router.post("/react", dependencies=[Depends(rate_limited("dead_game_react"))])
def api_dead_game_react(payload: DeadGameReactPayload, request: Request):
    count = request.app.state.store.increment_dead_game(payload.deadGameId, payload.incrementBy)
    return {
        "success": True,
        "data": {
            "deadGameId": payload.deadGameId,
            "newReactionCount": count,
            "incrementBy": payload.incrementBy,
        },
    }


@router.get("/{dead_game_id}/ghost-count")
def api_ghost_count(dead_game_id: str, request: Request):
    return {
        "success": True,
        "data": {
            "deadGameId": dead_game_id,
            "ghostCount": request.app.state.store.dead_game_count(dead_game_id),
        },
    }
