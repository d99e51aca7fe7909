from fastapi import APIRouter, Depends, Query, Request

from gamediss.guard import rate_limited
from gamediss.models import DislikePayload, EmojiReactionPayload

router = APIRouter(prefix="/api/games", tags=["games"])


@router.post("/dislike", dependencies=[Depends(rate_limited("dislike"))])
def api_dislike(payload: DislikePayload, request: Request):
    count = request.app.state.store.increment_dislike(payload.igdbId, payload.incrementBy)
    return {
        "success": True,
        "data": {
            "igdbId": payload.igdbId,
            "newDislikeCount": count,
            "incrementBy": payload.incrementBy,
        },
    }


@router.post("/emoji-reaction", dependencies=[Depends(rate_limited("emoji_reaction"))])
def api_emoji_reaction(payload: EmojiReactionPayload, request: Request):
    count = request.app.state.store.increment_emoji(
        payload.gameId, payload.emojiName, payload.incrementBy
    )
    return {
        "success": True,
        "data": {
            "gameId": payload.gameId,
            "emojiName": payload.emojiName,
            "count": count,
            "incrementBy": payload.incrementBy,
        },
    }


@router.get("/top-disliked")
def api_top_disliked(request: Request, limit: int = Query(default=10, ge=1, le=50)):
    return {"success": True, "data": request.app.state.store.top_disliked(limit)}


@router.get("/{igdb_id}/dislikes")
def api_dislike_count(igdb_id: int, request: Request):
    store = request.app.state.store
    return {
        "success": True,
        "data": {
            "igdbId": igdb_id,
            "dislikeCount": store.dislike_count(igdb_id),
            "emojiReactions": store.emoji_counts(igdb_id),
        },
    }
