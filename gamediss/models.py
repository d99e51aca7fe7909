from pydantic import BaseModel, Field, StrictInt, field_validator

# Client batchers merge bursts of clicks, so one request may carry many.
MAX_INCREMENT = 100

ALLOWED_EMOJIS = frozenset(
    {
        "angry",
        "frown",
        "tired",
        "dizzy",
        "surprised",
        "grin-beam-sweat",
        "sad-tear",
        "rolling-eyes",
        "meh",
        "grimace",
        "flushed",
        "grin-tongue",
        "heart-crack",
        "bug",
        "poop",
    }
)


class DislikePayload(BaseModel):
    igdbId: StrictInt = Field(gt=0)
    incrementBy: StrictInt = Field(default=1, ge=1, le=MAX_INCREMENT)


class EmojiReactionPayload(BaseModel):
    gameId: StrictInt = Field(gt=0)
    emojiName: str = Field(min_length=1, max_length=50, pattern=r"^[a-zA-Z0-9_-]+$")
    incrementBy: StrictInt = Field(default=1, ge=1, le=MAX_INCREMENT)

    @field_validator("emojiName")
    @classmethod
    def _whitelisted(cls, v: str) -> str:
        v = v.lower()
        if v not in ALLOWED_EMOJIS:
            raise ValueError("Invalid emoji name")
        return v


class DeadGameReactPayload(BaseModel):
    deadGameId: str = Field(min_length=1, max_length=64)
    incrementBy: StrictInt = Field(default=1, ge=1)
