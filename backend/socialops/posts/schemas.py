from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from socialops.posts.models import AUTHOR_STATUSES, POST_DRAFT


def _author_status(value: str | None) -> str | None:
    if value is None:
        return value
    value = value.strip().upper()
    if value not in AUTHOR_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(sorted(AUTHOR_STATUSES))}")
    return value


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class PostCreateRequest(BaseModel):
    title: str | None = Field(default=None, max_length=255)
    content: str = Field(min_length=1)
    mediaUrls: list[str] = Field(default_factory=list)
    status: str = POST_DRAFT
    platform: str = Field(default="linkedin", min_length=1, max_length=32)
    scheduledAt: datetime | None = None
    aiGenerated: bool = False
    aiModel: str | None = Field(default=None, max_length=64)

    @field_validator("status")
    @classmethod
    def _status(cls, value: str) -> str:
        return _author_status(value)

    def to_columns(self) -> dict:
        return {
            "title": self.title,
            "content": self.content,
            "media_urls": list(self.mediaUrls),
            "status": self.status,
            "platform": self.platform,
            "scheduled_at": to_naive_utc(self.scheduledAt),
            "ai_generated": self.aiGenerated,
            "ai_model": self.aiModel,
        }


class PostUpdateRequest(BaseModel):
    title: str | None = Field(default=None, max_length=255)
    content: str | None = Field(default=None, min_length=1)
    mediaUrls: list[str] | None = None
    status: str | None = None
    scheduledAt: datetime | None = None

    @field_validator("status")
    @classmethod
    def _status(cls, value: str | None) -> str | None:
        return _author_status(value)

    def to_columns(self) -> dict:
        mapping = {
            "title": "title",
            "content": "content",
            "mediaUrls": "media_urls",
            "status": "status",
            "scheduledAt": "scheduled_at",
        }
        data = self.model_dump(exclude_unset=True)
        # title and scheduledAt may be cleared with null; the rest are NOT NULL
        for key in ("content", "mediaUrls", "status"):
            if key in data and data[key] is None:
                data.pop(key)
        if "scheduledAt" in data:
            data["scheduledAt"] = to_naive_utc(data["scheduledAt"])
        return {mapping[key]: value for key, value in data.items()}


class PostRejectRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=2000)


class PostScheduleRequest(BaseModel):
    scheduledAt: datetime
