from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from socialops.db.base import Base, new_id

POST_DRAFT = "DRAFT"
POST_PENDING_APPROVAL = "PENDING_APPROVAL"
POST_APPROVED = "APPROVED"
POST_SCHEDULED = "SCHEDULED"
POST_PUBLISHED = "PUBLISHED"
POST_FAILED = "FAILED"

POST_STATUSES = frozenset(
    {POST_DRAFT, POST_PENDING_APPROVAL, POST_APPROVED, POST_SCHEDULED, POST_PUBLISHED, POST_FAILED}
)
# Statuses an author may set directly; the rest are reached through review or publishing.
AUTHOR_STATUSES = frozenset({POST_DRAFT, POST_PENDING_APPROVAL})


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("p"))
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    media_urls: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=POST_DRAFT)
    platform: Mapped[str] = mapped_column(String(32), nullable=False, default="linkedin")
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    ai_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ai_model: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    user_modifications: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


Index("ix_posts_tenant_created_at", Post.tenant_id, Post.created_at)
