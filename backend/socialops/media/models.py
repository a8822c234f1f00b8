from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from socialops.db.base import Base, new_id


class SyncedMedia(Base):
    __tablename__ = "synced_media"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("sm"))
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    integration_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    file_id: Mapped[str] = mapped_column(String(255), nullable=False)      # provider-side id
    name: Mapped[str] = mapped_column(String(1024), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(128), nullable=False)
    size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    web_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    analyzed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


Index("ix_synced_media_tenant_created_at", SyncedMedia.tenant_id, SyncedMedia.created_at)
