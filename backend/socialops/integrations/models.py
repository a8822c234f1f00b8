from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from socialops.db.base import Base, new_id

GOOGLE_DRIVE = "GOOGLE_DRIVE"

PROFILE_PERSONAL = "PERSONAL"
PROFILE_COMPANY_PAGE = "COMPANY_PAGE"


class CloudStorageIntegration(Base):
    __tablename__ = "cloud_storage_integrations"
    __table_args__ = (UniqueConstraint("tenant_id", "provider", name="uq_cloud_storage_tenant_provider"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("csi"))
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(32), nullable=False)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    sync_folder_path: Mapped[str] = mapped_column(String(1024), nullable=False, default="/")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_analyze: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_generate: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auto_approve: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class LinkedInIntegration(Base):
    __tablename__ = "linkedin_integrations"
    __table_args__ = (UniqueConstraint("tenant_id", "linkedin_id", name="uq_linkedin_tenant_member"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("li"))
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    linkedin_id: Mapped[str] = mapped_column(String(128), nullable=False)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    profile_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    profile_type: Mapped[str] = mapped_column(String(32), nullable=False, default=PROFILE_PERSONAL)
    organization_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    organization_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    organization_urn: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
