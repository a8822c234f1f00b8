from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from socialops.db.base import Base, new_id


class PricingPlan(Base):
    """Operator override for one of the default subscription plans."""

    __tablename__ = "pricing_plans"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("pp"))
    plan_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)                 # cents
    price_display: Mapped[str] = mapped_column(String(64), nullable=False)
    limits: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class Subscription(Base):
    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: new_id("sub"))
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    plan: Mapped[str] = mapped_column(String(32), nullable=False, default="FREE")
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")
    monthly_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # cents
    billing_cycle: Mapped[str] = mapped_column(String(16), nullable=False, default="monthly")
    current_period_start: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    current_period_end: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    canceled_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    posts_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    users_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ai_credits_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    posts_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    users_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ai_credits_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
