import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from socialops.billing.models import PricingPlan, Subscription
from socialops.billing.plans import PLAN_ORDER, SUBSCRIPTION_PLANS

logger = logging.getLogger(__name__)


def _default_plan_out(plan_id: str) -> dict:
    plan = SUBSCRIPTION_PLANS[plan_id]
    return {
        "planId": plan_id,
        "name": plan["name"],
        "description": plan["description"],
        "price": plan["price"],
        "priceDisplay": plan["price_display"],
        "limits": dict(plan["limits"]),
        "features": list(plan["features"]),
        "isActive": True,
        "isPopular": bool(plan.get("popular")),
    }


def _override_plan_out(row: PricingPlan) -> dict:
    return {
        "planId": row.plan_id,
        "name": row.name,
        "description": row.description,
        "price": row.price,
        "priceDisplay": row.price_display,
        "limits": dict(row.limits or {}),
        "features": list(row.features or []),
        "isActive": row.is_active,
        "isPopular": row.is_popular,
    }


def _overrides(db: Session, *, active_only: bool) -> dict[str, PricingPlan]:
    stmt = select(PricingPlan)
    if active_only:
        stmt = stmt.where(PricingPlan.is_active.is_(True))
    return {row.plan_id: row for row in db.execute(stmt).scalars().all()}


def get_pricing_plans(db: Session) -> list[dict]:
    """Public plan list: an active override wins over the built-in default."""
    overrides = _overrides(db, active_only=True)
    plans = []
    for plan_id in PLAN_ORDER:
        row = overrides.get(plan_id)
        plans.append(_override_plan_out(row) if row else _default_plan_out(plan_id))
    return plans


def get_admin_pricing_plans(db: Session) -> list[dict]:
    overrides = _overrides(db, active_only=False)
    plans = []
    for plan_id in PLAN_ORDER:
        row = overrides.get(plan_id)
        out = _override_plan_out(row) if row else _default_plan_out(plan_id)
        out["isCustomized"] = row is not None
        plans.append(out)
    return plans


def upsert_pricing_plan(db: Session, payload) -> PricingPlan:
    row = db.execute(
        select(PricingPlan).where(PricingPlan.plan_id == payload.planId)
    ).scalar_one_or_none()
    if row is None:
        row = PricingPlan(plan_id=payload.planId)

    row.name = payload.name
    row.description = payload.description
    row.price = payload.price
    row.price_display = payload.priceDisplay
    row.limits = payload.limits.model_dump()
    row.features = list(payload.features)
    row.is_active = payload.isActive
    row.is_popular = payload.isPopular
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Pricing override saved plan=%s price=%s", row.plan_id, row.price)
    return row


def subscription_out(sub: Subscription) -> dict:
    def _iso(value):
        return value.isoformat() if value else None

    return {
        "id": sub.id,
        "plan": sub.plan,
        "status": sub.status,
        "amount": sub.monthly_amount,
        "billingCycle": sub.billing_cycle,
        "currentPeriodStart": _iso(sub.current_period_start),
        "currentPeriodEnd": _iso(sub.current_period_end),
        "trialEndsAt": _iso(sub.trial_ends_at),
        "canceledAt": _iso(sub.canceled_at),
        "postsLimit": sub.posts_limit,
        "usersLimit": sub.users_limit,
        "aiCreditsLimit": sub.ai_credits_limit,
        "postsUsed": sub.posts_used,
        "usersUsed": sub.users_used,
        "aiCreditsUsed": sub.ai_credits_used,
    }
