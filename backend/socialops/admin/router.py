import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from socialops.auth.models import User
from socialops.auth.principal import Principal
from socialops.auth.rbac import require_roles
from socialops.auth.roles import SUPER_ADMINS
from socialops.billing.models import PricingPlan, Subscription
from socialops.billing.plans import SUBSCRIPTION_PLANS
from socialops.billing.schemas import PricingPlanUpsertRequest
from socialops.billing.service import get_admin_pricing_plans, upsert_pricing_plan
from socialops.core.errors import BadRequest, UpstreamFailure, error_boundary
from socialops.core.services import Services, get_services
from socialops.db.session import get_db
from socialops.posts.models import Post
from socialops.tenants.models import Tenant
from socialops.tenants.schemas import TenantCreateRequest, TenantUpdateRequest
from socialops.tenants.scope import PlatformScope
from socialops.tenants.service import (
    delete_tenant,
    ensure_domain_free,
    get_tenant,
    tenant_counts,
    tenant_detail,
    tenant_out,
)

logger = logging.getLogger(__name__)

router = APIRouter()

SUPER_ADMIN_ONLY = "Forbidden - SUPER_ADMIN access required"


@router.get("/pricing")
def admin_pricing(
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message=SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch pricing configuration"):
        return {"plans": get_admin_pricing_plans(db)}


@router.put("/pricing")
def admin_save_pricing(
    payload: PricingPlanUpsertRequest,
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message=SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to save pricing plan"):
        row = upsert_pricing_plan(db, payload)
        return {
            "message": "Pricing plan updated successfully",
            "plan": {"id": row.id, "planId": row.plan_id, "price": row.price, "isActive": row.is_active},
        }


@router.post("/pricing/reset")
def admin_reset_pricing(
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message=SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to reset pricing"):
        removed = PlatformScope.for_principal(db, principal).delete_many(PricingPlan)
        logger.info("Pricing reset to defaults by=%s removed=%s", principal.id, removed)
        return {
            "message": "All pricing configurations reset to defaults successfully",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


@router.delete("/pricing")
def admin_delete_pricing(
    planId: str | None = Query(default=None, max_length=32),
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message=SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    if not planId or not planId.strip():
        raise BadRequest("planId is required")
    plan_id = planId.strip().upper()
    if plan_id not in SUBSCRIPTION_PLANS:
        raise BadRequest(f"Unknown plan: {plan_id}")

    with error_boundary("Failed to reset pricing plan"):
        removed = PlatformScope.for_principal(db, principal).delete_many(
            PricingPlan, PricingPlan.plan_id == plan_id
        )
        if not removed:
            return {"message": "Plan already using defaults", "planId": plan_id}
        logger.info("Pricing plan reset to defaults plan=%s by=%s", plan_id, principal.id)
        return {"message": "Plan reset to defaults successfully", "planId": plan_id}


@router.post("/stripe/test")
def admin_test_stripe(
    principal: Principal = Depends(
        require_roles(*SUPER_ADMINS, message="Forbidden - Only super admins can test Stripe connection")
    ),
    services: Services = Depends(get_services),
):
    if services.stripe is None:
        raise BadRequest("Stripe secret key not configured")

    try:
        account = services.stripe.retrieve_account()
    except UpstreamFailure as exc:
        raise UpstreamFailure("Failed to connect to Stripe", details=exc.details or exc.message) from exc

    return {
        "success": True,
        "message": "Successfully connected to Stripe",
        "accountId": account.id,
        "accountEmail": account.email,
        "accountCountry": account.country,
        "testMode": services.stripe.test_mode,
    }


@router.get("/subscriptions")
def admin_subscriptions(
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message="Forbidden")),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch subscriptions"):
        platform = PlatformScope.for_principal(db, principal)
        rows = platform.execute(
            select(Subscription, Tenant)
            .join(Tenant, Tenant.id == Subscription.tenant_id)
            .order_by(Subscription.created_at.desc()),
            model=Subscription,
        ).all()
        return {
            "success": True,
            "subscriptions": [
                {
                    "id": sub.id,
                    "tenantId": sub.tenant_id,
                    "tenantName": tenant.name,
                    "tenantDomain": tenant.domain,
                    "plan": sub.plan,
                    "status": sub.status,
                    "amount": sub.monthly_amount / 100,
                    "billingCycle": sub.billing_cycle,
                }
                for sub, tenant in rows
            ],
        }


@router.get("/tenants")
def admin_tenants(
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message="Forbidden")),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch tenants"):
        platform = PlatformScope.for_principal(db, principal)
        members = tenant_counts(platform, User)
        posts = tenant_counts(platform, Post)
        tenants = platform.find_many(Tenant)
        return {
            "tenants": [
                tenant_out(
                    tenant,
                    memberCount=members.get(tenant.id, 0),
                    postCount=posts.get(tenant.id, 0),
                )
                for tenant in tenants
            ]
        }


@router.post("/tenants", status_code=201)
def admin_create_tenant(
    payload: TenantCreateRequest,
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message=SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to create tenant"):
        platform = PlatformScope.for_principal(db, principal)
        ensure_domain_free(platform, payload.domain)
        tenant = platform.save(Tenant(**payload.model_dump()))
        logger.info("Tenant created tenant=%s by=%s", tenant.id, principal.id)
        return {"success": True, "tenant": tenant_out(tenant), "message": "Tenant created successfully"}


@router.get("/tenants/{tenant_id}")
def admin_tenant_detail(
    tenant_id: str,
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message=SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch tenant"):
        platform = PlatformScope.for_principal(db, principal)
        return {"tenant": tenant_detail(platform, get_tenant(platform, tenant_id))}


@router.put("/tenants/{tenant_id}")
def admin_update_tenant(
    tenant_id: str,
    payload: TenantUpdateRequest,
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message=SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to update tenant"):
        platform = PlatformScope.for_principal(db, principal)
        tenant = get_tenant(platform, tenant_id)
        changes = payload.changes()
        if "domain" in changes:
            ensure_domain_free(platform, changes["domain"], exclude_id=tenant.id)
        for key, value in changes.items():
            setattr(tenant, key, value)
        tenant = platform.save(tenant)
        logger.info("Tenant updated tenant=%s by=%s fields=%s", tenant.id, principal.id, sorted(changes))
        return {"success": True, "tenant": tenant_out(tenant), "message": "Tenant updated successfully"}


@router.delete("/tenants/{tenant_id}")
def admin_delete_tenant(
    tenant_id: str,
    principal: Principal = Depends(require_roles(*SUPER_ADMINS, message=SUPER_ADMIN_ONLY)),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to delete tenant"):
        platform = PlatformScope.for_principal(db, principal)
        tenant = get_tenant(platform, tenant_id)
        if tenant.id == principal.tenant_id:
            raise BadRequest("You cannot delete your own tenant")
        delete_tenant(platform, tenant)
        return {"success": True, "message": "Tenant deleted successfully"}
