from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from socialops.auth.deps import get_current_principal
from socialops.auth.principal import Principal
from socialops.billing.models import Subscription
from socialops.billing.service import get_pricing_plans, subscription_out
from socialops.core.errors import NotFound, error_boundary
from socialops.db.session import get_db
from socialops.tenants.scope import TenantScope

pricing_router = APIRouter()
subscription_router = APIRouter()


@pricing_router.get("")
def list_pricing_plans(db: Session = Depends(get_db)):
    with error_boundary("Failed to fetch pricing plans"):
        return {"plans": get_pricing_plans(db)}


@subscription_router.get("/current")
def current_subscription(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch subscription"):
        scope = TenantScope.for_principal(db, principal)
        sub = scope.find_first(Subscription)
        if not sub:
            raise NotFound("No subscription found for this tenant")
        return {"success": True, "subscription": subscription_out(sub)}
