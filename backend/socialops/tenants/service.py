import logging

from sqlalchemy import func, select

from socialops.auth.models import User
from socialops.billing.models import Subscription
from socialops.core.errors import BadRequest, NotFound
from socialops.integrations.models import CloudStorageIntegration, LinkedInIntegration
from socialops.media.models import SyncedMedia
from socialops.posts.models import Post
from socialops.team.models import Invitation
from socialops.tenants.models import Tenant
from socialops.tenants.scope import PlatformScope

logger = logging.getLogger(__name__)

TENANT_OWNED_MODELS = (
    Post,
    SyncedMedia,
    LinkedInIntegration,
    CloudStorageIntegration,
    Subscription,
    Invitation,
    User,
)

RECENT_POSTS_LIMIT = 10


def _iso(value):
    return value.isoformat() if value else None


def tenant_out(tenant: Tenant, **extra) -> dict:
    return {
        "id": tenant.id,
        "name": tenant.name,
        "domain": tenant.domain,
        "website": tenant.website,
        "industry": tenant.industry,
        "description": tenant.description,
        "logo": tenant.logo,
        "createdAt": _iso(tenant.created_at),
        **extra,
    }


def get_tenant(platform: PlatformScope, tenant_id: str) -> Tenant:
    tenant = platform.get(Tenant, tenant_id)
    if not tenant:
        raise NotFound("Tenant not found")
    return tenant


def ensure_domain_free(platform: PlatformScope, domain: str | None, *, exclude_id: str | None = None) -> None:
    if not domain:
        return
    criteria = [Tenant.domain == domain]
    if exclude_id:
        criteria.append(Tenant.id != exclude_id)
    if platform.count(Tenant, *criteria):
        raise BadRequest("A tenant with this domain already exists")


def tenant_counts(platform: PlatformScope, model) -> dict[str, int]:
    rows = platform.execute(
        select(model.tenant_id, func.count(model.id))
        .where(model.tenant_id.is_not(None))
        .group_by(model.tenant_id),
        model=model,
    ).all()
    return {tenant_id: int(count) for tenant_id, count in rows}


def tenant_detail(platform: PlatformScope, tenant: Tenant) -> dict:
    users = platform.find_many(User, User.tenant_id == tenant.id, order_by=User.created_at.asc())
    posts = platform.find_many(Post, Post.tenant_id == tenant.id, limit=RECENT_POSTS_LIMIT)
    subscription = platform.find_many(Subscription, Subscription.tenant_id == tenant.id, limit=1)
    return tenant_out(
        tenant,
        stats={
            "users": len(users),
            "posts": platform.count(Post, Post.tenant_id == tenant.id),
            "media": platform.count(SyncedMedia, SyncedMedia.tenant_id == tenant.id),
            "linkedinAccounts": platform.count(
                LinkedInIntegration, LinkedInIntegration.tenant_id == tenant.id
            ),
        },
        subscription=(
            {"plan": subscription[0].plan, "status": subscription[0].status} if subscription else None
        ),
        users=[
            {
                "id": u.id,
                "name": u.name,
                "email": u.email,
                "role": u.role,
                "createdAt": _iso(u.created_at),
            }
            for u in users
        ],
        posts=[
            {
                "id": p.id,
                "title": p.title,
                "status": p.status,
                "userId": p.user_id,
                "createdAt": _iso(p.created_at),
            }
            for p in posts
        ],
    )


def delete_tenant(platform: PlatformScope, tenant: Tenant) -> dict[str, int]:
    """Remove a tenant and every row it owns in one transaction."""
    removed: dict[str, int] = {}
    try:
        for model in TENANT_OWNED_MODELS:
            removed[model.__tablename__] = platform.delete_many(
                model, model.tenant_id == tenant.id, commit=False
            )
        platform.delete_many(Tenant, Tenant.id == tenant.id, commit=False)
        platform.db.commit()
    except Exception:
        platform.db.rollback()
        raise
    logger.info("Tenant deleted tenant=%s by=%s removed=%s", tenant.id, platform.principal.id, removed)
    return removed
