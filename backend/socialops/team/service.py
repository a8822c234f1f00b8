import logging
import secrets
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from socialops.auth.models import User
from socialops.core.errors import BadRequest, NotFound
from socialops.team.models import INVITATION_EXPIRED, INVITATION_PENDING, Invitation
from socialops.tenants.models import Tenant
from socialops.tenants.scope import TenantScope

logger = logging.getLogger(__name__)

INVITATION_TTL_DAYS = 7


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def member_out(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
        "role": user.role,
        "createdAt": _iso(user.created_at),
    }


def invitation_out(invitation: Invitation, inviter: User | None) -> dict:
    return {
        "id": invitation.id,
        "tenantId": invitation.tenant_id,
        "email": invitation.email,
        "role": invitation.role,
        "status": invitation.status,
        "token": invitation.token,
        "expiresAt": _iso(invitation.expires_at),
        "createdAt": _iso(invitation.created_at),
        "invitedBy": {"name": inviter.name, "email": inviter.email} if inviter else None,
    }


def inviters_by_id(scope: TenantScope, invitations) -> dict[str, User]:
    ids = {inv.invited_by for inv in invitations}
    if not ids:
        return {}
    return {u.id: u for u in scope.find_many(User, User.id.in_(ids))}


def create_invitation(scope: TenantScope, *, inviter_id: str, email: str, role: str) -> Invitation:
    email = email.lower()
    if scope.find_first(User, User.email == email):
        raise BadRequest("User is already a member of this workspace")
    if scope.find_first(Invitation, Invitation.email == email, Invitation.status == INVITATION_PENDING):
        raise BadRequest("An invitation has already been sent to this email")

    invitation = scope.create(
        Invitation,
        email=email,
        role=role,
        token=secrets.token_urlsafe(32),
        status=INVITATION_PENDING,
        invited_by=inviter_id,
        expires_at=datetime.utcnow() + timedelta(days=INVITATION_TTL_DAYS),
    )
    # TODO: send the invitation email once an SMTP provider is configured
    logger.info("Invitation created tenant=%s invitation=%s", scope.tenant_id, invitation.id)
    return invitation


def find_pending_invitation(db: Session, token: str) -> Invitation:
    """Look up an invitation by its secret token, enforcing the pending/expiry rules.

    This runs before the invitee has a session, so the token itself is what
    binds the request to a tenant.
    """
    invitation = db.execute(
        select(Invitation).where(Invitation.token == token)
    ).scalar_one_or_none()
    if not invitation:
        raise NotFound("Invalid invitation")
    if invitation.status != INVITATION_PENDING:
        raise BadRequest("This invitation has already been used or cancelled")
    if datetime.utcnow() > invitation.expires_at:
        invitation.status = INVITATION_EXPIRED
        db.add(invitation)
        db.commit()
        raise BadRequest("This invitation has expired")

    existing = db.execute(select(User).where(User.email == invitation.email)).scalar_one_or_none()
    if existing:
        raise BadRequest("An account with this email already exists")
    return invitation


def validation_out(db: Session, invitation: Invitation) -> dict:
    scope = TenantScope(db, invitation.tenant_id)
    tenant = db.get(Tenant, invitation.tenant_id)
    inviter = scope.find_first(User, User.id == invitation.invited_by)
    return {
        "id": invitation.id,
        "email": invitation.email,
        "role": invitation.role,
        "expiresAt": _iso(invitation.expires_at),
        "tenant": {"name": tenant.name} if tenant else None,
        "inviter": {"name": inviter.name, "email": inviter.email} if inviter else None,
    }
