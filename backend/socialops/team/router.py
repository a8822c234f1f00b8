import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from socialops.auth.deps import get_current_principal
from socialops.auth.models import User
from socialops.auth.principal import Principal
from socialops.auth.rbac import require_roles
from socialops.auth.roles import INVITABLE_ROLES, TENANT_ADMINS
from socialops.auth.security import hash_password
from socialops.core.errors import BadRequest, NotFound, error_boundary
from socialops.db.session import get_db
from socialops.team.models import INVITATION_ACCEPTED, Invitation
from socialops.team.schemas import AcceptInvitationRequest, InviteRequest
from socialops.team.service import (
    create_invitation,
    find_pending_invitation,
    invitation_out,
    inviters_by_id,
    member_out,
    validation_out,
)
from socialops.tenants.scope import TenantScope

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/members")
def list_members(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch members"):
        scope = TenantScope.for_principal(db, principal)
        members = scope.find_many(User, order_by=User.created_at.asc())
        return {"members": [member_out(m) for m in members]}


@router.delete("/members/{member_id}")
def remove_member(
    member_id: str,
    principal: Principal = Depends(
        require_roles(*TENANT_ADMINS, message="Only admins can remove team members")
    ),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to remove member"):
        if member_id == principal.id:
            raise BadRequest("You cannot remove yourself")
        scope = TenantScope.for_principal(db, principal)
        if scope.delete_many(User, User.id == member_id) == 0:
            raise NotFound("Member not found")
        logger.info("Member removed tenant=%s member=%s by=%s", scope.tenant_id, member_id, principal.id)
        return {"message": "Member removed successfully"}


@router.get("/invitations")
def list_invitations(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch invitations"):
        scope = TenantScope.for_principal(db, principal)
        invitations = scope.find_many(Invitation)
        inviters = inviters_by_id(scope, invitations)
        return {
            "invitations": [invitation_out(inv, inviters.get(inv.invited_by)) for inv in invitations]
        }


@router.post("/invite", status_code=201)
def invite_member(
    payload: InviteRequest,
    principal: Principal = Depends(
        require_roles(*TENANT_ADMINS, message="Only admins can send invitations")
    ),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to send invitation"):
        role = payload.role.strip().upper()
        if role not in INVITABLE_ROLES:
            raise BadRequest(f"Role must be one of: {', '.join(sorted(INVITABLE_ROLES))}")
        scope = TenantScope.for_principal(db, principal)
        invitation = create_invitation(
            scope,
            inviter_id=principal.id,
            email=str(payload.email),
            role=role,
        )
        inviter = scope.find_first(User, User.id == principal.id)
        return {
            "invitation": invitation_out(invitation, inviter),
            "message": "Invitation sent successfully",
        }


@router.get("/invitations/validate")
def validate_invitation(
    token: str = Query(min_length=1, max_length=128),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to validate invitation"):
        invitation = find_pending_invitation(db, token)
        return {"invitation": validation_out(db, invitation)}


@router.post("/invitations/accept", status_code=201)
def accept_invitation(payload: AcceptInvitationRequest, db: Session = Depends(get_db)):
    with error_boundary("Failed to accept invitation"):
        invitation = find_pending_invitation(db, payload.token)
        try:
            pw_hash = hash_password(payload.password)
        except ValueError as exc:
            raise BadRequest(str(exc)) from exc

        # User creation and invitation consumption commit together.
        user = User(
            tenant_id=invitation.tenant_id,
            email=invitation.email,
            name=payload.name.strip(),
            password_hash=pw_hash,
            role=invitation.role,
        )
        invitation.status = INVITATION_ACCEPTED
        db.add(user)
        db.add(invitation)
        db.commit()
        db.refresh(user)
        logger.info("Invitation accepted tenant=%s user=%s", invitation.tenant_id, user.id)
        return {
            "user": {"id": user.id, "email": user.email, "name": user.name},
            "message": "Account created successfully! You can now log in.",
        }


@router.delete("/invitations/{invitation_id}")
def cancel_invitation(
    invitation_id: str,
    principal: Principal = Depends(
        require_roles(*TENANT_ADMINS, message="Only admins can cancel invitations")
    ),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to cancel invitation"):
        scope = TenantScope.for_principal(db, principal)
        if scope.delete_many(Invitation, Invitation.id == invitation_id) == 0:
            raise NotFound("Invitation not found")
        logger.info("Invitation cancelled tenant=%s invitation=%s", scope.tenant_id, invitation_id)
        return {"message": "Invitation cancelled successfully"}
