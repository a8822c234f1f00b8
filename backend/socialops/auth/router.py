import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.orm import Session

from socialops.auth.deps import get_current_principal
from socialops.auth.models import User
from socialops.auth.principal import Principal
from socialops.auth.roles import TENANT_ADMIN
from socialops.auth.schemas import LoginRequest, MeResponse, RegisterRequest, TokenResponse
from socialops.auth.security import create_session_token, hash_password, verify_password
from socialops.billing.models import Subscription
from socialops.billing.plans import plan_limits
from socialops.core.config import Settings
from socialops.core.errors import BadRequest, Unauthenticated, error_boundary
from socialops.core.services import get_settings
from socialops.db.session import get_db
from socialops.tenants.models import Tenant

logger = logging.getLogger(__name__)

router = APIRouter()

TRIAL_DAYS = 7


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_EXP_MINUTES * 60,
        httponly=True,
        secure=settings.ENV != "dev",
        samesite="lax",
    )


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    with error_boundary("Failed to register"):
        email = str(payload.email).lower()
        if db.execute(select(User).where(User.email == email)).scalar_one_or_none():
            raise BadRequest("An account with this email already exists")

        domain = (payload.domain or "").strip().lower() or None
        if domain and db.execute(select(Tenant).where(Tenant.domain == domain)).scalar_one_or_none():
            raise BadRequest("This domain is already registered")

        try:
            pw_hash = hash_password(payload.password)
        except ValueError as exc:
            raise BadRequest(str(exc)) from exc

        tenant = Tenant(name=payload.company_name.strip(), domain=domain)
        db.add(tenant)
        db.flush()

        admin = User(
            tenant_id=tenant.id,
            email=email,
            name=payload.name.strip(),
            password_hash=pw_hash,
            role=TENANT_ADMIN,
        )
        limits = plan_limits("FREE")
        now = datetime.utcnow()
        subscription = Subscription(
            tenant_id=tenant.id,
            plan="FREE",
            status="TRIALING",
            monthly_amount=0,
            current_period_start=now,
            trial_ends_at=now + timedelta(days=TRIAL_DAYS),
            posts_limit=limits["posts"],
            users_limit=limits["users"],
            ai_credits_limit=limits["aiCredits"],
            users_used=1,
        )
        db.add(admin)
        db.add(subscription)
        db.commit()
        logger.info("Tenant registered tenant=%s admin=%s", tenant.id, admin.id)

        return {
            "tenant": {"id": tenant.id, "name": tenant.name, "domain": tenant.domain},
            "user": {"id": admin.id, "email": admin.email, "name": admin.name, "role": admin.role},
            "message": "Account created successfully",
        }


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    user = db.execute(
        select(User).where(User.email == str(payload.email).lower())
    ).scalar_one_or_none()

    password_ok = False
    if user and user.password_hash:
        try:
            password_ok = verify_password(payload.password, user.password_hash)
        except ValueError:
            password_ok = False

    if not user or not password_ok:
        raise Unauthenticated("Invalid email or password")

    token = create_session_token(Principal.from_user(user), settings)
    _set_session_cookie(response, token, settings)
    return TokenResponse(access_token=token)


@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"ok": True}


@router.get("/me", response_model=MeResponse)
def me(principal: Principal = Depends(get_current_principal)):
    return MeResponse(
        id=principal.id,
        email=principal.email,
        role=principal.role,
        tenant_id=principal.tenant_id,
    )
