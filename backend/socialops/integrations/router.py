import json
import logging
from datetime import datetime
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from socialops.auth.deps import get_current_principal, get_principal
from socialops.auth.principal import Principal
from socialops.auth.rbac import require_roles
from socialops.auth.roles import TENANT_ADMINS
from socialops.core.config import Settings
from socialops.core.errors import AppError, NotFound, UpstreamFailure, error_boundary
from socialops.core.services import Services, get_services, get_settings
from socialops.db.session import get_db
from socialops.integrations.models import (
    GOOGLE_DRIVE,
    PROFILE_COMPANY_PAGE,
    PROFILE_PERSONAL,
    CloudStorageIntegration,
    LinkedInIntegration,
)
from socialops.integrations.schemas import DriveSettingsPatchRequest
from socialops.tenants.scope import TenantScope

logger = logging.getLogger(__name__)

drive_router = APIRouter()
linkedin_router = APIRouter()

SETTINGS_PAGE = "/dashboard/settings/integrations"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _drive_out(row: CloudStorageIntegration) -> dict:
    return {
        "id": row.id,
        "isActive": row.is_active,
        "syncFolderPath": row.sync_folder_path,
        "lastSyncedAt": _iso(row.last_synced_at),
        "autoAnalyze": row.auto_analyze,
        "autoGenerate": row.auto_generate,
        "autoApprove": row.auto_approve,
        "connectedAt": _iso(row.created_at),
    }


# --- Google Drive ---


@drive_router.get("/connect")
def drive_connect(
    principal: Principal = Depends(
        require_roles(*TENANT_ADMINS, message="Only admins can connect Drive")
    ),
    services: Services = Depends(get_services),
):
    with error_boundary("Failed to connect Drive"):
        if not principal.tenant_id:
            raise NotFound("No tenant found")
        # The tenant id travels as OAuth state and is checked on the callback.
        url = services.google_drive.authorization_url(state=principal.tenant_id)
        return RedirectResponse(url, status_code=302)


@drive_router.get("/callback")
def drive_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    error: str | None = Query(default=None),
    principal: Principal | None = Depends(get_principal),
    settings: Settings = Depends(get_settings),
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    base = settings.APP_BASE_URL
    if error:
        logger.warning("Drive OAuth error: %s", error)
        return RedirectResponse(f"{base}{SETTINGS_PAGE}?error=oauth_failed", status_code=302)
    if not code:
        return RedirectResponse(f"{base}{SETTINGS_PAGE}?error=no_code", status_code=302)
    if principal is None:
        return RedirectResponse(f"{base}/login?error=unauthorized", status_code=302)
    if not principal.tenant_id or state != principal.tenant_id:
        logger.warning("Drive OAuth state mismatch user=%s", principal.id)
        return RedirectResponse(f"{base}{SETTINGS_PAGE}?error=invalid_state", status_code=302)

    try:
        tokens = services.google_drive.exchange_code(code)
        scope = TenantScope.for_principal(db, principal)
        now = datetime.utcnow()
        scope.upsert(
            CloudStorageIntegration,
            {"provider": GOOGLE_DRIVE},
            create={
                "access_token": tokens.access_token,
                "refresh_token": tokens.refresh_token,
                "expires_at": tokens.expires_at,
                "sync_folder_path": "/",
                "is_active": True,
                "auto_analyze": True,
                "auto_generate": False,
                "auto_approve": False,
            },
            update={
                "access_token": tokens.access_token,
                "expires_at": tokens.expires_at,
                "is_active": True,
                "last_synced_at": now,
                **({"refresh_token": tokens.refresh_token} if tokens.refresh_token else {}),
            },
        )
    except AppError as exc:
        logger.warning("Drive callback failed tenant=%s: %s", principal.tenant_id, exc.message)
        return RedirectResponse(
            f"{base}{SETTINGS_PAGE}?error={quote(exc.message)}", status_code=302
        )

    logger.info("Google Drive connected tenant=%s", principal.tenant_id)
    return RedirectResponse(f"{base}{SETTINGS_PAGE}?success=drive_connected", status_code=302)


@drive_router.get("/status")
def drive_status(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to check Drive status"):
        scope = TenantScope.for_principal(db, principal)
        row = scope.find_first(CloudStorageIntegration, CloudStorageIntegration.provider == GOOGLE_DRIVE)
        if not row:
            return {"connected": False, "integration": None}
        return {"connected": True, "integration": _drive_out(row)}


@drive_router.patch("/status")
def drive_update_settings(
    payload: DriveSettingsPatchRequest,
    principal: Principal = Depends(
        require_roles(*TENANT_ADMINS, message="Only admins can update Drive settings")
    ),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to update Drive settings"):
        scope = TenantScope.for_principal(db, principal)
        rows = scope.update(
            CloudStorageIntegration,
            CloudStorageIntegration.provider == GOOGLE_DRIVE,
            values=payload.to_columns(),
        )
        if not rows:
            raise NotFound("Google Drive is not connected")
        return {"success": True, "integration": _drive_out(rows[0])}


@drive_router.post("/disconnect")
def drive_disconnect(
    principal: Principal = Depends(
        require_roles(*TENANT_ADMINS, message="Only admins can disconnect Drive")
    ),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to disconnect Drive"):
        scope = TenantScope.for_principal(db, principal)
        removed = scope.delete_many(
            CloudStorageIntegration,
            CloudStorageIntegration.provider == GOOGLE_DRIVE,
        )
        logger.info("Google Drive disconnected tenant=%s rows=%s", scope.tenant_id, removed)
        return {"success": True, "message": "Drive disconnected successfully"}


# --- LinkedIn ---


def _popup_response(message: dict) -> HTMLResponse:
    payload = json.dumps(message).replace("</", "<\\/")
    return HTMLResponse(
        "<html><body><script>"
        f"window.opener && window.opener.postMessage({payload}, '*');"
        "window.close();"
        "</script></body></html>"
    )


@linkedin_router.get("/auth")
def linkedin_auth(
    principal: Principal | None = Depends(get_principal),
    settings: Settings = Depends(get_settings),
    services: Services = Depends(get_services),
):
    if principal is None:
        logger.warning("LinkedIn auth requested without a session")
        return RedirectResponse(f"{settings.APP_BASE_URL}/login", status_code=302)

    with error_boundary("Failed to initiate LinkedIn OAuth"):
        if not principal.tenant_id:
            raise NotFound("No tenant found")
        url = services.linkedin.authorization_url(state=principal.tenant_id)
        logger.info("LinkedIn auth redirect tenant=%s user=%s", principal.tenant_id, principal.id)
        return RedirectResponse(url, status_code=302)


@linkedin_router.get("/callback")
def linkedin_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    error: str | None = Query(default=None),
    error_description: str | None = Query(default=None),
    principal: Principal | None = Depends(get_principal),
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    if error:
        logger.warning("LinkedIn OAuth error: %s %s", error, error_description or "")
        return _popup_response({"error": error})
    if not code or not state:
        return _popup_response({"error": "missing_parameters"})
    if principal is None or principal.tenant_id != state:
        logger.warning("LinkedIn OAuth state does not match the session")
        return _popup_response({"error": "invalid_state"})

    try:
        tokens = services.linkedin.exchange_code(code)
        profile = services.linkedin.fetch_profile(tokens.access_token)
        token_values = {
            "access_token": tokens.access_token,
            "refresh_token": tokens.refresh_token,
            "expires_at": tokens.expires_at,
            "is_active": True,
        }
        values = {
            **token_values,
            "profile_name": profile.display_name,
            "profile_image": profile.picture,
            "profile_type": PROFILE_PERSONAL,
        }
        scope = TenantScope.for_principal(db, principal)
        scope.upsert(LinkedInIntegration, {"linkedin_id": profile.id}, create=values, update=values)
    except AppError as exc:
        logger.warning("LinkedIn callback failed tenant=%s: %s", state, exc.details or exc.message)
        return _popup_response({"error": exc.message})

    try:
        organizations = services.linkedin.fetch_organizations(tokens.access_token)
    except UpstreamFailure as exc:
        logger.warning("LinkedIn organizations unavailable tenant=%s: %s", state, exc.details or exc.message)
        organizations = []

    for org in organizations:
        values = {
            **token_values,
            "profile_name": org.name,
            "profile_image": profile.picture,
            "profile_type": PROFILE_COMPANY_PAGE,
            "organization_id": org.id,
            "organization_name": org.name,
            "organization_urn": org.urn,
        }
        scope.upsert(LinkedInIntegration, {"linkedin_id": org.id}, create=values, update=values)

    logger.info(
        "LinkedIn connected tenant=%s member=%s organizations=%s", state, profile.id, len(organizations)
    )
    return _popup_response(
        {
            "success": True,
            "profileName": profile.display_name,
            "organizations": [{"id": org.id, "name": org.name} for org in organizations],
        }
    )


@linkedin_router.get("/test")
def linkedin_test(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to test LinkedIn connection"):
        scope = TenantScope.for_principal(db, principal)
        integration = scope.find_first(
            LinkedInIntegration,
            LinkedInIntegration.is_active.is_(True),
            LinkedInIntegration.profile_type == PROFILE_PERSONAL,
        )
        if not integration:
            raise NotFound("LinkedIn integration not found for this tenant")

        access_token = integration.access_token
        if integration.expires_at and integration.expires_at < datetime.utcnow():
            if not integration.refresh_token:
                raise AppError("LinkedIn token expired and no refresh token available")
            tokens = services.linkedin.refresh(integration.refresh_token)
            scope.update(
                LinkedInIntegration,
                LinkedInIntegration.id == integration.id,
                values={
                    "access_token": tokens.access_token,
                    "refresh_token": tokens.refresh_token,
                    "expires_at": tokens.expires_at,
                },
            )
            access_token = tokens.access_token

        profile = services.linkedin.fetch_profile(access_token)
        return {
            "success": True,
            "profile": {
                "id": profile.id,
                "firstName": profile.first_name,
                "lastName": profile.last_name,
                "vanityName": profile.vanity_name,
            },
            "message": "LinkedIn connection is working!",
        }
