import logging

from fastapi import Depends, Request

from socialops.auth.principal import InvalidPrincipal, Principal
from socialops.auth.security import SESSION_TOKEN_TYPE, JWTError, decode_token
from socialops.core.config import Settings, settings
from socialops.core.errors import Unauthenticated

logger = logging.getLogger(__name__)


def _app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", settings)


def _extract_token(request: Request, config: Settings) -> str | None:
    header = request.headers.get("Authorization") or ""
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(config.SESSION_COOKIE_NAME) or None


def resolve_principal(request: Request) -> Principal | None:
    """Return the request's principal, or None when there is no usable session.

    Never raises: a bad token is logged and treated like a missing one.
    Membership is not re-checked against the database, so a removed user's
    token stays valid until it expires.
    """
    config = _app_settings(request)
    token = _extract_token(request, config)
    if not token:
        return None

    try:
        claims = decode_token(token, config)
        if claims.get("typ") != SESSION_TOKEN_TYPE:
            raise InvalidPrincipal("Invalid token type")
        return Principal.from_claims(claims)
    except (JWTError, InvalidPrincipal) as exc:
        logger.warning("Ignoring session token path=%s reason=%s", request.url.path, exc)
        return None
    except Exception:
        logger.exception("Session resolution failed path=%s", request.url.path)
        return None


def get_principal(request: Request) -> Principal | None:
    return resolve_principal(request)


def get_current_principal(principal: Principal | None = Depends(get_principal)) -> Principal:
    if principal is None:
        raise Unauthenticated()
    return principal
