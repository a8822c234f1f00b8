from datetime import datetime, timedelta
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from socialops.auth.principal import Principal
from socialops.core.config import Settings, settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

JWT_ALG = "HS256"
SESSION_TOKEN_TYPE = "session"
DEV_JWT_SECRET = "dev-change-me"


def jwt_secret(config: Settings | None = None) -> str:
    config = config or settings
    if config.JWT_SECRET:
        return config.JWT_SECRET
    if config.ENV != "dev":
        raise RuntimeError("JWT_SECRET is not set")
    return DEV_JWT_SECRET


# Fail at import outside dev, before any request is served.
JWT_SECRET = jwt_secret()


def _ensure_bcrypt_limit(password: str) -> None:
    # bcrypt limit is 72 BYTES, not characters
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password too long (max 72 bytes).")


def hash_password(password: str) -> str:
    _ensure_bcrypt_limit(password)
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    _ensure_bcrypt_limit(password)
    return pwd_context.verify(password, password_hash)


def create_session_token(
    principal: Principal,
    config: Settings | None = None,
    *,
    expires_minutes: int | None = None,
) -> str:
    config = config or settings
    minutes = expires_minutes if expires_minutes is not None else config.SESSION_EXP_MINUTES
    to_encode = principal.to_claims()
    to_encode["typ"] = SESSION_TOKEN_TYPE
    to_encode["exp"] = datetime.utcnow() + timedelta(minutes=minutes)
    return jwt.encode(to_encode, jwt_secret(config), algorithm=JWT_ALG)


def decode_token(token: str, config: Settings | None = None) -> Dict[str, Any]:
    return jwt.decode(token, jwt_secret(config), algorithms=[JWT_ALG])


__all__ = [
    "JWTError",
    "create_session_token",
    "decode_token",
    "hash_password",
    "jwt_secret",
    "verify_password",
]
