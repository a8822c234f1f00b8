from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from fastapi import Depends

from socialops.auth.deps import get_principal
from socialops.auth.principal import Principal
from socialops.core.errors import Forbidden, Unauthenticated


class DenyReason(str, Enum):
    UNAUTHENTICATED = "Unauthenticated"
    FORBIDDEN = "Forbidden"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None


ALLOW = Decision(allowed=True)


def authorize(principal: Principal | None, allowed_roles: Iterable[str]) -> Decision:
    if principal is None:
        return Decision(allowed=False, reason=DenyReason.UNAUTHENTICATED)
    if principal.role not in frozenset(allowed_roles):
        return Decision(allowed=False, reason=DenyReason.FORBIDDEN)
    return ALLOW


def enforce(
    principal: Principal | None,
    allowed_roles: Iterable[str],
    *,
    message: str = "Forbidden",
) -> Principal:
    decision = authorize(principal, allowed_roles)
    if decision.reason is DenyReason.UNAUTHENTICATED:
        raise Unauthenticated()
    if decision.reason is DenyReason.FORBIDDEN:
        raise Forbidden(message)
    return principal


def require_roles(*allowed_roles: str, message: str = "Forbidden"):
    roles = frozenset(allowed_roles)

    def checker(principal: Principal | None = Depends(get_principal)) -> Principal:
        return enforce(principal, roles, message=message)

    return checker
