from dataclasses import dataclass
from typing import Any

from socialops.auth.roles import ALL_ROLES, SUPER_ADMIN


class InvalidPrincipal(ValueError):
    pass


@dataclass(frozen=True)
class Principal:
    """Authenticated identity for one request.

    A SUPER_ADMIN is a platform operator and never belongs to a tenant;
    every other role is bound to exactly one tenant.
    """

    id: str
    email: str
    role: str
    tenant_id: str | None

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidPrincipal("Principal id is required")
        if self.role not in ALL_ROLES:
            raise InvalidPrincipal(f"Unknown role: {self.role!r}")
        if self.role == SUPER_ADMIN and self.tenant_id is not None:
            raise InvalidPrincipal("SUPER_ADMIN must not carry a tenant id")
        if self.role != SUPER_ADMIN and not self.tenant_id:
            raise InvalidPrincipal(f"{self.role} requires a tenant id")

    @property
    def is_super_admin(self) -> bool:
        return self.role == SUPER_ADMIN

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Principal":
        return cls(
            id=str(claims.get("sub") or ""),
            email=str(claims.get("email") or ""),
            role=str(claims.get("role") or ""),
            tenant_id=claims.get("tenant_id") or None,
        )

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(id=user.id, email=user.email, role=user.role, tenant_id=user.tenant_id)

    def to_claims(self) -> dict[str, Any]:
        return {
            "sub": self.id,
            "email": self.email,
            "role": self.role,
            "tenant_id": self.tenant_id,
        }
