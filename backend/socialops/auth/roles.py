SUPER_ADMIN = "SUPER_ADMIN"
TENANT_ADMIN = "TENANT_ADMIN"
USER = "USER"

ALL_ROLES = frozenset({SUPER_ADMIN, TENANT_ADMIN, USER})
TENANT_ADMINS = frozenset({TENANT_ADMIN, SUPER_ADMIN})
SUPER_ADMINS = frozenset({SUPER_ADMIN})

# Roles a tenant admin may hand out through invitations.
INVITABLE_ROLES = frozenset({TENANT_ADMIN, USER})
