import pytest

from socialops.auth.models import User
from socialops.auth.principal import Principal
from socialops.auth.roles import SUPER_ADMIN, TENANT_ADMIN, USER
from socialops.core.errors import Forbidden, NotFound
from socialops.integrations.models import GOOGLE_DRIVE, CloudStorageIntegration
from socialops.team.models import Invitation
from socialops.tenants.models import Tenant
from socialops.tenants.scope import PlatformScope, TenantScope

from conftest import add_tenant, add_user


@pytest.fixture
def tenants(db_session):
    # same display name on purpose: isolation is by id, not by name
    a = add_tenant(db_session, "Northwind")
    b = add_tenant(db_session, "Northwind")
    add_user(db_session, email="one@a.com", tenant_id=a.id)
    add_user(db_session, email="two@a.com", tenant_id=a.id)
    add_user(db_session, email="one@b.com", tenant_id=b.id)
    return a, b


def test_reads_never_cross_tenants(db_session, tenants):
    a, b = tenants
    scope_a = TenantScope(db_session, a.id)

    emails = {u.email for u in scope_a.find_many(User)}
    assert emails == {"one@a.com", "two@a.com"}
    assert scope_a.count(User) == 2
    assert scope_a.find_first(User, User.email == "one@b.com") is None
    assert TenantScope(db_session, b.id).count(User) == 1


def test_create_stamps_tenant_and_refuses_foreign_tenant(db_session, tenants):
    a, b = tenants
    scope = TenantScope(db_session, a.id)

    row = scope.create(CloudStorageIntegration, provider=GOOGLE_DRIVE, access_token="tok")
    assert row.tenant_id == a.id

    with pytest.raises(ValueError):
        scope.create(CloudStorageIntegration, tenant_id=b.id, provider=GOOGLE_DRIVE, access_token="tok")


def test_update_and_delete_are_confined_to_the_scope(db_session, tenants):
    a, b = tenants
    TenantScope(db_session, a.id).create(CloudStorageIntegration, provider=GOOGLE_DRIVE, access_token="a")
    TenantScope(db_session, b.id).create(CloudStorageIntegration, provider=GOOGLE_DRIVE, access_token="b")

    scope_a = TenantScope(db_session, a.id)
    updated = scope_a.update(CloudStorageIntegration, values={"sync_folder_path": "/Marketing"})
    assert [r.tenant_id for r in updated] == [a.id]

    with pytest.raises(ValueError):
        scope_a.update(CloudStorageIntegration, values={"tenant_id": b.id})

    assert scope_a.delete_many(CloudStorageIntegration) == 1
    remaining = TenantScope(db_session, b.id).find_first(CloudStorageIntegration)
    assert remaining.access_token == "b"
    assert remaining.sync_folder_path == "/"


def test_upsert_matches_within_the_tenant_only(db_session, tenants):
    a, b = tenants
    TenantScope(db_session, b.id).create(CloudStorageIntegration, provider=GOOGLE_DRIVE, access_token="b")

    scope_a = TenantScope(db_session, a.id)
    created = scope_a.upsert(
        CloudStorageIntegration,
        {"provider": GOOGLE_DRIVE},
        create={"access_token": "a1"},
        update={"access_token": "a2"},
    )
    assert created.tenant_id == a.id and created.access_token == "a1"

    updated = scope_a.upsert(
        CloudStorageIntegration,
        {"provider": GOOGLE_DRIVE},
        create={"access_token": "a1"},
        update={"access_token": "a2"},
    )
    assert updated.id == created.id and updated.access_token == "a2"
    assert TenantScope(db_session, b.id).find_first(CloudStorageIntegration).access_token == "b"


def test_unscoped_models_are_refused(db_session, tenants):
    with pytest.raises(TypeError):
        TenantScope(db_session, tenants[0].id).find_many(Tenant)


def test_for_principal_requires_a_tenant(db_session):
    root = Principal(id="u0", email="root@x.com", role=SUPER_ADMIN, tenant_id=None)
    with pytest.raises(NotFound) as exc_info:
        TenantScope.for_principal(db_session, root)
    assert exc_info.value.message == "No tenant found"


def test_platform_scope_is_super_admin_only(db_session, tenants):
    admin = Principal(id="u1", email="a@a.com", role=TENANT_ADMIN, tenant_id=tenants[0].id)
    user = Principal(id="u2", email="u@a.com", role=USER, tenant_id=tenants[0].id)
    root = Principal(id="u0", email="root@x.com", role=SUPER_ADMIN, tenant_id=None)

    for principal in (admin, user):
        with pytest.raises(Forbidden):
            PlatformScope.for_principal(db_session, principal)

    platform = PlatformScope.for_principal(db_session, root)
    assert len(platform.find_many(User)) == 3
    assert platform.delete_many(Invitation) == 0


def test_platform_scope_constructor_checks_the_role(db_session, tenants):
    admin = Principal(id="u1", email="a@a.com", role=TENANT_ADMIN, tenant_id=tenants[0].id)

    with pytest.raises(Forbidden) as exc_info:
        PlatformScope(db_session, admin)
    assert exc_info.value.message == "Cross-tenant access requires SUPER_ADMIN"

    root = Principal(id="u0", email="root@x.com", role=SUPER_ADMIN, tenant_id=None)
    assert PlatformScope(db_session, root).count(Tenant) == 2
