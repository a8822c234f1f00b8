from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from socialops.auth.models import User
from socialops.auth.principal import Principal
from socialops.auth.roles import SUPER_ADMIN, TENANT_ADMIN, USER
from socialops.auth.security import create_session_token
from socialops.billing.stripe_client import StripeAccount
from socialops.core.config import Settings
from socialops.core.errors import UpstreamFailure
from socialops.core.services import Services
from socialops.db.session import Database
from socialops.integrations.google_drive import GoogleDriveOAuth
from socialops.integrations.linkedin import LinkedInOAuth, LinkedInProfile
from socialops.integrations.oauth import OAuthTokens
from socialops.main import create_app
from socialops.tenants.models import Tenant

BASE_URL = "http://app.test"


class FakeLinkedIn(LinkedInOAuth):
    def __init__(self):
        super().__init__(
            client_id="li-client",
            client_secret="li-secret",
            redirect_uri=f"{BASE_URL}/api/integrations/linkedin/callback",
        )
        self.profile = LinkedInProfile(id="li-member-1", first_name="Ada", last_name="Lovelace")
        self.refreshed = []
        self.organizations = []
        self.organizations_error = None

    def exchange_code(self, code):
        return OAuthTokens("li-access", "li-refresh", datetime.utcnow() + timedelta(days=60))

    def refresh(self, refresh_token):
        self.refreshed.append(refresh_token)
        return OAuthTokens("li-access-2", refresh_token, datetime.utcnow() + timedelta(days=60))

    def fetch_profile(self, access_token):
        return self.profile

    def fetch_organizations(self, access_token):
        if self.organizations_error:
            raise UpstreamFailure("LinkedIn API error", details=self.organizations_error)
        return list(self.organizations)


class FakeDrive(GoogleDriveOAuth):
    def __init__(self):
        super().__init__(
            client_id="gd-client",
            client_secret="gd-secret",
            redirect_uri=f"{BASE_URL}/api/integrations/google-drive/callback",
        )

    def exchange_code(self, code):
        if code == "bad":
            raise UpstreamFailure("Google Drive API error", details="invalid_grant")
        return OAuthTokens("gd-access", "gd-refresh", datetime.utcnow() + timedelta(hours=1))


class FakeStripe:
    test_mode = True

    def __init__(self, error=None):
        self.error = error

    def retrieve_account(self):
        if self.error:
            raise UpstreamFailure("Stripe API error", details=self.error)
        return StripeAccount(id="acct_123", email="ops@example.com", country="US")


@pytest.fixture
def settings():
    return Settings(ENV="dev", APP_BASE_URL=BASE_URL, DATABASE_URL="sqlite://")


@pytest.fixture
def database():
    db = Database("sqlite://")
    yield db
    db.dispose()


@pytest.fixture
def services():
    return Services(google_drive=FakeDrive(), linkedin=FakeLinkedIn(), stripe=None)


@pytest.fixture
def app(settings, database, services):
    return create_app(settings=settings, database=database, services=services)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(client, database):
    # depends on client so the lifespan has created the tables
    session = database.SessionLocal()
    yield session
    session.close()


def add_tenant(session, name, domain=None) -> Tenant:
    tenant = Tenant(name=name, domain=domain)
    session.add(tenant)
    session.commit()
    return tenant


def add_user(session, *, email, role=USER, tenant_id=None, name=None, created_at=None) -> User:
    user = User(email=email, role=role, tenant_id=tenant_id, name=name or email.split("@")[0])
    if created_at is not None:
        user.created_at = created_at
    session.add(user)
    session.commit()
    return user


def auth_headers(user: User) -> dict[str, str]:
    token = create_session_token(Principal.from_user(user))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def two_tenants(db_session):
    """Two tenants with identical names, each with an admin and a plain user."""
    acme = add_tenant(db_session, "Acme", "acme.com")
    other = add_tenant(db_session, "Acme", "acme-other.com")
    return {
        "acme": acme,
        "other": other,
        "acme_admin": add_user(db_session, email="admin@acme.com", role=TENANT_ADMIN, tenant_id=acme.id),
        "acme_user": add_user(db_session, email="user@acme.com", role=USER, tenant_id=acme.id),
        "other_admin": add_user(db_session, email="admin@other.com", role=TENANT_ADMIN, tenant_id=other.id),
        "other_user": add_user(db_session, email="user@other.com", role=USER, tenant_id=other.id),
    }


@pytest.fixture
def super_admin(db_session):
    return add_user(db_session, email="root@platform.com", role=SUPER_ADMIN)
