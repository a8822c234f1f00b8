import time

import pytest
from fastapi.testclient import TestClient

from socialops.auth.security import JWTError, decode_token
from socialops.billing.models import Subscription
from socialops.core.config import Settings
from socialops.main import create_app
from socialops.tenants.models import Tenant

from conftest import BASE_URL, auth_headers

REGISTRATION = {
    "company_name": "Acme Corp",
    "domain": "Acme.com",
    "name": "Ada Admin",
    "email": "ada@acme.com",
    "password": "correct-horse",
}


def test_register_creates_tenant_admin_and_trial(client, db_session):
    res = client.post("/api/auth/register", json=REGISTRATION)

    assert res.status_code == 201
    body = res.json()
    assert body["user"]["role"] == "TENANT_ADMIN"
    assert body["tenant"]["domain"] == "acme.com"

    tenant_id = body["tenant"]["id"]
    assert db_session.get(Tenant, tenant_id).name == "Acme Corp"
    sub = db_session.query(Subscription).filter(Subscription.tenant_id == tenant_id).one()
    assert (sub.plan, sub.status, sub.posts_limit) == ("FREE", "TRIALING", 5)


def test_register_rejects_duplicates(client):
    assert client.post("/api/auth/register", json=REGISTRATION).status_code == 201

    same_email = client.post("/api/auth/register", json={**REGISTRATION, "domain": "x.com"})
    assert same_email.status_code == 400
    assert same_email.json() == {"error": "An account with this email already exists"}

    same_domain = client.post("/api/auth/register", json={**REGISTRATION, "email": "bob@acme.com"})
    assert same_domain.status_code == 400


def test_login_sets_cookie_and_me_reads_it(client):
    client.post("/api/auth/register", json=REGISTRATION)

    res = client.post("/api/auth/login", json={"email": "ada@acme.com", "password": "correct-horse"})

    assert res.status_code == 200
    assert res.json()["token_type"] == "bearer"
    assert "session_token" in res.cookies

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "ada@acme.com"
    assert me.json()["tenant_id"]

    client.post("/api/auth/logout")
    client.cookies.clear()
    assert client.get("/api/auth/me").status_code == 401


def test_login_with_bad_password(client):
    client.post("/api/auth/register", json=REGISTRATION)

    res = client.post("/api/auth/login", json={"email": "ada@acme.com", "password": "wrong-horse"})
    assert res.status_code == 401
    assert res.json() == {"error": "Invalid email or password"}


def test_validation_errors_use_the_error_envelope(client):
    res = client.post("/api/auth/register", json={**REGISTRATION, "password": "short"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Invalid request"
    assert "password" in body["details"]


def test_unknown_route_uses_the_error_envelope(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json() == {"error": "Not Found"}


def test_current_subscription_for_registered_tenant(client):
    client.post("/api/auth/register", json=REGISTRATION)
    token = client.post(
        "/api/auth/login", json={"email": "ada@acme.com", "password": "correct-horse"}
    ).json()["access_token"]
    client.cookies.clear()

    res = client.get("/api/subscription/current", headers={"Authorization": f"Bearer {token}"})

    assert res.status_code == 200
    sub = res.json()["subscription"]
    assert (sub["plan"], sub["status"], sub["usersUsed"]) == ("FREE", "TRIALING", 1)
    assert sub["trialEndsAt"] is not None


def test_current_subscription_missing_is_not_found(client, two_tenants):
    res = client.get("/api/subscription/current", headers=auth_headers(two_tenants["acme_user"]))
    assert res.status_code == 404
    assert res.json() == {"error": "No subscription found for this tenant"}


def test_login_signs_with_the_app_settings(database, services):
    config = Settings(
        ENV="dev",
        APP_BASE_URL=BASE_URL,
        DATABASE_URL="sqlite://",
        JWT_SECRET="route-secret",
        SESSION_EXP_MINUTES=5,
    )
    with TestClient(create_app(settings=config, database=database, services=services)) as client:
        client.post("/api/auth/register", json=REGISTRATION)
        token = client.post(
            "/api/auth/login", json={"email": "ada@acme.com", "password": "correct-horse"}
        ).json()["access_token"]

        claims = decode_token(token, config)
        assert 0 < claims["exp"] - time.time() <= 5 * 60
        with pytest.raises(JWTError):
            decode_token(token, Settings(ENV="dev", JWT_SECRET="another-secret"))
        assert client.get("/api/auth/me").status_code == 200
