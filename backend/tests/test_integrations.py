from datetime import datetime, timedelta
from urllib.parse import parse_qs, urlparse

from socialops.integrations.linkedin import LinkedInOrganization
from socialops.integrations.models import (
    GOOGLE_DRIVE,
    PROFILE_COMPANY_PAGE,
    PROFILE_PERSONAL,
    CloudStorageIntegration,
    LinkedInIntegration,
)
from socialops.tenants.scope import TenantScope

from conftest import BASE_URL, auth_headers

SETTINGS_PAGE = f"{BASE_URL}/dashboard/settings/integrations"


def test_drive_connect_redirects_with_tenant_state(client, two_tenants):
    res = client.get(
        "/api/integrations/google-drive/connect",
        headers=auth_headers(two_tenants["acme_admin"]),
        follow_redirects=False,
    )

    assert res.status_code == 302
    location = urlparse(res.headers["location"])
    params = parse_qs(location.query)
    assert location.netloc == "accounts.google.com"
    assert params["state"] == [two_tenants["acme"].id]
    assert params["access_type"] == ["offline"]
    assert params["redirect_uri"] == [f"{BASE_URL}/api/integrations/google-drive/callback"]


def test_drive_connect_is_admin_only(client, two_tenants):
    res = client.get(
        "/api/integrations/google-drive/connect",
        headers=auth_headers(two_tenants["acme_user"]),
        follow_redirects=False,
    )
    assert res.status_code == 403
    assert res.json() == {"error": "Only admins can connect Drive"}


def test_drive_callback_stores_tokens_for_session_tenant(client, db_session, two_tenants):
    acme_id = two_tenants["acme"].id
    res = client.get(
        "/api/integrations/google-drive/callback",
        params={"code": "abc", "state": acme_id},
        headers=auth_headers(two_tenants["acme_admin"]),
        follow_redirects=False,
    )

    assert res.status_code == 302
    assert res.headers["location"] == f"{SETTINGS_PAGE}?success=drive_connected"
    row = TenantScope(db_session, acme_id).find_first(CloudStorageIntegration)
    assert row.access_token == "gd-access"
    assert row.refresh_token == "gd-refresh"


def test_drive_callback_rejects_state_for_another_tenant(client, db_session, two_tenants):
    res = client.get(
        "/api/integrations/google-drive/callback",
        params={"code": "abc", "state": two_tenants["other"].id},
        headers=auth_headers(two_tenants["acme_admin"]),
        follow_redirects=False,
    )

    assert res.headers["location"] == f"{SETTINGS_PAGE}?error=invalid_state"
    assert TenantScope(db_session, two_tenants["other"].id).count(CloudStorageIntegration) == 0


def test_drive_callback_redirects_on_provider_failure(client, two_tenants):
    acme_id = two_tenants["acme"].id
    headers = auth_headers(two_tenants["acme_admin"])

    denied = client.get(
        "/api/integrations/google-drive/callback",
        params={"error": "access_denied"},
        follow_redirects=False,
    )
    assert denied.headers["location"] == f"{SETTINGS_PAGE}?error=oauth_failed"

    failed = client.get(
        "/api/integrations/google-drive/callback",
        params={"code": "bad", "state": acme_id},
        headers=headers,
        follow_redirects=False,
    )
    assert failed.status_code == 302
    assert failed.headers["location"].startswith(f"{SETTINGS_PAGE}?error=")


def test_drive_status_patch_and_disconnect_stay_in_tenant(client, db_session, two_tenants):
    acme_id = two_tenants["acme"].id
    other_id = two_tenants["other"].id
    for tenant_id in (acme_id, other_id):
        TenantScope(db_session, tenant_id).create(CloudStorageIntegration, provider=GOOGLE_DRIVE, access_token="t")
    headers = auth_headers(two_tenants["acme_admin"])

    status = client.get("/api/integrations/google-drive/status", headers=headers).json()
    assert status["connected"] is True
    assert status["integration"]["syncFolderPath"] == "/"

    patched = client.patch(
        "/api/integrations/google-drive/status",
        json={"syncFolderPath": "/Brand", "autoApprove": True},
        headers=headers,
    )
    assert patched.status_code == 200
    assert patched.json()["integration"]["syncFolderPath"] == "/Brand"
    assert patched.json()["integration"]["autoApprove"] is True

    res = client.post("/api/integrations/google-drive/disconnect", headers=headers)
    assert res.json() == {"success": True, "message": "Drive disconnected successfully"}

    db_session.expire_all()
    assert TenantScope(db_session, acme_id).count(CloudStorageIntegration) == 0
    other = TenantScope(db_session, other_id).find_first(CloudStorageIntegration)
    assert other is not None and other.sync_folder_path == "/"

    status = client.get("/api/integrations/google-drive/status", headers=headers).json()
    assert status == {"connected": False, "integration": None}


def test_patch_without_connection_is_not_found(client, two_tenants):
    res = client.patch(
        "/api/integrations/google-drive/status",
        json={"autoAnalyze": False},
        headers=auth_headers(two_tenants["acme_admin"]),
    )
    assert res.status_code == 404


def test_linkedin_auth_without_session_redirects_to_login(client):
    res = client.get("/api/integrations/linkedin/auth", follow_redirects=False)
    assert res.status_code == 302
    assert res.headers["location"] == f"{BASE_URL}/login"


def test_linkedin_auth_redirects_to_provider(client, two_tenants):
    res = client.get(
        "/api/integrations/linkedin/auth",
        headers=auth_headers(two_tenants["acme_user"]),
        follow_redirects=False,
    )
    location = urlparse(res.headers["location"])
    assert location.netloc == "www.linkedin.com"
    assert parse_qs(location.query)["state"] == [two_tenants["acme"].id]


def test_linkedin_callback_posts_result_to_opener(client, db_session, two_tenants):
    acme_id = two_tenants["acme"].id
    res = client.get(
        "/api/integrations/linkedin/callback",
        params={"code": "abc", "state": acme_id},
        headers=auth_headers(two_tenants["acme_admin"]),
    )

    assert res.status_code == 200
    assert "text/html" in res.headers["content-type"]
    assert '"success": true' in res.text
    assert "window.close()" in res.text
    row = TenantScope(db_session, acme_id).find_first(LinkedInIntegration)
    assert row.linkedin_id == "li-member-1"
    assert row.profile_name == "Ada Lovelace"


def test_linkedin_callback_with_mismatched_state_stores_nothing(client, db_session, two_tenants):
    res = client.get(
        "/api/integrations/linkedin/callback",
        params={"code": "abc", "state": two_tenants["other"].id},
        headers=auth_headers(two_tenants["acme_admin"]),
    )

    assert "invalid_state" in res.text
    assert TenantScope(db_session, two_tenants["other"].id).count(LinkedInIntegration) == 0


def test_linkedin_test_without_integration_is_not_found(client, two_tenants):
    res = client.get("/api/integrations/linkedin/test", headers=auth_headers(two_tenants["acme_user"]))
    assert res.status_code == 404
    assert res.json() == {"error": "LinkedIn integration not found for this tenant"}


def test_linkedin_test_refreshes_expired_token(client, db_session, services, two_tenants):
    acme_id = two_tenants["acme"].id
    TenantScope(db_session, acme_id).create(
        LinkedInIntegration,
        linkedin_id="li-member-1",
        access_token="old",
        refresh_token="refresh-1",
        expires_at=datetime.utcnow() - timedelta(hours=1),
    )

    res = client.get("/api/integrations/linkedin/test", headers=auth_headers(two_tenants["acme_user"]))

    assert res.status_code == 200
    assert res.json()["profile"]["firstName"] == "Ada"
    assert res.json()["message"] == "LinkedIn connection is working!"
    assert services.linkedin.refreshed == ["refresh-1"]
    db_session.expire_all()
    assert TenantScope(db_session, acme_id).find_first(LinkedInIntegration).access_token == "li-access-2"


def test_linkedin_callback_saves_company_pages(client, db_session, services, two_tenants):
    acme_id = two_tenants["acme"].id
    services.linkedin.organizations = [
        LinkedInOrganization(id="1001", name="Acme Corp", urn="urn:li:organization:1001", role="ADMINISTRATOR"),
        LinkedInOrganization(id="1002", name="Acme Labs", urn="urn:li:organization:1002", role="ANALYST"),
    ]

    res = client.get(
        "/api/integrations/linkedin/callback",
        params={"code": "abc", "state": acme_id},
        headers=auth_headers(two_tenants["acme_admin"]),
    )

    assert '"success": true' in res.text
    assert "Acme Labs" in res.text
    scope = TenantScope(db_session, acme_id)
    pages = scope.find_many(
        LinkedInIntegration,
        LinkedInIntegration.profile_type == PROFILE_COMPANY_PAGE,
        order_by=LinkedInIntegration.linkedin_id,
    )
    assert [(p.linkedin_id, p.organization_name, p.organization_urn) for p in pages] == [
        ("1001", "Acme Corp", "urn:li:organization:1001"),
        ("1002", "Acme Labs", "urn:li:organization:1002"),
    ]
    assert all(p.access_token == "li-access" for p in pages)
    assert scope.count(LinkedInIntegration, LinkedInIntegration.profile_type == PROFILE_PERSONAL) == 1

    # reconnecting updates the same rows
    client.get(
        "/api/integrations/linkedin/callback",
        params={"code": "abc", "state": acme_id},
        headers=auth_headers(two_tenants["acme_admin"]),
    )
    assert TenantScope(db_session, acme_id).count(LinkedInIntegration) == 3


def test_linkedin_callback_keeps_profile_when_organizations_fail(client, db_session, services, two_tenants):
    acme_id = two_tenants["acme"].id
    services.linkedin.organizations_error = "Not enough permissions to access: organizationalEntityAcls"

    res = client.get(
        "/api/integrations/linkedin/callback",
        params={"code": "abc", "state": acme_id},
        headers=auth_headers(two_tenants["acme_admin"]),
    )

    assert '"success": true' in res.text
    rows = TenantScope(db_session, acme_id).find_many(LinkedInIntegration)
    assert [r.profile_type for r in rows] == [PROFILE_PERSONAL]
