from datetime import datetime, timedelta

import pytest

from socialops.auth.models import User
from socialops.auth.roles import USER
from socialops.integrations.models import GOOGLE_DRIVE, CloudStorageIntegration
from socialops.posts.models import POST_PENDING_APPROVAL, Post
from socialops.team.models import INVITATION_PENDING, Invitation
from socialops.tenants.scope import TenantScope

from conftest import add_user, auth_headers


def _drive(db_session, tenants):
    row = TenantScope(db_session, tenants["acme"].id).create(
        CloudStorageIntegration, provider=GOOGLE_DRIVE, access_token="t", sync_folder_path="/Brand"
    )
    return row, lambda fresh: (fresh.access_token, fresh.sync_folder_path, fresh.is_active)


def _invitation(db_session, tenants):
    row = TenantScope(db_session, tenants["acme"].id).create(
        Invitation,
        email="new@acme.com",
        role=USER,
        token="tok-guard",
        invited_by=tenants["acme_admin"].id,
        expires_at=datetime.utcnow() + timedelta(days=7),
    )
    return row, lambda fresh: (fresh.status, fresh.email)


def _member(db_session, tenants):
    row = add_user(db_session, email="colleague@acme.com", tenant_id=tenants["acme"].id)
    return row, lambda fresh: (fresh.tenant_id, fresh.role)


def _pending_post(db_session, tenants):
    row = TenantScope(db_session, tenants["acme"].id).create(
        Post, user_id=tenants["acme_user"].id, content="Pending", status=POST_PENDING_APPROVAL
    )
    return row, lambda fresh: (fresh.status, fresh.user_approved, fresh.user_modifications)


GUARDED_ROUTES = [
    pytest.param(
        _drive,
        CloudStorageIntegration,
        "POST",
        lambda row: "/api/integrations/google-drive/disconnect",
        None,
        "Only admins can disconnect Drive",
        id="drive-disconnect",
    ),
    pytest.param(
        _drive,
        CloudStorageIntegration,
        "PATCH",
        lambda row: "/api/integrations/google-drive/status",
        {"syncFolderPath": "/Elsewhere", "isActive": False},
        "Only admins can update Drive settings",
        id="drive-settings",
    ),
    pytest.param(
        _invitation,
        Invitation,
        "DELETE",
        lambda row: f"/api/team/invitations/{row.id}",
        None,
        "Only admins can cancel invitations",
        id="cancel-invitation",
    ),
    pytest.param(
        _member,
        User,
        "DELETE",
        lambda row: f"/api/team/members/{row.id}",
        None,
        "Only admins can remove team members",
        id="remove-member",
    ),
    pytest.param(
        _pending_post,
        Post,
        "POST",
        lambda row: f"/api/posts/{row.id}/approve",
        None,
        "Forbidden - Only admins can approve posts",
        id="approve-post",
    ),
    pytest.param(
        _pending_post,
        Post,
        "POST",
        lambda row: f"/api/posts/{row.id}/reject",
        {"reason": "nope"},
        "Forbidden - Only admins can reject posts",
        id="reject-post",
    ),
]


@pytest.mark.parametrize("seed, model, method, path, body, message", GUARDED_ROUTES)
def test_plain_user_cannot_mutate_admin_routes(
    client, db_session, two_tenants, seed, model, method, path, body, message
):
    row, snapshot = seed(db_session, two_tenants)
    before = snapshot(row)

    res = client.request(method, path(row), json=body, headers=auth_headers(two_tenants["acme_user"]))

    assert res.status_code == 403
    assert res.json() == {"error": message}
    db_session.expire_all()
    fresh = db_session.get(model, row.id)
    assert fresh is not None
    assert snapshot(fresh) == before


def test_pending_invitation_survives_forbidden_cancel(client, db_session, two_tenants):
    row, _ = _invitation(db_session, two_tenants)
    client.delete(f"/api/team/invitations/{row.id}", headers=auth_headers(two_tenants["acme_user"]))
    db_session.expire_all()
    assert db_session.get(Invitation, row.id).status == INVITATION_PENDING
