from datetime import datetime, timedelta

from socialops.media.models import SyncedMedia

from conftest import auth_headers


def _seed_media(session, tenant_id, count, prefix):
    start = datetime(2024, 1, 1)
    for i in range(count):
        session.add(
            SyncedMedia(
                tenant_id=tenant_id,
                file_id=f"{prefix}-{i}",
                name=f"{prefix}-{i}.jpg",
                mime_type="image/jpeg",
                created_at=start + timedelta(minutes=i),
            )
        )
    session.commit()


def test_lists_newest_hundred_for_own_tenant(client, db_session, two_tenants):
    _seed_media(db_session, two_tenants["acme"].id, 120, "acme")
    _seed_media(db_session, two_tenants["other"].id, 5, "other")

    res = client.get("/api/drive-media", headers=auth_headers(two_tenants["acme_user"]))

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["count"] == 100
    names = [m["name"] for m in body["media"]]
    assert names[0] == "acme-119.jpg"
    assert names[-1] == "acme-20.jpg"
    assert all(m["tenantId"] == two_tenants["acme"].id for m in body["media"])


def test_empty_tenant_gets_empty_list(client, two_tenants):
    res = client.get("/api/drive-media", headers=auth_headers(two_tenants["other_user"]))
    assert res.json() == {"success": True, "media": [], "count": 0}


def test_requires_a_session(client):
    assert client.get("/api/drive-media").status_code == 401
