from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from socialops.auth.deps import get_current_principal
from socialops.auth.principal import Principal
from socialops.core.errors import error_boundary
from socialops.db.session import get_db
from socialops.media.models import SyncedMedia
from socialops.tenants.scope import MEDIA_LIST_LIMIT, TenantScope

router = APIRouter()


def _media_out(row: SyncedMedia) -> dict:
    return {
        "id": row.id,
        "tenantId": row.tenant_id,
        "integrationId": row.integration_id,
        "fileId": row.file_id,
        "name": row.name,
        "mimeType": row.mime_type,
        "size": row.size,
        "thumbnailUrl": row.thumbnail_url,
        "webUrl": row.web_url,
        "analyzed": row.analyzed,
        "createdAt": row.created_at.isoformat() if row.created_at else None,
    }


@router.get("")
def list_drive_media(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch synced media"):
        scope = TenantScope.for_principal(db, principal)
        media = scope.find_many(SyncedMedia, limit=MEDIA_LIST_LIMIT)
        return {"success": True, "media": [_media_out(m) for m in media], "count": len(media)}
