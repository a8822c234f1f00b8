import logging
from datetime import datetime

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from socialops.auth.deps import get_current_principal
from socialops.auth.models import User
from socialops.auth.principal import Principal
from socialops.auth.rbac import require_roles
from socialops.auth.roles import TENANT_ADMINS
from socialops.core.errors import BadRequest, NotFound, error_boundary
from socialops.db.session import get_db
from socialops.posts.models import (
    POST_APPROVED,
    POST_DRAFT,
    POST_PENDING_APPROVAL,
    POST_PUBLISHED,
    POST_SCHEDULED,
    POST_STATUSES,
    Post,
)
from socialops.posts.schemas import (
    PostCreateRequest,
    PostRejectRequest,
    PostScheduleRequest,
    PostUpdateRequest,
    to_naive_utc,
)
from socialops.tenants.scope import TenantScope

logger = logging.getLogger(__name__)

router = APIRouter()


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _post_out(post: Post, author: User | None) -> dict:
    return {
        "id": post.id,
        "tenantId": post.tenant_id,
        "title": post.title,
        "content": post.content,
        "mediaUrls": list(post.media_urls or []),
        "status": post.status,
        "platform": post.platform,
        "scheduledAt": _iso(post.scheduled_at),
        "publishedAt": _iso(post.published_at),
        "aiGenerated": post.ai_generated,
        "aiModel": post.ai_model,
        "userApproved": post.user_approved,
        "userModifications": post.user_modifications,
        "createdAt": _iso(post.created_at),
        "updatedAt": _iso(post.updated_at),
        "user": {"id": author.id, "name": author.name, "email": author.email} if author else None,
    }


def _authors(scope: TenantScope, posts) -> dict[str, User]:
    ids = {p.user_id for p in posts}
    if not ids:
        return {}
    return {u.id: u for u in scope.find_many(User, User.id.in_(ids))}


def _get_post(scope: TenantScope, post_id: str) -> Post:
    post = scope.find_first(Post, Post.id == post_id)
    if not post:
        raise NotFound("Post not found")
    return post


def _single(scope: TenantScope, post: Post) -> dict:
    return _post_out(post, scope.find_first(User, User.id == post.user_id))


@router.get("")
def list_posts(
    status: str | None = Query(default=None, max_length=32),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch posts"):
        scope = TenantScope.for_principal(db, principal)
        criteria = []
        if status:
            status = status.strip().upper()
            if status not in POST_STATUSES:
                raise BadRequest(f"Unknown status: {status}")
            criteria.append(Post.status == status)
        posts = scope.find_many(Post, *criteria)
        authors = _authors(scope, posts)
        return {"posts": [_post_out(p, authors.get(p.user_id)) for p in posts]}


@router.post("", status_code=201)
def create_post(
    payload: PostCreateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to create post"):
        scope = TenantScope.for_principal(db, principal)
        post = scope.create(Post, user_id=principal.id, **payload.to_columns())
        logger.info("Post created tenant=%s post=%s status=%s", scope.tenant_id, post.id, post.status)
        return {"post": _single(scope, post)}


@router.get("/{post_id}")
def get_post(
    post_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to fetch post"):
        scope = TenantScope.for_principal(db, principal)
        return {"post": _single(scope, _get_post(scope, post_id))}


@router.put("/{post_id}")
def update_post(
    post_id: str,
    payload: PostUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to update post"):
        scope = TenantScope.for_principal(db, principal)
        post = _get_post(scope, post_id)
        if post.status == POST_PUBLISHED:
            raise BadRequest("Published posts cannot be edited")
        values = payload.to_columns()
        if values:
            post = scope.update(Post, Post.id == post.id, values=values)[0]
        return {"post": _single(scope, post)}


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to delete post"):
        scope = TenantScope.for_principal(db, principal)
        if scope.delete_many(Post, Post.id == post_id) == 0:
            raise NotFound("Post not found")
        logger.info("Post deleted tenant=%s post=%s by=%s", scope.tenant_id, post_id, principal.id)
        return {"success": True}


@router.post("/{post_id}/approve")
def approve_post(
    post_id: str,
    principal: Principal = Depends(
        require_roles(*TENANT_ADMINS, message="Forbidden - Only admins can approve posts")
    ),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to approve post"):
        scope = TenantScope.for_principal(db, principal)
        post = _get_post(scope, post_id)
        if post.status != POST_PENDING_APPROVAL:
            raise BadRequest(f"Cannot approve post with status: {post.status}")
        post = scope.update(
            Post,
            Post.id == post.id,
            values={"status": POST_APPROVED, "user_approved": True},
        )[0]
        logger.info("Post approved tenant=%s post=%s by=%s", scope.tenant_id, post.id, principal.id)
        return {"success": True, "post": _single(scope, post), "message": "Post approved successfully"}


@router.post("/{post_id}/reject")
def reject_post(
    post_id: str,
    payload: PostRejectRequest | None = Body(default=None),
    principal: Principal = Depends(
        require_roles(*TENANT_ADMINS, message="Forbidden - Only admins can reject posts")
    ),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to reject post"):
        scope = TenantScope.for_principal(db, principal)
        post = _get_post(scope, post_id)
        if post.status != POST_PENDING_APPROVAL:
            raise BadRequest(f"Cannot reject post with status: {post.status}")
        reason = (payload.reason if payload else None) or "Post rejected by admin"
        post = scope.update(
            Post,
            Post.id == post.id,
            values={"status": POST_DRAFT, "user_approved": False, "user_modifications": reason},
        )[0]
        logger.info("Post rejected tenant=%s post=%s by=%s", scope.tenant_id, post.id, principal.id)
        return {
            "success": True,
            "post": _single(scope, post),
            "message": "Post rejected and moved to drafts",
        }


@router.post("/{post_id}/schedule")
def schedule_post(
    post_id: str,
    payload: PostScheduleRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    with error_boundary("Failed to schedule post"):
        scope = TenantScope.for_principal(db, principal)
        post = _get_post(scope, post_id)
        if post.status == POST_PUBLISHED:
            raise BadRequest(f"Cannot schedule post with status: {post.status}")
        scheduled_at = to_naive_utc(payload.scheduledAt)
        if scheduled_at <= datetime.utcnow():
            raise BadRequest("Scheduled date must be in the future")
        post = scope.update(
            Post,
            Post.id == post.id,
            values={"scheduled_at": scheduled_at, "status": POST_SCHEDULED},
        )[0]
        return {
            "success": True,
            "post": _single(scope, post),
            "message": f"Post scheduled for {scheduled_at.isoformat()}",
        }
