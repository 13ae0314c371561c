# ramblings/routers/comments.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import Optional

from ramblings.core.auth import is_authenticated, require_admin
from ramblings.core.auth_helpers import get_client_ip, get_user_agent
from ramblings.crud.comments import comment_crud
from ramblings.database.engine import get_store
from ramblings.database.store import ContentStore
from ramblings.models.blog import Comment
from ramblings.schemas.blog import (
    CommentCreate, CommentStatusUpdate, CommentStats, PublicComment
)
from ramblings.schemas.common import SuccessResponse

router = APIRouter(
    prefix="/api/comments",
    tags=["comments"],
    responses={404: {"description": "Not found"}},
)


# ========================================
# PUBLIC ENDPOINTS
# ========================================

@router.post("", response_model=PublicComment, status_code=status.HTTP_201_CREATED)
async def submit_comment(
    comment_data: CommentCreate,
    request: Request,
    store: ContentStore = Depends(get_store),
):
    """
    Submit a comment on a post. It stays hidden until an admin approves it.

    **Permissions**: Anyone
    """
    comment = await comment_crud.add_comment(
        store,
        comment_data,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if not comment:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add comment"
        )
    return PublicComment.model_validate(comment)


@router.get("", response_model=None)
async def get_comments(
    request: Request,
    post_slug: Optional[str] = Query(None, description="Only approved comments for this post"),
    store: ContentStore = Depends(get_store),
):
    """
    Get comments.

    With ``post_slug``: approved comments for that post, oldest first.
    Without it: every comment in any status, newest first.

    **Permissions**:
    - Comments for a post: Anyone
    - All comments: Admin only
    """
    if post_slug:
        comments = await comment_crud.get_comments_for_post(store, post_slug)
        return [PublicComment.model_validate(comment) for comment in comments]

    await require_admin(request)
    return await comment_crud.get_all_comments(store)


# ========================================
# MODERATION ENDPOINTS (Admin)
# ========================================

@router.get("/stats", response_model=CommentStats)
async def get_comment_stats(
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Count comments by moderation status.

    **Permissions**: Admin only
    """
    return await comment_crud.get_comment_stats(store)


@router.get("/{comment_id}", response_model=Comment)
async def get_comment(
    comment_id: str,
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Get a single comment with its contact details.

    **Permissions**: Admin only
    """
    comment = await comment_crud.get_comment(store, comment_id)
    if not comment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found"
        )
    return comment


@router.put("/{comment_id}", response_model=SuccessResponse)
async def update_comment_status(
    comment_id: str,
    status_update: CommentStatusUpdate,
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Approve, reject or reset a comment to pending.

    **Permissions**: Admin only
    """
    if not await comment_crud.update_comment_status(store, comment_id, status_update.status):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found"
        )
    return SuccessResponse(message="Comment status updated successfully")


@router.delete("/{comment_id}", response_model=SuccessResponse)
async def delete_comment(
    comment_id: str,
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Delete a comment in any status.

    **Permissions**: Admin only
    """
    if not await comment_crud.delete_comment(store, comment_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found"
        )
    return SuccessResponse(message="Comment deleted successfully")
