# ramblings/routers/posts.py
from fastapi import APIRouter, Depends, HTTPException, status

from ramblings.core.auth import is_authenticated, require_admin
from ramblings.core.errors import PostConflictError
from ramblings.crud.posts import post_crud
from ramblings.database.engine import get_store
from ramblings.database.store import ContentStore
from ramblings.models.blog import Post, PostStatus
from ramblings.schemas.blog import (
    PostCreate, PostUpdate, PostSummary, PostListResponse, PostMutationResponse
)

router = APIRouter(
    prefix="/api/posts",
    tags=["posts"],
    responses={404: {"description": "Not found"}},
)


def _is_visible(post: Post, is_admin: bool) -> bool:
    return is_admin or post.status == PostStatus.published.value


# ========================================
# BLOG POST ENDPOINTS
# ========================================

@router.get("", response_model=PostListResponse)
async def get_posts(
    store: ContentStore = Depends(get_store),
    is_admin: bool = Depends(is_authenticated),
):
    """
    Get list of blog posts, newest publish date first.

    **Permissions**:
    - Published posts: Anyone
    - Draft posts: Admin only
    """
    if is_admin:
        posts = await post_crud.get_sorted_posts(store)
    else:
        posts = await post_crud.get_published_posts(store)

    return PostListResponse(
        items=[PostSummary.model_validate(post) for post in posts],
        total=len(posts),
    )


@router.get("/{slug}", response_model=Post)
async def get_post(
    slug: str,
    store: ContentStore = Depends(get_store),
    is_admin: bool = Depends(is_authenticated),
):
    """
    Get a blog post by slug.

    **Permissions**: Anyone for published posts; drafts are admin only
    """
    post = await post_crud.get_post(store, slug)
    if not post or not _is_visible(post, is_admin):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blog post not found"
        )
    return post


@router.post("", response_model=Post, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Create a new blog post. The slug is derived from the title.

    **Permissions**: Admin only
    """
    try:
        post = await post_crud.create_post(store, post_data)
    except PostConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    if not post:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create blog post"
        )
    return post


@router.put("/{slug}", response_model=PostMutationResponse)
async def update_post(
    slug: str,
    post_data: PostUpdate,
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Update a blog post. The slug stays the same even if the title changes.

    **Permissions**: Admin only
    """
    if not await post_crud.get_post(store, slug):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blog post not found"
        )

    if not await post_crud.update_post(store, slug, post_data):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update blog post"
        )
    return PostMutationResponse(slug=slug, message="Post updated successfully")


@router.delete("/{slug}", response_model=PostMutationResponse)
async def delete_post(
    slug: str,
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Delete a blog post.

    **Permissions**: Admin only
    """
    if not await post_crud.get_post(store, slug):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Blog post not found"
        )

    if not await post_crud.delete_post(store, slug):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete blog post"
        )
    return PostMutationResponse(slug=slug, message="Post deleted successfully")
