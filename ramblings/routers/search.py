# ramblings/routers/search.py
"""
Search API for posts, comments and images.

Every endpoint takes the same filter parameters; filters that do not apply
to an entity are ignored.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from typing import List, Optional

from ramblings.core.auth import is_authenticated, require_admin
from ramblings.crud.comments import comment_crud
from ramblings.crud.images import image_crud
from ramblings.crud.posts import post_crud
from ramblings.database.engine import get_store
from ramblings.database.store import ContentStore
from ramblings.models.blog import Comment, Image, Post, PostStatus
from ramblings.schemas.search import SearchFacets, SearchFilters, SearchResult, SortBy, SortOrder
from ramblings.services.search_service import SearchService

router = APIRouter(prefix="/api/search", tags=["search"])


def get_search_filters(
    q: Optional[str] = Query(None, description="Free-text query"),
    tags: Optional[List[str]] = Query(None, description="Tags, repeated or comma-separated"),
    author: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None, description="Inclusive ISO date lower bound"),
    date_to: Optional[str] = Query(None, description="Inclusive ISO date upper bound"),
    status_filter: Optional[str] = Query(None, alias="status"),
    sort_by: SortBy = Query(SortBy.date),
    sort_order: SortOrder = Query(SortOrder.desc),
) -> SearchFilters:
    if tags:
        tags = [tag.strip() for value in tags for tag in value.split(",") if tag.strip()]

    try:
        return SearchFilters(
            query=q or None,
            tags=tags or None,
            author=author or None,
            date_from=date_from,
            date_to=date_to,
            status=status_filter or None,
            sort_by=sort_by,
            sort_order=sort_order,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        )


@router.get("/posts", response_model=SearchResult[Post])
async def search_posts(
    filters: SearchFilters = Depends(get_search_filters),
    store: ContentStore = Depends(get_store),
    is_admin: bool = Depends(is_authenticated),
):
    """
    Search posts by title, description, author and tags.

    **Permissions**: Anyone; drafts are only searched for admins
    """
    posts = await post_crud.get_posts(store)
    if not is_admin:
        posts = [post for post in posts if post.status == PostStatus.published.value]
    return SearchService.search_posts(posts, filters)


@router.get("/comments", response_model=SearchResult[Comment])
async def search_comments(
    filters: SearchFilters = Depends(get_search_filters),
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Search comments by author, content and post slug.

    **Permissions**: Admin only
    """
    comments = await comment_crud.get_all(store)
    return SearchService.search_comments(comments, filters)


@router.get("/images", response_model=SearchResult[Image])
async def search_images(
    filters: SearchFilters = Depends(get_search_filters),
    store: ContentStore = Depends(get_store),
    _: bool = Depends(require_admin),
):
    """
    Search images by original filename, alt text and description.

    **Permissions**: Admin only
    """
    images = await image_crud.get_all(store)
    return SearchService.search_images(images, filters)


@router.get("/facets", response_model=SearchFacets)
async def get_facets(
    store: ContentStore = Depends(get_store),
    is_admin: bool = Depends(is_authenticated),
):
    """
    Values available for the tag, author and status filters.

    Comment statuses are only listed for admins.
    """
    posts = await post_crud.get_posts(store)
    if not is_admin:
        posts = [post for post in posts if post.status == PostStatus.published.value]

    statuses: List[str] = []
    if is_admin:
        statuses = SearchService.get_available_statuses(await comment_crud.get_all(store))

    return SearchFacets(
        tags=SearchService.get_available_tags(posts),
        authors=SearchService.get_available_authors(posts),
        statuses=statuses,
    )
