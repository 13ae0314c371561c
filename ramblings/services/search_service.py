# ramblings/services/search_service.py
"""
In-memory search over posts, comments and images.

One filter/sort/suggest pipeline is shared by every collection; what differs
per entity (searchable fields, primary date, sortable keys, how suggestion
tokens are cut) is described by a SearchProfile. Everything here is pure:
inputs are never mutated and nothing touches the store.
"""
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ramblings.core.dates import parse_datetime
from ramblings.schemas.search import SearchFilters, SearchResult, SortBy, SortOrder

MAX_SUGGESTIONS = 5
MIN_SUGGESTION_LENGTH = 3

_FILENAME_SEPARATORS = re.compile(r"[._-]")


def _lower(value: Optional[str]) -> str:
    return value.lower() if value else ""


def _text_key(value: Optional[str]) -> str:
    return value.casefold() if value else ""


def _status_value(status: Any) -> str:
    return getattr(status, "value", status)


@dataclass(frozen=True)
class SearchProfile:
    """
    Describes how one kind of record is searched.

    Attributes:
        name: Collection name, for diagnostics
        text_fields: Values the free-text query is matched against
        date_of: Raw primary date used for date bounds and date sorting
        sort_keys: Sort keys other than date/relevance this entity supports
        suggestion_tokens: Candidate suggestion tokens for a lowered query
        author_of: Author field, if the ``author`` filter applies
        tags_of: Tag list, if the ``tags`` filter applies
        status_of: Status field, if the ``status`` filter applies
    """
    name: str
    text_fields: Callable[[Any], Iterable[Optional[str]]]
    date_of: Callable[[Any], Any]
    sort_keys: Dict[SortBy, Callable[[Any], Any]]
    suggestion_tokens: Callable[[Any, str], Iterable[str]]
    author_of: Optional[Callable[[Any], str]] = None
    tags_of: Optional[Callable[[Any], Iterable[str]]] = None
    status_of: Optional[Callable[[Any], str]] = None


# ============ Suggestion tokenizers ============

def _post_tokens(post, query: str) -> Iterable[str]:
    if query in _lower(post.title):
        yield from post.title.split()
    for tag in post.tags or []:
        if query in tag.lower():
            yield tag


def _comment_tokens(comment, query: str) -> Iterable[str]:
    if query in _lower(comment.author):
        yield comment.author
    yield from (comment.content or "").split()


def _image_tokens(image, query: str) -> Iterable[str]:
    if query in _lower(image.original_name):
        yield from _FILENAME_SEPARATORS.split(image.original_name)
    if image.alt and query in image.alt.lower():
        yield from image.alt.split()


POST_PROFILE = SearchProfile(
    name="posts",
    text_fields=lambda p: (p.title, p.description, p.author, *(p.tags or [])),
    date_of=lambda p: p.date,
    sort_keys={
        SortBy.title: lambda p: _text_key(p.title),
        SortBy.author: lambda p: _text_key(p.author),
    },
    suggestion_tokens=_post_tokens,
    author_of=lambda p: p.author,
    tags_of=lambda p: p.tags or [],
)

COMMENT_PROFILE = SearchProfile(
    name="comments",
    text_fields=lambda c: (c.author, c.content, c.post_slug),
    date_of=lambda c: c.created_at,
    sort_keys={
        SortBy.author: lambda c: _text_key(c.author),
    },
    suggestion_tokens=_comment_tokens,
    author_of=lambda c: c.author,
    status_of=lambda c: _status_value(c.status),
)

IMAGE_PROFILE = SearchProfile(
    name="images",
    text_fields=lambda i: (i.original_name, i.alt, i.description),
    date_of=lambda i: i.uploaded_at,
    sort_keys={
        SortBy.title: lambda i: _text_key(i.original_name),
        SortBy.size: lambda i: i.size,
    },
    suggestion_tokens=_image_tokens,
)


# ============ Pipeline stages ============

def _matches(
    item,
    profile: SearchProfile,
    filters: SearchFilters,
    date_from: Optional[datetime],
    date_to: Optional[datetime],
) -> bool:
    if filters.query:
        query = filters.query.lower()
        if not any(query in _lower(value) for value in profile.text_fields(item)):
            return False

    if filters.tags and profile.tags_of is not None:
        wanted = [tag.lower() for tag in filters.tags]
        own = [tag.lower() for tag in profile.tags_of(item)]
        if not any(w in tag for w in wanted for tag in own):
            return False

    if filters.author and profile.author_of is not None:
        if filters.author.lower() not in _lower(profile.author_of(item)):
            return False

    if filters.status and profile.status_of is not None:
        if profile.status_of(item) != filters.status:
            return False

    if date_from is not None or date_to is not None:
        when = parse_datetime(profile.date_of(item))
        if when is None:
            return False
        if date_from is not None and when < date_from:
            return False
        if date_to is not None and when > date_to:
            return False

    return True


def _sort(items: List[Any], profile: SearchProfile, sort_by: SortBy, sort_order: SortOrder) -> List[Any]:
    if sort_by == SortBy.relevance:
        # No scoring: filter order is input order
        return list(items)

    reverse = sort_order == SortOrder.desc
    key = profile.sort_keys.get(sort_by)
    if key is not None:
        return sorted(items, key=key, reverse=reverse)

    # Date sort, also the fallback for keys this entity does not support.
    # Unparseable dates always go last, in input order.
    dated, undated = [], []
    for item in items:
        when = parse_datetime(profile.date_of(item))
        if when is None:
            undated.append(item)
        else:
            dated.append((when, item))
    dated.sort(key=lambda pair: pair[0], reverse=reverse)
    return [item for _, item in dated] + undated


def generate_suggestions(items: Sequence[Any], profile: SearchProfile, query: Optional[str]) -> List[str]:
    """
    Words from the collection that contain ``query``, for "did you mean".

    Tokens shorter than three characters are skipped; duplicates keep their
    first position; at most five are returned.
    """
    if not query:
        return []

    query_lower = query.lower()
    suggestions: Dict[str, None] = {}
    for item in items:
        for token in profile.suggestion_tokens(item, query_lower):
            if len(token) >= MIN_SUGGESTION_LENGTH and query_lower in token.lower():
                suggestions.setdefault(token, None)
                if len(suggestions) >= MAX_SUGGESTIONS:
                    return list(suggestions)
    return list(suggestions)


def search(items: Sequence[Any], filters: SearchFilters, profile: SearchProfile) -> SearchResult:
    """
    Filter, sort and suggest over an in-memory collection.

    Args:
        items: Collection snapshot; never modified
        filters: Filter and sort options
        profile: How this kind of record is searched

    Returns:
        SearchResult whose ``total`` is the number of matching items
    """
    date_from = parse_datetime(filters.date_from)
    date_to = parse_datetime(filters.date_to)

    candidates = list(items)
    filtered = [
        item for item in candidates
        if _matches(item, profile, filters, date_from, date_to)
    ]
    ordered = _sort(filtered, profile, filters.sort_by, filters.sort_order)

    return SearchResult(
        items=ordered,
        total=len(filtered),
        filters=filters,
        suggestions=generate_suggestions(candidates, profile, filters.query),
    )


class SearchService:
    """Service for in-memory search across blog content."""

    @staticmethod
    def search_posts(posts: Sequence[Any], filters: SearchFilters) -> SearchResult:
        """
        Search posts by title, description, author and tags.

        Supports tag, author and date filters; sorts by date, title,
        author or relevance.
        """
        return search(posts, filters, POST_PROFILE)

    @staticmethod
    def search_comments(comments: Sequence[Any], filters: SearchFilters) -> SearchResult:
        """
        Search comments by author, content and post slug.

        Supports status, author and date filters; sorts by date, author
        or relevance.
        """
        return search(comments, filters, COMMENT_PROFILE)

    @staticmethod
    def search_images(images: Sequence[Any], filters: SearchFilters) -> SearchResult:
        """
        Search images by original filename, alt text and description.

        Supports date filters; sorts by date, title (filename), size or
        relevance.
        """
        return search(images, filters, IMAGE_PROFILE)

    @staticmethod
    def get_available_tags(posts: Sequence[Any]) -> List[str]:
        return sorted({tag for post in posts for tag in (post.tags or [])})

    @staticmethod
    def get_available_authors(posts: Sequence[Any]) -> List[str]:
        return sorted({post.author for post in posts})

    @staticmethod
    def get_available_statuses(comments: Sequence[Any]) -> List[str]:
        return sorted({_status_value(comment.status) for comment in comments})
