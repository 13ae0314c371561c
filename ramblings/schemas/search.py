"""Search request and response schemas shared by posts, comments and images."""
from pydantic import BaseModel, Field, field_validator
from typing import Generic, TypeVar, List, Optional
from enum import Enum

from ramblings.core.dates import parse_datetime

T = TypeVar('T')


class SortBy(str, Enum):
    date = "date"
    title = "title"
    author = "author"
    relevance = "relevance"
    size = "size"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class SearchFilters(BaseModel):
    """
    Filter and sort options.

    All active filters must match. Within ``tags`` any one tag is enough.
    Date bounds are inclusive and accept ISO dates or timestamps.
    """
    query: Optional[str] = Field(None, description="Case-insensitive substring")
    tags: Optional[List[str]] = Field(None, description="Match any of these tags")
    author: Optional[str] = Field(None, description="Case-insensitive author substring")
    date_from: Optional[str] = Field(None, description="Inclusive lower date bound")
    date_to: Optional[str] = Field(None, description="Inclusive upper date bound")
    status: Optional[str] = Field(None, description="Exact comment status")
    sort_by: SortBy = SortBy.date
    sort_order: SortOrder = SortOrder.desc

    @field_validator('date_from', 'date_to')
    def validate_date_bound(cls, v):
        if v is None or v.strip() == "":
            return None
        if parse_datetime(v) is None:
            raise ValueError(f'Invalid date: {v}')
        return v


class SearchResult(BaseModel, Generic[T]):
    """
    Search response wrapper.

    ``total`` counts the items that matched the filters, so it always
    equals ``len(items)``.
    """
    items: List[T]
    total: int
    filters: SearchFilters
    suggestions: List[str] = []


class SearchFacets(BaseModel):
    tags: List[str] = []
    authors: List[str] = []
    statuses: List[str] = []
