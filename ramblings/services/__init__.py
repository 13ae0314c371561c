# ramblings/services/__init__.py
"""
Shared services layer for cross-collection functionality.
"""

from ramblings.services.search_service import SearchService, SearchProfile, search

__all__ = [
    "SearchService",
    "SearchProfile",
    "search",
]
