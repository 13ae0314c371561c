"""
Exception hierarchy shared by the content store, repositories and routers.
"""

from typing import Optional


class StoreError(Exception):
    """Base class for content store failures."""


class StoreUnavailableError(StoreError):
    """Raised when the backing store cannot be read or written."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Store unavailable for '{key}': {reason}")


class VersionConflictError(StoreError):
    """Raised when a compare-and-swap write sees a newer document version."""

    def __init__(self, key: str, expected: Optional[str], actual: Optional[str]):
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Version conflict on '{key}': expected {expected}, found {actual}"
        )


class ConflictError(Exception):
    """Base class for conflicts callers are expected to handle."""


class PostConflictError(ConflictError):
    """Raised when a new post's slug is already taken."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"A post with slug '{slug}' already exists")


class WriteConflictError(ConflictError):
    """Raised when concurrent writers keep winning the compare-and-swap race."""

    def __init__(self, key: str, attempts: int):
        self.key = key
        self.attempts = attempts
        super().__init__(
            f"Gave up writing '{key}' after {attempts} conflicting attempts"
        )
