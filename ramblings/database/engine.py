from fastapi import Request
import logging

from ramblings.core.config import Settings
from ramblings.database.store import (
    ContentStore, MemoryContentStore, FileContentStore, RedisContentStore
)

logger = logging.getLogger(__name__)

# Database keys
DB_KEYS = {
    "POSTS": "posts",
    "COMMENTS": "comments",
    "IMAGES": "images",
}


def create_content_store(settings: Settings) -> ContentStore:
    """Build the content store selected by ``STORE_BACKEND``."""
    backend = settings.STORE_BACKEND.lower()

    if backend == "memory":
        logger.info("Using in-memory content store (development mode)")
        return MemoryContentStore(key_prefix=settings.STORE_KEY_PREFIX)

    if backend == "file":
        logger.info(f"Using file content store: {settings.CONTENT_DIR}")
        return FileContentStore(settings.CONTENT_DIR, key_prefix=settings.STORE_KEY_PREFIX)

    if backend == "redis":
        logger.info(f"Using Redis content store: {settings.redis_url}")
        return RedisContentStore.from_url(settings.redis_url, key_prefix=settings.STORE_KEY_PREFIX)

    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")


def get_store(request: Request) -> ContentStore:
    return request.app.state.store
