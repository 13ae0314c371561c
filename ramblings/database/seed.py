"""
Sample content for a fresh site.

Run from the application lifespan when SEED_SAMPLE_CONTENT is enabled, or
directly: python -m ramblings.database.seed
"""
import asyncio
import logging

from ramblings.core.dates import utc_now
from ramblings.core.errors import StoreError
from ramblings.database.engine import DB_KEYS, create_content_store
from ramblings.database.store import ContentStore

logger = logging.getLogger(__name__)

WELCOME_SLUG = "welcome-to-js-blog"

WELCOME_CONTENT = """# Welcome to JS Blog!

This is a sample blog post to get you started. You can edit this post or create new ones through the admin panel.

## Features

- **Markdown Support**: Write your posts in Markdown
- **Admin Panel**: Manage posts, comments, and images
- **Search**: Find posts easily with the search functionality
- **Responsive Design**: Works on all devices

## Getting Started

1. Edit this post or create a new one
2. Use the admin panel to manage your content
3. Upload images to enhance your posts
4. Moderate comments from your readers

Happy blogging!"""


def sample_posts() -> dict:
    now = utc_now().isoformat()
    return {
        WELCOME_SLUG: {
            "slug": WELCOME_SLUG,
            "title": "Welcome to JS Blog",
            "description": "A sample blog post to get you started",
            "date": "2025-01-15",
            "author": "Admin",
            "tags": ["welcome", "sample"],
            "status": "published",
            "content": WELCOME_CONTENT,
            "created_at": now,
            "updated_at": now,
        }
    }


async def initialize_database(store: ContentStore) -> bool:
    """
    Seed the welcome post when the site has no posts yet.

    Existing comments and images documents are left alone; missing ones are
    created empty.

    Returns:
        True if sample content was written
    """
    try:
        posts = await store.read(DB_KEYS["POSTS"])
        if posts.document:
            logger.info("Content already initialized")
            return False

        await store.compare_and_put(DB_KEYS["POSTS"], sample_posts(), posts.version)

        for key in (DB_KEYS["COMMENTS"], DB_KEYS["IMAGES"]):
            snapshot = await store.read(key)
            if not snapshot.exists:
                await store.compare_and_put(key, {}, None)
    except StoreError as e:
        logger.error(f"Error initializing content: {e}")
        return False

    logger.info("Sample content initialized")
    return True


async def _main():
    from ramblings.core.config import settings

    store = create_content_store(settings)
    try:
        await initialize_database(store)
    finally:
        await store.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main())
