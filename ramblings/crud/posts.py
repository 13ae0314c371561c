# ramblings/crud/posts.py
from typing import List, Optional
import logging
import re

from ramblings.core.dates import utc_now
from ramblings.core.errors import PostConflictError, StoreError
from ramblings.crud.base import CollectionCRUD
from ramblings.database.engine import DB_KEYS
from ramblings.database.store import ContentStore
from ramblings.models.blog import Post, PostStatus
from ramblings.schemas.blog import PostCreate, PostUpdate
from ramblings.schemas.search import SearchFilters
from ramblings.services.search_service import SearchService

logger = logging.getLogger(__name__)


def generate_slug(title: str) -> str:
    """Generate a URL slug from a post title."""
    slug = title.lower()
    slug = re.sub(r'[^a-z0-9]+', '-', slug)  # Collapse everything else into one hyphen
    return slug.strip('-')


class PostCRUD(CollectionCRUD[Post]):
    collection_key = DB_KEYS["POSTS"]
    model = Post

    async def get_posts(self, store: ContentStore) -> List[Post]:
        """Get all posts in storage order."""
        return await self.get_all(store)

    async def get_post(self, store: ContentStore, slug: str) -> Optional[Post]:
        """Get post by slug."""
        return await self.get_one(store, slug)

    async def get_sorted_posts(self, store: ContentStore) -> List[Post]:
        """Get all posts, newest publish date first."""
        posts = await self.get_all(store)
        return SearchService.search_posts(posts, SearchFilters()).items

    async def get_published_posts(self, store: ContentStore) -> List[Post]:
        """Get published posts, newest publish date first."""
        return [
            post for post in await self.get_sorted_posts(store)
            if post.status == PostStatus.published.value
        ]

    async def create_post(self, store: ContentStore, post_data: PostCreate) -> Optional[Post]:
        """
        Create a new blog post keyed by the slug of its title.

        Returns None if the store failed; nothing is written in that case.

        Raises:
            PostConflictError: If a post with the same slug already exists
        """
        slug = generate_slug(post_data.title)
        now = utc_now()
        publish_date = post_data.date or now.date()

        post = Post(
            **post_data.model_dump(mode="json", exclude={'date'}),
            slug=slug,
            date=publish_date.isoformat(),
            created_at=now,
            updated_at=now,
        )

        def change(records):
            if slug in records:
                raise PostConflictError(slug)
            records[slug] = self._dump(post)
            return True, post

        try:
            created = await self.mutate(store, change)
        except StoreError as e:
            logger.error(f"Error creating post {slug}: {e}")
            return None

        logger.info(f"Post created: {slug}")
        return created

    async def update_post(self, store: ContentStore, slug: str, post_data: PostUpdate) -> bool:
        """
        Update fields of an existing post. The slug never changes.

        Returns False if the post does not exist or the store failed.
        """
        update_data = post_data.model_dump(mode="json", exclude_unset=True, exclude_none=True)
        update_data["updated_at"] = utc_now().isoformat()
        return await self.update_fields(store, slug, update_data)

    async def delete_post(self, store: ContentStore, slug: str) -> bool:
        """Delete post. Returns False if it does not exist or the store failed."""
        deleted = await self.delete(store, slug)
        if deleted:
            logger.info(f"Post deleted: {slug}")
        return deleted


post_crud = PostCRUD()
