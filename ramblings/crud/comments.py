# ramblings/crud/comments.py
from typing import List, Optional
import logging

from ramblings.core.dates import utc_now
from ramblings.core.errors import StoreError
from ramblings.crud.base import CollectionCRUD, generate_token_id
from ramblings.database.engine import DB_KEYS
from ramblings.database.store import ContentStore
from ramblings.models.blog import Comment, CommentStatus
from ramblings.schemas.blog import CommentCreate, CommentStats
from ramblings.schemas.search import SearchFilters, SortOrder
from ramblings.services.search_service import SearchService

logger = logging.getLogger(__name__)


class CommentCRUD(CollectionCRUD[Comment]):
    collection_key = DB_KEYS["COMMENTS"]
    model = Comment

    async def get_all_comments(self, store: ContentStore) -> List[Comment]:
        """Get every comment regardless of status, newest first (admin view)."""
        comments = await self.get_all(store)
        return SearchService.search_comments(comments, SearchFilters()).items

    async def get_comments_for_post(self, store: ContentStore, post_slug: str) -> List[Comment]:
        """Get approved comments for a post in the order they were submitted."""
        comments = [
            comment for comment in await self.get_all(store)
            if comment.post_slug == post_slug and comment.status == CommentStatus.approved
        ]
        return SearchService.search_comments(comments, SearchFilters(sort_order=SortOrder.asc)).items

    async def get_comment(self, store: ContentStore, comment_id: str) -> Optional[Comment]:
        return await self.get_one(store, comment_id)

    async def add_comment(
        self,
        store: ContentStore,
        comment_data: CommentCreate,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[Comment]:
        """
        Store a new comment awaiting moderation.

        New comments always start as pending. Returns None if the store
        failed.
        """
        comment = Comment(
            id=generate_token_id("comment"),
            post_slug=comment_data.post_slug,
            author=comment_data.author,
            email=comment_data.email,
            content=comment_data.content,
            status=CommentStatus.pending,
            created_at=utc_now(),
            ip_address=ip_address,
            user_agent=user_agent,
        )

        def change(records):
            records[comment.id] = self._dump(comment)
            return True, comment

        try:
            created = await self.mutate(store, change)
        except StoreError as e:
            logger.error(f"Error adding comment to {comment_data.post_slug}: {e}")
            return None

        logger.info(f"Comment {created.id} submitted for {created.post_slug}")
        return created

    async def update_comment_status(
        self,
        store: ContentStore,
        comment_id: str,
        status: CommentStatus,
    ) -> bool:
        """Moderate a comment. Returns False if it does not exist or the store failed."""
        return await self.update_fields(
            store,
            comment_id,
            {"status": status.value, "updated_at": utc_now().isoformat()},
        )

    async def delete_comment(self, store: ContentStore, comment_id: str) -> bool:
        return await self.delete(store, comment_id)

    async def get_comment_stats(self, store: ContentStore) -> CommentStats:
        comments = await self.get_all(store)
        return CommentStats(
            total=len(comments),
            pending=sum(1 for c in comments if c.status == CommentStatus.pending),
            approved=sum(1 for c in comments if c.status == CommentStatus.approved),
            rejected=sum(1 for c in comments if c.status == CommentStatus.rejected),
        )


comment_crud = CommentCRUD()
