import pytest

from ramblings.crud.posts import post_crud
from ramblings.database.seed import WELCOME_SLUG, initialize_database
from ramblings.database.store import MemoryContentStore


class TestInitializeDatabase:
    @pytest.mark.asyncio
    async def test_seeds_empty_store(self, store):
        assert await initialize_database(store) is True

        post = await post_crud.get_post(store, WELCOME_SLUG)
        assert post.title == "Welcome to JS Blog"
        assert post.status == "published"
        assert post.date == "2025-01-15"
        assert post.tags == ["welcome", "sample"]
        assert await store.get("comments") == {}
        assert await store.get("images") == {}

    @pytest.mark.asyncio
    async def test_leaves_existing_content_alone(self, seeded_store):
        before = await seeded_store.get("posts")

        assert await initialize_database(seeded_store) is False

        assert await seeded_store.get("posts") == before

    @pytest.mark.asyncio
    async def test_existing_comments_are_kept(self):
        store = MemoryContentStore(documents={"posts": {}, "comments": {"c": {"id": "c"}}})

        assert await initialize_database(store) is True

        assert await store.get("comments") == {"c": {"id": "c"}}
        assert await store.get("images") == {}
