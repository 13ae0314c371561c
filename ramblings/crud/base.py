# ramblings/crud/base.py
"""
Read-modify-write access to one content collection.

A collection is a single store document mapping identifier -> record.
Reads fetch the whole document; every mutation re-reads it, applies a
change in memory and writes the whole document back with a version check.
If another writer replaced the document in between, the mutation is
re-applied to the fresh copy, up to ``max_attempts`` times.
"""
import logging
import secrets
import string
import time
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ramblings.core.config import settings
from ramblings.core.errors import StoreError, VersionConflictError, WriteConflictError
from ramblings.database.store import ContentStore

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
ResultT = TypeVar("ResultT")

Records = Dict[str, Dict[str, Any]]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_token_id(prefix: str) -> str:
    """Time-ordered identifier: ``<prefix>_<epoch ms>_<9 random base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


class CollectionCRUD(Generic[ModelT]):
    collection_key: str
    model: Type[ModelT]

    def __init__(self, max_attempts: Optional[int] = None):
        self.max_attempts = max_attempts or settings.STORE_WRITE_RETRIES

    def _parse(self, records: Records) -> Dict[str, ModelT]:
        parsed: Dict[str, ModelT] = {}
        for key, record in records.items():
            try:
                parsed[key] = self.model.model_validate(record)
            except ValidationError as e:
                logger.warning(f"Skipping malformed {self.collection_key} record {key}: {e}")
        return parsed

    @staticmethod
    def _as_records(document: Any) -> Records:
        return document if isinstance(document, dict) else {}

    @staticmethod
    def _dump(item: BaseModel) -> Dict[str, Any]:
        return item.model_dump(mode="json")

    async def get_map(self, store: ContentStore) -> Dict[str, ModelT]:
        """
        Fetch the whole collection keyed by identifier.

        Returns an empty mapping when the document does not exist or the
        store cannot be read.
        """
        try:
            document = await store.get(self.collection_key)
        except StoreError as e:
            logger.error(f"Error getting {self.collection_key}: {e}")
            return {}
        return self._parse(self._as_records(document))

    async def get_all(self, store: ContentStore) -> List[ModelT]:
        return list((await self.get_map(store)).values())

    async def get_one(self, store: ContentStore, key: str) -> Optional[ModelT]:
        return (await self.get_map(store)).get(key)

    async def mutate(
        self,
        store: ContentStore,
        change: Callable[[Records], Tuple[bool, ResultT]],
    ) -> ResultT:
        """
        Apply ``change`` to the collection and write it back.

        ``change`` receives a fresh copy of the raw records and returns
        ``(dirty, result)``; nothing is written when ``dirty`` is False.
        It may be called more than once, so it must not have side effects
        beyond editing the records it is given.

        Raises:
            WriteConflictError: If every attempt lost a race with another writer
            StoreError: If the store cannot be read or written
        """
        for attempt in range(1, self.max_attempts + 1):
            snapshot = await store.read(self.collection_key)
            records = dict(self._as_records(snapshot.document))

            dirty, result = change(records)
            if not dirty:
                return result

            try:
                await store.compare_and_put(self.collection_key, records, snapshot.version)
                return result
            except VersionConflictError:
                logger.warning(
                    f"Concurrent write to {self.collection_key} "
                    f"(attempt {attempt}/{self.max_attempts}), retrying"
                )

        logger.error(f"Giving up on {self.collection_key} after {self.max_attempts} conflicts")
        raise WriteConflictError(self.collection_key, self.max_attempts)

    async def update_fields(
        self,
        store: ContentStore,
        key: str,
        fields: Dict[str, Any],
    ) -> bool:
        """
        Merge ``fields`` over an existing record.

        Returns False if the record does not exist (no upsert) or the
        store failed.
        """
        def change(records: Records):
            if key not in records:
                return False, False
            records[key] = {**records[key], **fields}
            return True, True

        try:
            return await self.mutate(store, change)
        except StoreError as e:
            logger.error(f"Error updating {self.collection_key} record {key}: {e}")
            return False

    async def delete(self, store: ContentStore, key: str) -> bool:
        """Remove one record. Returns False if it does not exist or the store failed."""
        def change(records: Records):
            if key not in records:
                return False, False
            del records[key]
            return True, True

        try:
            return await self.mutate(store, change)
        except StoreError as e:
            logger.error(f"Error deleting {self.collection_key} record {key}: {e}")
            return False
