"""
Key-value document store for the blog's content collections.

Each key holds one whole JSON document that is read and replaced as a unit.
Writes can be made conditional on the document version seen at read time
(a SHA-256 digest of the stored JSON text), which lets repositories detect
a concurrent read-modify-write instead of silently losing it.

Backends:
- MemoryContentStore: process-local, used for tests and development
- FileContentStore: one ``<key>.json`` file per document
- RedisContentStore: one Redis string per document, WATCH/MULTI for swaps
"""
import asyncio
import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import aiofiles.os
import redis.asyncio as redis_async
from redis.exceptions import RedisError, WatchError

from ramblings.core.errors import StoreUnavailableError, VersionConflictError

logger = logging.getLogger(__name__)

_UNCONDITIONAL = object()


def document_version(raw: Optional[str]) -> Optional[str]:
    """Version tag of a stored document; None when the key is absent."""
    if raw is None:
        return None
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass
class Snapshot:
    """A document together with the version it was read at."""
    document: Optional[Any]
    version: Optional[str]

    @property
    def exists(self) -> bool:
        return self.version is not None


class ContentStore:
    """
    Base class for document stores.

    Subclasses only move JSON text around; encoding, decoding and version
    tagging live here so every backend behaves the same.
    """

    def __init__(self, key_prefix: str = ""):
        self.key_prefix = key_prefix

    def full_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def _load_raw(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def _write_raw(self, key: str, raw: str, expected_version: Any) -> None:
        raise NotImplementedError

    @staticmethod
    def _encode(document: Any) -> str:
        return json.dumps(document, ensure_ascii=False, indent=2, sort_keys=False)

    def _decode(self, key: str, raw: Optional[str]) -> Optional[Any]:
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreUnavailableError(key, f"corrupt document: {e}") from e

    async def read(self, key: str) -> Snapshot:
        """Read a document and the version it was read at."""
        full_key = self.full_key(key)
        raw = await self._load_raw(full_key)
        return Snapshot(document=self._decode(full_key, raw), version=document_version(raw))

    async def get(self, key: str) -> Optional[Any]:
        """Read a document, or None when the key does not exist yet."""
        return (await self.read(key)).document

    async def put(self, key: str, document: Any) -> str:
        """Replace a document unconditionally. Returns the new version."""
        raw = self._encode(document)
        await self._write_raw(self.full_key(key), raw, _UNCONDITIONAL)
        return document_version(raw)

    async def compare_and_put(
        self,
        key: str,
        document: Any,
        expected_version: Optional[str],
    ) -> str:
        """
        Replace a document only if it is still at ``expected_version``.

        ``expected_version=None`` means the key must not exist yet.

        Raises:
            VersionConflictError: If another writer got there first
        """
        raw = self._encode(document)
        await self._write_raw(self.full_key(key), raw, expected_version)
        return document_version(raw)

    async def close(self) -> None:
        """Release backend resources."""
        return None


class MemoryContentStore(ContentStore):
    """In-memory document store for development/testing."""

    def __init__(self, documents: Optional[Dict[str, Any]] = None, key_prefix: str = ""):
        super().__init__(key_prefix)
        self._documents: Dict[str, str] = {}
        self._lock = asyncio.Lock()
        for key, document in (documents or {}).items():
            self._documents[self.full_key(key)] = self._encode(document)

    async def _load_raw(self, key: str) -> Optional[str]:
        return self._documents.get(key)

    async def _write_raw(self, key: str, raw: str, expected_version: Any) -> None:
        async with self._lock:
            if expected_version is not _UNCONDITIONAL:
                current = document_version(self._documents.get(key))
                if current != expected_version:
                    raise VersionConflictError(key, expected_version, current)
            self._documents[key] = raw


class FileContentStore(ContentStore):
    """
    Filesystem document store: one JSON file per key.

    Documents are written to a temporary sibling and renamed over the
    target so readers never observe a half-written file. Version checks are
    serialized by a process-local lock; run a single worker per content
    directory.
    """

    def __init__(self, content_dir: str = "./content", key_prefix: str = ""):
        super().__init__(key_prefix)
        self.content_dir = Path(content_dir)
        self.content_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    def path_for(self, key: str) -> Path:
        return self.content_dir / f"{key}.json"

    async def _load_raw(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StoreUnavailableError(key, str(e)) from e

    async def _write_raw(self, key: str, raw: str, expected_version: Any) -> None:
        path = self.path_for(key)
        tmp_path = path.with_name(f".{path.name}.tmp")

        async with self._lock:
            if expected_version is not _UNCONDITIONAL:
                current = document_version(await self._load_raw(key))
                if current != expected_version:
                    raise VersionConflictError(key, expected_version, current)
            try:
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    await f.write(raw)
                await aiofiles.os.replace(tmp_path, path)
            except OSError as e:
                logger.error(f"Failed to write {path}: {e}")
                raise StoreUnavailableError(key, str(e)) from e


class RedisContentStore(ContentStore):
    """
    Redis-backed document store for production use.
    Conditional writes use WATCH/MULTI so they are safe across workers.
    """

    def __init__(self, redis_client, key_prefix: str = ""):
        """
        Initialize with a Redis client.

        Args:
            redis_client: redis.asyncio client created with decode_responses=True
            key_prefix: Namespace prepended to every document key
        """
        super().__init__(key_prefix)
        self.redis = redis_client

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "") -> "RedisContentStore":
        client = redis_async.from_url(url, decode_responses=True, socket_connect_timeout=5)
        return cls(client, key_prefix=key_prefix)

    async def _load_raw(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            logger.error(f"Failed to read {key} from Redis: {e}")
            raise StoreUnavailableError(key, str(e)) from e

    async def _write_raw(self, key: str, raw: str, expected_version: Any) -> None:
        try:
            if expected_version is _UNCONDITIONAL:
                await self.redis.set(key, raw)
                return

            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                current = document_version(await pipe.get(key))
                if current != expected_version:
                    await pipe.unwatch()
                    raise VersionConflictError(key, expected_version, current)
                pipe.multi()
                pipe.set(key, raw)
                await pipe.execute()
        except WatchError as e:
            raise VersionConflictError(key, expected_version, None) from e
        except RedisError as e:
            logger.error(f"Failed to write {key} to Redis: {e}")
            raise StoreUnavailableError(key, str(e)) from e

    async def close(self) -> None:
        await self.redis.aclose()
