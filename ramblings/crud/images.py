# ramblings/crud/images.py
from collections import Counter
from typing import List, Optional
import logging

from ramblings.core.dates import utc_now
from ramblings.core.errors import StoreError, WriteConflictError
from ramblings.core.storage import ImageStorage, extension_for_mime_type
from ramblings.crud.base import CollectionCRUD, generate_token_id
from ramblings.database.engine import DB_KEYS
from ramblings.database.store import ContentStore
from ramblings.models.blog import Image
from ramblings.schemas.images import ImageStats, ImageUpdate
from ramblings.schemas.search import SearchFilters
from ramblings.services.search_service import SearchService

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class ImageCRUD(CollectionCRUD[Image]):
    """
    Image metadata lives in the ``images`` document; the binaries live in
    ImageStorage. Every operation here keeps the two in step.
    """
    collection_key = DB_KEYS["IMAGES"]
    model = Image

    async def get_all_images(self, store: ContentStore) -> List[Image]:
        """Get all images, most recently uploaded first."""
        images = await self.get_all(store)
        return SearchService.search_images(images, SearchFilters()).items

    async def get_image(self, store: ContentStore, image_id: str) -> Optional[Image]:
        return await self.get_one(store, image_id)

    async def upload_image(
        self,
        store: ContentStore,
        storage: ImageStorage,
        content: bytes,
        original_name: str,
        mime_type: str,
        alt: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Optional[Image]:
        """
        Store an image binary and record its metadata.

        The binary is written first. If the metadata cannot be recorded the
        binary is removed again, so no file is left without a record.

        Returns:
            The new image, or None if the store failed

        Raises:
            ValueError: If the content is larger than the storage limit
            WriteConflictError: If concurrent writers kept winning the race
        """
        image_id = generate_token_id("img")
        filename = f"{image_id}.{extension_for_mime_type(mime_type)}"

        size = await storage.save_file(content, filename)

        image = Image(
            id=image_id,
            filename=filename,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            uploaded_at=utc_now(),
            url=storage.get_file_url(filename),
            alt=alt,
            description=description,
        )

        def change(records):
            records[image.id] = self._dump(image)
            return True, image

        try:
            created = await self.mutate(store, change)
        except (StoreError, WriteConflictError) as e:
            logger.error(f"Error recording image {image_id}, removing binary: {e}")
            await storage.delete_file(filename)
            if isinstance(e, WriteConflictError):
                raise
            return None

        logger.info(f"Image uploaded: {image_id} ({original_name}, {size} bytes)")
        return created

    async def update_image_metadata(
        self,
        store: ContentStore,
        image_id: str,
        image_data: ImageUpdate,
    ) -> bool:
        """
        Update alt text and/or description. Fields not sent are left alone;
        an explicit null clears them.

        Returns False if the image does not exist or the store failed.
        """
        update_data = image_data.model_dump(exclude_unset=True)
        if not update_data:
            return await self.get_image(store, image_id) is not None
        return await self.update_fields(store, image_id, update_data)

    async def delete_image(self, store: ContentStore, storage: ImageStorage, image_id: str) -> bool:
        """
        Delete an image's metadata and then its binary.

        Returns False if the image does not exist or its metadata could not
        be removed. A binary that cannot be removed afterwards is logged as
        orphaned; the image is gone from the site either way.
        """
        image = await self.get_image(store, image_id)
        if image is None:
            return False

        if not await self.delete(store, image_id):
            return False

        if not await storage.delete_file(image.filename):
            logger.error(f"Orphaned image binary left behind: {image.filename}")

        logger.info(f"Image deleted: {image_id}")
        return True

    async def get_image_stats(self, store: ContentStore) -> ImageStats:
        images = await self.get_all(store)
        total_size = sum(image.size for image in images)
        return ImageStats(
            total_images=len(images),
            total_size=total_size,
            total_size_mb=f"{total_size / BYTES_PER_MB:.2f}",
            by_type=dict(Counter(image.mime_type for image in images)),
        )


image_crud = ImageCRUD()
