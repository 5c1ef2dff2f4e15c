"""
Gallery content for the public site: before/after photos and the about
section image. Images are referenced by URL, not uploaded.
"""

import logging
from typing import List, Optional
from urllib.parse import urlparse

from models.gallery import GalleryImage, GalleryImageCreate, ImageType
from utils.exceptions import GalleryImageNotFoundError, ValidationError
from utils.validation import validate_image_url

logger = logging.getLogger(__name__)


def _image_type(value) -> ImageType:
    try:
        return ImageType(value)
    except ValueError as e:
        raise ValidationError(f"Unknown image type: {value}") from e


def filename_from_url(url: str) -> str:
    path = urlparse(url).path
    return path.rstrip("/").rsplit("/", 1)[-1] or "image"


class GalleryManager:
    """Reads are public; callers must hold a DeveloperSession to mutate."""

    def __init__(self, db):
        self.db = db

    async def add_image_url(self, url: str, image_type: ImageType) -> GalleryImage:
        url = (url or "").strip()
        if not validate_image_url(url):
            raise ValidationError(
                "Please enter a valid image URL (jpg, jpeg, png, gif or webp)"
            )
        image_type = _image_type(image_type)
        filename = filename_from_url(url)

        image = await self.db.create_gallery_image(
            GalleryImageCreate(
                filename=filename,
                image_type=image_type,
                storage_path=url,
                title=f"{image_type.value.capitalize()} - {filename}",
            )
        )
        logger.info(f"Added {image_type.value} image {filename}")
        return image

    async def list_images(self, image_type: Optional[ImageType] = None) -> List[GalleryImage]:
        if image_type is not None:
            image_type = _image_type(image_type)
        return await self.db.get_gallery_images(image_type)

    async def remove_image(self, image_id: str) -> None:
        if not await self.db.delete_gallery_image(image_id):
            raise GalleryImageNotFoundError(f"Gallery image {image_id} not found")

    async def clear_type(self, image_type: ImageType) -> int:
        image_type = _image_type(image_type)
        deleted = await self.db.delete_gallery_images(image_type)
        logger.info(f"Cleared {deleted} {image_type.value} image(s)")
        return deleted

    async def clear_all(self) -> int:
        deleted = await self.db.delete_gallery_images()
        logger.info(f"Cleared {deleted} gallery image(s)")
        return deleted
