"""Gallery image models for the before/after gallery and about section."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, computed_field


class ImageType(str, Enum):
    """Where an image is shown on the site."""

    BEFORE = "before"
    AFTER = "after"
    ABOUT = "about"


class GalleryImage(BaseModel):
    """Row of the ``gallery_images`` table. ``storage_path`` holds the URL."""

    id: Optional[str] = None
    filename: str
    image_type: ImageType
    storage_path: str
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        use_enum_values = True

    @computed_field
    @property
    def url(self) -> str:
        return self.storage_path


class GalleryImageCreate(BaseModel):
    """Gallery image creation model."""

    filename: str
    image_type: ImageType
    storage_path: str
    title: Optional[str] = None
    description: Optional[str] = None

    class Config:
        use_enum_values = True
