"""
Unit tests for gallery content management.
"""

import pytest

from admin.gallery import GalleryManager, filename_from_url
from models.gallery import GalleryImage, ImageType
from utils.exceptions import GalleryImageNotFoundError, ValidationError
from utils.validation import validate_image_url


class TestImageUrls:
    """Test gallery URL validation."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://cdn.example.com/cuts/fade.jpg",
            "http://example.com/a.PNG",
            "https://example.com/b.webp?width=800",
        ],
    )
    def test_accepted(self, url):
        assert validate_image_url(url) is True

    @pytest.mark.parametrize(
        "url",
        ["ftp://example.com/a.jpg", "https://example.com/a.bmp", "https://example.com/", ""],
    )
    def test_rejected(self, url):
        assert validate_image_url(url) is False

    def test_filename_from_url(self):
        assert filename_from_url("https://cdn.example.com/cuts/fade.jpg?x=1") == "fade.jpg"


class TestGalleryManager:
    """Test GalleryManager operations."""

    @pytest.mark.asyncio
    async def test_add_image_url(self, mock_db):
        mock_db.create_gallery_image.return_value = GalleryImage(
            id="g1", filename="fade.jpg", image_type="before",
            storage_path="https://cdn.example.com/fade.jpg", title="Before - fade.jpg",
        )

        image = await GalleryManager(mock_db).add_image_url(
            " https://cdn.example.com/fade.jpg ", "before"
        )

        assert image.url == "https://cdn.example.com/fade.jpg"
        (created,) = mock_db.create_gallery_image.await_args.args
        assert created.filename == "fade.jpg"
        assert created.title == "Before - fade.jpg"
        assert created.image_type == "before"
        assert created.storage_path == "https://cdn.example.com/fade.jpg"

    @pytest.mark.asyncio
    async def test_invalid_url_rejected(self, mock_db):
        with pytest.raises(ValidationError):
            await GalleryManager(mock_db).add_image_url("https://example.com/page", "after")
        mock_db.create_gallery_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, mock_db):
        with pytest.raises(ValidationError):
            await GalleryManager(mock_db).add_image_url("https://example.com/a.jpg", "banner")

    @pytest.mark.asyncio
    async def test_list_by_type(self, mock_db):
        await GalleryManager(mock_db).list_images("about")
        mock_db.get_gallery_images.assert_awaited_once_with(ImageType.ABOUT)

    @pytest.mark.asyncio
    async def test_remove_missing_image(self, mock_db):
        mock_db.delete_gallery_image.return_value = False
        with pytest.raises(GalleryImageNotFoundError):
            await GalleryManager(mock_db).remove_image("g404")

    @pytest.mark.asyncio
    async def test_clear_type_and_all(self, mock_db):
        mock_db.delete_gallery_images.return_value = 2
        gallery = GalleryManager(mock_db)

        assert await gallery.clear_type("about") == 2
        mock_db.delete_gallery_images.assert_awaited_with(ImageType.ABOUT)

        await gallery.clear_all()
        mock_db.delete_gallery_images.assert_awaited_with()
