"""
Tests for the storage service (uploads to Supabase Storage).

Supabase Storage is mocked; tests check object paths, upload validation
and signed URL handling.
"""

import pytest
from unittest.mock import MagicMock

from sparklink.services.storage import (
    build_storage_path,
    delete_file,
    get_signed_url,
    resolve_content_type,
    upload_file,
    validate_upload,
)
from sparklink.utils.constants import GALLERY_IMAGE_TYPES


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client with storage capability."""
    client = MagicMock()
    client.storage.from_().create_signed_url.return_value = {
        "signedURL": "https://example.supabase.co/storage/v1/object/sign/resumes/resume/u1/cv.pdf?token=t"
    }
    return client


class TestResolveContentType:

    def test_declared_type_wins(self):
        assert resolve_content_type("photo.png", "image/jpeg") == "image/jpeg"

    def test_guessed_from_filename(self):
        assert resolve_content_type("cv.pdf", None) == "application/pdf"
        assert resolve_content_type("photo.png", "application/octet-stream") == "image/png"

    def test_unknown(self):
        assert resolve_content_type("blob", None) == "application/octet-stream"


class TestValidateUpload:

    def test_accepts_allowed_type(self):
        validate_upload("image/png", 1024, GALLERY_IMAGE_TYPES, 5 * 1024 * 1024)

    def test_rejects_empty_file(self):
        with pytest.raises(ValueError, match="empty"):
            validate_upload("image/png", 0, GALLERY_IMAGE_TYPES, 1024)

    def test_rejects_type(self):
        with pytest.raises(ValueError, match="Unsupported file type"):
            validate_upload("application/pdf", 10, GALLERY_IMAGE_TYPES, 1024)

    def test_rejects_size(self):
        with pytest.raises(ValueError, match="Maximum size is 5MB"):
            validate_upload("image/png", 5 * 1024 * 1024 + 1, GALLERY_IMAGE_TYPES, 5 * 1024 * 1024)


class TestBuildStoragePath:

    def test_keeps_extension(self):
        path = build_storage_path("gallery", "user-1", "Sunset.JPG", "image/jpeg")

        folder, user_id, name = path.split("/")
        assert (folder, user_id) == ("gallery", "user-1")
        assert name.endswith(".jpg")

    def test_extension_from_content_type(self):
        assert build_storage_path("profile", "user-1", "avatar", "image/webp").endswith(".webp")

    def test_paths_are_unique(self):
        first = build_storage_path("gallery", "user-1", "a.png", "image/png")
        second = build_storage_path("gallery", "user-1", "a.png", "image/png")
        assert first != second


class TestUploadFile:

    @pytest.mark.asyncio
    async def test_upload_success_returns_storage_path(self, mock_supabase_client):
        storage_path = await upload_file(
            mock_supabase_client,
            "media",
            "gallery",
            "test-user-123",
            b"fake-image-data",
            "photo.png",
            None,
        )

        assert storage_path.startswith("gallery/test-user-123/")
        assert storage_path.endswith(".png")
        mock_supabase_client.storage.from_.assert_called_with("media")
        kwargs = mock_supabase_client.storage.from_().upload.call_args.kwargs
        assert kwargs["path"] == storage_path
        assert kwargs["file"] == b"fake-image-data"
        assert kwargs["file_options"] == {"content-type": "image/png"}

    @pytest.mark.asyncio
    async def test_upload_failure_propagates(self, mock_supabase_client):
        mock_supabase_client.storage.from_().upload.side_effect = Exception("Storage error")

        with pytest.raises(Exception, match="Storage error"):
            await upload_file(mock_supabase_client, "media", "gallery", "u1", b"x", "a.png", "image/png")


class TestDeleteFile:

    @pytest.mark.asyncio
    async def test_delete(self, mock_supabase_client):
        assert await delete_file(mock_supabase_client, "media", "gallery/u1/a.png") is True
        mock_supabase_client.storage.from_().remove.assert_called_once_with(["gallery/u1/a.png"])

    @pytest.mark.asyncio
    async def test_delete_never_raises(self, mock_supabase_client):
        mock_supabase_client.storage.from_().remove.side_effect = Exception("gone")

        assert await delete_file(mock_supabase_client, "media", "gallery/u1/a.png") is False

    @pytest.mark.asyncio
    async def test_delete_without_path(self, mock_supabase_client):
        assert await delete_file(mock_supabase_client, "media", None) is False
        mock_supabase_client.storage.from_().remove.assert_not_called()


class TestGetSignedUrl:

    def test_dict_response(self, mock_supabase_client):
        url = get_signed_url(mock_supabase_client, "resumes", "resume/u1/cv.pdf", expires_in=300)

        assert url.endswith("?token=t")
        mock_supabase_client.storage.from_().create_signed_url.assert_called_with(
            path="resume/u1/cv.pdf", expires_in=300
        )

    def test_failure_propagates(self, mock_supabase_client):
        mock_supabase_client.storage.from_().create_signed_url.side_effect = Exception("denied")

        with pytest.raises(Exception, match="denied"):
            get_signed_url(mock_supabase_client, "resumes", "resume/u1/cv.pdf")
