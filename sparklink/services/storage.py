"""
Supabase Storage service for user uploads.

Buckets (see config):
- media: profile pictures, background banners, gallery images (public)
- resumes: PDF resumes (private, served through signed URLs)
- verification-documents: verification evidence (private, admin only)

Objects are stored under {folder}/{user_id}/{uuid}.{ext} so storage
policies can scope access by the user id path segment.
"""

import logging
import mimetypes
from typing import Iterable, Optional
from uuid import uuid4

from supabase import Client

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "application/pdf": "pdf",
}


def resolve_content_type(filename: str, content_type: Optional[str]) -> str:
    """Declared MIME type, else one guessed from the filename."""
    if content_type and content_type != "application/octet-stream":
        return content_type
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or "application/octet-stream"


def validate_upload(
    content_type: str,
    size: int,
    allowed_types: Iterable[str],
    max_bytes: int,
) -> None:
    """
    Check an upload against an allow-list and a size cap.

    Raises:
        ValueError: Empty file, disallowed type or file too large
    """
    allowed = tuple(allowed_types)
    if size == 0:
        raise ValueError("Uploaded file is empty")
    if content_type not in allowed:
        readable = ", ".join(_EXTENSIONS.get(t, t) for t in allowed)
        raise ValueError(f"Unsupported file type {content_type}. Allowed: {readable}")
    if size > max_bytes:
        raise ValueError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB")


def build_storage_path(folder: str, user_id: str, filename: str, content_type: str) -> str:
    if "." in (filename or ""):
        file_ext = filename.rsplit(".", 1)[1].lower()
    else:
        file_ext = _EXTENSIONS.get(content_type, "bin")
    return f"{folder}/{user_id}/{uuid4()}.{file_ext}"


async def upload_file(
    supabase_client: Client,
    bucket: str,
    folder: str,
    user_id: str,
    file_bytes: bytes,
    filename: str,
    content_type: Optional[str] = None,
) -> str:
    """
    Upload a file to Supabase Storage.

    Args:
        supabase_client: Authenticated Supabase client
        bucket: Target bucket name
        folder: Top-level folder ("profile", "gallery", "resume", ...)
        user_id: Owner of the object (path segment)
        file_bytes: Raw file contents
        filename: Original filename (used for the extension)
        content_type: MIME type; inferred from filename if missing

    Returns:
        Storage path of the new object

    Raises:
        Exception: If upload fails
    """
    content_type = resolve_content_type(filename, content_type)
    storage_path = build_storage_path(folder, user_id, filename, content_type)

    logger.info(
        f"Uploading file for user {user_id}: bucket={bucket}, "
        f"size={len(file_bytes)} bytes, content_type={content_type}, storage_path={storage_path}"
    )

    try:
        supabase_client.storage.from_(bucket).upload(
            path=storage_path,
            file=file_bytes,
            file_options={"content-type": content_type}
        )
    except Exception as e:
        logger.error(f"Failed to upload file to storage: {e}", exc_info=True)
        raise

    logger.info(f"Successfully uploaded file to storage: storage_path={storage_path}")
    return storage_path


async def delete_file(
    supabase_client: Client,
    bucket: str,
    storage_path: Optional[str],
) -> bool:
    """
    Remove an object from storage.

    Never raises: the database change that made the object obsolete has
    already happened, so a failed removal only leaves an orphan behind.

    Returns:
        True if the removal request succeeded, False otherwise
    """
    if not storage_path:
        logger.warning("delete_file called with empty storage_path")
        return False

    logger.info(f"Deleting file from storage: bucket={bucket}, storage_path={storage_path}")

    try:
        supabase_client.storage.from_(bucket).remove([storage_path])
    except Exception as e:
        logger.error(
            f"Failed to delete file from storage: storage_path={storage_path}, error={e}",
            exc_info=True
        )
        return False

    return True


def get_public_url(supabase_client: Client, bucket: str, storage_path: str) -> str:
    return str(supabase_client.storage.from_(bucket).get_public_url(storage_path))


def get_signed_url(
    supabase_client: Client,
    bucket: str,
    storage_path: str,
    expires_in: int = 3600,
) -> str:
    """
    Generate a time-limited URL for a private object.

    Raises:
        Exception: If URL generation fails
    """
    try:
        response = supabase_client.storage.from_(bucket).create_signed_url(
            path=storage_path,
            expires_in=expires_in
        )
    except Exception as e:
        logger.error(
            f"Failed to generate signed URL for storage_path={storage_path}: {e}",
            exc_info=True
        )
        raise

    # Response shape differs across storage client versions
    if isinstance(response, dict):
        url = response.get("signedURL") or response.get("signed_url") or response.get("signedUrl")
    else:
        url = getattr(response, "signed_url", None) or getattr(response, "signedURL", None)

    if not url:
        url = str(response)

    logger.debug(f"Generated signed URL for storage_path={storage_path}")
    return str(url)
