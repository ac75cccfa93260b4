"""
Resume service.

One PDF resume per profile, stored in the private resumes bucket. Visitors
download it through a short-lived signed URL, and only while the profile
is published and the owner allows downloads.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, cast

from supabase import Client

from sparklink.config import settings
from sparklink.services.errors import ForbiddenError, NotFoundError
from sparklink.services.profile_service import get_or_create_profile
from sparklink.services.storage import delete_file, get_signed_url, upload_file
from sparklink.services.user_service import get_user_by_username

logger = logging.getLogger(__name__)

DOWNLOAD_URL_TTL_SECONDS = 300

_CLEARED_RESUME = {
    "resume_path": None,
    "resume_file_name": None,
    "resume_uploaded_at": None,
    "allow_resume_download": False,
}


def resume_info(profile: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "has_resume": bool(profile.get("resume_path")),
        "resume_file_name": profile.get("resume_file_name"),
        "resume_uploaded_at": profile.get("resume_uploaded_at"),
        "allow_resume_download": bool(profile.get("allow_resume_download")),
    }


async def _update_profile(supabase_client: Client, profile_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
    result = (
        supabase_client.table("profile")
        .update(values)
        .eq("id", profile_id)
        .execute()
    )
    if not result.data:
        raise Exception("Failed to update profile: no data returned")
    return cast(Dict[str, Any], result.data[0])


async def upload_resume(
    supabase_client: Client,
    user_id: str,
    file_bytes: bytes,
    filename: str,
) -> Dict[str, Any]:
    """
    Store a new resume, replacing any previous file.

    Downloads are enabled on every new upload.

    Returns:
        Resume info dict (see resume_info)
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    bucket = settings.SUPABASE_RESUME_BUCKET
    previous_path = profile.get("resume_path")

    storage_path = await upload_file(
        supabase_client,
        bucket=bucket,
        folder="resume",
        user_id=user_id,
        file_bytes=file_bytes,
        filename=filename,
        content_type="application/pdf",
    )

    updated = await _update_profile(supabase_client, profile["id"], {
        "resume_path": storage_path,
        "resume_file_name": filename,
        "resume_uploaded_at": datetime.now(timezone.utc).isoformat(),
        "allow_resume_download": True,
    })

    if previous_path:
        await delete_file(supabase_client, bucket, previous_path)

    logger.info(f"Resume uploaded for user {user_id}")
    return resume_info(updated)


async def get_resume_info(supabase_client: Client, user_id: str) -> Dict[str, Any]:
    profile = await get_or_create_profile(supabase_client, user_id)
    return resume_info(profile)


async def update_resume_settings(
    supabase_client: Client,
    user_id: str,
    allow_resume_download: bool,
) -> Dict[str, Any]:
    """
    Raises:
        ValueError: No resume uploaded
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    if not profile.get("resume_path"):
        raise ValueError("No resume uploaded")

    updated = await _update_profile(
        supabase_client, profile["id"], {"allow_resume_download": allow_resume_download}
    )
    logger.info(f"Resume downloads for user {user_id} set to {allow_resume_download}")
    return resume_info(updated)


async def delete_resume(supabase_client: Client, user_id: str) -> None:
    """
    Raises:
        ValueError: No resume uploaded
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    storage_path = profile.get("resume_path")
    if not storage_path:
        raise ValueError("No resume uploaded")

    await _update_profile(supabase_client, profile["id"], dict(_CLEARED_RESUME))
    await delete_file(supabase_client, settings.SUPABASE_RESUME_BUCKET, storage_path)
    logger.info(f"Resume deleted for user {user_id}")


async def _get_public_profile(service_client: Client, username: str) -> tuple:
    user = await get_user_by_username(service_client, username, columns="id, username")
    if not user:
        raise NotFoundError("User not found")

    result = (
        service_client.table("profile")
        .select("id, is_published, resume_path, resume_file_name, resume_uploaded_at, allow_resume_download")
        .eq("user_id", user["id"])
        .execute()
    )
    if not result.data:
        raise NotFoundError("Profile not found")
    return user, cast(Dict[str, Any], result.data[0])


async def get_public_resume_info(service_client: Client, username: str) -> Dict[str, Any]:
    """
    Resume info a visitor may see. File details stay hidden unless the
    profile is published and downloads are allowed.
    """
    _, profile = await _get_public_profile(service_client, username)

    visible = bool(profile.get("is_published")) and bool(profile.get("allow_resume_download"))
    info = resume_info(profile)
    if not visible:
        info["resume_file_name"] = None
        info["resume_uploaded_at"] = None
    info["has_resume"] = info["has_resume"] and visible
    return info


async def get_resume_download(service_client: Client, username: str) -> Dict[str, Optional[str]]:
    """
    Signed download URL for a visitor.

    Returns:
        {"url": signed URL, "user_id": owner id, "file_name": original name}

    Raises:
        NotFoundError: Unknown user or no resume
        ForbiddenError: Profile unpublished or downloads disabled
    """
    user, profile = await _get_public_profile(service_client, username)

    if not profile.get("is_published"):
        raise ForbiddenError("This profile is not published")
    if not profile.get("resume_path"):
        raise NotFoundError("No resume available")
    if not profile.get("allow_resume_download"):
        raise ForbiddenError("Resume downloads are disabled for this profile")

    url = get_signed_url(
        service_client,
        settings.SUPABASE_RESUME_BUCKET,
        profile["resume_path"],
        expires_in=DOWNLOAD_URL_TTL_SECONDS,
    )
    return {"url": url, "user_id": str(user["id"]), "file_name": profile.get("resume_file_name")}
