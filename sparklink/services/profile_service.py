"""
Profile service.

A profile is 1:1 with a user and holds the public page container: bio,
tagline, banner, template choice, social links and the publication flag.
Identity fields (names, username, country, phone, profile picture) live
on the `users` row and are edited through the same endpoint.
"""

import logging
from typing import Any, Dict, List, Optional, cast

from postgrest.exceptions import APIError
from supabase import Client

from sparklink.config import settings
from sparklink.services.errors import ConflictError, UpgradeRequiredError
from sparklink.services.storage import delete_file, get_public_url, upload_file
from sparklink.services.user_service import get_user, get_user_tier, update_user, validate_username
from sparklink.utils.constants import SOCIAL_PLATFORMS
from sparklink.utils.plans import get_limit, minimum_tier_for, plan_allows, within_limit

logger = logging.getLogger(__name__)

USER_FIELDS = ("first_name", "last_name", "username", "country", "phone")
PROFILE_FIELDS = ("bio", "tagline", "country_flag", "show_powered_by")

# kind -> (table, url column, path column, storage folder)
PROFILE_IMAGE_TARGETS = {
    "profile_picture": ("users", "profile_picture", "profile_picture_path", "profile"),
    "background_image": ("profile", "background_image", "background_image_path", "background"),
}


async def get_profile(supabase_client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    result = (
        supabase_client.table("profile")
        .select("*")
        .eq("user_id", user_id)
        .execute()
    )
    if not result.data:
        return None
    return cast(Dict[str, Any], result.data[0])


async def get_or_create_profile(supabase_client: Client, user_id: str) -> Dict[str, Any]:
    """
    Fetch the user's profile, creating an empty one on first access.

    New profiles start unpublished and show the "Powered by SparkLink" badge.
    """
    profile = await get_profile(supabase_client, user_id)
    if profile:
        return profile

    logger.info(f"Creating empty profile for user {user_id}")
    result = (
        supabase_client.table("profile")
        .insert({"user_id": user_id, "is_published": False, "show_powered_by": True})
        .execute()
    )
    if not result.data:
        raise Exception("Failed to create profile: no data returned")

    return cast(Dict[str, Any], result.data[0])


async def get_social_links(supabase_client: Client, profile_id: str) -> List[Dict[str, Any]]:
    result = (
        supabase_client.table("social_link")
        .select("*")
        .eq("profile_id", profile_id)
        .order("order")
        .execute()
    )
    return cast(List[Dict[str, Any]], result.data or [])


async def get_profile_bundle(supabase_client: Client, user_id: str) -> Dict[str, Any]:
    """
    User row, profile and ordered social links for the dashboard.

    Returns:
        {"user": dict | None, "profile": dict, "social_links": list}
    """
    user = await get_user(supabase_client, user_id)
    profile = await get_or_create_profile(supabase_client, user_id)
    social_links = await get_social_links(supabase_client, profile["id"])

    return {"user": user, "profile": profile, "social_links": social_links}


async def update_profile(
    supabase_client: Client,
    user_id: str,
    **updates: Any
) -> Dict[str, Any]:
    """
    Update identity and profile fields in one call.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: The authenticated user's ID
        **updates: Any of USER_FIELDS and PROFILE_FIELDS

    Returns:
        The refreshed profile bundle (see get_profile_bundle)

    Raises:
        ValueError: Invalid username
        ConflictError: Username already taken
        UpgradeRequiredError: Hiding the SparkLink badge on a plan that cannot

    Security:
        - RLS enforces user_id = auth.uid() on both tables
    """
    user_updates = {key: updates[key] for key in USER_FIELDS if key in updates}
    profile_updates = {key: updates[key] for key in PROFILE_FIELDS if key in updates}

    if "username" in user_updates:
        user_updates["username"] = validate_username(user_updates["username"])

    if profile_updates.get("show_powered_by") is False:
        tier = await get_user_tier(supabase_client, user_id)
        if not plan_allows(tier, "remove_branding"):
            required = minimum_tier_for("remove_branding")
            raise UpgradeRequiredError(
                f"Removing SparkLink branding requires a {required} subscription or higher",
                required_tier=required,
                current_tier=tier,
            )

    if user_updates:
        try:
            await update_user(supabase_client, user_id, **user_updates)
        except APIError as e:
            if e.code == "23505":  # unique_violation on users.username
                raise ConflictError("Username already taken")
            raise

    if profile_updates:
        profile = await get_or_create_profile(supabase_client, user_id)
        logger.info(f"Updating profile {profile['id']}: {list(profile_updates.keys())}")
        (
            supabase_client.table("profile")
            .update(profile_updates)
            .eq("id", profile["id"])
            .execute()
        )

    return await get_profile_bundle(supabase_client, user_id)


async def replace_social_links(
    supabase_client: Client,
    user_id: str,
    links: List[Dict[str, str]],
) -> List[Dict[str, Any]]:
    """
    Replace all social links; list position becomes `order`.

    Raises:
        ValueError: Unsupported platform
        UpgradeRequiredError: More links than the plan allows
    """
    for link in links:
        if link["platform"] not in SOCIAL_PLATFORMS:
            raise ValueError(
                f"Unsupported platform '{link['platform']}'. "
                f"Supported: {', '.join(SOCIAL_PLATFORMS)}"
            )

    tier = await get_user_tier(supabase_client, user_id)
    if not within_limit(tier, "social_links", len(links)):
        raise UpgradeRequiredError(
            f"Your plan allows up to {get_limit(tier, 'social_links')} social links",
            required_tier="RISE" if tier == "STARTER" else "BLAZE",
            current_tier=tier,
        )

    profile = await get_or_create_profile(supabase_client, user_id)
    profile_id = profile["id"]

    logger.info(f"Replacing social links for profile {profile_id}: count={len(links)}")
    supabase_client.table("social_link").delete().eq("profile_id", profile_id).execute()

    if not links:
        return []

    rows = [
        {"profile_id": profile_id, "platform": link["platform"], "url": link["url"], "order": index}
        for index, link in enumerate(links)
    ]
    result = supabase_client.table("social_link").insert(rows).execute()

    return sorted(cast(List[Dict[str, Any]], result.data or []), key=lambda row: row.get("order", 0))


async def set_published(supabase_client: Client, user_id: str, is_published: bool) -> Dict[str, Any]:
    profile = await get_or_create_profile(supabase_client, user_id)

    result = (
        supabase_client.table("profile")
        .update({"is_published": is_published})
        .eq("id", profile["id"])
        .execute()
    )
    if not result.data:
        raise Exception("Failed to update profile: no data returned")

    logger.info(f"Profile {profile['id']} is_published={is_published}")
    return cast(Dict[str, Any], result.data[0])


async def set_profile_image(
    supabase_client: Client,
    user_id: str,
    kind: str,
    file_bytes: bytes,
    filename: str,
    content_type: str,
) -> str:
    """
    Store a new profile picture or background banner.

    The previous object is removed after the row points at the new one.

    Args:
        kind: "profile_picture" or "background_image"

    Returns:
        Public URL of the uploaded image
    """
    table, url_column, path_column, folder = PROFILE_IMAGE_TARGETS[kind]
    bucket = settings.SUPABASE_MEDIA_BUCKET

    if table == "users":
        row = await get_user(supabase_client, user_id) or {}
    else:
        row = await get_or_create_profile(supabase_client, user_id)
    previous_path = row.get(path_column)

    storage_path = await upload_file(
        supabase_client,
        bucket=bucket,
        folder=folder,
        user_id=user_id,
        file_bytes=file_bytes,
        filename=filename,
        content_type=content_type,
    )
    url = get_public_url(supabase_client, bucket, storage_path)

    key_column = "id" if table == "users" else "user_id"
    (
        supabase_client.table(table)
        .update({url_column: url, path_column: storage_path})
        .eq(key_column, user_id)
        .execute()
    )

    if previous_path:
        await delete_file(supabase_client, bucket, previous_path)

    logger.info(f"Updated {kind} for user {user_id}")
    return url
