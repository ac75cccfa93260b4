"""
Public (visitor-facing) reads.

Visitors have no Supabase session, so every function here takes the
service role client and must filter by owner explicitly and return only
public columns.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, cast

from supabase import Client

from sparklink.auth.page_access import issue_page_access_token, verify_page_access_token
from sparklink.config import settings
from sparklink.services.errors import NotFoundError, NotPublishedError, PasswordRequiredError
from sparklink.services.gallery_service import list_items
from sparklink.services.page_service import is_page_live
from sparklink.services.user_service import PUBLIC_USER_COLUMNS, get_user_by_username
from sparklink.utils.passwords import verify_password
from sparklink.utils.plans import plan_allows
from sparklink.utils.templates import DEFAULT_COLOR_SCHEMES, DEFAULT_TEMPLATE_ID

logger = logging.getLogger(__name__)

PUBLIC_PAGE_LIST_COLUMNS = "id, type, title, slug, order, is_password_protected, is_published, publish_at, expires_at"


async def resolve_published_profile(
    service_client: Client,
    username: str,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Look up a user and their profile by username.

    Returns:
        (user, profile)

    Raises:
        NotFoundError: Unknown username or no profile yet
        NotPublishedError: Profile exists but is not published
    """
    user = await get_user_by_username(service_client, username, columns=PUBLIC_USER_COLUMNS)
    if not user:
        raise NotFoundError("User not found")

    result = (
        service_client.table("profile")
        .select("*")
        .eq("user_id", user["id"])
        .execute()
    )
    if not result.data:
        raise NotFoundError("Profile not found")

    profile = cast(Dict[str, Any], result.data[0])
    if not profile.get("is_published"):
        raise NotPublishedError("This profile is not published")

    return user, profile


async def get_public_profile(service_client: Client, username: str) -> Dict[str, Any]:
    """
    Everything needed to render a published profile's landing page.

    The "Powered by SparkLink" badge is forced on when the owner's plan
    cannot remove branding, whatever the stored preference says.
    """
    user, profile = await resolve_published_profile(service_client, username)

    links_result = (
        service_client.table("social_link")
        .select("platform, url, order")
        .eq("profile_id", profile["id"])
        .order("order")
        .execute()
    )

    show_powered_by = bool(profile.get("show_powered_by", True))
    if not plan_allows(user.get("subscription"), "remove_branding"):
        show_powered_by = True

    return {
        "user": {
            "id": user["id"],
            "username": user.get("username"),
            "first_name": user.get("first_name"),
            "last_name": user.get("last_name"),
            "country": user.get("country"),
            "profile_picture": user.get("profile_picture"),
            "has_verified_badge": bool(user.get("has_verified_badge")),
        },
        "profile": {
            "bio": profile.get("bio"),
            "tagline": profile.get("tagline"),
            "background_image": profile.get("background_image"),
            "country_flag": profile.get("country_flag"),
            "template_id": profile.get("template_id") or DEFAULT_TEMPLATE_ID,
            "color_scheme": profile.get("color_scheme") or DEFAULT_COLOR_SCHEMES["light"],
            "show_powered_by": show_powered_by,
            "has_resume": bool(profile.get("resume_path")) and bool(profile.get("allow_resume_download")),
            "social_links": cast(List[Dict[str, Any]], links_result.data or []),
        },
    }


async def list_public_pages(
    service_client: Client,
    username: str,
    now: Optional[datetime] = None,
) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Navigation entries for a published profile: live pages only.

    Returns:
        (owner user_id, pages)
    """
    user, profile = await resolve_published_profile(service_client, username)

    result = (
        service_client.table("page")
        .select(PUBLIC_PAGE_LIST_COLUMNS)
        .eq("profile_id", profile["id"])
        .eq("is_published", True)
        .order("order")
        .execute()
    )
    pages = [
        {
            "id": page["id"],
            "type": page.get("type"),
            "title": page.get("title"),
            "slug": page.get("slug"),
            "order": page.get("order"),
            "is_password_protected": bool(page.get("is_password_protected")),
        }
        for page in cast(List[Dict[str, Any]], result.data or [])
        if is_page_live(page, now)
    ]
    return str(user["id"]), pages


async def _get_live_page(
    service_client: Client,
    username: str,
    slug: str,
    now: Optional[datetime] = None,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    user, profile = await resolve_published_profile(service_client, username)

    result = (
        service_client.table("page")
        .select("*")
        .eq("profile_id", profile["id"])
        .eq("slug", slug)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Page not found")

    page = cast(Dict[str, Any], result.data[0])
    if not is_page_live(page, now):
        raise NotFoundError("Page not found")
    return user, page


async def get_public_page(
    service_client: Client,
    username: str,
    slug: str,
    access_token: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[str, Dict[str, Any]]:
    """
    A live page's content.

    Password-protected pages require a page access token issued by
    unlock_page() for this page.

    Returns:
        (owner user_id, page)

    Raises:
        NotFoundError: Unknown user, unpublished/expired/missing page
        NotPublishedError: Profile not published
        PasswordRequiredError: Protected page without a valid token
    """
    user, page = await _get_live_page(service_client, username, slug, now)

    if page.get("is_password_protected") and not verify_page_access_token(access_token, str(page["id"])):
        raise PasswordRequiredError("This page is password protected")

    return str(user["id"]), {
        "id": page["id"],
        "type": page.get("type"),
        "title": page.get("title"),
        "slug": page.get("slug"),
        "content": page.get("content") or {},
        "order": page.get("order"),
        "is_password_protected": bool(page.get("is_password_protected")),
        "updated_at": page.get("updated_at"),
    }


async def unlock_page(
    service_client: Client,
    username: str,
    slug: str,
    password: str,
) -> Dict[str, Any]:
    """
    Exchange a page password for a page access token.

    Raises:
        PasswordRequiredError: Wrong password
    """
    _, page = await _get_live_page(service_client, username, slug)

    if page.get("is_password_protected") and not verify_password(password, page.get("password_hash")):
        logger.info(f"Wrong password submitted for page {page['id']}")
        raise PasswordRequiredError("Incorrect password")

    return {
        "page_id": str(page["id"]),
        "access_token": issue_page_access_token(str(page["id"])),
        "expires_in": settings.PAGE_ACCESS_TTL_SECONDS,
    }


async def get_public_gallery(
    service_client: Client,
    username: str,
    category: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[str, Dict[str, Any]]:
    """
    Visible gallery items of a published profile.

    Returns:
        (owner user_id, listing) where listing is list_items() output
    """
    user, profile = await resolve_published_profile(service_client, username)
    listing = await list_items(
        service_client,
        profile["id"],
        category=category,
        limit=limit,
        offset=offset,
    )
    return str(user["id"]), listing
