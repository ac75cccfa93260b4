"""
Page service.

Pages belong to a profile, are addressed publicly by slug and are kept in
a dense 0..n-1 `order`. Plan rules enforced here:
- page count limit (STARTER 1, RISE 6, BLAZE unlimited)
- password protection (RISE and above)
- scheduled publishing with publish_at / expires_at (BLAZE)
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, cast

from supabase import Client

from sparklink.services.errors import ConflictError, NotFoundError, UpgradeRequiredError
from sparklink.services.profile_service import get_or_create_profile
from sparklink.services.user_service import get_user_tier
from sparklink.utils.ordering import apply_reorder, normalize_order
from sparklink.utils.passwords import hash_password, verify_password
from sparklink.utils.plans import get_limit, minimum_tier_for, plan_allows, within_limit

logger = logging.getLogger(__name__)

PRIVATE_PAGE_COLUMNS = ("password_hash",)


def strip_private_fields(page: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in page.items() if key not in PRIVATE_PAGE_COLUMNS}


def _parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp or datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def is_page_live(page: Mapping[str, Any], now: Optional[datetime] = None) -> bool:
    """Published and inside its publish_at / expires_at window, if any."""
    if not page.get("is_published"):
        return False

    now = now or datetime.now(timezone.utc)
    publish_at = _parse_datetime(page.get("publish_at"))
    expires_at = _parse_datetime(page.get("expires_at"))

    if publish_at and now < publish_at:
        return False
    if expires_at and now >= expires_at:
        return False
    return True


def _require_feature(tier: str, feature: str, label: str) -> None:
    if not plan_allows(tier, feature):
        required = minimum_tier_for(feature)
        raise UpgradeRequiredError(
            f"{label} requires a {required} subscription or higher",
            required_tier=required,
            current_tier=tier,
        )


def _check_schedule(publish_at: Any, expires_at: Any) -> None:
    start = _parse_datetime(publish_at)
    end = _parse_datetime(expires_at)
    if start and end and end <= start:
        raise ValueError("expires_at must be after publish_at")


def _to_db(values: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in values.items()
    }


async def _fetch_pages(supabase_client: Client, profile_id: str) -> List[Dict[str, Any]]:
    result = (
        supabase_client.table("page")
        .select("*")
        .eq("profile_id", profile_id)
        .order("order")
        .execute()
    )
    return cast(List[Dict[str, Any]], result.data or [])


async def _slug_taken(
    supabase_client: Client,
    profile_id: str,
    slug: str,
    exclude_page_id: Optional[str] = None,
) -> bool:
    result = (
        supabase_client.table("page")
        .select("id")
        .eq("profile_id", profile_id)
        .eq("slug", slug)
        .execute()
    )
    return any(str(row["id"]) != exclude_page_id for row in cast(list, result.data or []))


async def list_pages(supabase_client: Client, user_id: str) -> List[Dict[str, Any]]:
    """
    All pages of the user's profile ordered by `order`.

    Security:
        - RLS enforces ownership through profile.user_id = auth.uid()
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    pages = await _fetch_pages(supabase_client, profile["id"])
    logger.info(f"Found {len(pages)} pages for user {user_id}")
    return [strip_private_fields(page) for page in pages]


async def get_page(supabase_client: Client, user_id: str, page_id: str) -> Dict[str, Any]:
    """
    Raises:
        NotFoundError: Page missing or owned by another profile
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    result = (
        supabase_client.table("page")
        .select("*")
        .eq("id", page_id)
        .eq("profile_id", profile["id"])
        .execute()
    )
    if not result.data:
        raise NotFoundError("Page not found")
    return strip_private_fields(cast(Dict[str, Any], result.data[0]))


async def create_page(
    supabase_client: Client,
    user_id: str,
    page_type: str,
    title: str,
    slug: str,
    content: Optional[Dict[str, Any]] = None,
    is_published: bool = True,
    is_password_protected: bool = False,
    password: Optional[str] = None,
    publish_at: Optional[datetime] = None,
    expires_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Create a page at the end of the profile's page list.

    Raises:
        ValueError: Missing password or invalid schedule
        ConflictError: Slug already used on this profile
        UpgradeRequiredError: Page limit reached or feature not in plan
    """
    publish_at = _parse_datetime(publish_at)
    expires_at = _parse_datetime(expires_at)

    profile = await get_or_create_profile(supabase_client, user_id)
    profile_id = profile["id"]
    tier = await get_user_tier(supabase_client, user_id)

    count_result = (
        supabase_client.table("page")
        .select("id", count=cast(Any, "exact"))
        .eq("profile_id", profile_id)
        .execute()
    )
    page_count = getattr(count_result, "count", None)
    if page_count is None:
        page_count = len(count_result.data or [])

    if not within_limit(tier, "pages", page_count + 1):
        raise UpgradeRequiredError(
            f"Your plan allows up to {get_limit(tier, 'pages')} pages",
            required_tier="RISE" if tier == "STARTER" else "BLAZE",
            current_tier=tier,
        )

    if is_password_protected:
        _require_feature(tier, "password_protection", "Password protection")
        if not password:
            raise ValueError("A password is required for password-protected pages")

    if publish_at or expires_at:
        _require_feature(tier, "scheduled_publishing", "Scheduled publishing")
        _check_schedule(publish_at, expires_at)

    if await _slug_taken(supabase_client, profile_id, slug):
        raise ConflictError("A page with this slug already exists")

    page_data = _to_db({
        "profile_id": profile_id,
        "type": page_type,
        "title": title,
        "slug": slug,
        "content": content or {},
        "is_published": is_published,
        "is_password_protected": is_password_protected,
        "password_hash": hash_password(password) if is_password_protected and password else None,
        "publish_at": publish_at,
        "expires_at": expires_at,
        "order": page_count,
    })

    logger.info(f"Creating page for profile {profile_id}: type={page_type}, slug={slug}")
    result = supabase_client.table("page").insert(page_data).execute()

    if not result.data:
        raise Exception("Failed to create page: no data returned")

    return strip_private_fields(cast(Dict[str, Any], result.data[0]))


async def update_page(
    supabase_client: Client,
    user_id: str,
    page_id: str,
    **updates: Any
) -> Dict[str, Any]:
    """
    Partially update a page.

    `password` is hashed and only accepted for protected pages; turning
    protection off clears the stored hash. Naive schedule times are UTC.

    Raises:
        NotFoundError, ConflictError, UpgradeRequiredError, ValueError
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    result = (
        supabase_client.table("page")
        .select("*")
        .eq("id", page_id)
        .eq("profile_id", profile["id"])
        .execute()
    )
    if not result.data:
        raise NotFoundError("Page not found")
    current = cast(Dict[str, Any], result.data[0])

    tier = await get_user_tier(supabase_client, user_id)
    password = updates.pop("password", None)
    for key in ("publish_at", "expires_at"):
        if updates.get(key) is not None:
            updates[key] = _parse_datetime(updates[key])

    if "slug" in updates and updates["slug"] != current.get("slug"):
        if await _slug_taken(supabase_client, profile["id"], updates["slug"], exclude_page_id=page_id):
            raise ConflictError("A page with this slug already exists")

    protected = updates.get("is_password_protected", current.get("is_password_protected"))
    if protected:
        if updates.get("is_password_protected") or password:
            _require_feature(tier, "password_protection", "Password protection")
        if password:
            updates["password_hash"] = hash_password(password)
        elif not current.get("password_hash"):
            raise ValueError("A password is required for password-protected pages")
    elif password:
        raise ValueError("A password can only be set on a password-protected page")
    elif "is_password_protected" in updates:
        updates["password_hash"] = None

    if updates.get("publish_at") or updates.get("expires_at"):
        _require_feature(tier, "scheduled_publishing", "Scheduled publishing")
        _check_schedule(
            updates.get("publish_at", current.get("publish_at")),
            updates.get("expires_at", current.get("expires_at")),
        )

    logger.info(f"Updating page {page_id}: {sorted(k for k in updates if k != 'password_hash')}")
    update_result = (
        supabase_client.table("page")
        .update(_to_db(updates))
        .eq("id", page_id)
        .eq("profile_id", profile["id"])
        .execute()
    )
    if not update_result.data:
        raise NotFoundError("Page not found")

    return strip_private_fields(cast(Dict[str, Any], update_result.data[0]))


async def persist_orders(
    supabase_client: Client,
    table: str,
    changes: Iterable[tuple],
) -> None:
    for row_id, new_order in changes:
        supabase_client.table(table).update({"order": new_order}).eq("id", row_id).execute()


async def delete_page(supabase_client: Client, user_id: str, page_id: str) -> None:
    """
    Delete a page and close the gap it leaves in `order`.

    Raises:
        NotFoundError: Page missing or owned by another profile
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    result = (
        supabase_client.table("page")
        .delete()
        .eq("id", page_id)
        .eq("profile_id", profile["id"])
        .execute()
    )
    if not result.data:
        raise NotFoundError("Page not found")

    remaining = await _fetch_pages(supabase_client, profile["id"])
    changes = normalize_order(remaining)
    await persist_orders(supabase_client, "page", changes)
    logger.info(f"Deleted page {page_id}; renumbered {len(changes)} pages")


async def reorder_pages(
    supabase_client: Client,
    user_id: str,
    page_orders: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Apply a client reorder and return the pages in their new order.

    Ids from other profiles are ignored.
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    pages = await _fetch_pages(supabase_client, profile["id"])

    changes = apply_reorder(pages, page_orders)
    await persist_orders(supabase_client, "page", changes)
    logger.info(f"Reordered pages for profile {profile['id']}: {len(changes)} changed")

    new_orders = dict(changes)
    reordered = [
        {**page, "order": new_orders.get(str(page["id"]), page.get("order"))}
        for page in pages
    ]
    reordered.sort(key=lambda page: page["order"])
    return [strip_private_fields(page) for page in reordered]


async def check_page_password(
    supabase_client: Client,
    page_id: str,
    password: str,
) -> Optional[bool]:
    """
    Compare a visitor-supplied password with a page's stored hash.

    Args:
        supabase_client: Service role client (visitors have no session)

    Returns:
        None if the page does not exist, else whether the password matches.
        Pages without protection always match.
    """
    result = (
        supabase_client.table("page")
        .select("id, is_password_protected, password_hash")
        .eq("id", page_id)
        .execute()
    )
    if not result.data:
        return None

    page = cast(Dict[str, Any], result.data[0])
    if not page.get("is_password_protected"):
        return True
    return verify_password(password, page.get("password_hash"))
