"""
Gallery service.

Gallery items are images with a title, optional description, category and
tags. Like pages they keep a dense `order`; deleting an item also removes
its image from storage.
"""

import json
import logging
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from sparklink.config import settings
from sparklink.services.errors import NotFoundError
from sparklink.services.page_service import persist_orders
from sparklink.services.profile_service import get_or_create_profile
from sparklink.services.storage import delete_file, get_public_url, upload_file
from sparklink.utils.ordering import apply_reorder, normalize_order

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "category", "tags", "is_visible")


def parse_tags(raw: Optional[str]) -> List[str]:
    """
    Accept tags as a JSON array string or a comma separated list.

    Multipart forms can only carry strings, so the dashboard sends
    '["travel", "portrait"]' while simple clients send 'travel, portrait'.
    """
    if not raw or not raw.strip():
        return []

    text = raw.strip()
    if text.startswith("["):
        try:
            values = json.loads(text)
        except json.JSONDecodeError:
            raise ValueError("Tags must be a JSON array of strings")
        if not isinstance(values, list):
            raise ValueError("Tags must be a JSON array of strings")
    else:
        values = text.split(",")

    tags: List[str] = []
    for value in values:
        tag = str(value).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


async def list_items(
    supabase_client: Client,
    profile_id: str,
    category: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    include_hidden: bool = False,
) -> Dict[str, Any]:
    """
    Paginated gallery listing for one profile.

    Items are ordered by `order`, newest first within equal order.

    Returns:
        {"items": [...], "total": int, "categories": [...]}
        where categories are the sorted distinct categories of the profile's
        listed items regardless of the category filter.
    """
    query = (
        supabase_client.table("gallery_item")
        .select("*", count=cast(Any, "exact"))
        .eq("profile_id", profile_id)
    )
    if not include_hidden:
        query = query.eq("is_visible", True)
    if category:
        query = query.eq("category", category)

    result = (
        query.order("order")
        .order("created_at", desc=True)
        .range(offset, offset + limit - 1)
        .execute()
    )
    items = cast(List[Dict[str, Any]], result.data or [])
    total = getattr(result, "count", None)
    if total is None:
        total = len(items)

    category_query = (
        supabase_client.table("gallery_item")
        .select("category")
        .eq("profile_id", profile_id)
    )
    if not include_hidden:
        category_query = category_query.eq("is_visible", True)
    category_rows = cast(List[Dict[str, Any]], category_query.execute().data or [])
    categories = sorted({row["category"] for row in category_rows if row.get("category")})

    logger.info(f"Found {len(items)} of {total} gallery items for profile {profile_id}")
    return {"items": items, "total": total, "categories": categories}


async def list_user_items(
    supabase_client: Client,
    user_id: str,
    category: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    include_hidden: bool = False,
) -> Dict[str, Any]:
    """Owner listing; hidden items are only included on request."""
    profile = await get_or_create_profile(supabase_client, user_id)
    return await list_items(
        supabase_client,
        profile["id"],
        category=category,
        limit=limit,
        offset=offset,
        include_hidden=include_hidden,
    )


async def _get_owned_item(supabase_client: Client, profile_id: str, item_id: str) -> Dict[str, Any]:
    result = (
        supabase_client.table("gallery_item")
        .select("*")
        .eq("id", item_id)
        .eq("profile_id", profile_id)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Gallery item not found")
    return cast(Dict[str, Any], result.data[0])


async def get_item(supabase_client: Client, user_id: str, item_id: str) -> Dict[str, Any]:
    profile = await get_or_create_profile(supabase_client, user_id)
    return await _get_owned_item(supabase_client, profile["id"], item_id)


async def create_item(
    supabase_client: Client,
    user_id: str,
    file_bytes: bytes,
    filename: str,
    content_type: str,
    title: str,
    description: Optional[str] = None,
    category: Optional[str] = None,
    tags: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Upload an image and append it to the gallery.

    Returns:
        The created gallery_item row
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    profile_id = profile["id"]
    bucket = settings.SUPABASE_MEDIA_BUCKET

    count_result = (
        supabase_client.table("gallery_item")
        .select("id", count=cast(Any, "exact"))
        .eq("profile_id", profile_id)
        .execute()
    )
    item_count = getattr(count_result, "count", None)
    if item_count is None:
        item_count = len(count_result.data or [])

    storage_path = await upload_file(
        supabase_client,
        bucket=bucket,
        folder="gallery",
        user_id=user_id,
        file_bytes=file_bytes,
        filename=filename,
        content_type=content_type,
    )

    item_data = {
        "profile_id": profile_id,
        "title": title,
        "description": description,
        "category": category,
        "tags": tags or [],
        "image_url": get_public_url(supabase_client, bucket, storage_path),
        "storage_path": storage_path,
        "order": item_count,
        "is_visible": True,
    }

    logger.info(f"Creating gallery item for profile {profile_id} at order {item_count}")
    result = supabase_client.table("gallery_item").insert(item_data).execute()

    if not result.data:
        await delete_file(supabase_client, bucket, storage_path)
        raise Exception("Failed to create gallery item: no data returned")

    return cast(Dict[str, Any], result.data[0])


async def update_item(
    supabase_client: Client,
    user_id: str,
    item_id: str,
    **updates: Any
) -> Dict[str, Any]:
    profile = await get_or_create_profile(supabase_client, user_id)
    await _get_owned_item(supabase_client, profile["id"], item_id)

    changes = {key: value for key, value in updates.items() if key in EDITABLE_FIELDS}
    if not changes:
        raise ValueError("At least one field must be provided for update")

    result = (
        supabase_client.table("gallery_item")
        .update(changes)
        .eq("id", item_id)
        .eq("profile_id", profile["id"])
        .execute()
    )
    if not result.data:
        raise NotFoundError("Gallery item not found")

    logger.info(f"Updated gallery item {item_id}: {list(changes.keys())}")
    return cast(Dict[str, Any], result.data[0])


async def delete_item(supabase_client: Client, user_id: str, item_id: str) -> None:
    """
    Delete an item, its stored image, and close the gap in `order`.

    A failed storage removal is logged and does not fail the delete.
    """
    profile = await get_or_create_profile(supabase_client, user_id)
    item = await _get_owned_item(supabase_client, profile["id"], item_id)

    (
        supabase_client.table("gallery_item")
        .delete()
        .eq("id", item_id)
        .eq("profile_id", profile["id"])
        .execute()
    )

    await delete_file(supabase_client, settings.SUPABASE_MEDIA_BUCKET, item.get("storage_path"))

    remaining = (
        supabase_client.table("gallery_item")
        .select("id, order, created_at")
        .eq("profile_id", profile["id"])
        .order("order")
        .execute()
    )
    changes = normalize_order(cast(List[Dict[str, Any]], remaining.data or []))
    await persist_orders(supabase_client, "gallery_item", changes)
    logger.info(f"Deleted gallery item {item_id}; renumbered {len(changes)} items")


async def reorder_items(
    supabase_client: Client,
    user_id: str,
    item_orders: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    profile = await get_or_create_profile(supabase_client, user_id)
    result = (
        supabase_client.table("gallery_item")
        .select("*")
        .eq("profile_id", profile["id"])
        .order("order")
        .execute()
    )
    items = cast(List[Dict[str, Any]], result.data or [])

    changes = apply_reorder(items, item_orders)
    await persist_orders(supabase_client, "gallery_item", changes)
    logger.info(f"Reordered gallery for profile {profile['id']}: {len(changes)} changed")

    new_orders = dict(changes)
    reordered = [{**item, "order": new_orders.get(str(item["id"]), item.get("order"))} for item in items]
    reordered.sort(key=lambda item: item["order"])
    return reordered
