"""
Gallery API endpoints.

Provides endpoints for managing the caller's image gallery. Images are
stored in the media bucket under gallery/{user_id}/ and items are kept in
a dense 0..n-1 order.

All endpoints require valid Bearer token authentication.
"""

import logging
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Query, UploadFile, status

from sparklink.auth.dependencies import AuthenticatedUser, get_authenticated_user
from sparklink.db.client import get_supabase_client
from sparklink.schemas.gallery import (
    GalleryItemDeleteResponse,
    GalleryItemMutationResponse,
    GalleryItemResponse,
    GalleryItemUpdateRequest,
    GalleryListResponse,
    GalleryReorderRequest,
    GalleryReorderResponse,
    Pagination,
)
from sparklink.services.gallery_service import (
    create_item,
    delete_item,
    get_item,
    list_user_items,
    parse_tags,
    reorder_items,
    update_item,
)
from sparklink.services.storage import resolve_content_type, validate_upload
from sparklink.utils.constants import GALLERY_IMAGE_TYPES, MAX_IMAGE_BYTES
from sparklink.utils.http_errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gallery", tags=["gallery"])


def _to_item_response(item: Dict[str, Any]) -> GalleryItemResponse:
    return GalleryItemResponse.model_validate({**item, "tags": item.get("tags") or []})


def _to_item_list(items: List[Dict[str, Any]]) -> List[GalleryItemResponse]:
    return [_to_item_response(item) for item in items]


@router.get(
    "",
    response_model=GalleryListResponse,
    status_code=status.HTTP_200_OK,
    summary="List gallery items",
    description="""
    Retrieve the caller's gallery.

    This endpoint:
    - Returns visible items ordered by position, newest first within a position
    - Set include_hidden=true to also list hidden items
    - Supports category filtering and limit/offset pagination
    - Returns the sorted distinct categories

    Security:
    - Requires valid Authorization Bearer token
    - RLS ensures users only see their own items
    """
)
async def list_gallery(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    category: Optional[str] = Query(None, max_length=100, description="Filter by category"),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of items to return"),
    offset: int = Query(0, ge=0, description="Number of items to skip for pagination"),
    include_hidden: bool = Query(False, description="Include hidden items"),
) -> GalleryListResponse:
    logger.info(f"Listing gallery for user {auth_user.user_id} (limit={limit}, offset={offset})")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        listing = await list_user_items(
            supabase_client,
            auth_user.user_id,
            category=category,
            limit=limit,
            offset=offset,
            include_hidden=include_hidden,
        )
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve gallery")

    total = listing["total"]
    return GalleryListResponse(
        items=_to_item_list(listing["items"]),
        pagination=Pagination(total=total, limit=limit, offset=offset, has_more=offset + limit < total),
        categories=listing["categories"],
    )


@router.post(
    "/upload",
    response_model=GalleryItemMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a gallery image",
    description="""
    Multipart upload. `image`: JPEG, PNG, GIF or WebP up to 5 MB.
    `tags` may be a JSON array ('["travel","portrait"]') or a comma list.
    The new item is appended at the end of the gallery.
    """
)
async def upload_gallery_item(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    image: Annotated[UploadFile, File(description="Gallery image")],
    title: Annotated[str, Form(min_length=1, max_length=200)],
    description: Annotated[Optional[str], Form(max_length=2000)] = None,
    category: Annotated[Optional[str], Form(max_length=100)] = None,
    tags: Annotated[Optional[str], Form()] = None,
) -> GalleryItemMutationResponse:
    """
    Upload a gallery image.

    **6-STEP ENDPOINT FLOW:**

    Auth
    - Handled by get_authenticated_user dependency

    Parse/Validate Request
    - File type and size checked; tags parsed from JSON or comma list

    Domain & Intent Filter
    - N/A

    Call Service
    - create_item() uploads to storage and inserts the row

    Map Output -> ResponseModel
    - Row -> GalleryItemResponse

    Persistence
    - Storage object plus gallery_item row at order = current count
    """
    content_type = resolve_content_type(image.filename or "", image.content_type)
    file_bytes = await image.read()

    try:
        validate_upload(content_type, len(file_bytes), GALLERY_IMAGE_TYPES, MAX_IMAGE_BYTES)
        tag_list = parse_tags(tags)
    except ValueError as e:
        logger.warning(f"Rejected gallery upload for user {auth_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(e)}
        )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        item = await create_item(
            supabase_client,
            auth_user.user_id,
            file_bytes=file_bytes,
            filename=image.filename or "image",
            content_type=content_type,
            title=title,
            description=description,
            category=category,
            tags=tag_list,
        )
    except Exception as e:
        raise to_http_exception(e, "upload_error", "Failed to upload gallery item")

    return GalleryItemMutationResponse(
        status="CREATED",
        item=_to_item_response(item),
        message="Gallery item uploaded successfully",
    )


@router.post(
    "/reorder",
    response_model=GalleryReorderResponse,
    status_code=status.HTTP_200_OK,
    summary="Reorder gallery items",
)
async def reorder_gallery(
    request: GalleryReorderRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> GalleryReorderResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        items = await reorder_items(
            supabase_client,
            auth_user.user_id,
            [entry.model_dump() for entry in request.item_orders],
        )
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to reorder gallery")

    return GalleryReorderResponse(items=_to_item_list(items))


@router.get(
    "/{item_id}",
    response_model=GalleryItemResponse,
    status_code=status.HTTP_200_OK,
    summary="Get gallery item by ID",
)
async def get_gallery_item(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    item_id: str = Path(..., description="Gallery item UUID"),
) -> GalleryItemResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        item = await get_item(supabase_client, auth_user.user_id, item_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve gallery item")

    return _to_item_response(item)


@router.put(
    "/{item_id}",
    response_model=GalleryItemMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update gallery item",
)
async def update_gallery_item(
    request: GalleryItemUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    item_id: str = Path(..., description="Gallery item UUID"),
) -> GalleryItemMutationResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        item = await update_item(
            supabase_client,
            auth_user.user_id,
            item_id,
            **request.model_dump(exclude_none=True),
        )
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to update gallery item")

    return GalleryItemMutationResponse(
        status="UPDATED",
        item=_to_item_response(item),
        message="Gallery item updated successfully",
    )


@router.delete(
    "/{item_id}",
    response_model=GalleryItemDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete gallery item",
    description="Deletes the item and its image; remaining items are renumbered.",
)
async def delete_gallery_item(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    item_id: str = Path(..., description="Gallery item UUID"),
) -> GalleryItemDeleteResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        await delete_item(supabase_client, auth_user.user_id, item_id)
    except Exception as e:
        raise to_http_exception(e, "delete_error", "Failed to delete gallery item")

    return GalleryItemDeleteResponse(
        status="DELETED",
        item_id=item_id,
        message="Gallery item deleted successfully",
    )
