"""
Page CRUD API endpoints.

Provides endpoints for managing the pages of the caller's profile. Pages
are kept in a dense 0..n-1 order; creating appends, deleting closes the
gap, and reorder applies a client-supplied arrangement.

Plan rules (page count, password protection, scheduling) are enforced by
the page service and surface as 403 upgrade_required.
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, status

from sparklink.auth.dependencies import AuthenticatedUser, get_authenticated_user
from sparklink.auth.page_access import issue_page_access_token
from sparklink.config import settings
from sparklink.db.client import get_service_role_client, get_supabase_client
from sparklink.schemas.pages import (
    PageCreateRequest,
    PageDeleteResponse,
    PageListResponse,
    PageMutationResponse,
    PagePasswordCheckRequest,
    PagePasswordCheckResponse,
    PageReorderRequest,
    PageResponse,
    PageUpdateRequest,
)
from sparklink.services.page_service import (
    check_page_password,
    create_page,
    delete_page,
    get_page,
    list_pages,
    reorder_pages,
    update_page,
)
from sparklink.utils.http_errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pages", tags=["pages"])


def _to_page_response(page: Dict[str, Any]) -> PageResponse:
    return PageResponse.model_validate({
        **page,
        "content": page.get("content") or {},
        "is_password_protected": bool(page.get("is_password_protected")),
    })


@router.get(
    "",
    response_model=PageListResponse,
    status_code=status.HTTP_200_OK,
    summary="List pages",
    description="""
    Retrieve all pages of the authenticated user's profile.

    This endpoint:
    - Returns pages ordered by position
    - Never returns password hashes

    Security:
    - Requires valid Authorization Bearer token
    - RLS ensures users only see their own pages
    """
)
async def list_pages_endpoint(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> PageListResponse:
    logger.info(f"Listing pages for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        pages = await list_pages(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve pages")

    page_responses = [_to_page_response(page) for page in pages]
    return PageListResponse(pages=page_responses, count=len(page_responses))


@router.post(
    "/reorder",
    response_model=PageListResponse,
    status_code=status.HTTP_200_OK,
    summary="Reorder pages",
    description="""
    Apply a new arrangement. Requested pages are placed by their requested
    position, the rest keep their relative order after them, and positions
    are renumbered 0..n-1. Ids of other users' pages are ignored.
    """
)
async def reorder_pages_endpoint(
    request: PageReorderRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> PageListResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        pages = await reorder_pages(
            supabase_client,
            auth_user.user_id,
            [entry.model_dump() for entry in request.page_orders],
        )
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to reorder pages")

    page_responses = [_to_page_response(page) for page in pages]
    return PageListResponse(pages=page_responses, count=len(page_responses))


@router.post(
    "/verify-password",
    response_model=PagePasswordCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Check a page password",
    description="""
    Public endpoint used by the visitor page. Returns valid=false on a wrong
    password. When valid, also returns a page access token to send in the
    X-Page-Access header when loading the page content.
    """
)
async def verify_page_password(request: PagePasswordCheckRequest) -> PagePasswordCheckResponse:
    try:
        valid = await check_page_password(get_service_role_client(), request.page_id, request.password)
    except Exception as e:
        raise to_http_exception(e, "verification_error", "Failed to verify page password")

    if valid is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": "Page not found"}
        )

    if not valid:
        logger.info(f"Wrong password submitted for page {request.page_id}")
        return PagePasswordCheckResponse(valid=False, page_id=request.page_id)

    return PagePasswordCheckResponse(
        valid=True,
        page_id=request.page_id,
        access_token=issue_page_access_token(request.page_id),
        expires_in=settings.PAGE_ACCESS_TTL_SECONDS,
    )


@router.get(
    "/{page_id}",
    response_model=PageResponse,
    status_code=status.HTTP_200_OK,
    summary="Get page by ID",
)
async def get_page_endpoint(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    page_id: str = Path(..., description="Page UUID"),
) -> PageResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        page = await get_page(supabase_client, auth_user.user_id, page_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve page")

    return _to_page_response(page)


@router.post(
    "",
    response_model=PageMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create page",
    description="""
    Create a page at the end of the profile's page list.

    Rules:
    - Slug must be unique within the profile (409)
    - Page count limited by plan (403 upgrade_required)
    - Password protection requires RISE+ and a password
    - Scheduling requires BLAZE and expires_at after publish_at

    Security:
    - Requires valid Authorization Bearer token
    - Password is stored salted and hashed, never returned
    """
)
async def create_page_endpoint(
    request: PageCreateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> PageMutationResponse:
    """
    Create a page.

    **6-STEP ENDPOINT FLOW:**

    Auth
    - Handled by get_authenticated_user dependency

    Parse/Validate Request
    - PageCreateRequest (type enum, slug pattern) validated by FastAPI

    Domain & Intent Filter
    - Plan limits and feature gates checked by the service

    Call Service
    - create_page()

    Map Output -> ResponseModel
    - Stored row -> PageResponse

    Persistence
    - Row inserted at order = current page count
    """
    logger.info(f"Creating {request.type} page for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        page = await create_page(
            supabase_client,
            auth_user.user_id,
            page_type=request.type,
            title=request.title,
            slug=request.slug,
            content=request.content,
            is_published=request.is_published,
            is_password_protected=request.is_password_protected,
            password=request.password,
            publish_at=request.publish_at,
            expires_at=request.expires_at,
        )
    except Exception as e:
        raise to_http_exception(e, "create_error", "Failed to create page")

    return PageMutationResponse(
        status="CREATED",
        page=_to_page_response(page),
        message="Page created successfully",
    )


@router.put(
    "/{page_id}",
    response_model=PageMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Update page",
    description="""
    Partially update a page. The same plan rules as creation apply.
    Setting is_password_protected=false clears the stored password.
    """
)
async def update_page_endpoint(
    request: PageUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    page_id: str = Path(..., description="Page UUID"),
) -> PageMutationResponse:
    update_data = request.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        page = await update_page(supabase_client, auth_user.user_id, page_id, **update_data)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to update page")

    return PageMutationResponse(
        status="UPDATED",
        page=_to_page_response(page),
        message="Page updated successfully",
    )


@router.delete(
    "/{page_id}",
    response_model=PageDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete page",
)
async def delete_page_endpoint(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    page_id: str = Path(..., description="Page UUID"),
) -> PageDeleteResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        await delete_page(supabase_client, auth_user.user_id, page_id)
    except Exception as e:
        raise to_http_exception(e, "delete_error", "Failed to delete page")

    return PageDeleteResponse(status="DELETED", page_id=page_id, message="Page deleted successfully")
