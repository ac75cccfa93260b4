"""
Public (visitor-facing) API endpoints.

These endpoints are PUBLIC (no authentication required). They read through
the service role client and return only public fields. Each visit is
recorded as an analytics event for the profile owner; tracking failures
never affect the response.
"""

import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Header, Path, Query, Request, status
from fastapi.responses import RedirectResponse

from sparklink.db.client import get_service_role_client
from sparklink.schemas.gallery import GalleryItemResponse, GalleryListResponse, Pagination
from sparklink.schemas.public import (
    PageUnlockRequest,
    PageUnlockResponse,
    PublicPageListResponse,
    PublicPageResponse,
    PublicPageSummary,
    PublicProfileResponse,
    SocialClickRequest,
    TrackedResponse,
)
from sparklink.schemas.resume import ResumeInfoResponse
from sparklink.services.analytics_service import track_event
from sparklink.services.public_service import (
    get_public_gallery,
    get_public_page,
    get_public_profile,
    list_public_pages,
    resolve_published_profile,
    unlock_page,
)
from sparklink.services.resume_service import get_public_resume_info, get_resume_download
from sparklink.utils.constants import ANALYTICS_EVENTS
from sparklink.utils.http_errors import to_http_exception
from sparklink.utils.request import get_client_ip, get_referrer, get_user_agent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["public"])

Username = Annotated[str, Path(..., min_length=1, max_length=64, description="Profile username")]


async def _track(
    request: Request,
    user_id: str,
    event: str,
    data: Optional[Dict[str, Any]] = None,
) -> bool:
    payload = dict(data or {})
    referrer = get_referrer(request)
    if referrer:
        payload["referrer"] = referrer
    return await track_event(
        get_service_role_client(),
        user_id,
        event,
        data=payload,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )


@router.get(
    "/{username}",
    response_model=PublicProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a published profile",
    description="""
    Everything needed to render a profile's landing page: public user
    fields, bio, template and colors, social links and the verified badge.

    Returns 404 for unknown usernames and 403 not_published for profiles
    that are not published. Records a PROFILE_VIEW event.
    """
)
async def get_profile(request: Request, username: Username) -> PublicProfileResponse:
    """
    Public profile lookup.

    **6-STEP ENDPOINT FLOW:**

    Auth
    - SKIPPED (public endpoint)

    Parse/Validate Request
    - Username path parameter

    Domain & Intent Filter
    - Only published profiles are served

    Call Service
    - get_public_profile()

    Map Output -> ResponseModel
    - Public fields only -> PublicProfileResponse

    Persistence
    - PROFILE_VIEW analytics event
    """
    service_client = get_service_role_client()

    try:
        result = await get_public_profile(service_client, username)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve profile")

    await _track(request, str(result["user"]["id"]), ANALYTICS_EVENTS["PROFILE_VIEW"])
    return PublicProfileResponse.model_validate(result)


@router.get(
    "/{username}/pages",
    response_model=PublicPageListResponse,
    status_code=status.HTTP_200_OK,
    summary="List live pages of a profile",
    description="Published pages inside their publish_at / expires_at window, in display order.",
)
async def get_pages(username: Username) -> PublicPageListResponse:
    try:
        _, pages = await list_public_pages(get_service_role_client(), username)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve pages")

    return PublicPageListResponse(pages=[PublicPageSummary.model_validate(page) for page in pages])


@router.get(
    "/{username}/pages/{slug}",
    response_model=PublicPageResponse,
    status_code=status.HTTP_200_OK,
    summary="Get page content",
    description="""
    Content of a live page. Password-protected pages require the
    X-Page-Access header carrying a token from
    POST /public/{username}/pages/{slug}/password, otherwise 401
    password_required. Records a PAGE_VIEW event.
    """
)
async def get_page(
    request: Request,
    username: Username,
    slug: str = Path(..., min_length=1, max_length=100, description="Page slug"),
    x_page_access: Annotated[Optional[str], Header()] = None,
) -> PublicPageResponse:
    try:
        owner_id, page = await get_public_page(
            get_service_role_client(), username, slug, access_token=x_page_access
        )
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve page")

    await _track(
        request,
        owner_id,
        ANALYTICS_EVENTS["PAGE_VIEW"],
        {"page_id": str(page["id"]), "slug": page.get("slug")},
    )
    return PublicPageResponse.model_validate(page)


@router.post(
    "/{username}/pages/{slug}/password",
    response_model=PageUnlockResponse,
    status_code=status.HTTP_200_OK,
    summary="Unlock a password-protected page",
    description="Returns a short-lived page access token; 401 on a wrong password.",
)
async def unlock(
    body: PageUnlockRequest,
    username: Username,
    slug: str = Path(..., min_length=1, max_length=100, description="Page slug"),
) -> PageUnlockResponse:
    try:
        result = await unlock_page(get_service_role_client(), username, slug, body.password)
    except Exception as e:
        raise to_http_exception(e, "verification_error", "Failed to verify page password")

    return PageUnlockResponse(
        success=True,
        message="Access granted",
        access_token=result["access_token"],
        expires_in=result["expires_in"],
    )


@router.get(
    "/{username}/gallery",
    response_model=GalleryListResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a profile's gallery",
    description="Visible gallery items in display order. Records a GALLERY_VIEW event.",
)
async def get_gallery(
    request: Request,
    username: Username,
    category: Optional[str] = Query(None, max_length=100, description="Filter by category"),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of items to return"),
    offset: int = Query(0, ge=0, description="Number of items to skip for pagination"),
) -> GalleryListResponse:
    try:
        owner_id, listing = await get_public_gallery(
            get_service_role_client(), username, category=category, limit=limit, offset=offset
        )
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve gallery")

    await _track(request, owner_id, ANALYTICS_EVENTS["GALLERY_VIEW"], {"category": category} if category else None)

    total = listing["total"]
    return GalleryListResponse(
        items=[GalleryItemResponse.model_validate(item) for item in listing["items"]],
        pagination=Pagination(total=total, limit=limit, offset=offset, has_more=offset + limit < total),
        categories=listing["categories"],
    )


@router.get(
    "/{username}/resume",
    response_model=ResumeInfoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get public resume info",
)
async def get_resume(username: Username) -> ResumeInfoResponse:
    try:
        info = await get_public_resume_info(get_service_role_client(), username)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve resume info")

    return ResumeInfoResponse.model_validate(info)


async def redirect_to_resume(request: Request, username: str) -> RedirectResponse:
    """Shared by /public/{username}/resume/download and /resume/download/{username}."""
    try:
        download = await get_resume_download(get_service_role_client(), username)
    except Exception as e:
        raise to_http_exception(e, "download_error", "Failed to prepare resume download")

    await _track(
        request,
        str(download["user_id"]),
        ANALYTICS_EVENTS["RESUME_DOWNLOAD"],
        {"file_name": download.get("file_name")},
    )
    return RedirectResponse(url=str(download["url"]), status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get(
    "/{username}/resume/download",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Download a resume",
    description="""
    Redirects to a short-lived signed URL of the resume. 403 when the
    profile is unpublished or downloads are disabled. Records a
    RESUME_DOWNLOAD event.
    """,
    response_class=RedirectResponse,
)
async def download_resume(request: Request, username: Username) -> RedirectResponse:
    return await redirect_to_resume(request, username)


@router.post(
    "/{username}/social-click",
    response_model=TrackedResponse,
    status_code=status.HTTP_200_OK,
    summary="Record a social link click",
)
async def social_click(request: Request, body: SocialClickRequest, username: Username) -> TrackedResponse:
    try:
        user, _ = await resolve_published_profile(get_service_role_client(), username)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to record click")

    data: Dict[str, Any] = {"platform": body.platform}
    if body.url:
        data["url"] = body.url
    tracked = await _track(request, str(user["id"]), ANALYTICS_EVENTS["SOCIAL_CLICK"], data)
    return TrackedResponse(tracked=tracked)
