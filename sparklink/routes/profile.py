"""
Profile API endpoints.

Provides endpoints for the profile dashboard:
- GET /profile - User summary, profile and social links
- PUT /profile - Update identity and profile fields
- GET /profile/check-username - Username availability (public)
- PUT /profile/social-links - Replace social links
- POST /profile/publish - Toggle publication
- POST /profile/upload/profile-picture - Upload avatar
- POST /profile/upload/background-image - Upload banner

All endpoints except check-username require valid Bearer token authentication.
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from sparklink.auth.dependencies import AuthenticatedUser, get_authenticated_user
from sparklink.db.client import get_service_role_client, get_supabase_client
from sparklink.schemas.auth import UserSummary
from sparklink.schemas.profile import (
    ImageUploadResponse,
    ProfileDetails,
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    PublishRequest,
    PublishResponse,
    SocialLinkResponse,
    SocialLinksResponse,
    SocialLinksUpdateRequest,
    UsernameCheckResponse,
)
from sparklink.services.profile_service import (
    get_profile_bundle,
    replace_social_links,
    set_profile_image,
    set_published,
    update_profile,
)
from sparklink.services.storage import resolve_content_type, validate_upload
from sparklink.services.user_service import is_username_available, normalize_username, validate_username
from sparklink.utils.constants import MAX_IMAGE_BYTES, PROFILE_IMAGE_TYPES
from sparklink.utils.http_errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


def _to_profile_response(bundle: Dict[str, Any]) -> ProfileResponse:
    user = bundle.get("user")
    return ProfileResponse(
        user=UserSummary.model_validate(user) if user else None,
        profile=ProfileDetails.model_validate(bundle["profile"]),
        social_links=[SocialLinkResponse.model_validate(link) for link in bundle.get("social_links") or []],
    )


@router.get(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get user profile",
    description="""
    Retrieve the authenticated user's profile.

    This endpoint:
    - Returns the users row summary, the profile and ordered social links
    - Creates an empty, unpublished profile on first access

    Security:
    - Requires valid Authorization Bearer token
    - RLS ensures users only see their own profile
    """
)
async def get_profile(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ProfileResponse:
    """
    Get the authenticated user's profile.

    **6-STEP ENDPOINT FLOW:**

    Auth
    - Handled by get_authenticated_user dependency

    Parse/Validate Request
    - No request body

    Domain & Intent Filter
    - Simple read

    Call Service
    - get_profile_bundle()

    Map Output -> ResponseModel
    - Bundle -> ProfileResponse

    Persistence
    - Empty profile row inserted on first access
    """
    logger.info(f"Fetching profile for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        bundle = await get_profile_bundle(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve profile")

    return _to_profile_response(bundle)


@router.put(
    "",
    response_model=ProfileUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update user profile",
    description="""
    Update identity fields (names, username, country, phone) and profile
    fields (bio, tagline, country flag, branding badge).

    Rules:
    - Username must be valid and not taken (409)
    - Hiding the "Powered by SparkLink" badge requires RISE or higher (403)

    Security:
    - Requires valid Authorization Bearer token
    - RLS ensures users can only update their own rows
    """
)
async def update_profile_endpoint(
    request: ProfileUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ProfileUpdateResponse:
    logger.info(f"Updating profile for user {auth_user.user_id}")

    update_data = request.model_dump(exclude_none=True)
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
        bundle = await update_profile(supabase_client, auth_user.user_id, **update_data)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to update profile")

    return ProfileUpdateResponse(
        status="UPDATED",
        profile=_to_profile_response(bundle),
        message="Profile updated successfully",
    )


@router.get(
    "/check-username",
    response_model=UsernameCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Check username availability",
    description="Public endpoint. Invalid usernames are reported as unavailable with a reason.",
)
async def check_username(
    username: str = Query(..., min_length=1, max_length=64, description="Username to check"),
) -> UsernameCheckResponse:
    normalized = normalize_username(username)

    try:
        validate_username(normalized)
    except ValueError as e:
        return UsernameCheckResponse(username=normalized, available=False, reason=str(e))

    try:
        available = await is_username_available(get_service_role_client(), normalized)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to check username")

    return UsernameCheckResponse(
        username=normalized,
        available=available,
        reason=None if available else "Username already taken",
    )


@router.put(
    "/social-links",
    response_model=SocialLinksResponse,
    status_code=status.HTTP_200_OK,
    summary="Replace social links",
    description="""
    Replace every social link of the profile. List position becomes the
    display order. The number of links is limited by plan (403
    upgrade_required when exceeded).
    """
)
async def update_social_links(
    request: SocialLinksUpdateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> SocialLinksResponse:
    supabase_client = get_supabase_client(auth_user.access_token)
    links = [{"platform": link.platform, "url": str(link.url)} for link in request.links]

    try:
        stored = await replace_social_links(supabase_client, auth_user.user_id, links)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to update social links")

    return SocialLinksResponse(
        social_links=[SocialLinkResponse.model_validate(link) for link in stored]
    )


@router.post(
    "/publish",
    response_model=PublishResponse,
    status_code=status.HTTP_200_OK,
    summary="Publish or unpublish the profile",
)
async def publish_profile(
    request: PublishRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> PublishResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        profile = await set_published(supabase_client, auth_user.user_id, request.is_published)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to update publication status")

    is_published = bool(profile.get("is_published"))
    return PublishResponse(
        is_published=is_published,
        message="Profile published" if is_published else "Profile unpublished",
    )


async def _upload_profile_image(auth_user: AuthenticatedUser, image: UploadFile, kind: str) -> str:
    content_type = resolve_content_type(image.filename or "", image.content_type)
    file_bytes = await image.read()

    try:
        validate_upload(content_type, len(file_bytes), PROFILE_IMAGE_TYPES, MAX_IMAGE_BYTES)
    except ValueError as e:
        logger.warning(f"Rejected {kind} upload for user {auth_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_image", "details": str(e)}
        )

    supabase_client = get_supabase_client(auth_user.access_token)
    try:
        return await set_profile_image(
            supabase_client,
            auth_user.user_id,
            kind,
            file_bytes=file_bytes,
            filename=image.filename or "image",
            content_type=content_type,
        )
    except Exception as e:
        raise to_http_exception(e, "upload_error", "Failed to upload image")


@router.post(
    "/upload/profile-picture",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload profile picture",
    description="Multipart field `image`: JPEG, PNG or GIF up to 5 MB. Replaces the previous picture.",
)
async def upload_profile_picture(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    image: Annotated[UploadFile, File(description="Profile picture")],
) -> ImageUploadResponse:
    url = await _upload_profile_image(auth_user, image, "profile_picture")
    return ImageUploadResponse(url=url, message="Profile picture updated")


@router.post(
    "/upload/background-image",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload background banner",
    description="Multipart field `image`: JPEG, PNG or GIF up to 5 MB. Replaces the previous banner.",
)
async def upload_background_image(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    image: Annotated[UploadFile, File(description="Background banner")],
) -> ImageUploadResponse:
    url = await _upload_profile_image(auth_user, image, "background_image")
    return ImageUploadResponse(url=url, message="Background image updated")
