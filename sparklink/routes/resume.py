"""
Resume API endpoints.

One PDF resume per profile. Owners manage it here; visitors read it
through /public/{username}/resume or the /resume/public/... paths below.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Path, Request, UploadFile, status
from fastapi.responses import RedirectResponse

from sparklink.auth.dependencies import AuthenticatedUser, get_authenticated_user
from sparklink.db.client import get_service_role_client, get_supabase_client
from sparklink.routes.public import redirect_to_resume
from sparklink.schemas.resume import (
    ResumeDeleteResponse,
    ResumeInfoResponse,
    ResumeSettingsRequest,
    ResumeUploadResponse,
)
from sparklink.services.resume_service import (
    delete_resume,
    get_public_resume_info,
    get_resume_info,
    update_resume_settings,
    upload_resume,
)
from sparklink.services.storage import resolve_content_type, validate_upload
from sparklink.utils.constants import MAX_RESUME_BYTES
from sparklink.utils.http_errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resume", tags=["resume"])


@router.post(
    "/upload",
    response_model=ResumeUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload resume",
    description="""
    Multipart field `resume`: PDF up to 10 MB. Replaces any previous resume
    and enables downloads.

    Security:
    - Requires valid Authorization Bearer token
    - Stored in a private bucket; visitors only get short-lived signed URLs
    """
)
async def upload(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    resume: Annotated[UploadFile, File(description="Resume PDF")],
) -> ResumeUploadResponse:
    content_type = resolve_content_type(resume.filename or "", resume.content_type)
    file_bytes = await resume.read()

    try:
        validate_upload(content_type, len(file_bytes), ("application/pdf",), MAX_RESUME_BYTES)
    except ValueError as e:
        logger.warning(f"Rejected resume upload for user {auth_user.user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_file", "details": "Only PDF files up to 10MB are allowed"}
        )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        info = await upload_resume(
            supabase_client,
            auth_user.user_id,
            file_bytes=file_bytes,
            filename=resume.filename or "resume.pdf",
        )
    except Exception as e:
        raise to_http_exception(e, "upload_error", "Failed to upload resume")

    return ResumeUploadResponse(resume=ResumeInfoResponse.model_validate(info))


@router.get(
    "/info",
    response_model=ResumeInfoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get resume info",
)
async def info(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ResumeInfoResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await get_resume_info(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve resume info")

    return ResumeInfoResponse.model_validate(result)


@router.put(
    "/settings",
    response_model=ResumeInfoResponse,
    status_code=status.HTTP_200_OK,
    summary="Update resume settings",
    description="Toggle visitor downloads. 400 when no resume is uploaded.",
)
async def settings_endpoint(
    request: ResumeSettingsRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ResumeInfoResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await update_resume_settings(supabase_client, auth_user.user_id, request.allow_resume_download)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to update resume settings")

    return ResumeInfoResponse.model_validate(result)


@router.delete(
    "",
    response_model=ResumeDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete resume",
)
async def delete(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ResumeDeleteResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        await delete_resume(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "delete_error", "Failed to delete resume")

    return ResumeDeleteResponse()


@router.get(
    "/public/{username}/info",
    response_model=ResumeInfoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get public resume info",
    description="Public endpoint. Same as GET /public/{username}/resume.",
)
async def public_info(
    username: str = Path(..., min_length=1, max_length=64, description="Profile username"),
) -> ResumeInfoResponse:
    try:
        result = await get_public_resume_info(get_service_role_client(), username)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve resume info")

    return ResumeInfoResponse.model_validate(result)


@router.get(
    "/download/{username}",
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Download a resume",
    description="Public endpoint. Same as GET /public/{username}/resume/download.",
    response_class=RedirectResponse,
)
async def public_download(
    request: Request,
    username: str = Path(..., min_length=1, max_length=64, description="Profile username"),
) -> RedirectResponse:
    return await redirect_to_resume(request, username)
