"""
Verified badge API endpoints.

BLAZE subscribers apply for a verified badge with supporting documents;
administrators (ADMIN_USER_IDS) review the queue under /verification/admin.
"""

import json
import logging
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, UploadFile, status

from sparklink.auth.dependencies import AuthenticatedUser, get_admin_user, get_authenticated_user
from sparklink.auth.tiers import require_tier
from sparklink.db.client import get_service_role_client, get_supabase_client
from sparklink.schemas.verification import (
    ApproveRequest,
    PendingVerificationListResponse,
    RejectRequest,
    RequirementSheet,
    RequirementsResponse,
    RevokeRequest,
    SubmitVerificationResponse,
    VerificationActionResponse,
    VerificationHistoryResponse,
    VerificationStatusResponse,
)
from sparklink.services.verification_service import (
    Document,
    approve_request,
    cancel_request,
    get_history,
    get_status,
    list_pending_requests,
    reject_request,
    revoke_badge,
    submit_request,
)
from sparklink.utils.constants import VERIFICATION_GUIDELINES, VERIFICATION_REQUIREMENTS
from sparklink.utils.http_errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/verification", tags=["verification"])


def _parse_json_field(name: str, raw: Optional[str]) -> Dict[str, Any]:
    """Decode a JSON object sent as a multipart form field."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": f"{name} must be a JSON object"}
        )
    if not isinstance(value, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": f"{name} must be a JSON object"}
        )
    return value


@router.get(
    "/requirements",
    response_model=RequirementsResponse,
    status_code=status.HTTP_200_OK,
    summary="Verification requirements",
    description="Public endpoint. Requirement sheets per verification type plus general guidelines.",
)
async def requirements() -> RequirementsResponse:
    return RequirementsResponse(
        requirements={
            request_type: RequirementSheet.model_validate(sheet)
            for request_type, sheet in VERIFICATION_REQUIREMENTS.items()
        },
        general_guidelines=list(VERIFICATION_GUIDELINES),
    )


@router.get(
    "/status",
    response_model=VerificationStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Get verification status",
)
async def verification_status(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> VerificationStatusResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await get_status(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve verification status")

    return VerificationStatusResponse.model_validate(result)


@router.get(
    "/history",
    response_model=VerificationHistoryResponse,
    status_code=status.HTTP_200_OK,
    summary="List verification requests",
)
async def verification_history(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> VerificationHistoryResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        requests = await get_history(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve verification history")

    return VerificationHistoryResponse.model_validate({"requests": requests})


@router.post(
    "/submit",
    response_model=SubmitVerificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a verification request",
    description="""
    Multipart form:
    - verification_type: IDENTITY, BUSINESS, SOCIAL, CELEBRITY or ORGANIZATION
    - social_links / business_info: optional JSON objects
    - additional_info: optional free text
    - documents: up to 5 JPEG, PNG, WebP or PDF files of at most 5 MB each

    Errors:
    - 403 upgrade_required below BLAZE
    - 409 conflict when a request is pending or the badge is already held
    """
)
async def submit(
    auth_user: Annotated[AuthenticatedUser, Depends(require_tier("BLAZE"))],
    verification_type: Annotated[str, Form()],
    social_links: Annotated[Optional[str], Form()] = None,
    business_info: Annotated[Optional[str], Form()] = None,
    additional_info: Annotated[Optional[str], Form(max_length=5000)] = None,
    documents: Annotated[Optional[List[UploadFile]], File()] = None,
) -> SubmitVerificationResponse:
    """
    Submit a verification request.

    **6-STEP ENDPOINT FLOW:**

    Auth
    - require_tier("BLAZE") rejects lower plans before the upload is read

    Parse/Validate Request
    - JSON form fields decoded; files read into memory

    Domain & Intent Filter
    - Tier, duplicate and document checks in submit_request()

    Call Service
    - submit_request()

    Map Output -> ResponseModel
    - SubmitVerificationResponse

    Persistence
    - Documents in the verification bucket, verification_request row,
      users.verification_status = PENDING (service role writes)
    """
    parsed_social = _parse_json_field("social_links", social_links)
    parsed_business = _parse_json_field("business_info", business_info)

    files: List[Document] = []
    for upload in documents or []:
        files.append((await upload.read(), upload.filename or "document", upload.content_type))

    logger.info(f"User {auth_user.user_id} submitting {verification_type} verification with {len(files)} documents")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await submit_request(
            supabase_client,
            auth_user.user_id,
            verification_type=verification_type,
            social_links=parsed_social,
            business_info=parsed_business,
            additional_info=additional_info,
            documents=files,
            service_client=get_service_role_client(),
        )
    except Exception as e:
        raise to_http_exception(e, "submit_error", "Failed to submit verification request")

    return SubmitVerificationResponse.model_validate(result)


@router.delete(
    "/cancel/{request_id}",
    response_model=VerificationActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel a pending request",
)
async def cancel(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    request_id: str = Path(..., description="Verification request UUID"),
) -> VerificationActionResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        await cancel_request(
            supabase_client, auth_user.user_id, request_id, service_client=get_service_role_client()
        )
    except Exception as e:
        raise to_http_exception(e, "cancel_error", "Failed to cancel verification request")

    return VerificationActionResponse(message="Verification request cancelled successfully")


@router.get(
    "/admin/pending",
    response_model=PendingVerificationListResponse,
    status_code=status.HTTP_200_OK,
    summary="List pending requests (admin)",
    description="Admin only. Pending requests, oldest first, with user summaries and signed document URLs.",
)
async def admin_pending(
    admin_user: Annotated[AuthenticatedUser, Depends(get_admin_user)]
) -> PendingVerificationListResponse:
    logger.info(f"Admin {admin_user.user_id} listing pending verification requests")

    try:
        requests = await list_pending_requests(get_service_role_client())
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve pending requests")

    return PendingVerificationListResponse.model_validate({"requests": requests})


@router.post(
    "/admin/approve/{request_id}",
    response_model=VerificationActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Approve a request (admin)",
)
async def admin_approve(
    admin_user: Annotated[AuthenticatedUser, Depends(get_admin_user)],
    request_id: str = Path(..., description="Verification request UUID"),
    request: Optional[ApproveRequest] = None,
) -> VerificationActionResponse:
    notes = request.notes if request else None

    try:
        await approve_request(get_service_role_client(), admin_user.user_id, request_id, notes=notes)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to approve verification request")

    return VerificationActionResponse(message="Verification request approved successfully")


@router.post(
    "/admin/reject/{request_id}",
    response_model=VerificationActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Reject a request (admin)",
)
async def admin_reject(
    request: RejectRequest,
    admin_user: Annotated[AuthenticatedUser, Depends(get_admin_user)],
    request_id: str = Path(..., description="Verification request UUID"),
) -> VerificationActionResponse:
    try:
        await reject_request(get_service_role_client(), admin_user.user_id, request_id, request.reason)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to reject verification request")

    return VerificationActionResponse(message="Verification request rejected successfully")


@router.post(
    "/admin/revoke/{user_id}",
    response_model=VerificationActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Revoke a verified badge (admin)",
)
async def admin_revoke(
    admin_user: Annotated[AuthenticatedUser, Depends(get_admin_user)],
    user_id: str = Path(..., description="User UUID"),
    request: Optional[RevokeRequest] = None,
) -> VerificationActionResponse:
    reason = request.reason if request else None

    try:
        await revoke_badge(get_service_role_client(), admin_user.user_id, user_id, reason=reason)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to revoke verification")

    return VerificationActionResponse(message="Verification revoked successfully")
