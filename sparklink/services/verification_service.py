"""
Verified badge service.

BLAZE subscribers submit a verification request with supporting
documents; admins review pending requests and approve, reject or later
revoke the badge. The users row mirrors the state of the latest request
(verification_status and the approved/rejected timestamps) so public
reads need no join.

Request statuses: PENDING, APPROVED, REJECTED. User statuses add NONE
and REVOKED.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, cast

from supabase import Client

from sparklink.config import settings
from sparklink.services.errors import ConflictError, NotFoundError, UpgradeRequiredError
from sparklink.services.storage import (
    delete_file,
    get_signed_url,
    resolve_content_type,
    upload_file,
    validate_upload,
)
from sparklink.services.user_service import get_user, update_user
from sparklink.utils.constants import (
    MAX_IMAGE_BYTES,
    MAX_VERIFICATION_DOCUMENTS,
    VERIFICATION_DOCUMENT_TYPES,
    VERIFICATION_TYPES,
)
from sparklink.utils.plans import minimum_tier_for, normalize_tier, plan_allows

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = "id, request_type, status, submitted_at, reviewed_at, review_notes, created_at"
ADMIN_USER_COLUMNS = "id, email, first_name, last_name, username, subscription"
DOCUMENT_URL_TTL_SECONDS = 900

# (file bytes, original filename, declared content type)
Document = Tuple[bytes, str, Optional[str]]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _latest_request(supabase_client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    result = (
        supabase_client.table("verification_request")
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    return cast(Dict[str, Any], result.data[0])


async def get_status(supabase_client: Client, user_id: str) -> Dict[str, Any]:
    """
    Badge state for the dashboard.

    Returns:
        {"user": {has_verified_badge, verification_status, can_apply,
                  submitted_at, approved_at, rejected_at, admin_notes},
         "latest_request": dict | None}
    """
    user = await get_user(supabase_client, user_id)
    if not user:
        raise NotFoundError("User not found")

    return {
        "user": {
            "has_verified_badge": bool(user.get("has_verified_badge")),
            "verification_status": user.get("verification_status") or "NONE",
            "can_apply": plan_allows(user.get("subscription"), "verified_badge"),
            "submitted_at": user.get("verification_submitted_at"),
            "approved_at": user.get("verification_approved_at"),
            "rejected_at": user.get("verification_rejected_at"),
            "admin_notes": user.get("verification_notes"),
        },
        "latest_request": await _latest_request(supabase_client, user_id),
    }


async def get_history(supabase_client: Client, user_id: str) -> List[Dict[str, Any]]:
    result = (
        supabase_client.table("verification_request")
        .select(HISTORY_COLUMNS)
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return cast(List[Dict[str, Any]], result.data or [])


def validate_documents(documents: Sequence[Document]) -> List[Document]:
    """
    Check count, type and size of submitted documents.

    Returns:
        Documents with resolved content types

    Raises:
        ValueError: Too many files, or a file with a bad type or size
    """
    if len(documents) > MAX_VERIFICATION_DOCUMENTS:
        raise ValueError(f"At most {MAX_VERIFICATION_DOCUMENTS} documents can be uploaded")

    checked: List[Document] = []
    for file_bytes, filename, content_type in documents:
        resolved = resolve_content_type(filename, content_type)
        validate_upload(resolved, len(file_bytes), VERIFICATION_DOCUMENT_TYPES, MAX_IMAGE_BYTES)
        checked.append((file_bytes, filename, resolved))
    return checked


async def _remove_documents(service_client: Client, paths: Sequence[str]) -> None:
    for path in paths:
        await delete_file(service_client, settings.SUPABASE_VERIFICATION_BUCKET, path)


async def submit_request(
    supabase_client: Client,
    user_id: str,
    verification_type: str,
    social_links: Optional[Dict[str, Any]] = None,
    business_info: Optional[Dict[str, Any]] = None,
    additional_info: Optional[str] = None,
    documents: Sequence[Document] = (),
    *,
    service_client: Client,
) -> Dict[str, Any]:
    """
    Create a PENDING verification request.

    Documents go to the private verification bucket under the caller's
    session; their storage paths are kept in submitted_data.documents.
    The request row and the users verification columns are written with
    the service role client. Uploaded documents are removed again when
    the request cannot be stored.

    Raises:
        NotFoundError: User row missing
        UpgradeRequiredError: Caller is not on BLAZE
        ConflictError: A request is already pending, or the user is verified
        ValueError: Unknown verification type or bad documents
    """
    user = await get_user(supabase_client, user_id)
    if not user:
        raise NotFoundError("User not found")

    tier = normalize_tier(user.get("subscription"))
    if not plan_allows(tier, "verified_badge"):
        raise UpgradeRequiredError(
            "Verification badge is only available for BLAZE tier subscribers",
            required_tier=minimum_tier_for("verified_badge"),
            current_tier=tier,
        )

    status = user.get("verification_status") or "NONE"
    if status == "PENDING":
        raise ConflictError("You already have a pending verification request")
    if status == "APPROVED":
        raise ConflictError("You are already verified")

    if verification_type not in VERIFICATION_TYPES:
        raise ValueError("Invalid verification type")

    checked = validate_documents(documents)

    stored_paths: List[str] = []
    try:
        for file_bytes, filename, content_type in checked:
            path = await upload_file(
                supabase_client,
                bucket=settings.SUPABASE_VERIFICATION_BUCKET,
                folder="verification",
                user_id=user_id,
                file_bytes=file_bytes,
                filename=filename,
                content_type=content_type,
            )
            stored_paths.append(path)

        submitted_at = _now_iso()
        submitted_data = {
            "verification_type": verification_type,
            "social_links": social_links or {},
            "business_info": business_info or {},
            "additional_info": additional_info or "",
            "documents": stored_paths,
            "submitted_at": submitted_at,
        }

        result = (
            service_client.table("verification_request")
            .insert({
                "user_id": user_id,
                "request_type": verification_type,
                "status": "PENDING",
                "submitted_data": submitted_data,
                "submitted_at": submitted_at,
            })
            .execute()
        )
        if not result.data:
            raise Exception("Failed to create verification request: no data returned")
    except Exception:
        logger.warning(f"Verification submission failed for user {user_id}; removing {len(stored_paths)} documents")
        await _remove_documents(service_client, stored_paths)
        raise

    request = cast(Dict[str, Any], result.data[0])

    await update_user(
        service_client,
        user_id,
        verification_status="PENDING",
        verification_submitted_at=submitted_at,
        verification_data=submitted_data,
    )

    logger.info(
        f"Verification request {request['id']} submitted by user {user_id}: "
        f"type={verification_type}, documents={len(stored_paths)}"
    )
    return {"request_id": request["id"], "status": "PENDING", "submitted_at": submitted_at}


async def cancel_request(
    supabase_client: Client,
    user_id: str,
    request_id: str,
    *,
    service_client: Client,
) -> None:
    """
    Withdraw the caller's own pending request.

    Raises:
        NotFoundError: No pending request with that id for this user
    """
    result = (
        supabase_client.table("verification_request")
        .select("id")
        .eq("id", request_id)
        .eq("user_id", user_id)
        .eq("status", "PENDING")
        .execute()
    )
    if not result.data:
        raise NotFoundError("Pending verification request not found")

    now = _now_iso()
    service_client.table("verification_request").update({
        "status": "REJECTED",
        "reviewed_at": now,
        "review_notes": "Cancelled by user",
    }).eq("id", request_id).eq("user_id", user_id).execute()

    await update_user(
        service_client,
        user_id,
        verification_status="NONE",
        verification_rejected_at=now,
        verification_notes="Request cancelled by user",
    )
    logger.info(f"User {user_id} cancelled verification request {request_id}")


# Admin operations take the service role client: reviewers act on other
# users' rows.

async def list_pending_requests(service_client: Client) -> List[Dict[str, Any]]:
    """
    Pending requests, oldest first, each with a user summary and signed
    URLs for its documents.
    """
    result = (
        service_client.table("verification_request")
        .select(f"*, user:users({ADMIN_USER_COLUMNS})")
        .eq("status", "PENDING")
        .order("submitted_at")
        .execute()
    )
    requests = cast(List[Dict[str, Any]], result.data or [])

    for request in requests:
        paths = (request.get("submitted_data") or {}).get("documents") or []
        urls: List[str] = []
        for path in paths:
            try:
                urls.append(get_signed_url(
                    service_client,
                    settings.SUPABASE_VERIFICATION_BUCKET,
                    path,
                    expires_in=DOCUMENT_URL_TTL_SECONDS,
                ))
            except Exception:
                logger.warning(f"Skipping unreadable document {path} of request {request.get('id')}")
        request["document_urls"] = urls

    return requests


async def _get_pending(service_client: Client, request_id: str) -> Dict[str, Any]:
    result = (
        service_client.table("verification_request")
        .select("*")
        .eq("id", request_id)
        .eq("status", "PENDING")
        .execute()
    )
    if not result.data:
        raise NotFoundError("Verification request not found or not pending")
    return cast(Dict[str, Any], result.data[0])


async def approve_request(
    service_client: Client,
    admin_id: str,
    request_id: str,
    notes: Optional[str] = None,
) -> None:
    request = await _get_pending(service_client, request_id)
    now = _now_iso()

    service_client.table("verification_request").update({
        "status": "APPROVED",
        "reviewed_at": now,
        "reviewed_by": admin_id,
        "review_notes": notes or "",
    }).eq("id", request_id).execute()

    await update_user(
        service_client,
        str(request["user_id"]),
        has_verified_badge=True,
        verification_status="APPROVED",
        verification_approved_at=now,
        verification_notes=notes or "",
    )
    logger.info(f"Admin {admin_id} approved verification request {request_id}")


async def reject_request(
    service_client: Client,
    admin_id: str,
    request_id: str,
    reason: str,
) -> None:
    """
    Raises:
        ValueError: Empty reason
        NotFoundError: Request missing or not pending
    """
    if not reason or not reason.strip():
        raise ValueError("Rejection reason is required")

    request = await _get_pending(service_client, request_id)
    now = _now_iso()

    service_client.table("verification_request").update({
        "status": "REJECTED",
        "reviewed_at": now,
        "reviewed_by": admin_id,
        "review_notes": reason,
    }).eq("id", request_id).execute()

    await update_user(
        service_client,
        str(request["user_id"]),
        verification_status="REJECTED",
        verification_rejected_at=now,
        verification_notes=reason,
    )
    logger.info(f"Admin {admin_id} rejected verification request {request_id}")


async def revoke_badge(
    service_client: Client,
    admin_id: str,
    user_id: str,
    reason: Optional[str] = None,
) -> None:
    """
    Remove an approved badge.

    Raises:
        NotFoundError: User missing or not currently verified
    """
    user = await get_user(service_client, user_id)
    if not user or not user.get("has_verified_badge"):
        raise NotFoundError("Verified user not found")

    await update_user(
        service_client,
        user_id,
        has_verified_badge=False,
        verification_status="REVOKED",
        verification_notes=reason or "Verification revoked",
    )
    logger.info(f"Admin {admin_id} revoked verified badge of user {user_id}")
