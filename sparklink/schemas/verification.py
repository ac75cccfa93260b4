"""
Pydantic schemas for the verified badge endpoints.

Submissions are multipart (documents), so there is no submit request model.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RequirementSheet(BaseModel):
    title: str
    description: str
    requirements: List[str]
    documents: List[str]
    processing_time: str = Field(..., examples=["2-5 business days"])


class RequirementsResponse(BaseModel):
    requirements: Dict[str, RequirementSheet] = Field(..., description="Sheets keyed by verification type")
    general_guidelines: List[str] = Field(..., description="Rules that apply to every request")


class VerificationRequestResponse(BaseModel):
    id: str = Field(..., description="Request UUID")
    user_id: Optional[str] = Field(None, description="Requesting user UUID")
    request_type: str = Field(..., description="Verification type", examples=["IDENTITY"])
    status: str = Field(..., description="PENDING, APPROVED or REJECTED")
    submitted_data: Optional[Dict[str, Any]] = Field(None, description="Submitted details and document paths")
    submitted_at: Optional[str] = Field(None, description="ISO-8601 submission time")
    reviewed_at: Optional[str] = Field(None, description="ISO-8601 review time")
    reviewed_by: Optional[str] = Field(None, description="Reviewing admin UUID")
    review_notes: Optional[str] = Field(None, description="Reviewer notes or rejection reason")
    created_at: Optional[str] = Field(None, description="ISO-8601 creation time")


class UserVerificationState(BaseModel):
    has_verified_badge: bool
    verification_status: str = Field(..., examples=["NONE", "PENDING", "APPROVED"])
    can_apply: bool = Field(..., description="True on plans that include the verified badge")
    submitted_at: Optional[str] = None
    approved_at: Optional[str] = None
    rejected_at: Optional[str] = None
    admin_notes: Optional[str] = None


class VerificationStatusResponse(BaseModel):
    user: UserVerificationState
    latest_request: Optional[VerificationRequestResponse] = None


class VerificationHistoryResponse(BaseModel):
    requests: List[VerificationRequestResponse] = Field(..., description="Requests, newest first")


class SubmitVerificationResponse(BaseModel):
    request_id: str = Field(..., description="New request UUID")
    status: str = Field("PENDING", description="Always PENDING")
    submitted_at: str = Field(..., description="ISO-8601 submission time")
    message: str = Field("Verification request submitted successfully")


class AdminUserSummary(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    subscription: Optional[str] = None


class PendingVerificationResponse(VerificationRequestResponse):
    user: Optional[AdminUserSummary] = None
    document_urls: List[str] = Field(default_factory=list, description="Short-lived signed document URLs")


class PendingVerificationListResponse(BaseModel):
    requests: List[PendingVerificationResponse] = Field(..., description="Pending requests, oldest first")


class ApproveRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000, description="Notes shown to the user")


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000, description="Reason shown to the user")


class RevokeRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000, description="Reason shown to the user")


class VerificationActionResponse(BaseModel):
    message: str = Field(..., examples=["Verification request approved successfully"])
