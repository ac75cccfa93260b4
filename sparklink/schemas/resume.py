"""
Pydantic schemas for resume endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ResumeInfoResponse(BaseModel):
    """
    Resume state of a profile.

    For visitors, file details are null unless the profile is published
    and downloads are allowed.
    """
    has_resume: bool = Field(..., description="True if a resume is available")
    resume_file_name: Optional[str] = Field(None, description="Original file name", examples=["ama-mensah-cv.pdf"])
    resume_uploaded_at: Optional[str] = Field(None, description="ISO-8601 upload time")
    allow_resume_download: bool = Field(False, description="Visitors may download the resume")


class ResumeUploadResponse(BaseModel):
    resume: ResumeInfoResponse = Field(..., description="Resume state after the upload")
    message: str = Field("Resume uploaded successfully", description="Success message")


class ResumeSettingsRequest(BaseModel):
    allow_resume_download: bool = Field(..., description="Allow visitors to download the resume")


class ResumeDeleteResponse(BaseModel):
    status: str = Field("DELETED", description="Indicates the resume was removed")
    message: str = Field("Resume deleted successfully", description="Success message")
