"""
Pydantic schemas for profile endpoints.

These models define the strict request/response contracts for the profile
dashboard. A profile is 1:1 with a user; identity fields (names, username)
live on the users row and are edited through the same endpoint.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, HttpUrl

from sparklink.schemas.auth import UserSummary

SocialPlatform = Literal[
    "twitter",
    "linkedin",
    "github",
    "instagram",
    "facebook",
    "youtube",
    "tiktok",
    "website",
]


# --- Profile response models ---

class SocialLinkResponse(BaseModel):
    platform: str = Field(..., description="Social platform", examples=["github"])
    url: str = Field(..., description="Link target")
    order: int = Field(0, description="Display position (0-based)")


class ProfileDetails(BaseModel):
    """
    The profile row as the dashboard sees it.
    """
    id: str = Field(..., description="Profile UUID")
    user_id: str = Field(..., description="Owner user UUID")
    bio: Optional[str] = Field(None, description="Long-form bio")
    tagline: Optional[str] = Field(None, description="Short headline under the name")
    country_flag: Optional[str] = Field(None, description="Flag emoji or country code shown next to the name")
    background_image: Optional[str] = Field(None, description="Public URL of the banner image")
    template_id: Optional[str] = Field(None, description="Selected template id", examples=["minimal"])
    color_scheme: Optional[Dict[str, str]] = Field(None, description="Template colors keyed by role")
    is_published: bool = Field(False, description="True when the public page is visible")
    show_powered_by: bool = Field(True, description="Show the 'Powered by SparkLink' badge")
    resume_file_name: Optional[str] = Field(None, description="Original name of the uploaded resume")
    allow_resume_download: bool = Field(False, description="Visitors may download the resume")


class ProfileResponse(BaseModel):
    """
    Response for GET /profile - user summary, profile and social links.
    """
    user: Optional[UserSummary] = Field(None, description="The users row")
    profile: ProfileDetails = Field(..., description="Profile (created empty on first access)")
    social_links: List[SocialLinkResponse] = Field(default_factory=list, description="Links ordered by position")


# --- Profile update models ---

class ProfileUpdateRequest(BaseModel):
    """
    Request to update the profile.

    All fields are optional - only provided fields will be updated.
    Hiding the SparkLink badge (show_powered_by=false) requires RISE or higher.
    """
    first_name: Optional[str] = Field(None, min_length=1, max_length=100, description="Updated first name")
    last_name: Optional[str] = Field(None, max_length=100, description="Updated last name")
    username: Optional[str] = Field(
        None,
        min_length=3,
        max_length=30,
        description="New username (lowercase letters, digits, underscore)",
        examples=["ama_mensah"]
    )
    country: Optional[str] = Field(None, max_length=100, description="Country")
    phone: Optional[str] = Field(None, max_length=30, description="Phone number")
    bio: Optional[str] = Field(None, max_length=2000, description="Long-form bio")
    tagline: Optional[str] = Field(None, max_length=160, description="Short headline")
    country_flag: Optional[str] = Field(None, max_length=16, description="Flag emoji or country code")
    show_powered_by: Optional[bool] = Field(None, description="Show the 'Powered by SparkLink' badge")


class ProfileUpdateResponse(BaseModel):
    """
    Response after successfully updating profile.
    """
    status: str = Field("UPDATED", description="Indicates the profile was successfully updated")
    profile: ProfileResponse = Field(..., description="Complete updated profile details")
    message: str = Field(
        ...,
        description="Success message",
        examples=["Profile updated successfully"]
    )


# --- Username availability ---

class UsernameCheckResponse(BaseModel):
    username: str = Field(..., description="Normalized (lowercased) username that was checked")
    available: bool = Field(..., description="True if the username is valid and free")
    reason: Optional[str] = Field(None, description="Why the username cannot be used")


# --- Social links ---

class SocialLinkInput(BaseModel):
    platform: SocialPlatform = Field(..., description="Social platform")
    url: HttpUrl = Field(..., description="Link target (http/https)", examples=["https://github.com/ama"])


class SocialLinksUpdateRequest(BaseModel):
    """
    Replace every social link. List position becomes display order.
    The number of links is limited by the plan (5 STARTER, 10 RISE).
    """
    links: List[SocialLinkInput] = Field(..., description="Complete list of links")


class SocialLinksResponse(BaseModel):
    social_links: List[SocialLinkResponse] = Field(..., description="Links ordered by position")


# --- Publication ---

class PublishRequest(BaseModel):
    is_published: bool = Field(..., description="True to make the public page visible")


class PublishResponse(BaseModel):
    is_published: bool = Field(..., description="New publication state")
    message: str = Field(..., description="Success message", examples=["Profile published"])


# --- Image uploads ---

class ImageUploadResponse(BaseModel):
    url: str = Field(..., description="Public URL of the stored image")
    message: str = Field(..., description="Success message", examples=["Profile picture updated"])
