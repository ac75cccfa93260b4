"""
Pydantic schemas for the public (visitor-facing) endpoints.

These responses expose only public fields: no emails, phone numbers,
storage paths or password hashes.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from sparklink.schemas.profile import SocialLinkResponse, SocialPlatform


class PublicUser(BaseModel):
    id: str = Field(..., description="User UUID")
    username: Optional[str] = Field(None, description="Public username")
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    country: Optional[str] = None
    profile_picture: Optional[str] = Field(None, description="Public URL of the profile picture")
    has_verified_badge: bool = Field(False, description="Show the verified badge")


class PublicProfile(BaseModel):
    bio: Optional[str] = None
    tagline: Optional[str] = None
    background_image: Optional[str] = None
    country_flag: Optional[str] = None
    template_id: str = Field(..., description="Template to render with", examples=["minimal"])
    color_scheme: Dict[str, str] = Field(..., description="Colors to render with")
    show_powered_by: bool = Field(..., description="Render the 'Powered by SparkLink' badge")
    has_resume: bool = Field(False, description="A resume can be downloaded")
    social_links: List[SocialLinkResponse] = Field(default_factory=list)


class PublicProfileResponse(BaseModel):
    """
    Response for GET /public/{username}.
    """
    user: PublicUser
    profile: PublicProfile


class PublicPageSummary(BaseModel):
    id: str
    type: str = Field(..., examples=["ABOUT"])
    title: str
    slug: str
    order: int
    is_password_protected: bool = Field(False, description="Content needs a page access token")


class PublicPageListResponse(BaseModel):
    pages: List[PublicPageSummary] = Field(..., description="Live pages ordered by position")


class PublicPageResponse(BaseModel):
    id: str
    type: str
    title: str
    slug: str
    content: Dict[str, Any] = Field(default_factory=dict)
    order: int
    is_password_protected: bool = False
    updated_at: Optional[str] = None


class PageUnlockRequest(BaseModel):
    password: str = Field(..., min_length=1, description="Password entered by the visitor")


class PageUnlockResponse(BaseModel):
    success: bool = Field(True)
    message: str = Field("Access granted")
    access_token: str = Field(..., description="Send as the X-Page-Access header when loading the page")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class SocialClickRequest(BaseModel):
    platform: SocialPlatform = Field(..., description="Clicked platform")
    url: Optional[str] = Field(None, description="Clicked link")


class TrackedResponse(BaseModel):
    tracked: bool = Field(..., description="True if the event was recorded")
