"""
Pydantic schemas for page CRUD endpoints.

A page is one unit of published content on a profile (about, projects,
contact, ...). Pages are ordered by a dense 0-based `order` and may be
password protected (RISE+) or scheduled (BLAZE).
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

PageType = Literal[
    "HOME",
    "ABOUT",
    "PROJECTS",
    "SERVICES",
    "CONTACT",
    "GALLERY",
    "BLOG",
    "RESUME",
    "TESTIMONIALS",
    "CUSTOM",
]

SLUG_REGEX = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# --- Page response models ---

class PageResponse(BaseModel):
    """
    Response for page details. The password hash is never returned.
    """
    id: str = Field(..., description="Page UUID")
    profile_id: str = Field(..., description="Owning profile UUID")
    type: PageType = Field(..., description="Kind of page")
    title: str = Field(..., description="Display title")
    slug: str = Field(..., description="URL segment, unique per profile", examples=["my-projects"])
    content: Dict[str, Any] = Field(default_factory=dict, description="Free-form page content (JSON)")
    order: int = Field(..., description="Display position (0-based)")
    is_published: bool = Field(..., description="False hides the page from visitors")
    is_password_protected: bool = Field(False, description="Visitors must unlock the page with a password")
    publish_at: Optional[str] = Field(None, description="ISO-8601 time the page goes live")
    expires_at: Optional[str] = Field(None, description="ISO-8601 time the page stops being served")
    created_at: Optional[str] = Field(None, description="ISO-8601 timestamp when created")
    updated_at: Optional[str] = Field(None, description="ISO-8601 timestamp of last update")


class PageListResponse(BaseModel):
    pages: List[PageResponse] = Field(..., description="Pages ordered by position")
    count: int = Field(..., description="Number of pages returned")


# --- Page create / update models ---

class PageCreateRequest(BaseModel):
    """
    Request to create a page. The page is appended after existing pages.

    Rules:
    - Page count is limited by plan (STARTER 1, RISE 6, BLAZE unlimited)
    - is_password_protected requires RISE+ and a password
    - publish_at / expires_at require BLAZE; expires_at must be after publish_at
    """
    type: PageType = Field(..., description="Kind of page", examples=["ABOUT", "PROJECTS"])
    title: str = Field(..., min_length=1, max_length=200, description="Display title")
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_REGEX, description="URL segment")
    content: Optional[Dict[str, Any]] = Field(None, description="Free-form page content (JSON)")
    is_published: bool = Field(True, description="Publish immediately")
    is_password_protected: bool = Field(False, description="Require a password to view")
    password: Optional[str] = Field(None, min_length=4, max_length=128, description="Page password (write-only)")
    publish_at: Optional[datetime] = Field(None, description="Scheduled publication time")
    expires_at: Optional[datetime] = Field(None, description="Scheduled expiry time")


class PageUpdateRequest(BaseModel):
    """
    Partial page update. Only provided fields change.

    Setting is_password_protected=false clears the stored password.
    """
    type: Optional[PageType] = Field(None, description="Kind of page")
    title: Optional[str] = Field(None, min_length=1, max_length=200, description="Display title")
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_REGEX, description="URL segment")
    content: Optional[Dict[str, Any]] = Field(None, description="Free-form page content (JSON)")
    is_published: Optional[bool] = Field(None, description="Publication flag")
    is_password_protected: Optional[bool] = Field(None, description="Require a password to view")
    password: Optional[str] = Field(None, min_length=4, max_length=128, description="New page password")
    publish_at: Optional[datetime] = Field(None, description="Scheduled publication time")
    expires_at: Optional[datetime] = Field(None, description="Scheduled expiry time")


class PageMutationResponse(BaseModel):
    status: str = Field(..., description="CREATED or UPDATED", examples=["CREATED"])
    page: PageResponse = Field(..., description="The stored page")
    message: str = Field(..., description="Success message")


class PageDeleteResponse(BaseModel):
    status: str = Field("DELETED", description="Indicates the page was deleted")
    page_id: str = Field(..., description="Deleted page UUID")
    message: str = Field(..., description="Success message", examples=["Page deleted successfully"])


# --- Reorder ---

class OrderEntry(BaseModel):
    id: str = Field(..., description="Row UUID")
    order: int = Field(..., ge=0, description="Requested position")


class PageReorderRequest(BaseModel):
    """Unknown ids are ignored; the rest keep their relative order after the requested ones."""
    page_orders: List[OrderEntry] = Field(..., description="Requested positions")


# --- Password check ---

class PagePasswordCheckRequest(BaseModel):
    page_id: str = Field(..., description="Page UUID")
    password: str = Field(..., min_length=1, description="Password entered by the visitor")


class PagePasswordCheckResponse(BaseModel):
    valid: bool = Field(..., description="True if the password matches")
    page_id: str = Field(..., description="Page UUID")
    access_token: Optional[str] = Field(
        None,
        description="Page access token for the X-Page-Access header (only when valid)"
    )
    expires_in: Optional[int] = Field(None, description="Token lifetime in seconds")
