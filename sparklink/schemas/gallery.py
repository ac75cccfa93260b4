"""
Pydantic schemas for gallery endpoints.

Uploads arrive as multipart forms, so only update, reorder and response
models live here.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from sparklink.schemas.pages import OrderEntry


class GalleryItemResponse(BaseModel):
    id: str = Field(..., description="Gallery item UUID")
    profile_id: str = Field(..., description="Owning profile UUID")
    title: str = Field(..., description="Item title")
    description: Optional[str] = Field(None, description="Item description")
    image_url: str = Field(..., description="Public URL of the image")
    category: Optional[str] = Field(None, description="Free-form category", examples=["travel"])
    tags: List[str] = Field(default_factory=list, description="Tags")
    order: int = Field(..., description="Display position (0-based)")
    is_visible: bool = Field(True, description="False hides the item from visitors")
    created_at: Optional[str] = Field(None, description="ISO-8601 timestamp when created")
    updated_at: Optional[str] = Field(None, description="ISO-8601 timestamp of last update")


class Pagination(BaseModel):
    total: int = Field(..., description="Items matching the filter")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Items skipped")
    has_more: bool = Field(..., description="True if more items follow this page")


class GalleryListResponse(BaseModel):
    """
    Response for gallery listings (owner and public).
    """
    items: List[GalleryItemResponse] = Field(..., description="Items ordered by position, newest first within a position")
    pagination: Pagination = Field(..., description="Pagination info")
    categories: List[str] = Field(..., description="Sorted distinct categories of the gallery")


class GalleryItemUpdateRequest(BaseModel):
    """
    Partial update. Only provided fields change.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200, description="Item title")
    description: Optional[str] = Field(None, max_length=2000, description="Item description")
    category: Optional[str] = Field(None, max_length=100, description="Category")
    tags: Optional[List[str]] = Field(None, description="Replacement tag list")
    is_visible: Optional[bool] = Field(None, description="Visibility to visitors")


class GalleryItemMutationResponse(BaseModel):
    status: str = Field(..., description="CREATED or UPDATED", examples=["CREATED"])
    item: GalleryItemResponse = Field(..., description="The stored item")
    message: str = Field(..., description="Success message")


class GalleryItemDeleteResponse(BaseModel):
    status: str = Field("DELETED", description="Indicates the item was deleted")
    item_id: str = Field(..., description="Deleted item UUID")
    message: str = Field(..., description="Success message", examples=["Gallery item deleted successfully"])


class GalleryReorderRequest(BaseModel):
    item_orders: List[OrderEntry] = Field(..., description="Requested positions")


class GalleryReorderResponse(BaseModel):
    items: List[GalleryItemResponse] = Field(..., description="Items in their new order")
