"""
Pydantic schemas for analytics endpoints (RISE and above).
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class TopPage(BaseModel):
    id: str = Field(..., description="Page UUID")
    title: str = Field(..., description="Page title")
    slug: str = Field(..., description="Page slug")
    view_count: int = Field(..., description="All-time PAGE_VIEW events")


class AnalyticsSummaryResponse(BaseModel):
    """
    Event counts keyed by event name (PROFILE_VIEW, PAGE_VIEW,
    GALLERY_VIEW, RESUME_DOWNLOAD, SOCIAL_CLICK).
    """
    totals: Dict[str, int] = Field(..., description="All-time counts per event")
    last_30_days: Dict[str, int] = Field(..., description="Counts per event over the last 30 days")
    top_pages: List[TopPage] = Field(..., description="Up to 5 most viewed pages")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "totals": {"PROFILE_VIEW": 120, "PAGE_VIEW": 48, "GALLERY_VIEW": 10,
                               "RESUME_DOWNLOAD": 3, "SOCIAL_CLICK": 17},
                    "last_30_days": {"PROFILE_VIEW": 40, "PAGE_VIEW": 12, "GALLERY_VIEW": 2,
                                     "RESUME_DOWNLOAD": 1, "SOCIAL_CLICK": 5},
                    "top_pages": [{"id": "3f1c...", "title": "Projects", "slug": "projects", "view_count": 30}]
                }
            ]
        }
    }


class TrendPoint(BaseModel):
    date: str = Field(..., description="UTC day (YYYY-MM-DD)")
    profile_views: int = Field(..., description="PROFILE_VIEW events that day")
    page_views: int = Field(..., description="PAGE_VIEW events that day")


class AnalyticsTrendsResponse(BaseModel):
    period: str = Field(..., description="Window description", examples=["30 days"])
    trends: List[TrendPoint] = Field(..., description="One entry per day, oldest first")


class BreakdownEntry(BaseModel):
    name: str = Field(..., description="Bucket name", examples=["mobile", "Chrome", "twitter.com"])
    count: int = Field(..., description="Events in the bucket")
    percentage: float = Field(..., description="Share of all events in the window (0-100)")


class DeviceBreakdownResponse(BaseModel):
    devices: List[BreakdownEntry] = Field(..., description="desktop / mobile / tablet")
    browsers: List[BreakdownEntry] = Field(..., description="Chrome / Safari / Firefox / Edge / Other")


class ReferrersResponse(BaseModel):
    referrers: List[BreakdownEntry] = Field(..., description="Top referring hosts; 'direct' when none")
