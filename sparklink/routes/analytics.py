"""
Analytics API endpoints.

Visitor insights for profile owners. Every endpoint requires a plan with
the analytics feature (RISE and above); lower tiers get 403
upgrade_required from the require_analytics dependency.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from sparklink.auth.dependencies import AuthenticatedUser
from sparklink.auth.tiers import require_analytics
from sparklink.db.client import get_supabase_client
from sparklink.schemas.analytics import (
    AnalyticsSummaryResponse,
    AnalyticsTrendsResponse,
    DeviceBreakdownResponse,
    ReferrersResponse,
)
from sparklink.services.analytics_service import (
    get_device_breakdown,
    get_referrers,
    get_summary,
    get_trends,
)
from sparklink.utils.http_errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get(
    "/summary",
    response_model=AnalyticsSummaryResponse,
    status_code=status.HTTP_200_OK,
    summary="Analytics summary",
    description="""
    All-time and last-30-day counts of profile views, page views, gallery
    views, social clicks and resume downloads, plus the five most viewed
    pages.

    Security:
    - Requires valid Authorization Bearer token
    - Requires the analytics feature (RISE+)
    - RLS limits events to the caller's own
    """
)
async def summary(
    auth_user: Annotated[AuthenticatedUser, Depends(require_analytics)]
) -> AnalyticsSummaryResponse:
    logger.info(f"Analytics summary requested by user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await get_summary(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to load analytics summary")

    return AnalyticsSummaryResponse.model_validate(result)


@router.get(
    "/trends",
    response_model=AnalyticsTrendsResponse,
    status_code=status.HTTP_200_OK,
    summary="Daily view trends",
    description="Per-day profile and page views for the last `days` days (1-365), zero-filled, oldest first.",
)
async def trends(
    auth_user: Annotated[AuthenticatedUser, Depends(require_analytics)],
    days: int = Query(30, ge=1, le=365, description="Window length in days"),
) -> AnalyticsTrendsResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await get_trends(supabase_client, auth_user.user_id, days=days)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to load analytics trends")

    return AnalyticsTrendsResponse.model_validate(result)


@router.get(
    "/devices",
    response_model=DeviceBreakdownResponse,
    status_code=status.HTTP_200_OK,
    summary="Device and browser breakdown",
)
async def devices(
    auth_user: Annotated[AuthenticatedUser, Depends(require_analytics)],
    days: int = Query(30, ge=1, le=365, description="Window length in days"),
) -> DeviceBreakdownResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await get_device_breakdown(supabase_client, auth_user.user_id, days=days)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to load device analytics")

    return DeviceBreakdownResponse.model_validate(result)


@router.get(
    "/referrers",
    response_model=ReferrersResponse,
    status_code=status.HTTP_200_OK,
    summary="Top referrers",
)
async def referrers(
    auth_user: Annotated[AuthenticatedUser, Depends(require_analytics)],
    days: int = Query(30, ge=1, le=365, description="Window length in days"),
) -> ReferrersResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await get_referrers(supabase_client, auth_user.user_id, days=days)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to load referrer analytics")

    return ReferrersResponse.model_validate(result)
