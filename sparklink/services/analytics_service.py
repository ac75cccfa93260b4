"""
Analytics service.

Visitor events are written by the public endpoints with the service role
client (visitors have no session) and read back by profile owners under
RLS. Aggregation happens here in Python over the owner's events.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple, cast
from urllib.parse import urlparse

from supabase import Client

from sparklink.utils.constants import ANALYTICS_EVENTS

logger = logging.getLogger(__name__)

SUMMARY_WINDOW_DAYS = 30
TOP_PAGES_LIMIT = 5
TOP_REFERRERS_LIMIT = 10
# PostgREST caps each response at max-rows (1000 by default)
EVENT_PAGE_SIZE = 1000


async def track_event(
    service_client: Client,
    user_id: str,
    event: str,
    data: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """
    Record a visitor event for a profile owner.

    Never raises: tracking must not break the page a visitor is viewing.

    Returns:
        True if the event was stored
    """
    if event not in ANALYTICS_EVENTS:
        logger.warning(f"Ignoring unknown analytics event {event}")
        return False

    try:
        service_client.table("analytics_event").insert({
            "user_id": user_id,
            "event": event,
            "data": data or {},
            "ip_address": ip_address,
            "user_agent": user_agent,
        }).execute()
    except Exception as e:
        logger.error(f"Failed to track {event} for user {user_id}: {e}", exc_info=True)
        return False

    logger.debug(f"Tracked {event} for user {user_id}")
    return True


def parse_user_agent(user_agent: Optional[str]) -> Tuple[str, str]:
    """
    Classify a User-Agent string.

    Returns:
        (device, browser) where device is desktop/mobile/tablet and browser
        is Chrome/Safari/Firefox/Edge/Other
    """
    ua = (user_agent or "").lower()

    if "ipad" in ua or "tablet" in ua or ("android" in ua and "mobile" not in ua):
        device = "tablet"
    elif "mobi" in ua or "iphone" in ua or "android" in ua:
        device = "mobile"
    else:
        device = "desktop"

    # Edge and Chrome both advertise Safari; check the most specific first
    if "edg/" in ua or "edge/" in ua:
        browser = "Edge"
    elif "firefox/" in ua or "fxios/" in ua:
        browser = "Firefox"
    elif "chrome/" in ua or "crios/" in ua:
        browser = "Chrome"
    elif "safari/" in ua:
        browser = "Safari"
    else:
        browser = "Other"

    return device, browser


def _breakdown(counter: Counter) -> List[Dict[str, Any]]:
    total = sum(counter.values())
    return [
        {
            "name": name,
            "count": count,
            "percentage": round(count * 100 / total, 1) if total else 0.0,
        }
        for name, count in counter.most_common()
    ]


async def _count_events(
    supabase_client: Client,
    user_id: str,
    event: str,
    since: Optional[datetime] = None,
) -> int:
    query = (
        supabase_client.table("analytics_event")
        .select("id", count=cast(Any, "exact"))
        .eq("user_id", user_id)
        .eq("event", event)
    )
    if since is not None:
        query = query.gte("created_at", since.isoformat())
    result = query.execute()
    count = getattr(result, "count", None)
    return count if count is not None else len(result.data or [])


async def _fetch_events(
    supabase_client: Client,
    user_id: str,
    columns: str,
    since: Optional[datetime] = None,
    event: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """All matching events, read EVENT_PAGE_SIZE rows at a time."""
    rows: List[Dict[str, Any]] = []
    start = 0
    while True:
        query = (
            supabase_client.table("analytics_event")
            .select(columns)
            .eq("user_id", user_id)
        )
        if event is not None:
            query = query.eq("event", event)
        if since is not None:
            query = query.gte("created_at", since.isoformat())
        result = (
            query.order("created_at")
            .order("id")
            .range(start, start + EVENT_PAGE_SIZE - 1)
            .execute()
        )
        page = cast(List[Dict[str, Any]], result.data or [])
        rows.extend(page)
        if len(page) < EVENT_PAGE_SIZE:
            return rows
        start += EVENT_PAGE_SIZE


async def get_summary(
    supabase_client: Client,
    user_id: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    All-time and last-30-day counts per event plus the most viewed pages.

    Returns:
        {
          "totals": {event: count},
          "last_30_days": {event: count},
          "top_pages": [{"id", "title", "slug", "view_count"}]
        }
    """
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=SUMMARY_WINDOW_DAYS)

    totals: Dict[str, int] = {}
    recent: Dict[str, int] = {}
    for event in ANALYTICS_EVENTS:
        totals[event] = await _count_events(supabase_client, user_id, event)
        recent[event] = await _count_events(supabase_client, user_id, event, since=since)

    page_views = await _fetch_events(
        supabase_client, user_id, "data", event=ANALYTICS_EVENTS['PAGE_VIEW']
    )
    view_counts = Counter(
        str(row["data"]["page_id"])
        for row in page_views
        if isinstance(row.get("data"), dict) and row["data"].get("page_id")
    )
    top_ids = [page_id for page_id, _ in view_counts.most_common(TOP_PAGES_LIMIT)]

    top_pages: List[Dict[str, Any]] = []
    if top_ids:
        pages_result = (
            supabase_client.table("page")
            .select("id, title, slug")
            .in_("id", top_ids)
            .execute()
        )
        pages_by_id = {str(page["id"]): page for page in cast(list, pages_result.data or [])}
        for page_id in top_ids:
            page = pages_by_id.get(page_id)
            if page:
                top_pages.append({
                    "id": page_id,
                    "title": page.get("title"),
                    "slug": page.get("slug"),
                    "view_count": view_counts[page_id],
                })

    logger.info(f"Built analytics summary for user {user_id}")
    return {"totals": totals, "last_30_days": recent, "top_pages": top_pages}


async def get_trends(
    supabase_client: Client,
    user_id: str,
    days: int = 30,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Daily profile and page view counts for the last `days` days.

    Every day in the range appears, oldest first, with zero counts where
    nothing happened. The range ends today (UTC) inclusive.

    Raises:
        ValueError: days outside 1..365
    """
    if days < 1 or days > 365:
        raise ValueError("days must be between 1 and 365")

    now = now or datetime.now(timezone.utc)
    first_day = (now - timedelta(days=days - 1)).date()
    since = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)

    events = await _fetch_events(supabase_client, user_id, "event, created_at", since=since)

    buckets: Dict[str, Dict[str, int]] = {
        (first_day + timedelta(days=offset)).isoformat(): {"profile_views": 0, "page_views": 0}
        for offset in range(days)
    }
    field_by_event = {
        ANALYTICS_EVENTS['PROFILE_VIEW']: "profile_views",
        ANALYTICS_EVENTS['PAGE_VIEW']: "page_views",
    }

    for row in events:
        field = field_by_event.get(row.get("event", ""))
        day = str(row.get("created_at") or "")[:10]
        if field and day in buckets:
            buckets[day][field] += 1

    return {
        "period": f"{days} days",
        "trends": [{"date": day, **counts} for day, counts in buckets.items()],
    }


async def get_device_breakdown(
    supabase_client: Client,
    user_id: str,
    days: int = SUMMARY_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    events = await _fetch_events(
        supabase_client, user_id, "user_agent", since=now - timedelta(days=days)
    )

    devices: Counter = Counter()
    browsers: Counter = Counter()
    for row in events:
        device, browser = parse_user_agent(row.get("user_agent"))
        devices[device] += 1
        browsers[browser] += 1

    return {"devices": _breakdown(devices), "browsers": _breakdown(browsers)}


async def get_referrers(
    supabase_client: Client,
    user_id: str,
    days: int = SUMMARY_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Top referring hosts; visits without a referrer count as "direct"."""
    now = now or datetime.now(timezone.utc)
    events = await _fetch_events(
        supabase_client, user_id, "data", since=now - timedelta(days=days)
    )

    sources: Counter = Counter()
    for row in events:
        data = row.get("data") if isinstance(row.get("data"), dict) else {}
        referrer = data.get("referrer")
        host = urlparse(referrer).netloc.lower() if referrer else ""
        sources[host.removeprefix("www.") or "direct"] += 1

    breakdown = _breakdown(sources)[:TOP_REFERRERS_LIMIT]
    return {"referrers": breakdown}
