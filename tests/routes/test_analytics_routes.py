"""
Tests for analytics endpoints and the analytics tier gate.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from sparklink.main import app
from sparklink.auth.dependencies import get_authenticated_user, AuthenticatedUser

client = TestClient(app)


async def mock_get_authenticated_user_dependency():
    return AuthenticatedUser(user_id="test-user-id", access_token="test-access-token")


@pytest.fixture
def mock_auth():
    app.dependency_overrides[get_authenticated_user] = mock_get_authenticated_user_dependency
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_clients():
    with patch("sparklink.auth.tiers.get_supabase_client") as tiers_client, \
            patch("sparklink.routes.analytics.get_supabase_client") as route_client:
        tiers_client.return_value = MagicMock()
        route_client.return_value = MagicMock()
        yield route_client


def _tier(value):
    return patch("sparklink.auth.tiers.get_user_tier", return_value=value)


EMPTY_COUNTS = {
    "PROFILE_VIEW": 0,
    "PAGE_VIEW": 0,
    "GALLERY_VIEW": 0,
    "RESUME_DOWNLOAD": 0,
    "SOCIAL_CLICK": 0,
}


class TestAnalyticsGate:

    def test_starter_is_blocked(self, mock_auth, mock_clients):
        with _tier("STARTER"):
            response = client.get("/analytics/summary")

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["error"] == "upgrade_required"
        assert detail["required_tier"] == "RISE"
        assert detail["current_tier"] == "STARTER"

    def test_requires_auth(self):
        response = client.get("/analytics/summary")

        assert response.status_code == 401


class TestSummary:

    @patch("sparklink.routes.analytics.get_summary")
    def test_rise_user_gets_summary(self, mock_summary, mock_auth, mock_clients):
        mock_summary.return_value = {
            "totals": {**EMPTY_COUNTS, "PROFILE_VIEW": 12},
            "last_30_days": {**EMPTY_COUNTS, "PROFILE_VIEW": 4},
            "top_pages": [{"id": "p1", "title": "Projects", "slug": "projects", "view_count": 7}],
        }

        with _tier("RISE"):
            response = client.get("/analytics/summary")

        assert response.status_code == 200
        data = response.json()
        assert data["totals"]["PROFILE_VIEW"] == 12
        assert data["top_pages"][0]["view_count"] == 7


class TestTrendsAndBreakdowns:

    @patch("sparklink.routes.analytics.get_trends")
    def test_trends_window(self, mock_trends, mock_auth, mock_clients):
        mock_trends.return_value = {
            "period": "7 days",
            "trends": [{"date": "2025-11-05", "profile_views": 1, "page_views": 0}],
        }

        with _tier("BLAZE"):
            response = client.get("/analytics/trends", params={"days": 7})

        assert response.status_code == 200
        assert response.json()["period"] == "7 days"
        assert mock_trends.call_args.kwargs["days"] == 7

    def test_trends_window_out_of_range(self, mock_auth, mock_clients):
        with _tier("BLAZE"):
            response = client.get("/analytics/trends", params={"days": 0})

        assert response.status_code == 422

    @patch("sparklink.routes.analytics.get_device_breakdown")
    def test_devices(self, mock_devices, mock_auth, mock_clients):
        mock_devices.return_value = {
            "devices": [{"name": "mobile", "count": 3, "percentage": 75.0},
                        {"name": "desktop", "count": 1, "percentage": 25.0}],
            "browsers": [{"name": "Safari", "count": 4, "percentage": 100.0}],
        }

        with _tier("RISE"):
            response = client.get("/analytics/devices")

        assert response.status_code == 200
        assert response.json()["devices"][0]["name"] == "mobile"

    @patch("sparklink.routes.analytics.get_referrers")
    def test_referrers_failure(self, mock_referrers, mock_auth, mock_clients):
        mock_referrers.side_effect = Exception("Database error")

        with _tier("RISE"):
            response = client.get("/analytics/referrers")

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "fetch_error"
