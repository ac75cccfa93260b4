"""
Tests for page endpoints.

Service functions are mocked; these tests cover request validation,
response mapping and error translation.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from sparklink.main import app
from sparklink.auth.dependencies import get_authenticated_user, AuthenticatedUser
from sparklink.auth.page_access import verify_page_access_token
from sparklink.services.errors import ConflictError, NotFoundError, UpgradeRequiredError

client = TestClient(app)


async def mock_get_authenticated_user_dependency():
    return AuthenticatedUser(user_id="test-user-id", access_token="test-access-token")


@pytest.fixture
def mock_auth():
    app.dependency_overrides[get_authenticated_user] = mock_get_authenticated_user_dependency
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_get_supabase_client():
    with patch("sparklink.routes.pages.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


@pytest.fixture
def sample_page():
    return {
        "id": "page-1",
        "profile_id": "profile-1",
        "type": "PROJECTS",
        "title": "Projects",
        "slug": "projects",
        "content": {"items": []},
        "order": 0,
        "is_published": True,
        "is_password_protected": False,
        "publish_at": None,
        "expires_at": None,
        "created_at": "2025-11-05T10:00:00Z",
        "updated_at": "2025-11-05T10:00:00Z",
    }


class TestListPages:

    @patch("sparklink.routes.pages.list_pages")
    def test_list_pages(self, mock_list, mock_auth, mock_get_supabase_client, sample_page):
        second = {**sample_page, "id": "page-2", "slug": "about", "type": "ABOUT", "order": 1}
        mock_list.return_value = [sample_page, second]

        response = client.get("/pages")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [page["slug"] for page in data["pages"]] == ["projects", "about"]
        assert "password_hash" not in data["pages"][0]

    def test_list_pages_requires_auth(self):
        response = client.get("/pages")

        assert response.status_code == 401


class TestCreatePage:

    @patch("sparklink.routes.pages.create_page")
    def test_create_page(self, mock_create, mock_auth, mock_get_supabase_client, sample_page):
        mock_create.return_value = sample_page

        response = client.post("/pages", json={"type": "PROJECTS", "title": "Projects", "slug": "projects"})

        assert response.status_code == 201
        assert response.json()["status"] == "CREATED"
        assert response.json()["page"]["id"] == "page-1"
        kwargs = mock_create.call_args.kwargs
        assert kwargs["page_type"] == "PROJECTS"
        assert kwargs["is_published"] is True

    def test_create_page_invalid_slug(self, mock_auth, mock_get_supabase_client):
        response = client.post("/pages", json={"type": "ABOUT", "title": "About", "slug": "About Me"})

        assert response.status_code == 422

    def test_create_page_unknown_type(self, mock_auth, mock_get_supabase_client):
        response = client.post("/pages", json={"type": "SHOP", "title": "Shop", "slug": "shop"})

        assert response.status_code == 422

    @patch("sparklink.routes.pages.create_page")
    def test_create_page_slug_conflict(self, mock_create, mock_auth, mock_get_supabase_client):
        mock_create.side_effect = ConflictError("A page with this slug already exists")

        response = client.post("/pages", json={"type": "ABOUT", "title": "About", "slug": "about"})

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "conflict"

    @patch("sparklink.routes.pages.create_page")
    def test_create_page_over_limit(self, mock_create, mock_auth, mock_get_supabase_client):
        mock_create.side_effect = UpgradeRequiredError(
            "Your plan allows up to 1 pages", required_tier="RISE", current_tier="STARTER"
        )

        response = client.post("/pages", json={"type": "ABOUT", "title": "About", "slug": "about"})

        assert response.status_code == 403
        assert response.json()["detail"]["required_tier"] == "RISE"


class TestUpdatePage:

    def test_update_page_empty_body(self, mock_auth, mock_get_supabase_client):
        response = client.put("/pages/page-1", json={})

        assert response.status_code == 400

    @patch("sparklink.routes.pages.update_page")
    def test_update_only_sends_provided_fields(self, mock_update, mock_auth, mock_get_supabase_client, sample_page):
        mock_update.return_value = {**sample_page, "title": "Work"}

        response = client.put("/pages/page-1", json={"title": "Work"})

        assert response.status_code == 200
        assert response.json()["page"]["title"] == "Work"
        assert mock_update.call_args.kwargs == {"title": "Work"}

    @patch("sparklink.routes.pages.update_page")
    def test_update_missing_page(self, mock_update, mock_auth, mock_get_supabase_client):
        mock_update.side_effect = NotFoundError("Page not found")

        response = client.put("/pages/missing", json={"title": "Work"})

        assert response.status_code == 404


class TestDeleteAndReorder:

    @patch("sparklink.routes.pages.delete_page")
    def test_delete_page(self, mock_delete, mock_auth, mock_get_supabase_client):
        mock_delete.return_value = None

        response = client.delete("/pages/page-1")

        assert response.status_code == 200
        assert response.json()["page_id"] == "page-1"

    @patch("sparklink.routes.pages.reorder_pages")
    def test_reorder_pages(self, mock_reorder, mock_auth, mock_get_supabase_client, sample_page):
        mock_reorder.return_value = [
            {**sample_page, "id": "page-2", "slug": "about", "order": 0},
            {**sample_page, "order": 1},
        ]

        response = client.post("/pages/reorder", json={"page_orders": [{"id": "page-2", "order": 0}]})

        assert response.status_code == 200
        assert [page["order"] for page in response.json()["pages"]] == [0, 1]
        assert mock_reorder.call_args.args[2] == [{"id": "page-2", "order": 0}]

    def test_reorder_rejects_negative_order(self, mock_auth, mock_get_supabase_client):
        response = client.post("/pages/reorder", json={"page_orders": [{"id": "page-2", "order": -1}]})

        assert response.status_code == 422


class TestVerifyPassword:
    """POST /pages/verify-password is public."""

    @patch("sparklink.routes.pages.get_service_role_client")
    @patch("sparklink.routes.pages.check_page_password")
    def test_correct_password_returns_token(self, mock_check, mock_service_client):
        mock_check.return_value = True

        response = client.post("/pages/verify-password", json={"page_id": "page-1", "password": "open-sesame"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert verify_page_access_token(data["access_token"], "page-1")

    @patch("sparklink.routes.pages.get_service_role_client")
    @patch("sparklink.routes.pages.check_page_password")
    def test_wrong_password(self, mock_check, mock_service_client):
        mock_check.return_value = False

        response = client.post("/pages/verify-password", json={"page_id": "page-1", "password": "nope"})

        assert response.status_code == 200
        assert response.json()["valid"] is False
        assert response.json()["access_token"] is None

    @patch("sparklink.routes.pages.get_service_role_client")
    @patch("sparklink.routes.pages.check_page_password")
    def test_unknown_page(self, mock_check, mock_service_client):
        mock_check.return_value = None

        response = client.post("/pages/verify-password", json={"page_id": "missing", "password": "x"})

        assert response.status_code == 404
