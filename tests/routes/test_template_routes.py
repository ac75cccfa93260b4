"""
Tests for template endpoints.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from sparklink.main import app
from sparklink.auth.dependencies import get_authenticated_user, AuthenticatedUser
from sparklink.services.errors import NotFoundError, UpgradeRequiredError

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
    with patch("sparklink.routes.templates.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


@pytest.fixture
def minimal_template():
    return {
        "id": "minimal",
        "name": "Minimal",
        "description": "Clean layout",
        "preview_image": "/assets/templates/minimal.png",
        "category": "professional",
        "tier": "STARTER",
        "features": {"layout": "single-column"},
        "is_default": True,
    }


class TestListTemplates:

    @patch("sparklink.routes.templates.list_templates")
    def test_list(self, mock_list, mock_auth, mock_get_supabase_client, minimal_template):
        mock_list.return_value = {
            "templates": [{**minimal_template, "is_current": True}],
            "current_template": "minimal",
            "current_tier": "STARTER",
            "color_schemes": {"light": {"primary": "#3498db"}},
            "features": [{"name": "layout", "description": "Page layout"}],
        }

        response = client.get("/templates")

        assert response.status_code == 200
        data = response.json()
        assert data["templates"][0]["is_current"] is True
        assert data["current_tier"] == "STARTER"


class TestApplyTemplate:

    @patch("sparklink.routes.templates.apply_template")
    def test_apply(self, mock_apply, mock_auth, mock_get_supabase_client):
        mock_apply.return_value = {"template_id": "elegant", "color_scheme": {"primary": "#111111"}}

        response = client.post(
            "/templates/apply",
            json={"template_id": "elegant", "color_scheme": {"primary": "#111111"}},
        )

        assert response.status_code == 200
        assert response.json()["template_id"] == "elegant"
        assert mock_apply.call_args.args[3] == {"primary": "#111111"}

    @patch("sparklink.routes.templates.apply_template")
    def test_apply_above_tier(self, mock_apply, mock_auth, mock_get_supabase_client):
        mock_apply.side_effect = UpgradeRequiredError(
            "This template requires a BLAZE subscription", required_tier="BLAZE", current_tier="STARTER"
        )

        response = client.post("/templates/apply", json={"template_id": "portfolio-pro"})

        assert response.status_code == 403
        assert response.json()["detail"]["current_tier"] == "STARTER"


class TestUpdateColors:

    def test_invalid_hex(self, mock_auth, mock_get_supabase_client):
        response = client.put("/templates/colors", json={"color_scheme": {"primary": "blue"}})

        assert response.status_code == 422

    @patch("sparklink.routes.templates.update_colors")
    def test_only_provided_colors_sent(self, mock_update, mock_auth, mock_get_supabase_client):
        mock_update.return_value = {"template_id": None, "color_scheme": {"accent": "#E74C3C"}}

        response = client.put("/templates/colors", json={"color_scheme": {"accent": "#E74C3C"}})

        assert response.status_code == 200
        assert response.json()["template_id"] == "minimal"
        assert mock_update.call_args.args[2] == {"accent": "#E74C3C"}


class TestGetTemplate:

    @patch("sparklink.routes.templates.get_anon_client")
    @patch("sparklink.routes.templates.get_template")
    def test_public_get(self, mock_get, mock_anon, minimal_template):
        mock_get.return_value = minimal_template

        response = client.get("/templates/minimal")

        assert response.status_code == 200
        assert response.json()["is_default"] is True

    @patch("sparklink.routes.templates.get_anon_client")
    @patch("sparklink.routes.templates.get_template")
    def test_unknown_template(self, mock_get, mock_anon):
        mock_get.side_effect = NotFoundError("Template not found")

        response = client.get("/templates/nope")

        assert response.status_code == 404
