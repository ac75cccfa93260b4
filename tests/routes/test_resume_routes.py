"""
Tests for resume endpoints.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from sparklink.main import app
from sparklink.auth.dependencies import get_authenticated_user, AuthenticatedUser
from sparklink.services.errors import NotFoundError

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
    with patch("sparklink.routes.resume.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


RESUME_INFO = {
    "has_resume": True,
    "resume_file_name": "cv.pdf",
    "resume_uploaded_at": "2025-11-05T10:00:00+00:00",
    "allow_resume_download": True,
}


class TestUploadResume:

    @patch("sparklink.routes.resume.upload_resume")
    def test_upload_pdf(self, mock_upload, mock_auth, mock_get_supabase_client):
        mock_upload.return_value = RESUME_INFO

        response = client.post("/resume/upload", files={"resume": ("cv.pdf", b"%PDF-1.7", "application/pdf")})

        assert response.status_code == 201
        assert response.json()["resume"]["resume_file_name"] == "cv.pdf"
        assert mock_upload.call_args.kwargs == {"file_bytes": b"%PDF-1.7", "filename": "cv.pdf"}

    @patch("sparklink.routes.resume.upload_resume")
    def test_upload_rejects_word_document(self, mock_upload, mock_auth, mock_get_supabase_client):
        response = client.post(
            "/resume/upload",
            files={"resume": ("cv.docx", b"PK", "application/vnd.openxmlformats-officedocument.wordprocessingml.document")},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_file"
        mock_upload.assert_not_called()


class TestResumeInfo:

    @patch("sparklink.routes.resume.get_resume_info")
    def test_info(self, mock_info, mock_auth, mock_get_supabase_client):
        mock_info.return_value = RESUME_INFO

        response = client.get("/resume/info")

        assert response.status_code == 200
        assert response.json()["has_resume"] is True

    @patch("sparklink.routes.resume.update_resume_settings")
    def test_settings(self, mock_settings, mock_auth, mock_get_supabase_client):
        mock_settings.return_value = {**RESUME_INFO, "allow_resume_download": False}

        response = client.put("/resume/settings", json={"allow_resume_download": False})

        assert response.status_code == 200
        assert response.json()["allow_resume_download"] is False
        assert mock_settings.call_args.args[2] is False

    @patch("sparklink.routes.resume.delete_resume")
    def test_delete_without_resume(self, mock_delete, mock_auth, mock_get_supabase_client):
        mock_delete.side_effect = NotFoundError("No resume uploaded")

        response = client.delete("/resume")

        assert response.status_code == 404

    @patch("sparklink.routes.resume.get_service_role_client")
    @patch("sparklink.routes.resume.get_public_resume_info")
    def test_public_info(self, mock_info, mock_service_client):
        mock_info.return_value = {"has_resume": False, "allow_resume_download": False}

        response = client.get("/resume/public/ama/info")

        assert response.status_code == 200
        assert response.json()["resume_file_name"] is None
