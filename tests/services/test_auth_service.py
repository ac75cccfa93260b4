"""
Tests for completing an OAuth sign-in against the users table.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from sparklink.services.auth_service import complete_oauth_sign_in
from sparklink.services.errors import InvalidCredentialsError

SERVICE = "sparklink.services.auth_service"


def _auth_client(email="ama@example.com", metadata=None):
    client = MagicMock()
    client.auth.get_user.return_value = MagicMock(
        user=MagicMock(email=email, user_metadata=metadata or {"full_name": "Ama Mensah"})
    )
    return client


class TestCompleteOAuthSignIn:

    @pytest.mark.asyncio
    async def test_existing_row_by_id(self):
        row = {"id": "oauth-id", "email": "ama@example.com"}
        auth_client = _auth_client()

        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=row)):
            result = await complete_oauth_sign_in(auth_client, MagicMock(), "oauth-id", "token")

        assert result == {"user": row, "created": False}
        auth_client.auth.get_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_links_existing_row_by_email(self):
        admin_client = MagicMock()
        password_account = {"id": "password-id", "email": "ama@example.com", "username": "ama"}
        linked = {**password_account, "id": "oauth-id"}

        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=None)), \
                patch(f"{SERVICE}.get_user_by_email", AsyncMock(return_value=password_account)) as mock_by_email, \
                patch(f"{SERVICE}.update_user", AsyncMock(return_value=linked)) as mock_update, \
                patch(f"{SERVICE}.create_user_record", AsyncMock()) as mock_create:
            result = await complete_oauth_sign_in(_auth_client(), admin_client, "oauth-id", "token")

        assert result == {"user": linked, "created": False}
        mock_by_email.assert_awaited_once_with(admin_client, "ama@example.com")
        mock_update.assert_awaited_once_with(admin_client, "password-id", id="oauth-id")
        mock_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_row_for_new_email(self):
        admin_client = MagicMock()
        created = {"id": "oauth-id", "email": "kofi@example.com", "username": "kofi"}
        auth_client = _auth_client(
            email="kofi@example.com",
            metadata={"full_name": "Kofi Boateng", "avatar_url": "https://lh3.example/k.png"},
        )

        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=None)), \
                patch(f"{SERVICE}.get_user_by_email", AsyncMock(return_value=None)), \
                patch(f"{SERVICE}.generate_unique_username", AsyncMock(return_value="kofi")), \
                patch(f"{SERVICE}.update_user", AsyncMock()) as mock_update, \
                patch(f"{SERVICE}.create_user_record", AsyncMock(return_value=created)) as mock_create:
            result = await complete_oauth_sign_in(auth_client, admin_client, "oauth-id", "token")

        assert result == {"user": created, "created": True}
        mock_update.assert_not_called()
        kwargs = mock_create.call_args.kwargs
        assert kwargs["user_id"] == "oauth-id"
        assert (kwargs["first_name"], kwargs["last_name"]) == ("Kofi", "Boateng")
        assert kwargs["profile_picture"] == "https://lh3.example/k.png"

    @pytest.mark.asyncio
    async def test_unknown_session(self):
        auth_client = MagicMock()
        auth_client.auth.get_user.return_value = None

        with patch(f"{SERVICE}.get_user", AsyncMock(return_value=None)):
            with pytest.raises(InvalidCredentialsError):
                await complete_oauth_sign_in(auth_client, MagicMock(), "oauth-id", "token")
