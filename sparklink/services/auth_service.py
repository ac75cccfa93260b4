"""
Account registration and sign-in through Supabase Auth.

Supabase Auth owns credentials, email OTP delivery and Google OAuth. This
service keeps the `users` table in step with it: every auth user gets a
users row carrying username, names and subscription state.

Clients:
- auth_client: session-less publishable-key client (get_anon_client)
- admin_client: service role client for reading/writing `users`
  before the caller has a session
"""

import logging
from typing import Any, Dict, Optional

from supabase import AuthError, Client

from sparklink.config import settings
from sparklink.services.errors import ConflictError, ForbiddenError, InvalidCredentialsError
from sparklink.services.user_service import (
    create_user_record,
    generate_unique_username,
    get_user,
    get_user_by_email,
    is_username_available,
    update_user,
    validate_username,
)

logger = logging.getLogger(__name__)


def _session_payload(session: Any) -> Optional[Dict[str, Any]]:
    if session is None:
        return None
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": session.expires_in,
        "token_type": getattr(session, "token_type", "bearer") or "bearer",
    }


async def register_user(
    auth_client: Client,
    admin_client: Client,
    email: str,
    password: str,
    username: str,
    first_name: str,
    last_name: str,
    country: Optional[str] = None,
    phone: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Register a new account.

    Supabase Auth sends the signup OTP email; the account cannot sign in
    until verify_email() succeeds.

    Returns:
        {"user": users row, "session": session dict or None}

    Raises:
        ValueError: Invalid username or Supabase rejected the signup
        ConflictError: Email or username already registered
    """
    normalized_username = validate_username(username)
    normalized_email = email.strip().lower()

    if await get_user_by_email(admin_client, normalized_email):
        raise ConflictError("Email already registered")
    if not await is_username_available(admin_client, normalized_username):
        raise ConflictError("Username already taken")

    logger.info(f"Registering new account username={normalized_username}")

    try:
        response = auth_client.auth.sign_up({
            "email": normalized_email,
            "password": password,
            "options": {
                "data": {
                    "username": normalized_username,
                    "first_name": first_name,
                    "last_name": last_name,
                },
                "email_redirect_to": f"{settings.CLIENT_URL.rstrip('/')}/verify-email",
            },
        })
    except AuthError as e:
        logger.warning(f"Supabase sign up rejected for username={normalized_username}: {e}")
        raise ValueError(str(e))

    if response.user is None:
        raise ValueError("Registration failed")

    user = await create_user_record(
        admin_client,
        user_id=str(response.user.id),
        email=normalized_email,
        username=normalized_username,
        first_name=first_name,
        last_name=last_name,
        country=country,
        phone=phone,
    )

    logger.info(f"Account registered for user {user['id']}")
    return {"user": user, "session": _session_payload(response.session)}


async def login_user(
    auth_client: Client,
    admin_client: Client,
    email: str,
    password: str,
) -> Dict[str, Any]:
    """
    Sign in with email and password.

    Raises:
        InvalidCredentialsError: Wrong email or password
        ForbiddenError: Email address not verified yet
    """
    try:
        response = auth_client.auth.sign_in_with_password({
            "email": email.strip().lower(),
            "password": password,
        })
    except AuthError as e:
        if "not confirmed" in str(e).lower():
            raise ForbiddenError("Please verify your email before logging in")
        logger.info("Login failed: invalid credentials")
        raise InvalidCredentialsError("Invalid email or password")

    if response.user is None or response.session is None:
        raise InvalidCredentialsError("Invalid email or password")

    user_id = str(response.user.id)
    user = await get_user(admin_client, user_id)
    logger.info(f"User {user_id} logged in")

    return {"user": user, "session": _session_payload(response.session)}


async def verify_email(auth_client: Client, email: str, code: str) -> Dict[str, Any]:
    """
    Confirm an email address with the 6-digit signup code.

    Raises:
        ValueError: Code is wrong or expired
    """
    try:
        response = auth_client.auth.verify_otp({
            "email": email.strip().lower(),
            "token": code,
            "type": "signup",
        })
    except AuthError as e:
        logger.info(f"Email verification failed: {e}")
        raise ValueError("Invalid or expired verification code")

    if response.user is None:
        raise ValueError("Invalid or expired verification code")

    return {"verified": True, "session": _session_payload(response.session)}


async def resend_verification(auth_client: Client, email: str) -> None:
    try:
        auth_client.auth.resend({"type": "signup", "email": email.strip().lower()})
    except AuthError as e:
        logger.warning(f"Resending verification code failed: {e}")
        raise ValueError("Could not resend verification code")


def get_google_oauth_url(auth_client: Client) -> str:
    """Authorize URL for Google sign-in; Supabase redirects back to the client app."""
    response = auth_client.auth.sign_in_with_oauth({
        "provider": "google",
        "options": {"redirect_to": f"{settings.CLIENT_URL.rstrip('/')}/auth/callback"},
    })
    return str(response.url)


async def complete_oauth_sign_in(
    auth_client: Client,
    admin_client: Client,
    user_id: str,
    access_token: str,
) -> Dict[str, Any]:
    """
    Make sure an OAuth-authenticated user has a users row.

    Supabase usually links identities with the same email to one auth
    user, so the row is first looked up by id. When it did not (e.g. an
    unconfirmed email/password account), the row with the same email is
    re-keyed to the OAuth user; child rows follow through ON UPDATE
    CASCADE. Otherwise a row is created with a username derived from the
    email and names from the Google profile.

    Returns:
        {"user": users row, "created": bool}
    """
    existing = await get_user(admin_client, user_id)
    if existing:
        return {"user": existing, "created": False}

    auth_user = auth_client.auth.get_user(access_token)
    if auth_user is None or auth_user.user is None:
        raise InvalidCredentialsError("Could not load the signed-in user")

    metadata: Dict[str, Any] = auth_user.user.user_metadata or {}
    email = auth_user.user.email or ""

    if email:
        by_email = await get_user_by_email(admin_client, email)
        if by_email:
            linked = await update_user(admin_client, str(by_email["id"]), id=user_id)
            logger.info(f"Linked OAuth user {user_id} to existing account {by_email['id']}")
            return {"user": linked, "created": False}

    full_name = str(metadata.get("full_name") or metadata.get("name") or "")
    first_name, _, last_name = full_name.partition(" ")

    username = await generate_unique_username(admin_client, email.split("@")[0] or "user")
    user = await create_user_record(
        admin_client,
        user_id=user_id,
        email=email,
        username=username,
        first_name=first_name or None,
        last_name=last_name or None,
        profile_picture=metadata.get("avatar_url") or metadata.get("picture"),
    )
    logger.info(f"Created user record for OAuth user {user_id}")
    return {"user": user, "created": True}
