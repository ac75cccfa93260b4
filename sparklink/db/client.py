"""
Supabase client factories.

Three kinds of client are handed out:

1. get_supabase_client(access_token): per-request client carrying the
   user's JWT. Row Level Security scopes every query to auth.uid().
2. get_service_role_client(): secret-key client that bypasses RLS. Used
   ONLY where no user session exists or where one user acts on another
   user's rows: public profile reads, anonymous analytics inserts, the
   Paystack webhook and admin verification review.
3. get_anon_client(): publishable-key client with no session, used for
   Supabase Auth calls (sign up, sign in, OTP verification).
"""

import logging

from sparklink.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: str) -> Client:
    """
    Create an authenticated Supabase client for a specific user.

    Args:
        access_token: The user's JWT access token from Supabase Auth.
                     This is the token verified in sparklink/auth/dependencies.py.

    Returns:
        An authenticated Supabase client that enforces RLS.

    Security:
        - Uses SUPABASE_PUBLISHABLE_KEY
        - Sets the user's access_token in the Authorization header
        - The user can ONLY access rows RLS grants to auth.uid()
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    # The token's 'sub' claim is what RLS sees as auth.uid()
    client.auth.set_session(access_token, access_token)

    logger.debug("Created authenticated Supabase client with user token (RLS enforced)")

    return client


def get_service_role_client() -> Client:
    """
    Create a Supabase client with service_role privileges.

    WARNING: This bypasses RLS. Callers must scope every query by hand
    (filter on user_id / profile_id) and never return private columns.

    Returns:
        A Supabase client with service_role privileges.

    Raises:
        RuntimeError: If SUPABASE_SECRET_KEY is not configured.
    """
    if not settings.SUPABASE_SECRET_KEY:
        raise RuntimeError(
            "SUPABASE_SECRET_KEY is not configured. "
            "Public and webhook endpoints need the service role key."
        )

    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_SECRET_KEY
    )
    logger.debug("Created service role Supabase client (RLS bypassed)")
    return client


def get_anon_client() -> Client:
    """Create a session-less client for Supabase Auth calls."""
    return create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )
