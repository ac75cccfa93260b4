"""
User account service.

The `users` table mirrors Supabase Auth users (users.id = auth.uid())
and holds identity, subscription and verification state.
"""

import logging
import secrets
from typing import Any, Dict, Optional, cast

from supabase import Client

from sparklink.services.errors import ConflictError, NotFoundError
from sparklink.utils.constants import USERNAME_PATTERN
from sparklink.utils.plans import normalize_tier

logger = logging.getLogger(__name__)

# Columns safe to show on a public profile
PUBLIC_USER_COLUMNS = (
    "id, username, first_name, last_name, country, profile_picture, "
    "subscription, has_verified_badge"
)


def normalize_username(username: str) -> str:
    return username.strip().lower()


def validate_username(username: str) -> str:
    """
    Normalize and validate a username.

    Raises:
        ValueError: If the username is not 3-30 chars of a-z, 0-9 or underscore
    """
    normalized = normalize_username(username)
    if not USERNAME_PATTERN.match(normalized):
        raise ValueError(
            "Username must be 3-30 characters and contain only letters, numbers and underscores"
        )
    return normalized


async def get_user(supabase_client: Client, user_id: str) -> Optional[Dict[str, Any]]:
    """Fetch the users row for `user_id`, or None."""
    result = (
        supabase_client.table("users")
        .select("*")
        .eq("id", user_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"User row not found for user {user_id}")
        return None

    return cast(Dict[str, Any], result.data[0])


async def get_user_tier(supabase_client: Client, user_id: str) -> str:
    """
    Current subscription tier of a user.

    Missing rows and unknown values resolve to STARTER.
    """
    result = (
        supabase_client.table("users")
        .select("subscription")
        .eq("id", user_id)
        .execute()
    )
    if not result.data:
        return normalize_tier(None)
    row = cast(Dict[str, Any], result.data[0])
    return normalize_tier(row.get("subscription"))


async def get_user_by_username(
    supabase_client: Client,
    username: str,
    columns: str = "*"
) -> Optional[Dict[str, Any]]:
    result = (
        supabase_client.table("users")
        .select(columns)
        .eq("username", normalize_username(username))
        .execute()
    )
    if not result.data:
        return None
    return cast(Dict[str, Any], result.data[0])


async def get_user_by_email(supabase_client: Client, email: str) -> Optional[Dict[str, Any]]:
    result = (
        supabase_client.table("users")
        .select("*")
        .eq("email", email.strip().lower())
        .execute()
    )
    if not result.data:
        return None
    return cast(Dict[str, Any], result.data[0])


async def is_username_available(
    supabase_client: Client,
    username: str,
    exclude_user_id: Optional[str] = None
) -> bool:
    """
    Check whether a username is free.

    Args:
        supabase_client: Supabase client able to read every username
        username: Candidate username (normalized before lookup)
        exclude_user_id: A user allowed to already own the username (self-update)
    """
    result = (
        supabase_client.table("users")
        .select("id")
        .eq("username", normalize_username(username))
        .execute()
    )
    owners = [str(row["id"]) for row in cast(list, result.data or [])]
    return all(owner == exclude_user_id for owner in owners)


async def create_user_record(
    supabase_client: Client,
    user_id: str,
    email: str,
    username: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    country: Optional[str] = None,
    phone: Optional[str] = None,
    profile_picture: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Insert the users row for a freshly registered auth user.

    New accounts start on STARTER with no verification.

    Raises:
        ConflictError: If the username is already taken
    """
    if not await is_username_available(supabase_client, username):
        raise ConflictError("Username already taken")

    user_data: Dict[str, Any] = {
        "id": user_id,
        "email": email.strip().lower(),
        "username": normalize_username(username),
        "subscription": "STARTER",
        "verification_status": "NONE",
        "has_verified_badge": False,
    }
    optional_fields = {
        "first_name": first_name,
        "last_name": last_name,
        "country": country,
        "phone": phone,
        "profile_picture": profile_picture,
    }
    user_data.update({key: value for key, value in optional_fields.items() if value is not None})

    logger.info(f"Creating user record for user {user_id}")
    result = supabase_client.table("users").insert(user_data).execute()

    if not result.data:
        raise Exception("Failed to create user: no data returned")

    return cast(Dict[str, Any], result.data[0])


async def update_user(
    supabase_client: Client,
    user_id: str,
    **updates: Any
) -> Dict[str, Any]:
    """
    Update columns on the users row.

    Raises:
        NotFoundError: If the row does not exist
    """
    logger.info(f"Updating user {user_id}: {list(updates.keys())}")

    result = (
        supabase_client.table("users")
        .update(updates)
        .eq("id", user_id)
        .execute()
    )

    if not result.data:
        raise NotFoundError("User not found")

    return cast(Dict[str, Any], result.data[0])


async def generate_unique_username(supabase_client: Client, seed: str) -> str:
    """
    Derive an available username from an email local part or display name.

    Used when an OAuth sign-in creates an account without a chosen username.
    """
    base = "".join(ch for ch in normalize_username(seed) if ch.isalnum() or ch == "_")[:24]
    if len(base) < 3:
        base = f"user{base}"

    candidate = base
    while not await is_username_available(supabase_client, candidate):
        candidate = f"{base}_{secrets.randbelow(10000):04d}"
    return candidate
