"""
Service layer for the SparkLink backend.

Contains business logic orchestration that:
- Applies subscription tier rules before writing
- Keeps page and gallery ordering dense
- Talks to Supabase (database, auth, storage) and Paystack
- Raises ServiceError subclasses that routes map to HTTP responses

Services act as the glue between routes (HTTP layer) and Supabase.
"""

from .errors import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    NotPublishedError,
    PasswordRequiredError,
    PaymentProviderError,
    ServiceError,
    UpgradeRequiredError,
)
from .page_service import create_page, delete_page, get_page, list_pages, reorder_pages, update_page
from .profile_service import get_or_create_profile, get_profile_bundle, update_profile
from .storage import delete_file, get_public_url, get_signed_url, upload_file
from .user_service import get_user, get_user_by_username, get_user_tier, update_user

__all__ = [
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "UpgradeRequiredError",
    "PaymentProviderError",
    "NotPublishedError",
    "PasswordRequiredError",
    "get_user",
    "get_user_by_username",
    "get_user_tier",
    "update_user",
    "get_or_create_profile",
    "get_profile_bundle",
    "update_profile",
    "list_pages",
    "get_page",
    "create_page",
    "update_page",
    "delete_page",
    "reorder_pages",
    "upload_file",
    "delete_file",
    "get_public_url",
    "get_signed_url",
]
