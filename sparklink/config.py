"""
Configuration module for SparkLink backend.

Loads environment variables and validates required settings.
"""
import logging
import os
from typing import List
from dotenv import load_dotenv

# Load .env file
load_dotenv()

logger = logging.getLogger(__name__)


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Application settings loaded from environment variables."""

    # Supabase Configuration
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_PUBLISHABLE_KEY: str = os.getenv("SUPABASE_PUBLISHABLE_KEY", "")
    # Server-side key; bypasses RLS. Only for public reads, webhooks and admin review.
    SUPABASE_SECRET_KEY: str = os.getenv("SUPABASE_SECRET_KEY", "")

    @property
    def SUPABASE_JWKS_URL(self) -> str:
        """Get the JWKS URL for JWT verification."""
        if not self.SUPABASE_URL:
            return ""
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

    @property
    def SUPABASE_ISSUER(self) -> str:
        """Issuer claim expected on Supabase Auth access tokens."""
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1"

    # Supabase Storage buckets
    SUPABASE_MEDIA_BUCKET: str = os.getenv("SUPABASE_MEDIA_BUCKET", "media")
    SUPABASE_RESUME_BUCKET: str = os.getenv("SUPABASE_RESUME_BUCKET", "resumes")
    SUPABASE_VERIFICATION_BUCKET: str = os.getenv(
        "SUPABASE_VERIFICATION_BUCKET", "verification-documents"
    )

    # Paystack
    PAYSTACK_SECRET_KEY: str = os.getenv("PAYSTACK_SECRET_KEY", "")
    PAYSTACK_BASE_URL: str = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")
    PAYSTACK_CALLBACK_URL: str = os.getenv("PAYSTACK_CALLBACK_URL", "")
    PAYSTACK_TIMEOUT_SECONDS: float = float(os.getenv("PAYSTACK_TIMEOUT_SECONDS", "15"))

    # Frontend
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:5173")

    # Signed tokens handed to visitors who unlock a password-protected page
    PAGE_ACCESS_SECRET: str = os.getenv("PAGE_ACCESS_SECRET", "")
    PAGE_ACCESS_TTL_SECONDS: int = int(os.getenv("PAGE_ACCESS_TTL_SECONDS", "3600"))

    # Comma separated auth user ids allowed to review verification requests
    ADMIN_USER_IDS: List[str] = _split_csv(os.getenv("ADMIN_USER_IDS", ""))

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    APP_VERSION: str = "1.0.0"

    # CORS Settings
    CORS_ALLOWED_ORIGINS: List[str] = _split_csv(os.getenv("CORS_ALLOWED_ORIGINS", ""))

    @property
    def paystack_callback_url(self) -> str:
        """Where Paystack sends the customer after checkout."""
        return self.PAYSTACK_CALLBACK_URL or f"{self.CLIENT_URL.rstrip('/')}/subscription/verify"

    @property
    def page_access_secret(self) -> str:
        """Secret for page access tokens, falling back to the Supabase secret key."""
        return self.PAGE_ACCESS_SECRET or self.SUPABASE_SECRET_KEY or "sparklink-dev-page-secret"

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing.
        """
        required_settings = {
            "SUPABASE_URL": cls.SUPABASE_URL,
            "SUPABASE_PUBLISHABLE_KEY": cls.SUPABASE_PUBLISHABLE_KEY,
            "SUPABASE_SECRET_KEY": cls.SUPABASE_SECRET_KEY,
            "PAYSTACK_SECRET_KEY": cls.PAYSTACK_SECRET_KEY,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"

    def is_admin(self, user_id: str) -> bool:
        return user_id in self.ADMIN_USER_IDS


# Create a singleton instance
settings = Settings()

# Validate settings on module import (fails fast if misconfigured).
# Tests set VALIDATE_CONFIG=false.
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            logger.warning(f"{e} The app may not work correctly until you configure your .env file.")
        else:
            raise
