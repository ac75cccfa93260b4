"""
Access tokens for password-protected pages.

A visitor who submits the right page password receives a short-lived
HS256 token bound to that page id. The public page endpoint accepts it
in the X-Page-Access header instead of asking for the password again.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from jwt.exceptions import InvalidTokenError

from sparklink.config import settings

logger = logging.getLogger(__name__)

_ALGORITHM = "HS256"
_AUDIENCE = "sparklink:page"


def issue_page_access_token(page_id: str, now: datetime | None = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": page_id,
        "aud": _AUDIENCE,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=settings.PAGE_ACCESS_TTL_SECONDS),
    }
    return jwt.encode(claims, settings.page_access_secret, algorithm=_ALGORITHM)


def verify_page_access_token(token: str | None, page_id: str) -> bool:
    """True only for an unexpired token issued for exactly this page."""
    if not token:
        return False

    try:
        claims = jwt.decode(
            token,
            settings.page_access_secret,
            algorithms=[_ALGORITHM],
            audience=_AUDIENCE,
        )
    except InvalidTokenError as e:
        logger.info(f"Rejected page access token for page {page_id}: {e}")
        return False

    return claims.get("sub") == page_id
