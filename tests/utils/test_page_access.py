"""
Tests for page access tokens.
"""

from datetime import datetime, timedelta, timezone

import jwt

from sparklink.auth.page_access import issue_page_access_token, verify_page_access_token
from sparklink.config import settings


def test_token_is_bound_to_page():
    token = issue_page_access_token("page-1")

    assert verify_page_access_token(token, "page-1") is True
    assert verify_page_access_token(token, "page-2") is False


def test_expired_token():
    issued = datetime.now(timezone.utc) - timedelta(seconds=settings.PAGE_ACCESS_TTL_SECONDS + 60)
    token = issue_page_access_token("page-1", now=issued)

    assert verify_page_access_token(token, "page-1") is False


def test_foreign_secret():
    token = jwt.encode({"sub": "page-1", "aud": "sparklink:page"}, "another-secret", algorithm="HS256")

    assert verify_page_access_token(token, "page-1") is False


def test_wrong_audience():
    token = jwt.encode({"sub": "page-1", "aud": "authenticated"}, settings.page_access_secret, algorithm="HS256")

    assert verify_page_access_token(token, "page-1") is False


def test_missing_token():
    assert verify_page_access_token(None, "page-1") is False
    assert verify_page_access_token("", "page-1") is False
