"""Helpers for reading visitor metadata off incoming requests."""

from typing import Optional

from fastapi import Request


def get_client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("user-agent")


def get_referrer(request: Request) -> Optional[str]:
    return request.headers.get("referer")
