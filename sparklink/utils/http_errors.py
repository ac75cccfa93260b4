"""
Mapping from service exceptions to HTTPException.

All error bodies use the {"error": <code>, "details": <message>} shape.
"""

import logging

from fastapi import HTTPException, status
from postgrest.exceptions import APIError

from sparklink.services.errors import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    PaymentProviderError,
    ServiceError,
    UpgradeRequiredError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    InvalidCredentialsError: status.HTTP_401_UNAUTHORIZED,
    UpgradeRequiredError: status.HTTP_403_FORBIDDEN,
    PaymentProviderError: status.HTTP_502_BAD_GATEWAY,
}


def to_http_exception(exc: Exception, fallback_error: str, fallback_details: str) -> HTTPException:
    """
    Convert an exception raised while serving a request into an HTTPException.

    Args:
        exc: The caught exception
        fallback_error: Error code used for unexpected failures (500)
        fallback_details: Client-facing message for unexpected failures

    Returns:
        HTTPException ready to be raised
    """
    if isinstance(exc, HTTPException):
        return exc

    if isinstance(exc, UpgradeRequiredError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": exc.error_code,
                "details": exc.message,
                "required_tier": exc.required_tier,
                "current_tier": exc.current_tier,
            }
        )

    if isinstance(exc, ServiceError):
        status_code = next(
            (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)),
            status.HTTP_400_BAD_REQUEST,
        )
        return HTTPException(
            status_code=status_code,
            detail={"error": exc.error_code, "details": exc.message}
        )

    if isinstance(exc, ValueError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(exc)}
        )

    if isinstance(exc, APIError) and exc.code == "23505":  # unique_violation
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "conflict", "details": "A record with these values already exists"}
        )

    if isinstance(exc, APIError) and exc.code == "23514":  # check_violation
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": "A value is not allowed for this field"}
        )

    logger.error(f"{fallback_error}: {exc}", exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": fallback_error, "details": fallback_details}
    )
