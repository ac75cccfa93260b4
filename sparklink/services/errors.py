"""
Exceptions raised by the service layer.

Routes translate these into HTTP responses (see
sparklink/utils/http_errors.py). Plain ValueError is still used for
request-level validation failures and maps to 400.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for domain errors with a stable error code."""

    error_code = "service_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    error_code = "not_found"


class ConflictError(ServiceError):
    error_code = "conflict"


class ForbiddenError(ServiceError):
    error_code = "forbidden"


class InvalidCredentialsError(ServiceError):
    error_code = "invalid_credentials"


class UpgradeRequiredError(ServiceError):
    """The caller's subscription tier does not include a feature."""

    error_code = "upgrade_required"

    def __init__(self, message: str, required_tier: str, current_tier: Optional[str]):
        super().__init__(message)
        self.required_tier = required_tier
        self.current_tier = current_tier


class PaymentProviderError(ServiceError):
    """Paystack rejected a request or could not be reached."""

    error_code = "payment_provider_error"


class NotPublishedError(ForbiddenError):
    error_code = "not_published"


class PasswordRequiredError(InvalidCredentialsError):
    error_code = "password_required"
