"""
Paystack API client.

Thin async wrapper over the Paystack REST API used for subscription
checkout. All amounts are in pesewas (see utils.plans.to_minor_units).
Every method returns the `data` member of Paystack's
{"status", "message", "data"} envelope and raises PaystackError
when the request fails or Paystack reports status=false.
"""

import hashlib
import hmac
import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from sparklink.config import settings
from sparklink.services.errors import PaymentProviderError

logger = logging.getLogger(__name__)


def verify_webhook_signature(raw_body: bytes, signature: Optional[str], secret_key: str) -> bool:
    """
    Check the x-paystack-signature header.

    Paystack signs the raw request body with HMAC-SHA512 keyed by the
    account's secret key and sends the hex digest.
    """
    if not signature or not secret_key:
        return False
    expected = hmac.new(secret_key.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature.strip().lower())


class PaystackError(PaymentProviderError):
    """Paystack request failed or Paystack reported status=false."""


class PaystackClient:
    """
    Async Paystack client.

    Args:
        secret_key: Paystack secret key (defaults to settings)
        base_url: API base URL (defaults to settings)
        client: Optional pre-built httpx.AsyncClient (tests inject one
            backed by httpx.MockTransport)
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._secret_key = secret_key or settings.PAYSTACK_SECRET_KEY
        self._base_url = (base_url or settings.PAYSTACK_BASE_URL).rstrip("/")
        self._http = client or httpx.AsyncClient(timeout=settings.PAYSTACK_TIMEOUT_SECONDS)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._secret_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug(f"Paystack {method} {path}")

        try:
            response = await self._http.request(method, url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Paystack request {method} {path} failed: {e}")
            raise PaystackError("Payment provider is unreachable")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or not body.get("status"):
            message = body.get("message") or f"Paystack returned HTTP {response.status_code}"
            logger.warning(f"Paystack {method} {path} rejected: status={response.status_code}, message={message}")
            raise PaystackError(message)

        return body.get("data")

    async def initialize_transaction(
        self,
        amount: int,
        email: str,
        metadata: Optional[Dict[str, Any]] = None,
        plan: Optional[str] = None,
        callback_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Start a checkout.

        Returns:
            {"authorization_url", "access_code", "reference"}
        """
        payload: Dict[str, Any] = {"amount": amount, "email": email, "metadata": metadata or {}}
        if plan:
            payload["plan"] = plan
        if callback_url:
            payload["callback_url"] = callback_url
        return await self._request("POST", "/transaction/initialize", payload)

    async def verify_transaction(self, reference: str) -> Dict[str, Any]:
        return await self._request("GET", f"/transaction/verify/{reference}")

    async def disable_subscription(self, subscription_code: str, email_token: str) -> Any:
        return await self._request("POST", "/subscription/disable", {
            "code": subscription_code,
            "token": email_token,
        })

    async def aclose(self) -> None:
        await self._http.aclose()


async def get_paystack_client() -> AsyncIterator[PaystackClient]:
    """FastAPI dependency yielding a client built from settings."""
    client = PaystackClient()
    try:
        yield client
    finally:
        await client.aclose()
