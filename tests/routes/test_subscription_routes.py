"""
Tests for subscription endpoints, including the Paystack webhook.
"""

import hashlib
import hmac
import json

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from sparklink.main import app
from sparklink.auth.dependencies import get_authenticated_user, AuthenticatedUser
from sparklink.config import settings
from sparklink.services.paystack import PaystackError, get_paystack_client

client = TestClient(app)


async def mock_get_authenticated_user_dependency():
    return AuthenticatedUser(user_id="test-user-id", access_token="test-access-token")


async def mock_paystack_dependency():
    return MagicMock()


@pytest.fixture
def mock_auth():
    app.dependency_overrides[get_authenticated_user] = mock_get_authenticated_user_dependency
    app.dependency_overrides[get_paystack_client] = mock_paystack_dependency
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_get_supabase_client():
    with patch("sparklink.routes.subscriptions.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


@pytest.fixture
def mock_service_client():
    with patch("sparklink.routes.subscriptions.get_service_role_client") as mock:
        mock.return_value = MagicMock()
        yield mock


def _sign(body: bytes) -> str:
    return hmac.new(settings.PAYSTACK_SECRET_KEY.encode("utf-8"), body, hashlib.sha512).hexdigest()


class TestPlans:

    def test_list_plans_is_public(self):
        response = client.get("/subscriptions/plans")

        assert response.status_code == 200
        plans = response.json()["plans"]
        assert set(plans) == {"STARTER", "RISE", "BLAZE"}
        assert plans["RISE"]["monthly_price"] == 35
        assert plans["BLAZE"]["limits"]["pages"] is None


class TestCurrentSubscription:

    @patch("sparklink.routes.subscriptions.get_current_subscription")
    def test_current(self, mock_current, mock_auth, mock_get_supabase_client):
        from sparklink.utils.plans import SUBSCRIPTION_PLANS
        mock_current.return_value = {
            "current_plan": "RISE",
            "plan_details": SUBSCRIPTION_PLANS["RISE"],
            "subscription_data": {"billing_cycle": "monthly"},
            "expires_at": "2025-12-05T10:00:00+00:00",
        }

        response = client.get("/subscriptions/current")

        assert response.status_code == 200
        assert response.json()["current_plan"] == "RISE"
        assert response.json()["plan_details"]["name"] == "Rise"


class TestInitialize:

    @patch("sparklink.routes.subscriptions.initialize_subscription")
    def test_paid_plan_returns_checkout(self, mock_init, mock_auth, mock_get_supabase_client, mock_service_client):
        mock_init.return_value = {
            "authorization_url": "https://checkout.paystack.com/abc",
            "reference": "ref-123",
            "access_code": "abc",
        }

        response = client.post("/subscriptions/initialize", json={"plan": "RISE", "billing_cycle": "yearly"})

        assert response.status_code == 200
        data = response.json()
        assert data["authorization_url"] == "https://checkout.paystack.com/abc"
        assert data["subscription"] is None
        kwargs = mock_init.call_args.kwargs
        assert (kwargs["plan"], kwargs["billing_cycle"]) == ("RISE", "yearly")
        assert kwargs["service_client"] is mock_service_client.return_value

    @patch("sparklink.routes.subscriptions.initialize_subscription")
    def test_starter_switches_immediately(self, mock_init, mock_auth, mock_get_supabase_client, mock_service_client):
        mock_init.return_value = {"subscription": "STARTER"}

        response = client.post("/subscriptions/initialize", json={"plan": "STARTER"})

        assert response.status_code == 200
        assert response.json()["subscription"] == "STARTER"
        assert response.json()["authorization_url"] is None

    def test_invalid_billing_cycle(self, mock_auth, mock_get_supabase_client):
        response = client.post("/subscriptions/initialize", json={"plan": "RISE", "billing_cycle": "weekly"})

        assert response.status_code == 422

    @patch("sparklink.routes.subscriptions.initialize_subscription")
    def test_paystack_failure_is_bad_gateway(self, mock_init, mock_auth, mock_get_supabase_client, mock_service_client):
        mock_init.side_effect = PaystackError("Payment provider is unreachable")

        response = client.post("/subscriptions/initialize", json={"plan": "BLAZE"})

        assert response.status_code == 502


class TestVerify:

    @patch("sparklink.routes.subscriptions.get_service_role_client")
    @patch("sparklink.routes.subscriptions.verify_subscription_payment")
    def test_verify_success(self, mock_verify, mock_service_client, mock_auth):
        mock_verify.return_value = {"subscription": "BLAZE", "expires_at": "2026-11-05T10:00:00+00:00"}

        response = client.get("/subscriptions/verify/ref-123")

        assert response.status_code == 200
        assert response.json()["subscription"] == "BLAZE"
        assert mock_verify.call_args.kwargs["user_id"] == "test-user-id"

    @patch("sparklink.routes.subscriptions.get_service_role_client")
    @patch("sparklink.routes.subscriptions.verify_subscription_payment")
    def test_verify_failed_payment(self, mock_verify, mock_service_client, mock_auth):
        mock_verify.side_effect = ValueError("Payment verification failed")

        response = client.get("/subscriptions/verify/ref-123")

        assert response.status_code == 400
        assert response.json()["detail"]["details"] == "Payment verification failed"


class TestCancel:

    @patch("sparklink.routes.subscriptions.cancel_subscription")
    def test_cancel(self, mock_cancel, mock_auth, mock_get_supabase_client, mock_service_client):
        mock_cancel.return_value = {"subscription": "STARTER"}

        response = client.post("/subscriptions/cancel")

        assert response.status_code == 200
        assert response.json()["subscription"] == "STARTER"
        assert mock_cancel.call_args.kwargs["service_client"] is mock_service_client.return_value


class TestWebhook:

    @patch("sparklink.routes.subscriptions.get_service_role_client")
    @patch("sparklink.routes.subscriptions.handle_webhook_event")
    def test_valid_signature_is_processed(self, mock_handle, mock_service_client):
        body = json.dumps({"event": "charge.success", "data": {"reference": "ref-1"}}).encode("utf-8")

        response = client.post(
            "/subscriptions/webhook",
            content=body,
            headers={"x-paystack-signature": _sign(body), "content-type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}
        event = mock_handle.call_args.args[1]
        assert event["event"] == "charge.success"

    @patch("sparklink.routes.subscriptions.handle_webhook_event")
    def test_invalid_signature_rejected(self, mock_handle):
        body = b'{"event": "charge.success"}'

        response = client.post(
            "/subscriptions/webhook",
            content=body,
            headers={"x-paystack-signature": "0" * 128},
        )

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "invalid_signature"
        mock_handle.assert_not_called()

    @patch("sparklink.routes.subscriptions.handle_webhook_event")
    def test_missing_signature_rejected(self, mock_handle):
        response = client.post("/subscriptions/webhook", content=b"{}")

        assert response.status_code == 401

    @patch("sparklink.routes.subscriptions.handle_webhook_event")
    def test_signed_non_json_body_is_acknowledged(self, mock_handle):
        body = b"not json"

        response = client.post("/subscriptions/webhook", content=body, headers={"x-paystack-signature": _sign(body)})

        assert response.status_code == 200
        mock_handle.assert_not_called()

    @pytest.mark.parametrize("body", [b"[1, 2]", b'"charge.success"', b"42", b"null"])
    @patch("sparklink.routes.subscriptions.handle_webhook_event")
    def test_signed_non_object_json_is_acknowledged(self, mock_handle, body):
        response = client.post("/subscriptions/webhook", content=body, headers={"x-paystack-signature": _sign(body)})

        assert response.status_code == 200
        assert response.json() == {"received": True}
        mock_handle.assert_not_called()
