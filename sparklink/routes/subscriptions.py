"""
Subscription API endpoints.

Plan changes go through Paystack checkout:
1. POST /subscriptions/initialize returns a Paystack authorization URL
2. The browser pays and returns to {CLIENT_URL}/subscription/callback
3. GET /subscriptions/verify/{reference} activates the plan

Paystack also calls POST /subscriptions/webhook for recurring charges,
failures and cancellations.
"""

import json
import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Request, status

from sparklink.auth.dependencies import AuthenticatedUser, get_authenticated_user
from sparklink.config import settings
from sparklink.db.client import get_service_role_client, get_supabase_client
from sparklink.schemas.subscriptions import (
    CurrentSubscriptionResponse,
    InitializeSubscriptionRequest,
    InitializeSubscriptionResponse,
    PlanResponse,
    PlansResponse,
    SubscriptionChangeResponse,
    WebhookAckResponse,
)
from sparklink.services.paystack import PaystackClient, get_paystack_client, verify_webhook_signature
from sparklink.services.subscription_service import (
    cancel_subscription,
    get_current_subscription,
    handle_webhook_event,
    initialize_subscription,
    verify_subscription_payment,
)
from sparklink.utils.http_errors import to_http_exception
from sparklink.utils.plans import SUBSCRIPTION_PLANS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


@router.get(
    "/plans",
    response_model=PlansResponse,
    status_code=status.HTTP_200_OK,
    summary="List subscription plans",
    description="Public endpoint. The full plan matrix: prices, feature bullets and limits per tier.",
)
async def list_plans() -> PlansResponse:
    return PlansResponse(
        plans={tier: PlanResponse.model_validate(plan) for tier, plan in SUBSCRIPTION_PLANS.items()}
    )


@router.get(
    "/current",
    response_model=CurrentSubscriptionResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current subscription",
)
async def current_subscription(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> CurrentSubscriptionResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await get_current_subscription(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve subscription")

    return CurrentSubscriptionResponse.model_validate(result)


@router.post(
    "/initialize",
    response_model=InitializeSubscriptionResponse,
    status_code=status.HTTP_200_OK,
    summary="Start a plan change",
    description="""
    Switch plans.

    This endpoint:
    - Moves to STARTER immediately (no payment)
    - For RISE/BLAZE, opens a Paystack transaction for the plan price in
      pesewas and returns the checkout URL and reference

    Security:
    - Requires valid Authorization Bearer token
    - Transaction metadata binds the payment to the caller
    """
)
async def initialize(
    request: InitializeSubscriptionRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    paystack: Annotated[PaystackClient, Depends(get_paystack_client)],
) -> InitializeSubscriptionResponse:
    """
    Start a plan change.

    **6-STEP ENDPOINT FLOW:**

    Auth
    - Handled by get_authenticated_user dependency

    Parse/Validate Request
    - Plan and billing cycle validated by InitializeSubscriptionRequest

    Domain & Intent Filter
    - STARTER short-circuits without Paystack

    Call Service
    - initialize_subscription()

    Map Output -> ResponseModel
    - Checkout details -> InitializeSubscriptionResponse

    Persistence
    - Only for STARTER (tier change); paid plans persist on verify
    """
    logger.info(f"User {auth_user.user_id} initializing {request.plan}/{request.billing_cycle}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await initialize_subscription(
            supabase_client,
            paystack,
            auth_user.user_id,
            plan=request.plan,
            billing_cycle=request.billing_cycle,
            service_client=get_service_role_client(),
        )
    except Exception as e:
        raise to_http_exception(e, "payment_error", "Failed to initialize subscription")

    if "subscription" in result:
        return InitializeSubscriptionResponse(
            subscription=result["subscription"],
            message="Switched to the Starter plan",
        )

    return InitializeSubscriptionResponse(
        authorization_url=result["authorization_url"],
        reference=result["reference"],
        access_code=result["access_code"],
        message="Redirect to authorization_url to complete payment",
    )


@router.get(
    "/verify/{reference}",
    response_model=SubscriptionChangeResponse,
    status_code=status.HTTP_200_OK,
    summary="Verify a payment",
    description="""
    Confirm a Paystack transaction and activate the purchased plan. Returns
    400 when the payment did not succeed or belongs to another user.
    """
)
async def verify(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    paystack: Annotated[PaystackClient, Depends(get_paystack_client)],
    reference: str = Path(..., min_length=1, max_length=200, description="Paystack transaction reference"),
) -> SubscriptionChangeResponse:
    try:
        result = await verify_subscription_payment(
            get_service_role_client(),
            paystack,
            reference,
            user_id=auth_user.user_id,
        )
    except Exception as e:
        raise to_http_exception(e, "payment_error", "Failed to verify payment")

    return SubscriptionChangeResponse(
        subscription=result["subscription"],
        expires_at=result["expires_at"],
        message="Subscription activated",
    )


@router.post(
    "/cancel",
    response_model=SubscriptionChangeResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel subscription",
    description="Revert to STARTER. A recurring Paystack subscription is disabled when one exists.",
)
async def cancel(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
    paystack: Annotated[PaystackClient, Depends(get_paystack_client)],
) -> SubscriptionChangeResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await cancel_subscription(
            supabase_client, paystack, auth_user.user_id, service_client=get_service_role_client()
        )
    except Exception as e:
        raise to_http_exception(e, "cancel_error", "Failed to cancel subscription")

    return SubscriptionChangeResponse(
        subscription=result["subscription"],
        message="Subscription cancelled",
    )


@router.post(
    "/webhook",
    response_model=WebhookAckResponse,
    status_code=status.HTTP_200_OK,
    summary="Paystack webhook",
    description="""
    Receives Paystack events. The x-paystack-signature header must be the
    HMAC-SHA512 of the raw body keyed with the Paystack secret (401
    otherwise). Valid deliveries are always acknowledged with 200, even if
    processing fails, so Paystack does not retry.
    """
)
async def webhook(
    request: Request,
    x_paystack_signature: Annotated[Optional[str], Header()] = None,
) -> WebhookAckResponse:
    raw_body = await request.body()

    if not verify_webhook_signature(raw_body, x_paystack_signature, settings.PAYSTACK_SECRET_KEY):
        logger.warning("Rejected Paystack webhook with invalid signature")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "invalid_signature", "details": "Invalid webhook signature"}
        )

    try:
        event: Any = json.loads(raw_body)
    except ValueError:
        logger.warning("Paystack webhook body is not valid JSON")
        return WebhookAckResponse(received=True)

    if not isinstance(event, dict):
        logger.warning(f"Paystack webhook body is {type(event).__name__}, not an object")
        return WebhookAckResponse(received=True)

    await handle_webhook_event(get_service_role_client(), event)
    return WebhookAckResponse(received=True)
