"""
Subscription service.

Tier changes flow through Paystack:

1. initialize_subscription() starts a checkout and returns Paystack's
   authorization URL (STARTER switches immediately, no payment).
2. verify_subscription_payment() confirms the transaction by reference
   and upgrades the user.
3. handle_webhook_event() keeps users in sync with Paystack-side events
   (recurring charges, failures, cancellations).

users.subscription_data (jsonb) keeps billing details and history:
plan, billing_cycle, status, transaction_ref, authorization_code,
card_details, subscription_code, email_token, previous_plan,
cancelled_at, last_payment_date, last_failed_payment_date.

Owners cannot write plan columns themselves, so every change to them goes
through a service role client.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from supabase import Client

from sparklink.services.errors import NotFoundError, PaymentProviderError
from sparklink.services.paystack import PaystackClient
from sparklink.services.user_service import get_user, get_user_by_email, update_user
from sparklink.config import settings
from sparklink.utils.plans import (
    BILLING_CYCLES,
    SUBSCRIPTION_PLANS,
    compute_expiry,
    get_plan,
    get_price,
    normalize_tier,
    to_minor_units,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _validate_plan(plan: str, billing_cycle: str) -> None:
    if plan not in SUBSCRIPTION_PLANS:
        raise ValueError("Invalid plan or billing cycle")
    if billing_cycle not in BILLING_CYCLES:
        raise ValueError("Billing cycle must be monthly or yearly")


async def get_current_subscription(supabase_client: Client, user_id: str) -> Dict[str, Any]:
    user = await get_user(supabase_client, user_id)
    if not user:
        raise NotFoundError("User not found")

    tier = normalize_tier(user.get("subscription"))
    return {
        "current_plan": tier,
        "plan_details": get_plan(tier),
        "subscription_data": user.get("subscription_data"),
        "expires_at": user.get("subscription_expires_at"),
    }


async def initialize_subscription(
    supabase_client: Client,
    paystack: PaystackClient,
    user_id: str,
    plan: str,
    billing_cycle: str,
    service_client: Client,
) -> Dict[str, Any]:
    """
    Start a plan change.

    Args:
        supabase_client: Caller-scoped client for reading the users row
        service_client: Service role client for the STARTER switch

    Returns:
        For STARTER: {"subscription": "STARTER"}
        For paid plans: {"authorization_url", "reference", "access_code"}

    Raises:
        ValueError: Unknown plan or billing cycle
        NotFoundError: User row missing
        PaymentProviderError: Paystack failure
    """
    _validate_plan(plan, billing_cycle)

    user = await get_user(supabase_client, user_id)
    if not user:
        raise NotFoundError("User not found")

    if plan == "STARTER":
        await update_user(
            service_client,
            user_id,
            subscription="STARTER",
            subscription_data={"plan": "STARTER", "billing_cycle": "N/A", "status": "active"},
            subscription_expires_at=None,
        )
        logger.info(f"User {user_id} switched to STARTER")
        return {"subscription": "STARTER"}

    full_name = f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
    metadata = {
        "user_id": user_id,
        "plan": plan,
        "billing_cycle": billing_cycle,
        "full_name": full_name or user.get("email"),
    }
    amount = to_minor_units(get_price(plan, billing_cycle))

    logger.info(f"Initializing {plan}/{billing_cycle} checkout for user {user_id}: amount={amount}")
    data = await paystack.initialize_transaction(
        amount=amount,
        email=user["email"],
        metadata=metadata,
        callback_url=settings.paystack_callback_url,
    )

    return {
        "authorization_url": data["authorization_url"],
        "reference": data["reference"],
        "access_code": data["access_code"],
    }


def _card_details(authorization: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "last4": authorization.get("last4"),
        "exp_month": authorization.get("exp_month"),
        "exp_year": authorization.get("exp_year"),
        "card_type": authorization.get("card_type"),
    }


async def verify_subscription_payment(
    service_client: Client,
    paystack: PaystackClient,
    reference: str,
    user_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Confirm a checkout and activate the purchased plan.

    Args:
        service_client: Service role client (the paying user's row is
            addressed by transaction metadata)
        reference: Paystack transaction reference
        user_id: When set, the transaction must belong to this user

    Returns:
        {"subscription": tier, "expires_at": ISO timestamp}

    Raises:
        ValueError: Payment not successful or metadata missing/mismatched
    """
    try:
        data = await paystack.verify_transaction(reference)
    except PaymentProviderError:
        raise ValueError("Payment verification failed")

    if not data or data.get("status") != "success":
        raise ValueError("Payment verification failed")

    metadata = data.get("metadata") or {}
    owner_id = metadata.get("user_id")
    plan = metadata.get("plan")
    billing_cycle = metadata.get("billing_cycle")
    if not owner_id or plan not in SUBSCRIPTION_PLANS or billing_cycle not in BILLING_CYCLES:
        raise ValueError("Invalid transaction metadata")
    if user_id is not None and owner_id != user_id:
        raise ValueError("Transaction does not belong to this user")

    expires_at = compute_expiry(billing_cycle, _now())
    authorization = data.get("authorization") or {}

    await update_user(
        service_client,
        owner_id,
        subscription=plan,
        subscription_data={
            "plan": plan,
            "billing_cycle": billing_cycle,
            "transaction_ref": reference,
            "payment_method": "paystack",
            "status": "active",
            "authorization_code": authorization.get("authorization_code"),
            "card_details": _card_details(authorization),
        },
        subscription_expires_at=expires_at.isoformat(),
    )

    logger.info(f"Subscription for user {owner_id} set to {plan} until {expires_at.isoformat()}")
    return {"subscription": plan, "expires_at": expires_at.isoformat()}


async def cancel_subscription(
    supabase_client: Client,
    paystack: PaystackClient,
    user_id: str,
    service_client: Client,
) -> Dict[str, Any]:
    """
    Revert to STARTER.

    A Paystack-side recurring subscription is disabled when one exists;
    failures there are logged and do not block the local downgrade.
    """
    user = await get_user(supabase_client, user_id)
    if not user:
        raise NotFoundError("User not found")

    existing: Dict[str, Any] = dict(user.get("subscription_data") or {})
    subscription_code = existing.get("subscription_code")

    if subscription_code:
        try:
            await paystack.disable_subscription(
                subscription_code, existing.get("email_token") or subscription_code
            )
        except PaymentProviderError as e:
            logger.warning(f"Could not disable Paystack subscription for user {user_id}: {e}")

    new_data = {
        **existing,
        "plan": "STARTER",
        "billing_cycle": "N/A",
        "status": "active",
        "previous_plan": normalize_tier(user.get("subscription")),
        "cancelled_at": _now().isoformat(),
    }

    await update_user(
        service_client,
        user_id,
        subscription="STARTER",
        subscription_data=new_data,
        subscription_expires_at=None,
    )
    logger.info(f"User {user_id} cancelled subscription; reverted to STARTER")
    return {"subscription": "STARTER"}


async def _merge_subscription_data(
    service_client: Client,
    user: Dict[str, Any],
    changes: Dict[str, Any],
    **columns: Any
) -> None:
    merged = {**(user.get("subscription_data") or {}), **changes}
    await update_user(service_client, str(user["id"]), subscription_data=merged, **columns)


async def _on_subscription_create(service_client: Client, data: Dict[str, Any]) -> None:
    email = (data.get("customer") or {}).get("email")
    user = await get_user_by_email(service_client, email) if email else None
    if not user:
        logger.warning("subscription.create for unknown customer")
        return

    await _merge_subscription_data(service_client, user, {
        "subscription_code": data.get("subscription_code"),
        "email_token": data.get("email_token"),
        "plan_code": (data.get("plan") or {}).get("plan_code"),
        "status": "active",
    })


async def _on_subscription_disable(service_client: Client, data: Dict[str, Any]) -> None:
    email = (data.get("customer") or {}).get("email")
    user = await get_user_by_email(service_client, email) if email else None
    if not user:
        return

    existing = user.get("subscription_data") or {}
    if existing.get("subscription_code") != data.get("subscription_code"):
        logger.info(f"Ignoring subscription.disable for a stale subscription of user {user['id']}")
        return

    await _merge_subscription_data(
        service_client,
        user,
        {"status": "cancelled", "cancelled_at": _now().isoformat()},
        subscription="STARTER",
    )


async def _on_charge_success(service_client: Client, data: Dict[str, Any]) -> None:
    metadata = data.get("metadata") or {}
    user_id = metadata.get("user_id")
    if not user_id:
        return

    user = await get_user(service_client, user_id)
    if not user:
        return

    columns: Dict[str, Any] = {}
    billing_cycle = metadata.get("billing_cycle")
    if billing_cycle in BILLING_CYCLES:
        columns["subscription_expires_at"] = compute_expiry(billing_cycle, _now()).isoformat()
    if metadata.get("plan") in SUBSCRIPTION_PLANS:
        columns["subscription"] = metadata["plan"]

    await _merge_subscription_data(
        service_client,
        user,
        {"last_payment_date": _now().isoformat(), "status": "active"},
        **columns,
    )


async def _on_payment_failed(service_client: Client, data: Dict[str, Any]) -> None:
    email = (data.get("customer") or {}).get("email")
    user = await get_user_by_email(service_client, email) if email else None
    if not user:
        return

    await _merge_subscription_data(service_client, user, {
        "status": "payment_failed",
        "last_failed_payment_date": _now().isoformat(),
    })


WEBHOOK_HANDLERS = {
    "subscription.create": _on_subscription_create,
    "subscription.disable": _on_subscription_disable,
    "charge.success": _on_charge_success,
    "invoice.payment_failed": _on_payment_failed,
}


async def handle_webhook_event(service_client: Client, event: Dict[str, Any]) -> bool:
    """
    Apply a verified Paystack webhook event.

    Never raises; Paystack only needs an acknowledgement and retries
    would not fix a processing bug.

    Returns:
        True if a handler ran successfully
    """
    event_type = event.get("event")
    handler = WEBHOOK_HANDLERS.get(str(event_type))
    if handler is None:
        logger.info(f"Unhandled Paystack event: {event_type}")
        return False

    try:
        await handler(service_client, event.get("data") or {})
    except Exception as e:
        logger.error(f"Failed to process Paystack event {event_type}: {e}", exc_info=True)
        return False

    logger.info(f"Processed Paystack event {event_type}")
    return True
