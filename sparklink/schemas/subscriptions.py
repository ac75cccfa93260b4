"""
Pydantic schemas for subscription and billing endpoints.

Prices are in Ghana cedis; Paystack receives amounts in pesewas.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Tier = Literal["STARTER", "RISE", "BLAZE"]
BillingCycle = Literal["monthly", "yearly"]


class PlanResponse(BaseModel):
    name: str = Field(..., description="Display name", examples=["Rise"])
    monthly_price: float = Field(..., description="Monthly price in GHS")
    yearly_price: float = Field(..., description="Yearly price in GHS")
    features: List[str] = Field(..., description="Feature bullets")
    limits: Dict[str, Any] = Field(..., description="Numeric limits (null = unlimited) and feature flags")


class PlansResponse(BaseModel):
    plans: Dict[str, PlanResponse] = Field(..., description="Plans keyed by tier")


class CurrentSubscriptionResponse(BaseModel):
    current_plan: Tier = Field(..., description="Current tier")
    plan_details: PlanResponse = Field(..., description="Plan of the current tier")
    subscription_data: Optional[Dict[str, Any]] = Field(None, description="Billing details and history")
    expires_at: Optional[str] = Field(None, description="ISO-8601 expiry of the paid period")


class InitializeSubscriptionRequest(BaseModel):
    plan: Tier = Field(..., description="Target tier")
    billing_cycle: BillingCycle = Field("monthly", description="Billing period")


class InitializeSubscriptionResponse(BaseModel):
    """
    STARTER switches immediately (only `subscription` is set). Paid plans
    return a Paystack checkout to redirect the browser to.
    """
    subscription: Optional[Tier] = Field(None, description="New tier when no payment was needed")
    authorization_url: Optional[str] = Field(None, description="Paystack checkout URL")
    reference: Optional[str] = Field(None, description="Transaction reference to verify afterwards")
    access_code: Optional[str] = Field(None, description="Paystack access code")
    message: str = Field(..., description="Next step for the client")


class SubscriptionChangeResponse(BaseModel):
    subscription: Tier = Field(..., description="Tier after the change")
    expires_at: Optional[str] = Field(None, description="ISO-8601 expiry of the paid period")
    message: str = Field(..., description="Success message")


class WebhookAckResponse(BaseModel):
    received: bool = Field(True, description="Always true once the signature checked out")
