"""
Subscription plans and the tier access-control matrix.

Every feature gate in the API reads from SUBSCRIPTION_PLANS. Tiers are
strictly ordered STARTER < RISE < BLAZE and a higher tier includes every
capability of the tiers below it.

Numeric limits use None for "unlimited" so plans serialize as plain JSON.
Prices are in Ghana cedis (GHS); Paystack expects pesewas.
"""

import calendar
from datetime import datetime
from typing import Any, Dict, List, Optional

TIER_LEVELS: Dict[str, int] = {
    "STARTER": 0,
    "RISE": 1,
    "BLAZE": 2,
}

DEFAULT_TIER = "STARTER"

BILLING_CYCLES = ("monthly", "yearly")

SUBSCRIPTION_PLANS: Dict[str, Dict[str, Any]] = {
    "STARTER": {
        "tier": "STARTER",
        "name": "Starter",
        "monthly_price": 0,
        "yearly_price": 0,
        "features": [
            "1-page portfolio (Home default)",
            "SparkLink-branded URL",
            "3 professional templates",
            "Customizable profile picture, background banner, and tagline",
            "Up to 5 social media links",
            "Basic bio",
            'Displays "Powered by SparkLink" badge',
            "Mobile optimized, SEO-ready",
        ],
        "limits": {
            "pages": 1,
            "social_links": 5,
            "custom_domain": False,
            "remove_branding": False,
            "analytics": False,
            "password_protection": False,
            "advanced_privacy": False,
            "scheduled_publishing": False,
            "verified_badge": False,
            "affiliate": False,
            "priority_support": False,
        },
    },
    "RISE": {
        "tier": "RISE",
        "name": "Rise",
        "monthly_price": 35,
        "yearly_price": 350,
        "features": [
            "Up to 6 total pages (Home + 5 additional pages)",
            "10 standard templates",
            "Analytics dashboard (visitor insights and referral sources)",
            "Option to remove SparkLink branding",
            "Password-protect pages",
            "Basic integrations (Calendly, PayPal, Google Calendar, etc.)",
            "Collect emails and phone numbers from visitors",
            "Enhanced content display for services, products, events, and more",
        ],
        "limits": {
            "pages": 6,
            "social_links": 10,
            "custom_domain": False,
            "remove_branding": True,
            "analytics": True,
            "password_protection": True,
            "advanced_privacy": False,
            "scheduled_publishing": False,
            "verified_badge": False,
            "affiliate": False,
            "priority_support": False,
        },
    },
    "BLAZE": {
        "tier": "BLAZE",
        "name": "Blaze",
        "monthly_price": 70,
        "yearly_price": 700,
        "features": [
            "Unlimited pages and access to all template designs",
            "White-label option (remove all SparkLink references)",
            "Verified badge on your profile",
            "Client galleries with guest uploads",
            "Priority support (24-hour response time)",
            "Schedule pages to go live or expire at specific times",
            "Advanced privacy controls and lead collection",
            "Access to the Spark Affiliate Program (earn 20% on referrals)",
        ],
        "limits": {
            "pages": None,
            "social_links": None,
            "custom_domain": True,
            "remove_branding": True,
            "analytics": True,
            "password_protection": True,
            "advanced_privacy": True,
            "scheduled_publishing": True,
            "verified_badge": True,
            "affiliate": True,
            "priority_support": True,
        },
    },
}


def normalize_tier(tier: Optional[str]) -> str:
    """Unknown or missing tiers fall back to STARTER."""
    if tier and tier.upper() in TIER_LEVELS:
        return tier.upper()
    return DEFAULT_TIER


def tier_level(tier: Optional[str]) -> int:
    return TIER_LEVELS[normalize_tier(tier)]


def get_plan(tier: Optional[str]) -> Dict[str, Any]:
    return SUBSCRIPTION_PLANS[normalize_tier(tier)]


def has_tier_access(current_tier: Optional[str], required_tier: str) -> bool:
    """True when current_tier is the same as or above required_tier."""
    return tier_level(current_tier) >= tier_level(required_tier)


def accessible_tiers(tier: Optional[str]) -> List[str]:
    """Tiers whose content a user on `tier` may use, lowest first."""
    level = tier_level(tier)
    return [name for name, value in TIER_LEVELS.items() if value <= level]


def plan_allows(tier: Optional[str], feature: str) -> bool:
    """
    Check a boolean capability flag for a tier.

    Raises:
        KeyError: If the feature is not part of the plan matrix
    """
    limits = get_plan(tier)["limits"]
    if feature not in limits:
        raise KeyError(f"Unknown plan feature: {feature}")
    return bool(limits[feature])


def minimum_tier_for(feature: str) -> str:
    """Lowest tier that enables a boolean feature."""
    for name in sorted(TIER_LEVELS, key=TIER_LEVELS.__getitem__):
        if plan_allows(name, feature):
            return name
    raise KeyError(f"No tier enables feature: {feature}")


def get_limit(tier: Optional[str], limit_name: str) -> Optional[int]:
    """Numeric limit for a tier; None means unlimited."""
    return get_plan(tier)["limits"][limit_name]


def within_limit(tier: Optional[str], limit_name: str, count: int) -> bool:
    """True when `count` items fit within the tier's limit."""
    limit = get_limit(tier, limit_name)
    return limit is None or count <= limit


def get_price(tier: str, billing_cycle: str) -> int:
    if billing_cycle not in BILLING_CYCLES:
        raise ValueError("Billing cycle must be either monthly or yearly")
    plan = get_plan(tier)
    return plan["monthly_price"] if billing_cycle == "monthly" else plan["yearly_price"]


def to_minor_units(amount: float) -> int:
    """Convert cedis to pesewas, the unit Paystack charges in."""
    return int(round(amount * 100))


def compute_expiry(billing_cycle: str, now: datetime) -> datetime:
    """
    Expiry of a subscription period starting at `now`.

    Monthly adds one calendar month, yearly adds one year. Days that do
    not exist in the target month clamp to its last day (Jan 31 -> Feb 28).
    """
    if billing_cycle == "monthly":
        year = now.year + (1 if now.month == 12 else 0)
        month = 1 if now.month == 12 else now.month + 1
    elif billing_cycle == "yearly":
        year = now.year + 1
        month = now.month
    else:
        raise ValueError("Billing cycle must be either monthly or yearly")

    last_day = calendar.monthrange(year, month)[1]
    return now.replace(year=year, month=month, day=min(now.day, last_day))
