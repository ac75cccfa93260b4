"""
Template service.

Templates are read from the `template` table; when the table is empty or
cannot be read, the built-in catalog in utils.templates is served so the
dashboard keeps working on a fresh database.
"""

import logging
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from sparklink.services.errors import NotFoundError, UpgradeRequiredError
from sparklink.services.profile_service import get_or_create_profile
from sparklink.services.user_service import get_user_tier
from sparklink.utils.constants import HEX_COLOR_PATTERN
from sparklink.utils.plans import accessible_tiers, has_tier_access, normalize_tier, tier_level
from sparklink.utils.templates import (
    COLOR_KEYS,
    DEFAULT_COLOR_SCHEMES,
    DEFAULT_TEMPLATE_ID,
    DEFAULT_TEMPLATES,
    TEMPLATE_FEATURES,
    find_default_template,
)

logger = logging.getLogger(__name__)


def _sort_templates(templates: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(templates, key=lambda t: (tier_level(t.get("tier")), str(t.get("name") or "")))


async def _load_catalog(supabase_client: Client) -> List[Dict[str, Any]]:
    try:
        result = (
            supabase_client.table("template")
            .select("*")
            .eq("is_active", True)
            .execute()
        )
    except Exception as e:
        logger.warning(f"Template table unavailable, serving built-in catalog: {e}")
        return [dict(t) for t in DEFAULT_TEMPLATES]

    rows = cast(List[Dict[str, Any]], result.data or [])
    if not rows:
        logger.debug("Template table empty, serving built-in catalog")
        return [dict(t) for t in DEFAULT_TEMPLATES]
    return rows


def validate_color_scheme(color_scheme: Dict[str, Any]) -> Dict[str, str]:
    """
    Check a color scheme: every key must be known and every value a
    #RRGGBB hex color. Partial schemes are allowed.

    Raises:
        ValueError: Unknown key or malformed color
    """
    if not color_scheme:
        raise ValueError("Color scheme cannot be empty")

    cleaned: Dict[str, str] = {}
    for key, value in color_scheme.items():
        if key not in COLOR_KEYS:
            raise ValueError(f"Unknown color key: {key}")
        if not isinstance(value, str) or not HEX_COLOR_PATTERN.match(value):
            raise ValueError(f"Invalid hex color for {key}: {value}")
        cleaned[key] = value.lower()
    return cleaned


async def list_templates(supabase_client: Client, user_id: str) -> Dict[str, Any]:
    """
    Templates available to the caller's tier.

    Returns:
        {
          "templates": [template + "is_current"],
          "current_template": template id,
          "current_tier": tier,
          "color_schemes": DEFAULT_COLOR_SCHEMES,
          "features": TEMPLATE_FEATURES
        }
    """
    tier = await get_user_tier(supabase_client, user_id)
    allowed = set(accessible_tiers(tier))
    profile = await get_or_create_profile(supabase_client, user_id)
    current_id = profile.get("template_id") or DEFAULT_TEMPLATE_ID

    catalog = await _load_catalog(supabase_client)
    templates = [
        {**template, "is_current": template.get("id") == current_id}
        for template in _sort_templates(catalog)
        if normalize_tier(template.get("tier")) in allowed
    ]

    logger.info(f"Listed {len(templates)} templates for user {user_id} ({tier})")
    return {
        "templates": templates,
        "current_template": current_id,
        "current_tier": tier,
        "color_schemes": DEFAULT_COLOR_SCHEMES,
        "features": TEMPLATE_FEATURES,
    }


async def get_template(supabase_client: Client, template_id: str) -> Dict[str, Any]:
    """
    Raises:
        NotFoundError: Unknown template id
    """
    try:
        result = (
            supabase_client.table("template")
            .select("*")
            .eq("id", template_id)
            .execute()
        )
        if result.data:
            return cast(Dict[str, Any], result.data[0])
    except Exception as e:
        logger.warning(f"Template lookup failed for {template_id}, trying built-in catalog: {e}")

    template = find_default_template(template_id)
    if template is None:
        raise NotFoundError("Template not found")
    return dict(template)


async def apply_template(
    supabase_client: Client,
    user_id: str,
    template_id: str,
    color_scheme: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Switch the caller's profile to a template.

    When no color scheme is given the profile's current one is kept, or
    the light scheme if there is none yet.

    Raises:
        NotFoundError: Unknown template id
        UpgradeRequiredError: Template tier above the caller's tier
        ValueError: Malformed color scheme
    """
    template = await get_template(supabase_client, template_id)
    tier = await get_user_tier(supabase_client, user_id)
    required = normalize_tier(template.get("tier"))

    if not has_tier_access(tier, required):
        raise UpgradeRequiredError(
            f"The {template.get('name', template_id)} template requires a {required} subscription",
            required_tier=required,
            current_tier=tier,
        )

    profile = await get_or_create_profile(supabase_client, user_id)
    values: Dict[str, Any] = {"template_id": template_id}
    if color_scheme:
        values["color_scheme"] = {**DEFAULT_COLOR_SCHEMES["light"], **validate_color_scheme(color_scheme)}
    elif not profile.get("color_scheme"):
        values["color_scheme"] = dict(DEFAULT_COLOR_SCHEMES["light"])

    result = (
        supabase_client.table("profile")
        .update(values)
        .eq("id", profile["id"])
        .execute()
    )
    if not result.data:
        raise Exception("Failed to apply template: no data returned")

    logger.info(f"User {user_id} applied template {template_id}")
    return cast(Dict[str, Any], result.data[0])


async def update_colors(
    supabase_client: Client,
    user_id: str,
    color_scheme: Dict[str, Any],
) -> Dict[str, Any]:
    """Merge validated colors into the profile's color scheme."""
    cleaned = validate_color_scheme(color_scheme)
    profile = await get_or_create_profile(supabase_client, user_id)
    merged = {**DEFAULT_COLOR_SCHEMES["light"], **(profile.get("color_scheme") or {}), **cleaned}

    result = (
        supabase_client.table("profile")
        .update({"color_scheme": merged})
        .eq("id", profile["id"])
        .execute()
    )
    if not result.data:
        raise Exception("Failed to update colors: no data returned")

    logger.info(f"User {user_id} updated colors: {list(cleaned.keys())}")
    return cast(Dict[str, Any], result.data[0])
