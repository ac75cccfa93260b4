"""
Subscription tier gates as FastAPI dependencies.

    @router.get("/summary")
    async def summary(auth_user: Annotated[AuthenticatedUser, Depends(require_analytics)]):
        ...

The caller's tier is read from users.subscription on every request, so
an upgrade or downgrade takes effect immediately.
"""

import logging
from typing import Annotated, Awaitable, Callable

from fastapi import Depends, HTTPException, status

from sparklink.auth.dependencies import AuthenticatedUser, get_authenticated_user
from sparklink.db.client import get_supabase_client
from sparklink.services.user_service import get_user_tier
from sparklink.utils.plans import get_plan, has_tier_access, minimum_tier_for, plan_allows

logger = logging.getLogger(__name__)

TierDependency = Callable[[AuthenticatedUser], Awaitable[AuthenticatedUser]]


def _upgrade_required(required_tier: str, current_tier: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error": "upgrade_required",
            "details": f"This feature requires a {get_plan(required_tier)['name']} subscription or higher",
            "required_tier": required_tier,
            "current_tier": current_tier,
        }
    )


def require_tier(required_tier: str) -> TierDependency:
    """Dependency factory: caller must be on `required_tier` or above."""

    async def dependency(
        auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
    ) -> AuthenticatedUser:
        supabase_client = get_supabase_client(auth_user.access_token)
        current_tier = await get_user_tier(supabase_client, auth_user.user_id)

        if not has_tier_access(current_tier, required_tier):
            logger.info(
                f"User {auth_user.user_id} on {current_tier} blocked from {required_tier} feature"
            )
            raise _upgrade_required(required_tier, current_tier)

        return auth_user

    return dependency


def require_feature(feature: str) -> TierDependency:
    """Dependency factory: caller's plan must enable a boolean `feature`."""

    async def dependency(
        auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
    ) -> AuthenticatedUser:
        supabase_client = get_supabase_client(auth_user.access_token)
        current_tier = await get_user_tier(supabase_client, auth_user.user_id)

        if not plan_allows(current_tier, feature):
            logger.info(f"User {auth_user.user_id} on {current_tier} blocked from feature {feature}")
            raise _upgrade_required(minimum_tier_for(feature), current_tier)

        return auth_user

    return dependency


require_analytics = require_feature("analytics")
