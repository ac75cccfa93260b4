"""
Template API endpoints.

Templates are gated by tier: callers see and can apply templates of their
own tier and below.
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, Path, status

from sparklink.auth.dependencies import AuthenticatedUser, get_authenticated_user
from sparklink.db.client import get_anon_client, get_supabase_client
from sparklink.schemas.templates import (
    ApplyTemplateRequest,
    ProfileTemplateResponse,
    TemplateListResponse,
    TemplateResponse,
    UpdateColorsRequest,
)
from sparklink.services.template_service import apply_template, get_template, list_templates, update_colors
from sparklink.utils.http_errors import to_http_exception
from sparklink.utils.templates import DEFAULT_COLOR_SCHEMES, DEFAULT_TEMPLATE_ID

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])


def _to_profile_template(profile: Dict[str, Any], message: str) -> ProfileTemplateResponse:
    return ProfileTemplateResponse(
        template_id=profile.get("template_id") or DEFAULT_TEMPLATE_ID,
        color_scheme=profile.get("color_scheme") or DEFAULT_COLOR_SCHEMES["light"],
        message=message,
    )


@router.get(
    "",
    response_model=TemplateListResponse,
    status_code=status.HTTP_200_OK,
    summary="List available templates",
    description="""
    Templates accessible to the caller's tier, ordered by tier then name,
    each flagged with is_current. Also returns the built-in color schemes.

    Security:
    - Requires valid Authorization Bearer token
    """
)
async def list_templates_endpoint(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> TemplateListResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await list_templates(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve templates")

    return TemplateListResponse.model_validate(result)


@router.post(
    "/apply",
    response_model=ProfileTemplateResponse,
    status_code=status.HTTP_200_OK,
    summary="Apply a template",
    description="403 upgrade_required when the template's tier is above the caller's.",
)
async def apply_template_endpoint(
    request: ApplyTemplateRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ProfileTemplateResponse:
    logger.info(f"User {auth_user.user_id} applying template {request.template_id}")

    supabase_client = get_supabase_client(auth_user.access_token)
    colors = request.color_scheme.provided() if request.color_scheme else None

    try:
        profile = await apply_template(supabase_client, auth_user.user_id, request.template_id, colors)
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to apply template")

    return _to_profile_template(profile, "Template applied successfully")


@router.put(
    "/colors",
    response_model=ProfileTemplateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update color scheme",
    description="Keys: primary, secondary, background, text, accent. Each value a #RRGGBB hex code.",
)
async def update_colors_endpoint(
    request: UpdateColorsRequest,
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> ProfileTemplateResponse:
    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        profile = await update_colors(supabase_client, auth_user.user_id, request.color_scheme.provided())
    except Exception as e:
        raise to_http_exception(e, "update_error", "Failed to update colors")

    return _to_profile_template(profile, "Colors updated successfully")


@router.get(
    "/{template_id}",
    response_model=TemplateResponse,
    status_code=status.HTTP_200_OK,
    summary="Get template by ID",
    description="Public endpoint. 404 for unknown templates.",
)
async def get_template_endpoint(
    template_id: str = Path(..., min_length=1, max_length=64, description="Template slug"),
) -> TemplateResponse:
    try:
        template = await get_template(get_anon_client(), template_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to retrieve template")

    return TemplateResponse.model_validate(template)
