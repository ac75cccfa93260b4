"""
Pydantic schemas for template endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from sparklink.utils.constants import HEX_COLOR_PATTERN
from sparklink.utils.templates import COLOR_KEYS


class ColorScheme(BaseModel):
    """
    Template colors. Every provided value must be a #RRGGBB hex code;
    omitted keys keep their current value.
    """
    primary: Optional[str] = Field(None, examples=["#3498db"])
    secondary: Optional[str] = Field(None, examples=["#2ecc71"])
    background: Optional[str] = Field(None, examples=["#ffffff"])
    text: Optional[str] = Field(None, examples=["#333333"])
    accent: Optional[str] = Field(None, examples=["#e74c3c"])

    @field_validator(*COLOR_KEYS)
    @classmethod
    def validate_hex(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not HEX_COLOR_PATTERN.match(value):
            raise ValueError("Color must be a valid hex code (e.g., '#FF5733')")
        return value

    def provided(self) -> Dict[str, str]:
        return {key: value for key, value in self.model_dump().items() if value is not None}


class TemplateResponse(BaseModel):
    id: str = Field(..., description="Template slug", examples=["minimal"])
    name: str = Field(..., description="Display name")
    description: Optional[str] = Field(None, description="Short description")
    preview_image: Optional[str] = Field(None, description="Preview image URL")
    category: Optional[str] = Field(None, description="Template category", examples=["professional"])
    tier: str = Field(..., description="Minimum tier required", examples=["STARTER", "RISE", "BLAZE"])
    features: Dict[str, Any] = Field(default_factory=dict, description="Feature flags and styles")
    is_default: bool = Field(False, description="Default template for new profiles")
    is_current: Optional[bool] = Field(None, description="True if applied to the caller's profile")


class TemplateListResponse(BaseModel):
    """
    Templates available to the caller's tier, ordered by tier then name.
    """
    templates: List[TemplateResponse] = Field(..., description="Accessible templates")
    current_template: str = Field(..., description="Template applied to the caller's profile")
    current_tier: str = Field(..., description="Caller's subscription tier")
    color_schemes: Dict[str, Dict[str, str]] = Field(..., description="Built-in light and dark schemes")
    features: List[Dict[str, str]] = Field(..., description="Catalog of template feature descriptions")


class ApplyTemplateRequest(BaseModel):
    template_id: str = Field(..., min_length=1, description="Template slug", examples=["elegant"])
    color_scheme: Optional[ColorScheme] = Field(None, description="Optional colors to apply with the template")


class UpdateColorsRequest(BaseModel):
    color_scheme: ColorScheme = Field(..., description="Colors to change")


class ProfileTemplateResponse(BaseModel):
    template_id: str = Field(..., description="Template applied to the profile")
    color_scheme: Dict[str, str] = Field(..., description="Resulting color scheme")
    message: str = Field(..., description="Success message")
