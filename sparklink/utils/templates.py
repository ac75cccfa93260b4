"""
Built-in template catalog and color schemes.

The `template` table is authoritative. These definitions seed it
(scripts/seed_templates.py) and are served directly when the table is
empty or unreachable.
"""

from typing import Any, Dict, List

TEMPLATE_FEATURES: List[Dict[str, str]] = [
    {"key": "animated_transitions", "name": "Animated Transitions", "description": "Smooth page transitions and animations"},
    {"key": "dark_mode", "name": "Dark Mode", "description": "Toggle between light and dark themes"},
    {"key": "custom_fonts", "name": "Custom Fonts", "description": "Access to premium typography options"},
    {"key": "responsive_layout", "name": "Responsive Layout", "description": "Optimized for all screen sizes"},
    {"key": "page_navigation_style", "name": "Navigation Style", "description": "How the navigation menu is displayed"},
    {"key": "footer_style", "name": "Footer Style", "description": "How the footer is displayed"},
]

PREVIEW_BASE_URL = "/assets/templates"

DEFAULT_TEMPLATE_ID = "minimal"


def _template(
    template_id: str,
    name: str,
    description: str,
    category: str,
    tier: str,
    features: Dict[str, Any],
    is_default: bool = False,
) -> Dict[str, Any]:
    return {
        "id": template_id,
        "name": name,
        "description": description,
        "preview_image": f"{PREVIEW_BASE_URL}/{template_id}.jpg",
        "category": category,
        "tier": tier,
        "features": features,
        "is_default": is_default,
        "is_active": True,
    }


def _features(animated: bool, dark: bool, fonts: bool, navigation: str, footer: str) -> Dict[str, Any]:
    return {
        "animated_transitions": animated,
        "dark_mode": dark,
        "custom_fonts": fonts,
        "responsive_layout": True,
        "page_navigation_style": navigation,
        "footer_style": footer,
    }


DEFAULT_TEMPLATES: List[Dict[str, Any]] = [
    # STARTER
    _template("minimal", "Minimal", "Clean and simple design with focus on content",
              "professional", "STARTER", _features(False, False, False, "simple", "basic"), is_default=True),
    _template("elegant", "Elegant", "Sophisticated design with serif typography",
              "professional", "STARTER", _features(False, False, True, "centered", "minimal")),
    _template("bold", "Bold", "High contrast design with strong typography",
              "professional", "STARTER", _features(False, True, False, "side", "standard")),
    # RISE
    _template("creative", "Creative", "Unique layout with artistic elements",
              "creative", "RISE", _features(True, True, True, "animated", "creative")),
    _template("corporate", "Corporate", "Professional design for business professionals",
              "professional", "RISE", _features(False, True, True, "dropdown", "corporate")),
    _template("portfolio", "Portfolio", "Visual-focused layout for showcasing work",
              "creative", "RISE", _features(True, True, True, "hamburger", "minimal")),
    # BLAZE
    _template("premium", "Premium", "Luxury design with premium animations",
              "premium", "BLAZE", _features(True, True, True, "custom", "premium")),
]

DEFAULT_COLOR_SCHEMES: Dict[str, Dict[str, str]] = {
    "light": {
        "primary": "#3498db",
        "secondary": "#2ecc71",
        "background": "#ffffff",
        "text": "#333333",
        "accent": "#e74c3c",
    },
    "dark": {
        "primary": "#3498db",
        "secondary": "#2ecc71",
        "background": "#121212",
        "text": "#f5f5f5",
        "accent": "#e74c3c",
    },
}

COLOR_KEYS = ("primary", "secondary", "background", "text", "accent")


def find_default_template(template_id: str) -> Dict[str, Any] | None:
    for template in DEFAULT_TEMPLATES:
        if template["id"] == template_id:
            return template
    return None
