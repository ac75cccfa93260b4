"""
Domain constants shared by schemas, services and routes.

See supabase/migrations/0001_sparklink_schema.sql for the matching
database enums and check constraints.
"""

import re

PAGE_TYPES = (
    "HOME",
    "ABOUT",
    "PROJECTS",
    "SERVICES",
    "CONTACT",
    "GALLERY",
    "BLOG",
    "RESUME",
    "TESTIMONIALS",
    "CUSTOM",
)

SOCIAL_PLATFORMS = (
    "twitter",
    "linkedin",
    "github",
    "instagram",
    "facebook",
    "youtube",
    "tiktok",
    "website",
)

ANALYTICS_EVENTS = {
    'PROFILE_VIEW': 'PROFILE_VIEW',
    'PAGE_VIEW': 'PAGE_VIEW',
    'GALLERY_VIEW': 'GALLERY_VIEW',
    'RESUME_DOWNLOAD': 'RESUME_DOWNLOAD',
    'SOCIAL_CLICK': 'SOCIAL_CLICK',
}

VERIFICATION_STATUSES = ("NONE", "PENDING", "APPROVED", "REJECTED", "REVOKED")

VERIFICATION_TYPES = ("IDENTITY", "BUSINESS", "SOCIAL", "CELEBRITY", "ORGANIZATION")

# Usernames are stored lowercase and appear in public URLs
USERNAME_PATTERN = re.compile(r"^[a-z0-9_]{3,30}$")

# Kebab-case slugs: "my-projects", "about"
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")

# Upload limits
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MAX_RESUME_BYTES = 10 * 1024 * 1024
MAX_VERIFICATION_DOCUMENTS = 5

PROFILE_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif")
GALLERY_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
VERIFICATION_DOCUMENT_TYPES = ("image/jpeg", "image/png", "image/webp", "application/pdf")

VERIFICATION_REQUIREMENTS = {
    "IDENTITY": {
        "title": "Identity Verification",
        "description": "Verify your identity as a real person",
        "requirements": [
            "Government-issued photo ID (passport, driver's license, national ID)",
            "Clear, high-quality photos of the document",
            "Document must be valid and not expired",
            "Name on document must match your SparkLink profile name",
        ],
        "documents": ["Photo ID (front)", "Photo ID (back if applicable)"],
        "processing_time": "2-5 business days",
    },
    "BUSINESS": {
        "title": "Business Verification",
        "description": "Verify your business or organization",
        "requirements": [
            "Business registration certificate",
            "Tax registration documents",
            "Proof of business address",
            "Your role/position in the business",
        ],
        "documents": ["Business registration", "Tax documents", "Address proof"],
        "processing_time": "3-7 business days",
    },
    "SOCIAL": {
        "title": "Social Media Verification",
        "description": "Verify your social media presence",
        "requirements": [
            "Minimum 10,000 followers on at least one platform",
            "Active and authentic social media accounts",
            "Link to your SparkLink profile from your social media bio",
            "Consistent branding across platforms",
        ],
        "documents": ["Screenshots of follower counts", "Social media links"],
        "processing_time": "1-3 business days",
    },
    "CELEBRITY": {
        "title": "Public Figure Verification",
        "description": "Verify your status as a public figure",
        "requirements": [
            "Significant media coverage or public recognition",
            "Wikipedia page or notable online presence",
            "Professional achievements in your field",
            "News articles or interviews featuring you",
        ],
        "documents": ["Media coverage links", "Professional credentials"],
        "processing_time": "5-10 business days",
    },
    "ORGANIZATION": {
        "title": "Organization Verification",
        "description": "Verify your non-profit or organization",
        "requirements": [
            "Official organization registration",
            "Non-profit status documentation (if applicable)",
            "Organization website with your information",
            "Your official role in the organization",
        ],
        "documents": ["Registration certificate", "Non-profit documents", "Role verification"],
        "processing_time": "3-7 business days",
    },
}

VERIFICATION_GUIDELINES = [
    "Only BLAZE tier subscribers can apply for verification",
    "All documents must be clear and legible",
    "Fake or manipulated documents will result in permanent ban",
    "Processing times are estimates and may vary",
    "You can resubmit if your request is rejected",
    "Verified status can be revoked if guidelines are violated",
]
