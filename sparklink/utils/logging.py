"""
Logging utilities for SparkLink Backend.

Provides standardized logger configuration following security and privacy rules.

CRITICAL SECURITY RULES:
- NEVER log account or page passwords, even hashed
- NEVER log Supabase Auth tokens, page access tokens, API keys or secrets
- NEVER log full Paystack payloads (they carry card and customer details)
- NEVER log uploaded file contents

Acceptable logging:
- High-level events (e.g., "Page created", "Webhook charge.success processed")
- Identifiers (user_id, page_id, Paystack reference)
- Counts and sizes
"""

import logging
from typing import Optional

from sparklink.config import settings


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to LOG_LEVEL)

    Returns:
        Configured logger instance

    Usage:
        >>> from sparklink.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)

    # Avoid duplicate handlers on repeated calls
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
