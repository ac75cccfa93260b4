#!/usr/bin/env python3
"""
Template Catalog Seed Script

Upserts the built-in template catalog into the `template` table using the
service role key. Safe to run repeatedly.

Usage:
    python scripts/seed_templates.py
    python scripts/seed_templates.py --dry-run
    python scripts/seed_templates.py --deactivate-missing
"""

import argparse
import logging
from typing import Any, Dict, List

from dotenv import load_dotenv

load_dotenv()

from sparklink.db.client import get_service_role_client
from sparklink.utils.templates import DEFAULT_TEMPLATES


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def seed_templates(dry_run: bool = False, deactivate_missing: bool = False) -> int:
    """
    Upsert DEFAULT_TEMPLATES.

    Returns:
        Number of templates written (or that would be written)
    """
    rows: List[Dict[str, Any]] = [dict(template) for template in DEFAULT_TEMPLATES]

    if dry_run:
        for row in rows:
            logger.info(f"[dry-run] {row['tier']:<8} {row['id']:<20} {row['name']}")
        return len(rows)

    client = get_service_role_client()
    client.table("template").upsert(rows, on_conflict="id").execute()
    logger.info(f"Upserted {len(rows)} templates")

    if deactivate_missing:
        known_ids = {row["id"] for row in rows}
        existing = client.table("template").select("id").execute()
        stale = [row["id"] for row in existing.data or [] if row["id"] not in known_ids]
        for template_id in stale:
            client.table("template").update({"is_active": False}).eq("id", template_id).execute()
        logger.info(f"Deactivated {len(stale)} templates not in the built-in catalog")

    return len(rows)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the SparkLink template catalog")
    parser.add_argument("--dry-run", action="store_true", help="List templates without writing")
    parser.add_argument(
        "--deactivate-missing",
        action="store_true",
        help="Mark templates that are not in the built-in catalog as inactive",
    )
    args = parser.parse_args()

    count = seed_templates(dry_run=args.dry_run, deactivate_missing=args.deactivate_missing)
    print(f"Done: {count} templates")


if __name__ == "__main__":
    main()
