"""
Checks that the SQL schema agrees with the API models and keeps billing
and verification state out of reach of owner sessions.
"""

import re
from pathlib import Path
from typing import get_args

import pytest

from sparklink.schemas.pages import PageType
from sparklink.utils.constants import ANALYTICS_EVENTS, VERIFICATION_TYPES

MIGRATION = Path(__file__).resolve().parents[1] / "supabase" / "migrations" / "0001_sparklink_schema.sql"


@pytest.fixture(scope="module")
def schema_sql():
    return MIGRATION.read_text(encoding="utf-8")


def _check_values(sql: str, table: str, column: str) -> set:
    table_sql = re.search(rf"create table if not exists public\.{table} \((.*?)\n\);", sql, re.S).group(1)
    values = re.search(rf"\b{column} text not null.*?check \({column} in \((.*?)\)\)", table_sql, re.S).group(1)
    return set(re.findall(r"'([A-Z_]+)'", values))


def _policies(sql: str, table: str) -> list:
    return re.findall(rf"create policy \w+ on public\.{table}\s+for (\w+)", sql)


def test_page_types_match_api(schema_sql):
    assert _check_values(schema_sql, "page", "type") == set(get_args(PageType))


def test_analytics_events_match_constants(schema_sql):
    assert _check_values(schema_sql, "analytics_event", "event") == set(ANALYTICS_EVENTS)


def test_verification_types_match_constants(schema_sql):
    assert _check_values(schema_sql, "verification_request", "request_type") == set(VERIFICATION_TYPES)


def test_owners_cannot_write_plan_columns(schema_sql):
    assert sorted(_policies(schema_sql, "users")) == ["select", "update"]
    assert "revoke insert, update, delete on public.users from anon, authenticated;" in schema_sql

    granted = re.search(r"grant update \((.*?)\) on public\.users to authenticated;", schema_sql, re.S).group(1)
    columns = {column.strip() for column in granted.split(",")}
    assert "username" in columns
    assert not {column for column in columns if column.startswith(("subscription", "verification"))}
    assert "has_verified_badge" not in columns


def test_verification_requests_are_read_only_for_owners(schema_sql):
    assert _policies(schema_sql, "verification_request") == ["select"]
    assert "revoke insert, update, delete on public.verification_request from anon, authenticated;" in schema_sql


def test_user_references_follow_id_changes(schema_sql):
    references = re.findall(r"references public\.users \(id\)([^,\n]*)", schema_sql)
    assert len(references) == 3
    assert all("on update cascade" in clause for clause in references)
