"""
Tests for gallery helpers and item deletion.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from sparklink.services.errors import NotFoundError
from sparklink.services.gallery_service import delete_item, parse_tags

SERVICE = "sparklink.services.gallery_service"


@pytest.mark.parametrize("raw,expected", [
    (None, []),
    ("   ", []),
    ('["travel", "portrait"]', ["travel", "portrait"]),
    ("travel, portrait ,", ["travel", "portrait"]),
    ("travel, travel", ["travel"]),
    ('[" sea ", ""]', ["sea"]),
])
def test_parse_tags(raw, expected):
    assert parse_tags(raw) == expected


@pytest.mark.parametrize("raw", ["[not json", '[{"a": 1}'])
def test_parse_tags_rejects_bad_json(raw):
    with pytest.raises(ValueError):
        parse_tags(raw)


@pytest.fixture
def profile():
    with patch(f"{SERVICE}.get_or_create_profile", AsyncMock(return_value={"id": "profile-1"})):
        yield


def _gallery_client(item, remaining):
    client = MagicMock()
    table = client.table.return_value
    table.select.return_value.eq.return_value.eq.return_value.execute.return_value = \
        MagicMock(data=[item] if item else [])
    table.select.return_value.eq.return_value.order.return_value.execute.return_value = MagicMock(data=remaining)
    return client


class TestDeleteItem:

    @pytest.mark.asyncio
    async def test_removes_image_and_renumbers(self, profile):
        remaining = [
            {"id": "g0", "order": 0, "created_at": "2025-11-01T00:00:00+00:00"},
            {"id": "g2", "order": 2, "created_at": "2025-11-02T00:00:00+00:00"},
            {"id": "g3", "order": 3, "created_at": "2025-11-03T00:00:00+00:00"},
        ]
        client = _gallery_client({"id": "g1", "storage_path": "gallery/u1/g1.png"}, remaining)

        with patch(f"{SERVICE}.delete_file", AsyncMock(return_value=True)) as mock_delete:
            await delete_item(client, "u1", "g1")

        table = client.table.return_value
        table.delete.return_value.eq.assert_called_once_with("id", "g1")
        mock_delete.assert_awaited_once_with(client, "media", "gallery/u1/g1.png")

        new_orders = {
            eq_call.args[1]: update_call.args[0]["order"]
            for update_call, eq_call in zip(table.update.call_args_list, table.update.return_value.eq.call_args_list)
        }
        assert new_orders == {"g2": 1, "g3": 2}

    @pytest.mark.asyncio
    async def test_storage_failure_still_renumbers(self, profile):
        remaining = [{"id": "g5", "order": 1, "created_at": "2025-11-01T00:00:00+00:00"}]
        client = _gallery_client({"id": "g1", "storage_path": "gallery/u1/g1.png"}, remaining)

        with patch(f"{SERVICE}.delete_file", AsyncMock(return_value=False)):
            await delete_item(client, "u1", "g1")

        client.table.return_value.update.assert_called_once_with({"order": 0})

    @pytest.mark.asyncio
    async def test_unknown_item(self, profile):
        client = _gallery_client(None, [])

        with patch(f"{SERVICE}.delete_file", AsyncMock()) as mock_delete:
            with pytest.raises(NotFoundError):
                await delete_item(client, "u1", "missing")

        client.table.return_value.delete.assert_not_called()
        mock_delete.assert_not_called()
