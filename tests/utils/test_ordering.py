"""
Tests for page and gallery ordering helpers.
"""

from sparklink.utils.ordering import apply_reorder, normalize_order


def _rows(*orders):
    return [{"id": f"r{i}", "order": order, "created_at": f"2025-01-0{i + 1}"} for i, order in enumerate(orders)]


class TestNormalizeOrder:

    def test_dense_sequence_unchanged(self):
        assert normalize_order(_rows(0, 1, 2)) == []

    def test_closes_gaps(self):
        assert normalize_order(_rows(0, 2, 5)) == [("r1", 1), ("r2", 2)]

    def test_ties_broken_by_creation(self):
        assert normalize_order(_rows(1, 1)) == [("r0", 0)]


class TestApplyReorder:

    def test_swap(self):
        changes = apply_reorder(_rows(0, 1, 2), [{"id": "r2", "order": 0}, {"id": "r0", "order": 2}])

        assert dict(changes) == {"r2": 0, "r0": 1, "r1": 2}

    def test_move_to_front(self):
        changes = apply_reorder(_rows(0, 1, 2), [{"id": "r2", "order": 0}])

        assert dict(changes) == {"r2": 0, "r0": 1, "r1": 2}

    def test_unknown_ids_ignored(self):
        assert apply_reorder(_rows(0, 1), [{"id": "other-profile-row", "order": 0}]) == []

    def test_last_duplicate_wins(self):
        changes = apply_reorder(_rows(0, 1), [{"id": "r0", "order": 0}, {"id": "r0", "order": 5}, {"id": "r1", "order": 1}])

        assert dict(changes) == {"r1": 0, "r0": 1}

    def test_result_is_dense(self):
        rows = _rows(0, 1, 2, 3)
        changes = dict(apply_reorder(rows, [{"id": "r3", "order": 10}, {"id": "r1", "order": 7}]))
        final = {row["id"]: changes.get(row["id"], row["order"]) for row in rows}

        assert sorted(final.values()) == [0, 1, 2, 3]
        assert final["r1"] < final["r3"]
