"""
Ordering helpers for pages and gallery items.

Rows carry an integer `order` column that must stay a dense 0..n-1
sequence. These functions are pure: they compute which rows need a new
order value and leave persistence to the caller.
"""

from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple


def _sort_key(row: Mapping[str, Any]) -> Tuple[int, str]:
    order = row.get("order")
    return (order if isinstance(order, int) else 0, str(row.get("created_at") or ""))


def normalize_order(rows: Sequence[Mapping[str, Any]]) -> List[Tuple[str, int]]:
    """
    Re-densify the order of `rows` to 0..n-1.

    Rows are sorted by their current order (ties broken by created_at)
    and renumbered. Only rows whose order actually changes are returned.

    Returns:
        List of (id, new_order) pairs
    """
    ordered = sorted(rows, key=_sort_key)
    return [
        (str(row["id"]), position)
        for position, row in enumerate(ordered)
        if row.get("order") != position
    ]


def apply_reorder(
    rows: Sequence[Mapping[str, Any]],
    requested: Iterable[Mapping[str, Any]],
) -> List[Tuple[str, int]]:
    """
    Compute new orders after a drag-and-drop reorder.

    Args:
        rows: Current rows owned by the profile (need "id" and "order")
        requested: Client-supplied {"id", "order"} entries

    Ids that do not belong to `rows` are ignored. When an id appears more
    than once the last entry wins. Requested rows are placed by their
    requested order; rows not mentioned keep their relative order and
    follow them. The result is re-densified to 0..n-1.

    Returns:
        List of (id, new_order) pairs for rows whose order changed
    """
    by_id: Dict[str, Mapping[str, Any]] = {str(row["id"]): row for row in rows}

    wanted: Dict[str, int] = {}
    for entry in requested:
        row_id = str(entry.get("id"))
        if row_id in by_id:
            wanted[row_id] = int(entry.get("order", 0))

    moved = sorted(wanted, key=lambda row_id: (wanted[row_id], _sort_key(by_id[row_id])))
    untouched = [
        str(row["id"]) for row in sorted(rows, key=_sort_key)
        if str(row["id"]) not in wanted
    ]

    changes: List[Tuple[str, int]] = []
    for position, row_id in enumerate(moved + untouched):
        if by_id[row_id].get("order") != position:
            changes.append((row_id, position))
    return changes