"""Shared helper functions for step definitions."""

from typing import Dict, List, Sequence


def table_rows(datatable: Sequence[Sequence[str]]) -> List[Dict[str, str]]:
    """Turn a pytest-bdd datatable into one dict per row, keyed by header.

    Empty cells are left out so the driver applies its own defaults.
    """
    if not datatable:
        return []
    header = [cell.strip() for cell in datatable[0]]
    rows = []
    for row in datatable[1:]:
        rows.append(
            {name: cell.strip() for name, cell in zip(header, row) if cell.strip()}
        )
    return rows


def split_list(value: str) -> List[str]:
    """Split a comma separated cell, e.g. a list of roles."""
    return [item.strip() for item in value.split(",") if item.strip()]
