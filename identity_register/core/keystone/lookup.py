"""Identifier lookup over parsed keystone listings."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional


def search_uuid(rows: List[Dict[str, str]], id_column: str, filters: Mapping[str, str]) -> Optional[str]:
    """Return the identifier of the first row matching ``filters`` exactly.

    A row matches when every filter column is present with the wanted value
    and the row carries no column other than ``id_column`` and the filter
    columns, so listings are narrowed with :func:`narrow_rows` first.

    Args:
        rows: Parsed listing
        id_column: Column holding the identifier to return
        filters: Required column values

    Returns:
        Identifier of the first matching row, or None
    """
    allowed = set(filters) | {id_column}
    for row in rows:
        if set(row) - allowed:
            continue
        if id_column not in row:
            continue
        if all(key in row and row[key] == value for key, value in filters.items()):
            return row[id_column]
    return None


def narrow_rows(rows: List[Dict[str, str]], columns: Iterable[str]) -> List[Dict[str, str]]:
    """Keep only ``columns`` of each row.

    Keystone listings print more than the columns a lookup asks about, for
    example ``enabled`` on tenants or the URLs on endpoints.
    """
    wanted = set(columns)
    return [{key: value for key, value in row.items() if key in wanted} for row in rows]
