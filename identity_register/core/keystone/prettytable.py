"""Parse the pretty-printed tables emitted by the keystone CLI.

Listing commands print a header row and one row per object::

    +----------------------------------+---------+---------+
    |                id                |   name  | enabled |
    +----------------------------------+---------+---------+
    | 8a1b3c...                        | tenant1 |   True  |
    +----------------------------------+---------+---------+

``*-create`` and ``*-get`` commands print a two-column ``Property | Value``
table instead, which is flattened into a single row.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from .exceptions import ParseError

BORDER_CHARS = frozenset("-+=")
PROPERTY_HEADER = ["Property", "Value"]


def _is_border(line: str) -> bool:
    return set(line) <= BORDER_CHARS


def _split_cells(line: str) -> List[str]:
    cells = line.split("|")
    if line.startswith("|"):
        cells = cells[1:]
    if line.endswith("|") and cells:
        cells = cells[:-1]
    return [cell.strip() for cell in cells]


def parse_table(raw_text: Optional[str]) -> List[Dict[str, str]]:
    """Convert keystone tabular output into a list of row records.

    Args:
        raw_text: Raw stdout of a keystone command

    Returns:
        Rows in printed order, each mapping column name to cell value.
        Empty for empty or header-only output.

    Raises:
        ParseError: If a data row has a different cell count than the header
    """
    if not raw_text:
        return []

    header: List[str] = []
    rows: List[Dict[str, str]] = []
    for lineno, raw_line in enumerate(raw_text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or _is_border(line):
            continue
        cells = _split_cells(line)
        if not header:
            header = cells
            continue
        if len(cells) != len(header):
            raise ParseError(
                f"Line {lineno}: expected {len(header)} cells, got {len(cells)}: {line!r}"
            )
        rows.append(dict(zip(header, cells)))

    # Property/Value tables describe one object; flatten them.
    if header == PROPERTY_HEADER:
        if not rows:
            return []
        return [{row["Property"]: row["Value"] for row in rows}]
    return rows
