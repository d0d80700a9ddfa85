"""Header lookup and de-duplication for hand-maintained sheet tabs.

Sheet headers drift: columns get renamed, duplicated, padded with stray
spaces. Lookups here never raise; absence is reported as ``None`` / ``-1``
so callers can degrade a feature instead of failing a load.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from league_utils.text import clean_cell

_WS_RE = re.compile(r"\s+")
_DIGITS_RE = re.compile(r"^\d+$")


def normalize_header(value: object) -> str:
    """Case-insensitive, whitespace-collapsed header key."""
    return _WS_RE.sub(" ", clean_cell(value)).lower()


def make_unique_headers(raw_headers: Sequence[object]) -> tuple[list[str], dict[str, str]]:
    """Suffix repeated headers with an occurrence counter.

    ``["Player", "2024", "Player", "2024"]`` becomes
    ``["Player", "2024", "Player_2", "2024_2"]``. The display map keeps the
    original label, except that the second occurrence of a purely numeric
    header reads "salaries till <label>".

    Returns:
        (unique headers, unique header → display label)
    """
    trimmed = [clean_cell(h) for h in raw_headers]
    counts: dict[str, int] = {}
    totals: dict[str, int] = {}
    for h in trimmed:
        totals[h] = totals.get(h, 0) + 1

    headers: list[str] = []
    display: dict[str, str] = {}
    for h in trimmed:
        counts[h] = counts.get(h, 0) + 1
        n = counts[h]
        key = h if n == 1 else f"{h}_{n}"
        headers.append(key)
        if _DIGITS_RE.match(h) and totals[h] > 1 and n == 2:
            display[key] = f"salaries till {h}"
        else:
            display[key] = h
    return headers, display


def _candidates(wanted: str | Iterable[str]) -> list[str]:
    if isinstance(wanted, str):
        return [wanted]
    return list(wanted)


def resolve_header(headers: Sequence[str], wanted: str | Iterable[str]) -> str | None:
    """Return the first header matching any candidate label, or None.

    Each candidate (in order) is tried as an exact trimmed match before a
    normalized (case-folded, whitespace-collapsed) match.
    """
    trimmed = [clean_cell(h) for h in headers]
    normalized = [normalize_header(h) for h in headers]
    for cand in _candidates(wanted):
        exact = clean_cell(cand)
        if exact in trimmed:
            return headers[trimmed.index(exact)]
        key = normalize_header(cand)
        if key in normalized:
            return headers[normalized.index(key)]
    return None


def find_header_index(
    headers: Sequence[str], wanted: str | Iterable[str], *, last: bool = False
) -> int:
    """Index of the matching header, or -1.

    Args:
        headers: Header row cells
        wanted: Label or ordered candidate labels
        last: Return the last matching column instead of the first
    """
    normalized = [normalize_header(h) for h in headers]
    for cand in _candidates(wanted):
        key = normalize_header(cand)
        hits = [i for i, h in enumerate(normalized) if h == key]
        if hits:
            return hits[-1] if last else hits[0]
    return -1


def find_exact_index(headers: Sequence[str], label: str) -> int:
    """Index of a header whose trimmed text equals ``label`` exactly, or -1."""
    for i, h in enumerate(headers):
        if clean_cell(h) == label:
            return i
    return -1


@dataclass
class HeaderCatalog:
    """A header row plus its data rows as header-keyed string records."""

    headers: list[str] = field(default_factory=list)
    display: dict[str, str] = field(default_factory=dict)
    records: list[dict[str, str]] = field(default_factory=list)

    def label(self, header: str) -> str:
        return self.display.get(header, header)


def build_header_catalog(
    grid: Sequence[Sequence[object]],
    header_row: int = 1,
    data_start: int = 2,
    key_column: str = "Player",
) -> HeaderCatalog:
    """Build header-keyed records from a grid.

    Headers sit on ``header_row`` (row 2 of the players tab) and data starts
    at ``data_start``. Rows whose ``key_column`` cell is blank are dropped.
    A grid too short to hold a header and one data row yields an empty
    catalog.
    """
    if len(grid) <= max(header_row, data_start):
        return HeaderCatalog()

    headers, display = make_unique_headers(grid[header_row])
    key_idx = next((i for i, h in enumerate(headers) if h.lower() == key_column.lower()), -1)

    records: list[dict[str, str]] = []
    for row in grid[data_start:]:
        rec = {h: clean_cell(row[i]) if i < len(row) else "" for i, h in enumerate(headers)}
        if key_idx != -1 and not rec[headers[key_idx]]:
            continue
        records.append(rec)
    return HeaderCatalog(headers=headers, display=display, records=records)
