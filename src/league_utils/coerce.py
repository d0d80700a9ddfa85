"""Number, date and percent coercion for hand-maintained sheet cells.

Cells arrive as free text: "$12m", "12,000,000", "€3.5", "119" (tenths of a
percent), "2021.0" (a year that went through numeric coercion). Coercion is
lenient: anything unparsable becomes 0. Callers that want to surface those
silent zeros pass a ``ParseWarnings`` collector.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from league_utils.text import clean_cell

_NUMBER_NOISE_RE = re.compile(r"[,€$mM]")
_YEAR_RE = re.compile(r"^\d{4}$")
_YEAR_IN_TEXT_RE = re.compile(r"\b(\d{4})\b")
_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_PERCENT_RE = re.compile(r"^\d+(\.\d+)?$")


@dataclass(frozen=True)
class ParseWarning:
    """A non-blank cell that coerced to 0."""

    field: str
    raw: str
    row: int | None = None


@dataclass
class ParseWarnings:
    """Optional side channel for suspicious zeros; never blocks parsing."""

    items: list[ParseWarning] = field(default_factory=list)

    def add(self, field_name: str, raw: str, row: int | None = None) -> None:
        self.items.append(ParseWarning(field=field_name, raw=raw, row=row))

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def by_field(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for w in self.items:
            counts[w.field] = counts.get(w.field, 0) + 1
        return counts


def parse_number_or_none(value: object) -> float | None:
    """Parse a money/stat cell, returning None for blank or unparsable text."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else None
    s = _NUMBER_NOISE_RE.sub("", str(value).replace("\r", "")).strip()
    if not s:
        return None
    try:
        n = float(s)
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def parse_number(
    value: object,
    warnings: ParseWarnings | None = None,
    field_name: str = "",
    row: int | None = None,
) -> float:
    """Parse a money/stat cell leniently; unparsable values become 0.

    Strips thousands separators, currency symbols (``$``, ``€``) and the
    ``m`` millions suffix. The suffix is removed, not applied: "$12m" and
    "12" both parse to 12.0 in the sheet's own unit.

    Args:
        value: Raw cell value
        warnings: Optional collector; receives an entry when a non-blank
            cell coerces to 0
        field_name: Column label recorded on the warning
        row: Source row index recorded on the warning

    Returns:
        Finite float, 0.0 when blank or unparsable
    """
    n = parse_number_or_none(value)
    if n is not None:
        return n
    raw = "" if value is None else str(value).strip()
    if raw and warnings is not None:
        warnings.add(field_name, raw, row)
    return 0.0


def parse_int_or_none(value: object) -> int | None:
    s = "" if value is None else str(value).replace("\r", "").replace(",", "").strip()
    if not s:
        return None
    try:
        return int(float(s))
    except ValueError:
        return None


def format_tenths_percent(value: object) -> str:
    """Render a tenths-of-a-percent cell with a decimal comma.

    119 → "11,9%", 1000 → "100,0%". A comma decimal separator in the input
    is accepted. Non-numeric text is returned unchanged.
    """
    raw = clean_cell(value)
    cleaned = raw.replace(",", ".")
    if not _PERCENT_RE.match(cleaned):
        return raw
    n = float(cleaned)
    return f"{n / 10:.1f}".replace(".", ",") + "%"


def date_sortable(value: object) -> int:
    """``dd/mm/yyyy`` → ``yyyymmdd`` integer; malformed dates sort as 0."""
    m = _DATE_RE.match("" if value is None else str(value).strip())
    if not m:
        return 0
    day, month, year = (int(g) for g in m.groups())
    return year * 10000 + month * 100 + day


def is_year_header(value: object) -> bool:
    """True for a bare four-digit header such as "2026"."""
    return bool(_YEAR_RE.match("" if value is None else str(value).strip()))


def year_in_text(value: object) -> str | None:
    """Return the first standalone four-digit group in a label, if any."""
    m = _YEAR_IN_TEXT_RE.search("" if value is None else str(value))
    return m.group(1) if m else None


def as_year(value: object) -> int | None:
    """Interpret a cell as a season year.

    Accepts "2024" and numeric coercions such as "2024.0" or 2024.0 within
    1900..2100.
    """
    if value is None:
        return None
    s = str(value).strip()
    if _YEAR_RE.match(s):
        return int(s)
    try:
        n = float(s)
    except ValueError:
        return None
    if math.isfinite(n) and 1900 <= n <= 2100:
        return int(n)
    return None
