"""Per-team sheet → GM, waiver hits and draft picks (pure parsing).

Team sheets are free-form: labels ("GM:", "Waiver", "Picks") can sit in any
column, and the picks matrix may or may not label its year columns. Picks
year columns are resolved in two phases:

  1. labels: a ``20xx`` label in the rows around the "Picks" cell that
     belongs to the sheet's seasons
  2. marks: the columns with the most ownership marks in the 50 rows below
     "Picks", assigned to seasons left to right

``TeamSheet.picks_phase`` records which phase fired.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from league_utils.coerce import parse_number_or_none
from league_utils.text import clean_cell

TEAM_SHEET_YEAR_SPAN = 4
MARK_SCAN_ROWS = 50
PICK_MARKS = {"x", "✓", "1", "yes", "y", "true"}
PICK_ROUNDS = ("A", "B")

_GM_RE = re.compile(r"gm:\s*(.*)", re.IGNORECASE)
_PICK_YEAR_RE = re.compile(r"\b(20\d{2})\b")
_PICK_NAME_RE = re.compile(r"\s*-\s*([A-Za-z])\s*$")


@dataclass
class TeamSheet:
    """Parsed team sheet.

    - waivers: season → waiver cap hit as written (millions)
    - picks: season → round ("A"/"B") → original owners of held picks
    - picks_phase: "labels", "marks" or "none"
    """

    years: list[int]
    gm: str = ""
    waivers: dict[str, float] = field(default_factory=dict)
    picks: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    picks_phase: str = "none"


def team_sheet_years(today: date | None = None, span: int = TEAM_SHEET_YEAR_SPAN) -> list[int]:
    start = (today or date.today()).year
    return list(range(start, start + span))


def is_marked(value: object) -> bool:
    return clean_cell(value).lower() in PICK_MARKS


def extract_gm_name(grid: Sequence[Sequence[object]]) -> str:
    """Name after "GM:" in the last cell that carries one."""
    found = ""
    for row in grid:
        for cell in row:
            s = clean_cell(cell)
            if "gm:" in s.lower():
                found = s
    m = _GM_RE.search(found)
    return m.group(1).strip() if m else ""


def _find_label(grid: Sequence[Sequence[object]], label: str) -> tuple[int, int]:
    for r, row in enumerate(grid):
        for c, cell in enumerate(row):
            if clean_cell(cell).lower() == label:
                return r, c
    return -1, -1


def extract_waivers(grid: Sequence[Sequence[object]], years: Sequence[int]) -> dict[str, float]:
    """Waiver amounts following the "Waiver" label, one per season in order."""
    r, c = _find_label(grid, "waiver")
    if r == -1:
        return {}
    out: dict[str, float] = {}
    for cell in grid[r][c + 1 :]:
        if len(out) >= len(years):
            break
        value = parse_number_or_none(cell)
        if value is not None:
            out[str(years[len(out)])] = value
    return out


def year_columns_from_labels(
    grid: Sequence[Sequence[object]], picks_row: int, years: Sequence[int]
) -> dict[int, int]:
    """Phase 1: year labels in rows picks-2..picks+3 (first row that has any)."""
    wanted = set(years)
    for r in range(picks_row - 2, picks_row + 4):
        if r < 0 or r >= len(grid):
            continue
        found: dict[int, int] = {}
        for c, cell in enumerate(grid[r]):
            m = _PICK_YEAR_RE.search(clean_cell(cell))
            if m and int(m.group(1)) in wanted:
                found[c] = int(m.group(1))
        if found:
            return found
    return {}


def year_columns_from_marks(
    grid: Sequence[Sequence[object]], picks_row: int, years: Sequence[int]
) -> dict[int, int]:
    """Phase 2: the most-marked columns below "Picks", ordered left to right."""
    counts: dict[int, int] = {}
    for row in grid[picks_row + 1 : picks_row + 1 + MARK_SCAN_ROWS]:
        for c, cell in enumerate(row):
            if is_marked(cell):
                counts[c] = counts.get(c, 0) + 1
    top = sorted(sorted(counts.items()), key=lambda kv: kv[1], reverse=True)[: len(years)]
    return {col: years[i] for i, col in enumerate(sorted(c for c, _ in top))}


def parse_pick_name(raw: object) -> tuple[str, str | None]:
    """Split "Team X - A" into ("Team X", "A"); no round suffix gives (name, None)."""
    s = clean_cell(raw)
    m = _PICK_NAME_RE.search(s)
    if not m:
        return s, None
    return _PICK_NAME_RE.sub("", s).strip(), m.group(1).upper()


def extract_picks(
    grid: Sequence[Sequence[object]], years: Sequence[int]
) -> tuple[dict[str, dict[str, list[str]]], str]:
    """Held picks per season and round, and the phase that found the year columns."""
    picks: dict[str, dict[str, list[str]]] = {str(y): {r: [] for r in PICK_ROUNDS} for y in years}
    picks_row, picks_col = _find_label(grid, "picks")
    if picks_row == -1:
        return picks, "none"

    columns = year_columns_from_labels(grid, picks_row, years)
    phase = "labels"
    if not columns:
        columns = year_columns_from_marks(grid, picks_row, years)
        phase = "marks" if columns else "none"
    if not columns:
        return picks, phase

    name_col = picks_col if picks_col >= 0 else 1
    for row in grid[picks_row + 1 :]:
        pick = clean_cell(row[name_col]) if name_col < len(row) else ""
        if not pick or pick.lower() == "picks":
            continue
        team, round_ = parse_pick_name(pick)
        if round_ not in PICK_ROUNDS:
            continue
        for col, year in columns.items():
            if col < len(row) and is_marked(row[col]):
                held = picks[str(year)][round_]
                if team not in held:
                    held.append(team)
    return picks, phase


def parse_team_sheet(
    grid: Sequence[Sequence[object]],
    years: Sequence[int] | None = None,
    today: date | None = None,
) -> TeamSheet:
    """Parse a team sheet grid for the given seasons (default: this year + 3)."""
    seasons = list(years) if years is not None else team_sheet_years(today)
    picks, phase = extract_picks(grid, seasons)
    return TeamSheet(
        years=seasons,
        gm=extract_gm_name(grid),
        waivers=extract_waivers(grid, seasons),
        picks=picks,
        picks_phase=phase,
    )
