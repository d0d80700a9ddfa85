"""Players master tab → Player entities (pure parsing, no I/O).

The players tab carries headers on row 2 and data from row 3. Its schema
shifts forward one season at a time, so salary years and the current
season are discovered from header text at parse time:

  - salary block: year columns after the "Contract Years" marker, or the
    first occurrence of every bare ``YYYY`` header when the marker is absent
  - current season: one past the latest ``"<YYYY> Rank"`` header

Parsing Functions:
  - parse_players(grid) → PlayerCatalog
  - parse_player_records(headers, records) → PlayerCatalog
  - players_to_frame(players) → pl.DataFrame
  - salary_long_frame(players) → pl.DataFrame
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

import polars as pl

from ingest.sheets.header_resolver import (
    build_header_catalog,
    find_exact_index,
    find_header_index,
    normalize_header,
    resolve_header,
)
from league_utils.coerce import ParseWarnings, parse_number, parse_number_or_none
from league_utils.text import clean_cell, normalize_name, normalize_team

CONTRACT_MARKERS = ("Contract Years (next season)", "Contract Years")
MAX_SALARY_BLOCK_GAP = 5

_YEAR_HEADER_RE = re.compile(r"^(\d{4})$")
_RANK_HEADER_RE = re.compile(r"^(\d{4})\s+Rank$", re.IGNORECASE)
_HIST_HEADER_RE = re.compile(r"^(?:(\d{4})\s+)?(Fpts/g|G|Rank)$", re.IGNORECASE)

# Exact labels; these columns are a stable sheet convention.
FP_HEADERS = {
    "fpts": "Fpts",
    "fpg": "Fpts/G",
    "fp_per_dollar": "Fpts/$",
    "fpg_per_dollar": "Fpts/G/$",
}
GAMES_HEADER = "G"
AGE_HEADERS = ["Age Next offseason"]
STATUS_HEADERS = ["Rookie / Minor / Captain"]
LISTED_SALARY_HEADERS = ["Current Salary", "Salary"]
PLAYER_CODE_HEADER = "Fantrax code"


class PlayerCatalogError(ValueError):
    """Raised when the players tab lacks a required column."""


@dataclass
class FantasyStats:
    """Fantasy production as pre-computed on the sheet."""

    fpts: float = 0.0
    fpg: float = 0.0
    fp_per_dollar: float = 0.0
    fpg_per_dollar: float = 0.0
    games: float = 0.0

    def as_metrics(self) -> dict[str, float]:
        return {
            "fpts": self.fpts,
            "fpg": self.fpg,
            "fp$": self.fp_per_dollar,
            "fpg$": self.fpg_per_dollar,
        }


@dataclass
class Player:
    """One row of the players tab.

    - player_id: external player code, or ``row-<n>`` by data position
    - team_id: current owner display string ("" when unowned)
    - salary_by_year: ``"YYYY"`` → salary; absent years mean zero
    - salary_now: salary for the inferred current season
    - contract_status: "Rookie / Minor / Captain" code ("M" = minors)
    - hist: season figures keyed like ``"2024 rank"``, ``"2024 g"``,
      ``"2024 fpts/g"``; the current season uses the bare ``"rank"``, ``"g"``,
      ``"fpts/g"``. Blank cells are None.
    - salary_history: salary per bare year column, including past seasons
    """

    player_id: str
    name: str
    team_id: str
    position: str
    salary_by_year: dict[str, float]
    salary_now: float
    stats: FantasyStats
    age: str = ""
    contract_status: str = ""
    listed_salary: float = 0.0
    hist: dict[str, float | None] = field(default_factory=dict)
    salary_history: dict[str, float | None] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return normalize_name(self.name)

    def salary_for(self, year: str | int) -> float:
        return self.salary_by_year.get(str(year), 0.0)


@dataclass
class SalaryBlock:
    """Salary-year columns discovered in a header row.

    ``phase`` records which discovery fired: ``"contract_anchor"`` when the
    block was scanned from a "Contract Years" marker, ``"bare_years"`` when
    it fell back to bare year headers.
    """

    years: list[str]
    index_by_year: dict[str, int]
    phase: str


@dataclass
class PlayerCatalog:
    players: list[Player]
    years: list[str]
    current_season: int
    salary_block: SalaryBlock
    warnings: ParseWarnings = field(default_factory=ParseWarnings)

    def by_name(self) -> dict[str, Player]:
        """Normalized name → player; a repeated name keeps its last row."""
        return {p.key: p for p in self.players}

    def teams(self) -> list[str]:
        """Distinct owners by normalized team key, first-seen display string."""
        seen: dict[str, str] = {}
        for p in self.players:
            if p.team_id.strip():
                seen.setdefault(normalize_team(p.team_id), p.team_id.strip())
        return sorted(seen.values(), key=str.lower)


def hist_key(header: str) -> str:
    """Lookup key for a season stat header: "2024 Fpts/g" → "2024 fpts/g"."""
    m = _HIST_HEADER_RE.match(clean_cell(header))
    if not m:
        return ""
    year, kind = m.groups()
    return f"{year} {kind.lower()}" if year else kind.lower()


def _scan_salary_block(headers: Sequence[str], anchor: int) -> tuple[list[str], dict[str, int]]:
    years: list[str] = []
    index_by_year: dict[str, int] = {}
    misses = 0
    for i in range(anchor + 1, len(headers)):
        m = _YEAR_HEADER_RE.match(clean_cell(headers[i]))
        if m:
            years.append(m.group(1))
            index_by_year[m.group(1)] = i
            misses = 0
            continue
        misses += 1
        if misses > MAX_SALARY_BLOCK_GAP and years:
            break
    return years, index_by_year


def _bare_year_columns(headers: Sequence[str]) -> tuple[list[str], dict[str, int]]:
    years: list[str] = []
    index_by_year: dict[str, int] = {}
    for i, h in enumerate(headers):
        m = _YEAR_HEADER_RE.match(clean_cell(h))
        if m and m.group(1) not in index_by_year:
            index_by_year[m.group(1)] = i
            years.append(m.group(1))
    return years, index_by_year


def extract_salary_block(headers: Sequence[str]) -> SalaryBlock:
    """Locate the salary-year columns.

    Phase 1 scans forward from the "Contract Years" marker, tolerating up to
    five consecutive non-year columns once a year has been found. Phase 2
    (no marker) takes the first occurrence of every bare year header.
    Years are returned ascending.
    """
    anchor = find_header_index(headers, CONTRACT_MARKERS)
    if anchor != -1:
        years, index_by_year = _scan_salary_block(headers, anchor)
        phase = "contract_anchor"
    else:
        years, index_by_year = _bare_year_columns(headers)
        phase = "bare_years"
    years = sorted(set(years), key=int)
    return SalaryBlock(years=years, index_by_year=index_by_year, phase=phase)


def deduce_current_season(headers: Sequence[str], today: date | None = None) -> int:
    """One past the latest ``"<YYYY> Rank"`` header, else the calendar year."""
    rank_years = [
        int(m.group(1)) for h in headers if (m := _RANK_HEADER_RE.match(clean_cell(h)))
    ]
    if rank_years:
        return max(rank_years) + 1
    return (today or date.today()).year


def _require(headers: Sequence[str], label: str) -> str:
    key = next((h for h in headers if normalize_header(h) == normalize_header(label)), None)
    if key is None:
        raise PlayerCatalogError(f"Players tab: required column '{label}' not found")
    return key


def _exact_key(headers: Sequence[str], label: str) -> str | None:
    i = find_exact_index(headers, label)
    return headers[i] if i != -1 else None


def parse_player_records(
    headers: Sequence[str],
    records: Sequence[dict[str, str]],
    *,
    today: date | None = None,
    warnings: ParseWarnings | None = None,
) -> PlayerCatalog:
    """Build players from header-keyed records.

    Args:
        headers: Unique header keys (see ``make_unique_headers``)
        records: Header → raw cell dicts, one per data row
        today: Date used when no ``"<YYYY> Rank"`` header exists
        warnings: Optional collector for non-blank cells that coerced to 0

    Returns:
        PlayerCatalog in source row order

    Raises:
        PlayerCatalogError: If the "Player" or "Current Owner" column is missing
    """
    warnings = warnings if warnings is not None else ParseWarnings()
    player_key = _require(headers, "Player")
    owner_key = _require(headers, "Current Owner")
    position_key = resolve_header(headers, "Position")

    block = extract_salary_block(headers)
    season = deduce_current_season(headers, today)
    season_key = str(season)

    fp_keys = {attr: _exact_key(headers, label) for attr, label in FP_HEADERS.items()}
    games_key = _exact_key(headers, GAMES_HEADER)
    age_key = resolve_header(headers, AGE_HEADERS)
    status_key = resolve_header(headers, STATUS_HEADERS)
    listed_key = resolve_header(headers, LISTED_SALARY_HEADERS)
    code_idx = find_header_index(headers, PLAYER_CODE_HEADER, last=True)
    code_key = headers[code_idx] if code_idx != -1 else None
    hist_keys = {h: hist_key(h) for h in headers if _HIST_HEADER_RE.match(clean_cell(h))}
    _, bare_years = _bare_year_columns(headers)

    def num(rec: dict[str, str], key: str | None, r: int) -> float:
        if key is None:
            return 0.0
        return parse_number(rec.get(key), warnings, key, r)

    players: list[Player] = []
    for r, rec in enumerate(records):
        name = clean_cell(rec.get(player_key))
        if not name:
            continue

        salary_by_year = {
            y: num(rec, headers[block.index_by_year[y]], r) for y in block.years
        }
        stats = FantasyStats(
            fpts=num(rec, fp_keys["fpts"], r),
            fp_per_dollar=num(rec, fp_keys["fp_per_dollar"], r),
            fpg_per_dollar=num(rec, fp_keys["fpg_per_dollar"], r),
            games=num(rec, games_key, r),
        )
        if fp_keys["fpg"] is not None:
            stats.fpg = num(rec, fp_keys["fpg"], r)
        elif stats.games > 0:
            stats.fpg = stats.fpts / stats.games

        code = clean_cell(rec.get(code_key)) if code_key else ""
        players.append(
            Player(
                player_id=code or f"row-{r + 1}",
                name=name,
                team_id=clean_cell(rec.get(owner_key)),
                position=clean_cell(rec.get(position_key)) if position_key else "",
                salary_by_year=salary_by_year,
                salary_now=salary_by_year.get(season_key, 0.0),
                stats=stats,
                age=clean_cell(rec.get(age_key)) if age_key else "",
                contract_status=clean_cell(rec.get(status_key)).upper() if status_key else "",
                listed_salary=num(rec, listed_key, r),
                hist={key: parse_number_or_none(rec.get(h)) for h, key in hist_keys.items()},
                salary_history={
                    y: parse_number_or_none(rec.get(headers[i])) for y, i in bare_years.items()
                },
            )
        )

    return PlayerCatalog(
        players=players,
        years=block.years,
        current_season=season,
        salary_block=block,
        warnings=warnings,
    )


def parse_players(
    grid: Sequence[Sequence[object]],
    *,
    header_row: int = 1,
    data_start: int = 2,
    today: date | None = None,
    warnings: ParseWarnings | None = None,
) -> PlayerCatalog:
    """Parse the players tab grid (headers on row 2, data from row 3).

    Raises:
        PlayerCatalogError: If the grid has no "Player" or "Current Owner" column
    """
    catalog = build_header_catalog(grid, header_row=header_row, data_start=data_start)
    return parse_player_records(catalog.headers, catalog.records, today=today, warnings=warnings)


def players_to_frame(players: Sequence[Player]) -> pl.DataFrame:
    """Flat player table, one row per player."""
    rows = [
        [
            p.player_id,
            p.name,
            p.team_id,
            p.position,
            p.age,
            p.contract_status,
            p.salary_now,
            p.stats.fpts,
            p.stats.fpg,
            p.stats.fp_per_dollar,
            p.stats.fpg_per_dollar,
            p.stats.games,
        ]
        for p in players
    ]
    schema = {
        "player_id": pl.Utf8,
        "player": pl.Utf8,
        "team": pl.Utf8,
        "position": pl.Utf8,
        "age": pl.Utf8,
        "contract_status": pl.Utf8,
        "salary_now": pl.Float64,
        "fpts": pl.Float64,
        "fpg": pl.Float64,
        "fp_per_dollar": pl.Float64,
        "fpg_per_dollar": pl.Float64,
        "games": pl.Float64,
    }
    return pl.DataFrame(rows, schema=schema, orient="row")


def salary_long_frame(players: Sequence[Player]) -> pl.DataFrame:
    """Long-form salary schedule (player_id, player, team, year, salary).

    Zero salaries are dropped.
    """
    years = sorted({y for p in players for y in p.salary_by_year}, key=int)
    wide = pl.DataFrame(
        [[p.player_id, p.name, p.team_id, *[p.salary_for(y) for y in years]] for p in players],
        schema={
            "player_id": pl.Utf8,
            "player": pl.Utf8,
            "team": pl.Utf8,
            **{y: pl.Float64 for y in years},
        },
        orient="row",
    )
    if not years:
        return pl.DataFrame(
            schema={
                "player_id": pl.Utf8,
                "player": pl.Utf8,
                "team": pl.Utf8,
                "year": pl.Int64,
                "salary": pl.Float64,
            }
        )
    return (
        wide.unpivot(
            index=["player_id", "player", "team"],
            on=years,
            variable_name="year",
            value_name="salary",
        )
        .with_columns(pl.col("year").cast(pl.Int64))
        .filter(pl.col("salary") > 0)
        .sort(["player_id", "year"])
    )
