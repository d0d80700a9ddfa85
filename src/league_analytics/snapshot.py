"""Assemble every parsed league source into one snapshot (pure).

Each source grid feeds exactly one parser. A missing grid leaves its part
empty; a players tab without its required columns is recorded as an error
for that part while the rest of the snapshot still builds.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date

from ingest.sheets.history_parser import HistoryTable, TeamHistorySummary, parse_history_grid
from ingest.sheets.history_parser import team_history_summary as summarize_history
from ingest.sheets.player_options_parser import PlayerOptions, parse_player_options
from ingest.sheets.players_parser import PlayerCatalog, PlayerCatalogError, parse_players
from ingest.sheets.team_sheet_parser import TeamSheet, parse_team_sheet
from ingest.sheets.transactions_parser import Transaction, parse_transactions
from league_analytics.payroll import (
    WAIVER_AMOUNT_UNIT,
    Payroll,
    compute_team_payroll_by_year,
    team_payroll_by_year,
)

Grid = Sequence[Sequence[object]]
SOURCES = ("players", "history", "transactions", "player_options")


@dataclass
class LeagueSnapshot:
    """Everything derived from one load of the league spreadsheet.

    - payroll: roster salaries per team and year (team-sheet teams pre-seeded)
    - cap_payroll: payroll plus waiver cap hits
    - missing: sources with no grid
    - errors: source → message for sources that failed to parse
    """

    catalog: PlayerCatalog | None = None
    payroll: Payroll = field(default_factory=dict)
    cap_payroll: Payroll = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)
    history: HistoryTable | None = None
    team_history: dict[str, TeamHistorySummary] = field(default_factory=dict)
    player_options: PlayerOptions | None = None
    team_sheets: dict[str, TeamSheet] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def waivers_by_team(self) -> dict[str, dict[str, float]]:
        return {team: sheet.waivers for team, sheet in self.team_sheets.items() if sheet.waivers}


def build_league_snapshot(
    grids: Mapping[str, Grid],
    team_grids: Mapping[str, Grid] | None = None,
    *,
    today: date | None = None,
    transactions_header_rows: int = 0,
    waiver_unit: float = WAIVER_AMOUNT_UNIT,
) -> LeagueSnapshot:
    """Parse every available grid.

    Args:
        grids: Source name ("players", "history", "transactions",
            "player_options") → grid
        team_grids: Team → team-sheet grid
        today: Reference date for season defaults
        transactions_header_rows: Label rows atop the ledger grid
        waiver_unit: Salary units per team-sheet waiver unit

    Returns:
        LeagueSnapshot
    """
    snap = LeagueSnapshot(missing=[s for s in SOURCES if s not in grids])

    for team, grid in (team_grids or {}).items():
        snap.team_sheets[team] = parse_team_sheet(grid, today=today)

    if "players" in grids:
        try:
            snap.catalog = parse_players(grids["players"], today=today)
        except PlayerCatalogError as e:
            snap.errors["players"] = str(e)

    if snap.catalog is not None:
        snap.payroll = compute_team_payroll_by_year(
            snap.catalog.players, snap.catalog.years, teams=snap.team_sheets.keys()
        )
        snap.cap_payroll = team_payroll_by_year(
            snap.catalog.players,
            snap.catalog.years,
            snap.waivers_by_team,
            waiver_unit,
            teams=snap.team_sheets.keys(),
        )

    if "transactions" in grids:
        snap.transactions = parse_transactions(
            grids["transactions"], header_rows=transactions_header_rows
        )

    if "history" in grids:
        snap.history = parse_history_grid(grids["history"])
        if not snap.history.ok:
            snap.errors["history"] = snap.history.error
        snap.team_history = summarize_history(grids["history"])

    if "player_options" in grids:
        snap.player_options = parse_player_options(grids["player_options"])

    return snap
