"""Shared sheet grids for parser and analytics tests.

Grids mirror the league spreadsheet tabs as plain string matrices:
- Players tab (title row, header row, data)
- Transactions ledger (positional columns, no header)
- History tab (category row, header row, team rows, end-of-data row)
- Player options matrix (header row below a title)
- Team sheet (GM, waivers, labelled picks matrix)
"""

from datetime import date

import pytest

from ingest.sheets.players_parser import parse_players

PLAYERS_HEADER = [
    "Player",
    "Position",
    "Current Owner",
    "Age Next offseason",
    "Rookie / Minor / Captain",
    "Contract Years",
    "2025",
    "2026",
    "2027",
    "2028",
    "2024 Rank",
    "2024 G",
    "2024 Fpts/g",
    "Rank",
    "G",
    "Fpts/G",
    "Fpts",
    "Fpts/$",
    "Fpts/G/$",
    "Fantrax code",
]

PLAYERS_ROWS = [
    # fmt: off
    ["Kevin O'Neal", "SF", "Team Alpha", "25", "c", "3", "12,000,000", "12,000,000", "0", "",
     "10", "70", "40.5", "12", "30", "41.2", "1236", "0.000103", "0.0000034", "*K01"],
    ["Marcus Hill", "PG", "Team Beta", "23", "R", "2", "$8,000,000", "8,500,000", "", "",
     "50", "60", "30.1", "48", "28", "31.0", "868", "0.0001085", "0.0000039", "*M02"],
    ["Jonas Berg", "C", "Team Alpha", "21", "M", "", "500,000", "500,000", "500,000", "",
     "", "0", "", "200", "5", "12.0", "60", "0.00012", "0.000024", ""],
    ["", "", "Team Beta", "", "", "", "1,000,000", "", "", "",
     "", "", "", "", "", "", "", "", "", ""],
    ["Free Agent Guy", "SG", "", "30", "", "", "", "", "", "",
     "300", "40", "10.0", "320", "10", "9.5", "n/a", "", "", "*F04"],
    # fmt: on
]

TODAY = date(2025, 3, 1)


def make_players_grid(header=None, rows=None):
    """Players tab grid: title row, header row, data rows."""
    header = PLAYERS_HEADER if header is None else header
    rows = PLAYERS_ROWS if rows is None else rows
    return [["League Players"] + [""] * (len(header) - 1), list(header), *[list(r) for r in rows]]


@pytest.fixture
def players_grid():
    return make_players_grid()


@pytest.fixture
def catalog(players_grid):
    return parse_players(players_grid, today=TODAY)


@pytest.fixture
def players(catalog):
    return catalog.players


@pytest.fixture
def ledger_grid():
    """Ledger rows: stray pre-ledger note, a 2-line trade, a waiver and a buy-out."""
    return [
        ["", "", "", "Stray note", "", "", "", "", ""],
        ["15/01/2024", "Trade", "Team Alpha", "Kevin O'Neal", "12", "", "Team Beta", "Marcus Hill", "8"],
        ["", "", "", "Jonas Berg", "0.5", "", "", "2025 Team Beta - A", ""],
        ["03/02/2024", "Waiver", "Team Beta", "Free Agent Guy", "1", "", "", "", ""],
        ["20/12/2023", "Buy–out", "Team Alpha", "Old Vet", "2", "", "", "", ""],
    ]


HISTORY_CATEGORIES = [
    "", "", "", "", "2024", "", "", "2025", "", "", "Total", "", "", "Records", "", "",
]
HISTORY_HEADERS = [
    "Division",
    "Conference",
    "Team",
    "Champs/Finals",
    "Record W%",
    "Fpts/G Adjusted",
    "Playoffs",
    "Record W%",
    "Fpts/G Adjusted",
    "Playoffs",
    "Record W%",
    "Fpts/G Adjusted",
    "Playoffs Appearances",
    "Best Record W%",
    "Best Fpts/G Adjusted",
    "Best Playoffs",
]
HISTORY_ROWS = [
    # fmt: off
    ["North", "East", "Team Alpha", "Champ 2023", "119", "45,2", "Final", "1000", "50,1", "Semi",
     "650", "47,0", "3", "1000", "50,1", "Champion"],
    ["South", "East", "Team Beta", "", "450", "40,0", "", "500", "41,0", "",
     "480", "40,5", "1", "500", "41,0", "Semi"],
    ["North", "West", "Gamma Squad", "Final 2024", "300", "39,0", "", "200", "38,0", "",
     "250", "38,5", "0", "300", "39,0", ""],
    ["", "", "", "", "999", "1", "x", "", "", "", "", "", "", "", "", ""],
    ["North", "West", "Late Team", "", "100", "30,0", "", "100", "30,0", "",
     "100", "30,0", "0", "100", "30,0", ""],
    # fmt: on
]


@pytest.fixture
def history_grid():
    return [list(HISTORY_CATEGORIES), list(HISTORY_HEADERS), *[list(r) for r in HISTORY_ROWS]]


@pytest.fixture
def options_grid():
    return [
        ["Player Options", "", "", "", "", ""],
        ["", "", "", "", "", ""],
        ["Player", "Team", "2025", "2026.0", "2027", "2028"],
        ["Kevin O'Neal", "Team Alpha", "", "T", "", "p"],
        ["Marcus Hill", "Team Beta", "x", "", "", ""],
        ["player", "", "T", "", "", ""],
    ]


@pytest.fixture
def team_sheet_grid():
    return [
        ["Team Alpha", "", "", "", "", ""],
        ["GM: Alice Smith", "", "", "", "", ""],
        ["Waiver", "1.5", "", "0", "2", "n/a"],
        ["", "", "", "", "", ""],
        ["Picks", "2025", "2026", "2027", "2028", ""],
        ["Team Alpha - A", "x", "x", "", "", ""],
        ["Team Alpha - B", "", "x", "", "✓", ""],
        ["Team Beta - A", "", "", "yes", "", ""],
        ["Notes", "x", "", "", "", ""],
    ]
