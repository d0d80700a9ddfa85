"""Configuration for the league spreadsheet load flow.

This module centralizes the spreadsheet location, league rules and load
governance thresholds, so they can be tuned without code changes. Values
can be overridden through environment variables (the CLI loads ``.env``).

Threshold Rationale:
- Row counts: a healthy league sheet always carries a full player pool,
  a multi-season ledger and one history row per team
- Required columns: columns the parsers cannot degrade without
"""

import os
from typing import TypedDict

from league_analytics.payroll import SALARY_CAP as DEFAULT_SALARY_CAP
from league_analytics.payroll import WAIVER_AMOUNT_UNIT as DEFAULT_WAIVER_AMOUNT_UNIT


class SheetTabsConfig(TypedDict):
    """Tab gids of the league spreadsheet."""

    players: str
    history: str
    transactions: str
    player_options: str
    overview: str


class RowCountMinimumsConfig(TypedDict):
    """Minimum row counts for parsed tables."""

    players: int
    transactions: int
    history: int


class FetchRetryConfig(TypedDict):
    """Retry policy for sheet fetch tasks."""

    retries: int
    retry_delay_seconds: int


DEFAULT_SHEET_ID = "146QdGaaB1Nt0HJXG_s8O0s5N0lQDfnWGmGsgNHEnCkQ"

DEFAULT_SHEET_TABS: SheetTabsConfig = {
    "players": "284322669",
    "history": "1853178216",
    "transactions": "403962102",
    "player_options": "556243297",
    "overview": "285981266",
}

# League rules
SALARY_CAP: int = int(os.getenv("LEAGUE_SALARY_CAP", DEFAULT_SALARY_CAP))
WAIVER_AMOUNT_UNIT: int = int(os.getenv("LEAGUE_WAIVER_AMOUNT_UNIT", DEFAULT_WAIVER_AMOUNT_UNIT))
DEFAULT_TRADE_YEAR_COUNT: int = 5

# Row Count Minimums (sanity checks for sheet parsing)
ROW_COUNT_MINIMUMS: RowCountMinimumsConfig = {
    "players": 100,  # full player pool, not just rostered players
    "transactions": 10,  # multi-season ledger
    "history": 4,  # at least one division of teams
}

REQUIRED_COLUMNS: dict[str, list[str]] = {
    "players": ["player_id", "player", "team", "salary_now"],
    "transactions": ["tx_id", "date", "type", "team_a"],
    "payroll": ["team", "year", "payroll"],
}

FETCH_RETRY: FetchRetryConfig = {
    "retries": 3,
    "retry_delay_seconds": 30,
}


def get_sheet_id() -> str:
    """Spreadsheet id, ``LEAGUE_SHEET_ID`` overriding the default."""
    return os.getenv("LEAGUE_SHEET_ID", DEFAULT_SHEET_ID)


def get_tab_gid(tab: str) -> str:
    """Gid for a tab, ``LEAGUE_<TAB>_GID`` overriding the default.

    Args:
        tab: Tab name (e.g., 'players', 'history')

    Returns:
        Tab gid as a string

    Raises:
        KeyError: If tab not configured

    """
    return os.getenv(f"LEAGUE_{tab.upper()}_GID", DEFAULT_SHEET_TABS[tab])
