"""Shared fixtures for flow tests.

This module provides common test fixtures for:
- Parsed league tables as DataFrames
- Payroll mappings around the salary cap
"""

import polars as pl
import pytest


@pytest.fixture
def league_tables():
    """Minimal valid tables keyed like ROW_COUNT_MINIMUMS."""
    return {
        "players": pl.DataFrame(
            {
                "player_id": ["*K01", "*M02", "row-3"],
                "player": ["Kevin O'Neal", "Marcus Hill", "Jonas Berg"],
                "team": ["Team Alpha", "Team Beta", "Team Alpha"],
                "salary_now": [12_000_000.0, 8_000_000.0, 500_000.0],
            }
        ),
        "transactions": pl.DataFrame(
            {
                "tx_id": [0, 0, 1],
                "date": ["15/01/2024", "15/01/2024", "03/02/2024"],
                "type": ["Trade", "Trade", "Waiver"],
                "team_a": ["Team Alpha", "Team Alpha", "Team Beta"],
            }
        ),
        "payroll": pl.DataFrame(
            {
                "team": ["Team Alpha", "Team Beta"],
                "year": [2025, 2025],
                "payroll": [12_500_000.0, 8_000_000.0],
            }
        ),
    }


@pytest.fixture
def payroll_over_cap():
    """Payroll with one team season above a 200M cap."""
    return {
        "Team Alpha": {"2025": 210_000_000.0, "2026": 150_000_000.0},
        "Team Beta": {"2025": 120_000_000.0, "2026": 199_999_999.0},
    }
