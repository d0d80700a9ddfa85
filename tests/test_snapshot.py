from __future__ import annotations

from league_analytics.snapshot import build_league_snapshot
from tests.conftest import TODAY, make_players_grid


class TestBuildLeagueSnapshot:
    """Test assembling all sources into one snapshot."""

    def test_all_sources(self, players_grid, ledger_grid, history_grid, options_grid, team_sheet_grid):
        snapshot = build_league_snapshot(
            {
                "players": players_grid,
                "transactions": ledger_grid,
                "history": history_grid,
                "player_options": options_grid,
            },
            {"Team Alpha": team_sheet_grid},
            today=TODAY,
        )

        assert snapshot.missing == []
        assert snapshot.errors == {}
        assert len(snapshot.catalog.players) == 4
        assert len(snapshot.transactions) == 3
        assert len(snapshot.history.rows) == 3
        assert "team alpha" in snapshot.team_history
        assert snapshot.player_options.option_count() == 2
        assert snapshot.team_sheets["Team Alpha"].gm == "Alice Smith"

    def test_waivers_feed_cap_payroll(self, players_grid, team_sheet_grid):
        snapshot = build_league_snapshot(
            {"players": players_grid}, {"Team Alpha": team_sheet_grid}, today=TODAY
        )
        assert snapshot.waivers_by_team == {"Team Alpha": {"2025": 1.5, "2026": 0.0, "2027": 2.0}}
        assert snapshot.payroll["Team Alpha"]["2025"] == 12_500_000.0
        assert snapshot.cap_payroll["Team Alpha"]["2025"] == 14_000_000.0
        assert snapshot.cap_payroll["Team Beta"]["2025"] == 8_000_000.0

    def test_team_sheet_teams_seeded(self, players_grid, team_sheet_grid):
        snapshot = build_league_snapshot(
            {"players": players_grid}, {"Team Delta": team_sheet_grid}, today=TODAY
        )
        assert snapshot.payroll["Team Delta"] == {y: 0.0 for y in snapshot.catalog.years}

    def test_missing_sources_reported(self, ledger_grid):
        snapshot = build_league_snapshot({"transactions": ledger_grid})
        assert snapshot.missing == ["players", "history", "player_options"]
        assert snapshot.catalog is None
        assert snapshot.payroll == {}
        assert len(snapshot.transactions) == 3

    def test_players_error_isolated(self, ledger_grid):
        """A players tab without required columns fails only that part."""
        bad_players = make_players_grid(["Name", "Team"], [["A", "X"]])
        snapshot = build_league_snapshot({"players": bad_players, "transactions": ledger_grid})
        assert "'Player'" in snapshot.errors["players"]
        assert snapshot.catalog is None
        assert len(snapshot.transactions) == 3

    def test_history_error_recorded(self):
        snapshot = build_league_snapshot({"history": [["only"]]})
        assert "history" in snapshot.errors
        assert snapshot.team_history == {}

    def test_team_sheet_only_team_in_cap_payroll(self, players_grid, team_sheet_grid):
        """A team known only from its sheet still carries its waiver hits."""
        snapshot = build_league_snapshot(
            {"players": players_grid}, {"Team Gamma": team_sheet_grid}, today=TODAY
        )
        assert snapshot.cap_payroll["Team Gamma"]["2025"] == 1_500_000.0
        assert snapshot.cap_payroll["Team Gamma"]["2027"] == 2_000_000.0
        assert snapshot.payroll["Team Gamma"]["2025"] == 0.0
