from __future__ import annotations

from datetime import date

from ingest.sheets.team_sheet_parser import (
    extract_gm_name,
    extract_picks,
    extract_waivers,
    parse_pick_name,
    parse_team_sheet,
    team_sheet_years,
    year_columns_from_marks,
)

YEARS = [2025, 2026, 2027, 2028]


class TestTeamSheetBasics:
    """Test GM and waiver extraction."""

    def test_default_years(self):
        assert team_sheet_years(date(2025, 9, 1)) == [2025, 2026, 2027, 2028]

    def test_gm_name(self, team_sheet_grid):
        assert extract_gm_name(team_sheet_grid) == "Alice Smith"

    def test_gm_name_uses_last_cell(self):
        grid = [["GM: Old"], ["", "gm:  New Owner "]]
        assert extract_gm_name(grid) == "New Owner"

    def test_gm_missing(self):
        assert extract_gm_name([["Team"]]) == ""

    def test_waivers_skip_blank_cells(self, team_sheet_grid):
        assert extract_waivers(team_sheet_grid, YEARS) == {"2025": 1.5, "2026": 0.0, "2027": 2.0}

    def test_no_waiver_label(self):
        assert extract_waivers([["Picks"]], YEARS) == {}


class TestPicks:
    """Test two-phase picks matrix resolution."""

    def test_label_phase(self, team_sheet_grid):
        picks, phase = extract_picks(team_sheet_grid, YEARS)
        assert phase == "labels"
        assert picks["2025"] == {"A": ["Team Alpha"], "B": []}
        assert picks["2026"] == {"A": ["Team Alpha"], "B": ["Team Alpha"]}
        assert picks["2027"] == {"A": ["Team Beta"], "B": []}
        assert picks["2028"] == {"A": [], "B": ["Team Alpha"]}

    def test_mark_phase(self):
        grid = [
            ["Picks", "", "", ""],
            ["Team A - A", "x", "", ""],
            ["Team A - B", "x", "x", ""],
            ["Team B - A", "", "x", "x"],
            ["Team C - B", "x", "", "x"],
        ]
        picks, phase = extract_picks(grid, [2025, 2026])
        assert phase == "marks"
        assert picks["2025"] == {"A": ["Team A"], "B": ["Team A", "Team C"]}
        assert picks["2026"] == {"A": ["Team B"], "B": ["Team A"]}

    def test_mark_columns_ordered_left_to_right(self):
        grid = [["Picks", "", ""], ["T - A", "x", "x"], ["T - B", "", "x"]]
        assert year_columns_from_marks(grid, 0, [2025, 2026]) == {1: 2025, 2: 2026}

    def test_no_picks_label(self):
        picks, phase = extract_picks([["Team"]], [2025])
        assert phase == "none"
        assert picks == {"2025": {"A": [], "B": []}}

    def test_parse_pick_name(self):
        assert parse_pick_name("Team X - a") == ("Team X", "A")
        assert parse_pick_name("Team X") == ("Team X", None)


class TestParseTeamSheet:
    """Test the combined team sheet parse."""

    def test_parse(self, team_sheet_grid):
        sheet = parse_team_sheet(team_sheet_grid, YEARS)
        assert sheet.gm == "Alice Smith"
        assert sheet.waivers["2027"] == 2.0
        assert sheet.picks_phase == "labels"
        assert sheet.years == YEARS

    def test_default_years_from_today(self, team_sheet_grid):
        sheet = parse_team_sheet(team_sheet_grid, today=date(2026, 1, 1))
        assert sheet.years == [2026, 2027, 2028, 2029]
