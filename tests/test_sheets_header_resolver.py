from __future__ import annotations

from ingest.sheets.header_resolver import (
    build_header_catalog,
    find_exact_index,
    find_header_index,
    make_unique_headers,
    resolve_header,
)


class TestResolveHeader:
    """Test tolerant header lookup."""

    def test_exact_match(self):
        assert resolve_header(["Player", "Position"], "Position") == "Position"

    def test_case_and_whitespace_insensitive(self):
        headers = ["Player", "  Current   Owner ", "Age"]
        assert resolve_header(headers, "current owner") == "  Current   Owner "

    def test_candidates_in_order(self):
        """The first candidate that matches wins, not the first header."""
        headers = ["Salary", "Current Salary"]
        assert resolve_header(headers, ["Current Salary", "Salary"]) == "Current Salary"

    def test_absence_is_none_not_error(self):
        assert resolve_header(["Player"], "Position") is None
        assert resolve_header([], ["A", "B"]) is None

    def test_find_header_index_first_and_last(self):
        headers = ["Fantrax code", "Player", "fantrax  CODE"]
        assert find_header_index(headers, "Fantrax code") == 0
        assert find_header_index(headers, "Fantrax code", last=True) == 2
        assert find_header_index(headers, "Missing") == -1

    def test_find_exact_index_is_case_sensitive(self):
        headers = ["Fpts/g", "Fpts/G"]
        assert find_exact_index(headers, "Fpts/G") == 1
        assert find_exact_index(headers, "FPTS/G") == -1


class TestMakeUniqueHeaders:
    """Test duplicate header disambiguation."""

    def test_occurrence_suffix(self):
        headers, _ = make_unique_headers(["Player", "2024", "Player", "2024", "Player"])
        assert headers == ["Player", "2024", "Player_2", "2024_2", "Player_3"]

    def test_numeric_second_occurrence_display(self):
        """A repeated year reads "salaries till <year>" on its second occurrence."""
        headers, display = make_unique_headers(["2024", "Player", "2024", "Player"])
        assert display["2024"] == "2024"
        assert display["2024_2"] == "salaries till 2024"
        assert display["Player_2"] == "Player"

    def test_headers_are_trimmed(self):
        headers, _ = make_unique_headers([" Player ", None, "Player"])
        assert headers == ["Player", "", "Player_2"]


class TestBuildHeaderCatalog:
    """Test header-keyed record construction."""

    def test_records_keyed_by_header(self):
        grid = [
            ["title"],
            ["Player", "Team", "Team"],
            ["A", "X", "Y"],
            ["", "Z", "Z"],
            ["B", "W"],
        ]
        catalog = build_header_catalog(grid)

        assert catalog.headers == ["Player", "Team", "Team_2"]
        assert catalog.records == [
            {"Player": "A", "Team": "X", "Team_2": "Y"},
            {"Player": "B", "Team": "W", "Team_2": ""},
        ]
        assert catalog.label("Team_2") == "Team"

    def test_short_grid_is_empty(self):
        catalog = build_header_catalog([["title"], ["Player"]])
        assert catalog.headers == []
        assert catalog.records == []
