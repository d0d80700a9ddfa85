from __future__ import annotations

import pytest

from league_utils import (
    ParseWarnings,
    as_year,
    canonical_tx_type,
    date_sortable,
    format_tenths_percent,
    is_trade,
    normalize_fuzzy,
    normalize_label,
    normalize_name,
    normalize_team,
    parse_int_or_none,
    parse_number,
    parse_number_or_none,
)


class TestParseNumber:
    """Test lenient money/stat coercion."""

    def test_millions_suffix_and_plain_agree(self):
        """"$12m" and "12" are the same amount in the sheet's unit."""
        assert parse_number("$12m") == parse_number("12") == 12.0

    def test_thousands_separators(self):
        """Comma-separated full amounts parse to the same value as the bare number."""
        assert parse_number("12,000,000") == parse_number("12000000") == 12_000_000.0

    def test_euro_and_decimal(self):
        assert parse_number("€3.5") == 3.5
        assert parse_number(" 7.25M ") == 7.25

    def test_numeric_input_passthrough(self):
        assert parse_number(42) == 42.0
        assert parse_number(1.5) == 1.5

    @pytest.mark.parametrize("raw", [None, "", "   ", "n/a", "abc", "nan", "inf"])
    def test_unparsable_becomes_zero(self, raw):
        """Blank and unparsable cells never propagate NaN."""
        assert parse_number(raw) == 0.0

    def test_or_none_distinguishes_blank(self):
        assert parse_number_or_none("") is None
        assert parse_number_or_none("x") is None
        assert parse_number_or_none("0") == 0.0

    def test_warning_recorded_for_non_blank_zero(self):
        """Only non-blank unparsable cells reach the warnings side channel."""
        warnings = ParseWarnings()
        parse_number("n/a", warnings, "Fpts", 4)
        parse_number("", warnings, "Fpts", 5)
        parse_number("12", warnings, "Fpts", 6)

        assert len(warnings) == 1
        assert warnings.items[0].raw == "n/a"
        assert warnings.items[0].row == 4
        assert warnings.by_field() == {"Fpts": 1}

    def test_parse_int_or_none(self):
        assert parse_int_or_none("1,200") == 1200
        assert parse_int_or_none("2024.0") == 2024
        assert parse_int_or_none("") is None
        assert parse_int_or_none("x") is None


class TestPercentFormatting:
    """Test tenths-of-a-percent rendering."""

    def test_tenths_to_percent(self):
        assert format_tenths_percent(119) == "11,9%"
        assert format_tenths_percent("1000") == "100,0%"

    def test_comma_input_accepted(self):
        assert format_tenths_percent("119,0") == "11,9%"

    def test_non_numeric_unchanged(self):
        assert format_tenths_percent("-") == "-"
        assert format_tenths_percent("") == ""


class TestDatesAndYears:
    """Test ledger date keys and year coercion."""

    def test_date_sortable(self):
        assert date_sortable("15/01/2024") == 20240115
        assert date_sortable("3/2/2024") == 20240203

    def test_malformed_dates_sort_oldest(self):
        assert date_sortable("2024-01-15") == 0
        assert date_sortable("") == 0
        assert date_sortable(None) == 0

    def test_as_year(self):
        assert as_year("2024") == 2024
        assert as_year("2024.0") == 2024
        assert as_year(2026.0) == 2026
        assert as_year("Team") is None
        assert as_year("12") is None


class TestNormalization:
    """Test shared identity rules."""

    def test_name_variants_share_key(self):
        """Case, whitespace and apostrophe variants resolve to one lookup key."""
        keys = {
            normalize_fuzzy(n)
            for n in ["Kevin O'Neal", " kevin o'neal ", "KEVIN O'NEAL", "Kevin O’Neal"]
        }
        assert keys == {"kevin oneal"}

    def test_normalize_name_collapses_whitespace(self):
        assert normalize_name("  Kevin    O'Neal ") == "kevin o'neal"

    def test_normalize_team_dash_and_quotes(self):
        assert normalize_team("Team–Alpha") == normalize_team("team - alpha") == "team - alpha"
        assert normalize_team('"Beta"  Squad') == "beta squad"

    def test_normalize_label(self):
        assert normalize_label("Record W％") == "record w%"
        assert normalize_label("Champs ∕ Finals\r") == "champs / finals"

    @pytest.mark.parametrize("raw", ["Buy-out", "Buy–out", "Buy out", "BUY_OUT", "buyout"])
    def test_canonical_tx_type(self, raw):
        assert canonical_tx_type(raw) == "buyout"

    def test_is_trade(self):
        assert is_trade(" Trade ")
        assert not is_trade("Waiver")
