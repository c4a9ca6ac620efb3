import pytest
from terms import fallback_term_label, format_term_label, parse_term_label, term_label_to_code


class TestTermLabelToCode:
    @pytest.mark.parametrize("season,year,expected", [
        ("Fall", 2025, "202601"),
        ("Summer", 2025, "202600"),
        ("Winter", 2026, "202602"),
        ("Spring", 2026, "202603"),
    ])
    def test_known_seasons(self, season, year, expected):
        assert term_label_to_code(season, year) == expected

    def test_year_as_string(self):
        assert term_label_to_code("Fall", "2025") == "202601"

    def test_unknown_season(self):
        assert term_label_to_code("Autumn", 2025) is None

    def test_season_is_case_sensitive(self):
        assert term_label_to_code("fall", 2025) is None

    def test_non_numeric_year(self):
        assert term_label_to_code("Fall", "next") is None


class TestParseTermLabel:
    def test_season_first(self):
        assert parse_term_label("Fall 2025") == ("Fall", 2025)

    def test_year_first(self):
        assert parse_term_label("2026 Spring") == ("Spring", 2026)

    def test_embedded_in_heading(self):
        assert parse_term_label("Term: Winter 2026 (16 credits)") == ("Winter", 2026)

    def test_no_label(self):
        assert parse_term_label("16 credits") is None

    def test_empty(self):
        assert parse_term_label("") is None
        assert parse_term_label(None) is None


class TestLabels:
    def test_format(self):
        assert format_term_label("Fall", 2025) == "Fall 2025"

    def test_fallback_is_one_based(self):
        assert fallback_term_label(0) == "Term 1"
        assert fallback_term_label(3) == "Term 4"
