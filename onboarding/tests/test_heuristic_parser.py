"""Tests for onboarding.core.heuristic_parser module.

Tests the local fallback parser:
- parse_line(): the three accepted shapes
- parse_lines(): line numbers and unparseable lines
- CSV detection and column parsing
"""

from onboarding.core.heuristic_parser import (
    heuristic_extract,
    looks_like_csv,
    parse_csv,
    parse_line,
    parse_lines,
)


class TestParseLine:
    """Tests for parse_line."""

    def test_first_last(self):
        assert parse_line("Jane Doe") == ("Jane", "Doe")

    def test_last_comma_first(self):
        assert parse_line("Doe, Jane") == ("Jane", "Doe")

    def test_last_comma_first_with_middle_initial(self):
        assert parse_line("Allen, Roan C.") == ("Roan", "Allen")

    def test_single_name(self):
        assert parse_line("  Jane ") == ("Jane", "")

    def test_three_words_fail(self):
        assert parse_line("Mary Ann Smith") is None

    def test_digits_fail(self):
        assert parse_line("Room 12") is None


class TestParseLines:
    """Tests for parse_lines."""

    def test_names_and_errors(self):
        result = parse_lines("jane doe\n\nSmith, John\nPlease bring pencils\n")
        assert [(n.first_name, n.last_name) for n in result.names] == [("Jane", "doe"), ("John", "Smith")]
        assert result.errors == ['Line 3: Could not parse "Please bring pencils"']

    def test_line_numbers_skip_blank_lines(self):
        result = parse_lines("Jane Doe\n\n\nJohn Smith")
        assert [n.line_number for n in result.names] == [1, 2]

    def test_empty_text(self):
        result = parse_lines("")
        assert result.names == [] and result.errors == []


class TestCsv:
    """Tests for CSV detection and parsing."""

    def test_detects_header(self):
        assert looks_like_csv("First Name,Last Name\nJane,Doe")
        assert looks_like_csv("\n\nname,surname\nJane,Doe")

    def test_plain_list_is_not_csv(self):
        assert not looks_like_csv("Doe, Jane\nSmith, John")

    def test_columns(self):
        result = parse_csv('First Name,Last Name\n"jane",Doe\nJohn,Smith\n')
        assert [(n.first_name, n.last_name) for n in result.names] == [("Jane", "Doe"), ("John", "Smith")]
        assert [n.line_number for n in result.names] == [2, 3]

    def test_single_column_row_goes_through_line_parser(self):
        result = parse_csv("Name,Notes\nJane Doe,\n")
        assert [(n.first_name, n.last_name) for n in result.names] == [("Jane", "Doe")]

    def test_single_column_row_that_fails(self):
        result = parse_csv("Name,Notes\n12 34,\n")
        assert result.errors == ['Line 2: Could not parse "12 34"']


class TestHeuristicExtract:
    """Tests for heuristic_extract dispatch."""

    def test_uses_csv_for_header(self):
        result = heuristic_extract("first,last\nJane,Doe")
        assert result.names[0].last_name == "Doe"

    def test_uses_lines_otherwise(self):
        result = heuristic_extract("Jane Doe\nJohn Smith")
        assert len(result.names) == 2
