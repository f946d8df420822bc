"""Tests for the best-effort CSV parser."""

from __future__ import annotations

from dataorganizer.csv_parser import parse, parse_line


class TestParseLine:
    def test_quoted_comma_is_one_field(self) -> None:
        assert parse_line('a,"b,c",d') == ["a", "b,c", "d"]

    def test_quotes_are_consumed(self) -> None:
        assert parse_line('"Widget","$12.50"') == ["Widget", "$12.50"]

    def test_doubled_quote_inside_quoted_field(self) -> None:
        """A doubled quote inside quotes yields one literal quote."""
        assert parse_line('"say ""hi""",x') == ['say "hi"', "x"]

    def test_empty_quoted_field(self) -> None:
        assert parse_line('a,"",b') == ["a", "", "b"]

    def test_trailing_comma_adds_empty_field(self) -> None:
        assert parse_line("a,b,") == ["a", "b", ""]

    def test_unterminated_quote_runs_to_end_of_line(self) -> None:
        assert parse_line('a,"b,c') == ["a", "b,c"]


class TestParse:
    def test_splits_lines(self) -> None:
        assert parse("a,b\n1,2") == [["a", "b"], ["1", "2"]]

    def test_crlf_line_endings(self) -> None:
        assert parse("a,b\r\n1,2\r\n") == [["a", "b"], ["1", "2"]]

    def test_blank_rows_dropped(self) -> None:
        """Empty lines and lines whose fields are all whitespace vanish."""
        assert parse("a,b\n\n , \n1,2\n") == [["a", "b"], ["1", "2"]]

    def test_ragged_rows_kept(self) -> None:
        assert parse("a,b,c\n1") == [["a", "b", "c"], ["1"]]

    def test_empty_input(self) -> None:
        assert parse("") == []

    def test_pathological_input_does_not_raise(self) -> None:
        grid = parse('"""\n,,,"\n"x')
        assert grid == [['"'], ["x"]]
