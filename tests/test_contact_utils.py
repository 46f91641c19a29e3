"""
Tests for contact parsing and normalisation.
"""

import pytest

from src.contact_utils import (
    MissingColumnsError,
    is_plausible_phone,
    is_valid_email,
    normalize_phone,
    parse_delimited_line,
    parse_records,
)


class TestParseDelimitedLine:

    def test_plain_fields(self):
        assert parse_delimited_line("a,b,c") == ["a", "b", "c"]

    def test_quoted_field_keeps_separator(self):
        assert parse_delimited_line('1,"Lee, Ann",x') == ["1", "Lee, Ann", "x"]

    def test_doubled_quote_is_literal(self):
        assert parse_delimited_line('"say ""hi""",2') == ['say "hi"', "2"]

    def test_empty_trailing_field(self):
        assert parse_delimited_line("a,b,") == ["a", "b", ""]

    def test_other_separator(self):
        assert parse_delimited_line("a;b;c", separator=";") == ["a", "b", "c"]


class TestParseRecords:

    def test_header_is_lowercased_and_values_trimmed(self):
        text = " Candidate_ID , Email \n c1 , ann@example.com \n"
        assert parse_records(text, ["candidate_id"]) == [
            {"candidate_id": "c1", "email": "ann@example.com"}
        ]

    def test_missing_required_columns(self):
        with pytest.raises(MissingColumnsError) as exc:
            parse_records("name,email\nAnn,a@b.co", ["candidate_id", "email"])
        assert exc.value.missing == ["candidate_id"]
        assert "candidate_id" in str(exc.value)

    def test_mismatched_rows_and_blank_lines_skipped(self):
        text = "candidate_id,email\r\nc1,a@b.co\r\n\r\nc2\r\nc3,c@d.co,extra\r\nc4,\r\n"
        rows = parse_records(text, ["candidate_id"])
        assert [r["candidate_id"] for r in rows] == ["c1", "c4"]
        assert rows[1]["email"] == ""

    def test_header_only_gives_no_rows(self):
        assert parse_records("candidate_id,email", ["candidate_id"]) == []

    def test_empty_text(self):
        assert parse_records("", ["candidate_id"]) == []


class TestNormalizePhone:

    @pytest.mark.parametrize("raw, expected", [
        ("(555) 123-4567", "+15551234567"),
        ("555.123.4567", "+15551234567"),
        ("1-555-123-4567", "+15551234567"),
        ("+1 555 123 4567", "+15551234567"),
    ])
    def test_north_american_numbers(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_idempotent(self):
        assert normalize_phone(normalize_phone("5551234567")) == "+15551234567"

    def test_other_lengths_returned_unchanged(self):
        assert normalize_phone("+44 20 7946 0958") == "+44 20 7946 0958"
        assert normalize_phone("12345") == "12345"

    def test_no_digits(self):
        assert normalize_phone("") is None
        assert normalize_phone(None) is None
        assert normalize_phone("n/a") is None


class TestEmailAndPhoneChecks:

    @pytest.mark.parametrize("email", ["ann@example.com", "a.b+c@mail.example.org", " ann@example.com "])
    def test_valid_emails(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["", None, "ann", "ann@example", "ann@@example.com", "a nn@example.com", "@example.com"])
    def test_invalid_emails(self, email):
        assert not is_valid_email(email)

    def test_plausible_phone(self):
        assert is_plausible_phone("+1 (555) 123-4567")
        assert not is_plausible_phone("555-CALL-NOW")
        assert not is_plausible_phone("")
