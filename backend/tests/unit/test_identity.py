"""Unit tests for identity normalization."""
import pytest

from blitzweek.services.identity import format_name, normalize_email, normalize_roll_number


class TestNormalizeEmail:
    """Test normalize_email function."""

    def test_lowercases_and_trims(self):
        assert normalize_email("  Alice@IITB.ac.IN ") == "alice@iitb.ac.in"

    @pytest.mark.parametrize("raw", ["alice@iitb.ac.in", " BOB@IITB.AC.IN", "Carol.X@iitb.ac.in\t"])
    def test_idempotent(self, raw):
        once = normalize_email(raw)
        assert normalize_email(once) == once

    def test_case_variants_collide(self):
        assert normalize_email("FOO@iitb.ac.in") == normalize_email("foo@IITB.AC.IN")


class TestNormalizeRollNumber:
    """Test normalize_roll_number function."""

    def test_uppercases_and_trims(self):
        assert normalize_roll_number(" 21b1234 ") == "21B1234"

    @pytest.mark.parametrize("raw", ["21b1234", "22D12345 ", "  190d0001"])
    def test_idempotent(self, raw):
        once = normalize_roll_number(raw)
        assert normalize_roll_number(once) == once

    def test_empty_string_is_total(self):
        assert normalize_roll_number("   ") == ""


class TestFormatName:
    """Test format_name function."""

    def test_title_cases_each_word(self):
        assert format_name("aLICE  smith") == "Alice Smith"

    def test_single_letter_words(self):
        assert format_name("j r r tolkien") == "J R R Tolkien"

    def test_empty(self):
        assert format_name("") == ""
