"""
TIN validation tests

Run with: pytest tests/test_tin_validator.py -v
"""

import pytest

from myinvois_compliance.models.validation import TinType
from myinvois_compliance.validators.tin_validator import (
    classify_tin,
    clean_tin,
    describe_tin_type,
    format_tin_for_display,
    is_sequential,
    suggest_tin_formats,
    validate_tin,
)


class TestValidateTin:
    """Format matching and classification"""

    @pytest.mark.parametrize("tin, expected_type, expected_format", [
        ("C2581476930", TinType.CORPORATE, "C1234567890"),
        ("850312145678", TinType.INDIVIDUAL, "123456789012"),
        ("G4820193756", TinType.GOVERNMENT, "G1234567890"),
        ("N7391046285", TinType.NONPROFIT, "N1234567890"),
    ])
    def test_valid_formats(self, tin, expected_type, expected_format):
        result = validate_tin(tin)

        assert result.is_valid is True
        assert result.type == expected_type
        assert result.format == expected_format
        assert result.errors == []

    def test_lowercase_and_whitespace_accepted(self):
        result = validate_tin("  c 2581 476 930 ")

        assert result.is_valid is True
        assert result.type == TinType.CORPORATE

    @pytest.mark.parametrize("tin", [None, "", "   "])
    def test_empty_tin_is_required(self, tin):
        result = validate_tin(tin)

        assert result.is_valid is False
        assert result.type == TinType.UNKNOWN
        assert result.errors == ["TIN is required"]

    def test_too_short(self):
        result = validate_tin("C12345")

        assert result.is_valid is False
        assert result.errors == ["Invalid TIN format", "TIN is too short"]

    def test_too_long(self):
        result = validate_tin("C123456789012")

        assert result.errors == ["Invalid TIN format", "TIN is too long"]

    def test_eleven_chars_with_wrong_prefix(self):
        result = validate_tin("X2581476930")

        assert result.is_valid is False
        assert result.errors[0] == "Invalid TIN format"
        assert "must start with C, G or N" in result.errors[1]

    def test_twelve_chars_starting_with_letter(self):
        result = validate_tin("C25814769301")

        assert result.errors == ["Invalid TIN format", "12-digit TIN should not start with a letter"]

    def test_invalid_without_hint(self):
        # 10 characters: no diagnostic applies
        result = validate_tin("2581476930")

        assert result.is_valid is False
        assert result.errors == ["Invalid TIN format"]

    def test_diagnostics_never_make_tin_valid(self):
        for tin in ["C12", "ABCDEFGHIJK", "C25814769301", "12345678901234"]:
            assert validate_tin(tin).is_valid is False


class TestPlaceholderWarnings:
    """Warnings flag test data but never invalidate"""

    def test_test_number_prefix(self):
        result = validate_tin("C0004821937")

        assert result.is_valid is True
        assert "TIN appears to be a test number" in result.warnings

    def test_ascending_sequence(self):
        result = validate_tin("C0123456789")

        assert result.is_valid is True
        assert "TIN appears to be sequential test data" in result.warnings

    def test_descending_sequence(self):
        result = validate_tin("G9876543210")

        assert result.is_valid is True
        assert result.warnings == ["TIN appears to be sequential test data"]

    def test_realistic_tin_has_no_warnings(self):
        assert validate_tin("C2581476930").warnings == []

    @pytest.mark.parametrize("digits, expected", [
        ("1234", True),
        ("9876", True),
        ("123", False),
        ("1235", False),
        ("1111", False),
        ("1234567890", False),
    ])
    def test_is_sequential(self, digits, expected):
        assert is_sequential(digits) is expected


class TestTinHelpers:

    def test_clean_tin(self):
        assert clean_tin(" c25 81 ") == "C2581"
        assert clean_tin(None) == ""

    def test_classify_tin(self):
        assert classify_tin("c2581476930") == TinType.CORPORATE
        assert classify_tin("bogus") == TinType.UNKNOWN

    def test_format_corporate_for_display(self):
        assert format_tin_for_display("C2581476930") == "C 2581 476 930"

    def test_format_individual_for_display(self):
        assert format_tin_for_display("850312145678") == "8503 1214 5678"

    def test_format_unrecognised_returns_cleaned(self):
        assert format_tin_for_display(" x12 ") == "X12"

    def test_describe_tin_type(self):
        assert describe_tin_type(TinType.CORPORATE) == "Company/Corporate entity"
        assert describe_tin_type("individual") == "Individual taxpayer"
        assert describe_tin_type(TinType.UNKNOWN) == "Unknown"
        assert describe_tin_type("alien") == "Unknown"


class TestSuggestTinFormats:

    def test_empty_input_lists_all_formats(self):
        suggestions = suggest_tin_formats("")

        assert len(suggestions) == 4
        assert suggestions[0] == "C1234567890 (Company)"

    def test_company_prefix(self):
        assert suggest_tin_formats("C25") == ["C2500000000 (Company format)"]

    def test_government_prefix(self):
        assert suggest_tin_formats("g4") == ["G4000000000 (Government format)"]

    def test_digits_suggest_individual_and_company(self):
        suggestions = suggest_tin_formats("85031")

        assert suggestions == [
            "850310000000 (Individual format)",
            "C8503100000 (Company format)",
        ]

    def test_long_digits_suggest_individual_only(self):
        assert suggest_tin_formats("85031214567") == ["850312145670 (Individual format)"]

    def test_unknown_prefix_has_no_suggestion(self):
        assert suggest_tin_formats("X1") == []

    def test_never_more_than_three(self):
        for partial in ["C", "1", "N123", "123456"]:
            assert len(suggest_tin_formats(partial)) <= 3
