"""Tests for input validation utilities."""

import pytest

from bookforge.utils.validation import (
    validate_in_range,
    validate_not_empty,
    validate_string_in_choices,
)


class TestValidateNotEmpty:
    def test_valid_string(self):
        validate_not_empty("Ayla", "name")

    @pytest.mark.parametrize("value", ["", "   ", "\n\t"])
    def test_blank_raises(self, value):
        with pytest.raises(ValueError, match="cannot be empty"):
            validate_not_empty(value, "name")

    def test_none_raises(self):
        with pytest.raises(ValueError, match="cannot be None"):
            validate_not_empty(None, "title")

    def test_non_string_raises_type_error(self):
        with pytest.raises(TypeError, match="must be a string"):
            validate_not_empty(42, "name")  # type: ignore[arg-type]


class TestValidateInRange:
    @pytest.mark.parametrize("value", [6, 9, 32, 6.5])
    def test_in_range(self, value):
        validate_in_range(value, "id_random_length", 6, 32)

    def test_below_minimum(self):
        with pytest.raises(ValueError, match=">= 6"):
            validate_in_range(5, "id_random_length", 6, 32)

    def test_above_maximum(self):
        with pytest.raises(ValueError, match="<= 32"):
            validate_in_range(33, "id_random_length", 6, 32)

    def test_open_bounds(self):
        validate_in_range(-1000, "offset")

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            validate_in_range(True, "flag", 0, 1)

    def test_none_raises(self):
        with pytest.raises(ValueError):
            validate_in_range(None, "count")


class TestValidateStringInChoices:
    def test_valid_choice(self):
        validate_string_in_choices("cascade", "reference_policy", ["orphan", "cascade"])

    def test_invalid_choice(self):
        with pytest.raises(ValueError, match="must be one of"):
            validate_string_in_choices("purge", "reference_policy", ["orphan", "cascade"])

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="cannot be empty"):
            validate_string_in_choices("", "reference_policy", ["orphan"])
