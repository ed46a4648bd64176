"""Unit tests for the validation engine.

Tests cover:
- Fields without options, required fields and empty optional fields
- JSON Schema translation into FieldError codes
- In-place rewriting of is_valid and errors
- Schema errors propagating to the caller
"""

import jsonschema
import pytest

from formstate.controls import FieldControl
from formstate.data import create_form_data
from formstate.types import FieldErrorCode, FieldOptions
from formstate.validation import ValidationEngine, ValidationResult, is_empty


class TestIsEmpty:
    """Test the empty-value rule."""

    @pytest.mark.parametrize("value", [None, "", False, [], {}, ()])
    def test_empty_values(self, value):
        assert is_empty(value) is True

    @pytest.mark.parametrize("value", [0, "0", True, ["a"], " "])
    def test_non_empty_values(self, value):
        assert is_empty(value) is False


class TestValidateValue:
    """Test ValidationEngine.validate_value."""

    def test_no_options_is_valid(self):
        """Should accept any value when the field has no options."""
        result = ValidationEngine().validate_value("name", "", None)

        assert result.is_valid is True
        assert result.errors == []

    def test_required_missing(self):
        """Should report a single REQUIRED error for an empty required field."""
        result = ValidationEngine().validate_value(
            "name", "", FieldOptions(required=True, schema={"type": "string", "minLength": 2})
        )

        assert result.is_valid is False
        assert len(result.errors) == 1
        assert result.errors[0].code == FieldErrorCode.REQUIRED
        assert result.errors[0].path == "name"

    def test_unchecked_required_checkbox(self):
        """Should treat an unchecked checkbox as missing."""
        result = ValidationEngine().validate_value("terms", False, FieldOptions(required=True))

        assert result.is_valid is False
        assert result.errors[0].code == FieldErrorCode.REQUIRED

    def test_empty_optional_field_skips_schema(self):
        """Should accept an empty optional field even with a schema."""
        result = ValidationEngine().validate_value(
            "nick", "", FieldOptions(schema={"type": "string", "minLength": 3})
        )

        assert result.is_valid is True

    def test_too_short(self):
        """Should translate minLength into TOO_SHORT."""
        result = ValidationEngine().validate_value(
            "nick", "ab", FieldOptions(schema={"type": "string", "minLength": 3})
        )

        assert result.is_valid is False
        assert result.errors[0].code == FieldErrorCode.TOO_SHORT
        assert result.errors[0].expected == "minimum 3 characters"
        assert result.errors[0].received == "2 characters"

    def test_too_long(self):
        """Should translate maxLength into TOO_LONG."""
        result = ValidationEngine().validate_value(
            "nick", "abcdef", FieldOptions(schema={"type": "string", "maxLength": 3})
        )

        assert result.errors[0].code == FieldErrorCode.TOO_LONG

    def test_invalid_type(self):
        """Should translate type errors into INVALID_TYPE."""
        result = ValidationEngine().validate_value("age", "ten", FieldOptions(schema={"type": "integer"}))

        assert result.errors[0].code == FieldErrorCode.INVALID_TYPE
        assert result.errors[0].expected == "integer"
        assert result.errors[0].received == "str"

    def test_invalid_email_format(self):
        """Should check formats."""
        result = ValidationEngine().validate_value(
            "email", "not-an-email", FieldOptions(schema={"type": "string", "format": "email"})
        )

        assert result.errors[0].code == FieldErrorCode.INVALID_FORMAT
        assert result.errors[0].expected == "email"

    def test_pattern(self):
        """Should translate pattern errors into INVALID_FORMAT."""
        result = ValidationEngine().validate_value(
            "zip", "abc", FieldOptions(schema={"type": "string", "pattern": "^[0-9]{5}$"})
        )

        assert result.errors[0].code == FieldErrorCode.INVALID_FORMAT
        assert "pattern" in result.errors[0].message

    def test_enum(self):
        """Should translate enum errors into INVALID_VALUE."""
        result = ValidationEngine().validate_value(
            "plan", "gold", FieldOptions(schema={"enum": ["free", "pro"]})
        )

        assert result.errors[0].code == FieldErrorCode.INVALID_VALUE
        assert result.errors[0].expected == ["free", "pro"]

    def test_numeric_range(self):
        """Should translate numeric constraints into INVALID_VALUE."""
        result = ValidationEngine().validate_value(
            "age", 12, FieldOptions(schema={"type": "integer", "minimum": 18})
        )

        assert result.errors[0].code == FieldErrorCode.INVALID_VALUE
        assert result.errors[0].expected == "minimum: 18"

    def test_nested_path(self):
        """Should extend the field name with the nested error path."""
        result = ValidationEngine().validate_value(
            "tags", ["ok", 3], FieldOptions(schema={"type": "array", "items": {"type": "string"}})
        )

        assert result.errors[0].path == "tags.1"

    def test_reports_every_violation(self):
        """Should report all schema violations at once."""
        result = ValidationEngine().validate_value(
            "code", "ab", FieldOptions(schema={"type": "string", "minLength": 3, "pattern": "^[0-9]+$"})
        )

        assert {e.code for e in result.errors} == {FieldErrorCode.TOO_SHORT, FieldErrorCode.INVALID_FORMAT}

    def test_invalid_schema_raises(self):
        """Should propagate schema errors."""
        with pytest.raises(jsonschema.SchemaError):
            ValidationEngine().validate_value("x", "value", FieldOptions(schema={"type": "nonsense"}))

    def test_validator_cached_per_schema(self):
        """Should compile each schema once."""
        engine = ValidationEngine()
        schema = {"type": "string"}
        options = FieldOptions(schema=schema)

        engine.validate_value("a", "x", options)
        engine.validate_value("a", "y", options)

        assert len(engine._validators) == 1

    def test_equal_schemas_share_validator(self):
        """Should key the cache by schema content, not object identity."""
        engine = ValidationEngine()

        engine.validate_value("a", "x", FieldOptions(schema={"type": "string"}))
        engine.validate_value("b", "y", FieldOptions(schema={"type": "string"}))

        assert len(engine._validators) == 1

    def test_validator_cache_is_bounded(self):
        """Should evict the least recently used validator."""
        engine = ValidationEngine(cache_size=2)
        first = FieldOptions(schema={"type": "string"})

        engine.validate_value("a", "x", first)
        engine.validate_value("b", "x", FieldOptions(schema={"type": "string", "minLength": 1}))
        engine.validate_value("a", "x", first)
        engine.validate_value("c", "x", FieldOptions(schema={"type": "string", "maxLength": 5}))

        assert len(engine._validators) == 2
        assert engine.validate_value("a", 3, first).errors[0].code == FieldErrorCode.INVALID_TYPE
        assert len(engine._validators) == 2

    def test_cache_size_must_be_positive(self):
        with pytest.raises(ValueError):
            ValidationEngine(cache_size=0)

    def test_result_to_dict(self):
        result = ValidationEngine().validate_value("name", "", FieldOptions(required=True))

        data = result.to_dict()

        assert data["isValid"] is False
        assert data["errors"][0]["code"] == "required"
        assert isinstance(result, ValidationResult)


class TestApplyFieldValidation:
    """Test ValidationEngine.apply_field_validation."""

    def test_rewrites_validity_and_errors(self):
        """Should update is_valid and replace the error list."""
        control = FieldControl("nick", "ab")
        state = create_form_data([control])
        options = FieldOptions(schema={"type": "string", "minLength": 3})
        engine = ValidationEngine()

        engine.apply_field_validation(control, state, options)
        assert state["nick"].is_valid is False
        assert len(state["nick"].errors) == 1

        state["nick"].value = "abc"
        engine.apply_field_validation(control, state, options)
        assert state["nick"].is_valid is True
        assert state["nick"].errors == []

    def test_errors_replaced_not_appended(self):
        """Should never accumulate errors across passes."""
        control = FieldControl("nick", "ab")
        state = create_form_data([control])
        options = FieldOptions(schema={"type": "string", "minLength": 3})
        engine = ValidationEngine()

        engine.apply_field_validation(control, state, options)
        first = list(state["nick"].errors)
        engine.apply_field_validation(control, state, options)

        assert state["nick"].errors == first

    def test_only_touches_validity(self):
        """Should leave value and flags alone."""
        control = FieldControl("name", "")
        state = create_form_data([control])

        ValidationEngine().apply_field_validation(control, state, FieldOptions(required=True))

        assert state["name"].value == ""
        assert state["name"].is_dirty is False
        assert state["name"].is_touched is False
