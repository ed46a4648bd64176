"""Field validation for formstate.

The binding manager depends only on the ValidationOrchestrator protocol: a
synchronous ``apply_field_validation(control, state, options)`` that rewrites
``is_valid`` and ``errors`` of one field. ValidationEngine is the default
implementation. It checks the ``required`` flag of the field's options and
validates the value against the field's JSON Schema, translating jsonschema
errors into FieldError objects with specific codes and readable messages.

Exceptions raised while validating (for example an invalid schema) are not
caught here; they propagate to the handler that asked for validation.
"""

from collections import OrderedDict
from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, List, Optional

import jsonschema
from jsonschema import Draft7Validator
from typing_extensions import Protocol

from formstate.controls import FieldControl
from formstate.errors import FieldError
from formstate.types import FieldErrorCode, FieldOptions, FormState

logger = logging.getLogger(__name__)


class ValidationOrchestrator(Protocol):
    """Capability that refreshes the validity of one field in place."""

    def apply_field_validation(
        self,
        control: FieldControl,
        state: FormState,
        options: Optional[FieldOptions] = None,
    ) -> None:
        ...


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating one field value.

    Attributes:
        is_valid: Whether the value passed all checks
        errors: Field-level validation errors (empty if valid)

    Examples:
        >>> engine = ValidationEngine()
        >>> result = engine.validate_value("name", "", FieldOptions(required=True))
        >>> result.is_valid
        False
        >>> result.messages
        ["Field 'name' is required but was not provided"]
    """
    is_valid: bool
    errors: List[FieldError]

    @property
    def messages(self) -> List[str]:
        return [error.message for error in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "isValid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
        }


def is_empty(value: Any) -> bool:
    """Check whether a field value counts as not provided.

    None, "", False (an unchecked checkbox) and empty collections are empty.
    """
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, tuple, set, dict)):
        return len(value) == 0
    return False


class ValidationEngine:
    """Default ValidationOrchestrator backed by JSON Schema.

    A field without options is always valid. A required field with an empty
    value fails with a single REQUIRED error. An empty optional field skips
    its schema. Otherwise the value is validated against the field schema
    (Draft 7, with format checking) and every violation is reported.

    Compiled validators are cached by schema content in a bounded LRU map
    of at most ``cache_size`` entries.

    Examples:
        >>> engine = ValidationEngine()
        >>> opts = FieldOptions(schema={"type": "string", "minLength": 3})
        >>> engine.validate_value("nick", "ab", opts).errors[0].code
        <FieldErrorCode.TOO_SHORT: 'too_short'>
        >>> engine.validate_value("nick", "abc", opts).is_valid
        True
    """

    def __init__(self, cache_size: int = 128) -> None:
        if cache_size < 1:
            raise ValueError("cache_size must be >= 1")
        self._cache_size = cache_size
        self._validators: "OrderedDict[str, Draft7Validator]" = OrderedDict()

    def apply_field_validation(
        self,
        control: FieldControl,
        state: FormState,
        options: Optional[FieldOptions] = None,
    ) -> None:
        """Validate the control's field and rewrite its validity and errors.

        Args:
            control: Control whose field is validated
            state: FormState holding the field
            options: The field's options, if any
        """
        field_state = state[control.name]
        result = self.validate_value(control.name, field_state.value, options)
        field_state.is_valid = result.is_valid
        field_state.errors = result.messages
        logger.debug(
            "Validated field %r: valid=%s errors=%d",
            control.name, result.is_valid, len(result.errors),
        )

    def validate_value(
        self,
        name: str,
        value: Any,
        options: Optional[FieldOptions] = None,
    ) -> ValidationResult:
        """Validate a single field value.

        Args:
            name: Field name, used as the error path
            value: Value to validate
            options: The field's options, if any

        Returns:
            ValidationResult with is_valid flag and structured errors

        Raises:
            jsonschema.SchemaError: If the field schema is invalid
        """
        if options is None:
            return ValidationResult(is_valid=True, errors=[])

        if is_empty(value):
            if options.required:
                return ValidationResult(
                    is_valid=False,
                    errors=[
                        FieldError(
                            path=name,
                            code=FieldErrorCode.REQUIRED,
                            message=f"Field '{name}' is required but was not provided",
                            expected="required field",
                            received=None,
                        )
                    ],
                )
            return ValidationResult(is_valid=True, errors=[])

        if options.schema is None:
            return ValidationResult(is_valid=True, errors=[])

        validator = self._get_validator(options.schema)
        errors = sorted(validator.iter_errors(value), key=lambda e: list(e.path))
        field_errors = [self._translate_error(name, error) for error in errors]
        return ValidationResult(is_valid=not field_errors, errors=field_errors)

    def _get_validator(self, schema: Dict[str, Any]) -> Draft7Validator:
        key = json.dumps(schema, sort_keys=True, default=str)
        cached = self._validators.get(key)
        if cached is not None:
            self._validators.move_to_end(key)
            return cached
        # Validate that the schema itself is valid
        Draft7Validator.check_schema(schema)
        validator = Draft7Validator(schema, format_checker=Draft7Validator.FORMAT_CHECKER)
        self._validators[key] = validator
        if len(self._validators) > self._cache_size:
            self._validators.popitem(last=False)
        return validator

    def _translate_error(self, name: str, error: jsonschema.ValidationError) -> FieldError:
        """Translate a jsonschema ValidationError to a FieldError.

        Error mapping:
            - 'type' errors -> INVALID_TYPE
            - 'format' and 'pattern' errors -> INVALID_FORMAT
            - 'enum' or 'const' errors -> INVALID_VALUE
            - 'minLength'/'minItems' errors -> TOO_SHORT
            - 'maxLength'/'maxItems' errors -> TOO_LONG
            - numeric range errors -> INVALID_VALUE
            - anything else -> CUSTOM
        """
        path = ".".join([name] + [str(p) for p in error.path])

        if error.validator == "type":
            expected_type = error.validator_value
            received_type = type(error.instance).__name__
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_TYPE,
                message=f"Field '{path}' has invalid type. Expected {expected_type}, got {received_type}",
                expected=expected_type,
                received=received_type,
            )

        if error.validator == "format":
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_FORMAT,
                message=f"Field '{path}' has invalid format. Expected format: {error.validator_value}",
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator == "pattern":
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_FORMAT,
                message=f"Field '{path}' does not match required pattern: {error.validator_value}",
                expected=f"pattern: {error.validator_value}",
                received=error.instance,
            )

        if error.validator in ("enum", "const"):
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{path}' has invalid value. Must be one of: {error.validator_value}",
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator in ("minLength", "minItems"):
            minimum = error.validator_value
            actual = len(error.instance) if error.instance else 0
            unit = "characters" if error.validator == "minLength" else "items"
            return FieldError(
                path=path,
                code=FieldErrorCode.TOO_SHORT,
                message=f"Field '{path}' is too short. Minimum length: {minimum}, got: {actual}",
                expected=f"minimum {minimum} {unit}",
                received=f"{actual} {unit}",
            )

        if error.validator in ("maxLength", "maxItems"):
            maximum = error.validator_value
            actual = len(error.instance) if error.instance else 0
            unit = "characters" if error.validator == "maxLength" else "items"
            return FieldError(
                path=path,
                code=FieldErrorCode.TOO_LONG,
                message=f"Field '{path}' is too long. Maximum length: {maximum}, got: {actual}",
                expected=f"maximum {maximum} {unit}",
                received=f"{actual} {unit}",
            )

        if error.validator in ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum", "multipleOf"):
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=f"Field '{path}' violates {error.validator} constraint: {error.validator_value}",
                expected=f"{error.validator}: {error.validator_value}",
                received=error.instance,
            )

        return FieldError(
            path=path,
            code=FieldErrorCode.CUSTOM,
            message=f"Field '{path}' validation failed: {error.message}",
            expected=error.validator_value,
            received=error.instance,
        )


__all__ = [
    "ValidationOrchestrator",
    "ValidationEngine",
    "ValidationResult",
    "is_empty",
]
