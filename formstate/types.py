"""Core type definitions for formstate.

This module defines the fundamental types shared by the builder, the binding
manager and the validation engine:
- TriggerEvent: Canonical trigger event names recognized by the binding layer
- ControlKind: Tagged classification of a control, resolved once
- InputType: Native input categories recorded on each field
- FieldErrorCode: Validation error codes for individual fields
- FieldState: Reactive per-field state (value, validity, touched/dirty/focus)
- FieldOptions: Per-field validation and emission policy

A FormState is an ordered mapping of field name to FieldState, kept in control
declaration order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union


class TriggerEvent(str, Enum):
    """Trigger events recognized by the binding layer.

    ``INPUT`` is not bound by default; it is the usual substitute for
    ``CHANGE`` configured through ``FieldOptions.validate_on``.
    """
    CHANGE = "change"
    INPUT = "input"
    FOCUS = "focus"
    BLUR = "blur"
    SUBMIT = "submit"


class ControlKind(str, Enum):
    """Classification of a control.

    CHECKBOX, RADIO and INPUT are native inputs and carry an input type.
    SELECT, TEXTAREA and CUSTOM are not native inputs.
    """
    INPUT = "input"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    TEXTAREA = "textarea"
    CUSTOM = "custom"

    @property
    def is_native_input(self) -> bool:
        return self in (ControlKind.INPUT, ControlKind.CHECKBOX, ControlKind.RADIO)


class InputType(str, Enum):
    """Native input categories."""
    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"
    NUMBER = "number"
    TEL = "tel"
    URL = "url"
    SEARCH = "search"
    DATE = "date"
    TIME = "time"
    DATETIME_LOCAL = "datetime-local"
    MONTH = "month"
    WEEK = "week"
    COLOR = "color"
    RANGE = "range"
    FILE = "file"
    HIDDEN = "hidden"
    CHECKBOX = "checkbox"
    RADIO = "radio"


class FieldErrorCode(str, Enum):
    """Validation error codes for individual field failures."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_FORMAT = "invalid_format"
    INVALID_VALUE = "invalid_value"
    TOO_LONG = "too_long"
    TOO_SHORT = "too_short"
    CUSTOM = "custom"


TriggerName = Union[TriggerEvent, str]


def trigger_name(trigger: TriggerName) -> str:
    """Return the plain string name of a trigger event."""
    return trigger.value if isinstance(trigger, TriggerEvent) else str(trigger)


@dataclass
class FieldState:
    """Reactive state of one field.

    Created once per field by the builder. Every later mutation happens in
    place, so subscribers holding a reference always see current values.

    Attributes:
        value: Current value (string, bool for checkboxes, or any raw value)
        is_valid: Result of the last validation pass
        is_touched: Field has lost focus at least once (never reset)
        is_focused: Field currently has focus
        is_dirty: Field value has been changed at least once (never reset)
        errors: Messages from the last validation pass
        input_type: Native input category, None for non-native controls

    Examples:
        >>> state = FieldState(value="")
        >>> state.is_valid, state.is_dirty
        (True, False)
        >>> state.to_dict()["isTouched"]
        False
    """
    value: Any = ""
    is_valid: bool = True
    is_touched: bool = False
    is_focused: bool = False
    is_dirty: bool = False
    errors: List[str] = field(default_factory=list)
    input_type: Optional[InputType] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "value": self.value,
            "isValid": self.is_valid,
            "isTouched": self.is_touched,
            "isFocused": self.is_focused,
            "isDirty": self.is_dirty,
            "errors": list(self.errors),
            "inputType": self.input_type.value if isinstance(self.input_type, InputType) else self.input_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldState":
        """Create FieldState from dict."""
        input_type = data.get("inputType")
        if isinstance(input_type, str):
            input_type = InputType(input_type)
        return cls(
            value=data.get("value", ""),
            is_valid=data.get("isValid", True),
            is_touched=data.get("isTouched", False),
            is_focused=data.get("isFocused", False),
            is_dirty=data.get("isDirty", False),
            errors=list(data.get("errors", [])),
            input_type=input_type,
        )


FormState = Dict[str, FieldState]
"""Ordered mapping of field name to FieldState for one form session."""


_OPTION_KEYS = {
    "validateOn": "validate_on",
    "emitOn": "emit_on",
    "validateDirtyOnly": "validate_dirty_only",
    "schema": "schema",
    "required": "required",
}


@dataclass(frozen=True)
class FieldOptions:
    """Per-field validation and emission policy.

    Attributes:
        validate_on: Event name replacing the default change trigger
        emit_on: Allow-list of trigger names permitted to publish. A single
            name is accepted. None or empty means every trigger publishes.
        validate_dirty_only: When explicitly False, the first blur
            validates even if the field is not dirty yet
        schema: JSON Schema the field value is validated against
        required: Whether an empty value is a validation failure

    Examples:
        >>> opts = FieldOptions.from_dict({"validateOn": "input", "emitOn": ["blur"]})
        >>> opts.trigger
        'input'
        >>> opts.allows_emit("blur"), opts.allows_emit("input")
        (True, False)
    """
    validate_on: Optional[str] = None
    emit_on: Optional[FrozenSet[str]] = None
    validate_dirty_only: Optional[bool] = None
    schema: Optional[Dict[str, Any]] = field(default=None, hash=False)
    required: bool = False

    def __post_init__(self):
        """Normalize trigger names to plain strings."""
        if self.validate_on is not None:
            object.__setattr__(self, "validate_on", trigger_name(self.validate_on))
        if isinstance(self.emit_on, str):
            object.__setattr__(self, "emit_on", frozenset([trigger_name(self.emit_on)]))
        elif self.emit_on is not None:
            object.__setattr__(self, "emit_on", frozenset(trigger_name(e) for e in self.emit_on))

    @property
    def trigger(self) -> str:
        """Event name the change handler is bound to."""
        return self.validate_on or TriggerEvent.CHANGE.value

    def allows_emit(self, trigger: TriggerName) -> bool:
        """Check whether a trigger may publish under the emit_on policy."""
        if not self.emit_on:
            return True
        return trigger_name(trigger) in self.emit_on

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {}
        if self.validate_on is not None:
            result["validateOn"] = self.validate_on
        if self.emit_on is not None:
            result["emitOn"] = sorted(self.emit_on)
        if self.validate_dirty_only is not None:
            result["validateDirtyOnly"] = self.validate_dirty_only
        if self.schema is not None:
            result["schema"] = self.schema
        if self.required:
            result["required"] = True
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldOptions":
        """Create FieldOptions from a camelCase dict.

        Raises:
            ValueError: If the dict contains an unknown option key
        """
        unknown = set(data) - set(_OPTION_KEYS)
        if unknown:
            raise ValueError(f"Unknown field option(s): {', '.join(sorted(unknown))}")
        return cls(**{_OPTION_KEYS[key]: value for key, value in data.items()})


FormOptions = Dict[str, FieldOptions]
"""Per-field options keyed by field name."""


def parse_form_options(
    raw: Optional[Mapping[str, Union[FieldOptions, Mapping[str, Any]]]],
) -> FormOptions:
    """Build FormOptions from a mapping of field name to options.

    Values may already be FieldOptions instances or camelCase dicts.

    Examples:
        >>> opts = parse_form_options({"email": {"validateOn": "input"}})
        >>> opts["email"].trigger
        'input'
        >>> parse_form_options(None)
        {}
    """
    if not raw:
        return {}
    return {
        name: value if isinstance(value, FieldOptions) else FieldOptions.from_dict(value)
        for name, value in raw.items()
    }


def field_options(options: Optional[FormOptions], name: str) -> Optional[FieldOptions]:
    """Look up the options of one field, tolerating a missing options map."""
    return options.get(name) if options else None


def form_is_valid(state: FormState, names: Optional[Iterable[str]] = None) -> bool:
    """Logical AND of is_valid across the given fields (all fields by default)."""
    keys = state.keys() if names is None else names
    return all(state[name].is_valid for name in keys)


__all__ = [
    "TriggerEvent",
    "TriggerName",
    "ControlKind",
    "InputType",
    "FieldErrorCode",
    "FieldState",
    "FormState",
    "FieldOptions",
    "FormOptions",
    "parse_form_options",
    "field_options",
    "form_is_valid",
    "trigger_name",
]
