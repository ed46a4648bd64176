"""formstate: reactive form field state and trigger bindings.

formstate tracks per-field state for a set of named input controls:
- Value, validity and error messages, refreshed on configurable triggers
- Touched, dirty and focus tracking with monotonic touched/dirty flags
- Field- and form-level events published on a per-session event bus
- Form submission with full validation and aggregate validity

Basic usage:
    >>> from formstate import FieldControl, FormControl, FormSession
    >>> email = FieldControl("email", input_type="email")
    >>> session = FormSession(FormControl(), [email], options={"email": {"validateOn": "input"}})
    >>> session.connect()
    >>> _ = email.set_value("a@b.com", event="input")
    >>> session.state["email"].is_dirty
    True
"""

__version__ = "0.1.0"
__author__ = "formstate contributors"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formstate.binding import CallbackHandleSet, EventBindingManager, FieldHandles
from formstate.controls import FieldControl, FormControl, NativeEvent, Subject
from formstate.data import create_form_data, get_input_value
from formstate.events import EventBus, FormEvent
from formstate.runtime import FormSession
from formstate.types import (
    ControlKind,
    FieldOptions,
    FieldState,
    FormState,
    InputType,
    TriggerEvent,
    parse_form_options,
)
from formstate.validation import ValidationEngine, ValidationOrchestrator

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "CallbackHandleSet",
    "ControlKind",
    "EventBindingManager",
    "EventBus",
    "FieldControl",
    "FieldHandles",
    "FieldOptions",
    "FieldState",
    "FormControl",
    "FormEvent",
    "FormSession",
    "FormState",
    "InputType",
    "NativeEvent",
    "Subject",
    "TriggerEvent",
    "ValidationEngine",
    "ValidationOrchestrator",
    "create_form_data",
    "get_input_value",
    "parse_form_options",
]
