"""Host control surface for formstate.

The binding manager never talks to a concrete widget toolkit. It needs only
the Subject capability (``on``/``off`` listener registration) and a handful of
attributes on each control. This module defines that capability and an
in-memory implementation usable by headless hosts and tests:

- Subject: listener registration protocol
- NativeEvent: the event object handed to listeners
- FieldControl: one named input (text, checkbox, radio, select, ...)
- FormControl: the submit target

Usage:
    >>> email = FieldControl("email")
    >>> seen = []
    >>> email.on("change", lambda e: seen.append(e.target.value))
    >>> _ = email.set_value("a@b.com")
    >>> seen
    ['a@b.com']
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from typing_extensions import Protocol, runtime_checkable

from formstate.types import ControlKind, InputType, TriggerEvent, TriggerName, trigger_name


@dataclass
class NativeEvent:
    """Event object delivered to listeners registered on a Subject.

    Attributes:
        type: Name of the dispatched event
        target: Control the event was dispatched on
        default_prevented: Whether a listener suppressed the default action
    """
    type: str
    target: Any = None
    default_prevented: bool = False

    def prevent_default(self) -> None:
        """Suppress the host's default action for this event."""
        self.default_prevented = True


Listener = Callable[[NativeEvent], None]


@runtime_checkable
class Subject(Protocol):
    """Listener registration capability of a host event source."""

    def on(self, event: str, handler: Listener) -> None:
        ...

    def off(self, event: str, handler: Listener) -> None:
        ...


class EventTarget:
    """In-memory Subject implementation.

    Registering the same handler twice for one event is a no-op, and removing
    a handler that is not registered is silently ignored.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: TriggerName, handler: Listener) -> None:
        listeners = self._listeners.setdefault(trigger_name(event), [])
        if handler not in listeners:
            listeners.append(handler)

    def off(self, event: TriggerName, handler: Listener) -> None:
        listeners = self._listeners.get(trigger_name(event))
        if listeners is None:
            return
        try:
            listeners.remove(handler)
        except ValueError:
            pass  # Listener not registered, ignore

    def dispatch(self, event: TriggerName) -> NativeEvent:
        """Deliver a new NativeEvent to the listeners of ``event``.

        Listeners are called synchronously in registration order. Exceptions
        raised by a listener propagate to the caller, as they would to the
        host's unhandled-error channel.

        Returns:
            The dispatched event, so callers can inspect default_prevented
        """
        native = NativeEvent(type=trigger_name(event), target=self)
        for listener in list(self._listeners.get(native.type, [])):
            listener(native)
        return native

    def listener_count(self, event: Optional[TriggerName] = None) -> int:
        """Count registered listeners for one event, or for all events."""
        if event is not None:
            return len(self._listeners.get(trigger_name(event), []))
        return sum(len(listeners) for listeners in self._listeners.values())


class FieldControl(EventTarget):
    """A named input widget.

    The control kind is resolved once at construction. Native inputs
    (INPUT, CHECKBOX, RADIO) carry an InputType; other kinds carry None.

    Attributes:
        name: Field name, the key of the field's state entry
        value: Raw current value
        checked: Checked flag for checkboxes and radio buttons
        kind: ControlKind of this control
        input_type: Native input category, or None

    Examples:
        >>> FieldControl("age", "42", input_type="number").input_type
        <InputType.NUMBER: 'number'>
        >>> FieldControl.checkbox("terms").input_type
        <InputType.CHECKBOX: 'checkbox'>
        >>> FieldControl("bio", kind=ControlKind.TEXTAREA).input_type is None
        True
    """

    def __init__(
        self,
        name: str,
        value: Any = "",
        *,
        kind: ControlKind = ControlKind.INPUT,
        input_type: Optional[Union[InputType, str]] = None,
        checked: bool = False,
    ) -> None:
        super().__init__()
        self.name = name
        self.value = value
        self.checked = checked
        self.kind = self._resolve_kind(ControlKind(kind), input_type)
        self.input_type = self._resolve_input_type(self.kind, input_type)

    @staticmethod
    def _resolve_kind(kind: ControlKind, input_type: Optional[Union[InputType, str]]) -> ControlKind:
        # A plain input declared as checkbox or radio behaves as one
        if kind == ControlKind.INPUT and input_type is not None:
            resolved = InputType(input_type)
            if resolved == InputType.CHECKBOX:
                return ControlKind.CHECKBOX
            if resolved == InputType.RADIO:
                return ControlKind.RADIO
        return kind

    @staticmethod
    def _resolve_input_type(
        kind: ControlKind, input_type: Optional[Union[InputType, str]]
    ) -> Optional[InputType]:
        if kind == ControlKind.CHECKBOX:
            return InputType.CHECKBOX
        if kind == ControlKind.RADIO:
            return InputType.RADIO
        if kind == ControlKind.INPUT:
            return InputType(input_type) if input_type is not None else InputType.TEXT
        return None

    @classmethod
    def checkbox(cls, name: str, checked: bool = False, value: Any = "on") -> "FieldControl":
        return cls(name, value, kind=ControlKind.CHECKBOX, checked=checked)

    @classmethod
    def radio(cls, name: str, value: Any, checked: bool = False) -> "FieldControl":
        return cls(name, value, kind=ControlKind.RADIO, checked=checked)

    @classmethod
    def select(cls, name: str, value: Any = "") -> "FieldControl":
        return cls(name, value, kind=ControlKind.SELECT)

    @property
    def is_native_input(self) -> bool:
        return self.kind.is_native_input

    @property
    def is_checkbox(self) -> bool:
        return self.kind == ControlKind.CHECKBOX

    @property
    def is_radio(self) -> bool:
        return self.kind == ControlKind.RADIO

    def set_value(self, value: Any, event: TriggerName = TriggerEvent.CHANGE) -> NativeEvent:
        """Set the raw value, then dispatch ``event`` as a user edit would."""
        self.value = value
        return self.dispatch(event)

    def set_checked(self, checked: bool, event: TriggerName = TriggerEvent.CHANGE) -> NativeEvent:
        """Set the checked flag, then dispatch ``event``."""
        self.checked = checked
        return self.dispatch(event)

    def focus(self) -> NativeEvent:
        return self.dispatch(TriggerEvent.FOCUS)

    def blur(self) -> NativeEvent:
        return self.dispatch(TriggerEvent.BLUR)

    def __repr__(self) -> str:
        return f"FieldControl(name={self.name!r}, kind={self.kind.value!r}, value={self.value!r})"


class FormControl(EventTarget):
    """Submit target grouping a form's controls.

    Examples:
        >>> form = FormControl()
        >>> form.on("submit", lambda e: e.prevent_default())
        >>> form.submit().default_prevented
        True
    """

    def __init__(self, name: Optional[str] = None) -> None:
        super().__init__()
        self.name = name

    def submit(self) -> NativeEvent:
        """Dispatch a submit event and return it."""
        return self.dispatch(TriggerEvent.SUBMIT)

    def __repr__(self) -> str:
        return f"FormControl(name={self.name!r})"


__all__ = [
    "NativeEvent",
    "Listener",
    "Subject",
    "EventTarget",
    "FieldControl",
    "FormControl",
]
