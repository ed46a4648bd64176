"""FormSession orchestrator for formstate.

A FormSession ties one form's pieces together: it parses the per-field
options, builds the FormState from the controls, owns the session's EventBus
and binding manager, and connects or disconnects the trigger handlers.

Usage:
    >>> from formstate.controls import FieldControl, FormControl
    >>> email = FieldControl("email", input_type="email")
    >>> session = FormSession(
    ...     FormControl(),
    ...     [email],
    ...     options={"email": {"required": True, "schema": {"type": "string", "format": "email"}}},
    ... )
    >>> session.connect()
    >>> _ = email.set_value("not-an-email")
    >>> session.is_valid
    False
    >>> _ = email.set_value("a@b.com")
    >>> session.is_valid
    True
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from formstate.binding import CallbackHandleSet, EventBindingManager
from formstate.controls import FieldControl, Listener, Subject
from formstate.data import create_form_data
from formstate.events import EventBus, EventListener
from formstate.types import FieldOptions, FormOptions, FormState, TriggerName, form_is_valid, parse_form_options
from formstate.validation import ValidationEngine, ValidationOrchestrator

logger = logging.getLogger(__name__)


class FormSession:
    """Reactive state and trigger bindings of one form.

    Attributes:
        form: Submit target
        controls: Controls in declaration order
        options: Parsed per-field options
        bus: EventBus owned by this session
        validator: ValidationOrchestrator used by every handler
        state: The session's FormState

    Examples:
        >>> from formstate.controls import FieldControl, FormControl
        >>> form = FormControl()
        >>> session = FormSession(form, [FieldControl("name")], options={"name": {"required": True}})
        >>> session.connect()
        >>> results = []
        >>> session.on("submit", lambda e: results.append(e.payload["isValid"]))
        >>> form.submit().default_prevented
        True
        >>> results
        [False]
    """

    def __init__(
        self,
        form: Subject,
        controls: Sequence[FieldControl],
        options: Optional[Mapping[str, Union[FieldOptions, Mapping[str, Any]]]] = None,
        validator: Optional[ValidationOrchestrator] = None,
        bus: Optional[EventBus] = None,
    ):
        """Initialize the session and build its FormState.

        Args:
            form: Submit target
            controls: Controls in declaration order
            options: Per-field options, as FieldOptions or camelCase dicts
            validator: Validation orchestrator (defaults to ValidationEngine)
            bus: Event bus (defaults to a new EventBus)
        """
        self.form = form
        self.controls: List[FieldControl] = list(controls)
        self.options: FormOptions = parse_form_options(options)
        self.bus = bus if bus is not None else EventBus()
        self.validator = validator if validator is not None else ValidationEngine()
        self.state: FormState = create_form_data(self.controls)
        self._manager = EventBindingManager(self.bus, self.validator)
        self._handles: Optional[CallbackHandleSet] = None
        self._submit_handler: Optional[Listener] = None

    @property
    def connected(self) -> bool:
        return self._handles is not None

    def connect(self) -> None:
        """Subscribe input and submit handlers. A second call is a no-op."""
        if self.connected:
            return
        self._handles = self._manager.subscribe_to_input_changes(self.controls, self.state, self.options)
        self._submit_handler = self._manager.subscribe_to_submit_event(
            self.form, self.controls, self.state, self.options
        )
        logger.debug("Connected form session with %d field(s)", len(self.state))

    def disconnect(self) -> None:
        """Unsubscribe every handler added by connect.

        The FormState keeps its last values and stays readable.
        """
        if self._handles is None:
            return
        self._manager.unsubscribe_from_input_changes(self.controls, self._handles, self.options)
        if self._submit_handler is not None:
            self._manager.unsubscribe_from_submit_event(self.form, self._submit_handler)
        self._handles = None
        self._submit_handler = None
        logger.debug("Disconnected form session")

    def rebuild(self, controls: Optional[Sequence[FieldControl]] = None) -> FormState:
        """Rebuild the FormState, for example after controls were added or removed.

        Radio groups with no checked button keep their previous value.
        Handlers are reconnected when the session was connected.

        Args:
            controls: New controls; the current controls when omitted

        Returns:
            The new FormState
        """
        was_connected = self.connected
        self.disconnect()
        if controls is not None:
            self.controls = list(controls)
        self.state = create_form_data(self.controls, previous=self.state)
        if was_connected:
            self.connect()
        return self.state

    def on(self, event_name: TriggerName, listener: EventListener) -> None:
        """Subscribe to events published by this session."""
        self.bus.on(event_name, listener)

    def off(self, event_name: TriggerName, listener: EventListener) -> None:
        """Unsubscribe from events published by this session."""
        self.bus.off(event_name, listener)

    @property
    def is_valid(self) -> bool:
        """Logical AND of every field's last validation result."""
        return form_is_valid(self.state)

    def values(self) -> Dict[str, Any]:
        """Current value of every field."""
        return {name: field_state.value for name, field_state in self.state.items()}

    def errors(self) -> Dict[str, List[str]]:
        """Current error messages of every field."""
        return {name: list(field_state.errors) for name, field_state in self.state.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the session as plain data."""
        return {
            "isValid": self.is_valid,
            "fields": {name: field_state.to_dict() for name, field_state in self.state.items()},
        }


__all__ = [
    "FormSession",
]
