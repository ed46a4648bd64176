"""Trigger listener binding and the per-field state machine.

The EventBindingManager registers change, focus and blur listeners on every
control and a submit listener on the form. Each listener mutates the shared
FormState in place, asks the validator to refresh the field, and publishes on
the session's EventBus when the field's emit_on policy allows it.

Per-field state machine, two independent axes plus a flag:

    Focus axis:  NotFocused --focus--> Focused --blur--> NotFocused
    Touch axis:  NotTouched --first blur--> Touched          (terminal)
    Dirty flag:  Clean --first handled change--> Dirty      (terminal)

Handlers never catch validation failures. A failure aborts only the handler
that raised: a change handler skips marking the field dirty and publishing,
and the submit handler publishes nothing for that attempt.

Usage:
    >>> from formstate.controls import FieldControl
    >>> from formstate.data import create_form_data
    >>> from formstate.events import EventBus
    >>> from formstate.validation import ValidationEngine
    >>> email = FieldControl("email")
    >>> state = create_form_data([email])
    >>> manager = EventBindingManager(EventBus(), ValidationEngine())
    >>> handles = manager.subscribe_to_input_changes([email], state)
    >>> _ = email.set_value("a@b.com")
    >>> state["email"].value, state["email"].is_dirty
    ('a@b.com', True)
"""

from dataclasses import dataclass
from functools import partial
import logging
from typing import Dict, Iterable, List, Optional

from formstate.controls import FieldControl, Listener, NativeEvent, Subject
from formstate.events import EventBus
from formstate.types import (
    FieldOptions,
    FieldState,
    FormOptions,
    FormState,
    TriggerEvent,
    TriggerName,
    field_options,
)
from formstate.validation import ValidationOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class FieldContext:
    """Everything a field handler needs, built once at subscribe time.

    Attributes:
        control: The control the handlers were built for
        state: The shared FormState
        options: The field's options, if any
    """
    control: FieldControl
    state: FormState
    options: Optional[FieldOptions] = None

    @property
    def name(self) -> str:
        return self.control.name

    @property
    def field_state(self) -> FieldState:
        return self.state[self.control.name]

    @property
    def trigger(self) -> str:
        """Event name the change handler is bound to."""
        return self.options.trigger if self.options else TriggerEvent.CHANGE.value

    def allows_emit(self, trigger: TriggerName) -> bool:
        return self.options is None or self.options.allows_emit(trigger)


@dataclass
class SubmitContext:
    """Fields validated by one submit handler, in declaration order."""
    fields: List[FieldContext]
    state: FormState


@dataclass(frozen=True)
class FieldHandles:
    """Live handlers of one field, needed to unsubscribe later."""
    change: Listener
    focus: Listener
    blur: Listener


CallbackHandleSet = Dict[str, FieldHandles]
"""Handlers keyed by field name, as returned by subscribe_to_input_changes."""


def _change_event(options: Optional[FormOptions], name: str) -> str:
    opts = field_options(options, name)
    return opts.trigger if opts else TriggerEvent.CHANGE.value


class EventBindingManager:
    """Binds trigger handlers to controls and runs the field state machine.

    One manager serves one form session. It owns the FieldContext of every
    subscribed field until that field is unsubscribed.

    Attributes:
        bus: EventBus handlers publish on
        validator: ValidationOrchestrator handlers validate with
    """

    def __init__(self, bus: EventBus, validator: ValidationOrchestrator):
        self.bus = bus
        self.validator = validator
        self._contexts: Dict[str, FieldContext] = {}

    @property
    def subscribed_fields(self) -> List[str]:
        """Names of fields whose input handlers are currently bound."""
        return list(self._contexts)

    def subscribe_to_input_changes(
        self,
        controls: Iterable[FieldControl],
        state: FormState,
        options: Optional[FormOptions] = None,
    ) -> CallbackHandleSet:
        """Subscribe change (or its configured substitute), focus and blur handlers.

        Controls sharing a name (a radio group) share one set of handlers, so
        unsubscribing detaches every control of the group.

        Args:
            controls: Controls in declaration order
            state: FormState the handlers mutate
            options: Per-field options keyed by field name

        Returns:
            Handlers keyed by field name
        """
        handles: CallbackHandleSet = {}

        for control in controls:
            field_handles = handles.get(control.name)
            if field_handles is None:
                context = FieldContext(control, state, field_options(options, control.name))
                self._contexts[control.name] = context
                field_handles = FieldHandles(
                    change=partial(self.on_change, context),
                    focus=partial(self.on_focus, context),
                    blur=partial(self.on_blur, context),
                )
                handles[control.name] = field_handles

            control.on(self._contexts[control.name].trigger, field_handles.change)
            control.on(TriggerEvent.FOCUS.value, field_handles.focus)
            control.on(TriggerEvent.BLUR.value, field_handles.blur)

        logger.debug("Subscribed input handlers for %d field(s)", len(handles))
        return handles

    def unsubscribe_from_input_changes(
        self,
        controls: Iterable[FieldControl],
        handles: CallbackHandleSet,
        options: Optional[FormOptions] = None,
    ) -> None:
        """Remove the handlers added by subscribe_to_input_changes.

        The change handler is removed from the event name derived from
        ``options``. Passing options that differ from the ones used at
        subscribe time targets the wrong event name, and the real change
        listener stays attached.

        Args:
            controls: The controls passed to subscribe
            handles: The handlers returned by subscribe
            options: The options passed to subscribe
        """
        detached = 0
        for control in controls:
            field_handles = handles.get(control.name)
            if field_handles is None:
                logger.warning("No handlers to unsubscribe for field %r", control.name)
                continue

            control.off(_change_event(options, control.name), field_handles.change)
            control.off(TriggerEvent.FOCUS.value, field_handles.focus)
            control.off(TriggerEvent.BLUR.value, field_handles.blur)
            self._contexts.pop(control.name, None)
            detached += 1

        logger.debug("Unsubscribed input handlers from %d control(s)", detached)

    def subscribe_to_submit_event(
        self,
        form: Subject,
        controls: Iterable[FieldControl],
        state: FormState,
        options: Optional[FormOptions] = None,
    ) -> Listener:
        """Subscribe the submit handler to the form and return it."""
        context = SubmitContext(
            fields=[FieldContext(c, state, field_options(options, c.name)) for c in controls],
            state=state,
        )
        handler = partial(self.on_submit, context)
        form.on(TriggerEvent.SUBMIT.value, handler)
        return handler

    def unsubscribe_from_submit_event(self, form: Subject, handler: Listener) -> None:
        """Remove the listener attached by subscribe_to_submit_event."""
        form.off(TriggerEvent.SUBMIT.value, handler)

    def on_focus(self, context: FieldContext, event: Optional[NativeEvent] = None) -> None:
        """Mark the field focused. Never validates."""
        field_state = context.field_state
        field_state.is_focused = True
        logger.debug("Focus on field %r", context.name)

        if context.allows_emit(TriggerEvent.FOCUS):
            self.bus.emit(TriggerEvent.FOCUS.value, field_state)

    def on_blur(self, context: FieldContext, event: Optional[NativeEvent] = None) -> None:
        """Mark the field unfocused and touched.

        The first blur validates the field when its options set
        validate_dirty_only to False.
        """
        field_state = context.field_state
        field_state.is_focused = False

        if not field_state.is_touched:
            field_state.is_touched = True
            logger.debug("Field %r touched", context.name)

            if context.options is not None and context.options.validate_dirty_only is False:
                self.validator.apply_field_validation(context.control, context.state, context.options)

        if context.allows_emit(TriggerEvent.BLUR):
            self.bus.emit(TriggerEvent.BLUR.value, field_state)

    def on_change(self, context: FieldContext, event: Optional[NativeEvent] = None) -> None:
        """Store the new value, validate, and mark the field dirty.

        Checkboxes store their checked flag. Every other control, radio
        buttons included, stores the raw value of the event target.
        """
        trigger = context.trigger
        target = event.target if event is not None and event.target is not None else context.control
        field_state = context.field_state
        field_state.value = bool(target.checked) if context.control.is_checkbox else target.value
        self.validator.apply_field_validation(context.control, context.state, context.options)

        if not field_state.is_dirty:
            field_state.is_dirty = True
        logger.debug("Handled %r on field %r (valid=%s)", trigger, context.name, field_state.is_valid)

        if context.allows_emit(trigger):
            self.bus.emit(trigger, field_state)

    def on_submit(self, context: SubmitContext, event: Optional[NativeEvent] = None) -> None:
        """Validate every field and publish one submit event.

        Fields are validated in declaration order with no short-circuit, so
        every field's errors are refreshed. The payload carries the whole
        FormState and the aggregate validity.
        """
        if event is not None:
            event.prevent_default()

        is_valid = True
        for field_context in context.fields:
            self.validator.apply_field_validation(
                field_context.control, field_context.state, field_context.options
            )
            if not field_context.field_state.is_valid:
                is_valid = False

        logger.debug("Submit validated %d field(s): valid=%s", len(context.fields), is_valid)
        self.bus.emit(TriggerEvent.SUBMIT.value, {"formData": context.state, "isValid": is_valid})


__all__ = [
    "EventBindingManager",
    "FieldContext",
    "SubmitContext",
    "FieldHandles",
    "CallbackHandleSet",
]
