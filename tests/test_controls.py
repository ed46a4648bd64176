"""Unit tests for the in-memory control surface.

Tests cover:
- Control kind and input type resolution
- Listener registration, removal and dispatch
- Default action suppression on form submit
"""

import pytest

from formstate.controls import EventTarget, FieldControl, FormControl, NativeEvent, Subject
from formstate.types import ControlKind, InputType


class TestFieldControlKinds:
    """Test control kind resolution."""

    def test_default_is_text_input(self):
        control = FieldControl("name")

        assert control.kind == ControlKind.INPUT
        assert control.input_type == InputType.TEXT
        assert control.is_native_input is True

    def test_string_kind_and_input_type(self):
        control = FieldControl("pin", kind="input", input_type="password")

        assert control.kind == ControlKind.INPUT
        assert control.input_type == InputType.PASSWORD

    def test_checkbox(self):
        control = FieldControl.checkbox("terms", checked=True)

        assert control.is_checkbox is True
        assert control.is_radio is False
        assert control.checked is True
        assert control.value == "on"
        assert control.input_type == InputType.CHECKBOX

    def test_radio(self):
        control = FieldControl.radio("size", "m")

        assert control.is_radio is True
        assert control.input_type == InputType.RADIO

    def test_checkbox_input_type_implies_kind(self):
        """Should resolve a plain input declared as checkbox to a checkbox."""
        control = FieldControl("agree", "on", input_type="checkbox", checked=True)

        assert control.kind == ControlKind.CHECKBOX
        assert control.is_checkbox is True
        assert control.input_type == InputType.CHECKBOX

    def test_radio_input_type_implies_kind(self):
        control = FieldControl("size", "m", input_type=InputType.RADIO)

        assert control.kind == ControlKind.RADIO
        assert control.is_radio is True
        assert control.input_type == InputType.RADIO

    @pytest.mark.parametrize("kind", [ControlKind.SELECT, ControlKind.TEXTAREA, ControlKind.CUSTOM])
    def test_non_native_controls(self, kind):
        """Should carry no input type, even when one is passed."""
        control = FieldControl("x", kind=kind, input_type="email")

        assert control.is_native_input is False
        assert control.input_type is None

    def test_unknown_input_type(self):
        with pytest.raises(ValueError):
            FieldControl("x", input_type="hologram")

    def test_satisfies_subject(self):
        assert isinstance(FieldControl("x"), Subject)
        assert isinstance(FormControl(), Subject)


class TestListeners:
    """Test listener registration and dispatch."""

    def test_dispatch_calls_listeners_in_order(self):
        target = EventTarget()
        order = []
        target.on("change", lambda e: order.append("first"))
        target.on("change", lambda e: order.append("second"))

        target.dispatch("change")

        assert order == ["first", "second"]

    def test_dispatch_passes_native_event(self):
        control = FieldControl("email")
        received = []
        control.on("focus", received.append)

        native = control.focus()

        assert received == [native]
        assert isinstance(native, NativeEvent)
        assert native.type == "focus"
        assert native.target is control

    def test_duplicate_registration_ignored(self):
        """Should register the same handler once per event."""
        control = FieldControl("email")
        calls = []

        def handler(event):
            calls.append(event)

        control.on("change", handler)
        control.on("change", handler)
        control.set_value("a")

        assert len(calls) == 1
        assert control.listener_count("change") == 1

    def test_off_unknown_handler_is_noop(self):
        control = FieldControl("email")

        control.off("change", lambda e: None)
        control.on("change", lambda e: None)
        control.off("change", lambda e: None)

        assert control.listener_count("change") == 1

    def test_off_removes_handler(self):
        control = FieldControl("email")
        calls = []
        control.on("blur", calls.append)

        control.off("blur", calls.append)
        control.blur()

        assert calls == []

    def test_listener_errors_propagate(self):
        """Should surface listener exceptions to the dispatcher."""
        control = FieldControl("email")

        def broken(event):
            raise RuntimeError("boom")

        control.on("change", broken)

        with pytest.raises(RuntimeError):
            control.set_value("a")

    def test_set_value_dispatches_custom_event(self):
        control = FieldControl("email")
        seen = []
        control.on("input", lambda e: seen.append(e.target.value))

        control.set_value("abc", event="input")

        assert seen == ["abc"]
        assert control.value == "abc"

    def test_set_checked(self):
        control = FieldControl.checkbox("terms")
        seen = []
        control.on("change", lambda e: seen.append(e.target.checked))

        control.set_checked(True)

        assert seen == [True]


class TestFormControl:
    """Test the submit target."""

    def test_submit_without_listeners(self):
        native = FormControl("signup").submit()

        assert native.type == "submit"
        assert native.default_prevented is False

    def test_prevent_default(self):
        form = FormControl()
        form.on("submit", lambda e: e.prevent_default())

        assert form.submit().default_prevented is True
