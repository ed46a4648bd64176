"""Initial form state construction.

The builder derives one FieldState per control, in declaration order. Radio
buttons sharing a name collapse into one entry whose value is the checked
button's value; checkboxes store their checked flag as a bool.

Usage:
    >>> from formstate.controls import FieldControl
    >>> controls = [
    ...     FieldControl("email", "a@b.com", input_type="email"),
    ...     FieldControl.radio("plan", "free"),
    ...     FieldControl.radio("plan", "pro", checked=True),
    ...     FieldControl.checkbox("terms", checked=True),
    ... ]
    >>> state = create_form_data(controls)
    >>> list(state)
    ['email', 'plan', 'terms']
    >>> state["plan"].value, state["terms"].value
    ('pro', True)
"""

import logging
from typing import Any, Iterable, Optional

from formstate.controls import FieldControl
from formstate.types import FieldState, FormState

logger = logging.getLogger(__name__)


def get_input_value(control: FieldControl, previous_value: Optional[Any] = None) -> Any:
    """Resolve the value a control contributes to its field.

    Args:
        control: The control to read
        previous_value: Value already stored for this field name, if any

    Returns:
        For a radio button, its own value when checked, otherwise the previous
        value (or "" when there is none). For a checkbox, its checked flag.
        For anything else, the raw value unchanged.

    Examples:
        >>> get_input_value(FieldControl.radio("size", "m"), "s")
        's'
        >>> get_input_value(FieldControl.radio("size", "m"), None)
        ''
        >>> get_input_value(FieldControl.checkbox("terms", value="yes"), None)
        False
    """
    if control.is_radio:
        return control.value if control.checked else (previous_value or "")
    if control.is_checkbox:
        return bool(control.checked)
    return control.value


def create_form_data(
    controls: Iterable[FieldControl],
    previous: Optional[FormState] = None,
) -> FormState:
    """Build the initial FormState for a set of controls.

    Every entry starts valid, untouched, unfocused and clean with no errors.
    Controls sharing a name collapse to one entry; the last control built
    wins, except that an unchecked radio keeps the group's earlier value.

    Args:
        controls: Controls in declaration order
        previous: FormState of an earlier build, consulted for the prior
            value of radio groups with no checked button

    Returns:
        A new FormState in declaration order
    """
    state: FormState = {}
    for control in controls:
        prior = state.get(control.name)
        if prior is None and previous is not None:
            prior = previous.get(control.name)
        state[control.name] = FieldState(
            value=get_input_value(control, prior.value if prior is not None else None),
            input_type=control.input_type if control.is_native_input else None,
        )

    logger.debug("Built form state for %d field(s): %s", len(state), list(state))
    return state


__all__ = [
    "create_form_data",
    "get_input_value",
]
