"""Test suite for formstate.

This package contains tests for:
- Initial state construction (values, radio groups, checkboxes)
- Binding handlers (focus, blur, change, submit) and subscription bookkeeping
- Validation engine (required fields, JSON Schema translation)
- Event bus (dispatch, serialization, history)
- Integration scenarios (complete form sessions)
"""
