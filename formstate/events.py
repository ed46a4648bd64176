"""Event publication for formstate.

Field handlers publish through an EventBus owned by the form session; there is
no process-wide bus, so independent forms never see each other's events.

``emit`` is fire-and-forget: it wraps the payload in an immutable FormEvent
and dispatches it synchronously to the listeners registered for that event
name, then to wildcard listeners. A failing listener is logged and skipped so
it cannot abort the field handler that published.

Payloads are live objects (a FieldState, or the submit payload holding the
whole FormState). ``FormEvent.to_dict`` snapshots them into plain data.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
from typing import Any, Callable, Deque, Dict, List, Optional
import uuid

from dateutil import parser as date_parser

from formstate.types import FieldState, TriggerName, trigger_name

logger = logging.getLogger(__name__)


def serialize_payload(payload: Any) -> Any:
    """Convert a payload into JSON-compatible data.

    Objects exposing ``to_dict`` (FieldState) are converted with it, and
    mappings and sequences are converted recursively.
    """
    if hasattr(payload, "to_dict"):
        return payload.to_dict()
    if isinstance(payload, dict):
        return {str(key): serialize_payload(value) for key, value in payload.items()}
    if isinstance(payload, (list, tuple)):
        return [serialize_payload(value) for value in payload]
    return payload


@dataclass(frozen=True)
class FormEvent:
    """A single published event.

    Attributes:
        event_id: Unique event identifier (e.g., "evt_3f2a...")
        name: Trigger event name (change, focus, blur, submit, or a
            configured substitute for change)
        ts: UTC timestamp when the event was published
        payload: The published payload, passed by reference

    Examples:
        >>> event = FormEvent(
        ...     event_id="evt_001",
        ...     name="focus",
        ...     ts=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc),
        ...     payload=FieldState(value="x", is_focused=True),
        ... )
        >>> event.to_dict()["payload"]["isFocused"]
        True
    """
    event_id: str
    name: str
    ts: datetime
    payload: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Returns:
            Dictionary with all event fields, suitable for JSON serialization.
            Timestamp is formatted as ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "name": self.name,
            "ts": self.ts.isoformat(),
        }
        if self.payload is not None:
            result["payload"] = serialize_payload(self.payload)
        return result

    def to_jsonl(self) -> str:
        """Convert event to JSONL format (single-line JSON)."""
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormEvent":
        """Create FormEvent from dictionary.

        A payload that looks like a serialized FieldState is restored as one;
        other payloads are kept as plain data.
        """
        payload = data.get("payload")
        if isinstance(payload, dict) and "isValid" in payload and "isTouched" in payload:
            payload = FieldState.from_dict(payload)

        return cls(
            event_id=data["eventId"],
            name=data["name"],
            ts=date_parser.isoparse(data["ts"]),
            payload=payload,
        )


EventListener = Callable[[FormEvent], None]
"""Type alias for event listener callbacks.

Event listeners are called synchronously when events are emitted.
"""


class EventBus:
    """Per-session publish/subscribe bus.

    Features:
    - Name-specific subscriptions and wildcard subscriptions
    - Synchronous dispatch (listeners called in registration order)
    - Error isolation (listener exceptions are logged, not propagated)
    - Optional bounded history of published events

    Examples:
        >>> bus = EventBus(history_size=10)
        >>> received = []
        >>> bus.on("blur", lambda e: received.append(e.payload))
        >>> bus.emit("blur", {"field": "email"})
        >>> received
        [{'field': 'email'}]
        >>> [e.name for e in bus.history()]
        ['blur']
    """

    def __init__(self, history_size: int = 0):
        """Initialize the bus.

        Args:
            history_size: Number of most recent events to keep; 0 disables
                history.
        """
        if history_size < 0:
            raise ValueError("history_size must be >= 0")
        self._listeners: Dict[str, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []
        self._history: Deque[FormEvent] = deque(maxlen=history_size)
        self._history_size = history_size

    def on(self, event_name: TriggerName, listener: EventListener) -> None:
        """Subscribe to a specific event name."""
        self._listeners.setdefault(trigger_name(event_name), []).append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to every event name (wildcard subscription)."""
        self._any_listeners.append(listener)

    def off(self, event_name: TriggerName, listener: EventListener) -> None:
        """Unsubscribe from a specific event name."""
        listeners = self._listeners.get(trigger_name(event_name))
        if listeners is not None:
            try:
                listeners.remove(listener)
            except ValueError:
                pass  # Listener not registered, ignore

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe from wildcard subscription."""
        try:
            self._any_listeners.remove(listener)
        except ValueError:
            pass  # Listener not registered, ignore

    def emit(self, event_name: TriggerName, payload: Any = None) -> None:
        """Publish a payload under an event name.

        Listeners are called synchronously in registration order:
        1. Listeners registered for this event name
        2. Wildcard listeners

        Args:
            event_name: Name to publish under
            payload: Event payload, passed to listeners by reference
        """
        event = FormEvent(
            event_id=f"evt_{uuid.uuid4().hex[:16]}",
            name=trigger_name(event_name),
            ts=datetime.now(timezone.utc),
            payload=payload,
        )
        if self._history_size:
            self._history.append(event)

        for listener in list(self._listeners.get(event.name, [])) + list(self._any_listeners):
            try:
                listener(event)
            except Exception:
                logger.error("Event listener failed for %r", event.name, exc_info=True)

    def history(self, event_name: Optional[TriggerName] = None) -> List[FormEvent]:
        """Get recorded events in publication order, optionally filtered by name."""
        if event_name is None:
            return list(self._history)
        name = trigger_name(event_name)
        return [event for event in self._history if event.name == name]

    def clear(self) -> None:
        """Remove all listeners and recorded events."""
        self._listeners.clear()
        self._any_listeners.clear()
        self._history.clear()

    def listener_count(self, event_name: Optional[TriggerName] = None) -> int:
        """Get count of registered listeners.

        Args:
            event_name: If provided, count listeners for this name only.
                        If None, count all listeners (including wildcard).
        """
        if event_name is not None:
            return len(self._listeners.get(trigger_name(event_name), []))
        total = len(self._any_listeners)
        for listeners in self._listeners.values():
            total += len(listeners)
        return total


__all__ = [
    "FormEvent",
    "EventListener",
    "EventBus",
    "serialize_payload",
]
