"""
Interaction events and the notification bus for Soundify.

Interaction events are what input sources hand to the dispatch engine:
a closed set of frozen dataclasses (NoData, NamedTag, GestureSample, StateTag).
Predicates match on them with isinstance checks; an event of the wrong
variant is simply a non-match.

Bus events (RuleFired, FeedbackFailed) let observers follow what the engine
did without the engine knowing about them.
"""

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from .rules import Rule


# --- Interaction events ---


@dataclass(frozen=True)
class NoData:
    """An interaction that carries no payload (e.g. a plain press)."""


NO_DATA = NoData()


@dataclass(frozen=True)
class NamedTag:
    """A named signal such as "shake", "beep" or "success"."""

    name: str


@dataclass(frozen=True)
class StateTag:
    """A named application state."""

    name: str


class GestureKind(Enum):
    TAP = "tap"
    DRAG = "drag"


@dataclass(frozen=True)
class GestureSample:
    """
    One sample of a pointer gesture.

    Attributes:
        kind: Tap or drag
        delta: (dx, dy) displacement since the previous sample, in logical pixels
        timestamp: Sample time in seconds, if the producer has one
        elapsed: Seconds since the previous sample, if the producer knows it
    """

    kind: GestureKind
    delta: tuple[float, float] = (0.0, 0.0)
    timestamp: float | None = None
    elapsed: float | None = None


InteractionEvent = NoData | NamedTag | GestureSample | StateTag


# --- Bus events ---


@dataclass
class Event:
    """Base class for all bus events."""

    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class RuleFired(Event):
    """Fired after a rule matched and its action was dispatched."""

    rule: "Rule | None" = None
    event: Any = None


@dataclass
class FeedbackFailed(Event):
    """Fired when a predicate or an external service call failed.

    stage is one of "predicate", "action" or "haptic".
    """

    rule: "Rule | None" = None
    stage: str = ""
    error: BaseException | None = None


class EventBus:
    """
    Simple synchronous event bus for component communication.

    Components can subscribe to event types and will be notified
    when events of that type are emitted.

    Thread-safe: can be used from multiple threads.
    """

    def __init__(self):
        self._subscribers: dict[type, list[Callable[[Event], None]]] = defaultdict(list)
        self._lock = threading.RLock()

    def subscribe(self, event_type: type[Event], handler: Callable[[Event], None]) -> None:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: The event class to subscribe to
            handler: Callable that receives the event when emitted
        """
        with self._lock:
            self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: type[Event], handler: Callable[[Event], None]) -> None:
        """Remove a handler previously registered with subscribe()."""
        with self._lock:
            if handler in self._subscribers[event_type]:
                self._subscribers[event_type].remove(handler)

    def emit(self, event: Event) -> None:
        """
        Emit an event to all subscribers.

        Handlers are called synchronously in subscription order. A failing
        handler is reported and does not stop the others.
        """
        with self._lock:
            handlers = list(self._subscribers[type(event)])

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                print(f"⚠️ Error in event handler for {type(event).__name__}: {e}")

    def clear(self) -> None:
        """Remove all subscribers."""
        with self._lock:
            self._subscribers.clear()
