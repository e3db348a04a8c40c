"""Thread-safe pub/sub event system for solver progress notifications."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List
from threading import Lock
from collections import defaultdict
import logging
import time

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event types published by the solver."""

    # Solver lifecycle
    SOLVER_STARTED = auto()
    STOP_REQUESTED = auto()
    SOLVER_STOPPED = auto()

    # Search progress
    GLOBAL_BEST_UPDATED = auto()       # data: best, value, reports

    # Worker failures
    PARTICLE_FAILED = auto()           # data: particle, error


@dataclass
class Event:
    """Event container with metadata."""

    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    source: str = ""  # Component that fired the event


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Thread-safe publish/subscribe event system.

    Handlers run on the publishing thread. For GLOBAL_BEST_UPDATED that is
    the solver's coordination thread, so handlers should return quickly.
    """

    def __init__(self, history_limit: int = 1000) -> None:
        self._handlers: Dict[EventType, List[EventHandler]] = defaultdict(list)
        self._lock = Lock()
        self._event_history: List[Event] = []
        self._history_limit = history_limit

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe a handler to an event type."""
        with self._lock:
            if handler not in self._handlers[event_type]:
                self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe a handler from an event type."""
        with self._lock:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

    def publish(self, event: Event) -> None:
        """Record an event and dispatch it to every subscribed handler."""
        with self._lock:
            self._event_history.append(event)
            if len(self._event_history) > self._history_limit:
                self._event_history = self._event_history[-self._history_limit:]

            handlers = list(self._handlers[event.type])

        # Call handlers outside lock to prevent deadlocks
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event.type.name}")

    def get_history(
        self,
        event_type: EventType | None = None,
        limit: int = 100
    ) -> List[Event]:
        """Get recent event history, optionally filtered by type."""
        with self._lock:
            if event_type is not None:
                events = [e for e in self._event_history if e.type == event_type]
            else:
                events = list(self._event_history)
        return events[-limit:]

    def clear_history(self) -> None:
        with self._lock:
            self._event_history.clear()


# Global event bus instance
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the global event bus instance."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the global event bus (for testing)."""
    global _event_bus
    _event_bus = EventBus()
