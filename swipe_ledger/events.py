"""
Event System Module

Publish/subscribe dispatcher for capture outcomes. The UI layer subscribes to
receive one event per processed swipe.
"""

from enum import Enum
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
from collections import deque
import uuid
import logging
from threading import RLock


class OutcomeEvent(Enum):
    """Outcome events emitted by the capture controller"""
    SWIPED = "swiped"
    SWIPE_ERROR = "swipe-error"


@dataclass
class EventPayload:
    """Payload for outcome events"""
    event_type: OutcomeEvent
    data: Dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'event_type': self.event_type.value,
            'data': self.data,
            'timestamp': self.timestamp.isoformat(),
            'event_id': self.event_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventPayload':
        """Create from dictionary"""
        return cls(
            event_type=OutcomeEvent(data['event_type']),
            data=data['data'],
            timestamp=datetime.fromisoformat(data['timestamp']) if isinstance(data['timestamp'], str) else data['timestamp'],
            event_id=data['event_id']
        )


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__name__", repr(handler))


class EventDispatcher:
    """Central event dispatcher, publish/subscribe pattern"""

    def __init__(self):
        self._handlers: Dict[OutcomeEvent, List[Callable]] = {}
        self._global_handlers: List[Callable] = []  # catch-all handlers
        self._lock = RLock()
        self.logger = logging.getLogger("swipe_ledger.events")

    def subscribe(self, event_type: OutcomeEvent, handler: Callable) -> None:
        """Subscribe to a specific event type"""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            self.logger.debug(f"Subscribed handler {_handler_name(handler)} to {event_type.value}")

    def subscribe_all(self, handler: Callable) -> None:
        """Subscribe to all events"""
        with self._lock:
            self._global_handlers.append(handler)
            self.logger.debug(f"Subscribed global handler {_handler_name(handler)}")

    def unsubscribe(self, event_type: OutcomeEvent, handler: Callable) -> None:
        """Unsubscribe from a specific event type"""
        with self._lock:
            try:
                self._handlers.get(event_type, []).remove(handler)
                self.logger.debug(f"Unsubscribed handler {_handler_name(handler)} from {event_type.value}")
            except ValueError:
                self.logger.warning(f"Handler {_handler_name(handler)} was not subscribed to {event_type.value}")

    def unsubscribe_all(self, handler: Callable) -> None:
        """Remove a catch-all handler"""
        with self._lock:
            try:
                self._global_handlers.remove(handler)
            except ValueError:
                self.logger.warning(f"Global handler {_handler_name(handler)} was not subscribed")

    def publish(self, event: EventPayload) -> None:
        """Publish event to all subscribers"""
        with self._lock:
            handlers = list(self._handlers.get(event.event_type, [])) + list(self._global_handlers)

        self.logger.debug(f"Publishing event {event.event_type.value}")
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                # A failing subscriber must not break the capture stream
                self.logger.error(f"Error in event handler {_handler_name(handler)} for {event.event_type.value}: {e}")

    def emit(self, event_type: OutcomeEvent, data: Dict[str, Any]) -> EventPayload:
        """Build and publish an event"""
        event = EventPayload(event_type=event_type, data=data)
        self.publish(event)
        return event

    def clear(self) -> None:
        """Clear all handlers"""
        with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()

    def get_handler_count(self, event_type: Optional[OutcomeEvent] = None) -> int:
        """Get count of handlers for a specific event type or all"""
        with self._lock:
            if event_type:
                return len(self._handlers.get(event_type, []))
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)


class RecentEvents:
    """Bounded history of published events, for polling clients"""

    def __init__(self, limit: int = 100):
        self._events: deque = deque(maxlen=limit)
        self._lock = RLock()

    def __call__(self, event: EventPayload) -> None:
        with self._lock:
            self._events.append(event)

    def list(self, after: Optional[str] = None) -> List[EventPayload]:
        """Events in publish order, optionally only those after a given event id"""
        with self._lock:
            events = list(self._events)
        if after:
            ids = [event.event_id for event in events]
            if after in ids:
                events = events[ids.index(after) + 1:]
        return events
