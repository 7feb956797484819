"""
Event system for the Feed Video System.

This module provides a thread-safe event system for communication between
the playback, preload, cart and API components. There is no process-wide
instance; whoever composes the system creates one and passes it down.
"""

import threading
import logging
from typing import Dict, List, Callable, Any, Optional
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class EventType(Enum):
    """Event types for the system"""
    VIDEO_REGISTERED = "video_registered"
    VIDEO_UNREGISTERED = "video_unregistered"
    VIDEO_STARTED = "video_started"
    VIDEO_STOPPED = "video_stopped"
    VIDEO_EVICTED = "video_evicted"
    VIDEO_START_FAILED = "video_start_failed"
    PRELOAD_WARMED = "preload_warmed"
    PRELOAD_EVICTED = "preload_evicted"
    LOCK_CREATED = "lock_created"
    LOCK_RELEASED = "lock_released"
    LOCK_EXPIRED = "lock_expired"
    SYSTEM_STARTED = "system_started"
    SYSTEM_SHUTDOWN = "system_shutdown"


@dataclass
class Event:
    """Event data structure"""
    event_type: EventType
    source: str
    data: Dict[str, Any]
    timestamp: datetime

    def __post_init__(self):
        if not isinstance(self.timestamp, datetime):
            self.timestamp = datetime.now()


class EventSystem:
    """Thread-safe event system for inter-component communication"""

    def __init__(self, max_history: int = 1000):
        self.logger = logging.getLogger(__name__)
        self._subscribers: Dict[EventType, List[Callable]] = {}
        self._lock = threading.RLock()
        self._event_history: List[Event] = []
        self._max_history = max_history

    def subscribe(self, event_type: EventType, callback: Callable[[Event], None]) -> None:
        """Subscribe to an event type"""
        with self._lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = []

            if callback not in self._subscribers[event_type]:
                self._subscribers[event_type].append(callback)
                self.logger.debug(f"Subscribed to {event_type.value}")

    def unsubscribe(self, event_type: EventType, callback: Callable[[Event], None]) -> None:
        """Unsubscribe from an event type"""
        with self._lock:
            if event_type in self._subscribers:
                try:
                    self._subscribers[event_type].remove(callback)
                    self.logger.debug(f"Unsubscribed from {event_type.value}")
                except ValueError:
                    pass  # Callback wasn't subscribed

    def publish(self, event_type: EventType, source: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Publish an event"""
        if data is None:
            data = {}

        event = Event(
            event_type=event_type,
            source=source,
            data=data,
            timestamp=datetime.now()
        )

        with self._lock:
            self._event_history.append(event)
            if len(self._event_history) > self._max_history:
                self._event_history.pop(0)

        self._notify_subscribers(event)

    def _notify_subscribers(self, event: Event) -> None:
        """Notify all subscribers of an event"""
        with self._lock:
            subscribers = self._subscribers.get(event.event_type, []).copy()

        for callback in subscribers:
            try:
                callback(event)
            except Exception as e:
                self.logger.error(f"Error in event callback for {event.event_type.value}: {e}")

    def get_recent_events(self, event_type: Optional[EventType] = None, limit: int = 100, source: Optional[str] = None) -> List[Event]:
        """Get recent events, optionally filtered by type and by publishing component"""
        with self._lock:
            events = self._event_history.copy()

        if event_type:
            events = [e for e in events if e.event_type == event_type]
        if source:
            events = [e for e in events if e.source == source]

        return events[-limit:] if limit else events

    def clear_history(self) -> None:
        """Clear event history"""
        with self._lock:
            self._event_history.clear()
            self.logger.info("Event history cleared")

    def get_subscriber_count(self, event_type: EventType) -> int:
        """Get number of subscribers for an event type"""
        with self._lock:
            return len(self._subscribers.get(event_type, []))


class EventPublisher:
    """Mixin for components that publish under a fixed source name.

    Publishing is a no-op when the component was built without an event
    system, so the playback and cart services work standalone.
    """

    SOURCE = "unknown"
    event_system: Optional[EventSystem] = None

    def _publish(self, event_type: EventType, data: Dict[str, Any]) -> None:
        if self.event_system:
            self.event_system.publish(event_type, self.SOURCE, data)
