"""
Event bus for message center notifications.

Publishes what happens on the shared display and audio channel so other
services (status pages, loggers, tests) can observe it without being wired
into the composer or the sequencer:
- One-time subscriptions (once)
- Request/response style waiting (wait_for)
- Priority ordering of handlers
- Event history and basic metrics
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Union
from dataclasses import dataclass, field
from enum import Enum
import time
from collections import defaultdict, deque

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events published by the message center."""

    # Message Events
    MESSAGE_SHOWN = "message_shown"
    MESSAGE_HIDDEN = "message_hidden"

    # Display Events
    DISPLAY_UPDATED = "display_updated"
    DISPLAY_UPDATE_FAILED = "display_update_failed"

    # Announcement Events
    ANNOUNCEMENT_QUEUED = "announcement_queued"
    ANNOUNCEMENT_STARTED = "announcement_started"
    AUDIO_ICON_PLAYED = "audio_icon_played"
    ANNOUNCEMENT_COMPLETED = "announcement_completed"
    ANNOUNCEMENT_ABANDONED = "announcement_abandoned"

    # System Events
    SYSTEM_STOPPED = "system_stopped"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class Event:
    """Base event structure with metadata."""
    type: EventType
    data: Dict[str, Any]
    timestamp: float
    source: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "type": self.type.value,
            "data": self.data,
            "timestamp": self.timestamp,
            "source": self.source,
            "metadata": self.metadata
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Create event from dictionary."""
        return cls(
            type=EventType(data["type"]),
            data=data["data"],
            timestamp=data["timestamp"],
            source=data["source"],
            metadata=data.get("metadata", {})
        )


class EventHandler:
    """Handler for processing events with async support."""

    def __init__(self, handler_func: Callable, event_types: List[EventType],
                 priority: int = 0, filter_func: Optional[Callable] = None,
                 once: bool = False):
        self.handler_func = handler_func
        self.event_types = event_types
        self.priority = priority  # Higher priority = processed first
        self.filter_func = filter_func
        self.is_async = asyncio.iscoroutinefunction(handler_func)
        self.once = once
        self.call_count = 0
        self.last_called = 0.0

    def matches(self, event: Event) -> bool:
        """Check if this handler matches the event."""
        if event.type not in self.event_types:
            return False
        if self.filter_func and not self.filter_func(event):
            return False
        return True

    async def handle(self, event: Event) -> Optional[Any]:
        """Handle an event."""
        if not self.matches(event):
            return None

        self.call_count += 1
        self.last_called = time.time()

        if self.is_async:
            return await self.handler_func(event)
        return self.handler_func(event)

    def get_stats(self) -> Dict[str, Any]:
        """Get handler statistics."""
        return {
            "handler": getattr(self.handler_func, "__name__", repr(self.handler_func)),
            "call_count": self.call_count,
            "last_called": self.last_called,
            "is_once": self.once,
        }


class EventBus:
    """Central event bus for pub/sub communication."""

    _instance: Optional["EventBus"] = None

    def __init__(self, max_queue_size: int = 1000, enable_history: bool = True,
                 history_size: int = 100):
        self.handlers: Dict[EventType, List[EventHandler]] = defaultdict(list)
        self.event_queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self.is_running = False
        self._task: Optional[asyncio.Task] = None

        self.enable_history = enable_history
        self.event_history: deque = deque(maxlen=history_size)

        self.metrics = {
            "total_events": 0,
            "total_errors": 0,
            "events_by_type": defaultdict(int),
            "queue_overflows": 0,
        }

    @classmethod
    async def get_instance(cls) -> "EventBus":
        """Get singleton instance of EventBus."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    async def start(self) -> None:
        """Start the event bus processing loop."""
        if self.is_running:
            return

        self.is_running = True
        self._task = asyncio.create_task(self._process_events())
        logger.info("Event bus started")

    async def stop(self) -> None:
        """Stop the event bus processing loop."""
        self.is_running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Event bus stopped")

    async def _process_events(self) -> None:
        """Main event processing loop."""
        while self.is_running:
            try:
                event = await asyncio.wait_for(self.event_queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            await self._dispatch_event(event)

    async def _dispatch_event(self, event: Event) -> None:
        """Dispatch event to all registered handlers, highest priority first."""
        handlers = sorted(self.handlers.get(event.type, []),
                          key=lambda h: h.priority, reverse=True)

        for handler in handlers:
            if handler.once and handler.matches(event):
                self._remove_handler(handler)
            try:
                await handler.handle(event)
            except Exception as e:
                self.metrics["total_errors"] += 1
                name = getattr(handler.handler_func, "__name__", repr(handler.handler_func))
                logger.error(f"Error in event handler {name}: {e}", exc_info=True)

    def emit_nowait(self, event_type: EventType, data: Dict[str, Any],
                    source: str = "system",
                    metadata: Optional[Dict[str, Any]] = None) -> None:
        """Queue an event without suspending; safe to call from timer callbacks."""
        event = Event(
            type=event_type,
            data=data,
            timestamp=time.time(),
            source=source,
            metadata=metadata or {}
        )

        try:
            self.event_queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"Event queue full, dropping event: {event_type.value}")
            self.metrics["queue_overflows"] += 1
            return

        if self.enable_history:
            self.event_history.append(event)
        self.metrics["total_events"] += 1
        self.metrics["events_by_type"][event_type.value] += 1

    async def emit(self, event_type: EventType, data: Dict[str, Any],
                   source: str = "system",
                   metadata: Optional[Dict[str, Any]] = None) -> None:
        """Emit an event to the bus."""
        self.emit_nowait(event_type, data, source, metadata)

    def subscribe(self, event_types: Union[EventType, List[EventType]],
                  handler: Callable, priority: int = 0,
                  filter_func: Optional[Callable] = None) -> None:
        """Subscribe a handler to one or more event types."""
        self._add_handler(event_types, handler, priority, filter_func, once=False)

    def once(self, event_types: Union[EventType, List[EventType]],
             handler: Callable, priority: int = 0,
             filter_func: Optional[Callable] = None) -> None:
        """Subscribe a handler that runs for the first matching event only."""
        self._add_handler(event_types, handler, priority, filter_func, once=True)

    def _add_handler(self, event_types, handler, priority, filter_func, once) -> None:
        if isinstance(event_types, EventType):
            event_types = [event_types]

        event_handler = EventHandler(handler, event_types, priority, filter_func, once=once)
        for event_type in event_types:
            self.handlers[event_type].append(event_handler)

        logger.debug(f"{'One-time subscription' if once else 'Subscribed'}: "
                     f"{getattr(handler, '__name__', handler)} to {[et.value for et in event_types]}")

    def _remove_handler(self, event_handler: EventHandler) -> None:
        for event_type in event_handler.event_types:
            if event_handler in self.handlers[event_type]:
                self.handlers[event_type].remove(event_handler)

    def unsubscribe(self, handler: Callable) -> None:
        """Unsubscribe a handler from all events."""
        for event_type in self.handlers:
            self.handlers[event_type] = [
                h for h in self.handlers[event_type]
                if h.handler_func != handler
            ]
        logger.debug(f"Unsubscribed {getattr(handler, '__name__', handler)}")

    async def wait_for(self, event_type: EventType, timeout: float = 5.0,
                       filter_func: Optional[Callable] = None) -> Optional[Event]:
        """Wait for a specific event; returns None on timeout."""
        future = asyncio.get_running_loop().create_future()

        async def wait_handler(event: Event):
            if not future.done():
                future.set_result(event)

        self.once(event_type, wait_handler, filter_func=filter_func)

        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            logger.debug(f"Timeout waiting for event {event_type.value}")
            return None
        finally:
            self.unsubscribe(wait_handler)

    def get_event_history(self, event_type: Optional[EventType] = None,
                          limit: int = 10) -> List[Event]:
        """Get recent event history, optionally filtered by type."""
        if not self.enable_history:
            return []

        if event_type:
            events = [e for e in self.event_history if e.type == event_type]
        else:
            events = list(self.event_history)

        return events[-limit:]

    def get_stats(self) -> Dict[str, Any]:
        """Get event bus statistics."""
        return {
            "is_running": self.is_running,
            "queue_size": self.event_queue.qsize(),
            "total_handlers": sum(len(handlers) for handlers in self.handlers.values()),
            "metrics": {
                **self.metrics,
                "events_by_type": dict(self.metrics["events_by_type"]),
            },
            "handler_stats": [
                {"event_type": event_type.value, **handler.get_stats()}
                for event_type, handlers in self.handlers.items()
                for handler in handlers
            ],
            "event_history_size": len(self.event_history) if self.enable_history else 0,
        }

    def clear_history(self) -> None:
        """Clear event history."""
        self.event_history.clear()
        logger.debug("Event history cleared")
