"""
Display Composer.

Keeps the live set of messages and turns it into the single line shown on
the display. Changes are debounced: any number of updates within one loop
tick produce one composition. While there is something to show, the line is
pushed again every `refresh_interval` seconds so a device that resets or
times out gets its text back.
"""

import asyncio
import logging
from typing import Dict, Optional, Set, Tuple

from .core.config import MessageCenterConfig
from .core.event_bus import EventBus, EventType
from .core.timers import Timer
from .drivers.display import DisplayDriver
from .messages import HudMessage, Message, ProgressMessage, SpinnerMessage, StringMessage


class DisplayComposer:
    """Composes attached messages into one line and pushes it to a display."""

    def __init__(self, display: DisplayDriver,
                 config: Optional[MessageCenterConfig] = None,
                 event_bus: Optional[EventBus] = None,
                 logger: Optional[logging.Logger] = None):
        self.display = display
        self.config = config or MessageCenterConfig()
        self.event_bus = event_bus
        self.logger = logger or logging.getLogger(__name__)

        # Insertion-ordered set
        self._messages: Dict[Message, None] = {}

        self._active = True
        self._update_scheduled = False
        self._cleanup_scheduled = False
        self._updater: Optional[Timer] = None
        self._pushes: Set[asyncio.Task] = set()
        # Lock waiters are woken in arrival order, so lines reach the device
        # in the order they were composed.
        self._push_lock = asyncio.Lock()

        self.last_line: Optional[str] = None
        self.stats = {
            "compositions": 0,
            "pushes": 0,
            "push_failures": 0,
        }

    @property
    def active(self) -> bool:
        return self._active

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def is_idle(self) -> bool:
        """True when neither a debounced update nor a refresh is pending."""
        return self._updater is None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def show(self, message: Message) -> Message:
        assert self._active, "composer has been disposed"
        assert message._center is None, f"{message!r} is already shown"
        message._center = self
        message.started()
        self._messages[message] = None
        self._publish(EventType.MESSAGE_SHOWN, {"message": type(message).__name__})
        self._mark_needs_update()
        return message

    def show_message(self, message: Optional[str]) -> StringMessage:
        result = StringMessage(message)
        self.show(result)
        return result

    def create_hud_message(self, label: Optional[str], on: bool = False,
                           timeout: Optional[float] = None,
                           reminder: Optional[float] = None) -> HudMessage:
        result = HudMessage(label, timeout=timeout, reminder=reminder)
        if on:
            result.enable()
        self.show(result)
        return result

    def show_spinner(self) -> SpinnerMessage:
        result = SpinnerMessage(interval=self.config.spinner_interval)
        self.show(result)
        return result

    def show_progress(self, min: float = 0.0, max: float = 1.0, value: float = 0.0,
                      show_bar: bool = True, show_value: bool = True) -> ProgressMessage:
        result = ProgressMessage(min=min, max=max, value=value,
                                 show_bar=show_bar, show_value=show_value)
        self.show(result)
        return result

    def _remove(self, message: Message) -> None:
        del self._messages[message]
        message.ended()
        message._center = None
        if message.requires_cleanup:
            self._cleanup_scheduled = True
        self._publish(EventType.MESSAGE_HIDDEN, {"message": type(message).__name__})
        self._mark_needs_update()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _mark_needs_update(self) -> None:
        if self._update_scheduled:
            return
        if self._updater is not None:
            self._updater.cancel()
        self._updater = Timer(0, self._update)
        self._update_scheduled = True

    def _update(self) -> None:
        self._update_scheduled = False
        self._updater = None
        line = self.compose()
        self.stats["compositions"] += 1
        if line or self._cleanup_scheduled:
            self._push(line)
            self._updater = Timer(self.config.refresh_interval, self._update)
            self._cleanup_scheduled = False

    def compose(self) -> str:
        """Join the text of every attached message, in the order shown."""
        components = []
        for message in self._messages:
            component = message.message
            if component is not None:
                components.append(component)
        return self.config.separator.join(components)

    def _push(self, line: str) -> None:
        task = asyncio.ensure_future(self._send(line))
        self._pushes.add(task)
        task.add_done_callback(self._pushes.discard)

    async def _send(self, line: str) -> None:
        async with self._push_lock:
            await self._send_now(line)

    async def _send_now(self, line: str) -> None:
        self.stats["pushes"] += 1
        try:
            await self.display.show_message(line)
        except Exception as e:
            # The display is probably turned off or unreachable.
            self.stats["push_failures"] += 1
            self.logger.error(f"Display update failed: {e}")
            self._publish(EventType.DISPLAY_UPDATE_FAILED, {"line": line, "error": str(e)})
            return
        self.last_line = line
        self._publish(EventType.DISPLAY_UPDATED, {"line": line})

    def _publish(self, event_type: EventType, data: dict) -> None:
        if self.event_bus is not None:
            self.event_bus.emit_nowait(event_type, data, source="display_composer")

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Remove every message and stop talking to the display."""
        if self.config.verbose:
            self.logger.info("Disposing display composer...")
        self._active = False
        self._update_scheduled = True
        for message in list(self._messages):
            self._remove(message)
        assert not self._messages
        if self._updater is not None:
            self._updater.cancel()
            self._updater = None
