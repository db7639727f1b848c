"""
Message Center - main interface for the shared display and audio channel.

Wires a DisplayComposer and an AnnouncementSequencer to the same drivers
and configuration, and tears both down together.
"""

import logging
from typing import Any, Callable, Dict, Optional

from .composer import DisplayComposer
from .core.config import MessageCenterConfig
from .core.event_bus import EventBus, EventType
from .core.types import Announcement
from .drivers.audio import AudioDriver
from .drivers.display import DisplayDriver
from .messages import HudMessage, Message, ProgressMessage, SpinnerMessage, StringMessage
from .sequencer import AnnouncementSequencer

logger = logging.getLogger(__name__)


class MessageCenter:
    """Coordinates messages and announcements on one display.

    Messages are shown side by side on the composed line; announcements take
    turns, each one adding its own text to the line and using the audio
    channel exclusively while it runs.
    """

    def __init__(self, display: DisplayDriver, audio: AudioDriver,
                 muted: Optional[Callable[[], bool]] = None,
                 config: Optional[MessageCenterConfig] = None,
                 event_bus: Optional[EventBus] = None):
        """
        Initialize the message center.

        Args:
            display: Driver for the text display
            audio: Driver for audio icons and speech
            muted: Read-only accessor for the global mute flag
            config: Configuration (defaults if not provided)
            event_bus: Optional bus to publish lifecycle events on
        """
        self.config = config or MessageCenterConfig()
        self.event_bus = event_bus
        self._muted = muted or (lambda: False)

        self.composer = DisplayComposer(display, config=self.config, event_bus=event_bus)
        self.sequencer = AnnouncementSequencer(
            self.composer, audio,
            muted=self._muted,
            config=self.config,
            event_bus=event_bus,
        )
        self._disposed = False

        logger.info(f"MessageCenter initialized: display={display.name}, audio={audio.name}")

    @property
    def muted(self) -> bool:
        return self._muted()

    @property
    def active(self) -> bool:
        return not self._disposed

    def show(self, message: Message) -> Message:
        return self.composer.show(message)

    def show_message(self, message: Optional[str]) -> StringMessage:
        return self.composer.show_message(message)

    def create_hud_message(self, label: Optional[str], on: bool = False,
                           timeout: Optional[float] = None,
                           reminder: Optional[float] = None) -> HudMessage:
        return self.composer.create_hud_message(label, on=on, timeout=timeout, reminder=reminder)

    def show_spinner(self) -> SpinnerMessage:
        return self.composer.show_spinner()

    def show_progress(self, min: float = 0.0, max: float = 1.0, value: float = 0.0,
                      show_bar: bool = True, show_value: bool = True) -> ProgressMessage:
        return self.composer.show_progress(min=min, max=max, value=value,
                                           show_bar=show_bar, show_value=show_value)

    async def announce(self, message: str, level: int, verbal: bool = True,
                       audio_icon: bool = True, visual: bool = True,
                       duration: Optional[float] = None) -> Announcement:
        return await self.sequencer.announce(message, level, verbal=verbal,
                                             audio_icon=audio_icon, visual=visual,
                                             duration=duration)

    def get_state(self) -> Dict[str, Any]:
        """Get current state for status reporting."""
        return {
            "active": self.active,
            "muted": self.muted,
            "messages": len(self.composer.messages),
            "line": self.composer.compose(),
            "pending_announcements": self.sequencer.pending,
            "display_stats": dict(self.composer.stats),
        }

    def dispose(self) -> None:
        """Deactivate announcements and remove every message."""
        if self._disposed:
            return
        self._disposed = True
        logger.info("Disposing message center...")
        self.sequencer.deactivate()
        self.composer.dispose()
        if self.event_bus is not None:
            self.event_bus.emit_nowait(EventType.SYSTEM_STOPPED, {}, source="message_center")
