"""
Announcement Sequencer.

Announcements get the display and the audio channel to themselves: each one
shows its text, optionally plays an audio icon and speaks, keeps the text up
for at least its duration and then cleans up before the next one starts.
Announcements run strictly one at a time, in the order announce() was called.

Deactivation is cooperative. Each announcement checks the active flag when
its turn comes, after the audio icon and after the dwell; once inactive it
stops without touching the drivers again. Driver calls already in flight are
left to finish or hit their timeout.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from .composer import DisplayComposer
from .core.config import MessageCenterConfig
from .core.event_bus import EventBus, EventType
from .core.types import Announcement, AnnouncementState
from .drivers.audio import AudioDriver
from .messages import StringMessage


def pretty_duration(seconds: float) -> str:
    """Format a duration for log output, e.g. '1m 5.0s' or '220ms'."""
    if seconds < 1.0:
        return f"{seconds * 1000:.0f}ms"
    minutes, seconds = divmod(seconds, 60)
    if minutes:
        return f"{minutes:.0f}m {seconds:.1f}s"
    return f"{seconds:.1f}s"


class AnnouncementSequencer:
    """Serialises announcements into FIFO order and drives each one."""

    def __init__(self, composer: DisplayComposer, audio: AudioDriver,
                 muted: Optional[Callable[[], bool]] = None,
                 config: Optional[MessageCenterConfig] = None,
                 event_bus: Optional[EventBus] = None,
                 logger: Optional[logging.Logger] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.composer = composer
        self.audio = audio
        self.config = config or composer.config
        self.event_bus = event_bus
        self.logger = logger or logging.getLogger(__name__)
        self._muted = muted or (lambda: False)
        self._clock = clock

        # asyncio.Lock wakes its waiters in arrival order and does not let
        # newcomers jump ahead of them, which is the queue discipline needed.
        self._turn = asyncio.Lock()
        self._active = True
        self._deactivated = asyncio.Event()
        self._count = 0
        self._pending = 0

        self._last_audio_icon_level = 0
        self._last_audio_icon_timestamp = clock()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def muted(self) -> bool:
        return self._muted()

    @property
    def pending(self) -> int:
        """Announcements queued or in progress."""
        return self._pending

    @property
    def last_audio_icon_level(self) -> int:
        return self._last_audio_icon_level

    async def announce(self, text: str, level: int, verbal: bool = True,
                       audio_icon: bool = True, visual: bool = True,
                       duration: Optional[float] = None) -> Announcement:
        """Queue an announcement and return it once it completed or was abandoned."""
        if duration is None:
            duration = self.config.default_duration
        self._count += 1
        announcement = Announcement(
            id=self._count,
            text=text,
            level=level,
            verbal=verbal,
            audio_icon=audio_icon,
            visual=visual,
            duration=duration,
        )
        if self.config.verbose:
            flags = ''.join([
                'verbal, ' if verbal else '',
                'audio icon, ' if audio_icon else '',
                'visual, ' if visual else '',
            ])
            self.logger.info(
                f'announce("{text}", level={level}, {flags}for {pretty_duration(duration)}'
                f'{"; audio muted" if self.muted else "; audio enabled"})'
            )
        self._publish(EventType.ANNOUNCEMENT_QUEUED, announcement)

        self._pending += 1
        try:
            announcement.state = AnnouncementState.WAITING
            async with self._turn:
                await self._perform(announcement)
        finally:
            self._pending -= 1
        return announcement

    async def _perform(self, announcement: Announcement) -> None:
        if not self._active:
            self._abandon(announcement, None)
            return

        visual_handle: Optional[StringMessage] = None
        if announcement.visual:
            announcement.state = AnnouncementState.SHOWING
            visual_handle = self.composer.show_message(announcement.text)
        try:
            await self._run_steps(announcement, visual_handle)
        finally:
            # Cancellation must not leave the text on the display.
            if visual_handle is not None and visual_handle.is_attached:
                visual_handle.hide()

    async def _run_steps(self, announcement: Announcement,
                         visual_handle: Optional[StringMessage]) -> None:
        self._publish(EventType.ANNOUNCEMENT_STARTED, announcement)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + announcement.duration

        if announcement.audio_icon and not self.muted:
            announcement.state = AnnouncementState.ICON
            await self._play_audio_icon(announcement)

        if not self._active:
            self._abandon(announcement, visual_handle)
            return

        if announcement.verbal and not self.muted:
            announcement.state = AnnouncementState.SPEAKING
            await self._speak(announcement.text)

        announcement.state = AnnouncementState.DWELLING
        await self._dwell(deadline - loop.time())

        if not self._active:
            self._abandon(announcement, visual_handle)
            return

        if visual_handle is not None:
            visual_handle.hide()
        announcement.state = AnnouncementState.COMPLETED
        self.logger.debug(f"Announcement #{announcement.id} completed")
        self._publish(EventType.ANNOUNCEMENT_COMPLETED, announcement)

    def _select_audio_icon(self, level: int) -> Optional[str]:
        icons = self.config.audio_icons
        if level == 1:
            return icons["low"]
        if 2 <= level <= 8:
            return icons["medium"]
        if level == 9:
            return icons["urgent"]
        return None

    async def _play_audio_icon(self, announcement: Announcement) -> None:
        level = announcement.level
        now = self._clock()
        since_last = now - self._last_audio_icon_timestamp
        if level <= self._last_audio_icon_level and since_last < self.config.audio_icon_throttle:
            self.logger.debug(
                f"Skipping audio icon for level {level}; level {self._last_audio_icon_level} "
                f"played {pretty_duration(since_last)} ago"
            )
            return

        icon = self._select_audio_icon(level)
        if icon is None:
            self.logger.warning(f"No audio icon for severity level {level}")
            return

        try:
            await asyncio.wait_for(self.audio.play_audio_icon(icon),
                                   timeout=self.config.audio_icon_timeout)
        except asyncio.TimeoutError:
            self.logger.warning(f"Audio icon '{icon}' timed out after "
                                f"{pretty_duration(self.config.audio_icon_timeout)}")
        except Exception as e:
            self.logger.error(f"Failed to play audio icon '{icon}': {e}")
            self._publish_error("play_audio_icon", e)
            return

        self._last_audio_icon_timestamp = now
        self._last_audio_icon_level = level
        announcement.icon_played = icon
        self._publish(EventType.AUDIO_ICON_PLAYED, announcement)

    async def _speak(self, text: str) -> None:
        try:
            await asyncio.wait_for(self.audio.speak(text), timeout=self.config.speech_timeout)
        except asyncio.TimeoutError:
            self.logger.warning(f"Speech timed out after {pretty_duration(self.config.speech_timeout)}")
        except Exception as e:
            self.logger.error(f"Failed to speak announcement: {e}")
            self._publish_error("speak", e)

    async def _dwell(self, remaining: float) -> None:
        """Wait out the rest of the duration, or until deactivated."""
        if remaining <= 0 or not self._active:
            return
        try:
            await asyncio.wait_for(self._deactivated.wait(), timeout=remaining)
        except asyncio.TimeoutError:
            pass

    def _abandon(self, announcement: Announcement, visual_handle: Optional[StringMessage]) -> None:
        if visual_handle is not None and visual_handle.is_attached:
            visual_handle.hide()
        announcement.state = AnnouncementState.ABANDONED
        self.logger.debug(f"Announcement #{announcement.id} canceled (inactive)")
        self._publish(EventType.ANNOUNCEMENT_ABANDONED, announcement)

    def _publish(self, event_type: EventType, announcement: Announcement) -> None:
        if self.event_bus is not None:
            self.event_bus.emit_nowait(event_type, announcement.to_dict(), source="announcement_sequencer")

    def _publish_error(self, operation: str, error: Exception) -> None:
        if self.event_bus is not None:
            self.event_bus.emit_nowait(EventType.ERROR_OCCURRED, {
                "error": str(error),
                "error_type": type(error).__name__,
                "operation": operation,
            }, source="announcement_sequencer")

    def deactivate(self) -> None:
        """Stop starting new work; queued announcements drain without output."""
        if self.config.verbose:
            self.logger.info("Deactivating announcement sequencer...")
        self._active = False
        self._deactivated.set()
