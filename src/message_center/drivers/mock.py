"""
Mock driver implementations.
Stand in for the real display and audio backends in tests and the demo.
"""

import asyncio
import logging
from typing import List, Optional, Tuple

from .audio import AudioDriver
from .display import DisplayDriver, DisplayDriverError

logger = logging.getLogger(__name__)


class MockDisplayDriver(DisplayDriver):
    """Records every pushed line; can be told to fail or to be slow."""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.lines: List[str] = []
        self.failures = 0

    @property
    def name(self) -> str:
        return "mock"

    @property
    def current(self) -> Optional[str]:
        """The last line the device accepted."""
        return self.lines[-1] if self.lines else None

    async def show_message(self, line: str) -> None:
        if self.fail:
            self.failures += 1
            raise DisplayDriverError("mock display is switched off")
        self.lines.append(line)
        logger.debug(f"[display] {line!r}")
        if self.delay:
            await asyncio.sleep(self.delay)


class MockAudioDriver(AudioDriver):
    """Records icons and speech as ('icon', id) / ('speak', text) tuples."""

    def __init__(self, icon_delay: float = 0.0, speech_delay: float = 0.0):
        self.icon_delay = icon_delay
        self.speech_delay = speech_delay
        self.calls: List[Tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def icons(self) -> List[str]:
        return [value for kind, value in self.calls if kind == "icon"]

    @property
    def spoken(self) -> List[str]:
        return [value for kind, value in self.calls if kind == "speak"]

    async def play_audio_icon(self, icon: str) -> None:
        self.calls.append(("icon", icon))
        logger.debug(f"[audio] icon {icon}")
        if self.icon_delay:
            await asyncio.sleep(self.icon_delay)

    async def speak(self, text: str) -> None:
        self.calls.append(("speak", text))
        logger.debug(f"[audio] speak {text!r}")
        if self.speech_delay:
            await asyncio.sleep(self.speech_delay)
