"""
Audio Driver Protocol.

Defines the speech and audio icon capabilities the sequencer relies on.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..core.types import MessageCenterError


class AudioDriver(ABC):
    """
    Abstract base class for the speech/audio channel.

    Both operations complete when playback has finished. The sequencer
    bounds each call with its own timeout.
    """

    @abstractmethod
    async def play_audio_icon(self, icon: str) -> None:
        """
        Play a short non-verbal cue.

        Args:
            icon: Identifier of the icon, e.g. 'low-low-high-high'
        """
        pass

    @abstractmethod
    async def speak(self, text: str) -> None:
        """
        Speak text through the text-to-speech backend.

        Args:
            text: The text to speak
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of this driver."""
        pass

    def get_info(self) -> Dict[str, Any]:
        """Get information about this driver."""
        return {"name": self.name}


class AudioDriverError(MessageCenterError):
    """The audio backend failed to play an icon or speak."""
    pass
