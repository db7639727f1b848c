"""
Core Types for the Message Center

Shared type definitions used across the composer and the sequencer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
import time


class AnnouncementState(Enum):
    """Lifecycle of a single announcement."""
    QUEUED = "queued"
    WAITING = "waiting"
    SHOWING = "showing"
    ICON = "icon"
    SPEAKING = "speaking"
    DWELLING = "dwelling"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


@dataclass
class Announcement:
    """A request for exclusive use of the display and audio channel."""
    id: int
    text: str
    level: int
    verbal: bool = True
    audio_icon: bool = True
    visual: bool = True
    duration: float = 5.0
    state: AnnouncementState = AnnouncementState.QUEUED
    icon_played: Optional[str] = None
    queued_at: float = field(default_factory=time.time)

    @property
    def is_finished(self) -> bool:
        """Check if the announcement reached a terminal state."""
        return self.state in (AnnouncementState.COMPLETED, AnnouncementState.ABANDONED)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for event payloads."""
        return {
            "id": self.id,
            "text": self.text,
            "level": self.level,
            "verbal": self.verbal,
            "audio_icon": self.audio_icon,
            "visual": self.visual,
            "duration": self.duration,
            "state": self.state.value,
            "icon_played": self.icon_played,
        }


class MessageCenterError(Exception):
    """Base exception for message center errors."""
    pass


class ConfigurationError(MessageCenterError):
    """Error in message center configuration."""
    pass
