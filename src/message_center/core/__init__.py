"""
Core Package

Core infrastructure for the message center:
- event_bus: pub/sub notifications about display and announcement activity
- config: Configuration management
- timers: one-shot and periodic loop timers
- types: Shared type definitions and exceptions
"""

from .event_bus import EventBus, EventType, Event
from .config import MessageCenterConfig
from .timers import Timer
from .types import (
    Announcement,
    AnnouncementState,
    MessageCenterError,
    ConfigurationError,
)

__all__ = [
    # Event bus
    'EventBus',
    'EventType',
    'Event',
    # Config
    'MessageCenterConfig',
    # Timers
    'Timer',
    # Types
    'Announcement',
    'AnnouncementState',
    'MessageCenterError',
    'ConfigurationError',
]
