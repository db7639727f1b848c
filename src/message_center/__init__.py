"""
Message Center - Source Package

Coordinates a shared text display and speech/audio channel:

Core:
- core: Event bus, configuration, timers and shared types
- drivers: Display and audio driver interfaces (plus mocks)

Features:
- messages: Static, HUD, spinner and progress messages
- composer: Debounced composition of the live messages into one line
- sequencer: Strict FIFO announcements with audio icons and speech
- center: MessageCenter facade wiring it all together
"""

from .center import MessageCenter
from .composer import DisplayComposer
from .messages import HudMessage, Message, ProgressMessage, SpinnerMessage, StringMessage
from .sequencer import AnnouncementSequencer

__version__ = '1.0.0'

__all__ = [
    'MessageCenter',
    'DisplayComposer',
    'AnnouncementSequencer',
    'Message',
    'StringMessage',
    'HudMessage',
    'SpinnerMessage',
    'ProgressMessage',
]
