"""
Output drivers: the display surface and the speech/audio channel.
"""

from .display import DisplayDriver, DisplayDriverError
from .audio import AudioDriver, AudioDriverError
from .mock import MockDisplayDriver, MockAudioDriver

__all__ = [
    "DisplayDriver",
    "DisplayDriverError",
    "AudioDriver",
    "AudioDriverError",
    "MockDisplayDriver",
    "MockAudioDriver",
]
