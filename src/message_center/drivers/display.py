"""
Display Driver Protocol.

Defines the interface the composer pushes composed lines through.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..core.types import MessageCenterError


class DisplayDriver(ABC):
    """
    Abstract base class for remote text displays.

    Implementations talk to the actual device (a television overlay, an
    LCD, a status page). The composer treats every failure as transient.
    """

    @abstractmethod
    async def show_message(self, line: str) -> None:
        """
        Replace the text currently shown on the device.

        Args:
            line: The composed line; an empty string clears the display

        Raises:
            DisplayDriverError: If the device could not be updated
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


class DisplayDriverError(MessageCenterError):
    """The display could not be updated (device off, unreachable, ...)."""
    pass
