"""
Messages: units of text that share the composed display line.

A message is created detached, attached with DisplayComposer.show() and
detached again with hide(). While attached it holds a back-reference to its
composer and calls update() whenever its text may have changed; the composer
decides when to actually push anything.
"""

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Tuple

from .core.timers import Timer

if TYPE_CHECKING:
    from .composer import DisplayComposer


SPINNER_INTERVAL = 0.22


class Message(ABC):
    """Abstract unit of displayable text with a lifecycle."""

    # Variants owning an animation set this so the composer clears the
    # display once they are gone.
    requires_cleanup = False

    def __init__(self):
        self._center: Optional["DisplayComposer"] = None

    @property
    @abstractmethod
    def message(self) -> Optional[str]:
        """Current text, or None to contribute nothing."""

    @property
    def is_attached(self) -> bool:
        return self._center is not None

    def started(self) -> None:
        """Called when the message is added to a composer."""

    def ended(self) -> None:
        """Called when the message is removed from its composer."""

    def update(self) -> None:
        if self._center is not None:
            self._center._mark_needs_update()

    def hide(self) -> None:
        assert self._center is not None, f"{self!r} is not shown"
        self._center._remove(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.message!r}>" if self.is_attached else f"<{type(self).__name__}>"


class StringMessage(Message):
    """Static text."""

    def __init__(self, message: Optional[str]):
        super().__init__()
        self._message = message

    @property
    def message(self) -> Optional[str]:
        return self._message

    @message.setter
    def message(self, value: Optional[str]) -> None:
        if self._message == value:
            return
        self._message = value
        self.update()


class HudMessage(Message):
    """Label that can be toggled and that hides itself after a timeout.

    With a reminder it keeps coming back: visible for `timeout` seconds,
    hidden for `reminder` seconds, and so on until disabled.
    """

    requires_cleanup = True

    def __init__(self, label: Optional[str], timeout: Optional[float] = None,
                 reminder: Optional[float] = None):
        super().__init__()
        self._label = label
        self.timeout = timeout
        self.reminder = reminder
        self._enabled = False
        self._hidden = False
        self._timer: Optional[Timer] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if self._enabled == value:
            return
        self._enabled = value
        self._hidden = False
        self._cancel_timer()
        if value and self.timeout is not None:
            self._timer = Timer(self.timeout, self._trigger_timeout)
        self.update()

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    @property
    def label(self) -> Optional[str]:
        return self._label

    @label.setter
    def label(self, value: Optional[str]) -> None:
        if self._label == value:
            return
        self._label = value
        self.update()

    @property
    def message(self) -> Optional[str]:
        if not self._enabled or self._hidden:
            return None
        return self._label

    def started(self) -> None:
        if self._enabled and not self._hidden and self.timeout is not None and self._timer is None:
            self._timer = Timer(self.timeout, self._trigger_timeout)

    def ended(self) -> None:
        self._cancel_timer()
        self._hidden = False

    def _trigger_timeout(self) -> None:
        self._timer = None
        self._hidden = True
        self.update()
        if self.reminder is not None:
            self._timer = Timer(self.reminder, self._trigger_reminder)

    def _trigger_reminder(self) -> None:
        self._timer = None
        self._hidden = False
        self.update()
        if self.timeout is not None:
            self._timer = Timer(self.timeout, self._trigger_timeout)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class SpinnerMessage(Message):
    """Animated activity indicator."""

    # The display font is proportional; these frames keep a constant width.
    FRAMES: Tuple[str, ...] = (
        '|IIII', 'I|III', 'II|II', 'III|I', 'IIII|', 'III|I', 'II|II', 'I|III',
    )

    requires_cleanup = True

    def __init__(self, interval: float = SPINNER_INTERVAL):
        super().__init__()
        self.interval = interval
        self.frame = 0
        self._timer: Optional[Timer] = None

    def started(self) -> None:
        assert self._timer is None
        self._timer = Timer.periodic_timer(self.interval, self._advance)

    def ended(self) -> None:
        assert self._timer is not None
        self._timer.cancel()
        self._timer = None

    def _advance(self) -> None:
        self.frame += 1
        self.update()

    @property
    def message(self) -> str:
        assert self._timer is not None, "spinner is not running"
        return self.FRAMES[self.frame % len(self.FRAMES)]


class ProgressMessage(Message):
    """Ten-cell progress bar and/or percentage."""

    CELLS = 10

    def __init__(self, min: float = 0.0, max: float = 1.0, value: float = 0.0,
                 show_bar: bool = True, show_value: bool = True):
        super().__init__()
        assert max > min, "progress range must not be empty"
        self.min = min
        self.max = max
        self.show_bar = show_bar
        self.show_value = show_value
        self._value = self._clamp(value)

    def _clamp(self, value: float) -> float:
        return float(min(self.max, max(self.min, value)))

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, new_value: float) -> None:
        new_value = self._clamp(new_value)
        if self._value == new_value:
            return
        self._value = new_value
        self.update()

    @property
    def fraction(self) -> float:
        return (self._value - self.min) / (self.max - self.min)

    @property
    def message(self) -> str:
        parts = []
        if self.show_bar:
            filled = math.floor(self.CELLS * self.fraction)
            parts.append('[' + '*' * filled + ' ' * (self.CELLS - filled) + ']')
        if self.show_value:
            parts.append(f"{100.0 * self.fraction:.1f}%")
        return ' '.join(parts)
