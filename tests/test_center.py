"""
Tests for the MessageCenter facade and the loop timers it is built on.
"""

import asyncio
import pytest

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from message_center import MessageCenter
from message_center.core.config import MessageCenterConfig
from message_center.core.event_bus import EventBus, EventType
from message_center.core.timers import Timer
from message_center.core.types import AnnouncementState
from message_center.drivers.mock import MockAudioDriver, MockDisplayDriver


@pytest.fixture
def drivers():
    return MockDisplayDriver(), MockAudioDriver()


@pytest.fixture
def center(drivers):
    display, audio = drivers
    center = MessageCenter(display, audio, config=MessageCenterConfig(default_duration=0.05))
    yield center
    center.dispose()


class TestMessageCenter:
    """Facade behaviour."""

    @pytest.mark.asyncio
    async def test_messages_and_announcement_share_the_line(self, center, drivers):
        display, audio = drivers
        center.show_message("Washing")
        progress = center.show_progress(value=0.5, show_bar=False)

        task = asyncio.ensure_future(center.announce("Doorbell", 2))
        await asyncio.sleep(0.02)
        assert display.current == "Washing | 50.0% | Doorbell"

        result = await task
        await asyncio.sleep(0.01)
        assert result.state == AnnouncementState.COMPLETED
        assert display.current == "Washing | 50.0%"
        assert audio.calls == [("icon", "low-low-high-high"), ("speak", "Doorbell")]

        progress.value = 1.0
        await asyncio.sleep(0.01)
        assert display.current == "Washing | 100.0%"

    @pytest.mark.asyncio
    async def test_muted_accessor_is_read_each_time(self, drivers):
        display, audio = drivers
        state = {"muted": True}
        center = MessageCenter(display, audio, muted=lambda: state["muted"],
                               config=MessageCenterConfig(default_duration=0))

        await center.announce("silent", 9)
        state["muted"] = False
        await center.announce("loud", 9)

        assert audio.calls == [("icon", "low-low-high-low-strident"), ("speak", "loud")]
        center.dispose()

    @pytest.mark.asyncio
    async def test_get_state(self, center):
        center.show_message("status")
        center.create_hud_message("hud", on=True)
        state = center.get_state()

        assert state["active"] is True
        assert state["muted"] is False
        assert state["messages"] == 2
        assert state["line"] == "status | hud"
        assert state["pending_announcements"] == 0

    @pytest.mark.asyncio
    async def test_dispose_stops_everything(self, drivers):
        display, audio = drivers
        bus = EventBus()
        center = MessageCenter(display, audio, config=MessageCenterConfig(), event_bus=bus)
        spinner = center.show_spinner()
        in_flight = asyncio.ensure_future(center.announce("long", 1, duration=30))
        await asyncio.sleep(0.02)
        calls = list(audio.calls)

        center.dispose()
        center.dispose()

        result = await asyncio.wait_for(in_flight, timeout=0.5)
        late = await asyncio.wait_for(center.announce("late", 9), timeout=0.5)

        assert not center.active
        assert not spinner.is_attached
        assert result.state == AnnouncementState.ABANDONED
        assert late.state == AnnouncementState.ABANDONED
        assert audio.calls == calls
        assert len(bus.get_event_history(EventType.SYSTEM_STOPPED)) == 1


class TestTimer:
    """One-shot and periodic timers."""

    @pytest.mark.asyncio
    async def test_one_shot_fires_once(self):
        fired = []
        timer = Timer(0.01, lambda: fired.append(1))
        assert timer.is_active
        await asyncio.sleep(0.05)
        assert fired == [1]
        assert not timer.is_active

    @pytest.mark.asyncio
    async def test_periodic_fires_until_cancelled(self):
        fired = []
        timer = Timer.periodic_timer(0.01, lambda: fired.append(1))
        await asyncio.sleep(0.055)
        timer.cancel()
        count = len(fired)
        assert count >= 3
        assert timer.tick == count

        await asyncio.sleep(0.03)
        assert len(fired) == count
        assert not timer.is_active

    @pytest.mark.asyncio
    async def test_cancel_before_firing(self):
        fired = []
        timer = Timer(0.01, lambda: fired.append(1))
        timer.cancel()
        timer.cancel()
        await asyncio.sleep(0.03)
        assert fired == []
