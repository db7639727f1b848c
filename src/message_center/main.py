"""
Message Center demo.

Wires the message center to mock drivers and walks through messages and
announcements, logging what the display and the audio channel receive.
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

from .center import MessageCenter
from .core.config import MessageCenterConfig
from .core.event_bus import Event, EventBus, EventType
from .drivers.mock import MockAudioDriver, MockDisplayDriver

logger = logging.getLogger('message_center.main')


class Demo:
    """Demo application around a MessageCenter."""

    def __init__(self, config: MessageCenterConfig, muted: bool = False,
                 fail_display: bool = False):
        self.config = config
        self.muted = muted
        self.display = MockDisplayDriver(fail=fail_display)
        self.audio = MockAudioDriver(icon_delay=0.3, speech_delay=1.0)
        self.event_bus: Optional[EventBus] = None
        self.center: Optional[MessageCenter] = None

    async def initialize(self) -> None:
        self.event_bus = await EventBus.get_instance()
        await self.event_bus.start()
        self.event_bus.subscribe(
            [EventType.ANNOUNCEMENT_COMPLETED, EventType.ANNOUNCEMENT_ABANDONED],
            self._on_announcement_finished,
        )
        self.center = MessageCenter(
            self.display, self.audio,
            muted=lambda: self.muted,
            config=self.config,
            event_bus=self.event_bus,
        )

    async def _on_announcement_finished(self, event: Event) -> None:
        logger.info(f"Announcement #{event.data['id']} {event.data['state']}: {event.data['text']!r}")

    async def run(self) -> None:
        center = self.center
        spinner = center.show_spinner()
        progress = center.show_progress()
        hud = center.create_hud_message("Door open", on=True, timeout=2.0, reminder=1.0)

        announcements = asyncio.gather(
            center.announce("Laundry is done", 3, duration=2.0),
            center.announce("Someone is at the door", 3, duration=2.0),
            center.announce("Smoke detected", 9, duration=3.0),
        )

        for step in range(11):
            progress.value = step / 10
            await asyncio.sleep(0.5)

        await announcements
        hud.disable()
        spinner.hide()
        progress.hide()
        await asyncio.sleep(0.5)

    async def cleanup(self) -> None:
        if self.center:
            self.center.dispose()
        if self.event_bus:
            await self.event_bus.stop()
        logger.info(f"Display received {len(self.display.lines)} updates, "
                    f"audio received {len(self.audio.calls)} calls")


def setup_logging(level_name: str) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Message center demo with mock drivers")
    parser.add_argument("--verbose", action="store_true", help="log every announcement request")
    parser.add_argument("--muted", action="store_true", help="suppress audio icons and speech")
    parser.add_argument("--fail-display", action="store_true", help="make every display update fail")
    parser.add_argument("--log-level", default=None, help="override the configured log level")
    return parser.parse_args(argv)


async def main(argv=None) -> None:
    """Main application entry point."""
    args = parse_args(argv)
    config = MessageCenterConfig.load()
    if args.verbose:
        config.verbose = True
    setup_logging(args.log_level or config.log_level)

    demo = Demo(config, muted=args.muted, fail_display=args.fail_display)
    await demo.initialize()

    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(demo.run())

    def signal_handler():
        logger.info("Received signal, shutting down...")
        task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            pass

    try:
        await task
    except asyncio.CancelledError:
        logger.info("Demo interrupted")
    finally:
        await demo.cleanup()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
