"""Reboot time-window evaluation."""

from datetime import datetime
from typing import Callable

from nixupgrader.errors import WindowCheckError
from nixupgrader.models import RebootWindow
from nixupgrader.services.config_loader import TIME_OF_DAY


def is_within_window(window: RebootWindow, now: str) -> bool:
    """Return whether ``now`` lies strictly inside ``window``.

    All values are zero-padded 24-hour "HH:MM" strings, so plain string
    comparison orders them correctly. A window whose lower bound is not below
    its upper bound wraps around midnight. Both bounds are exclusive: a time
    equal to either bound is outside the window.
    """
    if window.lower < window.upper:
        return window.lower < now < window.upper
    return now < window.upper or now > window.lower


class ClockService:
    """Provides the current local time of day."""

    def __init__(self, now: Callable[[], datetime] = datetime.now):
        self._now = now

    def current_time(self) -> str:
        try:
            current = self._now().strftime("%H:%M")
        except (OSError, ValueError, OverflowError) as exc:
            raise WindowCheckError(f"Failed to get current time: {exc}") from exc

        if not TIME_OF_DAY.match(current):
            raise WindowCheckError(f"Failed to parse current time: {current!r}")
        return current


class RebootWindowService:
    def __init__(self, logger, clock: ClockService):
        self.logger = logger
        self.clock = clock

    def is_reboot_permitted(self, window: RebootWindow) -> bool:
        now = self.clock.current_time()
        permitted = is_within_window(window, now)
        self.logger.debug(
            "Reboot window %s-%s, current time %s: %s",
            window.lower,
            window.upper,
            now,
            "inside" if permitted else "outside",
        )
        return permitted
