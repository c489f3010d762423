from datetime import datetime

import pytest

from nixupgrader.errors import WindowCheckError
from nixupgrader.models import RebootWindow
from nixupgrader.services.reboot_window import ClockService, RebootWindowService, is_within_window


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


@pytest.mark.parametrize(
    "now, expected",
    [
        ("00:59", False),
        ("01:00", False),
        ("01:01", True),
        ("03:30", True),
        ("04:59", True),
        ("05:00", False),
        ("23:00", False),
    ],
)
def test_same_day_window_is_strict_on_both_bounds(now, expected):
    assert is_within_window(RebootWindow(lower="01:00", upper="05:00"), now) is expected


@pytest.mark.parametrize(
    "now, expected",
    [
        ("23:30", True),
        ("00:00", True),
        ("05:59", True),
        ("06:00", False),
        ("12:00", False),
        ("22:00", False),
        ("22:01", True),
    ],
)
def test_window_crossing_midnight(now, expected):
    assert is_within_window(RebootWindow(lower="22:00", upper="06:00"), now) is expected


def test_equal_bounds_are_treated_as_crossing_midnight():
    window = RebootWindow(lower="03:00", upper="03:00")

    assert is_within_window(window, "02:59") is True
    assert is_within_window(window, "03:00") is False
    assert is_within_window(window, "03:01") is True


def test_clock_service_formats_zero_padded_time():
    clock = ClockService(now=lambda: datetime(2024, 1, 1, 7, 5))

    assert clock.current_time() == "07:05"


def test_clock_service_wraps_time_source_failure():
    def broken_clock():
        raise OSError("no clock")

    with pytest.raises(WindowCheckError, match="Failed to get current time"):
        ClockService(now=broken_clock).current_time()


def test_reboot_window_service_uses_clock():
    service = RebootWindowService(
        logger=DummyLogger(),
        clock=ClockService(now=lambda: datetime(2024, 1, 1, 23, 30)),
    )

    assert service.is_reboot_permitted(RebootWindow(lower="22:00", upper="06:00")) is True
    assert service.is_reboot_permitted(RebootWindow(lower="01:00", upper="05:00")) is False
