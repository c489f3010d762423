"""Shared domain models for nixupgrader."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

DEFAULT_OPERATION = "boot"
DEFAULT_FLAGS: Tuple[str, ...] = ("--no-build-output",)


@dataclass(frozen=True)
class RebootWindow:
    """Time-of-day window, as zero-padded "HH:MM" strings, in which reboots are allowed."""

    lower: str
    upper: str


@dataclass(frozen=True)
class UpgradeConfig:
    """Desired upgrade behaviour, loaded once per run."""

    operation: str = DEFAULT_OPERATION
    source: Optional[str] = None
    channel_override: Optional[str] = None
    extra_flags: Tuple[str, ...] = field(default=DEFAULT_FLAGS)
    allow_reboot: bool = False
    reboot_window: Optional[RebootWindow] = None
    network_probe: str = "connect"


@dataclass(frozen=True)
class SystemImageIdentity:
    """Resolved kernel, initrd and kernel-modules paths of one system profile."""

    profile_root: str = field(compare=False)
    resolved: bytes


class RunState(str, Enum):
    START = "start"
    NETWORK_CHECKED = "network_checked"
    UPGRADED = "upgraded"
    IMAGE_COMPARED = "image_compared"
    WINDOW_CHECKED = "window_checked"
    REBOOTED = "rebooted"
    DONE = "done"
    FAILED = "failed"
