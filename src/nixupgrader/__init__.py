"""
nixupgrader - Unattended NixOS upgrade on shutdown
"""

__version__ = "0.1.0"

from .core import NixosUpgrader, UpgraderError

__all__ = ["NixosUpgrader", "UpgraderError"]
