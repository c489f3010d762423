"""Domain errors for nixupgrader."""

from typing import List, Optional, Sequence


class UpgraderError(RuntimeError):
    """Raised when the upgrade cannot continue safely."""


class ConfigError(UpgraderError):
    """Base class for configuration loading failures."""


class ConfigReadError(ConfigError):
    """The configuration file exists but could not be read."""


class ConfigParseError(ConfigError):
    """The configuration file content is malformed."""


class NetworkCheckError(UpgraderError):
    """The connectivity probe itself failed."""


class NetworkUnavailable(UpgraderError):
    """The probe ran and found no outbound connectivity."""

    def __init__(self, message: str = "Network is not available"):
        super().__init__(message)


class RebuildSpawnError(UpgraderError):
    """An external command could not be started."""

    def __init__(
        self,
        cmd: Sequence[str],
        cause: Optional[OSError] = None,
        message: Optional[str] = None,
    ):
        self.cmd: List[str] = list(cmd)
        self.cause = cause
        super().__init__(message or f"Failed to execute {self.cmd[0]}: {cause}")


class ImageIntrospectionError(RebuildSpawnError):
    """The booted or built system image could not be inspected."""


class RebootTriggerError(RebuildSpawnError):
    """The reboot could not be scheduled."""


class RebuildFailedError(UpgraderError):
    """nixos-rebuild ran and returned a failure status."""

    def __init__(self, returncode: int, cmd: Sequence[str], message: Optional[str] = None):
        self.returncode = returncode
        self.cmd = list(cmd)
        super().__init__(message or f"{self.cmd[0]} failed with exit code: {returncode}")


class WindowCheckError(UpgraderError):
    """The current time could not be determined for the reboot window."""
