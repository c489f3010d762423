"""Subprocess execution service for nixupgrader."""

import subprocess
from typing import List, Type

from nixupgrader.errors import RebuildSpawnError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger, subprocess_module=subprocess):
        self.logger = logger
        self.subprocess = subprocess_module

    def run(
        self,
        cmd: List[str],
        capture_output: bool = False,
        spawn_error: Type[RebuildSpawnError] = RebuildSpawnError,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        try:
            result = self.subprocess.run(cmd, capture_output=capture_output)
        except OSError as exc:
            raise spawn_error(cmd, exc) from exc

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.decode(errors="replace").strip())

        return result
