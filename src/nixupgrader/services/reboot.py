"""Reboot scheduling service."""

from typing import Callable

from nixupgrader.errors import RebootTriggerError

REBOOT_DELAY = "+1"
REBOOT_MESSAGE = "NixOS upgrade requires reboot"


class RebootService:
    def __init__(self, logger, run_cmd: Callable):
        self.logger = logger
        self.run_cmd = run_cmd

    def schedule_reboot(self, delay: str = REBOOT_DELAY, message: str = REBOOT_MESSAGE):
        cmd = ["shutdown", "-r", delay, message]
        self.logger.info("Initiating reboot since kernel, initrd or modules have changed")

        result = self.run_cmd(cmd, spawn_error=RebootTriggerError)
        if result.returncode != 0:
            raise RebootTriggerError(
                cmd,
                message=f"shutdown failed with exit code {result.returncode}, reboot not scheduled",
            )
