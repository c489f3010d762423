"""nixos-rebuild invocation for nixupgrader."""

from typing import Callable, List

from nixupgrader.errors import RebuildFailedError
from nixupgrader.errors_catalog import actionable_error
from nixupgrader.models import UpgradeConfig

REBUILD_PROGRAM = "nixos-rebuild"


def build_rebuild_command(config: UpgradeConfig) -> List[str]:
    """Return the nixos-rebuild argument list for ``config``.

    A flake source always replaces the implicit channel upgrade; a channel
    override is independent of both and only adds a NIX_PATH entry.
    """
    cmd = [REBUILD_PROGRAM, config.operation]

    if config.source is None:
        cmd.append("--upgrade")
    else:
        cmd.extend(["--refresh", "--flake", config.source])

    if config.channel_override is not None:
        cmd.extend(["-I", f"nixpkgs={config.channel_override}/nixexprs.tar.xz"])

    cmd.extend(config.extra_flags)
    return cmd


class RebuildService:
    def __init__(self, logger, run_cmd: Callable):
        self.logger = logger
        self.run_cmd = run_cmd

    def run_upgrade(self, config: UpgradeConfig):
        cmd = build_rebuild_command(config)
        self.logger.debug("Running command: %s", cmd)

        result = self.run_cmd(cmd)
        if result.returncode != 0:
            raise RebuildFailedError(
                result.returncode,
                cmd,
                actionable_error("rebuild_failed", returncode=result.returncode),
            )
