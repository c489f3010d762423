import logging
from typing import List, Optional

from rich.console import Console

from .errors import NetworkUnavailable, UpgraderError, WindowCheckError
from .errors_catalog import actionable_error
from .models import RunState, UpgradeConfig
from .services.command_runner import CommandRunner
from .services.config_loader import ConfigLoader
from .services.network import DefaultRouteProbe, NetworkProbeService
from .services.reboot import RebootService
from .services.reboot_window import ClockService, RebootWindowService
from .services.rebuild import RebuildService
from .services.system_image import SystemImageService

console = Console()
logger = logging.getLogger("nixupgrader")

DEFAULT_CONFIG_PATH = "/etc/nix-upgrade.json"


class NixosUpgrader:
    """Runs one unattended upgrade: network gate, rebuild, then an optional reboot."""

    REBOOT_OPERATION = "boot"

    def __init__(
        self,
        config_path: str = DEFAULT_CONFIG_PATH,
        logger: logging.Logger = logger,
        console: Console = console,
        command_runner: Optional[CommandRunner] = None,
        network_probe=None,
        clock: Optional[ClockService] = None,
    ):
        self.config_path = config_path
        self.logger = logger
        self.console = console
        self.config: Optional[UpgradeConfig] = None
        self.states: List[RunState] = [RunState.START]
        self.error: Optional[BaseException] = None

        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.config_loader = ConfigLoader(logger=logger)
        self.network_probe = network_probe
        self.rebuild_service = RebuildService(logger=logger, run_cmd=self._run_cmd)
        self.system_image_service = SystemImageService(logger=logger, run_cmd=self._run_cmd)
        self.reboot_window_service = RebootWindowService(
            logger=logger,
            clock=clock or ClockService(),
        )
        self.reboot_service = RebootService(logger=logger, run_cmd=self._run_cmd)

    @property
    def state(self) -> RunState:
        return self.states[-1]

    def _advance(self, state: RunState):
        self.logger.debug("State: %s -> %s", self.state.value, state.value)
        self.states.append(state)

    def _run_cmd(self, cmd: List[str], capture_output: bool = False, **kwargs):
        return self.command_runner.run(cmd, capture_output=capture_output, **kwargs)

    def _get_network_probe(self, config: UpgradeConfig):
        if self.network_probe is not None:
            return self.network_probe
        if config.network_probe == "route":
            return DefaultRouteProbe(logger=self.logger)
        return NetworkProbeService(logger=self.logger)

    def load_config(self) -> UpgradeConfig:
        config = self.config_loader.load(self.config_path)
        self.logger.debug("Using configuration: %s", config)
        return config

    def check_network(self, config: UpgradeConfig):
        if not self._get_network_probe(config).is_network_available():
            self.logger.warning("Network is not available, skipping upgrade")
            raise NetworkUnavailable(actionable_error("network_unavailable"))

    def run_upgrade(self, config: UpgradeConfig):
        self.logger.info("Running NixOS upgrade with operation: %s", config.operation)
        self.rebuild_service.run_upgrade(config)

    def wants_reboot_check(self, config: UpgradeConfig) -> bool:
        return config.allow_reboot and config.operation == self.REBOOT_OPERATION

    def reboot_if_needed(self, config: UpgradeConfig) -> bool:
        """Schedules a reboot when the new build changed the boot image.

        Returns whether a reboot was scheduled. A broken clock never blocks a
        required reboot; being outside the window defers it to the next run.
        """
        changed = self.system_image_service.has_image_changed()
        self._advance(RunState.IMAGE_COMPARED)
        if not changed:
            return False

        if config.reboot_window is not None:
            try:
                permitted = self.reboot_window_service.is_reboot_permitted(config.reboot_window)
            except WindowCheckError as exc:
                self.logger.warning("Failed to check reboot window, proceeding with reboot: %s", exc)
                permitted = True
            self._advance(RunState.WINDOW_CHECKED)

            if not permitted:
                self.logger.info("Outside of configured reboot window, skipping reboot.")
                return False

        self.reboot_service.schedule_reboot()
        self._advance(RunState.REBOOTED)
        return True

    def run(self) -> int:
        exit_code = 1

        try:
            self.logger.info("Starting NixOS upgrade on shutdown")

            config = self.load_config()
            self.config = config

            self.check_network(config)
            self._advance(RunState.NETWORK_CHECKED)

            self.run_upgrade(config)
            self._advance(RunState.UPGRADED)

            if self.wants_reboot_check(config):
                self.reboot_if_needed(config)

            self._advance(RunState.DONE)
            self.logger.info("NixOS upgrade completed successfully")
            exit_code = 0
            return exit_code

        except KeyboardInterrupt:
            self.console.print("[bold red]Operation cancelled.[/bold red]")
            self.logger.info("Operation cancelled")
            self._advance(RunState.FAILED)
            return exit_code
        except UpgraderError as exc:
            self.console.print(f"[bold red]Error:[/bold red] {exc}")
            self.logger.error(str(exc))
            self._advance(RunState.FAILED)
            self.error = exc
            return exit_code
        except Exception as exc:
            self.console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            self.logger.exception("Unexpected error")
            self._advance(RunState.FAILED)
            self.error = exc
            return exit_code
