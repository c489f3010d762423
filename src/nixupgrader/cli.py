import logging

import click
from rich.logging import RichHandler

from . import __version__
from .core import DEFAULT_CONFIG_PATH, NixosUpgrader

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
)


@click.command()
@click.version_option(__version__, prog_name="nixos-upgrade")
@click.option(
    "-c",
    "--config",
    type=click.Path(),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the JSON (or YAML) upgrade configuration.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(config, verbose, log_file):
    """Upgrade NixOS unattended and reboot when the new build needs it."""
    logger = logging.getLogger("nixupgrader")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    upgrader = NixosUpgrader(config_path=config, logger=logger)
    raise SystemExit(upgrader.run())


if __name__ == "__main__":
    main()
