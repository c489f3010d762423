"""Configuration loader for nixupgrader."""

import json
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from nixupgrader.errors import ConfigParseError, ConfigReadError
from nixupgrader.errors_catalog import actionable_error
from nixupgrader.models import DEFAULT_FLAGS, DEFAULT_OPERATION, RebootWindow, UpgradeConfig

TIME_OF_DAY = re.compile(r"^\d{2}:\d{2}$")


class ConfigLoader:
    """Loads the JSON (or YAML) upgrade configuration with per-field defaults."""

    KNOWN_OPERATIONS = [
        "switch",
        "boot",
        "test",
        "build",
        "dry-build",
        "dry-run",
        "dry-activate",
        "build-vm",
        "build-vm-with-bootloader",
    ]
    VALID_PROBES = ["connect", "route"]
    YAML_SUFFIXES = {".yml", ".yaml"}

    SUPPORTED_KEYS = {
        "operation",
        "flake",
        "source",
        "channel",
        "flags",
        "allowReboot",
        "rebootWindow",
        "networkProbe",
    }

    def __init__(self, logger):
        self.logger = logger

    def load(self, config_path: Union[str, Path]) -> UpgradeConfig:
        path = Path(config_path)
        try:
            if not path.exists():
                self.logger.warning("Config file not found at %s, using defaults", path)
                return UpgradeConfig()
            raw = path.read_bytes()
        except OSError as exc:
            raise ConfigReadError(
                actionable_error("config_unreadable", path=path, cause=exc)
            ) from exc

        parsed = self._parse(path, raw)
        if parsed is None:
            return UpgradeConfig()
        if not isinstance(parsed, dict):
            raise ConfigParseError(
                actionable_error(
                    "config_malformed",
                    path=path,
                    cause="expected an object at the root",
                )
            )

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            self.logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

        return self._build(path, parsed)

    def _parse(self, path: Path, raw: bytes) -> Any:
        try:
            text = raw.decode("utf-8")
            if path.suffix.lower() in self.YAML_SUFFIXES:
                return yaml.safe_load(text)
            return json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ConfigParseError(
                actionable_error("config_malformed", path=path, cause=exc)
            ) from exc

    def _build(self, path: Path, data: Dict[str, Any]) -> UpgradeConfig:
        operation = self._optional_str(path, data, "operation") or DEFAULT_OPERATION
        if operation not in self.KNOWN_OPERATIONS:
            self.logger.warning("Passing unrecognised operation '%s' to nixos-rebuild", operation)

        source = self._optional_str(path, data, "flake") or self._optional_str(
            path, data, "source"
        )

        network_probe = self._optional_str(path, data, "networkProbe") or "connect"
        if network_probe not in self.VALID_PROBES:
            self._invalid(
                path,
                "networkProbe",
                f"expected one of {', '.join(self.VALID_PROBES)}, got '{network_probe}'",
            )

        return UpgradeConfig(
            operation=operation,
            source=source,
            channel_override=self._optional_str(path, data, "channel") or None,
            extra_flags=self._flags(path, data),
            allow_reboot=self._bool(path, data, "allowReboot"),
            reboot_window=self._reboot_window(path, data),
            network_probe=network_probe,
        )

    def _optional_str(self, path: Path, data: Dict[str, Any], key: str) -> Optional[str]:
        value = data.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            self._invalid(path, key, "expected a string")
        return value

    def _bool(self, path: Path, data: Dict[str, Any], key: str) -> bool:
        value = data.get(key)
        if value is None:
            return False
        if not isinstance(value, bool):
            self._invalid(path, key, "expected true or false")
        return value

    def _flags(self, path: Path, data: Dict[str, Any]) -> Tuple[str, ...]:
        value = data.get("flags")
        if value is None:
            return DEFAULT_FLAGS
        if not isinstance(value, list) or not all(isinstance(flag, str) for flag in value):
            self._invalid(path, "flags", "expected a list of strings")
        return tuple(value)

    def _reboot_window(self, path: Path, data: Dict[str, Any]) -> Optional[RebootWindow]:
        value = data.get("rebootWindow")
        if value is None:
            return None
        if not isinstance(value, dict):
            self._invalid(path, "rebootWindow", "expected an object with 'lower' and 'upper'")

        bounds = []
        for bound in ("lower", "upper"):
            time_of_day = value.get(bound)
            if not isinstance(time_of_day, str) or not TIME_OF_DAY.match(time_of_day):
                self._invalid(
                    path,
                    f"rebootWindow.{bound}",
                    f"expected a zero-padded HH:MM time, got {time_of_day!r}",
                )
            bounds.append(time_of_day)

        return RebootWindow(lower=bounds[0], upper=bounds[1])

    @staticmethod
    def _invalid(path: Path, key: str, cause: str):
        raise ConfigParseError(
            actionable_error("config_invalid_value", key=key, path=path, cause=cause)
        )
