"""Actionable error catalog for nixupgrader."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "config_unreadable": {
        "what": "Failed to read config file '{path}': {cause}",
        "next": "Check the file permissions or pass another file with `--config`.",
    },
    "config_malformed": {
        "what": "Failed to parse config file '{path}': {cause}",
        "next": "Fix the JSON/YAML syntax or remove the file to use the defaults.",
    },
    "config_invalid_value": {
        "what": "Invalid value for '{key}' in config file '{path}': {cause}",
        "next": "Correct the value or remove the key to use its default.",
    },
    "network_unavailable": {
        "what": "Network is not available, skipping upgrade.",
        "next": "No upgrade was attempted; it will be retried on the next trigger.",
    },
    "rebuild_failed": {
        "what": "nixos-rebuild failed with exit code: {returncode}",
        "next": "Inspect the build log with `journalctl` and run `nixos-rebuild` manually.",
    },
}


def actionable_error(code: str, **kwargs: object) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
