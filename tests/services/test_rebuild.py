import subprocess

import pytest

from nixupgrader.errors import RebuildFailedError
from nixupgrader.models import UpgradeConfig
from nixupgrader.services.rebuild import RebuildService, build_rebuild_command


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None


def test_default_config_requests_channel_upgrade():
    assert build_rebuild_command(UpgradeConfig()) == [
        "nixos-rebuild",
        "boot",
        "--upgrade",
        "--no-build-output",
    ]


def test_flake_source_replaces_upgrade_flag():
    cmd = build_rebuild_command(UpgradeConfig(operation="switch", source="github:org/repo"))

    assert cmd == [
        "nixos-rebuild",
        "switch",
        "--refresh",
        "--flake",
        "github:org/repo",
        "--no-build-output",
    ]
    assert "--upgrade" not in cmd


def test_channel_override_combines_with_flake_source():
    cmd = build_rebuild_command(
        UpgradeConfig(
            source="github:org/repo",
            channel_override="https://nixos.org/channels/nixos-24.05",
        )
    )

    assert cmd == [
        "nixos-rebuild",
        "boot",
        "--refresh",
        "--flake",
        "github:org/repo",
        "-I",
        "nixpkgs=https://nixos.org/channels/nixos-24.05/nixexprs.tar.xz",
        "--no-build-output",
    ]
    assert "--upgrade" not in cmd


def test_channel_override_combines_with_channel_upgrade():
    cmd = build_rebuild_command(UpgradeConfig(channel_override="/srv/channel", extra_flags=()))

    assert cmd == ["nixos-rebuild", "boot", "--upgrade", "-I", "nixpkgs=/srv/channel/nixexprs.tar.xz"]


def test_extra_flags_are_appended_verbatim_in_order():
    flags = ("--option", "max-jobs", "4", "--show-trace")

    cmd = build_rebuild_command(UpgradeConfig(extra_flags=flags))

    assert cmd[-4:] == list(flags)


def test_command_construction_is_deterministic():
    config = UpgradeConfig(source="github:org/repo", channel_override="/srv/channel")

    assert build_rebuild_command(config) == build_rebuild_command(config)


def test_rebuild_failure_preserves_exit_status():
    def run_cmd(cmd, capture_output=False):
        return subprocess.CompletedProcess(cmd, 100)

    service = RebuildService(logger=DummyLogger(), run_cmd=run_cmd)

    with pytest.raises(RebuildFailedError) as error:
        service.run_upgrade(UpgradeConfig())

    assert error.value.returncode == 100
    assert "exit code: 100" in str(error.value)


def test_rebuild_success_runs_built_command_once():
    calls = []

    def run_cmd(cmd, capture_output=False):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 0)

    RebuildService(logger=DummyLogger(), run_cmd=run_cmd).run_upgrade(UpgradeConfig())

    assert calls == [["nixos-rebuild", "boot", "--upgrade", "--no-build-output"]]
