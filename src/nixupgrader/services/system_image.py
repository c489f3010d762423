"""Booted versus built system image comparison."""

from typing import Callable

from nixupgrader.errors import ImageIntrospectionError
from nixupgrader.models import SystemImageIdentity

BOOTED_SYSTEM = "/run/booted-system"
BUILT_SYSTEM = "/nix/var/nix/profiles/system"
IMAGE_COMPONENTS = ("kernel", "initrd", "kernel-modules")


class SystemImageService:
    """Decides whether the freshly built system needs a reboot to take effect.

    Both profiles are reduced to the symlink-resolved paths of their kernel,
    initrd and kernel modules. Any byte of difference means the running
    system is stale.
    """

    def __init__(
        self,
        logger,
        run_cmd: Callable,
        booted_root: str = BOOTED_SYSTEM,
        built_root: str = BUILT_SYSTEM,
    ):
        self.logger = logger
        self.run_cmd = run_cmd
        self.booted_root = booted_root
        self.built_root = built_root

    def read_identity(self, profile_root: str) -> SystemImageIdentity:
        cmd = ["readlink", "-f"] + [f"{profile_root}/{name}" for name in IMAGE_COMPONENTS]
        result = self.run_cmd(
            cmd,
            capture_output=True,
            spawn_error=ImageIntrospectionError,
        )
        if result.returncode != 0:
            self.logger.debug("readlink exited with %s for %s", result.returncode, profile_root)
        return SystemImageIdentity(profile_root=profile_root, resolved=result.stdout or b"")

    def has_image_changed(self) -> bool:
        booted = self.read_identity(self.booted_root)
        built = self.read_identity(self.built_root)
        changed = booted != built
        if changed:
            self.logger.info("Kernel, initrd or kernel modules differ from the booted system")
        else:
            self.logger.info("Booted system matches the new build, no reboot needed")
        return changed
