"""Access to a mounted pseudo-filesystem such as /proc or /sys."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PROC_MOUNT_POINT = "/proc"
DEFAULT_SYS_MOUNT_POINT = "/sys"
DEFAULT_CONFIGFS_MOUNT_POINT = "/sys/kernel/config"


@dataclass(frozen=True)
class PseudoFS:
    """A pseudo-filesystem mounted at a directory.

    Creating one fails if the mount point cannot be read or is not a directory.
    """

    mount_point: str

    def __post_init__(self) -> None:
        mount_point = os.fspath(self.mount_point)
        object.__setattr__(self, "mount_point", mount_point)
        try:
            info = os.stat(mount_point)
        except OSError as exc:
            raise OSError(
                exc.errno, f"could not read {mount_point}: {exc.strerror}"
            ) from exc
        if not os.path.isdir(mount_point) or not _is_dir_mode(info.st_mode):
            raise NotADirectoryError(f"mount point {mount_point} is not a directory")

    def path(self, *args: str) -> str:
        """Join path elements onto the mount point and clean the result."""
        parts = [part for part in (self.mount_point, *args) if part]
        if not parts:
            return ""
        return os.path.normpath(os.sep.join(parts))

    def __fspath__(self) -> str:
        return self.mount_point


def _is_dir_mode(mode: int) -> bool:
    import stat

    return stat.S_ISDIR(mode)