"""System, kernel and process metrics read from the proc pseudo-filesystem.

Example::

    fs = ProcFS.default()
    for zone in fs.buddy_info():
        print(zone.node, zone.zone, zone.sizes)
"""

from __future__ import annotations

from procmetrics.buddyinfo import BuddyInfo, parse_buddyinfo
from procmetrics.fsroot import DEFAULT_PROC_MOUNT_POINT, PseudoFS
from procmetrics.ipvs import (
    IPVSBackendStatus,
    IPVSStats,
    parse_ipvs_backend_status,
    parse_ipvs_stats,
)
from procmetrics.mdstat import MDStat, parse_mdstat

DEFAULT_MOUNT_POINT = DEFAULT_PROC_MOUNT_POINT


class ProcFS:
    """The proc filesystem mounted at a given directory."""

    def __init__(self, mount_point: str = DEFAULT_MOUNT_POINT) -> None:
        self._proc = PseudoFS(mount_point)

    @classmethod
    def default(cls) -> "ProcFS":
        """Open proc at its usual mount point."""
        return cls(DEFAULT_MOUNT_POINT)

    @property
    def mount_point(self) -> str:
        return self._proc.mount_point

    def buddy_info(self) -> list[BuddyInfo]:
        """Read /proc/buddyinfo."""
        with open(self._proc.path("buddyinfo"), encoding="utf-8") as handle:
            return parse_buddyinfo(handle)

    def ipvs_stats(self) -> IPVSStats:
        """Read /proc/net/ip_vs_stats."""
        with open(self._proc.path("net/ip_vs_stats"), encoding="utf-8") as handle:
            return parse_ipvs_stats(handle)

    def ipvs_backend_status(self) -> list[IPVSBackendStatus]:
        """Read the status of every virtual/real server pair from /proc/net/ip_vs."""
        with open(self._proc.path("net/ip_vs"), encoding="utf-8") as handle:
            return parse_ipvs_backend_status(handle)

    def mdstat(self) -> list[MDStat]:
        """Read /proc/mdstat."""
        path = self._proc.path("mdstat")
        try:
            with open(path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise OSError(
                exc.errno, f"error parsing mdstat {path}: {exc.strerror}"
            ) from exc
        try:
            return parse_mdstat(data)
        except ValueError as exc:
            raise ValueError(f"error parsing mdstat {path}: {exc}") from exc