"""Block device statistics from /proc/diskstats and /sys/block."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Callable

from procmetrics.fsroot import DEFAULT_PROC_MOUNT_POINT, DEFAULT_SYS_MOUNT_POINT, PseudoFS
from procmetrics.util import parse_uint32s, parse_uint64s

_PROC_DISKSTATS_PATH = "diskstats"
_SYS_BLOCK_PATH = "block"


@dataclass
class Info:
    """Identifying information of a block device."""

    major_number: int = 0
    minor_number: int = 0
    device_name: str = ""


@dataclass
class IOStats:
    """I/O counters of a block device, as described by the kernel's iostats."""

    read_ios: int = 0
    read_merges: int = 0
    read_sectors: int = 0
    read_ticks: int = 0
    write_ios: int = 0
    write_merges: int = 0
    write_sectors: int = 0
    write_ticks: int = 0
    ios_in_progress: int = 0
    ios_total_ticks: int = 0
    weighted_io_ticks: int = 0
    discard_ios: int = 0
    discard_merges: int = 0
    discard_sectors: int = 0
    discard_ticks: int = 0


@dataclass
class Diskstats(IOStats, Info):
    """Device info together with its I/O counters.

    ``io_stats_count`` is the number of fields read: 18 on kernels with
    discard statistics, 14 on older ones.
    """

    io_stats_count: int = 0


def _uint32(token: str) -> int:
    return parse_uint32s([token])[0]


def _uint64(token: str) -> int:
    return parse_uint64s([token])[0]


_IOSTATS_NAMES = [f.name for f in fields(IOStats)]
_DISKSTATS_SCAN: list[tuple[str, Callable[[str], object]]] = [
    ("major_number", _uint32),
    ("minor_number", _uint32),
    ("device_name", str),
    *((name, _uint64) for name in _IOSTATS_NAMES),
]
_STAT_SCAN: list[tuple[str, Callable[[str], object]]] = [
    (name, _uint64) for name in _IOSTATS_NAMES
]


def _scan(text: str, layout: list[tuple[str, Callable[[str], object]]]) -> dict[str, object]:
    """Convert whitespace-separated tokens in order; stop when input runs out."""
    return {name: convert(token) for token, (name, convert) in zip(text.split(), layout)}


def _or_default(mount_point: str, default: str) -> str:
    return default if not mount_point.strip() else mount_point


class BlockDeviceFS:
    """Access to block device statistics through proc and sys."""

    def __init__(
        self,
        proc_mount_point: str = DEFAULT_PROC_MOUNT_POINT,
        sys_mount_point: str = DEFAULT_SYS_MOUNT_POINT,
    ) -> None:
        self._proc = PseudoFS(_or_default(proc_mount_point, DEFAULT_PROC_MOUNT_POINT))
        self._sys = PseudoFS(_or_default(sys_mount_point, DEFAULT_SYS_MOUNT_POINT))

    @classmethod
    def default(cls) -> "BlockDeviceFS":
        """Open proc and sys at their usual mount points."""
        return cls(DEFAULT_PROC_MOUNT_POINT, DEFAULT_SYS_MOUNT_POINT)

    def proc_diskstats(self) -> list[Diskstats]:
        """Read /proc/diskstats; lines with neither 14 nor 18 fields are skipped."""
        result: list[Diskstats] = []
        with open(self._proc.path(_PROC_DISKSTATS_PATH), encoding="utf-8") as handle:
            for line in handle:
                values = _scan(line, _DISKSTATS_SCAN)
                if len(values) in (14, 18):
                    result.append(Diskstats(**values, io_stats_count=len(values)))
        return result

    def sys_block_devices(self) -> list[str]:
        """List the device directories under /sys/block, sorted by name."""
        with os.scandir(self._sys.path(_SYS_BLOCK_PATH)) as entries:
            return sorted(
                entry.name for entry in entries if entry.is_dir(follow_symlinks=False)
            )

    def sys_block_device_stat(self, device: str) -> tuple[IOStats, int]:
        """Read /sys/block/<device>/stat.

        Returns the counters and how many were read: 15 with discard
        statistics, 11 without.
        """
        with open(self._sys.path(_SYS_BLOCK_PATH, device, "stat"), encoding="utf-8") as handle:
            content = handle.read()
        values = _scan(content.strip(), _STAT_SCAN)
        return IOStats(**values), len(values)