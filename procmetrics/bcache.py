"""Runtime statistics of bcache, the Linux block cache, read from sysfs."""

from __future__ import annotations

import glob
import os
from dataclasses import dataclass, field

from procmetrics.fsroot import DEFAULT_SYS_MOUNT_POINT, PseudoFS
from procmetrics.util import parse_uint64s

_MULTIPLIERS = {
    "k": float(1 << 10),
    "M": float(1 << 20),
    "G": float(1 << 30),
    "T": float(1 << 40),
    "P": float(1 << 50),
    "E": float(1 << 60),
    "Z": float(1 << 70),
    "Y": float(1 << 80),
}


@dataclass
class PeriodStats:
    """Counters for one time period (five minutes or total)."""

    bypassed: int = 0
    cache_bypass_hits: int = 0
    cache_bypass_misses: int = 0
    cache_hits: int = 0
    cache_miss_collisions: int = 0
    cache_misses: int = 0
    cache_readaheads: int = 0


@dataclass
class InternalStats:
    """Internal bcache counters."""

    active_journal_entries: int = 0
    btree_nodes: int = 0
    btree_read_average_duration_nanoseconds: int = 0
    cache_read_races: int = 0


@dataclass
class PriorityStats:
    """Values from the priority_stats file of a cache device."""

    unused_percent: int = 0
    metadata_percent: int = 0


@dataclass
class BcacheStats:
    """Statistics tied to one bcache set."""

    average_key_size: int = 0
    btree_cache_size: int = 0
    cache_available_percent: int = 0
    congested: int = 0
    root_usage_percent: int = 0
    tree_depth: int = 0
    internal: InternalStats = field(default_factory=InternalStats)
    five_min: PeriodStats = field(default_factory=PeriodStats)
    total: PeriodStats = field(default_factory=PeriodStats)


@dataclass
class BdevStats:
    """Statistics of one backing device."""

    name: str = ""
    dirty_data: int = 0
    five_min: PeriodStats = field(default_factory=PeriodStats)
    total: PeriodStats = field(default_factory=PeriodStats)


@dataclass
class CacheStats:
    """Statistics of one cache device."""

    name: str = ""
    io_errors: int = 0
    metadata_written: int = 0
    written: int = 0
    priority: PriorityStats = field(default_factory=PriorityStats)


@dataclass
class Stats:
    """All statistics of one bcache set, named by its UUID."""

    name: str = ""
    bcache: BcacheStats = field(default_factory=BcacheStats)
    bdevs: list[BdevStats] = field(default_factory=list)
    caches: list[CacheStats] = field(default_factory=list)


class BcacheFS:
    """Access to bcache statistics below a sys mount point."""

    def __init__(self, mount_point: str = DEFAULT_SYS_MOUNT_POINT) -> None:
        if not mount_point.strip():
            mount_point = DEFAULT_SYS_MOUNT_POINT
        self._sys = PseudoFS(mount_point)

    @classmethod
    def default(cls) -> "BcacheFS":
        """Open sys at its usual mount point."""
        return cls(DEFAULT_SYS_MOUNT_POINT)

    def stats(self) -> list[Stats]:
        """Collect statistics for every bcache set under fs/bcache."""
        result: list[Stats] = []
        for uuid_path in sorted(glob.glob(self._sys.path("fs/bcache/*-*"))):
            stats = get_stats(uuid_path)
            stats.name = os.path.basename(uuid_path)
            result.append(stats)
        return result


def parse_pseudo_float(text: str) -> float:
    """Parse the peculiar fractional notation produced by bcache's bch_hprint.

    The fraction is a value from 0 to 1023 printed in decimal, so ".1" and
    ".10" differ; dividing by 10.24 restores the proper order.
    """
    parts = text.split(".")
    int_part = float(parts[0])
    if len(parts) == 1:
        return int_part
    frac_part = float(parts[1])
    return int_part + frac_part / 10.24


def dehumanize(value: bytes | str) -> int:
    """Convert a human-readable size such as ``542k`` or ``1.10k`` to an integer."""
    text = value.decode("utf-8") if isinstance(value, bytes) else value
    if not text:
        raise ValueError("zero-length reply")
    last = text[-1]
    if ord(last) > ord("9"):
        multiplier = _MULTIPLIERS.get(last, 0.0)
        mantissa = parse_pseudo_float(text[:-1])
    else:
        multiplier = 1.0
        mantissa = float(text)
    return int(mantissa * multiplier)


def parse_priority_stats(line: str, stats: PriorityStats) -> None:
    """Update ``stats`` from one line of a priority_stats file."""
    if line.startswith("Unused:"):
        stats.unused_percent = _percent(line)
    elif line.startswith("Metadata:"):
        stats.metadata_percent = _percent(line)


def _percent(line: str) -> int:
    raw = line.split()[-1]
    if raw.endswith("%"):
        raw = raw[:-1]
    return parse_uint64s([raw])[0]


def _read_value(directory: str, file_name: str) -> int:
    path = os.path.join(directory, file_name)
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise OSError(exc.errno, f"failed to read: {path}") from exc
    # Drop the trailing newline.
    return dehumanize(data[:-1])


def _read_period(directory: str) -> PeriodStats:
    return PeriodStats(
        bypassed=_read_value(directory, "bypassed"),
        cache_bypass_hits=_read_value(directory, "cache_bypass_hits"),
        cache_bypass_misses=_read_value(directory, "cache_bypass_misses"),
        cache_hits=_read_value(directory, "cache_hits"),
        cache_miss_collisions=_read_value(directory, "cache_miss_collisions"),
        cache_misses=_read_value(directory, "cache_misses"),
        cache_readaheads=_read_value(directory, "cache_readaheads"),
    )


def _read_priority_stats(directory: str) -> PriorityStats:
    path = os.path.join(directory, "priority_stats")
    result = PriorityStats()
    try:
        handle = open(path, encoding="utf-8")
    except OSError as exc:
        raise OSError(exc.errno, f"failed to read: {path}") from exc
    with handle:
        for line in handle:
            try:
                parse_priority_stats(line.rstrip("\r\n"), result)
            except ValueError as exc:
                raise ValueError(f"failed to parse: {path} ({exc})") from exc
    return result


def get_stats(uuid_path: str) -> Stats:
    """Collect the sysfs statistics of the bcache set at ``uuid_path``."""
    stats = Stats()
    bcache = stats.bcache

    bcache.average_key_size = _read_value(uuid_path, "average_key_size")
    bcache.btree_cache_size = _read_value(uuid_path, "btree_cache_size")
    bcache.cache_available_percent = _read_value(uuid_path, "cache_available_percent")
    bcache.congested = _read_value(uuid_path, "congested")
    bcache.root_usage_percent = _read_value(uuid_path, "root_usage_percent")
    bcache.tree_depth = _read_value(uuid_path, "tree_depth")

    internal_dir = os.path.join(uuid_path, "internal")
    bcache.internal = InternalStats(
        active_journal_entries=_read_value(internal_dir, "active_journal_entries"),
        btree_nodes=_read_value(internal_dir, "btree_nodes"),
        btree_read_average_duration_nanoseconds=_read_value(
            internal_dir, "btree_read_average_duration_us"
        ),
        cache_read_races=_read_value(internal_dir, "cache_read_races"),
    )

    bcache.five_min = _read_period(os.path.join(uuid_path, "stats_five_minute"))
    bcache.total = _read_period(os.path.join(uuid_path, "stats_total"))

    for bdev_dir in sorted(glob.glob(os.path.join(uuid_path, "bdev[0-9]*"))):
        name = os.path.basename(bdev_dir)
        device_dir = os.path.join(uuid_path, name)
        stats.bdevs.append(
            BdevStats(
                name=name,
                dirty_data=_read_value(device_dir, "dirty_data"),
                five_min=_read_period(os.path.join(device_dir, "stats_five_minute")),
                # The totals are taken from the set's stats_total directory.
                total=_read_period(os.path.join(uuid_path, "stats_total")),
            )
        )

    for cache_dir in sorted(glob.glob(os.path.join(uuid_path, "cache[0-9]*"))):
        name = os.path.basename(cache_dir)
        device_dir = os.path.join(uuid_path, name)
        stats.caches.append(
            CacheStats(
                name=name,
                io_errors=_read_value(device_dir, "io_errors"),
                metadata_written=_read_value(device_dir, "metadata_written"),
                written=_read_value(device_dir, "written"),
                priority=_read_priority_stats(device_dir),
            )
        )

    return stats