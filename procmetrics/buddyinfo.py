"""Parsing of /proc/buddyinfo."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass
class BuddyInfo:
    """Free fragment counts of one memory zone.

    ``sizes[n]`` counts free blocks of 2**n pages.
    """

    node: str
    zone: str
    sizes: list[float] = field(default_factory=list)


def parse_buddyinfo(stream: Iterable[str]) -> list[BuddyInfo]:
    """Parse buddyinfo lines into one entry per zone."""
    result: list[BuddyInfo] = []
    bucket_count: int | None = None

    for line in stream:
        parts = line.split()
        if len(parts) < 4:
            raise ValueError("invalid number of fields when parsing buddyinfo")

        node = parts[1].rstrip(",")
        zone = parts[3].rstrip(",")
        values = parts[4:]

        if bucket_count is None:
            bucket_count = len(values)
        elif bucket_count != len(values):
            raise ValueError(
                "mismatch in number of buddyinfo buckets, "
                f"previous count {bucket_count}, new count {len(values)}"
            )

        try:
            sizes = [float(value) for value in values]
        except ValueError as exc:
            raise ValueError(f"invalid value in buddyinfo: {exc}") from exc

        result.append(BuddyInfo(node, zone, sizes))

    return result