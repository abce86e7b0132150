"""Parsing of the per-process mountinfo file."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator

_VALID_OPTIONAL_FIELDS = frozenset({"shared", "master", "propagate_from", "unbindable"})
_INT = re.compile(r"[+-]?[0-9]+")


@dataclass
class MountInfo:
    """One mount, as described by a line of /proc/<pid>/mountinfo."""

    mount_id: int = 0
    parent_id: int = 0
    major_minor_ver: str = ""
    root: str = ""
    mount_point: str = ""
    options: dict[str, str] = field(default_factory=dict)
    optional_fields: dict[str, str] | None = None
    fs_type: str = ""
    source: str = ""
    super_options: dict[str, str] = field(default_factory=dict)


def _element(parts: list[str], index: int) -> str:
    return parts[index] if index < len(parts) else ""


def _parse_int(text: str, what: str) -> int:
    if not _INT.fullmatch(text):
        raise ValueError(f"failed to parse {what}")
    return int(text)


def _iter_lines(stream: Iterable[str] | str) -> Iterator[str]:
    if isinstance(stream, str):
        yield from stream.splitlines()
    else:
        for line in stream:
            yield line.rstrip("\r\n")


def parse_mountinfo(stream: Iterable[str] | str) -> list[MountInfo]:
    """Parse every line of a mountinfo file."""
    return [parse_mountinfo_string(line) for line in _iter_lines(stream)]


def parse_mountinfo_string(line: str) -> MountInfo:
    """Parse one mountinfo line; the " - " separator must be present."""
    separator = line.find("-")
    if separator == -1:
        raise ValueError(f"no separator found in mountinfo string: {line}")
    before = line[:separator].split()
    after = line[separator + 1 :].split()
    if len(before) + len(after) < 7:
        raise ValueError("too few fields")

    mount = MountInfo(
        major_minor_ver=_element(before, 2),
        root=_element(before, 3),
        mount_point=_element(before, 4),
        options=parse_mount_options(_element(before, 5)),
        optional_fields=None,
        fs_type=_element(after, 0),
        source=_element(after, 1),
        super_options=parse_mount_options(_element(after, 2)),
    )
    mount.mount_id = _parse_int(_element(before, 0), "mount ID")
    mount.parent_id = _parse_int(_element(before, 1), "parent ID")

    if len(before) > 6:
        mount.optional_fields = {}
        for item in before[6:]:
            pieces = item.split(":")
            target = pieces[0]
            value = pieces[1] if len(pieces) == 2 else ""
            if target in _VALID_OPTIONAL_FIELDS:
                mount.optional_fields[target] = value
    return mount


def parse_mount_options(options: str) -> dict[str, str]:
    """Parse comma-separated ``key`` or ``key=value`` options."""
    result: dict[str, str] = {}
    for option in options.split(","):
        pieces = option.split("=")
        if len(pieces) < 2:
            result[pieces[0]] = ""
        else:
            result[pieces[0]] = pieces[1]
    return result


def get_mounts() -> list[MountInfo]:
    """Read the mounts of the current process."""
    with open("/proc/self/mountinfo", encoding="utf-8") as handle:
        return parse_mountinfo(handle)


def get_proc_mounts(pid: int) -> list[MountInfo]:
    """Read the mounts of the process with the given pid."""
    with open(f"/proc/{pid}/mountinfo", encoding="utf-8") as handle:
        return parse_mountinfo(handle)