"""Small parsing and file-reading helpers shared by the metric readers."""

from __future__ import annotations

import os
import re

_DIGITS = {2: "[01]", 8: "[0-7]", 10: "[0-9]", 16: "[0-9a-fA-F]"}
_DECIMAL = re.compile(r"[0-9]+")


def _parse_uint(text: str, bits: int) -> int:
    """Parse an unsigned base-10 integer that must fit in ``bits`` bits."""
    if not _DECIMAL.fullmatch(text):
        raise ValueError(f"parsing {text!r}: invalid syntax")
    value = int(text)
    if value >= 1 << bits:
        raise ValueError(f"parsing {text!r}: value out of range")
    return value


def _parse_prefixed(text: str, bits: int, signed: bool) -> int:
    """Parse an integer whose base is inferred from its prefix."""
    digits = text
    negative = False
    if signed and digits[:1] in ("+", "-"):
        negative = digits[0] == "-"
        digits = digits[1:]

    lowered = digits[:2].lower()
    prefixed = True
    if lowered == "0x":
        base, digits = 16, digits[2:]
    elif lowered == "0b":
        base, digits = 2, digits[2:]
    elif lowered == "0o":
        base, digits = 8, digits[2:]
    elif digits.startswith("0") and len(digits) > 1:
        base, digits = 8, digits[1:]
    else:
        base, prefixed = 10, False

    digit = _DIGITS[base]
    pattern = rf"_?{digit}(?:_?{digit})*" if prefixed else rf"{digit}(?:_?{digit})*"
    if not re.fullmatch(pattern, digits):
        raise ValueError(f"parsing {text!r}: invalid syntax")

    value = int(digits.replace("_", ""), base)
    if negative:
        value = -value
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= value <= high:
        raise ValueError(f"parsing {text!r}: value out of range")
    return value


def parse_uint32s(values) -> list[int]:
    """Parse decimal strings into unsigned 32-bit integers."""
    return [_parse_uint(value, 32) for value in values]


def parse_uint64s(values) -> list[int]:
    """Parse decimal strings into unsigned 64-bit integers."""
    return [_parse_uint(value, 64) for value in values]


def read_uint_from_file(path) -> int:
    """Read a file and parse its trimmed content as an unsigned 64-bit integer."""
    with open(path, encoding="utf-8") as handle:
        content = handle.read()
    return _parse_uint(content.strip(), 64)


def parse_bool(text: str) -> bool | None:
    """Map "enabled"/"disabled" to True/False; anything else gives None."""
    if text == "enabled":
        return True
    if text == "disabled":
        return False
    return None


def sys_read_file(path) -> str:
    """Read at most 128 bytes from a file with a single read call, trimmed.

    A single read is used because some broken sysfs drivers keep reporting
    that more data is pending.
    """
    fd = os.open(path, os.O_RDONLY)
    try:
        data = os.read(fd, 128)
    finally:
        os.close(fd)
    return data.strip().decode("utf-8", errors="replace")


class ValueParser:
    """Parses one string into integers, remembering the first failure.

    After a failure, ``err`` holds the exception and later calls return None.
    """

    def __init__(self, value: str) -> None:
        self.value = value
        self.err: ValueError | None = None

    def _parse(self, signed: bool) -> int | None:
        if self.err is not None:
            return None
        try:
            return _parse_prefixed(self.value, 64, signed)
        except ValueError as exc:
            self.err = exc
            return None

    def pint64(self) -> int | None:
        """Interpret the value as a signed 64-bit integer, base from prefix."""
        return self._parse(signed=True)

    def puint64(self) -> int | None:
        """Interpret the value as an unsigned 64-bit integer, base from prefix."""
        return self._parse(signed=False)