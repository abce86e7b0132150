"""Parsing of the IPVS files /proc/net/ip_vs_stats and /proc/net/ip_vs."""

from __future__ import annotations

import ipaddress
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Union

from procmetrics.util import parse_uint64s

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_HEX = re.compile(r"[0-9a-fA-F]+")


@dataclass
class IPVSStats:
    """Totals exposed by the kernel in ip_vs_stats."""

    connections: int = 0
    incoming_packets: int = 0
    outgoing_packets: int = 0
    incoming_bytes: int = 0
    outgoing_bytes: int = 0


@dataclass
class IPVSBackendStatus:
    """Current metrics of one virtual/real address pair."""

    local_address: IPAddress | None = None
    remote_address: IPAddress | None = None
    local_port: int = 0
    remote_port: int = 0
    local_mark: str = ""
    proto: str = ""
    active_conn: int = 0
    inact_conn: int = 0
    weight: int = 0


def _parse_hex(text: str, bits: int) -> int:
    if not _HEX.fullmatch(text):
        raise ValueError(f"parsing {text!r}: invalid syntax")
    value = int(text, 16)
    if value >= 1 << bits:
        raise ValueError(f"parsing {text!r}: value out of range")
    return value


def _read_text(stream) -> str:
    if isinstance(stream, bytes):
        return stream.decode("utf-8")
    if isinstance(stream, str):
        return stream
    return stream.read()


def _iter_lines(stream) -> Iterator[str]:
    if isinstance(stream, (str, bytes)):
        yield from _read_text(stream).splitlines()
    else:
        for line in stream:
            yield line.rstrip("\r\n")


def parse_ipvs_stats(stream) -> IPVSStats:
    """Parse the content of ip_vs_stats from a text stream or string."""
    lines = _read_text(stream).split("\n", 3)
    if len(lines) != 4:
        raise ValueError("ip_vs_stats corrupt: too short")

    fields = lines[2].split()
    if len(fields) != 5:
        raise ValueError("ip_vs_stats corrupt: unexpected number of fields")

    values = [_parse_hex(value, 64) for value in fields]
    return IPVSStats(*values)


def parse_ipvs_backend_status(stream: Iterable[str] | str) -> list[IPVSBackendStatus]:
    """Parse the content of ip_vs into one entry per virtual/real server pair."""
    result: list[IPVSBackendStatus] = []
    proto = ""
    local_mark = ""
    local_address: IPAddress | None = None
    local_port = 0

    for line in _iter_lines(stream):
        fields = line.split()
        if not fields:
            continue
        head = fields[0]
        if head in ("IP", "Prot") or (len(fields) > 1 and fields[1] == "RemoteAddress:Port"):
            continue
        if head in ("TCP", "UDP"):
            if len(fields) < 2:
                continue
            proto = head
            local_mark = ""
            local_address, local_port = parse_ip_port(fields[1])
        elif head == "FWM":
            if len(fields) < 2:
                continue
            proto = head
            local_mark = fields[1]
            local_address = None
            local_port = 0
        elif head == "->":
            if len(fields) < 6:
                continue
            remote_address, remote_port = parse_ip_port(fields[1])
            weight, active_conn, inact_conn = parse_uint64s(fields[3:6])
            result.append(
                IPVSBackendStatus(
                    local_address=local_address,
                    remote_address=remote_address,
                    local_port=local_port,
                    remote_port=remote_port,
                    local_mark=local_mark,
                    proto=proto,
                    active_conn=active_conn,
                    inact_conn=inact_conn,
                    weight=weight,
                )
            )
    return result


def parse_ip_port(text: str) -> tuple[IPAddress, int]:
    """Parse an ``ADDR:PORT`` pair as written by the kernel in hex notation."""
    if len(text) == 13:
        try:
            packed = bytes.fromhex(text[0:8])
        except ValueError as exc:
            raise ValueError(f"invalid hex address: {text[0:8]}") from exc
        ip: IPAddress = ipaddress.IPv4Address(packed)
    elif len(text) == 46:
        try:
            ip = ipaddress.ip_address(text[1:40])
        except ValueError as exc:
            raise ValueError(f"invalid IPv6 address: {text[1:40]}") from exc
    else:
        raise ValueError(f"unexpected IP:Port: {text}")

    port_text = text[-4:]
    if len(port_text) != 4:
        raise ValueError(f"unexpected port string format: {port_text}")
    port = _parse_hex(port_text, 16)
    return ip, port