"""Lookup of the hardware address behind a local IP address."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any, Optional, Union

import psutil

_IP_FAMILIES = (socket.AF_INET, socket.AF_INET6)
_NULL_MAC = "00:00:00:00:00:00"

IpAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def _normalize(address: Any) -> Optional[IpAddress]:
    text = str(address).split("%", 1)[0]
    try:
        parsed = ipaddress.ip_address(text)
    except ValueError:
        return None
    if isinstance(parsed, ipaddress.IPv6Address) and parsed.ipv4_mapped is not None:
        return parsed.ipv4_mapped
    return parsed


def _is_running(stats: Any) -> bool:
    flags = getattr(stats, "flags", "")
    if flags:
        names = set(flags.split(","))
        return "running" in names and "loopback" not in names
    return bool(stats.isup)


def get_mac_address(host_address: Any) -> str:
    """Return the upper-case MAC of the running Ethernet or Wi-Fi interface
    that owns ``host_address``, or ``""`` if there is none."""
    target = _normalize(host_address)
    if target is None:
        return ""

    stats = psutil.net_if_stats()
    for name, entries in psutil.net_if_addrs().items():
        interface_stats = stats.get(name)
        if interface_stats is None or not _is_running(interface_stats):
            continue

        mac = next((entry.address for entry in entries if entry.family == psutil.AF_LINK), "")
        if not mac or mac == _NULL_MAC:
            continue

        if any(_normalize(entry.address) == target for entry in entries if entry.family in _IP_FAMILIES):
            return mac.upper()

    return ""