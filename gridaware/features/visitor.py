"""
Visitor address helpers: pick the client IP from proxy headers, detect
local/private addresses, and derive a privacy-preserving cache identifier.
"""

from __future__ import annotations

import hashlib
import ipaddress
from typing import Mapping, Optional

# Checked in order; each may hold a comma-separated chain.
IP_HEADERS = ("client-ip", "x-forwarded-for")

DEFAULT_IP = "127.0.0.1"


def _valid_ip(candidate: str) -> bool:
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return False
    return True


def resolve_visitor_ip(headers: Mapping[str, str], remote_addr: Optional[str] = None) -> str:
    """Return the first syntactically valid IP from the prioritized sources."""
    lowered = {k.lower(): v for k, v in headers.items()}
    sources = [lowered.get(name) for name in IP_HEADERS] + [remote_addr]

    for raw in sources:
        if not raw:
            continue
        for part in raw.split(","):
            ip = part.strip()
            if _valid_ip(ip):
                return ip

    return remote_addr or DEFAULT_IP


def is_local_ip(ip: str) -> bool:
    """True for loopback, private, reserved, link-local or unparsable addresses."""
    if ip in ("127.0.0.1", "::1"):
        return True
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return True
    return (
        addr.is_private
        or addr.is_reserved
        or addr.is_loopback
        or addr.is_link_local
        or addr.is_unspecified
    )


def hash_ip(ip: str) -> str:
    return hashlib.sha256(ip.encode()).hexdigest()
