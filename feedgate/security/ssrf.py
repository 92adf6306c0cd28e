"""feedgate.security.ssrf

Address classification.

Integrations can be pointed at arbitrary endpoints. Without guardrails that
turns the server into a proxy for metadata services (169.254.169.254),
loopback daemons and RFC1918 networks.

Policy:
- loopback, link-local, private / unique-local, multicast, unspecified: denied
- anything ``ipaddress`` does not consider globally reachable: denied
- deprecated IPv6 site-local (fec0::/10): denied
- IPv4 embedded in IPv6 (mapped, NAT64, 6to4) is judged by the IPv4 part

Pure functions, no DNS. Unparsable input raises instead of passing.
"""

from __future__ import annotations

import ipaddress
from enum import Enum

from feedgate.core.exceptions import InvalidAddressError

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address

_NAT64_PREFIX = ipaddress.ip_network("64:ff9b::/96")
_RFC1918 = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
)
_UNIQUE_LOCAL = ipaddress.ip_network("fc00::/7")


class AddressClass(str, Enum):
    PUBLIC = "public"
    LOOPBACK = "loopback"
    LINK_LOCAL = "link_local"
    PRIVATE = "private"
    MULTICAST = "multicast"
    UNSPECIFIED = "unspecified"
    RESERVED = "reserved"

    @property
    def is_public(self) -> bool:
        return self is AddressClass.PUBLIC


def parse_ip(ip: str | IPAddress) -> IPAddress:
    if isinstance(ip, ipaddress.IPv4Address | ipaddress.IPv6Address):
        return ip
    try:
        return ipaddress.ip_address(str(ip).strip())
    except ValueError as e:
        raise InvalidAddressError(f"not an IP address: {ip!r}") from e


def _embedded_ipv4(addr: ipaddress.IPv6Address) -> ipaddress.IPv4Address | None:
    if addr.ipv4_mapped is not None:
        return addr.ipv4_mapped
    if addr.sixtofour is not None:
        return addr.sixtofour
    if addr in _NAT64_PREFIX:
        return ipaddress.IPv4Address(int(addr) & 0xFFFFFFFF)
    return None


def classify_ip(ip: str | IPAddress) -> AddressClass:
    """Classify an IP literal. Order matters: specific reasons first."""

    addr = parse_ip(ip)

    if isinstance(addr, ipaddress.IPv6Address):
        # Zone ids only make sense for link-local; drop them before comparing.
        if addr.scope_id:
            addr = ipaddress.IPv6Address(str(addr).split("%", 1)[0])
        embedded = _embedded_ipv4(addr)
        if embedded is not None:
            return classify_ip(embedded)

    if addr.is_unspecified:
        return AddressClass.UNSPECIFIED
    if addr.is_loopback:
        return AddressClass.LOOPBACK
    if addr.is_link_local:
        return AddressClass.LINK_LOCAL
    if addr.is_multicast:
        return AddressClass.MULTICAST
    if isinstance(addr, ipaddress.IPv6Address) and addr.is_site_local:
        return AddressClass.RESERVED
    if addr.is_private:
        if _is_rfc_private(addr):
            return AddressClass.PRIVATE
        return AddressClass.RESERVED
    if addr.is_reserved or not addr.is_global:
        return AddressClass.RESERVED
    return AddressClass.PUBLIC


def _is_rfc_private(addr: IPAddress) -> bool:
    if isinstance(addr, ipaddress.IPv4Address):
        return any(addr in net for net in _RFC1918)
    return addr in _UNIQUE_LOCAL


def is_non_public_ip(ip: str | IPAddress) -> bool:
    return not classify_ip(ip).is_public


def is_public_ip(ip: str | IPAddress) -> bool:
    return classify_ip(ip).is_public
