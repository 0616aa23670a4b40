"""Reverse-lookup (PTR) query name construction for IPv4 and IPv6 addresses."""

from __future__ import annotations

from typing import List, Optional

IPV4_SUFFIX = "in-addr.arpa"
IPV6_SUFFIX = "ip6.arpa"

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def _reverse_ipv4(address: str) -> Optional[str]:
    """
    Brief: Build 'd.c.b.a.in-addr.arpa' from 'a.b.c.d'.

    Inputs:
    - address: dotted-quad string

    Outputs:
    - str reverse name, or None when the address is malformed

    Example:
        >>> _reverse_ipv4("192.0.2.10")
        '10.2.0.192.in-addr.arpa'
        >>> _reverse_ipv4("256.0.0.1") is None
        True
    """
    octets = address.split(".")
    if len(octets) != 4:
        return None
    for octet in octets:
        if not octet or not octet.isascii() or not octet.isdigit():
            return None
        if int(octet) > 255:
            return None
    return ".".join(reversed(octets)) + "." + IPV4_SUFFIX


def _parse_groups(part: str) -> Optional[List[str]]:
    """Split one side of an IPv6 address into hex groups; '' yields []."""
    if part == "":
        return []
    groups = part.split(":")
    for group in groups:
        if not group or len(group) > 4:
            return None
        if any(ch not in _HEX_DIGITS for ch in group):
            return None
    return groups


def expand_ipv6(address: str) -> Optional[List[str]]:
    """
    Brief: Expand an IPv6 address to exactly 8 groups of 4 lowercase hex digits.

    Inputs:
    - address: textual IPv6 address, optionally using one '::' compression

    Outputs:
    - list of 8 four-digit groups, or None when the address is malformed

    Notes:
    - More than one '::', more than 8 resulting groups, or an uncompressed
      address without exactly 8 groups are all malformed.

    Example:
        >>> expand_ipv6("2001:db8::1")
        ['2001', '0db8', '0000', '0000', '0000', '0000', '0000', '0001']
    """
    if address.count("::") > 1:
        return None

    if "::" in address:
        left_text, right_text = address.split("::", 1)
        left = _parse_groups(left_text)
        right = _parse_groups(right_text)
        if left is None or right is None:
            return None
        missing = 8 - len(left) - len(right)
        if missing < 0:
            return None
        groups = left + ["0"] * missing + right
    else:
        groups = _parse_groups(address)
        if groups is None or len(groups) != 8:
            return None

    return [g.lower().rjust(4, "0") for g in groups]


def _reverse_ipv6(address: str) -> Optional[str]:
    groups = expand_ipv6(address)
    if groups is None:
        return None
    nibbles = "".join(groups)
    return ".".join(reversed(nibbles)) + "." + IPV6_SUFFIX


def build_reverse_name(address: str) -> Optional[str]:
    """
    Brief: Produce the reverse-lookup query name for an IP address.

    Inputs:
    - address: textual IPv4 or IPv6 address

    Outputs:
    - str in 'in-addr.arpa' or 'ip6.arpa' form, or None when the address is
      malformed or is neither dotted nor colon-separated

    Example:
        >>> build_reverse_name("8.8.4.4")
        '4.4.8.8.in-addr.arpa'
        >>> build_reverse_name("localhost") is None
        True
    """
    if not isinstance(address, str):
        return None
    address = address.strip()
    if ":" in address:
        return _reverse_ipv6(address)
    if "." in address:
        return _reverse_ipv4(address)
    return None
