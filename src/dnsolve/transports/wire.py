"""Classic DNS (UDP port 53 with TCP fallback) transport built on dnslib."""

from __future__ import annotations

import ipaddress
import logging
import socket
from typing import Any, Dict, List, Optional, Tuple

from dnslib import EDNS0, QTYPE, DNSHeader, DNSQuestion, DNSRecord
from dnslib.dns import DNSError

from ..exceptions import InvalidInputError, QueryTimeoutError, TransportError
from .base import Transport

logger = logging.getLogger(__name__)

DNS_PORT = 53
FALLBACK_NAMESERVER = "127.0.0.1"


def _parse_resolv_conf_nameservers(path: str = "/etc/resolv.conf") -> list[str]:
    """Brief: Best-effort parse of nameserver entries from a resolv.conf file.

    Inputs:
      - path: Filesystem path to a resolv.conf-format file.

    Outputs:
      - List of nameserver IP strings in the order encountered. Returns an empty
        list when the file cannot be read or contains no nameserver entries.
    """

    servers: list[str] = []
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                raw = line.split("#", 1)[0].strip()
                if not raw:
                    continue
                parts = raw.split()
                if len(parts) >= 2 and parts[0].lower() == "nameserver":
                    servers.append(parts[1])
    except OSError:  # pragma: no cover - depends on host environment
        return []
    return servers


def parse_server_address(server: str) -> Tuple[str, int, bool]:
    """
    Brief: Parse 'ip', 'ip:port', '[v6]' or '[v6]:port' into its parts.

    Inputs:
    - server: server address text

    Outputs:
    - (host, port, is_ipv6)

    Example:
        >>> parse_server_address("1.1.1.1:5353")
        ('1.1.1.1', 5353, False)
        >>> parse_server_address("[2606:4700::1111]:53")
        ('2606:4700::1111', 53, True)
    """
    text = server.strip()
    host, port = text, DNS_PORT
    if text.startswith("["):
        end = text.find("]")
        if end < 0:
            raise TransportError(f"Invalid DNS server address: {server!r}")
        host = text[1:end]
        rest = text[end + 1 :]
        if rest:
            if not rest.startswith(":") or not rest[1:].isdigit():
                raise TransportError(f"Invalid DNS server address: {server!r}")
            port = int(rest[1:])
    elif text.count(":") == 1:
        host, _, port_text = text.partition(":")
        if not port_text.isdigit():
            raise TransportError(f"Invalid DNS server address: {server!r}")
        port = int(port_text)
    if not 0 < port <= 65535:
        raise TransportError(f"Invalid DNS server port: {server!r}")
    try:
        addr = ipaddress.ip_address(host)
    except ValueError as e:
        raise TransportError(f"Invalid DNS server address: {server!r}") from e
    return str(addr), port, addr.version == 6


def reply_to_document(reply: DNSRecord) -> Dict[str, Any]:
    """
    Brief: Convert a parsed dnslib reply into the answer document schema.

    Inputs:
    - reply: DNSRecord parsed from the wire

    Outputs:
    - dict with Status, flags, Answer and Question
    """
    header = reply.header
    answers: List[Dict[str, Any]] = [
        {
            "name": str(rr.rname),
            "type": int(rr.rtype),
            "TTL": int(rr.ttl),
            "data": rr.rdata.toZone(),
        }
        for rr in reply.rr
        if rr.rtype != QTYPE.OPT
    ]
    doc: Dict[str, Any] = {
        "Status": int(header.rcode),
        "TC": bool(header.tc),
        "RD": bool(header.rd),
        "RA": bool(header.ra),
        "AD": bool(getattr(header, "ad", 0)),
        "CD": bool(getattr(header, "cd", 0)),
        "Question": [
            {"name": str(q.qname), "type": int(q.qtype)} for q in reply.questions
        ],
    }
    if answers:
        doc["Answer"] = answers
    return doc


class WireTransport(Transport):
    """
    Brief: Query a nameserver directly over UDP, retrying over TCP on truncation.

    Inputs:
    - server: default server address; None uses the first resolv.conf entry

    Outputs:
    - Transport instance
    """

    def __init__(self, server: Optional[str] = None) -> None:
        if server is None:
            found = _parse_resolv_conf_nameservers()
            server = found[0] if found else FALLBACK_NAMESERVER
        # Raises TransportError for a malformed address.
        parse_server_address(server)
        self.server = server
        self.identity = server

    def validate_server(self, server: str) -> None:
        try:
            parse_server_address(server)
        except TransportError as e:
            raise InvalidInputError("not a nameserver address", server) from e

    @staticmethod
    def build_query(name: str, record_type: int, dnssec: bool) -> DNSRecord:
        query = DNSRecord(DNSHeader(rd=1), q=DNSQuestion(name, int(record_type)))
        if dnssec:
            query.header.ad = 1
            query.add_ar(EDNS0(flags="do", udp_len=4096))
        return query

    def perform_query(
        self,
        name: str,
        record_type: int,
        server: Optional[str],
        dnssec: bool,
        timeout: float,
    ) -> Dict[str, Any]:
        host, port, ipv6 = parse_server_address(server or self.server)
        query = self.build_query(name, record_type, dnssec)
        logger.debug("Querying %s type %s via %s:%d", name, record_type, host, port)
        try:
            reply = DNSRecord.parse(
                query.send(host, port, tcp=False, timeout=timeout, ipv6=ipv6)
            )
            if reply.header.tc:
                logger.debug("Truncated UDP response for %s; retrying over TCP", name)
                reply = DNSRecord.parse(
                    query.send(host, port, tcp=True, timeout=timeout, ipv6=ipv6)
                )
        except socket.timeout as e:
            raise QueryTimeoutError(
                f"Query to {host}:{port} timed out", timeout
            ) from e
        except OSError as e:
            raise TransportError(f"Network error: {e}") from e
        except DNSError as e:
            raise TransportError(f"Malformed response from {host}:{port}: {e}") from e
        if reply.header.id != query.header.id:
            raise TransportError(f"Mismatched response id from {host}:{port}")
        return reply_to_document(reply)
