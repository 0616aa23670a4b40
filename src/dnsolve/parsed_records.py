"""
Typed decoding of raw resource-record text (SRV, MX, CAA, SOA, TXT).

Each record type has its own small tokenizer. A malformed SRV record aborts the
whole derivation with SRVRecordFormatError; malformed MX, CAA and SOA records
are skipped. TXT decoding always succeeds.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from .exceptions import SRVRecordFormatError
from .record_types import RecordType

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .response import Record

logger = logging.getLogger(__name__)

# Hostname-like token: labels of letters, digits, '-', '_' separated by dots,
# optionally fully qualified with a trailing dot ('.' alone is the root).
_HOSTNAME_RE = re.compile(
    r"^(?:\.|[A-Za-z0-9_*](?:[A-Za-z0-9_\-.]*[A-Za-z0-9_\-])?\.?)$"
)
_CAA_RE = re.compile(r'^(\d+)\s+"?([A-Za-z0-9]+)"?\s+"(.*)"$')


@dataclass(frozen=True)
class SRVRecord:
    """Parsed SRV (service) record."""

    priority: int
    weight: int
    port: int
    target: str
    fqdn: str


@dataclass(frozen=True)
class MXRecord:
    """Parsed MX (mail exchange) record; lower priority is preferred."""

    priority: int
    exchange: str
    fqdn: str


@dataclass(frozen=True)
class CAARecord:
    """Parsed CAA (certificate authority authorization) record."""

    flags: int
    tag: str
    value: str
    fqdn: str


@dataclass(frozen=True)
class SOARecord:
    """Parsed SOA (start of authority) record.

    rname is the administrator mailbox with '@' written as '.', as on the wire.
    """

    mname: str
    rname: str
    serial: int
    refresh: int
    retry: int
    expire: int
    minimum: int
    fqdn: str


@dataclass(frozen=True)
class TXTRecord:
    """TXT record text with the surrounding quotes removed."""

    text: str
    fqdn: str


@dataclass(frozen=True)
class TypedRecords:
    """Typed lists derived from an answer; each is None when nothing contributed."""

    srv: Optional[Tuple[SRVRecord, ...]] = None
    mx: Optional[Tuple[MXRecord, ...]] = None
    caa: Optional[Tuple[CAARecord, ...]] = None
    soa: Optional[Tuple[SOARecord, ...]] = None
    txt: Optional[Tuple[TXTRecord, ...]] = None


def _to_uint(token: str) -> Optional[int]:
    if token.isascii() and token.isdigit():
        return int(token)
    return None


def _is_hostname(token: str) -> bool:
    return bool(_HOSTNAME_RE.match(token))


def parse_srv(data: str, fqdn: str) -> SRVRecord:
    """
    Brief: Parse SRV data 'priority weight port target'.

    Inputs:
    - data: raw record data
    - fqdn: owner name of the record

    Outputs:
    - SRVRecord

    Raises:
    - SRVRecordFormatError when the data does not match the pattern

    Example:
        >>> parse_srv("10 20 5222 xmpp.example.com", "_xmpp._tcp.example.com")
        SRVRecord(priority=10, weight=20, port=5222, target='xmpp.example.com', fqdn='_xmpp._tcp.example.com')
    """
    tokens = data.split()
    if len(tokens) == 4:
        priority, weight, port = (_to_uint(t) for t in tokens[:3])
        target = tokens[3]
        if (
            priority is not None
            and weight is not None
            and port is not None
            and _is_hostname(target)
        ):
            return SRVRecord(
                priority=priority,
                weight=weight,
                port=port,
                target=target,
                fqdn=fqdn,
            )
    raise SRVRecordFormatError(
        f"malformed SRV record for {fqdn}: {data!r}", data=data, fqdn=fqdn
    )


def parse_mx(data: str, fqdn: str) -> Optional[MXRecord]:
    """Parse MX data 'priority exchange'; returns None when malformed."""
    tokens = data.split()
    if len(tokens) != 2:
        return None
    priority = _to_uint(tokens[0])
    if priority is None or not _is_hostname(tokens[1]):
        return None
    return MXRecord(priority=priority, exchange=tokens[1], fqdn=fqdn)


def parse_caa(data: str, fqdn: str) -> Optional[CAARecord]:
    """Parse CAA data 'flags tag "value"' (tag optionally quoted)."""
    match = _CAA_RE.match(data.strip())
    if not match:
        return None
    flags, tag, value = match.groups()
    return CAARecord(flags=int(flags), tag=tag, value=value, fqdn=fqdn)


def parse_soa(data: str, fqdn: str) -> Optional[SOARecord]:
    """Parse the seven SOA fields; returns None when malformed."""
    tokens = data.split()
    if len(tokens) != 7:
        return None
    mname, rname = tokens[0], tokens[1]
    numbers = [_to_uint(t) for t in tokens[2:]]
    if any(n is None for n in numbers):
        return None
    serial, refresh, retry, expire, minimum = numbers
    return SOARecord(
        mname=mname,
        rname=rname,
        serial=serial,
        refresh=refresh,
        retry=retry,
        expire=expire,
        minimum=minimum,
        fqdn=fqdn,
    )


def parse_txt(data: str, fqdn: str) -> TXTRecord:
    """
    Strip one leading and one trailing double quote from TXT data.

    Example:
        >>> parse_txt('"v=spf1 -all"', "example.com").text
        'v=spf1 -all'
    """
    text = data
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return TXTRecord(text=text, fqdn=fqdn)


def _tuple_or_none(items: List) -> Optional[tuple]:
    return tuple(items) if items else None


def derive_typed(records: Optional[Iterable["Record"]]) -> TypedRecords:
    """
    Brief: Derive typed record lists from generic answer records.

    Inputs:
    - records: iterable of Record (or None)

    Outputs:
    - TypedRecords with a tuple per type that contributed at least one record

    Notes:
    - Pure function of its input; deriving twice yields equal results.
    - SRVRecordFormatError propagates and no partial result is returned.
    """
    srv: List[SRVRecord] = []
    mx: List[MXRecord] = []
    caa: List[CAARecord] = []
    soa: List[SOARecord] = []
    txt: List[TXTRecord] = []

    for record in records or ():
        rtype = record.type
        if rtype == RecordType.SRV:
            srv.append(parse_srv(record.data, record.name))
        elif rtype == RecordType.MX:
            parsed_mx = parse_mx(record.data, record.name)
            if parsed_mx is None:
                logger.debug("Skipping malformed MX record for %s", record.name)
            else:
                mx.append(parsed_mx)
        elif rtype == RecordType.CAA:
            parsed_caa = parse_caa(record.data, record.name)
            if parsed_caa is None:
                logger.debug("Skipping malformed CAA record for %s", record.name)
            else:
                caa.append(parsed_caa)
        elif rtype == RecordType.SOA:
            parsed_soa = parse_soa(record.data, record.name)
            if parsed_soa is None:
                logger.debug("Skipping malformed SOA record for %s", record.name)
            else:
                soa.append(parsed_soa)
        elif rtype == RecordType.TXT:
            txt.append(parse_txt(record.data, record.name))

    return TypedRecords(
        srv=_tuple_or_none(srv),
        mx=_tuple_or_none(mx),
        caa=_tuple_or_none(caa),
        soa=_tuple_or_none(soa),
        txt=_tuple_or_none(txt),
    )
