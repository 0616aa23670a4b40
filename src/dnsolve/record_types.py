from __future__ import annotations

import enum
from typing import Union

from .exceptions import InvalidInputError


class RecordType(enum.IntEnum):
    """Supported DNS record types; each member's value is its numeric type code."""

    A = 1
    NS = 2
    CNAME = 5
    SOA = 6
    WKS = 11
    PTR = 12
    HINFO = 13
    MX = 15
    TXT = 16
    RP = 17
    AAAA = 28
    SRV = 33
    NAPTR = 35
    CERT = 37
    DNAME = 39
    DS = 43
    SSHFP = 44
    IPSECKEY = 45
    RRSIG = 46
    NSEC = 47
    DNSKEY = 48
    NSEC3PARAM = 51
    TLSA = 52
    CDS = 59
    SPF = 99
    ANY = 255
    CAA = 257


DEFAULT_RECORD_TYPE = RecordType.A


def symbol_for(code: int) -> RecordType:
    """
    Map a numeric DNS type code to its RecordType.

    Inputs:
        code: Numeric type code from an answer document.

    Outputs:
        RecordType member; unrecognized codes decode to RecordType.A.

    Example:
        >>> symbol_for(15)
        <RecordType.MX: 15>
        >>> symbol_for(65)
        <RecordType.A: 1>
    """
    try:
        return RecordType(int(code))
    except (TypeError, ValueError):
        return DEFAULT_RECORD_TYPE


def code_for(symbol: RecordType) -> int:
    """
    Map a RecordType to its numeric type code.

    Inputs:
        symbol: RecordType member.

    Outputs:
        int code; falls back to the A code when the symbol is not a member.
    """
    if isinstance(symbol, RecordType):
        return int(symbol.value)
    return int(DEFAULT_RECORD_TYPE.value)


def parse_record_type(value: Union[str, int, RecordType]) -> RecordType:
    """Brief: Coerce a user-supplied record type (name, code or member).

    Inputs:
      - value: 'mx', 'MX', '15', 15 or RecordType.MX.

    Outputs:
      - RecordType member.

    Notes:
      - Unlike symbol_for(), unknown names and codes raise InvalidInputError
        since they come from callers rather than from a server.
    """

    if isinstance(value, RecordType):
        return value
    if isinstance(value, int):
        try:
            return RecordType(value)
        except ValueError:
            raise InvalidInputError(
                "unsupported record type code", str(value)
            ) from None
    text = str(value).strip()
    if text.isdigit():
        return parse_record_type(int(text))
    try:
        return RecordType[text.upper()]
    except KeyError:
        raise InvalidInputError("unsupported record type", text) from None
