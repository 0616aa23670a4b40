"""dnsolve package"""

from .builder import DNSolveBuilder
from .cache import QueryFingerprint, ResponseCache
from .exceptions import (
    DisposedError,
    DNSolveError,
    HTTPStatusError,
    InvalidInputError,
    LookupStatusError,
    QueryTimeoutError,
    SRVRecordFormatError,
    TransportError,
)
from .parsed_records import CAARecord, MXRecord, SOARecord, SRVRecord, TXTRecord
from .record_types import RecordType
from .resolver import DNSolve
from .response import Answer, Question, Record, ResolveResponse
from .reverse import build_reverse_name
from .stats import StatisticsRecorder

__all__ = [
    "Answer",
    "CAARecord",
    "DNSolve",
    "DNSolveBuilder",
    "DNSolveError",
    "DisposedError",
    "HTTPStatusError",
    "InvalidInputError",
    "LookupStatusError",
    "MXRecord",
    "QueryFingerprint",
    "QueryTimeoutError",
    "Question",
    "Record",
    "RecordType",
    "ResolveResponse",
    "ResponseCache",
    "SOARecord",
    "SRVRecord",
    "SRVRecordFormatError",
    "StatisticsRecorder",
    "TXTRecord",
    "TransportError",
    "build_reverse_name",
]
