"""Error taxonomy raised by dnsolve lookups.

Every public operation either returns a fully populated result or raises one
of the exception types below.
"""

from __future__ import annotations

from typing import Dict, Optional

# Textual names for DNS response codes (RFC 1035 / RFC 6895).
RCODE_MESSAGES: Dict[int, str] = {
    0: "no error",
    1: "format error",
    2: "server failure",
    3: "non-existent domain",
    4: "not implemented",
    5: "query refused",
}


def describe_status(status: int) -> str:
    """Brief: Return a human-readable description of a DNS status code.

    Inputs:
      - status: Integer RCODE from the answer document.

    Outputs:
      - str description; unknown codes render as 'unknown error (<code>)'.

    Example:
      >>> describe_status(3)
      'non-existent domain'
      >>> describe_status(42)
      'unknown error (42)'
    """

    return RCODE_MESSAGES.get(int(status), f"unknown error ({int(status)})")


class DNSolveError(Exception):
    """Base class for every error raised by dnsolve."""


class InvalidInputError(DNSolveError, ValueError):
    """
    Brief: Invalid domain name or IP address supplied by the caller.

    Inputs:
    - message: description of the validation failure
    - value: the offending input, when available

    Outputs:
    - Exception instance
    """

    def __init__(self, message: str, value: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.value = value

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.message} (input: {self.value!r})"
        return self.message


class QueryTimeoutError(DNSolveError):
    """
    Brief: A single query attempt exceeded its deadline.

    Inputs:
    - message: description
    - timeout: the deadline in seconds that was exceeded, when known

    Outputs:
    - Exception instance
    """

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        super().__init__(message)
        self.message = message
        self.timeout = timeout

    def __str__(self) -> str:
        if self.timeout is not None:
            return f"{self.message} (timeout: {self.timeout:g}s)"
        return self.message


class TransportError(DNSolveError):
    """
    Brief: The transport collaborator failed (connectivity or runtime error).

    Inputs:
    - message: description

    Outputs:
    - Exception instance
    """


class HTTPStatusError(TransportError):
    """DoH endpoint answered with a non-2xx HTTP status."""

    def __init__(
        self,
        status_code: int,
        headers: Optional[Dict[str, str]] = None,
        body: str = "",
    ) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = int(status_code)
        self.headers = dict(headers or {})
        self.body = body

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.body[:200]}"


class LookupStatusError(DNSolveError):
    """
    Brief: The server answered with a non-zero DNS status code.

    Inputs:
    - status_code: DNS RCODE from the answer document
    - message: optional override; defaults to the RCODE description

    Outputs:
    - Exception instance

    Notes:
    - Never retried; the query reached a server and was answered negatively.
    """

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        self.status_code = int(status_code)
        self.message = message or describe_status(self.status_code)
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.message} (status: {self.status_code})"


class SRVRecordFormatError(DNSolveError):
    """
    Brief: An SRV record's data did not match 'priority weight port target'.

    Inputs:
    - message: description
    - data: raw record data that failed to parse
    - fqdn: owner name of the offending record

    Outputs:
    - Exception instance
    """

    def __init__(self, message: str, data: str = "", fqdn: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.data = data
        self.fqdn = fqdn


class DisposedError(DNSolveError, RuntimeError):
    """Operation invoked on a resolver that has already been disposed."""
