from __future__ import annotations

from typing import Any, Dict, Optional


class Transport:
    """Base class for query transports.

    Brief:
      A transport performs exactly one round trip per perform_query() call and
      returns the answer document (DoH JSON schema) as a plain dict. It never
      retries; retry, timeout racing and caching belong to the resolver.

    Inputs:
      - None.

    Outputs:
      - Transport instance.
    """

    #: Stable identity of the default server/provider, used in cache keys.
    identity: str = ""

    def perform_query(
        self,
        name: str,
        record_type: int,
        server: Optional[str],
        dnssec: bool,
        timeout: float,
    ) -> Dict[str, Any]:
        """Brief: Send one query and return the decoded answer document.

        Inputs:
          - name: Query name (domain or reverse name).
          - record_type: Numeric DNS type code.
          - server: Optional server/endpoint override; None uses the default.
          - dnssec: Request DNSSEC data.
          - timeout: Seconds allowed for this round trip.

        Outputs:
          - dict following the answer document schema.

        Raises:
          - QueryTimeoutError when the round trip exceeds its deadline.
          - TransportError for connectivity or protocol failures.
        """

        raise NotImplementedError(
            "Transport.perform_query() must be implemented by a subclass"
        )

    def validate_server(self, server: str) -> None:
        """Brief: Reject a per-call server override this transport cannot use.

        Inputs:
          - server: Override passed to a lookup.

        Outputs:
          - None

        Raises:
          - InvalidInputError when the override is malformed.
        """

        return None

    def close(self) -> None:
        """Release any resources held by the transport (no-op by default)."""
        return None
