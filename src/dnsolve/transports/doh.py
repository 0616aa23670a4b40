import enum
import importlib.metadata
import logging
import urllib.parse
from typing import Any, Dict, Optional, Union

import requests

from ..exceptions import (
    HTTPStatusError,
    InvalidInputError,
    QueryTimeoutError,
    TransportError,
)
from .base import Transport

logger = logging.getLogger(__name__)

try:
    DNSOLVE_VERSION = importlib.metadata.version("dnsolve")
except Exception:  # pragma: no cover - not installed as a distribution
    DNSOLVE_VERSION = "unknown"


class DNSProvider(enum.Enum):
    """Public DNS-over-HTTPS JSON API providers."""

    GOOGLE = "google"
    CLOUDFLARE = "cloudflare"


PROVIDER_URLS: Dict[DNSProvider, str] = {
    DNSProvider.GOOGLE: "https://dns.google/resolve",
    DNSProvider.CLOUDFLARE: "https://cloudflare-dns.com/dns-query",
}

DNS_JSON_CONTENT_TYPE = "application/dns-json"


def resolve_endpoint(value: Union[str, DNSProvider, None]) -> str:
    """
    Brief: Turn a provider name or URL into a DoH JSON endpoint URL.

    Inputs:
    - value: DNSProvider, provider name ('google', 'cloudflare'), URL, or None

    Outputs:
    - str endpoint URL (None maps to Google)

    Example:
        >>> resolve_endpoint("cloudflare")
        'https://cloudflare-dns.com/dns-query'
    """
    if value is None:
        return PROVIDER_URLS[DNSProvider.GOOGLE]
    if isinstance(value, DNSProvider):
        return PROVIDER_URLS[value]
    text = str(value).strip()
    try:
        return PROVIDER_URLS[DNSProvider(text.lower())]
    except ValueError:
        pass
    parsed = urllib.parse.urlparse(text)
    if parsed.scheme not in ("https", "http") or not parsed.netloc:
        raise TransportError(f"Unsupported DoH endpoint: {text!r}")
    return text


class DoHJsonTransport(Transport):
    """
    Brief: DNS-over-HTTPS transport for the JSON API (application/dns-json).

    Inputs:
    - endpoint: provider name, DNSProvider, or endpoint URL (default Google)
    - session: optional requests.Session to reuse
    - verify: verify TLS certificates
    - headers: extra HTTP headers

    Outputs:
    - Transport instance

    Notes:
    - Sends GET <endpoint>?name=<name>&type=<code>&do=<0|1>.
    - requests.Timeout becomes QueryTimeoutError; other request failures,
      non-2xx statuses and undecodable bodies become TransportError.
    """

    def __init__(
        self,
        endpoint: Union[str, DNSProvider, None] = None,
        *,
        session: Optional[requests.Session] = None,
        verify: bool = True,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.endpoint = resolve_endpoint(endpoint)
        self.identity = self.endpoint
        self.verify = bool(verify)
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._headers = {"Accept": DNS_JSON_CONTENT_TYPE, **(headers or {})}
        # Preserve any explicit header regardless of casing.
        if not any(k.lower() == "user-agent" for k in self._headers):
            self._headers["User-Agent"] = f"dnsolve v{DNSOLVE_VERSION}"

    def validate_server(self, server: str) -> None:
        try:
            resolve_endpoint(server)
        except TransportError as e:
            raise InvalidInputError("not a DoH provider or URL", server) from e

    def perform_query(
        self,
        name: str,
        record_type: int,
        server: Optional[str],
        dnssec: bool,
        timeout: float,
    ) -> Dict[str, Any]:
        url = resolve_endpoint(server) if server else self.endpoint
        params = {
            "name": name,
            "type": str(int(record_type)),
            "do": "1" if dnssec else "0",
        }
        logger.debug("DoH query %s type %s via %s", name, record_type, url)
        try:
            resp = self._session.get(
                url,
                params=params,
                headers=self._headers,
                timeout=timeout,
                verify=self.verify,
            )
        except requests.Timeout as e:
            raise QueryTimeoutError(f"DoH request to {url} timed out", timeout) from e
        except requests.RequestException as e:
            raise TransportError(f"Network error: {e}") from e

        if not 200 <= resp.status_code < 300:
            raise HTTPStatusError(resp.status_code, dict(resp.headers), resp.text)
        try:
            doc = resp.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {url}: {e}") from e
        if not isinstance(doc, dict):
            raise TransportError(f"Unexpected answer document from {url}")
        return doc

    def close(self) -> None:
        if self._owns_session:
            self._session.close()
