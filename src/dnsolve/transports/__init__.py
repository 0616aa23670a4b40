"""Query transports producing answer documents for the resolver."""

from .base import Transport
from .doh import DNSProvider, DoHJsonTransport
from .wire import WireTransport

__all__ = ["DNSProvider", "DoHJsonTransport", "Transport", "WireTransport"]
