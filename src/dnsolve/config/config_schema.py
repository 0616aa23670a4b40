"""Typed configuration models for dnsolve.

A YAML configuration file has three optional sections:

    resolver:
      enable_cache: true
      cache_max_size: 500
      enable_statistics: true
      max_retries: 2
      retry_delay: 0.25
      timeout: 3
    transport:
      kind: doh            # or 'wire'
      provider: cloudflare # doh only; or set 'url'
    logging:
      level: debug
      library_level: warning  # urllib3/requests
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResolverConfig(BaseModel):
    """Brief: Typed configuration for the DNSolve resolver.

    Inputs:
      - enable_cache: Keep successful answers in a ResponseCache.
      - cache_max_size: Maximum cached answers (>= 1).
      - enable_statistics: Track query counts and latency.
      - max_retries: Retries after the first attempt (>= 0).
      - retry_delay: Base backoff delay in seconds (>= 0).
      - timeout: Per-attempt deadline in seconds (> 0).
      - max_workers: Threads available to blocking transports (>= 1).

    Outputs:
      - ResolverConfig instance with validated field types.
    """

    model_config = ConfigDict(extra="forbid")

    enable_cache: bool = False
    cache_max_size: int = Field(default=100, ge=1)
    enable_statistics: bool = False
    max_retries: int = Field(default=0, ge=0)
    retry_delay: float = Field(default=0.5, ge=0)
    timeout: float = Field(default=5.0, gt=0)
    max_workers: int = Field(default=8, ge=1)


class TransportConfig(BaseModel):
    """Brief: Which transport to build and how to reach its server.

    Inputs:
      - kind: 'doh' (DNS-over-HTTPS JSON API) or 'wire' (UDP/TCP port 53).
      - provider: DoH provider name ('google' or 'cloudflare').
      - url: Explicit DoH endpoint URL; takes precedence over provider.
      - server: Nameserver address for the wire transport ('ip[:port]').
      - verify: Verify TLS certificates for DoH.

    Outputs:
      - TransportConfig instance.
    """

    model_config = ConfigDict(extra="forbid")

    kind: Literal["doh", "wire"] = "doh"
    provider: Optional[str] = None
    url: Optional[str] = None
    server: Optional[str] = None
    verify: bool = True

    @field_validator("provider")
    @classmethod
    def _known_provider(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().lower()
        if value not in ("google", "cloudflare"):
            raise ValueError("provider must be 'google' or 'cloudflare'")
        return value


class LoggingConfig(BaseModel):
    """Logging section; see dnsolve.logging_config.init_logging."""

    model_config = ConfigDict(extra="forbid")

    level: str = "info"
    library_level: str = "warning"
    stderr: bool = True
    file: Optional[str] = None


class DNSolveConfig(BaseModel):
    """Top-level configuration document."""

    model_config = ConfigDict(extra="forbid")

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
