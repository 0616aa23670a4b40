"""Configuration models and loaders for dnsolve."""

from .config_schema import DNSolveConfig, LoggingConfig, ResolverConfig, TransportConfig

__all__ = ["DNSolveConfig", "LoggingConfig", "ResolverConfig", "TransportConfig"]
