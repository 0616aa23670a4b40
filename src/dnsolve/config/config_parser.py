"""Configuration loading for dnsolve.

Brief:
  Reads a YAML configuration file, validates it against the pydantic models in
  dnsolve.config.config_schema and builds the configured transport and
  resolver.

Inputs:
  - YAML config paths or already-parsed mappings

Outputs:
  - DNSolveConfig instances, Transport and DNSolve objects
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..resolver import DNSolve
from ..transports.base import Transport
from ..transports.doh import DoHJsonTransport
from ..transports.wire import WireTransport
from .config_schema import DNSolveConfig, TransportConfig

logger = logging.getLogger(__name__)


def parse_config(data: Optional[Dict[str, Any]]) -> DNSolveConfig:
    """Brief: Validate a parsed configuration mapping.

    Inputs:
      - data: Mapping loaded from YAML (None is treated as empty).

    Outputs:
      - DNSolveConfig instance.

    Raises:
      - ValueError with the validation details when the mapping is invalid.
    """

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("configuration root must be a mapping")
    try:
        return DNSolveConfig(**data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def load_config(path: str) -> DNSolveConfig:
    """Brief: Read and validate a YAML configuration file.

    Inputs:
      - path: Filesystem path to the YAML document.

    Outputs:
      - DNSolveConfig instance.

    Raises:
      - OSError when the file cannot be read.
      - ValueError when the YAML is malformed or fails validation.
    """

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    logger.debug("Loaded configuration from %s", path)
    return parse_config(data)


def build_transport(cfg: TransportConfig) -> Transport:
    """Brief: Construct the transport described by cfg.

    Inputs:
      - cfg: TransportConfig.

    Outputs:
      - DoHJsonTransport or WireTransport instance.
    """

    if cfg.kind == "wire":
        return WireTransport(cfg.server)
    return DoHJsonTransport(cfg.url or cfg.provider, verify=cfg.verify)


def build_resolver(cfg: DNSolveConfig) -> DNSolve:
    """Brief: Construct a DNSolve handle from a full configuration."""

    return DNSolve(build_transport(cfg.transport), config=cfg.resolver)
