"""
Brief: Tests for dnsolve.config loading, validation and object construction.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from dnsolve.config.config_parser import (
    build_resolver,
    build_transport,
    load_config,
    parse_config,
)
from dnsolve.config.config_schema import DNSolveConfig, TransportConfig
from dnsolve.transports.doh import DoHJsonTransport
from dnsolve.transports.wire import WireTransport


def test_empty_config_uses_defaults():
    cfg = parse_config(None)
    assert isinstance(cfg, DNSolveConfig)
    assert cfg.resolver.enable_cache is False
    assert cfg.resolver.cache_max_size == 100
    assert cfg.resolver.max_retries == 0
    assert cfg.resolver.timeout == 5.0
    assert cfg.transport.kind == "doh"
    assert cfg.logging.level == "info"


def test_load_config_from_yaml(tmp_path):
    """
    Brief: load_config reads YAML and validates every section.

    Inputs:
      - tmp_path: pytest temporary directory

    Outputs:
      - None: Asserts values from the file are applied
    """
    path = tmp_path / "dnsolve.yaml"
    path.write_text(
        "resolver:\n"
        "  enable_cache: true\n"
        "  cache_max_size: 500\n"
        "  enable_statistics: true\n"
        "  max_retries: 2\n"
        "  retry_delay: 0.25\n"
        "  timeout: 3\n"
        "transport:\n"
        "  kind: doh\n"
        "  provider: Cloudflare\n"
        "logging:\n"
        "  level: debug\n"
    )
    cfg = load_config(str(path))
    assert cfg.resolver.enable_cache is True
    assert cfg.resolver.cache_max_size == 500
    assert cfg.resolver.max_retries == 2
    assert cfg.resolver.retry_delay == 0.25
    assert cfg.transport.provider == "cloudflare"
    assert cfg.logging.level == "debug"


def test_empty_yaml_file_is_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == DNSolveConfig()


def test_missing_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        load_config(str(tmp_path / "nope.yaml"))


def test_malformed_yaml_raises_value_error(tmp_path):
    """
    Brief: A YAML syntax error surfaces as ValueError naming the file.

    Inputs:
      - tmp_path: pytest temporary directory

    Outputs:
      - None: Asserts ValueError with the path in the message
    """
    path = tmp_path / "broken.yaml"
    path.write_text("resolver: [unclosed\n")
    with pytest.raises(ValueError) as excinfo:
        load_config(str(path))
    assert str(path) in str(excinfo.value)


def test_library_level_defaults_to_warning():
    assert parse_config(None).logging.library_level == "warning"
    cfg = parse_config({"logging": {"library_level": "error"}})
    assert cfg.logging.library_level == "error"


@pytest.mark.parametrize(
    "data",
    [
        {"resolver": {"cache_max_size": 0}},
        {"resolver": {"max_retries": -1}},
        {"resolver": {"timeout": 0}},
        {"resolver": {"unknown_key": 1}},
        {"transport": {"kind": "carrier-pigeon"}},
        {"transport": {"provider": "quad9"}},
        {"extra_section": {}},
    ],
)
def test_invalid_config_raises_value_error(data):
    with pytest.raises(ValueError):
        parse_config(data)


def test_non_mapping_root_rejected():
    with pytest.raises(ValueError):
        parse_config(["resolver"])


def test_build_transport_doh_provider_and_url():
    t = build_transport(TransportConfig(provider="cloudflare"))
    assert isinstance(t, DoHJsonTransport)
    assert t.endpoint == "https://cloudflare-dns.com/dns-query"
    t.close()

    t = build_transport(
        TransportConfig(provider="google", url="https://dns.example/resolve")
    )
    assert t.endpoint == "https://dns.example/resolve"
    t.close()

    t = build_transport(TransportConfig())
    assert t.endpoint == "https://dns.google/resolve"
    t.close()


def test_build_transport_wire():
    t = build_transport(TransportConfig(kind="wire", server="9.9.9.9:53"))
    assert isinstance(t, WireTransport)
    assert t.identity == "9.9.9.9:53"


def test_build_resolver_applies_resolver_section():
    cfg = parse_config(
        {
            "resolver": {"enable_cache": True, "cache_max_size": 3},
            "transport": {"kind": "wire", "server": "127.0.0.1"},
        }
    )
    resolver = build_resolver(cfg)
    try:
        assert resolver.cache.max_size == 3
        assert isinstance(resolver.transport, WireTransport)
    finally:
        resolver.dispose()
