from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .config.config_parser import build_resolver, load_config, parse_config
from .config.config_schema import DNSolveConfig
from .exceptions import DNSolveError, InvalidInputError
from .logging_config import init_logging
from .record_types import parse_record_type
from .stats import format_snapshot_json

EXIT_OK = 0
EXIT_LOOKUP_FAILED = 1
EXIT_INVALID_INPUT = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dnsolve", description="Resolve DNS records via DoH or classic DNS"
    )
    parser.add_argument("target", help="Domain name, or IP address with --reverse")
    parser.add_argument(
        "-t", "--type", default="A", help="Record type name or code (default: A)"
    )
    parser.add_argument(
        "--reverse", action="store_true", help="Perform a PTR lookup for an IP"
    )
    parser.add_argument("--dnssec", action="store_true", help="Request DNSSEC data")
    parser.add_argument("--config", default=None, help="Path to YAML config")
    parser.add_argument(
        "--transport", choices=("doh", "wire"), default=None, help="Transport kind"
    )
    parser.add_argument(
        "--provider",
        choices=("google", "cloudflare"),
        default=None,
        help="DoH provider",
    )
    parser.add_argument(
        "--server", default=None, help="DoH URL or nameserver address ('ip[:port]')"
    )
    parser.add_argument("--retries", type=int, default=None, help="Max retries")
    parser.add_argument(
        "--timeout", type=float, default=None, help="Per-attempt timeout (seconds)"
    )
    parser.add_argument(
        "--bind", action="store_true", help="Print records as BIND zone lines"
    )
    parser.add_argument(
        "--stats", action="store_true", help="Log query statistics when done"
    )
    parser.add_argument("--log-level", default=None, help="Logging level")
    return parser


def _apply_overrides(cfg: DNSolveConfig, args: argparse.Namespace) -> DNSolveConfig:
    """Brief: Merge command-line flags over the file/default configuration.

    Inputs:
      - cfg: Validated configuration.
      - args: Parsed CLI namespace.

    Outputs:
      - New validated DNSolveConfig.
    """

    data: Dict[str, Any] = cfg.model_dump()
    if args.transport:
        data["transport"]["kind"] = args.transport
    if args.provider:
        data["transport"]["provider"] = args.provider
    if args.retries is not None:
        data["resolver"]["max_retries"] = args.retries
    if args.timeout is not None:
        data["resolver"]["timeout"] = args.timeout
    if args.stats:
        data["resolver"]["enable_statistics"] = True
    if args.log_level:
        data["logging"]["level"] = args.log_level
    return parse_config(data)


async def _run(cfg: DNSolveConfig, args: argparse.Namespace) -> List[Dict[str, Any]]:
    logger = logging.getLogger("dnsolve.main")
    with build_resolver(cfg) as resolver:
        try:
            if args.reverse:
                records = await resolver.reverse_lookup(
                    args.target, server=args.server
                )
                rows = [r.to_json() for r in records]
                if args.bind:
                    rows = [{"bind": r.to_bind()} for r in records]
                return rows
            response = await resolver.lookup(
                args.target,
                parse_record_type(args.type),
                dnssec=args.dnssec,
                server=args.server,
            )
            if args.bind:
                return [{"bind": r.to_bind()} for r in response.records]
            return [response.to_json()]
        finally:
            if resolver.statistics is not None:
                logger.info(
                    "stats: %s", format_snapshot_json(resolver.statistics.snapshot())
                )
            if resolver.cache is not None:
                logger.info(
                    "cache: hits=%d misses=%d size=%d",
                    resolver.cache.hits,
                    resolver.cache.misses,
                    resolver.cache.size,
                )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the dnsolve CLI.

    Args:
        argv: Command-line arguments.

    Returns:
        An exit code: 0 on success, 1 when the lookup failed, 2 on invalid
        input or configuration.

    Example use:
        CLI:
            dnsolve _xmpp._tcp.example.com --type SRV --dnssec
            dnsolve 8.8.8.8 --reverse --transport wire
    """
    args = _build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config) if args.config else parse_config(None)
        cfg = _apply_overrides(cfg, args)
    except (OSError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INVALID_INPUT

    init_logging(cfg.logging.model_dump())
    logger = logging.getLogger("dnsolve.main")

    try:
        rows = asyncio.run(_run(cfg, args))
    except InvalidInputError as exc:
        logger.error("%s", exc)
        return EXIT_INVALID_INPUT
    except DNSolveError as exc:
        logger.error("Lookup failed: %s", exc)
        return EXIT_LOOKUP_FAILED

    for row in rows:
        if "bind" in row:
            print(row["bind"])
        else:
            print(json.dumps(row, indent=2, sort_keys=True))
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
