#!/usr/bin/env python3
"""
Freight Rates - ShipPrimus rate lookup from the command line

Prints {"data": [...], "cheapest": [...]} as JSON for the given query.

Exit codes:
- 0: success
- 1: authentication or upstream failure
- 2: invalid input (e.g. malformed --freight-info JSON)

Credentials come from the SHIPPRIMUS_* environment variables.
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Make "src/" importable when running as: python3 scripts/fetch_rates.py
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from freight_rates.shipprimus import (  # noqa: E402
    AuthError,
    ClientInputError,
    ShipPrimusConfig,
    ShipPrimusConfigError,
    TransportError,
    build_client,
    get_rate_quotes,
)


def setup_logging(log_level: str, log_file: Optional[Path]) -> logging.Logger:
    logger = logging.getLogger("fetch_rates")
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers.clear()

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # stdout carries the JSON payload, so logs go to stderr
    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(fmt)
    ch.setLevel(logger.level)
    logger.addHandler(ch)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        fh.setLevel(logger.level)
        logger.addHandler(fh)

    return logger


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch ShipPrimus contract rates")
    p.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter passed through to the rate lookup (repeatable).",
    )
    p.add_argument(
        "--freight-info",
        default=None,
        help="freightInfo as a JSON string, e.g. '[{\"qty\":1,\"weight\":100}]'.",
    )
    p.add_argument(
        "--vendor-id",
        default=None,
        help="Override SHIPPRIMUS_VENDOR_ID.",
    )
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    p.add_argument(
        "--log-file",
        default="",
        help="Optional log file path (e.g., logs/fetch_rates.log).",
    )
    p.add_argument(
        "--pretty",
        action="store_true",
        help="Indent the JSON output.",
    )
    return p.parse_args(argv)


def build_query(args: argparse.Namespace) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    for item in args.param:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ClientInputError(f"Invalid --param '{item}'; expected KEY=VALUE")
        query[key.strip()] = value
    if args.freight_info is not None:
        query["freightInfo"] = args.freight_info
    return query


def emit(obj: Any, pretty: bool) -> None:
    print(json.dumps(obj, indent=2 if pretty else None, ensure_ascii=False))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    log_file = Path(args.log_file) if args.log_file.strip() else None
    logger = setup_logging(args.log_level, log_file)
    # Route library loggers through the same handlers
    lib_logger = logging.getLogger("freight_rates")
    lib_logger.setLevel(logger.level)
    lib_logger.handlers = list(logger.handlers)

    try:
        query = build_query(args)
        config = ShipPrimusConfig.from_env(vendor_id=args.vendor_id)
        client = build_client(config)
        payload = get_rate_quotes(query, client)
    except ClientInputError as e:
        logger.error("Invalid input: %s", e)
        emit({"error": str(e)}, args.pretty)
        return 2
    except (ShipPrimusConfigError, AuthError, TransportError) as e:
        logger.error("Rate lookup failed: %s: %s", type(e).__name__, e)
        logger.debug("Exception details", exc_info=True)
        emit({"error": str(e)}, args.pretty)
        return 1

    logger.info(
        "Fetched %d rates, %d service levels",
        len(payload["data"]),
        len(payload["cheapest"]),
    )
    emit(payload, args.pretty)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
