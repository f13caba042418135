"""Command line entry point: ``python -m cost_engine <command>``."""

import argparse
import json
import sys
from dataclasses import asdict
from typing import Any, List, Optional

from cost_engine.configs import settings
from cost_engine.logger_config import get_logger
from cost_engine.services.cost_data.models import InvalidLocationError
from cost_engine.services.cost_data.service import (
    DEFAULT_WARMUP_LIMIT,
    CostDataService,
    create_cost_data_service,
)

logger = get_logger("cost_engine.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cost_engine", description="Cost-of-living lookups and cache maintenance."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    lookup = commands.add_parser("lookup", help="Print the breakdown for a city.")
    lookup.add_argument("city")
    lookup.add_argument("country")
    lookup.add_argument(
        "--refresh", action="store_true", help="Ignore the cached entry."
    )

    warm = commands.add_parser("warm", help="Pre-populate the cache.")
    warm.add_argument("--force", action="store_true", help="Refresh cached cities too.")
    warm.add_argument(
        "--max",
        dest="max_cities",
        type=int,
        default=DEFAULT_WARMUP_LIMIT,
        help="Maximum number of cities to warm.",
    )

    commands.add_parser("stats", help="Print cache statistics.")
    commands.add_parser("purge", help="Remove expired cache entries.")
    commands.add_parser("status", help="Print provider diagnostics.")
    return parser


def run(args: argparse.Namespace, service: CostDataService) -> Any:
    """Execute a parsed command and return a JSON-serializable result."""
    if args.command == "lookup":
        breakdown = service.get_cost_data(
            args.city, args.country, force_refresh=args.refresh
        )
        return breakdown.model_dump(mode="json")
    if args.command == "warm":
        return asdict(service.warm_cache(force=args.force, max_cities=args.max_cities))
    if args.command == "stats":
        return service.cache_stats().model_dump()
    if args.command == "purge":
        return {"removed": service.purge_expired()}
    if args.command == "status":
        return service.data_source_status()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None, service: Optional[CostDataService] = None) -> int:
    args = build_parser().parse_args(argv)
    owned = service is None
    service = service or create_cost_data_service(settings)
    try:
        result = run(args, service)
    except InvalidLocationError as exc:
        logger.error(str(exc))
        return 2
    finally:
        if owned:
            service.close()
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
