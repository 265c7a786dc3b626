#!/usr/bin/env python3
"""
Load calendar CLI

Usage:
    python cli.py init-db                      # Create/upgrade the schema
    python cli.py seed                         # Demo data (empty DB only)
    python cli.py heatmap <entity> [--json]    # Heatmap for a person or group
    python cli.py day <entity> <YYYY-MM-DD>    # Loads behind one heatmap cell
    python cli.py serve [--host H] [--port P]  # Run the API server
"""

import argparse
import json
import logging
import sys

from loadcal.app_services import build_services
from loadcal.capacity import group_by_month, heatmap_color
from loadcal.config import Settings
from loadcal.dates import format_date, parse_date
from loadcal.errors import ConfigError, LoadCalError
from loadcal.observability import configure_logging
from loadcal.seed import seed

logger = logging.getLogger("loadcal.cli")

# ANSI background colors per severity bucket
_ANSI = {
    "overloaded": "\033[41m",
    "overloaded_no_capacity": "\033[41m",
    "near_capacity": "\033[101m",
    "high": "\033[43m",
    "medium": "\033[103m",
    "low": "\033[102m",
    "minimal": "\033[42m",
    "idle": "\033[47m",
}
_RESET = "\033[0m"


def print_header(text: str):
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def cmd_init_db(args, services):
    """Create missing tables and indexes."""
    result = services.store.converge()
    print(f"Database: {services.store.db_path}")
    print(f"Schema version: {result['previous_version']} -> {result['schema_version']}")
    if result["tables_created"]:
        print(f"Tables created: {', '.join(result['tables_created'])}")
    return 0


def cmd_seed(args, services):
    services.store.converge()
    if seed(services.store):
        print("Seeded sample persons, groups and loads.")
    else:
        print("Database already has data, nothing to do.")
    return 0


def cmd_heatmap(args, services):
    data = services.heatmap.build(args.entity)

    if args.json:
        print(json.dumps(data.to_dict(), indent=2))
        return 0

    print_header(f"{data.entity.title} ({data.entity.type})")
    for month in group_by_month(data.days):
        cells = []
        for day in month.days:
            marker = "*" if day["is_today"] else " "
            cells.append(f"{_ANSI.get(day['color'], '')}{day['day']:>2}{_RESET}{marker}")
        print(f"\n{month.month_name} {month.year}")
        for i in range(0, len(cells), 7):
            print(" ".join(cells[i : i + 7]))

    overloaded = [d for d in data.days if d.color in ("overloaded", "overloaded_no_capacity")]
    print(f"\n{len(overloaded)} overloaded day(s) between {format_date(data.start)} and {format_date(data.end)}")
    return 0


def cmd_day(args, services):
    details = services.day_detail.day_details(args.entity, parse_date(args.date))
    color = heatmap_color(details.total_load, details.capacity)

    print_header(f"{args.entity} on {args.date}")
    print(f"Load {details.total_load:.1f} / capacity {details.capacity:.1f} ({color})")
    if not details.loads:
        print("No loads.")
    for lw in details.loads:
        people = ", ".join(f"{a.person_email} ({a.weight:g})" for a in lw.assignments)
        print(f"  #{lw.load.id} {lw.load.title} [{lw.load.source or '-'}]: {people}")
    return 0


def cmd_serve(args, settings):
    import uvicorn

    from api.server import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port or settings.port, log_config=None)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description="Load calendar CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # init-db
    subparsers.add_parser("init-db", help="Create or upgrade the database schema")

    # seed
    subparsers.add_parser("seed", help="Load demo data into an empty database")

    # heatmap
    p = subparsers.add_parser("heatmap", help="Show an entity heatmap")
    p.add_argument("entity", help="Person email or group id")
    p.add_argument("--json", action="store_true", help="Print JSON instead of a calendar")

    # day
    p = subparsers.add_parser("day", help="Show loads for one day")
    p.add_argument("entity", help="Person email or group id")
    p.add_argument("date", help="YYYY-MM-DD")

    # serve
    p = subparsers.add_parser("serve", help="Run the API server")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, help="Defaults to $PORT or 8080")

    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level, settings.log_json)

    if args.command == "serve":
        return cmd_serve(args, settings)

    commands = {
        "init-db": cmd_init_db,
        "seed": cmd_seed,
        "heatmap": cmd_heatmap,
        "day": cmd_day,
    }

    services = build_services(settings)
    try:
        return commands[args.command](args, services)
    except LoadCalError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        services.shutdown(wait=True)


if __name__ == "__main__":
    sys.exit(main())
