from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date

from .exceptions import AstroCalError
from .services.chart import calculate_current_chart, calculate_natal_chart
from .services.ephem import default_client
from .services.formatting import format_chart, format_transits
from .services.transits_engine import get_transit_events_for_date


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="astrocal", description="Natal charts and daily transits")
    parser.add_argument("--json", action="store_true", help="print JSON instead of text")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_birth_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("birth_date", help="YYYY-MM-DD")
        p.add_argument("birth_time", help="HH:MM (local)")
        p.add_argument("lat", type=float)
        p.add_argument("lon", type=float)
        p.add_argument("--tz", type=float, default=None, help="offset from UTC in hours")

    natal = sub.add_parser("natal", help="compute a natal chart")
    add_birth_args(natal)

    current = sub.add_parser("current", help="chart for the current instant")
    current.add_argument("lat", type=float)
    current.add_argument("lon", type=float)

    transits = sub.add_parser("transits", help="ranked transits to a natal chart for one day")
    transits.add_argument("day", type=date.fromisoformat, help="YYYY-MM-DD")
    add_birth_args(transits)
    transits.add_argument("--limit", type=int, default=None)
    return parser


async def _run(args: argparse.Namespace) -> str:
    client = default_client()
    if args.command == "current":
        chart = await calculate_current_chart(args.lat, args.lon, client=client)
        return chart.model_dump_json(indent=2) if args.json else format_chart(chart)

    chart = await calculate_natal_chart(
        args.birth_date, args.birth_time, args.lat, args.lon, args.tz, client=client
    )
    if args.command == "natal":
        return chart.model_dump_json(indent=2) if args.json else format_chart(chart)

    events = get_transit_events_for_date(args.day, chart, client, limit=args.limit)
    if args.json:
        return json.dumps([e.model_dump(mode="json") for e in events], indent=2, ensure_ascii=False)
    return format_transits(events)


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        output = asyncio.run(_run(args))
    except AstroCalError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
