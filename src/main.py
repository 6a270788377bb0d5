#!/usr/bin/env python3
"""
Main entry point for the River Gauge Monitor.

Usage:
    python -m src.main --mode=sites --region=VT          # List gauges in a state
    python -m src.main --mode=gauge --site=01013500      # Current reading for one gauge
    python -m src.main --mode=dashboard                  # Evaluate every saved gauge
    python -m src.main --mode=forecast --site=ESSV1      # 5-day forecast
    python -m src.main --mode=add --site=01013500 --name="Fish River"
    python -m src.main --mode=remove --site=01013500
"""

import argparse
import asyncio
import logging
import sys
import time
from typing import Optional

import pandas as pd
from tqdm import tqdm

from src.acquisition import fetch_forecast, list_gauges
from src.derivation import evaluate_gauges, fetch_gauge_summary, readings_to_dataframe
from src.derivation.status import format_level, format_trend, trend_direction
from src.models import GaugeConfig, Unit
from src.utils.errors import GaugeError
from src.utils.gauge_store import GaugeStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)]
)

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="River Gauge Monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Find gauges in Vermont
    python -m src.main --mode=sites --region=VT

    # Gage height for a single gauge
    python -m src.main --mode=gauge --site=01013500 --unit=ft

    # Refresh the saved dashboard
    python -m src.main --mode=dashboard --store=./gauges.json
        """
    )

    parser.add_argument(
        "--mode",
        required=True,
        choices=["sites", "gauge", "dashboard", "forecast", "add", "remove"],
        help="What to do"
    )
    parser.add_argument("--region", type=str, default=None, help="State code for --mode=sites")
    parser.add_argument("--site", type=str, default=None, help="Gauge identifier")
    parser.add_argument("--name", type=str, default=None, help="Display name for --mode=add")
    parser.add_argument(
        "--unit",
        choices=[u.value for u in Unit],
        default=Unit.FLOW.value,
        help="cfs (discharge) or ft (gage height)"
    )
    parser.add_argument("--min-flow", type=float, default=None, help="Lower bound of preferred range")
    parser.add_argument("--max-flow", type=float, default=None, help="Upper bound of preferred range")
    parser.add_argument("--store", type=str, default=None, help="Gauge store file (default: from config)")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging"
    )

    return parser.parse_args(argv)


async def run_sites(region: str) -> int:
    gauges = await list_gauges(region.upper())
    for gauge in gauges:
        print(f"{gauge.id}\t{gauge.name}")
    return 0


async def run_gauge(site: str, unit: Unit) -> int:
    summary = await fetch_gauge_summary(site, unit)

    print(f"{summary.name or site}")
    print(f"  Level:   {format_level(summary.level, unit)}")
    print(f"  Trend:   {format_trend(summary.trend, unit)} ({trend_direction(summary.trend, unit)})")
    print(f"  Updated: {summary.updated.isoformat() if summary.updated else '—'}")
    if summary.frozen:
        print("  Gauge frozen (estimated)")
    return 0


async def run_dashboard(store: GaugeStore) -> int:
    gauges = store.load()
    if not gauges:
        print(f"No gauges saved in {store.path}")
        return 0

    with tqdm(total=len(gauges), desc="Refreshing gauges", file=sys.stderr) as progress:
        readings = await evaluate_gauges(gauges, on_complete=lambda _: progress.update(1))

    df = readings_to_dataframe(readings)
    df["level"] = [format_level(level, unit) for level, unit in zip(df["level"], df["unit"])]
    df["trend"] = [format_trend(trend, unit) for trend, unit in zip(df["trend"], df["unit"])]

    with pd.option_context("display.max_rows", None, "display.width", 160):
        print(df[["display_name", "level", "trend", "updated", "level_status", "available"]].to_string(index=False))

    return 0


async def run_forecast(site: str) -> int:
    result = await fetch_forecast(site)

    if not result.daily:
        print(f"No forecast available for {site}")
        return 0

    for day in result.daily:
        print(f"{day.date.isoformat()}  high {format_level(day.high, Unit.FLOW)}  low {format_level(day.low, Unit.FLOW)}")
    if result.lid:
        print(f"https://water.noaa.gov/gauges/{result.lid}")
    return 0


def run_add(store: GaugeStore, args: argparse.Namespace) -> int:
    store.load()
    store.add(GaugeConfig(
        id=args.site,
        display_name=args.name or "",
        unit=Unit.parse(args.unit),
        min_flow=args.min_flow,
        max_flow=args.max_flow
    ))
    return 0 if store.save() else 1


def run_remove(store: GaugeStore, site: str) -> int:
    store.load()
    if not store.remove(site):
        logger.warning(f"Gauge {site} is not in {store.path}")
        return 1
    return 0 if store.save() else 1


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.mode == "sites" and not args.region:
        logger.error("--region is required for --mode=sites")
        return 2
    if args.mode in ("gauge", "forecast", "add", "remove") and not args.site:
        logger.error(f"--site is required for --mode={args.mode}")
        return 2

    store = GaugeStore(args.store)
    unit = Unit.parse(args.unit)
    start_time = time.time()

    try:
        if args.mode == "sites":
            status = asyncio.run(run_sites(args.region))
        elif args.mode == "gauge":
            status = asyncio.run(run_gauge(args.site, unit))
        elif args.mode == "dashboard":
            status = asyncio.run(run_dashboard(store))
        elif args.mode == "forecast":
            status = asyncio.run(run_forecast(args.site))
        elif args.mode == "add":
            status = run_add(store, args)
        else:
            status = run_remove(store, args.site)

    except GaugeError as e:
        logger.error(f"{args.mode} failed: {e}")
        return 1

    logger.debug(f"Completed {args.mode} in {time.time() - start_time:.1f} seconds")
    return status


if __name__ == "__main__":
    sys.exit(main())
