"""Command line front end.

Usage:
    cachesim <cache_size> <associativity> <policy> <block_size> <trace_file>

    associativity: direct | assoc | assoc:<n>
    policy:        fifo | lru

The trace is simulated twice in lock-step, without and with next-block
prefetching, and the counters of both runs are printed.
"""
import argparse
import logging
import sys
from typing import List, Optional

from cachesim.core.config import CacheConfig, InvalidConfiguration
from cachesim.core.simulator import CacheSimulator
from cachesim.data.stats_export import Exporter, format_report
from cachesim.data.trace_reader import read_trace

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="cachesim", description="Set-associative cache simulator with next-block prefetch")
    ap.add_argument("cache_size", help="Cache size in bytes (power of 2)")
    ap.add_argument("associativity", help="direct, assoc or assoc:<n>")
    ap.add_argument("policy", help="Replacement policy: fifo or lru")
    ap.add_argument("block_size", help="Block size in bytes (power of 2)")
    ap.add_argument("trace_file", help="Trace file: lines of '<pc>: <R/W> <address>'")
    ap.add_argument("--csv", type=str, default=None, help="Path to write both runs' statistics as CSV")
    ap.add_argument("--json", type=str, default=None, help="Path to write both runs' statistics as JSON")
    ap.add_argument("--chart", type=str, default=None, help="Path to write a PDF bar chart of both runs")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log debug information to stderr")
    return ap


def _error(msg: str) -> int:
    print(f"Error: {msg}", file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = CacheConfig.from_strings(args.cache_size, args.associativity, args.policy, args.block_size)
        sim = CacheSimulator(config)
    except InvalidConfiguration as e:
        return _error(str(e))

    try:
        records = read_trace(args.trace_file)
    except OSError as e:
        logger.debug("open failed: %s", e)
        return _error(f"Cannot open trace file {args.trace_file}")

    sim.run_trace(records)
    print(format_report(sim.runs))

    try:
        if args.csv:
            Exporter.export_stats_csv(args.csv, sim.runs)
        if args.json:
            Exporter.export_stats_json(args.json, sim.runs)
        if args.chart:
            Exporter.export_chart_pdf(args.chart, sim.runs)
    except OSError as e:
        return _error(f"Cannot write export: {e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
