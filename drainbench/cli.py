from __future__ import annotations
import argparse
import asyncio
import os
import sys
from typing import List, Optional

from drainbench.config import DEFAULT_CONFIGS, ConfigError, load_configs
from drainbench.driver import DEFAULT_DATA_FILE, print_metrics, run_all, write_to_csv
from drainbench.monitor import POLL_INTERVAL
from drainbench.plot import SampleAnalyzer
from drainbench.sink import DEFAULT_HIGH_WATER_MARK


def parse_args(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description="Measure file write backpressure")
    p.add_argument("--config", type=str, default=None,
                   help="JSON file with a list of run configurations (default: built-in list)")
    p.add_argument("--data-file", type=str, default=DEFAULT_DATA_FILE,
                   help="scratch file written and deleted by every run")
    p.add_argument("--high-water-mark", type=int, default=DEFAULT_HIGH_WATER_MARK,
                   help="buffered bytes at which writes report backpressure")
    p.add_argument("--interval", type=float, default=POLL_INTERVAL,
                   help="seconds between buffer samples")
    p.add_argument("--csv", type=str, default=None, help="write run results to this CSV file")
    p.add_argument("--plot-dir", type=str, default=None, help="save charts into this directory")
    args = p.parse_args(argv)

    if args.interval <= 0:
        p.error(f"--interval must be positive, got {args.interval}")
    if args.high_water_mark < 0:
        p.error(f"--high-water-mark must not be negative, got {args.high_water_mark}")
    return args


def run_cli(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    if args.config:
        try:
            configs = load_configs(args.config)
        except ConfigError as e:
            print(f"Invalid configuration file: {e}", file=sys.stderr)
            return 2
    else:
        configs = DEFAULT_CONFIGS

    results = asyncio.run(run_all(
        configs,
        path=args.data_file,
        high_water_mark=args.high_water_mark,
        interval=args.interval,
        record_samples=args.plot_dir is not None,
    ))
    print_metrics(results)

    if args.csv:
        write_to_csv(results, args.csv)

    if args.plot_dir and results:
        analyzer = SampleAnalyzer(results)
        for row in analyzer.pending_summary():
            print(row)
        analyzer.plot_pending_bytes(os.path.join(args.plot_dir, "pending_bytes.png"))
        analyzer.plot_run_times(os.path.join(args.plot_dir, "run_times.png"))
        print(f"Saved plots to {args.plot_dir}")

    return 0


def main():
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
