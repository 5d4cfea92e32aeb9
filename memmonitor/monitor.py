#!/usr/bin/env python3
"""
Memory monitor entry point.

Subcommands:
    monitor  sample memory usage of a command (or of this process) until the
             command exits, the maximum duration elapses or Ctrl+C
    trends   summarize the recent samples of a CSV metrics log
    analyze  measure garbage-collection efficiency and look for leaks
    summary  current memory status with recommendations and GC statistics
"""
import json
import logging
import sys
from pathlib import Path

from memmonitor.cli.monitor_cli import parse_monitor_args
from memmonitor.config.config_loader import DEFAULT_CONFIG_PATH, ConfigLoader
from memmonitor.exceptions import SampleError
from memmonitor.service.analysis.memory_analyzer import MemoryAnalyzer, report_analysis
from memmonitor.service.analysis.memory_summary import report_summary
from memmonitor.service.analysis.trend_analyzer import analyze_trend, load_metrics, report_trend
from memmonitor.service.reporter.reporter import Reporter
from memmonitor.service.sampler.memory_sampler import MemorySampler
from memmonitor.service.session.monitor_session import MonitorSession
from memmonitor.util.log_config import set_level, setup_logger

logger = setup_logger(__name__)


def _load_config(args) -> ConfigLoader:
    config_path = Path(args.config_dir) if args.config_dir else DEFAULT_CONFIG_PATH
    loader = ConfigLoader(config_path, env=args.env)
    if args.env:
        logger.info(f"Loaded configuration with environment override: {args.env}")
    return loader


def run_monitor(args) -> int:
    if args.verbose:
        set_level(logging.DEBUG)

    try:
        loader = _load_config(args)
        config = loader.build_monitor_config(
            target_command=args.command or None,
            interval=args.interval,
            threshold_mb=args.threshold,
            duration=args.duration,
            log=args.log,
            csv_path=args.csv,
            alert_script=args.alert_script,
        )
    except FileNotFoundError as e:
        logger.error(f"Configuration file not found: {e.filename}")
        return 2
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    reporter = Reporter(log_file=loader.log_file)
    reporter.info("=" * 60)
    reporter.info("Memory Monitor")
    reporter.info("=" * 60)
    reporter.info(str(config))

    result = MonitorSession(config, reporter).run()

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)
        reporter.info(f"✓ Session result exported to: {out_path.resolve()}")

    return result.exit_code


def run_trends(args) -> int:
    if args.csv:
        csv_path = Path(args.csv)
    else:
        try:
            csv_path = _load_config(args).build_monitor_config().csv_path
        except (FileNotFoundError, ValueError) as e:
            logger.error(f"Invalid configuration: {e}")
            return 2

    reporter = Reporter()
    reporter.info(f"Analyzing memory trends from: {csv_path}")
    try:
        df = load_metrics(csv_path)
        report = analyze_trend(df, window=args.last)
    except FileNotFoundError:
        reporter.error(f"CSV file not found: {csv_path}")
        return 1
    except ValueError as e:
        reporter.error(str(e))
        return 1

    report_trend(report, reporter)
    return 0


def run_analyze(args) -> int:
    reporter = Reporter()
    reporter.info("Running memory analysis...")
    analyzer = MemoryAnalyzer()
    efficiency = analyzer.gc_efficiency()
    leak_check = analyzer.detect_leaks(rounds=args.rounds)
    report_analysis(efficiency, leak_check, reporter)
    return 0


def run_summary(args) -> int:
    reporter = Reporter()
    try:
        sample = MemorySampler(args.pid).sample()
    except SampleError as e:
        reporter.error(str(e))
        return 1

    reporter.info("Memory Usage Summary")
    # GC statistics describe this interpreter only
    report_summary(sample, reporter, include_gc=args.pid is None)
    return 0


def main(argv=None) -> int:
    args = parse_monitor_args(argv)
    if args.subcommand == "monitor":
        return run_monitor(args)
    if args.subcommand == "trends":
        return run_trends(args)
    if args.subcommand == "analyze":
        return run_analyze(args)
    return run_summary(args)


if __name__ == "__main__":
    sys.exit(main())
