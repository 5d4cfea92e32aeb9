# memmonitor/cli/monitor_cli.py
import argparse
import sys

from memmonitor.cli.cli import add_config_arguments


def build_monitor_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="memmonitor",
        description="Monitor memory usage of a command or the current process",
    )
    subparsers = ap.add_subparsers(dest="subcommand", metavar="{monitor,trends,analyze,summary}")
    subparsers.required = True

    monitor = subparsers.add_parser(
        "monitor",
        help="Sample memory usage until the command exits, the duration elapses or Ctrl+C",
        description=(
            "Options may appear before or after the command. Arguments after -- go to "
            "the command unchanged, for commands whose own flags clash with these options."
        ),
        allow_abbrev=False,
    )
    monitor.add_argument("--interval", type=float, default=None,
                         help="Monitoring interval in seconds (default: 1)")
    monitor.add_argument("--threshold", type=int, default=None,
                         help="Alert threshold in MB (default: 20)")
    monitor.add_argument("--duration", type=int, default=None,
                         help="Maximum monitoring duration in seconds, 0 for unlimited (default: 0)")
    monitor.add_argument("--log", action="store_true", default=None,
                         help="Log the memory usage to a CSV file")
    monitor.add_argument("--csv", type=str, default=None,
                         help="CSV file to save memory metrics (default: memory-usage.csv)")
    monitor.add_argument("--alert-script", type=str, default=None,
                         help="Shell command to run every time the threshold is exceeded")
    monitor.add_argument("--out", type=str, default="",
                         help="If set, write the session result as JSON to this path")
    monitor.add_argument("--verbose", action="store_true",
                         help="Also print debug messages (child PIDs, shutdown details)")
    add_config_arguments(monitor)
    monitor.add_argument("command", nargs="*",
                         help="Command to monitor (default: monitor the current process)")

    trends = subparsers.add_parser("trends", help="Show memory usage trends from a CSV log")
    trends.add_argument("--csv", type=str, default=None,
                        help="CSV log to analyze (default: configured csv_path)")
    trends.add_argument("--last", type=int, default=100,
                        help="Number of most recent samples to analyze (default: 100)")
    add_config_arguments(trends)

    analyze = subparsers.add_parser("analyze", help="Garbage-collection efficiency and leak detection")
    analyze.add_argument("--rounds", type=int, default=3,
                         help="Garbage-collection rounds for leak detection (default: 3)")

    summary = subparsers.add_parser("summary", help="Memory status, recommendations and GC statistics")
    summary.add_argument("--pid", type=int, default=None,
                         help="Process to summarize (default: the current process)")
    return ap


def validate_monitor_args(ap: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.subcommand == "monitor":
        if args.interval is not None and args.interval <= 0:
            ap.error("--interval must be greater than 0")
        if args.threshold is not None and args.threshold < 0:
            ap.error("--threshold must not be negative")
        if args.duration is not None and args.duration < 0:
            ap.error("--duration must not be negative")
    elif args.subcommand == "trends":
        if args.last < 2:
            ap.error("--last must be at least 2")
    elif args.subcommand == "analyze":
        if args.rounds < 2:
            ap.error("--rounds must be at least 2")


def parse_monitor_args(argv=None) -> argparse.Namespace:
    """
    Parse the command line.

    Monitor options are recognized anywhere around the command, so
    `monitor sleep 5 --duration=2` and `monitor --duration=2 sleep 5` are
    equivalent. Unknown options after the command name belong to the command;
    everything after `--` is passed to it verbatim.
    """
    ap = build_monitor_parser()
    argv = list(sys.argv[1:] if argv is None else argv)

    passthrough = []
    if "--" in argv:
        split = argv.index("--")
        argv, passthrough = argv[:split], argv[split + 1:]

    args, extras = ap.parse_known_args(argv)
    if args.subcommand != "monitor" and (extras or passthrough):
        ap.error(f"unrecognized arguments: {' '.join(extras + passthrough)}")

    if args.subcommand == "monitor":
        if extras and not _after_command_name(argv, args.command, extras[0]):
            ap.error(f"unrecognized arguments: {' '.join(extras)}")
        args.command = args.command + extras + passthrough

    validate_monitor_args(ap, args)
    return args


def _after_command_name(argv, command, arg) -> bool:
    return bool(command) and argv.index(arg) > argv.index(command[0])
