#!/usr/bin/env python3
"""
Shared helpers for the command-line interface.
"""
import argparse


def add_config_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """
    Add the common configuration options (--env, --config-dir) to a parser.

    Args:
        parser: parser or subparser to extend

    Returns:
        argparse.ArgumentParser: the same parser, for chaining
    """
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help=(
            "Configuration environment (e.g., 'dev'): merges config_<env>.yaml "
            "over the monitor defaults in config.yaml"
        ),
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default=None,
        help="Directory holding config.yaml (default: the packaged config_yaml directory)",
    )
    return parser
