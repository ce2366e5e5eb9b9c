"""lspfeeder command line entry point."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from lspfeeder import __version__
from lspfeeder.api.cli.commands.collect import collect_command
from lspfeeder.api.cli.commands.summary import summary_command
from lspfeeder.api.cli.parsers.common_arguments import add_common_arguments
from lspfeeder.core.config.feeder_config import FeederConfig


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lspfeeder",
        description="Inspect workspace feeding and exported diagnostics",
    )
    parser.add_argument("--version", action="version", version=__version__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    collect = subparsers.add_parser(
        "collect", help="List the files a workspace walk would collect"
    )
    collect.add_argument("root", type=Path, help="Directory to walk")
    add_common_arguments(collect)
    FeederConfig.add_cli_arguments(collect)
    collect.set_defaults(handler=collect_command)

    summary = subparsers.add_parser(
        "summary", help="Show the persisted diagnostics summary"
    )
    summary.add_argument("--json", action="store_true", help="Print raw JSON")
    add_common_arguments(summary)
    FeederConfig.add_cli_arguments(summary)
    summary.set_defaults(handler=summary_command)

    return parser


def build_config(args: argparse.Namespace) -> FeederConfig:
    """Layer the config file and CLI overrides over env and defaults.

    ``FeederConfig()`` reads LSPFEEDER_* variables itself, so everything merged
    afterwards beats the environment.
    """
    options: dict[str, Any] = {}
    config_file = getattr(args, "config", None)
    if config_file:
        options = json.loads(Path(config_file).read_text(encoding="utf-8"))
    config = FeederConfig().merged(options)
    return config.merged(FeederConfig.extract_cli_overrides(args))


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logger.remove()
    level = "DEBUG" if args.verbose or args.debug else "WARNING"
    handler_id = logger.add(sys.stderr, level=level)

    try:
        return _run(args)
    finally:
        logger.remove(handler_id)


def _run(args: argparse.Namespace) -> int:
    try:
        config = build_config(args)
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    return args.handler(args, config)


if __name__ == "__main__":
    sys.exit(main())
