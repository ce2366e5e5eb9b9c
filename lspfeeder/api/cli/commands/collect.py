"""collect command - print the files a workspace walk would feed."""

import argparse
import sys

from lspfeeder.core.config.feeder_config import FeederConfig
from lspfeeder.services.workspace_walker import WorkspaceWalker


def collect_command(args: argparse.Namespace, config: FeederConfig) -> int:
    """Walk ``args.root`` with the configured ignore rules and file cap."""
    walker = WorkspaceWalker(config.files, config.memory.max_files)
    files = walker.collect(args.root)
    for path in files:
        print(path)
    if len(files) >= config.memory.max_files:
        print(
            f"Stopped at the {config.memory.max_files} file limit",
            file=sys.stderr,
        )
    return 0
