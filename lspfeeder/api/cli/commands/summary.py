"""summary command - show the persisted diagnostics table."""

import argparse
import json
import sys
from urllib.parse import unquote

from lspfeeder.core.config.feeder_config import FeederConfig
from lspfeeder.services.diagnostics_aggregator import load_summary


def summary_command(args: argparse.Namespace, config: FeederConfig) -> int:
    output_path = config.output_path
    if not output_path.exists():
        print(f"No diagnostics written yet: {output_path}", file=sys.stderr)
        return 1
    try:
        table = load_summary(output_path)
    except (OSError, ValueError, KeyError) as e:
        print(f"Cannot read {output_path}: {e}", file=sys.stderr)
        return 1

    if getattr(args, "json", False):
        print(
            json.dumps(
                {key: value.to_dict() for key, value in table.items()},
                ensure_ascii=False,
                indent=2,
            )
        )
        return 0

    rows = sorted(table.items(), key=lambda item: (item[1].severity, item[0]))
    for key, summary in rows:
        print(f"{summary.icon} {summary.count:>4}  {unquote(key)}  ({summary.time})")
    return 0
