"""Log file sink for the feeder.

Records are appended to the log file one at a time, opening the file per
record so that a file removed or made unwritable mid-session is reported
instead of silently lost.
"""

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger

LOG_FORMAT = "[{time:YYYY-MM-DD HH:mm:ss}] [{level}] {message}"

NotifyCallback = Callable[[str, str], None]


class AppendFileSink:
    """loguru sink that appends formatted records to ``path``."""

    def __init__(self, path: Path, notify: NotifyCallback | None = None):
        self.path = Path(path)
        self._notify = notify

    def __call__(self, message: Any) -> None:
        try:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(str(message))
        except OSError as e:
            self._report(f"lspfeeder log write failed: {e}")

    def _report(self, text: str) -> None:
        if self._notify is not None:
            try:
                self._notify(text, "WARNING")
                return
            except Exception as e:
                text = f"{text} (notify failed: {e})"
        # Writing through the logger here would recurse into this sink.
        print(text, file=sys.stderr)


def configure_logging(
    log_path: Path,
    *,
    debug: bool = True,
    notify: NotifyCallback | None = None,
    level: str = "DEBUG",
) -> int | None:
    """Install the append-only file sink.

    Returns the loguru handler id, or None when ``debug`` is off and no
    sink was installed.
    """
    if not debug:
        return None
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Cannot create log directory for {log_path}: {e}")
    return logger.add(
        AppendFileSink(log_path, notify),
        format=LOG_FORMAT,
        level=level,
        colorize=False,
        catch=False,
    )


def remove_logging(handler_id: int | None) -> None:
    """Remove a sink previously returned by ``configure_logging``."""
    if handler_id is None:
        return
    try:
        logger.remove(handler_id)
    except ValueError:
        pass
