"""Aggregate per-document diagnostics into the persisted summary table."""

import asyncio
import json
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from loguru import logger

from lspfeeder.core.config.feeder_config import IconConfig
from lspfeeder.core.models import DiagnosticSummary, Severity
from lspfeeder.core.utils.path_utils import path_to_url
from lspfeeder.interfaces.host import DocumentHost

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def severity_to_icon(severity: int, icons: IconConfig) -> str:
    if severity == Severity.ERROR:
        return icons.error
    if severity == Severity.WARN:
        return icons.warning
    if severity == Severity.INFO:
        return icons.info
    return icons.other


class DiagnosticsAggregator:
    """Recompute the diagnostics table from scratch and overwrite the output.

    Only one flush runs at a time; a flush requested while another is in
    progress returns immediately. When no loaded document has findings the
    output file is left untouched.
    """

    def __init__(
        self,
        host: DocumentHost,
        output_path: Path,
        icons: IconConfig,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._host = host
        self.output_path = Path(output_path)
        self._icons = icons
        self._now = now
        self._flushing = False
        self.flush_count = 0
        self.write_count = 0

    @property
    def flushing(self) -> bool:
        return self._flushing

    def build_table(self) -> tuple[dict[str, DiagnosticSummary], int]:
        """Summaries keyed by URL-escaped path, plus the number of documents
        that have findings (unnamed documents included)."""
        table: dict[str, DiagnosticSummary] = {}
        with_findings = 0

        for handle in self._host.list_documents():
            if not self._host.is_loaded(handle):
                continue
            diagnostics = self._host.get_diagnostics(handle)
            if not diagnostics:
                continue
            with_findings += 1

            path = self._host.document_name(handle)
            if not path:
                continue
            severity = min(d.severity for d in diagnostics)
            table[path_to_url(path)] = DiagnosticSummary(
                severity=severity,
                icon=severity_to_icon(severity, self._icons),
                count=len(diagnostics),
                time=self._now().strftime(TIME_FORMAT),
            )
        return table, with_findings

    async def flush(self) -> bool:
        """Write the current table; return True if the file was written."""
        if self._flushing:
            return False
        self._flushing = True
        try:
            self.flush_count += 1
            table, with_findings = self.build_table()
            logger.debug(
                f"Dumping diagnostics, documents: {len(self._host.list_documents())} "
                f"with diagnostics: {with_findings}"
            )
            if with_findings == 0:
                return False

            payload = json.dumps(
                {key: summary.to_dict() for key, summary in table.items()},
                ensure_ascii=False,
                indent=2,
            )
            try:
                await asyncio.to_thread(self._write, payload)
            except OSError as e:
                logger.error(f"Failed to write output {self.output_path}: {e}")
                return False

            self.write_count += 1
            logger.info(
                f"Wrote diagnostics: {self.output_path} entries: {len(table)}"
            )
            return True
        finally:
            self._flushing = False

    def _write(self, payload: str) -> None:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with self.output_path.open("w", encoding="utf-8") as handle:
            handle.write(payload + "\n")


def load_summary(path: Path) -> dict[str, DiagnosticSummary]:
    """Read a previously written summary file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return {
        key: DiagnosticSummary(
            severity=int(value["severity"]),
            icon=str(value["icon"]),
            count=int(value["count"]),
            time=str(value["time"]),
        )
        for key, value in data.items()
    }
