"""Entry points for the host's "client attached" and "diagnostics changed" events.

The service owns all process-lifetime state (opened files, filetype cache,
processed client ids, the flush timer) and hands it by reference to the
pipeline components it builds.
"""

import asyncio
import os
from pathlib import Path
from typing import Any

from loguru import logger

from lspfeeder.core.config.feeder_config import FeederConfig
from lspfeeder.core.logging_setup import (
    NotifyCallback,
    configure_logging,
    remove_logging,
)
from lspfeeder.core.models import ClientSession
from lspfeeder.core.state import FeederState
from lspfeeder.interfaces.host import AnalysisClient, DocumentHandle, DocumentHost
from lspfeeder.services.batch_opener import BatchOpener, BatchPhase
from lspfeeder.services.diagnostics_aggregator import DiagnosticsAggregator
from lspfeeder.services.filetype_classifier import FiletypeClassifier
from lspfeeder.services.flush_debouncer import FlushDebouncer
from lspfeeder.services.notification_gate import NotificationGate
from lspfeeder.services.workspace_walker import WorkspaceWalker


class WorkspaceFeederService:
    """Wire the walker, opener, gate, aggregator and debouncer together."""

    def __init__(
        self,
        host: DocumentHost,
        config: FeederConfig | None = None,
        state: FeederState | None = None,
    ):
        self.host = host
        self.config = config or FeederConfig()
        self.state = state or FeederState()

        memory = self.config.memory
        self.classifier = FiletypeClassifier(self.state, host)
        self.walker = WorkspaceWalker(self.config.files, memory.max_files)
        self.gate = NotificationGate(self.state, self.classifier, host)
        self.aggregator = DiagnosticsAggregator(
            host, self.config.output_path, self.config.icons
        )
        self.debouncer = FlushDebouncer(self.aggregator.flush, memory.debounce_ms)

        self.openers: list[BatchOpener] = []
        self._opener_tasks: set[asyncio.Task] = set()
        self._log_handler: int | None = None

    @classmethod
    def setup(
        cls,
        host: DocumentHost,
        options: dict[str, Any] | None = None,
        notify: NotifyCallback | None = None,
    ) -> "WorkspaceFeederService":
        """Build a service from host options and install the log file sink."""
        config = FeederConfig().merged(options)
        service = cls(host, config)
        service._log_handler = configure_logging(
            config.log_path, debug=config.debug, notify=notify
        )
        return service

    def on_client_attached(
        self, client: AnalysisClient, document: DocumentHandle
    ) -> BatchOpener | None:
        """Start feeding the workspace to ``client``; return the opener if started."""
        if not self.config.enabled:
            return None

        current = self.host.document_name(document)
        logger.info(f"Client attach event - client: {client.name} document: {document}")
        current_dir = os.path.dirname(current)
        if Path(current_dir) == self.config.dev_folder:
            logger.debug("Returning because current directory is the dev folder")
            return None

        session = ClientSession.from_client(client)
        if not self.state.mark_client_processed(session.id):
            logger.debug(f"Client already loaded: {session.name}")
            return None

        if not session.supports_did_open:
            logger.debug(f"Client doesn't support didOpen: {session.name}")
            return None

        if not session.filetypes:
            logger.debug(f"Client has no filetypes: {session.name}")
            return None

        logger.info(f"Populating workspace for client: {session.name}")
        logger.info(f"Supported filetypes: {', '.join(sorted(session.filetypes))}")
        logger.info(f"Current directory: {current_dir}")
        logger.info(f"Current file: {current}")

        files = self.walker.collect(current_dir)
        opener = BatchOpener(
            session,
            current,
            current_dir,
            files,
            state=self.state,
            gate=self.gate,
            walker=self.walker,
            host=self.host,
            memory=self.config.memory,
        )
        self.openers.append(opener)
        task = asyncio.get_running_loop().create_task(opener.run())
        self._opener_tasks.add(task)
        task.add_done_callback(self._on_opener_done)
        return opener

    def on_diagnostics_changed(self, document: DocumentHandle) -> None:
        """Schedule a debounced flush of the diagnostics summary."""
        if not self.config.enabled:
            return
        diagnostics = self.host.get_diagnostics(document)
        if diagnostics:
            logger.debug(
                f"Diagnostics changed for {self.host.document_name(document)} "
                f"count: {len(diagnostics)}"
            )
        self.debouncer.trigger()

    def _on_opener_done(self, task: asyncio.Task) -> None:
        self._opener_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Batch opener failed: {exc}")
        elif task.result() is BatchPhase.STALLED:
            logger.info("Batch opener stalled on a resource ceiling")

    async def wait_idle(self) -> None:
        """Wait for every opener, didOpen send and pending flush to finish.

        Openers that stall finish their task, so this always returns.
        """
        while self._opener_tasks:
            await asyncio.gather(*list(self._opener_tasks), return_exceptions=True)
        await self.gate.wait_idle()
        await self.debouncer.wait_idle()

    async def close(self) -> None:
        """Cancel outstanding work and remove the log sink."""
        self.debouncer.cancel()
        for task in list(self._opener_tasks):
            task.cancel()
        if self._opener_tasks:
            await asyncio.gather(*list(self._opener_tasks), return_exceptions=True)
        await self.gate.wait_idle()
        await self.debouncer.wait_idle()
        remove_logging(self._log_handler)
        self._log_handler = None

    def get_stats(self) -> dict[str, Any]:
        """Current service statistics."""
        return {
            "opened_files": self.state.opened_count,
            "processed_clients": len(self.state.processed_clients),
            "cached_filetypes": len(self.state.filetype_cache),
            "pending_sends": self.gate.pending,
            "sent": self.gate.sent,
            "flush_timer_armed": self.debouncer.armed,
            "flushes": self.aggregator.flush_count,
            "writes": self.aggregator.write_count,
            "openers": [opener.get_stats() for opener in self.openers],
        }
