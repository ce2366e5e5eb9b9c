"""Rate-limited, two-phase admission of workspace files to a client.

Architecture:
- One asyncio task per client attach, ticking every ``batch_delay_ms``
- Each tick admits up to ``files_per_batch`` files through the gate
- Phase 1 walks the attaching document's directory, phase 2 the client root
- No retry: a ceiling hit mid-tick leaves the opener stalled for good
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger

from lspfeeder.core.config.feeder_config import MemoryConfig
from lspfeeder.core.models import ClientSession
from lspfeeder.core.state import FeederState
from lspfeeder.core.utils.path_utils import normalize_file_path
from lspfeeder.interfaces.host import DocumentHost
from lspfeeder.services.notification_gate import NotificationGate
from lspfeeder.services.workspace_walker import WorkspaceWalker


class BatchPhase(Enum):
    """Lifecycle of one batch opener run."""

    PHASE1_SCANNING = "phase1"
    PHASE2_SCANNING = "phase2"
    DONE = "done"
    STALLED = "stalled"


@dataclass
class BatchCursor:
    """Position of an opener within its current file list."""

    files: list[str]
    index: int = 0
    phase: BatchPhase = BatchPhase.PHASE1_SCANNING
    switched: bool = False

    @property
    def exhausted(self) -> bool:
        return self.index >= len(self.files)

    def advance(self) -> str:
        path = self.files[self.index]
        self.index += 1
        return path

    def reset(self, files: list[str], phase: BatchPhase) -> None:
        self.files = files
        self.index = 0
        self.phase = phase


@dataclass
class BatchStats:
    ticks: int = 0
    attempted: int = 0
    scheduled: int = 0
    skipped_current: int = 0
    errors: int = 0
    stall_reason: str | None = None
    phase_sizes: dict[str, int] = field(default_factory=dict)


class BatchOpener:
    """Feed one client's workspace files through the notification gate."""

    def __init__(
        self,
        session: ClientSession,
        current_path: str,
        start_dir: Path | str,
        files: list[str],
        *,
        state: FeederState,
        gate: NotificationGate,
        walker: WorkspaceWalker,
        host: DocumentHost,
        memory: MemoryConfig,
    ):
        self.session = session
        self.current_path = normalize_file_path(current_path)
        self.start_dir = normalize_file_path(start_dir)
        self.cursor = BatchCursor(files=list(files))
        self.stats = BatchStats(
            phase_sizes={BatchPhase.PHASE1_SCANNING.value: len(files)}
        )

        self._state = state
        self._gate = gate
        self._walker = walker
        self._host = host
        self._memory = memory
        self._delay = memory.batch_delay_ms / 1000.0

    @property
    def phase(self) -> BatchPhase:
        return self.cursor.phase

    async def run(self) -> BatchPhase:
        """Tick until the opener is done or stalled; return the final phase."""
        logger.info(
            f"Phase 1: Found {len(self.cursor.files)} files in current directory"
        )
        # Yield first so the attach handler returns before any work happens.
        await asyncio.sleep(0)
        while True:
            phase = self.tick()
            if phase in (BatchPhase.DONE, BatchPhase.STALLED):
                return phase
            await asyncio.sleep(self._delay)

    def tick(self) -> BatchPhase:
        """Run the synchronous part of one tick and return the resulting phase."""
        self.stats.ticks += 1
        cursor = self.cursor

        for _ in range(self._memory.files_per_batch):
            if cursor.exhausted:
                break
            if self._ceiling_reached():
                cursor.phase = BatchPhase.STALLED
                return cursor.phase

            path = cursor.advance()
            if path == self.current_path:
                self.stats.skipped_current += 1
                continue
            self.stats.attempted += 1
            try:
                if self._gate.admit(self.session, path):
                    self.stats.scheduled += 1
            except Exception as e:
                self.stats.errors += 1
                logger.error(f"Error admitting {path}: {e}")

        if not cursor.exhausted:
            return cursor.phase
        if not cursor.switched:
            return self._switch_to_root()

        self._finish()
        return cursor.phase

    def _ceiling_reached(self) -> bool:
        opened = self._state.opened_count
        if opened >= self._memory.max_files:
            logger.info(f"Reached opened files: {opened} max: {self._memory.max_files}")
            self.stats.stall_reason = "max_files"
            return True

        documents = len(self._host.list_documents())
        if documents >= self._memory.max_open_documents:
            logger.info(
                f"Reached max open documents: {self._memory.max_open_documents}"
            )
            self.stats.stall_reason = "max_open_documents"
            return True
        return False

    def _switch_to_root(self) -> BatchPhase:
        cursor = self.cursor
        cursor.switched = True
        logger.info(
            f"Phase 1 complete. Opened {self._state.opened_count} files "
            "from current directory"
        )

        root = normalize_file_path(self.session.effective_root())
        if root == self.start_dir:
            logger.info("Phase 2 skipped: root is the current directory")
            self._finish()
            return cursor.phase

        logger.info(f"Phase 2: Switching to root directory {root}")
        files = self._walker.collect(root)
        cursor.reset(files, BatchPhase.PHASE2_SCANNING)
        self.stats.phase_sizes[BatchPhase.PHASE2_SCANNING.value] = len(files)
        logger.info(f"Phase 2: Found {len(files)} files in root directory")
        return cursor.phase

    def _finish(self) -> None:
        self.cursor.phase = BatchPhase.DONE
        logger.info(
            f"Finished populating workspace. Opened {self._state.opened_count} "
            f"files for client: {self.session.name}"
        )

    def get_stats(self) -> dict[str, Any]:
        """Current opener statistics."""
        return {
            "client": self.session.name,
            "phase": self.cursor.phase.value,
            "index": self.cursor.index,
            "files": len(self.cursor.files),
            "ticks": self.stats.ticks,
            "attempted": self.stats.attempted,
            "scheduled": self.stats.scheduled,
            "skipped_current": self.stats.skipped_current,
            "errors": self.stats.errors,
            "stall_reason": self.stats.stall_reason,
            "phase_sizes": dict(self.stats.phase_sizes),
        }
