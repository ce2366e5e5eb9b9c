"""Eligibility checks and didOpen dispatch for a single workspace file."""

import asyncio
import inspect
from typing import Any

from loguru import logger

from lspfeeder.core.models import DID_OPEN_METHOD, ClientSession
from lspfeeder.core.state import FeederState
from lspfeeder.core.utils.path_utils import is_within_root, uri_from_path
from lspfeeder.interfaces.host import DocumentHandle, DocumentHost
from lspfeeder.services.filetype_classifier import FiletypeClassifier

INITIAL_VERSION = 0


class NotificationGate:
    """Decide whether a file is sent to a client, and send it at most once.

    Every rejection is a silent skip logged at debug level. A path is
    recorded as opened before any eligibility check so that it is attempted
    at most once per process, whichever client sees it first.
    """

    def __init__(
        self,
        state: FeederState,
        classifier: FiletypeClassifier,
        host: DocumentHost,
    ):
        self._state = state
        self._classifier = classifier
        self._host = host
        self._send_tasks: set[asyncio.Task] = set()
        self.sent = 0
        self.failed = 0

    def admit(self, session: ClientSession, path: str) -> bool:
        """Run the checks for ``path``; return True if a didOpen was scheduled."""
        if not self._state.mark_opened(path):
            logger.debug(f"File {path} already collected. Skipping")
            return False

        filetype = self._classifier.classify(path)
        if not filetype:
            logger.debug(f"Skipping file - no filetype: {path}")
            return False

        if filetype not in session.filetypes:
            logger.debug(
                f"Filetype {filetype} not supported by client {session.name} "
                f"for file: {path}"
            )
            return False

        root = session.effective_root()
        if not is_within_root(path, root):
            logger.debug(f"File outside root: {path} root: {root}")
            return False

        if self._host.find_document(path) is not None:
            logger.debug(f"Document already exists, skipping didOpen: {path}")
            return False

        handle = self._host.create_document(path)
        task = asyncio.get_running_loop().create_task(
            self._send_did_open(session, path, filetype, handle)
        )
        self._send_tasks.add(task)
        task.add_done_callback(self._send_tasks.discard)
        return True

    async def _send_did_open(
        self,
        session: ClientSession,
        path: str,
        filetype: str,
        handle: DocumentHandle,
    ) -> None:
        try:
            self._host.load_document(handle)
            text = "\n".join(self._host.get_lines(handle))
            params: dict[str, Any] = {
                "textDocument": {
                    "uri": uri_from_path(path),
                    "languageId": filetype,
                    "version": INITIAL_VERSION,
                    "text": text,
                }
            }
            result = session.client.notify(DID_OPEN_METHOD, params)
            if inspect.isawaitable(result):
                await result
            self.sent += 1
            logger.info(
                f"Sent didOpen for {path} filetype: {filetype} client: {session.name}"
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failed += 1
            logger.error(f"didOpen for {path} failed: {e}")

    @property
    def pending(self) -> int:
        return len(self._send_tasks)

    async def wait_idle(self) -> None:
        """Wait for every scheduled didOpen to finish."""
        while self._send_tasks:
            await asyncio.gather(*list(self._send_tasks), return_exceptions=True)
