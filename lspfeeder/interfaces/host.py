"""Interfaces of the external collaborators the feeder drives.

The host editor owns the document model and the change-event source; the
analysis client owns the notification transport. Both are treated as
reliable black boxes and only the calls the feeder needs are declared here.
"""

from collections.abc import Hashable, Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from lspfeeder.core.models import Diagnostic

DocumentHandle = Hashable


@runtime_checkable
class DocumentHost(Protocol):
    """Document (buffer) model of the host editor."""

    def find_document(self, path: str) -> DocumentHandle | None:
        """Return the document for ``path`` if the host already has one."""
        ...

    def create_document(self, path: str) -> DocumentHandle:
        """Create an (unloaded) document for ``path``."""
        ...

    def load_document(self, handle: DocumentHandle) -> None:
        """Read the document's content from disk."""
        ...

    def release_document(self, handle: DocumentHandle) -> None:
        """Forcefully discard a document."""
        ...

    def list_documents(self) -> Sequence[DocumentHandle]:
        """All documents known to the host, loaded or not."""
        ...

    def is_loaded(self, handle: DocumentHandle) -> bool: ...

    def document_name(self, handle: DocumentHandle) -> str:
        """Absolute path of the document, or an empty string if unnamed."""
        ...

    def get_lines(self, handle: DocumentHandle) -> list[str]: ...

    def get_diagnostics(self, handle: DocumentHandle) -> Sequence[Diagnostic]: ...

    def match_filetype(self, filename: str) -> str | None:
        """Detect a filetype from the file name alone."""
        ...

    def detect_filetype(self, handle: DocumentHandle) -> str | None:
        """Detect a filetype from a loaded document's content."""
        ...


@runtime_checkable
class AnalysisClient(Protocol):
    """An attached language-analysis client."""

    id: int
    name: str
    filetypes: Iterable[str] | None
    root_dir: str | Path | None

    def supports_method(self, method: str) -> bool: ...

    def notify(self, method: str, params: dict[str, Any]) -> Any:
        """Send a notification; may return an awaitable."""
        ...
