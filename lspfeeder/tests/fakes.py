"""In-memory stand-ins for the host document model and analysis clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

from lspfeeder.core.models import DID_OPEN_METHOD, Diagnostic


@dataclass
class FakeDocument:
    name: str
    loaded: bool = False
    lines: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class FakeHost:
    """Document model backed by dicts; content is read from disk on load."""

    def __init__(
        self,
        name_filetypes: dict[str, str] | None = None,
        shebang_filetypes: dict[str, str] | None = None,
    ) -> None:
        self.documents: dict[int, FakeDocument] = {}
        self._next_handle = 1
        self.name_filetypes = name_filetypes or {}
        self.shebang_filetypes = shebang_filetypes or {}
        self.created: list[str] = []
        self.released: list[str] = []
        self.name_matches: list[str] = []

    # Helpers for tests
    def add_document(
        self,
        path: str,
        diagnostics: list[Diagnostic] | None = None,
        loaded: bool = True,
    ) -> int:
        handle = self._new_handle(path)
        doc = self.documents[handle]
        doc.loaded = loaded
        doc.diagnostics = list(diagnostics or [])
        return handle

    def set_diagnostics(self, handle: int, diagnostics: list[Diagnostic]) -> None:
        self.documents[handle].diagnostics = list(diagnostics)

    def _new_handle(self, path: str) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self.documents[handle] = FakeDocument(name=path)
        return handle

    # DocumentHost
    def find_document(self, path: str) -> int | None:
        for handle, doc in self.documents.items():
            if doc.name == path:
                return handle
        return None

    def create_document(self, path: str) -> int:
        self.created.append(path)
        return self._new_handle(path)

    def load_document(self, handle: int) -> None:
        doc = self.documents[handle]
        doc.lines = Path(doc.name).read_text(encoding="utf-8").split("\n")
        doc.loaded = True

    def release_document(self, handle: int) -> None:
        doc = self.documents.pop(handle)
        self.released.append(doc.name)

    def list_documents(self) -> list[int]:
        return list(self.documents)

    def is_loaded(self, handle: int) -> bool:
        return self.documents[handle].loaded

    def document_name(self, handle: int) -> str:
        return self.documents[handle].name

    def get_lines(self, handle: int) -> list[str]:
        return list(self.documents[handle].lines)

    def get_diagnostics(self, handle: int) -> list[Diagnostic]:
        return list(self.documents[handle].diagnostics)

    def match_filetype(self, filename: str) -> str | None:
        self.name_matches.append(filename)
        return self.name_filetypes.get(Path(filename).name)

    def detect_filetype(self, handle: int) -> str | None:
        lines = self.documents[handle].lines
        if not lines or not lines[0].startswith("#!"):
            return None
        for needle, filetype in self.shebang_filetypes.items():
            if needle in lines[0]:
                return filetype
        return None


class FakeClient:
    """Analysis client recording every notification it receives."""

    def __init__(
        self,
        client_id: int = 1,
        name: str = "fake-ls",
        filetypes: list[str] | None = None,
        root_dir: str | None = None,
        methods: set[str] | None = None,
        fail: bool = False,
    ) -> None:
        self.id = client_id
        self.name = name
        self.filetypes = filetypes
        self.root_dir = root_dir
        self.methods = {DID_OPEN_METHOD} if methods is None else methods
        self.fail = fail
        self.notifications: list[tuple[str, dict[str, Any]]] = []

    def supports_method(self, method: str) -> bool:
        return method in self.methods

    def notify(self, method: str, params: dict[str, Any]) -> bool:
        if self.fail:
            raise ConnectionError("transport closed")
        self.notifications.append((method, params))
        return True

    @property
    def opened_paths(self) -> list[str]:
        return [
            unquote(urlparse(params["textDocument"]["uri"]).path)
            for _, params in self.notifications
        ]


class AsyncFakeClient(FakeClient):
    """Client whose notify is a coroutine."""

    async def notify(self, method: str, params: dict[str, Any]) -> bool:  # type: ignore[override]
        return super().notify(method, params)
