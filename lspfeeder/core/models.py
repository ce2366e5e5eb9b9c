"""Core data models shared by the feeder services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lspfeeder.interfaces.host import AnalysisClient

DID_OPEN_METHOD = "textDocument/didOpen"


class Severity(IntEnum):
    """Diagnostic severity ordinals; a lower value is more severe."""

    ERROR = 1
    WARN = 2
    INFO = 3
    HINT = 4


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single finding reported against a document."""

    severity: int
    message: str = ""
    source: str | None = None


@dataclass(frozen=True)
class ClientSession:
    """Capability descriptor of an attached analysis client.

    Resolved once at attach time so the pipeline never has to probe the
    client object again.
    """

    id: int
    name: str
    filetypes: frozenset[str]
    root_dir: Path | None
    supports_did_open: bool
    client: Any = None

    @classmethod
    def from_client(cls, client: AnalysisClient) -> ClientSession:
        root = client.root_dir
        return cls(
            id=client.id,
            name=client.name,
            filetypes=frozenset(client.filetypes or ()),
            root_dir=Path(root) if root else None,
            supports_did_open=bool(client.supports_method(DID_OPEN_METHOD)),
            client=client,
        )

    def effective_root(self) -> Path:
        """Declared root directory, or the current working directory."""
        return self.root_dir if self.root_dir is not None else Path.cwd()


@dataclass(frozen=True, slots=True)
class DiagnosticSummary:
    """Per-document summary written to the diagnostics output file."""

    severity: int
    icon: str
    count: int
    time: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "icon": self.icon,
            "count": self.count,
            "time": self.time,
        }
