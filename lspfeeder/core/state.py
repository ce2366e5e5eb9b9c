"""Process-lifetime state shared by every feeder pipeline."""

from dataclasses import dataclass, field

UNKNOWN_FILETYPE = ""


@dataclass
class FeederState:
    """Grow-only sets and caches owned by one feeder service.

    Attributes:
        opened_files: Real paths already submitted for opening, across all
            clients and both scan phases. Never shrinks.
        filetype_cache: Extension -> filetype, with ``UNKNOWN_FILETYPE``
            recorded for extensions that resolved to nothing.
        processed_clients: Ids of clients whose attach has been handled.
    """

    opened_files: set[str] = field(default_factory=set)
    filetype_cache: dict[str, str] = field(default_factory=dict)
    processed_clients: set[int] = field(default_factory=set)

    def mark_opened(self, path: str) -> bool:
        """Record ``path``; return False if it was already recorded."""
        if path in self.opened_files:
            return False
        self.opened_files.add(path)
        return True

    def mark_client_processed(self, client_id: int) -> bool:
        """Record ``client_id``; return False if it was already recorded."""
        if client_id in self.processed_clients:
            return False
        self.processed_clients.add(client_id)
        return True

    @property
    def opened_count(self) -> int:
        return len(self.opened_files)
