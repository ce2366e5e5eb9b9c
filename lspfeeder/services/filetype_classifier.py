"""Map workspace paths to the filetype tags analysis clients declare."""

from loguru import logger

from lspfeeder.core.state import UNKNOWN_FILETYPE, FeederState
from lspfeeder.core.utils.path_utils import file_extension
from lspfeeder.interfaces.host import DocumentHost

# Extensions resolved without asking the host.
FILETYPE_MAP: dict[str, str] = {
    # C/C++
    "c": "c",
    "h": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
    "hxx": "cpp",
    # Go
    "go": "go",
    # Lua
    "lua": "lua",
    # Rust
    "rs": "rust",
    # Python
    "py": "python",
    # JavaScript/TypeScript
    "js": "javascript",
    "ts": "typescript",
    "jsx": "javascriptreact",
    "tsx": "typescriptreact",
}


class FiletypeClassifier:
    """Resolve and memoize filetypes by file extension.

    The cache is keyed by extension, not by full path: two files with the
    same extension are assumed to share a filetype.
    """

    def __init__(self, state: FeederState, host: DocumentHost | None = None):
        self._state = state
        self._host = host

    def classify(self, path: str) -> str | None:
        """Return the filetype for ``path`` or None if it cannot be resolved."""
        if not path:
            return None
        ext = file_extension(path)
        cached = self._state.filetype_cache.get(ext)
        if cached is not None:
            return cached or None

        filetype = self._detect(path, ext)
        self._state.filetype_cache[ext] = filetype or UNKNOWN_FILETYPE
        if filetype:
            logger.debug(f"Detected filetype {filetype} for {path}")
        else:
            logger.debug(f"Cannot detect filetype for {path}")
        return filetype

    def _detect(self, path: str, ext: str) -> str | None:
        if ext in FILETYPE_MAP:
            return FILETYPE_MAP[ext]
        if self._host is None:
            return None

        filetype = self._host.match_filetype(path)
        if filetype:
            return filetype

        # Last resort: load the content and let the host sniff it.
        handle = self._host.create_document(path)
        try:
            self._host.load_document(handle)
            return self._host.detect_filetype(handle)
        except OSError as e:
            logger.debug(f"Content detection failed for {path}: {e}")
            return None
        finally:
            self._host.release_document(handle)
