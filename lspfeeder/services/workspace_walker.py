"""Bounded depth-first collection of workspace files."""

import os
from pathlib import Path

from loguru import logger

from lspfeeder.core.config.feeder_config import FilesConfig
from lspfeeder.core.utils.path_utils import file_suffix, normalize_file_path


class WorkspaceWalker:
    """Collect candidate files under a directory, honoring ignore rules.

    Traversal is pre-order and follows the directory listing order. The
    whole walk stops as soon as ``max_files`` paths have been collected.
    Symlinked entries are neither followed nor collected.
    """

    def __init__(self, files_config: FilesConfig, max_files: int):
        self._ignore_dirs = files_config.ignore_dirs
        self._ignore_types = files_config.ignore_types
        self.max_files = max_files

    def is_ignored(self, name: str) -> bool:
        if name in self._ignore_dirs:
            return True
        suffix = file_suffix(name)
        return suffix is not None and suffix in self._ignore_types

    def collect(self, root: Path | str) -> list[str]:
        """Return real paths of the files under ``root``."""
        files: list[str] = []
        self._traverse(str(root), files)
        logger.info(f"Collected {len(files)} files in root {root}")
        return files

    def _traverse(self, directory: str, files: list[str]) -> bool:
        """Walk ``directory``; return False once the file cap is reached."""
        try:
            scanner = os.scandir(directory)
        except OSError as e:
            logger.debug(f"Cannot scan {directory}: {e}")
            return True

        with scanner:
            for entry in scanner:
                if len(files) >= self.max_files:
                    logger.debug(f"Reached max files limit: {self.max_files}")
                    return False
                if self.is_ignored(entry.name):
                    continue
                full = os.path.join(directory, entry.name)
                try:
                    if entry.is_dir(follow_symlinks=False):
                        if not self._traverse(full, files):
                            return False
                    elif entry.is_file(follow_symlinks=False):
                        files.append(normalize_file_path(full))
                except OSError as e:
                    logger.debug(f"Skipping {full}: {e}")
        return len(files) < self.max_files
