"""Tests for the bounded workspace walk."""

import os
import tempfile
from pathlib import Path

import pytest

from lspfeeder.core.config.feeder_config import FilesConfig
from lspfeeder.core.utils.path_utils import normalize_file_path
from lspfeeder.services.workspace_walker import WorkspaceWalker


@pytest.fixture
def root():
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(normalize_file_path(tmp))


def _touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestIgnoreRules:
    def test_ignored_dir_and_suffix(self, root):
        _touch(root / "a.go")
        _touch(root / "b.log")
        _touch(root / ".git" / "c.go")
        walker = WorkspaceWalker(
            FilesConfig(ignore_dirs={".git"}, ignore_types={".log"}), max_files=100
        )

        assert walker.collect(root) == [str(root / "a.go")]

    def test_nested_ignored_directory_anywhere(self, root):
        _touch(root / "src" / "main.rs")
        _touch(root / "src" / "node_modules" / "dep.js")
        _touch(root / "target" / "debug" / "out.rs")
        walker = WorkspaceWalker(FilesConfig(), max_files=100)

        assert walker.collect(root) == [str(root / "src" / "main.rs")]

    def test_suffix_rule_applies_to_directories(self, root):
        _touch(root / "cache.log" / "inner.go")
        _touch(root / "keep.go")
        walker = WorkspaceWalker(FilesConfig(), max_files=100)

        assert walker.collect(root) == [str(root / "keep.go")]

    def test_dotfile_matches_its_whole_name_as_suffix(self, root):
        _touch(root / ".env")
        _touch(root / "app.py")
        walker = WorkspaceWalker(
            FilesConfig(ignore_dirs=set(), ignore_types={".env"}), max_files=100
        )

        assert walker.collect(root) == [str(root / "app.py")]


class TestFileCap:
    def test_never_exceeds_max_files(self, root):
        for d in range(5):
            for f in range(7):
                _touch(root / f"dir{d}" / f"f{f}.py")
        walker = WorkspaceWalker(FilesConfig(), max_files=10)

        files = walker.collect(root)
        assert len(files) == 10
        assert len(set(files)) == 10

    def test_cap_is_per_walk(self, root):
        for f in range(6):
            _touch(root / f"f{f}.py")
        walker = WorkspaceWalker(FilesConfig(), max_files=4)

        assert len(walker.collect(root)) == 4
        assert len(walker.collect(root)) == 4

    def test_small_tree_returned_in_full(self, root):
        _touch(root / "a" / "b" / "c.py")
        _touch(root / "d.py")
        walker = WorkspaceWalker(FilesConfig(), max_files=100)

        assert sorted(walker.collect(root)) == sorted(
            [str(root / "a" / "b" / "c.py"), str(root / "d.py")]
        )


class TestPaths:
    def test_paths_are_resolved_through_symlinked_root(self, root):
        real = root / "real"
        _touch(real / "x.go")
        link = root / "link"
        os.symlink(real, link)
        walker = WorkspaceWalker(FilesConfig(), max_files=100)

        assert walker.collect(link) == [str(real / "x.go")]

    def test_symlink_entries_are_skipped(self, root):
        _touch(root / "real.go")
        os.symlink(root / "real.go", root / "alias.go")
        walker = WorkspaceWalker(FilesConfig(), max_files=100)

        assert walker.collect(root) == [str(root / "real.go")]

    def test_missing_root_yields_nothing(self, root):
        walker = WorkspaceWalker(FilesConfig(), max_files=100)
        assert walker.collect(root / "absent") == []
