"""Tests for the lspfeeder command line."""

import json
import tempfile
from pathlib import Path

import pytest

from lspfeeder.api.cli.main import build_config, create_parser, main
from lspfeeder.core.utils.path_utils import normalize_file_path


@pytest.fixture
def workspace():
    with tempfile.TemporaryDirectory() as tmp:
        root = Path(normalize_file_path(tmp))
        (root / "src").mkdir()
        (root / "src" / "a.go").write_text("")
        (root / "vendor").mkdir()
        (root / "vendor" / "b.go").write_text("")
        (root / "run.log").write_text("")
        yield root


class TestCollect:
    def test_prints_collected_files(self, workspace, capsys):
        assert main(["collect", str(workspace)]) == 0

        out = capsys.readouterr().out.splitlines()
        assert sorted(out) == sorted(
            [str(workspace / "src" / "a.go"), str(workspace / "vendor" / "b.go")]
        )

    def test_extra_ignore_dir_and_limit(self, workspace, capsys):
        assert main(["collect", str(workspace), "--ignore-dir", "vendor"]) == 0
        assert capsys.readouterr().out.splitlines() == [str(workspace / "src" / "a.go")]

        assert main(["collect", str(workspace), "--max-files", "1"]) == 0
        captured = capsys.readouterr()
        assert len(captured.out.splitlines()) == 1
        assert "file limit" in captured.err


class TestSummary:
    def test_missing_output(self, workspace, capsys):
        assert main(["summary", "--output", str(workspace / "none.json")]) == 1
        assert "No diagnostics written yet" in capsys.readouterr().err

    def test_sorted_by_severity(self, workspace, capsys):
        output = workspace / "diag.json"
        output.write_text(
            json.dumps(
                {
                    "/p/warn.go": {"severity": 2, "icon": "W", "count": 1, "time": "t"},
                    "/p/my%20err.go": {"severity": 1, "icon": "E", "count": 3, "time": "t"},
                }
            )
        )

        assert main(["summary", "--output", str(output)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("E")
        assert "/p/my err.go" in lines[0]
        assert "/p/warn.go" in lines[1]

    def test_config_file_sets_output(self, workspace, capsys):
        output = workspace / "diag.json"
        output.write_text(json.dumps({"/p/a.go": {"severity": 1, "icon": "E", "count": 1, "time": "t"}}))
        config = workspace / "feeder.json"
        config.write_text(json.dumps({"output_path": str(output)}))

        assert main(["summary", "--config", str(config), "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["/p/a.go"]["count"] == 1


class TestBuildConfig:
    def test_config_file_beats_environment(self, workspace, monkeypatch):
        config = workspace / "feeder.json"
        config.write_text(
            json.dumps({"output_path": "/from/file.json", "memory": {"max_files": 11}})
        )
        monkeypatch.setenv("LSPFEEDER_OUTPUT_PATH", "/from/env.json")
        monkeypatch.setenv("LSPFEEDER_MEMORY__MAX_FILES", "22")

        args = create_parser().parse_args(["summary", "--config", str(config)])
        result = build_config(args)

        assert result.output_path == Path("/from/file.json")
        assert result.memory.max_files == 11

    def test_environment_applies_without_config_file(self, monkeypatch):
        monkeypatch.setenv("LSPFEEDER_OUTPUT_PATH", "/from/env.json")
        monkeypatch.setenv("LSPFEEDER_MEMORY__MAX_FILES", "22")

        result = build_config(create_parser().parse_args(["summary"]))

        assert result.output_path == Path("/from/env.json")
        assert result.memory.max_files == 22

    def test_cli_beats_config_file(self, workspace):
        config = workspace / "feeder.json"
        config.write_text(json.dumps({"output_path": "/from/file.json"}))

        args = create_parser().parse_args(
            ["summary", "--config", str(config), "--output", "/from/cli.json"]
        )

        assert build_config(args).output_path == Path("/from/cli.json")
