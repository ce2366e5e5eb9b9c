"""Configuration for the lspfeeder workspace feeder.

Options are layered the same way as the other settings classes:
1. CLI arguments
2. Host-supplied option mapping (``merged``)
3. Environment variables (LSPFEEDER_*)
4. Default values

Environment Variables:
    LSPFEEDER_ENABLED=true
    LSPFEEDER_DEBUG=false
    LSPFEEDER_MEMORY__MAX_FILES=5000
    LSPFEEDER_MEMORY__FILES_PER_BATCH=5
"""

import argparse
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IGNORE_DIRS = frozenset(
    {".git", "node_modules", "build", "dist", "target", ".venv", ".cache"}
)
DEFAULT_IGNORE_TYPES = frozenset({".log"})

LOG_FILE_NAME = "lspfeeder.log"
OUTPUT_FILE_NAME = "lspfeeder_diagnostics.json"


def default_data_dir() -> Path:
    """Return the per-user data directory (XDG_DATA_HOME aware)."""
    base = os.getenv("XDG_DATA_HOME")
    root = Path(base) if base else Path.home() / ".local" / "share"
    return root / "lspfeeder"


class IconConfig(BaseModel):
    """Display icon per severity class."""

    error: str = "🛑"
    warning: str = "🔶"
    info: str = "ℹ️"
    other: str = "●"


class MemoryConfig(BaseModel):
    """Rate and memory limits for the batch opener and flush debouncer."""

    max_files: int = Field(
        default=5000,
        ge=1,
        description="Process-wide cap on files collected and submitted for opening",
    )
    max_open_documents: int = Field(
        default=100,
        ge=1,
        description="Stop admitting files once the host has this many documents",
    )
    files_per_batch: int = Field(
        default=5, ge=1, description="Admissions attempted per tick"
    )
    debounce_ms: int = Field(
        default=100, ge=0, description="Quiet period before a diagnostics flush"
    )
    batch_delay_ms: int = Field(
        default=50, ge=0, description="Delay between batch opener ticks"
    )


class FilesConfig(BaseModel):
    """Ignore rules applied by the workspace walker."""

    ignore_dirs: frozenset[str] = Field(default=DEFAULT_IGNORE_DIRS)
    ignore_types: frozenset[str] = Field(
        default=DEFAULT_IGNORE_TYPES,
        description="File name suffixes (with leading dot) to skip",
    )


class FeederConfig(BaseSettings):
    """Top-level configuration for workspace feeding and diagnostics export."""

    model_config = SettingsConfigDict(
        env_prefix="LSPFEEDER_",
        env_nested_delimiter="__",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Master switch for both pipelines")
    debug: bool = Field(default=True, description="Write the log file when enabled")

    data_dir: Path = Field(default_factory=default_data_dir)
    dev_folder: Path | None = Field(
        default=None,
        description=(
            "Documents in this directory never trigger a scan "
            "(defaults to data_dir)"
        ),
    )
    log_path: Path | None = None
    output_path: Path | None = None

    icons: IconConfig = Field(default_factory=IconConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)

    @model_validator(mode="after")
    def _fill_derived_paths(self) -> "FeederConfig":
        if self.dev_folder is None:
            self.dev_folder = self.data_dir
        if self.log_path is None:
            self.log_path = self.data_dir / LOG_FILE_NAME
        if self.output_path is None:
            self.output_path = self.data_dir / OUTPUT_FILE_NAME
        return self

    def merged(self, overrides: dict[str, Any] | None) -> "FeederConfig":
        """Return a new config with ``overrides`` force-merged over this one.

        Nested mappings are merged key by key; any other value replaces the
        current one. The result is re-validated.
        """
        if not overrides:
            return self
        base = self.model_dump()
        # Paths derived from data_dir must follow a data_dir override.
        if base["dev_folder"] == self.data_dir:
            base.pop("dev_folder")
        if base["log_path"] == self.data_dir / LOG_FILE_NAME:
            base.pop("log_path")
        if base["output_path"] == self.data_dir / OUTPUT_FILE_NAME:
            base.pop("output_path")
        return type(self).model_validate(_deep_merge(base, overrides))

    @classmethod
    def add_cli_arguments(cls, parser: argparse.ArgumentParser) -> None:
        """Add feeder-related CLI arguments."""
        parser.add_argument(
            "--max-files",
            type=int,
            help="Maximum number of files collected per walk",
        )
        parser.add_argument(
            "--output",
            type=Path,
            help="Diagnostics summary file path",
        )
        parser.add_argument(
            "--ignore-dir",
            action="append",
            dest="ignore_dirs",
            help="Additional directory name to skip (repeatable)",
        )

    @classmethod
    def extract_cli_overrides(cls, args: Any) -> dict[str, Any]:
        """Extract config overrides from parsed CLI arguments."""
        overrides: dict[str, Any] = {}

        if getattr(args, "debug", False):
            overrides["debug"] = True
        if getattr(args, "max_files", None):
            overrides.setdefault("memory", {})["max_files"] = args.max_files
        if getattr(args, "output", None):
            overrides["output_path"] = args.output
        if getattr(args, "ignore_dirs", None):
            overrides.setdefault("files", {})["ignore_dirs"] = set(
                DEFAULT_IGNORE_DIRS
            ) | set(args.ignore_dirs)

        return overrides

    def __repr__(self) -> str:
        return (
            f"FeederConfig(enabled={self.enabled}, "
            f"max_files={self.memory.max_files}, "
            f"files_per_batch={self.memory.files_per_batch}, "
            f"output_path={self.output_path})"
        )


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in overrides.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = value
    return result
