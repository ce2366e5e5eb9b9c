"""Configuration package."""

from .feeder_config import FeederConfig, FilesConfig, IconConfig, MemoryConfig

__all__ = ["FeederConfig", "FilesConfig", "IconConfig", "MemoryConfig"]
