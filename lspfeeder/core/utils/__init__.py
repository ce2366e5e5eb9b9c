"""Core utilities package."""

from .path_utils import (
    file_extension,
    file_suffix,
    is_within_root,
    normalize_file_path,
    path_to_url,
    uri_from_path,
)

__all__ = [
    "file_extension",
    "file_suffix",
    "is_within_root",
    "normalize_file_path",
    "path_to_url",
    "uri_from_path",
]
