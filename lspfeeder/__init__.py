"""Feed workspace files to language-analysis clients and export diagnostics."""

__version__ = "0.1.0"
