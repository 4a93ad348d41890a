"""Custom exception hierarchy for Scriptorium.

These exceptions allow callers to discriminate error categories
and handle them appropriately while preserving the original context.
"""

from __future__ import annotations


class ScriptoriumError(Exception):
    """Base class for all Scriptorium exceptions."""


class ConfigError(ScriptoriumError):
    """Raised when configuration loading or validation fails."""


class StorageError(ScriptoriumError):
    """Raised when the storage layer encounters an error (content reads, snapshot writes)."""


class SearchError(ScriptoriumError):
    """Raised for search indexing/query issues."""


class IndexBuildError(SearchError):
    """Raised when a forced rebuild fails; the previous snapshot stays in place."""
