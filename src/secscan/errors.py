"""Fatal, scan-level error conditions."""

from __future__ import annotations


class ScanError(Exception):
    """Base class for errors that abort a scan before any file is processed."""


class DirectoryNotFound(ScanError, FileNotFoundError):
    """The scan root does not exist or is not a directory."""


class RuleSourceNotFound(ScanError, FileNotFoundError):
    """The external rule file does not exist."""


class InvalidRuleSource(ScanError, ValueError):
    """The external rule file is structurally invalid."""
