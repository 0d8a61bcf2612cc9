"""Exception types raised by codegrab."""

from __future__ import annotations


class CodegrabError(Exception):
    """Base class for all codegrab errors."""


class InvalidConfigError(CodegrabError, ValueError):
    """Raised at an entry point when the scan configuration is malformed."""


class ElementProcessingError(CodegrabError):
    """A single candidate element could not be processed.

    Always recovered inside a scan: the element is skipped and logged.

    Attributes:
        tag     -- lowercased tag name of the element ("" if unknown)
        classes -- the element's class attribute, space-joined
    """

    def __init__(self, message: str, tag: str = "", classes: str = "") -> None:
        super().__init__(message)
        self.tag = tag
        self.classes = classes


class UnsupportedExportError(CodegrabError):
    """Raised for export targets that are declared but not implemented."""
