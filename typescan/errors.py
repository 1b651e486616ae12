"""typescan exception hierarchy.

Each failure carries the locator, path, index or source that caused it.
"""

from __future__ import annotations


class TypeScanError(Exception):
    """Base exception for all typescan failures."""


class ResolutionError(TypeScanError):
    """Raised when no container strategy can open a source locator."""

    def __init__(self, locator: str, detail: str = "") -> None:
        self.locator = locator
        message = f"could not resolve a container for locator [{locator}]"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ExtractionError(TypeScanError):
    """Raised when a descriptor cannot be produced or scanned for a file."""

    def __init__(self, path: str, detail: str = "") -> None:
        self.path = path
        message = f"could not extract metadata from {path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigurationError(TypeScanError):
    """Raised for invalid configuration or a query against an unconfigured index."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        super().__init__(detail or f"scanner {name} was not configured")


class MergeError(TypeScanError):
    """Raised when a persisted snapshot cannot be read during collect/merge."""

    def __init__(self, source: str, detail: str = "") -> None:
        self.source = source
        message = f"could not merge {source}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
