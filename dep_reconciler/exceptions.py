"""Custom exceptions for dep-reconciler."""

from __future__ import annotations

from pathlib import Path


class DependencyReconcilerError(Exception):
    """Base exception for all dep-reconciler errors."""


class AnalysisError(DependencyReconcilerError):
    """Raised when the dependency analyzer or project model resolution fails."""


class ConfigurationError(DependencyReconcilerError):
    """Raised for malformed configuration values (identifiers, patterns, files)."""


class DependencyProblemsError(DependencyReconcilerError):
    """Raised by the fail-on-warning policy when dependency problems were reported."""


class ArchiveError(DependencyReconcilerError):
    """Base exception for unpack and copy failures."""


class UnknownArchiverTypeError(ArchiveError):
    """Raised when no unarchiver handles a type hint or file extension."""

    def __init__(self, hint: str):
        self.hint = hint
        super().__init__(f"Unknown archiver type: {hint!r}")


class ArchiveExtractionError(ArchiveError):
    """Raised when extracting an archive fails."""

    def __init__(self, source: Path, destination: Path, reason: str):
        self.source = source
        self.destination = destination
        super().__init__(f"Error unpacking file: {source} to: {destination} ({reason})")


class ArtifactNotPackagedError(ArchiveError):
    """Raised when an artifact file is still a directory (e.g. a reactor output)."""


class CopyError(ArchiveError):
    """Raised when copying an artifact file fails."""

    def __init__(self, source: Path, destination: Path, reason: str):
        self.source = source
        self.destination = destination
        super().__init__(f"Error copying artifact from {source} to {destination}: {reason}")
