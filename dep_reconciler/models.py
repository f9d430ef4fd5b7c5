"""Data models for dependency analysis results and reconciliation reports."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import structlog

from dep_reconciler.exceptions import ConfigurationError

log = structlog.get_logger("dep_reconciler.analysis")

SCOPE_COMPILE = "compile"

# Resolved snapshot: 1.0-20240101.123456-7 (dot optional)
_SNAPSHOT_TIMESTAMP_RE = re.compile(r"^(.*)-([0-9]{8}\.?[0-9]{6})-([0-9]+)$")


@dataclass(frozen=True)
class Artifact:
    """A resolved dependency as reported by the analyzer.

    ``file`` is informational (used by unpack/copy helpers) and does not take
    part in equality, so the same coordinates always compare equal.
    """

    group_id: str
    artifact_id: str
    version: str
    type: str = "jar"
    classifier: str = ""
    scope: str = SCOPE_COMPILE
    file: Path | None = field(default=None, compare=False)

    @property
    def base_version(self) -> str:
        """Version with any resolved snapshot timestamp folded back to ``-SNAPSHOT``."""
        m = _SNAPSHOT_TIMESTAMP_RE.match(self.version)
        if m:
            return f"{m.group(1)}-SNAPSHOT"
        return self.version

    @property
    def is_snapshot(self) -> bool:
        return self.base_version.endswith("-SNAPSHOT")

    @property
    def key(self) -> str:
        """``groupId:artifactId[:classifier][:type]:version`` used for display."""
        parts = [self.group_id, self.artifact_id]
        if self.classifier.strip():
            parts.append(self.classifier)
        if self.type.strip():
            parts.append(self.type)
        parts.append(self.base_version)
        return ":".join(parts)

    @property
    def conflict_id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.version}"

    @property
    def management_key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def __str__(self) -> str:
        return self.key


def unique(artifacts: Iterable[Artifact]) -> tuple[Artifact, ...]:
    """Drop duplicates, keeping first-seen order."""
    return tuple(dict.fromkeys(artifacts))


def parse_management_key(value: str) -> tuple[str, str]:
    """Parse a ``groupId:artifactId`` identifier (no wildcards)."""
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.strip() for p in parts) or "*" in value:
        raise ConfigurationError(
            f"Invalid dependency identifier {value!r}, expected groupId:artifactId"
        )
    return parts[0].strip(), parts[1].strip()


@dataclass(frozen=True)
class AnalysisResult:
    """Raw three-way classification produced by a dependency analyzer.

    The three groups are pairwise disjoint. Transforms return new instances;
    nothing here mutates in place.
    """

    used_declared: tuple[Artifact, ...] = ()
    used_undeclared: tuple[Artifact, ...] = ()
    unused_declared: tuple[Artifact, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "used_declared", unique(self.used_declared))
        object.__setattr__(self, "used_undeclared", unique(self.used_undeclared))
        object.__setattr__(self, "unused_declared", unique(self.unused_declared))

    def force_declared_usage(self, identifiers: Iterable[str]) -> AnalysisResult:
        """Move artifacts named by ``groupId:artifactId`` entries into used-declared.

        Malformed entries are logged and skipped, unmatched entries are ignored.
        """
        forced: set[tuple[str, str]] = set()
        for entry in identifiers:
            try:
                forced.add(parse_management_key(entry))
            except ConfigurationError as exc:
                log.warning("analysis.forced_usage_skipped", entry=entry, reason=str(exc))
        if not forced:
            return self

        def _forced(artifact: Artifact) -> bool:
            return (artifact.group_id, artifact.artifact_id) in forced

        moved = [a for a in (*self.used_undeclared, *self.unused_declared) if _forced(a)]
        log.debug("analysis.forced_usage", moved=[a.key for a in moved])
        return AnalysisResult(
            used_declared=(*self.used_declared, *moved),
            used_undeclared=tuple(a for a in self.used_undeclared if not _forced(a)),
            unused_declared=tuple(a for a in self.unused_declared if not _forced(a)),
        )

    def ignore_non_compile(self) -> AnalysisResult:
        """Drop non-compile-scope artifacts from the two problem groups."""
        return AnalysisResult(
            used_declared=self.used_declared,
            used_undeclared=tuple(a for a in self.used_undeclared if a.scope == SCOPE_COMPILE),
            unused_declared=tuple(a for a in self.unused_declared if a.scope == SCOPE_COMPILE),
        )


@dataclass(frozen=True)
class ReconciliationReport:
    """Filtered view of an :class:`AnalysisResult`, ready for rendering."""

    used_declared: tuple[Artifact, ...] = ()
    kept_used_undeclared: tuple[Artifact, ...] = ()
    ignored_used_undeclared: tuple[Artifact, ...] = ()
    kept_unused_declared: tuple[Artifact, ...] = ()
    ignored_unused_declared: tuple[Artifact, ...] = ()

    @property
    def has_warning(self) -> bool:
        return bool(self.kept_used_undeclared or self.kept_unused_declared)
