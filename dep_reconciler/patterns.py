"""Ignore patterns: ``groupId:artifactId:type:version`` with ``*`` wildcards.

Each segment is optional; an empty or missing segment matches anything.
``*`` matches any run of characters (including none) anywhere in a segment,
so ``org.apache.*`` matches every group under ``org.apache.`` and
``:::*-SNAPSHOT`` matches every snapshot artifact. Matching is
case-sensitive and the version segment is compared with the base version.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

import structlog

from dep_reconciler.exceptions import ConfigurationError
from dep_reconciler.models import Artifact, unique

log = structlog.get_logger("dep_reconciler.patterns")

_SEGMENTS = 4


def _segment_regex(segment: str) -> re.Pattern[str] | None:
    """Compile one segment; ``None`` means wildcard."""
    if segment in ("", "*"):
        return None
    return re.compile(".*".join(re.escape(part) for part in segment.split("*")), re.DOTALL)


@dataclass(frozen=True)
class IgnorePattern:
    raw: str
    group: re.Pattern[str] | None
    artifact: re.Pattern[str] | None
    type: re.Pattern[str] | None
    version: re.Pattern[str] | None

    @classmethod
    def parse(cls, raw: str) -> IgnorePattern:
        if not raw or not raw.strip():
            raise ConfigurationError("Blank ignore pattern")
        segments = raw.strip().split(":")
        if len(segments) > _SEGMENTS:
            log.debug("patterns.extra_segments_ignored", pattern=raw, extra=segments[_SEGMENTS:])
        segments = (segments + [""] * _SEGMENTS)[:_SEGMENTS]
        return cls(raw, *(_segment_regex(s) for s in segments))

    def matches(self, artifact: Artifact) -> bool:
        fields = (
            (self.group, artifact.group_id),
            (self.artifact, artifact.artifact_id),
            (self.type, artifact.type),
            (self.version, artifact.base_version),
        )
        return all(rx is None or rx.fullmatch(value) is not None for rx, value in fields)


def parse_patterns(raw_patterns: Iterable[str]) -> list[IgnorePattern]:
    """Parse pattern strings, logging and skipping malformed entries."""
    patterns: list[IgnorePattern] = []
    for raw in raw_patterns:
        try:
            patterns.append(IgnorePattern.parse(raw))
        except ConfigurationError as exc:
            log.warning("patterns.pattern_skipped", pattern=raw, reason=str(exc))
    return patterns


@dataclass(frozen=True)
class FilterResult:
    kept: tuple[Artifact, ...]
    removed: tuple[Artifact, ...]


def filter_artifacts(
    artifacts: Iterable[Artifact],
    patterns: Sequence[IgnorePattern | str],
) -> FilterResult:
    """Split ``artifacts`` into kept and removed; an artifact is removed if any pattern matches."""
    compiled = [p for p in patterns if isinstance(p, IgnorePattern)]
    compiled += parse_patterns(p for p in patterns if isinstance(p, str))
    original = unique(artifacts)
    removed = tuple(a for a in original if any(p.matches(a) for p in compiled))
    removed_set = set(removed)
    return FilterResult(
        kept=tuple(a for a in original if a not in removed_set),
        removed=removed,
    )


def split_ignored(
    artifacts: Iterable[Artifact],
    *pattern_lists: Sequence[IgnorePattern | str],
) -> FilterResult:
    """Apply several pattern lists to the same original set and union the matches.

    Every list sees the full original input, so a match in one list never hides
    a candidate from another. Ignored artifacts are ordered by first match
    (list order, then input order).
    """
    original = unique(artifacts)
    ignored: list[Artifact] = []
    for patterns in pattern_lists:
        ignored.extend(filter_artifacts(original, patterns).removed)
    removed = unique(ignored)
    removed_set = set(removed)
    return FilterResult(
        kept=tuple(a for a in original if a not in removed_set),
        removed=removed,
    )
