"""Analyzer reading a pre-computed analysis report (JSON).

Expected document::

    {
      "usedDeclared":   [{"groupId": "...", "artifactId": "...", "version": "..."}],
      "usedUndeclared": [...],
      "unusedDeclared": [...]
    }

Artifact objects may also carry ``type``, ``classifier``, ``scope`` and ``file``.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from dep_reconciler.analyzers.base import DependencyAnalyzer
from dep_reconciler.exceptions import AnalysisError
from dep_reconciler.models import SCOPE_COMPILE, AnalysisResult, Artifact
from dep_reconciler.project import Project

log = structlog.get_logger("dep_reconciler.analyzer")


class ArtifactEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    group_id: str = Field(min_length=1)
    artifact_id: str = Field(min_length=1)
    version: str = Field(min_length=1)
    type: str = "jar"
    classifier: str | None = None
    scope: str | None = None
    file: str | None = None

    def to_artifact(self) -> Artifact:
        return Artifact(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            type=self.type,
            classifier=self.classifier or "",
            scope=self.scope or SCOPE_COMPILE,
            file=Path(self.file) if self.file else None,
        )


class AnalysisReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    used_declared: list[ArtifactEntry] = []
    used_undeclared: list[ArtifactEntry] = []
    unused_declared: list[ArtifactEntry] = []


class JsonReportAnalyzer(DependencyAnalyzer):
    """Load the classification written by an external bytecode analyzer."""

    def __init__(self, report_path: str | Path) -> None:
        self.report_path = Path(report_path)

    @property
    def name(self) -> str:
        return "json-report"

    def analyze(self, project: Project) -> AnalysisResult:
        try:
            content = self.report_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise AnalysisError(f"Cannot read analysis report {self.report_path}: {exc}") from exc
        try:
            report = AnalysisReport.model_validate_json(content)
        except ValidationError as exc:
            raise AnalysisError(f"Invalid analysis report {self.report_path}: {exc}") from exc

        # First list wins so the three groups stay disjoint.
        seen: set[Artifact] = set()
        groups: list[list[Artifact]] = []
        for entries in (report.used_declared, report.used_undeclared, report.unused_declared):
            group: list[Artifact] = []
            for entry in entries:
                artifact = entry.to_artifact()
                if artifact in seen:
                    log.debug("analyzer.duplicate_artifact", artifact=artifact.key)
                    continue
                seen.add(artifact)
                group.append(artifact)
            groups.append(group)

        log.debug(
            "analyzer.report_loaded",
            project=project.origin_module,
            used_declared=len(groups[0]),
            used_undeclared=len(groups[1]),
            unused_declared=len(groups[2]),
        )
        return AnalysisResult(*(tuple(g) for g in groups))
