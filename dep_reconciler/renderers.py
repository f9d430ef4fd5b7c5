"""Report renderers: console lines, XML snippet, scriptable lines, issue fragment.

All renderers are pure and keep the input order. Empty input never raises:
the XML, scriptable and fragment renderers return an empty string.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from dep_reconciler.models import SCOPE_COMPILE, Artifact, ReconciliationReport

INFO = "info"
WARNING = "warning"

NO_PROBLEMS = "No dependency problems found"
_INDENT = "   "


@dataclass(frozen=True)
class ReportLine:
    level: str  # "info" | "warning"
    text: str


def _group(header: str, artifacts: Sequence[Artifact], level: str) -> list[ReportLine]:
    lines = [ReportLine(level, header)]
    if not artifacts:
        lines.append(ReportLine(INFO, f"{_INDENT}None"))
    for artifact in artifacts:
        lines.append(ReportLine(level, f"{_INDENT}{artifact.key}"))
    return lines


def render_console(report: ReconciliationReport, verbose: bool = False) -> list[ReportLine]:
    """Human-readable report.

    Problem groups appear only when non-empty; the informational groups
    (used declared, ignored) appear only in verbose mode, with ``None`` when
    empty.
    """
    lines: list[ReportLine] = []
    if verbose:
        lines += _group("Used declared dependencies found:", report.used_declared, INFO)
    if report.kept_used_undeclared:
        lines += _group("Used undeclared dependencies found:", report.kept_used_undeclared, WARNING)
    if report.kept_unused_declared:
        lines += _group("Unused declared dependencies found:", report.kept_unused_declared, WARNING)
    if verbose:
        lines += _group("Ignored used undeclared dependencies:", report.ignored_used_undeclared, INFO)
        lines += _group("Ignored unused declared dependencies:", report.ignored_unused_declared, INFO)
    if not lines:
        lines.append(ReportLine(INFO, NO_PROBLEMS))
    return lines


def render_xml(artifacts: Sequence[Artifact]) -> str:
    """``<dependency>`` blocks to paste into the POM for used-but-undeclared artifacts."""
    blocks: list[str] = []
    for artifact in artifacts:
        dep = ET.Element("dependency")
        ET.SubElement(dep, "groupId").text = artifact.group_id
        ET.SubElement(dep, "artifactId").text = artifact.artifact_id
        ET.SubElement(dep, "version").text = artifact.base_version
        if artifact.classifier.strip():
            ET.SubElement(dep, "classifier").text = artifact.classifier
        if artifact.scope != SCOPE_COMPILE:
            ET.SubElement(dep, "scope").text = artifact.scope
        ET.indent(dep, space="  ")
        blocks.append(ET.tostring(dep, encoding="unicode"))
    return "\n".join(blocks)


def render_scriptable(artifacts: Sequence[Artifact], flag: str, pom_file: str | Path) -> str:
    """One ``flag:pom:conflictId:classifier:baseVersion:scope`` line per artifact.

    Field order and the ``:`` separator are consumed by external scripts.
    """
    return "".join(
        f"{flag}:{pom_file}:{a.conflict_id}:{a.classifier}:{a.base_version}:{a.scope}\n"
        for a in artifacts
    )


def _join(artifacts: Sequence[Artifact]) -> str:
    return ", ".join(a.management_key for a in artifacts)


def render_json_fragment(
    origin_module: str,
    used_undeclared: Sequence[Artifact],
    unused_declared: Sequence[Artifact],
) -> str:
    """Single-line issue summary picked up by log scrapers.

    This is not strict JSON (keys are unquoted); the shape is kept as-is for
    existing consumers.
    """
    if not used_undeclared and not unused_declared:
        return ""
    parts: list[str] = []
    if used_undeclared:
        parts.append(f"usedUndeclared: [{_join(used_undeclared)}]")
    if unused_declared:
        parts.append(f"unusedDeclared: [{_join(unused_declared)}]")
    return f'{{dependencyIssues:"true", originModule: "{origin_module}", ' + ", ".join(parts) + "}"
