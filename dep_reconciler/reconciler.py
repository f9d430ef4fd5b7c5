"""DependencyReconciler: one analysis pass from analyzer result to emitted report.

Pipeline (single pass, no state kept between runs)::

    analyzer.analyze(project)
      -> force declared usage      (config.used_dependencies)
      -> drop non-compile scopes   (config.ignore_non_compile)
      -> split ignored / kept      (global + per-kind ignore patterns)
      -> render + emit             (console, XML, fragment, scriptable)
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from dep_reconciler.analyzers.base import DependencyAnalyzer
from dep_reconciler.config import AnalyzeConfig
from dep_reconciler.core.logging import silent_logger
from dep_reconciler.exceptions import DependencyProblemsError
from dep_reconciler.models import AnalysisResult, ReconciliationReport
from dep_reconciler.patterns import parse_patterns, split_ignored
from dep_reconciler.project import Project
from dep_reconciler.renderers import (
    WARNING,
    ReportLine,
    render_console,
    render_json_fragment,
    render_scriptable,
    render_xml,
)


@dataclass(frozen=True)
class RenderedReport:
    console: tuple[ReportLine, ...]
    xml: str | None = None
    json: str | None = None
    scriptable: str | None = None


@dataclass(frozen=True)
class AnalysisOutcome:
    project: Project
    report: ReconciliationReport
    rendered: RenderedReport

    @property
    def has_warning(self) -> bool:
        return self.report.has_warning


class DependencyReconciler:
    """Runs one dependency analysis and reports used/unused/undeclared artifacts."""

    def __init__(
        self,
        analyzer: DependencyAnalyzer,
        config: AnalyzeConfig | None = None,
        log: structlog.typing.BindableLogger | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._config = config or AnalyzeConfig()
        if self._config.silent:
            self._log = silent_logger()
        else:
            self._log = log or structlog.get_logger("dep_reconciler.report")

    @property
    def config(self) -> AnalyzeConfig:
        return self._config

    # ── pure stages ──────────────────────────────────────────────────────

    def reconcile(self, result: AnalysisResult) -> ReconciliationReport:
        """Force usage, prune non-compile scopes, then split off ignored artifacts."""
        cfg = self._config
        if cfg.used_dependencies:
            result = result.force_declared_usage(cfg.used_dependencies)
        if cfg.ignore_non_compile:
            result = result.ignore_non_compile()

        global_patterns = parse_patterns(cfg.ignored_dependencies)
        used_undeclared = split_ignored(
            result.used_undeclared,
            global_patterns,
            parse_patterns(cfg.ignored_used_undeclared_dependencies),
        )
        unused_declared = split_ignored(
            result.unused_declared,
            global_patterns,
            parse_patterns(cfg.ignored_unused_declared_dependencies),
        )
        return ReconciliationReport(
            used_declared=result.used_declared,
            kept_used_undeclared=used_undeclared.kept,
            ignored_used_undeclared=used_undeclared.removed,
            kept_unused_declared=unused_declared.kept,
            ignored_unused_declared=unused_declared.removed,
        )

    def render(self, report: ReconciliationReport, project: Project) -> RenderedReport:
        cfg = self._config
        return RenderedReport(
            console=tuple(render_console(report, verbose=cfg.verbose)),
            xml=render_xml(report.kept_used_undeclared) if cfg.output_xml else None,
            json=(
                render_json_fragment(
                    project.origin_module,
                    report.kept_used_undeclared,
                    report.kept_unused_declared,
                )
                if cfg.output_json
                else None
            ),
            scriptable=(
                render_scriptable(
                    report.kept_used_undeclared, cfg.scriptable_flag, project.pom_file
                )
                if cfg.scriptable_output
                else None
            ),
        )

    # ── run ──────────────────────────────────────────────────────────────

    def skip_reason(self, project: Project) -> str | None:
        if self._config.skip:
            return "Skipping plugin execution"
        if project.packaging == "pom":
            return "Skipping pom project"
        if not project.output_directory.exists():
            return "Skipping project with no build directory"
        return None

    def analyze(self, project: Project) -> AnalysisOutcome | None:
        """Analyze ``project`` and emit the report. Returns ``None`` when skipped.

        Raises:
            AnalysisError: from the analyzer; nothing is emitted in that case.
        """
        reason = self.skip_reason(project)
        if reason:
            self._log.info(reason)
            self._log.debug("reconciler.skipped", project=project.origin_module, reason=reason)
            return None

        result = self._analyzer.analyze(project)
        report = self.reconcile(result)
        rendered = self.render(report, project)
        self._emit(rendered)
        return AnalysisOutcome(project=project, report=report, rendered=rendered)

    def execute(self, project: Project) -> AnalysisOutcome | None:
        """``analyze`` plus the fail-on-warning policy."""
        outcome = self.analyze(project)
        if outcome is not None and outcome.has_warning and self._config.fail_on_warning:
            raise DependencyProblemsError("Dependency problems found")
        return outcome

    def _emit(self, rendered: RenderedReport) -> None:
        for line in rendered.console:
            if line.level == WARNING:
                self._log.warning(line.text)
            else:
                self._log.info(line.text)
        if rendered.xml:
            self._log.info("Add the following to your pom to correct the missing dependencies: ")
            self._log.info("\n" + rendered.xml)
        if rendered.json:
            self._log.warning(rendered.json)
        if rendered.scriptable:
            self._log.info("Missing dependencies: ")
            self._log.info("\n" + rendered.scriptable)
