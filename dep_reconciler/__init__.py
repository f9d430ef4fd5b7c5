"""dep-reconciler: report used, unused and undeclared project dependencies."""

__version__ = "0.1.0"

from dep_reconciler.analyzers import DependencyAnalyzer, JsonReportAnalyzer
from dep_reconciler.archive import ArchiverManager, ArtifactFiles
from dep_reconciler.config import AnalyzeConfig, load_config
from dep_reconciler.models import AnalysisResult, Artifact, ReconciliationReport
from dep_reconciler.patterns import IgnorePattern, filter_artifacts, split_ignored
from dep_reconciler.project import Project, load_project
from dep_reconciler.reconciler import AnalysisOutcome, DependencyReconciler, RenderedReport

__all__ = [
    "AnalysisOutcome",
    "AnalysisResult",
    "AnalyzeConfig",
    "ArchiverManager",
    "Artifact",
    "ArtifactFiles",
    "DependencyAnalyzer",
    "DependencyReconciler",
    "IgnorePattern",
    "JsonReportAnalyzer",
    "Project",
    "ReconciliationReport",
    "RenderedReport",
    "filter_artifacts",
    "load_config",
    "load_project",
    "split_ignored",
]
