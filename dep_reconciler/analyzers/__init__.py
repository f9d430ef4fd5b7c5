"""Dependency analyzers — strategies producing an AnalysisResult for a project."""

from dep_reconciler.analyzers.base import DependencyAnalyzer
from dep_reconciler.analyzers.json_report import JsonReportAnalyzer

__all__ = ["DependencyAnalyzer", "JsonReportAnalyzer"]
