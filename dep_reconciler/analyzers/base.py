"""Analyzer strategy interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from dep_reconciler.models import AnalysisResult
from dep_reconciler.project import Project


class DependencyAnalyzer(ABC):
    """
    Abstract base class for dependency analyzers.
    Each analyzer decides which dependencies a project uses and how that
    compares with what it declares. The caller picks the implementation and
    injects it into the reconciler.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Analyzer identifier, e.g. 'json-report'."""
        ...

    @abstractmethod
    def analyze(self, project: Project) -> AnalysisResult:
        """
        Classify the project's dependencies.

        Raises:
            AnalysisError: if the analysis or project model resolution fails.
        """
        ...
