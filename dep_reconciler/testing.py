"""Test doubles for dep_reconciler — use in unit / integration tests.

Usage::

    from dep_reconciler.testing import FakeDependencyAnalyzer

    analyzer = FakeDependencyAnalyzer(AnalysisResult(used_undeclared=(artifact,)))
    analyzer = FakeDependencyAnalyzer(error=AnalysisError("boom"))
"""

from __future__ import annotations

from dep_reconciler.analyzers.base import DependencyAnalyzer
from dep_reconciler.exceptions import AnalysisError
from dep_reconciler.models import AnalysisResult
from dep_reconciler.project import Project


class FakeDependencyAnalyzer(DependencyAnalyzer):
    """Drop-in analyzer returning a fixed result.

    Parameters
    ----------
    result:
        Returned by every ``analyze`` call (empty result by default).
    error:
        If given, raised instead of returning a result.
    """

    def __init__(
        self,
        result: AnalysisResult | None = None,
        *,
        error: AnalysisError | None = None,
    ) -> None:
        self._result = result or AnalysisResult()
        self._error = error
        self._calls: list[Project] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def calls(self) -> list[Project]:
        """Projects received — useful for assertions in tests."""
        return self._calls

    def analyze(self, project: Project) -> AnalysisResult:
        self._calls.append(project)
        if self._error is not None:
            raise self._error
        return self._result
