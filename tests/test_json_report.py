"""Tests for the JSON report analyzer."""

from __future__ import annotations

from pathlib import Path

import pytest

from dep_reconciler.analyzers import DependencyAnalyzer, JsonReportAnalyzer
from dep_reconciler.exceptions import AnalysisError
from dep_reconciler.models import Artifact


def _entry(artifact_id: str, **extra) -> dict:
    entry = {"groupId": "org.example", "artifactId": artifact_id, "version": "1.0"}
    entry.update(extra)
    return entry


class TestJsonReportAnalyzer:
    def test_is_a_dependency_analyzer(self, tmp_path):
        analyzer = JsonReportAnalyzer(tmp_path / "a.json")
        assert isinstance(analyzer, DependencyAnalyzer)
        assert analyzer.name == "json-report"

    def test_loads_three_groups(self, project, write_report):
        path = write_report(
            {
                "usedDeclared": [_entry("u")],
                "usedUndeclared": [_entry("d", scope="runtime", classifier="tests")],
                "unusedDeclared": [_entry("n", type="war", file="/repo/n.war")],
            }
        )
        result = JsonReportAnalyzer(path).analyze(project)

        assert result.used_declared == (Artifact("org.example", "u", "1.0"),)
        undeclared = result.used_undeclared[0]
        assert undeclared.scope == "runtime"
        assert undeclared.classifier == "tests"
        unused = result.unused_declared[0]
        assert unused.type == "war"
        assert unused.file == Path("/repo/n.war")

    def test_defaults(self, project, write_report):
        result = JsonReportAnalyzer(write_report({"usedUndeclared": [_entry("d")]})).analyze(project)
        artifact = result.used_undeclared[0]
        assert (artifact.type, artifact.classifier, artifact.scope) == ("jar", "", "compile")
        assert result.used_declared == ()
        assert result.unused_declared == ()

    def test_snake_case_keys_accepted(self, project, write_report):
        path = write_report(
            {"used_undeclared": [{"group_id": "g", "artifact_id": "a", "version": "1"}]}
        )
        assert JsonReportAnalyzer(path).analyze(project).used_undeclared == (
            Artifact("g", "a", "1"),
        )

    def test_first_group_wins_for_duplicates(self, project, write_report):
        path = write_report({"usedDeclared": [_entry("a")], "unusedDeclared": [_entry("a")]})
        result = JsonReportAnalyzer(path).analyze(project)
        assert len(result.used_declared) == 1
        assert result.unused_declared == ()

    def test_order_preserved(self, project, write_report):
        path = write_report({"usedUndeclared": [_entry("c"), _entry("a"), _entry("b")]})
        result = JsonReportAnalyzer(path).analyze(project)
        assert [a.artifact_id for a in result.used_undeclared] == ["c", "a", "b"]

    def test_missing_file(self, project, tmp_path):
        with pytest.raises(AnalysisError, match="Cannot read analysis report"):
            JsonReportAnalyzer(tmp_path / "missing.json").analyze(project)

    def test_invalid_json(self, project, write_report):
        with pytest.raises(AnalysisError, match="Invalid analysis report"):
            JsonReportAnalyzer(write_report("not json{{{")).analyze(project)

    def test_not_an_object(self, project, write_report):
        with pytest.raises(AnalysisError):
            JsonReportAnalyzer(write_report([])).analyze(project)

    def test_missing_coordinates(self, project, write_report):
        path = write_report({"usedUndeclared": [{"groupId": "g", "version": "1"}]})
        with pytest.raises(AnalysisError):
            JsonReportAnalyzer(path).analyze(project)

    def test_empty_coordinate_rejected(self, project, write_report):
        path = write_report({"usedUndeclared": [_entry("")]})
        with pytest.raises(AnalysisError):
            JsonReportAnalyzer(path).analyze(project)
