"""Shared pytest fixtures for dep-reconciler tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dep_reconciler.project import Project


@pytest.fixture
def project(tmp_path: Path) -> Project:
    """A jar project whose build directory exists."""
    (tmp_path / "target").mkdir()
    return Project(
        group_id="com.example",
        artifact_id="app",
        version="1.0",
        base_dir=tmp_path,
        build_directory=tmp_path / "target",
    )


@pytest.fixture
def write_report(tmp_path: Path):
    """Write an analysis report JSON document and return its path."""

    def _write(data, name: str = "analysis.json") -> Path:
        path = tmp_path / name
        path.write_text(data if isinstance(data, str) else json.dumps(data))
        return path

    return _write
