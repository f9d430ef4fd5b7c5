"""Tests for CLI commands — logging setup mocked, everything else real."""

from __future__ import annotations

import json
import tomllib
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from structlog.testing import capture_logs

from dep_reconciler.cli import _CONFIG_TEMPLATE, _merge_cli_options, main
from dep_reconciler.config import AnalyzeConfig

_POM = """\
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <groupId>com.example</groupId>
  <artifactId>app</artifactId>
  <version>1.0</version>
</project>
"""


@pytest.fixture(autouse=True)
def _no_logging_setup():
    # setup_logging reconfigures structlog globally; keep tests isolated.
    with patch("dep_reconciler.cli.setup_logging") as mocked:
        yield mocked


@pytest.fixture
def pom(tmp_path: Path) -> Path:
    (tmp_path / "target").mkdir()
    path = tmp_path / "pom.xml"
    path.write_text(_POM)
    return path


def _report(tmp_path: Path, **groups) -> Path:
    path = tmp_path / "analysis.json"
    path.write_text(json.dumps(groups))
    return path


def _dep(artifact_id: str, group_id: str = "org.example") -> dict:
    return {"groupId": group_id, "artifactId": artifact_id, "version": "1.0"}


# ── option merging ──


class TestMergeCliOptions:
    def test_no_options_returns_same_config(self):
        config = AnalyzeConfig()
        assert _merge_cli_options(config, verbose=False, used_dependencies=()) is config

    def test_flags_switch_on(self):
        config = _merge_cli_options(AnalyzeConfig(), verbose=True, output_xml=True)
        assert config.verbose is True
        assert config.output_xml is True
        assert config.fail_on_warning is False

    def test_flags_cannot_switch_off(self):
        config = _merge_cli_options(AnalyzeConfig(verbose=True), verbose=False)
        assert config.verbose is True

    def test_lists_appended(self):
        base = AnalyzeConfig(ignored_dependencies=("org.a",))
        config = _merge_cli_options(base, ignored_dependencies=("org.b",))
        assert config.ignored_dependencies == ("org.a", "org.b")

    def test_scriptable_flag(self):
        assert _merge_cli_options(AnalyzeConfig(), scriptable_flag="##").scriptable_flag == "##"


# ── create-config ──


class TestCreateConfig:
    def test_creates_template(self, tmp_path: Path):
        runner = CliRunner()
        out_file = tmp_path / "dep.toml"
        result = runner.invoke(main, ["create-config", "-o", str(out_file)])
        assert result.exit_code == 0
        assert out_file.read_text() == _CONFIG_TEMPLATE

    def test_template_is_default_config(self):
        data = tomllib.loads(_CONFIG_TEMPLATE)["tool"]["dep-reconciler"]
        assert AnalyzeConfig.from_mapping(data) == AnalyzeConfig()


# ── analyze ──


class TestAnalyze:
    def test_clean_project(self, tmp_path, pom):
        report = _report(tmp_path, usedDeclared=[_dep("a")])
        with capture_logs() as logs:
            result = CliRunner().invoke(main, ["analyze", str(report), "--pom", str(pom)])
        assert result.exit_code == 0
        assert [e["event"] for e in logs if e["log_level"] != "debug"] == [
            "No dependency problems found"
        ]

    def test_problems_without_fail_policy(self, tmp_path, pom):
        report = _report(tmp_path, usedUndeclared=[_dep("x")])
        with capture_logs() as logs:
            result = CliRunner().invoke(main, ["analyze", str(report), "--pom", str(pom)])
        assert result.exit_code == 0
        assert "Used undeclared dependencies found:" in [e["event"] for e in logs]

    def test_fail_on_warning(self, tmp_path, pom):
        report = _report(tmp_path, unusedDeclared=[_dep("x")])
        result = CliRunner().invoke(
            main, ["analyze", str(report), "--pom", str(pom), "--fail-on-warning"]
        )
        assert result.exit_code == 1
        assert "Dependency problems found" in result.output

    def test_ignore_pattern_clears_failure(self, tmp_path, pom):
        report = _report(tmp_path, unusedDeclared=[_dep("x", group_id="org.x")])
        result = CliRunner().invoke(
            main,
            ["analyze", str(report), "--pom", str(pom), "--fail-on-warning", "--ignore", "org.x"],
        )
        assert result.exit_code == 0

    def test_used_dependency_clears_failure(self, tmp_path, pom):
        report = _report(tmp_path, unusedDeclared=[_dep("x")])
        result = CliRunner().invoke(
            main,
            [
                "analyze", str(report), "--pom", str(pom),
                "--fail-on-warning", "--used-dependency", "org.example:x",
            ],
        )
        assert result.exit_code == 0

    def test_config_file(self, tmp_path, pom):
        report = _report(tmp_path, usedUndeclared=[_dep("x")])
        config = tmp_path / "dep.toml"
        config.write_text("failOnWarning = true\noutputXML = true\n")
        with capture_logs() as logs:
            result = CliRunner().invoke(
                main, ["analyze", str(report), "--pom", str(pom), "--config", str(config)]
            )
        assert result.exit_code == 1
        assert any("<artifactId>x</artifactId>" in e["event"] for e in logs)

    def test_invalid_report(self, tmp_path, pom):
        report = tmp_path / "analysis.json"
        report.write_text("not json{{{")
        result = CliRunner().invoke(main, ["analyze", str(report), "--pom", str(pom)])
        assert result.exit_code == 1
        assert "Invalid analysis report" in result.output

    def test_missing_pom(self, tmp_path):
        report = _report(tmp_path)
        result = CliRunner().invoke(
            main, ["analyze", str(report), "--pom", str(tmp_path / "nope.xml")]
        )
        assert result.exit_code == 1
        assert "Cannot read project model" in result.output

    def test_skip(self, tmp_path, pom):
        report = _report(tmp_path, usedUndeclared=[_dep("x")])
        with capture_logs() as logs:
            result = CliRunner().invoke(
                main, ["analyze", str(report), "--pom", str(pom), "--skip", "--fail-on-warning"]
            )
        assert result.exit_code == 0
        assert [e["event"] for e in logs if e["log_level"] != "debug"] == [
            "Skipping plugin execution"
        ]

    def test_verbose_logging_flag(self, tmp_path, pom, _no_logging_setup):
        report = _report(tmp_path)
        CliRunner().invoke(main, ["-v", "analyze", str(report), "--pom", str(pom)])
        _no_logging_setup.assert_called_once_with("DEBUG")


# ── unpack / copy ──


class TestUnpackAndCopy:
    def test_unpack(self, tmp_path):
        archive = tmp_path / "lib.jar"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("a/b.txt", "x")
            zf.writestr("c.txt", "y")
        out = tmp_path / "out"
        result = CliRunner().invoke(
            main, ["unpack", str(archive), str(out), "--includes", "a/**"]
        )
        assert result.exit_code == 0
        assert "Unpacked 1 entries" in result.output
        assert (out / "a" / "b.txt").read_text() == "x"
        assert not (out / "c.txt").exists()

    def test_unpack_bad_encoding(self, tmp_path):
        archive = tmp_path / "lib.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("a.txt", "x")
        result = CliRunner().invoke(
            main, ["unpack", str(archive), str(tmp_path / "out"), "--encoding", "no-such-codec"]
        )
        assert result.exit_code == 1
        assert "Error: Error unpacking file" in result.output

    def test_unpack_unknown_type(self, tmp_path):
        archive = tmp_path / "lib.bin"
        archive.write_bytes(b"data")
        result = CliRunner().invoke(main, ["unpack", str(archive), str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "Unknown archiver type" in result.output

    def test_copy(self, tmp_path):
        source = tmp_path / "lib.jar"
        source.write_bytes(b"jar")
        dest = tmp_path / "libs" / "lib.jar"
        result = CliRunner().invoke(main, ["copy", str(source), str(dest)])
        assert result.exit_code == 0
        assert dest.read_bytes() == b"jar"

    def test_copy_directory(self, tmp_path):
        source = tmp_path / "classes"
        source.mkdir()
        result = CliRunner().invoke(main, ["copy", str(source), str(tmp_path / "x.jar")])
        assert result.exit_code == 1
        assert "has not been packaged yet" in result.output
