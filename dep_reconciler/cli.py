"""CLI entry point for standalone usage: dep-analyze.

Subcommands:
    dep-analyze create-config -o dep-reconciler.toml   # Generate config template
    dep-analyze analyze analysis.json --pom pom.xml    # Report dependency problems
    dep-analyze unpack lib.jar out/                    # Unpack an artifact archive
    dep-analyze copy lib.jar libs/lib.jar              # Copy an artifact file
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from dep_reconciler.analyzers.json_report import JsonReportAnalyzer
from dep_reconciler.archive import ArtifactFiles
from dep_reconciler.config import AnalyzeConfig, load_config
from dep_reconciler.core.logging import setup_logging
from dep_reconciler.exceptions import DependencyReconcilerError
from dep_reconciler.models import Artifact
from dep_reconciler.project import load_project
from dep_reconciler.reconciler import DependencyReconciler

# Config template
_CONFIG_TEMPLATE = """\
# dep-reconciler configuration (also accepted under [tool.dep-reconciler] in pyproject.toml)
[tool.dep-reconciler]
fail_on_warning = false
verbose = false
ignore_non_compile = false
output_xml = false
output_json = false
scriptable_output = false
scriptable_flag = "$$$%%%"

# groupId:artifactId entries that static analysis cannot prove used
used_dependencies = []

# groupId:artifactId:type:version patterns, '*' wildcards, empty segment = any
ignored_dependencies = []
ignored_used_undeclared_dependencies = []
ignored_unused_declared_dependencies = []
"""

_BOOLEAN_FLAGS = (
    "skip",
    "silent",
    "fail_on_warning",
    "verbose",
    "ignore_non_compile",
    "output_xml",
    "output_json",
    "scriptable_output",
)


def _merge_cli_options(config: AnalyzeConfig, **options) -> AnalyzeConfig:
    """Switch on boolean flags given on the command line and append list entries."""
    overrides: dict = {name: True for name in _BOOLEAN_FLAGS if options.get(name)}
    if options.get("scriptable_flag") is not None:
        overrides["scriptable_flag"] = options["scriptable_flag"]
    for name in (
        "used_dependencies",
        "ignored_dependencies",
        "ignored_used_undeclared_dependencies",
        "ignored_unused_declared_dependencies",
    ):
        extra = tuple(options.get(name) or ())
        if extra:
            overrides[name] = getattr(config, name) + extra
    return config.with_overrides(**overrides) if overrides else config


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """dep-analyze: Report used, unused and undeclared dependencies."""
    setup_logging("DEBUG" if verbose else None)


@main.command("create-config")
@click.option("-o", "--output", default="dep-reconciler.toml", help="Output file path")
def create_config(output: str) -> None:
    """Generate a configuration template TOML file."""
    Path(output).write_text(_CONFIG_TEMPLATE)
    click.echo(f"Config template written to {output}")
    click.echo("Edit the file, then run: dep-analyze analyze --config " + output + " <report>")


@main.command("analyze")
@click.argument("analysis_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--pom", default="pom.xml", type=click.Path(dir_okay=False), help="Project POM")
@click.option(
    "--config", "config_file", default=None, type=click.Path(exists=True, dir_okay=False),
    help="TOML configuration file",
)
@click.option("--verbose", is_flag=True, help="Also list used declared and ignored dependencies")
@click.option("--fail-on-warning", is_flag=True, help="Exit non-zero when problems are found")
@click.option("--ignore-non-compile", is_flag=True, help="Ignore runtime/provided/test/system scopes")
@click.option("--output-xml", is_flag=True, help="Print <dependency> XML for missing dependencies")
@click.option("--output-json", is_flag=True, help="Print an issue summary fragment")
@click.option("--scriptable-output", is_flag=True, help="Print scriptable lines for missing dependencies")
@click.option("--scriptable-flag", default=None, help="Marker for scriptable lines")
@click.option("--used-dependency", "used_dependencies", multiple=True, help="groupId:artifactId forced as used")
@click.option("--ignore", "ignored_dependencies", multiple=True, help="Ignore pattern (both kinds)")
@click.option(
    "--ignore-used-undeclared", "ignored_used_undeclared_dependencies", multiple=True,
    help="Ignore pattern for used undeclared dependencies",
)
@click.option(
    "--ignore-unused-declared", "ignored_unused_declared_dependencies", multiple=True,
    help="Ignore pattern for unused declared dependencies",
)
@click.option("--skip", is_flag=True, help="Skip the analysis")
@click.option("--silent", is_flag=True, help="Suppress report output")
def analyze(analysis_file: str, pom: str, config_file: str | None, **options) -> None:
    """Reconcile an analysis report against the project's declared dependencies."""
    try:
        config = _merge_cli_options(load_config(config_file), **options)
        project = load_project(pom)
        reconciler = DependencyReconciler(JsonReportAnalyzer(analysis_file), config)
        reconciler.execute(project)
    except DependencyReconcilerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("unpack")
@click.argument("archive", type=click.Path(exists=True))
@click.argument("destination", type=click.Path(file_okay=False))
@click.option("--type", "type_hint", default=None, help="Archive type (default: by extension)")
@click.option("--includes", default=None, help="Comma-separated include globs")
@click.option("--excludes", default=None, help="Comma-separated exclude globs")
@click.option("--encoding", default=None, help="Member name encoding (zip only)")
@click.option("--ignore-permissions", is_flag=True, help="Do not restore file modes")
@click.option("--silent", is_flag=True, help="Suppress unpack logging")
def unpack(
    archive: str,
    destination: str,
    type_hint: str | None,
    includes: str | None,
    excludes: str | None,
    encoding: str | None,
    ignore_permissions: bool,
    silent: bool,
) -> None:
    """Unpack an artifact archive into DESTINATION."""
    archive_path = Path(archive)
    artifact = Artifact(
        group_id="", artifact_id=archive_path.stem, version="", type="", file=archive_path
    )
    files = ArtifactFiles(silent=silent, ignore_permissions=ignore_permissions)
    try:
        names = files.unpack(
            artifact, destination, includes, excludes, encoding, type_hint=type_hint
        )
    except DependencyReconcilerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if not silent:
        click.echo(f"Unpacked {len(names)} entries to {destination}")


@main.command("copy")
@click.argument("source", type=click.Path(exists=True))
@click.argument("destination", type=click.Path())
@click.option("--absolute", is_flag=True, help="Log the absolute source path")
def copy(source: str, destination: str, absolute: bool) -> None:
    """Copy a packaged artifact file."""
    files = ArtifactFiles(output_absolute_artifact_filename=absolute)
    try:
        files.copy_file(source, destination)
    except DependencyReconcilerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
