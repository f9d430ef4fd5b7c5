"""Project model — coordinates and build layout read from ``pom.xml``."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from dep_reconciler.exceptions import AnalysisError

_NS = "{http://maven.apache.org/POM/4.0.0}"

_PROP_RE = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class Project:
    """The module whose dependencies are analyzed."""

    group_id: str
    artifact_id: str
    version: str
    base_dir: Path
    packaging: str = "jar"
    build_directory: Path | None = None

    @property
    def pom_file(self) -> Path:
        return self.base_dir.absolute() / "pom.xml"

    @property
    def origin_module(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def output_directory(self) -> Path:
        return self.build_directory or self.base_dir / "target"


def _resolve_props(value: str, props: dict[str, str]) -> str:
    """Replace ${property} placeholders, keeping unknown ones verbatim."""

    def _replace(m: re.Match) -> str:
        return props.get(m.group(1), m.group(0))

    return _PROP_RE.sub(_replace, value)


def _text(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return element.text.strip() if element.text else None


def _find(root: ET.Element, path: str) -> str | None:
    # Try both namespaced and non-namespaced
    for ns in (_NS, ""):
        value = _text(root.find("/".join(f"{ns}{tag}" for tag in path.split("/"))))
        if value:
            return value
    return None


def load_project(pom_path: str | Path) -> Project:
    """Build a :class:`Project` from a POM file.

    ``groupId`` and ``version`` fall back to the ``<parent>`` block.
    """
    pom_path = Path(pom_path)
    try:
        root = ET.fromstring(pom_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise AnalysisError(f"Cannot read project model {pom_path}: {exc}") from exc
    except ET.ParseError as exc:
        raise AnalysisError(f"Malformed project model {pom_path}: {exc}") from exc

    artifact_id = _find(root, "artifactId")
    if not artifact_id:
        raise AnalysisError(f"Project model {pom_path} has no artifactId")
    group_id = _find(root, "groupId") or _find(root, "parent/groupId") or ""
    version = _find(root, "version") or _find(root, "parent/version") or ""

    base_dir = pom_path.parent
    props = {
        "basedir": str(base_dir),
        "project.basedir": str(base_dir),
        "project.groupId": group_id,
        "project.artifactId": artifact_id,
        "project.version": version,
    }
    directory = _find(root, "build/directory")
    build_directory = base_dir / "target"
    if directory:
        build_directory = Path(_resolve_props(directory, props))
        if not build_directory.is_absolute():
            build_directory = base_dir / build_directory

    return Project(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        base_dir=base_dir,
        packaging=_find(root, "packaging") or "jar",
        build_directory=build_directory,
    )
