"""Archive unpacking and artifact copy helpers shared by dependency commands.

Extraction wraps :mod:`zipfile` and :mod:`tarfile`; this module only adds
type lookup, include/exclude selection, member renaming and error context.
"""

from __future__ import annotations

import os
import re
import shutil
import tarfile
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Iterable, Protocol, Sequence

import structlog

from dep_reconciler.core.logging import silent_logger
from dep_reconciler.exceptions import (
    ArchiveError,
    ArchiveExtractionError,
    ArtifactNotPackagedError,
    CopyError,
    UnknownArchiverTypeError,
)
from dep_reconciler.models import Artifact

FileMapper = Callable[[str], str]

_ZIP_TYPES = ("zip", "jar", "war", "ear", "rar", "par", "sar", "esb", "nar")
_TAR_TYPES = ("tar", "tar.gz", "tgz", "tar.bz2", "tbz2", "tar.xz", "txz")


def _default_log() -> structlog.typing.BindableLogger:
    return structlog.get_logger("dep_reconciler.archive")


# ── include / exclude selection ──────────────────────────────────────────


def ant_pattern(pattern: str) -> re.Pattern[str]:
    """Compile an Ant-style path glob (``*``, ``?``, ``**``)."""
    pattern = pattern.strip().replace("\\", "/").lstrip("/")
    if pattern.endswith("/"):
        pattern += "**"
    out: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out), re.DOTALL)


class FileSelector:
    """Select archive members by include/exclude globs."""

    def __init__(self, includes: Iterable[str] = (), excludes: Iterable[str] = ()) -> None:
        self.includes = [ant_pattern(p) for p in includes if p.strip()]
        self.excludes = [ant_pattern(p) for p in excludes if p.strip()]

    def selected(self, name: str) -> bool:
        name = name.replace("\\", "/").lstrip("/").rstrip("/")
        if self.includes and not any(rx.fullmatch(name) for rx in self.includes):
            return False
        return not any(rx.fullmatch(name) for rx in self.excludes)


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _map_name(name: str, file_mappers: Sequence[FileMapper]) -> str:
    is_dir = name.endswith("/")
    mapped = name.rstrip("/")
    for mapper in file_mappers:
        mapped = mapper(mapped)
    return mapped + "/" if is_dir else mapped


# ── unarchivers ──────────────────────────────────────────────────────────


class UnArchiver(ABC):
    """Extracts one archive format. The logger is injected at construction."""

    name: str = ""

    def __init__(self, log: structlog.typing.BindableLogger | None = None) -> None:
        self._log = log or _default_log()

    def extract(
        self,
        source: str | Path,
        destination: str | Path,
        includes: Iterable[str] = (),
        excludes: Iterable[str] = (),
        encoding: str | None = None,
        file_mappers: Sequence[FileMapper] = (),
        ignore_permissions: bool = False,
    ) -> list[str]:
        """Extract ``source`` into ``destination``; returns extracted member names."""
        source, destination = Path(source), Path(destination)
        selector = FileSelector(includes, excludes)
        # LookupError and ValueError: unknown codec or undecodable member names
        try:
            names = self._extract(
                source, destination, selector, encoding, file_mappers, ignore_permissions
            )
        except (OSError, LookupError, ValueError, zipfile.BadZipFile, tarfile.TarError) as exc:
            raise ArchiveExtractionError(source, destination, str(exc)) from exc
        self._log.debug(
            "archive.extracted", source=str(source), destination=str(destination), count=len(names)
        )
        return names

    @abstractmethod
    def _extract(
        self,
        source: Path,
        destination: Path,
        selector: FileSelector,
        encoding: str | None,
        file_mappers: Sequence[FileMapper],
        ignore_permissions: bool,
    ) -> list[str]: ...


class ZipUnArchiver(UnArchiver):
    name = "zip"

    def _extract(self, source, destination, selector, encoding, file_mappers, ignore_permissions):
        names: list[str] = []
        with zipfile.ZipFile(source, metadata_encoding=encoding) as zf:
            for info in zf.infolist():
                if not selector.selected(info.filename):
                    continue
                info.filename = _map_name(info.filename, file_mappers)
                target = zf.extract(info, destination)
                mode = (info.external_attr >> 16) & 0o777
                if mode and not ignore_permissions and not info.is_dir():
                    os.chmod(target, mode)
                names.append(info.filename)
        return names


class TarUnArchiver(UnArchiver):
    name = "tar"

    def _extract(self, source, destination, selector, encoding, file_mappers, ignore_permissions):
        if encoding is not None:
            self._log.debug("archive.encoding_ignored", archiver=self.name, encoding=encoding)
        base_filter = tarfile.data_filter if ignore_permissions else tarfile.tar_filter
        names: list[str] = []

        def _filter(member: tarfile.TarInfo, path: str) -> tarfile.TarInfo | None:
            if not selector.selected(member.name):
                return None
            mapped = _map_name(member.name, file_mappers)
            if mapped != member.name:
                member = member.replace(name=mapped, deep=False)
            member = base_filter(member, path)
            if member is not None:
                names.append(member.name)
            return member

        with tarfile.open(source) as tf:
            tf.extractall(destination, filter=_filter)
        return names


class ArchiverManager:
    """Looks up an unarchiver by type hint or by file extension."""

    def __init__(self, log: structlog.typing.BindableLogger | None = None) -> None:
        self._log = log
        self._factories: dict[str, Callable[..., UnArchiver]] = {}
        for hint in _ZIP_TYPES:
            self.register(hint, ZipUnArchiver)
        for hint in _TAR_TYPES:
            self.register(hint, TarUnArchiver)

    def register(self, type_hint: str, factory: Callable[..., UnArchiver]) -> None:
        self._factories[type_hint.lower()] = factory

    def get_unarchiver(
        self, type_hint: str, log: structlog.typing.BindableLogger | None = None
    ) -> UnArchiver:
        factory = self._factories.get(type_hint.lower().lstrip("."))
        if factory is None:
            raise UnknownArchiverTypeError(type_hint)
        return factory(log=log or self._log)

    def get_unarchiver_for_file(
        self, path: str | Path, log: structlog.typing.BindableLogger | None = None
    ) -> UnArchiver:
        name = Path(path).name.lower()
        # Longest extension first so ".tar.gz" wins over ".gz"
        for ext in sorted(self._factories, key=len, reverse=True):
            if name.endswith("." + ext):
                return self._factories[ext](log=log or self._log)
        raise UnknownArchiverTypeError(name)


# ── build context ────────────────────────────────────────────────────────


class BuildContext(Protocol):
    """Host (IDE / incremental build) notified about changed files."""

    def refresh(self, path: Path) -> None: ...

    def is_incremental(self) -> bool: ...


class NullBuildContext:
    def refresh(self, path: Path) -> None:
        return None

    def is_incremental(self) -> bool:
        return False


# ── shared helpers ───────────────────────────────────────────────────────


class ArtifactFiles:
    """Copy and unpack artifact files for dependency-handling commands."""

    def __init__(
        self,
        archiver_manager: ArchiverManager | None = None,
        build_context: BuildContext | None = None,
        *,
        skip: bool = False,
        skip_during_incremental_build: bool = False,
        silent: bool = False,
        ignore_permissions: bool = False,
        output_absolute_artifact_filename: bool = False,
        log: structlog.typing.BindableLogger | None = None,
    ) -> None:
        self.archiver_manager = archiver_manager or ArchiverManager()
        self.build_context = build_context or NullBuildContext()
        self.skip = skip
        self.skip_during_incremental_build = skip_during_incremental_build
        self.silent = silent
        self.ignore_permissions = ignore_permissions
        self.output_absolute_artifact_filename = output_absolute_artifact_filename
        self._log = silent_logger() if silent else (log or _default_log())

    def is_skip(self) -> bool:
        if self.skip_during_incremental_build and self.build_context.is_incremental():
            return True
        return self.skip

    def copy_file(self, artifact_file: str | Path, destination: str | Path) -> None:
        """Copy a packaged artifact file and notify the build context."""
        source, destination = Path(artifact_file), Path(destination)
        shown = source.absolute() if self.output_absolute_artifact_filename else source.name
        self._log.info(f"Copying {shown} to {destination}")

        if source.is_dir():
            raise ArtifactNotPackagedError(
                "Artifact has not been packaged yet. When used on reactor artifact, "
                "copy should be executed after packaging."
            )
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
        except OSError as exc:
            raise CopyError(source, destination, str(exc)) from exc
        self.build_context.refresh(destination)

    def unpack(
        self,
        artifact: Artifact,
        location: str | Path,
        includes: str | None = None,
        excludes: str | None = None,
        encoding: str | None = None,
        file_mappers: Sequence[FileMapper] = (),
        type_hint: str | None = None,
    ) -> list[str]:
        """Unpack an artifact file into ``location``.

        ``includes`` and ``excludes`` are comma-separated globs. The unarchiver
        is chosen by ``type_hint`` (default: the artifact type), falling back to
        the file extension.
        """
        if artifact.file is None:
            raise ArchiveError(f"Artifact {artifact.key} has not been resolved to a file")
        file = Path(artifact.file)
        location = Path(location)
        self._log_unpack(file, location, includes, excludes)

        try:
            location.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArchiveError(
                f"Location to write unpacked files to could not be created: {location}"
            ) from exc
        if file.is_dir():
            raise ArtifactNotPackagedError(
                "Artifact has not been packaged yet. When used on reactor artifact, "
                "unpack should be executed after packaging."
            )

        unarchiver_log = silent_logger() if self.silent else None
        hint = type_hint or artifact.type
        try:
            unarchiver = self.archiver_manager.get_unarchiver(hint, log=unarchiver_log)
            self._log.debug("archive.unarchiver_found", by="type", archiver=unarchiver.name)
        except UnknownArchiverTypeError:
            unarchiver = self.archiver_manager.get_unarchiver_for_file(file, log=unarchiver_log)
            self._log.debug("archive.unarchiver_found", by="extension", archiver=unarchiver.name)

        if encoding is not None and isinstance(unarchiver, ZipUnArchiver):
            self._log.info(f"Unpacks '{hint}' with encoding '{encoding}'.")

        names = unarchiver.extract(
            file,
            location,
            includes=_split_csv(includes),
            excludes=_split_csv(excludes),
            encoding=encoding,
            file_mappers=file_mappers,
            ignore_permissions=self.ignore_permissions,
        )
        self.build_context.refresh(location)
        return names

    def _log_unpack(
        self, file: Path, location: Path, includes: str | None, excludes: str | None
    ) -> None:
        msg = f"Unpacking {file} to {location}"
        if includes is not None and excludes is not None:
            msg += f' with includes "{includes}" and excludes "{excludes}"'
        elif includes is not None:
            msg += f' with includes "{includes}"'
        elif excludes is not None:
            msg += f' with excludes "{excludes}"'
        self._log.info(msg)
