# File: scaffoldgen/exporters.py
"""
scaffoldgen - Artifact Exporter (File-System Manager)
=====================================================

Responsible for:
    1. Writing the serialized ``SchemaDocument`` to the schema directory.
    2. Writing rendered artifacts atomically (temp file + ``os.replace``).
    3. Producing ``manifest.json`` with size and SHA-256 per file.

Re-running on the same output directory is always safe: every file is
replaced whole.  A failed write is recorded and the remaining files are
still attempted; files already written stay intact.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from scaffoldgen.models import SchemaDocument
from scaffoldgen.utils import Timer, count_lines, sha256_hex, write_file

logger: logging.Logger = logging.getLogger("scaffoldgen.exporters")

MANIFEST_NAME: str = "manifest.json"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "relative_path": self.relative_path,
            "size_bytes": self.size_bytes,
            "line_count": self.line_count,
            "sha256": self.sha256,
        }


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """Checksums of everything one export wrote."""

    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "files": [f.to_dict() for f in self.files],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# Single-file helpers
# ---------------------------------------------------------------------------


def _write_record(full_path: Path, content: str, rel_path: str) -> FileRecord:
    size_bytes: int = write_file(full_path, content)
    return FileRecord(
        relative_path=rel_path,
        absolute_path=str(full_path),
        size_bytes=size_bytes,
        line_count=count_lines(content),
        sha256=sha256_hex(content),
    )


def export_schema_document(
    document: SchemaDocument, schema_dir: Union[str, Path]
) -> FileRecord:
    """
    Write ``{schema_dir}/{source_name}.yaml``.

    Raises:
        OSError: the file could not be written.
    """
    rel_path: str = f"{document.source_name}.yaml"
    full_path: Path = Path(schema_dir) / rel_path
    record: FileRecord = _write_record(full_path, document.to_yaml(), rel_path)
    logger.info("Schema document written: %s (%d bytes).", full_path, record.size_bytes)
    return record


# ---------------------------------------------------------------------------
# ProjectExporter
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes rendered artifacts under one output directory.

    Usage::

        exporter = ProjectExporter(Path("./artifacts"))
        result = exporter.export({"app/Models/Post.yaml": "..."})
        print(result.manifest.to_json())

    Not thread-safe; use one exporter per output directory.
    """

    def __init__(self, output_dir: Union[str, Path], *, generate_manifest: bool = True) -> None:
        self._output_dir: Path = Path(output_dir).resolve()
        self._generate_manifest: bool = generate_manifest
        self._errors: List[str] = []
        self._file_records: List[FileRecord] = []

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def export(self, files: Dict[str, str]) -> ExportResult:
        """
        Args:
            files: Mapping of relative path → file content.

        Returns:
            ExportResult; ``success`` is False if any write failed.
        """
        self._errors = []
        self._file_records = []

        with Timer("export") as timer:
            for rel_path, content in files.items():
                try:
                    self._file_records.append(
                        _write_record(self._output_dir / rel_path, content, rel_path)
                    )
                except OSError as exc:
                    message: str = f"Failed to write {rel_path}: {exc}"
                    self._errors.append(message)
                    logger.error(message)

            if self._generate_manifest:
                self._write_manifest_file()

        manifest: ExportManifest = self._build_manifest()
        success: bool = not self._errors
        if success:
            logger.info(
                "Export completed: %d file(s), %d bytes to %s.",
                manifest.total_files,
                manifest.total_bytes,
                self._output_dir,
            )
        else:
            logger.error("Export completed with %d error(s).", len(self._errors))

        return ExportResult(
            success=success,
            manifest=manifest,
            errors=tuple(self._errors),
            elapsed_seconds=timer.elapsed,
        )

    # -----------------------------------------------------------------
    # Internal: manifest
    # -----------------------------------------------------------------

    def _build_manifest(self) -> ExportManifest:
        from scaffoldgen import __version__

        return ExportManifest(
            generator_version=__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._output_dir),
            files=list(self._file_records),
        )

    def _write_manifest_file(self) -> None:
        content: str = self._build_manifest().to_json()
        try:
            write_file(self._output_dir / MANIFEST_NAME, content)
        except OSError as exc:
            self._errors.append(f"Could not write manifest: {exc}")
            logger.error("Failed to write manifest: %s", exc)


__all__: List[str] = [
    "MANIFEST_NAME",
    "FileRecord",
    "ExportManifest",
    "ExportResult",
    "export_schema_document",
    "ProjectExporter",
]

logger.debug("scaffoldgen.exporters loaded.")
