# File: scaffoldgen/generator.py
"""
scaffoldgen - Generation Pipeline (Orchestrator)
================================================

Connects every phase for one or more input names:

    Locate inputs → Assemble → Resolve mode → Lint → Derive → Emit → Export

The ``ScaffoldGenerator`` class is both the programmatic API and the
backend for the CLI.

Error handling strategy:
    - Every pipeline failure is a ``ScaffoldError``; it is caught here,
      recorded on the ``GenerationReport`` with the failing step, and the
      run stops.  Nothing is written for a run that failed before export.
    - Lint warnings never stop a run unless ``fail_on_warnings`` is set.
    - The final report carries a failure category the CLI maps to an exit
      code.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from scaffoldgen.assembler import InputFiles, assemble_from_inputs, locate_inputs
from scaffoldgen.derivers import derive_all
from scaffoldgen.descriptors import ArtifactDescriptor
from scaffoldgen.emitters import RenderedArtifact, TemplateEmitter, YamlDescriptorEmitter
from scaffoldgen.errors import (
    ArtifactPathConflictError,
    ConfigError,
    DuplicateDocumentError,
    InputNotFoundError,
    ScaffoldError,
)
from scaffoldgen.exporters import (
    ExportManifest,
    ExportResult,
    FileRecord,
    ProjectExporter,
    export_schema_document,
)
from scaffoldgen.mode import resolve_mode
from scaffoldgen.models import GenerationConfig, SchemaDocument
from scaffoldgen.naming import names_for
from scaffoldgen.utils import Timer
from scaffoldgen.validators import ValidationResult, validate_config, validate_document

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("scaffoldgen.generator")

# Failure categories, in the order the pipeline can hit them.
FAILURE_INPUT: str = "input"
FAILURE_VALIDATION: str = "validation"
FAILURE_GENERATION: str = "generation"
FAILURE_EXPORT: str = "export"


# ---------------------------------------------------------------------------
# Configuration loading
# ---------------------------------------------------------------------------


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read generation settings from YAML.

    The settings may sit under a top-level ``config:`` key or be the
    top-level mapping itself.

    Raises:
        ConfigError: missing file, invalid YAML or a non-mapping document.
    """
    config_path: Path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        data: Any = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if data is None:
        return {}
    if isinstance(data, dict) and isinstance(data.get("config"), dict):
        data = data["config"]
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a YAML mapping in {config_path}, got {type(data).__name__}."
        )
    return data


def build_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> GenerationConfig:
    """File settings first, then non-``None`` *overrides* on top."""
    data: Dict[str, Any] = load_config_file(config_path) if config_path else {}
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})
    try:
        return GenerationConfig.model_validate(data)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


# ---------------------------------------------------------------------------
# Requests & report
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GenerationRequest:
    """One input name to process."""

    name: str
    alter: bool = False
    api_version: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ArtifactEntry:
    """Manifest line for one derived artifact."""

    kind: str
    identifier: str
    path: str


@dataclass(frozen=False, slots=True)
class DocumentOutcome:
    """What the pipeline produced for one request."""

    name: str
    table_name: str = ""
    api_version: Optional[str] = None
    mode: str = ""
    loaded_files: List[Tuple[str, str]] = field(default_factory=list)
    schema_path: Optional[str] = None
    artifacts: List[ArtifactEntry] = field(default_factory=list)
    manual_review: List[str] = field(default_factory=list)


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Result of ``ScaffoldGenerator.run()``: per-document outcomes on
    success, or the failing step and its errors.
    """

    success: bool = False
    failure: Optional[str] = None
    dry_run: bool = False
    output_directory: str = ""
    schema_directory: str = ""
    total_elapsed_seconds: float = 0.0

    documents: List[DocumentOutcome] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    manifest: Optional[ExportManifest] = None

    @property
    def artifacts(self) -> List[ArtifactEntry]:
        return [a for doc in self.documents for a in doc.artifacts]

    @property
    def error_messages(self) -> List[str]:
        return [e["message"] for e in self.errors]

    def summary(self) -> str:
        lines: List[str] = []
        status: str = "✓ SUCCESS" if self.success else f"✗ FAILED ({self.failure})"
        lines.append("═" * 60)
        lines.append("  scaffoldgen — Generation Report")
        lines.append("═" * 60)
        lines.append(f"  Status:      {status}")
        if self.dry_run:
            lines.append("  Mode:        dry run (nothing written)")
        lines.append(f"  Documents:   {len(self.documents)}")
        lines.append(f"  Artifacts:   {len(self.artifacts)}")
        lines.append(f"  Total time:  {self.total_elapsed_seconds:.3f}s")
        lines.append("─" * 60)

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<20s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        if self.errors:
            lines.append("─" * 60)
            lines.append(f"  Errors ({len(self.errors)}):")
            for err in self.errors:
                lines.append(f"    ✗ [{err['code']}] {err['message']}")

        if self.validation_warnings:
            lines.append("─" * 60)
            lines.append(f"  Warnings ({len(self.validation_warnings)}):")
            for warn in self.validation_warnings:
                lines.append(f"    ⚠ {warn}")

        lines.append("═" * 60)
        return "\n".join(lines)


class _StepFailed(Exception):
    """Internal control flow: a step recorded its failure on the report."""


# ---------------------------------------------------------------------------
# ScaffoldGenerator: orchestrator
# ---------------------------------------------------------------------------


class ScaffoldGenerator:
    """
    Runs the pipeline for one or more input names.

    Usage::

        generator = ScaffoldGenerator(build_config())
        report = generator.run([GenerationRequest("posts")])
        print(report.summary())

    The generator holds no per-run state; ``run`` may be called repeatedly.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        *,
        fail_on_warnings: bool = False,
        validate_only: bool = False,
        dry_run: bool = False,
        emitter: Optional[TemplateEmitter] = None,
    ) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        self._fail_on_warnings: bool = fail_on_warnings
        self._validate_only: bool = validate_only
        self._dry_run: bool = dry_run
        self._emitter: TemplateEmitter = emitter or YamlDescriptorEmitter()

        logger.debug(
            "ScaffoldGenerator initialised: fail_on_warnings=%s, validate_only=%s, "
            "dry_run=%s, emitter=%s.",
            fail_on_warnings,
            validate_only,
            dry_run,
            self._emitter.name,
        )

    @property
    def config(self) -> GenerationConfig:
        return self._config

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate(
        self, name: str, *, alter: bool = False, api_version: Optional[str] = None
    ) -> GenerationReport:
        """Single-name convenience wrapper around ``run``."""
        return self.run([GenerationRequest(name=name, alter=alter, api_version=api_version)])

    def run(self, requests: Sequence[GenerationRequest]) -> GenerationReport:
        report: GenerationReport = GenerationReport(
            dry_run=self._dry_run,
            output_directory=str(Path(self._config.output_dir).resolve()),
            schema_directory=str(Path(self._config.schema_dir).resolve()),
            documents=[DocumentOutcome(name=r.name) for r in requests],
        )
        start: float = time.perf_counter()

        try:
            documents: List[SchemaDocument] = self._step_assemble(requests, report)
            self._step_lint(documents, report)
            if not self._validate_only:
                rendered: List[List[RenderedArtifact]] = self._step_derive(documents, report)
                if not self._dry_run:
                    self._step_export(documents, rendered, report)
        except _StepFailed:
            pass

        return self._finalise_report(report, time.perf_counter() - start)

    # -----------------------------------------------------------------
    # Pipeline steps
    # -----------------------------------------------------------------

    def _fail(
        self,
        report: GenerationReport,
        step: str,
        category: str,
        timer: Timer,
        exc: ScaffoldError,
    ) -> None:
        report.failure = category
        report.errors.append(exc.to_dict())
        report.step_metrics.append(
            GenerationStepMetric(
                step_name=step,
                success=False,
                elapsed_seconds=time.perf_counter() - timer.start_time,
                detail=str(exc),
            )
        )
        logger.error("%s failed: %s", step, exc)
        raise _StepFailed(step)

    def _step_assemble(
        self, requests: Sequence[GenerationRequest], report: GenerationReport
    ) -> List[SchemaDocument]:
        documents: List[SchemaDocument] = []
        seen: Set[Tuple[str, Optional[str]]] = set()

        with Timer("assemble") as t:
            for request, outcome in zip(requests, report.documents):
                try:
                    inputs: InputFiles = locate_inputs(
                        request.name, Path(self._config.input_root) / request.name
                    )
                    outcome.loaded_files = [(p.name, label) for p, label in inputs.loaded()]
                    document: SchemaDocument = assemble_from_inputs(
                        inputs, api_version=request.api_version
                    )
                    if document.api_version is None and self._config.default_api_version:
                        document = document.model_copy(
                            update={"api_version": self._config.default_api_version}
                        )
                    document = resolve_mode(document, request.alter)

                    key: Tuple[str, Optional[str]] = (document.table_name, document.api_version)
                    if key in seen:
                        raise DuplicateDocumentError(*key)
                    seen.add(key)
                except InputNotFoundError as exc:
                    self._fail(report, "Assemble", FAILURE_INPUT, t, exc)
                except ScaffoldError as exc:
                    self._fail(report, "Assemble", FAILURE_VALIDATION, t, exc)

                outcome.table_name = document.table_name
                outcome.api_version = document.api_version
                outcome.mode = str(document.mode)
                documents.append(document)

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Assemble",
                elapsed_seconds=t.elapsed,
                detail=f"{len(documents)} document(s)",
            )
        )
        return documents

    def _step_lint(self, documents: List[SchemaDocument], report: GenerationReport) -> None:
        with Timer("lint") as t:
            result: ValidationResult = ValidationResult()
            for document in documents:
                result.merge(validate_document(document))
            result.merge(validate_config(self._config))

        report.validation_warnings.extend(f"[{w.code}] {w.message}" for w in result.warnings)
        failed: bool = result.has_errors or (self._fail_on_warnings and result.has_warnings)

        if failed:
            report.failure = FAILURE_VALIDATION
            blocking = result.errors or result.warnings
            report.errors.extend(
                {"code": issue.code, "message": issue.message} for issue in blocking
            )
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Lint",
                success=not failed,
                elapsed_seconds=t.elapsed,
                detail=f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)",
            )
        )
        if failed:
            logger.error("Lint failed: %s", result.summary())
            raise _StepFailed("Lint")

    def _step_derive(
        self, documents: List[SchemaDocument], report: GenerationReport
    ) -> List[List[RenderedArtifact]]:
        rendered: List[List[RenderedArtifact]] = []
        # relative path -> (source name, content) of the first writer
        claimed: Dict[str, Tuple[str, str]] = {}
        with Timer("derive") as t:
            for document, outcome in zip(documents, report.documents):
                try:
                    names = names_for(document, route_prefix=self._config.route_prefix)
                    descriptors: List[ArtifactDescriptor] = derive_all(
                        document, names, config=self._config
                    )
                    artifacts: List[RenderedArtifact] = self._emitter.emit_all(descriptors)
                except ScaffoldError as exc:
                    self._fail(report, "Derive", FAILURE_GENERATION, t, exc)
                except PydanticValidationError as exc:
                    self._fail(
                        report, "Derive", FAILURE_GENERATION, t, ScaffoldError(str(exc))
                    )

                for artifact in artifacts:
                    owner, content = claimed.setdefault(
                        artifact.relative_path, (document.source_name, artifact.content)
                    )
                    if content != artifact.content:
                        conflict = ArtifactPathConflictError(
                            artifact.relative_path, owner, document.source_name
                        )
                        self._fail(report, "Derive", FAILURE_GENERATION, t, conflict)

                outcome.artifacts = [
                    ArtifactEntry(kind=a.kind, identifier=a.identifier, path=a.relative_path)
                    for a in artifacts
                ]
                outcome.manual_review = [
                    f"{d.identifier}.{f.field}"
                    for d in descriptors
                    for f in getattr(d, "fields", [])
                    if getattr(f, "manual_review", False)
                ]
                rendered.append(artifacts)

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Derive",
                elapsed_seconds=t.elapsed,
                detail=f"{sum(len(r) for r in rendered)} artifact(s)",
            )
        )
        return rendered

    def _step_export(
        self,
        documents: List[SchemaDocument],
        rendered: List[List[RenderedArtifact]],
        report: GenerationReport,
    ) -> None:
        export_errors: List[str] = []
        with Timer("export") as t:
            for document, outcome in zip(documents, report.documents):
                try:
                    record: FileRecord = export_schema_document(document, self._config.schema_dir)
                    outcome.schema_path = record.absolute_path
                except OSError as exc:
                    export_errors.append(f"Failed to write schema for {document.source_name}: {exc}")

            if self._config.write_descriptors and not export_errors:
                files: Dict[str, str] = {
                    a.relative_path: a.content for artifacts in rendered for a in artifacts
                }
                exporter: ProjectExporter = ProjectExporter(self._config.output_dir)
                result: ExportResult = exporter.export(files)
                report.manifest = result.manifest
                export_errors.extend(result.errors)

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Export",
                success=not export_errors,
                elapsed_seconds=t.elapsed,
                detail=f"{len(export_errors)} error(s)" if export_errors else "written",
            )
        )
        if export_errors:
            report.failure = FAILURE_EXPORT
            report.errors.extend({"code": "EXPORT_ERROR", "message": m} for m in export_errors)
            for message in export_errors:
                logger.error(message)

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(self, report: GenerationReport, total_elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = report.failure is None
        if not report.success:
            report.documents = [d for d in report.documents if d.table_name]
        logger.info(
            "Run finished: %s in %.3fs.",
            "success" if report.success else f"failed ({report.failure})",
            total_elapsed,
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "FAILURE_INPUT",
    "FAILURE_VALIDATION",
    "FAILURE_GENERATION",
    "FAILURE_EXPORT",
    "load_config_file",
    "build_config",
    "GenerationRequest",
    "ArtifactEntry",
    "DocumentOutcome",
    "GenerationStepMetric",
    "GenerationReport",
    "ScaffoldGenerator",
]

logger.debug("scaffoldgen.generator loaded.")
