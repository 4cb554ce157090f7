# File: scaffoldgen/__init__.py
"""
scaffoldgen — Schema-Driven API Scaffolding
===========================================

Turns small per-table CSV schema files into a canonical schema document
and, from it, a consistent set of artifact descriptors for a versioned
REST resource: migration, persistence model, DTO, request validators, API
resource, service, controller, routes, factory and test scenarios.

Architecture overview::

    ┌──────────────┐     ┌──────────────────┐     ┌──────────────┐
    │  CLI / Entry │────▶│ ScaffoldGenerator│────▶│   derivers   │
    │   (cli.py)   │     │  (generator.py)  │     │  + emitters  │
    └──────────────┘     └────────┬─────────┘     └──────────────┘
                                  │
               ┌──────────────────┼──────────────────┐
               ▼                  ▼                  ▼
        ┌────────────┐     ┌────────────┐     ┌────────────┐
        │ reader +   │     │ validators │     │ exporters  │
        │ assembler  │     │   (lint)   │     │  (files)   │
        └────────────┘     └────────────┘     └────────────┘

Usage::

    # As a library
    from scaffoldgen import ScaffoldGenerator, GenerationConfig
    report = ScaffoldGenerator(GenerationConfig()).generate("posts")

    # From the command line
    scaffoldgen posts --api-version v1 -v

Public API:
    - ScaffoldGenerator  — Pipeline orchestrator
    - assemble_schema    — CSV inputs → SchemaDocument
    - resolve_mode       — Tag a document create / alter
    - derive_names       — Naming engine
    - derive_all         — Every descriptor for a document
    - validate_document  — Lint entry point
"""

from __future__ import annotations

__version__: str = "0.1.0"

from scaffoldgen.models import (
    ColumnSpec,
    ColumnType,
    CompositeKey,
    ForeignKeySpec,
    GenerationConfig,
    GenerationMode,
    IndexSpec,
    OnDeleteAction,
    RelationKind,
    RelationSpec,
    SchemaDocument,
    SurrogateKey,
)
from scaffoldgen.errors import (
    InputNotFoundError,
    ScaffoldError,
    SchemaInputError,
)
from scaffoldgen.assembler import assemble_schema
from scaffoldgen.mode import resolve_mode
from scaffoldgen.naming import NameSet, derive_names
from scaffoldgen.derivers import derive_all
from scaffoldgen.validators import ValidationResult, validate_document
from scaffoldgen.emitters import TemplateEmitter, YamlDescriptorEmitter
from scaffoldgen.exporters import ExportManifest, ExportResult, ProjectExporter
from scaffoldgen.generator import (
    GenerationReport,
    GenerationRequest,
    ScaffoldGenerator,
)

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    "__version__",
    # Orchestrator
    "ScaffoldGenerator",
    "GenerationRequest",
    "GenerationReport",
    # Models
    "ColumnSpec",
    "ColumnType",
    "CompositeKey",
    "ForeignKeySpec",
    "GenerationConfig",
    "GenerationMode",
    "IndexSpec",
    "OnDeleteAction",
    "RelationKind",
    "RelationSpec",
    "SchemaDocument",
    "SurrogateKey",
    # Errors
    "ScaffoldError",
    "InputNotFoundError",
    "SchemaInputError",
    # Pipeline stages
    "assemble_schema",
    "resolve_mode",
    "NameSet",
    "derive_names",
    "derive_all",
    "ValidationResult",
    "validate_document",
    "TemplateEmitter",
    "YamlDescriptorEmitter",
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
]
