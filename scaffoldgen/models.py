# File: scaffoldgen/models.py
"""
scaffoldgen - Core Data Models
==============================
Pydantic V2 models for the canonical intermediate schema document (IR) and
for generation configuration.  The ``SchemaDocument`` is the single source
of truth for every downstream artifact:

    Tabular Input → SchemaDocument → Artifact Descriptors → Emitter

IR models are frozen: a document is built once per invocation and never
mutated afterwards (mode tagging produces a copy).
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("scaffoldgen.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ColumnType(str, Enum):
    """Column types the pipeline knows how to derive artifacts for."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ENUM = "enum"
    DATE = "date"
    DATETIME = "datetime"


class OnDeleteAction(str, Enum):
    """Foreign-key ON DELETE behaviour."""

    CASCADE = "cascade"
    SET_NULL = "set null"
    RESTRICT = "restrict"
    NO_ACTION = "no action"


class RelationKind(str, Enum):
    """ORM relation cardinalities."""

    BELONGS_TO = "belongs_to"
    HAS_MANY = "has_many"
    BELONGS_TO_MANY = "belongs_to_many"


class GenerationMode(str, Enum):
    """Fresh table definition vs. incremental change."""

    CREATE = "create"
    ALTER = "alter"


# Standard audit / identity columns folded into document flags.
SURROGATE_KEY_COLUMN: str = "id"
TIMESTAMP_COLUMNS: Tuple[str, str] = ("created_at", "updated_at")
SOFT_DELETE_COLUMN: str = "deleted_at"

DEFAULT_STRING_LENGTH: int = 255
TEXT_MAX_LENGTH: int = 65535

_API_VERSION_RE: re.Pattern[str] = re.compile(r"^v\d+$")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=True,
    validate_default=True,
    frozen=True,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Column
# ---------------------------------------------------------------------------


class ForeignKeySpec(BaseModel):
    """Reference from a local integer column to ``target_table.target_column``."""

    model_config = _SHARED_CONFIG

    target_table: str = Field(..., min_length=1)
    target_column: str = Field(default=SURROGATE_KEY_COLUMN, min_length=1)
    on_delete: OnDeleteAction = Field(default=OnDeleteAction.NO_ACTION)

    def __repr__(self) -> str:
        return f"<FK → {self.target_table}.{self.target_column} ({self.on_delete})>"


class ColumnSpec(BaseModel):
    """
    Complete specification of a single declared column.

    Type-specific attributes (``max_length`` for strings, ``enum_values`` for
    enums, ``unsigned`` for integers) are checked against ``column_type`` so a
    spec can never carry an attribute its type does not use.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Column name.")
    column_type: ColumnType = Field(..., description="Abstract column type.")
    max_length: Optional[int] = Field(
        default=None, ge=1, description="Max length (string only)."
    )
    enum_values: List[str] = Field(
        default_factory=list, description="Allowed values (enum only)."
    )
    nullable: bool = Field(default=False)
    unique: bool = Field(default=False)
    unsigned: bool = Field(default=False, description="Integer only.")
    default: Optional[Union[bool, int, str]] = Field(
        default=None, description="Literal default value."
    )
    foreign_key: Optional[ForeignKeySpec] = Field(default=None)
    comment: Optional[str] = Field(default=None)
    change: bool = Field(
        default=False,
        description="Alter mode: modifies an existing column instead of adding one.",
    )

    # -- Derived helpers ----------------------------------------------------

    @property
    def is_numeric(self) -> bool:
        return self.column_type == ColumnType.INTEGER

    @property
    def is_temporal(self) -> bool:
        return self.column_type in (ColumnType.DATE, ColumnType.DATETIME)

    @property
    def is_textual(self) -> bool:
        return self.column_type in (ColumnType.STRING, ColumnType.TEXT)

    @property
    def effective_max_length(self) -> Optional[int]:
        """Length bound enforced by validators (strings and text only)."""
        if self.column_type == ColumnType.STRING:
            return self.max_length or DEFAULT_STRING_LENGTH
        if self.column_type == ColumnType.TEXT:
            return TEXT_MAX_LENGTH
        return None

    # -- Validators ---------------------------------------------------------

    @field_validator("enum_values")
    @classmethod
    def _unique_values(cls, v: List[str]) -> List[str]:
        if len(v) != len(set(v)):
            dupes: List[str] = [x for x in v if v.count(x) > 1]
            raise ValueError(f"Duplicate enum values detected: {sorted(set(dupes))}")
        return v

    @model_validator(mode="after")
    def _validate_type_attributes(self) -> "ColumnSpec":
        if self.column_type == ColumnType.ENUM and not self.enum_values:
            raise ValueError(f"Column '{self.name}' is of type enum but has no values.")
        if self.column_type != ColumnType.ENUM and self.enum_values:
            raise ValueError(f"Column '{self.name}' lists enum values but is not an enum.")
        if self.max_length is not None and self.column_type != ColumnType.STRING:
            raise ValueError(f"Column '{self.name}': max_length applies to strings only.")
        if self.unsigned and self.column_type != ColumnType.INTEGER:
            raise ValueError(f"Column '{self.name}': unsigned applies to integers only.")
        if self.foreign_key is not None and self.column_type != ColumnType.INTEGER:
            raise ValueError(f"Column '{self.name}': foreign keys must be integer columns.")
        if (
            self.column_type == ColumnType.ENUM
            and isinstance(self.default, str)
            and self.default not in self.enum_values
        ):
            raise ValueError(
                f"Column '{self.name}': default '{self.default}' is not one of "
                f"{self.enum_values}."
            )
        return self

    def __repr__(self) -> str:
        null_flag: str = " NULL" if self.nullable else " NOT NULL"
        return f"<Column {self.name} {self.column_type}{null_flag}>"


# ---------------------------------------------------------------------------
# Primary key
# ---------------------------------------------------------------------------


class SurrogateKey(BaseModel):
    """Single auto-incrementing integer identity column."""

    model_config = _SHARED_CONFIG

    kind: Literal["surrogate"] = "surrogate"
    column: str = SURROGATE_KEY_COLUMN

    @property
    def columns(self) -> List[str]:
        return [self.column]

    @property
    def is_composite(self) -> bool:
        return False


class CompositeKey(BaseModel):
    """Primary key made of two or more declared columns, in key order."""

    model_config = _SHARED_CONFIG

    kind: Literal["composite"] = "composite"
    columns: List[str] = Field(..., min_length=2)

    @field_validator("columns")
    @classmethod
    def _no_duplicate_columns(cls, v: List[str]) -> List[str]:
        if len(v) != len(set(v)):
            raise ValueError(f"Duplicate columns in composite key: {v}")
        return v

    @property
    def is_composite(self) -> bool:
        return True


PrimaryKeySpec = Annotated[Union[SurrogateKey, CompositeKey], Field(discriminator="kind")]


# ---------------------------------------------------------------------------
# Index & relation
# ---------------------------------------------------------------------------


class IndexSpec(BaseModel):
    """Non-unique secondary index over two or more columns."""

    model_config = _SHARED_CONFIG

    columns: List[str] = Field(..., min_length=2)
    name: Optional[str] = Field(default=None)

    @field_validator("columns")
    @classmethod
    def _no_duplicate_columns(cls, v: List[str]) -> List[str]:
        if len(v) != len(set(v)):
            raise ValueError(f"Duplicate columns in index: {v}")
        return v

    def resolved_name(self, table_name: str) -> str:
        return self.name or f"{table_name}_{'_'.join(self.columns)}_index"


class RelationSpec(BaseModel):
    """ORM-level relation from this table to ``target_table``."""

    model_config = _SHARED_CONFIG

    kind: RelationKind
    target_table: str = Field(..., min_length=1)
    pivot_table: Optional[str] = Field(default=None)
    name: str = Field(..., min_length=1, description="Accessor name on the model.")
    comment: Optional[str] = Field(default=None)

    @model_validator(mode="after")
    def _pivot_only_for_many_to_many(self) -> "RelationSpec":
        if self.kind == RelationKind.BELONGS_TO_MANY and not self.pivot_table:
            raise ValueError(f"Relation '{self.name}' (belongs_to_many) needs a pivot table.")
        if self.kind != RelationKind.BELONGS_TO_MANY and self.pivot_table:
            raise ValueError(f"Relation '{self.name}' ({self.kind}) cannot use a pivot table.")
        return self


# ---------------------------------------------------------------------------
# SchemaDocument (the IR)
# ---------------------------------------------------------------------------


class SchemaDocument(BaseModel):
    """
    Canonical, validated representation of one table's shape and
    generation mode.

    Invariants (enforced on construction):
        - column names are unique;
        - composite key columns exist in ``columns``;
        - the surrogate ``id`` and audit columns are never listed in
          ``columns`` (they are implied by ``primary_key`` / the flags);
        - index columns are declared (or implied) columns.
    """

    model_config = _SHARED_CONFIG

    table_name: str = Field(..., min_length=1)
    source_name: str = Field(..., min_length=1)
    api_version: Optional[str] = Field(default=None)
    primary_key: PrimaryKeySpec = Field(default_factory=SurrogateKey)
    columns: List[ColumnSpec] = Field(..., min_length=1)
    indexes: List[IndexSpec] = Field(default_factory=list)
    relations: List[RelationSpec] = Field(default_factory=list)
    soft_delete: bool = False
    timestamps: bool = True
    comment: Optional[str] = None
    mode: GenerationMode = GenerationMode.CREATE

    # -- Validators ---------------------------------------------------------

    @field_validator("api_version")
    @classmethod
    def _valid_api_version(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _API_VERSION_RE.match(v):
            raise ValueError(f"API version must look like 'v1', got '{v}'.")
        return v

    @model_validator(mode="after")
    def _validate_columns(self) -> "SchemaDocument":
        names: List[str] = [c.name for c in self.columns]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate column names: {dupes}")

        reserved: Tuple[str, ...] = (SURROGATE_KEY_COLUMN, SOFT_DELETE_COLUMN) + TIMESTAMP_COLUMNS
        clashing: List[str] = [n for n in names if n in reserved]
        if clashing:
            raise ValueError(
                f"Columns {clashing} are implied by the key / audit flags and "
                f"must not be declared explicitly."
            )

        if isinstance(self.primary_key, CompositeKey):
            missing: List[str] = [c for c in self.primary_key.columns if c not in names]
            if missing:
                raise ValueError(f"Composite key columns not declared: {missing}")

        available = set(self.addressable_columns)
        for idx in self.indexes:
            unknown: List[str] = [c for c in idx.columns if c not in available]
            if unknown:
                raise ValueError(f"Index {idx.columns} references unknown columns: {unknown}")
        return self

    # -- Helpers ------------------------------------------------------------

    @property
    def is_composite(self) -> bool:
        return isinstance(self.primary_key, CompositeKey)

    @property
    def key_columns(self) -> List[str]:
        return list(self.primary_key.columns)

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def addressable_columns(self) -> List[str]:
        """Declared columns plus the implicit key and audit columns."""
        names: List[str] = []
        if not self.is_composite:
            names.append(SURROGATE_KEY_COLUMN)
        names.extend(self.column_names)
        if self.timestamps:
            names.extend(TIMESTAMP_COLUMNS)
        if self.soft_delete:
            names.append(SOFT_DELETE_COLUMN)
        return names

    def get_column(self, name: str) -> Optional[ColumnSpec]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_yaml(self) -> str:
        """Stable serialized form (field order preserved, no key sorting)."""
        return yaml.safe_dump(
            self.to_dict(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )

    @classmethod
    def from_yaml(cls, text: str) -> "SchemaDocument":
        return cls.model_validate(yaml.safe_load(text))

    def __repr__(self) -> str:
        return (
            f"<SchemaDocument {self.table_name} "
            f"({len(self.columns)} cols, {self.primary_key.kind} key, {self.mode})>"
        )


# ---------------------------------------------------------------------------
# Generation Configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """
    Settings that control input discovery, list-query defaults and output.

    Loaded from an optional YAML file; CLI flags override single fields.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        extra="forbid",
    )

    # -- Locations ----------------------------------------------------------
    input_root: str = Field(
        default=".devtools/schema-gen/csv",
        description="Directory holding one sub-directory of tabular files per name.",
    )
    schema_dir: str = Field(
        default=".devtools/schema-gen/schema",
        description="Where the serialized SchemaDocument is written.",
    )
    output_dir: str = Field(
        default=".devtools/schema-gen/artifacts",
        description="Where rendered artifact descriptors are written.",
    )
    write_descriptors: bool = Field(
        default=True, description="Render and write artifact descriptors."
    )

    # -- API surface --------------------------------------------------------
    route_prefix: str = Field(default="/api", description="Prefix of every route.")
    default_api_version: Optional[str] = Field(default=None)

    # -- List queries -------------------------------------------------------
    default_page_size: int = Field(default=15, ge=1, le=1000)
    max_page_size: int = Field(default=100, ge=1, le=10000)
    default_sort_order: Literal["asc", "desc"] = "desc"
    keyword_max_length: int = Field(default=100, ge=1)

    @field_validator("route_prefix")
    @classmethod
    def _normalise_prefix(cls, v: str) -> str:
        v = "/" + v.strip("/")
        return "" if v == "/" else v

    @field_validator("default_api_version")
    @classmethod
    def _valid_api_version(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _API_VERSION_RE.match(v):
            raise ValueError(f"API version must look like 'v1', got '{v}'.")
        return v

    @model_validator(mode="after")
    def _validate_page_sizes(self) -> "GenerationConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) must be "
                f"<= max_page_size ({self.max_page_size})."
            )
        return self


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ColumnType",
    "OnDeleteAction",
    "RelationKind",
    "GenerationMode",
    "SURROGATE_KEY_COLUMN",
    "TIMESTAMP_COLUMNS",
    "SOFT_DELETE_COLUMN",
    "DEFAULT_STRING_LENGTH",
    "TEXT_MAX_LENGTH",
    "ForeignKeySpec",
    "ColumnSpec",
    "SurrogateKey",
    "CompositeKey",
    "PrimaryKeySpec",
    "IndexSpec",
    "RelationSpec",
    "SchemaDocument",
    "GenerationConfig",
]

logger.debug("scaffoldgen.models loaded — %d public symbols.", len(__all__))
