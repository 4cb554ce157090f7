# File: scaffoldgen/validators.py
"""
scaffoldgen - Document Lint
===========================
Non-fatal semantic checks on an assembled ``SchemaDocument``.

Hard structural rules (unique columns, key columns declared, index
references) are enforced while assembling and raise immediately.  This
module adds the softer layer: naming conventions, reserved words,
redundant indexes, foreign-key sanity and the composite-key uniqueness
exclusion that cannot be derived automatically.

Usage:
    from scaffoldgen.validators import validate_document
    result = validate_document(document, config)
    if not result.is_valid:
        ...
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, FrozenSet, List, Optional, Set

from scaffoldgen.descriptors import LIST_QUERY_PARAMS
from scaffoldgen.models import (
    ColumnType,
    GenerationConfig,
    GenerationMode,
    OnDeleteAction,
    RelationKind,
    SchemaDocument,
)
from scaffoldgen.utils import to_singular

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("scaffoldgen.validators")

# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """One lint finding."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Ordered collection of ``ValidationIssue`` items."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def add_info(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationIssue("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self._items if i.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self._items if i.is_warning]

    @property
    def all_items(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [i.code for i in self._items]

    @property
    def has_errors(self) -> bool:
        return any(i.is_error for i in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(i.is_warning for i in self._items)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        lines: List[str] = [self.summary()]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            marker: str = {"error": "✗", "warning": "⚠", "info": "ℹ"}.get(item.level, "•")
            lines.append(f"  {marker} [{item.code}] {item.message}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Patterns & word lists
# ---------------------------------------------------------------------------

_SNAKE_CASE_RE: re.Pattern[str] = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)*$")
_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

_SQL_RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        "select", "insert", "update", "delete", "drop", "create", "alter",
        "table", "column", "index", "from", "where", "join", "order",
        "group", "having", "limit", "offset", "union", "distinct", "key",
        "primary", "foreign", "references", "constraint", "check",
        "default", "unique", "values", "into", "user", "schema", "view",
    }
)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_table_name(document: SchemaDocument) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    name: str = document.table_name
    ctx: Dict[str, Any] = {"table": name}

    if not _IDENTIFIER_RE.match(name):
        result.add_error("INVALID_TABLE_NAME", f"Table name '{name}' is not a valid identifier.", ctx)
        return result
    if not _SNAKE_CASE_RE.match(name):
        result.add_warning(
            "TABLE_NAME_NOT_SNAKE_CASE",
            f"Table name '{name}' is not snake_case; derived class names may look odd.",
            ctx,
        )
    if name.lower() in _SQL_RESERVED_WORDS:
        result.add_error("TABLE_NAME_SQL_RESERVED", f"Table name '{name}' is a SQL reserved word.", ctx)
    if to_singular(name) == name:
        result.add_warning(
            "TABLE_NAME_NOT_PLURAL",
            f"Table name '{name}' does not look plural; singular and plural names coincide.",
            ctx,
        )
    return result


def validate_column_names(document: SchemaDocument) -> ValidationResult:
    """
    Identifier shape, reserved words, and clashes with list-query
    parameters (``keyword``, ``sort_by``...) or range-filter names.
    """
    result: ValidationResult = ValidationResult()
    ranged: List[str] = [
        c.name for c in document.columns
        if (c.is_numeric and c.foreign_key is None) or c.is_temporal
    ]
    range_params: Set[str] = {f"{n}_{s}" for n in ranged for s in ("from", "to")}

    for column in document.columns:
        ctx: Dict[str, Any] = {"table": document.table_name, "column": column.name}
        if not _IDENTIFIER_RE.match(column.name):
            result.add_error(
                "INVALID_COLUMN_NAME", f"Column name '{column.name}' is not a valid identifier.", ctx
            )
            continue
        if not _SNAKE_CASE_RE.match(column.name):
            result.add_warning(
                "COLUMN_NAME_NOT_SNAKE_CASE", f"Column '{column.name}' is not snake_case.", ctx
            )
        if column.name.lower() in _SQL_RESERVED_WORDS:
            result.add_warning(
                "COLUMN_NAME_SQL_RESERVED",
                f"Column '{column.name}' is a SQL reserved word and needs quoting.",
                ctx,
            )
        if column.name in LIST_QUERY_PARAMS:
            result.add_warning(
                "COLUMN_SHADOWS_QUERY_PARAM",
                f"Column '{column.name}' collides with a list-query parameter "
                f"and cannot be filtered on.",
                ctx,
            )
        if column.name in range_params:
            result.add_error(
                "COLUMN_SHADOWS_RANGE_FILTER",
                f"Column '{column.name}' collides with a derived range filter.",
                ctx,
            )

    return result


def validate_foreign_keys(document: SchemaDocument) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    for column in document.columns:
        fk = column.foreign_key
        if fk is None:
            continue
        ctx: Dict[str, Any] = {
            "table": document.table_name,
            "column": column.name,
            "target": f"{fk.target_table}.{fk.target_column}",
        }
        if fk.on_delete == OnDeleteAction.SET_NULL and not column.nullable:
            result.add_error(
                "FK_SET_NULL_ON_NOT_NULLABLE",
                f"Column '{column.name}' uses ON DELETE SET NULL but is not nullable.",
                ctx,
            )
        if not column.name.endswith("_id"):
            result.add_warning(
                "FK_COLUMN_NAMING",
                f"Foreign-key column '{column.name}' does not end in '_id'.",
                ctx,
            )
        if fk.target_table == document.table_name:
            result.add_info(
                "FK_SELF_REFERENCE", f"Column '{column.name}' references its own table.", ctx
            )
    return result


def validate_indexes(document: SchemaDocument) -> ValidationResult:
    """Indexes duplicating the key, or a leading prefix of another index."""
    result: ValidationResult = ValidationResult()
    table: str = document.table_name
    key: List[str] = document.key_columns

    for i, idx in enumerate(document.indexes):
        ctx: Dict[str, Any] = {"table": table, "index": idx.resolved_name(table)}
        if document.is_composite and idx.columns[: len(key)] == key:
            result.add_warning(
                "INDEX_COVERED_BY_PRIMARY_KEY",
                f"Index {idx.columns} starts with the primary key and is redundant.",
                ctx,
            )
            continue
        for j, other in enumerate(document.indexes):
            if i != j and len(other.columns) > len(idx.columns) and (
                other.columns[: len(idx.columns)] == idx.columns
            ):
                result.add_warning(
                    "REDUNDANT_INDEX",
                    f"Index {idx.columns} is a prefix of index {other.columns}.",
                    ctx,
                )
                break
    return result


def validate_unique_columns(document: SchemaDocument) -> ValidationResult:
    """
    Unique columns on a composite-key table cannot exclude the current row
    on update through a single route parameter.  The key columns themselves
    are validated as unique and are reported too.
    """
    result: ValidationResult = ValidationResult()
    if not document.is_composite:
        return result
    key_columns: Set[str] = set(document.key_columns)
    for column in document.columns:
        if column.unique or column.name in key_columns:
            result.add_warning(
                "UNSUPPORTED_AUTO_EXCLUSION",
                f"Column '{column.name}' is unique on a composite-key table; the "
                f"update rule cannot exclude the current row and needs manual review.",
                {"table": document.table_name, "column": column.name, "key": document.key_columns},
            )
    return result


def validate_relations(document: SchemaDocument) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    seen: Set[str] = set()
    columns: Set[str] = set(document.column_names)

    for rel in document.relations:
        ctx: Dict[str, Any] = {"table": document.table_name, "relation": rel.name}
        if rel.name in seen:
            result.add_error(
                "DUPLICATE_RELATION_NAME", f"Relation name '{rel.name}' is used twice.", ctx
            )
        seen.add(rel.name)
        if rel.name in columns:
            result.add_error(
                "RELATION_SHADOWS_COLUMN",
                f"Relation '{rel.name}' has the same name as a column.",
                ctx,
            )
        if rel.kind == RelationKind.BELONGS_TO:
            expected: str = f"{to_singular(rel.target_table)}_id"
            if expected not in columns:
                result.add_warning(
                    "RELATION_WITHOUT_FOREIGN_KEY",
                    f"belongs_to '{rel.name}' expects a '{expected}' column.",
                    ctx,
                )
    return result


def validate_alter_document(document: SchemaDocument) -> ValidationResult:
    """Added NOT NULL columns without a default fail on non-empty tables."""
    result: ValidationResult = ValidationResult()
    if document.mode != GenerationMode.ALTER:
        return result
    for column in document.columns:
        if column.change or column.nullable or column.default is not None:
            continue
        result.add_warning(
            "ALTER_NOT_NULL_WITHOUT_DEFAULT",
            f"Added column '{column.name}' is NOT NULL without a default; "
            f"existing rows cannot be migrated.",
            {"table": document.table_name, "column": column.name},
        )
    return result


def validate_enum_defaults(document: SchemaDocument) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    for column in document.columns:
        if column.column_type == ColumnType.ENUM and len(column.enum_values) == 1:
            result.add_info(
                "SINGLE_VALUE_ENUM",
                f"Enum column '{column.name}' allows a single value.",
                {"table": document.table_name, "column": column.name},
            )
    return result


def validate_config(config: GenerationConfig) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    if config.max_page_size > 1000:
        result.add_warning(
            "LARGE_MAX_PAGE_SIZE",
            f"max_page_size={config.max_page_size} allows very large list responses.",
            {"max_page_size": config.max_page_size},
        )
    if not config.route_prefix:
        result.add_info("EMPTY_ROUTE_PREFIX", "Routes are registered at the root path.")
    return result


# ---------------------------------------------------------------------------
# Master entry point
# ---------------------------------------------------------------------------


def validate_document(
    document: SchemaDocument,
    config: Optional[GenerationConfig] = None,
) -> ValidationResult:
    """Run every check on *document* (and *config* when given)."""
    result: ValidationResult = ValidationResult()
    for check in (
        validate_table_name,
        validate_column_names,
        validate_foreign_keys,
        validate_indexes,
        validate_unique_columns,
        validate_relations,
        validate_alter_document,
        validate_enum_defaults,
    ):
        result.merge(check(document))
    if config is not None:
        result.merge(validate_config(config))

    if result.has_errors:
        logger.error("Lint FAILED for %s. %s", document.table_name, result.summary())
    else:
        logger.info("Lint passed for %s. %s", document.table_name, result.summary())
    return result


__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_table_name",
    "validate_column_names",
    "validate_foreign_keys",
    "validate_indexes",
    "validate_unique_columns",
    "validate_relations",
    "validate_alter_document",
    "validate_enum_defaults",
    "validate_config",
    "validate_document",
]

logger.debug("scaffoldgen.validators loaded — %d public symbols.", len(__all__))
