# File: scaffoldgen/assembler.py
"""
scaffoldgen - Schema Assembler
==============================
Combines the tabular inputs for one table name into a ``SchemaDocument``.

Input directory layout (``.csv`` preferred, ``.tsv`` accepted)::

    {input_root}/{name}/
        {name}_table.csv       optional  table meta (one data row)
        {name}_columns.csv     required  column definitions
        {name}_indexes.csv     optional  composite secondary indexes
        {name}_relations.csv   optional  ORM relations

Assembly is pure: the same files always produce an equal document.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from scaffoldgen.errors import (
    DanglingPrimaryKeyColumnError,
    DuplicateColumnError,
    InputNotFoundError,
    InvalidValueError,
    MissingRequiredInputError,
    UnknownColumnReferenceError,
    UnknownColumnTypeError,
)
from scaffoldgen.models import (
    SOFT_DELETE_COLUMN,
    SURROGATE_KEY_COLUMN,
    TIMESTAMP_COLUMNS,
    ColumnSpec,
    ColumnType,
    CompositeKey,
    ForeignKeySpec,
    IndexSpec,
    OnDeleteAction,
    RelationKind,
    RelationSpec,
    SchemaDocument,
    SurrogateKey,
)
from scaffoldgen.reader import Record, read_all
from scaffoldgen.utils import to_plural, to_singular, to_snake_case

logger: logging.Logger = logging.getLogger("scaffoldgen.assembler")

# ---------------------------------------------------------------------------
# Input discovery
# ---------------------------------------------------------------------------

INPUT_SUFFIXES: Tuple[str, ...] = (".csv", ".tsv")

# (file role, human label) in the order they are reported.
INPUT_ROLES: Tuple[Tuple[str, str], ...] = (
    ("table", "Table meta"),
    ("columns", "Columns"),
    ("indexes", "Indexes"),
    ("relations", "Relations"),
)


@dataclass(frozen=True)
class InputFiles:
    """Resolved paths of the tabular inputs for one name."""

    name: str
    directory: Path
    columns: Path
    table: Optional[Path] = None
    indexes: Optional[Path] = None
    relations: Optional[Path] = None

    def loaded(self) -> List[Tuple[Path, str]]:
        """Present files with their label, in reporting order."""
        found: List[Tuple[Path, str]] = []
        for role, label in INPUT_ROLES:
            path: Optional[Path] = getattr(self, role)
            if path is not None:
                found.append((path, label))
        return found


def _find_input(directory: Path, name: str, role: str) -> Optional[Path]:
    for suffix in INPUT_SUFFIXES:
        candidate: Path = directory / f"{name}_{role}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def locate_inputs(name: str, directory: Union[str, Path]) -> InputFiles:
    """
    Find the tabular inputs for *name* inside *directory*.

    Raises:
        InputNotFoundError: *directory* does not exist.
        MissingRequiredInputError: the columns file is absent.
    """
    dir_path: Path = Path(directory)
    if not dir_path.is_dir():
        raise InputNotFoundError(dir_path, f"Schema input folder not found: {dir_path}")

    columns: Optional[Path] = _find_input(dir_path, name, "columns")
    if columns is None:
        raise MissingRequiredInputError(dir_path / f"{name}_columns.csv")

    return InputFiles(
        name=name,
        directory=dir_path,
        columns=columns,
        table=_find_input(dir_path, name, "table"),
        indexes=_find_input(dir_path, name, "indexes"),
        relations=_find_input(dir_path, name, "relations"),
    )


# ---------------------------------------------------------------------------
# Cell parsing
# ---------------------------------------------------------------------------

_LIST_SPLIT_RE: re.Pattern[str] = re.compile(r"[|,\s]+")
_TYPE_TOKEN_RE: re.Pattern[str] = re.compile(r"^([A-Za-z_]+)\s*(?:\((.*)\))?$")
_API_VERSION_RE: re.Pattern[str] = re.compile(r"^[vV]?(\d+)$")

_TRUE_TOKENS: Tuple[str, ...] = ("true", "yes", "y", "1", "on")
_FALSE_TOKENS: Tuple[str, ...] = ("false", "no", "n", "0", "off")

# type token → (column type, unsigned)
_TYPE_ALIASES: Dict[str, Tuple[ColumnType, bool]] = {
    "string": (ColumnType.STRING, False),
    "varchar": (ColumnType.STRING, False),
    "char": (ColumnType.STRING, False),
    "text": (ColumnType.TEXT, False),
    "longtext": (ColumnType.TEXT, False),
    "mediumtext": (ColumnType.TEXT, False),
    "id": (ColumnType.INTEGER, True),
    "increments": (ColumnType.INTEGER, True),
    "bigincrements": (ColumnType.INTEGER, True),
    "integer": (ColumnType.INTEGER, False),
    "int": (ColumnType.INTEGER, False),
    "bigint": (ColumnType.INTEGER, False),
    "biginteger": (ColumnType.INTEGER, False),
    "smallint": (ColumnType.INTEGER, False),
    "tinyint": (ColumnType.INTEGER, False),
    "foreignid": (ColumnType.INTEGER, True),
    "unsignedinteger": (ColumnType.INTEGER, True),
    "unsignedbiginteger": (ColumnType.INTEGER, True),
    "boolean": (ColumnType.BOOLEAN, False),
    "bool": (ColumnType.BOOLEAN, False),
    "enum": (ColumnType.ENUM, False),
    "date": (ColumnType.DATE, False),
    "datetime": (ColumnType.DATETIME, False),
    "timestamp": (ColumnType.DATETIME, False),
}

_ON_DELETE_ALIASES: Dict[str, OnDeleteAction] = {
    "cascade": OnDeleteAction.CASCADE,
    "set null": OnDeleteAction.SET_NULL,
    "set_null": OnDeleteAction.SET_NULL,
    "setnull": OnDeleteAction.SET_NULL,
    "nullondelete": OnDeleteAction.SET_NULL,
    "restrict": OnDeleteAction.RESTRICT,
    "no action": OnDeleteAction.NO_ACTION,
    "no_action": OnDeleteAction.NO_ACTION,
}

_RELATION_ALIASES: Dict[str, RelationKind] = {
    "belongs_to": RelationKind.BELONGS_TO,
    "has_many": RelationKind.HAS_MANY,
    "belongs_to_many": RelationKind.BELONGS_TO_MANY,
}


def split_list_cell(cell: str) -> List[str]:
    """Split ``a|b``, ``a b`` or ``a,b`` into its non-empty items."""
    return [item for item in _LIST_SPLIT_RE.split(cell.strip()) if item]


def parse_bool(cell: str, default: bool, *, where: str) -> bool:
    token: str = cell.strip().lower()
    if not token:
        return default
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    raise InvalidValueError(f"{where}: '{cell}' is not a boolean.")


def normalize_api_version(value: Optional[str]) -> Optional[str]:
    """``2`` / ``V2`` / ``v2`` → ``v2``; empty → ``None``."""
    if value is None or not value.strip():
        return None
    match = _API_VERSION_RE.match(value.strip())
    if match is None:
        raise InvalidValueError(f"API version '{value}' must look like 'v1'.")
    return f"v{int(match.group(1))}"


def parse_type_token(column: str, token: str) -> Tuple[ColumnType, bool, List[str]]:
    """
    Resolve a type cell such as ``varchar(100)`` or ``enum(a,b)``.

    Returns:
        (column type, unsigned flag, raw arguments)
    """
    match = _TYPE_TOKEN_RE.match(token.strip())
    if match is None:
        raise UnknownColumnTypeError(column, token)
    base: str = match.group(1).lower()
    if base not in _TYPE_ALIASES:
        raise UnknownColumnTypeError(column, token)
    column_type, unsigned = _TYPE_ALIASES[base]
    args: List[str] = [
        a.strip().strip("'\"") for a in split_list_cell(match.group(2) or "")
    ]
    return column_type, unsigned, args


def _parse_int(cell: str, *, where: str) -> int:
    try:
        value: int = int(cell.strip())
    except ValueError:
        raise InvalidValueError(f"{where}: '{cell}' is not an integer.") from None
    if value < 1:
        raise InvalidValueError(f"{where}: must be a positive integer, got {value}.")
    return value


def _coerce_default(
    cell: str, column_type: ColumnType, *, where: str
) -> Optional[Union[bool, int, str]]:
    raw: str = cell.strip()
    if not raw or raw.lower() == "null":
        return None
    if column_type == ColumnType.BOOLEAN:
        return parse_bool(raw, False, where=where)
    if column_type == ColumnType.INTEGER:
        try:
            return int(raw)
        except ValueError:
            raise InvalidValueError(f"{where}: '{raw}' is not an integer.") from None
    return raw.strip("'\"")


def _parse_foreign_key(
    column: str, cell: str, on_delete_cell: str, inferred: bool
) -> Optional[ForeignKeySpec]:
    """
    ``users`` / ``users.id`` / ``users(id)``.  A ``foreignId`` column with an
    empty cell is constrained to the table implied by its name
    (``user_id`` → ``users.id``).
    """
    where: str = f"Column '{column}'"
    raw: str = cell.strip()
    if not raw and inferred and column.endswith("_id"):
        raw = to_plural(column[: -len("_id")])

    on_delete_token: str = " ".join(on_delete_cell.strip().lower().split())
    if not raw:
        if on_delete_token:
            raise InvalidValueError(f"{where}: on_delete given without a foreign key.")
        return None

    target, _, rest = raw.replace("(", ".").rstrip(")").partition(".")
    if not target.strip():
        raise InvalidValueError(f"{where}: foreign key '{cell}' names no table.")
    target_column: str = rest.strip() or SURROGATE_KEY_COLUMN

    action: OnDeleteAction = OnDeleteAction.NO_ACTION
    if on_delete_token:
        if on_delete_token not in _ON_DELETE_ALIASES:
            raise InvalidValueError(f"{where}: unknown on_delete action '{on_delete_cell}'.")
        action = _ON_DELETE_ALIASES[on_delete_token]

    return ForeignKeySpec(
        target_table=target.strip(), target_column=target_column, on_delete=action
    )


# ---------------------------------------------------------------------------
# Per-input builders
# ---------------------------------------------------------------------------


@dataclass
class _TableMeta:
    table_name: Optional[str] = None
    comment: Optional[str] = None
    key_columns: List[str] = field(default_factory=list)
    soft_delete: bool = False
    timestamps: bool = True
    api_version: Optional[str] = None


def _build_table_meta(records: List[Record]) -> _TableMeta:
    if not records:
        return _TableMeta()
    if len(records) > 1:
        raise InvalidValueError(
            f"Table meta must contain exactly one data row, got {len(records)}."
        )
    row: Record = records[0]
    key_cells: List[str] = split_list_cell(row.get("primary_key", ""))
    if key_cells in ([], [SURROGATE_KEY_COLUMN], ["surrogate"]):
        key_cells = []
    elif len(key_cells) == 1:
        raise InvalidValueError(
            f"Primary key '{key_cells[0]}': a single-column key must be the "
            f"surrogate '{SURROGATE_KEY_COLUMN}'; composite keys need two or more columns."
        )

    return _TableMeta(
        table_name=row.get("table_name", "").strip() or None,
        comment=row.get("comment", "").strip() or None,
        key_columns=key_cells,
        soft_delete=parse_bool(row.get("soft_deletes", ""), False, where="Table meta soft_deletes"),
        timestamps=parse_bool(row.get("timestamps", ""), True, where="Table meta timestamps"),
        api_version=normalize_api_version(row.get("api_version")),
    )


def _build_column(row: Record) -> ColumnSpec:
    name: str = row.get("name", "").strip()
    if not name:
        raise InvalidValueError("Column row without a name.")
    where: str = f"Column '{name}'"

    type_cell: str = row.get("type", "").strip()
    if not type_cell:
        raise UnknownColumnTypeError(name, type_cell)
    column_type, unsigned, args = parse_type_token(name, type_cell)
    inferred_fk: bool = type_cell.lower().startswith("foreignid")

    max_length: Optional[int] = None
    if column_type == ColumnType.STRING:
        length_cell: str = row.get("length", "").strip()
        if length_cell:
            max_length = _parse_int(length_cell, where=f"{where} length")
        elif args:
            max_length = _parse_int(args[0], where=f"{where} length")

    enum_values: List[str] = []
    if column_type == ColumnType.ENUM:
        enum_values = split_list_cell(row.get("values", "")) or args
        if not enum_values:
            raise InvalidValueError(f"{where}: enum columns need at least one value.")

    foreign_key: Optional[ForeignKeySpec] = _parse_foreign_key(
        name, row.get("foreign_key", ""), row.get("on_delete", ""), inferred_fk
    )
    if foreign_key is not None and column_type != ColumnType.INTEGER:
        raise InvalidValueError(f"{where}: only integer columns can be foreign keys.")

    unsigned = parse_bool(row.get("unsigned", ""), unsigned, where=f"{where} unsigned")
    if unsigned and column_type != ColumnType.INTEGER:
        raise InvalidValueError(f"{where}: unsigned applies to integer columns only.")

    try:
        return ColumnSpec(
            name=name,
            column_type=column_type,
            max_length=max_length,
            enum_values=enum_values,
            nullable=parse_bool(row.get("nullable", ""), False, where=f"{where} nullable"),
            unique=parse_bool(row.get("unique", ""), False, where=f"{where} unique"),
            unsigned=unsigned or foreign_key is not None,
            default=_coerce_default(row.get("default", ""), column_type, where=f"{where} default"),
            foreign_key=foreign_key,
            comment=row.get("comment", "").strip() or None,
            change=parse_bool(row.get("change", ""), False, where=f"{where} change"),
        )
    except PydanticValidationError as exc:
        raise InvalidValueError(f"{where}: {exc.errors()[0]['msg']}") from exc


def _build_indexes(records: List[Record], available: List[str]) -> List[IndexSpec]:
    indexes: List[IndexSpec] = []
    seen: Set[Tuple[str, ...]] = set()
    for row in records:
        columns: List[str] = split_list_cell(row.get("columns", ""))
        label: str = f"Index '{row.get('name', '').strip() or '|'.join(columns)}'"
        if len(columns) < 2:
            raise InvalidValueError(f"{label}: composite indexes need at least two columns.")
        if len(set(columns)) != len(columns):
            raise InvalidValueError(f"{label}: a column is listed twice.")
        for col in columns:
            if col not in available:
                raise UnknownColumnReferenceError(label, col)

        key: Tuple[str, ...] = tuple(columns)
        if key in seen:
            logger.debug("%s duplicates an earlier index; dropped.", label)
            continue
        seen.add(key)
        indexes.append(IndexSpec(columns=columns, name=row.get("name", "").strip() or None))
    return indexes


def default_pivot_table(table_name: str, target_table: str) -> str:
    """``posts`` + ``tags`` → ``post_tag``."""
    return "_".join(sorted((to_singular(table_name), to_singular(target_table))))


def _build_relations(records: List[Record], table_name: str) -> List[RelationSpec]:
    relations: List[RelationSpec] = []
    for row in records:
        kind_cell: str = row.get("kind", "").strip()
        kind: Optional[RelationKind] = _RELATION_ALIASES.get(to_snake_case(kind_cell))
        if kind is None:
            raise InvalidValueError(f"Unknown relation kind '{kind_cell}'.")

        target: str = row.get("target_table", "").strip()
        if not target:
            raise InvalidValueError(f"Relation '{kind_cell}' has no target table.")

        pivot: Optional[str] = row.get("pivot_table", "").strip() or None
        if kind == RelationKind.BELONGS_TO_MANY:
            pivot = pivot or default_pivot_table(table_name, target)
        elif pivot is not None:
            raise InvalidValueError(
                f"Relation to '{target}': pivot_table is only valid for belongs_to_many."
            )

        singular_target: str = to_singular(target)
        default_name: str = (
            singular_target if kind == RelationKind.BELONGS_TO else to_plural(singular_target)
        )
        relations.append(
            RelationSpec(
                kind=kind,
                target_table=target,
                pivot_table=pivot,
                name=row.get("name", "").strip() or default_name,
                comment=row.get("comment", "").strip() or None,
            )
        )
    return relations


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def assemble_schema(
    name: str,
    directory: Union[str, Path],
    *,
    api_version: Optional[str] = None,
) -> SchemaDocument:
    """
    Build the ``SchemaDocument`` for *name* from the files in *directory*.

    Args:
        name: Input name; files are looked up as ``{name}_{role}.csv``.
        directory: Folder holding the tabular inputs.
        api_version: Overrides the table meta's ``api_version`` when given.

    Returns:
        A validated document tagged ``create`` (see ``resolve_mode``).

    Raises:
        InputNotFoundError: folder or columns file missing.
        SchemaInputError: any parse or consistency failure.
    """
    inputs: InputFiles = locate_inputs(name, directory)
    return assemble_from_inputs(inputs, api_version=api_version)


def assemble_from_inputs(
    inputs: InputFiles, *, api_version: Optional[str] = None
) -> SchemaDocument:
    meta: _TableMeta = _build_table_meta(read_all(inputs.table) if inputs.table else [])
    table_name: str = meta.table_name or inputs.name

    columns: List[ColumnSpec] = []
    seen: Set[str] = set()
    has_id_row: bool = False
    timestamps: bool = meta.timestamps
    soft_delete: bool = meta.soft_delete

    for row in read_all(inputs.columns):
        column: ColumnSpec = _build_column(row)
        if column.name in seen:
            raise DuplicateColumnError(column.name)
        seen.add(column.name)

        if column.name == SURROGATE_KEY_COLUMN:
            has_id_row = True
        elif column.name in TIMESTAMP_COLUMNS:
            timestamps = True
        elif column.name == SOFT_DELETE_COLUMN:
            soft_delete = True
        else:
            columns.append(column)

    declared: List[str] = [c.name for c in columns]
    primary_key: Union[SurrogateKey, CompositeKey] = SurrogateKey()
    if meta.key_columns:
        if has_id_row:
            raise InvalidValueError(
                f"Table '{table_name}' declares a composite key but also an "
                f"'{SURROGATE_KEY_COLUMN}' column."
            )
        missing: List[str] = [c for c in meta.key_columns if c not in declared]
        if missing:
            raise DanglingPrimaryKeyColumnError(missing, declared)
        nullable_keys: List[str] = [
            c.name for c in columns if c.name in meta.key_columns and c.nullable
        ]
        if nullable_keys:
            raise InvalidValueError(f"Primary key column(s) {nullable_keys} cannot be nullable.")
        primary_key = CompositeKey(columns=meta.key_columns)

    available: List[str] = []
    if not primary_key.is_composite:
        available.append(SURROGATE_KEY_COLUMN)
    available.extend(declared)
    if timestamps:
        available.extend(TIMESTAMP_COLUMNS)
    if soft_delete:
        available.append(SOFT_DELETE_COLUMN)

    indexes: List[IndexSpec] = _build_indexes(
        read_all(inputs.indexes) if inputs.indexes else [], available
    )
    relations: List[RelationSpec] = _build_relations(
        read_all(inputs.relations) if inputs.relations else [], table_name
    )

    payload: Dict[str, Any] = {
        "table_name": table_name,
        "source_name": inputs.name,
        "api_version": normalize_api_version(api_version) or meta.api_version,
        "primary_key": primary_key,
        "columns": columns,
        "indexes": indexes,
        "relations": relations,
        "soft_delete": soft_delete,
        "timestamps": timestamps,
        "comment": meta.comment,
    }
    if not columns:
        raise InvalidValueError(f"Table '{table_name}' declares no ordinary columns.")

    try:
        document: SchemaDocument = SchemaDocument(**payload)
    except PydanticValidationError as exc:
        raise InvalidValueError(f"Table '{table_name}': {exc.errors()[0]['msg']}") from exc

    logger.info(
        "Assembled %s: %d column(s), %s key, %d index(es), %d relation(s).",
        table_name,
        len(document.columns),
        document.primary_key.kind,
        len(document.indexes),
        len(document.relations),
    )
    return document


__all__: List[str] = [
    "INPUT_SUFFIXES",
    "INPUT_ROLES",
    "InputFiles",
    "locate_inputs",
    "split_list_cell",
    "parse_bool",
    "normalize_api_version",
    "parse_type_token",
    "default_pivot_table",
    "assemble_schema",
    "assemble_from_inputs",
]

logger.debug("scaffoldgen.assembler loaded.")
