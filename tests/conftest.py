"""
tests/conftest.py
Shared fixtures for the scaffoldgen test suite.

No external mocking libraries are used; CSV inputs are written with the
standard ``csv`` module into directories managed by pytest's ``tmp_path``.
"""

from __future__ import annotations

import csv
import pathlib
from typing import Callable, Dict, List, Optional

import pytest

from scaffoldgen.assembler import assemble_schema
from scaffoldgen.mode import resolve_mode
from scaffoldgen.models import GenerationConfig, SchemaDocument
from scaffoldgen.naming import NameSet, names_for


# ---------------------------------------------------------------------------
# CSV layout
# ---------------------------------------------------------------------------

TABLE_HEADER: List[str] = [
    "table_name", "primary_key", "api_version", "soft_deletes", "timestamps", "comment",
]
COLUMN_HEADER: List[str] = [
    "name", "type", "length", "values", "nullable", "unique", "unsigned",
    "default", "foreign_key", "on_delete", "comment", "change",
]
INDEX_HEADER: List[str] = ["name", "columns"]
RELATION_HEADER: List[str] = ["kind", "target_table", "pivot_table", "name", "comment"]

Row = Dict[str, str]
MakeInputs = Callable[..., pathlib.Path]


def write_csv(path: pathlib.Path, header: List[str], rows: List[Row]) -> pathlib.Path:
    """Write *rows* (missing cells left empty) under *header*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh)
        writer.writerow(header)
        for row in rows:
            writer.writerow([row.get(key, "") for key in header])
    return path


# ---------------------------------------------------------------------------
# Input folders
# ---------------------------------------------------------------------------


@pytest.fixture()
def input_root(tmp_path: pathlib.Path) -> pathlib.Path:
    root = tmp_path / "csv"
    root.mkdir()
    return root


@pytest.fixture()
def make_inputs(input_root: pathlib.Path) -> MakeInputs:
    """Factory: write the CSV files for one input name, return its folder."""

    def _make(
        name: str,
        columns: List[Row],
        *,
        table: Optional[Row] = None,
        indexes: Optional[List[Row]] = None,
        relations: Optional[List[Row]] = None,
    ) -> pathlib.Path:
        folder = input_root / name
        write_csv(folder / f"{name}_columns.csv", COLUMN_HEADER, columns)
        if table is not None:
            write_csv(folder / f"{name}_table.csv", TABLE_HEADER, [table])
        if indexes is not None:
            write_csv(folder / f"{name}_indexes.csv", INDEX_HEADER, indexes)
        if relations is not None:
            write_csv(folder / f"{name}_relations.csv", RELATION_HEADER, relations)
        return folder

    return _make


POSTS_COLUMNS: List[Row] = [
    {"name": "id", "type": "id"},
    {"name": "user_id", "type": "foreignId", "on_delete": "cascade"},
    {"name": "title", "type": "string", "length": "255"},
    {"name": "slug", "type": "string", "unique": "true"},
    {"name": "body", "type": "text", "nullable": "true"},
    {"name": "status", "type": "enum", "values": "draft|published|archived", "default": "draft"},
    {"name": "published_at", "type": "datetime", "nullable": "true"},
    {"name": "created_at", "type": "timestamp"},
    {"name": "updated_at", "type": "timestamp"},
    {"name": "deleted_at", "type": "timestamp", "nullable": "true"},
]

ROOMS_COLUMNS: List[Row] = [
    {"name": "region", "type": "string", "length": "50"},
    {"name": "facility_code", "type": "string", "length": "10"},
    {"name": "room_number", "type": "string", "length": "10"},
    {"name": "name", "type": "string", "length": "100"},
    {"name": "capacity", "type": "integer"},
    {"name": "is_active", "type": "boolean", "default": "true"},
]

FAVORITE_POINTS_COLUMNS: List[Row] = [
    {"name": "id", "type": "id"},
    {"name": "name", "type": "string(100)"},
    {"name": "is_active", "type": "boolean"},
    {"name": "sort_order", "type": "unsignedInteger", "default": "0"},
]


@pytest.fixture()
def posts_inputs(make_inputs: MakeInputs) -> pathlib.Path:
    """Surrogate key, FK, unique, enum, nullable, soft deletes, relations."""
    return make_inputs(
        "posts",
        POSTS_COLUMNS,
        indexes=[{"columns": "status|published_at"}],
        relations=[
            {"kind": "belongsTo", "target_table": "users"},
            {"kind": "hasMany", "target_table": "comments"},
            {"kind": "belongs_to_many", "target_table": "tags"},
        ],
    )


@pytest.fixture()
def rooms_inputs(make_inputs: MakeInputs) -> pathlib.Path:
    """Composite key, v2 API."""
    return make_inputs(
        "rooms",
        ROOMS_COLUMNS,
        table={
            "table_name": "rooms",
            "primary_key": "region|facility_code|room_number",
            "api_version": "v2",
        },
    )


@pytest.fixture()
def favorite_points_inputs(make_inputs: MakeInputs) -> pathlib.Path:
    return make_inputs("favorite_points", FAVORITE_POINTS_COLUMNS)


@pytest.fixture()
def add_view_count_inputs(make_inputs: MakeInputs) -> pathlib.Path:
    """Alter request: one added column plus an index over it."""
    return make_inputs(
        "posts_add_view_count",
        [{"name": "view_count", "type": "unsignedInteger", "default": "0"}],
        table={"table_name": "posts"},
        indexes=[{"columns": "view_count|created_at"}],
    )


@pytest.fixture()
def body_nullable_inputs(make_inputs: MakeInputs) -> pathlib.Path:
    """Alter request that only relaxes ``posts.body`` to nullable."""
    return make_inputs(
        "posts_make_body_nullable",
        [{"name": "body", "type": "text", "nullable": "true", "change": "true"}],
        table={"table_name": "posts"},
    )


# ---------------------------------------------------------------------------
# Assembled documents & names
# ---------------------------------------------------------------------------


@pytest.fixture()
def posts_document(posts_inputs: pathlib.Path) -> SchemaDocument:
    return resolve_mode(assemble_schema("posts", posts_inputs), alter=False)


@pytest.fixture()
def rooms_document(rooms_inputs: pathlib.Path) -> SchemaDocument:
    return resolve_mode(assemble_schema("rooms", rooms_inputs), alter=False)


@pytest.fixture()
def favorite_points_document(favorite_points_inputs: pathlib.Path) -> SchemaDocument:
    return resolve_mode(assemble_schema("favorite_points", favorite_points_inputs), alter=False)


@pytest.fixture()
def add_view_count_document(add_view_count_inputs: pathlib.Path) -> SchemaDocument:
    return resolve_mode(
        assemble_schema("posts_add_view_count", add_view_count_inputs), alter=True
    )


@pytest.fixture()
def body_nullable_document(body_nullable_inputs: pathlib.Path) -> SchemaDocument:
    return resolve_mode(
        assemble_schema("posts_make_body_nullable", body_nullable_inputs), alter=True
    )


@pytest.fixture()
def posts_names(posts_document: SchemaDocument) -> NameSet:
    return names_for(posts_document)


@pytest.fixture()
def rooms_names(rooms_document: SchemaDocument) -> NameSet:
    return names_for(rooms_document)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture()
def config(input_root: pathlib.Path, tmp_path: pathlib.Path) -> GenerationConfig:
    """Every location inside the test's temporary directory."""
    return GenerationConfig(
        input_root=str(input_root),
        schema_dir=str(tmp_path / "schema"),
        output_dir=str(tmp_path / "artifacts"),
    )
