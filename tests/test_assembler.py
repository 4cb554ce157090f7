"""
tests/test_assembler.py
Tests for scaffoldgen.assembler — CSV inputs → SchemaDocument.
"""

from __future__ import annotations

import pathlib
from typing import Any

import pytest

from scaffoldgen.assembler import (
    assemble_schema,
    default_pivot_table,
    locate_inputs,
    normalize_api_version,
    parse_bool,
    parse_type_token,
    split_list_cell,
)
from scaffoldgen.errors import (
    DanglingPrimaryKeyColumnError,
    DuplicateColumnError,
    InputNotFoundError,
    InvalidValueError,
    MissingRequiredInputError,
    SchemaInputError,
    UnknownColumnReferenceError,
    UnknownColumnTypeError,
)
from scaffoldgen.models import ColumnType, CompositeKey, SchemaDocument, SurrogateKey


# ===================================================================
# Cell helpers
# ===================================================================


class TestCellHelpers:

    @pytest.mark.parametrize(
        "cell, expected",
        [
            ("a|b|c", ["a", "b", "c"]),
            ("a, b", ["a", "b"]),
            ("a b", ["a", "b"]),
            ("", []),
            ("  single ", ["single"]),
        ],
    )
    def test_split_list_cell(self, cell: str, expected: list) -> None:
        assert split_list_cell(cell) == expected

    @pytest.mark.parametrize("cell", ["true", "YES", "1", "y", "on"])
    def test_parse_bool_true(self, cell: str) -> None:
        assert parse_bool(cell, False, where="t") is True

    @pytest.mark.parametrize("cell", ["false", "No", "0", "off"])
    def test_parse_bool_false(self, cell: str) -> None:
        assert parse_bool(cell, True, where="t") is False

    def test_parse_bool_empty_uses_default(self) -> None:
        assert parse_bool("", True, where="t") is True

    def test_parse_bool_rejects_garbage(self) -> None:
        with pytest.raises(InvalidValueError):
            parse_bool("maybe", False, where="t")

    @pytest.mark.parametrize("value, expected", [("2", "v2"), ("V2", "v2"), ("v10", "v10"), ("", None), (None, None)])
    def test_normalize_api_version(self, value: Any, expected: Any) -> None:
        assert normalize_api_version(value) == expected

    def test_normalize_api_version_rejects_garbage(self) -> None:
        with pytest.raises(InvalidValueError):
            normalize_api_version("latest")

    @pytest.mark.parametrize(
        "token, column_type, unsigned",
        [
            ("string", ColumnType.STRING, False),
            ("varchar(100)", ColumnType.STRING, False),
            ("longText", ColumnType.TEXT, False),
            ("bigInteger", ColumnType.INTEGER, False),
            ("foreignId", ColumnType.INTEGER, True),
            ("unsignedInteger", ColumnType.INTEGER, True),
            ("bool", ColumnType.BOOLEAN, False),
            ("timestamp", ColumnType.DATETIME, False),
            ("date", ColumnType.DATE, False),
        ],
    )
    def test_parse_type_token(self, token: str, column_type: ColumnType, unsigned: bool) -> None:
        parsed_type, parsed_unsigned, _ = parse_type_token("c", token)
        assert parsed_type == column_type
        assert parsed_unsigned is unsigned

    def test_parse_type_token_arguments(self) -> None:
        _, _, args = parse_type_token("status", "enum('a', 'b')")
        assert args == ["a", "b"]

    def test_unknown_type_token(self) -> None:
        with pytest.raises(UnknownColumnTypeError):
            parse_type_token("c", "geometry")

    def test_default_pivot_table_is_alphabetical(self) -> None:
        assert default_pivot_table("posts", "tags") == "post_tag"
        assert default_pivot_table("tags", "posts") == "post_tag"


# ===================================================================
# Locating inputs
# ===================================================================


class TestLocateInputs:

    def test_missing_folder(self, input_root: pathlib.Path) -> None:
        with pytest.raises(InputNotFoundError):
            locate_inputs("posts", input_root / "posts")

    def test_missing_columns_file(self, input_root: pathlib.Path) -> None:
        (input_root / "posts").mkdir()
        with pytest.raises(MissingRequiredInputError):
            locate_inputs("posts", input_root / "posts")

    def test_optional_files_reported_in_order(self, posts_inputs: pathlib.Path) -> None:
        inputs = locate_inputs("posts", posts_inputs)
        assert inputs.table is None
        assert [label for _, label in inputs.loaded()] == ["Columns", "Indexes", "Relations"]

    def test_tsv_accepted(self, input_root: pathlib.Path) -> None:
        folder = input_root / "tags"
        folder.mkdir()
        (folder / "tags_columns.tsv").write_text("name\ttype\nlabel\tstring\n", encoding="utf-8")
        assert locate_inputs("tags", folder).columns.suffix == ".tsv"


# ===================================================================
# Surrogate-key assembly
# ===================================================================


class TestAssemblePosts:

    def test_surrogate_key(self, posts_document: SchemaDocument) -> None:
        assert isinstance(posts_document.primary_key, SurrogateKey)
        assert posts_document.key_columns == ["id"]

    def test_audit_rows_become_flags(self, posts_document: SchemaDocument) -> None:
        assert posts_document.timestamps is True
        assert posts_document.soft_delete is True
        for implied in ("id", "created_at", "updated_at", "deleted_at"):
            assert implied not in posts_document.column_names

    def test_column_order_follows_input(self, posts_document: SchemaDocument) -> None:
        assert posts_document.column_names == [
            "user_id", "title", "slug", "body", "status", "published_at",
        ]

    def test_foreign_key_inferred_from_name(self, posts_document: SchemaDocument) -> None:
        column = posts_document.get_column("user_id")
        assert column is not None and column.foreign_key is not None
        assert column.foreign_key.target_table == "users"
        assert column.foreign_key.target_column == "id"
        assert column.foreign_key.on_delete == "cascade"
        assert column.unsigned is True

    def test_string_length_defaults(self, posts_document: SchemaDocument) -> None:
        slug = posts_document.get_column("slug")
        assert slug is not None
        assert slug.max_length is None
        assert slug.effective_max_length == 255
        assert slug.unique is True

    def test_enum_column(self, posts_document: SchemaDocument) -> None:
        status = posts_document.get_column("status")
        assert status is not None
        assert status.enum_values == ["draft", "published", "archived"]
        assert status.default == "draft"

    def test_index(self, posts_document: SchemaDocument) -> None:
        assert [idx.columns for idx in posts_document.indexes] == [["status", "published_at"]]

    def test_relations(self, posts_document: SchemaDocument) -> None:
        relations = {r.name: r for r in posts_document.relations}
        assert set(relations) == {"user", "comments", "tags"}
        assert relations["user"].kind == "belongs_to"
        assert relations["comments"].kind == "has_many"
        assert relations["tags"].pivot_table == "post_tag"

    def test_source_name_and_mode(self, posts_document: SchemaDocument) -> None:
        assert posts_document.source_name == "posts"
        assert posts_document.table_name == "posts"
        assert posts_document.mode == "create"
        assert posts_document.api_version is None

    def test_assembly_is_idempotent(self, posts_inputs: pathlib.Path) -> None:
        first = assemble_schema("posts", posts_inputs)
        second = assemble_schema("posts", posts_inputs)
        assert first == second
        assert first.to_yaml() == second.to_yaml()

    def test_api_version_override(self, posts_inputs: pathlib.Path) -> None:
        assert assemble_schema("posts", posts_inputs, api_version="1").api_version == "v1"


# ===================================================================
# Composite-key assembly
# ===================================================================


class TestAssembleRooms:

    def test_composite_key_in_order(self, rooms_document: SchemaDocument) -> None:
        assert isinstance(rooms_document.primary_key, CompositeKey)
        assert rooms_document.key_columns == ["region", "facility_code", "room_number"]

    def test_table_meta_api_version(self, rooms_document: SchemaDocument) -> None:
        assert rooms_document.api_version == "v2"

    def test_boolean_default(self, rooms_document: SchemaDocument) -> None:
        column = rooms_document.get_column("is_active")
        assert column is not None and column.default is True

    def test_no_surrogate_in_addressable_columns(self, rooms_document: SchemaDocument) -> None:
        assert "id" not in rooms_document.addressable_columns

    def test_override_beats_table_meta(self, rooms_inputs: pathlib.Path) -> None:
        assert assemble_schema("rooms", rooms_inputs, api_version="v3").api_version == "v3"


# ===================================================================
# Failures
# ===================================================================


class TestAssembleErrors:

    def test_duplicate_column(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "tags", [{"name": "label", "type": "string"}, {"name": "label", "type": "text"}]
        )
        with pytest.raises(DuplicateColumnError):
            assemble_schema("tags", folder)

    def test_unknown_type(self, make_inputs: Any) -> None:
        folder = make_inputs("tags", [{"name": "label", "type": "geometry"}])
        with pytest.raises(UnknownColumnTypeError):
            assemble_schema("tags", folder)

    def test_dangling_key_column(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "rooms",
            [{"name": "region", "type": "string"}, {"name": "name", "type": "string"}],
            table={"primary_key": "region|room_number"},
        )
        with pytest.raises(DanglingPrimaryKeyColumnError) as exc_info:
            assemble_schema("rooms", folder)
        assert exc_info.value.missing == ["room_number"]

    def test_single_non_surrogate_key_rejected(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "rooms", [{"name": "code", "type": "string"}], table={"primary_key": "code"}
        )
        with pytest.raises(InvalidValueError):
            assemble_schema("rooms", folder)

    def test_composite_key_with_id_row_rejected(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "rooms",
            [
                {"name": "id", "type": "id"},
                {"name": "region", "type": "string"},
                {"name": "code", "type": "string"},
            ],
            table={"primary_key": "region|code"},
        )
        with pytest.raises(InvalidValueError):
            assemble_schema("rooms", folder)

    def test_nullable_key_column_rejected(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "rooms",
            [
                {"name": "region", "type": "string", "nullable": "true"},
                {"name": "code", "type": "string"},
            ],
            table={"primary_key": "region|code"},
        )
        with pytest.raises(InvalidValueError):
            assemble_schema("rooms", folder)

    def test_index_on_unknown_column(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "tags",
            [{"name": "label", "type": "string"}],
            indexes=[{"columns": "label|missing"}],
        )
        with pytest.raises(UnknownColumnReferenceError):
            assemble_schema("tags", folder)

    def test_single_column_index_rejected(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "tags", [{"name": "label", "type": "string"}], indexes=[{"columns": "label"}]
        )
        with pytest.raises(InvalidValueError):
            assemble_schema("tags", folder)

    def test_enum_without_values(self, make_inputs: Any) -> None:
        folder = make_inputs("tags", [{"name": "kind", "type": "enum"}])
        with pytest.raises(InvalidValueError):
            assemble_schema("tags", folder)

    def test_enum_default_outside_values(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "tags", [{"name": "kind", "type": "enum", "values": "a|b", "default": "c"}]
        )
        with pytest.raises(InvalidValueError):
            assemble_schema("tags", folder)

    def test_only_audit_columns(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "tags", [{"name": "id", "type": "id"}, {"name": "created_at", "type": "timestamp"}]
        )
        with pytest.raises(InvalidValueError):
            assemble_schema("tags", folder)

    def test_table_meta_with_two_rows(self, make_inputs: Any, input_root: pathlib.Path) -> None:
        folder = make_inputs("tags", [{"name": "label", "type": "string"}])
        (folder / "tags_table.csv").write_text("table_name\ntags\nlabels\n", encoding="utf-8")
        with pytest.raises(InvalidValueError):
            assemble_schema("tags", folder)

    def test_foreign_key_on_string_column(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "tags", [{"name": "owner", "type": "string", "foreign_key": "users"}]
        )
        with pytest.raises(InvalidValueError):
            assemble_schema("tags", folder)

    def test_pivot_on_has_many_rejected(self, make_inputs: Any) -> None:
        folder = make_inputs(
            "tags",
            [{"name": "label", "type": "string"}],
            relations=[{"kind": "has_many", "target_table": "posts", "pivot_table": "post_tag"}],
        )
        with pytest.raises(InvalidValueError):
            assemble_schema("tags", folder)

    def test_every_failure_is_a_schema_input_error(self, make_inputs: Any) -> None:
        folder = make_inputs("tags", [{"name": "label", "type": "geometry"}])
        with pytest.raises(SchemaInputError):
            assemble_schema("tags", folder)
        with pytest.raises(ValueError):
            assemble_schema("tags", folder)
