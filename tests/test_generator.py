"""
tests/test_generator.py
End-to-end tests for scaffoldgen.generator — inputs on disk to written
schema documents, artifact descriptors and manifest.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Callable, Dict

import pytest
import yaml

from scaffoldgen.errors import ConfigError
from scaffoldgen.exporters import MANIFEST_NAME
from scaffoldgen.generator import (
    FAILURE_GENERATION,
    FAILURE_INPUT,
    FAILURE_VALIDATION,
    GenerationReport,
    GenerationRequest,
    ScaffoldGenerator,
    build_config,
    load_config_file,
)
from scaffoldgen.models import GenerationConfig

MakeInputs = Callable[..., pathlib.Path]


def _load(path: pathlib.Path) -> Dict[str, Any]:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def _rules(descriptor: Dict[str, Any], field_name: str) -> Any:
    for entry in descriptor["fields"]:
        if entry["field"] == field_name:
            return entry["rules"]
    raise KeyError(field_name)


# ===================================================================
# Successful runs
# ===================================================================


class TestCreateRun:

    def test_surrogate_table_writes_everything(
        self, favorite_points_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        report = ScaffoldGenerator(config).generate("favorite_points")
        out = pathlib.Path(config.output_dir)

        assert report.success, report.summary()
        assert report.failure is None
        assert len(report.artifacts) == 12
        assert (pathlib.Path(config.schema_dir) / "favorite_points.yaml").is_file()
        assert (out / "app/Models/FavoritePoint.yaml").is_file()
        assert (out / "database/migrations/create_favorite_points_table.yaml").is_file()
        assert (out / "routes/api/favorite_points.yaml").is_file()

    def test_reserved_column_name_is_a_warning(
        self, favorite_points_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        report = ScaffoldGenerator(config).generate("favorite_points")
        out = pathlib.Path(config.output_dir)

        assert any("COLUMN_SHADOWS_QUERY_PARAM" in w for w in report.validation_warnings)
        store = _load(out / "app/Http/Requests/Api/FavoritePoint/StoreRequest.yaml")
        assert _rules(store, "sort_order") == ["required", "integer", "min:0"]
        index = _load(out / "app/Http/Requests/Api/FavoritePoint/IndexRequest.yaml")
        assert [f["field"] for f in index["fields"]].count("sort_order") == 1

    def test_manifest_lists_every_artifact(
        self, posts_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        report = ScaffoldGenerator(config).generate("posts")
        manifest = json.loads((pathlib.Path(config.output_dir) / MANIFEST_NAME).read_text())

        assert report.manifest is not None
        assert manifest["total_files"] == 12
        paths = {f["relative_path"] for f in manifest["files"]}
        assert paths == {a.path for a in report.artifacts}

    def test_loaded_files_reported(self, posts_inputs: pathlib.Path, config: GenerationConfig) -> None:
        outcome = ScaffoldGenerator(config).generate("posts").documents[0]
        assert outcome.loaded_files == [
            ("posts_columns.csv", "Columns"),
            ("posts_indexes.csv", "Indexes"),
            ("posts_relations.csv", "Relations"),
        ]
        assert outcome.mode == "create"
        assert outcome.schema_path is not None

    def test_schema_document_round_trips(
        self, posts_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        ScaffoldGenerator(config).generate("posts")
        data = _load(pathlib.Path(config.schema_dir) / "posts.yaml")
        assert data["table_name"] == "posts"
        assert data["soft_delete"] is True
        assert [c["name"] for c in data["columns"]][:2] == ["user_id", "title"]

    def test_rerun_is_identical(self, posts_inputs: pathlib.Path, config: GenerationConfig) -> None:
        generator = ScaffoldGenerator(config)
        first = generator.generate("posts")
        second = generator.generate("posts")
        assert first.manifest is not None and second.manifest is not None
        assert [f.sha256 for f in first.manifest.files] == [f.sha256 for f in second.manifest.files]

    def test_several_names_in_one_run(
        self,
        posts_inputs: pathlib.Path,
        rooms_inputs: pathlib.Path,
        config: GenerationConfig,
    ) -> None:
        report = ScaffoldGenerator(config).run(
            [GenerationRequest("posts"), GenerationRequest("rooms")]
        )
        assert report.success
        assert [d.table_name for d in report.documents] == ["posts", "rooms"]
        assert len(report.artifacts) == 24

    def test_summary(self, posts_inputs: pathlib.Path, config: GenerationConfig) -> None:
        text = ScaffoldGenerator(config).generate("posts").summary()
        assert "SUCCESS" in text
        assert "Export" in text


class TestCompositeRun:

    def test_manual_review_reported(self, rooms_inputs: pathlib.Path, config: GenerationConfig) -> None:
        report = ScaffoldGenerator(config).generate("rooms")
        outcome = report.documents[0]

        assert report.success
        assert outcome.api_version == "v2"
        assert outcome.manual_review == [
            "UpdateRequest.region", "UpdateRequest.facility_code", "UpdateRequest.room_number",
        ]
        assert any("UNSUPPORTED_AUTO_EXCLUSION" in w for w in report.validation_warnings)

    def test_versioned_paths(self, rooms_inputs: pathlib.Path, config: GenerationConfig) -> None:
        ScaffoldGenerator(config).generate("rooms")
        out = pathlib.Path(config.output_dir)
        update = _load(out / "app/Http/Requests/Api/V2/Room/UpdateRequest.yaml")
        flagged = {f["field"]: f["manual_review"] for f in update["fields"]}
        assert flagged["region"] is True
        assert flagged["name"] is False
        routes = _load(out / "routes/api/v2/rooms.yaml")
        assert routes["registration"] == "explicit"

    def test_explicit_version_wins(self, rooms_inputs: pathlib.Path, config: GenerationConfig) -> None:
        report = ScaffoldGenerator(config).generate("rooms", api_version="v1")
        assert report.documents[0].api_version == "v1"

    def test_config_default_version(self, posts_inputs: pathlib.Path, config: GenerationConfig) -> None:
        config.default_api_version = "v3"
        report = ScaffoldGenerator(config).generate("posts")
        assert report.documents[0].api_version == "v3"
        assert any(a.path.startswith("app/DTOs/V3/") for a in report.artifacts)


class TestAlterRun:

    def test_additive_alter(self, add_view_count_inputs: pathlib.Path, config: GenerationConfig) -> None:
        report = ScaffoldGenerator(config).generate("posts_add_view_count", alter=True)
        out = pathlib.Path(config.output_dir)

        assert report.success
        assert [a.kind for a in report.artifacts] == [
            "migration", "store_request", "update_request", "index_request",
        ]
        migration = _load(out / "database/migrations/posts_add_view_count.yaml")
        assert migration["operation"] == "alter"
        assert [s["action"] for s in migration["down"]] == ["drop_index", "drop_column"]

    def test_change_only_alter(self, body_nullable_inputs: pathlib.Path, config: GenerationConfig) -> None:
        report = ScaffoldGenerator(config).generate("posts_make_body_nullable", alter=True)
        out = pathlib.Path(config.output_dir)

        assert report.success
        expected = ["sometimes", "nullable", "string", "max:65535"]
        store = _load(out / "app/Http/Requests/Api/Post/posts_make_body_nullable/StoreRequest.yaml")
        update = _load(out / "app/Http/Requests/Api/Post/posts_make_body_nullable/UpdateRequest.yaml")
        assert store["patch"] is True
        assert _rules(store, "body") == expected
        assert _rules(update, "body") == expected
        migration = _load(out / "database/migrations/posts_make_body_nullable.yaml")
        assert migration["columns"][0]["operation"] == "change"
        assert migration["down"] == []

    def test_alter_leaves_create_validators_intact(
        self,
        posts_inputs: pathlib.Path,
        body_nullable_inputs: pathlib.Path,
        config: GenerationConfig,
    ) -> None:
        generator = ScaffoldGenerator(config)
        assert generator.generate("posts").success
        store_path = pathlib.Path(config.output_dir) / "app/Http/Requests/Api/Post/StoreRequest.yaml"
        before = store_path.read_text(encoding="utf-8")

        assert generator.generate("posts_make_body_nullable", alter=True).success
        assert store_path.read_text(encoding="utf-8") == before
        assert [f["field"] for f in _load(store_path)["fields"]] == [
            "user_id", "title", "slug", "body", "status", "published_at",
        ]

    def test_change_column_without_alter_flag_fails(
        self, body_nullable_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        report = ScaffoldGenerator(config).generate("posts_make_body_nullable")
        assert report.failure == FAILURE_VALIDATION


# ===================================================================
# Modes
# ===================================================================


class TestModes:

    def test_validate_only_writes_nothing(
        self, posts_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        report = ScaffoldGenerator(config, validate_only=True).generate("posts")
        assert report.success
        assert report.artifacts == []
        assert not pathlib.Path(config.schema_dir).exists()
        assert not pathlib.Path(config.output_dir).exists()

    def test_dry_run_derives_but_writes_nothing(
        self, posts_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        report = ScaffoldGenerator(config, dry_run=True).generate("posts")
        assert report.success
        assert report.dry_run
        assert len(report.artifacts) == 12
        assert report.manifest is None
        assert not pathlib.Path(config.output_dir).exists()
        assert "dry run" in report.summary()

    def test_schema_only(self, posts_inputs: pathlib.Path, config: GenerationConfig) -> None:
        config.write_descriptors = False
        report = ScaffoldGenerator(config).generate("posts")
        assert report.success
        assert (pathlib.Path(config.schema_dir) / "posts.yaml").is_file()
        assert not pathlib.Path(config.output_dir).exists()

    def test_fail_on_warnings(
        self, favorite_points_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        report = ScaffoldGenerator(config, fail_on_warnings=True).generate("favorite_points")
        assert report.failure == FAILURE_VALIDATION
        assert [e["code"] for e in report.errors] == ["COLUMN_SHADOWS_QUERY_PARAM"]
        assert not pathlib.Path(config.output_dir).exists()


# ===================================================================
# Failures
# ===================================================================


class TestFailures:

    def test_missing_input_folder(self, input_root: pathlib.Path, config: GenerationConfig) -> None:
        report = ScaffoldGenerator(config).generate("orders")
        assert not report.success
        assert report.failure == FAILURE_INPUT
        assert report.errors[0]["code"] == "INPUT_NOT_FOUND"
        assert report.documents == []

    def test_missing_columns_file(self, input_root: pathlib.Path, config: GenerationConfig) -> None:
        (input_root / "orders").mkdir()
        report = ScaffoldGenerator(config).generate("orders")
        assert report.failure == FAILURE_INPUT
        assert report.errors[0]["code"] == "MISSING_REQUIRED_INPUT"

    def test_unknown_column_type(self, make_inputs: MakeInputs, config: GenerationConfig) -> None:
        make_inputs("orders", [{"name": "total", "type": "money"}])
        report = ScaffoldGenerator(config).generate("orders")
        assert report.failure == FAILURE_VALIDATION
        assert report.errors[0]["code"] == "UNKNOWN_COLUMN_TYPE"

    def test_lint_error_blocks_writes(self, make_inputs: MakeInputs, config: GenerationConfig) -> None:
        make_inputs(
            "orders",
            [{"name": "total", "type": "integer"}, {"name": "total_from", "type": "string"}],
        )
        report = ScaffoldGenerator(config).generate("orders")
        assert report.failure == FAILURE_VALIDATION
        assert [e["code"] for e in report.errors] == ["COLUMN_SHADOWS_RANGE_FILTER"]
        assert not pathlib.Path(config.schema_dir).exists()

    def test_duplicate_documents(self, posts_inputs: pathlib.Path, config: GenerationConfig) -> None:
        report = ScaffoldGenerator(config).run([GenerationRequest("posts"), GenerationRequest("posts")])
        assert report.failure == FAILURE_VALIDATION
        assert report.errors[0]["code"] == "DUPLICATE_DOCUMENT"
        assert not pathlib.Path(config.output_dir).exists()

    def test_undecodable_columns_file(
        self, posts_inputs: pathlib.Path, config: GenerationConfig
    ) -> None:
        (posts_inputs / "posts_columns.csv").write_bytes(b"name,type\ntitl\xff,string\n")
        report = ScaffoldGenerator(config).generate("posts")
        assert report.failure == FAILURE_VALIDATION
        assert report.errors[0]["code"] == "UNREADABLE_INPUT"
        assert "posts_columns.csv:2" in report.errors[0]["message"]

    def test_conflicting_artifact_paths(
        self, rooms_inputs: pathlib.Path, make_inputs: MakeInputs, config: GenerationConfig
    ) -> None:
        make_inputs(
            "rooms_v1",
            [
                {"name": "region", "type": "string", "length": "50"},
                {"name": "facility_code", "type": "string", "length": "10"},
                {"name": "room_number", "type": "string", "length": "10"},
            ],
            table={
                "table_name": "rooms",
                "primary_key": "region|facility_code|room_number",
                "api_version": "v1",
            },
        )
        report = ScaffoldGenerator(config).run(
            [GenerationRequest("rooms"), GenerationRequest("rooms_v1")]
        )
        assert report.failure == FAILURE_GENERATION
        assert report.errors[0]["code"] == "ARTIFACT_PATH_CONFLICT"
        assert "rooms_v1" in report.errors[0]["message"]
        assert not pathlib.Path(config.output_dir).exists()

    def test_failed_step_in_summary(self, input_root: pathlib.Path, config: GenerationConfig) -> None:
        report: GenerationReport = ScaffoldGenerator(config).generate("orders")
        assert report.step_metrics[-1].step_name == "Assemble"
        assert not report.step_metrics[-1].success
        assert "FAILED (input)" in report.summary()


# ===================================================================
# Configuration loading
# ===================================================================


class TestConfigLoading:

    def test_nested_config_key(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "scaffold.yaml"
        path.write_text("config:\n  route_prefix: /internal\n  max_page_size: 50\n")
        assert load_config_file(path) == {"route_prefix": "/internal", "max_page_size": 50}

    def test_top_level_mapping(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "scaffold.yaml"
        path.write_text("default_page_size: 20\n")
        assert build_config(path).default_page_size == 20

    def test_empty_file(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "scaffold.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_overrides_win_and_none_is_ignored(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "scaffold.yaml"
        path.write_text("output_dir: from-file\nschema_dir: from-file\n")
        config = build_config(path, {"output_dir": "from-flag", "schema_dir": None})
        assert config.output_dir == "from-flag"
        assert config.schema_dir == "from-file"

    @pytest.mark.parametrize(
        "text",
        ["- just\n- a list\n", "route_prefix: [unclosed\n", "max_page_size: 0\n", "unknown_key: 1\n"],
    )
    def test_bad_files(self, tmp_path: pathlib.Path, text: str) -> None:
        path = tmp_path / "scaffold.yaml"
        path.write_text(text)
        with pytest.raises(ConfigError):
            build_config(path)

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigError):
            load_config_file(tmp_path / "missing.yaml")
