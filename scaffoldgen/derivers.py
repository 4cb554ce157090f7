# File: scaffoldgen/derivers.py
"""
scaffoldgen - Artifact Derivers
===============================
Pure functions ``derive_<kind>(document, names) -> Descriptor``, one per
artifact kind, plus ``derive_all`` which returns every descriptor that
applies to the document's generation mode.

Rule derivation is table-driven: every ``ColumnType`` has an entry in each
per-type table below.

Validation rule order is always: presence, type, ``unique``, ``exists``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from scaffoldgen.descriptors import (
    GUARD_COLUMN_EXISTS,
    GUARD_INDEX_EXISTS,
    GUARD_TABLE_EXISTS,
    LOOKUP_COMPOSITE_FINDER,
    LIST_QUERY_PARAMS,
    LOOKUP_ROUTE_BINDING,
    ArtifactDescriptor,
    ArtifactKind,
    ControllerAction,
    ControllerDescriptor,
    DtoDescriptor,
    DtoField,
    FactoryDescriptor,
    FactoryField,
    FieldRules,
    MigrationColumn,
    MigrationDescriptor,
    MigrationIndex,
    MigrationStep,
    ModelDescriptor,
    RelationAccessor,
    ResourceDescriptor,
    ResourceField,
    RouteEntry,
    RoutesDescriptor,
    Scenario,
    ScenarioSuiteDescriptor,
    SearchFilter,
    ServiceDescriptor,
    ValidatorDescriptor,
)
from scaffoldgen.models import (
    SURROGATE_KEY_COLUMN,
    TIMESTAMP_COLUMNS,
    ColumnSpec,
    ColumnType,
    GenerationConfig,
    GenerationMode,
    SchemaDocument,
)
from scaffoldgen.naming import NameSet, names_for
from scaffoldgen.utils import to_pascal_case, to_singular

logger: logging.Logger = logging.getLogger("scaffoldgen.derivers")

MANUAL_EXCLUSION_NOTE: str = (
    "Uniqueness self-exclusion is not derivable for composite keys; "
    "exclude the current row manually."
)

# ---------------------------------------------------------------------------
# Per-type tables (every ColumnType must appear in each)
# ---------------------------------------------------------------------------


def _string_rules(column: ColumnSpec) -> List[str]:
    return ["string", f"max:{column.effective_max_length}"]


def _integer_rules(column: ColumnSpec) -> List[str]:
    return ["integer", "min:0"] if column.unsigned else ["integer"]


_TYPE_RULES: Dict[str, Callable[[ColumnSpec], List[str]]] = {
    ColumnType.STRING.value: _string_rules,
    ColumnType.TEXT.value: _string_rules,
    ColumnType.INTEGER.value: _integer_rules,
    ColumnType.BOOLEAN.value: lambda c: ["boolean"],
    ColumnType.ENUM.value: lambda c: [f"in:{','.join(c.enum_values)}"],
    ColumnType.DATE.value: lambda c: ["date"],
    ColumnType.DATETIME.value: lambda c: ["date"],
}

_MODEL_CASTS: Dict[str, Optional[str]] = {
    ColumnType.STRING.value: None,
    ColumnType.TEXT.value: None,
    ColumnType.INTEGER.value: "integer",
    ColumnType.BOOLEAN.value: "boolean",
    ColumnType.ENUM.value: None,
    ColumnType.DATE.value: "date",
    ColumnType.DATETIME.value: "datetime",
}

# column type → (DTO type hint, zero value)
_DTO_TYPES: Dict[str, Tuple[str, Union[bool, int, str]]] = {
    ColumnType.STRING.value: ("string", ""),
    ColumnType.TEXT.value: ("string", ""),
    ColumnType.INTEGER.value: ("int", 0),
    ColumnType.BOOLEAN.value: ("bool", False),
    ColumnType.ENUM.value: ("string", ""),
    ColumnType.DATE.value: ("string", ""),
    ColumnType.DATETIME.value: ("string", ""),
}

# column type → (exact match filter, range filter pair); text is keyword-only.
_FILTER_SHAPES: Dict[str, Tuple[bool, bool]] = {
    ColumnType.STRING.value: (True, False),
    ColumnType.TEXT.value: (False, False),
    ColumnType.INTEGER.value: (True, True),
    ColumnType.BOOLEAN.value: (True, False),
    ColumnType.ENUM.value: (True, False),
    ColumnType.DATE.value: (True, True),
    ColumnType.DATETIME.value: (True, True),
}

# column type → (faker generator, args)
_FACTORY_GENERATORS: Dict[str, Tuple[str, List[Any]]] = {
    ColumnType.STRING.value: ("word", []),
    ColumnType.TEXT.value: ("paragraph", []),
    ColumnType.INTEGER.value: ("numberBetween", [1, 100]),
    ColumnType.BOOLEAN.value: ("boolean", []),
    ColumnType.ENUM.value: ("randomElement", []),
    ColumnType.DATE.value: ("date", []),
    ColumnType.DATETIME.value: ("dateTime", []),
}

# String column name → faker generator.
_FACTORY_NAME_HINTS: Tuple[Tuple[str, str], ...] = (
    ("email", "safeEmail"),
    ("slug", "slug"),
    ("title", "sentence"),
    ("url", "url"),
    ("phone", "phoneNumber"),
    ("address", "address"),
    ("city", "city"),
    ("country", "country"),
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _type_key(column: ColumnSpec) -> str:
    return ColumnType(column.column_type).value


def _is_alter(document: SchemaDocument) -> bool:
    return document.mode == GenerationMode.ALTER


def _settings(config: Optional[GenerationConfig]) -> GenerationConfig:
    return config if config is not None else GenerationConfig()


def _related_model(table_name: str) -> str:
    return to_pascal_case(to_singular(table_name))


def _exists_rule(column: ColumnSpec) -> List[str]:
    fk = column.foreign_key
    return [f"exists:{fk.target_table},{fk.target_column}"] if fk else []


def _is_unique(document: SchemaDocument, column: ColumnSpec) -> bool:
    """Composite-key columns are each validated as unique, like declared unique columns."""
    return column.unique or (document.is_composite and column.name in document.key_columns)


def _lookup(document: SchemaDocument) -> str:
    return LOOKUP_COMPOSITE_FINDER if document.is_composite else LOOKUP_ROUTE_BINDING


def _default_sort_column(document: SchemaDocument) -> str:
    if document.timestamps:
        return TIMESTAMP_COLUMNS[0]
    if not document.is_composite:
        return SURROGATE_KEY_COLUMN
    return document.key_columns[0]


def _keyword_columns(document: SchemaDocument) -> List[str]:
    return [c.name for c in document.columns if c.is_textual]


# ---------------------------------------------------------------------------
# Migration
# ---------------------------------------------------------------------------


def _migration_column(column: ColumnSpec, *, guard: Optional[str] = None) -> MigrationColumn:
    return MigrationColumn(
        name=column.name,
        column_type=column.column_type,
        operation="change" if column.change else "add",
        length=column.effective_max_length if column.column_type == ColumnType.STRING else None,
        enum_values=column.enum_values,
        nullable=column.nullable,
        unique=column.unique,
        unsigned=column.unsigned,
        default=column.default,
        comment=column.comment,
        foreign_key=column.foreign_key,
        guard=guard,
    )


def derive_migration(document: SchemaDocument, names: NameSet) -> MigrationDescriptor:
    """
    Create mode: the full table definition, dropped by ``down``.
    Alter mode: additive operations only, each guarded so re-running the
    migration is harmless; ``down`` drops what was added.
    """
    table: str = document.table_name
    key_kind: str = "composite" if document.is_composite else "surrogate"

    if not _is_alter(document):
        return MigrationDescriptor(
            identifier=f"create_{table}_table",
            location=names.location_of(ArtifactKind.MIGRATION),
            table_name=table,
            operation="create",
            key_kind=key_kind,
            primary_key=document.key_columns,
            guard=GUARD_TABLE_EXISTS if document.is_composite else None,
            columns=[_migration_column(c) for c in document.columns],
            indexes=[
                MigrationIndex(name=idx.resolved_name(table), columns=idx.columns)
                for idx in document.indexes
            ],
            timestamps=document.timestamps,
            soft_deletes=document.soft_delete,
            comment=document.comment,
            down=[MigrationStep(action="drop_table", target=table)],
        )

    identifier: str = (
        document.source_name
        if document.source_name != table
        else f"alter_{table}_table"
    )
    columns: List[MigrationColumn] = [
        _migration_column(c, guard=None if c.change else GUARD_COLUMN_EXISTS)
        for c in document.columns
    ]
    indexes: List[MigrationIndex] = [
        MigrationIndex(name=idx.resolved_name(table), columns=idx.columns, guard=GUARD_INDEX_EXISTS)
        for idx in document.indexes
    ]
    down: List[MigrationStep] = [
        MigrationStep(action="drop_index", target=idx.name) for idx in reversed(indexes)
    ]
    down.extend(
        MigrationStep(action="drop_column", target=col.name)
        for col in reversed(columns)
        if col.operation == "add"
    )

    return MigrationDescriptor(
        identifier=identifier,
        location=f"database/migrations/{identifier}",
        table_name=table,
        operation="alter",
        key_kind=key_kind,
        primary_key=document.key_columns,
        columns=columns,
        indexes=indexes,
        down=down,
    )


# ---------------------------------------------------------------------------
# Request validators
# ---------------------------------------------------------------------------


def _store_presence(column: ColumnSpec, alter: bool) -> List[str]:
    if column.nullable:
        return ["sometimes", "nullable"] if alter else ["nullable"]
    return ["sometimes", "filled"] if alter else ["required"]


def _update_presence(column: ColumnSpec) -> List[str]:
    return ["sometimes", "nullable"] if column.nullable else ["sometimes", "filled"]


def _validator_location(document: SchemaDocument, names: NameSet, kind: ArtifactKind) -> str:
    """Alter-mode validators sit beside the full ones, under the alter source name."""
    location: str = names.location_of(kind)
    if not _is_alter(document):
        return location
    head, _, class_name = location.rpartition("/")
    return f"{head}/{document.source_name}/{class_name}"


def derive_store_validator(document: SchemaDocument, names: NameSet) -> ValidatorDescriptor:
    alter: bool = _is_alter(document)
    fields: List[FieldRules] = []
    for column in document.columns:
        rules: List[str] = _store_presence(column, alter)
        rules += _TYPE_RULES[_type_key(column)](column)
        if _is_unique(document, column):
            rules.append(f"unique:{document.table_name},{column.name}")
        rules += _exists_rule(column)
        fields.append(FieldRules(field=column.name, rules=rules))

    return ValidatorDescriptor(
        kind=ArtifactKind.STORE_REQUEST,
        identifier=names.store_request_class,
        location=_validator_location(document, names, ArtifactKind.STORE_REQUEST),
        namespace=names.request_namespace,
        fields=fields,
        patch=_is_alter(document),
    )


def derive_update_validator(document: SchemaDocument, names: NameSet) -> ValidatorDescriptor:
    """
    Every field is optional-if-present.  Unique columns exclude the row
    being updated; with a composite key that exclusion cannot be expressed
    through one route parameter, so the rule is kept without it and the
    field is flagged for manual review.  Key columns of a composite key
    count as unique columns here.
    """
    fields: List[FieldRules] = []
    for column in document.columns:
        rules: List[str] = _update_presence(column)
        rules += _TYPE_RULES[_type_key(column)](column)
        manual_review: bool = False
        if _is_unique(document, column):
            if document.is_composite:
                rules.append(f"unique:{document.table_name},{column.name}")
                manual_review = True
            else:
                param: str = names.route_parameters[0]
                rules.append(f"unique:{document.table_name},{column.name},{{{param}}}")
        rules += _exists_rule(column)
        fields.append(
            FieldRules(
                field=column.name,
                rules=rules,
                manual_review=manual_review,
                note=MANUAL_EXCLUSION_NOTE if manual_review else None,
            )
        )

    return ValidatorDescriptor(
        kind=ArtifactKind.UPDATE_REQUEST,
        identifier=names.update_request_class,
        location=_validator_location(document, names, ArtifactKind.UPDATE_REQUEST),
        namespace=names.request_namespace,
        fields=fields,
        patch=_is_alter(document),
    )


def _filter_fields(column: ColumnSpec) -> List[FieldRules]:
    """List-query parameters contributed by one column."""
    exact, ranged = _FILTER_SHAPES[_type_key(column)]
    if column.name in LIST_QUERY_PARAMS:
        return []
    if not exact:
        return []

    if column.foreign_key is not None:
        return [FieldRules(field=column.name, rules=["nullable", "integer"] + _exists_rule(column))]

    base: List[str] = ["nullable"] + (
        ["integer"] if column.is_numeric else _TYPE_RULES[_type_key(column)](column)
    )
    fields: List[FieldRules] = [FieldRules(field=column.name, rules=base)]
    if ranged:
        lower: str = f"{column.name}_from"
        bound: str = f"gte:{lower}" if column.is_numeric else f"after_or_equal:{lower}"
        fields.append(FieldRules(field=lower, rules=list(base)))
        fields.append(FieldRules(field=f"{column.name}_to", rules=base + [bound]))
    return fields


def sortable_columns(document: SchemaDocument) -> List[str]:
    columns: List[str] = []
    if not document.is_composite:
        columns.append(SURROGATE_KEY_COLUMN)
    if document.timestamps:
        columns.append(TIMESTAMP_COLUMNS[0])
    columns.extend(c.name for c in document.columns if c.column_type != ColumnType.TEXT)
    return columns


def derive_index_validator(
    document: SchemaDocument,
    names: NameSet,
    *,
    config: Optional[GenerationConfig] = None,
) -> ValidatorDescriptor:
    settings: GenerationConfig = _settings(config)
    fields: List[FieldRules] = [
        FieldRules(field="keyword", rules=["nullable", "string", f"max:{settings.keyword_max_length}"])
    ]
    for column in document.columns:
        fields.extend(_filter_fields(column))
    fields.extend(
        [
            FieldRules(field="sort_by", rules=["nullable", f"in:{','.join(sortable_columns(document))}"]),
            FieldRules(field="sort_order", rules=["nullable", "in:asc,desc"]),
            FieldRules(
                field="per_page",
                rules=["nullable", "integer", "min:1", f"max:{settings.max_page_size}"],
            ),
        ]
    )

    return ValidatorDescriptor(
        kind=ArtifactKind.INDEX_REQUEST,
        identifier=names.index_request_class,
        location=_validator_location(document, names, ArtifactKind.INDEX_REQUEST),
        namespace=names.request_namespace,
        fields=fields,
        patch=_is_alter(document),
    )


# ---------------------------------------------------------------------------
# Model / DTO / resource
# ---------------------------------------------------------------------------


def derive_model(document: SchemaDocument, names: NameSet) -> ModelDescriptor:
    casts: Dict[str, str] = {}
    for column in document.columns:
        cast: Optional[str] = _MODEL_CASTS[_type_key(column)]
        if cast is not None:
            casts[column.name] = cast

    relations: List[RelationAccessor] = [
        RelationAccessor(
            name=rel.name,
            kind=rel.kind,
            related_model=_related_model(rel.target_table),
            target_table=rel.target_table,
            pivot_table=rel.pivot_table,
        )
        for rel in document.relations
    ]

    return ModelDescriptor(
        identifier=names.model_class,
        location=names.location_of(ArtifactKind.MODEL),
        table_name=document.table_name,
        primary_key=document.key_columns,
        incrementing=not document.is_composite,
        fillable=document.column_names,
        casts=casts,
        timestamps=document.timestamps,
        soft_deletes=document.soft_delete,
        relations=relations,
    )


def derive_dto(document: SchemaDocument, names: NameSet) -> DtoDescriptor:
    fields: List[DtoField] = []
    for column in document.columns:
        type_hint, zero = _DTO_TYPES[_type_key(column)]
        fields.append(
            DtoField(
                name=column.name,
                type_hint=type_hint,
                nullable=column.nullable,
                default=None if column.nullable else zero,
            )
        )

    return DtoDescriptor(
        identifier=names.dto_class,
        location=names.location_of(ArtifactKind.DTO),
        fields=fields,
        create_payload=document.column_names,
        update_payload=document.column_names,
    )


def derive_resource(document: SchemaDocument, names: NameSet) -> ResourceDescriptor:
    fields: List[ResourceField] = []
    if not document.is_composite:
        fields.append(ResourceField(name=SURROGATE_KEY_COLUMN))
    fields.extend(ResourceField(name=c.name) for c in document.columns)
    if document.timestamps:
        fields.extend(ResourceField(name=ts, format="iso8601") for ts in TIMESTAMP_COLUMNS)

    return ResourceDescriptor(
        identifier=names.resource_class,
        location=names.location_of(ArtifactKind.RESOURCE),
        model_class=names.model_class,
        fields=fields,
    )


# ---------------------------------------------------------------------------
# Service / controller / routes
# ---------------------------------------------------------------------------


def derive_service(
    document: SchemaDocument,
    names: NameSet,
    *,
    config: Optional[GenerationConfig] = None,
) -> ServiceDescriptor:
    """Search filters mirror the list-query validator, minus paging/sorting."""
    settings: GenerationConfig = _settings(config)
    filters: List[SearchFilter] = []
    for column in document.columns:
        for entry in _filter_fields(column):
            if entry.field.endswith("_from") and entry.field != column.name:
                operator: str = ">="
            elif entry.field.endswith("_to") and entry.field != column.name:
                operator = "<="
            else:
                operator = "="
            filters.append(SearchFilter(param=entry.field, column=column.name, operator=operator))

    lookup: str = _lookup(document)
    find_operation: str = lookup if document.is_composite else "find"

    return ServiceDescriptor(
        identifier=names.service_class,
        location=names.location_of(ArtifactKind.SERVICE),
        model_class=names.model_class,
        dto_class=names.dto_class,
        keyword_columns=_keyword_columns(document),
        filters=filters,
        default_sort_by=_default_sort_column(document),
        default_sort_order=settings.default_sort_order,
        default_per_page=settings.default_page_size,
        lookup=lookup,
        key_columns=document.key_columns,
        operations=["search", find_operation, "create", "update", "delete"],
    )


# (action, method, on item?, request attr on NameSet, success status)
_CRUD_ACTIONS: Tuple[Tuple[str, str, bool, Optional[str], int], ...] = (
    ("index", "GET", False, "index_request_class", 200),
    ("store", "POST", False, "store_request_class", 201),
    ("show", "GET", True, None, 200),
    ("update", "PUT", True, "update_request_class", 200),
    ("destroy", "DELETE", True, None, 204),
)


def derive_controller(document: SchemaDocument, names: NameSet) -> ControllerDescriptor:
    actions: List[ControllerAction] = [
        ControllerAction(
            name=action,
            method=method,
            path=names.item_path if on_item else names.collection_path,
            request_class=getattr(names, request_attr) if request_attr else None,
            success_status=status,
        )
        for action, method, on_item, request_attr, status in _CRUD_ACTIONS
    ]
    return ControllerDescriptor(
        identifier=names.controller_class,
        location=names.location_of(ArtifactKind.CONTROLLER),
        namespace=names.controller_namespace,
        service_class=names.service_class,
        resource_class=names.resource_class,
        lookup=_lookup(document),
        route_parameters=list(names.route_parameters),
        actions=actions,
    )


def derive_routes(document: SchemaDocument, names: NameSet) -> RoutesDescriptor:
    """
    Surrogate keys register as one resource (framework-native binding);
    composite keys register each route explicitly with one path parameter
    per key column.
    """
    routes: List[RouteEntry] = [
        RouteEntry(
            method=method,
            path=names.item_path if on_item else names.collection_path,
            action=action,
            name=f"{names.route_segment}.{action}",
        )
        for action, method, on_item, _, _ in _CRUD_ACTIONS
    ]
    return RoutesDescriptor(
        identifier=names.route_segment,
        location=names.location_of(ArtifactKind.ROUTES),
        registration="explicit" if document.is_composite else "resource",
        controller_class=names.controller_class,
        prefix=names.route_prefix,
        collection=names.route_segment,
        parameters=list(names.route_parameters),
        routes=routes,
    )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def _factory_field(column: ColumnSpec) -> FactoryField:
    if column.foreign_key is not None:
        return FactoryField(
            name=column.name,
            generator="parentFactory",
            args=[_related_model(column.foreign_key.target_table)],
        )

    generator, args = _FACTORY_GENERATORS[_type_key(column)]
    if column.column_type == ColumnType.ENUM:
        args = list(column.enum_values)
    elif column.column_type == ColumnType.STRING:
        if column.name == "name" or column.name.endswith("_name"):
            generator = "name"
        for hint, hinted in _FACTORY_NAME_HINTS:
            if hint in column.name:
                generator = hinted
                break

    return FactoryField(
        name=column.name,
        generator=generator,
        args=list(args),
        unique=column.unique,
    )


def derive_factory(document: SchemaDocument, names: NameSet) -> FactoryDescriptor:
    return FactoryDescriptor(
        identifier=names.factory_class,
        location=names.location_of(ArtifactKind.FACTORY),
        model_class=names.model_class,
        fields=[_factory_field(c) for c in document.columns],
    )


# ---------------------------------------------------------------------------
# Test scenarios
# ---------------------------------------------------------------------------


def _invalid_enum_value(values: List[str]) -> str:
    candidate: str = "invalid_value"
    while candidate in values:
        candidate += "_x"
    return candidate


def derive_test_scenarios(
    document: SchemaDocument,
    names: NameSet,
    *,
    config: Optional[GenerationConfig] = None,
) -> ScenarioSuiteDescriptor:
    """
    Feature, validation, search and DTO-default scenarios.  Expected
    outcomes come from the same column properties the validators use.
    """
    collection: str = names.collection_path
    item: str = names.item_path
    scenarios: List[Scenario] = [
        Scenario(name="index_returns_paginated_list", category="feature", method="GET",
                 path=collection, expected_status=200, expectation="paginated data"),
        Scenario(name="show_returns_item", category="feature", method="GET",
                 path=item, expected_status=200, expectation="single resource"),
        Scenario(name="store_creates_item", category="feature", method="POST",
                 path=collection, expected_status=201, expectation="created resource"),
        Scenario(name="update_modifies_item", category="feature", method="PUT",
                 path=item, expected_status=200, expectation="updated resource"),
        Scenario(name="destroy_removes_item", category="feature", method="DELETE",
                 path=item, expected_status=204,
                 expectation="soft deleted" if document.soft_delete else "row deleted"),
        Scenario(name="show_missing_item_returns_not_found", category="feature", method="GET",
                 path=item, expected_status=404, expectation="not found"),
    ]

    for column in document.columns:
        if column.nullable:
            scenarios.append(
                Scenario(name=f"store_accepts_null_{column.name}", category="validation",
                         method="POST", path=collection, field=column.name, value=None,
                         expected_status=201, expectation="null accepted")
            )
        else:
            scenarios.append(
                Scenario(name=f"store_requires_{column.name}", category="validation",
                         method="POST", path=collection, field=column.name,
                         expected_status=422, expectation="validation error")
            )
        if column.column_type == ColumnType.ENUM:
            scenarios.append(
                Scenario(name=f"store_rejects_invalid_{column.name}", category="validation",
                         method="POST", path=collection, field=column.name,
                         value=_invalid_enum_value(column.enum_values),
                         expected_status=422, expectation="validation error")
            )
        if _is_unique(document, column):
            scenarios.append(
                Scenario(name=f"store_rejects_duplicate_{column.name}", category="validation",
                         method="POST", path=collection, field=column.name,
                         expected_status=422, expectation="validation error")
            )
        if column.foreign_key is not None:
            scenarios.append(
                Scenario(name=f"store_rejects_unknown_{column.name}", category="validation",
                         method="POST", path=collection, field=column.name, value=0,
                         expected_status=422, expectation="validation error")
            )

    index_fields: List[str] = derive_index_validator(document, names, config=config).field_names
    for param in index_fields:
        scenarios.append(
            Scenario(name=f"search_by_{param}", category="search", method="GET",
                     path=collection, field=param, expected_status=200,
                     expectation="filtered list")
        )

    for dto_field in derive_dto(document, names).fields:
        scenarios.append(
            Scenario(name=f"dto_default_{dto_field.name}", category="dto",
                     field=dto_field.name, value=dto_field.default,
                     expectation="default value")
        )

    return ScenarioSuiteDescriptor(
        identifier=f"{names.entity}ApiTest",
        location=names.location_of(ArtifactKind.TESTS),
        scenarios=scenarios,
    )


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

_ALTER_KINDS: Tuple[str, ...] = (
    ArtifactKind.MIGRATION.value,
    ArtifactKind.STORE_REQUEST.value,
    ArtifactKind.UPDATE_REQUEST.value,
    ArtifactKind.INDEX_REQUEST.value,
)


def derive_all(
    document: SchemaDocument,
    names: Optional[NameSet] = None,
    *,
    config: Optional[GenerationConfig] = None,
) -> List[ArtifactDescriptor]:
    """
    Derive every descriptor applicable to ``document.mode``.

    Create: all artifact kinds.  Alter: migration plus the three request
    validators.  The result is ordered by artifact kind.
    """
    settings: GenerationConfig = _settings(config)
    if names is None:
        names = names_for(document, route_prefix=settings.route_prefix)

    derivers: Dict[str, Callable[[], ArtifactDescriptor]] = {
        ArtifactKind.MIGRATION.value: lambda: derive_migration(document, names),
        ArtifactKind.MODEL.value: lambda: derive_model(document, names),
        ArtifactKind.DTO.value: lambda: derive_dto(document, names),
        ArtifactKind.STORE_REQUEST.value: lambda: derive_store_validator(document, names),
        ArtifactKind.UPDATE_REQUEST.value: lambda: derive_update_validator(document, names),
        ArtifactKind.INDEX_REQUEST.value: lambda: derive_index_validator(
            document, names, config=settings
        ),
        ArtifactKind.RESOURCE.value: lambda: derive_resource(document, names),
        ArtifactKind.SERVICE.value: lambda: derive_service(document, names, config=settings),
        ArtifactKind.CONTROLLER.value: lambda: derive_controller(document, names),
        ArtifactKind.ROUTES.value: lambda: derive_routes(document, names),
        ArtifactKind.FACTORY.value: lambda: derive_factory(document, names),
        ArtifactKind.TESTS.value: lambda: derive_test_scenarios(document, names, config=settings),
    }

    kinds: List[str] = list(_ALTER_KINDS) if _is_alter(document) else list(derivers)
    descriptors: List[ArtifactDescriptor] = [derivers[kind]() for kind in kinds]
    logger.info(
        "Derived %d descriptor(s) for %s (%s).",
        len(descriptors),
        document.table_name,
        document.mode,
    )
    return descriptors


__all__: List[str] = [
    "MANUAL_EXCLUSION_NOTE",
    "derive_migration",
    "derive_store_validator",
    "derive_update_validator",
    "derive_index_validator",
    "sortable_columns",
    "derive_model",
    "derive_dto",
    "derive_resource",
    "derive_service",
    "derive_controller",
    "derive_routes",
    "derive_factory",
    "derive_test_scenarios",
    "derive_all",
]

logger.debug("scaffoldgen.derivers loaded — %d public symbols.", len(__all__))
