# File: scaffoldgen/descriptors.py
"""
scaffoldgen - Artifact Descriptors
==================================
Target-language-neutral descriptions of every artifact derived from a
``SchemaDocument``.  A descriptor says *what* an artifact must contain
(fields, rules, routes, casts, guards); turning it into source text is the
emitter's job.

All descriptors are frozen pydantic models so that ``model_dump`` gives a
stable, order-preserving payload for rendering.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from scaffoldgen.models import ColumnType, ForeignKeySpec, RelationKind

logger: logging.Logger = logging.getLogger("scaffoldgen.descriptors")


class ArtifactKind(str, Enum):
    MIGRATION = "migration"
    MODEL = "model"
    DTO = "dto"
    STORE_REQUEST = "store_request"
    UPDATE_REQUEST = "update_request"
    INDEX_REQUEST = "index_request"
    RESOURCE = "resource"
    SERVICE = "service"
    CONTROLLER = "controller"
    ROUTES = "routes"
    FACTORY = "factory"
    TESTS = "tests"


# Derivation order; also the order artifacts are reported and written in.
ARTIFACT_ORDER: List[str] = [kind.value for kind in ArtifactKind]

# Lookup strategies for single-item routes.
LOOKUP_ROUTE_BINDING: str = "routeModelBinding"
LOOKUP_COMPOSITE_FINDER: str = "findByCompositeKey"

# Migration guards (each makes one operation safe to re-run).
GUARD_TABLE_EXISTS: str = "skip_if_table_exists"
GUARD_COLUMN_EXISTS: str = "skip_if_column_exists"
GUARD_INDEX_EXISTS: str = "skip_if_index_exists"

# Query parameters the list-query validator reserves for itself; a column
# with one of these names gets no filter.
LIST_QUERY_PARAMS: FrozenSet[str] = frozenset(
    {"keyword", "sort_by", "sort_order", "per_page", "page"}
)

_DESCRIPTOR_CONFIG: ConfigDict = ConfigDict(
    frozen=True,
    extra="forbid",
    use_enum_values=True,
    protected_namespaces=(),
)


class ArtifactDescriptor(BaseModel):
    """Common header of every descriptor."""

    model_config = _DESCRIPTOR_CONFIG

    kind: ArtifactKind
    identifier: str = Field(..., description="Class or artifact name.")
    location: str = Field(..., description="Namespaced location, without extension.")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Migration
# ---------------------------------------------------------------------------


class MigrationColumn(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    name: str
    column_type: ColumnType
    operation: Literal["add", "change"] = "add"
    length: Optional[int] = None
    enum_values: List[str] = Field(default_factory=list)
    nullable: bool = False
    unique: bool = False
    unsigned: bool = False
    default: Optional[Union[bool, int, str]] = None
    comment: Optional[str] = None
    foreign_key: Optional[ForeignKeySpec] = None
    guard: Optional[str] = None


class MigrationIndex(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    name: str
    columns: List[str]
    guard: Optional[str] = None


class MigrationStep(BaseModel):
    """One reversal step of ``down``."""

    model_config = _DESCRIPTOR_CONFIG

    action: Literal["drop_table", "drop_column", "drop_index"]
    target: str


class MigrationDescriptor(ArtifactDescriptor):
    kind: Literal["migration"] = "migration"
    table_name: str
    operation: Literal["create", "alter"]
    key_kind: Literal["surrogate", "composite"]
    primary_key: List[str]
    guard: Optional[str] = None
    columns: List[MigrationColumn]
    indexes: List[MigrationIndex] = Field(default_factory=list)
    timestamps: bool = False
    soft_deletes: bool = False
    comment: Optional[str] = None
    down: List[MigrationStep] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Persistence model
# ---------------------------------------------------------------------------


class RelationAccessor(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    name: str
    kind: RelationKind
    related_model: str
    target_table: str
    pivot_table: Optional[str] = None


class ModelDescriptor(ArtifactDescriptor):
    kind: Literal["model"] = "model"
    table_name: str
    primary_key: List[str]
    incrementing: bool
    fillable: List[str]
    casts: Dict[str, str] = Field(default_factory=dict)
    timestamps: bool
    soft_deletes: bool
    relations: List[RelationAccessor] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Transfer object
# ---------------------------------------------------------------------------


class DtoField(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    name: str
    type_hint: str
    nullable: bool
    default: Optional[Union[bool, int, str]] = None


class DtoDescriptor(ArtifactDescriptor):
    kind: Literal["dto"] = "dto"
    fields: List[DtoField]
    create_payload: List[str]
    update_payload: List[str]
    update_drops_none: bool = True


# ---------------------------------------------------------------------------
# Request validators
# ---------------------------------------------------------------------------


class FieldRules(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    field: str
    rules: List[str]
    manual_review: bool = False
    note: Optional[str] = None


class ValidatorDescriptor(ArtifactDescriptor):
    """
    Store, update or list-query request validator.  ``patch`` validators
    come from alter-mode documents and hold only the altered fields.
    """

    namespace: str
    fields: List[FieldRules]
    patch: bool = False

    def rules_for(self, field_name: str) -> List[str]:
        for entry in self.fields:
            if entry.field == field_name:
                return list(entry.rules)
        raise KeyError(field_name)

    @property
    def field_names(self) -> List[str]:
        return [entry.field for entry in self.fields]


# ---------------------------------------------------------------------------
# API resource
# ---------------------------------------------------------------------------


class ResourceField(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    name: str
    format: Optional[Literal["iso8601"]] = None


class ResourceDescriptor(ArtifactDescriptor):
    kind: Literal["resource"] = "resource"
    model_class: str
    fields: List[ResourceField]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class SearchFilter(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    param: str
    column: str
    operator: Literal["=", ">=", "<="]


class ServiceDescriptor(ArtifactDescriptor):
    kind: Literal["service"] = "service"
    model_class: str
    dto_class: str
    keyword_columns: List[str]
    filters: List[SearchFilter]
    default_sort_by: str
    default_sort_order: Literal["asc", "desc"]
    default_per_page: int
    lookup: str
    key_columns: List[str]
    operations: List[str]


# ---------------------------------------------------------------------------
# Controller & routes
# ---------------------------------------------------------------------------


class ControllerAction(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    name: str
    method: Literal["GET", "POST", "PUT", "DELETE"]
    path: str
    request_class: Optional[str] = None
    success_status: int


class ControllerDescriptor(ArtifactDescriptor):
    kind: Literal["controller"] = "controller"
    namespace: str
    service_class: str
    resource_class: str
    lookup: str
    route_parameters: List[str]
    actions: List[ControllerAction]


class RouteEntry(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    method: Literal["GET", "POST", "PUT", "DELETE"]
    path: str
    action: str
    name: str


class RoutesDescriptor(ArtifactDescriptor):
    kind: Literal["routes"] = "routes"
    registration: Literal["resource", "explicit"]
    controller_class: str
    prefix: str
    collection: str
    parameters: List[str]
    routes: List[RouteEntry]


# ---------------------------------------------------------------------------
# Factory & tests
# ---------------------------------------------------------------------------


class FactoryField(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    name: str
    generator: str
    args: List[Any] = Field(default_factory=list)
    unique: bool = False


class FactoryDescriptor(ArtifactDescriptor):
    kind: Literal["factory"] = "factory"
    model_class: str
    fields: List[FactoryField]


class Scenario(BaseModel):
    model_config = _DESCRIPTOR_CONFIG

    name: str
    category: Literal["feature", "validation", "search", "dto"]
    method: Optional[Literal["GET", "POST", "PUT", "DELETE"]] = None
    path: Optional[str] = None
    field: Optional[str] = None
    value: Optional[Union[bool, int, str]] = None
    expected_status: Optional[int] = None
    expectation: str


class ScenarioSuiteDescriptor(ArtifactDescriptor):
    kind: Literal["tests"] = "tests"
    scenarios: List[Scenario]

    def by_category(self, category: str) -> List[Scenario]:
        return [s for s in self.scenarios if s.category == category]


__all__: List[str] = [
    "ArtifactKind",
    "ARTIFACT_ORDER",
    "LIST_QUERY_PARAMS",
    "LOOKUP_ROUTE_BINDING",
    "LOOKUP_COMPOSITE_FINDER",
    "GUARD_TABLE_EXISTS",
    "GUARD_COLUMN_EXISTS",
    "GUARD_INDEX_EXISTS",
    "ArtifactDescriptor",
    "MigrationColumn",
    "MigrationIndex",
    "MigrationStep",
    "MigrationDescriptor",
    "RelationAccessor",
    "ModelDescriptor",
    "DtoField",
    "DtoDescriptor",
    "FieldRules",
    "ValidatorDescriptor",
    "ResourceField",
    "ResourceDescriptor",
    "SearchFilter",
    "ServiceDescriptor",
    "ControllerAction",
    "ControllerDescriptor",
    "RouteEntry",
    "RoutesDescriptor",
    "FactoryField",
    "FactoryDescriptor",
    "Scenario",
    "ScenarioSuiteDescriptor",
]

logger.debug("scaffoldgen.descriptors loaded — %d public symbols.", len(__all__))
