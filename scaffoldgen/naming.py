# File: scaffoldgen/naming.py
"""
scaffoldgen - Naming Engine
===========================
Deterministic transforms from (table name, api version, primary key) to
every identifier, namespace, location and route fragment the derivers
need.  Computed once per document and handed to each deriver, so all
artifacts of one run cross-reference each other by construction.

Example (``rooms``, ``v2``, composite key)::

    entity              Room
    controller_class    ApiRoomController
    request_namespace   Api/V2/Room
    collection_path     /api/v2/rooms
    item_path           /api/v2/rooms/{region}/{facility_code}/{room_number}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from scaffoldgen.descriptors import ArtifactKind
from scaffoldgen.models import CompositeKey, SchemaDocument, SurrogateKey
from scaffoldgen.utils import to_kebab_case, to_pascal_case, to_plural, to_singular

logger: logging.Logger = logging.getLogger("scaffoldgen.naming")

DEFAULT_ROUTE_PREFIX: str = "/api"


@dataclass(frozen=True)
class NameSet:
    """All names derived for one table; see module docstring."""

    table_name: str
    singular: str
    plural: str
    entity: str
    api_version: Optional[str]
    version_segment: Optional[str]

    model_class: str
    dto_class: str
    service_class: str
    controller_class: str
    store_request_class: str
    update_request_class: str
    index_request_class: str
    resource_class: str
    factory_class: str

    request_namespace: str
    controller_namespace: str
    locations: Dict[str, str] = field(default_factory=dict)

    route_segment: str = ""
    route_prefix: str = DEFAULT_ROUTE_PREFIX
    route_parameters: List[str] = field(default_factory=list)

    @property
    def collection_path(self) -> str:
        return f"{self.route_prefix}/{self.route_segment}"

    @property
    def item_path(self) -> str:
        params: str = "/".join(f"{{{p}}}" for p in self.route_parameters)
        return f"{self.collection_path}/{params}"

    def location_of(self, kind: Union[ArtifactKind, str]) -> str:
        key: str = kind.value if isinstance(kind, ArtifactKind) else kind
        return self.locations[key]


def _join(*parts: Optional[str]) -> str:
    return "/".join(p for p in parts if p)


def derive_names(
    table_name: str,
    api_version: Optional[str] = None,
    primary_key: Optional[Union[SurrogateKey, CompositeKey]] = None,
    *,
    route_prefix: str = DEFAULT_ROUTE_PREFIX,
) -> NameSet:
    """
    Compute the ``NameSet`` for one table.

    Args:
        table_name: Plural snake-case table name (``favorite_points``).
        api_version: ``v1``, ``v2``... or ``None`` for unversioned output.
        primary_key: Decides the route parameters; surrogate when omitted.
        route_prefix: Leading path of every route (``/api``).
    """
    key: Union[SurrogateKey, CompositeKey] = primary_key or SurrogateKey()

    singular: str = to_singular(table_name)
    plural: str = table_name
    entity: str = to_pascal_case(singular)
    version_segment: Optional[str] = api_version.upper() if api_version else None

    request_namespace: str = _join("Api", version_segment, entity)
    controller_namespace: str = _join("Api", version_segment)

    model_class: str = entity
    dto_class: str = f"{entity}DTO"
    service_class: str = f"{entity}Service"
    controller_class: str = f"Api{entity}Controller"
    resource_class: str = f"{entity}Resource"
    factory_class: str = f"{entity}Factory"

    locations: Dict[str, str] = {
        ArtifactKind.MIGRATION.value: _join("database/migrations", f"create_{plural}_table"),
        ArtifactKind.MODEL.value: _join("app/Models", model_class),
        ArtifactKind.DTO.value: _join("app/DTOs", version_segment, dto_class),
        ArtifactKind.STORE_REQUEST.value: _join("app/Http/Requests", request_namespace, "StoreRequest"),
        ArtifactKind.UPDATE_REQUEST.value: _join("app/Http/Requests", request_namespace, "UpdateRequest"),
        ArtifactKind.INDEX_REQUEST.value: _join("app/Http/Requests", request_namespace, "IndexRequest"),
        ArtifactKind.RESOURCE.value: _join("app/Http/Resources", resource_class),
        ArtifactKind.SERVICE.value: _join("app/Services", service_class),
        ArtifactKind.CONTROLLER.value: _join(
            "app/Http/Controllers", controller_namespace, controller_class
        ),
        ArtifactKind.ROUTES.value: _join("routes/api", version_segment and version_segment.lower(), plural),
        ArtifactKind.FACTORY.value: _join("database/factories", factory_class),
        ArtifactKind.TESTS.value: _join("tests/Feature", controller_namespace, f"{entity}ApiTest"),
    }

    if isinstance(key, CompositeKey):
        route_parameters: List[str] = list(key.columns)
    else:
        route_parameters = [singular]

    prefix: str = "/" + route_prefix.strip("/") if route_prefix.strip("/") else ""
    if api_version:
        prefix = f"{prefix}/{api_version}"

    names: NameSet = NameSet(
        table_name=table_name,
        singular=singular,
        plural=plural,
        entity=entity,
        api_version=api_version,
        version_segment=version_segment,
        model_class=model_class,
        dto_class=dto_class,
        service_class=service_class,
        controller_class=controller_class,
        store_request_class="StoreRequest",
        update_request_class="UpdateRequest",
        index_request_class="IndexRequest",
        resource_class=resource_class,
        factory_class=factory_class,
        request_namespace=request_namespace,
        controller_namespace=controller_namespace,
        locations=locations,
        route_segment=to_kebab_case(plural),
        route_prefix=prefix,
        route_parameters=route_parameters,
    )
    logger.debug("Derived names for %s: entity=%s, prefix=%s", table_name, entity, prefix)
    return names


def names_for(document: SchemaDocument, *, route_prefix: str = DEFAULT_ROUTE_PREFIX) -> NameSet:
    """``derive_names`` driven by an assembled document."""
    return derive_names(
        document.table_name,
        document.api_version,
        document.primary_key,
        route_prefix=route_prefix,
    )


__all__: List[str] = [
    "DEFAULT_ROUTE_PREFIX",
    "NameSet",
    "derive_names",
    "names_for",
]

logger.debug("scaffoldgen.naming loaded.")
