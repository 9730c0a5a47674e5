from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

HttpVerb = Literal[
    "GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT", "PROPFIND"
]

ALLOWED_VERBS: tuple[str, ...] = (
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "OPTIONS",
    "TRACE",
    "CONNECT",
    "PROPFIND",
)

# CRUD vocabulary accepted in declarations
VERB_ALIASES: dict[str, str] = {
    "READ": "GET",
    "CREATE": "POST",
    "UPDATE": "PUT",
}


def normalize_verb(verb: Any) -> Optional[str]:
    """Canonical upper-case verb, or None if `verb` is not in the vocabulary."""
    if not isinstance(verb, str):
        return None
    v = verb.strip().upper()
    v = VERB_ALIASES.get(v, v)
    return v if v in ALLOWED_VERBS else None


class RouteMetaData(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    verbs: tuple[HttpVerb, ...] = ()
    is_collection: bool = False
    route_pattern: str = ""
    route_conditions: dict[str, Any] = Field(default_factory=dict)
    expose: tuple[Any, ...] = ()
    allow_options_request: bool = True
    action_class_name: Optional[str] = None
    handle_method_name: Optional[str] = None

    @model_validator(mode="after")
    def _read_only_conditions(self) -> "RouteMetaData":
        self.__dict__["route_conditions"] = MappingProxyType(dict(self.route_conditions))
        return self

    @field_serializer("route_conditions")
    def _dump_conditions(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)

    def has_handle_call(self) -> bool:
        return self.handle_method_name is not None


class ClassMetaData(BaseModel):
    """Compiled metadata of one resource type. Read-only once built."""

    model_config = ConfigDict(frozen=True)

    class_name: str
    representations: tuple[str, ...] = ()
    routes: dict[str, RouteMetaData] = Field(default_factory=dict)
    origin_route_name: Optional[str] = None

    @model_validator(mode="after")
    def _check_origin_and_freeze(self) -> "ClassMetaData":
        if self.origin_route_name is not None and self.origin_route_name not in self.routes:
            raise ValueError(f"origin route '{self.origin_route_name}' is not one of the routes")
        self.__dict__["routes"] = MappingProxyType(dict(self.routes))
        return self

    @field_serializer("routes")
    def _dump_routes(self, value: Mapping[str, RouteMetaData]) -> dict[str, RouteMetaData]:
        return dict(value)

    def get_route_metadata(self, name: str) -> Optional[RouteMetaData]:
        return self.routes.get(name)

    def get_origin_route(self) -> Optional[RouteMetaData]:
        if self.origin_route_name is None:
            return None
        return self.routes.get(self.origin_route_name)
