from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from restmap.declarations import RouteDeclaration
from restmap.domain.models import ALLOWED_VERBS, RouteMetaData, normalize_verb
from restmap.errors import (
    DuplicateRouteNameError,
    EmptyRouteNameError,
    InvalidRouteFieldError,
    InvalidVerbError,
    MissingRoutePatternError,
    MultipleOriginRoutesError,
)

_ROUTE_NAME_DISALLOWED = re.compile(r"[^a-zA-Z0-9_\s]")


@dataclass
class CompiledRoutes:
    """Routes of one type while it is being compiled; frozen into ClassMetaData afterwards."""

    class_name: str
    routes: dict[str, RouteMetaData] = field(default_factory=dict)
    origin_route_name: Optional[str] = None


def sanitize_route_name(name: Any) -> str:
    """'get-user!' -> 'getuser'. Route names end up as map keys and in patterns."""
    if name is None:
        return ""
    return _ROUTE_NAME_DISALLOWED.sub("", str(name))


def compile_routes(declarations: Iterable[RouteDeclaration], class_name: str) -> CompiledRoutes:
    """
    One RouteMetaData per declaration, in declared order.
    Stops at the first invalid declaration.
    """
    compiled = CompiledRoutes(class_name=class_name)
    for decl in declarations:
        route = _compile_route(decl, compiled)
        compiled.routes[route.name] = route
    return compiled


def _compile_route(decl: RouteDeclaration, compiled: CompiledRoutes) -> RouteMetaData:
    class_name = compiled.class_name

    name = sanitize_route_name(decl.name)
    if name == "":
        raise EmptyRouteNameError(class_name)
    if name in compiled.routes:
        raise DuplicateRouteNameError(class_name, name)

    values: dict[str, Any] = {"name": name}

    if decl.verbs is not None:
        values["verbs"] = _verbs(decl.verbs, class_name, name)

    if decl.collection is not None:
        values["is_collection"] = _flag(decl.collection, "collection", class_name, name)

    if not isinstance(decl.route_pattern, str) or not decl.route_pattern.strip():
        raise MissingRoutePatternError(class_name, name)
    values["route_pattern"] = decl.route_pattern

    if isinstance(decl.route_conditions, Mapping):
        values["route_conditions"] = {str(k): v for k, v in decl.route_conditions.items()}

    if isinstance(decl.expose, (list, tuple)):
        values["expose"] = tuple(decl.expose)

    if decl.allow_options is not None:
        values["allow_options_request"] = _flag(decl.allow_options, "allow_options", class_name, name)

    if decl.action is not None:
        values["action_class_name"] = _action_name(decl.action, class_name, name)

    if decl.origin:
        if compiled.origin_route_name is not None:
            raise MultipleOriginRoutesError(class_name, name, compiled.origin_route_name)
        compiled.origin_route_name = name

    return RouteMetaData(**values)


def _verbs(value: Any, class_name: str, route_name: str) -> tuple[str, ...]:
    items = [value] if isinstance(value, str) else value
    if isinstance(items, (set, frozenset)):
        # no declared order to keep: use a stable one
        items = sorted(items, key=repr)
    elif not isinstance(items, (list, tuple)):
        raise InvalidVerbError(class_name, route_name, value)

    out: list[str] = []
    for v in items:
        verb = normalize_verb(v)
        if verb is None:
            raise InvalidVerbError(class_name, route_name, v)
        if verb not in out:
            out.append(verb)

    if isinstance(value, (set, frozenset)):
        out.sort(key=ALLOWED_VERBS.index)
    return tuple(out)


def _flag(value: Any, field: str, class_name: str, route_name: str) -> bool:
    if not isinstance(value, bool):
        raise InvalidRouteFieldError(class_name, route_name, field, value)
    return value


def _action_name(value: Any, class_name: str, route_name: str) -> Optional[str]:
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise InvalidRouteFieldError(class_name, route_name, "action", value)
