from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

RESOURCE_ATTR = "__restmap_resource__"
HANDLES_ATTR = "__restmap_handles__"


@dataclass(frozen=True)
class RouteDeclaration:
    """Raw route declaration, exactly as written. Shapes are checked at compile time."""

    name: Any = None
    route_pattern: Any = None
    verbs: Any = None
    collection: Any = None
    route_conditions: Any = None
    expose: Any = None
    allow_options: Any = None
    action: Any = None
    origin: Any = None


@dataclass(frozen=True)
class ResourceDeclaration:
    # None: the marker declares no routes at all
    routes: Optional[tuple[RouteDeclaration, ...]] = None
    representations: Any = None


@dataclass(frozen=True)
class HandleDeclaration:
    target: Any = None


@dataclass(frozen=True)
class MethodDeclarations:
    name: str
    is_public: bool
    handles: tuple[HandleDeclaration, ...] = ()


@dataclass(frozen=True)
class TypeDeclarations:
    class_name: str
    resource: Optional[ResourceDeclaration]
    methods: tuple[MethodDeclarations, ...] = ()
    source_path: str = ""

    @property
    def is_resource(self) -> bool:
        return self.resource is not None


def route(
    name: Any = None,
    route_pattern: Any = None,
    *,
    verbs: Any = None,
    collection: Any = None,
    route_conditions: Any = None,
    expose: Any = None,
    allow_options: Any = None,
    action: Any = None,
    origin: Any = None,
) -> RouteDeclaration:
    return RouteDeclaration(
        name=name,
        route_pattern=route_pattern,
        verbs=verbs,
        collection=collection,
        route_conditions=route_conditions,
        expose=expose,
        allow_options=allow_options,
        action=action,
        origin=origin,
    )


def resource(
    _cls: Optional[type] = None,
    *,
    routes: Optional[Iterable[RouteDeclaration]] = None,
    representations: Any = None,
):
    """
    Mark a class as a resource:

      @resource(routes=[route("get", "/invoice/:id", verbs=["GET"])])
      class Invoice: ...

    A bare `@resource` marks the class without routes (it will fail to compile).
    """

    def decorator(cls: type) -> type:
        declaration = ResourceDeclaration(
            routes=tuple(routes) if routes is not None else None,
            representations=representations,
        )
        setattr(cls, RESOURCE_ATTR, declaration)
        return cls

    if _cls is not None:
        return decorator(_cls)
    return decorator


def handle(for_: Any = None):
    """Bind the decorated method to the named route of its resource."""

    def decorator(func):
        existing = getattr(func, HANDLES_ATTR, ())
        setattr(func, HANDLES_ATTR, existing + (HandleDeclaration(target=for_),))
        return func

    return decorator
