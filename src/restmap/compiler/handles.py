from __future__ import annotations

from typing import Iterable

from restmap.compiler.routes import CompiledRoutes
from restmap.declarations import MethodDeclarations
from restmap.errors import (
    DuplicateHandleBindingError,
    EmptyHandleTargetError,
    UnknownHandleTargetError,
)


def bind_handles(methods: Iterable[MethodDeclarations], compiled: CompiledRoutes) -> None:
    """
    Bind each handle declared on a public method to the route it names.
    Routes must already be in `compiled`. A route takes at most one handle.
    """
    class_name = compiled.class_name
    for method in methods:
        if not method.is_public:
            continue
        for h in method.handles:
            target = h.target
            if not isinstance(target, str) or target == "":
                raise EmptyHandleTargetError(class_name, method.name)

            route = compiled.routes.get(target)
            if route is None:
                raise UnknownHandleTargetError(class_name, method.name, target)
            if route.has_handle_call():
                raise DuplicateHandleBindingError(
                    class_name, target, route.handle_method_name, method.name
                )
            compiled.routes[target] = route.model_copy(update={"handle_method_name": method.name})
