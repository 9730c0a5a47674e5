from __future__ import annotations

import logging
from typing import Any, Optional

from restmap.compiler.handles import bind_handles
from restmap.compiler.policy import HandlePolicy, no_handle_required
from restmap.compiler.routes import compile_routes
from restmap.declarations import TypeDeclarations
from restmap.domain.models import ClassMetaData
from restmap.errors import MissingRequiredHandleError, NoRoutesDeclaredError

logger = logging.getLogger(__name__)


def assemble_class_metadata(
    declarations: TypeDeclarations,
    handle_policy: HandlePolicy = no_handle_required,
) -> Optional[ClassMetaData]:
    """
    Compile one type's declarations into ClassMetaData.

    Returns None when the type carries no resource marker. Any invalid
    declaration aborts the whole type; nothing partial is returned.
    The result is frozen.
    """
    resource = declarations.resource
    if resource is None:
        return None

    class_name = declarations.class_name
    if not resource.routes:
        raise NoRoutesDeclaredError(class_name)

    compiled = compile_routes(resource.routes, class_name)
    bind_handles(declarations.methods, compiled)

    # spans both compiler passes, so it can only be checked here
    for route in compiled.routes.values():
        if handle_policy(route) and not route.has_handle_call():
            raise MissingRequiredHandleError(class_name, route.name)

    metadata = ClassMetaData(
        class_name=class_name,
        representations=_representations(resource.representations),
        routes=compiled.routes,
        origin_route_name=compiled.origin_route_name,
    )
    logger.debug(
        "Compiled %s: %d route(s), origin=%s",
        class_name,
        len(metadata.routes),
        metadata.origin_route_name,
    )
    return metadata


def _representations(value: Any) -> tuple[str, ...]:
    """Declared representation names, deduplicated in order."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return ()
    out: list[str] = []
    for r in value:
        r = str(r)
        if r not in out:
            out.append(r)
    return tuple(out)
