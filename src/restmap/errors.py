"""Typed failures raised while discovering and compiling resource metadata.

Every error is a configuration error: it should surface at startup (or in a
cache-warming step), never while serving a request.
"""

from __future__ import annotations

from typing import Mapping, Optional


class RestMapError(Exception):
    code = "restmap_error"

    def __init__(
        self,
        message: str,
        class_name: Optional[str] = None,
        route_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.class_name = class_name
        self.route_name = route_name


class ConfigurationError(RestMapError):
    code = "configuration"


class UnitLoadError(RestMapError):
    code = "unit_load"

    def __init__(self, path: str, reason: str, line: Optional[int] = None):
        where = f"{path}:{line}" if line is not None else path
        super().__init__(f"Unable to load declarations from {where}: {reason}")
        self.path = path
        self.line = line


class MetadataError(RestMapError):
    """Base for malformed or conflicting declarations on a resource type."""

    code = "metadata"


# Route declarations


class EmptyRouteNameError(MetadataError):
    code = "route_name_empty"

    def __init__(self, class_name: str):
        super().__init__(
            f"{class_name}: a route name is empty after removing disallowed characters",
            class_name=class_name,
        )


class DuplicateRouteNameError(MetadataError):
    code = "route_name_duplicate"

    def __init__(self, class_name: str, route_name: str):
        super().__init__(
            f"{class_name}: a route named '{route_name}' is already defined",
            class_name=class_name,
            route_name=route_name,
        )


class InvalidVerbError(MetadataError):
    code = "route_verb_invalid"

    def __init__(self, class_name: str, route_name: str, verb: object):
        super().__init__(
            f"{class_name}: route '{route_name}' declares an unknown verb {verb!r}",
            class_name=class_name,
            route_name=route_name,
        )
        self.verb = verb


class MultipleOriginRoutesError(MetadataError):
    code = "route_origin_multiple"

    def __init__(self, class_name: str, route_name: str, origin_route_name: str):
        super().__init__(
            f"{class_name}: route '{route_name}' is marked as origin but "
            f"'{origin_route_name}' already is; a resource can only have one origin route",
            class_name=class_name,
            route_name=route_name,
        )


class MissingRoutePatternError(MetadataError):
    code = "route_pattern_missing"

    def __init__(self, class_name: str, route_name: str):
        super().__init__(
            f"{class_name}: route '{route_name}' has no route pattern",
            class_name=class_name,
            route_name=route_name,
        )


class InvalidRouteFieldError(MetadataError):
    code = "route_field_invalid"

    def __init__(self, class_name: str, route_name: str, field: str, value: object):
        super().__init__(
            f"{class_name}: route '{route_name}' has an invalid value for '{field}': {value!r}",
            class_name=class_name,
            route_name=route_name,
        )
        self.field = field


class NoRoutesDeclaredError(MetadataError):
    code = "resource_without_routes"

    def __init__(self, class_name: str):
        super().__init__(
            f"{class_name}: a resource must declare at least one route",
            class_name=class_name,
        )


# Handle declarations


class EmptyHandleTargetError(MetadataError):
    code = "handle_target_empty"

    def __init__(self, class_name: str, method_name: str):
        super().__init__(
            f"{class_name}.{method_name}: handle must name the route it is for",
            class_name=class_name,
        )
        self.method_name = method_name


class UnknownHandleTargetError(MetadataError):
    code = "handle_target_unknown"

    def __init__(self, class_name: str, method_name: str, route_name: str):
        super().__init__(
            f"{class_name}.{method_name}: handle is for '{route_name}' but no route has that name",
            class_name=class_name,
            route_name=route_name,
        )
        self.method_name = method_name


class DuplicateHandleBindingError(MetadataError):
    code = "handle_duplicate"

    def __init__(self, class_name: str, route_name: str, bound_method: str, method_name: str):
        super().__init__(
            f"{class_name}: route '{route_name}' is already handled by '{bound_method}', "
            f"cannot also bind '{method_name}'",
            class_name=class_name,
            route_name=route_name,
        )
        self.method_name = method_name


class MissingRequiredHandleError(MetadataError):
    code = "handle_required"

    def __init__(self, class_name: str, route_name: str):
        super().__init__(
            f"{class_name}: route '{route_name}' requires a handle method but none is bound",
            class_name=class_name,
            route_name=route_name,
        )


class MetadataCompilationError(RestMapError):
    """One or more resource types failed to compile.

    `failures` maps each failing type to its error; `table` holds the types
    that compiled.
    """

    code = "compilation_failed"

    def __init__(self, failures: Mapping[str, MetadataError], table: Mapping):
        names = ", ".join(failures)
        super().__init__(f"{len(failures)} resource type(s) failed to compile: {names}")
        self.failures = dict(failures)
        self.table = table
