from __future__ import annotations

import ast
from dataclasses import fields
from typing import Any, Optional

from restmap.declarations import (
    HandleDeclaration,
    MethodDeclarations,
    ResourceDeclaration,
    RouteDeclaration,
    TypeDeclarations,
)
from restmap.errors import UnitLoadError
from restmap.sources.base import SourceUnit

_RESOURCE = "resource"
_ROUTE = "route"
_HANDLE = "handle"

# positional order accepted by route(...)
_ROUTE_POSITIONAL = ("name", "route_pattern")
_ROUTE_FIELDS = {f.name for f in fields(RouteDeclaration)}


class AstDeclarationSource:
    """
    Static declaration source: reads @resource / @handle decorators with ast.
    Does not import or execute the unit, so arguments must be literals
    (`action` may also be a plain or dotted name).
    """

    def load_unit(self, unit: SourceUnit) -> list[TypeDeclarations]:
        try:
            source = unit.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise UnitLoadError(str(unit.path), str(exc)) from exc
        return extract_declarations_from_source(source, module=unit.module, path=str(unit.path))


def extract_declarations_from_source(
    source: str,
    module: str = "",
    path: str = "<string>",
) -> list[TypeDeclarations]:
    """Declarations of every top-level class in `source`, in definition order."""
    try:
        tree = ast.parse(source, filename=path)
    except SyntaxError as exc:
        raise UnitLoadError(path, exc.msg, exc.lineno) from exc

    out: list[TypeDeclarations] = []
    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            class_name = f"{module}.{node.name}" if module else node.name
            out.append(_class_declarations(node, class_name, path))
    return out


def _class_declarations(node: ast.ClassDef, class_name: str, path: str) -> TypeDeclarations:
    resource: Optional[ResourceDeclaration] = None
    # outermost decorator wins, as it would at runtime
    for dec in reversed(node.decorator_list):
        if _decorator_name(dec) == _RESOURCE:
            resource = _parse_resource(dec, path)

    methods: list[MethodDeclarations] = []
    for item in node.body:
        if not isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
            continue
        handles = tuple(
            _parse_handle(dec, path)
            for dec in reversed(item.decorator_list)
            if _decorator_name(dec) == _HANDLE
        )
        methods.append(
            MethodDeclarations(
                name=item.name,
                is_public=not item.name.startswith("_"),
                handles=handles,
            )
        )

    return TypeDeclarations(
        class_name=class_name,
        resource=resource,
        methods=tuple(methods),
        source_path=path,
    )


def _decorator_name(dec: ast.AST) -> Optional[str]:
    # @resource, @resource(...), @restmap.resource(...), @rm.handle(...)
    node = dec.func if isinstance(dec, ast.Call) else dec
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _parse_resource(dec: ast.AST, path: str) -> ResourceDeclaration:
    if not isinstance(dec, ast.Call):
        return ResourceDeclaration()

    routes: Optional[tuple[RouteDeclaration, ...]] = None
    representations: Any = None
    for kw in dec.keywords:
        if kw.arg == "routes":
            routes = _parse_routes(kw.value, path)
        elif kw.arg == "representations":
            representations = _literal(kw.value, "representations", path)
        else:
            raise UnitLoadError(path, f"unexpected resource argument '{kw.arg}'", dec.lineno)
    return ResourceDeclaration(routes=routes, representations=representations)


def _parse_routes(node: ast.AST, path: str) -> Optional[tuple[RouteDeclaration, ...]]:
    if isinstance(node, ast.Constant) and node.value is None:
        return None
    if not isinstance(node, (ast.List, ast.Tuple)):
        raise UnitLoadError(path, "routes must be a literal list of route(...) calls", node.lineno)

    out = []
    for elt in node.elts:
        if not (isinstance(elt, ast.Call) and _decorator_name(elt) == _ROUTE):
            raise UnitLoadError(path, "routes must be a literal list of route(...) calls", elt.lineno)
        out.append(_parse_route(elt, path))
    return tuple(out)


def _parse_route(call: ast.Call, path: str) -> RouteDeclaration:
    values: dict[str, Any] = {}

    if len(call.args) > len(_ROUTE_POSITIONAL):
        raise UnitLoadError(path, "route() takes at most a name and a route pattern positionally", call.lineno)
    for field_name, arg in zip(_ROUTE_POSITIONAL, call.args):
        values[field_name] = _literal(arg, field_name, path)

    for kw in call.keywords:
        if kw.arg not in _ROUTE_FIELDS:
            raise UnitLoadError(path, f"unexpected route argument '{kw.arg}'", call.lineno)
        if kw.arg in values:
            raise UnitLoadError(path, f"route() got multiple values for '{kw.arg}'", call.lineno)
        if kw.arg == "action":
            values["action"] = _literal_or_name(kw.value, "action", path)
        else:
            values[kw.arg] = _literal(kw.value, kw.arg, path)

    return RouteDeclaration(**values)


def _parse_handle(dec: ast.AST, path: str) -> HandleDeclaration:
    if not isinstance(dec, ast.Call):
        return HandleDeclaration()
    if dec.args:
        return HandleDeclaration(target=_literal(dec.args[0], "for_", path))
    for kw in dec.keywords:
        if kw.arg == "for_":
            return HandleDeclaration(target=_literal(kw.value, "for_", path))
    return HandleDeclaration()


def _literal(node: ast.AST, field_name: str, path: str) -> Any:
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError) as exc:
        raise UnitLoadError(
            path, f"'{field_name}' must be a literal value", getattr(node, "lineno", None)
        ) from exc


def _literal_or_name(node: ast.AST, field_name: str, path: str) -> Any:
    # action=InvoiceAction / action=actions.Invoice keep the dotted name
    if isinstance(node, (ast.Name, ast.Attribute)):
        return _name_of_expr(node)
    return _literal(node, field_name, path)


def _name_of_expr(node: ast.AST) -> str:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return f"{_name_of_expr(node.value)}.{node.attr}"
    return ast.unparse(node)
