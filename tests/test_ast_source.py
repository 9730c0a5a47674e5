import pytest

from restmap.errors import UnitLoadError
from restmap.sources.ast_source import extract_declarations_from_source


def test_extract_resource_routes_and_handles():
    src = """
from restmap.declarations import handle, resource, route

@resource(
    representations=["json"],
    routes=[
        route("get", "/invoice/:id", verbs=["GET"]),
        route(name="list", route_pattern="/invoice", collection=True, origin=True),
    ],
)
class Invoice:
    @handle("get")
    def handleGet(self):
        return None

    def _private(self):
        pass

class InvoiceLine:
    pass
"""
    decls = extract_declarations_from_source(src, module="cms.invoice")
    assert [d.class_name for d in decls] == ["cms.invoice.Invoice", "cms.invoice.InvoiceLine"]

    invoice, line = decls
    assert line.resource is None
    assert invoice.resource.representations == ["json"]

    routes = invoice.resource.routes
    assert [r.name for r in routes] == ["get", "list"]
    assert routes[0].route_pattern == "/invoice/:id"
    assert routes[0].verbs == ["GET"]
    assert routes[1].collection is True
    assert routes[1].origin is True

    methods = {m.name: m for m in invoice.methods}
    assert methods["handleGet"].is_public
    assert [h.target for h in methods["handleGet"].handles] == ["get"]
    assert not methods["_private"].is_public


def test_module_aliases_and_keyword_handle_target():
    src = """
import restmap.declarations as rm

@rm.resource(routes=[rm.route("get", "/a/:id")])
class A:
    @rm.handle(for_="get")
    async def fetch(self):
        return None
"""
    (a,) = extract_declarations_from_source(src)
    assert a.class_name == "A"
    assert a.resource.routes[0].name == "get"
    assert a.methods[0].handles[0].target == "get"


def test_bare_resource_marker_declares_no_routes():
    src = """
from restmap.declarations import resource

@resource
class A:
    pass
"""
    (a,) = extract_declarations_from_source(src)
    assert a.resource is not None
    assert a.resource.routes is None


def test_action_may_be_a_name():
    src = """
from restmap.declarations import resource, route
from cms import actions

@resource(routes=[route("export", "/a/export", action=actions.Export)])
class A:
    pass
"""
    (a,) = extract_declarations_from_source(src)
    assert a.resource.routes[0].action == "actions.Export"


def test_handles_keep_application_order():
    src = """
from restmap.declarations import handle, resource, route

@resource(routes=[route("a", "/a"), route("b", "/b")])
class A:
    @handle("b")
    @handle("a")
    def both(self):
        pass
"""
    (a,) = extract_declarations_from_source(src)
    # innermost decorator is applied first at runtime
    assert [h.target for h in a.methods[0].handles] == ["a", "b"]


def test_non_literal_argument_fails_with_line():
    src = """
from restmap.declarations import resource, route

VERBS = ["GET"]

@resource(routes=[route("get", "/a", verbs=VERBS)])
class A:
    pass
"""
    with pytest.raises(UnitLoadError) as exc:
        extract_declarations_from_source(src, path="cms/a.py")
    assert exc.value.path == "cms/a.py"
    assert exc.value.line == 6


def test_routes_must_be_route_calls():
    src = """
from restmap.declarations import resource

@resource(routes=[{"name": "get"}])
class A:
    pass
"""
    with pytest.raises(UnitLoadError):
        extract_declarations_from_source(src)


def test_syntax_error_fails():
    with pytest.raises(UnitLoadError) as exc:
        extract_declarations_from_source("class A(:\n    pass\n", path="broken.py")
    assert exc.value.line == 1


def test_keyword_repeating_a_positional_field_fails():
    src = """
from restmap.declarations import resource, route

@resource(routes=[route("get", "/a", route_pattern="/b")])
class A:
    pass
"""
    with pytest.raises(UnitLoadError) as exc:
        extract_declarations_from_source(src, path="cms/a.py")
    assert "route_pattern" in str(exc.value)
    assert exc.value.line == 4
