import pytest

from restmap.compiler.assembler import assemble_class_metadata
from restmap.compiler.policy import get_handle_policy, push_verbs_require_handle
from restmap.declarations import ResourceDeclaration, TypeDeclarations, handle, resource, route
from restmap.errors import ConfigurationError, MissingRequiredHandleError, NoRoutesDeclaredError
from restmap.sources.import_source import declarations_for_class


@resource(
    representations=["json", "xml", "json"],
    routes=[
        route("get", "/invoice/:id", verbs=["read"]),
        route("list", "/invoice", verbs=["read"], collection=True, origin=True),
    ],
)
class Invoice:
    @handle("get")
    def handleGet(self):
        return None

    def total(self):
        return 0


@resource(
    routes=[
        route("post", "/payment", verbs=["POST"]),
        route("get", "/payment/:id", verbs=["GET"]),
    ]
)
class Payment:
    pass


class InvoiceLine:
    pass


def test_invoice_example_compiles():
    md = assemble_class_metadata(declarations_for_class(Invoice, class_name="cms.Invoice"))

    assert md is not None
    assert md.class_name == "cms.Invoice"
    assert list(md.routes) == ["get", "list"]
    assert md.routes["get"].handle_method_name == "handleGet"
    assert md.routes["get"].verbs == ("GET",)
    assert md.routes["list"].is_collection is True
    assert md.routes["list"].handle_method_name is None
    assert md.origin_route_name == "list"
    assert md.representations == ("json", "xml")


def test_compiling_twice_gives_equal_metadata():
    decls = declarations_for_class(Invoice)
    first = assemble_class_metadata(decls)
    second = assemble_class_metadata(decls)
    assert first == second
    assert first is not second


def test_non_resource_type_is_not_an_error():
    assert assemble_class_metadata(declarations_for_class(InvoiceLine)) is None


def test_resource_without_routes_fails():
    decls = TypeDeclarations(class_name="cms.Empty", resource=ResourceDeclaration())
    with pytest.raises(NoRoutesDeclaredError) as exc:
        assemble_class_metadata(decls)
    assert exc.value.class_name == "cms.Empty"


def test_resource_with_empty_route_list_fails():
    decls = TypeDeclarations(class_name="cms.Empty", resource=ResourceDeclaration(routes=()))
    with pytest.raises(NoRoutesDeclaredError):
        assemble_class_metadata(decls)


def test_unbound_route_required_by_policy_fails():
    with pytest.raises(MissingRequiredHandleError) as exc:
        assemble_class_metadata(declarations_for_class(Payment), push_verbs_require_handle)
    assert exc.value.route_name == "post"


def test_default_policy_requires_no_handle():
    md = assemble_class_metadata(declarations_for_class(Payment))
    assert md is not None
    assert not md.routes["post"].has_handle_call()


def test_injected_policy_decides_which_routes_need_a_handle():
    def collections_need_handle(r):
        return r.is_collection

    with pytest.raises(MissingRequiredHandleError) as exc:
        assemble_class_metadata(declarations_for_class(Invoice), collections_need_handle)
    assert exc.value.route_name == "list"


def test_push_policy_is_satisfied_by_a_handle_or_an_action():
    @resource(
        routes=[
            route("post", "/payment", verbs=["POST"]),
            route("put", "/payment/:id", verbs=["PUT"], action="payments.Update"),
        ]
    )
    class HandledPayment:
        @handle("post")
        def save(self):
            return None

    md = assemble_class_metadata(declarations_for_class(HandledPayment), push_verbs_require_handle)
    assert md.routes["post"].handle_method_name == "save"
    assert md.routes["put"].handle_method_name is None


def test_get_handle_policy():
    assert get_handle_policy("PUSH") is push_verbs_require_handle
    with pytest.raises(ConfigurationError):
        get_handle_policy("always")
