from pathlib import Path
import json
import textwrap

from typer.testing import CliRunner

from restmap.cli import app

runner = CliRunner()


def write(p: Path, s: str) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(textwrap.dedent(s), encoding="utf-8")


INVOICE = """
from restmap.declarations import handle, resource, route

@resource(
    representations=["json"],
    routes=[
        route("get", "/invoice/:id", verbs=["read"]),
        route("list", "/invoice", verbs=["read"], collection=True, origin=True),
    ],
)
class Invoice:
    @handle("get")
    def handleGet(self):
        return None

class InvoiceLine:
    pass
"""


def _repo(tmp_path: Path) -> Path:
    root = tmp_path / "resources"
    write(root / "cms" / "invoice.py", INVOICE)
    return root


def test_resources_lists_discovered_types(tmp_path: Path):
    root = _repo(tmp_path)
    result = runner.invoke(app, ["--log-level", "WARNING", "resources", str(root)])

    assert result.exit_code == 0, result.output
    assert "Resources: 1" in result.output
    assert "cms.invoice.Invoice" in result.output
    assert "InvoiceLine" not in result.output


def test_compile_json(tmp_path: Path):
    root = _repo(tmp_path)
    result = runner.invoke(app, ["--log-level", "WARNING", "compile", str(root), "--format", "json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    invoice = payload["cms.invoice.Invoice"]
    assert list(invoice["routes"]) == ["get", "list"]
    assert invoice["routes"]["get"]["handle_method_name"] == "handleGet"
    assert invoice["routes"]["get"]["verbs"] == ["GET"]
    assert invoice["origin_route_name"] == "list"


def test_compile_writes_json_file(tmp_path: Path):
    root = _repo(tmp_path)
    out = tmp_path / "out" / "routes.json"
    result = runner.invoke(app, ["--log-level", "WARNING", "compile", str(root), "--out", str(out)])

    assert result.exit_code == 0, result.output
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert set(payload) == {"cms.invoice.Invoice"}


def test_compile_table_summary(tmp_path: Path):
    root = _repo(tmp_path)
    result = runner.invoke(app, ["--log-level", "WARNING", "compile", str(root)])

    assert result.exit_code == 0, result.output
    assert "Resources: 1  Routes: 2" in result.output


def test_compile_reports_failures(tmp_path: Path):
    root = _repo(tmp_path)
    write(
        root / "cms" / "broken.py",
        """
        from restmap.declarations import resource, route

        @resource(routes=[route("get", "/a", origin=True), route("list", "/a", origin=True)])
        class Broken:
            pass
        """,
    )
    result = runner.invoke(app, ["--log-level", "CRITICAL", "compile", str(root)])

    assert result.exit_code == 1
    assert "1 resource type(s) failed to compile" in result.output
    assert "route_origin_multiple" in result.output


def test_show_one_resource(tmp_path: Path):
    root = _repo(tmp_path)
    result = runner.invoke(app, ["--log-level", "WARNING", "show", "cms.invoice.Invoice", str(root)])

    assert result.exit_code == 0, result.output
    assert "Origin route: list" in result.output
    assert "Representations: json" in result.output


def test_show_unknown_type(tmp_path: Path):
    root = _repo(tmp_path)
    result = runner.invoke(app, ["--log-level", "WARNING", "show", "cms.invoice.InvoiceLine", str(root)])

    assert result.exit_code == 1
    assert "Not a resource" in result.output


def test_missing_root_is_a_usage_error(tmp_path: Path):
    result = runner.invoke(app, ["resources", str(tmp_path / "missing")])
    assert result.exit_code == 2
