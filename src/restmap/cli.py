from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, NoReturn, Optional

import json
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from restmap.compiler.policy import get_handle_policy
from restmap.config import get_settings
from restmap.domain.models import ClassMetaData
from restmap.errors import ConfigurationError, MetadataCompilationError, MetadataError, UnitLoadError
from restmap.observability import setup_logging
from restmap.orchestrator.resolver import MetadataResolver, make_source


app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, help="Log level (default: RESTMAP_LOG_LEVEL or INFO)"),
) -> None:
    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_format)


def _build_resolver(
    roots: Optional[List[str]],
    ext: Optional[List[str]],
    source: Optional[str],
    policy: Optional[str],
) -> MetadataResolver:
    settings = get_settings()
    paths = [str(Path(r).expanduser().resolve()) for r in roots] if roots else list(settings.paths)
    if not paths:
        raise typer.BadParameter("No resource paths given (pass ROOTS or set RESTMAP_PATHS)")
    for p in paths:
        if not Path(p).is_dir():
            raise typer.BadParameter(f"Resource path is not a directory: {p}")

    try:
        return MetadataResolver.create(
            paths,
            source=make_source(source or settings.declaration_source),
            extensions=ext or settings.extensions,
            handle_policy=get_handle_policy(policy or settings.handle_policy),
        )
    except ConfigurationError as exc:
        raise typer.BadParameter(exc.message) from exc


def _fail(exc: Exception) -> NoReturn:
    console.print(f"[bold red]error[/bold red]: {escape(str(exc))}")
    raise typer.Exit(code=1)


def _route_table(metadata: Iterable[ClassMetaData]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("CLASS")
    table.add_column("ROUTE", no_wrap=True)
    table.add_column("VERBS", no_wrap=True)
    table.add_column("PATTERN")
    table.add_column("HANDLE")
    table.add_column("ORIGIN", no_wrap=True)

    for md in metadata:
        for r in md.routes.values():
            table.add_row(
                escape(md.class_name),
                escape(r.name),
                ",".join(r.verbs) or "-",
                escape(r.route_pattern),
                escape(r.handle_method_name or r.action_class_name or "-"),
                "*" if r.name == md.origin_route_name else "",
            )
    return table


@app.command()
def resources(
    roots: Optional[List[str]] = typer.Argument(None, help="Directories to scan (default: RESTMAP_PATHS)"),
    ext: Optional[List[str]] = typer.Option(None, "--ext", help="File extension to scan (repeatable)"),
    source: Optional[str] = typer.Option(None, help="Declaration source: ast|import"),
) -> None:
    """List the resource types found under ROOTS."""
    resolver = _build_resolver(roots, ext, source, None)
    try:
        names = resolver.get_all_class_names()
    except (ConfigurationError, UnitLoadError) as exc:
        _fail(exc)

    console.print(f"[bold]Resources:[/bold] {len(names)}")
    for name in names:
        console.print(f"  {escape(name)}")


@app.command("compile")
def compile_(
    roots: Optional[List[str]] = typer.Argument(None, help="Directories to scan (default: RESTMAP_PATHS)"),
    ext: Optional[List[str]] = typer.Option(None, "--ext", help="File extension to scan (repeatable)"),
    source: Optional[str] = typer.Option(None, help="Declaration source: ast|import"),
    policy: Optional[str] = typer.Option(None, help="Handle policy: none|push"),
    format: str = typer.Option("table", help="Output format: table|json"),
    out: Optional[str] = typer.Option(None, help="Write JSON to this path instead of stdout"),
) -> None:
    """Compile every resource type under ROOTS into the routing table."""
    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    resolver = _build_resolver(roots, ext, source, policy)
    try:
        table = resolver.compile_table()
    except MetadataCompilationError as exc:
        console.print(f"[bold red]{len(exc.failures)} resource type(s) failed to compile[/bold red]")
        for name, err in exc.failures.items():
            code = escape(f"[{err.code}]")
            console.print(f"  {escape(name)}: {code} {escape(err.message)}")
        raise typer.Exit(code=1)
    except (ConfigurationError, UnitLoadError) as exc:
        _fail(exc)

    if fmt == "json" or out:
        text = json.dumps({name: md.model_dump() for name, md in table.items()}, indent=2)
        if out:
            out_path = Path(out).expanduser()
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(text, encoding="utf-8")
            console.print(f"[bold green]Wrote[/bold green] routing table to: {out_path}")
        else:
            typer.echo(text)
        return

    route_count = sum(len(md.routes) for md in table.values())
    console.print(f"[bold]Resources:[/bold] {len(table)}  [bold]Routes:[/bold] {route_count}")
    console.print(_route_table(table.values()))


@app.command()
def show(
    class_name: str = typer.Argument(..., help="Resource type identifier, e.g. cms.invoice.Invoice"),
    roots: Optional[List[str]] = typer.Argument(None, help="Directories to scan (default: RESTMAP_PATHS)"),
    ext: Optional[List[str]] = typer.Option(None, "--ext", help="File extension to scan (repeatable)"),
    source: Optional[str] = typer.Option(None, help="Declaration source: ast|import"),
    policy: Optional[str] = typer.Option(None, help="Handle policy: none|push"),
) -> None:
    """Show the compiled routes of one resource type."""
    resolver = _build_resolver(roots, ext, source, policy)
    try:
        md = resolver.load_metadata_for_class(class_name)
    except (ConfigurationError, UnitLoadError, MetadataError) as exc:
        _fail(exc)

    if md is None:
        console.print(f"[bold red]Not a resource:[/bold red] {escape(class_name)}")
        raise typer.Exit(code=1)

    console.print(f"[bold]{escape(md.class_name)}[/bold]")
    console.print(f"Representations: {escape(', '.join(md.representations)) or '-'}")
    console.print(f"Origin route: {escape(md.origin_route_name or '-')}")
    console.print(_route_table([md]))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
