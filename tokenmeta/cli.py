"""tokenmeta CLI — serve the metadata API or inspect a mappings directory."""

import json
import sys

import click
from rich.console import Console
from rich.table import Table

from tokenmeta import __version__
from tokenmeta.registry.errors import ConfigError, InvalidPathError

console = Console()


@click.group()
@click.version_option(version=__version__)
def main():
    """tokenmeta — metadata lookup service.

    Loads a directory of JSON documents (one per subject, keyed by file
    name) and serves lookups, property reads and batch queries over HTTP.
    """


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@click.option("--mappings", "-m", default=None, help="Directory of JSON documents (overrides MAPPINGS)")
@click.option("--listen", "-l", default=None, help="host:port to bind (overrides LISTEN)")
@click.option("--config", "-c", "config_file", default=None, type=click.Path(dir_okay=False), help="YAML config file")
@click.option("--log-level", default=None, help="Log level (overrides LOG_LEVEL)")
def serve(mappings: str | None, listen: str | None, config_file: str | None, log_level: str | None):
    """Load the mappings directory and serve the HTTP API."""
    import uvicorn

    from tokenmeta.config import load_settings
    from tokenmeta.logs import configure_logging, resolve_level
    from web.backend.app.main import create_app

    try:
        settings = load_settings(
            config_file, mappings=mappings, listen=listen, log_level=log_level
        )
        configure_logging(settings.log_level)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/] {e}")
        sys.exit(2)

    host, port = settings.bind
    console.print(f"\n[bold blue]tokenmeta[/] — Serving {settings.mappings} on {host}:{port}\n")

    app = create_app(settings)
    uvicorn.run(app, host=host, port=port, log_level=resolve_level(settings.log_level))


# ── Check ────────────────────────────────────────────────────────────


@main.command()
@click.argument("mappings")
def check(mappings: str):
    """Load MAPPINGS once and report what was read and what was skipped."""
    from tokenmeta.registry.loader import load_documents

    console.print(f"\n[bold blue]tokenmeta[/] — Checking: {mappings}\n")

    try:
        report = load_documents(mappings)
    except InvalidPathError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)

    if report.documents:
        table = Table(title=f"Subjects ({report.loaded} loaded)")
        table.add_column("Subject", style="cyan")
        table.add_column("Properties", justify="right")
        for subject, document in sorted(report.documents.items()):
            count = str(len(document)) if isinstance(document, dict) else "-"
            table.add_row(subject, count)
        console.print(table)
    else:
        console.print("[yellow]No subjects loaded.[/]")

    for skipped in report.skipped:
        console.print(f"  [yellow]![/] {skipped.path} ({skipped.reason})")


# ── Lookups ──────────────────────────────────────────────────────────


def _engine_for(mappings: str):
    from tokenmeta.registry.query import QueryEngine
    from tokenmeta.registry.store import MetadataRegistry

    registry = MetadataRegistry(mappings)
    try:
        registry.reload()
    except InvalidPathError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)
    return QueryEngine(registry)


@main.command()
@click.argument("mappings")
@click.argument("subject")
@click.option("--property", "-p", "name", default=None, help="Only print this property")
def get(mappings: str, subject: str, name: str | None):
    """Print the document for SUBJECT (or one property of it) as JSON."""
    engine = _engine_for(mappings)

    missing = object()
    if name is None:
        value = engine.resolve_single(subject, missing)
    else:
        value = engine.resolve_properties(subject, name, missing)

    if value is missing:
        console.print(f"[yellow]Nothing found for {subject}[/]")
        sys.exit(1)

    click.echo(json.dumps(value, indent=2))


@main.command()
@click.argument("mappings")
@click.argument("subjects", nargs=-1, required=True)
@click.option("--property", "-p", "properties", multiple=True, help="Project to this property (repeatable)")
def query(mappings: str, subjects: tuple, properties: tuple):
    """Batch-resolve SUBJECTS and print {"subjects": [...]} as JSON."""
    engine = _engine_for(mappings)
    results = engine.batch(list(subjects), list(properties) if properties else None)
    click.echo(json.dumps({"subjects": results}, indent=2))


if __name__ == "__main__":
    main()
