import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from typeorm_to_prisma.config import CodemodSettings, load_settings, parse_model_mapping
from typeorm_to_prisma.core.languages import detect_language_from_path
from typeorm_to_prisma.core.migrate import iter_source_files, run_migration
from typeorm_to_prisma.core.transform import transform_source
from typeorm_to_prisma.errors import CodemodError
from typeorm_to_prisma.models import MigrationReport
from typeorm_to_prisma.sinks import SchemaFileWriter

logger = logging.getLogger(__name__)
console = Console()


def _existing_paths(paths: list[Path]) -> list[Path]:
    existing = [path for path in paths if path.exists()]
    for missing in paths:
        if missing not in existing:
            console.print(f"[yellow]Skipping missing path[/yellow] {missing}")
    if not existing:
        console.print("[red]No input files found.[/red]")
        raise typer.Exit(1)
    return existing


def _settings(
    client_member: str | None,
    model_case: str | None,
    provider: str | None,
    model: list[str] | None,
) -> CodemodSettings:
    try:
        return load_settings(
            client_member=client_member,
            model_case=model_case,
            datasource_provider=provider,
            model_mapping=parse_model_mapping(model) if model else None,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _render_report(report: MigrationReport, dry_run: bool) -> None:
    table = Table(show_lines=False)
    table.add_column("file")
    table.add_column("status")
    for path in report.files_changed:
        table.add_row(path, "[yellow]would change[/yellow]" if dry_run else "[green]rewritten[/green]")
    for path, reason in report.failures.items():
        table.add_row(path, f"[red]failed[/red]: {reason}")
    console.print(table)
    console.print(
        f"({report.files_scanned} scanned, {len(report.files_changed)} changed, {len(report.failures)} failed)"
    )
    if report.models:
        console.print(f"[green]Models[/green]: {', '.join(report.models)}")
    if report.schema_path:
        console.print(f"[green]Wrote[/green] schema to {report.schema_path}")


def run(
    paths: Annotated[list[Path], typer.Argument(help="Files or directories to transform.")],
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Report changes without writing files.")] = False,
    schema_out: Annotated[Path | None, typer.Option(help="Write the assembled Prisma schema to this file.")] = None,
    client_member: Annotated[str | None, typer.Option(help="Member holding the Prisma client.")] = None,
    model_case: Annotated[str | None, typer.Option(help="Model accessor case: preserve or camel.")] = None,
    provider: Annotated[str | None, typer.Option(help="Datasource provider of the generated schema.")] = None,
    model: Annotated[
        list[str] | None, typer.Option(help="Explicit NAME=MODEL mapping for a class or member; repeatable.")
    ] = None,
) -> None:
    """Rewrite TypeORM repository usage into Prisma client calls."""
    settings = _settings(client_member, model_case, provider, model)
    report = run_migration(_existing_paths(paths), settings, dry_run=dry_run, schema_out=schema_out)
    _render_report(report, dry_run)


def schema(
    paths: Annotated[list[Path], typer.Argument(help="Files or directories holding entity classes.")],
    provider: Annotated[str | None, typer.Option(help="Datasource provider of the generated schema.")] = None,
) -> None:
    """Print the Prisma schema extracted from entity classes without changing any file."""
    settings = _settings(None, None, provider, None)
    writer = SchemaFileWriter(provider=settings.datasource_provider)
    for file_path in iter_source_files(_existing_paths(paths)):
        try:
            result = transform_source(
                file_path.read_text(encoding="utf-8"),
                language=detect_language_from_path(file_path),
                settings=settings,
                path=str(file_path),
            )
        except (OSError, UnicodeDecodeError, CodemodError) as exc:
            logger.error("Failed to read entities from %s: %s", file_path, exc)
            continue
        writer.add(result, str(file_path))

    document = writer.render()
    if document is None:
        console.print("[yellow]No entity classes found.[/yellow]")
        return
    typer.echo(document, nl=False)
