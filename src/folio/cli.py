"""CLI interface for folio."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from folio.config import FolioConfig, load_config, merge_cli_overrides
from folio.content.models import ChildType, ContentType
from folio.content.store import JsonContentRepository
from folio.errors import ContentNotFound, ContentNotVisible
from folio.localization.reader import ReaderService
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="folio",
    help="Resolve localized, reader-visible series and books.",
)

console = Console()

EXIT_NOT_FOUND = 1
EXIT_NOT_VISIBLE = 2


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from folio import __version__

        console.print(f"folio {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """Folio - localized reader views over a content store."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a .folio.toml file."),
]
StoreOption = Annotated[
    Optional[Path],
    typer.Option("--store", "-s", help="Directory holding the JSON content store."),
]
LocaleOption = Annotated[
    str,
    typer.Option("--locale", "-l", help="Requested locale, e.g. en, ko, mn, ja."),
]


def _build_service(config_path: Path | None, store: Path | None) -> ReaderService:
    config: FolioConfig = load_config(config_path)
    config = merge_cli_overrides(config, store_path=str(store) if store else None)
    repository = JsonContentRepository(config.store.directory)
    return ReaderService(repository, config.localization.to_resolver())


def _parse_content_type(raw: str) -> ContentType:
    try:
        return ContentType(raw.lower())
    except ValueError:
        valid = ", ".join(t.value for t in ContentType)
        console.print(f"[red]Error:[/red] Unknown content type: {raw} (expected {valid})")
        raise typer.Exit(EXIT_NOT_FOUND)


def _run(coro: object) -> object:
    """Run a resolution coroutine, mapping reader errors to exit codes."""
    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except ContentNotVisible as exc:
        console.print(f"[yellow]Not available:[/yellow] {exc}")
        raise typer.Exit(EXIT_NOT_VISIBLE)
    except ContentNotFound as exc:
        console.print(f"[red]Not found:[/red] {exc}")
        raise typer.Exit(EXIT_NOT_FOUND)


@app.command(name="resolve")
def resolve_cmd(
    content_type: Annotated[str, typer.Argument(help="series or book")],
    content_id: Annotated[str, typer.Argument(help="Content item id")],
    locale: LocaleOption = "en",
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Print the reader view (parent and children) as JSON."""
    kind = _parse_content_type(content_type)
    service = _build_service(config, store)
    view = _run(service.resolve_for_reader(kind, content_id, locale))
    typer.echo(view.model_dump_json(indent=2))


@app.command(name="chapter")
def chapter_cmd(
    content_type: Annotated[str, typer.Argument(help="series or book")],
    content_id: Annotated[str, typer.Argument(help="Content item id")],
    ordinal: Annotated[int, typer.Argument(help="Chapter or page number")],
    locale: LocaleOption = "en",
    pages: Annotated[
        bool,
        typer.Option("--pages", help="Navigate book pages instead of chapters."),
    ] = False,
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """Print one chapter (or page) with previous/next navigation as JSON."""
    kind = _parse_content_type(content_type)
    service = _build_service(config, store)
    child_type = ChildType.PAGE if pages else None
    view = _run(service.resolve_chapter(kind, content_id, ordinal, locale, child_type=child_type))
    typer.echo(view.model_dump_json(indent=2))


@app.command(name="library")
def library_cmd(
    content_type: Annotated[str, typer.Argument(help="series or book")],
    locale: LocaleOption = "en",
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print JSON instead of a table."),
    ] = False,
    store: StoreOption = None,
    config: ConfigOption = None,
) -> None:
    """List published items with their localized titles."""
    kind = _parse_content_type(content_type)
    service = _build_service(config, store)
    entries = _run(service.resolve_library(kind, locale))

    if as_json:
        typer.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        console.print(f"[yellow]No published {kind} yet.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Published {kind} ({locale})")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Locale")
    table.add_column("Published")
    for entry in entries:
        published = entry.published_at.strftime("%Y-%m-%d") if entry.published_at else "-"
        source = entry.projection.source_locale
        if entry.projection.used_fallback:
            source = f"{source} (fallback)"
        table.add_row(entry.id, entry.projection.title, source, published)
    console.print(table)


@app.command(name="chain")
def chain_cmd(
    locale: Annotated[str, typer.Argument(help="Requested locale")],
    item_default: Annotated[
        Optional[str],
        typer.Option("--item-default", help="The content item's own default locale."),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Print the locale fallback chain for a request."""
    resolver = load_config(config).localization.to_resolver()
    typer.echo(" -> ".join(resolver.chain(locale, item_default)))
