"""CLI for subrank."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Annotated, Any

import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from subrank import __version__
from subrank.core.config import SubRankConfig, load_config
from subrank.core.errors import ConfigurationError
from subrank.pipeline import RankingPipeline, ScopeRanking
from subrank.services.fetch import ReviewScope
from subrank.services.reporting import (
    filter_items,
    format_details,
    format_leaderboard,
    select_city,
)
from subrank.services.storage import DBReviewStore, create_store, parse_reviews

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="subrank",
    help="Substitute Ranking - Top substitutes overall and by city from school reviews",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"subrank v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Substitute Ranking CLI."""
    load_dotenv()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _build_scope(schools: list[str] | None, schools_file: Path | None) -> ReviewScope:
    school_ids = list(schools or [])
    if schools_file is not None:
        lines = schools_file.read_text(encoding="utf-8").splitlines()
        school_ids += [line.strip() for line in lines if line.strip()]
    return ReviewScope.for_district(school_ids)


def _print_ranking(
    result: ScopeRanking,
    config: SubRankConfig,
    by_city: bool,
    city: str | None,
    search: str | None,
    details: bool,
) -> None:
    if result.is_partial:
        failed = ", ".join(result.failed_school_ids)
        console.print(
            f"[yellow]Results may be incomplete. Could not fetch: {escape(failed)}[/yellow]"
        )

    if by_city:
        cities = result.leaderboards.cities
        if cities:
            console.print(f"[bold]Cities:[/bold] {escape(', '.join(cities))}")
        city_name, items = select_city(result.leaderboards, city)
        title = f"Top {config.ranking.limit}: {city_name or 'no cities'}"
    else:
        items = result.leaderboards.overall
        title = f"Top {config.ranking.limit} Overall"

    items = filter_items(items, search)
    console.print(
        format_leaderboard(items, title, include_breakdown=True), markup=False, soft_wrap=True
    )

    if details:
        for item in items:
            reviews = result.reviews_for(item.sub_id)
            if not reviews:
                continue
            name = escape(item.sub_name or item.sub_id)
            console.print(f"\n[bold]{name}[/bold] complaints & compliments")
            console.print(
                format_details(reviews, config.ranking.detail_limit), markup=False, soft_wrap=True
            )


@app.command()
def rank(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
    schools: Annotated[
        list[str] | None,
        typer.Option("--school", "-s", help="School ID to include (repeat for a district)"),
    ] = None,
    schools_file: Annotated[
        Path | None,
        typer.Option("--schools-file", help="File with one district school ID per line"),
    ] = None,
    by_city: Annotated[
        bool, typer.Option("--by-city", help="Show the per-city leaderboard")
    ] = False,
    city: Annotated[
        str | None, typer.Option("--city", help="City to show with --by-city")
    ] = None,
    search: Annotated[
        str | None, typer.Option("--search", help="Filter by substitute name or city")
    ] = None,
    limit: Annotated[
        int | None, typer.Option("--limit", min=1, help="Leaderboard size")
    ] = None,
    details: Annotated[
        bool, typer.Option("--details", help="Show each substitute's reviews")
    ] = False,
    export: Annotated[
        bool, typer.Option("--export", help="Write reports to the output directory")
    ] = False,
    output_dir: Annotated[
        Path | None, typer.Option("--output-dir", help="Override config output_dir")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")] = False,
) -> None:
    """Rank substitutes for a school or district.

    Args:
        config_path: Path to YAML configuration file.
        schools: School IDs in scope.
        schools_file: File listing district school IDs.
        by_city: Show the per-city view instead of the overall one.
        city: City to display in the per-city view (default: first alphabetically).
        search: Case-insensitive name/city filter.
        limit: Override ranking.limit.
        details: Print drill-down reviews per substitute.
        export: Save markdown/CSV/JSON reports.
        output_dir: Override output directory for exports.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
        if limit is not None:
            config.ranking.limit = limit
        scope = _build_scope(schools, schools_file)

        async def _run() -> None:
            store = create_store(config.store)
            try:
                pipeline = RankingPipeline(config, store)
                result = await pipeline.run(scope)
                _print_ranking(result, config, by_city, city, search, details)
                if export:
                    path = await pipeline.export(result, output_dir)
                    console.print(f"\nReports saved to: {path}")
            finally:
                await store.close()

        asyncio.run(_run())

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1) from e


def _read_documents(path: Path) -> list[tuple[str, dict[str, Any]]]:
    """Read review documents from JSON (list or id->doc map) or JSONL."""
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".jsonl":
        raw: Any = [json.loads(line) for line in text.splitlines() if line.strip()]
    else:
        raw = json.loads(text)

    if isinstance(raw, dict):
        return [(str(doc_id), doc) for doc_id, doc in raw.items()]
    return [(str(doc.get("id") or uuid.uuid4()), doc) for doc in raw]


@app.command("import")
def import_reviews(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
    reviews_path: Annotated[Path, typer.Argument(help="JSON or JSONL review export")],
) -> None:
    """Import review documents into the local DuckDB store.

    Args:
        config_path: Path to YAML configuration file.
        reviews_path: Review export in camelCase document format.
    """
    try:
        config = load_config(config_path)
        if config.store.backend != "duckdb":
            msg = f"import needs the duckdb backend, config uses '{config.store.backend}'"
            raise ConfigurationError(msg, "Set store.backend: duckdb in config.yaml.")

        documents = _read_documents(reviews_path)
        reviews = parse_reviews(documents)

        async def _run() -> int:
            store = DBReviewStore(config.store.path)
            try:
                return await store.add_reviews(reviews)
            finally:
                await store.close()

        written = asyncio.run(_run())
        skipped = len(documents) - len(reviews)
        console.print(f"[green]Imported {written} reviews[/green] into {config.store.path}")
        if skipped:
            console.print(f"[yellow]Skipped {skipped} malformed documents[/yellow]")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(1) from e
    except (json.JSONDecodeError, AttributeError) as e:
        console.print(f"[red]Invalid review file:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file without running.

    Args:
        config_path: Path to YAML configuration file.
    """
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Store backend: {config.store.backend}")
        console.print(f"  Leaderboard size: {config.ranking.limit}")
        console.print(f"  Fetch timeout: {config.fetch.timeout_seconds}s")
        console.print(f"  Max concurrency: {config.fetch.max_concurrency}")
        console.print(f"  Output dir: {config.output_dir}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]Substitute Ranking[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Load a review export into the local store")
    console.print("  uv run subrank import config.yaml reviews.jsonl\n")

    console.print("  # Top 100 for one school")
    console.print("  uv run subrank rank config.yaml --school lincoln-elem\n")

    console.print("  # District view, per city, with review details")
    console.print("  uv run subrank rank config.yaml --schools-file district.txt --by-city\n")

    console.print("  # Search and export reports")
    console.print("  uv run subrank rank config.yaml -s a -s b --search austin --export\n")

    console.print("  # Validate config")
    console.print("  uv run subrank validate config.yaml")


if __name__ == "__main__":
    app()
