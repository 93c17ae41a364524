# src/cli/runner.py

"""Headless CLI commands wrapping the async orchestrators."""

import json
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.comparison import (
    MultiProductComparison,
    PriceAlertSuggestion,
    ProductComparison,
)
from src.models.errors import (
    InvalidArgumentError,
    NotFoundError,
    PriceCompareError,
    UpstreamUnavailableError,
)
from src.models.product import ProductDetail
from src.models.search import (
    FilterOptions,
    PageRequest,
    SearchFilterSet,
    SearchResultPage,
    SearchSuggestion,
    TrendingReport,
)
from src.services.compare_orchestrator import CompareOrchestrator
from src.services.search_orchestrator import SearchOrchestrator
from src.storage.catalog_db import CatalogDB

logger = logging.getLogger("pricecompare.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

EXIT_OK = 0
EXIT_CODES: dict[type[PriceCompareError], int] = {
    NotFoundError: 1,
    InvalidArgumentError: 2,
    UpstreamUnavailableError: 3,
}


def exit_code_for(exc: PriceCompareError) -> int:
    for error_type, code in EXIT_CODES.items():
        if isinstance(exc, error_type):
            return code
    return 3


def _money(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{Settings.CURRENCY_SYMBOL}{value:,.2f}"


def _emit_json(payload: object) -> None:
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


async def _run_guarded(
    db_path: Path | None,
    action: Callable[[CatalogDB], Awaitable[None]],
) -> int:
    """Open the catalogue, run *action* and map failures to exit codes."""
    try:
        db = CatalogDB(db_path)
    except PriceCompareError as exc:
        _err.print(f"[red]Error: {exc}[/red]")
        return exit_code_for(exc)

    try:
        await action(db)
    except PriceCompareError as exc:
        logger.warning("Command failed: %s", exc)
        _err.print(f"[red]Error: {exc}[/red]")
        return exit_code_for(exc)
    finally:
        db.close()
    return EXIT_OK


# ── Rendering ────────────────────────────────────────────


def _print_search_table(result: SearchResultPage) -> None:
    title = "Search Results"
    if result.is_fallback:
        title += " (suggested listings)"
    table = Table(title=title, show_lines=True, title_style="bold cyan")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", max_width=50)
    table.add_column("Brand", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Stores", justify="center")
    table.add_column("Rating", justify="center")

    for p in result.products:
        table.add_row(
            str(p.id),
            p.name,
            p.brand,
            p.price_range or "N/A",
            str(p.store_count),
            f"{p.avg_rating:.1f}" if p.avg_rating is not None else "—",
        )
    Console().print(table)


def _print_comparison_table(result: ProductComparison) -> None:
    table = Table(
        title=f"{result.product.name}: price comparison",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Rank", style="dim", justify="right")
    table.add_column("Store", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Availability")
    table.add_column("Saves", justify="right")
    table.add_column("URL", overflow="fold", style="dim")

    for entry in result.comparison:
        store = entry.store_name
        if entry.is_lowest_price:
            store = f"[bold]{store}[/bold] ★"
        table.add_row(
            str(entry.price_rank),
            store,
            _money(entry.price),
            entry.record.availability.value,
            _money(entry.savings_vs_highest),
            entry.record.product_url,
        )
    Console().print(table)


def _print_multi_table(result: MultiProductComparison) -> None:
    table = Table(
        title="Store comparison",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Store", style="magenta")
    for comp in result.comparisons:
        table.add_column(comp.product.name, justify="right", max_width=30)

    for row in result.store_comparison:
        cells: list[str] = []
        for cell in row.products:
            if cell.price is None:
                cells.append("[dim]not available[/dim]")
            elif cell.is_lowest:
                cells.append(f"[bold green]{_money(cell.price)}[/bold green]")
            else:
                cells.append(_money(cell.price))
        table.add_row(row.store_name, *cells)
    Console().print(table)

    deal = result.overall_best_deal
    if deal is not None:
        _err.print(
            f"[green]Best deal: {deal.product_name} at "
            f"{deal.store_name} for {_money(deal.price)}[/green]"
        )


def _print_alert_table(result: PriceAlertSuggestion) -> None:
    table = Table(
        title=f"{result.product.name}: price alert",
        title_style="bold cyan",
    )
    table.add_column("Signal", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Current lowest", _money(result.current_lowest))
    table.add_row(
        "Suggested alert price", _money(result.suggested_alert_price),
    )
    table.add_row("Trend", result.trend.value)
    table.add_row("Volatility", result.volatility.value)
    Console().print(table)


def _print_detail_table(result: ProductDetail) -> None:
    product = result.product
    table = Table(
        title=f"{product.brand} {product.name}",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Store", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Availability")
    table.add_column("Rating", justify="center")
    for record in result.prices:
        table.add_row(
            record.store_name,
            _money(record.price),
            record.availability.value,
            f"{record.rating:.1f}" if record.rating is not None else "—",
        )
    Console().print(table)
    _err.print(
        f"[dim]{result.available_stores} stores in stock, "
        f"{len(result.price_history)} history samples[/dim]"
    )


def _print_suggestions(result: list[SearchSuggestion]) -> None:
    table = Table(title="Suggestions", title_style="bold cyan")
    table.add_column("Text")
    table.add_column("Type", style="dim")
    table.add_column("Brand", style="magenta")
    table.add_column("Frequency", justify="right")
    for s in result:
        table.add_row(s.text, s.type, s.brand or "—", str(s.frequency))
    Console().print(table)


def _print_trending(result: TrendingReport) -> None:
    console = Console()
    queries = Table(title="Trending searches", title_style="bold cyan")
    queries.add_column("Query")
    queries.add_column("Searches", justify="right")
    queries.add_column("Avg results", justify="right")
    for q in result.queries:
        queries.add_row(q.query, str(q.search_count), str(q.avg_results))
    console.print(queries)

    brands = Table(title="Popular brands", title_style="bold cyan")
    brands.add_column("Brand", style="magenta")
    brands.add_column("Products", justify="right")
    brands.add_column("From", justify="right", style="green")
    brands.add_column("Average", justify="right")
    for b in result.popular_brands:
        brands.add_row(
            b.brand,
            str(b.product_count),
            _money(b.min_price),
            _money(b.avg_price),
        )
    console.print(brands)


def _print_filter_options(result: FilterOptions) -> None:
    console = Console()
    categories = Table(title="Categories", title_style="bold cyan")
    categories.add_column("Category")
    categories.add_column("Subcategory", style="dim")
    categories.add_column("Products", justify="right")
    for c in result.categories:
        categories.add_row(
            c.category, c.subcategory or "—", str(c.product_count),
        )
    console.print(categories)

    brands = Table(title="Brands", title_style="bold cyan")
    brands.add_column("Brand", style="magenta")
    brands.add_column("Products", justify="right")
    brands.add_column("Price range", justify="right", style="green")
    for b in result.brands:
        span = (
            f"{_money(b.min_price)} - {_money(b.max_price)}"
            if b.min_price is not None
            else "N/A"
        )
        brands.add_row(b.brand, str(b.product_count), span)
    console.print(brands)


# ── Commands ─────────────────────────────────────────────


async def cli_search(
    query: str | None,
    brand: str | None = None,
    category: str | None = None,
    min_price: str | None = None,
    max_price: str | None = None,
    sort_by: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    output_format: str = "json",
    db_path: Path | None = None,
) -> int:
    """Run a catalogue search and print one page of results."""
    try:
        filters = SearchFilterSet.from_params(
            query, brand, category, min_price, max_price, sort_by,
        )
        request = PageRequest.from_params(page, limit)
    except InvalidArgumentError as exc:
        _err.print(f"[red]Invalid search: {exc}[/red]")
        return exit_code_for(exc)

    async def action(db: CatalogDB) -> None:
        orchestrator = SearchOrchestrator(db)
        _err.print(f"[bold]Searching:[/bold] {filters.query or '(all)'}")
        result = await orchestrator.search(filters, request)
        if result.is_fallback:
            _err.print(
                "[yellow]No exact matches; showing suggested "
                "listings.[/yellow]"
            )
        elif not result.products:
            _err.print("[yellow]No products found.[/yellow]")
        else:
            _err.print(
                f"[green]✓ {result.pagination.total} products "
                f"(page {result.pagination.page}/"
                f"{max(result.pagination.total_pages, 1)})[/green]"
            )
        if output_format == "table":
            _print_search_table(result)
        else:
            _emit_json(result.to_dict())

    return await _run_guarded(db_path, action)


async def cli_compare(
    product_id: int,
    output_format: str = "json",
    db_path: Path | None = None,
) -> int:
    async def action(db: CatalogDB) -> None:
        result = await CompareOrchestrator(db).product_comparison(
            product_id,
        )
        _err.print(
            f"[green]✓ {result.summary.store_count} stores, save up to "
            f"{_money(result.summary.max_savings)}[/green]"
        )
        if output_format == "table":
            _print_comparison_table(result)
        else:
            _emit_json(result.to_dict())

    return await _run_guarded(db_path, action)


async def cli_compare_multi(
    product_ids: list[str],
    output_format: str = "json",
    db_path: Path | None = None,
) -> int:
    async def action(db: CatalogDB) -> None:
        result = await CompareOrchestrator(db).multi_product_comparison(
            product_ids,
        )
        if result.is_partial:
            _err.print(
                "[yellow]Could not compare: "
                f"{', '.join(str(i) for i in result.failed_ids)}[/yellow]"
            )
        if output_format == "table":
            _print_multi_table(result)
        else:
            _emit_json(result.to_dict())

    return await _run_guarded(db_path, action)


async def cli_alerts(
    product_id: int,
    output_format: str = "json",
    db_path: Path | None = None,
) -> int:
    async def action(db: CatalogDB) -> None:
        result = await CompareOrchestrator(db).price_alert_suggestions(
            product_id,
        )
        if output_format == "table":
            _print_alert_table(result)
        else:
            _emit_json(result.to_dict())

    return await _run_guarded(db_path, action)


async def cli_product(
    product_id: int,
    output_format: str = "json",
    db_path: Path | None = None,
) -> int:
    async def action(db: CatalogDB) -> None:
        result = await CompareOrchestrator(db).product_detail(product_id)
        if output_format == "table":
            _print_detail_table(result)
        else:
            _emit_json(result.to_dict())

    return await _run_guarded(db_path, action)


async def cli_suggest(
    query: str,
    output_format: str = "json",
    db_path: Path | None = None,
) -> int:
    async def action(db: CatalogDB) -> None:
        result = await SearchOrchestrator(db).suggestions(query)
        if output_format == "table":
            _print_suggestions(result)
        else:
            _emit_json([s.to_dict() for s in result])

    return await _run_guarded(db_path, action)


async def cli_trending(
    output_format: str = "json",
    db_path: Path | None = None,
) -> int:
    async def action(db: CatalogDB) -> None:
        result = await SearchOrchestrator(db).trending()
        if output_format == "table":
            _print_trending(result)
        else:
            _emit_json(result.to_dict())

    return await _run_guarded(db_path, action)


async def cli_filters(
    output_format: str = "json",
    db_path: Path | None = None,
) -> int:
    async def action(db: CatalogDB) -> None:
        result = await SearchOrchestrator(db).filter_options()
        if output_format == "table":
            _print_filter_options(result)
        else:
            _emit_json(result.to_dict())

    return await _run_guarded(db_path, action)


def run_import_catalog(
    source: Path | None = None,
    db_path: Path | None = None,
) -> int:
    """Import one JSON catalogue file, or every ``*.json`` in a directory."""
    from rich.progress import Progress

    target = source or Settings.SAMPLE_CATALOG_PATH
    if not target.exists():
        _err.print(f"[red]Catalogue not found: {target}[/red]")
        return 1

    files = sorted(target.glob("*.json")) if target.is_dir() else [target]
    if not files:
        _err.print(f"[yellow]No JSON files found in {target}.[/yellow]")
        return EXIT_OK

    _err.print("[bold]Importing catalogue...[/bold]")
    try:
        db = CatalogDB(db_path)
    except PriceCompareError as exc:
        _err.print(f"[red]Error: {exc}[/red]")
        return exit_code_for(exc)

    total_prices = 0
    try:
        with Progress(console=_err) as progress:
            task = progress.add_task("Importing...", total=len(files))
            for filepath in files:
                total_prices += db.import_catalog_file(filepath)
                progress.advance(task)
    except PriceCompareError as exc:
        _err.print(f"[red]Import failed: {exc}[/red]")
        return exit_code_for(exc)
    finally:
        db.close()

    _err.print(
        f"[green]✓ Imported {total_prices:,} prices"
        f" from {len(files)} files[/green]"
    )
    return EXIT_OK
