# main.py

"""Entry point for the pricecompare command-line tool."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from src.config.logging_config import setup_logging
from src.config.settings import Settings
from src.models.search import SortMode

logger = logging.getLogger("pricecompare.main")


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        dest="db_path",
        help=f"Catalogue database (default: {Settings.CATALOG_DB_PATH}).",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="pricecompare",
        description="Multi-store product price comparison engine.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search the catalogue.")
    search.add_argument(
        "query", nargs="?", default=None,
        help="Free-text query. Omit to browse newest products.",
    )
    search.add_argument("-b", "--brand", default=None)
    search.add_argument("-c", "--category", default=None)
    search.add_argument("--min-price", default=None, dest="min_price")
    search.add_argument("--max-price", default=None, dest="max_price")
    search.add_argument(
        "-s",
        "--sort",
        choices=[m.value for m in SortMode],
        default=SortMode.RELEVANCE.value,
        dest="sort_by",
    )
    search.add_argument("-p", "--page", default=None)
    search.add_argument("-l", "--limit", default=None)
    _add_common(search)

    compare = commands.add_parser(
        "compare", help="Compare one product's prices across stores.",
    )
    compare.add_argument("product_id", type=int)
    _add_common(compare)

    multi = commands.add_parser(
        "compare-multi",
        help=(
            "Compare up to "
            f"{Settings.MAX_COMPARE_PRODUCTS} products side by side."
        ),
    )
    multi.add_argument("product_ids", nargs="+")
    _add_common(multi)

    alerts = commands.add_parser(
        "alerts", help="Suggest a price-drop alert threshold.",
    )
    alerts.add_argument("product_id", type=int)
    _add_common(alerts)

    product = commands.add_parser(
        "product", help="Show a product with prices and history.",
    )
    product.add_argument("product_id", type=int)
    _add_common(product)

    suggest = commands.add_parser(
        "suggest", help="Autocomplete a partial query.",
    )
    suggest.add_argument("query")
    _add_common(suggest)

    trending = commands.add_parser(
        "trending", help="Trending searches and popular brands.",
    )
    _add_common(trending)

    filters = commands.add_parser(
        "filters", help="Available categories and brands.",
    )
    _add_common(filters)

    importer = commands.add_parser(
        "import-catalog", help="Load a JSON catalogue into the database.",
    )
    importer.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=None,
        help=(
            "Catalogue file or directory "
            f"(default: {Settings.SAMPLE_CATALOG_PATH})."
        ),
    )
    importer.add_argument(
        "--db", type=Path, default=None, dest="db_path",
    )
    return parser


def _dispatch(args: argparse.Namespace) -> int:
    """Run the selected command and return its exit code."""
    from src.cli import runner

    fmt = getattr(args, "output_format", "json")
    db = args.db_path

    if args.command == "search":
        return asyncio.run(
            runner.cli_search(
                query=args.query,
                brand=args.brand,
                category=args.category,
                min_price=args.min_price,
                max_price=args.max_price,
                sort_by=args.sort_by,
                page=args.page,
                limit=args.limit,
                output_format=fmt,
                db_path=db,
            )
        )
    if args.command == "compare":
        return asyncio.run(runner.cli_compare(args.product_id, fmt, db))
    if args.command == "compare-multi":
        return asyncio.run(
            runner.cli_compare_multi(args.product_ids, fmt, db)
        )
    if args.command == "alerts":
        return asyncio.run(runner.cli_alerts(args.product_id, fmt, db))
    if args.command == "product":
        return asyncio.run(runner.cli_product(args.product_id, fmt, db))
    if args.command == "suggest":
        return asyncio.run(runner.cli_suggest(args.query, fmt, db))
    if args.command == "trending":
        return asyncio.run(runner.cli_trending(fmt, db))
    if args.command == "filters":
        return asyncio.run(runner.cli_filters(fmt, db))
    return runner.run_import_catalog(args.path, db)


def main() -> None:
    log_file = setup_logging()
    logger.info("pricecompare starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    try:
        exit_code = _dispatch(args)
    except Exception:
        logger.critical("Fatal error running %s", args.command, exc_info=True)
        raise
    finally:
        logger.info("pricecompare %s finished", args.command)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
