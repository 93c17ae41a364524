# src/services/comparison_engine.py

"""Rank a product's store prices into a comparison view.

Pure functions: the caller fetches the product and its active-store
price records, this module only orders and annotates them.
"""

import logging
from collections.abc import Sequence

from src.models.comparison import (
    ComparisonEntry,
    ComparisonSummary,
    ProductComparison,
)
from src.models.errors import NotFoundError
from src.models.price_record import PriceHistorySample, PriceRecord
from src.models.product import Product, ProductDetail

logger = logging.getLogger("pricecompare.comparison")


def _comparison_order(record: PriceRecord) -> tuple[float, int, float]:
    """Ascending price, then most recently scraped first."""
    if record.last_scraped is None:
        return (record.price, 1, 0.0)
    return (record.price, 0, -record.last_scraped.timestamp())


def sort_price_records(
    records: Sequence[PriceRecord],
) -> list[PriceRecord]:
    """Return records in comparison order without mutating the input."""
    return sorted(records, key=_comparison_order)


def compare_prices(
    product: Product, records: Sequence[PriceRecord],
) -> ProductComparison:
    """Build the ranked comparison for one product.

    Every entry whose price equals the overall minimum is flagged as
    lowest; out-of-stock offers still count towards the min/max.

    Raises:
        NotFoundError: when there are no price records to compare.
    """
    if not records:
        msg = f"No store prices available for product {product.id}"
        raise NotFoundError(msg)

    ordered = sort_price_records(records)
    prices = [r.price for r in ordered]
    lowest = min(prices)
    highest = max(prices)

    entries: list[ComparisonEntry] = []
    rank = 0
    previous: float | None = None
    for record in ordered:
        if record.price != previous:
            rank += 1
            previous = record.price
        entries.append(
            ComparisonEntry(
                record=record,
                price_rank=rank,
                is_lowest_price=record.price == lowest,
                savings_vs_highest=highest - record.price,
            )
        )

    summary = ComparisonSummary(
        lowest_price=lowest,
        highest_price=highest,
        max_savings=highest - lowest,
        store_count=len(entries),
        avg_price=round(sum(prices) / len(prices), 2),
        last_updated=ordered[0].last_scraped,
    )

    tied = sum(1 for e in entries if e.is_lowest_price)
    if tied > 1:
        logger.debug(
            "Product %d has %d stores tied at lowest price %.2f",
            product.id,
            tied,
            lowest,
        )

    return ProductComparison(
        product=product, comparison=entries, summary=summary,
    )


def build_product_detail(
    product: Product,
    records: Sequence[PriceRecord],
    history: Sequence[PriceHistorySample],
) -> ProductDetail:
    """Assemble the product page with eligible-only aggregates."""
    eligible = [r for r in records if r.availability.is_eligible]
    ratings = [r.rating for r in eligible if r.rating is not None]

    return ProductDetail(
        product=product,
        prices=sort_price_records(records),
        price_history=list(history),
        available_stores=len({r.store_id for r in eligible}),
        lowest_price=(
            min(r.price for r in eligible) if eligible else None
        ),
        highest_price=(
            max(r.price for r in eligible) if eligible else None
        ),
        avg_rating=(
            round(sum(ratings) / len(ratings), 2) if ratings else None
        ),
        total_reviews=sum(r.review_count for r in eligible),
    )
