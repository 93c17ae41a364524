# src/filters/fallback_synthesizer.py

"""Placeholder listings for searches that match nothing.

A non-empty query always yields ``4 + len(query) % 5`` listings.  Brand
(unless the caller filters on one) and identifiers come from the query;
prices, ratings and type labels come from a random source that is
seeded from the query unless one is injected, so repeated searches
return identical pages.
"""

import logging
import math
import random

from src.config.settings import Settings
from src.filters.search_ranker import SearchRanker
from src.models.product import ProductSummary
from src.models.search import SearchFilterSet

logger = logging.getLogger("pricecompare.fallback")


def derive_brand(query: str) -> str:
    """First known brand mentioned in *query*, else its capitalised first word."""
    lowered = query.lower()
    for brand in Settings.FALLBACK_BRANDS:
        if brand.lower() in lowered:
            return brand
    first = query.split()[0] if query.split() else query
    return first[:1].upper() + first[1:]


def _listing_brand(query: str, filters: SearchFilterSet) -> str:
    """Brand for generated listings; a brand filter wins over the query."""
    requested = (filters.brand or "").strip()
    if not requested:
        return derive_brand(query)
    for brand in Settings.FALLBACK_BRANDS:
        if brand.lower() == requested.lower():
            return brand
    return requested


def fallback_count(query: str) -> int:
    return Settings.FALLBACK_MIN_COUNT + (
        len(query) % Settings.FALLBACK_COUNT_SPREAD
    )


def _price_window(
    base: int, filters: SearchFilterSet,
) -> tuple[float, float]:
    """Whole-number price range honouring the caller's bounds.

    Falls back to the caller's own bounds when they do not overlap
    the default range at all.
    """
    low: float = base
    high: float = base + Settings.FALLBACK_PRICE_SPREAD
    if filters.min_price is not None:
        low = max(low, math.ceil(filters.min_price))
    if filters.max_price is not None:
        high = min(high, math.floor(filters.max_price))
    if low <= high:
        return low, high

    low = filters.min_price if filters.min_price is not None else 0.0
    if filters.max_price is not None:
        high = filters.max_price
    else:
        high = low + Settings.FALLBACK_PRICE_SPREAD
    return low, high


def _pick_price(rng: random.Random, low: float, high: float) -> float:
    whole_low, whole_high = math.ceil(low), math.floor(high)
    if whole_low <= whole_high:
        return float(rng.randint(whole_low, whole_high))
    # No whole number fits between the bounds
    return float(low)


class FallbackSynthesizer:
    """Generate plausible listings when a real search finds nothing."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng

    def _rng_for(self, filters: SearchFilterSet) -> random.Random:
        if self._rng is not None:
            return self._rng
        return random.Random(filters.normalized_query)

    def synthesize(
        self, filters: SearchFilterSet,
    ) -> list[ProductSummary]:
        """Return synthetic listings for ``filters.query``.

        Listings carry the caller's brand and category filters when
        given.  Price bounds and the sort mode are applied to the
        generated listings exactly as for real ones.  An empty query
        yields an empty list.
        """
        query = filters.query.strip()
        if not query:
            return []

        rng = self._rng_for(filters)
        brand = _listing_brand(query, filters)
        category = (
            (filters.category or "").strip() or Settings.FALLBACK_CATEGORY
        )
        count = fallback_count(query)
        base = (
            Settings.FALLBACK_BASE_PRICE
            + Settings.FALLBACK_PRICE_PER_CHAR * len(query)
        )
        low, high = _price_window(base, filters)
        images = Settings.FALLBACK_IMAGES

        generated: list[ProductSummary] = []
        for i in range(1, count + 1):
            label = rng.choice(Settings.FALLBACK_TYPES)
            model_num = rng.randint(0, 999)
            min_price = _pick_price(rng, low, high)
            max_price = min_price + rng.randint(
                0, Settings.FALLBACK_MAX_PRICE_SPREAD,
            )
            generated.append(
                ProductSummary(
                    id=Settings.FALLBACK_ID_BASE + i + 10 * len(query),
                    name=f"{brand} {label} {model_num}",
                    brand=brand,
                    model=f"{label} {model_num}",
                    category=category,
                    subcategory=label.lower(),
                    description=(
                        f"Premium {brand} {label} shoes designed for "
                        "comfort and style. Perfect for everyday wear."
                    ),
                    primary_image_url=images[i % len(images)],
                    search_keywords=(
                        f"{brand.lower()} {label.lower()} shoes"
                    ),
                    min_price=min_price,
                    max_price=max_price,
                    store_count=rng.randint(2, 6),
                    avg_rating=round(rng.uniform(3.5, 5.0), 1),
                    total_reviews=rng.randint(10, 209),
                    is_synthetic=True,
                )
            )

        kept = SearchRanker.apply_price_filters(generated, filters)
        logger.info(
            "Synthesised %d fallback listings for '%s' (brand=%s)",
            len(kept),
            query,
            brand,
        )
        return SearchRanker.rank(kept, filters)
