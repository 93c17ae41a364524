# src/filters/search_ranker.py

"""Filter and order candidate products for a search request."""

import logging
import re
from collections.abc import Sequence
from datetime import timezone

from src.config.settings import Settings
from src.models.product import ProductSummary
from src.models.search import SearchFilterSet, SortMode

logger = logging.getLogger("pricecompare.search")

_WORD_RE = re.compile(r"\w+")


def _words(text: str) -> set[str]:
    return set(_WORD_RE.findall(text.lower()))


def _created_key(product: ProductSummary) -> float:
    """Creation time as a UTC epoch; naive values are taken as UTC."""
    created = product.created_at
    if created is None:
        return float("-inf")
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


class SearchRanker:
    """Conjunctive filtering plus sort-mode ordering of search candidates."""

    # ── Matching ─────────────────────────────────────────

    @staticmethod
    def substring_match(product: ProductSummary, needle: str) -> bool:
        """Case-insensitive substring hit on name, brand, model or keywords."""
        return any(
            needle in value.lower()
            for value in (
                product.name,
                product.brand,
                product.model,
                product.search_keywords,
            )
        )

    @staticmethod
    def fulltext_match(product: ProductSummary, query: str) -> bool:
        """Word-level hit against every indexed text column.

        Query words shorter than ``FULLTEXT_MIN_TOKEN_LENGTH`` are
        ignored, as a natural-language full-text index would.
        """
        tokens = {
            t for t in _words(query)
            if len(t) >= Settings.FULLTEXT_MIN_TOKEN_LENGTH
        }
        if not tokens:
            return False
        indexed = _words(
            " ".join((
                product.name,
                product.brand,
                product.model,
                product.description,
                product.search_keywords,
            ))
        )
        return not tokens.isdisjoint(indexed)

    @staticmethod
    def matches_query(product: ProductSummary, query: str) -> bool:
        needle = query.strip().lower()
        if not needle:
            return True
        return SearchRanker.substring_match(
            product, needle,
        ) or SearchRanker.fulltext_match(product, needle)

    @staticmethod
    def relevance_score(product: ProductSummary, query: str) -> int:
        """Weighted substring score: name 10, brand 8, model 6."""
        needle = query.strip().lower()
        if not needle:
            return 0
        weights = Settings.RELEVANCE_WEIGHTS
        score = 0
        if needle in product.name.lower():
            score += weights["name"]
        if needle in product.brand.lower():
            score += weights["brand"]
        if needle in product.model.lower():
            score += weights["model"]
        return score

    # ── Filtering ────────────────────────────────────────

    @staticmethod
    def within_price_bounds(
        product: ProductSummary, filters: SearchFilterSet,
    ) -> bool:
        """Bounds apply to the minimum available price.

        A product with no available price never satisfies a bound.
        """
        if filters.min_price is None and filters.max_price is None:
            return True
        if product.min_price is None:
            return False
        if (
            filters.min_price is not None
            and product.min_price < filters.min_price
        ):
            return False
        if (
            filters.max_price is not None
            and product.min_price > filters.max_price
        ):
            return False
        return True

    @staticmethod
    def apply_price_filters(
        products: Sequence[ProductSummary], filters: SearchFilterSet,
    ) -> list[ProductSummary]:
        return [
            p for p in products
            if SearchRanker.within_price_bounds(p, filters)
        ]

    @staticmethod
    def apply_filters(
        candidates: Sequence[ProductSummary], filters: SearchFilterSet,
    ) -> list[ProductSummary]:
        """Keep candidates that satisfy every filter in *filters*.

        Availability is only enforced for free-text searches; an
        empty query also lists products with no store in stock.
        """
        brand = filters.brand.strip().lower() if filters.brand else None
        category = (
            filters.category.strip().lower() if filters.category else None
        )

        kept: list[ProductSummary] = []
        for product in candidates:
            if not product.is_active:
                continue
            if not SearchRanker.matches_query(product, filters.query):
                continue
            if brand is not None and product.brand.lower() != brand:
                continue
            if (
                category is not None
                and product.category.lower() != category
            ):
                continue
            if not SearchRanker.within_price_bounds(product, filters):
                continue
            if filters.has_query and product.store_count == 0:
                continue
            kept.append(product)

        excluded = len(candidates) - len(kept)
        if excluded:
            logger.debug(
                "Filters excluded %d of %d candidates for '%s'",
                excluded,
                len(candidates),
                filters.query,
            )
        return kept

    # ── Ordering ─────────────────────────────────────────

    @staticmethod
    def rank(
        products: Sequence[ProductSummary], filters: SearchFilterSet,
    ) -> list[ProductSummary]:
        """Order *products* by the requested sort mode.

        All sorts are stable, so ties keep the incoming (creation)
        order.  Products without a price sort last either way.
        """
        mode = filters.sort_by

        if mode is SortMode.PRICE_ASC:
            return sorted(
                products,
                key=lambda p: (
                    p.min_price is None, p.min_price or 0.0,
                ),
            )
        if mode is SortMode.PRICE_DESC:
            return sorted(
                products,
                key=lambda p: (
                    p.min_price is None, -(p.min_price or 0.0),
                ),
            )
        if mode is SortMode.NAME_ASC:
            return sorted(products, key=lambda p: p.name.casefold())
        if mode is SortMode.NAME_DESC:
            return sorted(
                products, key=lambda p: p.name.casefold(), reverse=True,
            )

        if filters.has_query:
            return sorted(
                products,
                key=lambda p: -SearchRanker.relevance_score(
                    p, filters.query,
                ),
            )
        # No query: newest first
        return sorted(
            products,
            key=lambda p: (_created_key(p), p.id),
            reverse=True,
        )

    @staticmethod
    def filter_and_rank(
        candidates: Sequence[ProductSummary], filters: SearchFilterSet,
    ) -> list[ProductSummary]:
        return SearchRanker.rank(
            SearchRanker.apply_filters(candidates, filters), filters,
        )
