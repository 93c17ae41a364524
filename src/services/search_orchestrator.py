# src/services/search_orchestrator.py

"""Orchestrates catalogue searches, fallback listings and discovery reads."""

import asyncio
import logging

from src.config.settings import Settings
from src.filters.fallback_synthesizer import FallbackSynthesizer
from src.filters.search_ranker import SearchRanker
from src.models.errors import InvalidArgumentError
from src.models.search import (
    FilterOptions,
    PageRequest,
    SearchFilterSet,
    SearchResultPage,
    SearchSuggestion,
    TrendingReport,
    paginate,
)
from src.storage.store import ProductPriceStore

logger = logging.getLogger("pricecompare.orchestrator")


class SearchOrchestrator:
    """Coordinates store reads, ranking, fallback and analytics."""

    def __init__(
        self,
        store: ProductPriceStore,
        synthesizer: FallbackSynthesizer | None = None,
    ) -> None:
        self._store = store
        self._synthesizer = synthesizer or FallbackSynthesizer()

    # ── Private helpers ──────────────────────────────────

    async def _log_query(
        self, filters: SearchFilterSet, result_count: int, user_ip: str,
    ) -> None:
        """Best-effort analytics write; failures never reach the caller."""
        try:
            await asyncio.to_thread(
                self._store.log_search_query,
                filters.query,
                result_count,
                user_ip,
            )
        except Exception as exc:
            logger.warning(
                "Failed to log search query '%s': %s",
                filters.query,
                exc,
            )

    # ── Search ───────────────────────────────────────────

    async def search(
        self,
        filters: SearchFilterSet,
        page: PageRequest | None = None,
        user_ip: str = "unknown",
    ) -> SearchResultPage:
        """Run one search and return the requested page.

        A non-empty query that matches nothing is answered with
        synthetic listings flagged ``is_fallback``.  Store failures
        propagate; they never trigger the fallback.
        """
        request = page or PageRequest()
        candidates = await asyncio.to_thread(
            self._store.fetch_candidate_products, filters,
        )
        results = SearchRanker.filter_and_rank(candidates, filters)
        matched = len(results)
        logger.info(
            "Search '%s' matched %d of %d candidates",
            filters.query,
            matched,
            len(candidates),
        )

        is_fallback = False
        if not results and filters.has_query:
            results = self._synthesizer.synthesize(filters)
            is_fallback = True
            logger.warning(
                "No catalogue matches for '%s'; serving %d fallback "
                "listings",
                filters.query,
                len(results),
            )

        items, pagination = paginate(
            results, request.page, request.limit,
        )
        await self._log_query(filters, matched, user_ip)

        return SearchResultPage(
            products=items,
            pagination=pagination,
            filters=filters,
            is_fallback=is_fallback,
        )

    # ── Discovery ────────────────────────────────────────

    async def suggestions(self, query: str) -> list[SearchSuggestion]:
        """Autocomplete entries for a partial query.

        Raises:
            InvalidArgumentError: if the query is shorter than
                ``MIN_QUERY_LENGTH``.
        """
        text = query.strip()
        if len(text) < Settings.MIN_QUERY_LENGTH:
            msg = (
                "Query must be at least "
                f"{Settings.MIN_QUERY_LENGTH} characters long"
            )
            raise InvalidArgumentError(msg)
        return await asyncio.to_thread(
            self._store.fetch_suggestions,
            text,
            Settings.SUGGESTION_LIMIT,
        )

    async def trending(self) -> TrendingReport:
        queries, brands = await asyncio.gather(
            asyncio.to_thread(
                self._store.fetch_trending_searches,
                Settings.TRENDING_WINDOW_DAYS,
                Settings.TRENDING_MIN_SEARCHES,
                Settings.TRENDING_LIMIT,
            ),
            asyncio.to_thread(
                self._store.fetch_popular_brands,
                Settings.POPULAR_BRAND_MIN_PRODUCTS,
                Settings.POPULAR_BRAND_LIMIT,
            ),
        )
        return TrendingReport(queries=queries, popular_brands=brands)

    async def filter_options(self) -> FilterOptions:
        categories, brands = await asyncio.gather(
            asyncio.to_thread(self._store.fetch_category_counts),
            asyncio.to_thread(self._store.fetch_brand_price_ranges),
        )
        return FilterOptions(categories=categories, brands=brands)
