# src/storage/store.py

"""Read/write contract between the core and the product/price store."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.models.price_record import PriceHistorySample, PriceRecord
from src.models.product import Product, ProductSummary
from src.models.search import (
    BrandStats,
    CategoryCount,
    SearchFilterSet,
    SearchSuggestion,
    TrendingQuery,
)


class ProductPriceStore(ABC):
    """Abstract product/price store.

    Implementations raise
    :class:`~src.models.errors.UpstreamUnavailableError` when the
    backing store fails; the core never retries.
    """

    @abstractmethod
    def fetch_product(self, product_id: int) -> Product | None:
        """Return the active product with *product_id*, if any."""

    @abstractmethod
    def fetch_price_records(self, product_id: int) -> list[PriceRecord]:
        """Return the product's prices at active stores."""

    @abstractmethod
    def fetch_price_history(
        self,
        product_id: int,
        window_days: int,
        now: datetime | None = None,
    ) -> list[PriceHistorySample]:
        """Return daily per-store samples, most recent first."""

    @abstractmethod
    def fetch_candidate_products(
        self, filters: SearchFilterSet,
    ) -> list[ProductSummary]:
        """Return active products with eligible-price aggregates.

        Candidates come back in creation order.  Implementations may
        pre-narrow by *filters*; the ranking engine re-applies them.
        """

    @abstractmethod
    def log_search_query(
        self, query: str, result_count: int, user_ip: str,
    ) -> None:
        """Record one search for analytics."""

    # ── Discovery reads ──────────────────────────────────

    @abstractmethod
    def fetch_suggestions(
        self, query: str, limit: int,
    ) -> list[SearchSuggestion]:
        """Product names and brands containing *query*."""

    @abstractmethod
    def fetch_trending_searches(
        self,
        window_days: int,
        min_count: int,
        limit: int,
        now: datetime | None = None,
    ) -> list[TrendingQuery]:
        """Most repeated successful queries in the window."""

    @abstractmethod
    def fetch_popular_brands(
        self, min_products: int, limit: int,
    ) -> list[BrandStats]:
        """Brands with the most products that are in stock somewhere."""

    @abstractmethod
    def fetch_category_counts(self) -> list[CategoryCount]:
        """Active product counts per category and subcategory."""

    @abstractmethod
    def fetch_brand_price_ranges(self) -> list[BrandStats]:
        """Every brand with its product count and price span."""
