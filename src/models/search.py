# src/models/search.py

"""Search request value objects and the paginated result page."""

import math
from dataclasses import dataclass, field
from enum import Enum

from src.config.settings import Settings
from src.models.errors import InvalidArgumentError
from src.models.product import ProductSummary


class SortMode(str, Enum):
    """Result ordering requested by the caller."""

    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"


def _parse_price_bound(name: str, raw: object) -> float | None:
    """Convert a raw price bound, rejecting junk and out-of-range values."""
    if raw is None or raw == "":
        return None
    try:
        value = float(str(raw))
    except ValueError:
        msg = f"{name} must be a number (got {raw!r})"
        raise InvalidArgumentError(msg) from None
    if not 0 <= value <= Settings.MAX_PRICE_FILTER:
        msg = (
            f"{name} must be between 0 and "
            f"{Settings.MAX_PRICE_FILTER:g}"
        )
        raise InvalidArgumentError(msg)
    return value


@dataclass(frozen=True)
class SearchFilterSet:
    """Free-text query plus structured filters for one search request."""

    query: str = ""
    brand: str | None = None
    category: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    sort_by: SortMode = SortMode.RELEVANCE

    @property
    def normalized_query(self) -> str:
        return self.query.strip().lower()

    @property
    def has_query(self) -> bool:
        return bool(self.query.strip())

    @classmethod
    def from_params(
        cls,
        query: str | None = None,
        brand: str | None = None,
        category: str | None = None,
        min_price: object = None,
        max_price: object = None,
        sort_by: str | None = None,
    ) -> "SearchFilterSet":
        """Validate raw request parameters into a filter set.

        Raises :class:`InvalidArgumentError` describing the first
        violated constraint.
        """
        text = (query or "").strip()
        if text and len(text) < Settings.MIN_QUERY_LENGTH:
            msg = (
                "Search query must be at least "
                f"{Settings.MIN_QUERY_LENGTH} characters long"
            )
            raise InvalidArgumentError(msg)
        if len(text) > Settings.MAX_QUERY_LENGTH:
            msg = (
                "Search query cannot exceed "
                f"{Settings.MAX_QUERY_LENGTH} characters"
            )
            raise InvalidArgumentError(msg)

        brand_value = (brand or "").strip() or None
        if brand_value and len(brand_value) > Settings.MAX_BRAND_LENGTH:
            msg = (
                "Brand cannot exceed "
                f"{Settings.MAX_BRAND_LENGTH} characters"
            )
            raise InvalidArgumentError(msg)

        low = _parse_price_bound("min_price", min_price)
        high = _parse_price_bound("max_price", max_price)
        if low is not None and high is not None and low > high:
            msg = "min_price cannot exceed max_price"
            raise InvalidArgumentError(msg)

        try:
            mode = SortMode(sort_by or SortMode.RELEVANCE.value)
        except ValueError:
            valid = ", ".join(m.value for m in SortMode)
            msg = f"sort_by must be one of: {valid}"
            raise InvalidArgumentError(msg) from None

        return cls(
            query=text,
            brand=brand_value,
            category=(category or "").strip() or None,
            min_price=low,
            max_price=high,
            sort_by=mode,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "query": self.query,
            "brand": self.brand,
            "category": self.category,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "sort_by": self.sort_by.value,
        }


@dataclass(frozen=True)
class PageRequest:
    """Requested 1-indexed page and page size."""

    page: int = 1
    limit: int = Settings.DEFAULT_PAGE_LIMIT

    @classmethod
    def from_params(
        cls, page: object = None, limit: object = None,
    ) -> "PageRequest":
        try:
            page_num = int(str(page)) if page not in (None, "") else 1
            limit_num = (
                int(str(limit))
                if limit not in (None, "")
                else Settings.DEFAULT_PAGE_LIMIT
            )
        except ValueError:
            msg = "page and limit must be integers"
            raise InvalidArgumentError(msg) from None
        if not 1 <= page_num <= Settings.MAX_PAGE:
            msg = f"Page must be between 1 and {Settings.MAX_PAGE}"
            raise InvalidArgumentError(msg)
        if not 1 <= limit_num <= Settings.MAX_PAGE_LIMIT:
            msg = f"Limit must be between 1 and {Settings.MAX_PAGE_LIMIT}"
            raise InvalidArgumentError(msg)
        return cls(page=page_num, limit=limit_num)


@dataclass
class Pagination:
    """Page bookkeeping returned alongside search results."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit > 0 else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


def paginate(
    items: list[ProductSummary], page: int, limit: int,
) -> tuple[list[ProductSummary], Pagination]:
    """Slice one page out of an already-ordered result list."""
    start = (page - 1) * limit
    return items[start:start + limit], Pagination.build(
        page, limit, len(items),
    )


@dataclass
class SearchResultPage:
    """One page of ranked search results."""

    products: list[ProductSummary]
    pagination: Pagination
    filters: SearchFilterSet = field(default_factory=SearchFilterSet)
    is_fallback: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "products": [p.to_dict() for p in self.products],
            "pagination": self.pagination.to_dict(),
            "filters": self.filters.to_dict(),
            "is_fallback": self.is_fallback,
        }


@dataclass
class SearchSuggestion:
    """Autocomplete entry for a partial query."""

    text: str
    type: str  # "product" or "brand"
    brand: str | None
    frequency: int

    def to_dict(self) -> dict[str, object]:
        return {
            "text": self.text,
            "type": self.type,
            "brand": self.brand,
            "frequency": self.frequency,
        }


@dataclass
class TrendingQuery:
    """A normalized query searched repeatedly in the trending window."""

    query: str
    search_count: int
    avg_results: int

    def to_dict(self) -> dict[str, object]:
        return {
            "query": self.query,
            "search_count": self.search_count,
            "avg_results": self.avg_results,
        }


@dataclass
class BrandStats:
    """Brand-level counts and price span."""

    brand: str
    product_count: int
    min_price: float | None = None
    max_price: float | None = None
    avg_price: float | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "brand": self.brand,
            "product_count": self.product_count,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "avg_price": self.avg_price,
        }


@dataclass
class CategoryCount:
    """Product count for one category/subcategory pair."""

    category: str
    subcategory: str | None
    product_count: int

    def to_dict(self) -> dict[str, object]:
        return {
            "category": self.category,
            "subcategory": self.subcategory,
            "product_count": self.product_count,
        }


@dataclass
class TrendingReport:
    """Popular queries and brands for the discovery view."""

    queries: list[TrendingQuery]
    popular_brands: list[BrandStats]

    def to_dict(self) -> dict[str, object]:
        return {
            "trending_searches": [q.to_dict() for q in self.queries],
            "popular_brands": [b.to_dict() for b in self.popular_brands],
        }


@dataclass
class FilterOptions:
    """Values a client can offer as search filters."""

    categories: list[CategoryCount]
    brands: list[BrandStats]

    def grouped_categories(self) -> dict[str, list[CategoryCount]]:
        """Category name mapped to its subcategory counts."""
        grouped: dict[str, list[CategoryCount]] = {}
        for entry in self.categories:
            grouped.setdefault(entry.category, []).append(entry)
        return grouped

    def to_dict(self) -> dict[str, object]:
        return {
            "categories": [
                {
                    "name": name,
                    "product_count": sum(c.product_count for c in subs),
                    "subcategories": [
                        {
                            "name": c.subcategory,
                            "product_count": c.product_count,
                        }
                        for c in subs
                        if c.subcategory
                    ],
                }
                for name, subs in self.grouped_categories().items()
            ],
            "brands": [b.to_dict() for b in self.brands],
        }
