# src/models/comparison.py

"""Derived comparison views: per-product, alerts and multi-product."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.models.price_record import PriceRecord
from src.models.product import Product


class Trend(str, Enum):
    """Direction of recent price movement."""

    INSUFFICIENT_DATA = "insufficient_data"
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class Volatility(str, Enum):
    """Price volatility tier derived from the coefficient of variation."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class ComparisonEntry:
    """A store price annotated with its position in the comparison."""

    record: PriceRecord
    price_rank: int
    is_lowest_price: bool
    savings_vs_highest: float

    @property
    def store_name(self) -> str:
        return self.record.store_name

    @property
    def price(self) -> float:
        return self.record.price

    def to_dict(self) -> dict[str, object]:
        return {
            **self.record.to_dict(),
            "price_rank": self.price_rank,
            "is_lowest_price": self.is_lowest_price,
            "savings_vs_highest": self.savings_vs_highest,
        }


@dataclass
class ComparisonSummary:
    """Headline numbers for a product's comparison."""

    lowest_price: float
    highest_price: float
    max_savings: float
    store_count: int
    avg_price: float
    last_updated: datetime | None

    def to_dict(self) -> dict[str, object]:
        return {
            "lowest_price": self.lowest_price,
            "highest_price": self.highest_price,
            "max_savings": self.max_savings,
            "store_count": self.store_count,
            "avg_price": self.avg_price,
            "last_updated": (
                self.last_updated.isoformat()
                if self.last_updated
                else None
            ),
        }


@dataclass
class ProductComparison:
    """Ranked store prices for a single product."""

    product: Product
    comparison: list[ComparisonEntry]
    summary: ComparisonSummary

    @property
    def best_entry(self) -> ComparisonEntry | None:
        """First entry flagged as lowest price, if any."""
        return next(
            (e for e in self.comparison if e.is_lowest_price), None,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "product": self.product.to_ref(),
            "comparison": [e.to_dict() for e in self.comparison],
            "summary": self.summary.to_dict(),
        }


@dataclass
class PriceAlertSuggestion:
    """Trend signals and a suggested alert threshold for a product."""

    product: Product
    trend: Trend
    volatility: Volatility
    suggested_alert_price: float | None
    current_lowest: float | None
    current_prices: list[PriceRecord] = field(
        default_factory=lambda: list[PriceRecord]()
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "product": {
                "id": self.product.id,
                "name": self.product.name,
                "brand": self.product.brand,
            },
            "alert_suggestions": {
                "current_lowest": self.current_lowest,
                "suggested_alert_price": self.suggested_alert_price,
                "price_trend": self.trend.value,
                "volatility": self.volatility.value,
            },
            "current_prices": [
                {
                    "store": p.store_name,
                    "price": p.price,
                    "last_updated": (
                        p.last_scraped.isoformat()
                        if p.last_scraped
                        else None
                    ),
                }
                for p in self.current_prices
            ],
        }


@dataclass
class StoreMatrixCell:
    """One store's offer for one product in the multi-product matrix."""

    product_id: int
    price: float | None
    availability: str
    url: str | None
    is_lowest: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "product_id": self.product_id,
            "price": self.price,
            "availability": self.availability,
            "url": self.url,
            "is_lowest": self.is_lowest,
        }


@dataclass
class StoreMatrixRow:
    """All compared products as seen from one store."""

    store_name: str
    products: list[StoreMatrixCell]

    def to_dict(self) -> dict[str, object]:
        return {
            "store_name": self.store_name,
            "products": [c.to_dict() for c in self.products],
        }


@dataclass
class BestDeal:
    """Cheapest lowest-price offer across every compared product."""

    product_id: int
    product_name: str
    store_name: str
    price: float
    url: str

    def to_dict(self) -> dict[str, object]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "store_name": self.store_name,
            "price": self.price,
            "url": self.url,
        }


@dataclass
class MultiProductComparison:
    """Side-by-side comparison of up to five products."""

    comparisons: list[ProductComparison]
    store_comparison: list[StoreMatrixRow]
    overall_best_deal: BestDeal | None
    requested_ids: list[int] = field(
        default_factory=lambda: list[int]()
    )
    failed_ids: list[int] = field(
        default_factory=lambda: list[int]()
    )

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_ids)

    def product_summaries(self) -> list[dict[str, object]]:
        summaries: list[dict[str, object]] = []
        for comp in self.comparisons:
            best = comp.best_entry
            summaries.append({
                "id": comp.product.id,
                "name": comp.product.name,
                "brand": comp.product.brand,
                "model": comp.product.model,
                "image": comp.product.primary_image_url,
                "lowest_price": comp.summary.lowest_price,
                "highest_price": comp.summary.highest_price,
                "store_count": comp.summary.store_count,
                "max_savings": comp.summary.max_savings,
                "best_store": best.store_name if best else None,
                "best_store_url": (
                    best.record.product_url if best else None
                ),
            })
        return summaries

    def to_dict(self) -> dict[str, object]:
        return {
            "products": self.product_summaries(),
            "store_comparison": [
                row.to_dict() for row in self.store_comparison
            ],
            "summary": {
                "total_products": len(self.comparisons),
                "overall_best_deal": (
                    self.overall_best_deal.to_dict()
                    if self.overall_best_deal
                    else None
                ),
                "price_ranges": [
                    {
                        "product_id": comp.product.id,
                        "min": comp.summary.lowest_price,
                        "max": comp.summary.highest_price,
                        "savings": comp.summary.max_savings,
                    }
                    for comp in self.comparisons
                ],
            },
            "requested_products": len(self.requested_ids),
            "failed_products": list(self.failed_ids),
        }
