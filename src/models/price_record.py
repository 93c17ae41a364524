# src/models/price_record.py

"""Per-store price observations and their historical samples."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class Availability(str, Enum):
    """Stock status reported by a store."""

    IN_STOCK = "in_stock"
    LIMITED_STOCK = "limited_stock"
    OUT_OF_STOCK = "out_of_stock"

    @property
    def is_eligible(self) -> bool:
        """Whether the record counts towards product-level aggregates."""
        return self is not Availability.OUT_OF_STOCK


@dataclass
class PriceRecord:
    """The current price of one product at one store."""

    product_id: int
    store_id: int
    store_name: str
    price: float
    availability: Availability = Availability.IN_STOCK
    original_price: float | None = None
    discount_percentage: float | None = None
    product_url: str = ""
    last_scraped: datetime | None = None
    rating: float | None = None
    review_count: int = 0
    size_availability: dict[str, object] | None = None

    def __post_init__(self) -> None:
        if self.price < 0:
            msg = f"price must be >= 0 (got {self.price})"
            raise ValueError(msg)
        if (
            self.original_price is not None
            and self.original_price < self.price
        ):
            msg = (
                f"original_price {self.original_price} is below "
                f"price {self.price}"
            )
            raise ValueError(msg)

    def to_dict(self) -> dict[str, object]:
        """Serialise with the JSON field names clients expect."""
        return {
            "product_id": self.product_id,
            "store_id": self.store_id,
            "store_name": self.store_name,
            "price": self.price,
            "original_price": self.original_price,
            "discount_percentage": self.discount_percentage,
            "availability": self.availability.value,
            "product_url": self.product_url,
            "last_scraped": (
                self.last_scraped.isoformat()
                if self.last_scraped
                else None
            ),
            "rating": self.rating,
            "review_count": self.review_count,
            "size_availability": self.size_availability,
        }


@dataclass
class PriceHistorySample:
    """Daily aggregate of recorded prices for one product at one store."""

    product_id: int
    store_id: int
    store_name: str
    recorded_at: date
    avg_price: float
    min_price: float
    max_price: float

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.recorded_at.isoformat(),
            "store_name": self.store_name,
            "avg_price": self.avg_price,
            "min_price": self.min_price,
            "max_price": self.max_price,
        }
