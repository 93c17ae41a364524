# src/models/product.py

"""Product identity and the aggregated views built around it."""

from dataclasses import dataclass, field
from datetime import datetime

from src.config.settings import Settings
from src.models.price_record import PriceHistorySample, PriceRecord


@dataclass(frozen=True)
class Product:
    """Catalogue identity of a product; read-only for the core."""

    id: int
    name: str
    brand: str
    model: str = ""
    category: str = ""
    subcategory: str = ""
    description: str = ""
    color: str = ""
    gender: str = ""
    primary_image_url: str = ""
    is_active: bool = True
    search_keywords: str = ""
    sizes: tuple[str, ...] = ()
    features: dict[str, object] = field(
        default_factory=lambda: dict[str, object](),
        hash=False,
    )
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            msg = f"product {self.id} has an empty name"
            raise ValueError(msg)

    def to_ref(self) -> dict[str, object]:
        """Short reference used inside comparison payloads."""
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "model": self.model,
            "primary_image_url": self.primary_image_url,
        }

    def to_dict(self) -> dict[str, object]:
        return {
            **self.to_ref(),
            "category": self.category,
            "subcategory": self.subcategory,
            "description": self.description,
            "color": self.color,
            "gender": self.gender,
            "sizes": list(self.sizes),
            "features": dict(self.features),
            "created_at": (
                self.created_at.isoformat() if self.created_at else None
            ),
        }


@dataclass
class ProductSummary:
    """A product with prices aggregated over availability-eligible stores."""

    id: int
    name: str
    brand: str
    model: str = ""
    category: str = ""
    subcategory: str = ""
    description: str = ""
    color: str = ""
    gender: str = ""
    primary_image_url: str = ""
    search_keywords: str = ""
    is_active: bool = True
    created_at: datetime | None = None
    min_price: float | None = None
    max_price: float | None = None
    store_count: int = 0
    avg_rating: float | None = None
    total_reviews: int = 0
    is_synthetic: bool = False

    @property
    def price_range(self) -> str | None:
        """Human-readable price span, e.g. ``₹7999 - ₹10999``."""
        if self.min_price is None or self.max_price is None:
            return None
        symbol = Settings.CURRENCY_SYMBOL
        return f"{symbol}{self.min_price:g} - {symbol}{self.max_price:g}"

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "model": self.model,
            "category": self.category,
            "subcategory": self.subcategory,
            "description": self.description,
            "primary_image_url": self.primary_image_url,
            "color": self.color,
            "gender": self.gender,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "store_count": self.store_count,
            "avg_rating": self.avg_rating,
            "total_reviews": self.total_reviews,
            "price_range": self.price_range,
            "is_synthetic": self.is_synthetic,
        }


@dataclass
class ProductDetail:
    """Full product page: identity, every store price and recent history."""

    product: Product
    prices: list[PriceRecord]
    price_history: list[PriceHistorySample]
    available_stores: int = 0
    lowest_price: float | None = None
    highest_price: float | None = None
    avg_rating: float | None = None
    total_reviews: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            **self.product.to_dict(),
            "available_stores": self.available_stores,
            "lowest_price": self.lowest_price,
            "highest_price": self.highest_price,
            "avg_rating": self.avg_rating,
            "total_reviews": self.total_reviews,
            "prices": [p.to_dict() for p in self.prices],
            "price_history": [h.to_dict() for h in self.price_history],
        }
