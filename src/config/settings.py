# src/config/settings.py

"""Central configuration for the pricecompare engine."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the pricecompare engine."""

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = BASE_DIR / "logs"
    CATALOG_DB_PATH: Path = Path(
        os.getenv("PRICE_COMPARE_DB", str(DATA_DIR / "catalog.db"))
    )
    SAMPLE_CATALOG_PATH: Path = DATA_DIR / "sample_catalog.json"

    # --- Logging ---
    LOG_CONSOLE_LEVEL: str = os.getenv("PRICE_COMPARE_LOG_LEVEL", "WARNING")
    LOG_KEEP_RUNS: int = 20             # Older run_*.log files are pruned

    # --- Search / pagination ---
    DEFAULT_PAGE_LIMIT: int = 20
    MAX_PAGE_LIMIT: int = 50
    MAX_PAGE: int = 100
    MIN_QUERY_LENGTH: int = 2
    MAX_QUERY_LENGTH: int = 100
    MAX_BRAND_LENGTH: int = 50
    MAX_PRICE_FILTER: float = 100000.0
    FULLTEXT_MIN_TOKEN_LENGTH: int = 3  # Shorter words never hit the index
    RELEVANCE_WEIGHTS: dict[str, int] = {
        "name": 10,
        "brand": 8,
        "model": 6,
    }

    # --- Suggestions / trending ---
    SUGGESTION_LIMIT: int = 10
    TRENDING_WINDOW_DAYS: int = 7
    TRENDING_MIN_SEARCHES: int = 2
    TRENDING_LIMIT: int = 10
    POPULAR_BRAND_MIN_PRODUCTS: int = 3
    POPULAR_BRAND_LIMIT: int = 8

    # --- Comparison ---
    MAX_COMPARE_PRODUCTS: int = 5
    CURRENCY_SYMBOL: str = "₹"

    # --- Price history / alerts ---
    PRICE_HISTORY_WINDOW_DAYS: int = 30
    PRICE_HISTORY_LIMIT: int = 30
    TREND_SAMPLE_SIZE: int = 7          # Samples per recent/older window
    TREND_THRESHOLD_PERCENT: float = 5.0
    VOLATILITY_HIGH_CV: float = 15.0
    VOLATILITY_MEDIUM_CV: float = 8.0
    ALERT_NO_HISTORY_FACTOR: float = 0.9
    ALERT_WITH_HISTORY_FACTOR: float = 0.95

    # --- Fallback synthesis ---
    FALLBACK_BRANDS: list[str] = [
        "Nike", "Adidas", "Puma", "Reebok", "Bata", "Woodland",
        "Sketchers", "Fila", "Timberland", "Clarks", "Crocs", "Asics",
    ]
    FALLBACK_TYPES: list[str] = [
        "Running", "Walking", "Casual", "Sports",
        "Sneakers", "Loafers", "Boots",
    ]
    FALLBACK_IMAGES: list[str] = [
        "https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=400",
        "https://images.unsplash.com/photo-1549298916-b41d501d3772?w=400",
        "https://images.unsplash.com/photo-1606107557195-0e29a4b5b4aa?w=400",
        "https://images.unsplash.com/photo-1595950653106-6c9ebd614d3a?w=400",
        "https://images.unsplash.com/photo-1608231387042-66d1773070a5?w=400",
        "https://images.unsplash.com/photo-1560769629-975ec94e6a86?w=400",
    ]
    FALLBACK_CATEGORY: str = "shoes"
    FALLBACK_MIN_COUNT: int = 4
    FALLBACK_COUNT_SPREAD: int = 5      # count = MIN + len(query) % SPREAD
    FALLBACK_BASE_PRICE: int = 2000
    FALLBACK_PRICE_PER_CHAR: int = 100
    FALLBACK_PRICE_SPREAD: int = 9999
    FALLBACK_MAX_PRICE_SPREAD: int = 1999
    FALLBACK_ID_BASE: int = 5000
