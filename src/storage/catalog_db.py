# src/storage/catalog_db.py

"""SQLite-backed product/price catalogue implementing the store contract."""

import json
import logging
import sqlite3
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import cast

from src.config.settings import Settings
from src.filters.price_normalizer import (
    PriceRecordNormalizer,
    decode_json_blob,
    parse_price,
    parse_timestamp,
)
from src.models.errors import UpstreamUnavailableError
from src.models.price_record import PriceHistorySample, PriceRecord
from src.models.product import Product, ProductSummary
from src.models.search import (
    BrandStats,
    CategoryCount,
    SearchFilterSet,
    SearchSuggestion,
    TrendingQuery,
)
from src.storage.store import ProductPriceStore

logger = logging.getLogger("pricecompare.catalog")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS stores (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    name      TEXT    NOT NULL UNIQUE,
    base_url  TEXT    NOT NULL DEFAULT '',
    logo_url  TEXT    NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS products (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    name              TEXT    NOT NULL,
    brand             TEXT    NOT NULL,
    model             TEXT    NOT NULL DEFAULT '',
    category          TEXT    NOT NULL DEFAULT '',
    subcategory       TEXT    NOT NULL DEFAULT '',
    description       TEXT    NOT NULL DEFAULT '',
    color             TEXT    NOT NULL DEFAULT '',
    gender            TEXT    NOT NULL DEFAULT '',
    primary_image_url TEXT    NOT NULL DEFAULT '',
    search_keywords   TEXT    NOT NULL DEFAULT '',
    sizes             TEXT,
    features          TEXT,
    is_active         INTEGER NOT NULL DEFAULT 1,
    created_at        TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS prices (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id          INTEGER NOT NULL
                        REFERENCES products(id) ON DELETE CASCADE,
    store_id            INTEGER NOT NULL
                        REFERENCES stores(id) ON DELETE CASCADE,
    price               REAL    NOT NULL,
    original_price      REAL,
    discount_percentage REAL,
    availability        TEXT    NOT NULL DEFAULT 'in_stock',
    product_url         TEXT    NOT NULL DEFAULT '',
    size_availability   TEXT,
    rating              REAL,
    review_count        INTEGER NOT NULL DEFAULT 0,
    last_scraped        TEXT    NOT NULL,
    UNIQUE (product_id, store_id)
);

CREATE TABLE IF NOT EXISTS price_history (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id  INTEGER NOT NULL
                REFERENCES products(id) ON DELETE CASCADE,
    store_id    INTEGER NOT NULL
                REFERENCES stores(id) ON DELETE CASCADE,
    price       REAL    NOT NULL,
    recorded_at TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS search_queries (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    query            TEXT    NOT NULL,
    normalized_query TEXT    NOT NULL,
    results_count    INTEGER NOT NULL,
    user_ip          TEXT    NOT NULL DEFAULT 'unknown',
    created_at       TEXT    NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_products_identity
    ON products(name, brand, model);
CREATE INDEX IF NOT EXISTS idx_prices_product
    ON prices(product_id);
CREATE INDEX IF NOT EXISTS idx_history_product_date
    ON price_history(product_id, recorded_at);
CREATE UNIQUE INDEX IF NOT EXISTS idx_history_sample
    ON price_history(product_id, store_id, recorded_at);
CREATE INDEX IF NOT EXISTS idx_search_queries_created
    ON search_queries(created_at);
"""

_ELIGIBLE = "('in_stock', 'limited_stock')"


def _escape_like(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )


def _as_json(value: object) -> str | None:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


class CatalogDB(ProductPriceStore):
    """SQLite store for products, store prices, history and search logs.

    One connection is shared across worker threads; every statement
    runs under a re-entrant lock.
    """

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.CATALOG_DB_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(
                str(path), check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            logger.error("Cannot open catalogue at %s: %s", path, exc)
            msg = f"cannot open catalogue at {path}: {exc}"
            raise UpstreamUnavailableError(msg) from exc
        logger.debug("CatalogDB opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    @contextmanager
    def _guard(self, action: str) -> Iterator[sqlite3.Connection]:
        """Serialise access and surface driver errors as upstream failures."""
        with self._lock:
            try:
                yield self._conn
            except sqlite3.Error as exc:
                logger.error(
                    "Catalog failure during %s: %s",
                    action,
                    exc,
                    exc_info=True,
                )
                msg = f"catalog store failed during {action}: {exc}"
                raise UpstreamUnavailableError(msg) from exc

    # ── Writing ──────────────────────────────────────────

    def add_store(
        self,
        name: str,
        base_url: str = "",
        logo_url: str = "",
        is_active: bool = True,
    ) -> int:
        """Insert or update a store by name and return its id."""
        with self._guard("add_store") as conn:
            conn.execute(
                "INSERT INTO stores (name, base_url, logo_url, is_active) "
                "VALUES (?, ?, ?, ?) "
                "ON CONFLICT(name) DO UPDATE SET "
                "base_url=excluded.base_url, "
                "logo_url=excluded.logo_url, "
                "is_active=excluded.is_active",
                (name, base_url, logo_url, int(is_active)),
            )
            conn.commit()
            store_id: int = conn.execute(
                "SELECT id FROM stores WHERE name = ?", (name,),
            ).fetchone()[0]
        return store_id

    def _ensure_store(self, name: str) -> int:
        with self._guard("ensure_store") as conn:
            conn.execute(
                "INSERT OR IGNORE INTO stores (name) VALUES (?)",
                (name,),
            )
            conn.commit()
            store_id: int = conn.execute(
                "SELECT id FROM stores WHERE name = ?", (name,),
            ).fetchone()[0]
        return store_id

    def add_product(
        self,
        name: str,
        brand: str,
        *,
        model: str = "",
        category: str = "",
        subcategory: str = "",
        description: str = "",
        color: str = "",
        gender: str = "",
        primary_image_url: str = "",
        search_keywords: str = "",
        sizes: list[str] | None = None,
        features: dict[str, object] | None = None,
        is_active: bool = True,
        created_at: datetime | None = None,
    ) -> int:
        """Insert or update a product and return its id.

        Products are identified by ``(name, brand, model)``; importing
        the same product again updates it in place and keeps its
        original ``created_at``.
        """
        if not name.strip():
            msg = "product name must not be empty"
            raise ValueError(msg)
        created = (parse_timestamp(created_at) or datetime.now()).isoformat()
        with self._guard("add_product") as conn:
            conn.execute(
                "INSERT INTO products (name, brand, model, category, "
                "subcategory, description, color, gender, "
                "primary_image_url, search_keywords, sizes, features, "
                "is_active, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(name, brand, model) DO UPDATE SET "
                "category=excluded.category, "
                "subcategory=excluded.subcategory, "
                "description=excluded.description, "
                "color=excluded.color, "
                "gender=excluded.gender, "
                "primary_image_url=excluded.primary_image_url, "
                "search_keywords=excluded.search_keywords, "
                "sizes=excluded.sizes, "
                "features=excluded.features, "
                "is_active=excluded.is_active",
                (
                    name, brand, model, category, subcategory,
                    description, color, gender, primary_image_url,
                    search_keywords, _as_json(sizes), _as_json(features),
                    int(is_active), created,
                ),
            )
            conn.commit()
            product_id: int = conn.execute(
                "SELECT id FROM products "
                "WHERE name = ? AND brand = ? AND model = ?",
                (name, brand, model),
            ).fetchone()[0]
        logger.debug("Stored product %d (%s)", product_id, name)
        return product_id

    def add_price(
        self,
        product_id: int,
        store_name: str,
        price: object,
        *,
        original_price: object = None,
        discount_percentage: object = None,
        availability: object = None,
        product_url: str = "",
        size_availability: object = None,
        rating: object = None,
        review_count: object = 0,
        last_scraped: object = None,
    ) -> PriceRecord:
        """Upsert a store's current price for a product.

        Raw values go through :class:`PriceRecordNormalizer`; a row it
        rejects raises ``ValueError`` and nothing is written.
        """
        store_id = self._ensure_store(store_name)
        record = PriceRecordNormalizer.normalize_row({
            "product_id": product_id,
            "store_id": store_id,
            "store_name": store_name,
            "price": price,
            "original_price": original_price,
            "discount_percentage": discount_percentage,
            "availability": availability,
            "product_url": product_url,
            "size_availability": size_availability,
            "rating": rating,
            "review_count": review_count,
            "last_scraped": last_scraped,
        })
        if record.last_scraped is None:
            record.last_scraped = datetime.now()

        with self._guard("add_price") as conn:
            conn.execute(
                "INSERT INTO prices (product_id, store_id, price, "
                "original_price, discount_percentage, availability, "
                "product_url, size_availability, rating, review_count, "
                "last_scraped) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(product_id, store_id) DO UPDATE SET "
                "price=excluded.price, "
                "original_price=excluded.original_price, "
                "discount_percentage=excluded.discount_percentage, "
                "availability=excluded.availability, "
                "product_url=excluded.product_url, "
                "size_availability=excluded.size_availability, "
                "rating=excluded.rating, "
                "review_count=excluded.review_count, "
                "last_scraped=excluded.last_scraped",
                (
                    record.product_id,
                    record.store_id,
                    record.price,
                    record.original_price,
                    record.discount_percentage,
                    record.availability.value,
                    record.product_url,
                    _as_json(record.size_availability),
                    record.rating,
                    record.review_count,
                    record.last_scraped.isoformat(),
                ),
            )
            conn.commit()
        return record

    def record_history(
        self,
        product_id: int,
        store_name: str,
        price: float,
        recorded_at: datetime | None = None,
    ) -> None:
        """Record one historical price observation.

        A sample already stored for the same product, store and
        timestamp is left untouched.
        """
        store_id = self._ensure_store(store_name)
        ts = (parse_timestamp(recorded_at) or datetime.now()).isoformat()
        with self._guard("record_history") as conn:
            conn.execute(
                "INSERT OR IGNORE INTO price_history "
                "(product_id, store_id, price, recorded_at) "
                "VALUES (?, ?, ?, ?)",
                (product_id, store_id, price, ts),
            )
            conn.commit()

    def set_store_active(self, name: str, is_active: bool) -> None:
        with self._guard("set_store_active") as conn:
            conn.execute(
                "UPDATE stores SET is_active = ? WHERE name = ?",
                (int(is_active), name),
            )
            conn.commit()

    # ── Store contract: reads ────────────────────────────

    @staticmethod
    def _row_to_product(row: sqlite3.Row) -> Product:
        sizes = decode_json_blob(row["sizes"], "sizes")
        features = decode_json_blob(row["features"], "features")
        return Product(
            id=row["id"],
            name=row["name"],
            brand=row["brand"],
            model=row["model"],
            category=row["category"],
            subcategory=row["subcategory"],
            description=row["description"],
            color=row["color"],
            gender=row["gender"],
            primary_image_url=row["primary_image_url"],
            is_active=bool(row["is_active"]),
            search_keywords=row["search_keywords"],
            sizes=(
                tuple(str(s) for s in sizes)
                if isinstance(sizes, list)
                else ()
            ),
            features=features if isinstance(features, dict) else {},
            created_at=parse_timestamp(row["created_at"]),
        )

    def fetch_product(self, product_id: int) -> Product | None:
        with self._guard("fetch_product") as conn:
            row = conn.execute(
                "SELECT * FROM products WHERE id = ? AND is_active = 1",
                (product_id,),
            ).fetchone()
        return self._row_to_product(row) if row else None

    def fetch_price_records(self, product_id: int) -> list[PriceRecord]:
        with self._guard("fetch_price_records") as conn:
            rows = conn.execute(
                "SELECT pr.product_id, pr.store_id, "
                "       s.name AS store_name, pr.price, "
                "       pr.original_price, pr.discount_percentage, "
                "       pr.availability, pr.product_url, "
                "       pr.size_availability, pr.rating, "
                "       pr.review_count, pr.last_scraped "
                "FROM prices pr "
                "JOIN stores s ON s.id = pr.store_id "
                "WHERE pr.product_id = ? AND s.is_active = 1 "
                "ORDER BY pr.price ASC, pr.last_scraped DESC",
                (product_id,),
            ).fetchall()
        records, _ = PriceRecordNormalizer.normalize_rows(
            dict(r) for r in rows
        )
        return records

    def fetch_price_history(
        self,
        product_id: int,
        window_days: int,
        now: datetime | None = None,
    ) -> list[PriceHistorySample]:
        cutoff = (
            (now or datetime.now()) - timedelta(days=window_days)
        ).isoformat()
        with self._guard("fetch_price_history") as conn:
            rows = conn.execute(
                "SELECT substr(ph.recorded_at, 1, 10) AS day, "
                "       ph.store_id, s.name AS store_name, "
                "       AVG(ph.price) AS avg_price, "
                "       MIN(ph.price) AS min_price, "
                "       MAX(ph.price) AS max_price "
                "FROM price_history ph "
                "JOIN stores s ON s.id = ph.store_id "
                "WHERE ph.product_id = ? AND ph.recorded_at >= ? "
                "GROUP BY day, ph.store_id, s.name "
                "ORDER BY day DESC, s.name ASC "
                "LIMIT ?",
                (product_id, cutoff, Settings.PRICE_HISTORY_LIMIT),
            ).fetchall()
        return [
            PriceHistorySample(
                product_id=product_id,
                store_id=r["store_id"],
                store_name=r["store_name"],
                recorded_at=date.fromisoformat(r["day"]),
                avg_price=r["avg_price"],
                min_price=r["min_price"],
                max_price=r["max_price"],
            )
            for r in rows
        ]

    def fetch_candidate_products(
        self, filters: SearchFilterSet,
    ) -> list[ProductSummary]:
        conditions = ["p.is_active = 1"]
        params: list[object] = []
        if filters.brand:
            conditions.append("LOWER(p.brand) = LOWER(?)")
            params.append(filters.brand.strip())
        if filters.category:
            conditions.append("LOWER(p.category) = LOWER(?)")
            params.append(filters.category.strip())

        sql = (
            "SELECT p.id, p.name, p.brand, p.model, p.category, "
            "       p.subcategory, p.description, p.color, p.gender, "
            "       p.primary_image_url, p.search_keywords, "
            "       p.is_active, p.created_at, "
            "       MIN(pr.price) AS min_price, "
            "       MAX(pr.price) AS max_price, "
            "       COUNT(DISTINCT pr.store_id) AS store_count, "
            "       AVG(pr.rating) AS avg_rating, "
            "       COALESCE(SUM(pr.review_count), 0) AS total_reviews "
            "FROM products p "
            "LEFT JOIN prices pr ON pr.product_id = p.id "
            f"  AND pr.availability IN {_ELIGIBLE} "
            "  AND pr.store_id IN "
            "      (SELECT id FROM stores WHERE is_active = 1) "
            f"WHERE {' AND '.join(conditions)} "
            "GROUP BY p.id "
            "ORDER BY p.created_at ASC, p.id ASC"
        )
        with self._guard("fetch_candidate_products") as conn:
            rows = conn.execute(sql, params).fetchall()

        return [
            ProductSummary(
                id=r["id"],
                name=r["name"],
                brand=r["brand"],
                model=r["model"],
                category=r["category"],
                subcategory=r["subcategory"],
                description=r["description"],
                color=r["color"],
                gender=r["gender"],
                primary_image_url=r["primary_image_url"],
                search_keywords=r["search_keywords"],
                is_active=bool(r["is_active"]),
                created_at=parse_timestamp(r["created_at"]),
                min_price=r["min_price"],
                max_price=r["max_price"],
                store_count=r["store_count"],
                avg_rating=(
                    round(r["avg_rating"], 2)
                    if r["avg_rating"] is not None
                    else None
                ),
                total_reviews=r["total_reviews"],
            )
            for r in rows
        ]

    def log_search_query(
        self, query: str, result_count: int, user_ip: str,
    ) -> None:
        with self._guard("log_search_query") as conn:
            conn.execute(
                "INSERT INTO search_queries (query, normalized_query, "
                "results_count, user_ip, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    query,
                    query.strip().lower(),
                    result_count,
                    user_ip or "unknown",
                    datetime.now().isoformat(),
                ),
            )
            conn.commit()

    # ── Store contract: discovery reads ──────────────────

    def fetch_suggestions(
        self, query: str, limit: int,
    ) -> list[SearchSuggestion]:
        pattern = f"%{_escape_like(query.strip())}%"
        with self._guard("fetch_suggestions") as conn:
            rows = conn.execute(
                "SELECT name AS suggestion, 'product' AS type, "
                "       brand, COUNT(*) AS frequency "
                "FROM products "
                "WHERE is_active = 1 AND name LIKE ? ESCAPE '\\' "
                "GROUP BY name, brand "
                "UNION "
                "SELECT brand AS suggestion, 'brand' AS type, "
                "       NULL AS brand, COUNT(*) AS frequency "
                "FROM products "
                "WHERE is_active = 1 AND brand LIKE ? ESCAPE '\\' "
                "GROUP BY brand "
                "ORDER BY frequency DESC, suggestion ASC "
                "LIMIT ?",
                (pattern, pattern, limit),
            ).fetchall()
        return [
            SearchSuggestion(
                text=r["suggestion"],
                type=r["type"],
                brand=r["brand"],
                frequency=r["frequency"],
            )
            for r in rows
        ]

    def fetch_trending_searches(
        self,
        window_days: int,
        min_count: int,
        limit: int,
        now: datetime | None = None,
    ) -> list[TrendingQuery]:
        cutoff = (
            (now or datetime.now()) - timedelta(days=window_days)
        ).isoformat()
        with self._guard("fetch_trending_searches") as conn:
            rows = conn.execute(
                "SELECT normalized_query AS query, "
                "       COUNT(*) AS search_count, "
                "       AVG(results_count) AS avg_results "
                "FROM search_queries "
                "WHERE created_at >= ? AND results_count > 0 "
                "  AND normalized_query != '' "
                "GROUP BY normalized_query "
                "HAVING COUNT(*) >= ? "
                "ORDER BY search_count DESC, avg_results DESC "
                "LIMIT ?",
                (cutoff, min_count, limit),
            ).fetchall()
        return [
            TrendingQuery(
                query=r["query"],
                search_count=r["search_count"],
                avg_results=int(r["avg_results"] + 0.5),
            )
            for r in rows
        ]

    def fetch_popular_brands(
        self, min_products: int, limit: int,
    ) -> list[BrandStats]:
        with self._guard("fetch_popular_brands") as conn:
            rows = conn.execute(
                "SELECT p.brand, "
                "       COUNT(DISTINCT p.id) AS product_count, "
                "       AVG(pr.price) AS avg_price, "
                "       MIN(pr.price) AS min_price "
                "FROM products p "
                "JOIN prices pr ON pr.product_id = p.id "
                "WHERE p.is_active = 1 "
                f"  AND pr.availability IN {_ELIGIBLE} "
                "GROUP BY p.brand "
                "HAVING COUNT(DISTINCT p.id) >= ? "
                "ORDER BY product_count DESC, p.brand ASC "
                "LIMIT ?",
                (min_products, limit),
            ).fetchall()
        return [
            BrandStats(
                brand=r["brand"],
                product_count=r["product_count"],
                min_price=r["min_price"],
                avg_price=round(r["avg_price"], 2),
            )
            for r in rows
        ]

    def fetch_category_counts(self) -> list[CategoryCount]:
        with self._guard("fetch_category_counts") as conn:
            rows = conn.execute(
                "SELECT category, subcategory, "
                "       COUNT(*) AS product_count "
                "FROM products WHERE is_active = 1 "
                "GROUP BY category, subcategory "
                "ORDER BY category, subcategory",
            ).fetchall()
        return [
            CategoryCount(
                category=r["category"],
                subcategory=r["subcategory"] or None,
                product_count=r["product_count"],
            )
            for r in rows
        ]

    def fetch_brand_price_ranges(self) -> list[BrandStats]:
        with self._guard("fetch_brand_price_ranges") as conn:
            rows = conn.execute(
                "SELECT p.brand, "
                "       COUNT(DISTINCT p.id) AS product_count, "
                "       MIN(pr.price) AS min_price, "
                "       MAX(pr.price) AS max_price "
                "FROM products p "
                "LEFT JOIN prices pr ON pr.product_id = p.id "
                "WHERE p.is_active = 1 "
                "GROUP BY p.brand "
                "ORDER BY p.brand",
            ).fetchall()
        return [
            BrandStats(
                brand=r["brand"],
                product_count=r["product_count"],
                min_price=r["min_price"],
                max_price=r["max_price"],
            )
            for r in rows
        ]

    # ── Catalogue import ─────────────────────────────────

    def import_catalog(self, catalog: Mapping[str, object]) -> int:
        """Load stores, products, prices and history from a mapping.

        Returns the number of price rows stored.  Products or prices
        that fail validation are skipped with a warning.
        """
        stores = catalog.get("stores", [])
        if isinstance(stores, list):
            for raw_store in cast(list[object], stores):
                if not isinstance(raw_store, dict):
                    continue
                entry = cast(dict[str, object], raw_store)
                if not entry.get("name"):
                    continue
                self.add_store(
                    name=str(entry.get("name", "")),
                    base_url=str(entry.get("base_url", "")),
                    logo_url=str(entry.get("logo_url", "")),
                    is_active=bool(entry.get("is_active", True)),
                )

        products = catalog.get("products", [])
        if not isinstance(products, list):
            return 0

        stored = 0
        for raw_item in cast(list[object], products):
            if not isinstance(raw_item, dict):
                continue
            stored += self._import_product(
                cast(dict[str, object], raw_item),
            )
        return stored

    def _import_product(self, item: dict[str, object]) -> int:
        sizes = item.get("sizes")
        features = item.get("features")
        try:
            product_id = self.add_product(
                name=str(item.get("name", "")),
                brand=str(item.get("brand", "")),
                model=str(item.get("model", "")),
                category=str(item.get("category", "")),
                subcategory=str(item.get("subcategory", "")),
                description=str(item.get("description", "")),
                color=str(item.get("color", "")),
                gender=str(item.get("gender", "")),
                primary_image_url=str(item.get("primary_image_url", "")),
                search_keywords=str(item.get("search_keywords", "")),
                sizes=(
                    [str(s) for s in cast(list[object], sizes)]
                    if isinstance(sizes, list)
                    else None
                ),
                features=(
                    cast(dict[str, object], features)
                    if isinstance(features, dict)
                    else None
                ),
                is_active=bool(item.get("is_active", True)),
                created_at=parse_timestamp(item.get("created_at")),
            )
        except ValueError as exc:
            logger.warning("Skipping catalogue product: %s", exc)
            return 0

        stored = 0
        prices = item.get("prices", [])
        for raw_price in cast(list[object], prices or []):
            if not isinstance(raw_price, dict):
                continue
            row = cast(dict[str, object], raw_price)
            try:
                self.add_price(
                    product_id,
                    store_name=str(row.get("store", row.get("store_name", ""))),
                    price=row.get("price"),
                    original_price=row.get("original_price"),
                    discount_percentage=row.get("discount_percentage"),
                    availability=row.get("availability"),
                    product_url=str(row.get("url", row.get("product_url", ""))),
                    size_availability=row.get("size_availability"),
                    rating=row.get("rating"),
                    review_count=row.get("review_count", 0),
                    last_scraped=row.get("last_scraped"),
                )
                stored += 1
            except ValueError as exc:
                logger.warning(
                    "Skipping price for product %d: %s", product_id, exc,
                )

        history = item.get("history", [])
        for raw_sample in cast(list[object], history or []):
            if not isinstance(raw_sample, dict):
                continue
            sample = cast(dict[str, object], raw_sample)
            price = parse_price(sample.get("price"))
            recorded_at = parse_timestamp(sample.get("recorded_at"))
            store = str(sample.get("store", "")).strip()
            if price is None or recorded_at is None or not store:
                continue
            self.record_history(
                product_id,
                store,
                price,
                recorded_at=recorded_at,
            )
        return stored

    def import_catalog_file(self, filepath: Path) -> int:
        """Import one JSON catalogue file.  Returns the price rows stored."""
        try:
            with open(filepath, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(
                "Failed to read %s: %s", filepath.name, exc,
            )
            return 0

        if not isinstance(data, dict):
            logger.warning(
                "Catalogue %s is not a JSON object", filepath.name,
            )
            return 0

        total = self.import_catalog(cast(dict[str, object], data))
        logger.info(
            "Catalogue import complete: %d prices from %s",
            total,
            filepath.name,
        )
        return total
