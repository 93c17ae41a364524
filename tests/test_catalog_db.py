# tests/test_catalog_db.py

"""Tests for the SQLite catalogue store."""

import json
import tempfile
import unittest
from datetime import date, datetime, timedelta
from pathlib import Path

from src.config.settings import Settings
from src.models.errors import UpstreamUnavailableError
from src.models.price_record import Availability
from src.models.search import SearchFilterSet
from src.storage.catalog_db import CatalogDB

_NOW = datetime(2026, 10, 19, 12, 0)


class TestCatalogDB(unittest.TestCase):
    """Reads against the bundled sample catalogue."""

    def setUp(self) -> None:
        self.tmp_dir = tempfile.mkdtemp()
        self.db = CatalogDB(db_path=Path(self.tmp_dir) / "test.db")
        self.imported = self.db.import_catalog_file(
            Settings.SAMPLE_CATALOG_PATH,
        )

    def tearDown(self) -> None:
        self.db.close()

    # ── Import ───────────────────────────────────────────

    def test_import_counts_prices(self) -> None:
        """Importing the sample stores every price row."""
        self.assertEqual(self.imported, 15)

    def test_malformed_file_imports_nothing(self) -> None:
        """Invalid JSON imports nothing."""
        bad = Path(self.tmp_dir) / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        self.assertEqual(self.db.import_catalog_file(bad), 0)

    def test_invalid_rows_skipped(self) -> None:
        """Rows without a name or a usable price are skipped."""
        catalog = {
            "products": [
                {"name": "", "brand": "Ghost"},
                {
                    "name": "Gel Kayano",
                    "brand": "Asics",
                    "prices": [
                        {"store": "Amazon", "price": "₹11,999"},
                        {"store": "Ajio", "price": "call us"},
                        {"store": "Myntra", "price": 100,
                         "availability": "teleporting"},
                    ],
                },
            ],
        }
        self.assertEqual(self.db.import_catalog(catalog), 1)

    def test_reimport_does_not_duplicate(self) -> None:
        """Importing the same catalogue twice leaves one copy of everything."""
        self.db.import_catalog_file(Settings.SAMPLE_CATALOG_PATH)
        candidates = self.db.fetch_candidate_products(
            SearchFilterSet(brand="nike"),
        )
        self.assertEqual(len(candidates), 4)
        self.assertEqual(
            len(self.db.fetch_candidate_products(SearchFilterSet())), 8,
        )
        self.assertEqual(len(self.db.fetch_price_records(1)), 3)
        self.assertEqual(len(self.db.fetch_price_history(1, 30, now=_NOW)), 5)
        self.assertEqual(
            self.db.fetch_popular_brands(3, 8)[0].product_count, 4,
        )

    def test_add_product_same_identity_updates_in_place(self) -> None:
        """Name, brand and model identify a product; other fields update."""
        first = self.db.add_product(
            "Trail Runner", "Asics", model="TR-1", color="red",
            created_at=datetime(2026, 2, 1),
        )
        second = self.db.add_product(
            "Trail Runner", "Asics", model="TR-1", color="blue",
            created_at=datetime(2026, 9, 1),
        )
        self.assertEqual(first, second)
        product = self.db.fetch_product(first)
        assert product is not None
        self.assertEqual(product.color, "blue")
        self.assertEqual(product.created_at, datetime(2026, 2, 1))
        other = self.db.add_product("Trail Runner", "Asics", model="TR-2")
        self.assertNotEqual(other, first)

    def test_history_sample_recorded_once(self) -> None:
        """A repeated sample for the same store and time is ignored."""
        moment = datetime(2026, 10, 17, 9, 0)
        self.db.record_history(2, "Amazon", 7999, recorded_at=moment)
        self.db.record_history(2, "Amazon", 7999, recorded_at=moment)
        history = self.db.fetch_price_history(2, 30, now=_NOW)
        day = [h for h in history if h.recorded_at == date(2026, 10, 17)]
        self.assertEqual(len(day), 1)
        self.assertEqual(day[0].avg_price, 7999)

    # ── Products and prices ──────────────────────────────

    def test_fetch_product(self) -> None:
        """Products round-trip with their decoded JSON columns."""
        product = self.db.fetch_product(1)
        assert product is not None
        self.assertEqual(product.name, "Air Max 270")
        self.assertEqual(product.brand, "Nike")
        self.assertEqual(product.sizes, ("7", "8", "9", "10", "11"))
        self.assertEqual(product.features["closure"], "lace-up")
        self.assertEqual(product.created_at, datetime(2026, 1, 5, 10))

    def test_unknown_product_is_none(self) -> None:
        """Missing ids return None."""
        self.assertIsNone(self.db.fetch_product(999))

    def test_inactive_product_hidden(self) -> None:
        """Inactive products are not returned."""
        pid = self.db.add_product("Old Shoe", "Bata", is_active=False)
        self.assertIsNone(self.db.fetch_product(pid))
        names = [
            p.name
            for p in self.db.fetch_candidate_products(SearchFilterSet())
        ]
        self.assertNotIn("Old Shoe", names)

    def test_price_records_typed_and_ordered(self) -> None:
        """Price records come back typed and in store order."""
        records = self.db.fetch_price_records(1)
        self.assertEqual(
            [r.store_name for r in records], ["Amazon", "Flipkart", "Myntra"],
        )
        myntra = records[2]
        self.assertIs(myntra.availability, Availability.LIMITED_STOCK)
        self.assertEqual(myntra.last_scraped, datetime(2026, 10, 18, 7))
        self.assertEqual(records[0].discount_percentage, 35.7)

    def test_inactive_store_excluded(self) -> None:
        """Deactivated stores drop out of price reads."""
        self.db.set_store_active("Myntra", False)
        records = self.db.fetch_price_records(1)
        self.assertEqual(
            [r.store_name for r in records], ["Amazon", "Flipkart"],
        )

    def test_add_price_upserts(self) -> None:
        """A second price for the same store replaces the first."""
        self.db.add_price(1, "Amazon", "₹8,499")
        prices = {r.store_name: r.price for r in self.db.fetch_price_records(1)}
        self.assertEqual(prices["Amazon"], 8499.0)
        self.assertEqual(len(prices), 3)

    def test_add_price_rejects_bad_value(self) -> None:
        """Unparsable prices are refused."""
        with self.assertRaises(ValueError):
            self.db.add_price(1, "Amazon", "free")

    def test_add_price_creates_unknown_store(self) -> None:
        """Unknown store names are created on demand."""
        self.db.add_price(1, "Tata CLiQ", 9999)
        stores = [r.store_name for r in self.db.fetch_price_records(1)]
        self.assertIn("Tata CLiQ", stores)

    # ── History ──────────────────────────────────────────

    def test_history_daily_samples_most_recent_first(self) -> None:
        """History is returned newest day first."""
        history = self.db.fetch_price_history(1, 30, now=_NOW)
        self.assertEqual(
            [(h.recorded_at, h.store_name) for h in history],
            [
                (date(2026, 10, 18), "Amazon"),
                (date(2026, 10, 18), "Flipkart"),
                (date(2026, 10, 14), "Amazon"),
                (date(2026, 10, 12), "Flipkart"),
                (date(2026, 10, 10), "Amazon"),
            ],
        )

    def test_history_window_cutoff(self) -> None:
        """Samples older than the window are ignored."""
        history = self.db.fetch_price_history(1, 7, now=_NOW)
        self.assertEqual(len(history), 3)

    def test_history_aggregates_same_day(self) -> None:
        """Samples from one day collapse into one."""
        day = datetime(2026, 10, 18, 20, 0)
        self.db.record_history(1, "Amazon", 9199, recorded_at=day)
        sample = self.db.fetch_price_history(1, 30, now=_NOW)[0]
        self.assertEqual(sample.store_name, "Amazon")
        self.assertEqual(sample.min_price, 8999)
        self.assertEqual(sample.max_price, 9199)
        self.assertEqual(sample.avg_price, 9099)

    # ── Search reads ─────────────────────────────────────

    def test_candidates_in_creation_order(self) -> None:
        """Candidates come back in creation order."""
        candidates = self.db.fetch_candidate_products(SearchFilterSet())
        self.assertEqual(len(candidates), 8)
        self.assertEqual(candidates[0].name, "Air Max 270")
        self.assertEqual(candidates[-1].name, "RS-X Efekt")

    def test_candidate_aggregates_use_eligible_prices(self) -> None:
        """Candidate min and max ignore out-of-stock offers."""
        by_name = {
            p.name: p
            for p in self.db.fetch_candidate_products(SearchFilterSet())
        }
        air_max = by_name["Air Max 270"]
        self.assertEqual(air_max.min_price, 8999)
        self.assertEqual(air_max.max_price, 12499)
        self.assertEqual(air_max.store_count, 3)
        self.assertEqual(air_max.avg_rating, 4.4)
        self.assertEqual(air_max.total_reviews, 2420)
        pegasus = by_name["Pegasus 40"]
        self.assertEqual(pegasus.store_count, 1)
        self.assertEqual(pegasus.max_price, 12999)

    def test_brand_prefilter(self) -> None:
        """The brand prefilter is case-insensitive."""
        candidates = self.db.fetch_candidate_products(
            SearchFilterSet(brand="adidas"),
        )
        self.assertEqual(
            {p.brand for p in candidates}, {"Adidas"},
        )
        self.assertEqual(len(candidates), 3)

    def test_trending_counts_successful_repeats(self) -> None:
        """Only repeated searches with results trend."""
        self.db.log_search_query("Nike", 4, "10.0.0.1")
        self.db.log_search_query(" nike ", 3, "10.0.0.2")
        self.db.log_search_query("adidas", 3, "10.0.0.1")
        self.db.log_search_query("zzz", 0, "10.0.0.1")
        self.db.log_search_query("zzz", 0, "10.0.0.1")
        trending = self.db.fetch_trending_searches(7, 2, 10)
        self.assertEqual(len(trending), 1)
        self.assertEqual(trending[0].query, "nike")
        self.assertEqual(trending[0].search_count, 2)
        self.assertEqual(trending[0].avg_results, 4)

    def test_trending_window(self) -> None:
        """Searches outside the window do not trend."""
        self.db.log_search_query("nike", 4, "x")
        self.db.log_search_query("nike", 4, "x")
        later = datetime.now() + timedelta(days=8)
        self.assertEqual(self.db.fetch_trending_searches(7, 2, 10, now=later), [])

    def test_suggestions(self) -> None:
        """Suggestions mix product names and brands."""
        products = self.db.fetch_suggestions("max", 10)
        self.assertEqual(len(products), 1)
        self.assertEqual(products[0].text, "Air Max 270")
        self.assertEqual(products[0].type, "product")
        self.assertEqual(products[0].brand, "Nike")

        brands = self.db.fetch_suggestions("nik", 10)
        self.assertEqual(
            [(s.text, s.type, s.frequency) for s in brands],
            [("Nike", "brand", 4)],
        )

    def test_suggestions_escape_wildcards(self) -> None:
        """LIKE wildcards in the prefix match literally."""
        self.assertEqual(self.db.fetch_suggestions("%", 10), [])

    def test_popular_brands(self) -> None:
        """Brands with enough products are listed by size."""
        brands = self.db.fetch_popular_brands(3, 8)
        self.assertEqual([b.brand for b in brands], ["Nike", "Adidas"])
        self.assertEqual(brands[0].product_count, 4)
        self.assertEqual(brands[0].min_price, 7999)

    def test_category_counts(self) -> None:
        """Categories are counted per subcategory."""
        counts = {
            (c.category, c.subcategory): c.product_count
            for c in self.db.fetch_category_counts()
        }
        self.assertEqual(
            counts,
            {("shoes", "lifestyle"): 4, ("shoes", "running"): 4},
        )

    def test_brand_price_ranges(self) -> None:
        """Each brand reports its price range."""
        ranges = {b.brand: b for b in self.db.fetch_brand_price_ranges()}
        self.assertEqual(sorted(ranges), ["Adidas", "Nike", "Puma"])
        self.assertEqual(ranges["Adidas"].min_price, 3999)
        self.assertEqual(ranges["Adidas"].max_price, 15499)
        self.assertEqual(ranges["Nike"].product_count, 4)


class TestCatalogDBFailures(unittest.TestCase):
    """Driver errors surface as upstream failures."""

    def test_closed_connection(self) -> None:
        """Using a closed store raises UpstreamUnavailableError."""
        tmp_dir = tempfile.mkdtemp()
        db = CatalogDB(db_path=Path(tmp_dir) / "test.db")
        db.close()
        with self.assertRaises(UpstreamUnavailableError):
            db.fetch_product(1)

    def test_unopenable_path(self) -> None:
        """A path that cannot be opened raises UpstreamUnavailableError."""
        tmp_dir = Path(tempfile.mkdtemp())
        # A directory cannot be opened as a database file
        target = tmp_dir / "catalog.db"
        target.mkdir()
        with self.assertRaises(UpstreamUnavailableError):
            CatalogDB(db_path=target)

    def test_default_path_from_settings(self) -> None:
        """Without a path the configured location is used."""
        db = CatalogDB()
        try:
            self.assertTrue(Settings.CATALOG_DB_PATH.exists())
        finally:
            db.close()

    def test_import_from_mapping(self) -> None:
        """A mapping can be imported directly."""
        tmp_dir = Path(tempfile.mkdtemp())
        db = CatalogDB(db_path=tmp_dir / "test.db")
        try:
            catalog = json.loads(
                Settings.SAMPLE_CATALOG_PATH.read_text(encoding="utf-8"),
            )
            db.import_catalog(catalog)
            self.assertEqual(
                len(db.fetch_price_history(1, 30, now=_NOW)), 5,
            )
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
