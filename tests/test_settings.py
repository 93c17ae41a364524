# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path

from src.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants."""

    def test_paths_are_paths(self) -> None:
        """Every *_DIR / *_PATH constant is a Path."""
        for name in (
            "BASE_DIR",
            "DATA_DIR",
            "LOGS_DIR",
            "CATALOG_DB_PATH",
            "SAMPLE_CATALOG_PATH",
        ):
            self.assertIsInstance(getattr(Settings, name), Path, name)

    def test_sample_catalog_ships_with_repo(self) -> None:
        """The bundled sample catalogue is present."""
        self.assertTrue(Settings.SAMPLE_CATALOG_PATH.exists())

    def test_page_limits_are_consistent(self) -> None:
        """Default limit must not exceed the maximum."""
        self.assertGreaterEqual(Settings.DEFAULT_PAGE_LIMIT, 1)
        self.assertLessEqual(
            Settings.DEFAULT_PAGE_LIMIT, Settings.MAX_PAGE_LIMIT,
        )
        self.assertEqual(Settings.MAX_PAGE_LIMIT, 50)
        self.assertEqual(Settings.MAX_PAGE, 100)

    def test_query_length_bounds(self) -> None:
        """Queries must be 2 to 100 characters."""
        self.assertEqual(Settings.MIN_QUERY_LENGTH, 2)
        self.assertEqual(Settings.MAX_QUERY_LENGTH, 100)

    def test_relevance_weights(self) -> None:
        """Name outweighs brand, brand outweighs model."""
        weights = Settings.RELEVANCE_WEIGHTS
        self.assertEqual(
            (weights["name"], weights["brand"], weights["model"]),
            (10, 8, 6),
        )

    def test_compare_ceiling_is_five(self) -> None:
        """At most five products can be compared."""
        self.assertEqual(Settings.MAX_COMPARE_PRODUCTS, 5)

    def test_volatility_tiers_ordered(self) -> None:
        """The high cut-off sits above the medium one."""
        self.assertGreater(
            Settings.VOLATILITY_HIGH_CV, Settings.VOLATILITY_MEDIUM_CV,
        )

    def test_alert_factors_below_one(self) -> None:
        """Suggested alerts always sit under the current price."""
        self.assertLess(Settings.ALERT_NO_HISTORY_FACTOR, 1)
        self.assertLess(Settings.ALERT_WITH_HISTORY_FACTOR, 1)
        self.assertLess(
            Settings.ALERT_NO_HISTORY_FACTOR,
            Settings.ALERT_WITH_HISTORY_FACTOR,
        )

    def test_fallback_catalogs_not_empty(self) -> None:
        """Fallback brands, types and images are populated."""
        self.assertIn("Nike", Settings.FALLBACK_BRANDS)
        self.assertGreater(len(Settings.FALLBACK_TYPES), 0)
        self.assertGreater(len(Settings.FALLBACK_IMAGES), 0)

    def test_log_retention_positive(self) -> None:
        """At least the current run log is always kept."""
        self.assertGreaterEqual(Settings.LOG_KEEP_RUNS, 1)
        self.assertTrue(Settings.LOG_CONSOLE_LEVEL)

    def test_fallback_count_range(self) -> None:
        """Counts span 4..8 inclusive."""
        low = Settings.FALLBACK_MIN_COUNT
        high = low + Settings.FALLBACK_COUNT_SPREAD - 1
        self.assertEqual((low, high), (4, 8))


if __name__ == "__main__":
    unittest.main()
