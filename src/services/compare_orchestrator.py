# src/services/compare_orchestrator.py

"""Store-backed entry points for product comparison and price alerts."""

import asyncio
import logging
from collections.abc import Sequence

from src.config.settings import Settings
from src.models.comparison import (
    MultiProductComparison,
    PriceAlertSuggestion,
    ProductComparison,
)
from src.models.errors import NotFoundError
from src.models.product import Product, ProductDetail
from src.services.comparison_engine import build_product_detail, compare_prices
from src.services.multi_comparison import (
    build_multi_comparison,
    validate_product_ids,
)
from src.services.trend_analyzer import build_alert_suggestion
from src.storage.store import ProductPriceStore

logger = logging.getLogger("pricecompare.orchestrator")


class CompareOrchestrator:
    """Fetches product data from the store and runs the comparison core."""

    def __init__(self, store: ProductPriceStore) -> None:
        self._store = store

    async def _require_product(self, product_id: int) -> Product:
        product = await asyncio.to_thread(
            self._store.fetch_product, product_id,
        )
        if product is None:
            msg = f"Product {product_id} not found"
            raise NotFoundError(msg)
        return product

    async def product_comparison(
        self, product_id: int,
    ) -> ProductComparison:
        """Ranked store prices for one product.

        Raises:
            NotFoundError: unknown product or no active-store prices.
            UpstreamUnavailableError: the store failed.
        """
        product = await self._require_product(product_id)
        records = await asyncio.to_thread(
            self._store.fetch_price_records, product_id,
        )
        return compare_prices(product, records)

    async def multi_product_comparison(
        self, product_ids: Sequence[object],
    ) -> MultiProductComparison:
        """Compare up to five products side by side.

        Per-product failures are logged and reported in ``failed_ids``;
        only a request where every product fails raises.
        """
        ids = validate_product_ids(product_ids)
        limiter = asyncio.Semaphore(
            min(len(ids), Settings.MAX_COMPARE_PRODUCTS),
        )

        async def compare_one(product_id: int) -> ProductComparison:
            async with limiter:
                return await self.product_comparison(product_id)

        outcomes = await asyncio.gather(
            *(compare_one(pid) for pid in ids),
            return_exceptions=True,
        )

        comparisons: list[ProductComparison] = []
        failed: list[int] = []
        for product_id, outcome in zip(ids, outcomes):
            if isinstance(outcome, ProductComparison):
                comparisons.append(outcome)
            elif isinstance(outcome, Exception):
                failed.append(product_id)
                logger.warning(
                    "Dropping product %d from comparison: %s",
                    product_id,
                    outcome,
                )
            else:
                # CancelledError and friends are not per-item failures
                raise outcome

        return build_multi_comparison(comparisons, ids, failed)

    async def price_alert_suggestions(
        self, product_id: int,
    ) -> PriceAlertSuggestion:
        """Trend, volatility and a suggested alert price for a product."""
        product = await self._require_product(product_id)
        history, current = await asyncio.gather(
            asyncio.to_thread(
                self._store.fetch_price_history,
                product_id,
                Settings.PRICE_HISTORY_WINDOW_DAYS,
            ),
            asyncio.to_thread(
                self._store.fetch_price_records, product_id,
            ),
        )
        logger.debug(
            "Alert inputs for product %d: %d history samples, "
            "%d current prices",
            product_id,
            len(history),
            len(current),
        )
        return build_alert_suggestion(product, history, current)

    async def product_detail(self, product_id: int) -> ProductDetail:
        product = await self._require_product(product_id)
        records, history = await asyncio.gather(
            asyncio.to_thread(
                self._store.fetch_price_records, product_id,
            ),
            asyncio.to_thread(
                self._store.fetch_price_history,
                product_id,
                Settings.PRICE_HISTORY_WINDOW_DAYS,
            ),
        )
        return build_product_detail(product, records, history)
