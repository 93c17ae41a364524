# src/services/trend_analyzer.py

"""Price trend, volatility and alert-threshold heuristics.

History samples are expected most-recent-first, as returned by the
store.  The "recent" and "older" windows are the first and last
``TREND_SAMPLE_SIZE`` samples; with fewer than twice that many samples
the two windows overlap.
"""

import logging
import math
import statistics
from collections.abc import Sequence

from src.config.settings import Settings
from src.models.comparison import PriceAlertSuggestion, Trend, Volatility
from src.models.price_record import PriceHistorySample, PriceRecord
from src.models.product import Product

logger = logging.getLogger("pricecompare.trends")


def round_half_up(value: float) -> float:
    """Round to the nearest whole number, halves away from zero."""
    return float(math.floor(value + 0.5))


def analyze_trend(history: Sequence[PriceHistorySample]) -> Trend:
    """Classify the direction of recent prices against older ones."""
    if len(history) < 2:
        return Trend.INSUFFICIENT_DATA

    size = Settings.TREND_SAMPLE_SIZE
    recent = [h.avg_price for h in history[:size]]
    older = [h.avg_price for h in history[-size:]]

    recent_mean = statistics.fmean(recent)
    older_mean = statistics.fmean(older)
    if older_mean == 0:
        return Trend.STABLE

    change_percent = (recent_mean - older_mean) / older_mean * 100
    logger.debug(
        "Trend change %.2f%% (recent=%.2f, older=%.2f, samples=%d)",
        change_percent,
        recent_mean,
        older_mean,
        len(history),
    )

    if change_percent > Settings.TREND_THRESHOLD_PERCENT:
        return Trend.INCREASING
    if change_percent < -Settings.TREND_THRESHOLD_PERCENT:
        return Trend.DECREASING
    return Trend.STABLE


def coefficient_of_variation(prices: Sequence[float]) -> float:
    """Population standard deviation as a percentage of the mean."""
    mean = statistics.fmean(prices)
    if mean == 0:
        return 0.0
    return statistics.pstdev(prices) / mean * 100


def classify_volatility(cov: float) -> Volatility:
    """Map a coefficient of variation onto a volatility tier."""
    if cov > Settings.VOLATILITY_HIGH_CV:
        return Volatility.HIGH
    if cov > Settings.VOLATILITY_MEDIUM_CV:
        return Volatility.MEDIUM
    return Volatility.LOW


def analyze_volatility(
    history: Sequence[PriceHistorySample],
) -> Volatility:
    """Volatility tier of the daily average prices."""
    if len(history) < 3:
        return Volatility.LOW
    return classify_volatility(
        coefficient_of_variation([h.avg_price for h in history])
    )


def suggest_alert_price(
    history: Sequence[PriceHistorySample],
    current: Sequence[PriceRecord],
) -> float | None:
    """Suggest a price-drop alert threshold.

    Without history: 10% under today's lowest price.  With history:
    the historical low, or 5% under today's lowest if that is lower.
    """
    current_lowest = min((r.price for r in current), default=None)
    historical_lowest = min((h.min_price for h in history), default=None)

    if historical_lowest is None:
        if current_lowest is None:
            return None
        return round_half_up(
            current_lowest * Settings.ALERT_NO_HISTORY_FACTOR
        )
    if current_lowest is None:
        return historical_lowest
    return min(
        historical_lowest,
        round_half_up(
            current_lowest * Settings.ALERT_WITH_HISTORY_FACTOR
        ),
    )


def build_alert_suggestion(
    product: Product,
    history: Sequence[PriceHistorySample],
    current: Sequence[PriceRecord],
) -> PriceAlertSuggestion:
    """Combine trend, volatility and threshold into one suggestion."""
    return PriceAlertSuggestion(
        product=product,
        trend=analyze_trend(history),
        volatility=analyze_volatility(history),
        suggested_alert_price=suggest_alert_price(history, current),
        current_lowest=min((r.price for r in current), default=None),
        current_prices=list(current),
    )
