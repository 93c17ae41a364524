# src/models/errors.py

"""Error taxonomy shared by the comparison and search pipelines."""


class PriceCompareError(Exception):
    """Base class for all pricecompare errors."""


class NotFoundError(PriceCompareError):
    """A product or its comparison data does not exist."""


class InvalidArgumentError(PriceCompareError):
    """A caller-supplied value violates a business rule."""


class UpstreamUnavailableError(PriceCompareError):
    """The product/price store failed; never retried by the core."""
