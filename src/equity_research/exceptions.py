"""Errors raised when a third-party API call fails.

Messages are meant to be shown to the user as-is.
"""


class UpstreamError(RuntimeError):
    """A market-data or language-model request failed."""


class MarketDataError(UpstreamError):
    """Financial Modeling Prep request failed or returned no data."""


class AnalysisError(UpstreamError):
    """Language-model completion failed or returned no content."""
