"""Financial Modeling Prep (FMP) API client.

Endpoints used (all need ``apikey``):
  - search?query=…             — company name / ticker search
  - profile/{symbol}           — company profile
  - quote/{symbol}             — live quote
  - key-metrics/{symbol}       — annual valuation + return metrics
  - income-statement/{symbol}  — annual income statements
  - cash-flow-statement/{symbol} — annual cash-flow statements

A company load issues the five per-symbol calls in parallel and waits for
all of them.  There is no caching and no retry: the first failure is
reported to the caller as a ``MarketDataError``.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any
from urllib.parse import quote

import requests

from equity_research.exceptions import MarketDataError
from equity_research.models import (
    CashFlowStatement,
    CompanyFinancialData,
    CompanyProfile,
    CompanySearchResult,
    FinancialStatement,
    KeyMetrics,
    Quote,
)

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://financialmodelingprep.com/api/v3"

# Annual history depth for metrics and statements
HISTORY_YEARS = 5


class FMPClient:
    """Thin requests-based client for the FMP v3 REST API."""

    def __init__(self, api_key: str, base_url: str = DEFAULT_BASE_URL, timeout: int = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    # ── HTTP ──────────────────────────────────────────────────────────

    def _request_json(self, path: str, **params: Any) -> Any:
        """GET ``base_url/path`` and return parsed JSON.

        FMP reports bad keys and exhausted plans as a 200 with an
        ``"Error Message"`` body, so that is raised like an HTTP error.
        """
        params["apikey"] = self.api_key
        resp = self.session.get(f"{self.base_url}/{path}", params=params, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        if isinstance(data, dict) and "Error Message" in data:
            raise requests.HTTPError(data["Error Message"], response=resp)
        return data

    # ── Search ────────────────────────────────────────────────────────

    def search(self, query: str, limit: int = 10) -> list[CompanySearchResult]:
        """Search companies by name or ticker."""
        try:
            data = self._request_json("search", query=query, limit=limit)
        except (requests.RequestException, ValueError) as exc:
            log.warning("Company search failed for %r: %s", query, exc)
            raise MarketDataError("Failed to search for company") from exc

        return [
            CompanySearchResult(
                symbol=item["symbol"],
                name=item.get("name") or item["symbol"],
                exchange_short_name=item.get("exchangeShortName"),
            )
            for item in data or []
            if item.get("symbol")
        ]

    # ── Company bundle ────────────────────────────────────────────────

    def get_financial_data(self, symbol: str) -> CompanyFinancialData:
        """Fetch profile, quote, metrics and statements for *symbol* in parallel."""
        sym = quote(symbol.strip().upper(), safe="")
        history = {"period": "annual", "limit": HISTORY_YEARS}
        endpoints: dict[str, tuple[str, dict[str, Any]]] = {
            "profile": (f"profile/{sym}", {}),
            "quote": (f"quote/{sym}", {}),
            "key_metrics": (f"key-metrics/{sym}", history),
            "income_statements": (f"income-statement/{sym}", history),
            "cash_flow_statements": (f"cash-flow-statement/{sym}", history),
        }

        payloads: dict[str, Any] = {}
        with ThreadPoolExecutor(max_workers=len(endpoints)) as executor:
            futures = {
                executor.submit(self._request_json, path, **params): key
                for key, (path, params) in endpoints.items()
            }
            for future in as_completed(futures):
                key = futures[future]
                try:
                    payloads[key] = future.result()
                except (requests.RequestException, ValueError) as exc:
                    log.warning("FMP %s request failed for %s: %s", key, symbol, exc)
                    raise MarketDataError("Failed to fetch financial data") from exc

        if not payloads["profile"] or not payloads["quote"]:
            raise MarketDataError(f"No market data found for {symbol.upper()}")

        return CompanyFinancialData(
            profile=CompanyProfile.model_validate(payloads["profile"][0]),
            quote=Quote.model_validate(payloads["quote"][0]),
            key_metrics=[KeyMetrics.model_validate(r) for r in payloads["key_metrics"] or []],
            income_statements=[
                FinancialStatement.model_validate(r) for r in payloads["income_statements"] or []
            ],
            cash_flow_statements=[
                CashFlowStatement.model_validate(r) for r in payloads["cash_flow_statements"] or []
            ],
        )


# ═══════════════════════════════════════════════════════════════════════════
#  Module-level API (testing-mode aware)
# ═══════════════════════════════════════════════════════════════════════════

_client: FMPClient | None = None


def get_fmp_client() -> FMPClient:
    """Get or create the shared FMPClient singleton."""
    global _client
    if _client is None:
        from equity_research.config import get_config
        config = get_config()
        if not config.fmp_api_key:
            raise ValueError(
                "FMP_API_KEY is not set. "
                "Add it to your .env file (or enable TESTING_MODE) to load market data."
            )
        _client = FMPClient(
            config.fmp_api_key,
            base_url=config.fmp_base_url,
            timeout=config.request_timeout,
        )
    return _client


def search_company(query: str, limit: int = 10) -> list[CompanySearchResult]:
    """Search for a company, or return mock results in testing mode."""
    from equity_research.config import get_config
    if get_config().testing_mode:
        from equity_research.testing_mode import mock_search_company
        return mock_search_company(query)
    return get_fmp_client().search(query, limit=limit)


def get_company_financial_data(symbol: str) -> CompanyFinancialData:
    """Load the full financial bundle for *symbol* (mock data in testing mode)."""
    from equity_research.config import get_config
    if get_config().testing_mode:
        from equity_research.testing_mode import mock_company_financial_data
        return mock_company_financial_data(symbol)
    return get_fmp_client().get_financial_data(symbol)
