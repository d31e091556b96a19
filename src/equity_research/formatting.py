"""Display formatting and simple growth math for the company overview."""

from __future__ import annotations

from typing import Any

from equity_research.models import CompanyFinancialData


def format_currency(value: float | None) -> str:
    """Abbreviate a dollar amount: $1.23T, $4.56B, $7.89M, $1.00K, $12.34."""
    if value is None:
        return "N/A"
    if value < 0:
        return f"-{format_currency(-value)}"
    if value >= 1e12:
        return f"${value / 1e12:.2f}T"
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    if value >= 1e3:
        return f"${value / 1e3:.2f}K"
    return f"${value:.2f}"


def format_percentage(value: float | None) -> str:
    """Fraction to percent string (0.1234 -> '12.34%')."""
    if value is None:
        return "N/A"
    return f"{value * 100:.2f}%"


def format_multiple(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:.1f}x"


def calculate_cagr(start_value: float, end_value: float, years: float) -> float:
    """Compound annual growth rate; 0 when any input is non-positive."""
    if start_value <= 0 or end_value <= 0 or years <= 0:
        return 0.0
    return (end_value / start_value) ** (1 / years) - 1


def calculate_growth_rate(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous


def _series_cagr(values: list[float | None]) -> float | None:
    """CAGR over a newest-first series, or None with fewer than two points."""
    points = [v for v in values if v is not None]
    if len(points) < 2:
        return None
    return calculate_cagr(points[-1], points[0], len(points) - 1)


def company_overview(data: CompanyFinancialData) -> dict[str, Any]:
    """Flatten the financial bundle into display-ready strings.

    FMP returns statements newest first, so index 0 is the latest year.
    """
    profile, quote = data.profile, data.quote
    latest_metrics = data.key_metrics[0] if data.key_metrics else None
    latest_income = data.income_statements[0] if data.income_statements else None

    overview: dict[str, Any] = {
        "symbol": profile.symbol,
        "name": profile.company_name or quote.name or profile.symbol,
        "exchange": profile.exchange_short_name or "NASDAQ",
        "sector": profile.sector or "N/A",
        "industry": profile.industry or "N/A",
        "ceo": profile.ceo or "N/A",
        "employees": profile.full_time_employees or "N/A",
        "website": profile.website,
        "description": profile.description,
        "price": format_currency(quote.price),
        "change_percent": format_percentage(
            quote.changes_percentage / 100 if quote.changes_percentage is not None else None
        ),
        "market_cap": format_currency(quote.market_cap),
        "year_range": (
            f"{format_currency(quote.year_low)} - {format_currency(quote.year_high)}"
        ),
        "pe": format_multiple(quote.pe),
        "eps": format_currency(quote.eps),
    }

    if latest_metrics is not None:
        overview.update({
            "ev_to_ebitda": format_multiple(latest_metrics.enterprise_value_over_ebitda),
            "price_to_book": format_multiple(latest_metrics.pb_ratio),
            "roe": format_percentage(latest_metrics.roe),
            "debt_to_equity": format_multiple(latest_metrics.debt_to_equity),
            "current_ratio": format_multiple(latest_metrics.current_ratio),
        })

    if latest_income is not None:
        overview.update({
            "revenue": format_currency(latest_income.revenue),
            "gross_margin": format_percentage(latest_income.gross_profit_ratio),
            "net_margin": format_percentage(latest_income.net_income_ratio),
        })
        if len(data.income_statements) > 1:
            prior = data.income_statements[1]
            if latest_income.revenue is not None and prior.revenue is not None:
                overview["revenue_growth"] = format_percentage(
                    calculate_growth_rate(latest_income.revenue, prior.revenue)
                )

    revenue_cagr = _series_cagr([s.revenue for s in data.income_statements])
    if revenue_cagr is not None:
        overview["revenue_cagr"] = format_percentage(revenue_cagr)
    fcf_cagr = _series_cagr([s.free_cash_flow for s in data.cash_flow_statements])
    if fcf_cagr is not None:
        overview["fcf_cagr"] = format_percentage(fcf_cagr)

    return overview
