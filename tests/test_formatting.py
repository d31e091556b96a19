"""Tests for display formatting and growth helpers."""

import pytest

from equity_research.formatting import (
    calculate_cagr,
    calculate_growth_rate,
    company_overview,
    format_currency,
    format_multiple,
    format_percentage,
)
from equity_research.testing_mode import mock_company_financial_data


def test_format_currency_scales():
    assert format_currency(2.5e12) == "$2.50T"
    assert format_currency(96_773e6) == "$96.77B"
    assert format_currency(7_890_000) == "$7.89M"
    assert format_currency(1000) == "$1.00K"
    assert format_currency(12.5) == "$12.50"


def test_format_currency_negative_and_missing():
    assert format_currency(-862e6) == "-$862.00M"
    assert format_currency(None) == "N/A"


def test_format_percentage():
    assert format_percentage(0.1234) == "12.34%"
    assert format_percentage(-0.05) == "-5.00%"
    assert format_percentage(None) == "N/A"


def test_format_multiple():
    assert format_multiple(52.71) == "52.7x"


def test_calculate_cagr():
    assert calculate_cagr(100, 121, 2) == pytest.approx(0.10)
    assert calculate_cagr(0, 121, 2) == 0
    assert calculate_cagr(100, -5, 2) == 0
    assert calculate_cagr(100, 121, 0) == 0


def test_calculate_growth_rate():
    assert calculate_growth_rate(110, 100) == pytest.approx(0.10)
    assert calculate_growth_rate(5, 0) == 0


def test_company_overview_from_mock_bundle():
    overview = company_overview(mock_company_financial_data("TSLA"))

    assert overview["symbol"] == "TSLA"
    assert overview["name"] == "Tesla, Inc."
    assert overview["exchange"] == "NASDAQ"
    assert overview["price"] == "$248.48"
    assert overview["market_cap"] == "$791.40B"
    assert overview["change_percent"] == "1.85%"
    assert overview["revenue"] == "$96.77B"
    assert overview["ev_to_ebitda"] == "53.4x"
    # 2019 -> 2023 revenue
    assert overview["revenue_cagr"] == format_percentage(calculate_cagr(24_578e6, 96_773e6, 4))
    assert overview["revenue_growth"] == format_percentage(
        calculate_growth_rate(96_773e6, 81_462e6)
    )
