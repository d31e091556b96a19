"""Canned Tesla data served when ``TESTING_MODE`` is on.

Lets the dashboard run end to end without FMP or language-model keys.
Every company request gets the same TSLA bundle, and the canned analysis
text goes through the real report parser.
"""

from __future__ import annotations

from equity_research.config import get_config
from equity_research.models import (
    CashFlowStatement,
    CompanyFinancialData,
    CompanyProfile,
    CompanySearchResult,
    FinancialStatement,
    KeyMetrics,
    Quote,
)

_TSLA = CompanySearchResult(symbol="TSLA", name="Tesla, Inc.", exchange_short_name="NASDAQ")

_DEFAULT_RESULTS = [
    _TSLA,
    CompanySearchResult(symbol="AAPL", name="Apple Inc.", exchange_short_name="NASDAQ"),
    CompanySearchResult(symbol="MSFT", name="Microsoft Corporation", exchange_short_name="NASDAQ"),
]


def is_testing_mode() -> bool:
    return get_config().testing_mode


def testing_mode_message() -> str:
    """Banner shown on the dashboard."""
    if is_testing_mode():
        return "TESTING MODE ACTIVE - Using mock TSLA data"
    return "LIVE MODE - Using real APIs"


def mock_search_company(query: str) -> list[CompanySearchResult]:
    low = query.lower()
    if "tesla" in low or "tsla" in low:
        return [_TSLA]
    return list(_DEFAULT_RESULTS)


def mock_company_financial_data(symbol: str) -> CompanyFinancialData:
    """Always the Tesla bundle, whatever *symbol* was asked for."""
    years = [
        # year, revenue, gross profit, op income, net income, eps diluted, ocf, capex
        ("2023", 96_773e6, 17_660e6, 8_891e6, 14_997e6, 4.30, 13_256e6, -8_898e6),
        ("2022", 81_462e6, 20_853e6, 13_656e6, 12_556e6, 3.62, 14_724e6, -7_158e6),
        ("2021", 53_823e6, 13_606e6, 6_523e6, 5_519e6, 1.63, 11_497e6, -6_482e6),
        ("2020", 31_536e6, 6_630e6, 1_994e6, 721e6, 0.21, 5_943e6, -3_157e6),
        ("2019", 24_578e6, 4_069e6, -69e6, -862e6, -0.33, 2_405e6, -1_332e6),
    ]
    income = [
        FinancialStatement(
            date=f"{y}-12-31", calendar_year=y, reported_currency="USD",
            revenue=rev, gross_profit=gp, gross_profit_ratio=gp / rev,
            operating_income=op, net_income=ni, net_income_ratio=ni / rev,
            epsdiluted=eps,
        )
        for y, rev, gp, op, ni, eps, _, _ in years
    ]
    cash_flows = [
        CashFlowStatement(
            date=f"{y}-12-31", calendar_year=y,
            operating_cash_flow=ocf, capital_expenditure=capex, free_cash_flow=ocf + capex,
        )
        for y, _, _, _, _, _, ocf, capex in years
    ]
    metrics = [
        KeyMetrics(
            date="2023-12-31", calendar_year="2023", period="FY",
            market_cap=789.9e9, enterprise_value=774.6e9, pe_ratio=52.7,
            price_to_sales_ratio=8.16, pb_ratio=12.7, ev_to_sales=8.0,
            enterprise_value_over_ebitda=53.4, free_cash_flow_yield=0.0055,
            debt_to_equity=0.08, current_ratio=1.73, dividend_yield=0.0,
            roe=0.24, roic=0.12,
        ),
        KeyMetrics(
            date="2022-12-31", calendar_year="2022", period="FY",
            market_cap=388.9e9, pe_ratio=31.0, pb_ratio=8.6,
            enterprise_value_over_ebitda=20.1, current_ratio=1.53, roe=0.28,
        ),
    ]
    return CompanyFinancialData(
        profile=CompanyProfile(
            symbol="TSLA",
            company_name="Tesla, Inc.",
            currency="USD",
            exchange="NASDAQ Global Select",
            exchange_short_name="NASDAQ",
            industry="Auto - Manufacturers",
            sector="Consumer Cyclical",
            country="US",
            website="https://www.tesla.com",
            description=(
                "Tesla, Inc. designs, develops, manufactures, leases, and sells electric "
                "vehicles, and energy generation and storage systems."
            ),
            ceo="Mr. Elon R. Musk",
            full_time_employees="140473",
            ipo_date="2010-06-29",
            is_etf=False,
            is_actively_trading=True,
        ),
        quote=Quote(
            symbol="TSLA", name="Tesla, Inc.", price=248.48, changes_percentage=1.85,
            change=4.52, day_low=242.1, day_high=251.3, year_high=299.29, year_low=152.37,
            market_cap=791.4e9, price_avg50=231.2, price_avg200=221.7, exchange="NASDAQ",
            volume=98_231_400, avg_volume=104_550_000, eps=4.3, pe=57.8,
            shares_outstanding=3.185e9,
        ),
        key_metrics=metrics,
        income_statements=income,
        cash_flow_statements=cash_flows,
    )


MOCK_ANALYSIS = """\
SECTION_1_SNAPSHOT
Market Cap: $791B
Share Price: $248.48
Target Price: $275.00
Upside Estimate: 10.7%
Rating: Hold
Confidence: Medium

SECTION_2_KEY_METRICS
Metric|TTM|3-yr CAGR|Sector Median|Delta vs Median
Revenue growth|18.8%|45.3%|6.1%|+12.7pp
Gross margin|18.2%|n/a|17.5%|+0.7pp
FCF margin|4.5%|n/a|3.9%|+0.6pp
P/E (NTM)|62.4x|n/a|7.8x|+54.6x
EV/EBITDA (NTM)|38.9x|n/a|6.2x|+32.7x

SECTION_3_FUNDAMENTAL_DRIVERS
Growth Engines: Model Y volume, energy storage deployments and software revenue from FSD subscriptions.
Cost Structure: Vertical integration and gigacasting keep unit costs falling, though price cuts compress automotive margin.
Capital Allocation: Capex is directed at new capacity and AI compute; no dividend and minimal buybacks.

SECTION_4_THESIS_ASSESSMENT
Supporting Points:
- Industry-leading EV scale and cost position
- Energy storage growing faster than automotive
- Optionality in autonomy and robotics
Risks:
- Sustained price competition from Chinese OEMs
- Valuation leaves little room for execution misses
Net Verdict: Neutral - Strong franchise, but the price already discounts much of the upside.

SECTION_5_MACRO_SECTOR
Sector Cycle: EV adoption is in a slower mid-cycle phase as early adopters are saturated.
Macro Sensitivities: Demand is sensitive to interest rates and consumer credit conditions.
Competitive Moat: Charging network, software stack and manufacturing know-how.

SECTION_6_CATALYST_MAP
Date/Window|Event|Expected Impact|ST/LT
Q1 2024|Q4 deliveries and earnings|Margin guidance reset|ST
H2 2024|Next-gen platform update|Volume growth visibility|LT
2025|Robotaxi regulatory milestones|Autonomy optionality|LT

SECTION_7_SCENARIO_ANALYSIS
Case|Assumptions|Valuation|Probability|Price Target
Bear|Margin compression persists|30x EPS|25%|$150
Base|Volumes +15%, stable margins|50x EPS|50%|$270
Bull|Autonomy monetises early|75x EPS|25%|$410
Risk-reward|Probability-weighted upside|$275|100%|$275

SECTION_8_INVESTMENT_SUMMARY
Key Points:
- Leading EV maker with improving cost curve
- Energy business adds diversification
- Near-term margins pressured by pricing
- Autonomy remains the key upside lever
- Valuation is demanding versus peers
Final Call: Hold, 12 months, Medium confidence"""


def mock_analysis_text(company_name: str = "", symbol: str = "") -> str:
    """Raw model output for the mock analysis; ignores the company asked for."""
    return MOCK_ANALYSIS
