"""Pydantic models for market data and the parsed research report."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Rating = Literal["Buy", "Hold", "Sell"]
Confidence = Literal["High", "Medium", "Low"]


class _CamelModel(BaseModel):
    """Base for models whose wire form uses camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True,
    )


# ---------------------------------------------------------------------------
# Market data (Financial Modeling Prep)
# ---------------------------------------------------------------------------

class CompanySearchResult(_CamelModel):
    symbol: str
    name: str
    exchange_short_name: str | None = None


class CompanyProfile(_CamelModel):
    symbol: str
    company_name: str | None = None
    currency: str | None = None
    exchange: str | None = None
    exchange_short_name: str | None = None
    industry: str | None = None
    sector: str | None = None
    country: str | None = None
    website: str | None = None
    description: str | None = None
    ceo: str | None = None
    full_time_employees: str | None = None
    ipo_date: str | None = None
    image: str | None = None
    dcf: float | None = None
    dcf_diff: float | None = None
    is_etf: bool | None = None
    is_actively_trading: bool | None = None


class Quote(_CamelModel):
    symbol: str
    name: str | None = None
    price: float | None = None
    changes_percentage: float | None = None
    change: float | None = None
    day_low: float | None = None
    day_high: float | None = None
    year_high: float | None = None
    year_low: float | None = None
    market_cap: float | None = None
    price_avg50: float | None = None
    price_avg200: float | None = None
    exchange: str | None = None
    volume: float | None = None
    avg_volume: float | None = None
    eps: float | None = None
    pe: float | None = None
    earnings_announcement: str | None = None
    shares_outstanding: float | None = None


class KeyMetrics(_CamelModel):
    """One annual row of FMP key metrics.  None means not reported."""
    date: str | None = None
    calendar_year: str | None = None
    period: str | None = None
    revenue_per_share: float | None = None
    free_cash_flow_per_share: float | None = None
    market_cap: float | None = None
    enterprise_value: float | None = None
    pe_ratio: float | None = None
    price_to_sales_ratio: float | None = None
    pb_ratio: float | None = None
    ev_to_sales: float | None = None
    enterprise_value_over_ebitda: float | None = Field(
        default=None, alias="enterpriseValueOverEBITDA",
    )
    free_cash_flow_yield: float | None = None
    debt_to_equity: float | None = None
    current_ratio: float | None = None
    dividend_yield: float | None = None
    roe: float | None = None
    roic: float | None = None


class FinancialStatement(_CamelModel):
    """One annual income statement."""
    date: str | None = None
    calendar_year: str | None = None
    reported_currency: str | None = None
    revenue: float | None = None
    gross_profit: float | None = None
    gross_profit_ratio: float | None = None
    operating_income: float | None = None
    ebitda: float | None = None
    net_income: float | None = None
    net_income_ratio: float | None = None
    eps: float | None = None
    epsdiluted: float | None = None


class CashFlowStatement(_CamelModel):
    """One annual cash-flow statement."""
    date: str | None = None
    calendar_year: str | None = None
    operating_cash_flow: float | None = None
    capital_expenditure: float | None = None
    free_cash_flow: float | None = None
    stock_based_compensation: float | None = None
    dividends_paid: float | None = None
    common_stock_repurchased: float | None = None


class CompanyFinancialData(_CamelModel):
    """Everything the dashboard shows for one company."""
    profile: CompanyProfile
    quote: Quote
    key_metrics: list[KeyMetrics] = []
    income_statements: list[FinancialStatement] = []
    cash_flow_statements: list[CashFlowStatement] = []


# ---------------------------------------------------------------------------
# Parsed research report
#
# Every field is optional: presence means the section (or sub-field) was
# found in the model output.  Reports are frozen once built.
# ---------------------------------------------------------------------------

class _ReportPart(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True,
    )


class Snapshot(_ReportPart):
    market_cap: str | None = None
    share_price: str | None = None
    target_price: str | None = None
    implied_upside: str | None = None
    rating: Rating | None = None
    confidence: Confidence | None = None


class ReportTable(_ReportPart):
    """Pipe-delimited table.  Rows may be shorter or longer than the header."""
    headers: list[str]
    rows: list[list[str]]


class FundamentalDrivers(_ReportPart):
    growth_engines: str | None = None
    cost_structure: str | None = None
    capital_allocation: str | None = None


class ThesisAssessment(_ReportPart):
    supporting_points: list[str] | None = None
    risks: list[str] | None = None
    net_verdict: str | None = None


class MacroSector(_ReportPart):
    sector_cycle: str | None = None
    macro_sensitivities: str | None = None
    competitive_moat: str | None = None


class InvestmentSummary(_ReportPart):
    bullets: list[str] | None = None
    final_call: str | None = None


class AnalysisReport(_ReportPart):
    snapshot: Snapshot | None = None
    key_metrics: ReportTable | None = None
    fundamental_drivers: FundamentalDrivers | None = None
    thesis_assessment: ThesisAssessment | None = None
    macro_sector: MacroSector | None = None
    catalyst_map: ReportTable | None = None
    scenario_analysis: ReportTable | None = None
    investment_summary: InvestmentSummary | None = None

    def to_wire(self) -> dict:
        """camelCase dict with absent sections and fields left out."""
        return self.model_dump(by_alias=True, exclude_none=True)
