"""Pytest configuration and fixtures."""

import pytest

from equity_research import fmp_client
from equity_research.config import reset_config

_ENV_VARS = (
    "FMP_API_KEY", "FMP_BASE_URL", "LLM_PROVIDER", "OPENROUTER_API_KEY",
    "OPENROUTER_MODEL", "OPENROUTER_BASE_URL", "ANTHROPIC_API_KEY",
    "ANTHROPIC_MODEL", "TESTING_MODE", "PORT",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch, tmp_path):
    """Isolate every test from the developer's environment and .env file."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(fmp_client, "_client", None)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def testing_mode(monkeypatch):
    monkeypatch.setenv("TESTING_MODE", "true")
    reset_config()


FULL_REPORT = """\
SECTION_1_SNAPSHOT
Market Cap: $2.9T
Share Price: $189.50
Target Price: $215.00
Upside Estimate: 13.5%
Rating: Buy
Confidence: High

SECTION_2_KEY_METRICS
Metric|TTM|3-yr CAGR|Sector Median|Delta vs Median
Revenue growth|2.1%|7.8%|5.0%|-2.9pp
Gross margin|45.6%|n/a|38.0%|+7.6pp
FCF margin|26.3%|n/a|15.0%|+11.3pp

SECTION_3_FUNDAMENTAL_DRIVERS
Growth Engines: Services and wearables offset flat iPhone units.
Cost Structure: Scale purchasing keeps hardware margins stable.
Capital Allocation: Buybacks of roughly $90B a year plus a growing dividend.

SECTION_4_THESIS_ASSESSMENT
Supporting Points:
- Installed base above 2B devices
- Services margin above 70%
- Net cash balance sheet
Risks:
- App Store regulation in the EU and US
- China demand softness
Net Verdict: Bullish - Durable ecosystem justifies a premium multiple.

SECTION_5_MACRO_SECTOR
Sector Cycle: Smartphone replacement cycle is lengthening.
Macro Sensitivities: FX and consumer spending in China.
Competitive Moat: Ecosystem lock-in and brand.

SECTION_6_CATALYST_MAP
Date/Window|Event|Expected Impact|ST/LT
June 2024|WWDC AI announcements|Upgrade cycle narrative|ST
Sept 2024|iPhone 16 launch|Unit growth|ST

SECTION_7_SCENARIO_ANALYSIS
Case|Assumptions|Valuation|Probability|Price Target
Bear|Services growth slows to 5%|22x EPS|20%|$150
Base|Steady mid-single-digit growth|28x EPS|60%|$215
Bull|AI-driven upgrade supercycle|34x EPS|20%|$260

SECTION_8_INVESTMENT_SUMMARY
Key Points:
- Best-in-class ecosystem
- Strong capital returns
- Regulatory overhang is manageable
Final Call: Buy, 12 months, High confidence
"""


LEGACY_REPORT = """\
Equity Research Note

1 | Snapshot
Mkt Cap: $800B
Share Price: $250
Target Price: $280
Upside Estimate: 12%
Rating: buy
Confidence: MEDIUM

2 | Key Metrics (vs sector)
Metric | TTM | Sector Median
------ | --- | -------------
Revenue growth | 12% | 6%
Gross margin | 18% | 17%

3 | Fundamental Drivers
Growth Engines: Energy storage
"""


@pytest.fixture
def full_report_text() -> str:
    return FULL_REPORT


@pytest.fixture
def legacy_report_text() -> str:
    return LEGACY_REPORT
