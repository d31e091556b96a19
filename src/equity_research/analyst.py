"""Language-model equity research generator.

Sends a fixed buy-side analyst prompt to a chat model (OpenRouter by
default, or Anthropic Claude) and parses the plain-text answer into an
``AnalysisReport``.  The prompt pins the output to eight tagged sections so
``report_parser`` can read it back without any markdown handling.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from equity_research.config import get_config
from equity_research.exceptions import AnalysisError
from equity_research.models import AnalysisReport
from equity_research.report_parser import parse_analysis

log = logging.getLogger(__name__)

APP_TITLE = "Investment Analysis Tool"

SYSTEM_PROMPT = (
    "You are a professional financial analyst. Respond with plain text only, "
    "following the exact format provided. Do not use markdown, bold, italic, or "
    "any formatting. Use simple text with consistent structure."
)

ANALYSIS_PROMPT = """\
## ROLE
You are a senior buy-side equity analyst at a Tier-1 investment fund. Your analysis \
will be processed by software, so strict adherence to the format is crucial.

## INPUT
Company: {company_name}
Symbol: {symbol}

## OUTPUT FORMAT REQUIREMENTS
- Use ONLY plain text, no markdown formatting
- Use consistent section headers exactly as shown
- Use pipe (|) separators for tables
- Use simple bullet points with dashes (-)
- No bold, italic, or other formatting
- Keep responses concise and data-focused

## ANALYSIS STRUCTURE

SECTION_1_SNAPSHOT
Market Cap: [value]
Share Price: [value]
Target Price: [value]
Upside Estimate: [value]
Rating: [Buy/Hold/Sell]
Confidence: [High/Medium/Low]

SECTION_2_KEY_METRICS
Metric|TTM|3-yr CAGR|Sector Median|Delta vs Median
Revenue growth|[value]|[value]|[value]|[value]
Gross margin|[value]|[value]|[value]|[value]
FCF margin|[value]|[value]|[value]|[value]
P/E (NTM)|[value]|[value]|[value]|[value]
EV/EBITDA (NTM)|[value]|[value]|[value]|[value]

SECTION_3_FUNDAMENTAL_DRIVERS
Growth Engines: [single paragraph description]
Cost Structure: [single paragraph description]
Capital Allocation: [single paragraph description]

SECTION_4_THESIS_ASSESSMENT
Supporting Points:
- [point 1]
- [point 2]
- [point 3]
Risks:
- [risk 1]
- [risk 2]
Net Verdict: [Bullish/Bearish/Neutral] - [single sentence justification]

SECTION_5_MACRO_SECTOR
Sector Cycle: [single paragraph description]
Macro Sensitivities: [single paragraph description]
Competitive Moat: [single paragraph description]

SECTION_6_CATALYST_MAP
Date/Window|Event|Expected Impact|ST/LT
[date]|[event]|[impact]|[timeframe]
[date]|[event]|[impact]|[timeframe]
[date]|[event]|[impact]|[timeframe]

SECTION_7_SCENARIO_ANALYSIS
Case|Assumptions|Valuation|Probability|Price Target
Bear|[assumptions]|[valuation]|[probability]|[target]
Base|[assumptions]|[valuation]|[probability]|[target]
Bull|[assumptions]|[valuation]|[probability]|[target]
Risk-reward|Probability-weighted upside|[value]|100%|[weighted target]

SECTION_8_INVESTMENT_SUMMARY
Key Points:
- [bullet 1]
- [bullet 2]
- [bullet 3]
- [bullet 4]
- [bullet 5]
Final Call: [Buy/Hold/Sell], [timeframe], [confidence level]"""


def build_prompt(company_name: str, symbol: str) -> str:
    """Fill the analysis prompt for one company."""
    return ANALYSIS_PROMPT.format(company_name=company_name, symbol=symbol.upper())


# ═══════════════════════════════════════════════════════════════════════════
#  Providers
# ═══════════════════════════════════════════════════════════════════════════


def _openrouter_completion(prompt: str, api_key: str, model: str) -> str:
    """Call the OpenRouter chat-completions endpoint and return the text."""
    config = get_config()
    try:
        resp = requests.post(
            f"{config.openrouter_base_url.rstrip('/')}/chat/completions",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "X-Title": APP_TITLE,
            },
            json={
                "model": model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                "temperature": config.analysis_temperature,
                "max_tokens": config.analysis_max_tokens,
            },
            timeout=config.analysis_timeout,
        )
    except requests.RequestException as exc:
        log.warning("OpenRouter request failed: %s", exc)
        raise AnalysisError(f"API request failed: {exc}") from exc

    if not resp.ok:
        raise AnalysisError(_error_message(resp))

    try:
        data = resp.json()
    except ValueError as exc:
        raise AnalysisError("API returned a non-JSON response") from exc
    choices = data.get("choices") or [{}]
    return (choices[0].get("message") or {}).get("content") or ""


def _error_message(resp: requests.Response) -> str:
    """Prefer the provider's own error message over the bare status code."""
    try:
        body: Any = resp.json()
    except ValueError:
        body = {}
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
    return f"API request failed: {resp.status_code}"


def _anthropic_completion(prompt: str, api_key: str, model: str) -> str:
    """Call the Anthropic messages API and join the text blocks."""
    import anthropic

    config = get_config()
    client = anthropic.Anthropic(api_key=api_key)
    try:
        response = client.messages.create(
            model=model,
            max_tokens=config.analysis_max_tokens,
            temperature=config.analysis_temperature,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.APIError as exc:
        log.warning("Anthropic request failed: %s", exc)
        raise AnalysisError(getattr(exc, "message", None) or str(exc)) from exc

    text_parts = []
    for block in response.content:
        if hasattr(block, "text"):
            text_parts.append(block.text)
    return "\n".join(text_parts)


def request_completion(
    prompt: str,
    *,
    provider: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
) -> str:
    """Send *prompt* to the configured (or given) provider; return the raw text.

    Raises:
        ValueError: no API key configured or passed for the provider.
        AnalysisError: the request failed or produced no content.
    """
    config = get_config()
    provider = provider or config.llm_provider

    if provider == "anthropic":
        key = api_key or config.anthropic_api_key
        env_name = "ANTHROPIC_API_KEY"
        call, default_model = _anthropic_completion, config.anthropic_model
    elif provider == "openrouter":
        key = api_key or config.openrouter_api_key
        env_name = "OPENROUTER_API_KEY"
        call, default_model = _openrouter_completion, config.openrouter_model
    else:
        raise ValueError(f"Unknown LLM provider: {provider!r}")

    if not key:
        raise ValueError(
            f"{env_name} is not set. "
            "Add it to your .env file or pass an API key with the request."
        )

    content = call(prompt, key, model or default_model)
    if not content or not content.strip():
        raise AnalysisError("No analysis content received from API")
    return content


def generate_analysis(
    company_name: str,
    symbol: str,
    *,
    provider: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
) -> AnalysisReport:
    """Generate and parse an equity research report for one company.

    In testing mode the canned Tesla response is parsed instead of calling
    any API.
    """
    if get_config().testing_mode:
        from equity_research.testing_mode import mock_analysis_text
        return parse_analysis(mock_analysis_text(company_name, symbol))

    prompt = build_prompt(company_name, symbol)
    content = request_completion(prompt, provider=provider, api_key=api_key, model=model)
    log.info("Received %d chars of analysis for %s", len(content), symbol.upper())
    return parse_analysis(content)
