"""Tests for the MCP server tools."""

import pytest

from equity_research import server


def _call(tool, *args, **kwargs):
    # fastmcp may wrap the decorated function in a tool object
    return getattr(tool, "fn", tool)(*args, **kwargs)


def test_parse_analysis_text_tool():
    text = (
        "SECTION_1_SNAPSHOT\nMarket Cap: $800B\nRating: sell\n\n"
        "SECTION_8_INVESTMENT_SUMMARY\nKey Points:\n- Cash rich\nFinal Call: Sell, 6 months, Low"
    )
    assert _call(server.parse_analysis_text, text) == {
        "snapshot": {"marketCap": "$800B", "rating": "Sell"},
        "investmentSummary": {"bullets": ["Cash rich"], "finalCall": "Sell, 6 months, Low"},
    }


def test_parse_analysis_text_tool_without_sections():
    assert _call(server.parse_analysis_text, "no tagged sections here") == {}


def test_search_company_tool(testing_mode):
    assert _call(server.search_company, "Tesla") == [
        {"symbol": "TSLA", "name": "Tesla, Inc.", "exchangeShortName": "NASDAQ"},
    ]


def test_get_company_data_tool(testing_mode):
    result = _call(server.get_company_data, "TSLA")
    assert result["data"]["profile"]["symbol"] == "TSLA"
    assert result["overview"]["price"] == "$248.48"


def test_generate_analysis_tool(testing_mode):
    report = _call(server.generate_analysis, "Tesla, Inc.", "TSLA")
    assert report["snapshot"]["rating"] == "Hold"
    assert report["snapshot"]["impliedUpside"] == "10.7%"
    assert len(report["scenarioAnalysis"]["rows"]) == 4


def test_generate_analysis_tool_needs_a_key():
    with pytest.raises(ValueError, match="OPENROUTER_API_KEY"):
        _call(server.generate_analysis, "Tesla, Inc.", "TSLA")


@pytest.mark.integration
def test_search_company_tool_live():
    results = _call(server.search_company, "AAPL", limit=5)
    assert any(r["symbol"] == "AAPL" for r in results)
