"""Tests for the dashboard API."""

import pytest
from fastapi.testclient import TestClient

from equity_research import dashboard
from equity_research.exceptions import AnalysisError, MarketDataError


@pytest.fixture
def client():
    return TestClient(dashboard.app)


def test_health(client, testing_mode):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["testing_mode"] is True


def test_index_serves_html(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Investment Analysis Tool" in resp.text


def test_search(client, testing_mode):
    assert client.get("/api/search", params={"q": "tesla"}).json() == [
        {"symbol": "TSLA", "name": "Tesla, Inc.", "exchangeShortName": "NASDAQ"},
    ]
    assert client.get("/api/search", params={"q": "  "}).json() == []


def test_company(client, testing_mode):
    body = client.get("/api/company/TSLA").json()
    assert body["data"]["profile"]["companyName"] == "Tesla, Inc."
    assert body["overview"]["price"] == "$248.48"
    assert body["chart"] == {"symbol": "TSLA", "exchange": "NASDAQ"}


def test_company_without_api_key_reports_error(client):
    body = client.get("/api/company/TSLA").json()
    assert "FMP_API_KEY" in body["error"]


def test_company_upstream_failure(client, monkeypatch):
    def fail(symbol):
        raise MarketDataError("Failed to fetch financial data")

    monkeypatch.setattr(dashboard, "get_company_financial_data", fail)
    assert client.get("/api/company/TSLA").json() == {"error": "Failed to fetch financial data"}


def test_analysis_sections_in_display_order(client, testing_mode):
    body = client.post(
        "/api/analysis", json={"company_name": "Tesla, Inc.", "symbol": "TSLA"},
    ).json()

    assert [s["key"] for s in body["sections"]] == [
        "snapshot", "keyMetrics", "fundamentalDrivers", "thesisAssessment",
        "macroSector", "catalystMap", "scenarioAnalysis", "investmentSummary",
    ]
    assert body["report"]["snapshot"]["impliedUpside"] == "10.7%"
    assert body["report"]["keyMetrics"]["headers"][0] == "Metric"


def test_analysis_omits_absent_sections(client, monkeypatch):
    from equity_research.report_parser import parse_analysis

    def fake_generate(company_name, symbol, **kwargs):
        return parse_analysis("SECTION_1_SNAPSHOT\nRating: Sell")

    monkeypatch.setattr(dashboard, "generate_analysis", fake_generate)
    body = client.post("/api/analysis", json={"company_name": "X", "symbol": "X"}).json()

    assert body == {
        "report": {"snapshot": {"rating": "Sell"}},
        "sections": [{"key": "snapshot", "title": "Snapshot"}],
    }


def test_analysis_upstream_failure(client, monkeypatch):
    def fail(company_name, symbol, **kwargs):
        raise AnalysisError("Insufficient credits")

    monkeypatch.setattr(dashboard, "generate_analysis", fail)
    body = client.post("/api/analysis", json={"company_name": "X", "symbol": "X"}).json()
    assert body == {"error": "Insufficient credits"}


def test_research_combines_both_calls(client, testing_mode):
    body = client.post(
        "/api/research", json={"company_name": "Tesla, Inc.", "symbol": "TSLA"},
    ).json()
    assert body["overview"]["symbol"] == "TSLA"
    assert body["report"]["snapshot"]["rating"] == "Hold"
    assert len(body["sections"]) == 8


def test_research_fails_whole_request(client, testing_mode, monkeypatch):
    def fail(company_name, symbol, **kwargs):
        raise AnalysisError("No analysis content received from API")

    monkeypatch.setattr(dashboard, "generate_analysis", fail)
    body = client.post("/api/research", json={"company_name": "T", "symbol": "TSLA"}).json()
    assert body == {"error": "No analysis content received from API"}
