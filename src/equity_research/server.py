"""Equity research MCP server.

Tools
─────
  1. search_company        — name/ticker → matching symbols
  2. get_company_data      — profile, quote, metrics, statements + overview
  3. generate_analysis     — AI equity research report for one company
  4. parse_analysis_text   — parse already-generated model output into sections
"""

from __future__ import annotations

from fastmcp import FastMCP

from equity_research import analyst, fmp_client
from equity_research.formatting import company_overview
from equity_research.report_parser import parse_analysis

mcp = FastMCP(name="Equity-Research")


@mcp.tool()
def search_company(query: str, limit: int = 10) -> list[dict]:
    """Search for a company by ticker symbol or name.

    Returns symbol, name and exchange for each match.
    """
    results = fmp_client.search_company(query, limit=limit)
    return [r.model_dump(by_alias=True) for r in results]


@mcp.tool()
def get_company_data(symbol: str) -> dict:
    """Load profile, quote, annual key metrics and statements for a ticker.

    Also returns a display-ready overview (formatted price, margins, CAGR).
    """
    data = fmp_client.get_company_financial_data(symbol)
    return {
        "data": data.model_dump(by_alias=True, exclude_none=True),
        "overview": company_overview(data),
    }


@mcp.tool()
def generate_analysis(company_name: str, symbol: str, model: str | None = None) -> dict:
    """Generate a buy-side style research report (snapshot, metrics, thesis,
    catalysts, scenarios, summary) using the configured language model.

    Sections the model did not produce are omitted from the result.
    """
    report = analyst.generate_analysis(company_name, symbol, model=model)
    return report.to_wire()


@mcp.tool()
def parse_analysis_text(text: str) -> dict:
    """Parse raw model output in the SECTION_n_… format into structured sections."""
    return parse_analysis(text).to_wire()


if __name__ == "__main__":
    import sys

    # python -m equity_research.server --sse  for remote hosting;
    # STDIO otherwise (Claude Desktop / Cursor / local MCP clients)
    if "--sse" in sys.argv:
        mcp.run(transport="sse")
    else:
        mcp.run()
