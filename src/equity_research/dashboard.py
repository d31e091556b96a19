"""Investment research dashboard — FastAPI backend + single-page UI.

  - Company search and financial overview (FMP)
  - TradingView chart embed for the selected symbol
  - AI equity research report, parsed into eight section cards

Run:  python -m equity_research.dashboard
Open: http://localhost:{PORT}  (default 8877)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from equity_research.analyst import generate_analysis
from equity_research.config import get_config
from equity_research.exceptions import UpstreamError
from equity_research.fmp_client import get_company_financial_data, search_company
from equity_research.formatting import company_overview
from equity_research.models import AnalysisReport, CompanyFinancialData
from equity_research.report_parser import present_sections
from equity_research.testing_mode import testing_mode_message

log = logging.getLogger(__name__)

app = FastAPI(title="Investment Analysis Tool")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AnalysisRequest(BaseModel):
    company_name: str
    symbol: str
    api_key: str | None = None
    model: str | None = None


# ═══════════════════════════════════════════════════════════════════════════
#  Payload helpers
# ═══════════════════════════════════════════════════════════════════════════


def report_sections(report: AnalysisReport) -> list[dict]:
    """Present sections as ``{key, title}`` in fixed display order.

    ``key`` is the camelCase name used in the report payload.
    """
    return [{"key": to_camel(s.key), "title": s.title} for s in present_sections(report)]


def report_payload(report: AnalysisReport) -> dict:
    return {"report": report.to_wire(), "sections": report_sections(report)}


def company_payload(data: CompanyFinancialData) -> dict:
    overview = company_overview(data)
    return {
        "data": data.model_dump(by_alias=True),
        "overview": overview,
        "chart": {"symbol": data.profile.symbol, "exchange": overview["exchange"]},
    }


def _error(exc: Exception) -> dict:
    return {"error": str(exc) or "An unexpected error occurred"}


# ═══════════════════════════════════════════════════════════════════════════
#  Routes
# ═══════════════════════════════════════════════════════════════════════════


@app.get("/health")
async def health():
    config = get_config()
    return {"status": "ok", "testing_mode": config.testing_mode, "mode": testing_mode_message()}


@app.get("/api/search")
def search(q: str = "", limit: int = 10):
    """Company name / ticker search."""
    if not q.strip():
        return []
    try:
        return [r.model_dump(by_alias=True) for r in search_company(q.strip(), limit=limit)]
    except (UpstreamError, ValueError) as exc:
        log.warning("Search failed for %r: %s", q, exc)
        return _error(exc)


@app.get("/api/company/{symbol}")
def company(symbol: str) -> dict:
    """Profile, quote, metrics and statements for one symbol."""
    try:
        data = get_company_financial_data(symbol)
    except (UpstreamError, ValueError) as exc:
        log.warning("Company load failed for %s: %s", symbol, exc)
        return _error(exc)
    return company_payload(data)


@app.post("/api/analysis")
def analysis(req: AnalysisRequest) -> dict:
    """Generate the AI research report for one company."""
    try:
        report = generate_analysis(
            req.company_name, req.symbol, api_key=req.api_key, model=req.model,
        )
    except (UpstreamError, ValueError) as exc:
        log.warning("Analysis failed for %s: %s", req.symbol, exc)
        return _error(exc)
    return report_payload(report)


@app.post("/api/research")
def research(req: AnalysisRequest) -> dict:
    """Market data and AI report in one call, fetched concurrently.

    Either call failing fails the whole request; nothing partial is returned.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        data_future = executor.submit(get_company_financial_data, req.symbol)
        report_future = executor.submit(
            generate_analysis, req.company_name, req.symbol,
            api_key=req.api_key, model=req.model,
        )
        try:
            data = data_future.result()
            report = report_future.result()
        except (UpstreamError, ValueError) as exc:
            log.warning("Research failed for %s: %s", req.symbol, exc)
            return _error(exc)

    return {**company_payload(data), **report_payload(report)}


@app.get("/")
async def index():
    """Serve the dashboard HTML."""
    return HTMLResponse(HTML)


# ═══════════════════════════════════════════════════════════════════════════
#  Frontend
# ═══════════════════════════════════════════════════════════════════════════

HTML = """<!DOCTYPE html>
<html lang="en"><head>
<meta charset="utf-8"><meta name="viewport" content="width=device-width,initial-scale=1">
<title>Investment Analysis Tool</title>
<style>
body{margin:0;background:#000007;color:#e2e8f0;font-family:system-ui,sans-serif}
.wrap{max-width:1280px;margin:0 auto;padding:24px;display:grid;grid-template-columns:300px 1fr;gap:24px}
.card{background:#000717;border:1px solid #1e293b;border-radius:12px;padding:16px;margin-bottom:16px}
input,button{width:100%;box-sizing:border-box;padding:8px;margin:4px 0;border-radius:6px;border:1px solid #334155;background:#0f172a;color:#e2e8f0}
button{background:#2563eb;border:none;cursor:pointer}button:disabled{opacity:.5}
table{width:100%;border-collapse:collapse}td,th{border-bottom:1px solid #1e293b;padding:6px;text-align:left}
.err{border-color:#ef4444;color:#fca5a5}.muted{color:#94a3b8;font-size:13px}
#chart{height:400px;padding:0;overflow:hidden}
</style></head><body>
<div class="wrap">
<div>
  <div class="card">
    <h3>Company</h3>
    <input id="q" placeholder="Company name or ticker">
    <div id="results"></div>
    <button id="load">Load company</button>
  </div>
  <div class="card">
    <h3>AI Analysis</h3>
    <input id="key" type="password" placeholder="API key (optional)">
    <input id="model" placeholder="Model (optional)">
    <button id="analyze" disabled>Generate analysis</button>
    <p class="muted" id="mode"></p>
  </div>
</div>
<div>
  <div id="error"></div>
  <div class="card" id="chart" style="display:none"></div>
  <div id="report"></div>
  <div id="company"></div>
</div>
</div>
<script>
let current=null;
const $=id=>document.getElementById(id);
const esc=s=>String(s??'').replace(/[&<>"]/g,c=>({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;'}[c]));
function showError(msg){$('error').innerHTML=msg?`<div class="card err">${esc(msg)}</div>`:'';}
fetch('/health').then(r=>r.json()).then(h=>$('mode').textContent=h.mode);
$('q').addEventListener('input',async e=>{
  const q=e.target.value.trim();if(q.length<2){$('results').innerHTML='';return;}
  const r=await (await fetch('/api/search?q='+encodeURIComponent(q))).json();
  if(!Array.isArray(r)){return;}
  $('results').innerHTML=r.map(x=>`<div class="muted" style="cursor:pointer" data-s="${esc(x.symbol)}" data-n="${esc(x.name)}">${esc(x.symbol)} - ${esc(x.name)}</div>`).join('');
  $('results').querySelectorAll('div').forEach(d=>d.onclick=()=>{$('q').value=d.dataset.s;current={symbol:d.dataset.s,name:d.dataset.n};});
});
function chart(symbol,exchange){
  const el=$('chart');el.style.display='block';el.innerHTML='';
  const s=document.createElement('script');
  s.src='https://s3.tradingview.com/external-embedding/embed-widget-advanced-chart.js';s.async=true;
  s.innerHTML=JSON.stringify({autosize:true,symbol:`${exchange}:${symbol}`,interval:'D',theme:'dark',style:'1',locale:'en',allow_symbol_change:false});
  el.appendChild(s);
}
$('load').onclick=async()=>{
  const sym=(current&&current.symbol)||$('q').value.trim().toUpperCase();if(!sym)return;
  showError('');$('report').innerHTML='';$('company').innerHTML='<div class="card">Loading company data...</div>';
  const r=await (await fetch('/api/company/'+encodeURIComponent(sym))).json();
  if(r.error){showError(r.error);$('company').innerHTML='';return;}
  current={symbol:r.overview.symbol,name:r.overview.name};
  chart(r.chart.symbol,r.chart.exchange);
  const o=r.overview;
  $('company').innerHTML=`<div class="card"><h3>${esc(o.name)} (${esc(o.symbol)})</h3><table>`+
    Object.entries(o).filter(([k,v])=>typeof v==='string'&&k!=='description').map(([k,v])=>`<tr><th>${esc(k)}</th><td>${esc(v)}</td></tr>`).join('')+
    `</table><p class="muted">${esc(o.description)}</p></div>`;
  $('analyze').disabled=false;
};
function renderSection(title,body){
  if(body.headers){
    return `<div class="card"><h3>${esc(title)}</h3><table><tr>${body.headers.map(h=>`<th>${esc(h)}</th>`).join('')}</tr>`+
      body.rows.map(r=>`<tr>${r.map(c=>`<td>${esc(c)}</td>`).join('')}</tr>`).join('')+'</table></div>';
  }
  return `<div class="card"><h3>${esc(title)}</h3>`+Object.entries(body).map(([k,v])=>Array.isArray(v)
    ?`<b>${esc(k)}</b><ul>${v.map(i=>`<li>${esc(i)}</li>`).join('')}</ul>`
    :`<p><b>${esc(k)}:</b> ${esc(v)}</p>`).join('')+'</div>';
}
$('analyze').onclick=async()=>{
  if(!current)return;
  showError('');$('analyze').disabled=true;$('report').innerHTML='<div class="card">Generating AI analysis...</div>';
  const r=await (await fetch('/api/analysis',{method:'POST',headers:{'Content-Type':'application/json'},
    body:JSON.stringify({company_name:current.name,symbol:current.symbol,api_key:$('key').value||null,model:$('model').value||null})})).json();
  $('analyze').disabled=false;
  if(r.error){showError(r.error);$('report').innerHTML='';return;}
  $('report').innerHTML=`<h2>AI Analysis: ${esc(current.name)}</h2>`+r.sections.map(s=>renderSection(s.title,r.report[s.key])).join('');
};
</script>
</body></html>
"""


if __name__ == "__main__":
    import uvicorn

    port = get_config().port
    print(f"\n  Investment Analysis Tool → http://localhost:{port}\n")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
