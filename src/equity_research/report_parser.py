"""Plain-text research report parser.

The analysis prompt asks the model for eight blocks, each introduced by a
machine tag on its own line::

    SECTION_1_SNAPSHOT
    Market Cap: $800B
    Rating: Buy

    SECTION_2_KEY_METRICS
    Metric|TTM|3-yr CAGR
    Revenue growth|12%|9%

A block holds ``Label: value`` lines, dash bullets under a ``Header:`` line,
or pipe-delimited tables.  Parsing is a single stateless pass:

  1.  Slice the document into sections between tag boundaries.
  2.  Run the key-value / bullet / table extractors the section needs.
  3.  Assemble a frozen ``AnalysisReport``; sections that were not found
      stay ``None``.

Earlier prompt versions produced human-readable headings ("1 | Snapshot",
"2 | Key Metrics") instead of tags.  Both layouts go through the same
splitter and extractors, driven by a ``ParseStrategy``.  If the tagged
parse raises, the whole document is re-read with the legacy strategy,
which only recovers the snapshot and key-metrics sections.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

from pydantic import BaseModel

from equity_research.models import (
    AnalysisReport,
    FundamentalDrivers,
    InvestmentSummary,
    MacroSector,
    ReportTable,
    Snapshot,
    ThesisAssessment,
)

log = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════
#  Section metadata
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ReportSection:
    """One of the eight report blocks, in display order."""

    key: str        # AnalysisReport field name
    tag: str        # machine tag emitted by the current prompt
    heading: str    # human heading emitted by older prompts
    title: str      # card title on the dashboard


REPORT_SECTIONS: tuple[ReportSection, ...] = (
    ReportSection("snapshot", "SECTION_1_SNAPSHOT", "1 | Snapshot", "Snapshot"),
    ReportSection("key_metrics", "SECTION_2_KEY_METRICS", "2 | Key Metrics", "Key Metrics"),
    ReportSection(
        "fundamental_drivers", "SECTION_3_FUNDAMENTAL_DRIVERS",
        "3 | Fundamental Drivers", "Fundamental Drivers",
    ),
    ReportSection(
        "thesis_assessment", "SECTION_4_THESIS_ASSESSMENT",
        "4 | Thesis Assessment", "Thesis Assessment",
    ),
    ReportSection("macro_sector", "SECTION_5_MACRO_SECTOR", "5 | Macro & Sector", "Macro & Sector"),
    ReportSection("catalyst_map", "SECTION_6_CATALYST_MAP", "6 | Catalyst Map", "Catalyst Map"),
    ReportSection(
        "scenario_analysis", "SECTION_7_SCENARIO_ANALYSIS",
        "7 | Scenario Analysis", "Scenario Analysis",
    ),
    ReportSection(
        "investment_summary", "SECTION_8_INVESTMENT_SUMMARY",
        "8 | Investment Summary", "Investment Summary",
    ),
)

SECTIONS_BY_KEY: dict[str, ReportSection] = {s.key: s for s in REPORT_SECTIONS}

RATINGS = ("Buy", "Hold", "Sell")
CONFIDENCE_LEVELS = ("High", "Medium", "Low")

BULLET_MARKERS = ("-", "•", "*")

# headers of the neighbouring fields; any other colon line may sit inside a list
LIST_STOP_LABELS = ("supporting points:", "risks:", "net verdict:", "key points:", "final call:")
_RULE_LINE_RE = re.compile(r"---|===")


# ═══════════════════════════════════════════════════════════════════════════
#  Strategies
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ParseStrategy:
    """How sections, labels and tables are recognised in one document layout."""

    name: str
    # regex locating the start of a section (the match is excluded from the body)
    marker: Callable[[ReportSection], str]
    # regex for the start of *any* section; ends the current body
    boundary: str
    # key-value regex with a ``{label}`` slot; group 1 is the value
    label_pattern: str
    # rating/confidence regex with ``{label}`` and ``{choices}`` slots; when
    # unset the labelled value is read and then normalised
    choice_pattern: str | None
    # field -> label for the snapshot block
    snapshot_labels: dict[str, str]
    cell_delimiter: str
    min_cells: int
    skip_rule_lines: bool
    sections: frozenset[str]


TAGGED = ParseStrategy(
    name="tagged",
    marker=lambda section: re.escape(section.tag),
    boundary=r"SECTION_\d+_",
    label_pattern=r"^[ \t]*{label}:[ \t]*(.*)$",
    choice_pattern=None,
    snapshot_labels={
        "market_cap": "Market Cap",
        "share_price": "Share Price",
        "target_price": "Target Price",
        "implied_upside": "Upside Estimate",
        "rating": "Rating",
        "confidence": "Confidence",
    },
    cell_delimiter=r"\|",
    min_cells=1,
    skip_rule_lines=False,
    sections=frozenset(s.key for s in REPORT_SECTIONS),
)

LEGACY = ParseStrategy(
    name="legacy",
    # the metrics heading carries a caption after the title; other heading
    # lines run straight into their content
    marker=lambda section: (
        re.escape(section.heading) + (r"[^\n]*" if section.key == "key_metrics" else "")
    ),
    boundary=(
        r"\d+ \| (?:Snapshot|Key Metrics|Fundamental|Thesis|Macro|Catalyst"
        r"|Scenario|Investment)"
    ),
    label_pattern=r"\b{label}[:\s]*([^\n]+)",
    choice_pattern=r"\b{label}[:\s]*({choices})\b",
    snapshot_labels={
        "market_cap": "mkt cap",
        "share_price": "share price",
        "target_price": "target price",
        "implied_upside": "upside estimate",
        "rating": "rating",
        "confidence": "confidence",
    },
    cell_delimiter=r"[|\t]",
    min_cells=2,
    skip_rule_lines=True,
    sections=frozenset({"snapshot", "key_metrics"}),
)


# ═══════════════════════════════════════════════════════════════════════════
#  Extractors
# ═══════════════════════════════════════════════════════════════════════════


def split_section(
    document: str,
    section: ReportSection,
    strategy: ParseStrategy = TAGGED,
) -> str | None:
    """Return the trimmed text between *section*'s marker and the next section.

    The body runs to the end of the document when no other section follows.
    Returns *None* if the marker does not occur.
    """
    pattern = re.compile(
        rf"{strategy.marker(section)}(.*?)(?={strategy.boundary}|\Z)",
        re.IGNORECASE | re.DOTALL,
    )
    m = pattern.search(document)
    if not m:
        return None
    return m.group(1).strip()


def extract_value(text: str, label: str, strategy: ParseStrategy = TAGGED) -> str | None:
    """Return the value after ``label:`` (first match only), or *None*.

    Label matching ignores case; the value keeps its own.
    """
    pattern = strategy.label_pattern.format(label=re.escape(label))
    m = re.search(pattern, text, re.IGNORECASE | re.MULTILINE)
    if not m:
        return None
    value = m.group(1).strip()
    return value or None


def extract_bullets(text: str, header: str) -> list[str]:
    """Collect the bullet lines that follow *header*.

    Blank lines are skipped.  Once at least one bullet was read, a line with
    no colon or the header of a neighbouring field (``Risks:``,
    ``Net Verdict:`` ...) ends the list.
    """
    start = text.lower().find(header.lower())
    if start == -1:
        return []

    bullets: list[str] = []
    for line in text[start + len(header):].splitlines():
        stripped = line.strip()
        if stripped.startswith(BULLET_MARKERS):
            bullets.append(stripped[1:].strip())
        elif stripped and bullets and (
            ":" not in stripped or stripped.lower().startswith(LIST_STOP_LABELS)
        ):
            break
    return bullets


def extract_table(
    text: str,
    strategy: ParseStrategy = TAGGED,
) -> tuple[list[str], list[list[str]]]:
    """Split delimited lines into ``(headers, rows)``.

    The first delimited line is the header.  Cells are trimmed and empty
    cells dropped; rows are kept as-is even when their width differs from
    the header's.
    """
    delimiter = re.compile(strategy.cell_delimiter)
    headers: list[str] = []
    rows: list[list[str]] = []

    for line in text.splitlines():
        if not delimiter.search(line):
            continue
        if strategy.skip_rule_lines and _RULE_LINE_RE.search(line):
            continue
        cells = [c.strip() for c in delimiter.split(line) if c.strip()]
        if len(cells) < strategy.min_cells:
            continue
        if not headers:
            headers = cells
        else:
            rows.append(cells)

    return headers, rows


def _coerce_choice(value: str | None, choices: tuple[str, ...]) -> str | None:
    """Map "buy", "BUY (12m)" etc. onto the canonical choice, else *None*."""
    if not value:
        return None
    m = re.match(r"\W*(\w+)", value)
    if m:
        word = m.group(1).capitalize()
        if word in choices:
            return word
    log.debug("Ignoring unrecognised value %r (expected one of %s)", value, choices)
    return None


def extract_choice(
    text: str,
    label: str,
    choices: tuple[str, ...],
    strategy: ParseStrategy = TAGGED,
) -> str | None:
    """Return the canonical choice given for *label*, or *None*."""
    if strategy.choice_pattern is None:
        return _coerce_choice(extract_value(text, label, strategy), choices)
    pattern = strategy.choice_pattern.format(
        label=re.escape(label), choices="|".join(choices),
    )
    m = re.search(pattern, text, re.IGNORECASE)
    return m.group(1).capitalize() if m else None


# ═══════════════════════════════════════════════════════════════════════════
#  Section builders
# ═══════════════════════════════════════════════════════════════════════════


def _build_snapshot(text: str, strategy: ParseStrategy) -> Snapshot:
    labels = strategy.snapshot_labels
    values = {
        field: extract_value(text, label, strategy)
        for field, label in labels.items()
        if field not in ("rating", "confidence")
    }
    values["rating"] = extract_choice(text, labels["rating"], RATINGS, strategy)
    values["confidence"] = extract_choice(
        text, labels["confidence"], CONFIDENCE_LEVELS, strategy,
    )
    return Snapshot(**values)


def _build_table(text: str, strategy: ParseStrategy) -> ReportTable | None:
    headers, rows = extract_table(text, strategy)
    if not headers:
        return None
    return ReportTable(headers=headers, rows=rows)


def _build_drivers(text: str, strategy: ParseStrategy) -> FundamentalDrivers:
    return FundamentalDrivers(
        growth_engines=extract_value(text, "Growth Engines", strategy),
        cost_structure=extract_value(text, "Cost Structure", strategy),
        capital_allocation=extract_value(text, "Capital Allocation", strategy),
    )


def _build_thesis(text: str, strategy: ParseStrategy) -> ThesisAssessment:
    return ThesisAssessment(
        supporting_points=extract_bullets(text, "Supporting Points:") or None,
        risks=extract_bullets(text, "Risks:") or None,
        net_verdict=extract_value(text, "Net Verdict", strategy),
    )


def _build_macro(text: str, strategy: ParseStrategy) -> MacroSector:
    return MacroSector(
        sector_cycle=extract_value(text, "Sector Cycle", strategy),
        macro_sensitivities=extract_value(text, "Macro Sensitivities", strategy),
        competitive_moat=extract_value(text, "Competitive Moat", strategy),
    )


def _build_summary(text: str, strategy: ParseStrategy) -> InvestmentSummary:
    return InvestmentSummary(
        bullets=extract_bullets(text, "Key Points:") or None,
        final_call=extract_value(text, "Final Call", strategy),
    )


_BUILDERS: dict[str, Callable[[str, ParseStrategy], BaseModel | None]] = {
    "snapshot": _build_snapshot,
    "key_metrics": _build_table,
    "fundamental_drivers": _build_drivers,
    "thesis_assessment": _build_thesis,
    "macro_sector": _build_macro,
    "catalyst_map": _build_table,
    "scenario_analysis": _build_table,
    "investment_summary": _build_summary,
}


# ═══════════════════════════════════════════════════════════════════════════
#  Public API
# ═══════════════════════════════════════════════════════════════════════════


def parse_with_strategy(text: str, strategy: ParseStrategy) -> AnalysisReport:
    """Build a report from *text* using one strategy.  Errors propagate."""
    found: dict[str, BaseModel] = {}
    for section in REPORT_SECTIONS:
        if section.key not in strategy.sections:
            continue
        body = split_section(text, section, strategy)
        if body is None:
            continue
        part = _BUILDERS[section.key](body, strategy)
        if part is not None:
            found[section.key] = part
    return AnalysisReport(**found)


def parse_legacy_analysis(text: str) -> AnalysisReport:
    """Best-effort parse of heading-style output (snapshot + key metrics only)."""
    return parse_with_strategy(text, LEGACY)


def parse_analysis(text: str) -> AnalysisReport:
    """Parse raw model output into an ``AnalysisReport``.

    Never raises: a failure in the tagged parse falls back to the legacy
    parser on the original text, and a failure there yields an empty report.
    """
    try:
        return parse_with_strategy(text, TAGGED)
    except Exception as exc:
        log.warning("Structured analysis parse failed, falling back to legacy parser: %s", exc)

    try:
        return parse_legacy_analysis(text)
    except Exception:
        log.exception("Legacy analysis parse failed")
        return AnalysisReport()


def present_sections(report: AnalysisReport) -> list[ReportSection]:
    """Sections present in *report*, in dashboard display order."""
    return [s for s in REPORT_SECTIONS if getattr(report, s.key) is not None]
