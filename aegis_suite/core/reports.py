"""
PDF reports built with matplotlib's PDF backend.

- export_recommendation_pdf: single recommendation. Client info first, then the
  sections picked in ReportOptions (executive summary, market analysis,
  allocation table + pie, projections, risk factors, rebalancing) and notes.
  The "summary" format drops analysis and projections; "presentation" gives
  each section its own page in a larger type.
- export_history_pdf: table of recommendations plus a risk-profile summary

The narrative helpers (strategy_description, rebalancing_guidance,
risk_factors, target_range) are plain functions so the UI preview can reuse
them.
"""

import os
import textwrap
from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Optional, Tuple

from matplotlib.colors import is_color_like
from matplotlib.figure import Figure
from matplotlib.backends.backend_pdf import PdfPages
import structlog

from .analytics import profile_distribution
from .config import BrandingSettings
from .errors import ExportError
from .investment import OBJECTIVES, RiskProfile, parse_horizon_years, parse_risk_profile
from .store import Recommendation
from .strategies import get_strategy, strategy_id_for_name

log = structlog.get_logger(__name__)

A4 = (8.27, 11.69)
WRAP = 100
HISTORY_ROWS_PER_PAGE = 28

# page layout, in figure fractions
TOP, BOTTOM = 0.94, 0.06
LINE_HEIGHT = 0.018
ALLOCATION_HEIGHT = 0.3
PRESENTATION_SCALE = 1.3

COLOR_FIELDS = ("primary_color", "secondary_color", "accent_color")

DISCLAIMER = (
    "This report is for informational purposes only and does not constitute an offer or "
    "solicitation to buy or sell securities. Past performance does not guarantee future "
    "results. Allocations should be reviewed periodically with your advisor."
)

PROFILE_DETAILS = {
    RiskProfile.CONSERVATIVE: "For a conservative profile the emphasis is on capital preservation "
                              "and a smoother ride, accepting lower expected returns.",
    RiskProfile.MODERATE: "For a moderate profile the allocation balances growth with stability "
                          "and tolerates temporary drawdowns.",
    RiskProfile.AGGRESSIVE: "For an aggressive profile the allocation leans into growth assets "
                            "and accepts larger short-term swings.",
}

PROFILE_REBALANCING = {
    RiskProfile.CONSERVATIVE: "Given the conservative profile, review and rebalance quarterly, or when "
                              "any class drifts more than 3-5% from target. Frequent rebalancing keeps "
                              "risk under control.",
    RiskProfile.MODERATE: "For a moderate profile, review and rebalance every six months, or when any "
                          "class drifts more than 5-7% from target.",
    RiskProfile.AGGRESSIVE: "With an aggressive profile, review quarterly but only rebalance when a class "
                            "drifts more than 7-10% from target, keeping transaction costs low.",
}

STRATEGY_RISKS = {
    "permanent": [
        "Long stretches of economic stability can leave the portfolio behind more concentrated strategies",
        "The fixed gold allocation can be a drag during strong economic growth",
    ],
    "allweather": [
        "Scenarios without historical precedent can hit every asset class at once",
        "Correlations tend to rise under market stress, reducing diversification benefits",
    ],
    "traditional": [
        "High-inflation periods can hurt stocks and bonds at the same time",
        "Concentration in two asset classes limits diversification in specific adverse scenarios",
    ],
    "momentum": [
        "Fast trend reversals can cause losses before rotation signals trigger",
        "Higher transaction costs from more frequent rebalancing",
    ],
    "minimumvariance": [
        "Potentially lower returns in strong bull markets due to less exposure to growth assets",
        "Historical correlations between assets may change under market stress",
    ],
}

# (assumed annual return %, volatility label) used for the projection section
PROFILE_ASSUMPTIONS = {
    RiskProfile.CONSERVATIVE: (4.0, "Low"),
    RiskProfile.MODERATE: (6.5, "Moderate"),
    RiskProfile.AGGRESSIVE: (8.5, "High"),
}

COMMON_PRINCIPLES = [
    "Diversification across asset classes with low correlation",
    "Regular rebalancing to keep the target allocation",
]

GENERIC_PRINCIPLES = [
    "Protection against both inflation and deflation",
    "Balanced exposure to economic growth and contraction",
]

STRATEGY_PRINCIPLES = {
    "permanent": [
        "Equal split between stocks, long-term bonds, gold and cash",
        "Protection across different economic scenarios",
        "Low rebalancing frequency (yearly)",
        "Focus on capital preservation",
    ],
    "allweather": [
        "Balance between growth and protection assets",
        "Protection against inflation and deflation",
        "Balanced exposure to different economic environments",
        "Diversification by risk factor, not only by asset class",
    ],
    "traditional": [
        "Stocks for growth and bonds for stability",
        "Simple to implement and follow",
        "Long track record with long-term investors",
    ],
    "markowitz": [
        "Maximise return for a given level of risk",
        "Uses correlations between assets",
        "Portfolios built on the efficient frontier",
    ],
    "riskparity": [
        "Each asset class contributes the same share of risk",
        "Lower concentration in volatile assets",
        "Potentially smaller drawdowns in crises",
    ],
    "blacklitterman": [
        "Combines the investor's views with the market equilibrium",
        "Bayesian approach to expected returns",
        "Reduces estimation error",
    ],
    "equalweight": [
        "Capital split evenly between asset classes",
        "Avoids excessive concentration",
        "Reduces market-timing risk",
    ],
    "momentum": [
        "Favours assets with strong recent performance",
        "Periodic rotation between asset classes",
        "Tactical, trend-following approach",
    ],
    "minimumvariance": [
        "Minimises total portfolio volatility",
        "Uses low-volatility assets and negative correlations",
        "Stability takes priority over maximum return",
    ],
    "custom": [
        "Adapted to the investor's specific needs",
        "Takes the individual risk profile into account",
        "Flexible as circumstances change",
    ],
}


def _profile(rec: Recommendation) -> RiskProfile:
    try:
        return parse_risk_profile(rec.risk_profile)
    except ValueError:
        return RiskProfile.MODERATE


def _strategy_id(rec: Recommendation) -> Optional[str]:
    return rec.strategy_id or strategy_id_for_name(rec.strategy)


def _years(rec: Recommendation) -> int:
    return rec.horizon_years or parse_horizon_years(rec.horizon)


def target_range(percent: float, band: float = 5) -> Tuple[float, float]:
    return max(0, percent - band), min(100, percent + band)


def strategy_description(rec: Recommendation) -> str:
    s = get_strategy(_strategy_id(rec) or "")
    base = s.description if s else "Allocation tailored to the client's risk profile and investment horizon."
    return f"{base} {PROFILE_DETAILS[_profile(rec)]}"


def rebalancing_guidance(rec: Recommendation) -> str:
    s = get_strategy(_strategy_id(rec) or "")
    text = s.rebalancing if s and s.rebalancing else PROFILE_REBALANCING[_profile(rec)]
    if _years(rec) <= 3:
        text += (" With a short horizon, rebalancing should also shift gradually towards more "
                 "stable assets as the target date approaches.")
    return text


def risk_factors(rec: Recommendation) -> List[str]:
    out = ["Changes in macroeconomic conditions can affect the relative performance of asset classes"]
    out += STRATEGY_RISKS.get(_strategy_id(rec) or "", [])

    names = [a.name for a in rec.allocation]
    profile = _profile(rec)
    if profile == RiskProfile.AGGRESSIVE:
        out.append("Higher short-term volatility, with the possibility of significant drawdowns")
        if any("Crypto" in n for n in names):
            out.append("Crypto assets are extremely volatile and can fall more than 50% in short periods")
            out.append("Government regulation can significantly affect crypto markets")
        if any("Stocks" in n for n in names):
            out.append("Larger exposure to growth stocks and emerging markets increases sensitivity to economic cycles")
    elif profile == RiskProfile.MODERATE:
        out.append("Moderate volatility, with possible temporary periods of negative returns")
        out.append("Interest-rate changes can affect stocks and fixed income at the same time")
        if any("Alternatives" in n for n in names):
            out.append("Alternative assets can be less liquid during market stress")
    else:
        out.append("Even a conservative portfolio can trail inflation in some periods")
        out.append("Concentration in fixed income increases sensitivity to interest-rate changes")
        out.append("Too little exposure to growth assets may compromise long-term goals")

    years = _years(rec)
    if years <= 3:
        out.append("A short horizon limits the ability to recover from market declines")
        out.append("Liquidity needs may force sales at unfavourable times")
    elif years >= 10:
        out.append("Significant changes in the global economy over decades")

    if rec.objective == "retirement":
        out.append("Longevity risk: savings may not cover the whole retirement period")
    elif rec.objective == "education":
        out.append("Education costs rising faster than inflation may require higher returns")
    return out


# ---------- report options ----------

DEFAULT_REPORT_TITLE = "Investment Allocation Recommendation"
MIN_OPTION_LENGTH = 2

SECTION_KEYS = (
    "executive_summary",
    "market_analysis",
    "asset_allocation",
    "performance_projections",
    "risk_analysis",
    "recommendations",
)
SECTION_LABELS = {
    "executive_summary": "Executive Summary",
    "market_analysis": "Market Analysis",
    "asset_allocation": "Asset Allocation",
    "performance_projections": "Performance Projections",
    "risk_analysis": "Risk Analysis",
    "recommendations": "Recommendations",
}
REPORT_FORMATS = ("detailed", "summary", "presentation")
# the summary format is a short read: no market analysis or projections, top risks only
SUMMARY_SKIPS = {"market_analysis", "performance_projections"}
SUMMARY_RISK_LIMIT = 3


@dataclass
class ReportOptions:
    """What goes into a single-recommendation PDF."""

    title: str = DEFAULT_REPORT_TITLE
    description: str = ""
    client_name: str = ""
    notes: str = ""
    include_executive_summary: bool = True
    include_market_analysis: bool = True
    include_asset_allocation: bool = True
    include_performance_projections: bool = True
    include_risk_analysis: bool = True
    include_recommendations: bool = True
    report_format: str = "detailed"

    @classmethod
    def for_recommendation(cls, rec: Recommendation) -> "ReportOptions":
        def usable(s):
            s = (s or "").strip()
            return s if len(s) >= MIN_OPTION_LENGTH else ""
        return cls(title=usable(rec.title) or DEFAULT_REPORT_TITLE,
                   client_name=usable(rec.client_name), notes=rec.notes or "")

    def enabled(self, key: str) -> bool:
        return bool(getattr(self, f"include_{key}"))

    def validate(self):
        errors = {}
        if len((self.title or "").strip()) < MIN_OPTION_LENGTH:
            errors["title"] = f"must have at least {MIN_OPTION_LENGTH} characters"
        if self.client_name and len(self.client_name.strip()) < MIN_OPTION_LENGTH:
            errors["client_name"] = f"must have at least {MIN_OPTION_LENGTH} characters"
        if self.report_format not in REPORT_FORMATS:
            errors["report_format"] = f"unknown format '{self.report_format}'"
        if errors:
            raise ExportError("Invalid report options: " + "; ".join(f"{k} {v}" for k, v in errors.items()))


@dataclass
class ReportSection:
    key: str
    heading: str
    lines: List[str] = field(default_factory=list)
    bullets: bool = False


def strategy_principles(rec: Recommendation) -> List[str]:
    extra = STRATEGY_PRINCIPLES.get(_strategy_id(rec) or "", GENERIC_PRINCIPLES)
    return COMMON_PRINCIPLES + extra


def projected_value(amount: float, annual_return: float, years: int) -> float:
    return round(amount * (1 + annual_return / 100) ** years, 2)


def performance_projection(rec: Recommendation) -> List[str]:
    annual, volatility = PROFILE_ASSUMPTIONS[_profile(rec)]
    out = [
        f"Assumed annual return: {annual:g}% (illustrative, not guaranteed)",
        f"Expected volatility: {volatility}",
    ]
    if rec.investment_amount:
        for years in sorted({1, 5, _years(rec)}):
            value = projected_value(rec.investment_amount, annual, years)
            out.append(f"After {years} year{'s' if years != 1 else ''}: {value:,.2f}")
    return out


def executive_summary(rec: Recommendation) -> str:
    return (f"This report recommends the {rec.strategy or 'custom'} strategy for "
            f"{rec.client_name or 'the client'}, with a {_profile(rec).label.lower()} risk profile "
            f"and an investment horizon of {rec.horizon or 'undefined length'}.")


def report_sections(rec: Recommendation, options: Optional[ReportOptions] = None) -> List[ReportSection]:
    """The body sections of a recommendation report, in print order."""
    options = options or ReportOptions.for_recommendation(rec)
    options.validate()
    summary = options.report_format == "summary"

    out = []
    for key in SECTION_KEYS:
        if not options.enabled(key) or (summary and key in SUMMARY_SKIPS):
            continue
        if key == "executive_summary":
            lines = [options.description.strip() or executive_summary(rec)]
            if not summary:
                lines.append(strategy_description(rec))
            out.append(ReportSection(key, "Executive Summary", lines))
        elif key == "market_analysis":
            out.append(ReportSection(key, "Market Analysis", strategy_principles(rec), bullets=True))
        elif key == "asset_allocation":
            lines = []
            for a in rec.allocation:
                lo, hi = target_range(a.percent)
                lines.append(f"{a.name}: {a.percent:g}% (target {lo:g}% - {hi:g}%)")
            out.append(ReportSection(key, "Asset Allocation", lines))
        elif key == "performance_projections":
            out.append(ReportSection(key, "Performance Projections", performance_projection(rec), bullets=True))
        elif key == "risk_analysis":
            factors = risk_factors(rec)
            if summary:
                factors = factors[:SUMMARY_RISK_LIMIT]
            out.append(ReportSection(key, "Risk Factors", factors, bullets=True))
        elif key == "recommendations":
            out.append(ReportSection(key, "Rebalancing Considerations", [rebalancing_guidance(rec)]))

    notes = (options.notes or "").strip()
    if notes:
        out.append(ReportSection("notes", "Additional Notes", [notes]))
    return out


# ---------- PDF ----------

def _wrap(text: str, width: int = WRAP) -> str:
    return textwrap.fill(text, width=width)


def invalid_colors(branding: BrandingSettings) -> List[str]:
    """Names of the branding colour fields matplotlib cannot draw with."""
    return [name for name in COLOR_FIELDS if not is_color_like(getattr(branding, name))]


def safe_branding(branding: Optional[BrandingSettings] = None) -> BrandingSettings:
    """Branding with unusable colours swapped for the defaults."""
    branding = branding or BrandingSettings()
    bad = invalid_colors(branding)
    if bad:
        log.warning("report.invalid_colors", fields=bad)
        defaults = BrandingSettings()
        branding = replace(branding, **{name: getattr(defaults, name) for name in bad})
    return branding


def _page(branding: BrandingSettings) -> Figure:
    fig = Figure(figsize=A4)
    if branding.report_header or branding.company_name:
        fig.text(0.5, 0.975, branding.report_header or branding.company_name,
                 ha="center", va="top", fontsize=9, color=branding.primary_color)
    if branding.report_footer:
        fig.text(0.5, 0.02, branding.report_footer, ha="center", va="bottom", fontsize=8, color="#666666")
    return fig


class _PdfWriter:
    """Flows headings, paragraphs and the allocation block down A4 pages."""

    def __init__(self, pdf: PdfPages, branding: BrandingSettings, scale: float = 1.0):
        self.pdf = pdf
        self.branding = branding
        self.scale = scale
        self.fig: Optional[Figure] = None
        self.y = TOP
        self.pages = 0

    def new_page(self):
        self.flush()
        self.fig = _page(self.branding)
        self.y = TOP

    def flush(self):
        if self.fig is not None:
            self.pdf.savefig(self.fig)
            self.pages += 1
            self.fig = None

    def ensure(self, height: float):
        if self.fig is None or self.y - height < BOTTOM:
            self.new_page()

    def text(self, s: str, size: float = 10, x: float = 0.08, **kw):
        size = size * self.scale
        height = LINE_HEIGHT * size / 10 * (s.count("\n") + 1)
        self.ensure(height)
        self.fig.text(x, self.y, s, fontsize=size, va="top", **kw)
        self.y -= height + 0.006

    def paragraph(self, s: str, size: float = 9):
        self.text(_wrap(s, int(WRAP / self.scale)), size=size)

    def heading(self, s: str):
        self.ensure(0.08)
        self.y -= 0.01
        self.text(s, size=12, weight="bold", color=self.branding.primary_color)

    def allocation(self, rec: Recommendation):
        if not rec.allocation:
            self.paragraph("No allocation recorded.")
            return
        self.ensure(ALLOCATION_HEIGHT)
        bottom = self.y - ALLOCATION_HEIGHT
        rows = []
        for a in rec.allocation:
            lo, hi = target_range(a.percent)
            rows.append([a.name, f"{a.percent:g}%", f"{lo:g}% - {hi:g}%"])
        ax = self.fig.add_axes([0.08, bottom, 0.48, ALLOCATION_HEIGHT])
        ax.axis("off")
        table = ax.table(cellText=rows, colLabels=["Asset Class", "Allocation", "Target Range"],
                         loc="upper left", cellLoc="left")
        table.auto_set_font_size(False)
        table.set_fontsize(9 * self.scale)
        for (r, _), cell in table.get_celld().items():
            if r == 0:
                cell.set_facecolor(self.branding.primary_color)
                cell.get_text().set_color("white")

        pie = self.fig.add_axes([0.6, bottom, 0.34, ALLOCATION_HEIGHT])
        pie.pie([a.percent for a in rec.allocation],
                labels=[a.name for a in rec.allocation],
                colors=[a.color for a in rec.allocation],
                autopct="%1.0f%%", textprops={"fontsize": 7 * self.scale})
        pie.set_aspect("equal")
        self.y = bottom - 0.02

    def disclaimer(self):
        if self.fig is None or self.y < 0.16:
            self.new_page()
        self.fig.text(0.08, 0.06, _wrap(DISCLAIMER, 110), fontsize=7, color="#666666", va="bottom")


def _client_lines(rec: Recommendation, client_name: str) -> List[str]:
    lines = [f"Name: {client_name or 'Client'}"]
    if rec.client_age:
        lines.append(f"Age: {rec.client_age} years")
    if rec.objective:
        lines.append(f"Objective: {OBJECTIVES.get(rec.objective, rec.objective)}")
    lines += [
        f"Risk Profile: {rec.risk_profile}",
        f"Investment Horizon: {rec.horizon}",
        f"Investment Amount: {rec.investment_amount:,.2f}",
    ]
    if rec.report_fee is not None:
        lines.append(f"Report Fee: {rec.report_fee:,.2f}")
    return lines


def export_recommendation_pdf(rec: Recommendation, path: str,
                              branding: Optional[BrandingSettings] = None,
                              options: Optional[ReportOptions] = None) -> str:
    options = options or ReportOptions.for_recommendation(rec)
    sections = report_sections(rec, options)
    branding = safe_branding(branding)
    presentation = options.report_format == "presentation"
    _ensure_parent(path)

    with PdfPages(path) as pdf:
        w = _PdfWriter(pdf, branding, scale=PRESENTATION_SCALE if presentation else 1.0)
        w.new_page()
        w.text(options.title.strip(), size=18, x=0.5, ha="center", weight="bold")
        w.text(f"Date: {rec.created_at[:10]}", x=0.5, ha="center")
        w.heading("Client Information")
        for line in _client_lines(rec, options.client_name.strip() or rec.client_name):
            w.text(line)

        for section in sections:
            if presentation:
                w.new_page()
            w.heading(section.heading)
            if section.key == "asset_allocation":
                w.allocation(rec)
            elif section.bullets:
                for line in section.lines:
                    w.paragraph(f"- {line}")
            else:
                for line in section.lines:
                    w.paragraph(line)

        w.disclaimer()
        w.flush()

    log.info("report.recommendation_pdf", id=rec.id, path=path, format=options.report_format,
             sections=[s.key for s in sections], pages=w.pages)
    return path


def export_history_pdf(recs: List[Recommendation], path: str,
                       branding: Optional[BrandingSettings] = None) -> str:
    branding = safe_branding(branding)
    _ensure_parent(path)

    rows = [
        [r.title or "Untitled", r.created_at[:10], r.risk_profile or "Undefined",
         r.horizon or "Undefined", r.strategy or "Undefined", r.status or "Draft"]
        for r in recs
    ] or [["No recommendations found", "", "", "", "", ""]]
    chunks = [rows[i:i + HISTORY_ROWS_PER_PAGE] for i in range(0, len(rows), HISTORY_ROWS_PER_PAGE)]

    with PdfPages(path) as pdf:
        for n, chunk in enumerate(chunks):
            fig = _page(branding)
            if n == 0:
                fig.text(0.5, 0.94, "Investment Recommendation History", ha="center", fontsize=18, weight="bold")
                fig.text(0.5, 0.915, f"Generated on: {date.today().isoformat()}", ha="center", fontsize=10)
            ax = fig.add_axes([0.05, 0.3, 0.9, 0.6])
            ax.axis("off")
            table = ax.table(cellText=chunk,
                             colLabels=["Title", "Date", "Risk Profile", "Horizon", "Strategy", "Status"],
                             loc="upper center", cellLoc="left")
            table.auto_set_font_size(False)
            table.set_fontsize(7)
            for (r, _), cell in table.get_celld().items():
                if r == 0:
                    cell.set_facecolor(branding.primary_color)
                    cell.get_text().set_color("white")

            if n == len(chunks) - 1 and recs:
                y = 0.25
                fig.text(0.08, y, "Statistical Summary", fontsize=12, weight="bold")
                y -= 0.025
                fig.text(0.08, y, f"Total recommendations: {len(recs)}", fontsize=10)
                for label, count, pct in profile_distribution(recs):
                    y -= 0.02
                    fig.text(0.08, y, f"{label} profile: {count} ({pct}%)", fontsize=10)
            pdf.savefig(fig)

    log.info("report.history_pdf", path=path, rows=len(recs))
    return path


def default_report_name(rec: Recommendation) -> str:
    stem = (rec.client_name or rec.title or "recommendation").strip().replace(" ", "_").replace("/", "-")
    return f"{stem}_{rec.created_at[:10]}.pdf"


def _ensure_parent(path: str):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
