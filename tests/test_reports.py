"""
Tests for report narrative helpers and PDF export.
"""
import os
import pytest
from aegis_suite.core.config import BrandingSettings
from aegis_suite.core.errors import ExportError
from aegis_suite.core.reports import (
    DEFAULT_REPORT_TITLE,
    DISCLAIMER,
    SECTION_KEYS,
    ReportOptions,
    invalid_colors,
    projected_value,
    report_sections,
    safe_branding,
    default_report_name,
    export_history_pdf,
    export_recommendation_pdf,
    rebalancing_guidance,
    risk_factors,
    strategy_description,
    target_range,
)
from aegis_suite.core.store import Recommendation
from aegis_suite.core.strategies import AllocationSlice, build_allocation


def make_rec(profile="Moderate", strategy_id="allweather", strategy="All Weather Portfolio",
             years=5, horizon="5 years (Medium Term)", **kw):
    return Recommendation(
        title=f"{profile} - 01/02/2026",
        risk_profile=profile,
        horizon=horizon,
        horizon_years=years,
        strategy=strategy,
        strategy_id=strategy_id,
        allocation=build_allocation(strategy_id or "custom", profile),
        created_at="2026-02-01T10:00:00",
        client_name="Jane Doe",
        **kw,
    )


def _is_pdf(path):
    with open(path, "rb") as f:
        return f.read(5) == b"%PDF-"


@pytest.mark.unit
class TestNarrative:
    """Tests for strategy description, rebalancing and risk factors."""

    def test_target_range_clamped(self):
        assert target_range(40) == (35, 45)
        assert target_range(3) == (0, 8)
        assert target_range(98) == (93, 100)

    def test_strategy_description_includes_profile(self):
        text = strategy_description(make_rec(profile="Conservative"))
        assert text.startswith("Risk-parity style mix")
        assert "conservative profile" in text

    def test_strategy_resolved_from_name(self):
        rec = make_rec(strategy_id=None, strategy="Permanent Portfolio")
        assert strategy_description(rec).startswith("Equal split")

    def test_rebalancing_strategy_specific(self):
        assert rebalancing_guidance(make_rec(strategy_id="traditional")).startswith("Review and rebalance quarterly")

    def test_rebalancing_falls_back_to_profile(self):
        assert "every six months" in rebalancing_guidance(make_rec())

    def test_rebalancing_short_horizon_note(self):
        text = rebalancing_guidance(make_rec(years=2, horizon="2 years (Short Term)"))
        assert "short horizon" in text

    def test_horizon_read_from_label_when_years_missing(self):
        rec = make_rec(years=None, horizon="2 years (Short Term)")
        assert "short horizon" in rebalancing_guidance(rec)

    def test_risk_factors_common_first(self):
        factors = risk_factors(make_rec())
        assert factors[0].startswith("Changes in macroeconomic conditions")

    def test_risk_factors_aggressive_crypto(self):
        rec = make_rec(profile="Aggressive", strategy_id="custom", strategy="Custom Allocation")
        rec.allocation = [AllocationSlice("Stocks", 70), AllocationSlice("Crypto", 30)]
        factors = risk_factors(rec)
        assert any("extremely volatile" in f for f in factors)
        assert any("growth stocks" in f for f in factors)

    def test_risk_factors_horizon_and_objective(self):
        long_retire = risk_factors(make_rec(years=20, horizon="20 years (Long Term)", objective="retirement"))
        assert any("decades" in f for f in long_retire)
        assert long_retire[-1].startswith("Longevity risk")

        short_edu = risk_factors(make_rec(years=2, horizon="2 years (Short Term)", objective="education"))
        assert any("recover from market declines" in f for f in short_edu)
        assert short_edu[-1].startswith("Education costs")

    def test_risk_factors_strategy_specific(self):
        factors = risk_factors(make_rec(strategy_id="momentum", strategy="Momentum and Rotation"))
        assert any("trend reversals" in f for f in factors)

    def test_unknown_profile_treated_as_moderate(self):
        rec = make_rec()
        rec.risk_profile = "Undefined"
        assert "moderate profile" in strategy_description(rec)


@pytest.mark.unit
class TestPdfExport:
    """Tests for the matplotlib PDF exports."""

    def test_default_name(self):
        assert default_report_name(make_rec()) == "Jane_Doe_2026-02-01.pdf"

    def test_recommendation_pdf(self, tmp_path):
        path = str(tmp_path / "reports" / "rec.pdf")
        branding = BrandingSettings(company_name="Acme Advisors", report_footer="Confidential")
        assert export_recommendation_pdf(make_rec(objective="retirement", investment_amount=150_000),
                                         path, branding) == path
        assert _is_pdf(path)
        assert os.path.getsize(path) > 0

    def test_history_pdf_paginates(self, tmp_path):
        recs = [make_rec(profile=p) for p in ["Conservative", "Moderate", "Aggressive"] * 20]
        path = str(tmp_path / "history.pdf")
        export_history_pdf(recs, path)
        assert _is_pdf(path)

    def test_history_pdf_empty(self, tmp_path):
        path = str(tmp_path / "empty.pdf")
        export_history_pdf([], path)
        assert _is_pdf(path)

    def test_disclaimer_text(self):
        assert "informational purposes" in DISCLAIMER

    def test_invalid_branding_color_falls_back(self, tmp_path):
        path = str(tmp_path / "rec.pdf")
        export_recommendation_pdf(make_rec(), path, BrandingSettings(primary_color="indigo-ish"))
        assert _is_pdf(path)
        export_history_pdf([make_rec()], str(tmp_path / "h.pdf"), BrandingSettings(primary_color=""))
        assert _is_pdf(str(tmp_path / "h.pdf"))

    def test_safe_branding_keeps_valid_colors(self):
        b = BrandingSettings(company_name="Acme", primary_color="navy", accent_color="#12")
        assert invalid_colors(b) == ["accent_color"]
        fixed = safe_branding(b)
        assert fixed.primary_color == "navy"
        assert fixed.accent_color == BrandingSettings().accent_color
        assert fixed.company_name == "Acme"
        assert b.accent_color == "#12"

    @pytest.mark.parametrize("fmt", ["detailed", "summary", "presentation"])
    def test_every_format_exports(self, tmp_path, fmt):
        path = str(tmp_path / f"{fmt}.pdf")
        rec = make_rec(investment_amount=10_000, report_fee=250.0, notes="Call in March")
        export_recommendation_pdf(rec, path, options=ReportOptions(report_format=fmt, client_name="J. Doe"))
        assert _is_pdf(path)

    def test_pdf_with_every_section_disabled(self, tmp_path):
        opts = ReportOptions(**{f"include_{k}": False for k in SECTION_KEYS})
        path = str(tmp_path / "bare.pdf")
        export_recommendation_pdf(make_rec(), path, options=opts)
        assert _is_pdf(path)


@pytest.mark.unit
class TestReportOptions:
    """Tests for report customization."""

    def test_defaults_include_everything(self):
        keys = [s.key for s in report_sections(make_rec())]
        assert keys == list(SECTION_KEYS)

    def test_disabled_sections_left_out(self):
        opts = ReportOptions(include_market_analysis=False, include_risk_analysis=False)
        keys = [s.key for s in report_sections(make_rec(), opts)]
        assert "market_analysis" not in keys
        assert "risk_analysis" not in keys
        assert keys == ["executive_summary", "asset_allocation", "performance_projections", "recommendations"]

    def test_summary_format_is_short(self):
        rec = make_rec(profile="Aggressive", years=2, horizon="2 years (Short Term)")
        sections = {s.key: s for s in report_sections(rec, ReportOptions(report_format="summary"))}
        assert "market_analysis" not in sections
        assert "performance_projections" not in sections
        assert len(sections["risk_analysis"].lines) == 3
        assert len(sections["executive_summary"].lines) == 1

    def test_description_replaces_generated_summary(self):
        opts = ReportOptions(description="Plan agreed at the January review.")
        summary = report_sections(make_rec(), opts)[0]
        assert summary.heading == "Executive Summary"
        assert summary.lines[0] == "Plan agreed at the January review."

    def test_generated_summary_mentions_strategy_and_client(self):
        text = report_sections(make_rec())[0].lines[0]
        assert "All Weather Portfolio" in text
        assert "Jane Doe" in text

    def test_notes_section_last(self):
        sections = report_sections(make_rec(), ReportOptions(notes="Client prefers ETFs"))
        assert sections[-1].key == "notes"
        assert sections[-1].lines == ["Client prefers ETFs"]

    def test_defaults_come_from_recommendation(self):
        opts = ReportOptions.for_recommendation(make_rec(notes="saved note"))
        assert opts.title == "Moderate - 01/02/2026"
        assert opts.client_name == "Jane Doe"
        assert opts.notes == "saved note"
        rec = make_rec()
        rec.title = "x"
        assert ReportOptions.for_recommendation(rec).title == DEFAULT_REPORT_TITLE

    def test_market_analysis_lists_principles(self):
        opts = ReportOptions()
        section = next(s for s in report_sections(make_rec(strategy_id="permanent"), opts)
                       if s.key == "market_analysis")
        assert section.bullets
        assert section.lines[0].startswith("Diversification")
        assert any("gold" in line for line in section.lines)

    def test_projections(self):
        assert projected_value(10_000, 6.5, 1) == 10_650.0
        rec = make_rec(investment_amount=10_000, years=10, horizon="10 years (Long Term)")
        section = next(s for s in report_sections(rec) if s.key == "performance_projections")
        assert section.lines[0].startswith("Assumed annual return: 6.5%")
        assert [line.split(":")[0] for line in section.lines[2:]] == [
            "After 1 year", "After 5 years", "After 10 years"]

    @pytest.mark.parametrize("kw", [
        {"title": "x"},
        {"client_name": "J"},
        {"report_format": "poster"},
    ])
    def test_invalid_options_rejected(self, tmp_path, kw):
        with pytest.raises(ExportError):
            report_sections(make_rec(), ReportOptions(**kw))
        with pytest.raises(ExportError):
            export_recommendation_pdf(make_rec(), str(tmp_path / "x.pdf"), options=ReportOptions(**kw))
