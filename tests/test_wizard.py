"""
Tests for the New Recommendation wizard state machine.
"""
import os
import tempfile
from datetime import datetime
import pytest
from aegis_suite.core import config, store
from aegis_suite.core.errors import WizardValidationError
from aegis_suite.core.investment import HorizonType, RiskProfile
from aegis_suite.core.wizard import (
    RecommendationWizard,
    WizardStep,
    validate_client_info,
)


@pytest.fixture
def temp_data_dir(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setattr(config, "DATA_DIR", tmpdir)
        yield tmpdir


@pytest.fixture
def wizard():
    w = RecommendationWizard()
    w.submit_client_info("Jane Doe", 40, "retirement", 150_000)
    return w


@pytest.mark.unit
class TestClientInfoValidation:
    """Tests for validate_client_info."""

    def test_valid(self):
        info = validate_client_info("  Jane Doe ", "40", "Retirement", "150000")
        assert info.name == "Jane Doe"
        assert info.age == 40
        assert info.objective == "retirement"
        assert info.amount == 150_000.0

    def test_collects_every_error(self):
        with pytest.raises(WizardValidationError) as exc:
            validate_client_info("Al", 17, "", "lots")
        assert set(exc.value.errors) == {"name", "age", "objective", "amount"}

    @pytest.mark.parametrize("age,amount,key", [
        (121, 5_000, "age"),
        ("forty", 5_000, "age"),
        (40, 999, "amount"),
        (40, 100_000_001, "amount"),
    ])
    def test_bounds(self, age, amount, key):
        with pytest.raises(WizardValidationError) as exc:
            validate_client_info("Jane Doe", age, "wealth", amount)
        assert list(exc.value.errors) == [key]

    def test_unknown_objective(self):
        with pytest.raises(WizardValidationError) as exc:
            validate_client_info("Jane Doe", 40, "yacht", 5_000)
        assert "objective" in exc.value.errors


@pytest.mark.unit
class TestNavigation:
    """Tests for step movement."""

    def test_starts_at_client_info(self):
        w = RecommendationWizard()
        assert w.step is WizardStep.CLIENT_INFO
        assert w.step_status(WizardStep.CLIENT_INFO) == "current"
        assert w.step_status(WizardStep.PREVIEW) == "upcoming"

    def test_cannot_skip_client_info(self):
        w = RecommendationWizard()
        with pytest.raises(WizardValidationError):
            w.next()

    def test_cannot_jump_ahead(self):
        with pytest.raises(ValueError):
            RecommendationWizard().go_to(WizardStep.PREVIEW)

    def test_previous_and_go_to_reached(self, wizard):
        assert wizard.step is WizardStep.RISK_PROFILE
        assert wizard.step_status(WizardStep.CLIENT_INFO) == "complete"
        assert wizard.previous() is WizardStep.CLIENT_INFO
        assert wizard.previous() is WizardStep.CLIENT_INFO
        assert wizard.go_to(WizardStep.RISK_PROFILE) is WizardStep.RISK_PROFILE

    def test_edit_returns_to_risk_profile(self, wizard):
        wizard.submit_risk_profile("moderate")
        wizard.next()
        assert wizard.edit() is WizardStep.RISK_PROFILE
        assert RecommendationWizard().edit() is WizardStep.CLIENT_INFO


@pytest.mark.unit
class TestSuggestions:
    """Tests for pre-filled suggestions."""

    def test_client_info_prefills(self, wizard):
        f = wizard.form
        assert f.horizon_years == 25
        assert f.horizon_type is HorizonType.LONG_TERM
        assert f.risk_profile is RiskProfile.MODERATE
        assert f.strategy == "allweather"
        assert wizard.warnings == []

    def test_below_minimum_warns(self):
        w = RecommendationWizard()
        warnings = w.submit_client_info("Jane Doe", 40, "retirement", 50_000)
        assert len(warnings) == 1
        assert "100,000.00" in warnings[0]
        assert w.step is WizardStep.RISK_PROFILE

    def test_horizon_clamped(self, wizard):
        wizard.update_horizon(45)
        assert wizard.form.horizon_years == 30
        wizard.update_horizon(0)
        assert wizard.form.horizon_years == 1
        assert wizard.form.horizon_type is HorizonType.SHORT_TERM
        assert wizard.horizon_text == "1 year (Short Term)"

    def test_horizon_type_override(self, wizard):
        wizard.update_horizon(12, HorizonType.MEDIUM_TERM)
        assert wizard.horizon_text == "12 years (Medium Term)"


@pytest.mark.unit
class TestStepSubmissions:
    """Tests for asset-class and strategy steps."""

    def test_asset_classes_deduped(self, wizard):
        wizard.go_to(WizardStep.RISK_PROFILE)
        wizard.submit_risk_profile("aggressive")
        wizard.next()
        assert wizard.submit_asset_classes(["tips", "tips", "us-large-cap"]) is WizardStep.STRATEGY
        assert wizard.form.asset_classes == ["tips", "us-large-cap"]

    @pytest.mark.parametrize("ids", [[], ["tips", "beanie-babies"]])
    def test_asset_classes_rejected(self, wizard, ids):
        with pytest.raises(WizardValidationError):
            wizard.submit_asset_classes(ids)

    def test_unknown_strategy_rejected(self, wizard):
        with pytest.raises(WizardValidationError):
            wizard.submit_strategy("astrology")


@pytest.mark.unit
class TestFinish:
    """Tests for building and saving the recommendation."""

    def _complete(self, w):
        w.submit_risk_profile("aggressive")
        w.next()
        w.submit_asset_classes(["us-large-cap", "tips"])
        w.submit_strategy("traditional")

    def test_preview(self, wizard):
        self._complete(wizard)
        p = wizard.preview()
        assert p["client"] == "Jane Doe"
        assert p["risk_profile"] == "Aggressive"
        assert p["strategy"] == "Traditional 60/40"
        assert [(s.name, s.percent) for s in p["allocation"]] == [("Stocks", 75), ("Bonds", 20), ("Cash", 5)]

    def test_finish_saves_draft(self, temp_data_dir, wizard):
        self._complete(wizard)
        rec = wizard.finish(now=datetime(2026, 3, 15, 10, 0))
        assert rec.id == 1
        assert rec.title == "Aggressive - 15/03/2026"
        assert rec.status == store.STATUS_DRAFT
        assert rec.horizon == "25 years (Long Term)"
        assert rec.strategy_id == "traditional"
        assert rec.client_name == "Jane Doe"
        assert rec.investment_amount == 150_000
        assert rec.asset_classes == ["us-large-cap", "tips"]

        loaded = store.load_recommendation(1)
        assert loaded.created_at == "2026-03-15T10:00:00"
        assert loaded.allocation == rec.allocation

    def test_finish_requires_preview(self, temp_data_dir, wizard):
        with pytest.raises(WizardValidationError):
            wizard.finish()
        assert os.listdir(temp_data_dir) == []

    def test_notes_and_fee_saved(self, temp_data_dir, wizard):
        self._complete(wizard)
        wizard.set_details("  Revisit after bonus  ", "1,500")
        rec = wizard.finish()
        loaded = store.load_recommendation(rec.id)
        assert loaded.notes == "Revisit after bonus"
        assert loaded.report_fee == 1500.0

    def test_blank_fee_is_none(self, wizard):
        wizard.set_details("", "")
        assert wizard.form.report_fee is None

    @pytest.mark.parametrize("fee", ["abc", -10])
    def test_bad_fee_rejected(self, wizard, fee):
        with pytest.raises(WizardValidationError) as exc:
            wizard.set_details("", fee)
        assert "report_fee" in exc.value.errors


@pytest.mark.unit
class TestAutoSave:
    """Tests for saving the draft when the preview is reached."""

    def _to_preview(self, w):
        w.submit_client_info("Jane Doe", 40, "retirement", 150_000)
        w.submit_risk_profile("moderate")
        w.next()
        w.submit_asset_classes(["us-large-cap"])
        w.submit_strategy("allweather")

    def test_draft_written_on_preview(self, temp_data_dir):
        w = RecommendationWizard(auto_save=True)
        self._to_preview(w)
        assert w.saved is not None
        assert store.count_recommendations() == 1
        assert store.load_recommendation(w.saved.id).strategy_id == "allweather"

    def test_finish_updates_auto_saved_record(self, temp_data_dir):
        w = RecommendationWizard(auto_save=True)
        self._to_preview(w)
        first = w.saved
        w.edit()
        w.submit_risk_profile("conservative")
        w.next()
        w.submit_asset_classes(["tips"])
        w.submit_strategy("permanent")
        w.set_details("final notes")
        rec = w.finish()
        assert rec.id == first.id
        assert rec.created_at == first.created_at
        assert store.count_recommendations() == 1
        assert store.load_recommendation(rec.id).notes == "final notes"
        assert store.load_recommendation(rec.id).risk_profile == "Conservative"
        assert rec.title.startswith("Conservative - ")

    def test_off_by_default(self, temp_data_dir):
        w = RecommendationWizard()
        self._to_preview(w)
        assert w.saved is None
        assert store.count_recommendations() == 0
