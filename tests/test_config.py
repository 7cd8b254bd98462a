"""
Tests for settings persistence and logging setup.
"""
import json
import logging
import os
import tempfile
import pytest
import structlog
from aegis_suite import __version__
from aegis_suite.core import config
from aegis_suite.core.config import AppSettings, BrandingSettings, Settings, load_settings, save_settings
from aegis_suite.core.errors import BackupError, WizardValidationError
from aegis_suite.logging_setup import configure_logging


@pytest.fixture
def temp_data_dir(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setattr(config, "DATA_DIR", os.path.join(tmpdir, "data"))
        yield config.DATA_DIR


@pytest.mark.unit
class TestSettings:
    """Tests for load_settings / save_settings."""

    def test_defaults_when_missing(self, temp_data_dir):
        s = load_settings()
        assert s == Settings()
        assert s.branding.primary_color == "#4f46e5"
        assert s.app.auto_save is True

    def test_round_trip(self, temp_data_dir):
        s = Settings(
            app=AppSettings(company_name="Acme", advisor_name="Pat", auto_save=False),
            branding=BrandingSettings(company_name="Acme Advisors", report_footer="Confidential"),
        )
        path = save_settings(s)
        assert path == os.path.join(temp_data_dir, "settings.json")
        assert load_settings() == s

    def test_corrupt_file_gives_defaults(self, temp_data_dir):
        os.makedirs(temp_data_dir, exist_ok=True)
        with open(os.path.join(temp_data_dir, "settings.json"), "w") as f:
            f.write("not json")
        assert load_settings() == Settings()

    def test_unknown_keys_ignored(self, temp_data_dir):
        os.makedirs(temp_data_dir, exist_ok=True)
        with open(os.path.join(temp_data_dir, "settings.json"), "w") as f:
            json.dump({"app": {"advisor_name": "Pat", "theme": "dark"}, "branding": {}}, f)
        s = load_settings()
        assert s.app.advisor_name == "Pat"
        assert s.branding == BrandingSettings()

    def test_data_path_creates_dir(self, temp_data_dir):
        p = config.data_path("x.json")
        assert os.path.isdir(temp_data_dir)
        assert p == os.path.join(temp_data_dir, "x.json")


@pytest.mark.unit
class TestErrorsAndLogging:
    """Tests for error types and logging configuration."""

    def test_wizard_error_message(self):
        e = WizardValidationError({"name": "too short", "age": "too young"})
        assert e.errors == {"name": "too short", "age": "too young"}
        assert str(e) == "name: too short; age: too young"

    def test_backup_error_keeps_path(self):
        assert BackupError("bad", "/tmp/x.json").path == "/tmp/x.json"

    def test_configure_logging_json(self, monkeypatch, caplog):
        monkeypatch.setenv("AEGIS_LOG_JSON", "1")
        caplog.set_level(logging.INFO)
        log = configure_logging()
        log.info("test.event", answer=42)
        event = json.loads(caplog.records[-1].getMessage())
        assert event["event"] == "test.event"
        assert event["answer"] == 42
        assert event["version"] == __version__
        structlog.reset_defaults()
