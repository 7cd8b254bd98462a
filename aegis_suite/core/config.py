# aegis_suite/core/config.py
"""
App configuration.

DATA_DIR is resolved once from AEGIS_DATA_DIR (default ./data). Everything that
touches disk reads config.DATA_DIR at call time, so tests can monkeypatch it.

Settings live in DATA_DIR/settings.json:
  {"app": {...AppSettings}, "branding": {...BrandingSettings}}
"""

from __future__ import annotations
import os, json
from dataclasses import dataclass, asdict, field, fields
from typing import Optional

import structlog

log = structlog.get_logger(__name__)

DATA_DIR = os.environ.get("AEGIS_DATA_DIR", "data")
SETTINGS_FILE = "settings.json"

DEFAULT_PRIMARY = "#4f46e5"
DEFAULT_SECONDARY = "#10b981"
DEFAULT_ACCENT = "#f59e0b"


@dataclass
class AppSettings:
    company_name: str = ""
    advisor_name: str = ""
    auto_save: bool = True


@dataclass
class BrandingSettings:
    company_name: str = ""
    logo_path: str = ""
    primary_color: str = DEFAULT_PRIMARY
    secondary_color: str = DEFAULT_SECONDARY
    accent_color: str = DEFAULT_ACCENT
    report_header: str = ""
    report_footer: str = ""


@dataclass
class Settings:
    app: AppSettings = field(default_factory=AppSettings)
    branding: BrandingSettings = field(default_factory=BrandingSettings)


def data_path(*parts: str) -> str:
    """Path under DATA_DIR; creates DATA_DIR on first use."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return os.path.join(DATA_DIR, *parts)


def _known(cls, obj: dict) -> dict:
    # ignore keys written by newer versions
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (obj or {}).items() if k in names}


def load_settings(path: Optional[str] = None) -> Settings:
    p = path or data_path(SETTINGS_FILE)
    if not os.path.exists(p):
        return Settings()
    try:
        with open(p, "r", encoding="utf-8") as f:
            obj = json.load(f)
        return Settings(
            app=AppSettings(**_known(AppSettings, obj.get("app"))),
            branding=BrandingSettings(**_known(BrandingSettings, obj.get("branding"))),
        )
    except (json.JSONDecodeError, AttributeError, TypeError) as e:
        log.warning("settings.load_failed", path=p, error=str(e))
        return Settings()


def save_settings(s: Settings, path: Optional[str] = None) -> str:
    p = path or data_path(SETTINGS_FILE)
    with open(p, "w", encoding="utf-8") as f:
        json.dump(asdict(s), f, indent=2)
    log.info("settings.saved", path=p)
    return p
