"""
Runtime configuration.

All settings come from environment variables so the service can be deployed
without code changes:

- ATG_ENV: deployment environment name (default "development")
- ATG_LOG_LEVEL: logging level (default "INFO")
- ATG_CORS_ORIGINS: comma separated allowed origins (default "*")
- ATG_QUESTIONNAIRE_PATH: alternate questionnaire JSON document
- ATG_CATALOG_STRICT: fail startup on catalog validation errors (default true)
- ATG_PRUNE_HIDDEN_ANSWERS: drop answers to hidden questions before
  evaluating results (default false)
- CONTACT_SYNC_URL: CRM webhook receiving new contacts
- CONTACT_SYNC_API_KEY: bearer token for the CRM webhook
- CONTACT_SYNC_TIMEOUT: request timeout in seconds (default 10)
- ATG_FIRM_NAME / ATG_FIRM_TAGLINE / ATG_PRIMARY_COLOR: branding
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in TRUE_VALUES


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Branding:
    """Firm branding used by the PDF export and API metadata."""
    firm_name: str = "ATG – Advanced Tax Group"
    tagline: str = "Professional Tax Planning & Strategy"
    product_title: str = "Tax Planning Questionnaire"
    primary_color: str = "#1e40af"


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    questionnaire_path: Optional[str] = None
    catalog_strict: bool = True
    prune_hidden_answers: bool = False
    contact_sync_url: str = ""
    contact_sync_api_key: str = ""
    contact_sync_timeout: float = 10.0
    branding: Branding = field(default_factory=Branding)

    @property
    def contact_sync_enabled(self) -> bool:
        return bool(self.contact_sync_url)


def load_settings() -> Settings:
    """Read settings from the environment."""
    origins = os.getenv("ATG_CORS_ORIGINS", "*")
    defaults = Branding()
    branding = Branding(
        firm_name=os.getenv("ATG_FIRM_NAME", defaults.firm_name),
        tagline=os.getenv("ATG_FIRM_TAGLINE", defaults.tagline),
        primary_color=os.getenv("ATG_PRIMARY_COLOR", defaults.primary_color),
    )
    return Settings(
        env=os.getenv("ATG_ENV", "development"),
        log_level=os.getenv("ATG_LOG_LEVEL", "INFO").upper(),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        questionnaire_path=os.getenv("ATG_QUESTIONNAIRE_PATH") or None,
        catalog_strict=_env_bool("ATG_CATALOG_STRICT", True),
        prune_hidden_answers=_env_bool("ATG_PRUNE_HIDDEN_ANSWERS", False),
        contact_sync_url=os.getenv("CONTACT_SYNC_URL", "").rstrip("/"),
        contact_sync_api_key=os.getenv("CONTACT_SYNC_API_KEY", ""),
        contact_sync_timeout=_env_float("CONTACT_SYNC_TIMEOUT", 10.0),
        branding=branding,
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (tests change the environment)."""
    global _settings
    _settings = None
