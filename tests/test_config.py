"""
Configuration and Hashing Tests
"""

import pytest

from atg_intake.config import Branding, get_settings, load_settings, reset_settings
from atg_intake.shared import canonicalize, canonicalize_and_hash


class TestSettings:

    def test_defaults(self):
        settings = load_settings()
        assert settings.env == "development"
        assert settings.cors_origins == ["*"]
        assert settings.catalog_strict is True
        assert settings.prune_hidden_answers is False
        assert settings.contact_sync_enabled is False
        assert settings.branding == Branding()

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("ATG_LOG_LEVEL", "debug")
        monkeypatch.setenv("ATG_CORS_ORIGINS", "https://a.example.com, https://b.example.com,")
        monkeypatch.setenv("ATG_CATALOG_STRICT", "no")
        monkeypatch.setenv("ATG_PRUNE_HIDDEN_ANSWERS", "1")
        monkeypatch.setenv("CONTACT_SYNC_URL", "https://crm.example.com/hook/")
        monkeypatch.setenv("CONTACT_SYNC_TIMEOUT", "2.5")
        monkeypatch.setenv("ATG_FIRM_NAME", "Smith Tax")

        settings = load_settings()

        assert settings.log_level == "DEBUG"
        assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]
        assert settings.catalog_strict is False
        assert settings.prune_hidden_answers is True
        assert settings.contact_sync_url == "https://crm.example.com/hook"
        assert settings.contact_sync_enabled
        assert settings.contact_sync_timeout == 2.5
        assert settings.branding.firm_name == "Smith Tax"
        assert settings.branding.primary_color == Branding().primary_color

    def test_bad_timeout_falls_back(self, monkeypatch):
        monkeypatch.setenv("CONTACT_SYNC_TIMEOUT", "soon")
        assert load_settings().contact_sync_timeout == 10.0

    def test_cached_until_reset(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("ATG_ENV", "production")
        assert get_settings() is first
        reset_settings()
        assert get_settings().env == "production"


class TestHashing:

    def test_key_order_irrelevant(self):
        assert canonicalize({"b": 1, "a": 2}) == canonicalize({"a": 2, "b": 1})

    def test_volatile_fields_excluded(self):
        assert canonicalize_and_hash({"a": 1, "generated_at": "now"}) == canonicalize_and_hash({"a": 1})
        assert canonicalize_and_hash({"a": 1, "generated_at": "now"}, exclude_volatile=False) != (
            canonicalize_and_hash({"a": 1})
        )

    def test_hash_format(self):
        digest = canonicalize_and_hash({"answers": {"q": "yes"}, "matched": ["r1"]})
        assert digest.startswith("sha256:")
        assert len(digest) == len("sha256:") + 64


# Run tests
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
