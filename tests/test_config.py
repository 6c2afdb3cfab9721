"""
tests/test_config.py -- Settings validation and startup-fatal configuration.

Covers:
  - Missing or short SECRET_KEY raises (service refuses to start)
  - TOKEN_EXPIRES_IN accepts 7d / 12h / 30m / 45s / plain seconds
  - CORS_ORIGINS comma splitting
  - create_app() without a configured key fails before serving
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from api.main import create_app
from core.config import Settings, get_settings, parse_duration
from conftest import TEST_SECRET, make_settings


class TestSecretKey:
    def test_missing_secret_key_is_fatal(self, monkeypatch) -> None:
        monkeypatch.delenv("SECRET_KEY", raising=False)
        with pytest.raises(ValidationError, match="SECRET_KEY is required"):
            Settings(_env_file=None)

    def test_short_secret_key_rejected(self) -> None:
        with pytest.raises(ValidationError, match="at least 32 characters"):
            Settings(_env_file=None, secret_key="too-short")

    def test_secret_key_read_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("SECRET_KEY", TEST_SECRET)
        assert Settings(_env_file=None).secret_key == TEST_SECRET

    def test_create_app_refuses_to_start_without_key(self, monkeypatch, tmp_path) -> None:
        """create_app() with no explicit settings reads the environment and must fail."""
        monkeypatch.delenv("SECRET_KEY", raising=False)
        monkeypatch.chdir(tmp_path)  # no stray .env file
        get_settings.cache_clear()
        try:
            with pytest.raises(ValidationError):
                create_app()
        finally:
            get_settings.cache_clear()


class TestDurations:
    @pytest.mark.parametrize(
        ("raw", "seconds"),
        [("7d", 604800), ("12h", 43200), ("30m", 1800), ("45s", 45), ("3600", 3600), (90, 90)],
    )
    def test_parse_duration(self, raw, seconds) -> None:
        assert parse_duration(raw) == seconds

    @pytest.mark.parametrize("raw", ["", "7 days", "-1d", "1w", "abc"])
    def test_parse_duration_rejects_garbage(self, raw) -> None:
        with pytest.raises(ValueError):
            parse_duration(raw)

    def test_default_token_lifetime_is_seven_days(self) -> None:
        assert make_settings().token_expires_in == 7 * 86400

    def test_token_lifetime_from_string(self) -> None:
        assert make_settings(token_expires_in="12h").token_expires_in == 43200

    def test_zero_token_lifetime_rejected(self) -> None:
        with pytest.raises(ValidationError):
            make_settings(token_expires_in="0")


class TestMisc:
    def test_allowed_origins_split(self) -> None:
        s = make_settings(cors_origins="http://a.test, http://b.test ,,")
        assert s.allowed_origins == ["http://a.test", "http://b.test"]

    def test_dev_endpoints_off_by_default(self) -> None:
        assert make_settings().enable_dev_endpoints is False

    def test_log_level_normalized(self) -> None:
        assert make_settings(log_level="debug").log_level == "DEBUG"
