"""Unit tests for application configuration.

Tests Settings validation and required fields.
"""

import pytest
from pydantic import ValidationError

from thinkarr.config import Settings

VALID_SECRET = "valid-secret-key-for-testing-1234567890"


class TestAppSecretKeyValidation:
    """Test APP_SECRET_KEY is required."""

    def test_missing_app_secret_key_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("APP_SECRET_KEY", raising=False)

        with pytest.raises(ValidationError) as exc_info:
            Settings(_env_file=None)

        assert "app_secret_key" in str(exc_info.value).lower()

    def test_secret_from_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        from thinkarr.config import _load_secret_file_env_vars

        secret_file = tmp_path / "secret"
        secret_file.write_text(f"{VALID_SECRET}\n", encoding="utf-8")
        monkeypatch.setenv("APP_SECRET_KEY", "placeholder")
        monkeypatch.setenv("APP_SECRET_KEY_FILE", str(secret_file))

        _load_secret_file_env_vars()

        assert Settings(_env_file=None).app_secret_key == VALID_SECRET


class TestSettingsDefaults:
    """Test Settings default values."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None, app_secret_key=VALID_SECRET, app_env="development")

        assert settings.is_development
        assert settings.database_url.startswith("sqlite+aiosqlite://")
        assert settings.title_max_tokens == 20
        assert settings.session_cookie_name == "thinkarr_session"

    def test_cors_origins_comma_separated(self) -> None:
        settings = Settings(
            _env_file=None,
            app_secret_key=VALID_SECRET,
            cors_origins="http://a.test, http://b.test,",
        )
        assert settings.cors_origins == ["http://a.test", "http://b.test"]

    def test_cors_origins_json_list(self) -> None:
        settings = Settings(
            _env_file=None,
            app_secret_key=VALID_SECRET,
            cors_origins='["http://a.test"]',
        )
        assert settings.cors_origins == ["http://a.test"]


class TestProductionValidation:
    """Production refuses insecure settings."""

    def _production(self, **overrides) -> Settings:
        values = {
            "_env_file": None,
            "app_env": "production",
            "app_secret_key": VALID_SECRET,
            "auth_provider": "session",
            "cors_origins": "https://thinkarr.example.com",
        }
        values.update(overrides)
        return Settings(**values)

    def test_secure_production_settings(self) -> None:
        assert self._production().is_production

    def test_dev_auth_rejected(self) -> None:
        with pytest.raises(ValidationError, match="AUTH_PROVIDER=dev"):
            self._production(auth_provider="dev")

    def test_short_secret_rejected(self) -> None:
        with pytest.raises(ValidationError, match="APP_SECRET_KEY"):
            self._production(app_secret_key="short")

    def test_wildcard_cors_rejected(self) -> None:
        with pytest.raises(ValidationError, match="CORS_ORIGINS"):
            self._production(cors_origins="*")

    def test_debug_rejected(self) -> None:
        with pytest.raises(ValidationError, match="APP_DEBUG"):
            self._production(app_debug=True)
