"""Tests for filter settings."""

from importlib.metadata import PackageNotFoundError
from unittest.mock import patch

import pytest

from settings import FilterSettings, get_settings


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove filter settings from the environment."""
    for name in ("SAVGOL_WINDOW_WIDTH", "SAVGOL_WINDOW_HEIGHT", "SAVGOL_ORDER"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings(clean_env) -> FilterSettings:
    """Provide a FilterSettings instance with default values."""
    return FilterSettings()  # type: ignore


class TestFilterSettings:
    """Tests for FilterSettings class."""

    def test_default_values(self, settings: FilterSettings) -> None:
        """Test that default settings are set correctly."""
        assert settings.window_width == 5
        assert settings.window_height == 5
        assert settings.order == 2

    @pytest.mark.parametrize(
        ("env_var", "env_value", "field_name", "expected_value"),
        [
            pytest.param("SAVGOL_WINDOW_WIDTH", "7", "window_width", 7, id="window_width"),
            pytest.param("SAVGOL_WINDOW_HEIGHT", "3", "window_height", 3, id="window_height"),
            pytest.param("SAVGOL_ORDER", "0", "order", 0, id="order"),
            pytest.param("savgol_order", "1", "order", 1, id="case_insensitive"),
        ],
    )
    def test_settings_from_env(
        self,
        clean_env,
        monkeypatch: pytest.MonkeyPatch,
        env_var: str,
        env_value: str,
        field_name: str,
        expected_value: int,
    ) -> None:
        """Test that settings can be configured via environment variables."""
        # Arrange
        monkeypatch.setenv(env_var, env_value)

        # Act
        settings = FilterSettings()  # type: ignore

        # Assert
        assert field_name in settings.model_fields_set
        assert getattr(settings, field_name) == expected_value

    @pytest.mark.parametrize(
        ("env_var", "value", "expected_match"),
        [
            pytest.param("SAVGOL_WINDOW_WIDTH", "0", "greater than 0", id="window_width_zero"),
            pytest.param(
                "SAVGOL_WINDOW_HEIGHT", "-2", "greater than 0", id="window_height_negative"
            ),
            pytest.param(
                "SAVGOL_ORDER", "-1", "greater than or equal to 0", id="order_negative"
            ),
            pytest.param("SAVGOL_ORDER", "two", "valid integer", id="order_not_a_number"),
        ],
    )
    def test_validation_rejects_invalid_values(
        self,
        clean_env,
        monkeypatch: pytest.MonkeyPatch,
        env_var: str,
        value: str,
        expected_match: str,
    ) -> None:
        """Test that FilterSettings validation rejects invalid values."""
        # Arrange
        monkeypatch.setenv(env_var, value)

        # Act & Assert
        with pytest.raises(ValueError, match=expected_match):
            FilterSettings()  # type: ignore

    def test_settings_are_frozen(self, settings: FilterSettings) -> None:
        """Test that settings are immutable after creation."""
        with pytest.raises(ValueError, match="frozen"):
            settings.order = 1  # type: ignore

    def test_unknown_env_fields_are_ignored(
        self, clean_env, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that unknown prefixed variables do not break loading."""
        monkeypatch.setenv("SAVGOL_UNKNOWN_FIELD", "value")

        settings = FilterSettings()  # type: ignore

        assert not hasattr(settings, "unknown_field")

    @patch("settings.version", side_effect=PackageNotFoundError("savgol-smoothing"))
    def test_app_version_returns_fallback_when_package_not_found(
        self, _, settings: FilterSettings
    ) -> None:
        """Test that app_version returns '0.0.0' when package version cannot be determined."""
        assert settings.app_version == "0.0.0"

    @patch("settings.version")
    def test_app_version_returns_package_version(
        self, mock_version, settings: FilterSettings
    ) -> None:
        """Test that app_version returns actual package version when available."""
        # Arrange
        mock_version.return_value = "1.2.3"

        # Act & Assert
        assert settings.app_version == "1.2.3"
        mock_version.assert_called_once_with("savgol-smoothing")

    def test_log_startup_config_logs_configuration(
        self, settings: FilterSettings, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that log_startup_config logs all configuration values."""
        # Act
        settings.log_startup_config()

        # Assert
        log_text = caplog.text

        assert "Savitzky-Golay filter - Configuration:" in log_text
        assert "Window: 5x5" in log_text
        assert "Order: 2" in log_text
        assert "Version: " in log_text


class TestGetSettings:
    """Tests for get_settings cached function."""

    def test_get_settings_is_cached(self, clean_env) -> None:
        """Test that get_settings returns the same instance on every call."""
        # Arrange
        get_settings.cache_clear()

        # Act
        first = get_settings()
        second = get_settings()

        # Assert
        assert isinstance(first, FilterSettings)
        assert first is second
        get_settings.cache_clear()
