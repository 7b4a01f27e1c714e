"""Tests for namewizard.config — Typed configuration from environment."""

import pytest

import namewizard.config as config_module
from namewizard.config import PROMPTS_DIR, Settings, get_settings


@pytest.fixture(autouse=True)
def _reset_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Resets the cached singleton and skips the .env file before each test."""
    monkeypatch.setattr(config_module, "_settings", None)
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)


@pytest.fixture()
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Removes all NameWizard-related env vars so defaults are tested cleanly."""
    env_vars = [
        "APP_ENV", "APP_PORT", "LOG_LEVEL", "CORS_ORIGINS",
        "AI_BACKEND", "VISION_MODEL", "TEXT_MODEL",
        "GOOGLE_API_KEY", "ANTHROPIC_API_KEY",
        "ANALYSIS_TIMEOUT_SECONDS", "ANALYSIS_MAX_FALLBACKS",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    """Settings defaults when no env vars are set."""

    @pytest.mark.usefixtures("_clean_env")
    def test_app_defaults(self) -> None:
        s = get_settings()
        assert s.app_env == "development"
        assert s.app_port == 8000
        assert s.log_level == "info"
        assert s.cors_origins == ["http://localhost:3000", "http://localhost:5173"]

    @pytest.mark.usefixtures("_clean_env")
    def test_ai_defaults(self) -> None:
        s = get_settings()
        assert s.ai_backend == "live"
        assert s.vision_model == "gemini-flash"
        assert s.text_model == "gemini-flash"
        assert s.google_api_key == ""
        assert s.anthropic_api_key == ""

    @pytest.mark.usefixtures("_clean_env")
    def test_analysis_defaults(self) -> None:
        s = get_settings()
        assert s.analysis_timeout_seconds == 30.0
        assert s.analysis_max_fallbacks == 1


class TestOverrides:
    """Env vars override defaults and are validated."""

    @pytest.mark.usefixtures("_clean_env")
    def test_model_resolution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VISION_MODEL", "CLAUDE_SONNET")
        monkeypatch.setenv("TEXT_MODEL", "GEMINI_FLASH_LITE")
        s = get_settings()
        assert s.vision_model == "claude-sonnet"
        assert s.text_model == "gemini-flash-lite"

    @pytest.mark.usefixtures("_clean_env")
    def test_invalid_model_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VISION_MODEL", "GPT_4")
        with pytest.raises(ValueError, match="VISION_MODEL"):
            get_settings()

    @pytest.mark.usefixtures("_clean_env")
    def test_invalid_backend_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AI_BACKEND", "openai")
        with pytest.raises(ValueError, match="AI_BACKEND"):
            get_settings()

    @pytest.mark.usefixtures("_clean_env")
    def test_mock_backend(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AI_BACKEND", "mock")
        assert get_settings().ai_backend == "mock"

    @pytest.mark.usefixtures("_clean_env")
    def test_analysis_numbers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("APP_PORT", "9100")
        monkeypatch.setenv("ANALYSIS_MAX_FALLBACKS", "3")
        s = get_settings()
        assert s.app_port == 9100
        assert s.analysis_timeout_seconds == 2.5
        assert s.analysis_max_fallbacks == 3

    @pytest.mark.usefixtures("_clean_env")
    @pytest.mark.parametrize(
        ("var", "value"),
        [
            ("ANALYSIS_TIMEOUT_SECONDS", "soon"),
            ("ANALYSIS_TIMEOUT_SECONDS", "0"),
            ("ANALYSIS_MAX_FALLBACKS", "-1"),
            ("ANALYSIS_MAX_FALLBACKS", "1.5"),
            ("APP_PORT", "eighty"),
            ("APP_PORT", "0"),
        ],
    )
    def test_invalid_numbers_rejected(
        self, monkeypatch: pytest.MonkeyPatch, var: str, value: str
    ) -> None:
        monkeypatch.setenv(var, value)
        with pytest.raises(ValueError, match=var):
            get_settings()

    @pytest.mark.usefixtures("_clean_env")
    def test_cors_origins_split(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ORIGINS", " https://a.example , ,https://b.example")
        assert get_settings().cors_origins == ["https://a.example", "https://b.example"]


class TestSingleton:
    """get_settings() caches its result."""

    @pytest.mark.usefixtures("_clean_env")
    def test_same_instance(self) -> None:
        assert get_settings() is get_settings()

    @pytest.mark.usefixtures("_clean_env")
    def test_settings_frozen(self) -> None:
        s = get_settings()
        assert isinstance(s, Settings)
        with pytest.raises(AttributeError):
            s.app_port = 1  # type: ignore[misc]

    def test_prompts_dir_exists(self) -> None:
        assert PROMPTS_DIR.is_dir()
