"""Unit tests for IntentBusSettings loading and conversion."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from intentbus import IntentBusSettings
from intentbus.enums import EnumIntentOrigin
from intentbus.settings import ModelRateLimits, ModelRetryConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "INTENT_BUS_RATE_LIMIT_AI_PER_WINDOW",
        "INTENT_BUS_RETRY_MAX_ATTEMPTS",
        "INTENT_BUS_RETRY_BACKOFF_MS",
        "INTENT_BUS_EXECUTOR_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "intent_bus.yaml"
    path.write_text(text, encoding="utf-8")
    return path


@pytest.mark.unit
class TestIntentBusSettings:
    def test_defaults(self) -> None:
        settings = IntentBusSettings()
        assert settings.rate_limit_ai_per_window == 30
        assert settings.rate_limit_user_per_window == 120
        assert settings.retry_max_attempts == 5
        assert settings.executor_timeout_seconds == 5.0
        assert not settings.record_intermediate_states

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INTENT_BUS_RATE_LIMIT_AI_PER_WINDOW", "7")
        monkeypatch.setenv("INTENT_BUS_RETRY_BACKOFF_MS", "[10, 20]")
        settings = IntentBusSettings()
        assert settings.rate_limit_ai_per_window == 7
        assert settings.retry_backoff_ms == [10, 20]

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            IntentBusSettings(retry_max_attempts=0)
        with pytest.raises(ValidationError):
            IntentBusSettings(retry_backoff_ms=[])
        with pytest.raises(ValidationError):
            IntentBusSettings(rate_limit_window_seconds=0)

    def test_to_rate_limits(self) -> None:
        limits = IntentBusSettings(
            rate_limit_ai_per_window=3, rate_limit_window_seconds=10
        ).to_rate_limits()
        assert isinstance(limits, ModelRateLimits)
        assert limits.budget_for(EnumIntentOrigin.AI) == 3
        assert limits.budget_for(EnumIntentOrigin.USER) == 120
        assert limits.window_seconds == 10

    def test_to_retry_config(self) -> None:
        config = IntentBusSettings(
            retry_max_attempts=2, retry_backoff_ms=[5, 50]
        ).to_retry_config()
        assert config == ModelRetryConfig(max_attempts=2, backoff_ms=(5, 50))


@pytest.mark.unit
class TestSettingsFromYaml:
    def test_top_level_keys(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path, "retry_max_attempts: 3\nexecutor_timeout_seconds: 1.5\n"
        )
        settings = IntentBusSettings.from_yaml(path)
        assert settings.retry_max_attempts == 3
        assert settings.executor_timeout_seconds == 1.5

    def test_defaults_section(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "defaults:\n  rate_limit_user_per_window: 10\nprofiles: {}\n",
        )
        settings = IntentBusSettings.from_yaml(str(path))
        assert settings.rate_limit_user_per_window == 10

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = IntentBusSettings.from_yaml(_write(tmp_path, ""))
        assert settings.retry_max_attempts == 5

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            IntentBusSettings.from_yaml(tmp_path / "missing.yaml")

    def test_non_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="mapping"):
            IntentBusSettings.from_yaml(_write(tmp_path, "- a\n- b\n"))

    def test_invalid_value(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            IntentBusSettings.from_yaml(_write(tmp_path, "retry_max_attempts: 99\n"))
