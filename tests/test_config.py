"""Settings loading from the environment."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from state_probe.config import Settings
from state_probe.exceptions import ConfigurationError


class TestDefaults:
    def test_defaults(self):
        settings = Settings()
        assert settings.stateful_threshold == 2
        assert settings.stateless_threshold == 1
        assert settings.case_sensitive is False
        assert settings.max_workers == 8
        assert settings.fetch_timeout == pytest.approx(10.0)
        assert settings.include_headers is True

    def test_empty_environment_gives_defaults(self):
        assert Settings.from_env({}) == Settings()

    def test_settings_are_frozen(self):
        with pytest.raises(ValidationError):
            Settings().stateful_threshold = 5  # type: ignore[misc]


class TestFromEnv:
    def test_reads_prefixed_variables(self):
        settings = Settings.from_env(
            {
                "STATE_PROBE_STATEFUL_THRESHOLD": "3",
                "STATE_PROBE_STATELESS_THRESHOLD": "2",
                "STATE_PROBE_CASE_SENSITIVE": "yes",
                "STATE_PROBE_MAX_WORKERS": "4",
                "STATE_PROBE_FETCH_TIMEOUT": "2.5",
                "STATE_PROBE_INCLUDE_HEADERS": "off",
            }
        )
        assert settings.stateful_threshold == 3
        assert settings.stateless_threshold == 2
        assert settings.case_sensitive is True
        assert settings.max_workers == 4
        assert settings.fetch_timeout == pytest.approx(2.5)
        assert settings.include_headers is False

    def test_blank_values_are_ignored(self):
        assert Settings.from_env({"STATE_PROBE_MAX_WORKERS": "  "}).max_workers == 8

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("STATE_PROBE_STATEFUL_THRESHOLD", "4")
        assert Settings.from_env().stateful_threshold == 4

    def test_unrelated_variables_are_ignored(self):
        assert Settings.from_env({"STATEFUL_THRESHOLD": "9"}) == Settings()


class TestInvalidValues:
    def test_zero_threshold_rejected(self):
        with pytest.raises(ConfigurationError) as exc:
            Settings.from_env({"STATE_PROBE_STATEFUL_THRESHOLD": "0"})
        assert exc.value.code == "CONFIG_INVALID"
        assert "stateful_threshold" in exc.value.details

    def test_non_numeric_rejected(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env({"STATE_PROBE_MAX_WORKERS": "many"})

    def test_unrecognized_boolean_rejected(self):
        with pytest.raises(ConfigurationError, match="not a boolean"):
            Settings.from_env({"STATE_PROBE_CASE_SENSITIVE": "maybe"})

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ConfigurationError):
            Settings.build(fetch_timeout=0)
