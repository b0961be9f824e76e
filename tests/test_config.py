"""Tests for settings and duration parsing."""

import pytest

from hikscan.config import DEFAULT_USER_AGENT, load_settings, parse_duration
from hikscan.exceptions import ConfigError


ENV_VARS = [
    "HTTP_TIMEOUT",
    "USER_AGENT",
    "DISCOVERY_WORKERS",
    "DISCOVERY_TIMEOUT",
    "SADP_TIMEOUT",
    "DEBUG",
    "AES_KEY_HEX",
    "XOR_KEY_HEX",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestParseDuration:
    """Test suite for parse_duration."""

    @pytest.mark.parametrize("value,expected", [
        (5, 5.0),
        (2.5, 2.5),
        ("3", 3.0),
        ("0.25", 0.25),
        ("5s", 5.0),
        ("500ms", 0.5),
        ("1m", 60.0),
        ("1m30s", 90.0),
        ("1h", 3600.0),
        ("1.5s", 1.5),
        ("250us", 0.00025),
    ])
    def test_valid(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "abc", "5x", "s5", "1m 30s", "-5s", "-1"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestSettings:
    """Test suite for Settings loading."""

    def test_defaults(self):
        settings = load_settings()

        assert settings.http_timeout == 10.0
        assert settings.user_agent == DEFAULT_USER_AGENT
        assert settings.discovery_workers == 100
        assert settings.discovery_timeout == 1.0
        assert settings.sadp_timeout == 5.0
        assert settings.debug is False
        assert settings.aes_key_hex == "279977f62f6cfd2d91cd75b889ce0c9a"
        assert settings.xor_key_hex == "738B5544"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DISCOVERY_WORKERS", "50")
        monkeypatch.setenv("DISCOVERY_TIMEOUT", "500ms")
        monkeypatch.setenv("SADP_TIMEOUT", "1m30s")
        monkeypatch.setenv("DEBUG", "true")

        settings = load_settings()

        assert settings.discovery_workers == 50
        assert settings.discovery_timeout == 0.5
        assert settings.sadp_timeout == 90.0
        assert settings.debug is True

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("HTTP_TIMEOUT=2s\nUSER_AGENT=hikscan-test\n")

        settings = load_settings()

        assert settings.http_timeout == 2.0
        assert settings.user_agent == "hikscan-test"

    def test_invalid_duration(self, monkeypatch):
        monkeypatch.setenv("SADP_TIMEOUT", "soon")

        with pytest.raises(ConfigError, match="failed to load config"):
            load_settings()

    def test_invalid_workers(self, monkeypatch):
        monkeypatch.setenv("DISCOVERY_WORKERS", "0")

        with pytest.raises(ConfigError):
            load_settings()

    def test_overrides(self):
        assert load_settings(sadp_timeout="2s").sadp_timeout == 2.0
