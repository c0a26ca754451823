import pytest

from brain_stream._config import (
    DEFAULT_BASE_URL,
    ENV_API_KEY,
    ENV_BASE_URL,
    ENV_HTTP_DEBUG,
    ClientSettings,
    http_debug_enabled,
)


@pytest.fixture
def clean_env(monkeypatch):
    for var in (ENV_BASE_URL, ENV_API_KEY, ENV_HTTP_DEBUG):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_explicit_values_win_over_env(clean_env):
    # Aunque el entorno tenga valores, los explícitos deben prevalecer.
    clean_env.setenv(ENV_BASE_URL, "https://env.example.com")
    clean_env.setenv(ENV_API_KEY, "env-key")

    cfg = ClientSettings.from_env_or_values("https://explicit.example.com/", "explicit-key")

    assert cfg.base_url == "https://explicit.example.com"
    assert cfg.api_key == "explicit-key"


def test_values_read_from_env(clean_env):
    clean_env.setenv(ENV_BASE_URL, "https://env.example.com")
    clean_env.setenv(ENV_API_KEY, "env-key")

    cfg = ClientSettings.from_env_or_values()

    assert cfg.base_url == "https://env.example.com"
    assert cfg.api_key == "env-key"


def test_defaults_without_env(clean_env):
    cfg = ClientSettings.from_env_or_values()

    assert cfg.base_url == DEFAULT_BASE_URL
    assert cfg.api_key is None


def test_empty_base_url_raises(clean_env):
    with pytest.raises(ValueError) as exc:
        ClientSettings.from_env_or_values("   ")

    assert "Base URL missing" in str(exc.value)


@pytest.mark.parametrize("value,expected", [("1", True), ("TRUE", True), ("on", True), ("0", False), ("", False)])
def test_http_debug_flag(clean_env, value, expected):
    clean_env.setenv(ENV_HTTP_DEBUG, value)

    assert http_debug_enabled() is expected
