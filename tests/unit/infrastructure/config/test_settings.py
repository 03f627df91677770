import os
from pathlib import Path

import pytest

from yamnet.domain.models.common import RetryPolicy
from yamnet.domain.models.errors import ConfigurationError
from yamnet.infrastructure.config import settings
from yamnet.infrastructure.config.settings import (
    get_access_token, get_config, get_endpoint, get_proxy, get_retry_policy,
    get_timeout, load_configuration, set_config_for_testing,
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolates tests from the developer's environment and config files."""
    names = {"YAMMER_ACCESS_TOKEN", "YAMMER_ENDPOINT", "YAMMER_TIMEOUT", "YAMMER_PROXY",
             "RETRY_MAX_ATTEMPTS", "RETRY_BASE_DELAY", "RETRY_FIRST_UNAUTHORIZED_RETRY_DELAY"}
    # load_dotenv writes straight into os.environ; give each test its own copy.
    monkeypatch.setattr(os, "environ", {k: v for k, v in os.environ.items() if k not in names})
    monkeypatch.setattr(settings, "_config", {})
    monkeypatch.setattr(settings, "_loaded", False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write_yaml(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_yaml_sections_become_dotted_keys(clean_env: Path):
    config_file = write_yaml(clean_env / "config.yaml", (
        "yammer:\n"
        "  endpoint: https://yammer.example/api/v1\n"
        "  timeout: 15\n"
        "retry:\n"
        "  max_attempts: 3\n"
        "  base_delay: 0.5\n"
    ))
    load_configuration(config_file=config_file, env_file=clean_env / "missing.env")

    assert get_endpoint() == "https://yammer.example/api/v1"
    assert get_timeout() == 15.0
    assert get_retry_policy() == RetryPolicy(max_attempts=3, base_delay=0.5)


def test_environment_overrides_yaml(clean_env: Path, monkeypatch):
    config_file = write_yaml(clean_env / "config.yaml", "retry:\n  max_attempts: 3\n")
    load_configuration(config_file=config_file, env_file=clean_env / "missing.env")
    monkeypatch.setenv("RETRY_MAX_ATTEMPTS", "7")

    assert get_config("retry.max_attempts") == 7


def test_test_config_has_highest_priority(clean_env: Path, monkeypatch):
    monkeypatch.setenv("YAMMER_ENDPOINT", "https://env.example")
    set_config_for_testing({"yammer.endpoint": "https://test.example"})

    assert get_endpoint() == "https://test.example"


def test_dotenv_file_supplies_token(clean_env: Path):
    env_file = clean_env / ".env"
    env_file.write_text("YAMMER_ACCESS_TOKEN=from-dotenv\n", encoding="utf-8")
    load_configuration(config_file=clean_env / "absent.yaml", env_file=env_file)

    assert get_access_token() == "from-dotenv"


def test_missing_token_raises(clean_env: Path):
    with pytest.raises(ConfigurationError):
        get_access_token()


def test_invalid_retry_value_raises(clean_env: Path):
    set_config_for_testing({"retry.max_attempts": "many"})
    with pytest.raises(ConfigurationError):
        get_retry_policy()


def test_zero_attempts_rejected(clean_env: Path):
    set_config_for_testing({"retry.max_attempts": 0})
    with pytest.raises(ConfigurationError):
        get_retry_policy()


def test_defaults(clean_env: Path):
    assert get_endpoint() == "https://www.yammer.com/api/v1"
    assert get_timeout() == 60.0
    assert get_proxy() is None
    assert get_retry_policy() == RetryPolicy()


def test_malformed_yaml_is_logged_not_raised(clean_env: Path):
    config_file = write_yaml(clean_env / "config.yaml", "yammer: [unclosed\n")
    load_configuration(config_file=config_file, env_file=clean_env / "missing.env")

    assert get_config("yammer.endpoint") is None


def test_set_config_is_visible_to_getters(clean_env: Path):
    settings.set_config("yammer.proxy", "http://proxy.local:8080")

    assert get_proxy() == "http://proxy.local:8080"


@pytest.mark.parametrize("raw", ["0123", "true", "1.50"])
def test_access_token_from_environment_is_not_coerced(clean_env: Path, raw):
    os.environ["YAMMER_ACCESS_TOKEN"] = raw

    assert get_access_token() == raw
