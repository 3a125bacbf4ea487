from __future__ import annotations

from pathlib import Path

import pytest

from api_harness.config import load_config, require_base_url, require_credentials, resolve_settings
from api_harness.errors import ConfigError


def test_defaults_without_config():
    s = resolve_settings({}, env_file=None)
    assert s["base_url"] is None
    assert s["cases_dir"] == "testcases"
    assert s["timeout"] == 10.0
    assert Path(s["log_file"]) == Path("reports") / "test-execution-data.json"


def test_yaml_then_env_priority(tmp_path, monkeypatch):
    cfg_file = tmp_path / "harness.yaml"
    cfg_file.write_text("harness:\n  base_url: http://yaml/\n  reports_dir: out\n  timeout: 3\n", encoding="utf-8")
    cfg = load_config(str(cfg_file))

    s = resolve_settings(cfg, env_file=None)
    assert s["base_url"] == "http://yaml"
    assert s["timeout"] == 3.0
    assert Path(s["log_file"]) == Path("out") / "test-execution-data.json"

    monkeypatch.setenv("API_BASE_URL", "http://env")
    monkeypatch.setenv("HARNESS_TIMEOUT", "7.5")
    s = resolve_settings(cfg, env_file=None)
    assert s["base_url"] == "http://env"
    assert s["timeout"] == 7.5


def test_dotenv_does_not_override_exported(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text("API_BASE_URL=http://dotenv\nHARNESS_CASES_DIR=cases_from_dotenv\n", encoding="utf-8")
    monkeypatch.setenv("HARNESS_CASES_DIR", "exported")
    # load_dotenv writes into os.environ; setenv registers the key so teardown removes it
    monkeypatch.setenv("API_BASE_URL", "")
    monkeypatch.delenv("API_BASE_URL")

    s = resolve_settings({}, env_file=str(env))
    assert s["base_url"] == "http://dotenv"
    assert s["cases_dir"] == "exported"


def test_missing_explicit_config_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "nope.yaml"))


def test_require_helpers(monkeypatch):
    with pytest.raises(ConfigError, match="API_BASE_URL"):
        require_base_url({})
    assert require_base_url({"base_url": "http://h/"}) == "http://h"

    with pytest.raises(ConfigError):
        require_credentials()
    monkeypatch.setenv("TEST_EMAIL", "a@b.c")
    monkeypatch.setenv("TEST_PASSWORD", "pw")
    assert require_credentials() == {"email": "a@b.c", "password": "pw"}
