# api_harness/config.py
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .utils.io import load_yaml

DEFAULT_CONFIG_PATH = "configs/harness.yaml"

DEFAULTS = {
    "cases_dir": "testcases",
    "reports_dir": "reports",
    "variables_file": "variable.json",
    "timeout": 10.0,
    "login_path": "/api/v1/auth/login",
    "log_level": "INFO",
}

# setting -> environment variable that overrides it
ENV_KEYS = {
    "base_url": "API_BASE_URL",
    "cases_dir": "HARNESS_CASES_DIR",
    "reports_dir": "HARNESS_REPORTS_DIR",
    "log_file": "HARNESS_LOG_FILE",
    "variables_file": "HARNESS_VARIABLES_FILE",
    "timeout": "HARNESS_TIMEOUT",
    "login_path": "HARNESS_LOGIN_PATH",
    "log_level": "HARNESS_LOG_LEVEL",
}

LOG_FILE_NAME = "test-execution-data.json"


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Read configs/harness.yaml if present; a missing default file is not an error."""
    p = path or os.getenv("HARNESS_CONFIG") or DEFAULT_CONFIG_PATH
    if not Path(p).exists():
        if path:
            raise ConfigError(f"config file not found: {p}")
        return {}
    return load_yaml(p)


def resolve_settings(cfg: Optional[Dict[str, Any]] = None, env_file: Optional[str] = ".env") -> Dict[str, Any]:
    """
    Priority: environment variable > cfg['harness'] > DEFAULTS.
    `.env` is loaded first and never overrides variables already exported.
    """
    if env_file:
        load_dotenv(env_file, override=False)
    h = (cfg or {}).get("harness", {}) or {}

    out: Dict[str, Any] = {}
    for key, env in ENV_KEYS.items():
        out[key] = os.getenv(env) or h.get(key) or DEFAULTS.get(key)

    out["timeout"] = float(out["timeout"])
    if out["base_url"]:
        out["base_url"] = str(out["base_url"]).rstrip("/")
    if not out["log_file"]:
        out["log_file"] = str(Path(out["reports_dir"]) / LOG_FILE_NAME)
    return out


def require_base_url(settings: Dict[str, Any]) -> str:
    base = settings.get("base_url") or os.getenv("API_BASE_URL")
    if not base:
        raise ConfigError("API_BASE_URL is not set in environment for external tests.")
    return str(base).rstrip("/")


def require_credentials() -> Dict[str, str]:
    email, password = os.getenv("TEST_EMAIL"), os.getenv("TEST_PASSWORD")
    if not (email and password):
        raise ConfigError("Missing TEST_EMAIL or TEST_PASSWORD (set them in the environment or .env)")
    return {"email": email, "password": password}
