# api_harness/runners/setup_tokens.py
"""
Refresh the tokens in variable.json before a run:
log in with TEST_EMAIL / TEST_PASSWORD, then rotate
  EXPIRED_TOKEN <- previous VALID_TOKEN
  VALID_TOKEN   <- freshly issued token
Cases reference them through `useToken` or ${VALID_TOKEN} placeholders.
"""
import argparse
import json
import logging
import sys
from contextlib import nullcontext

import requests

from .. import log_util
from ..config import load_config, require_base_url, require_credentials, resolve_settings
from ..errors import HarnessError, LoginError
from ..utils.io import read_json, write_json
from ..utils.placeholders import lookup_path

log = logging.getLogger(__name__)

# used as EXPIRED_TOKEN until a real token has been rotated out
FALLBACK_EXPIRED_TOKEN = (
    "eyJhbGciOiJIUzI1NiJ9.eyJhdXRob3JpdGllcyI6WyJVU0VSIl0sInN1YiI6InRvYW55b2dhbWVAZ21haWwuY29tIiwi"
    "aWF0IjoxNTE2MjM5MDIyLCJleHAiOjE1MTYyMzkwMjJ9.4Adcj0vdYo"
)
TOKEN_PATH = "data.token"


def load_tokens(path):
    return read_json(path, default=None) or {"EXPIRED_TOKEN": "", "VALID_TOKEN": ""}


def login(base_url, credentials, login_path="/api/v1/auth/login", session=None, timeout=10.0):
    with (nullcontext(session) if session is not None else requests.Session()) as http:
        res = http.post(f"{base_url}{login_path}", json=credentials, timeout=timeout)
    if not 200 <= res.status_code < 300:
        raise LoginError(f"Login failed: {res.status_code}")
    token = lookup_path(res.json(), TOKEN_PATH, default=None)
    if not token:
        raise LoginError("No token in response")
    return token


def setup_tokens(settings, session=None):
    base = require_base_url(settings)
    creds = require_credentials()
    path = settings["variables_file"]
    current = load_tokens(path)

    new_token = login(base, creds, settings["login_path"], session=session, timeout=settings["timeout"])
    updated = dict(current)
    updated["EXPIRED_TOKEN"] = current.get("VALID_TOKEN") or FALLBACK_EXPIRED_TOKEN
    updated["VALID_TOKEN"] = new_token
    write_json(path, updated)
    log.info("Tokens refreshed in %s", path)
    return updated


def main(argv=None):
    ap = argparse.ArgumentParser(description="Log in and rotate VALID_TOKEN / EXPIRED_TOKEN")
    ap.add_argument("--config", default=None)
    args = ap.parse_args(argv)
    settings = resolve_settings(load_config(args.config))
    log_util.init(settings["log_level"])
    try:
        tokens = setup_tokens(settings)
    except (HarnessError, requests.RequestException) as e:
        log.error("%s", e)
        return 1
    print(json.dumps({"variables_file": settings["variables_file"], "keys": sorted(tokens)}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
