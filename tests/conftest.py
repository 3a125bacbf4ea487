from __future__ import annotations

import json
from typing import Any

import pytest


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None):
        self.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Stands in for requests.Session: routes (METHOD, url) to canned responses or exceptions."""

    def __init__(self, routes: dict | None = None, default: FakeResponse | None = None):
        self.routes = dict(routes or {})
        self.default = default or FakeResponse(404, {"message": "not found"})
        self.calls: list[dict] = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self.closed = True

    def _reply(self, method: str, url: str):
        resp = self.routes.get((method, url), self.default)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def request(self, method, url, headers=None, data=None, timeout=None):
        self.calls.append({"method": method, "url": url, "headers": dict(headers or {}), "data": data, "timeout": timeout})
        return self._reply(method, url)

    def post(self, url, **kwargs):
        self.calls.append({"method": "POST", "url": url, **kwargs})
        return self._reply("POST", url)


BASE = "http://api.test"


@pytest.fixture
def base_url() -> str:
    return BASE


@pytest.fixture
def fake_session():
    def _make(routes=None, default=None):
        return FakeSession(routes, default)
    return _make


@pytest.fixture
def response():
    return FakeResponse


@pytest.fixture(autouse=True)
def _isolated_env(request, monkeypatch):
    if request.node.get_closest_marker("live"):
        return
    for name in ("API_BASE_URL", "HARNESS_CONFIG", "HARNESS_CASES_DIR", "HARNESS_REPORTS_DIR", "HARNESS_LOG_FILE",
                 "HARNESS_VARIABLES_FILE", "HARNESS_TIMEOUT", "HARNESS_LOGIN_PATH", "HARNESS_LOG_LEVEL",
                 "TEST_EMAIL", "TEST_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


def make_record(name: str, result: str = "PASS", duration: int = 10, **extra) -> dict:
    rec = {
        "testCase": {"name": name, "method": "GET", "path": "/x"},
        "request": {"method": "GET", "url": BASE + "/x", "headers": {}, "body": None},
        "expectedStatus": 200,
        "expectedResponse": None,
        "actualStatus": 200 if result == "PASS" else 500,
        "actualResponse": {"ok": result == "PASS"},
        "result": result,
        "duration": duration,
        "error": "" if result == "PASS" else "Expected status 200, received 500",
        "timestamp": "2025-11-11T08:00:00+00:00",
    }
    rec.update(extra)
    return rec


@pytest.fixture
def record():
    return make_record
