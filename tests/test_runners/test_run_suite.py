from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import load_workbook

from api_harness.errors import ConfigError
from api_harness.runners import run_report
from api_harness.runners.run_suite import run_suite


def _settings(tmp_path: Path, base_url: str | None) -> dict:
    return {
        "base_url": base_url,
        "cases_dir": str(tmp_path / "cases"),
        "reports_dir": str(tmp_path / "reports"),
        "log_file": str(tmp_path / "reports" / "test-execution-data.json"),
        "variables_file": str(tmp_path / "variable.json"),
        "timeout": 2.0,
        "login_path": "/api/v1/auth/login",
        "log_level": "INFO",
    }


@pytest.fixture
def suite(tmp_path):
    cases = tmp_path / "cases"
    cases.mkdir()
    (cases / "profile.json").write_text(json.dumps([
        {"name": "TC-PROFILE-01: login", "method": "POST", "path": "/login", "body": {"email": "e"},
         "expectedStatus": 200, "saveToken": "data.token"},
        {"name": "TC-PROFILE-02: me", "path": "/me", "useToken": "accessToken", "expectedStatus": 200,
         "validateFields": ["data.email"]},
        {"name": "TC-PROFILE-03: expired", "path": "/me", "useToken": "EXPIRED_TOKEN", "expectedStatus": 401},
    ]), encoding="utf-8")
    (cases / "restaurant.json").write_text(json.dumps([
        {"name": "TC-RESTAURANT-01: list", "path": "/restaurants", "expectedStatus": 200},
        {"name": "TC-RESTAURANT-02: detail", "path": "/restaurants/1", "expectedStatus": 200},
    ]), encoding="utf-8")
    (tmp_path / "variable.json").write_text(json.dumps({"EXPIRED_TOKEN": "old", "VALID_TOKEN": "v"}),
                                            encoding="utf-8")
    return tmp_path


def test_run_suite_continues_after_failures(suite, fake_session, response, base_url):
    session = fake_session({
        ("POST", f"{base_url}/login"): response(200, {"data": {"token": "fresh"}}),
        ("GET", f"{base_url}/me"): response(200, {"data": {"email": "e"}}),
        ("GET", f"{base_url}/restaurants"): response(200, {"data": []}),
    })
    settings = _settings(suite, base_url)
    summary = run_suite(settings, session=session)

    assert summary["total"] == 5
    assert summary["passed"] == 3
    # expired-token case gets 200 instead of 401, detail falls through to the 404 default
    assert [f["name"] for f in summary["failures"]] == ["TC-PROFILE-03: expired", "TC-RESTAURANT-02: detail"]

    auth = [c["headers"].get("Authorization") for c in session.calls if c["url"].endswith("/me")]
    assert auth == ["Bearer fresh", "Bearer old"]

    saved = json.loads(Path(settings["log_file"]).read_text(encoding="utf-8"))
    assert [r["result"] for r in saved] == ["PASS", "PASS", "FAIL", "PASS", "FAIL"]

    latest = Path(settings["reports_dir"]) / "test-report-latest.xlsx"
    assert str(latest) in summary["reports"]
    assert load_workbook(latest).sheetnames == ["Summary", "Profile Tests", "Restaurant Tests"]


def test_run_suite_feature_filter_and_no_report(suite, fake_session, response, base_url):
    session = fake_session(default=response(200, {"data": []}))
    settings = _settings(suite, base_url)
    summary = run_suite(settings, features=["restaurant"], session=session, report=False)
    assert summary["total"] == 2
    assert summary["reports"] == []
    assert not (Path(settings["reports_dir"]) / "test-report-latest.xlsx").exists()


def test_run_suite_clears_previous_log(suite, fake_session, response, base_url):
    settings = _settings(suite, base_url)
    log_file = Path(settings["log_file"])
    log_file.parent.mkdir(parents=True)
    log_file.write_text(json.dumps([{"testCase": {"name": "stale"}, "result": "FAIL"}]), encoding="utf-8")

    run_suite(settings, features=["restaurant"], session=fake_session(default=response(200, {})), report=False)
    names = [r["testCase"]["name"] for r in json.loads(log_file.read_text(encoding="utf-8"))]
    assert "stale" not in names


def test_run_suite_requires_base_url(suite, fake_session):
    with pytest.raises(ConfigError):
        run_suite(_settings(suite, None), session=fake_session())


def test_run_report_main(tmp_path, monkeypatch, record):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(run_report.log_util, "init", lambda *a, **k: None)
    log_file = tmp_path / "data.json"
    out_dir = tmp_path / "out"

    assert run_report.main(["--log", str(log_file), "--out-dir", str(out_dir)]) == 1

    log_file.write_text(json.dumps([record("TC-PROFILE-01: a"), record("b", "FAIL")]), encoding="utf-8")
    assert run_report.main(["--log", str(log_file), "--out-dir", str(out_dir)]) == 0
    assert (out_dir / "test-report-latest.xlsx").exists()


def test_malformed_case_fails_alone(tmp_path, fake_session, response, base_url):
    cases = tmp_path / "cases"
    cases.mkdir()
    (cases / "profile.json").write_text(json.dumps([
        {"name": "TC-PROFILE-01: me", "path": "/me", "expectedStatus": 200},
        {"name": "TC-PROFILE-02: bad fields", "path": "/me", "validateFields": "data.id"},
        {"name": "TC-PROFILE-03: bad status", "path": "/me", "expectedStatus": "200 OK"},
    ]), encoding="utf-8")
    (cases / "restaurant.json").write_text(json.dumps([
        {"name": "TC-RESTAURANT-01: list", "path": "/restaurants", "expectedStatus": 200},
    ]), encoding="utf-8")
    settings = _settings(tmp_path, base_url)

    summary = run_suite(settings, session=fake_session(default=response(200, {"data": {}})))

    assert summary["total"] == 4
    assert summary["passed"] == 2
    assert [f["name"] for f in summary["failures"]] == ["TC-PROFILE-02: bad fields", "TC-PROFILE-03: bad status"]
    assert all("Invalid testcase" in f["error"] for f in summary["failures"])
    assert (Path(settings["reports_dir"]) / "test-report-latest.xlsx").exists()
