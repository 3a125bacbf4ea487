# api_harness/runners/request_runner.py
"""
Executes one declarative case against the live backend:
build request -> call -> save token -> compare -> append to the execution log.

The log is rewritten in full after every case so that whatever ran before
a crash still reaches the report.
"""
import json
import logging
import time
from contextlib import nullcontext
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from ..config import require_base_url
from ..errors import InvalidCaseError, MissingTokenError
from ..evaluators.assertions import verify_response
from ..schemas.execution import FAIL, MASKED_BEARER, PASS, ExecutionRecord, RequestDetails
from ..schemas.testcase import TestCase, json_truthy
from ..utils.io import ensure_parent, read_json
from ..utils.placeholders import lookup_path, substitute, substitute_headers, substitute_json

log = logging.getLogger(__name__)


class TokenStore(dict):
    """key -> bearer token, shared by every case of one run."""

    @classmethod
    def from_variables(cls, variables: Optional[Dict[str, Any]] = None):
        return cls({k: v for k, v in (variables or {}).items() if isinstance(v, str) and v})

    def require(self, key: str) -> str:
        tok = self.get(key)
        if not tok:
            raise MissingTokenError(key)
        return tok


class ExecutionLog:
    def __init__(self, path):
        self.path = Path(path)
        self.records: List[ExecutionRecord] = []

    def __len__(self):
        return len(self.records)

    def append(self, record: ExecutionRecord):
        self.records.append(record)
        self.save()

    def save(self):
        # no cross-process lock: parallel writers overwrite each other
        try:
            ensure_parent(self.path)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump([r.to_wire() for r in self.records], f, ensure_ascii=False, indent=2)
        except OSError as e:
            log.error("Failed to save test execution data: %s", e)

    def load(self) -> List[ExecutionRecord]:
        # ValidationError is a ValueError: malformed entries load nothing, like a corrupt file
        try:
            data = read_json(self.path, default=[]) or []
            return [ExecutionRecord.model_validate(x) for x in data]
        except (OSError, ValueError) as e:
            log.error("Failed to load test execution data from %s: %s", self.path, e)
            return []

    def clear(self):
        self.records.clear()
        if self.path.exists():
            self.path.unlink()


def case_name(raw) -> str:
    if isinstance(raw, TestCase):
        return raw.name
    name = raw.get('name') if isinstance(raw, dict) else None
    return name if isinstance(name, str) else ''


def build_url(base: str, raw_path: str) -> str:
    if not raw_path:
        raise InvalidCaseError("Testcase path is empty after environment substitution.")
    part = raw_path if raw_path.startswith('/') else f'/{raw_path}'
    return f"{base.rstrip('/')}{part}"


def _parse_body(text: str):
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


def _save_token(tc: TestCase, body, tokens: TokenStore):
    value = lookup_path(body, tc.save_token, default=None)
    if value:
        tokens[tc.token_key] = value
        log.info("Saved token '%s' from response path '%s'", tc.token_key, tc.save_token)
    else:
        log.warning("Could not extract token from path '%s' in response", tc.save_token)


def run_case(tc, *, tokens: TokenStore, execution_log: Optional[ExecutionLog] = None,
             base_url: Optional[str] = None, variables: Optional[Dict[str, Any]] = None,
             session: Optional[requests.Session] = None, timeout: float = 10.0) -> ExecutionRecord:
    """
    Run one case and return its record. Raises on failure (after logging the
    record), so the caller decides whether a failure stops anything.
    """
    if not tc:
        raise InvalidCaseError("Testcase is null/empty, check your JSON files.")
    try:
        tc = TestCase.model_validate(tc)
    except ValidationError as e:
        raise InvalidCaseError(f"Invalid testcase '{case_name(tc)}': {e}") from e

    base = require_base_url({'base_url': base_url})
    url = build_url(base, substitute(tc.path, variables))

    method = (tc.method or 'GET').upper()
    headers = substitute_headers(tc.headers, variables)
    # the record keeps header templates, substituted values only go on the wire
    details = RequestDetails(method=method, url=url, headers=dict(tc.headers),
                             body=tc.body if tc.has_body else None)

    if tc.use_token:
        headers['Authorization'] = f"Bearer {tokens.require(tc.use_token)}"
        details.headers['Authorization'] = MASKED_BEARER

    data = None
    if tc.has_body:
        if not any(h.lower() == 'content-type' for h in headers):
            headers['Content-Type'] = 'application/json'
        # the record keeps the template, credentials only go on the wire
        body = substitute_json(tc.body, variables)
        data = body if isinstance(body, str) else json.dumps(body)

    record = ExecutionRecord(test_case=tc.to_wire(), request=details,
                             expected_status=tc.expected_status,
                             expected_response=tc.expected_response())
    t0 = time.perf_counter()
    try:
        with (nullcontext(session) if session is not None else requests.Session()) as http:
            res = http.request(method, url, headers=headers, data=data, timeout=timeout)
        record.actual_status = res.status_code
        body = _parse_body(res.text)
        record.actual_response = body

        if tc.save_token and json_truthy(body):
            _save_token(tc, body, tokens)

        verify_response(tc, res.status_code, body)
        record.result = PASS
    except Exception as e:
        record.result = FAIL
        record.error = str(e)
        raise
    finally:
        record.duration = int((time.perf_counter() - t0) * 1000)
        if execution_log is not None:
            execution_log.append(record)
        log.info("%s %s %s -> %s (%sms)", record.result, method, tc.path, record.actual_status, record.duration)
    return record
