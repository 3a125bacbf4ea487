# api_harness/evaluators/assertions.py
import json

from ..errors import AssertionMismatch
from ..schemas.testcase import TestCase
from ..utils.placeholders import MISSING, lookup_path


def _short(v, limit=300):
    s = v if isinstance(v, str) else json.dumps(v, ensure_ascii=False, default=str)
    return s if len(s) <= limit else s[:limit] + '...'


def json_equal(a, b):
    """Deep equality where booleans never equal numbers (True != 1) but 1 == 1.0."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, dict) or isinstance(b, dict):
        if not (isinstance(a, dict) and isinstance(b, dict)) or a.keys() != b.keys():
            return False
        return all(json_equal(a[k], b[k]) for k in a)
    if isinstance(a, list) or isinstance(b, list):
        if not (isinstance(a, list) and isinstance(b, list)) or len(a) != len(b):
            return False
        return all(json_equal(x, y) for x, y in zip(a, b))
    return a == b


def check_status(expected, actual):
    if actual != expected:
        raise AssertionMismatch('status', expected, actual,
                                f"Expected status {expected}, received {actual}")


def check_body(expected, actual):
    if not json_equal(expected, actual):
        raise AssertionMismatch('body', expected, actual,
                                f"Response body differs.\nExpected: {_short(expected)}\nReceived: {_short(actual)}")


def check_partial(expected, actual):
    """Top-level subset: every expected key present with an equal value (nested values compare exactly)."""
    if not isinstance(expected, dict):
        return check_body(expected, actual)
    if not isinstance(actual, dict):
        raise AssertionMismatch('body', expected, actual,
                                f"Expected an object containing {_short(expected)}\nReceived: {_short(actual)}")
    diff = [k for k, v in expected.items() if k not in actual or not json_equal(v, actual[k])]
    if diff:
        raise AssertionMismatch('body', expected, actual,
                                f"Response body does not contain expected keys {diff}.\n"
                                f"Expected subset: {_short(expected)}\nReceived: {_short(actual)}")


def check_fields(fields, body):
    # null counts as present; only a missing key fails
    missing = [f for f in fields if lookup_path(body, f) is MISSING]
    if missing:
        raise AssertionMismatch('fields', fields, body,
                                f"Expected fields to be defined: {', '.join(missing)}")


def verify_response(tc: TestCase, status, body):
    """Status, then body, then field presence; the first mismatch raises."""
    if tc.has_expected_status:
        check_status(tc.expected_status, status)
    if tc.has_expected_body:
        if tc.partial_match:
            check_partial(tc.expected_body, body)
        else:
            check_body(tc.expected_body, body)
    if tc.validate_fields:
        check_fields(tc.validate_fields, body)
