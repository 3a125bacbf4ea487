# api_harness/errors.py


class HarnessError(Exception):
    """Base class for everything the harness raises on purpose."""


class ConfigError(HarnessError):
    """Required configuration (base URL, credentials...) is missing."""


class InvalidCaseError(HarnessError):
    """A test case cannot be turned into a request."""


class MissingTokenError(HarnessError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(
            f"Token '{key}' not found in token store. Ensure the login test runs first."
        )


class AssertionMismatch(HarnessError, AssertionError):
    """Response did not match the case expectations.

    Subclasses AssertionError so pytest reports it as a test failure
    rather than an error.
    """

    def __init__(self, check: str, expected, actual, detail: str = ""):
        self.check = check
        self.expected = expected
        self.actual = actual
        msg = detail or f"{check} mismatch: expected {expected!r}, got {actual!r}"
        super().__init__(msg)


class LoginError(HarnessError):
    pass
