# api_harness/schemas/testcase.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TOKEN_KEY = "accessToken"


def json_truthy(v) -> bool:
    """Truthiness as a JSON consumer sees it: empty objects and arrays count, 0, false, "" and null do not."""
    if isinstance(v, (dict, list)):
        return True
    return bool(v)


class TestCase(BaseModel):
    """One declarative HTTP case as written in tests/testcases/*.json.

    Wire keys are camelCase; unknown keys are kept so the execution log
    can echo the case back verbatim.
    """
    __test__ = False  # not a pytest class

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = ""
    description: Optional[str] = None
    method: str = "GET"
    path: str = ""
    headers: Dict[str, Any] = Field(default_factory=dict)
    body: Any = None
    use_token: Optional[str] = Field(default=None, alias="useToken")
    save_token: Optional[str] = Field(default=None, alias="saveToken")
    save_token_as: Optional[str] = Field(default=None, alias="saveTokenAs")
    expected_status: Optional[int] = Field(default=None, alias="expectedStatus")
    expected_body: Any = Field(default=None, alias="expectedBody")
    partial_match: bool = Field(default=False, alias="partialMatch")
    validate_fields: Optional[List[str]] = Field(default=None, alias="validateFields")

    @property
    def has_expected_status(self) -> bool:
        return "expected_status" in self.model_fields_set and self.expected_status is not None

    @property
    def has_expected_body(self) -> bool:
        # `"expectedBody": null` is a real expectation, only absence skips the check
        return "expected_body" in self.model_fields_set

    @property
    def has_body(self) -> bool:
        return json_truthy(self.body)

    @property
    def token_key(self) -> str:
        return self.save_token_as or DEFAULT_TOKEN_KEY

    def expected_response(self):
        if json_truthy(self.expected_body):
            return self.expected_body
        if self.validate_fields is not None:
            return self.validate_fields
        return None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)
