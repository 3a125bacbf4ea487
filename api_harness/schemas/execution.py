# api_harness/schemas/execution.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

PASS = "PASS"
FAIL = "FAIL"
MASKED_BEARER = "Bearer [TOKEN]"


class RequestDetails(BaseModel):
    method: str
    url: str
    headers: Dict[str, Any] = Field(default_factory=dict)
    body: Any = None


class ExecutionRecord(BaseModel):
    """One entry of reports/test-execution-data.json."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    test_case: Dict[str, Any] = Field(default_factory=dict, alias="testCase")
    request: Optional[RequestDetails] = None
    expected_status: Optional[int] = Field(default=None, alias="expectedStatus")
    expected_response: Any = Field(default=None, alias="expectedResponse")
    actual_status: Optional[int] = Field(default=None, alias="actualStatus")
    actual_response: Any = Field(default=None, alias="actualResponse")
    result: str = FAIL
    duration: int = 0
    error: str = ""
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def name(self) -> str:
        n = self.test_case.get("name")
        return n if isinstance(n, str) else ""

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
