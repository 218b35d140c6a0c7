"""Tagged result type returned by every browser tool."""

import json
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, model_validator


class FailureKind(str, Enum):
    """Why a tool call did not succeed."""

    PRECONDITION = "precondition"  # no active page
    NOT_FOUND = "not_found"  # no visible candidate for an identifier
    ENGINE = "engine"  # playwright, transport or file I/O error
    INVALID_INPUT = "invalid_input"  # arguments rejected by the schema
    UNKNOWN_TOOL = "unknown_tool"


class ToolResult(BaseModel):
    """
    Outcome of a single tool call.

    Either ``Success{message, data?}`` or ``Failure{kind, message}``. The
    planner only ever sees ``message``; ``status`` and ``kind`` let callers
    and tests branch on the outcome without parsing prose.

    Examples:
        ToolResult.success("Navigated to https://example.com")

        ToolResult.failure(FailureKind.NOT_FOUND, 'Element "Sign in" not found')

        ToolResult.success("Screenshot taken", data={"path": "/tmp/screenshot-1.jpeg"})
    """
    status: Literal["success", "failure"]
    message: str
    kind: Optional[FailureKind] = None
    data: Optional[Dict[str, Any]] = None

    @model_validator(mode='after')
    def validate_tag(self):
        """A failure must name its kind; a success must not."""
        if self.status == "failure" and self.kind is None:
            raise ValueError("Failure results must provide 'kind'.")
        if self.status == "success" and self.kind is not None:
            raise ValueError("Success results cannot carry a failure 'kind'.")
        return self

    @classmethod
    def success(cls, message: str, data: Optional[Dict[str, Any]] = None) -> "ToolResult":
        return cls(status="success", message=message, data=data)

    @classmethod
    def failure(
        cls, kind: FailureKind, message: str, data: Optional[Dict[str, Any]] = None
    ) -> "ToolResult":
        return cls(status="failure", kind=kind, message=message, data=data)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_content(self) -> str:
        """Text handed back to the planner."""
        return self.message

    def get_metadata_str(self) -> str:
        """Compact JSON summary for logs."""
        payload: Dict[str, Any] = {"status": self.status}
        if self.kind is not None:
            payload["kind"] = self.kind.value
        if self.data:
            payload["data"] = self.data
        return json.dumps(payload, separators=(',', ':'), default=str)

    def __str__(self) -> str:
        return self.message
