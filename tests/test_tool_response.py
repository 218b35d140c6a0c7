"""
Tests for the webpilot.environment.tool_response module.
"""

import json

import pytest
from pydantic import ValidationError

from webpilot.environment.tool_response import FailureKind, ToolResult


class TestToolResult:
    """Tests for the tagged ToolResult model."""

    def test_success(self):
        result = ToolResult.success("Navigated to https://example.com", data={"url": "https://example.com"})

        assert result.ok
        assert result.kind is None
        assert result.to_content() == "Navigated to https://example.com"
        assert str(result) == result.message

    def test_failure(self):
        result = ToolResult.failure(FailureKind.NOT_FOUND, 'Element "X" not found')

        assert not result.ok
        assert result.kind == FailureKind.NOT_FOUND
        assert result.to_content() == 'Element "X" not found'

    def test_failure_requires_kind(self):
        with pytest.raises(ValidationError):
            ToolResult(status="failure", message="broken")

    def test_success_cannot_carry_kind(self):
        with pytest.raises(ValidationError):
            ToolResult(status="success", message="fine", kind=FailureKind.ENGINE)

    def test_metadata_str(self):
        result = ToolResult.failure(FailureKind.ENGINE, "x", data={"path": "/tmp/a.jpeg"})

        assert json.loads(result.get_metadata_str()) == {
            "status": "failure",
            "kind": "engine",
            "data": {"path": "/tmp/a.jpeg"},
        }
