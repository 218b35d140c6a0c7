"""
Tests for the webpilot.exceptions module.
"""

import pytest

from webpilot.exceptions import (
    BrowserConnectionError,
    BrowserError,
    BrowserNotInitializedError,
    PlannerError,
    ToolValidationError,
    UnknownToolError,
    WebPilotError,
)


# =============================================================================
# WebPilotError Tests
# =============================================================================

class TestWebPilotError:
    """Tests for the base WebPilotError class."""

    def test_basic_creation(self):
        error = WebPilotError("Something went wrong")

        assert str(error) == "[WEBPILOT_ERROR] Something went wrong"
        assert error.user_message == "Something went wrong"

    def test_with_tool_name(self):
        error = WebPilotError("bad", error_code="E1", tool_name="open_url")

        assert str(error) == "[E1] Tool:open_url bad"

    def test_to_dict(self):
        error = WebPilotError(
            "Test error",
            error_code="ERR001",
            context={"key": "value"},
            suggestion="Try this fix",
        )

        data = error.to_dict()

        assert data["error_type"] == "WebPilotError"
        assert data["error_code"] == "ERR001"
        assert data["message"] == "Test error"
        assert data["context"] == {"key": "value"}
        assert data["suggestion"] == "Try this fix"
        assert "timestamp" in data


# =============================================================================
# Specialized Error Tests
# =============================================================================

class TestSpecializedErrors:
    """Tests for the concrete exception classes."""

    def test_hierarchy(self):
        assert issubclass(BrowserNotInitializedError, BrowserError)
        assert issubclass(BrowserConnectionError, BrowserError)
        assert issubclass(BrowserError, WebPilotError)
        assert issubclass(ToolValidationError, WebPilotError)
        assert issubclass(UnknownToolError, WebPilotError)
        assert issubclass(PlannerError, WebPilotError)

    def test_browser_not_initialized(self):
        error = BrowserNotInitializedError(operation="take_screenshot")

        assert error.error_code == "BROWSER_NOT_INITIALIZED_ERROR"
        assert error.context == {"attempted_operation": "take_screenshot"}
        assert "take_screenshot" in error.developer_message

    def test_browser_not_initialized_merges_context(self):
        error = BrowserNotInitializedError(operation="open_url", context={"run": 1})

        assert error.context == {"run": 1, "attempted_operation": "open_url"}

    def test_browser_connection_suggestion(self):
        error = BrowserConnectionError(
            "not installed",
            browser_type="chromium",
            install_command="python -m playwright install chromium",
        )

        assert error.suggestion == "Try running: python -m playwright install chromium"
        assert error.context["browser_type"] == "chromium"

    def test_tool_validation_truncates_args_preview(self):
        error = ToolValidationError("bad", tool_name="open_url", provided_args="x" * 200)

        assert len(error.context["args_preview"]) == 103
        assert error.tool_name == "open_url"

    def test_unknown_tool(self):
        error = UnknownToolError("teleport", available_tools=["open_url"])

        assert error.user_message == "Tool 'teleport' does not exist."
        assert error.suggestion == "Use one of: open_url"

    def test_planner_error(self):
        error = PlannerError("rate limited", status_code=429, provider="https://api")

        assert error.context == {"status_code": 429, "provider": "https://api"}

    def test_can_be_caught_as_base(self):
        with pytest.raises(WebPilotError):
            raise BrowserError("boom")
