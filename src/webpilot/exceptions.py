"""
webpilot Exception Hierarchy

Errors raised inside the browser session, the tool registry and the planner
loop. Action tools never let these escape to the planner: the tool boundary
turns them into failure results. Only the top-level runner re-raises, and
only after it has tried to close the browser.

Every exception carries:
1. A stable error code for programmatic handling
2. Free-form context for logging
3. A user-facing message and an optional suggestion
"""

import time
from typing import Any, Dict, List, Optional

NOT_AVAILABLE_MESSAGE = "No browser page available. Please open browser first."


class WebPilotError(Exception):
    """
    Base exception class for all webpilot errors.

    Attributes:
        error_code: Unique error code for programmatic handling
        tool_name: Name of the tool where the error occurred (if applicable)
        timestamp: When the error occurred
        context: Additional context information
        user_message: User-friendly error message
        developer_message: Detailed technical error message
        suggestion: Suggested fix or next steps (if applicable)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "WEBPILOT_ERROR",
        tool_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        """
        Initialize error with context.

        Args:
            message: Technical error message for developers
            error_code: Unique error code for programmatic handling
            tool_name: Name of the tool where the error occurred
            context: Additional context information
            user_message: User-friendly error message
            suggestion: Suggested fix or next steps
        """
        super().__init__(message)
        self.error_code = error_code
        self.tool_name = tool_name
        self.timestamp = time.time()
        self.context = context or {}
        self.user_message = user_message or message
        self.developer_message = message
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.developer_message,
            "user_message": self.user_message,
            "tool_name": self.tool_name,
            "timestamp": self.timestamp,
            "context": self.context,
            "suggestion": self.suggestion,
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}]"]
        if self.tool_name:
            parts.append(f"Tool:{self.tool_name}")
        parts.append(self.developer_message)
        return " ".join(parts)


# =============================================================================
# BROWSER ERRORS
# =============================================================================

class BrowserError(WebPilotError):
    """Base class for browser-related errors."""

    def __init__(self, message: str, **kwargs):
        error_code = kwargs.pop("error_code", "BROWSER_ERROR")
        super().__init__(
            message,
            error_code=error_code,
            **kwargs
        )


class BrowserNotInitializedError(BrowserError):
    """
    Raised when a page operation is attempted with no open page.
    """

    def __init__(self, operation: Optional[str] = None, **kwargs):
        self.operation = operation

        context = kwargs.pop("context", None) or {}
        if operation:
            context["attempted_operation"] = operation

        message = f"No browser page available for operation: {operation}" if operation else "No browser page available"

        super().__init__(
            message,
            error_code="BROWSER_NOT_INITIALIZED_ERROR",
            context=context,
            user_message=NOT_AVAILABLE_MESSAGE,
            suggestion="Call open_browser before any other browser tool.",
            **kwargs
        )


class BrowserConnectionError(BrowserError):
    """
    Raised when the browser cannot be launched.

    Examples:
    - Browser executable not found
    - Missing system dependencies
    """

    def __init__(
        self,
        message: str,
        browser_type: Optional[str] = None,
        install_command: Optional[str] = None,
        **kwargs
    ):
        self.browser_type = browser_type
        self.install_command = install_command

        context = kwargs.pop("context", None) or {}
        if browser_type:
            context["browser_type"] = browser_type
        if install_command:
            context["install_command"] = install_command

        super().__init__(
            message,
            error_code="BROWSER_CONNECTION_ERROR",
            context=context,
            user_message="Failed to launch the browser.",
            suggestion=f"Try running: {install_command}" if install_command else "Check browser installation and dependencies.",
            **kwargs
        )


# =============================================================================
# TOOL CONTRACT ERRORS
# =============================================================================

class ToolValidationError(WebPilotError):
    """
    Raised when tool arguments do not match the tool's input schema.

    Examples:
    - Malformed URL passed to open_url
    - Unknown scroll direction
    - Arguments that are not valid JSON
    """

    def __init__(
        self,
        message: str,
        tool_name: Optional[str] = None,
        errors: Optional[List[str]] = None,
        provided_args: Optional[Any] = None,
        **kwargs
    ):
        self.errors = errors or []
        self.provided_args = provided_args

        context = kwargs.pop("context", None) or {}
        if errors:
            context["validation_errors"] = errors
        if provided_args is not None:
            preview = str(provided_args)
            context["args_preview"] = preview[:100] + "..." if len(preview) > 100 else preview

        super().__init__(
            message,
            error_code="TOOL_VALIDATION_ERROR",
            tool_name=tool_name,
            context=context,
            user_message="The tool arguments are invalid.",
            suggestion="Check the tool's parameter schema and adjust the arguments.",
            **kwargs
        )


class UnknownToolError(WebPilotError):
    """
    Raised when the planner asks for a tool the registry does not have.
    """

    def __init__(
        self,
        tool_name: str,
        available_tools: Optional[List[str]] = None,
        **kwargs
    ):
        self.available_tools = available_tools or []

        context = kwargs.pop("context", None) or {}
        if available_tools:
            context["available_tools"] = available_tools

        super().__init__(
            f"Unknown tool: {tool_name}",
            error_code="UNKNOWN_TOOL_ERROR",
            tool_name=tool_name,
            context=context,
            user_message=f"Tool '{tool_name}' does not exist.",
            suggestion=f"Use one of: {', '.join(available_tools)}" if available_tools else None,
            **kwargs
        )


# =============================================================================
# PLANNER ERRORS
# =============================================================================

class PlannerError(WebPilotError):
    """
    Raised when the planning loop itself fails (API errors, malformed replies).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
        **kwargs
    ):
        self.status_code = status_code
        self.provider = provider

        context = kwargs.pop("context", None) or {}
        if status_code is not None:
            context["status_code"] = status_code
        if provider:
            context["provider"] = provider

        super().__init__(
            message,
            error_code="PLANNER_ERROR",
            context=context,
            user_message="The planning model request failed.",
            suggestion="Check the API key, model name and base URL.",
            **kwargs
        )
