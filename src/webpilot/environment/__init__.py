"""Browser session, element resolution and the action tools."""

from .browser_tools import BrowserTools
from .resolver import CLICK_STRATEGIES, FIELD_STRATEGIES, CandidateStrategy, ElementResolver
from .session import BrowserSession
from .tool_response import FailureKind, ToolResult

__all__ = [
    "BrowserSession",
    "BrowserTools",
    "CandidateStrategy",
    "CLICK_STRATEGIES",
    "ElementResolver",
    "FailureKind",
    "FIELD_STRATEGIES",
    "ToolResult",
]
