"""
webpilot - natural-language browser automation

Heuristic element resolution and batched form filling on top of Playwright,
exposed as schema-validated tools for an external planning loop.
"""

__version__ = "0.1.0"

from .config import BrowserConfig, PlannerConfig
from .environment import (
    BrowserSession,
    BrowserTools,
    ElementResolver,
    FailureKind,
    ToolResult,
)
from .registry import ToolRegistry, build_browser_registry
from .runner import RunResult, automate, run_task

__all__ = [
    # Version
    "__version__",
    # Configuration
    "BrowserConfig",
    "PlannerConfig",
    # Browser layer
    "BrowserSession",
    "BrowserTools",
    "ElementResolver",
    # Results
    "FailureKind",
    "ToolResult",
    # Contract layer
    "ToolRegistry",
    "build_browser_registry",
    # Runner
    "RunResult",
    "automate",
    "run_task",
]
