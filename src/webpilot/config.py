"""
Configuration classes for the browser session and the planning loop.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_LAUNCH_ARGS = ["--disable-extensions", "--disable-file-system"]

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass
class BrowserConfig:
    """Configuration for the browser session and the action tools."""
    headless: bool = False
    viewport_width: int = 1280
    viewport_height: int = 800
    chromium_sandbox: bool = True
    args: List[str] = field(default_factory=lambda: list(DEFAULT_LAUNCH_ARGS))

    # Bounded waits (milliseconds)
    navigation_timeout_ms: int = 45000
    visibility_timeout_ms: int = 3000
    scroll_timeout_ms: int = 5000
    action_timeout_ms: int = 10000

    # Settle delays (milliseconds)
    navigate_settle_ms: int = 2000
    click_settle_ms: int = 1000
    fill_settle_ms: int = 300
    scroll_settle_ms: int = 800
    scroll_to_element_settle_ms: int = 1000

    # Screenshots
    screenshot_dir: str = field(default_factory=os.getcwd)
    screenshot_quality: int = 30

    @property
    def viewport(self) -> dict:
        return {"width": self.viewport_width, "height": self.viewport_height}

    @classmethod
    def from_env(cls) -> "BrowserConfig":
        """Create a BrowserConfig, overriding defaults from WEBPILOT_* variables."""
        config = cls()
        config.headless = _env_bool("WEBPILOT_HEADLESS", config.headless)
        config.navigation_timeout_ms = _env_int("WEBPILOT_NAV_TIMEOUT_MS", config.navigation_timeout_ms)
        screenshot_dir = os.getenv("WEBPILOT_SCREENSHOT_DIR")
        if screenshot_dir:
            config.screenshot_dir = screenshot_dir
        return config


@dataclass
class PlannerConfig:
    """Configuration for the chat-completions planning loop."""
    model: str = "gemini-2.5-flash"
    base_url: str = GEMINI_OPENAI_BASE_URL
    api_key: Optional[str] = None
    max_steps: int = 30
    temperature: float = 0.2
    request_timeout: float = 120.0
    max_retries: int = 3

    @classmethod
    def from_env(cls) -> "PlannerConfig":
        """Create a PlannerConfig from GOOGLE_API_KEY and WEBPILOT_* variables."""
        config = cls()
        config.api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("OPENAI_API_KEY")
        config.model = os.getenv("WEBPILOT_MODEL", config.model)
        config.base_url = os.getenv("WEBPILOT_BASE_URL", config.base_url)
        config.max_steps = _env_int("WEBPILOT_MAX_STEPS", config.max_steps)
        return config
