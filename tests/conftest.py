"""
Shared fakes standing in for Playwright so no real browser is launched.

FakePage keeps a map of selector -> FakeElement. A locator "becomes visible"
only if its selector is mapped to a visible element; anything else times out
like Playwright's ``wait_for(state="visible")`` would.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webpilot.config import BrowserConfig
from webpilot.environment.browser_tools import BrowserTools
from webpilot.environment.session import BrowserSession
from webpilot.registry import build_browser_registry


@dataclass
class FakeElement:
    visible: bool = True
    click_error: Optional[str] = None
    fill_error: Optional[str] = None
    value: Optional[str] = None
    clicks: int = 0


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    def _element(self) -> Optional[FakeElement]:
        return self.page.elements.get(self.selector)

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        self.page.calls.append(("wait_for", self.selector))
        if self.page.wait_error:
            raise self.page.wait_error
        if self.selector in self.page.invalid_selectors:
            raise PlaywrightError(f"Unexpected token in selector {self.selector!r}")
        element = self._element()
        if element is None or not element.visible:
            raise PlaywrightTimeoutError(f"Locator.wait_for: Timeout {timeout}ms exceeded.")

    async def click(self, timeout: Optional[float] = None) -> None:
        self.page.calls.append(("click", self.selector))
        element = self._element()
        if element.click_error:
            raise PlaywrightError(element.click_error)
        element.clicks += 1

    async def fill(self, value: str, timeout: Optional[float] = None) -> None:
        self.page.calls.append(("fill", self.selector, value))
        element = self._element()
        if element.fill_error:
            raise PlaywrightError(element.fill_error)
        element.value = value

    async def scroll_into_view_if_needed(self, timeout: Optional[float] = None) -> None:
        self.page.calls.append(("scroll_into_view", self.selector))
        element = self._element()
        if element is None or not element.visible:
            raise PlaywrightTimeoutError(f"Locator.scroll_into_view_if_needed: Timeout {timeout}ms exceeded.")


class FakePage:
    def __init__(self, elements: Optional[Dict[str, FakeElement]] = None):
        self.elements: Dict[str, FakeElement] = elements or {}
        self.invalid_selectors: set = set()
        self.wait_error: Optional[Exception] = None
        self.calls: List[tuple] = []
        self.goto_error: Optional[Exception] = None
        self.screenshot_error: Optional[Exception] = None
        self.close_error: Optional[Exception] = None
        self.url = "about:blank"
        self.closed = False

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def is_closed(self) -> bool:
        return self.closed

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[float] = None):
        self.calls.append(("goto", url, wait_until, timeout))
        if self.goto_error:
            raise self.goto_error
        self.url = url

    async def wait_for_timeout(self, timeout: float) -> None:
        self.calls.append(("wait_for_timeout", timeout))

    async def evaluate(self, expression: str, arg=None):
        self.calls.append(("evaluate", expression, arg))

    async def screenshot(self, path: Optional[str] = None, **kwargs) -> bytes:
        self.calls.append(("screenshot", path, kwargs))
        if self.screenshot_error:
            raise self.screenshot_error
        if path:
            Path(path).write_bytes(b"\xff\xd8\xff")
        return b"\xff\xd8\xff"

    async def close(self) -> None:
        self.calls.append(("close",))
        self.closed = True
        if self.close_error:
            raise self.close_error


class FakeBrowser:
    def __init__(self, page_factory):
        self.page_factory = page_factory
        self.pages: List[FakePage] = []
        self.closed = False
        self.close_error: Optional[Exception] = None
        self.new_page_kwargs: List[dict] = []
        self.connected = True

    def is_connected(self) -> bool:
        return self.connected

    async def new_page(self, **kwargs) -> FakePage:
        if not self.connected:
            raise PlaywrightError("Target page, context or browser has been closed")
        self.new_page_kwargs.append(kwargs)
        page = self.page_factory()
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True
        self.connected = False
        if self.close_error:
            raise self.close_error


class FakeChromium:
    def __init__(self, driver: "FakePlaywright"):
        self.driver = driver

    async def launch(self, **kwargs) -> FakeBrowser:
        self.driver.launch_kwargs.append(kwargs)
        if self.driver.launch_error:
            raise self.driver.launch_error
        browser = FakeBrowser(self.driver.page_factory)
        self.driver.browsers.append(browser)
        return browser


class FakePlaywright:
    """Plays the role of both ``async_playwright()`` and the started driver."""

    def __init__(self, page_factory=FakePage):
        self.page_factory = page_factory
        self.chromium = FakeChromium(self)
        self.browsers: List[FakeBrowser] = []
        self.launch_kwargs: List[dict] = []
        self.launch_error: Optional[Exception] = None
        self.starts = 0
        self.stops = 0
        self.stop_error: Optional[Exception] = None

    def __call__(self) -> "FakePlaywright":
        return self

    async def start(self) -> "FakePlaywright":
        self.starts += 1
        return self

    async def stop(self) -> None:
        self.stops += 1
        if self.stop_error:
            raise self.stop_error


@pytest.fixture
def browser_config(tmp_path) -> BrowserConfig:
    """Config with tiny waits and screenshots under tmp_path."""
    return BrowserConfig(
        headless=True,
        visibility_timeout_ms=10,
        screenshot_dir=str(tmp_path / "shots"),
    )


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


@pytest.fixture
def fake_playwright(fake_page) -> FakePlaywright:
    return FakePlaywright(page_factory=lambda: fake_page)


@pytest.fixture
def session(browser_config, fake_playwright) -> BrowserSession:
    return BrowserSession(browser_config, playwright_factory=fake_playwright)


@pytest.fixture
def tools(session) -> BrowserTools:
    return BrowserTools(session)


@pytest.fixture
def registry(tools):
    return build_browser_registry(tools)
