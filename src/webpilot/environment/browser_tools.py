import functools
import logging
import os
import time
from typing import List, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webpilot.config import BrowserConfig
from webpilot.environment.resolver import ElementResolver
from webpilot.environment.schemas import FieldDescriptor
from webpilot.environment.session import BrowserSession
from webpilot.environment.tool_response import FailureKind, ToolResult
from webpilot.exceptions import BrowserNotInitializedError, WebPilotError

logger = logging.getLogger(__name__)


def error_text(error: Exception) -> str:
    """Underlying diagnostic message of an exception, without wrapper prefixes."""
    if isinstance(error, WebPilotError):
        return error.developer_message
    message = getattr(error, "message", None)
    return message if isinstance(message, str) and message else str(error)


##############################################
###   Precondition Decorator              ###
##############################################

def requires_page(func):
    """
    Decorator that short-circuits a tool when no page is open.

    The wrapped tool is not called and no engine call is made; the planner
    gets the fixed "not available" failure instead.
    """
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            self.session.require_page(func.__name__)
        except BrowserNotInitializedError as e:
            logger.warning(e.developer_message, extra={"tool_name": func.__name__})
            return ToolResult.failure(FailureKind.PRECONDITION, e.user_message)
        return await func(self, *args, **kwargs)
    return wrapper


class BrowserTools:
    """
    The action tools exposed to the planner.

    Every method returns a ToolResult and never raises: engine errors,
    missing elements and a missing page all come back as failure results
    whose message is meant to be read by the planner.
    """

    def __init__(
        self,
        session: BrowserSession,
        resolver: Optional[ElementResolver] = None,
        config: Optional[BrowserConfig] = None,
    ) -> None:
        """
        Parameters:
            session (BrowserSession): The session holding the page to act on.
            resolver (Optional[ElementResolver]): Element resolver. Defaults to one using the config's visibility timeout.
            config (Optional[BrowserConfig]): Timeouts and settle delays. Defaults to the session's config.
        """
        self.session = session
        self.config = config or session.config
        self.resolver = resolver or ElementResolver(
            visibility_timeout_ms=self.config.visibility_timeout_ms
        )

    async def open_browser(self) -> ToolResult:
        """
        Open a new browser instance.

        Reuses the running browser and page if one is already open.
        """
        logger.info("TOOL CALLED: open_browser", extra={"tool_name": "open_browser"})
        try:
            created = await self.session.open()
        except Exception as e:
            logger.error(f"Failed to open browser: {error_text(e)}", extra={"tool_name": "open_browser"})
            return ToolResult.failure(FailureKind.ENGINE, f"Failed to open browser: {error_text(e)}")

        if not created:
            return ToolResult.success("Browser already open")
        config = self.config
        logger.info(
            f"Browser opened successfully with viewport {config.viewport_width}x{config.viewport_height}",
            extra={"tool_name": "open_browser"},
        )
        return ToolResult.success("Browser opened successfully")

    @requires_page
    async def open_url(self, url: str) -> ToolResult:
        """
        Navigate to a specific URL.

        Args:
            url (str): The URL to navigate to.
        """
        page = self.session.page
        logger.info(f"TOOL CALLED: open_url - Navigating to: {url}", extra={"tool_name": "open_url"})
        try:
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=self.config.navigation_timeout_ms,
            )
            # Let late layout and script effects land before anything inspects the page
            await page.wait_for_timeout(self.config.navigate_settle_ms)
        except Exception as e:
            logger.warning(f"Failed to navigate to {url} - {error_text(e)}", extra={"tool_name": "open_url"})
            return ToolResult.failure(FailureKind.ENGINE, f"Failed to navigate to {url}: {error_text(e)}")

        logger.info(f"Successfully navigated to {url}", extra={"tool_name": "open_url"})
        return ToolResult.success(f"Navigated to {url}", data={"url": url})

    @requires_page
    async def take_screenshot(self, context: str) -> ToolResult:
        """
        Capture a full-page screenshot of the current page and save it to disk.

        Args:
            context (str): Description of what action was performed or what to expect in the screenshot.
        """
        page = self.session.page
        logger.info(f"TOOL CALLED: take_screenshot - {context}", extra={"tool_name": "take_screenshot"})
        try:
            os.makedirs(self.config.screenshot_dir, exist_ok=True)
            filename = f"screenshot-{int(time.time() * 1000)}.jpeg"
            path = os.path.join(self.config.screenshot_dir, filename)
            await page.screenshot(
                path=path,
                full_page=True,
                type="jpeg",
                quality=self.config.screenshot_quality,
            )
        except Exception as e:
            logger.warning(f"Failed to take screenshot - {error_text(e)}", extra={"tool_name": "take_screenshot"})
            return ToolResult.failure(FailureKind.ENGINE, f"Screenshot failed: {error_text(e)}")

        logger.info(f"Screenshot captured - {context} ({path})", extra={"tool_name": "take_screenshot"})
        return ToolResult.success("Screenshot taken", data={"path": path, "context": context})

    @requires_page
    async def find_and_click(self, identifier: str, element_type: Optional[str] = None) -> ToolResult:
        """
        Find an element by text, placeholder, or selector and click it.

        Args:
            identifier (str): Text, placeholder, label, or CSS selector to identify the element.
            element_type (Optional[str]): Type of element (button, link, input, etc.).
        """
        page = self.session.page
        logger.info(
            f'TOOL CALLED: find_and_click - Looking for: "{identifier}" ({element_type or "any"})',
            extra={"tool_name": "find_and_click"},
        )
        try:
            resolution = await self.resolver.resolve_click_target(page, identifier)
            if resolution is None:
                logger.warning(f'Element "{identifier}" not found', extra={"tool_name": "find_and_click"})
                return ToolResult.failure(FailureKind.NOT_FOUND, f'Element "{identifier}" not found')

            await resolution.locator.click(timeout=self.config.action_timeout_ms)
            await page.wait_for_timeout(self.config.click_settle_ms)
        except Exception as e:
            logger.warning(f"Failed to click - {error_text(e)}", extra={"tool_name": "find_and_click"})
            return ToolResult.failure(FailureKind.ENGINE, f"Click failed: {error_text(e)}")

        logger.info(
            f'Clicked on "{identifier}" using selector: {resolution.selector}',
            extra={"tool_name": "find_and_click"},
        )
        return ToolResult.success(
            f"Clicked on {identifier}",
            data={"strategy": resolution.strategy, "selector": resolution.selector},
        )

    @requires_page
    async def fill_form_fields(self, fields: List[FieldDescriptor]) -> ToolResult:
        """
        Fill multiple form fields at once to reduce API calls.

        Fields are filled one after another in the given order. A field that
        cannot be found or filled does not stop the remaining fields; the result
        has one line per field, in input order.

        Args:
            fields (List[FieldDescriptor]): Array of field objects to fill.
        """
        page = self.session.page
        logger.info(
            f"TOOL CALLED: fill_form_fields - Filling {len(fields)} fields",
            extra={"tool_name": "fill_form_fields"},
        )

        lines: List[str] = []
        outcomes = []
        failure_kinds = set()

        for field in fields:
            identifier = field.field_identifier
            shown_value = "***" if (field.field_type or "").lower() == "password" else field.value
            logger.debug(
                f'Processing field: "{identifier}" with value: "{shown_value}"',
                extra={"tool_name": "fill_form_fields"},
            )

            kind: Optional[FailureKind] = None
            try:
                resolution = await self.resolver.resolve_field(page, identifier, field.field_type)
                if resolution is None:
                    kind = FailureKind.NOT_FOUND
                    line = f'Field "{identifier}" not found'
                else:
                    await resolution.locator.fill(field.value, timeout=self.config.action_timeout_ms)
                    await page.wait_for_timeout(self.config.fill_settle_ms)
                    line = f"Filled {identifier} with {field.value}"
            except Exception as e:
                kind = FailureKind.ENGINE
                line = f"Failed to fill {identifier}: {error_text(e)}"

            if kind is None:
                logger.info(f'Filled "{identifier}"', extra={"tool_name": "fill_form_fields"})
            else:
                logger.warning(line, extra={"tool_name": "fill_form_fields"})
                failure_kinds.add(kind)

            lines.append(line)
            outcomes.append({
                "field": identifier,
                "status": "success" if kind is None else "failure",
                "kind": kind.value if kind else None,
            })

        message = "\n".join(lines)
        data = {"results": outcomes}
        if not failure_kinds:
            return ToolResult.success(message, data=data)
        kind = FailureKind.NOT_FOUND if failure_kinds == {FailureKind.NOT_FOUND} else FailureKind.ENGINE
        return ToolResult.failure(kind, message, data=data)

    @requires_page
    async def scroll_page(
        self, direction: str, pixels: float = 500, element_identifier: str = ""
    ) -> ToolResult:
        """
        Scroll the page vertically or to a specific element.

        Args:
            direction (str): Scroll direction or target: "up", "down" or "to-element".
            pixels (float): Number of pixels to scroll (for up/down).
            element_identifier (str): Element identifier for scroll-to-element.
        """
        page = self.session.page
        target = element_identifier if direction == "to-element" else f"{pixels:g}px"
        logger.info(f"TOOL CALLED: scroll_page - {direction} {target}", extra={"tool_name": "scroll_page"})

        try:
            if direction == "to-element":
                if not element_identifier:
                    return ToolResult.failure(
                        FailureKind.INVALID_INPUT,
                        "Scroll failed: elementIdentifier is required for to-element",
                    )
                element = page.locator(f"text={element_identifier}").first
                await element.scroll_into_view_if_needed(timeout=self.config.scroll_timeout_ms)
                # Longer settle: bringing content into view can trigger lazy loading
                await page.wait_for_timeout(self.config.scroll_to_element_settle_ms)
            else:
                scroll_amount = -pixels if direction == "up" else pixels
                await page.evaluate("(amount) => window.scrollBy(0, amount)", scroll_amount)
                await page.wait_for_timeout(self.config.scroll_settle_ms)
        except PlaywrightTimeoutError as e:
            logger.warning(f"Failed to scroll - {error_text(e)}", extra={"tool_name": "scroll_page"})
            return ToolResult.failure(FailureKind.NOT_FOUND, f"Scroll failed: {error_text(e)}")
        except Exception as e:
            logger.warning(f"Failed to scroll - {error_text(e)}", extra={"tool_name": "scroll_page"})
            return ToolResult.failure(FailureKind.ENGINE, f"Scroll failed: {error_text(e)}")

        logger.info(f"Scrolled {direction}", extra={"tool_name": "scroll_page"})
        return ToolResult.success(f"Scrolled {direction}")

    async def close_browser(self) -> ToolResult:
        """
        Close the browser instance.

        Safe to call when nothing is open.
        """
        logger.info("TOOL CALLED: close_browser", extra={"tool_name": "close_browser"})
        try:
            closed = await self.session.close()
        except Exception as e:
            logger.warning(f"Failed to close browser - {error_text(e)}", extra={"tool_name": "close_browser"})
            return ToolResult.failure(FailureKind.ENGINE, f"Close failed: {error_text(e)}")

        if not closed:
            return ToolResult.success("Browser already closed")
        return ToolResult.success("Browser closed")
