import logging
from typing import Any, Callable, List, Optional

from playwright.async_api import Browser, Page, async_playwright

from webpilot.config import BrowserConfig
from webpilot.exceptions import (
    BrowserConnectionError,
    BrowserError,
    BrowserNotInitializedError,
)

logger = logging.getLogger(__name__)


class BrowserSession:
    """
    Owns the browser engine process and its single active page.

    One session backs one automation run. Tools receive the session object
    instead of sharing a module-level page. Tool calls are expected to arrive
    one at a time; the session does no locking of its own.

    States: closed (no page) -> open (engine + page) -> closed. ``close()``
    clears every reference, so a closed session behaves exactly like a
    session that was never opened.
    """

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        """
        Initialize the session without launching anything.

        Parameters:
            config (Optional[BrowserConfig]): Launch options. Defaults to BrowserConfig().
            playwright_factory (Callable): Returns an object with an async ``start()``,
                normally ``playwright.async_api.async_playwright``.
        """
        self.config = config or BrowserConfig()
        self._playwright_factory = playwright_factory
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.page: Optional[Page] = None

    @property
    def is_open(self) -> bool:
        return self.page is not None

    def require_page(self, operation: Optional[str] = None) -> Page:
        """
        Return the active page or raise BrowserNotInitializedError.

        Parameters:
            operation (Optional[str]): Name of the operation needing the page, for the error context.
        """
        if self.page is None:
            raise BrowserNotInitializedError(operation=operation)
        return self.page

    async def open(self) -> bool:
        """
        Launch the engine and open a page, reusing whatever is already live.

        A second call before ``close()`` launches nothing new. If the engine is
        alive but the page went away, only a fresh page is opened. If the
        engine itself disconnected (crashed, or its window was closed), the
        stale references are dropped and a new engine is launched.

        Returns:
            bool: True if a new engine or page was created, False if everything was reused.

        Raises:
            BrowserConnectionError: If the browser cannot be launched.
        """
        if self.browser is not None and not self.browser.is_connected():
            logger.warning("Browser disconnected, launching a new one")
            await self._discard_engine()

        if self.page is not None and not self.page.is_closed():
            logger.debug("Browser already open, reusing existing page")
            return False

        if self.browser is None:
            await self._launch()

        try:
            self.page = await self.browser.new_page(viewport=self.config.viewport)
        except Exception as e:
            raise BrowserError(f"Failed to open a new page: {e}") from e

        logger.info(
            f"Browser opened (headless={self.config.headless}, "
            f"viewport={self.config.viewport_width}x{self.config.viewport_height})"
        )
        return True

    async def _discard_engine(self) -> None:
        """Forget a dead engine; the driver is stopped best-effort."""
        playwright = self.playwright
        self.page = None
        self.browser = None
        self.playwright = None
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright for a disconnected browser: {e}")

    async def _launch(self) -> None:
        try:
            self.playwright = await self._playwright_factory().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.config.headless,
                chromium_sandbox=self.config.chromium_sandbox,
                args=list(self.config.args),
            )
        except Exception as e:
            # Do not leave a driver running behind a failed launch
            if self.playwright is not None:
                try:
                    await self.playwright.stop()
                except Exception as stop_error:
                    logger.warning(f"Error stopping Playwright after failed launch: {stop_error}")
            self.playwright = None
            self.browser = None

            error_message = str(e)
            if "executable doesn't exist" in error_message.lower():
                install_command = "python -m playwright install chromium"
                raise BrowserConnectionError(
                    f"Playwright's bundled 'chromium' browser not found. "
                    f"Please install it by running: {install_command}",
                    browser_type="chromium",
                    install_command=install_command,
                ) from e
            raise BrowserConnectionError(
                f"An unexpected error occurred while launching chromium: {error_message}",
                browser_type="chromium",
                install_command="python -m playwright install --with-deps chromium",
            ) from e

    async def close(self) -> bool:
        """
        Close the page, then the browser, then the Playwright driver.

        Every stage is attempted even if an earlier one fails, and all
        references are cleared regardless.

        Returns:
            bool: True if anything was open, False if this was a no-op.

        Raises:
            BrowserError: Listing every failed stage, after all stages have run.
        """
        page, browser, playwright = self.page, self.browser, self.playwright
        self.page = None
        self.browser = None
        self.playwright = None

        if page is None and browser is None and playwright is None:
            logger.debug("close() called with nothing open")
            return False

        errors: List[str] = []

        if page is not None:
            try:
                await page.close()
            except Exception as e:
                logger.warning(f"Error closing page: {e}")
                errors.append(f"page: {e}")

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
                errors.append(f"browser: {e}")

        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")
                errors.append(f"playwright: {e}")

        if errors:
            raise BrowserError(
                "; ".join(errors),
                context={"failed_stages": [err.split(":", 1)[0] for err in errors]},
            )

        logger.info("Browser closed")
        return True
