"""Lazy Browserless session owning one browser, one page and one live URL.

The session connects to a remote Browserless Chrome over the Chrome DevTools
Protocol using Playwright's ``connect_over_cdp``. Nothing is opened until an
operation needs a page, and everything stays open until ``reset()`` is called:
the remote browser is billed per second, so callers must end sessions
explicitly.
"""

import random
from typing import Any

import structlog
from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

from browserless_tools.browser.errors import BrowserlessConnectionError, LiveURLUnavailableError
from browserless_tools.browser.fingerprint import Fingerprint
from browserless_tools.browser.stealth import StealthInjector
from browserless_tools.core.config import BrowserlessConfig

logger = structlog.get_logger(__name__)


class BrowserSession:
    """Owns at most one Browser, Page and Live-URL for a toolkit instance.

    Attributes:
        config: Immutable connection settings
        browser: Connected Playwright browser, or None
        page: Active page, or None
    """

    DEFAULT_TIMEOUT_MS = 30_000
    LIVE_URL_TIMEOUT_MS = 300_000

    def __init__(
        self,
        config: BrowserlessConfig,
        playwright_factory: Any = async_playwright,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize an unconnected session.

        Args:
            config: Browserless connection and fingerprint settings
            playwright_factory: Callable returning a Playwright context manager
            rng: Random source for fingerprint selection
        """
        self.config = config
        self._playwright_factory = playwright_factory
        self._rng = rng or random.Random()
        self._stealth = StealthInjector(config.locale)

        self.browser: Browser | None = None
        self.page: Page | None = None
        self._live_url: str | None = None
        self._playwright: Any = None

    @property
    def has_page(self) -> bool:
        return self.page is not None

    @property
    def live_url(self) -> str | None:
        """Cached live URL, if one was issued."""
        return self._live_url

    async def ensure_browser(self) -> Browser:
        """Connect to the remote browser if not already connected.

        Raises:
            BrowserlessConnectionError: If the token is missing or the CDP
                handshake fails
        """
        if self.browser is not None:
            return self.browser

        if not self.config.token.strip():
            raise BrowserlessConnectionError("Missing Browserless token")

        try:
            self._playwright = await self._playwright_factory().start()
            self.browser = await self._playwright.chromium.connect_over_cdp(
                self.config.ws_endpoint()
            )
        except Exception as e:
            logger.error(
                "browserless_connection_failed",
                route=self.config.resolved_route,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self._stop_playwright()
            self.browser = None
            raise BrowserlessConnectionError(f"Failed to connect to Browserless: {e}") from e

        logger.info(
            "browserless_browser_connected",
            route=self.config.resolved_route,
            stealth=self.config.stealth,
            context_count=len(self.browser.contexts),
        )
        return self.browser

    async def ensure_page(self) -> Page:
        """Return the shared page, creating context and page on first use."""
        if self.page is not None:
            return self.page

        browser = await self.ensure_browser()
        context = await self._acquire_context(browser)

        if self.config.stealth:
            await self._stealth.apply(context)

        context.set_default_timeout(self.DEFAULT_TIMEOUT_MS)
        self.page = await context.new_page()
        self.page.set_default_timeout(self.DEFAULT_TIMEOUT_MS)

        logger.info("browserless_page_created", stealth=self.config.stealth)
        return self.page

    async def _acquire_context(self, browser: Browser) -> BrowserContext:
        if browser.contexts:
            return browser.contexts[0]

        fingerprint = Fingerprint.random(self.config, self._rng)
        logger.debug(
            "browserless_context_fingerprint",
            viewport=fingerprint.viewport,
            device_scale_factor=fingerprint.device_scale_factor,
            has_touch=fingerprint.has_touch,
        )
        return await browser.new_context(**fingerprint.context_options(self.config))

    async def ensure_live_url(
        self,
        timeout_ms: int | None = None,
        show_browser_interface: bool | None = None,
        quality: int | None = None,
        resizable: bool | None = None,
    ) -> str:
        """Obtain (once) a human-viewable URL for the running session.

        Args:
            timeout_ms: How long the live URL stays valid (default 300000)
            show_browser_interface: Show tabs/address bar in the live view
            quality: Screencast quality 1-100
            resizable: Let the viewer resize the viewport

        Returns:
            str: The cached or newly issued live URL

        Raises:
            LiveURLUnavailableError: If Browserless returns no URL
        """
        if self._live_url:
            return self._live_url

        page = await self.ensure_page()
        params: dict[str, Any] = {
            "timeout": timeout_ms if timeout_ms is not None else self.LIVE_URL_TIMEOUT_MS
        }
        if show_browser_interface is not None:
            params["showBrowserInterface"] = show_browser_interface
        if quality is not None:
            params["quality"] = quality
        if resizable is not None:
            params["resizable"] = resizable

        try:
            cdp = await page.context.new_cdp_session(page)
        except PlaywrightError as e:
            raise LiveURLUnavailableError(f"Browserless.liveURL failed: {e}") from e

        try:
            response = await cdp.send("Browserless.liveURL", params)
        except PlaywrightError as e:
            await self._detach(cdp)
            raise LiveURLUnavailableError(f"Browserless.liveURL failed: {e}") from e

        live_url = (response or {}).get("liveURL")
        if not isinstance(live_url, str) or not live_url:
            await self._detach(cdp)
            raise LiveURLUnavailableError("Browserless.liveURL did not return a URL")

        self._live_url = live_url
        logger.info("browserless_live_url_issued")
        return live_url

    async def _detach(self, cdp: Any) -> None:
        try:
            await cdp.detach()
        except PlaywrightError as e:
            logger.debug("browserless_cdp_detach_failed", error=str(e))

    async def observer_url(self, page: Page | None = None) -> str:
        """Live URL when available, otherwise the page's current URL."""
        try:
            return await self.ensure_live_url()
        except (LiveURLUnavailableError, PlaywrightError) as e:
            logger.debug("browserless_live_url_unavailable", error=str(e))
        page = page or self.page
        return page.url if page is not None else ""

    async def reset(self) -> bool:
        """Close the browser and drop every cached handle.

        Safe to call repeatedly; errors while closing are logged, not raised.

        Returns:
            bool: True if a browser session existed
        """
        had_browser = self.browser is not None
        try:
            if self.browser is not None:
                await self.browser.close()
                logger.info("browserless_browser_closed")
        except Exception as e:
            logger.warning("browserless_close_warning", error=str(e))
        finally:
            await self._stop_playwright()
            self.browser = None
            self.page = None
            self._live_url = None
            self._stealth.forget()
        return had_browser

    async def _stop_playwright(self) -> None:
        if self._playwright is None:
            return
        try:
            await self._playwright.stop()
        except Exception as e:
            logger.warning("playwright_stop_warning", error=str(e))
        finally:
            self._playwright = None

    async def __aenter__(self) -> "BrowserSession":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.reset()
