"""Agent-facing toolkit over one Browserless session.

``BrowserlessToolkit`` owns a single ``BrowserSession`` and exposes every
browsing primitive as an async method returning an ``ActionResult``. Agents
call ``invoke(name, arguments)``, which validates the arguments against the
tool's input schema and always answers with an envelope dict.

Only session establishment failures (``BrowserlessConnectionError``) escape:
without a session there is nothing meaningful to report against.
"""

from typing import Any

import structlog
from playwright.async_api import Error as PlaywrightError
from pydantic import ValidationError

from browserless_tools.browser.captcha import CaptchaWatcher
from browserless_tools.browser.catalog import DomCatalogExtractor
from browserless_tools.browser.errors import BrowserlessConnectionError
from browserless_tools.browser.interaction import InteractionEngine
from browserless_tools.browser.session import BrowserSession
from browserless_tools.core.config import BrowserlessConfig, Settings, get_settings
from browserless_tools.core.logging import LogContext
from browserless_tools.models import ActionResult
from browserless_tools.tools.definitions import TOOLS_BY_NAME, get_tool_definitions

logger = structlog.get_logger(__name__)

NAVIGATION_TIMEOUT_MS = 30_000


class BrowserlessToolkit:
    """Browsing tools sharing one remote browser, page and live URL.

    Calls against one toolkit interleave on the same page; the caller is
    responsible for serialising them. Always finish with ``session_end``.
    """

    def __init__(
        self,
        config: BrowserlessConfig,
        session: BrowserSession | None = None,
        interactions: InteractionEngine | None = None,
    ) -> None:
        self.config = config
        self.session = session or BrowserSession(config)
        self.interactions = interactions or InteractionEngine(self.session)
        self.catalog = DomCatalogExtractor(self.session)
        self.captcha = CaptchaWatcher(self.session)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "BrowserlessToolkit":
        """Build a toolkit from environment-backed settings."""
        return cls((settings or get_settings()).browserless_config())

    @staticmethod
    def tool_definitions() -> list[dict[str, Any]]:
        return get_tool_definitions()

    async def navigate(self, url: str) -> ActionResult:
        """Open ``url`` and wait for network idle."""
        page = await self.session.ensure_page()
        try:
            response = await page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
        except PlaywrightError as e:
            logger.error("navigation_failed", url=url, error=str(e), error_type=type(e).__name__)
            return ActionResult(
                summary=f"navigation to {url} failed: {e}",
                url=await self.session.observer_url(page),
                details={"currentUrl": page.url},
                error=str(e),
            )

        live_url = await self.session.observer_url(page)
        logger.info(
            "navigation_complete",
            url=url,
            final_url=page.url,
            status=response.status if response else None,
        )
        return ActionResult(
            summary=f"navigated to {url}",
            url=live_url or url,
            details={
                "currentUrl": page.url,
                "status": response.status if response else None,
                "liveURL": self.session.live_url,
            },
        )

    async def click(self, selector: str) -> ActionResult:
        return await self.interactions.click(selector)

    async def type(self, selector: str, text: str) -> ActionResult:
        return await self.interactions.type(selector, text)

    async def key_press(self, key: str, delay_ms: int | None = None) -> ActionResult:
        return await self.interactions.key_press(key, delay_ms)

    async def list_selectors(
        self, max_items: int | None = None, near_viewport_only: bool = False
    ) -> ActionResult:
        return await self.catalog.list_selectors(max_items, near_viewport_only)

    async def list_anchors(
        self, max_items: int | None = None, near_viewport_only: bool = False
    ) -> ActionResult:
        return await self.catalog.list_anchors(max_items, near_viewport_only)

    async def get_text(self) -> ActionResult:
        return await self.catalog.get_text()

    async def query_selectors(self, query: str, max_items: int | None = None) -> ActionResult:
        return await self.catalog.query_selectors(query, max_items)

    async def captcha_wait(self, timeout_ms: int | None = None) -> ActionResult:
        return await self.captcha.wait(timeout_ms)

    async def session_end(self) -> ActionResult:
        """Release the remote browser. Idempotent."""
        had_browser = await self.session.reset()
        summary = "browser session closed" if had_browser else "no active browser session"
        logger.info("session_end", had_browser=had_browser)
        return ActionResult(summary=summary, url="", details={"hadSession": had_browser})

    async def _dispatch(self, name: str, arguments: dict[str, Any]) -> ActionResult:
        spec = TOOLS_BY_NAME[name]
        args: Any = spec.input_model.model_validate(arguments)

        if name == "navigate":
            return await self.navigate(str(args.url))
        if name == "click":
            return await self.click(args.selector)
        if name == "type":
            return await self.type(args.selector, args.text)
        if name == "keyPress":
            return await self.key_press(args.key, args.delay_ms)
        if name == "listSelectors":
            return await self.list_selectors(args.max, bool(args.near_viewport_only))
        if name == "listAnchors":
            return await self.list_anchors(args.max, bool(args.near_viewport_only))
        if name == "getText":
            return await self.get_text()
        if name == "querySelectors":
            return await self.query_selectors(args.query, args.max)
        if name == "captchaWait":
            return await self.captcha_wait(args.timeout_ms)
        return await self.session_end()

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Validate ``arguments`` for tool ``name`` and run it.

        Returns:
            dict: The result envelope ``{summary, url?, details?, error?}``

        Raises:
            BrowserlessConnectionError: If the browser session cannot be established
        """
        if name not in TOOLS_BY_NAME:
            logger.warning("unknown_tool", tool=name)
            return ActionResult(summary=f"unknown tool {name}", error=f"unknown tool: {name}").to_envelope()

        with LogContext(tool=name):
            try:
                result = await self._dispatch(name, arguments or {})
            except ValidationError as e:
                logger.warning("tool_input_invalid", errors=e.error_count())
                result = ActionResult(
                    summary=f"invalid arguments for {name}",
                    error=str(e),
                    details={"errors": e.errors(include_url=False, include_context=False)},
                )
            except BrowserlessConnectionError:
                raise
            except Exception as e:
                logger.error("tool_failed", error=str(e), error_type=type(e).__name__)
                page = self.session.page
                result = ActionResult(
                    summary=f"{name} error: {e}",
                    url=page.url if page is not None else None,
                    error=str(e),
                )
        return result.to_envelope()
