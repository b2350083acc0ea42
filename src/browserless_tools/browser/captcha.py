"""CAPTCHA detection through Browserless' custom CDP events.

Browserless emits ``Browserless.captchaFound`` on the page's CDP session when
it recognises a challenge. The watcher subscribes, then races the first event
against a deadline. Detection does not solve anything: it hands the live URL
to a human.
"""

import asyncio
from typing import Any

import structlog
from playwright.async_api import CDPSession, Page
from playwright.async_api import Error as PlaywrightError

from browserless_tools.browser.session import BrowserSession
from browserless_tools.models import ActionResult, CaptchaEvent

logger = structlog.get_logger(__name__)

CAPTCHA_EVENTS = ("Browserless.captchaFound", "Browserless.foundCaptcha")
DEFAULT_WAIT_MS = 30_000
MAX_WAIT_MS = 300_000


class CaptchaWatcher:
    """Waits for a CAPTCHA event on the session's page."""

    def __init__(self, session: BrowserSession) -> None:
        self.session = session

    async def watch(self, page: Page, timeout_ms: int) -> CaptchaEvent:
        """Return as soon as a CAPTCHA event fires or the deadline passes.

        Args:
            page: Page whose CDP session is observed
            timeout_ms: Deadline in milliseconds; 0 returns immediately

        Returns:
            CaptchaEvent: ``detected=False`` on timeout
        """
        if timeout_ms <= 0:
            return CaptchaEvent(detected=False)

        loop = asyncio.get_running_loop()
        found: asyncio.Future[Any] = loop.create_future()

        def _on_found(params: Any = None) -> None:
            if not found.done():
                found.set_result(params)

        cdp: CDPSession = await page.context.new_cdp_session(page)
        try:
            for event in CAPTCHA_EVENTS:
                cdp.on(event, _on_found)
            try:
                info = await asyncio.wait_for(found, timeout=timeout_ms / 1000)
            except asyncio.TimeoutError:
                return CaptchaEvent(detected=False)
            return CaptchaEvent(detected=True, info=info)
        finally:
            for event in CAPTCHA_EVENTS:
                cdp.remove_listener(event, _on_found)
            try:
                await cdp.detach()
            except PlaywrightError as e:
                logger.debug("captcha_cdp_detach_failed", error=str(e))

    async def wait(self, timeout_ms: int | None = None) -> ActionResult:
        """Wait up to ``timeout_ms`` (default 30s, max 300s) for a CAPTCHA."""
        page = await self.session.ensure_page()
        wait_ms = DEFAULT_WAIT_MS if timeout_ms is None else max(0, min(MAX_WAIT_MS, timeout_ms))

        try:
            event = await self.watch(page, wait_ms)
        except PlaywrightError as e:
            logger.error("captcha_wait_failed", error=str(e))
            return ActionResult(
                summary=f"captcha wait error: {e}",
                url=await self.session.observer_url(page),
                details={"detected": False, "timeoutMs": wait_ms},
                error=str(e),
            )

        if event.detected:
            logger.info("captcha_detected")
            url = await self._handoff_url(page)
            return ActionResult(
                summary="captcha detected",
                url=url,
                details={
                    "detected": True,
                    "event": CAPTCHA_EVENTS[0],
                    "info": event.info,
                    "timeoutMs": wait_ms,
                    "liveURL": self.session.live_url,
                },
            )

        logger.debug("captcha_not_detected", timeout_ms=wait_ms)
        return ActionResult(
            summary="no captcha detected within timeout",
            url=await self.session.observer_url(page),
            details={"detected": False, "timeoutMs": wait_ms, "liveURL": self.session.live_url},
        )

    async def _handoff_url(self, page: Page) -> str:
        """Live URL with the full handoff window, else the page URL."""
        try:
            return await self.session.ensure_live_url(timeout_ms=MAX_WAIT_MS)
        except Exception as e:
            logger.warning("captcha_handoff_url_unavailable", error=str(e))
            return page.url
