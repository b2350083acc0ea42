"""Click, type and key-press with ordered fallback strategies.

Remote pages are unreliable targets: overlays intercept clicks, custom widgets
reject ``fill`` and content lives in iframes. Each interaction is therefore a
chain of independent strategies tried in order until one succeeds. Successful
actions are followed by a short randomized pause, scroll and mouse move so the
session does not look scripted.
"""

import random
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import structlog
from playwright.async_api import Frame, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from browserless_tools.browser.errors import ElementNotActionableError
from browserless_tools.browser.scripts import ASSERT_EDITABLE_JS, JS_CLICK_JS, SET_VALUE_JS
from browserless_tools.browser.session import BrowserSession
from browserless_tools.models import ActionResult

logger = structlog.get_logger(__name__)

CLICK_TIMEOUT_MS = 20_000
TRIAL_CLICK_TIMEOUT_MS = 2_000
FRAME_CLICK_TIMEOUT_MS = 5_000
TYPE_TIMEOUT_MS = 30_000
NAVIGATION_WAIT_MS = 15_000
CONTENT_RETRY_MS = 3_000
MAX_KEY_DELAY_MS = 2_000


class Strategy(ABC):
    """One way of performing an interaction.

    ``attempt`` raises on failure and returns extra result details on success.
    """

    name: str = "strategy"


class ClickStrategy(Strategy):
    @abstractmethod
    async def attempt(self, page: Page, selector: str) -> dict[str, Any]: ...


class TypeStrategy(Strategy):
    @abstractmethod
    async def attempt(self, page: Page, selector: str, text: str) -> dict[str, Any]: ...


async def _locator_click(target: Page | Frame, selector: str, timeout_ms: int) -> None:
    locator = target.locator(selector).first
    await locator.wait_for(state="attached", timeout=timeout_ms)
    try:
        await locator.scroll_into_view_if_needed(timeout=timeout_ms)
    except PlaywrightError as e:
        logger.debug("scroll_into_view_failed", selector=selector, error=str(e))
    # Trial run surfaces actionability problems without committing
    try:
        await locator.click(trial=True, timeout=TRIAL_CLICK_TIMEOUT_MS)
    except PlaywrightError as e:
        logger.debug("trial_click_failed", selector=selector, error=str(e))
    await locator.click(timeout=timeout_ms)


class LocatorClickStrategy(ClickStrategy):
    """Playwright locator click with attach wait and scroll into view."""

    name = "locator-click"

    def __init__(self, timeout_ms: int = CLICK_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms

    async def attempt(self, page: Page, selector: str) -> dict[str, Any]:
        await _locator_click(page, selector, self.timeout_ms)
        return {}


class JsClickStrategy(ClickStrategy):
    """``element.click()`` in page context, bypassing hit-testing."""

    name = "js-click"

    async def attempt(self, page: Page, selector: str) -> dict[str, Any]:
        await page.evaluate(JS_CLICK_JS, selector)
        return {}


class FrameClickStrategy(ClickStrategy):
    """Locator click repeated in every frame of the page."""

    name = "frame-click"

    def __init__(self, timeout_ms: int = FRAME_CLICK_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms

    async def attempt(self, page: Page, selector: str) -> dict[str, Any]:
        last_error: Exception | None = None
        for frame in page.frames:
            try:
                await _locator_click(frame, selector, self.timeout_ms)
            except PlaywrightError as e:
                last_error = e
                continue
            return {"frameUrl": frame.url}
        raise ElementNotActionableError(
            selector,
            [{"strategy": self.name, "error": str(last_error or "no frames on page")}],
        )


class FillStrategy(TypeStrategy):
    """Replace the field's content with ``locator.fill``."""

    name = "fill"

    def __init__(self, timeout_ms: int = TYPE_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms

    async def attempt(self, page: Page, selector: str, text: str) -> dict[str, Any]:
        locator = page.locator(selector).first
        await locator.wait_for(state="attached", timeout=self.timeout_ms)
        try:
            await locator.scroll_into_view_if_needed(timeout=self.timeout_ms)
        except PlaywrightError as e:
            logger.debug("scroll_into_view_failed", selector=selector, error=str(e))
        await locator.fill(text, timeout=self.timeout_ms)
        return {}


class KeyboardStrategy(TypeStrategy):
    """Focus by clicking, clear with select-all + backspace, then type."""

    name = "keyboard"

    def __init__(self, timeout_ms: int = TYPE_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms

    async def attempt(self, page: Page, selector: str, text: str) -> dict[str, Any]:
        locator = page.locator(selector).first
        await locator.click(timeout=self.timeout_ms)
        await locator.evaluate(ASSERT_EDITABLE_JS)
        try:
            await page.keyboard.press("ControlOrMeta+A")
            await page.keyboard.press("Backspace")
        except PlaywrightError as e:
            logger.debug("keyboard_clear_failed", selector=selector, error=str(e))
        await page.keyboard.type(text)
        return {}


class DomMutationStrategy(TypeStrategy):
    """Write ``innerText`` or ``value`` directly and fire input events."""

    name = "fallback"

    def __init__(self, timeout_ms: int = TYPE_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms

    async def attempt(self, page: Page, selector: str, text: str) -> dict[str, Any]:
        locator = page.locator(selector).first
        mode = await locator.evaluate(SET_VALUE_JS, text, timeout=self.timeout_ms)
        return {"mutation": mode}


DEFAULT_CLICK_STRATEGIES: tuple[type[ClickStrategy], ...] = (
    LocatorClickStrategy,
    JsClickStrategy,
    FrameClickStrategy,
)
DEFAULT_TYPE_STRATEGIES: tuple[type[TypeStrategy], ...] = (
    FillStrategy,
    KeyboardStrategy,
    DomMutationStrategy,
)


async def run_strategies(
    strategies: Sequence[Strategy], selector: str, *args: Any
) -> tuple[str, dict[str, Any]]:
    """Try each strategy in order and return the first success.

    Returns:
        tuple: (strategy name, details returned by the strategy)

    Raises:
        ElementNotActionableError: When every strategy failed
    """
    errors: list[dict[str, str]] = []
    for strategy in strategies:
        try:
            details = await strategy.attempt(*args)
        except Exception as e:
            errors.append({"strategy": strategy.name, "error": str(e)})
            logger.info(
                "interaction_strategy_failed",
                strategy=strategy.name,
                selector=selector,
                error=str(e)[:200],
            )
            continue
        if errors:
            logger.info(
                "interaction_fallback_succeeded",
                strategy=strategy.name,
                selector=selector,
                failed=[e["strategy"] for e in errors],
            )
        return strategy.name, details
    raise ElementNotActionableError(selector, errors)


class InteractionEngine:
    """Performs page interactions against the session's shared page."""

    # Humanizing pause ranges
    MIN_PAUSE_MS = 200
    MAX_PAUSE_MS = 1200
    SCROLL_PROBABILITY = 0.7
    MIN_SCROLL_PX = 200
    MAX_SCROLL_PX = 1200
    MOUSE_MOVE_PROBABILITY = 0.6

    def __init__(
        self,
        session: BrowserSession,
        click_strategies: Sequence[ClickStrategy] | None = None,
        type_strategies: Sequence[TypeStrategy] | None = None,
        rng: random.Random | None = None,
        humanize: bool = True,
    ) -> None:
        self.session = session
        self.click_strategies = list(click_strategies or [cls() for cls in DEFAULT_CLICK_STRATEGIES])
        self.type_strategies = list(type_strategies or [cls() for cls in DEFAULT_TYPE_STRATEGIES])
        self.rng = rng or random.Random()
        self.humanize = humanize

    async def humanize_interaction(self, page: Page) -> None:
        """Random pause, occasional wheel scroll and mouse wander."""
        if not self.humanize:
            return
        try:
            await page.wait_for_timeout(self.rng.randint(self.MIN_PAUSE_MS, self.MAX_PAUSE_MS))
            if self.rng.random() < self.SCROLL_PROBABILITY:
                await page.mouse.wheel(0, self.rng.randint(self.MIN_SCROLL_PX, self.MAX_SCROLL_PX))
            if self.rng.random() < self.MOUSE_MOVE_PROBABILITY:
                await page.mouse.move(
                    self.rng.randint(20, 1200),
                    self.rng.randint(20, 700),
                    steps=self.rng.randint(5, 25),
                )
        except PlaywrightError as e:
            logger.warning("humanize_interaction_failed", error=str(e))

    async def _observed_details(self, page: Page, **details: Any) -> tuple[str, dict[str, Any]]:
        url = await self.session.observer_url(page)
        details["currentUrl"] = page.url
        details["liveURL"] = self.session.live_url
        return url, details

    async def click(self, selector: str) -> ActionResult:
        """Click the first element matching ``selector``.

        Never raises for interaction failures; the returned result carries
        ``error`` instead.
        """
        page = await self.session.ensure_page()
        try:
            method, extra = await run_strategies(
                self.click_strategies, selector, page, selector
            )
        except ElementNotActionableError as e:
            logger.warning("click_failed", selector=selector, strategies=e.strategies_tried)
            url, details = await self._observed_details(
                page, selector=selector, attempts=e.errors
            )
            return ActionResult(
                summary=f'click error on "{selector}": {e}',
                url=url,
                details=details,
                error=str(e),
            )

        await self.humanize_interaction(page)
        logger.info("element_clicked", selector=selector, method=method)
        url, details = await self._observed_details(
            page, selector=selector, methodUsed=method, **extra
        )
        return ActionResult(summary=f'clicked "{selector}" via {method}', url=url, details=details)

    async def type(self, selector: str, text: str) -> ActionResult:
        """Replace the content of an input or editable element with ``text``."""
        page = await self.session.ensure_page()
        try:
            method, extra = await run_strategies(
                self.type_strategies, selector, page, selector, text
            )
        except ElementNotActionableError as e:
            logger.warning("type_failed", selector=selector, strategies=e.strategies_tried)
            url, details = await self._observed_details(
                page, selector=selector, attempts=e.errors
            )
            return ActionResult(
                summary=f'type error on "{selector}": {e}',
                url=url,
                details=details,
                error=str(e),
            )

        await self.humanize_interaction(page)
        logger.info("text_typed", selector=selector, method=method, length=len(text))
        url, details = await self._observed_details(
            page, selector=selector, methodUsed=method, **extra
        )
        return ActionResult(
            summary=f'typed into "{selector}" via {method}: "{text}"',
            url=url,
            details=details,
        )

    async def key_press(
        self,
        key: str,
        delay_ms: int | None = None,
        wait_for_navigation: bool = True,
    ) -> ActionResult:
        """Press a key or chord such as ``Enter`` or ``Control+A``.

        The press runs inside a navigation wait so keys that submit forms
        settle before returning; not navigating is not an error.
        """
        page = await self.session.ensure_page()
        delay = None if delay_ms is None else max(0, min(MAX_KEY_DELAY_MS, delay_ms))
        press_kwargs = {} if delay is None else {"delay": delay}

        navigated = False
        try:
            if wait_for_navigation:
                try:
                    async with page.expect_navigation(
                        wait_until="domcontentloaded", timeout=NAVIGATION_WAIT_MS
                    ):
                        await page.keyboard.press(key, **press_kwargs)
                    navigated = True
                except PlaywrightTimeoutError:
                    logger.debug("key_press_no_navigation", key=key)
            else:
                await page.keyboard.press(key, **press_kwargs)
        except PlaywrightError as e:
            logger.warning("key_press_failed", key=key, error=str(e))
            url, details = await self._observed_details(page, key=key, delayMs=delay)
            return ActionResult(
                summary=f'key press error for "{key}": {e}',
                url=url,
                details=details,
                error=str(e),
            )

        content = await self._read_content(page)
        await self.humanize_interaction(page)
        logger.info("key_pressed", key=key, navigated=navigated)
        url, details = await self._observed_details(
            page,
            key=key,
            delayMs=delay,
            navigated=navigated,
            contentLength=len(content),
        )
        return ActionResult(summary=f'pressed "{key}"', url=url, details=details)

    async def _read_content(self, page: Page) -> str:
        try:
            return await page.content()
        except PlaywrightError:
            pass
        # Content is unavailable mid-navigation; give the new document a moment
        try:
            await page.wait_for_load_state("domcontentloaded", timeout=CONTENT_RETRY_MS)
            return await page.content()
        except PlaywrightError as e:
            logger.debug("page_content_unavailable", error=str(e))
            return ""
