"""Tests for BrowserSession."""

import random

import pytest
from unittest.mock import AsyncMock, MagicMock
from playwright.async_api import Error as PlaywrightError

from browserless_tools.browser.errors import BrowserlessConnectionError, LiveURLUnavailableError
from browserless_tools.browser.session import BrowserSession
from browserless_tools.core.config import BrowserlessConfig


def build_playwright(contexts=None):
    """Fake async_playwright() chain down to a page and CDP session."""
    page = MagicMock()
    page.url = "https://example.com/"

    cdp = MagicMock()
    cdp.send = AsyncMock(return_value={"liveURL": "https://live.browserless.io/abc"})
    cdp.detach = AsyncMock()

    context = MagicMock()
    context.add_init_script = AsyncMock()
    context.new_page = AsyncMock(return_value=page)
    context.new_cdp_session = AsyncMock(return_value=cdp)
    page.context = context

    browser = MagicMock()
    browser.contexts = [context] if contexts == "existing" else []
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    pw = MagicMock()
    pw.chromium.connect_over_cdp = AsyncMock(return_value=browser)
    pw.stop = AsyncMock()

    factory = MagicMock()
    factory.return_value.start = AsyncMock(return_value=pw)

    return factory, pw, browser, context, page, cdp


class TestBrowserSession:
    """Test suite for BrowserSession."""

    @pytest.fixture
    def config(self):
        return BrowserlessConfig(token="test-token")

    @pytest.fixture
    def fakes(self):
        return build_playwright()

    @pytest.fixture
    def session(self, config, fakes):
        factory = fakes[0]
        return BrowserSession(config, playwright_factory=factory, rng=random.Random(7))

    def test_init(self, session):
        """Test that nothing is opened on construction."""
        assert session.browser is None
        assert session.page is None
        assert session.live_url is None
        assert session.has_page is False

    @pytest.mark.asyncio
    async def test_missing_token_raises_without_connecting(self, fakes):
        factory = fakes[0]
        session = BrowserSession(BrowserlessConfig(token=""), playwright_factory=factory)

        with pytest.raises(BrowserlessConnectionError) as exc_info:
            await session.ensure_page()

        assert "Missing Browserless token" in str(exc_info.value)
        factory.assert_not_called()
        assert session.page is None

    @pytest.mark.asyncio
    async def test_whitespace_token_raises_without_connecting(self, fakes):
        factory = fakes[0]
        session = BrowserSession(BrowserlessConfig(token="   "), playwright_factory=factory)

        with pytest.raises(BrowserlessConnectionError):
            await session.ensure_browser()

        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_ensure_browser_connects_with_ws_endpoint(self, session, config, fakes):
        _, pw, browser, *_ = fakes

        result = await session.ensure_browser()

        assert result is browser
        pw.chromium.connect_over_cdp.assert_awaited_once_with(config.ws_endpoint())

    @pytest.mark.asyncio
    async def test_connection_failure_wraps_and_stops(self, session, fakes):
        _, pw, *_ = fakes
        pw.chromium.connect_over_cdp.side_effect = Exception("connection refused")

        with pytest.raises(BrowserlessConnectionError) as exc_info:
            await session.ensure_browser()

        assert "connection refused" in str(exc_info.value)
        pw.stop.assert_awaited_once()
        assert session.browser is None

    @pytest.mark.asyncio
    async def test_ensure_page_creates_fingerprinted_context(self, session, fakes):
        _, _, browser, context, page, _ = fakes

        result = await session.ensure_page()

        assert result is page
        options = browser.new_context.await_args.kwargs
        assert options["locale"] == "en-US"
        assert options["timezone_id"] == "America/Los_Angeles"
        assert "viewport" in options
        context.add_init_script.assert_awaited_once()
        context.set_default_timeout.assert_called_once_with(BrowserSession.DEFAULT_TIMEOUT_MS)
        page.set_default_timeout.assert_called_once_with(BrowserSession.DEFAULT_TIMEOUT_MS)

    @pytest.mark.asyncio
    async def test_ensure_page_is_reused(self, session, fakes):
        _, pw, _, context, _, _ = fakes

        first = await session.ensure_page()
        second = await session.ensure_page()

        assert first is second
        pw.chromium.connect_over_cdp.assert_awaited_once()
        context.new_page.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_context_is_reused(self, config):
        factory, _, browser, context, _, _ = build_playwright(contexts="existing")
        session = BrowserSession(config, playwright_factory=factory)

        await session.ensure_page()

        browser.new_context.assert_not_called()
        context.new_page.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stealth_disabled_skips_init_script(self, fakes):
        factory, _, _, context, _, _ = fakes
        session = BrowserSession(
            BrowserlessConfig(token="t", stealth=False), playwright_factory=factory
        )

        await session.ensure_page()

        context.add_init_script.assert_not_called()

    @pytest.mark.asyncio
    async def test_live_url_is_cached(self, session, fakes):
        cdp = fakes[5]

        first = await session.ensure_live_url()
        second = await session.ensure_live_url(timeout_ms=1000)

        assert first == second == "https://live.browserless.io/abc"
        cdp.send.assert_awaited_once_with(
            "Browserless.liveURL", {"timeout": BrowserSession.LIVE_URL_TIMEOUT_MS}
        )

    @pytest.mark.asyncio
    async def test_live_url_optional_params(self, session, fakes):
        cdp = fakes[5]

        await session.ensure_live_url(
            timeout_ms=5000, show_browser_interface=True, quality=50, resizable=False
        )

        cdp.send.assert_awaited_once_with(
            "Browserless.liveURL",
            {"timeout": 5000, "showBrowserInterface": True, "quality": 50, "resizable": False},
        )

    @pytest.mark.asyncio
    async def test_live_url_missing_raises(self, session, fakes):
        fakes[5].send.return_value = {}

        with pytest.raises(LiveURLUnavailableError):
            await session.ensure_live_url()

        assert session.live_url is None

    @pytest.mark.asyncio
    async def test_live_url_cdp_error_raises(self, session, fakes):
        fakes[5].send.side_effect = PlaywrightError("Unknown method Browserless.liveURL")

        with pytest.raises(LiveURLUnavailableError):
            await session.ensure_live_url()

    @pytest.mark.asyncio
    async def test_failed_live_url_detaches_cdp_session(self, session, fakes):
        _, _, _, context, _, cdp = fakes
        cdp.send.return_value = {}

        for _ in range(5):
            await session.observer_url()

        assert context.new_cdp_session.await_count == 5
        assert cdp.detach.await_count == 5

    @pytest.mark.asyncio
    async def test_live_url_error_detaches_cdp_session(self, session, fakes):
        cdp = fakes[5]
        cdp.send.side_effect = PlaywrightError("Unknown method Browserless.liveURL")
        cdp.detach.side_effect = PlaywrightError("Target closed")

        with pytest.raises(LiveURLUnavailableError):
            await session.ensure_live_url()

        cdp.detach.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_issued_live_url_keeps_cdp_session(self, session, fakes):
        cdp = fakes[5]

        await session.ensure_live_url()

        cdp.detach.assert_not_called()

    @pytest.mark.asyncio
    async def test_observer_url_falls_back_to_page_url(self, session, fakes):
        fakes[5].send.return_value = {"liveURL": ""}

        url = await session.observer_url()

        assert url == "https://example.com/"

    @pytest.mark.asyncio
    async def test_reset_is_idempotent(self, session, fakes):
        _, pw, browser, *_ = fakes
        await session.ensure_live_url()

        assert await session.reset() is True
        assert await session.reset() is False

        browser.close.assert_awaited_once()
        pw.stop.assert_awaited_once()
        assert session.browser is None
        assert session.page is None
        assert session.live_url is None

    @pytest.mark.asyncio
    async def test_reset_without_session(self, session, fakes):
        factory = fakes[0]

        assert await session.reset() is False
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_reset_swallows_close_errors(self, session, fakes):
        _, pw, browser, *_ = fakes
        browser.close.side_effect = Exception("target closed")
        await session.ensure_page()

        assert await session.reset() is True

        pw.stop.assert_awaited_once()
        assert session.browser is None
        assert session.page is None

    @pytest.mark.asyncio
    async def test_new_page_after_reset(self, session, fakes):
        _, pw, _, context, _, _ = fakes
        await session.ensure_page()
        await session.reset()

        await session.ensure_page()

        assert pw.chromium.connect_over_cdp.await_count == 2
        assert context.add_init_script.await_count == 2

    @pytest.mark.asyncio
    async def test_async_context_manager_resets(self, config, fakes):
        factory, _, browser, *_ = fakes

        async with BrowserSession(config, playwright_factory=factory) as session:
            await session.ensure_page()

        browser.close.assert_awaited_once()
        assert session.browser is None
