"""Tests for the agent-facing toolkit and tool definitions."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from playwright.async_api import Error as PlaywrightError

from browserless_tools.browser.errors import BrowserlessConnectionError
from browserless_tools.browser.session import BrowserSession
from browserless_tools.core.config import BrowserlessConfig, Settings
from browserless_tools.models import ActionResult
from browserless_tools.tools import BrowserlessToolkit, get_tool_definitions

LIVE_URL = "https://live.browserless.io/abc"

TOOL_NAMES = [
    "navigate",
    "click",
    "type",
    "keyPress",
    "listSelectors",
    "listAnchors",
    "getText",
    "querySelectors",
    "captchaWait",
    "sessionEnd",
]


class TestToolDefinitions:
    """Test the schemas handed to the model."""

    def test_all_tools_defined(self):
        definitions = get_tool_definitions()

        assert [d["name"] for d in definitions] == TOOL_NAMES

    def test_definition_shape(self):
        for definition in get_tool_definitions():
            assert definition["description"]
            schema = definition["input_schema"]
            assert schema["type"] == "object"
            assert "properties" in schema
            assert "required" in schema
            assert "title" not in schema

    def test_camel_case_argument_names(self):
        by_name = {d["name"]: d["input_schema"] for d in get_tool_definitions()}

        assert "delayMs" in by_name["keyPress"]["properties"]
        assert "nearViewportOnly" in by_name["listSelectors"]["properties"]
        assert "timeoutMs" in by_name["captchaWait"]["properties"]
        assert by_name["type"]["required"] == ["selector", "text"]
        assert by_name["sessionEnd"]["properties"] == {}

    def test_session_end_description_demands_use(self):
        by_name = {d["name"]: d for d in get_tool_definitions()}

        assert "ALWAYS USE AT THE END OF A SESSION" in by_name["sessionEnd"]["description"]


class TestBrowserlessToolkit:
    """Test suite for BrowserlessToolkit."""

    @pytest.fixture
    def page(self):
        page = MagicMock()
        page.url = "https://example.com/"
        response = MagicMock()
        response.status = 200
        page.goto = AsyncMock(return_value=response)
        return page

    @pytest.fixture
    def session(self, page):
        session = MagicMock(spec=BrowserSession)
        session.page = page
        session.live_url = LIVE_URL
        session.ensure_page = AsyncMock(return_value=page)
        session.observer_url = AsyncMock(return_value=LIVE_URL)
        session.reset = AsyncMock(return_value=True)
        return session

    @pytest.fixture
    def interactions(self):
        engine = MagicMock()
        engine.click = AsyncMock(
            return_value=ActionResult(summary='clicked "#go" via locator-click', url=LIVE_URL)
        )
        engine.type = AsyncMock(return_value=ActionResult(summary="typed"))
        engine.key_press = AsyncMock(return_value=ActionResult(summary='pressed "Enter"'))
        return engine

    @pytest.fixture
    def toolkit(self, session, interactions):
        return BrowserlessToolkit(
            BrowserlessConfig(token="test-token"), session=session, interactions=interactions
        )

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("BROWSERLESS_TOKEN", "from-env")

        toolkit = BrowserlessToolkit.from_settings(Settings(_env_file=None))

        assert toolkit.config.token == "from-env"
        assert toolkit.session.page is None

    @pytest.mark.asyncio
    async def test_navigate(self, toolkit, page):
        result = await toolkit.navigate("https://example.com/")

        assert result.ok
        assert result.url == LIVE_URL
        assert result.details["status"] == 200
        assert result.details["liveURL"] == LIVE_URL
        page.goto.assert_awaited_once_with(
            "https://example.com/", wait_until="networkidle", timeout=30_000
        )

    @pytest.mark.asyncio
    async def test_navigate_failure_returns_error(self, toolkit, page):
        page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

        result = await toolkit.navigate("https://nope.invalid/")

        assert not result.ok
        assert "ERR_NAME_NOT_RESOLVED" in result.error

    @pytest.mark.asyncio
    async def test_invoke_navigate(self, toolkit):
        envelope = await toolkit.invoke("navigate", {"url": "https://example.com"})

        assert envelope["summary"].startswith("navigated to https://example.com")
        assert envelope["url"] == LIVE_URL
        assert "error" not in envelope

    @pytest.mark.asyncio
    async def test_invoke_rejects_invalid_url(self, toolkit, page):
        envelope = await toolkit.invoke("navigate", {"url": "not a url"})

        assert envelope["summary"] == "invalid arguments for navigate"
        assert "error" in envelope
        assert envelope["details"]["errors"]
        page.goto.assert_not_called()

    @pytest.mark.asyncio
    async def test_invoke_rejects_missing_selector(self, toolkit, interactions):
        envelope = await toolkit.invoke("click", {})

        assert "error" in envelope
        interactions.click.assert_not_called()

    @pytest.mark.asyncio
    async def test_invoke_rejects_out_of_range_delay(self, toolkit, interactions):
        envelope = await toolkit.invoke("keyPress", {"key": "Enter", "delayMs": 5000})

        assert "error" in envelope
        interactions.key_press.assert_not_called()

    @pytest.mark.asyncio
    async def test_invoke_maps_camel_case_arguments(self, toolkit, interactions):
        await toolkit.invoke("keyPress", {"key": "Enter", "delayMs": 50})

        interactions.key_press.assert_awaited_once_with("Enter", 50)

    @pytest.mark.asyncio
    async def test_invoke_ignores_unknown_arguments(self, toolkit, interactions):
        envelope = await toolkit.invoke("click", {"selector": "#go", "force": True})

        assert "error" not in envelope
        interactions.click.assert_awaited_once_with("#go")

    @pytest.mark.asyncio
    async def test_invoke_unknown_tool(self, toolkit):
        envelope = await toolkit.invoke("screenshot", {})

        assert envelope["error"] == "unknown tool: screenshot"

    @pytest.mark.asyncio
    async def test_invoke_catalog_tools(self, toolkit):
        toolkit.catalog = MagicMock()
        toolkit.catalog.list_selectors = AsyncMock(return_value=ActionResult(summary="s"))
        toolkit.catalog.list_anchors = AsyncMock(return_value=ActionResult(summary="a"))
        toolkit.catalog.get_text = AsyncMock(return_value=ActionResult(summary="t"))
        toolkit.catalog.query_selectors = AsyncMock(return_value=ActionResult(summary="q"))

        await toolkit.invoke("listSelectors", {"max": 10, "nearViewportOnly": True})
        await toolkit.invoke("listAnchors", {})
        await toolkit.invoke("getText")
        await toolkit.invoke("querySelectors", {"query": "login"})

        toolkit.catalog.list_selectors.assert_awaited_once_with(10, True)
        toolkit.catalog.list_anchors.assert_awaited_once_with(None, False)
        toolkit.catalog.get_text.assert_awaited_once()
        toolkit.catalog.query_selectors.assert_awaited_once_with("login", None)

    @pytest.mark.asyncio
    async def test_invoke_captcha_wait(self, toolkit):
        toolkit.captcha = MagicMock()
        toolkit.captcha.wait = AsyncMock(return_value=ActionResult(summary="captcha detected"))

        envelope = await toolkit.invoke("captchaWait", {"timeoutMs": 0})

        toolkit.captcha.wait.assert_awaited_once_with(0)
        assert envelope == {"summary": "captcha detected"}

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_envelope(self, toolkit, interactions):
        interactions.type.side_effect = RuntimeError("boom")

        envelope = await toolkit.invoke("type", {"selector": "#q", "text": "hi"})

        assert envelope["error"] == "boom"
        assert envelope["url"] == "https://example.com/"

    @pytest.mark.asyncio
    async def test_connection_error_propagates(self, toolkit, session):
        session.ensure_page.side_effect = BrowserlessConnectionError("Missing Browserless token")

        with pytest.raises(BrowserlessConnectionError):
            await toolkit.invoke("navigate", {"url": "https://example.com"})

    @pytest.mark.asyncio
    async def test_session_end(self, toolkit, session):
        envelope = await toolkit.invoke("sessionEnd", {})

        assert envelope == {
            "summary": "browser session closed",
            "url": "",
            "details": {"hadSession": True},
        }

    @pytest.mark.asyncio
    async def test_session_end_twice(self, toolkit, session):
        session.reset.side_effect = [True, False]

        first = await toolkit.session_end()
        second = await toolkit.session_end()

        assert first.summary == "browser session closed"
        assert second.summary == "no active browser session"
        assert second.ok


class TestToolkitWithoutToken:
    """End to end through a real BrowserSession with no token configured."""

    @pytest.mark.asyncio
    async def test_empty_token_raises_and_opens_nothing(self):
        factory = MagicMock()
        config = BrowserlessConfig(token="")
        toolkit = BrowserlessToolkit(
            config, session=BrowserSession(config, playwright_factory=factory)
        )

        with pytest.raises(BrowserlessConnectionError):
            await toolkit.invoke("navigate", {"url": "https://example.com"})

        factory.assert_not_called()
        assert toolkit.session.page is None

    @pytest.mark.asyncio
    async def test_session_end_without_session(self):
        toolkit = BrowserlessToolkit(BrowserlessConfig(token=""))

        envelope = await toolkit.invoke("sessionEnd")

        assert envelope["summary"] == "no active browser session"
        assert envelope["details"] == {"hadSession": False}
