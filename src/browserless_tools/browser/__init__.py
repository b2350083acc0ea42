"""Browser automation layer for browserless-tools.

Drives a remote Browserless Chrome over CDP with Playwright.

Main Components:
- BrowserSession: Lazily connects and owns the browser, page and live URL
- StealthInjector: Init-script patches for fingerprinting surfaces
- InteractionEngine: Click/type/key-press with fallback strategies
- DomCatalogExtractor: Ranked selector, anchor and text catalogs
- CaptchaWatcher: Races the CAPTCHA CDP event against a deadline

Example Usage:
    ```python
    from browserless_tools.browser import BrowserSession, DomCatalogExtractor
    from browserless_tools.core.config import BrowserlessConfig

    async def links(url: str):
        async with BrowserSession(BrowserlessConfig(token="...")) as session:
            page = await session.ensure_page()
            await page.goto(url)
            return await DomCatalogExtractor(session).list_anchors(max_items=20)
    ```
"""

from browserless_tools.browser.captcha import CaptchaWatcher
from browserless_tools.browser.catalog import DomCatalogExtractor
from browserless_tools.browser.errors import (
    BrowserlessConnectionError,
    BrowserlessError,
    ElementNotActionableError,
    LiveURLUnavailableError,
)
from browserless_tools.browser.fingerprint import Fingerprint
from browserless_tools.browser.interaction import InteractionEngine
from browserless_tools.browser.session import BrowserSession
from browserless_tools.browser.stealth import StealthInjector

__all__ = [
    # Session
    "BrowserSession",
    "Fingerprint",
    "StealthInjector",
    # Operations
    "CaptchaWatcher",
    "DomCatalogExtractor",
    "InteractionEngine",
    # Errors
    "BrowserlessError",
    "BrowserlessConnectionError",
    "ElementNotActionableError",
    "LiveURLUnavailableError",
]
