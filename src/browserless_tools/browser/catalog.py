"""Ranked catalogs of actionable elements, links and visible text.

The in-page scripts in ``scripts.py`` scan the DOM and build unique
selectors; ranking, deduplication and truncation happen here so they can be
tested without a browser.
"""

from collections.abc import Callable, Iterable
from typing import TypeVar

import structlog
from pydantic import TypeAdapter

from browserless_tools.browser.scripts import ANCHOR_CATALOG, SELECTOR_CATALOG, VISIBLE_TEXT
from browserless_tools.browser.session import BrowserSession
from browserless_tools.models import ActionResult, AnchorDescriptor, ElementDescriptor

logger = structlog.get_logger(__name__)

T = TypeVar("T")

MAX_ITEMS = 200
DEFAULT_SELECTOR_LIMIT = 80
DEFAULT_ANCHOR_LIMIT = 100
DEFAULT_QUERY_LIMIT = 40
SELECTOR_MAX_DEPTH = 5
SCAN_CAP = 2000

_elements_adapter = TypeAdapter(list[ElementDescriptor])
_anchors_adapter = TypeAdapter(list[AnchorDescriptor])


def clamp_limit(value: int | None, default: int) -> int:
    """Clamp a requested item count into 1..MAX_ITEMS."""
    if value is None:
        return default
    return max(1, min(MAX_ITEMS, int(value)))


def selector_score(item: ElementDescriptor) -> int:
    """(visible*4 + inViewport*3 + hasRole + hasHref) * area."""
    weight = (
        (4 if item.visible else 0)
        + (3 if item.in_viewport else 0)
        + (1 if item.role else 0)
        + (1 if item.href else 0)
    )
    return weight * max(1, item.bbox.area)


def anchor_score(item: AnchorDescriptor) -> int:
    """visible*3 + inViewport*2 + hasText + internal."""
    has_text = bool(item.text) and item.text != item.href
    return (
        (3 if item.visible else 0)
        + (2 if item.in_viewport else 0)
        + (1 if has_text else 0)
        + (0 if item.external else 1)
    )


def rank_unique(
    items: Iterable[T],
    score: Callable[[T], int],
    key: Callable[[T], tuple[str, str]],
    limit: int,
) -> list[T]:
    """Sort by descending score (stable), drop duplicate keys, truncate."""
    ranked = sorted(items, key=score, reverse=True)
    seen: set[tuple[str, str]] = set()
    out: list[T] = []
    for item in ranked:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        out.append(item)
        if len(out) >= limit:
            break
    return out


def rank_selectors(items: Iterable[ElementDescriptor], limit: int) -> list[ElementDescriptor]:
    return rank_unique(items, selector_score, lambda it: (it.selector, it.label), limit)


def rank_anchors(items: Iterable[AnchorDescriptor], limit: int) -> list[AnchorDescriptor]:
    return rank_unique(
        (it for it in items if it.href),
        anchor_score,
        lambda it: (it.href, it.text),
        limit,
    )


def match_selectors(
    items: Iterable[ElementDescriptor], query: str, limit: int
) -> list[ElementDescriptor]:
    """Keep entries mentioning ``query``; label hits outrank selector/href hits."""
    needle = query.strip().lower()
    if not needle:
        return []

    def score(item: ElementDescriptor) -> int:
        value = 0
        if needle in item.label.lower():
            value += 4
        if needle in item.selector.lower():
            value += 2
        if item.href and needle in item.href.lower():
            value += 1
        return value

    hits = [item for item in items if score(item) > 0]
    return rank_unique(hits, score, lambda it: (it.selector, it.label), limit)


class DomCatalogExtractor:
    """Builds selector, anchor and text catalogs for the session's page."""

    def __init__(self, session: BrowserSession) -> None:
        self.session = session

    async def collect_selectors(self, near_viewport_only: bool = False) -> list[ElementDescriptor]:
        page = await self.session.ensure_page()
        raw = await SELECTOR_CATALOG.run(
            page,
            {
                "nearViewportOnly": near_viewport_only,
                "maxDepth": SELECTOR_MAX_DEPTH,
                "scanCap": SCAN_CAP,
            },
        )
        return _elements_adapter.validate_python(raw or [])

    async def collect_anchors(self, near_viewport_only: bool = False) -> list[AnchorDescriptor]:
        page = await self.session.ensure_page()
        raw = await ANCHOR_CATALOG.run(
            page,
            {
                "nearViewportOnly": near_viewport_only,
                "maxDepth": SELECTOR_MAX_DEPTH,
                "scanCap": SCAN_CAP,
            },
        )
        return _anchors_adapter.validate_python(raw or [])

    async def list_selectors(
        self, max_items: int | None = None, near_viewport_only: bool = False
    ) -> ActionResult:
        """Ranked catalog of actionable elements.

        Args:
            max_items: Number of entries to return (1-200, default 80)
            near_viewport_only: Only include elements intersecting the viewport

        Returns:
            ActionResult: ``details.selectors`` holds the catalog
        """
        page = await self.session.ensure_page()
        limit = clamp_limit(max_items, DEFAULT_SELECTOR_LIMIT)
        try:
            catalog = rank_selectors(await self.collect_selectors(near_viewport_only), limit)
        except Exception as e:
            logger.error("selector_catalog_failed", error=str(e), error_type=type(e).__name__)
            return ActionResult(
                summary=f"selectors catalog error: {e}",
                url=await self.session.observer_url(page),
                error=str(e),
            )

        logger.info("selector_catalog_built", count=len(catalog), limit=limit)
        return ActionResult(
            summary=f"selectors catalog ({len(catalog)})",
            url=await self.session.observer_url(page),
            details={
                "selectors": [it.model_dump(by_alias=True, exclude_none=True) for it in catalog],
                "currentUrl": page.url,
                "scriptVersion": SELECTOR_CATALOG.version,
            },
        )

    async def list_anchors(
        self, max_items: int | None = None, near_viewport_only: bool = False
    ) -> ActionResult:
        """Ranked, deduplicated links on the current page."""
        page = await self.session.ensure_page()
        limit = clamp_limit(max_items, DEFAULT_ANCHOR_LIMIT)
        try:
            anchors = rank_anchors(await self.collect_anchors(near_viewport_only), limit)
        except Exception as e:
            logger.error("anchor_catalog_failed", error=str(e), error_type=type(e).__name__)
            return ActionResult(
                summary=f"anchors catalog error: {e}",
                url=await self.session.observer_url(page),
                error=str(e),
            )

        logger.info("anchor_catalog_built", count=len(anchors), limit=limit)
        return ActionResult(
            summary=f"anchors ({len(anchors)})",
            url=await self.session.observer_url(page),
            details={
                "anchors": [it.model_dump(by_alias=True, exclude_none=True) for it in anchors],
                "currentUrl": page.url,
                "scriptVersion": ANCHOR_CATALOG.version,
            },
        )

    async def query_selectors(self, query: str, max_items: int | None = None) -> ActionResult:
        """Search the actionable-element catalog by keyword."""
        page = await self.session.ensure_page()
        limit = clamp_limit(max_items, DEFAULT_QUERY_LIMIT)
        try:
            matches = match_selectors(await self.collect_selectors(), query, limit)
        except Exception as e:
            logger.error("selector_query_failed", query=query, error=str(e))
            return ActionResult(
                summary=f"selector query error: {e}",
                url=await self.session.observer_url(page),
                error=str(e),
            )

        return ActionResult(
            summary=f"selector query matches ({len(matches)})",
            url=await self.session.observer_url(page),
            details={
                "query": query,
                "matches": [it.model_dump(by_alias=True, exclude_none=True) for it in matches],
                "currentUrl": page.url,
            },
        )

    async def visible_text(self) -> str:
        """Visible text in document order; empty string on any failure."""
        page = await self.session.ensure_page()
        try:
            text = await VISIBLE_TEXT.run(page)
        except Exception as e:
            logger.warning("visible_text_failed", error=str(e))
            return ""
        return text if isinstance(text, str) else ""

    async def get_text(self) -> ActionResult:
        page = await self.session.ensure_page()
        text = await self.visible_text()
        return ActionResult(
            summary=f"extracted {len(text)} characters of text",
            url=await self.session.observer_url(page),
            details={"text": text, "currentUrl": page.url},
        )
