"""In-page JavaScript evaluated through ``page.evaluate``.

Every script is a self-contained arrow function with a documented argument
object and return shape. The Python side validates the return value with the
pydantic models in ``browserless_tools.models``; bump ``SCRIPT_VERSION``
whenever a return shape changes.
"""

from dataclasses import dataclass
from typing import Any

from playwright.async_api import Frame, Page

SCRIPT_VERSION = "3"

# Candidate set for the actionable-element catalog
ACTIONABLE_SELECTOR = (
    'a, button, [role="button"], input, textarea, select, [onclick], '
    '[data-testid], [aria-label], [contenteditable=""], [contenteditable="true"]'
)

_HELPERS = r"""
  const isVisible = (el) => {
    if (!(el instanceof Element)) return false;
    const style = window.getComputedStyle(el);
    if (style.display === 'none' || style.visibility === 'hidden' || Number(style.opacity || '1') === 0) return false;
    const rect = el.getBoundingClientRect();
    return rect.width > 0 && rect.height > 0;
  };

  const inViewport = (el) => {
    const r = el.getBoundingClientRect();
    const vh = window.innerHeight || document.documentElement.clientHeight;
    const vw = window.innerWidth || document.documentElement.clientWidth;
    return r.bottom >= 0 && r.right >= 0 && r.top <= vh && r.left <= vw;
  };

  const textSnippet = (el, max) => (el.textContent || '').replace(/\s+/g, ' ').trim().slice(0, max);

  const box = (el) => {
    const r = el.getBoundingClientRect();
    return { x: Math.round(r.x), y: Math.round(r.y), w: Math.round(r.width), h: Math.round(r.height) };
  };

  const escapeAttr = (v) => String(v).replace(/\\/g, '\\\\').replace(/"/g, '\\"');

  const isUnique = (selector, el) => {
    try {
      const matches = document.querySelectorAll(selector);
      return matches.length === 1 && matches[0] === el;
    } catch (e) {
      return false;
    }
  };

  // id -> data-testid -> aria-label -> name -> up to two classes -> tag
  const simpleSelector = (el) => {
    const tag = el.tagName.toLowerCase();
    if (el.id) return '#' + CSS.escape(el.id);
    const testid = el.getAttribute('data-testid');
    if (testid) return `[data-testid="${escapeAttr(testid)}"]`;
    const aria = el.getAttribute('aria-label');
    if (aria) return `[aria-label="${escapeAttr(aria)}"]`;
    const name = el.getAttribute('name');
    if (name) return `${tag}[name="${escapeAttr(name)}"]`;
    const raw = typeof el.className === 'string' ? el.className : '';
    const classes = raw.trim().split(/\s+/).filter(Boolean).slice(0, 2);
    if (classes.length > 0) return tag + '.' + classes.map((c) => CSS.escape(c)).join('.');
    return tag;
  };

  const nthOfType = (el) => {
    const parent = el.parentElement;
    if (!parent) return '';
    const same = Array.from(parent.children).filter((c) => c.tagName === el.tagName);
    return same.length > 1 ? `:nth-of-type(${same.indexOf(el) + 1})` : '';
  };

  // Shortest selector matching exactly this element, or null when the
  // element is still ambiguous after maxDepth ancestor segments.
  const uniqueSelector = (el, maxDepth) => {
    const own = simpleSelector(el);
    if (isUnique(own, el)) return own;
    const segments = [];
    let node = el;
    while (node && node.nodeType === 1 && segments.length < maxDepth) {
      const base = simpleSelector(node);
      if (node !== el && node.id && document.querySelectorAll(base).length === 1) {
        segments.unshift(base);
        const anchored = segments.join(' > ');
        return isUnique(anchored, el) ? anchored : null;
      }
      segments.unshift(base + nthOfType(node));
      const path = segments.join(' > ');
      if (isUnique(path, el)) return path;
      node = node.parentElement;
    }
    return null;
  };
"""

SELECTOR_CATALOG_JS = (
    "({ nearViewportOnly, maxDepth, scanCap }) => {\n"
    + _HELPERS
    + r"""
  const out = [];
  for (const el of document.querySelectorAll(__CANDIDATES__)) {
    if (out.length >= scanCap) break;
    if (!isVisible(el)) continue;
    const inView = inViewport(el);
    if (nearViewportOnly && !inView) continue;
    const selector = uniqueSelector(el, maxDepth);
    if (!selector) continue;
    const label = textSnippet(el, 80)
      || el.getAttribute('aria-label')
      || el.getAttribute('placeholder')
      || el.getAttribute('title')
      || el.getAttribute('data-testid')
      || el.getAttribute('name')
      || selector;
    out.push({
      selector,
      label,
      tag: el.tagName.toLowerCase(),
      role: el.getAttribute('role') || null,
      href: (typeof el.href === 'string' && el.href) ? el.href : null,
      type: el.getAttribute('type') || null,
      visible: true,
      inViewport: inView,
      bbox: box(el),
    });
  }
  return out;
}
"""
).replace("__CANDIDATES__", repr(ACTIONABLE_SELECTOR))

ANCHOR_CATALOG_JS = (
    "({ nearViewportOnly, maxDepth, scanCap }) => {\n"
    + _HELPERS
    + r"""
  const out = [];
  for (const a of document.querySelectorAll('a[href]')) {
    if (out.length >= scanCap) break;
    let href = '';
    try { href = a.href || ''; } catch (e) { href = ''; }
    if (!href) continue;
    if (!isVisible(a)) continue;
    const inView = inViewport(a);
    if (nearViewportOnly && !inView) continue;
    const selector = uniqueSelector(a, maxDepth);
    if (!selector) continue;
    const rel = (a.getAttribute('rel') || '').trim() || null;
    const title = a.getAttribute('title') || null;
    const aria = a.getAttribute('aria-label') || null;
    const text = textSnippet(a, 200);
    let external = false;
    try { external = new URL(href, location.href).host !== location.host; } catch (e) { external = false; }
    out.push({
      selector,
      href,
      text: text || aria || title || href,
      title,
      ariaLabel: aria,
      rel,
      target: a.getAttribute('target') || null,
      nofollow: rel !== null && /(^|\s)nofollow(\s|$)/i.test(rel),
      external,
      visible: true,
      inViewport: inView,
      bbox: box(a),
    });
  }
  return out;
}
"""
)

VISIBLE_TEXT_JS = r"""
() => {
  const root = document.body;
  if (!root) return '';
  const SKIP = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE']);
  const cache = new Map();
  const hidden = (el) => {
    if (cache.has(el)) return cache.get(el);
    let result = false;
    if (SKIP.has(el.tagName)) {
      result = true;
    } else {
      const style = window.getComputedStyle(el);
      if (style.display === 'none' || style.visibility === 'hidden' || Number(style.opacity || '1') === 0) {
        result = true;
      } else if (el !== root && el.parentElement) {
        result = hidden(el.parentElement);
      }
    }
    cache.set(el, result);
    return result;
  };
  const walker = document.createTreeWalker(root, NodeFilter.SHOW_TEXT, {
    acceptNode: (node) => {
      const parent = node.parentElement;
      if (!parent || hidden(parent)) return NodeFilter.FILTER_REJECT;
      return (node.textContent || '').trim() ? NodeFilter.FILTER_ACCEPT : NodeFilter.FILTER_REJECT;
    },
  });
  const parts = [];
  while (walker.nextNode()) {
    parts.push((walker.currentNode.textContent || '').replace(/\s+/g, ' ').trim());
  }
  return parts.join('\n');
}
"""

JS_CLICK_JS = r"""
(selector) => {
  const el = document.querySelector(selector);
  if (!el) throw new Error('element not found');
  el.click();
  return true;
}
"""

# Throws unless the element (or its focused descendant) accepts keyboard text
ASSERT_EDITABLE_JS = r"""
(el) => {
  const editable = (node) => !!node && (
    node.isContentEditable
    || (node.tagName === 'TEXTAREA' && !node.readOnly && !node.disabled)
    || (node.tagName === 'INPUT' && !node.readOnly && !node.disabled)
  );
  const active = document.activeElement;
  if (editable(el) || (active && el.contains(active) && editable(active))) return true;
  throw new Error('element is not editable');
}
"""

SET_VALUE_JS = r"""
(el, value) => {
  if (el.isContentEditable) {
    el.innerText = value;
    el.dispatchEvent(new Event('input', { bubbles: true }));
    return 'innerText';
  }
  if ('value' in el) {
    el.value = value;
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
    return 'value';
  }
  return 'none';
}
"""


@dataclass(frozen=True)
class PageScript:
    """A named, versioned script with its argument contract."""

    name: str
    source: str
    version: str = SCRIPT_VERSION

    async def run(self, target: Page | Frame, arg: Any = None) -> Any:
        if arg is None:
            return await target.evaluate(self.source)
        return await target.evaluate(self.source, arg)


SELECTOR_CATALOG = PageScript("selector_catalog", SELECTOR_CATALOG_JS)
ANCHOR_CATALOG = PageScript("anchor_catalog", ANCHOR_CATALOG_JS)
VISIBLE_TEXT = PageScript("visible_text", VISIBLE_TEXT_JS)
