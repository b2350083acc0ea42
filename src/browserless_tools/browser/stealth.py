"""Init-script patches for common automation fingerprinting surfaces.

Best effort only: these patches remove the most obvious headless signals but
make no promise about passing any particular bot detector.
"""

import json

import structlog
from playwright.async_api import BrowserContext

logger = structlog.get_logger(__name__)

# WebGL UNMASKED_VENDOR_WEBGL / UNMASKED_RENDERER_WEBGL
UNMASKED_VENDOR = 37445
UNMASKED_RENDERER = 37446

SPOOFED_WEBGL_VENDOR = "Google Inc."
SPOOFED_WEBGL_RENDERER = "ANGLE (NVIDIA, NVIDIA GeForce, D3D11)"

_STEALTH_TEMPLATE = """
(() => {
  const languages = __LANGUAGES__;
  const pick = (items) => items[Math.floor(Math.random() * items.length)];
  const define = (target, prop, value) => {
    try {
      Object.defineProperty(target, prop, { get: () => value, configurable: true });
    } catch (e) {}
  };

  define(navigator, 'webdriver', false);

  try {
    if (!window.chrome) {
      window.chrome = { runtime: {} };
    } else if (!window.chrome.runtime) {
      window.chrome.runtime = {};
    }
  } catch (e) {}

  define(navigator, 'languages', languages);
  define(navigator, 'plugins', [1, 2, 3, 4, 5]);
  define(navigator, 'hardwareConcurrency', Math.floor(Math.random() * 9) + 4);
  define(navigator, 'deviceMemory', pick([4, 8, 16]));
  define(navigator, 'platform', pick(['Win32', 'MacIntel', 'Linux x86_64']));

  try {
    const permissions = navigator.permissions;
    if (permissions && permissions.query) {
      const originalQuery = permissions.query.bind(permissions);
      permissions.query = (parameters) => {
        if (parameters && parameters.name === 'notifications') {
          return Promise.resolve({ state: 'denied', onchange: null });
        }
        return originalQuery(parameters);
      };
    }
  } catch (e) {}

  const patchWebGL = (proto) => {
    if (!proto || !proto.getParameter) return;
    const getParameter = proto.getParameter;
    proto.getParameter = function (parameter) {
      if (parameter === __VENDOR_CODE__) return __VENDOR__;
      if (parameter === __RENDERER_CODE__) return __RENDERER__;
      return getParameter.call(this, parameter);
    };
  };
  try { patchWebGL(window.WebGLRenderingContext && WebGLRenderingContext.prototype); } catch (e) {}
  try { patchWebGL(window.WebGL2RenderingContext && WebGL2RenderingContext.prototype); } catch (e) {}
})();
"""


def languages_for(locale: str) -> list[str]:
    """``navigator.languages`` value for a locale, e.g. en-GB -> [en-GB, en]."""
    primary = locale.split("-")[0]
    return [locale, primary] if primary and primary != locale else [locale]


def build_stealth_script(locale: str = "en-US") -> str:
    """Render the init script for a given locale."""
    replacements = {
        "__LANGUAGES__": json.dumps(languages_for(locale)),
        "__VENDOR_CODE__": str(UNMASKED_VENDOR),
        "__RENDERER_CODE__": str(UNMASKED_RENDERER),
        "__VENDOR__": json.dumps(SPOOFED_WEBGL_VENDOR),
        "__RENDERER__": json.dumps(SPOOFED_WEBGL_RENDERER),
    }
    script = _STEALTH_TEMPLATE
    for placeholder, value in replacements.items():
        script = script.replace(placeholder, value)
    return script


class StealthInjector:
    """Registers the stealth init script once per browser context."""

    def __init__(self, locale: str = "en-US") -> None:
        self.script = build_stealth_script(locale)
        self._patched: set[int] = set()

    async def apply(self, context: BrowserContext) -> bool:
        """Add the init script to ``context`` unless already done.

        Returns:
            bool: True if the script was registered by this call
        """
        if id(context) in self._patched:
            return False
        await context.add_init_script(script=self.script)
        self._patched.add(id(context))
        logger.debug("stealth_init_script_applied")
        return True

    def forget(self) -> None:
        """Drop bookkeeping after the owning session is torn down."""
        self._patched.clear()
