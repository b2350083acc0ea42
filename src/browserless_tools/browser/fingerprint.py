"""Randomized browser-context fingerprints.

A fresh context gets a viewport, user agent, scale factor and touch flag drawn
from small realistic pools so consecutive sessions do not look identical.
"""

import random
from dataclasses import dataclass
from typing import Any

from browserless_tools.core.config import BrowserlessConfig

VIEWPORT_CANDIDATES: tuple[dict[str, int], ...] = (
    {"width": 1366, "height": 768},
    {"width": 1440, "height": 900},
    {"width": 1536, "height": 864},
    {"width": 1920, "height": 1080},
    {"width": 1280, "height": 800},
)

USER_AGENTS: tuple[str, ...] = (
    # Chrome stable on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36",
    # Chrome stable on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_5) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36",
    # Chrome stable on Linux
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36",
)

DEVICE_SCALE_FACTORS: tuple[float, ...] = (1, 1.25, 1.5, 2)
TOUCH_PROBABILITY = 0.2


@dataclass(frozen=True)
class Fingerprint:
    viewport: dict[str, int]
    user_agent: str
    device_scale_factor: float
    has_touch: bool

    @classmethod
    def random(cls, config: BrowserlessConfig, rng: random.Random | None = None) -> "Fingerprint":
        """Draw a fingerprint; ``config.user_agent`` wins over the pool."""
        rng = rng or random.Random()
        return cls(
            viewport=dict(rng.choice(VIEWPORT_CANDIDATES)),
            user_agent=config.user_agent or rng.choice(USER_AGENTS),
            device_scale_factor=rng.choice(DEVICE_SCALE_FACTORS),
            has_touch=rng.random() < TOUCH_PROBABILITY,
        )

    @property
    def platform(self) -> str:
        """Client-hint platform matching the user agent."""
        if "Macintosh" in self.user_agent:
            return "macOS"
        if "Linux" in self.user_agent:
            return "Linux"
        return "Windows"

    def context_options(self, config: BrowserlessConfig) -> dict[str, Any]:
        """Keyword arguments for ``Browser.new_context``."""
        return {
            "user_agent": self.user_agent,
            "locale": config.locale,
            "timezone_id": config.timezone,
            "viewport": self.viewport,
            "device_scale_factor": self.device_scale_factor,
            "has_touch": self.has_touch,
            "extra_http_headers": {
                "Accept-Language": config.locale,
                "Sec-CH-UA-Platform": f'"{self.platform}"',
            },
        }
