"""Configuration management using Pydantic Settings.

Settings are loaded from environment variables (or a local .env file) and
turned into an immutable ``BrowserlessConfig`` that the browser session is
constructed with. Never hardcode the Browserless token.
"""

from enum import Enum
from functools import lru_cache
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENDPOINT = "wss://production-sfo.browserless.io"
DEFAULT_LOCALE = "en-US"
DEFAULT_TIMEZONE = "America/Los_Angeles"


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class BrowserlessConfig(BaseModel):
    """Immutable connection and fingerprint settings for one browser session.

    Accepts both snake_case and camelCase keys so that a plain config object
    such as ``{"token": ..., "blockAds": True}`` can be validated directly.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    token: str = Field(default="", description="Browserless API token")
    route: str | None = Field(default=None, description="Explicit WebSocket route")
    stealth: bool = Field(default=True, description="Enable stealth mode and init-script patches")
    stealth_route: bool = Field(default=False, description="Use the chromium/stealth route")
    block_ads: bool = Field(default=False, description="Ask Browserless to block ads")
    headless: bool = Field(default=True, description="Run the remote browser headless")
    locale: str = Field(default=DEFAULT_LOCALE, description="Browser locale and Accept-Language")
    timezone: str = Field(default=DEFAULT_TIMEZONE, description="Browser timezone id")
    user_agent: str | None = Field(default=None, description="User-agent override")
    endpoint: str = Field(default=DEFAULT_ENDPOINT, description="Browserless WebSocket base URL")

    @property
    def resolved_route(self) -> str:
        """Route used for the CDP WebSocket connection."""
        if self.route:
            return self.route.strip("/")
        return "chromium/stealth" if self.stealth_route else "chromium"

    def ws_endpoint(self) -> str:
        """Build the CDP WebSocket URL including the query flags."""
        params: dict[str, str] = {}
        if self.token:
            params["token"] = self.token
        if self.stealth:
            params["stealth"] = "true"
        if self.block_ads:
            params["blockAds"] = "true"
        if not self.headless:
            params["headless"] = "false"
        base = self.endpoint.rstrip("/")
        return f"{base}/{self.resolved_route}?{urlencode(params)}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are loaded from environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application Settings
    APP_NAME: str = Field(default="browserless-tools", description="Application name")
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/staging/production)",
    )
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Browserless Settings
    BROWSERLESS_TOKEN: str = Field(default="", description="Browserless API token")
    BROWSERLESS_ENDPOINT: str = Field(
        default=DEFAULT_ENDPOINT, description="Browserless WebSocket base URL"
    )
    BROWSERLESS_ROUTE: str | None = Field(default=None, description="Explicit route override")
    BROWSERLESS_STEALTH: bool = Field(default=True, description="Enable stealth patches")
    BROWSERLESS_STEALTH_ROUTE: bool = Field(
        default=False, description="Connect through the chromium/stealth route"
    )
    BROWSERLESS_BLOCK_ADS: bool = Field(default=False, description="Block ads remotely")
    BROWSERLESS_HEADLESS: bool = Field(default=True, description="Headless remote browser")
    BROWSERLESS_LOCALE: str = Field(default=DEFAULT_LOCALE, description="Browser locale")
    BROWSERLESS_TIMEZONE: str = Field(default=DEFAULT_TIMEZONE, description="Browser timezone")
    BROWSERLESS_USER_AGENT: str | None = Field(
        default=None, description="User-agent override (random pool when unset)"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == Environment.PRODUCTION

    def browserless_config(self) -> BrowserlessConfig:
        """Build the immutable session config from these settings."""
        return BrowserlessConfig(
            token=self.BROWSERLESS_TOKEN,
            route=self.BROWSERLESS_ROUTE,
            stealth=self.BROWSERLESS_STEALTH,
            stealth_route=self.BROWSERLESS_STEALTH_ROUTE,
            block_ads=self.BROWSERLESS_BLOCK_ADS,
            headless=self.BROWSERLESS_HEADLESS,
            locale=self.BROWSERLESS_LOCALE.strip() or DEFAULT_LOCALE,
            timezone=self.BROWSERLESS_TIMEZONE.strip() or DEFAULT_TIMEZONE,
            user_agent=self.BROWSERLESS_USER_AGENT or None,
            endpoint=self.BROWSERLESS_ENDPOINT,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
