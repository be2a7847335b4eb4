"""
wordforge_bridge.settings - Centralized Configuration

Loads from .env files and environment variables using pydantic-settings.

Site credentials use the standard WORDPRESS_* names (no prefix) via aliases;
everything else is WORDFORGE_* prefixed.

Usage:
    >>> from wordforge_bridge.settings import get_settings
    >>> settings = get_settings()
    >>> settings.abilities_url
    'http://localhost:8888/wp-json/wp-abilities/v1'

    >>> async with settings.build_client() as client:
    ...     tools = await load_tools(client, settings.exclude_categories)
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

if TYPE_CHECKING:
    from wordforge_bridge.integrations.abilities import DiscoveryClient


class BridgeSettings(BaseSettings):
    """Bridge configuration loaded from .env / environment variables.

    All WORDFORGE_* prefixed env vars are loaded automatically.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WORDFORGE_",
        extra="ignore",
        populate_by_name=True,
    )

    # -- Site (standard names via alias, no WORDFORGE_ prefix) -----------------
    abilities_url: str = Field(
        default="http://localhost:8888/wp-json/wp-abilities/v1",
        alias="WORDPRESS_ABILITIES_URL",
    )
    username: str | None = Field(default=None, alias="WORDPRESS_USERNAME")
    app_password: SecretStr | None = Field(default=None, alias="WORDPRESS_APP_PASSWORD")

    # -- Tool loading ----------------------------------------------------------
    # JSON list or comma-separated: "woocommerce,prompts"
    exclude_categories: Annotated[list[str], NoDecode] = []
    validate_arguments: bool = True

    # -- HTTP ------------------------------------------------------------------
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=2, ge=0)
    initial_backoff_ms: int = Field(default=1000, ge=0)
    max_backoff_ms: int = Field(default=10000, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"
    debug: bool = False

    # -- Validators ------------------------------------------------------------

    @field_validator("exclude_categories", mode="before")
    @classmethod
    def _split_categories(cls, value: Any) -> Any:
        """Accept a JSON array or a comma-separated string."""
        if not isinstance(value, str):
            return value
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [part.strip() for part in value.split(",") if part.strip()]

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level

    # -- Helpers ---------------------------------------------------------------

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug is on, otherwise log_level."""
        return "DEBUG" if self.debug else self.log_level

    def has_credentials(self) -> bool:
        """Return True if both basic-auth parts are configured."""
        return bool(self.username and self.app_password)

    def build_client(self, **kwargs: Any) -> DiscoveryClient:
        """Build a DiscoveryClient from these settings; kwargs override."""
        from wordforge_bridge.integrations.abilities import DiscoveryClient

        return DiscoveryClient.from_settings(self, **kwargs)


# ---------------------------------------------------------------------------
# Singleton accessor
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_settings() -> BridgeSettings:
    """Return the cached BridgeSettings singleton."""
    return BridgeSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
