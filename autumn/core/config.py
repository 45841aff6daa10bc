"""
Autumn Moderation Bot - Configuration Module
============================================

Centralized configuration management with environment variable validation.

DESIGN:
    One Config dataclass built from environment variables at startup.
    Only the bot token is required; storage and cache default to a local
    SQLite file and an in-process TTL cache so the bot runs without any
    external services. Per-guild moderation policy lives in the database,
    not here.

    Key patterns:
    - Singleton via get_config()
    - Validation happens once at load time, not on every access
"""

import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Constants
# =============================================================================

DEFAULT_DATABASE_URL = "sqlite:///data/autumn.db"
CACHE_BACKENDS = ("memory", "redis", "none")


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    Attributes:
        discord_token: Discord bot authentication token.
        database_url: sqlite:/// path or postgres:// DSN.
        redis_url: Redis URL, required when cache_backend is "redis".
        cache_backend: One of memory, redis, none.
        cache_prefix: Namespace prepended to every cache key.
        config_cache_ttl: Seconds a cached guild config stays valid.
        command_prefix: Prefix for text commands (slash commands ignore it).
        dev_guild_id: If set, app commands sync to this guild only.
        error_webhook_url: Discord webhook receiving error logs.
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str

    # -------------------------------------------------------------------------
    # Optional: Storage
    # -------------------------------------------------------------------------

    database_url: str = DEFAULT_DATABASE_URL

    # -------------------------------------------------------------------------
    # Optional: Cache
    # -------------------------------------------------------------------------

    redis_url: Optional[str] = None
    cache_backend: str = "memory"
    cache_prefix: str = "autumn"
    config_cache_ttl: int = 900

    # -------------------------------------------------------------------------
    # Optional: Bot
    # -------------------------------------------------------------------------

    command_prefix: str = "!"
    dev_guild_id: Optional[int] = None
    error_webhook_url: Optional[str] = None

    @property
    def uses_postgres(self) -> bool:
        return self.database_url.startswith(("postgres://", "postgresql://"))

    @property
    def sqlite_path(self) -> str:
        """Filesystem path of the SQLite database (empty for Postgres)."""
        if self.uses_postgres:
            return ""
        return self.database_url.removeprefix("sqlite:///")


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Standardized color palette for Discord embeds."""

    GREEN = 0x1F5E2E
    GOLD = 0xE6B84A
    RED = 0xDC3545
    BLUE = 0x3498DB
    ORANGE = 0xFF9800

    SUCCESS = GREEN
    ERROR = RED
    WARNING = GOLD
    INFO = BLUE

    # Case log colors by action family
    LOG_NEGATIVE = RED      # bans, kicks, purges
    LOG_WARNING = GOLD      # warnings, timeouts, filter hits
    LOG_POSITIVE = GREEN    # unbans, untimeouts, unwarns
    LOG_AUTO = ORANGE       # automatic escalation


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int_optional(value: Optional[str], name: str) -> Optional[int]:
    """
    Parse optional string to integer.

    Raises:
        ConfigValidationError: If value is set but not a valid integer.
    """
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigValidationError(f"Invalid integer for {name}: {value}")


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range clamping.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        from autumn.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        from autumn.core.logger import logger
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        from autumn.core.logger import logger
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """Return the URL if it looks like http(s), None otherwise."""
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from autumn.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


def _validate_database_url(value: str) -> str:
    if value.startswith(("sqlite:///", "postgres://", "postgresql://")):
        return value
    raise ConfigValidationError(
        f"DATABASE_URL must start with sqlite:///, postgres:// or postgresql://, got: {value}"
    )


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing or invalid.
    """
    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        raise ConfigValidationError("Missing required environment variables: DISCORD_TOKEN")

    database_url = _validate_database_url(os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL)

    cache_backend = (os.getenv("CACHE_BACKEND") or "memory").strip().lower()
    if cache_backend not in CACHE_BACKENDS:
        raise ConfigValidationError(
            f"CACHE_BACKEND must be one of {', '.join(CACHE_BACKENDS)}, got: {cache_backend}"
        )

    redis_url = os.getenv("REDIS_URL") or None
    if cache_backend == "redis" and not redis_url:
        raise ConfigValidationError("CACHE_BACKEND=redis requires REDIS_URL")

    return Config(
        discord_token=discord_token,
        database_url=database_url,
        redis_url=redis_url,
        cache_backend=cache_backend,
        cache_prefix=os.getenv("CACHE_PREFIX") or "autumn",
        config_cache_ttl=_parse_int_with_default(
            os.getenv("CONFIG_CACHE_TTL"), 900, "CONFIG_CACHE_TTL", min_val=1, max_val=86400
        ),
        command_prefix=os.getenv("COMMAND_PREFIX") or "!",
        dev_guild_id=_parse_int_optional(os.getenv("DEV_GUILD_ID"), "DEV_GUILD_ID"),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> Config:
    """
    Validate configuration and log a summary at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from autumn.core.logger import logger

    config = get_config()

    logger.tree("Configuration Validated", [
        ("Database", "PostgreSQL" if config.uses_postgres else f"SQLite ({config.sqlite_path})"),
        ("Cache", config.cache_backend),
        ("Config TTL", f"{config.config_cache_ttl}s"),
        ("Command Sync", f"guild {config.dev_guild_id}" if config.dev_guild_id else "global"),
        ("Error Webhook", "Set" if config.error_webhook_url else "Not set"),
    ], emoji="⚙️")
    return config


__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    "load_config",
    "validate_and_log_config",
]
