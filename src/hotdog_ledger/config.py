"""
Bot configuration management.

This module handles loading and accessing configuration from multiple sources
with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/server.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The BotConfig
dataclass provides typed access to all settings.

Usage:
    from hotdog_ledger.config import config

    print(config.server.port)
    print(config.ledger.max_addition)
    print(config.ledger.reference_timezone)

Environment Variable Mapping:
    HOTDOG_HOST             -> server.host
    HOTDOG_PORT             -> server.port
    HOTDOG_CORS_ORIGINS     -> security.cors_origins
    HOTDOG_DB_PATH          -> database.path
    HOTDOG_LOG_LEVEL        -> logging.level
    HOTDOG_MAX_ADDITION     -> ledger.max_addition
    HOTDOG_REFERENCE_TZ     -> ledger.reference_timezone
    HOTDOG_PROTEST_STORAGE  -> protests.storage
    DISCORD_APPLICATION_ID  -> discord.application_id (APP_ID also accepted)
    DISCORD_BOT_TOKEN       -> discord.bot_token
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, data/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "server.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "server.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """Network server configuration."""

    host: str = "0.0.0.0"  # nosec B104 - intentional for server binding
    port: int = 3000


@dataclass
class SecuritySettings:
    """Security-related configuration."""

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    docs_enabled: bool = True


@dataclass
class DatabaseSettings:
    """Database configuration."""

    path: str = "data/hotdogs.db"

    @property
    def absolute_path(self) -> Path:
        """Get absolute path to database file."""
        p = Path(self.path)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed", "json"] = "detailed"


@dataclass
class LedgerSettings:
    """Ledger validation and statistics settings."""

    # Anti-abuse cap: additions above this are rejected, never clamped.
    max_addition: int = 83
    # Zone used to bucket entries into calendar days for streaks.
    reference_timezone: str = "America/Los_Angeles"

    @property
    def zone(self) -> ZoneInfo:
        """Resolve the reference zone."""
        return ZoneInfo(self.reference_timezone)


@dataclass
class ProtestSettings:
    """Pending-protest storage settings."""

    storage: Literal["sqlite", "memory"] = "sqlite"


@dataclass
class DiscordSettings:
    """Chat platform credentials used for slash-command registration."""

    application_id: str = ""
    bot_token: str = ""
    api_base_url: str = "https://discord.com/api/v10"
    timeout_seconds: float = 10.0


@dataclass
class BotConfig:
    """
    Complete bot configuration.

    Aggregates all settings sections. Access via the module-level `config`
    singleton.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    protests: ProtestSettings = field(default_factory=ProtestSettings)
    discord: DiscordSettings = field(default_factory=DiscordSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated string to list, stripping whitespace."""
    if not value or value.strip() == "":
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_from_ini(parser: configparser.ConfigParser, cfg: BotConfig) -> None:
    """Load configuration from parsed INI file into BotConfig."""
    if parser.has_section("server"):
        if parser.has_option("server", "host"):
            cfg.server.host = parser.get("server", "host")
        if parser.has_option("server", "port"):
            cfg.server.port = parser.getint("server", "port")

    if parser.has_section("security"):
        if parser.has_option("security", "cors_origins"):
            cfg.security.cors_origins = _parse_list(parser.get("security", "cors_origins"))
        if parser.has_option("security", "docs_enabled"):
            cfg.security.docs_enabled = _parse_bool(parser.get("security", "docs_enabled"))

    if parser.has_section("database"):
        if parser.has_option("database", "path"):
            cfg.database.path = parser.get("database", "path")

    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed", "json"):
                cfg.logging.format = val  # type: ignore[assignment]

    if parser.has_section("ledger"):
        if parser.has_option("ledger", "max_addition"):
            cfg.ledger.max_addition = parser.getint("ledger", "max_addition")
        if parser.has_option("ledger", "reference_timezone"):
            cfg.ledger.reference_timezone = parser.get("ledger", "reference_timezone")

    if parser.has_section("protests"):
        if parser.has_option("protests", "storage"):
            val = parser.get("protests", "storage").lower()
            if val in ("sqlite", "memory"):
                cfg.protests.storage = val  # type: ignore[assignment]

    if parser.has_section("discord"):
        if parser.has_option("discord", "application_id"):
            cfg.discord.application_id = parser.get("discord", "application_id")
        if parser.has_option("discord", "bot_token"):
            cfg.discord.bot_token = parser.get("discord", "bot_token")
        if parser.has_option("discord", "api_base_url"):
            cfg.discord.api_base_url = parser.get("discord", "api_base_url")
        if parser.has_option("discord", "timeout_seconds"):
            cfg.discord.timeout_seconds = parser.getfloat("discord", "timeout_seconds")


def _apply_env_overrides(cfg: BotConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_host := os.getenv("HOTDOG_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("HOTDOG_PORT"):
        cfg.server.port = int(env_port)

    if env_cors := os.getenv("HOTDOG_CORS_ORIGINS"):
        cfg.security.cors_origins = _parse_list(env_cors)

    if env_db := os.getenv("HOTDOG_DB_PATH"):
        cfg.database.path = env_db

    if env_log := os.getenv("HOTDOG_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()

    if env_cap := os.getenv("HOTDOG_MAX_ADDITION"):
        cfg.ledger.max_addition = int(env_cap)
    if env_tz := os.getenv("HOTDOG_REFERENCE_TZ"):
        cfg.ledger.reference_timezone = env_tz

    if env_storage := os.getenv("HOTDOG_PROTEST_STORAGE"):
        if env_storage.lower() in ("sqlite", "memory"):
            cfg.protests.storage = env_storage.lower()  # type: ignore[assignment]

    if env_app := os.getenv("DISCORD_APPLICATION_ID") or os.getenv("APP_ID"):
        cfg.discord.application_id = env_app
    if env_token := os.getenv("DISCORD_BOT_TOKEN"):
        cfg.discord.bot_token = env_token


def load_config() -> BotConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/server.ini
        3. config/server.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        BotConfig: Fully populated configuration object.
    """
    cfg = BotConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "BotConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton. It doesn't update
    already-running server middleware.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information. Secrets are
    reported as present/absent only.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "database_path": str(config.database.absolute_path),
        "reference_timezone": config.ledger.reference_timezone,
        "protest_storage": config.protests.storage,
        "discord_credentials_present": bool(
            config.discord.application_id and config.discord.bot_token
        ),
    }


def print_config_summary() -> None:
    """Print a summary of current configuration to stdout."""
    status = get_config_status()
    print("\n" + "=" * 60)
    print("HOT DOG LEDGER CONFIGURATION")
    print("=" * 60)
    print(f"Config file: {status['config_file_path']}")
    print(f"File exists: {status['config_file_exists']}")
    if status["using_example"]:
        print("WARNING: Using example config (copy to server.ini for production)")
    print("-" * 60)
    print(f"Server:        {config.server.host}:{config.server.port}")
    print(f"Database:      {status['database_path']}")
    print(f"Max addition:  {config.ledger.max_addition}")
    print(f"Reference TZ:  {status['reference_timezone']}")
    print(f"Protests:      {status['protest_storage']}")
    print(f"Discord creds: {status['discord_credentials_present']}")
    print(f"Log level:     {config.logging.level}")
    print("=" * 60 + "\n")


# =============================================================================
# TEST HELPERS
# =============================================================================


class use_test_database:
    """
    Context manager for using a temporary test database.

    Usage:
        from hotdog_ledger.config import use_test_database

        def test_something(tmp_path):
            with use_test_database(tmp_path / "test.db"):
                schema.init_database()

    Args:
        db_path: Path to the test database file
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self.original_path: str | None = None

    def __enter__(self) -> Path:
        """Set up test database path."""
        self.original_path = config.database.path
        config.database.path = str(self.db_path)
        return self.db_path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Restore original database path."""
        if self.original_path is not None:
            config.database.path = self.original_path
        return None
