"""
Space Status Configuration
==========================

This module handles configuration loading for the space status service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    SPACE_DESCRIPTOR_PATH   -> descriptor.path
    SPACE_EVENTS_URL        -> events.source_url
    SPACE_FORUM_BASE_URL    -> events.forum_base_url
    SPACE_REFRESH_INTERVAL  -> events.refresh_interval_seconds
    SPACE_FETCH_TIMEOUT     -> events.fetch_timeout_seconds
    SPACE_FEED_URL          -> feed.url
    SPACE_FEED_ENABLED      -> feed.enabled
    SPACE_PORT              -> server.port
    SPACE_LOG_LEVEL         -> logging.level
    PORT                    -> server.port (container platforms)

Example:
    from space_status.config import settings

    print(settings.events.source_url)
    print(settings.events.refresh_interval_seconds)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="space-status", description="Service name")
    version: str = Field(default="v2.0", description="API version")


class DescriptorConfig(BaseModel):
    """Static SpaceAPI descriptor configuration."""

    path: str = Field(
        default="./data/LambdaSpaceAPI.json",
        description="Path to the SpaceAPI descriptor JSON file",
    )


class EventsConfig(BaseModel):
    """Forum event source configuration."""

    source_url: str = Field(
        default="https://community.lambdaspace.gr/c/events.json",
        description="Discourse category JSON listing event topics",
    )
    forum_base_url: str = Field(
        default="https://community.lambdaspace.gr",
        description="Base URL used to build topic links",
    )
    refresh_interval_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Seconds between scheduled event refreshes",
    )
    fetch_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for a single forum request",
    )
    validate_dates: bool = Field(
        default=False,
        description="Drop titles whose date is not a real calendar date",
    )


class FeedConfig(BaseModel):
    """Occupancy feed connection configuration."""

    enabled: bool = Field(default=False, description="Connect to the occupancy feed")
    url: str = Field(
        default="ws://localhost:8765/occupancy",
        description="WebSocket URL pushing occupancy counts",
    )
    reconnect_backoff_ms: int = Field(
        default=5000,
        ge=100,
        description="Backoff in milliseconds between reconnect attempts",
    )
    max_reconnect_attempts: int = Field(
        default=0,
        ge=0,
        description="Maximum reconnection attempts (0 = unlimited)",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=1323, ge=1, le=65535, description="Bind port")
    timeout_keep_alive_seconds: int = Field(
        default=10,
        ge=1,
        description="Idle keep-alive connections are closed after this many seconds",
    )


class CorsConfig(BaseModel):
    """CORS configuration. Only GET is ever allowed."""

    allow_origins: List[str] = Field(default_factory=lambda: ["*"])


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")
    access_log: bool = Field(default=True, description="Log one line per HTTP request")


class Settings(BaseModel):
    """
    Main settings class for the space status service.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    descriptor: DescriptorConfig = Field(default_factory=DescriptorConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    if env_path := os.environ.get("SPACE_DESCRIPTOR_PATH"):
        config_data.setdefault("descriptor", {})["path"] = env_path

    # Event source
    if env_url := os.environ.get("SPACE_EVENTS_URL"):
        config_data.setdefault("events", {})["source_url"] = env_url
    if env_base := os.environ.get("SPACE_FORUM_BASE_URL"):
        config_data.setdefault("events", {})["forum_base_url"] = env_base
    if env_interval := os.environ.get("SPACE_REFRESH_INTERVAL"):
        config_data.setdefault("events", {})["refresh_interval_seconds"] = float(env_interval)
    if env_timeout := os.environ.get("SPACE_FETCH_TIMEOUT"):
        config_data.setdefault("events", {})["fetch_timeout_seconds"] = float(env_timeout)

    # Occupancy feed
    if env_feed := os.environ.get("SPACE_FEED_URL"):
        config_data.setdefault("feed", {})["url"] = env_feed
    if env_enabled := os.environ.get("SPACE_FEED_ENABLED"):
        config_data.setdefault("feed", {})["enabled"] = _parse_bool(env_enabled)

    # Server settings (container platforms use PORT)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("SPACE_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    if env_log := os.environ.get("SPACE_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Loaded on import; main.py uses it as the default for create_app()
settings = load_config()
setup_logging(settings)
