"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


def _default_data_dir() -> str:
    return str(Path.home() / ".swipe-ledger")


class SwipeLedgerConfig(BaseSettings):
    """Swipe ledger configuration"""

    # Storage configuration
    data_dir: str = _default_data_dir()  # Settings file and default ledger location
    ledger_filename: str = "giftcards.csv"
    settings_filename: str = "config.json"
    strict_load: bool = False  # Fail loads on malformed ledger lines instead of skipping them

    # Capture configuration
    swipe_timeout_ms: int = 500
    payload_log_chars: int = 50
    recent_events_limit: int = 100

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8091

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    class Config:
        env_prefix = "SWIPE_LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = SwipeLedgerConfig()


def get_config() -> SwipeLedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> SwipeLedgerConfig:
    """Reload configuration from environment"""
    global config
    config = SwipeLedgerConfig()
    return config
