from __future__ import annotations

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

from shared.protocol.constants import DEFAULT_HISTORY_SIZE

DEFAULT_SERVER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": 9001,
    "log_level": "INFO",
    "history_size": DEFAULT_HISTORY_SIZE,
}

SERVER_CONFIG = DEFAULT_SERVER_CONFIG.copy()


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


def load_server_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load server configuration from env file/environment variables."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    for key, default_value in DEFAULT_SERVER_CONFIG.items():
        value = os.getenv(f"SERVER_{key.upper()}", default_value)
        SERVER_CONFIG[key] = _coerce_type(value, type(default_value))

    _validate_config()
    return SERVER_CONFIG


def _coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


def _validate_config() -> None:
    if not (0 <= SERVER_CONFIG["port"] <= 65535):
        raise ConfigError("port must be between 0 and 65535")
    if SERVER_CONFIG["history_size"] < 1:
        raise ConfigError("history_size must be positive")
    if not isinstance(logging.getLevelName(str(SERVER_CONFIG["log_level"]).upper()), int):
        raise ConfigError(f"Unknown log level {SERVER_CONFIG['log_level']}")


__all__ = ["SERVER_CONFIG", "DEFAULT_SERVER_CONFIG", "ConfigError", "load_server_config"]
