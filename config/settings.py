"""
Configuration settings with environment variable loading.

All secrets MUST be provided via environment variables.
Never log or expose tokens in any output.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from todoist_client.todoist.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TodoistConfig:
    """Todoist OAuth application and access configuration."""
    client_id: str
    client_secret: str
    access_token: str = ""
    timeout: float = 5.0

    def __post_init__(self):
        if not self.client_id:
            raise ConfigurationError("TODOIST_CLIENT_ID is required")
        if not self.client_secret:
            raise ConfigurationError("TODOIST_CLIENT_SECRET is required")
        if self.timeout <= 0:
            raise ConfigurationError("TODOIST_TIMEOUT must be positive")

    def __repr__(self) -> str:
        """Never expose secrets in repr."""
        return (
            f"TodoistConfig(client_id='{self.client_id}', "
            f"client_secret='***REDACTED***', "
            f"access_token='{'***REDACTED***' if self.access_token else ''}', "
            f"timeout={self.timeout})"
        )


@dataclass(frozen=True)
class Settings:
    """
    Application settings container.

    All configuration is loaded from environment variables.
    Secrets are never logged or exposed.
    """
    todoist: TodoistConfig
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"Settings(\n"
            f"  todoist={self.todoist},\n"
            f"  log_level='{self.log_level}'\n"
            f")"
        )


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Load settings from environment variables.

    Optionally loads from a .env file first.

    Args:
        env_file: Optional path to .env file

    Returns:
        Configured Settings instance

    Raises:
        ConfigurationError: If required configuration is missing
    """
    # Load .env file if provided
    if env_file and env_file.exists():
        _load_env_file(env_file)
    elif Path(".env").exists():
        _load_env_file(Path(".env"))

    try:
        todoist = TodoistConfig(
            client_id=os.getenv("TODOIST_CLIENT_ID", ""),
            client_secret=os.getenv("TODOIST_CLIENT_SECRET", ""),
            access_token=os.getenv("TODOIST_ACCESS_TOKEN", ""),
            timeout=float(os.getenv("TODOIST_TIMEOUT", "5.0")),
        )

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        settings = Settings(todoist=todoist, log_level=log_level)

        logger.info("Configuration loaded successfully")
        logger.debug(f"Settings: {settings}")

        return settings

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e


def _load_env_file(path: Path) -> None:
    """
    Load environment variables from a file.

    Simple .env parser that handles:
    - KEY=value
    - KEY="quoted value"
    - # comments
    - Empty lines
    """
    logger.debug(f"Loading environment from {path}")

    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                logger.warning(f"Invalid line {line_num} in {path}: no '=' found")
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]

            # Environment variables take precedence
            if key not in os.environ:
                os.environ[key] = value
