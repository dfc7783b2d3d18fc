"""Configuration management for esfixtures.

Settings are resolved from environment variables first, then from the
config file at ``~/.config/esfixtures/config`` (``KEY=value`` lines), and
finally from built-in defaults.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import EsFixturesConfigError
from .utils import (
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SCROLL_TTL,
    DEFAULT_TIMEOUT,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "ESFIXTURES_"


class Config:
    """Configuration for the search engine connection and engine defaults."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Optional override of the config file location
        """
        self._config_path = config_path
        self._file_values: Optional[dict[str, str]] = None

    def get_config_path(self) -> Path:
        """Get the path to the configuration file."""
        if self._config_path is not None:
            return self._config_path
        base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        return Path(base) / "esfixtures" / "config"

    def _read_file(self) -> dict[str, str]:
        if self._file_values is not None:
            return self._file_values

        values: dict[str, str] = {}
        path = self.get_config_path()
        if path.exists():
            for line_no, line in enumerate(
                path.read_text(encoding="utf-8").splitlines(), start=1
            ):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    raise EsFixturesConfigError(
                        f"Invalid line {line_no} in {path}: expected KEY=value"
                    )
                key, value = line.split("=", 1)
                values[key.strip().upper()] = value.strip()
            logger.debug(f"Loaded {len(values)} setting(s) from {path}")
        self._file_values = values
        return values

    def _get(self, key: str) -> Optional[str]:
        env_value = os.environ.get(f"{ENV_PREFIX}{key}")
        if env_value:
            return env_value
        return self._read_file().get(key)

    @property
    def host(self) -> str:
        """Search engine host (ESFIXTURES_HOST)."""
        return self._get("HOST") or DEFAULT_HOST

    @property
    def username(self) -> Optional[str]:
        """Basic auth username (ESFIXTURES_USERNAME)."""
        return self._get("USERNAME")

    @property
    def password(self) -> Optional[str]:
        """Basic auth password (ESFIXTURES_PASSWORD)."""
        return self._get("PASSWORD")

    @property
    def log_level(self) -> str:
        """CLI log level name (ESFIXTURES_LOG)."""
        return (self._get("LOG") or DEFAULT_LOG_LEVEL).lower()

    @property
    def scroll_ttl(self) -> str:
        """Scroll cursor time-to-live (ESFIXTURES_SCROLL)."""
        return self._get("SCROLL") or DEFAULT_SCROLL_TTL

    @property
    def timeout(self) -> float:
        """Request timeout in seconds (ESFIXTURES_TIMEOUT)."""
        raw = self._get("TIMEOUT")
        if raw is None:
            return DEFAULT_TIMEOUT
        try:
            return float(raw)
        except ValueError as e:
            raise EsFixturesConfigError(f"Invalid timeout value: {raw!r}") from e

    def is_configured(self) -> bool:
        """Return True if a host is set in the environment or config file."""
        return self._get("HOST") is not None

    def save_host(self, host: str) -> None:
        """Persist the host to the config file, keeping other settings."""
        path = self.get_config_path()
        values = dict(self._read_file())
        values["HOST"] = host
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            "".join(f"{key}={value}\n" for key, value in values.items()),
            encoding="utf-8",
        )
        self._file_values = values
        logger.debug(f"Saved host to {path}")


config = Config()
