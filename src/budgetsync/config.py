"""Configuration management for budgetsync."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from budgetsync.errors import ConfigError

# Per-user file and the per-directory override
CONFIG_FILENAME = "config.json"
LOCAL_CONFIG_FILENAME = "budgetsync.json"

DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_TIMEOUT = 30.0
DEFAULT_HISTORY_LIMIT = 500
DEFAULT_BATCH_SIZE = 50
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


@dataclass(frozen=True)
class ApiSettings:
    """Connection settings for the budgeting backend."""

    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class ImportSettings:
    """Tunables for statement imports."""

    history_limit: int = DEFAULT_HISTORY_LIMIT
    batch_size: int = DEFAULT_BATCH_SIZE
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    strict_dates: bool = False


def get_config_path() -> Path:
    """Default config location, honouring ``XDG_CONFIG_HOME``."""
    base = Path(os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config")
    return base / "budgetsync" / CONFIG_FILENAME


def find_config_file() -> Path | None:
    """Return the first existing config file.

    ``./budgetsync.json`` is preferred over the per-user config so a project
    directory can pin its own API URL and import limits.
    """
    for candidate in (Path(LOCAL_CONFIG_FILENAME), get_config_path()):
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Path | None = None) -> dict[str, Any] | None:
    """Read the JSON config.

    Args:
        config_path: Explicit file; otherwise the standard locations are searched

    Returns:
        Config mapping, or None when no file was found

    Raises:
        ConfigError: If the file is unreadable or not a JSON object
    """
    path = config_path or find_config_file()
    if path is None:
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not load config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")
    return data


def write_default_config(config_path: Path | None = None, overwrite: bool = False) -> Path:
    """Create a config file populated with the built-in defaults.

    Args:
        config_path: Target file (defaults to the per-user location)
        overwrite: Replace an existing file

    Returns:
        Path of the written file

    Raises:
        ConfigError: If the file exists and ``overwrite`` is False
    """
    path = config_path or get_config_path()
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path} (use --force to replace it)")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(create_default_config(), indent=2) + "\n", encoding="utf-8")
    return path


def get_api_settings(
    config: dict[str, Any] | None = None,
    base_url_override: str | None = None,
) -> ApiSettings:
    """Get backend connection settings.

    Precedence: explicit override, ``BUDGETSYNC_API_URL``, config file,
    built-in default.

    Args:
        config: Loaded JSON config
        base_url_override: Optional URL to use instead of config

    Returns:
        ApiSettings
    """
    api_config = (config or {}).get("api", {})

    base_url = (
        base_url_override
        or os.getenv("BUDGETSYNC_API_URL")
        or api_config.get("base_url")
        or DEFAULT_API_URL
    )
    timeout = float(api_config.get("timeout", DEFAULT_TIMEOUT))

    return ApiSettings(base_url=base_url.rstrip("/"), timeout=timeout)


def get_import_settings(config: dict[str, Any] | None = None) -> ImportSettings:
    """Get import tunables from config, with environment overrides.

    Args:
        config: Loaded JSON config

    Returns:
        ImportSettings
    """
    import_config = (config or {}).get("import", {})

    max_file_size = int(
        os.getenv("BUDGETSYNC_MAX_FILE_SIZE")
        or import_config.get("max_file_size", DEFAULT_MAX_FILE_SIZE)
    )

    return ImportSettings(
        history_limit=int(import_config.get("history_limit", DEFAULT_HISTORY_LIMIT)),
        batch_size=int(import_config.get("batch_size", DEFAULT_BATCH_SIZE)),
        max_file_size=max_file_size,
        strict_dates=bool(import_config.get("strict_dates", False)),
    )


def get_log_level(config: dict[str, Any] | None = None) -> str | None:
    """Get the configured log level name, if any."""
    if config:
        level = config.get("log_level")
        if level:
            return str(level)
    return None


def create_default_config() -> dict[str, Any]:
    """Create a default configuration."""
    return {
        "api": {
            "base_url": DEFAULT_API_URL,
            "timeout": DEFAULT_TIMEOUT,
        },
        "import": {
            "history_limit": DEFAULT_HISTORY_LIMIT,
            "batch_size": DEFAULT_BATCH_SIZE,
            "max_file_size": DEFAULT_MAX_FILE_SIZE,
            "strict_dates": False,
        },
        "log_level": "INFO",
    }
