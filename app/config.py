"""
Configuration for the Garden Row Planner
========================================
Main application runtime settings, read from ``GARDEN_*`` environment
variables with sensible defaults for local use.
Setups the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("GARDEN_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("GARDEN_SECRET_KEY", "GardenPlannerDevSecretKey"))
    database_path: str = field(default_factory=lambda: os.getenv("GARDEN_DATABASE_PATH", "database/garden.db"))

    DEBUG: bool = field(default_factory=lambda: _env_bool("GARDEN_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("GARDEN_LOG_LEVEL", "INFO"))
    # Empty string disables the rotating file handler.
    log_file: str = field(default_factory=lambda: os.getenv("GARDEN_LOG_FILE", "logs/garden.log"))
    audit_log_path: str = field(default_factory=lambda: os.getenv("GARDEN_AUDIT_LOG_PATH", "logs/audit.log"))

    # Layout cache
    layout_cache_enabled: bool = field(default_factory=lambda: _env_bool("GARDEN_LAYOUT_CACHE_ENABLED", True))
    layout_cache_maxsize: int = field(default_factory=lambda: _env_int("GARDEN_LAYOUT_CACHE_MAXSIZE", 256))

    # UI transition pacing (seconds). Purely cosmetic; zero disables the wait.
    exit_delay_seconds: float = field(default_factory=lambda: _env_float("GARDEN_EXIT_DELAY", 0.5))
    move_delay_seconds: float = field(default_factory=lambda: _env_float("GARDEN_MOVE_DELAY", 0.1))
    settle_delay_seconds: float = field(default_factory=lambda: _env_float("GARDEN_SETTLE_DELAY", 0.8))

    # Write swapped positions back to the store after a move
    persist_moves: bool = field(default_factory=lambda: _env_bool("GARDEN_PERSIST_MOVES", True))

    # Default garden created on first start when none exists
    default_garden_name: str = field(default_factory=lambda: os.getenv("GARDEN_DEFAULT_NAME", "My Garden"))

    # Default insecure secret key - used only for detection
    _DEFAULT_SECRET_KEY: str = field(default="GardenPlannerDevSecretKey", init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.environment == "production" and self.secret_key == self._DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set GARDEN_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        for name in ("exit_delay_seconds", "move_delay_seconds", "settle_delay_seconds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DATABASE_PATH": self.database_path,
            "AUDIT_LOG_PATH": self.audit_log_path,
            "DEBUG": self.DEBUG,
        }


def setup_logging(debug: bool = False, *, level: str = "INFO", log_file: str | None = None) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO)

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "garden_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "garden_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "garden_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if log_file and not has_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "garden_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"garden_console", "garden_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("GARDEN_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
