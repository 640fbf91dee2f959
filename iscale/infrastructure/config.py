"""Configuration utilities for infrastructure layer.

All settings come from environment variables; a ``.env`` file found from
the working directory is merged in by ``load_environment()``.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from iscale.domain.analysis.modes import UnitSystem

DEFAULT_VISION_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_VISION_MODEL = "gpt-4o-mini"
DEFAULT_LOCALE = "en_US"


def load_environment(env_file: Optional[Path] = None) -> bool:
    """
    Load variables from a .env file without overriding the environment.

    Called by the composition points (configure_logging,
    create_credential_store, create_scan_repository). Without an explicit
    path the nearest .env from the working directory upwards is used.

    Returns:
        True if a file was found and loaded
    """
    path = env_file or find_dotenv(usecwd=True)
    if not path:
        return False
    return bool(load_dotenv(path, override=False))


def get_openai_api_key() -> Optional[str]:
    """
    Get API key override from environment.

    Returns:
        OPENAI_API_KEY if set and non-empty, None otherwise
    """
    key = os.getenv("OPENAI_API_KEY", "").strip()
    return key or None


def get_vision_endpoint() -> str:
    """Chat-completions endpoint (ISCALE_VISION_ENDPOINT)."""
    return os.getenv("ISCALE_VISION_ENDPOINT", DEFAULT_VISION_ENDPOINT)


def get_vision_model() -> str:
    """Vision model name (ISCALE_VISION_MODEL), defaults to gpt-4o-mini."""
    return os.getenv("ISCALE_VISION_MODEL", DEFAULT_VISION_MODEL)


def get_unit_system() -> UnitSystem:
    """
    Get the user's unit preference.

    Returns:
        UnitSystem from ISCALE_UNIT_SYSTEM ("metric" | "imperial"), metric by default
    """
    return UnitSystem.parse(os.getenv("ISCALE_UNIT_SYSTEM"))


def get_locale() -> str:
    """Device locale used for translation target (ISCALE_LOCALE)."""
    return os.getenv("ISCALE_LOCALE", DEFAULT_LOCALE)


def get_log_level() -> str:
    """Log level name (ISCALE_LOG_LEVEL), defaults to INFO."""
    return os.getenv("ISCALE_LOG_LEVEL", "INFO").upper()


def get_mongodb_url() -> Optional[str]:
    """MongoDB connection string (MONGODB_URL), None if not set."""
    return os.getenv("MONGODB_URL") or None


def get_mongodb_database() -> str:
    """
    Get MongoDB database name.

    Returns:
        Database name from MONGODB_DATABASE env var, defaults to "iscale"
    """
    return os.getenv("MONGODB_DATABASE", "iscale")
