"""Configuration for the open items index."""

import logging
import os
from typing import Dict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


CATEGORIES = ("browsers", "terminals", "editors", "productivity", "system", "universal")


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(f"OPEN_ITEMS_{name}", default))


class Config:
    """Configuration class for the open items index."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # TTL for the empty ("all applications") selection
        self.cache_default_ttl = _env_float("CACHE_DEFAULT_TTL", "10")

        # Per-category TTLs; a selection uses the smallest TTL among its apps
        # Browsers and terminals change constantly, system apps almost never
        self.category_ttls: Dict[str, float] = {
            "browsers": _env_float("CACHE_TTL_BROWSERS", "10"),
            "terminals": _env_float("CACHE_TTL_TERMINALS", "5"),
            "editors": _env_float("CACHE_TTL_EDITORS", "30"),
            "productivity": _env_float("CACHE_TTL_PRODUCTIVITY", "60"),
            "system": _env_float("CACHE_TTL_SYSTEM", "120"),
            "universal": _env_float("CACHE_TTL_UNIVERSAL", "15"),
        }

        # Number of selections kept at once (1 = a new selection evicts the previous one)
        self.cache_max_selections = int(os.getenv("OPEN_ITEMS_CACHE_MAX_SELECTIONS", "1"))

        # Adapter timeouts (seconds)
        self.browser_timeout = _env_float("BROWSER_TIMEOUT", "30")
        self.document_timeout = _env_float("DOCUMENT_TIMEOUT", "15")
        self.window_discovery_timeout = _env_float("WINDOW_DISCOVERY_TIMEOUT", "5")
        self.activation_timeout = _env_float("ACTIVATION_TIMEOUT", "10")

        # Local API (for the launcher UI)
        self.api_port = int(os.getenv("OPEN_ITEMS_API_PORT", "8771"))

        self.log_level = os.getenv("OPEN_ITEMS_LOG_LEVEL", "INFO").upper()

        # Validate configuration
        self._validate()

    def ttl_for_category(self, category: str) -> float:
        """Return the TTL for a capability category (unknown categories use the universal TTL)."""
        return self.category_ttls.get(category, self.category_ttls["universal"])

    def _validate(self):
        """Validate configuration values."""
        if self.cache_default_ttl <= 0:
            raise ValueError(f"Default cache TTL must be positive, got {self.cache_default_ttl}")

        for category, ttl in self.category_ttls.items():
            if ttl <= 0:
                raise ValueError(f"Cache TTL for '{category}' must be positive, got {ttl}")

        if self.cache_max_selections < 1:
            raise ValueError(
                f"Cache must hold at least one selection, got {self.cache_max_selections}"
            )

        timeouts = {
            "browser": self.browser_timeout,
            "document": self.document_timeout,
            "window discovery": self.window_discovery_timeout,
            "activation": self.activation_timeout,
        }
        for name, value in timeouts.items():
            if value <= 0:
                raise ValueError(f"The {name} timeout must be positive, got {value}")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            raise ValueError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(valid_levels)}"
            )


# Create a global config instance
_config = Config()

# Expose configuration values as module-level variables
CACHE_DEFAULT_TTL = _config.cache_default_ttl
CATEGORY_TTLS = _config.category_ttls
CACHE_MAX_SELECTIONS = _config.cache_max_selections
BROWSER_TIMEOUT = _config.browser_timeout
DOCUMENT_TIMEOUT = _config.document_timeout
WINDOW_DISCOVERY_TIMEOUT = _config.window_discovery_timeout
ACTIVATION_TIMEOUT = _config.activation_timeout
API_PORT = _config.api_port
LOG_LEVEL = getattr(logging, _config.log_level)

__all__ = [
    "Config",
    "CATEGORIES",
    "CACHE_DEFAULT_TTL",
    "CATEGORY_TTLS",
    "CACHE_MAX_SELECTIONS",
    "BROWSER_TIMEOUT",
    "DOCUMENT_TIMEOUT",
    "WINDOW_DISCOVERY_TIMEOUT",
    "ACTIVATION_TIMEOUT",
    "API_PORT",
    "LOG_LEVEL",
]
