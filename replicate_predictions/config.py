"""Configuration constants and .env loading.

WHY: The client needs an API key, a base URL, and (for the CLI) a default
model version. Keeping these in one module makes them easy to find and to
override per environment without touching the client code.

HOW: python-dotenv loads the .env file on import. Constants are read from
the environment with sensible defaults. The load_api_key() function
provides a clear error when the key is missing.

RULES:
- API key is loaded from .env / the environment, never hardcoded
- REPLICATE_API_KEY wins over REPLICATE_API_TOKEN when both are set
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# API configuration defaults
# ---------------------------------------------------------------------------

REPLICATE_BASE_URL = os.getenv("REPLICATE_BASE_URL", "https://api.replicate.com/v1")
REPLICATE_MODEL_VERSION = os.getenv("REPLICATE_MODEL_VERSION", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()

_API_KEY_VARS = ("REPLICATE_API_KEY", "REPLICATE_API_TOKEN")


def load_api_key() -> str:
    """Load the Replicate API key from the environment.

    WHY: Every request carries a ``Token <key>`` header. Loading the key
    from the environment (via .env) keeps it out of source code.

    HOW: Checks REPLICATE_API_KEY, then REPLICATE_API_TOKEN, in os.environ
    (populated by python-dotenv).

    RULES:
    - Raises ValueError if no key is set or the value is blank
    - Never returns a default/placeholder value
    """
    for name in _API_KEY_VARS:
        key = os.getenv(name, "").strip()
        if key:
            return key
    raise ValueError(
        "Replicate API key not configured. "
        "Add REPLICATE_API_KEY to the environment or the .env file."
    )
