"""
QuickQuote - Configuration

Settings come from environment variables, optionally loaded from a
.env file in the working directory.
"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Form defaults (empty means "first option in the rate table")
DEFAULT_ROLE = os.getenv("QUICKQUOTE_DEFAULT_ROLE", "Homeowner")
DEFAULT_PROJECT = os.getenv("QUICKQUOTE_DEFAULT_PROJECT", "")
DEFAULT_QUALITY = os.getenv("QUICKQUOTE_DEFAULT_QUALITY", "")
DEFAULT_LOCATION = os.getenv("QUICKQUOTE_DEFAULT_LOCATION", "")

LOCALE = os.getenv("QUICKQUOTE_LOCALE", "en_US")

# Rate table JSON file (built-in table when unset)
RATES_FILE = os.getenv("QUICKQUOTE_RATES_FILE", "")

# Drafts, history and favorites (simple JSON file)
DATA_FILE = os.getenv("QUICKQUOTE_DATA_FILE", "/tmp/quickquote_store.json")

# Room size input bounds
MIN_ROOM_SIZE = 1
MAX_ROOM_SIZE = 100000

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _flag("LOG_JSON")
