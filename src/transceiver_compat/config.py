"""Configuration for the transceiver compatibility server."""

import os
from pathlib import Path

# Server settings
HTTP_PORT = int(os.getenv("HTTP_PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Dataset location - local JSON file (optionally .gz) or http(s) URL
_PACKAGE_DATA_DIR = Path(__file__).parent.parent.parent / "data"
DEFAULT_DATA_SOURCE = os.getenv("COMPAT_DATA_SOURCE", str(_PACKAGE_DATA_DIR / "database.json"))

# Request settings (URL sources only)
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10.0"))

# Minimum seconds between dataset reloads (reload re-reads the file or URL)
RELOAD_MIN_INTERVAL = float(os.getenv("RELOAD_MIN_INTERVAL", "30"))

# Query limits
MAX_QUERY_LENGTH = int(os.getenv("MAX_QUERY_LENGTH", "200"))

# Slot ids starting with this marker are fixed port groups, everything else is a module bay
FIXED_SLOT_PREFIX = os.getenv("FIXED_SLOT_PREFIX", "Fixed_")

# Top-level relation names in the dataset document
PRODUCTS_KEY = "products"
COMPATIBILITY_KEY = "compatibility"
SWITCH_BAYS_KEY = "switchBays"
