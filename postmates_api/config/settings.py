"""
Settings — Default configuration values for the Postmates cart client.

This module provides the DEFAULT_SETTINGS dict that the orchestrator and the
web app use as fallback values when environment variables are not set. The
actual configuration is loaded from .env at runtime; these defaults ensure the
client works out of the box against the public Postmates web API.

Configuration precedence (highest to lowest):
  1. CLI flags (--debug, --address, --query, ...)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  POSTMATES_BASE_URL  Base URL of the private web API (default: https://postmates.com/api)
  POSTMATES_DOMAIN    Domain the platform mints cookies for (default: postmates.com)
  DOMAIN              Domain substituted into Set-Cookie lines handed back to
                      callers of the web app. Empty = leave cookies untouched.
  REQUEST_TIMEOUT     Seconds before an outbound call is abandoned. Empty = wait forever.
  DEBUG               Whether to print verbose output (default: False)
  DEFAULT_ADDRESS     Delivery address used by run.py when --address is omitted
  DEFAULT_QUERY       Search query used by run.py when --query is omitted
"""

import os
from typing import Optional

POSTMATES_DOMAIN = "postmates.com"

DEFAULT_SETTINGS = {
    "POSTMATES_BASE_URL": f"https://{POSTMATES_DOMAIN}/api",
    "POSTMATES_DOMAIN": POSTMATES_DOMAIN,
    "DOMAIN": "",
    "REQUEST_TIMEOUT": "",
    "DEBUG": False,
    "DEFAULT_ADDRESS": "",
    "DEFAULT_QUERY": "",
}

PROXY_ENV_VARS = [
    "HTTP_PROXY", "HTTPS_PROXY", "http_proxy", "https_proxy",
    "NO_PROXY", "no_proxy",
]


def get_setting(name: str) -> str:
    """Read a setting from the environment, falling back to DEFAULT_SETTINGS."""
    return os.getenv(name, str(DEFAULT_SETTINGS.get(name, "")))


def get_bool(name: str) -> bool:
    return get_setting(name).lower() == "true"


def get_timeout(name: str = "REQUEST_TIMEOUT") -> Optional[float]:
    """Parse a timeout in seconds. Empty or non-positive means no timeout."""
    raw = get_setting(name).strip()
    if not raw:
        return None
    value = float(raw)
    return value if value > 0 else None
