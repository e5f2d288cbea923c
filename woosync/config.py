# =============================
# Global Config
# =============================

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from woosync.errors import ConfigError

load_dotenv()

DEFAULT_BASE_URL = "https://your-site.com/wp-json/wc/v3"
WC_API_PREFIX = "/wp-json/wc/v3"
DEFAULT_TIMEOUT = 30.0


def read_int(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    """Integer env setting; a malformed or out-of-range value is a ConfigError."""
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


# Bulk sync pacing (env override)
DEFAULT_CONCURRENCY = read_int(os.environ, "WC_SYNC_CONCURRENCY", 3, minimum=1)
DEFAULT_DELAY_MS = read_int(os.environ, "WC_SYNC_DELAY_MS", 1000, minimum=0)


@dataclass(frozen=True)
class WooSettings:
    base_url: str
    consumer_key: str
    consumer_secret: str
    timeout: float = DEFAULT_TIMEOUT

    @property
    def auth(self):
        return (self.consumer_key, self.consumer_secret)


def normalize_base_url(raw: str) -> str:
    """Accept either the site root or the wc/v3 API root."""
    root = raw.strip().rstrip("/")
    if not root.endswith("/wc/v3"):
        root = f"{root}{WC_API_PREFIX}"
    return root


def load_wc_settings(env: Optional[Mapping[str, str]] = None) -> WooSettings:
    """
    Read WooCommerce settings from the environment (.env already loaded).
    Missing credentials are fatal: nothing should talk to the store without them.
    """
    env = os.environ if env is None else env

    key = env.get("WC_CONSUMER_KEY") or env.get("WC_API_KEY")
    secret = env.get("WC_CONSUMER_SECRET") or env.get("WC_API_SECRET")
    if not (key and secret):
        raise ConfigError(
            "WooCommerce API credentials not found. Please set "
            "WC_CONSUMER_KEY and WC_CONSUMER_SECRET in your .env file"
        )

    try:
        timeout = float(env.get("WC_TIMEOUT") or DEFAULT_TIMEOUT)
    except ValueError:
        raise ConfigError(f"WC_TIMEOUT must be a number of seconds, got {env.get('WC_TIMEOUT')!r}") from None

    return WooSettings(
        base_url=normalize_base_url(env.get("WC_BASE_URL") or DEFAULT_BASE_URL),
        consumer_key=key,
        consumer_secret=secret,
        timeout=timeout,
    )
