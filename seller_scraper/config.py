"""
seller_scraper/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
)
_ALLOWED_BROWSERS = {"playwright", "static"}


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ScraperSettings:
    """
    Runtime settings for seller scraping runs.

    Durations are seconds except `default_delay_ms`, which keeps the unit
    callers use in run requests.
    """

    browser: str = "playwright"
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    locale: str = "en-GB"
    timezone_id: str = "Europe/London"
    navigation_timeout_seconds: float = 30.0
    product_settle_seconds: float = 1.5
    profile_settle_seconds: float = 2.0
    captcha_wait_seconds: float = 30.0
    offers_timeout_seconds: float = 10.0
    offers_settle_seconds: float = 2.5
    panel_close_settle_seconds: float = 0.5
    default_delay_ms: int = 3000
    skip_platform_only: bool = True
    service_name: str = "amazon-seller-scraper"


@lru_cache(maxsize=1)
def get_scraper_settings() -> ScraperSettings:
    """
    Return cached scraper settings from environment variables.
    """

    browser = _get_str_env("SCRAPER_BROWSER", "playwright").lower()
    if browser not in _ALLOWED_BROWSERS:
        raise RuntimeError(
            f"SCRAPER_BROWSER '{browser}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_BROWSERS)}."
        )

    return ScraperSettings(
        browser=browser,
        headless=_get_bool_env("SCRAPER_HEADLESS", True),
        user_agent=_get_str_env("SCRAPER_USER_AGENT", DEFAULT_USER_AGENT),
        locale=_get_str_env("SCRAPER_LOCALE", "en-GB"),
        timezone_id=_get_str_env("SCRAPER_TIMEZONE", "Europe/London"),
        navigation_timeout_seconds=max(
            1.0, _get_float_env("SCRAPER_NAVIGATION_TIMEOUT_SECONDS", 30.0)
        ),
        product_settle_seconds=max(0.0, _get_float_env("SCRAPER_PRODUCT_SETTLE_SECONDS", 1.5)),
        profile_settle_seconds=max(0.0, _get_float_env("SCRAPER_PROFILE_SETTLE_SECONDS", 2.0)),
        captcha_wait_seconds=max(0.0, _get_float_env("SCRAPER_CAPTCHA_WAIT_SECONDS", 30.0)),
        offers_timeout_seconds=max(1.0, _get_float_env("SCRAPER_OFFERS_TIMEOUT_SECONDS", 10.0)),
        offers_settle_seconds=max(0.0, _get_float_env("SCRAPER_OFFERS_SETTLE_SECONDS", 2.5)),
        panel_close_settle_seconds=max(
            0.0, _get_float_env("SCRAPER_PANEL_CLOSE_SETTLE_SECONDS", 0.5)
        ),
        default_delay_ms=max(0, _get_int_env("SCRAPER_DEFAULT_DELAY_MS", 3000)),
        skip_platform_only=_get_bool_env("SCRAPER_SKIP_PLATFORM_ONLY", True),
        service_name=_get_str_env("SCRAPER_SERVICE_NAME", "amazon-seller-scraper"),
    )


def configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = _get_str_env("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
