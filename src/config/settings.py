# src/config/settings.py

"""Central configuration for the price_watch tracker."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the price_watch tracker."""

    # --- Scheduling ---
    CHECK_INTERVAL_HOURS: float = float(
        os.getenv("PRICE_WATCH_CHECK_INTERVAL_HOURS", "12")
    )
    CHECK_ON_START: bool = True         # Run a pass when the watcher boots
    SETTLE_DELAY: float = 2.0           # Seconds after load before extracting
    FAILSAFE_TIMEOUT: float = 10.0      # Seconds before a handle is force-closed

    # --- Change detection ---
    DROP_ALERT_THRESHOLD: float = -5.0  # Percent change that triggers an alert
    HISTORY_LIMIT: int = 100            # Max retained history entries
    HISTORY_VIEW_LIMIT: int = 20        # Rows shown by --history
    PENDING_NAME: str = "Pending extraction..."
    UNKNOWN_PRODUCT_NAME: str = "Unknown Product"
    PRODUCT_PATH_MARKER: str = "/products/"
    CURRENCY_SYMBOL: str = "$"

    # --- Fetching ---
    REQUEST_DELAY: float = 1.0          # Seconds between retry attempts
    REQUEST_TIMEOUT: int = 8            # Seconds before a request times out
    MAX_RETRIES: int = 2                # Retry count on transient failures

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Store keys ---
    TRACKED_ITEMS_KEY: str = "tracked_items"
    HISTORY_KEY: str = "price_history"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "src" / "config" / "selectors.json"
    DATA_DIR: Path = Path(
        os.getenv("PRICE_WATCH_DATA_DIR", str(BASE_DIR / "data"))
    )
    STORE_PATH: Path = DATA_DIR / "price_watch.db"
    EXPORTS_DIR: Path = BASE_DIR / "exports"
    LOGS_DIR: Path = BASE_DIR / "logs"
