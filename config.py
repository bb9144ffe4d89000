import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

TRANSACTIONS_TABLE = "transactions"
MENU_ITEMS_TABLE = "menu_items"

DEFAULT_TIMEZONE = "Asia/Jakarta"
DEFAULT_REPORT_WINDOW_DAYS = 7


@dataclass(frozen=True)
class Settings:
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    schema: str
    customer_name_key: Optional[str]
    timezone: str
    report_window_days: int
    live_refresh_seconds: float
    log_level: str

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Read runtime settings from the environment (and `.env` if present).

    Credentials are not validated here; the Supabase client and the name
    cipher complain when they are actually needed.
    """
    load_dotenv()
    return Settings(
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_KEY"),
        schema=os.getenv("SCHEMA") or "public",
        customer_name_key=os.getenv("CUSTOMER_NAME_KEY"),
        timezone=os.getenv("APP_TIMEZONE") or DEFAULT_TIMEZONE,
        report_window_days=int(os.getenv("REPORT_WINDOW_DAYS") or DEFAULT_REPORT_WINDOW_DAYS),
        live_refresh_seconds=float(os.getenv("LIVE_REFRESH_SECONDS") or 2),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
