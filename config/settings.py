"""
Application Settings

All runtime configuration is read from the environment (optionally seeded from
a .env file) into a single Settings object that is built once at startup and
passed to the components that need it.

Environment variables:
    DATABASE_URL                    full SQLAlchemy URL (overrides db_* below)
    db_user / db_password / db_host / db_port / db_name
    VOLUMETRIC_DIVISOR              default 5000
    GST_RATE                        default 0.18
    METRO_CITIES                    comma separated, lowercase
    SPECIAL_ZONE_STATES             comma separated, lowercase
    SPECIAL_ZONE_REGIONS            comma separated, lowercase
    ZONE_CACHE_TTL / RATE_CARD_CACHE_TTL   seconds
    PROVIDER_TIMEOUT_SECONDS        per-courier quote timeout
    ACTIVE_COURIERS                 comma separated courier slugs
    DELHIVERY_TOKEN, DELHIVERY_AIR_TOKEN, XPRESSBEES_USERNAME, XPRESSBEES_PASSWORD,
    XPRESSBEES_SECRET_KEY, EKART_CLIENT_CODE, EKART_TOKEN
    LOG_LEVEL, LOG_FILE
"""

import os
from decimal import Decimal
from typing import Dict, List, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv

from data.zone_constants import (
    DEFAULT_METRO_CITIES,
    DEFAULT_SPECIAL_ZONE_REGIONS,
    DEFAULT_SPECIAL_ZONE_STATES,
)

load_dotenv()


def _csv(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


def _build_database_url() -> str:
    url = os.environ.get("DATABASE_URL")
    if url:
        return url

    if not os.environ.get("db_host"):
        return "sqlite:///./shipping.db"

    return "%s://%s:%s@%s:%s/%s" % (
        "postgresql",
        os.environ.get("db_user"),
        quote_plus(os.environ.get("db_password", "")),
        os.environ.get("db_host"),
        os.environ.get("db_port", "5432"),
        os.environ.get("db_name"),
    )


class Settings:

    def __init__(self, **overrides):
        self.database_url: str = _build_database_url()

        # billing
        self.volumetric_divisor = Decimal(os.environ.get("VOLUMETRIC_DIVISOR", "5000"))
        self.gst_rate = Decimal(os.environ.get("GST_RATE", "0.18"))

        # zone classification
        self.metro_cities: List[str] = _csv("METRO_CITIES", DEFAULT_METRO_CITIES)
        self.special_zone_states: List[str] = _csv(
            "SPECIAL_ZONE_STATES", DEFAULT_SPECIAL_ZONE_STATES
        )
        self.special_zone_regions: List[str] = _csv(
            "SPECIAL_ZONE_REGIONS", DEFAULT_SPECIAL_ZONE_REGIONS
        )

        # caches (seconds)
        self.zone_cache_ttl = int(os.environ.get("ZONE_CACHE_TTL", "30"))
        self.rate_card_cache_ttl = int(os.environ.get("RATE_CARD_CACHE_TTL", "30"))

        # courier fan-out
        self.provider_timeout_seconds = float(
            os.environ.get("PROVIDER_TIMEOUT_SECONDS", "5")
        )
        self.active_couriers: List[str] = _csv(
            "ACTIVE_COURIERS", ["delhivery", "delhivery-air", "xpressbees", "ekart"]
        )
        self.courier_credentials: Dict[str, Dict[str, Optional[str]]] = {
            "delhivery": {"token": os.environ.get("DELHIVERY_TOKEN")},
            "delhivery-air": {"token": os.environ.get("DELHIVERY_AIR_TOKEN")},
            "xpressbees": {
                "username": os.environ.get("XPRESSBEES_USERNAME"),
                "password": os.environ.get("XPRESSBEES_PASSWORD"),
                "secretkey": os.environ.get("XPRESSBEES_SECRET_KEY"),
            },
            "ekart": {
                "client_code": os.environ.get("EKART_CLIENT_CODE"),
                "token": os.environ.get("EKART_TOKEN"),
            },
        }

        # logging
        self.log_level: str = os.environ.get("LOG_LEVEL", "DEBUG")
        self.log_file: Optional[str] = os.environ.get("LOG_FILE")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


def get_settings(**overrides) -> Settings:
    return Settings(**overrides)
