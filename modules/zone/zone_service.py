"""
Zone Service

Classifies an origin/destination pincode pair into a pricing zone.

Precedence (first match wins, the order is part of the contract):
1. same city                          -> WITHIN_CITY
2. same state                         -> WITHIN_STATE
3. both cities are metros             -> METRO_TO_METRO
4. destination in a special region    -> SPECIAL_ZONE
5. anything else                      -> REST_OF_INDIA

Pincode lookups go through PincodeLookup, which raises UnknownPincode rather
than letting an unknown pair silently fall through to REST_OF_INDIA.
"""

import re
from threading import Lock
from typing import Dict, Iterable, List, Optional

from cachetools import TTLCache
from sqlalchemy.orm import sessionmaker

from database import session_scope
from logger import logger

# models
from models import Pincode_Mapping

# schema
from schema.enums import Zone
from .zone_schema import PincodeDetails, ZoneMappingResponseModel

from utils.exceptions import UnknownPincode, ValidationError


PINCODE_PATTERN = re.compile(r"^[1-9][0-9]{5}$")


def normalize_pincode(pincode) -> str:
    """Return the pincode as a 6 digit string or raise ValidationError."""
    value = str(pincode).strip() if pincode is not None else ""
    if not PINCODE_PATTERN.match(value):
        raise ValidationError(f"Invalid pincode: {pincode!r}", {"pincode": pincode})
    return value


class PincodeLookup:
    """
    Resolves a pincode to {city, state, region} from the pincode master.

    Hits are cached in a TTLCache guarded by a lock; misses are not cached so a
    newly uploaded pincode becomes visible immediately.
    """

    def __init__(self, session_factory: sessionmaker, cache_ttl: int = 30, cache_size: int = 5000):
        self._session_factory = session_factory
        self._cache = TTLCache(maxsize=cache_size, ttl=cache_ttl)
        self._lock = Lock()

    def lookup(self, pincode) -> PincodeDetails:
        pincode = normalize_pincode(pincode)

        with self._lock:
            cached = self._cache.get(pincode)
        if cached is not None:
            return cached

        # query outside the lock to avoid blocking other lookups
        with session_scope(self._session_factory) as db:
            row = (
                db.query(Pincode_Mapping)
                .filter(
                    Pincode_Mapping.pincode == pincode,
                    Pincode_Mapping.is_deleted.is_(False),
                )
                .first()
            )
            details = (
                PincodeDetails(
                    pincode=row.pincode,
                    city=row.city.strip().lower(),
                    state=row.state.strip().lower(),
                    region=row.region.strip().lower() if row.region else None,
                )
                if row
                else None
            )

        if details is None:
            raise UnknownPincode(pincode)

        with self._lock:
            self._cache[pincode] = details

        return details

    def clear_cache(self):
        with self._lock:
            self._cache.clear()


class ZoneResolver:

    def __init__(
        self,
        pincode_lookup: PincodeLookup,
        metro_cities: Iterable[str],
        special_zone_states: Iterable[str] = (),
        special_zone_regions: Iterable[str] = (),
    ):
        self._lookup = pincode_lookup
        self._metro_cities = frozenset(c.lower() for c in metro_cities)
        self._special_states = frozenset(s.lower() for s in special_zone_states)
        self._special_regions = frozenset(r.lower() for r in special_zone_regions)

    def resolve(self, pickup_pincode, delivery_pincode) -> Zone:
        origin = self._lookup.lookup(pickup_pincode)
        destination = self._lookup.lookup(delivery_pincode)

        zone = self.classify(origin, destination)

        logger.debug(
            msg=f"zone {origin.pincode}->{destination.pincode}: {zone.value}",
        )
        return zone

    def classify(self, origin: PincodeDetails, destination: PincodeDetails) -> Zone:
        if origin.city == destination.city:
            return Zone.WITHIN_CITY

        if origin.state == destination.state:
            return Zone.WITHIN_STATE

        if origin.city in self._metro_cities and destination.city in self._metro_cities:
            return Zone.METRO_TO_METRO

        if self._is_special(destination):
            return Zone.SPECIAL_ZONE

        return Zone.REST_OF_INDIA

    def _is_special(self, details: PincodeDetails) -> bool:
        if details.region and details.region in self._special_regions:
            return True
        return details.state in self._special_states

    def zone_mapping(self, pickup_pincode, delivery_pincodes: List[str]) -> ZoneMappingResponseModel:
        origin = self._lookup.lookup(pickup_pincode)

        zones: Dict[str, Optional[Zone]] = {}
        unknown: List[str] = []

        for pincode in delivery_pincodes:
            try:
                zones[str(pincode)] = self.classify(origin, self._lookup.lookup(pincode))
            except UnknownPincode:
                zones[str(pincode)] = None
                unknown.append(str(pincode))

        return ZoneMappingResponseModel(
            pickup_pincode=origin.pincode, zones=zones, unknown_pincodes=unknown
        )
