"""
Rate Card Service

Keyed store of courier tariffs. The core only performs point lookups on
(rate_band, courier, zone, mode); admin tooling creates new versions or
deactivates cards. Cards are never deleted.

Lookups are cached for a short TTL because tariffs change rarely; every admin
write clears the cache.
"""

from threading import Lock
from typing import List, Optional, Tuple

from cachetools import TTLCache
from sqlalchemy import func
from sqlalchemy.orm import sessionmaker

from database import session_scope
from logger import logger

# models
from models import Rate_Card

# schema
from schema.enums import DEFAULT_RATE_BAND, ServiceMode, Zone
from .rate_card_schema import (
    RateCardFilterModel,
    RateCardInsertModel,
    RateCardModel,
    RateCardUpdateModel,
)

from utils.exceptions import NoRateCardForZone, RateCardNotFound


CacheKey = Tuple[str, str, str, str]


class RateCardService:

    def __init__(self, session_factory: sessionmaker, cache_ttl: int = 30, cache_size: int = 2048):
        self._session_factory = session_factory
        self._cache = TTLCache(maxsize=cache_size, ttl=cache_ttl)
        self._lock = Lock()

    # ============================================
    # POINT LOOKUPS
    # ============================================

    def get_active(
        self,
        courier: str,
        zone: Zone,
        mode: ServiceMode,
        rate_band: Optional[str] = None,
    ) -> RateCardModel:
        """
        Active card for the tuple. A seller's custom band falls back to the
        default band when it has no card of its own for the tuple.
        """
        zone = Zone(zone)
        mode = ServiceMode(mode)

        bands = [rate_band] if rate_band and rate_band != DEFAULT_RATE_BAND else []
        bands.append(DEFAULT_RATE_BAND)

        for band in bands:
            card = self._get_cached_or_load((band, courier, zone.value, mode.value))
            if card is not None:
                return card

        raise NoRateCardForZone(
            f"No active rate card for {courier} {mode.value} in {zone.value}",
            {
                "courier": courier,
                "zone": zone.value,
                "mode": mode.value,
                "rate_band": rate_band or DEFAULT_RATE_BAND,
            },
        )

    def _get_cached_or_load(self, key: CacheKey) -> Optional[RateCardModel]:
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        band, courier, zone, mode = key
        with session_scope(self._session_factory) as db:
            rows = (
                db.query(Rate_Card)
                .filter(
                    Rate_Card.rate_band == band,
                    Rate_Card.courier == courier,
                    Rate_Card.zone == zone,
                    Rate_Card.mode == mode,
                    Rate_Card.is_active.is_(True),
                    Rate_Card.is_deleted.is_(False),
                )
                .limit(2)
                .all()
            )

            if len(rows) > 1:
                # the partial unique index should make this impossible
                logger.error(msg=f"Multiple active rate cards for {key}")
                raise NoRateCardForZone(f"Ambiguous rate card for {courier} {mode} in {zone}")

            card = rows[0].to_model() if rows else None

        if card is not None:
            with self._lock:
                self._cache[key] = card

        return card

    def clear_cache(self):
        with self._lock:
            self._cache.clear()

    # ============================================
    # ADMIN WRITES
    # ============================================

    def create_rate_card(self, params: RateCardInsertModel) -> RateCardModel:
        """
        Create a card. An existing active card for the same tuple is
        deactivated and the new one becomes the next version.
        """
        with session_scope(self._session_factory) as db:
            card = self._insert_version(db, params.model_dump())
            model = card.to_model()

        self.clear_cache()
        logger.info(
            msg=f"Rate card created {model.courier}/{model.zone.value}/{model.mode.value}"
            f" band={model.rate_band} v{model.version}",
        )
        return model

    def update_rate_card(self, card_uuid, params: RateCardUpdateModel) -> RateCardModel:
        with session_scope(self._session_factory) as db:
            current = Rate_Card.get_by_uuid(db, card_uuid)
            if current is None:
                raise RateCardNotFound(data={"uuid": str(card_uuid)})

            values = current.to_model().model_dump(
                include=set(RateCardInsertModel.model_fields.keys())
            )
            values.update(params.model_dump(exclude_unset=True))

            card = self._insert_version(db, RateCardInsertModel(**values).model_dump())
            model = card.to_model()

        self.clear_cache()
        logger.info(msg=f"Rate card {card_uuid} superseded by v{model.version}")
        return model

    def deactivate_rate_card(self, card_uuid) -> RateCardModel:
        with session_scope(self._session_factory) as db:
            card = Rate_Card.get_by_uuid(db, card_uuid)
            if card is None:
                raise RateCardNotFound(data={"uuid": str(card_uuid)})

            card.is_active = False
            db.add(card)
            db.flush()
            model = card.to_model()

        self.clear_cache()
        logger.info(msg=f"Rate card {card_uuid} deactivated")
        return model

    def list_rate_cards(self, filters: Optional[RateCardFilterModel] = None) -> List[RateCardModel]:
        filters = filters or RateCardFilterModel()

        with session_scope(self._session_factory) as db:
            query = db.query(Rate_Card).filter(Rate_Card.is_deleted.is_(False))

            if filters.courier:
                query = query.filter(Rate_Card.courier == filters.courier)
            if filters.zone:
                query = query.filter(Rate_Card.zone == filters.zone.value)
            if filters.mode:
                query = query.filter(Rate_Card.mode == filters.mode.value)
            if filters.rate_band:
                query = query.filter(Rate_Card.rate_band == filters.rate_band)
            if filters.active_only:
                query = query.filter(Rate_Card.is_active.is_(True))

            rows = query.order_by(
                Rate_Card.courier, Rate_Card.zone, Rate_Card.mode, Rate_Card.version
            ).all()

            return [row.to_model() for row in rows]

    def _insert_version(self, db, values: dict) -> Rate_Card:
        values = {
            **values,
            "zone": Zone(values["zone"]).value,
            "mode": ServiceMode(values["mode"]).value,
        }
        tuple_filter = (
            Rate_Card.rate_band == values["rate_band"],
            Rate_Card.courier == values["courier"],
            Rate_Card.zone == values["zone"],
            Rate_Card.mode == values["mode"],
        )

        active = (
            db.query(Rate_Card)
            .filter(*tuple_filter, Rate_Card.is_active.is_(True))
            .with_for_update()
            .all()
        )
        for card in active:
            card.is_active = False
            db.add(card)
        # the old version must be inactive before the new one hits the unique index
        db.flush()

        latest_version = db.query(func.max(Rate_Card.version)).filter(*tuple_filter).scalar()

        card = Rate_Card(**values, is_active=True, version=(latest_version or 0) + 1)
        db.add(card)
        db.flush()
        return card
