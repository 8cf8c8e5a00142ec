from sqlalchemy import Boolean, Column, Index, Integer, Numeric, String, text

from database import DBBaseClass, DBBase

from schema.enums import DEFAULT_RATE_BAND


class Rate_Card(DBBase, DBBaseClass):
    """
    Tariff for one (rate_band, courier, zone, mode) tuple.

    Cards are never deleted. Updating a tariff creates a new version and
    deactivates the previous one, so at most one row per tuple is active.
    """

    __tablename__ = "rate_card"

    rate_band = Column(String(50), nullable=False, default=DEFAULT_RATE_BAND)
    courier = Column(String(100), nullable=False)
    zone = Column(String(30), nullable=False)
    mode = Column(String(20), nullable=False)

    base_rate = Column(Numeric(10, 2), nullable=False)
    additional_rate = Column(Numeric(10, 2), nullable=False)

    base_weight_kg = Column(Numeric(10, 3), nullable=False, default=0.5)
    weight_increment_kg = Column(Numeric(10, 3), nullable=False, default=0.5)
    min_billable_weight_kg = Column(Numeric(10, 3), nullable=False, default=0.5)
    max_weight_kg = Column(Numeric(10, 3), nullable=True)

    cod_flat_amount = Column(Numeric(10, 2), nullable=False, default=0)
    # percent of declared value, 1.5 means 1.5 %
    cod_percent = Column(Numeric(6, 3), nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        # one active card per tuple
        Index(
            "uq_rate_card_active_tuple",
            "rate_band",
            "courier",
            "zone",
            "mode",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
        Index("ix_rate_card_courier_zone_mode", "courier", "zone", "mode"),
    )

    def to_model(self):
        from modules.rate_card.rate_card_schema import RateCardModel

        return RateCardModel.model_validate(self)
