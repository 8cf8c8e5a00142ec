from sqlalchemy import Column, String, Index

from database import DBBaseClass, DBBase


class Pincode_Mapping(DBBase, DBBaseClass):

    __tablename__ = "pincode_mapping"

    # Unique index on pincode for fast lookups and data integrity
    pincode = Column(String(6), nullable=False, unique=True)
    # City, state and region are stored in lowercase for case-insensitive comparisons
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)
    region = Column(String(50), nullable=True)

    # Composite covering index so a lookup by pincode is an index-only scan
    __table_args__ = (
        Index(
            "ix_pincode_mapping_pincode_city_state_region",
            "pincode",
            "city",
            "state",
            "region",
        ),
    )
