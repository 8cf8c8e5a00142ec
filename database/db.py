"""
Database Configuration Module

The engine and session factory are built explicitly at startup (see
context_manager.container) and handed to every component that needs storage.
Nothing in the code base reaches for a module-level connection.

Connection Pooling Strategy (PostgreSQL):
- Direct connection: pool_size=30, max_overflow=20 (50 total)
- For production at scale, put PgBouncer (transaction pooling) in front

SQLite URLs are accepted for local runs and tests; pool settings are skipped
for them.
"""

import uuid as uuid
from datetime import datetime

from pytz import timezone

from sqlalchemy import Column, TIMESTAMP, Boolean, Integer, Uuid, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from logger import logging


# ============================================
# CONNECTION POOL SETTINGS
# ============================================

# Pool configuration optimized for high-volume order operations
POOL_CONFIG = {
    # Base pool size - always maintain this many connections
    "pool_size": 30,
    # Additional connections allowed during peak load
    "max_overflow": 20,
    # Timeout waiting for a connection from pool (seconds)
    "pool_timeout": 30,
    # Test connection health before using (handles stale connections)
    "pool_pre_ping": True,
    # Recycle connections after 30 minutes (prevents stale connections)
    "pool_recycle": 1800,
    "poolclass": QueuePool,
}

# Timezone configuration
UTC = timezone("UTC")
IST = timezone("Asia/Kolkata")


def time_now():
    """Get current UTC time"""
    return datetime.now(UTC)


def time_now_ist():
    """Get current IST time"""
    return datetime.now(IST)


def build_engine(database_url: str, **kwargs) -> Engine:
    """
    Create the SQLAlchemy engine for the given URL.

    PostgreSQL gets the pooled configuration above; anything else (SQLite in
    tests and local runs) is created with the caller's kwargs only.
    """
    if database_url.startswith("postgresql"):
        engine = create_engine(database_url, echo=False, **{**POOL_CONFIG, **kwargs})
    else:
        engine = create_engine(database_url, **kwargs)

    @event.listens_for(engine, "checkout")
    def receive_checkout(dbapi_connection, connection_record, connection_proxy):
        """Log when connection is checked out from pool"""
        logging.debug("Connection checked out from pool")

    @event.listens_for(engine, "checkin")
    def receive_checkin(dbapi_connection, connection_record):
        """Log when connection is returned to pool"""
        logging.debug("Connection returned to pool")

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autoflush=False,  # Manual flush for better control
        bind=engine,
        expire_on_commit=False,  # Prevent attribute expiration on commit
    )


def get_pool_status(engine: Engine):
    """
    Get current connection pool status.

    Returns:
        dict: Pool status including size, checked out, overflow
    """
    pool = engine.pool
    if not isinstance(pool, QueuePool):
        return {"pool": type(pool).__name__}
    return {
        "pool_size": pool.size(),
        "checked_out": pool.checkedout(),
        "overflow": pool.overflow(),
        "checked_in": pool.checkedin(),
    }


# ============================================
# DECLARATIVE BASE
# ============================================

DBBase = declarative_base()


def init_models(engine: Engine):
    """Create all tables registered on DBBase."""
    import models  # noqa: F401  registers the mappers

    DBBase.metadata.create_all(bind=engine)
    logging.info("Database tables ensured")


# ============================================
# BASE MODEL CLASS
# ============================================


class DBBaseClass:
    """
    Base class for all database models.

    Provides:
    - Auto-incrementing primary key (id)
    - UUID for external references
    - Created/updated timestamps
    - Soft delete flag
    - Common query methods (session passed explicitly)
    """

    # Primary key
    id = Column(Integer, primary_key=True, unique=True, autoincrement=True)

    # UUID for external API references (don't expose internal IDs)
    uuid = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False)

    # Timestamps
    created_at = Column(TIMESTAMP(timezone=True), default=time_now, nullable=False)
    updated_at = Column(
        TIMESTAMP(timezone=True),
        default=time_now,
        onupdate=time_now,
        nullable=False,
    )

    # Soft delete
    is_deleted = Column(Boolean, default=False, index=True)

    @classmethod
    def get_by_uuid(cls, db: Session, uuid):
        """Get record by UUID"""
        return db.query(cls).filter(cls.uuid == uuid, cls.is_deleted.is_(False)).first()

    @classmethod
    def get_by_id(cls, db: Session, id):
        """Get record by ID"""
        return db.query(cls).filter(cls.id == id, cls.is_deleted.is_(False)).first()

    def soft_delete(self):
        """Mark record as deleted (soft delete)"""
        self.is_deleted = True
        self.updated_at = time_now()

    def to_dict(self):
        return {
            "id": self.id,
            "uuid": str(self.uuid),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
