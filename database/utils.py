from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from logger import logging
from utils.exceptions import PersistenceFailure


@contextmanager
def session_scope(session_factory: sessionmaker):
    """
    One unit of work.

    Commits on success, rolls back on any error. Driver/ORM errors are
    re-raised as PersistenceFailure so callers only ever see the domain
    error taxonomy; domain errors raised inside the block pass through
    untouched after the rollback.
    """
    db: Session = session_factory()
    try:
        logging.debug("DB session created")
        yield db
        db.commit()

    except SQLAlchemyError as e:
        logging.error(f"DB session error: {e}")
        db.rollback()
        raise PersistenceFailure(str(e)) from e

    except Exception:
        db.rollback()
        raise

    finally:
        try:
            db.close()
        except SQLAlchemyError as e:
            logging.error(f"Error closing DB session: {e}")
