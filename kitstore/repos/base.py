# kitstore/repos/base.py
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kitstore.domain.exceptions import StoreError
from kitstore.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def store_guard(db: Session, action: str):
    """Roll back and re-raise database failures as StoreError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error {action} in the database: {e}")
        raise StoreError(f"Error {action}") from e
