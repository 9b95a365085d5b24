"""
Transaction boundary shared by the scheduling services.

Everything inside ``atomic`` commits together or not at all. Typed scheduling
errors pass through after rollback; a unique-slot violation becomes a
ConflictError; any other storage failure becomes an InternalError that does not
leak driver details.
"""
import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from propertech_scheduling.core.exceptions import (
    ConflictError, InternalError, SchedulingError,
)

logger = logging.getLogger(__name__)

ACTIVE_SLOT_INDEX = "uq_viewings_active_slot"


def is_active_slot_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    # PostgreSQL names the index; SQLite lists the indexed columns
    return ACTIVE_SLOT_INDEX in message or "viewings.slot_time" in message


@contextmanager
def atomic(db: Session, conflict_detail: Optional[str] = None):
    try:
        yield db
        db.commit()
    except SchedulingError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        if conflict_detail and is_active_slot_violation(exc):
            raise ConflictError(conflict_detail) from None
        logger.error(f"[DB] Integrity error: {exc.orig}")
        raise InternalError("Storage failure") from None
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[DB] Storage error: {exc}")
        raise InternalError("Storage failure") from None
    except Exception:
        db.rollback()
        raise
