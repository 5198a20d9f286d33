import logging
from contextlib import contextmanager
from typing import Optional, Type

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from training_tracker.exceptions import TrackerError, ConflictError, StorageError

logger = logging.getLogger(__name__)


@contextmanager
def committing(
    db: Session,
    action: str,
    conflict_message: Optional[str] = None,
    failure: Type[StorageError] = StorageError,
):
    """
    Run a unit of work and commit it.

    Any error rolls the session back. Unique-constraint violations become
    ConflictError when `conflict_message` is given; any other error
    becomes `failure`. Errors from the core itself pass through unchanged.
    """
    try:
        yield
        db.commit()
    except TrackerError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        if conflict_message:
            raise ConflictError(conflict_message) from exc
        logger.exception("Integrity error while trying to %s", action)
        raise failure(f"Failed to {action}") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise failure(f"Failed to {action}") from exc
    except Exception as exc:
        db.rollback()
        logger.exception("Unexpected error while trying to %s", action)
        raise failure(f"Failed to {action}") from exc
