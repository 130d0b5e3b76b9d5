import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from models import db
from services.errors import InfrastructureError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(description: str):
    """Commit everything staged in the block at once, or nothing.

    IntegrityError is re-raised untouched so callers can turn unique-index
    violations into domain errors. Any other store failure becomes an
    InfrastructureError.
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Store failure while trying to %s", description)
        raise InfrastructureError(
            f"Cannot {description}",
            retryable=isinstance(exc, OperationalError),
        ) from exc
