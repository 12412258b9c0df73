from contextlib import contextmanager
from typing import Callable, Iterator, Optional
import logging

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from stock_ledger.exceptions import (
    ConflictError,
    LedgerError,
    ServiceUnavailableError,
    StorageError,
)

logger = logging.getLogger(__name__)


def _default_conflict(error: IntegrityError) -> LedgerError:
    return ConflictError(f"Constraint violated: {error.orig}")


class BaseService:
    """
    Common plumbing for services that work on a request-scoped session.

    The session is injected by the caller (the API dependency or a
    Celery task). A service built without one is in unavailable mode and
    every operation fails fast with ServiceUnavailableError.
    """

    def __init__(self, db: Optional[Session]):
        self.db = db

    def _require_db(self) -> Session:
        if self.db is None:
            raise ServiceUnavailableError()
        return self.db

    @contextmanager
    def _transaction(
        self,
        on_integrity_error: Callable[[IntegrityError], LedgerError] = _default_conflict,
    ) -> Iterator[Session]:
        """
        Run the enclosed reads and writes as one unit of work.

        Commits on success. On any failure the session is rolled back so no
        partial effect is left behind; database faults are re-raised as
        StorageError and constraint violations through ``on_integrity_error``.
        """
        db = self._require_db()
        try:
            yield db
            db.commit()
        except LedgerError:
            db.rollback()
            raise
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Integrity error, transaction rolled back: {e.orig}")
            raise on_integrity_error(e) from e
        except DBAPIError as e:
            db.rollback()
            logger.error(f"Database error, transaction rolled back: {e}")
            raise StorageError("Database error, the operation was not applied") from e
        except Exception:
            db.rollback()
            raise
