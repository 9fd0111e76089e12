import logging
from contextlib import contextmanager
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError, DisconnectionError, TimeoutError as PoolTimeoutError

from core.config import settings
from exceptions.exceptions import TransientStoreException

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (OperationalError, DisconnectionError, PoolTimeoutError)


class BaseService:
    def __init__(self, db: Session):
        self.db = db
        self.max_depth = settings.MAX_TREE_DEPTH

    @contextmanager
    def _store_errors(self):
        """
        Run one unit of work against the session.

        Any exception rolls the session back so in-memory changes made before the
        failure never reach the database. Connectivity problems are re-raised as
        TransientStoreException; everything else propagates unchanged.
        """
        try:
            yield
        except TRANSIENT_ERRORS as e:
            self.db.rollback()
            logger.error("Transient database failure: %s", e)
            raise TransientStoreException("Storage is temporarily unavailable, please retry") from e
        except Exception:
            self.db.rollback()
            raise
