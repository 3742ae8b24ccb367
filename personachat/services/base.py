import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from personachat.core.errors import PersistenceFailed

logger = logging.getLogger(__name__)


class DatabaseService:
    """Common base for services that work on a per-request session."""
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str):
        """Commit, or roll back and raise PersistenceFailed naming ``action``."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while trying to {action}: {e}", exc_info=True)
            raise PersistenceFailed(f"Failed to {action}") from e
