# backend/pkasla/repositories/token_blacklist_repository.py
from datetime import datetime
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.token_blacklist import TokenBlacklist
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TokenBlacklistRepository(BaseRepository[TokenBlacklist]):
    def __init__(self, db: Session):
        super().__init__(db, TokenBlacklist)

    def is_blacklisted(self, token: str, now: datetime) -> bool:
        """A token stays revoked until the recorded expiry passes."""
        try:
            return (
                self._build_query()
                .filter(TokenBlacklist.token == token, TokenBlacklist.expires_at > now)
                .first()
                is not None
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking token blacklist: {str(e)}")
            raise RepositoryException(f"Failed to check token blacklist: {str(e)}")

    def delete_expired(self, now: datetime) -> int:
        try:
            deleted = (
                self._build_query()
                .filter(TokenBlacklist.expires_at <= now)
                .delete(synchronize_session=False)
            )
            self.db.flush()
            return int(deleted or 0)
        except SQLAlchemyError as e:
            self.logger.error(f"Error purging token blacklist: {str(e)}")
            raise RepositoryException(f"Failed to purge token blacklist: {str(e)}")
