"""Database-backed blacklist for JWT revocation."""

from datetime import timedelta
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..auth import token_expiry
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import utcnow
from .base import BaseService

logger = logging.getLogger(__name__)

# Undecodable tokens are remembered for this long
DEFAULT_REVOCATION_TTL = timedelta(hours=24)


class TokenBlacklistService(BaseService):
    """Server-side revocation of access and refresh tokens."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_token_blacklist_repository(db)

    @BaseService.measure_operation("revoke_token")
    def revoke_token(self, token: Optional[str]) -> bool:
        """
        Blacklist ``token`` until its own expiry.

        Caller owns the transaction.
        """
        if not token:
            return False
        if self.repository.exists(token=token):
            return False
        expires_at = token_expiry(token) or (utcnow() + DEFAULT_REVOCATION_TTL)
        self.repository.create(token=token, expires_at=expires_at)
        self.logger.debug("Token revoked")
        return True

    @BaseService.measure_operation("is_token_revoked")
    def is_revoked(self, token: str) -> bool:
        return self.repository.is_blacklisted(token, utcnow())

    @BaseService.measure_operation("purge_expired_tokens")
    def purge_expired(self) -> int:
        with self.transaction():
            count = self.repository.delete_expired(utcnow())
        if count:
            self.logger.info(f"Purged {count} expired blacklist entries")
        return count
