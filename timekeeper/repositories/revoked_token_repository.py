from datetime import datetime
from sqlalchemy.orm import Session
from timekeeper.models.revoked_token import RevokedToken


class RevokedTokenRepository:
    """Repository for the access-token denylist"""

    def __init__(self, db: Session):
        self.db = db

    def is_revoked(self, jti: str) -> bool:
        """Check whether a token ID has been revoked"""
        return self.db.query(RevokedToken.id).filter(RevokedToken.jti == jti).first() is not None

    def revoke(self, jti: str, expires_at: datetime) -> None:
        """Revoke a token ID (idempotent)"""
        if self.is_revoked(jti):
            return
        self.db.add(RevokedToken(jti=jti, expires_at=expires_at))
        self.db.commit()

    def purge_expired(self, now: datetime) -> int:
        """Delete denylist rows whose tokens have expired anyway"""
        deleted = (
            self.db.query(RevokedToken)
            .filter(RevokedToken.expires_at < now)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
