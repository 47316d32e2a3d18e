"""
Security event model untuk Security Audit API.
Mencatat event keamanan (login, lockout, recovery code) secara append-only.
"""

from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, Uuid, Index
)
from sqlalchemy.orm import relationship, Mapped

from app.db.base import Base, EnumValue, UTCDateTime, utcnow
from app.core.constants import SecurityEventType, ERROR_EVENT_TYPES, VERIFICATION_EVENT_TYPES

if TYPE_CHECKING:
    from app.models.account import Account


class SecurityEvent(Base):
    """
    Security event model.

    Event tidak pernah di-update atau di-delete, hanya insert.
    Event tetap ada meskipun akun dihapus (SET NULL).
    Timestamp diisi saat insert; urutan dalam timestamp yang sama
    mengikuti se_id.

    Attributes:
        se_id: Event ID (autoincrement)
        se_type: Jenis event (SecurityEventType)
        se_account_id: Akun terkait (nullable)
        se_ip_address: IP address sumber
        se_user_agent: User agent sumber
        se_description: Deskripsi bebas
        se_created_at: Timestamp event (UTC)
    """

    __tablename__ = "security_events"

    se_id = Column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    se_type = Column(
        EnumValue(SecurityEventType, 50),
        nullable=False
    )
    se_account_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.a_id", ondelete="SET NULL"),
        nullable=True
    )

    # Context fields
    se_ip_address = Column(
        String(45),
        nullable=False
    )
    se_user_agent = Column(
        Text,
        nullable=False
    )
    se_description = Column(
        Text,
        nullable=False
    )
    se_created_at = Column(
        UTCDateTime(),
        default=utcnow,
        nullable=False
    )

    # Relationships
    account: Mapped[Optional["Account"]] = relationship(
        "Account",
        lazy="joined"
    )

    # Indexes
    __table_args__ = (
        Index('idx_security_events_account_type_created', 'se_account_id', 'se_type', 'se_created_at'),
        Index('idx_security_events_created_at', 'se_created_at'),
        Index('idx_security_events_ip', 'se_ip_address'),
    )

    # Properties
    @property
    def is_error(self) -> bool:
        """Check if event counts as an error for the daily report."""
        return self.se_type in ERROR_EVENT_TYPES

    @property
    def is_verification(self) -> bool:
        """Check if event is a recovery-code verification outcome."""
        return self.se_type in VERIFICATION_EVENT_TYPES

    @property
    def username(self) -> Optional[str]:
        """Get username if account still exists."""
        return self.account.a_username if self.account else None

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<SecurityEvent(id={self.se_id}, type={self.se_type}, "
            f"account_id={self.se_account_id}, created_at={self.se_created_at})>"
        )
