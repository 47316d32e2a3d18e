"""
Account model untuk Security Audit API.
Model utama yang merepresentasikan akun dalam sistem.
"""

from datetime import datetime
import uuid

from sqlalchemy import (
    Column, String, Boolean, Uuid,
    Index, CheckConstraint
)

from app.db.base import BaseModel, EnumValue, UTCDateTime
from app.core.constants import AccountRole
from app.core.security import pwd_context


class Account(BaseModel):
    """
    Account model untuk authentication dan lockout.

    `a_is_active` adalah kebalikan dari locked: akun yang dikunci (manual
    oleh admin atau otomatis oleh lockout) punya `a_is_active = False`.

    Recovery code dan expiry-nya selalu ditulis dan dihapus bersamaan.

    Attributes:
        a_id: Unique account ID (UUID)
        a_username: Username (unique)
        a_email: Alamat email untuk recovery code (optional)
        a_password_hash: Hashed password
        a_is_active: Whether account is active (not locked)
        a_role: Role akun (admin | user)
        a_recovery_code: Recovery code aktif (6 digit)
        a_recovery_code_expires_at: Expiry recovery code
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "accounts"

    # Primary key
    a_id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False
    )

    # Authentication fields
    a_username = Column(
        String(100),
        unique=True,
        nullable=False,
        index=True
    )
    a_email = Column(
        String(255),
        nullable=True
    )
    a_password_hash = Column(
        String(255),
        nullable=False
    )

    # Status fields
    a_is_active = Column(
        Boolean,
        default=True,
        nullable=False
    )
    a_role = Column(
        EnumValue(AccountRole, 20),
        default=AccountRole.USER,
        nullable=False
    )

    # Recovery fields
    a_recovery_code = Column(
        String(12),
        nullable=True
    )
    a_recovery_code_expires_at = Column(
        UTCDateTime(),
        nullable=True
    )

    # Constraints
    __table_args__ = (
        CheckConstraint('length(a_username) >= 1', name='ck_accounts_username_length'),
        Index('idx_accounts_is_active', 'a_is_active'),
        Index('idx_accounts_role', 'a_role'),
    )

    # Properties
    @property
    def is_locked(self) -> bool:
        """Akun terkunci jika tidak active."""
        return not self.a_is_active

    @property
    def is_admin(self) -> bool:
        """Check if account has admin role."""
        return self.a_role == AccountRole.ADMIN

    @property
    def has_recovery_code(self) -> bool:
        return self.a_recovery_code is not None

    # Methods
    def set_password(self, password: str) -> None:
        """
        Set account password (hashes it).

        Args:
            password: Plain text password
        """
        self.a_password_hash = pwd_context.hash(password)

    def recovery_code_expired(self, now: datetime) -> bool:
        """True jika expiry ada dan sudah lewat."""
        return (
            self.a_recovery_code_expires_at is not None
            and now > self.a_recovery_code_expires_at
        )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Account(id={self.a_id}, username={self.a_username}, active={self.a_is_active})>"
