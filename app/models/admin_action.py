"""
Admin action model untuk Security Audit API.
Ledger append-only untuk aksi administratif.
"""

from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    Column, Integer, Text, ForeignKey, Uuid, Index
)
from sqlalchemy.orm import relationship, Mapped

from app.db.base import Base, EnumValue, UTCDateTime, utcnow
from app.core.constants import AdminActionType

if TYPE_CHECKING:
    from app.models.account import Account


class AdminAction(Base):
    """
    Admin action model.

    aa_admin_id diverifikasi ber-role admin saat ditulis. Kolom nullable
    hanya supaya entry tetap ada jika akun admin dihapus.

    Attributes:
        aa_id: Action ID (autoincrement)
        aa_admin_id: Admin yang melakukan aksi
        aa_type: Jenis aksi (AdminActionType)
        aa_affected_account_id: Akun yang terdampak (nullable)
        aa_description: Deskripsi
        aa_created_at: Timestamp aksi (UTC)
    """

    __tablename__ = "admin_actions"

    aa_id = Column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    aa_admin_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.a_id", ondelete="SET NULL"),
        nullable=True
    )
    aa_type = Column(
        EnumValue(AdminActionType, 50),
        nullable=False
    )
    aa_affected_account_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.a_id", ondelete="SET NULL"),
        nullable=True
    )
    aa_description = Column(
        Text,
        nullable=False
    )
    aa_created_at = Column(
        UTCDateTime(),
        default=utcnow,
        nullable=False
    )

    # Relationships
    admin: Mapped[Optional["Account"]] = relationship(
        "Account",
        foreign_keys=[aa_admin_id],
        lazy="joined"
    )
    affected_account: Mapped[Optional["Account"]] = relationship(
        "Account",
        foreign_keys=[aa_affected_account_id],
        lazy="joined"
    )

    # Indexes
    __table_args__ = (
        Index('idx_admin_actions_admin_id', 'aa_admin_id'),
        Index('idx_admin_actions_affected', 'aa_affected_account_id'),
        Index('idx_admin_actions_type_created', 'aa_type', 'aa_created_at'),
    )

    @property
    def admin_username(self) -> Optional[str]:
        return self.admin.a_username if self.admin else None

    @property
    def affected_username(self) -> Optional[str]:
        return self.affected_account.a_username if self.affected_account else None

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<AdminAction(id={self.aa_id}, type={self.aa_type}, "
            f"admin_id={self.aa_admin_id}, affected={self.aa_affected_account_id})>"
        )
