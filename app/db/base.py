"""
Base model untuk SQLAlchemy.
Semua model harus inherit dari Base atau BaseModel untuk mendapatkan common fields dan behavior.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Type

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import as_declarative, declared_attr
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    """Waktu sekarang dalam UTC (timezone-aware)."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime yang selalu timezone-aware UTC.

    PostgreSQL menyimpan TIMESTAMPTZ, SQLite menyimpan string tanpa offset.
    Nilai naive dianggap UTC saat ditulis dan diberi tzinfo UTC saat dibaca,
    sehingga perbandingan window memberi hasil yang sama di kedua backend.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class EnumValue(TypeDecorator):
    """
    Menyimpan value (bukan name) dari str Enum sebagai VARCHAR.
    Value di luar enum ditolak saat ditulis.
    """
    impl = String
    cache_ok = True

    def __init__(self, enum_class: Type[Enum], *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        # Raise ValueError untuk value yang tidak dikenal
        return self.enum_class(value).value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_class(value)


@as_declarative()
class Base:
    """
    Declarative base untuk semua SQLAlchemy models.
    Setiap model mendefinisikan __tablename__ sendiri.
    """


class BaseModel(Base):
    """
    Abstract base model dengan created_at / updated_at.
    SecurityEvent dan AdminAction tidak memakai ini karena append-only.
    """
    __abstract__ = True

    created_at = Column(
        UTCDateTime(),
        default=utcnow,
        nullable=False,
        index=True
    )

    updated_at = Column(
        UTCDateTime(),
        default=None,
        onupdate=utcnow,
        nullable=True
    )

    @declared_attr
    def __mapper_args__(cls):
        """
        SQLAlchemy mapper arguments.
        Enable eager defaults untuk mendapatkan server-generated values.
        """
        return {
            "eager_defaults": True
        }
