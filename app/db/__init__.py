"""
Database module untuk Security Audit API.
Berisi base model, session management, dan konfigurasi database.
"""

from app.db.base import Base, BaseModel, UTCDateTime, EnumValue, utcnow
from app.db.session import (
    engine,
    SessionLocal,
    get_db_context,
    storage_guard,
    init_db,
    close_db
)

__all__ = [
    "Base",
    "BaseModel",
    "UTCDateTime",
    "EnumValue",
    "utcnow",
    "engine",
    "SessionLocal",
    "get_db_context",
    "storage_guard",
    "init_db",
    "close_db"
]
