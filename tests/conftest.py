"""
Pytest configuration and fixtures for Security Audit API tests.
"""

import os

# Settings dibaca saat import, jadi environment harus di-set lebih dulu
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-security-audit-api")
os.environ.setdefault("REPORT_TIMEZONE", "UTC")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, List, Optional
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
import fakeredis.aioredis

from app.main import app
from app.db.base import Base
from app.core.constants import AccountRole, SecurityEventType
from app.core.exceptions import DeliveryFailureError
from app.core.security import security
from app.models.account import Account
from app.models.security_event import SecurityEvent
from app.services.account import AccountService
from app.services.email import EmailService
from app.api.dependencies.database import get_db, get_redis, get_email_service


TEST_DATABASE_URL = "sqlite+aiosqlite://"

TEST_PASSWORD = "CorrectHorse42!"
ADMIN_PASSWORD = "AdminPassword123!"


def enable_foreign_keys(sync_engine) -> None:
    """Aktifkan FK di SQLite supaya ON DELETE SET NULL berjalan."""
    @event.listens_for(sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest_asyncio.fixture
async def engine():
    """Create in-memory test database engine dengan schema baru per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_foreign_keys(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    TestSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def redis_client():
    """Create a fake Redis client for testing."""
    client = fakeredis.aioredis.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


class FakeEmailService(EmailService):
    """
    EmailService yang menyimpan email alih-alih mengirim via SMTP.
    Set `fail = True` untuk mensimulasikan SMTP error.
    """

    def __init__(self):
        super().__init__()
        self.sent: List[Dict[str, Optional[str]]] = []
        self.fail = False

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None
    ) -> bool:
        if self.fail:
            raise DeliveryFailureError(details={"recipient": to_email})
        self.sent.append({
            "to": to_email,
            "subject": subject,
            "html_body": html_body,
            "text_body": text_body
        })
        return True


@pytest.fixture
def mail_outbox() -> FakeEmailService:
    """Mail dispatcher yang menangkap semua email."""
    return FakeEmailService()


@pytest.fixture
def override_dependencies(db_session: AsyncSession, redis_client, mail_outbox):
    """Override FastAPI dependencies for testing."""
    async def override_get_db():
        yield db_session

    async def override_get_redis():
        yield redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_email_service] = lambda: mail_outbox

    yield

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def test_account(db_session: AsyncSession) -> Account:
    """Create a regular active account with an email address."""
    return await AccountService(db_session).create(
        username="alice",
        password=TEST_PASSWORD,
        email="alice@example.com"
    )


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession) -> Account:
    """Create an admin account."""
    return await AccountService(db_session).create(
        username="admin",
        password=ADMIN_PASSWORD,
        role=AccountRole.ADMIN,
        email="admin@example.com"
    )


def bearer_headers(account: Account) -> Dict[str, str]:
    token = security.create_access_token(
        subject=str(account.a_id),
        additional_claims={"username": account.a_username, "role": account.a_role.value}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_auth_headers(test_admin: Account) -> Dict[str, str]:
    """Authorization header untuk admin."""
    return bearer_headers(test_admin)


@pytest.fixture
def auth_headers(test_account: Account) -> Dict[str, str]:
    """Authorization header untuk akun biasa (bukan admin)."""
    return bearer_headers(test_account)


@pytest.fixture
def add_event(db_session: AsyncSession):
    """
    Factory untuk menulis SecurityEvent dengan timestamp tertentu,
    dipakai untuk skenario window dan daily report.
    """
    async def _add(
        kind: SecurityEventType,
        account_id: Optional[UUID],
        created_at: datetime,
        ip_address: str = "10.0.0.1",
        user_agent: str = "pytest",
        description: str = "test event"
    ) -> SecurityEvent:
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        event_row = SecurityEvent(
            se_type=kind,
            se_account_id=account_id,
            se_ip_address=ip_address,
            se_user_agent=user_agent,
            se_description=description,
            se_created_at=created_at
        )
        db_session.add(event_row)
        await db_session.commit()
        await db_session.refresh(event_row, attribute_names=["account"])
        return event_row

    return _add
