import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from email.message import EmailMessage

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Tests run against an in-memory SQLite database unless TEST_DATABASE_URL says otherwise
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite://")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["CACHE_ENABLED"] = "false"
os.environ["SINGLE_LOCATION_MODE"] = "false"
os.environ["SMTP_HOST"] = ""
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-staff-tests")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool  # noqa: E402

from app.config import Settings  # noqa: E402
from app.core.security import create_access_token, generate_salt, hash_password  # noqa: E402
from app.database import get_db  # noqa: E402
from app.dependencies import get_mail_service  # noqa: E402
from app.main import app  # noqa: E402
from app.models import locations, metadata, staff_groups, staffs, users  # noqa: E402
from app.services.mail_service import MailService  # noqa: E402
from app.services.staff_repository import StaffRepository  # noqa: E402
from app.services.user_repository import UserRepository  # noqa: E402

if TEST_DATABASE_URL.startswith("sqlite"):
    # One shared connection so every session sees the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    # Use NullPool to avoid event loop issues with remote databases
    test_engine = create_async_engine(
        TEST_DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://"),
        poolclass=NullPool,
    )

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class RecordingMailService(MailService):
    """Mail service that keeps messages instead of talking to SMTP."""

    def __init__(self, fail: bool = False):
        super().__init__(Settings(SMTP_HOST="smtp.test", MAIL_FROM_NAME="Test Kitchen"))
        self.fail = fail
        self.outbox: list[EmailMessage] = []

    def _deliver(self, message: EmailMessage) -> None:
        if self.fail:
            raise OSError("SMTP server unreachable")
        self.outbox.append(message)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on fresh tables."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest.fixture
def mail_service() -> RecordingMailService:
    """Mail service capturing sent messages."""
    return RecordingMailService()


@pytest.fixture
def failing_mail_service() -> RecordingMailService:
    """Mail service whose SMTP server is unreachable."""
    return RecordingMailService(fail=True)


@pytest.fixture
def user_repository(mail_service: RecordingMailService) -> UserRepository:
    """Credentials repository wired to the recording mail service."""
    return UserRepository(mail_service)


@pytest.fixture
def staff_repository(user_repository: UserRepository) -> StaffRepository:
    """Staff repository in multi-location mode without a cache."""
    return StaffRepository(user_repository=user_repository)


@pytest_asyncio.fixture
async def lookups(db_session: AsyncSession) -> dict:
    """Insert a staff group and two locations."""
    manager = await db_session.execute(staff_groups.insert().values(staff_group_name="Manager"))
    downtown = await db_session.execute(
        locations.insert().values(location_name="Downtown", location_email="downtown@example.com")
    )
    harbour = await db_session.execute(locations.insert().values(location_name="Harbour"))
    await db_session.commit()

    return {
        "manager_group_id": manager.inserted_primary_key[0],
        "downtown_id": downtown.inserted_primary_key[0],
        "harbour_id": harbour.inserted_primary_key[0],
    }


async def insert_staff(db: AsyncSession, **values) -> int:
    """Insert a staff row directly, bypassing the repository."""
    row = {
        "staff_name": "Staff Member",
        "staff_email": "staff@example.com",
        "staff_status": "1",
        "date_added": datetime.now(UTC),
        **values,
    }
    result = await db.execute(staffs.insert().values(**row))
    await db.commit()
    return result.inserted_primary_key[0]


async def insert_user(db: AsyncSession, staff_id: int, username: str, password: str) -> str:
    """Insert a login for a staff member and return its salt."""
    salt = generate_salt()
    await db.execute(
        users.insert().values(
            staff_id=staff_id,
            username=username,
            password=hash_password(password, salt),
            salt=salt,
        )
    )
    await db.commit()
    return salt


@pytest_asyncio.fixture
async def current_staff(db_session: AsyncSession, lookups: dict) -> dict:
    """An enabled administrator with a login."""
    staff_id = await insert_staff(
        db_session,
        staff_name="Ada Admin",
        staff_email="ada@example.com",
        staff_group_id=lookups["manager_group_id"],
        staff_location_id=lookups["downtown_id"],
        date_added=datetime(2024, 1, 15, 9, 30, tzinfo=UTC),
    )
    await insert_user(db_session, staff_id, "ada", "admin-password")
    return {"staff_id": staff_id, "username": "ada", "password": "admin-password"}


@pytest.fixture
def auth_headers(current_staff: dict) -> dict:
    """Bearer token headers for the current staff member."""
    token = create_access_token(
        {"sub": str(current_staff["staff_id"])}, expires_delta=timedelta(minutes=30)
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, mail_service: RecordingMailService
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_service] = lambda: mail_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_staff(db_session: AsyncSession):
    """Factory inserting staff rows."""

    async def _make_staff(**values) -> int:
        return await insert_staff(db_session, **values)

    return _make_staff


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory inserting staff logins."""

    async def _make_user(staff_id: int, username: str, password: str) -> str:
        return await insert_user(db_session, staff_id, username, password)

    return _make_user
