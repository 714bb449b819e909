"""Pytest configuration and shared fixtures"""

import io
import json
import pytest
from typing import AsyncGenerator, List, Optional, Tuple
from httpx import AsyncClient, ASGITransport
from starlette.datastructures import Headers, UploadFile
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from backend.app.core.database import Base, get_db
from backend.app.core.rate_limit import login_rate_limiter
from backend.app.models import Admin, Registration, RegistrationStatus
from backend.app.repositories.admin_repository import AdminRepository
from backend.app.services.auth_service import AuthService
from backend.app.services.file_intake import FileIntake, REQUIRED_FILE_FIELDS
from backend.app.api.registrations import get_file_intake, get_notification_service
from backend.app.main import app

ADMIN_PASSWORD = "admin-password"

PDF_BYTES = b"%PDF-1.4\n% test document\n"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class FakeNotifier:
    """Records confirmation requests instead of queueing them"""

    def __init__(self):
        self.sent: List[Tuple[str, str]] = []

    async def send_registration_confirmation(self, email: str, full_name: str) -> Optional[str]:
        self.sent.append((email, full_name))
        return "fake-job-id"


@pytest.fixture
async def test_engine(tmp_path):
    """Create a throwaway SQLite database with the full schema"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    """Create test session factory"""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(test_session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session"""
    async with test_session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def file_intake(upload_dir) -> FileIntake:
    return FileIntake(upload_dir=str(upload_dir))


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture(autouse=True)
def reset_login_rate_limiter():
    login_rate_limiter.reset()
    yield
    login_rate_limiter.reset()


@pytest.fixture
async def client(test_session_factory, file_intake, fake_notifier) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with the test database and upload dir"""

    async def override_get_db():
        async with test_session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_intake] = lambda: file_intake
    app.dependency_overrides[get_notification_service] = lambda: fake_notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin(db_session) -> Admin:
    """Create the dashboard admin"""
    repo = AdminRepository(db_session)
    created = await repo.create(username="admin", email="admin@example.com", password=ADMIN_PASSWORD)
    await db_session.commit()
    return created


@pytest.fixture
def auth_headers(admin) -> dict:
    return get_auth_headers(admin)


def get_auth_headers(admin: Admin) -> dict:
    """Get authentication headers for an admin"""
    token = AuthService().create_access_token(str(admin.id), admin.username)
    return {"Authorization": f"Bearer {token}"}


def registration_form(**overrides) -> dict:
    """Text fields of a valid registration form"""
    form = {
        "fullName": "Asha Verma",
        "uid": "21BCS1001",
        "cluster": "Engineering",
        "institute": "University Institute of Engineering",
        "phoneNumber": "+919876543210",
        "email": "asha.verma@example.com",
        "leadershipRoles": "Class representative, robotics club lead",
        "yourPosition": "Class Representative",
        "nameOfEntity": "CSE Section A",
        "linkedinAccount": "https://linkedin.com/in/asha-verma",
        "terms": json.dumps([True, True, True, True]),
    }
    form.update(overrides)
    return {key: value for key, value in form.items() if value is not None}


def registration_files(**overrides) -> list:
    """Multipart file parts for the three required documents"""
    files = {
        "resume": ("resume.pdf", PDF_BYTES, "application/pdf"),
        "sop": ("sop.docx", b"PK\x03\x04 sop", DOCX_TYPE),
        "recommendationLetter": ("letter.doc", b"\xd0\xcf\x11\xe0 letter", "application/msword"),
    }
    files.update(overrides)
    return [(name, part) for name, part in files.items() if part is not None]


async def create_registration(
    db_session: AsyncSession,
    uid: str = "21BCS1001",
    email: str = "asha.verma@example.com",
    full_name: str = "Asha Verma",
    status: RegistrationStatus = RegistrationStatus.PENDING
) -> Registration:
    """Insert a registration row directly"""
    registration = Registration(
        uid=uid,
        email=email,
        full_name=full_name,
        cluster="Engineering",
        institute="University Institute of Engineering",
        phone_number="+919876543210",
        leadership_roles="Class representative",
        your_position="Class Representative",
        name_of_entity="CSE Section A",
        linkedin_account="https://linkedin.com/in/example",
        resume=f"1700000000000-{uid}-resume.pdf",
        sop=f"1700000000000-{uid}-sop.pdf",
        recommendation_letter=f"1700000000000-{uid}-recommendationLetter.pdf",
        terms=[True, True, True, True],
        status=status,
    )
    db_session.add(registration)
    await db_session.commit()
    await db_session.refresh(registration)
    return registration


def make_upload(filename: str, data: bytes = PDF_BYTES, content_type: str = "application/pdf", declared_size: bool = True) -> UploadFile:
    """Build an in-memory upload as the multipart parser would"""
    return UploadFile(
        file=io.BytesIO(data),
        size=len(data) if declared_size else None,
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def upload_set(**overrides) -> list:
    """(slot, upload) pairs for the three required documents"""
    files = {name: make_upload(f"{name}.pdf") for name in REQUIRED_FILE_FIELDS}
    files.update(overrides)
    return [(name, upload) for name, upload in files.items()]
