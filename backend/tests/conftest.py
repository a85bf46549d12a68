"""
Project Repository - Test Configuration and Fixtures
"""
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import AsyncGenerator, Callable

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
UPLOAD_ROOT = tempfile.mkdtemp(prefix="fyp-uploads-")
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['UPLOAD_DIR_STR'] = UPLOAD_ROOT
os.environ['LOG_FILE'] = ''
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ.pop('ADMIN_EMAIL', None)
os.environ.pop('ADMIN_PASSWORD', None)

from fyp_repository.main import app
from fyp_repository.core.database import Base, get_db
from fyp_repository.core.security import create_access_token
from fyp_repository.models.admin import Admin, AdminRole
from fyp_repository.models.project import Project, ProjectStatus
from fyp_repository.utils.helpers import generate_project_id

fake = Faker()

ADMIN_PASSWORD = 'adminpassword123'

PDF_BYTES = (
    b"%PDF-1.4\n1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
    b"2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj\n"
    b"3 0 obj<</Type/Page/Parent 2 0 R/MediaBox[0 0 612 792]>>endobj\n"
    b"trailer<</Root 1 0 R>>\n%%EOF\n"
)

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir() -> Path:
    return Path(UPLOAD_ROOT)


@pytest.fixture
def pdf_bytes() -> bytes:
    return PDF_BYTES


@pytest.fixture
def project_form() -> dict:
    """Valid multipart metadata for an upload"""
    return {
        'title': 'Land Administration Using Open Cadastral Data',
        'author': fake.name(),
        'department': 'Geoinformatics',
        'year': str(datetime.utcnow().year),
        'abstract': 'A' * 50 + ' study of open cadastral data for land administration.',
        'supervisor': 'Dr. ' + fake.last_name(),
    }


@pytest.fixture
def admin_password() -> str:
    return ADMIN_PASSWORD


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> Admin:
    """Create an admin account"""
    admin = Admin(email=fake.email(), role=AdminRole.ADMIN)
    admin.password = ADMIN_PASSWORD
    db_session.add(admin)
    await db_session.commit()
    await db_session.refresh(admin)
    return admin


@pytest.fixture
def admin_auth_headers(admin_user: Admin) -> dict:
    """Generate authentication headers for the admin"""
    token_data = {
        'sub': str(admin_user.id),
        'email': admin_user.email,
        'role': admin_user.role.value
    }
    token = create_access_token(token_data)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def create_project(db_session: AsyncSession, upload_dir: Path) -> Callable:
    """
    Factory for stored projects with a real PDF on disk.

    Usage: project = await create_project(status=ProjectStatus.APPROVED, year=2024)
    """
    counter = {'n': 0}

    async def _create(status: ProjectStatus = ProjectStatus.APPROVED, **overrides) -> Project:
        counter['n'] += 1
        file_path = upload_dir / f"fixture-{fake.uuid4()}.pdf"
        file_path.write_bytes(PDF_BYTES)

        values = {
            'project_id': generate_project_id(),
            'title': f"{fake.catch_phrase()} survey {counter['n']}",
            'author': fake.name(),
            'department': 'Surveying',
            'year': 2023,
            'abstract': fake.text(max_nb_chars=400).ljust(60, '.'),
            'supervisor': 'Prof. ' + fake.last_name(),
            'file_path': str(file_path),
            'file_name': f"report-{counter['n']}.pdf",
            'file_size': len(PDF_BYTES),
            'status': status,
            'uploaded_at': datetime.utcnow() + timedelta(seconds=counter['n']),
        }
        values.update(overrides)

        project = Project(**values, ratings=[], comments=[])
        db_session.add(project)
        await db_session.commit()
        return project

    return _create
