"""
Pytest configuration and shared fixtures for the checkout backend tests.

Provides an in-memory SQLite session per test, an httpx client bound to the
ASGI app, and in-process fakes for the Razorpay gateway and the mail sender.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

# ── Test Configuration ───────────────────────────────────────────────
# Must be set before config.settings is instantiated on first import.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-pytest-only")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_SECRET", "rzp_test_secret")
os.environ.setdefault("MAIL_HOST", "smtp.test.local")

from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import db_models  # noqa: F401  (registers tables on Base.metadata)
from database import Base, get_db
from deps import get_gateway_client, get_mail_sender, get_signature_verifier
from services.signature_service import SignatureVerifier
from tests.fakes import FakeGateway, FakeMailer, TEST_SECRET


# ── Database Fixtures ────────────────────────────────────────────────


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


# ── Collaborator Fixtures ────────────────────────────────────────────


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def verifier() -> SignatureVerifier:
    return SignatureVerifier(TEST_SECRET)


@pytest_asyncio.fixture(scope="function")
async def client(db_session, fake_gateway, fake_mailer, verifier):
    """httpx client against the app with DB and collaborators overridden."""
    from main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway_client] = lambda: fake_gateway
    app.dependency_overrides[get_mail_sender] = lambda: fake_mailer
    app.dependency_overrides[get_signature_verifier] = lambda: verifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ── Test Data Fixtures ────────────────────────────────────────────────


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory: persist a user and return it."""
    from db_models import User

    async def _make(first_name="Asha", last_name="Verma", email=None, account_type="Student"):
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email or f"{first_name.lower()}.{last_name.lower()}@example.com",
            account_type=account_type,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_course(db_session: AsyncSession):
    """Factory: persist a course with a major-unit price and return it."""
    from db_models import Course

    async def _make(course_name="Python Basics", price=500, course_id=None):
        course = Course(course_name=course_name, price=Decimal(str(price)))
        if course_id:
            course.id = course_id
        db_session.add(course)
        await db_session.commit()
        return course

    return _make


@pytest_asyncio.fixture
async def sample_user(make_user):
    return await make_user()


@pytest.fixture
def auth_headers():
    """Factory: bearer headers for a user id."""
    from middleware.auth import issue_access_token

    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {issue_access_token(user_id=user_id)}"}

    return _headers
