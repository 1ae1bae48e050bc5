"""Pytest configuration and fixtures."""

import os

# Must be set before app modules read their settings
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SMTP_HOST", "")
os.environ.setdefault("FRONTEND_URL", "http://localhost:5173")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models.password_reset_token import PasswordResetToken  # noqa: F401
from app.models.refresh_token import RefreshToken  # noqa: F401
from app.models.trans_category import TransCategory  # noqa: F401
from app.models.transaction import Transaction  # noqa: F401
from app.models.user import User
from app.services.auth import AuthService
from app.services.jwt import get_jwt_service

TEST_PASSWORD = "password123"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    import main
    from app.rate_limit import limiter

    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    # Startup seeding and token purge run against the test DB session
    main.startup_session_factory = lambda: db_session

    main.app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(main.app) as c:
        yield c
    limiter.enabled = True
    main.app.dependency_overrides.clear()
    main.startup_session_factory = None


def _make_user(db_session: Session, name: str, email: str, role: str = "user") -> dict:
    user = AuthService().register(db_session, name, email, TEST_PASSWORD)
    if role != "user":
        user.role = role
        db_session.commit()
        db_session.refresh(user)

    token = get_jwt_service().create_access_token(user.id, user.role)
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "password": TEST_PASSWORD,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Create a test user and return its details plus an access token."""
    return _make_user(db_session, "Test User", "test@example.com")


@pytest.fixture(name="other_user")
def other_user_fixture(db_session: Session):
    """A second, unrelated user."""
    return _make_user(db_session, "Other User", "other@example.com")


@pytest.fixture(name="admin_user")
def admin_user_fixture(db_session: Session):
    """A user with the admin role."""
    return _make_user(db_session, "Admin User", "admin@example.com", role="admin")


@pytest.fixture(name="get_user")
def get_user_fixture(db_session: Session):
    """Reload a user row by email, bypassing the identity map."""

    def _get(email: str) -> User:
        db_session.expire_all()
        return db_session.query(User).filter(User.email == email).one()

    return _get
