import os
from typing import AsyncGenerator, Generator

import pytest
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Settings are cached on first import of the app, so test values go in first
os.environ.setdefault("ENCRYPTION_KEY", "test-master-secret")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("SESSION_HTTPS_ONLY", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GEMINI_API_KEY", "")
os.environ.setdefault("GITHUB_CLIENT_ID", "test-client-id")
os.environ.setdefault("GITHUB_CLIENT_SECRET", "test-client-secret")

# Load environment variables from .env file
load_dotenv()

from mocks.github_client import MockGitHubClient  # noqa: E402
from src.db import Base, create_db_session  # noqa: E402
from src.dependencies import get_current_user, get_github_client_factory  # noqa: E402
from src.main import app  # noqa: E402
from src.schemas import SessionUser  # noqa: E402
from src.services import CredentialCipher  # noqa: E402

TEST_USER = SessionUser(
    login="octocat",
    email="octocat@example.com",
    sealed_access_token=CredentialCipher(os.environ["ENCRYPTION_KEY"]).encrypt(
        "gho_oauth_token", "octocat@example.com"
    ),
)


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite shared across connections for one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """
    Provides a session for each test function and routes the app's
    create_db_session dependency to it.
    """
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    app.dependency_overrides[create_db_session] = lambda: db
    try:
        yield db
    finally:
        db.rollback()
        db.close()
        app.dependency_overrides.pop(create_db_session, None)


@pytest.fixture(scope="session")
def cipher() -> CredentialCipher:
    return CredentialCipher(os.environ["ENCRYPTION_KEY"])


@pytest.fixture
def mock_github() -> MockGitHubClient:
    return MockGitHubClient()


@pytest.fixture
def authenticated(db_session: Session, mock_github: MockGitHubClient):
    """Signs TEST_USER in and serves GitHub calls from the mock client."""
    app.dependency_overrides[get_current_user] = lambda: TEST_USER
    app.dependency_overrides[get_github_client_factory] = lambda: (
        lambda token: mock_github
    )
    yield TEST_USER
    app.dependency_overrides.pop(get_current_user, None)
    app.dependency_overrides.pop(get_github_client_factory, None)


@pytest.fixture
async def client(db_session: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an httpx.AsyncClient instance that is properly configured for
    database-dependent tests.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c
