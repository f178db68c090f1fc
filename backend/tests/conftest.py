"""
Test configuration and fixtures for the Team Tasks API tests.

Provides:
- Test database with SQLite in-memory for speed
- FastAPI test client with database dependency override
- Authentication helpers (JWT token generation)
- Common fixtures for users, teams and tasks
"""

import os
import sys
import logging
from datetime import timedelta
from typing import Generator, Dict

# Configure the app before it is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import Base, get_db
from main import app
import models
from auth.security import hash_password, create_access_token

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)

# SQLite in-memory database for fast testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """
    Create a fresh in-memory SQLite database for each test.

    This ensures test isolation and fast execution.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(test_db: Session) -> Generator[TestClient, None, None]:
    """
    Create FastAPI test client with database dependency override.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_user(db: Session, name: str, email: str, password: str = TEST_PASSWORD) -> models.User:
    user = models.User(name=name, email=email, password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_team(db: Session, creator: models.User, name: str = "Test Team", members=()) -> models.Team:
    """Create a team with the creator (and any extra users) as members."""
    team = models.Team(name=name, description="A team for testing", created_by=creator.id)
    db.add(team)
    db.flush()
    for user in [creator, *members]:
        db.add(models.TeamMember(team_id=team.id, user_id=user.id))
    db.commit()
    db.refresh(team)
    return team


def make_task(db: Session, team: models.Team, creator: models.User, title: str = "Task", **kwargs) -> models.Task:
    task = models.Task(team_id=team.id, created_by_id=creator.id, title=title, **kwargs)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@pytest.fixture(scope="function")
def creator_user(test_db: Session) -> models.User:
    """The user who creates the test team."""
    return make_user(test_db, "Team Creator", "creator@test.com")


@pytest.fixture(scope="function")
def member_user(test_db: Session) -> models.User:
    """A regular member of the test team."""
    return make_user(test_db, "Team Member", "member@test.com")


@pytest.fixture(scope="function")
def outsider_user(test_db: Session) -> models.User:
    """A user who belongs to no team."""
    return make_user(test_db, "Outsider", "outsider@test.com")


def create_auth_token(user: models.User, expires_delta: timedelta = None) -> str:
    """
    Helper to create JWT access token for a user.

    Args:
        user: User to create token for
        expires_delta: Optional expiration time override

    Returns:
        JWT access token string
    """
    return create_access_token({"sub": str(user.id)}, expires_delta)


def auth_headers_for(user: models.User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_auth_token(user)}"}


@pytest.fixture(scope="function")
def creator_headers(creator_user: models.User) -> Dict[str, str]:
    return auth_headers_for(creator_user)


@pytest.fixture(scope="function")
def member_headers(member_user: models.User) -> Dict[str, str]:
    return auth_headers_for(member_user)


@pytest.fixture(scope="function")
def outsider_headers(outsider_user: models.User) -> Dict[str, str]:
    return auth_headers_for(outsider_user)


@pytest.fixture(scope="function")
def team(test_db: Session, creator_user: models.User, member_user: models.User) -> models.Team:
    """
    Create a test team: creator_user created it, member_user was added.
    """
    team = make_team(test_db, creator_user, members=[member_user])
    logger.info(f"Created test team with ID: {team.id}")
    return team


@pytest.fixture(scope="function")
def task(test_db: Session, team: models.Team, creator_user: models.User) -> models.Task:
    return make_task(test_db, team, creator_user, title="Write docs", description="Initial docs")
