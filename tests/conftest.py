"""
Shared fixtures: in-memory SQLite database, overridden dependencies and a
logged-in test user.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from prepwise.main import app
from prepwise.db.base import Base
from prepwise.db.models import User
from prepwise.core.auth_dependency import get_db
from prepwise.core.security import hash_password, create_access_token
from prepwise.services.scoring_service import FeedbackAssessment, TranscriptScorer, get_transcript_scorer


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FixedScorer(TranscriptScorer):
    """Scorer returning a fixed assessment and recording what it was given."""

    def __init__(self, total_score: int = 72):
        self.total_score = total_score
        self.calls = []

    def score(self, transcript):
        self.calls.append(list(transcript))
        return FeedbackAssessment(
            total_score=self.total_score,
            strengths=["Clear answers"],
            areas_for_improvement=["More examples"],
            final_assessment=f"Assessed {len(transcript)} messages.",
        )


class FailingScorer(TranscriptScorer):
    def score(self, transcript):
        raise RuntimeError("scoring service unavailable")


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def scorer():
    return FixedScorer()


@pytest.fixture
def client(scorer):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_transcript_scorer] = lambda: scorer
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, email: str, full_name: str = "Test User") -> User:
    user = User(
        full_name=full_name,
        email=email,
        password_hash=hash_password("testpass123"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db_session):
    """Create a test user."""
    return make_user(db_session, "test@example.com")


@pytest.fixture
def other_user(db_session):
    return make_user(db_session, "other@example.com", full_name="Other User")


@pytest.fixture
def test_user_token(test_user):
    """Create JWT token for test user."""
    return create_access_token({"sub": test_user.email})


@pytest.fixture
def auth_headers(test_user_token):
    return {"Authorization": f"Bearer {test_user_token}"}
