import os

TEST_DB_FILE = "test_portal.db"
TEST_DB_URL = f"sqlite:///./{TEST_DB_FILE}"

# must be set before portal.core.config is imported
os.environ.setdefault("PORTAL_DATABASE_URL", TEST_DB_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from portal.core.deps import get_db  # noqa: E402
from portal.core.security import hash_password  # noqa: E402
from portal.db.base import Base  # noqa: E402
from portal.main import app  # noqa: E402
from portal.models.assessment import Assessment, Question, QuestionOption  # noqa: E402
from portal.models.category import Category  # noqa: E402
from portal.models.submission import Challenge, Submission  # noqa: E402
from portal.models.user import User  # noqa: E402

PASSWORD = "password123"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def login(client, email: str, password: str = PASSWORD) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def mcq(text, options, correct, category=None):
    return Question(
        text=text,
        type="mcq",
        category_name=category,
        options=[
            QuestionOption(position=i, text=o, is_correct=o in correct)
            for i, o in enumerate(options)
        ],
    )


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(autouse=True)
def seed_data():
    """Seed a clean minimal dataset for each test; yields the ids tests need."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(Challenge).delete()
        db.query(Submission).delete()
        db.query(QuestionOption).delete()
        db.query(Question).delete()
        db.query(Assessment).delete()
        db.query(Category).delete()
        db.query(User).delete()
        db.commit()

        # Users
        student = User(
            email="student1@example.com",
            full_name="Student One",
            role="student",
            hashed_password=hash_password(PASSWORD),
        )
        other = User(
            email="student2@example.com",
            full_name="Student Two",
            role="student",
            hashed_password=hash_password(PASSWORD),
        )
        admin = User(
            email="admin1@example.com",
            full_name="Admin One",
            role="admin",
            hashed_password=hash_password(PASSWORD),
        )
        db.add_all([student, other, admin])
        db.commit()

        essay = Assessment(
            title="Essay",
            description="Write about databases",
            created_by=admin.id,
            questions=[Question(position=0, text="Explain ACID", type="descriptive")],
        )
        retired = Assessment(
            title="Retired",
            description="No longer offered",
            is_active=False,
            created_by=admin.id,
            questions=[Question(position=0, text="Old question", type="descriptive")],
        )
        quiz_questions = [
            mcq("2 + 2?", ["3", "4", "5"], {"4"}, category="Math"),
            mcq("Pick the primes", ["2", "4", "5"], {"2", "5"}, category="Math"),
            mcq("A and not A?", ["true", "false"], {"false"}, category="Logic"),
            Question(text="Prove it", type="descriptive", category_name="Math"),
            mcq("Warm-up", ["yes", "no"], {"yes"}),
        ]
        for position, q in enumerate(quiz_questions):
            q.position = position
        quiz = Assessment(
            title="Quiz",
            description="Mixed questions",
            created_by=admin.id,
            questions=quiz_questions,
        )
        db.add_all([essay, retired, quiz])
        db.commit()

        yield {
            "student": student.id,
            "other": other.id,
            "admin": admin.id,
            "essay": essay.id,
            "retired": retired.id,
            "quiz": quiz.id,
        }
    finally:
        db.close()


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    """Test client that uses the test DB session via dependency override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def student_headers(client):
    return auth_header(login(client, "student1@example.com"))


@pytest.fixture()
def other_headers(client):
    return auth_header(login(client, "student2@example.com"))


@pytest.fixture()
def admin_headers(client):
    return auth_header(login(client, "admin1@example.com"))
