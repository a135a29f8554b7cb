"""
Shared fixtures for the Visnet E-Learning API tests.

Settings are read at import time, so the test environment is configured
before anything from ``elearning`` is imported.
"""

import os

os.environ["TESTING"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

from typing import Callable, Dict, Generator, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from elearning.core.database import Base, SessionLocal, engine
from elearning.core.security import get_password_hash
from elearning.main import app
from elearning.models import Category, User, UserRole


DEFAULT_PASSWORD = "password123"

Headers = Dict[str, str]


@pytest.fixture(autouse=True)
def reset_database() -> Generator[None, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token: str) -> Headers:
    return {"Authorization": f"Bearer {token}"}


def register(
    client: TestClient,
    email: str,
    role: str = "student",
    password: str = DEFAULT_PASSWORD,
    first_name: str = "Test",
    last_name: str = "User"
) -> Tuple[dict, Headers]:
    response = client.post("/api/auth/register", json={
        "email": email,
        "password": password,
        "firstName": first_name,
        "lastName": last_name,
        "role": role,
    })
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["user"], auth_headers(data["token"])


@pytest.fixture
def student(client) -> Tuple[dict, Headers]:
    return register(client, "student@example.com", first_name="Sam", last_name="Student")


@pytest.fixture
def other_student(client) -> Tuple[dict, Headers]:
    return register(client, "second.student@example.com", first_name="Sue", last_name="Scholar")


@pytest.fixture
def instructor(client) -> Tuple[dict, Headers]:
    return register(client, "instructor@example.com", role="instructor", first_name="Ivy", last_name="Instructor")


@pytest.fixture
def other_instructor(client) -> Tuple[dict, Headers]:
    return register(client, "other.instructor@example.com", role="instructor", first_name="Otto", last_name="Other")


@pytest.fixture
def admin(client, db) -> Tuple[dict, Headers]:
    """Admins cannot self-register, so the row is inserted directly."""
    db.add(User(
        email="admin@example.com",
        password_hash=get_password_hash(DEFAULT_PASSWORD),
        first_name="Ada",
        last_name="Admin",
        role=UserRole.ADMIN.value,
        is_active=True,
        is_verified=True
    ))
    db.commit()

    response = client.post("/api/auth/login", json={
        "email": "admin@example.com",
        "password": DEFAULT_PASSWORD,
    })
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    return data["user"], auth_headers(data["token"])


@pytest.fixture
def category(db) -> Category:
    category = Category(name="Programming", slug="programming")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_course(client, category) -> Callable[..., dict]:
    """
    Create a course through the API, optionally with lessons and published.
    """
    def _make(
        headers: Headers,
        title: str = "Python Basics",
        lessons: int = 0,
        publish: bool = True,
        **fields
    ) -> dict:
        payload = {
            "title": title,
            "description": f"Learn {title} from scratch",
            "category_id": category.id,
            "level": "beginner",
            "language": "English",
        }
        payload.update(fields)
        response = client.post("/api/courses", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        course = response.json()["data"]["course"]

        lesson_ids: List[int] = []
        for number in range(1, lessons + 1):
            lesson_response = client.post(
                f"/api/courses/{course['id']}/lessons",
                json={"title": f"Lesson {number}", "duration_minutes": 10},
                headers=headers
            )
            assert lesson_response.status_code == 201, lesson_response.text
            lesson_ids.append(lesson_response.json()["data"]["lesson"]["id"])

        if publish and course["status"] != "published":
            publish_response = client.put(f"/api/courses/{course['id']}/publish", headers=headers)
            assert publish_response.status_code == 200, publish_response.text
            course = publish_response.json()["data"]["course"]

        course["lesson_ids"] = lesson_ids
        return course

    return _make


def enroll(client: TestClient, headers: Headers, course_id: int):
    return client.post(f"/api/enrollments/{course_id}", headers=headers)


def complete_lesson(
    client: TestClient,
    headers: Headers,
    course_id: int,
    lesson_id: int,
    time_spent: Optional[int] = 60
):
    body = {"timeSpent": time_spent} if time_spent is not None else None
    return client.post(
        f"/api/progress/courses/{course_id}/lessons/{lesson_id}/complete",
        json=body,
        headers=headers
    )
