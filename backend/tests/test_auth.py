"""
Tests for registration, login, token handling and profile endpoints.
"""

from datetime import timedelta

from conftest import DEFAULT_PASSWORD, auth_headers, register
from elearning.core.security import create_access_token
from elearning.models import AuditLog, StudentActivity, User


def test_register_returns_user_and_token(client):
    response = client.post("/api/auth/register", json={
        "email": "New.Person@Example.com",
        "password": "secret123",
        "firstName": "New",
        "lastName": "Person",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "SUCCESS"
    user = body["data"]["user"]
    assert user["email"] == "new.person@example.com"
    assert user["role"] == "student"
    assert user["firstName"] == "New"
    assert body["data"]["token"]


def test_register_then_login_with_lowercased_email(client):
    register(client, "Mixed.Case@Example.com")

    response = client.post("/api/auth/login", json={
        "email": "mixed.case@example.com",
        "password": DEFAULT_PASSWORD,
    })

    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "mixed.case@example.com"


def test_duplicate_email_in_any_casing_is_a_conflict(client):
    register(client, "dup@example.com")

    response = client.post("/api/auth/register", json={
        "email": "DUP@EXAMPLE.COM",
        "password": DEFAULT_PASSWORD,
        "firstName": "Again",
        "lastName": "Person",
    })

    assert response.status_code == 409
    assert response.json() == {"status": "ERROR", "message": "Email already registered"}


def test_registration_writes_activity_and_audit_rows(client, db):
    user, _ = register(client, "logged@example.com")

    assert db.query(StudentActivity).filter(
        StudentActivity.student_id == user["id"],
        StudentActivity.activity_type == "user_registered"
    ).count() == 1
    audit = db.query(AuditLog).filter(AuditLog.email == "logged@example.com").one()
    assert audit.action == "user_registered"


def test_admin_self_registration_is_refused(client, db):
    response = client.post("/api/auth/register", json={
        "email": "sneaky@example.com",
        "password": DEFAULT_PASSWORD,
        "firstName": "Sneaky",
        "lastName": "Admin",
        "role": "admin",
    })

    assert response.status_code == 400
    assert db.query(User).filter(User.email == "sneaky@example.com").count() == 0


def test_register_validation_errors_are_listed(client):
    response = client.post("/api/auth/register", json={
        "email": "not-an-email",
        "password": "123",
        "firstName": "A",
        "lastName": "Person",
    })

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "ERROR"
    assert body["message"] == "Validation errors"
    fields = {error["field"] for error in body["errors"]}
    assert {"email", "password", "firstName"} <= fields


def test_login_with_wrong_password_is_unauthorized(client):
    register(client, "person@example.com")

    response = client.post("/api/auth/login", json={
        "email": "person@example.com",
        "password": "wrong-password",
    })

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


def test_login_with_unknown_email_is_unauthorized(client):
    response = client.post("/api/auth/login", json={
        "email": "nobody@example.com",
        "password": DEFAULT_PASSWORD,
    })

    assert response.status_code == 401


def test_login_stamps_last_login(client, db):
    user, _ = register(client, "stamp@example.com")

    client.post("/api/auth/login", json={"email": "stamp@example.com", "password": DEFAULT_PASSWORD})

    assert db.get(User, user["id"]).last_login is not None


def test_profile_requires_a_token(client):
    response = client.get("/api/auth/profile")

    assert response.status_code == 401
    assert response.json()["message"] == "Access token required"


def test_profile_rejects_invalid_and_expired_tokens(client, student):
    user, _ = student
    expired = create_access_token(subject=str(user["id"]), expires_delta=timedelta(seconds=-1))

    assert client.get("/api/auth/profile", headers=auth_headers("garbage")).status_code == 401
    assert client.get("/api/auth/profile", headers=auth_headers(expired)).status_code == 401


def test_token_for_deleted_user_is_invalid(client):
    token = create_access_token(subject="9999")

    response = client.get("/api/auth/profile", headers=auth_headers(token))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_deactivated_user_is_locked_out_on_next_request(client, db, student):
    user, headers = student
    assert client.get("/api/auth/profile", headers=headers).status_code == 200

    db.get(User, user["id"]).is_active = False
    db.commit()

    response = client.get("/api/auth/profile", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Account is deactivated"

    login = client.post("/api/auth/login", json={"email": user["email"], "password": DEFAULT_PASSWORD})
    assert login.status_code == 401


def test_get_profile(client, student):
    user, headers = student

    response = client.get("/api/auth/profile", headers=headers)

    assert response.status_code == 200
    profile = response.json()["data"]["user"]
    assert profile["id"] == user["id"]
    assert profile["lastName"] == "Student"
    assert "bio" in profile


def test_update_profile_turns_empty_strings_into_null(client, student):
    _, headers = student

    response = client.put("/api/auth/profile", headers=headers, json={
        "firstName": "Samuel",
        "lastName": "Student",
        "bio": "Learning every day",
        "phone": "+1 555 123 4567",
        "dateOfBirth": "1999-04-12",
    })
    assert response.status_code == 200
    profile = response.json()["data"]["user"]
    assert profile["firstName"] == "Samuel"
    assert profile["dateOfBirth"] == "1999-04-12"

    response = client.put("/api/auth/profile", headers=headers, json={
        "firstName": "Samuel",
        "lastName": "Student",
        "bio": "",
        "phone": "",
        "dateOfBirth": "",
    })
    assert response.status_code == 200
    profile = response.json()["data"]["user"]
    assert profile["bio"] is None
    assert profile["phone"] is None
    assert profile["dateOfBirth"] is None


def test_update_profile_rejects_bad_phone(client, student):
    _, headers = student

    response = client.put("/api/auth/profile", headers=headers, json={
        "firstName": "Sam",
        "lastName": "Student",
        "phone": "call me maybe",
    })

    assert response.status_code == 400


def test_change_password(client, student):
    user, headers = student

    wrong = client.put("/api/auth/password", headers=headers, json={
        "currentPassword": "not-it",
        "newPassword": "brand-new-pass",
    })
    assert wrong.status_code == 400

    response = client.put("/api/auth/password", headers=headers, json={
        "currentPassword": DEFAULT_PASSWORD,
        "newPassword": "brand-new-pass",
    })
    assert response.status_code == 200

    old = client.post("/api/auth/login", json={"email": user["email"], "password": DEFAULT_PASSWORD})
    new = client.post("/api/auth/login", json={"email": user["email"], "password": "brand-new-pass"})
    assert old.status_code == 401
    assert new.status_code == 200
