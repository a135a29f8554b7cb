"""
Tests for the admin dashboard, user management and course moderation.
"""

from conftest import DEFAULT_PASSWORD, complete_lesson, enroll
from elearning.models import AuditLog, Course, Enrollment, StudentActivity, User


def test_admin_endpoints_require_admin(client, student, instructor):
    for headers in (student[1], instructor[1]):
        assert client.get("/api/admin/stats", headers=headers).status_code == 403
        assert client.get("/api/admin/users", headers=headers).status_code == 403
        assert client.get("/api/admin/courses", headers=headers).status_code == 403

    assert client.get("/api/admin/stats").status_code == 401


def test_platform_stats(client, db, admin, student, other_student, instructor, make_course):
    _, admin_headers = admin
    course = make_course(instructor[1], lessons=1)
    make_course(instructor[1], title="Draft Course", publish=False)
    enroll(client, student[1], course["id"])
    enroll(client, other_student[1], course["id"])
    complete_lesson(client, student[1], course["id"], course["lesson_ids"][0])

    db.get(User, other_student[0]["id"]).is_active = False
    db.commit()

    response = client.get("/api/admin/stats", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {
        "totalUsers": 3,
        "totalCourses": 1,
        "totalInstructors": 1,
        "totalStudents": 1,
        "totalEnrollments": 2,
        "completedEnrollments": 1,
    }


def test_recent_activities_feed(client, admin, student, instructor, make_course):
    course = make_course(instructor[1], title="Python Basics")
    enroll(client, student[1], course["id"])

    response = client.get("/api/admin/activities", headers=admin[1], params={"limit": 2})

    assert response.status_code == 200
    activities = response.json()["data"]["activities"]
    assert len(activities) == 2
    assert activities[0]["action"] == "Student enrolled in course"
    assert activities[0]["user"] == "Sam Student"
    assert activities[0]["courseName"] == "Python Basics"
    assert activities[0]["time"] == "just now"


def test_list_users_with_role_filter(client, admin, student, other_student, instructor):
    _, headers = admin

    everyone = client.get("/api/admin/users", headers=headers).json()["data"]
    students = client.get("/api/admin/users", headers=headers, params={"role": "student"}).json()["data"]

    assert everyone["total"] == 4
    assert students["total"] == 2
    assert {user["email"] for user in students["users"]} == {
        "student@example.com",
        "second.student@example.com",
    }
    assert all("passwordHash" not in user and "password_hash" not in user for user in everyone["users"])


def test_get_single_user(client, admin, student):
    user, _ = student

    response = client.get(f"/api/admin/users/{user['id']}", headers=admin[1])
    missing = client.get("/api/admin/users/9999", headers=admin[1])

    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "student@example.com"
    assert missing.status_code == 404


def test_deactivate_and_reactivate_user(client, db, admin, student):
    user, student_headers = student
    admin_user, headers = admin

    response = client.patch(f"/api/admin/users/{user['id']}/status", headers=headers, json={"isActive": False})

    assert response.status_code == 200
    assert response.json()["message"] == "User deactivated successfully"
    assert client.get("/api/auth/profile", headers=student_headers).status_code == 401

    client.patch(f"/api/admin/users/{user['id']}/status", headers=headers, json={"isActive": True})
    assert client.get("/api/auth/profile", headers=student_headers).status_code == 200

    actions = [entry.action for entry in db.query(AuditLog).filter(AuditLog.email == admin_user["email"]).order_by(AuditLog.id)]
    assert actions == ["user_deactivated", "user_activated"]


def test_admin_cannot_deactivate_or_delete_self(client, admin):
    admin_user, headers = admin

    deactivate = client.patch(f"/api/admin/users/{admin_user['id']}/status", headers=headers, json={"isActive": False})
    delete = client.delete(f"/api/admin/users/{admin_user['id']}", headers=headers)

    assert deactivate.status_code == 400
    assert delete.status_code == 400


def test_delete_instructor_cascades_to_courses(client, db, admin, instructor, student, make_course):
    instructor_user, headers = instructor
    course = make_course(headers, lessons=2)
    enroll(client, student[1], course["id"])

    response = client.delete(f"/api/admin/users/{instructor_user['id']}", headers=admin[1])

    assert response.status_code == 200
    assert db.get(User, instructor_user["id"]) is None
    assert db.get(Course, course["id"]) is None
    assert db.query(Enrollment).count() == 0
    assert db.query(StudentActivity).filter(StudentActivity.course_id == course["id"]).count() == 0
    assert client.post("/api/auth/login", json={
        "email": instructor_user["email"],
        "password": DEFAULT_PASSWORD,
    }).status_code == 401


def test_delete_student_decrements_course_counters(client, db, admin, instructor, student, other_student, make_course):
    student_user, student_headers = student
    course = make_course(instructor[1], lessons=1)
    enroll(client, student_headers, course["id"])
    enroll(client, other_student[1], course["id"])
    complete_lesson(client, student_headers, course["id"], course["lesson_ids"][0])

    response = client.delete(f"/api/admin/users/{student_user['id']}", headers=admin[1])

    assert response.status_code == 200
    assert db.get(Course, course["id"]).enrollment_count == 1
    assert db.query(StudentActivity).filter(StudentActivity.student_id == student_user["id"]).count() == 0
    entry = db.query(AuditLog).filter(AuditLog.action == "user_deleted").one()
    assert "student@example.com" in entry.details


def test_delete_missing_user_is_not_found(client, admin):
    assert client.delete("/api/admin/users/9999", headers=admin[1]).status_code == 404


def test_admin_course_listing_puts_drafts_after_published(client, admin, instructor, student, make_course):
    _, headers = instructor
    draft = make_course(headers, title="Draft Course", publish=False)
    live = make_course(headers, title="Live Course")
    enroll(client, student[1], live["id"])

    response = client.get("/api/admin/courses", headers=admin[1])

    assert response.status_code == 200
    courses = response.json()["data"]["courses"]
    assert [course["id"] for course in courses] == [live["id"], draft["id"]]
    assert courses[0]["enrolled_students"] == 1
    assert courses[0]["instructor_email"] == "instructor@example.com"
    assert response.json()["data"]["total"] == 2


def test_admin_course_moderation_routes(client, db, admin, instructor, make_course):
    _, headers = instructor
    _, admin_headers = admin
    course = make_course(headers, title="Moderated Course", publish=False)

    rejected = client.patch(f"/api/admin/courses/{course['id']}/reject", headers=admin_headers, json={"reason": "Add more lessons"})
    assert rejected.status_code == 200
    assert rejected.json()["data"]["rejection_reason"] == "Add more lessons"

    approved = client.patch(f"/api/admin/courses/{course['id']}/approve", headers=admin_headers)
    assert approved.status_code == 200
    assert approved.json()["data"]["course"]["status"] == "published"
    assert approved.json()["data"]["course"]["rejection_reason"] is None

    deleted = client.delete(f"/api/admin/courses/{course['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert db.get(Course, course["id"]) is None
    entry = db.query(AuditLog).filter(AuditLog.action == "course_deleted").one()
    assert "Moderated Course" in entry.details


def test_audit_log_listing(client, admin, student):
    response = client.get("/api/admin/audit-logs", headers=admin[1])

    assert response.status_code == 200
    logs = response.json()["data"]["logs"]
    assert logs[0]["action"] == "user_registered"
    assert logs[0]["user"] == "student@example.com"
    assert logs[0]["ip_address"]
