"""
Tests for the activity feeds, notifications and activity statistics.
"""

from conftest import complete_lesson, enroll


def activity_types(response):
    return [item["activity_type"] for item in response.json()["data"]["activities"]]


def test_my_activities_newest_first(client, student, instructor, make_course):
    _, headers = student
    course = make_course(instructor[1], title="Python Basics", lessons=1)
    enroll(client, headers, course["id"])
    complete_lesson(client, headers, course["id"], course["lesson_ids"][0])

    response = client.get("/api/activities/my-activities", headers=headers)

    assert response.status_code == 200
    assert activity_types(response) == [
        "course_completed",
        "lesson_completed",
        "course_enrolled",
        "user_registered",
    ]
    activities = response.json()["data"]["activities"]
    assert activities[0]["course_title"] == "Python Basics"
    assert activities[1]["lesson_title"] == "Lesson 1"
    assert activities[1]["metadata"] == {"time_spent": 60}


def test_my_activities_respects_limit(client, student, instructor, make_course):
    _, headers = student
    course = make_course(instructor[1])
    enroll(client, headers, course["id"])

    response = client.get("/api/activities/my-activities", headers=headers, params={"limit": 1})

    assert activity_types(response) == ["course_enrolled"]


def test_course_activities_are_scoped_to_caller_and_course(client, student, other_student, instructor, make_course):
    _, headers = student
    course = make_course(instructor[1], title="First Course")
    other = make_course(instructor[1], title="Second Course")
    enroll(client, headers, course["id"])
    enroll(client, headers, other["id"])
    enroll(client, other_student[1], course["id"])

    response = client.get(f"/api/activities/courses/{course['id']}", headers=headers)

    activities = response.json()["data"]["activities"]
    assert len(activities) == 1
    assert activities[0]["activity_type"] == "course_enrolled"
    assert activities[0]["course_id"] == course["id"]


def test_instructor_feed_shows_student_activity_in_own_courses(
    client, student, instructor, other_instructor, make_course
):
    _, headers = instructor
    mine = make_course(headers, title="Mine", lessons=1)
    theirs = make_course(other_instructor[1], title="Theirs")
    enroll(client, student[1], mine["id"])
    enroll(client, student[1], theirs["id"])

    response = client.get("/api/activities/instructor", headers=headers)

    assert response.status_code == 200
    activities = response.json()["data"]["activities"]
    assert [item["course_title"] for item in activities] == ["Mine"]
    assert activities[0]["student_name"] == "Sam Student"
    assert "course_created" not in activity_types(response)


def test_students_cannot_read_instructor_feed(client, student):
    assert client.get("/api/activities/instructor", headers=student[1]).status_code == 403


def test_notifications_follow_moderation(client, instructor, admin, make_course):
    _, headers = instructor
    _, admin_headers = admin
    course = make_course(headers, title="Under Review", publish=False)

    client.patch(f"/api/courses/{course['id']}/reject", headers=admin_headers, json={"reason": "Too short"})
    client.patch(f"/api/courses/{course['id']}/approve", headers=admin_headers)

    response = client.get("/api/activities/notifications", headers=headers)

    assert response.status_code == 200
    notifications = response.json()["data"]["notifications"]
    assert [item["metadata"]["status"] for item in notifications] == ["approved", "rejected"]
    assert notifications[1]["metadata"]["reason"] == "Too short"
    assert notifications[0]["course_title"] == "Under Review"


def test_activity_stats(client, student, instructor, make_course):
    _, headers = student
    course = make_course(instructor[1], lessons=2)
    enroll(client, headers, course["id"])
    complete_lesson(client, headers, course["id"], course["lesson_ids"][0])
    complete_lesson(client, headers, course["id"], course["lesson_ids"][1])

    response = client.get("/api/activities/stats", headers=headers, params={"period": 7})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["period"] == 7
    counts = {item["activity_type"]: item["count"] for item in data["statistics"]}
    assert counts["lesson_completed"] == 2
    assert counts["course_enrolled"] == 1
    assert counts["course_completed"] == 1
    assert all(item["activity_date"] for item in data["statistics"])


def test_activity_stats_period_is_validated(client, student):
    _, headers = student

    assert client.get("/api/activities/stats", headers=headers, params={"period": 0}).status_code == 400
    assert client.get("/api/activities/stats", headers=headers, params={"period": 366}).status_code == 400
    assert client.get("/api/activities/stats", headers=headers, params={"period": "30; DROP TABLE"}).status_code == 400
