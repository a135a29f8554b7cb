"""
Enrollment service for the Visnet E-Learning API.

Enroll and unenroll keep the course's ``enrollment_count`` in step with
the enrollment rows inside the same transaction.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import case
from sqlalchemy.orm import Session

from elearning.core.database import transaction
from elearning.core.exceptions import ConflictError, NotFoundError
from elearning.core.security import authorize
from elearning.models.activity import ActivityType
from elearning.models.course import Category, Course, CourseStatus, Lesson
from elearning.models.progress import Enrollment, LessonProgress
from elearning.models.user import User
from elearning.services.activity_service import record_activity


logger = logging.getLogger(__name__)


def decrement_enrollment_count(db: Session, course_id: int, by: int = 1) -> None:
    """Lower a course's counter without letting it go below zero."""
    db.query(Course).filter(Course.id == course_id).update(
        {
            Course.enrollment_count: case(
                (Course.enrollment_count > by, Course.enrollment_count - by),
                else_=0
            )
        },
        synchronize_session=False
    )


def get_enrollment(db: Session, student_id: int, course_id: int) -> Optional[Enrollment]:
    return db.query(Enrollment).filter(
        Enrollment.student_id == student_id,
        Enrollment.course_id == course_id
    ).first()


def enroll(db: Session, student: User, course_id: int) -> Enrollment:
    """
    Enroll ``student`` in a published course.

    Raises:
        ConflictError: Already enrolled
        NotFoundError: Course missing or not published
    """
    if get_enrollment(db, student.id, course_id):
        raise ConflictError("Already enrolled in this course")

    course = db.get(Course, course_id)
    if course is None or course.status != CourseStatus.PUBLISHED.value:
        raise NotFoundError("Course not found or not available")

    now = datetime.utcnow()
    enrollment = Enrollment(
        student_id=student.id,
        course_id=course_id,
        progress=0,
        enrolled_at=now,
        last_accessed_at=now
    )

    with transaction(db, "Failed to enroll in course", conflict_message="Already enrolled in this course"):
        db.add(enrollment)
        db.query(Course).filter(Course.id == course_id).update(
            {Course.enrollment_count: Course.enrollment_count + 1},
            synchronize_session=False
        )
    db.refresh(enrollment)

    logger.info(f"User {student.id} enrolled in course {course_id}")
    record_activity(db, student.id, ActivityType.COURSE_ENROLLED.value, course_id=course_id)
    return enrollment


def unenroll(db: Session, student: User, course_id: int) -> int:
    """
    Remove the enrollment and its lesson progress.

    Raises:
        NotFoundError: No enrollment for this pair
    """
    enrollment = get_enrollment(db, student.id, course_id)
    if enrollment is None:
        raise NotFoundError("Enrollment not found")

    enrollment_id = enrollment.id
    with transaction(db, "Failed to unenroll from course"):
        db.query(LessonProgress).filter(
            LessonProgress.enrollment_id == enrollment_id
        ).delete(synchronize_session=False)
        db.query(Enrollment).filter(Enrollment.id == enrollment_id).delete(synchronize_session=False)
        decrement_enrollment_count(db, course_id)
    db.expire_all()

    logger.info(f"User {student.id} unenrolled from course {course_id}")
    record_activity(db, student.id, ActivityType.COURSE_UNENROLLED.value, course_id=course_id)
    return enrollment_id


def is_enrolled(db: Session, student_id: int, course_id: int) -> bool:
    return get_enrollment(db, student_id, course_id) is not None


def get_my_enrollments(db: Session, student: User) -> List[Dict[str, Any]]:
    """Enrolled courses with category and instructor, most recently accessed first."""
    rows = (
        db.query(Enrollment, Course, Category.name, User)
        .join(Course, Enrollment.course_id == Course.id)
        .outerjoin(Category, Course.category_id == Category.id)
        .outerjoin(User, Course.instructor_id == User.id)
        .filter(Enrollment.student_id == student.id)
        .order_by(Enrollment.last_accessed_at.desc(), Enrollment.id.desc())
        .all()
    )

    enrollments = []
    for enrollment, course, category_name, instructor in rows:
        data = enrollment.to_dict()
        data.update({
            "course_title": course.title,
            "course_slug": course.slug,
            "course_description": course.short_description or course.description,
            "thumbnail_url": course.thumbnail_url,
            "level": course.level,
            "category_name": category_name,
            "instructor_name": instructor.full_name if instructor else None,
        })
        enrollments.append(data)
    return enrollments


def get_instructor_students(
    db: Session,
    instructor: User,
    course_id: Optional[int] = None
) -> List[Dict[str, Any]]:
    """
    Enrollments in the caller's courses (every course for admins),
    newest first.
    """
    query = (
        db.query(Enrollment, User, Course.title)
        .join(User, Enrollment.student_id == User.id)
        .join(Course, Enrollment.course_id == Course.id)
    )
    if not instructor.is_admin:
        query = query.filter(Course.instructor_id == instructor.id)
    if course_id is not None:
        query = query.filter(Course.id == course_id)

    rows = query.order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc()).all()

    return [
        {
            "enrollment_id": enrollment.id,
            "student_id": student.id,
            "course_id": enrollment.course_id,
            "course_title": course_title,
            "student_name": student.full_name,
            "student_email": student.email,
            "first_name": student.first_name,
            "last_name": student.last_name,
            "progress": enrollment.progress,
            "enrolled_at": enrollment.enrolled_at.isoformat() if enrollment.enrolled_at else None,
            "last_accessed_at": enrollment.last_accessed_at.isoformat() if enrollment.last_accessed_at else None,
        }
        for enrollment, student, course_title in rows
    ]


def get_student_details(db: Session, actor: User, student_id: int, course_id: int) -> Dict[str, Any]:
    """
    One student's enrollment and lesson progress in one of the caller's courses.
    """
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course not found")
    authorize(actor, owner_id=course.instructor_id, message="Not authorized to view this student")

    enrollment = get_enrollment(db, student_id, course_id)
    if enrollment is None:
        raise NotFoundError("Student enrollment not found")

    student = db.get(User, student_id)
    rows = (
        db.query(LessonProgress, Lesson.title)
        .join(Lesson, LessonProgress.lesson_id == Lesson.id)
        .filter(LessonProgress.enrollment_id == enrollment.id)
        .order_by(Lesson.order_index, Lesson.id)
        .all()
    )

    data = enrollment.to_dict()
    data.update({
        "first_name": student.first_name,
        "last_name": student.last_name,
        "email": student.email,
        "course_title": course.title,
    })

    progress = []
    for lesson_progress, lesson_title in rows:
        item = lesson_progress.to_dict()
        item["lesson_title"] = lesson_title
        progress.append(item)

    return {"enrollment": data, "progress": progress}
