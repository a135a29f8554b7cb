"""
Progress service for the Visnet E-Learning API.

Tracks per-lesson completion and time, and derives the enrollment's
aggregate progress percentage from it.
"""

from datetime import datetime
from typing import Any, Dict, List, Tuple
import logging

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from elearning.core.database import transaction
from elearning.core.exceptions import NotFoundError
from elearning.models.activity import ActivityType
from elearning.models.course import Course, Lesson
from elearning.models.progress import Enrollment, LessonProgress
from elearning.models.user import User
from elearning.services.activity_service import record_activity
from elearning.services.enrollment_service import get_enrollment


logger = logging.getLogger(__name__)


def calculate_progress(completed: int, total: int) -> int:
    """
    Percentage of completed lessons, rounded half up.

    0 when the course has no lessons.
    """
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def _require_enrollment(db: Session, student_id: int, course_id: int) -> Enrollment:
    enrollment = get_enrollment(db, student_id, course_id)
    if enrollment is None:
        raise NotFoundError("Not enrolled in this course")
    return enrollment


def _require_lesson(db: Session, course_id: int, lesson_id: int) -> Lesson:
    lesson = db.get(Lesson, lesson_id)
    if lesson is None or lesson.course_id != course_id:
        raise NotFoundError("Lesson not found in this course")
    return lesson


def _lesson_counts(db: Session, enrollment: Enrollment) -> Tuple[int, int]:
    """(completed, total) lessons for an enrollment."""
    total = db.query(func.count(Lesson.id)).filter(
        Lesson.course_id == enrollment.course_id
    ).scalar()
    completed = (
        db.query(func.count(LessonProgress.id))
        .join(Lesson, LessonProgress.lesson_id == Lesson.id)
        .filter(
            LessonProgress.enrollment_id == enrollment.id,
            LessonProgress.is_completed.is_(True),
            Lesson.course_id == enrollment.course_id
        )
        .scalar()
    )
    return completed, total


def _get_lesson_progress(db: Session, enrollment_id: int, lesson_id: int):
    return db.query(LessonProgress).filter(
        LessonProgress.enrollment_id == enrollment_id,
        LessonProgress.lesson_id == lesson_id
    ).first()


def get_course_progress(db: Session, student: User, course_id: int) -> Dict[str, Any]:
    """
    Every lesson of the course with the student's progress on it.

    Raises:
        NotFoundError: The student is not enrolled
    """
    enrollment = _require_enrollment(db, student.id, course_id)

    rows = (
        db.query(Lesson, LessonProgress)
        .outerjoin(
            LessonProgress,
            and_(
                LessonProgress.lesson_id == Lesson.id,
                LessonProgress.enrollment_id == enrollment.id
            )
        )
        .filter(Lesson.course_id == course_id)
        .order_by(Lesson.order_index, Lesson.id)
        .all()
    )

    lessons = []
    for lesson, lesson_progress in rows:
        item = lesson.to_dict()
        item.update({
            "is_completed": bool(lesson_progress and lesson_progress.is_completed),
            "time_spent_seconds": lesson_progress.time_spent_seconds if lesson_progress else 0,
            "completed_at": (
                lesson_progress.completed_at.isoformat()
                if lesson_progress and lesson_progress.completed_at else None
            ),
        })
        lessons.append(item)

    return {
        "enrollment": enrollment.to_dict(),
        "lessons": lessons,
        "totalLessons": len(lessons),
        "completedLessons": sum(1 for item in lessons if item["is_completed"]),
    }


def mark_lesson_complete(
    db: Session,
    student: User,
    course_id: int,
    lesson_id: int,
    time_spent: int = 0
) -> Dict[str, Any]:
    """
    Complete a lesson and recompute the enrollment's progress.

    Time is always added to the accumulator; the completion flag and
    timestamps are only set the first time. Course completion is
    recorded once, on the call that completes the last lesson.
    """
    enrollment = _require_enrollment(db, student.id, course_id)
    _require_lesson(db, course_id, lesson_id)

    now = datetime.utcnow()
    first_completion = False
    course_completed = False

    with transaction(db, "Failed to update progress", conflict_message="Progress was updated concurrently, please retry"):
        lesson_progress = _get_lesson_progress(db, enrollment.id, lesson_id)
        if lesson_progress is None:
            lesson_progress = LessonProgress(
                enrollment_id=enrollment.id,
                lesson_id=lesson_id,
                is_completed=False,
                time_spent_seconds=0
            )
            db.add(lesson_progress)

        lesson_progress.time_spent_seconds = (lesson_progress.time_spent_seconds or 0) + time_spent
        if not lesson_progress.is_completed:
            lesson_progress.is_completed = True
            lesson_progress.completed_at = now
            first_completion = True
        db.flush()

        completed, total = _lesson_counts(db, enrollment)
        enrollment.progress = calculate_progress(completed, total)
        enrollment.last_accessed_at = now

        if total > 0 and completed == total and not enrollment.is_completed:
            enrollment.completed_at = now
            course_completed = True

    db.refresh(enrollment)
    db.refresh(lesson_progress)

    if first_completion:
        record_activity(
            db, student.id, ActivityType.LESSON_COMPLETED.value,
            course_id=course_id, lesson_id=lesson_id,
            metadata={"time_spent": time_spent}
        )
    if course_completed:
        logger.info(f"User {student.id} completed course {course_id}")
        record_activity(db, student.id, ActivityType.COURSE_COMPLETED.value, course_id=course_id)

    return {
        "enrollment": enrollment.to_dict(),
        "lessonProgress": lesson_progress.to_dict(),
        "progress": enrollment.progress,
        "completedLessons": completed,
        "totalLessons": total,
        "courseCompleted": enrollment.is_completed,
    }


def update_lesson_time(
    db: Session,
    student: User,
    course_id: int,
    lesson_id: int,
    time_spent: int = 0
) -> Dict[str, Any]:
    """
    Add time to a lesson without completing it. The first access to a
    lesson is recorded as ``lesson_started``.
    """
    enrollment = _require_enrollment(db, student.id, course_id)
    _require_lesson(db, course_id, lesson_id)

    started = False
    with transaction(db, "Failed to update lesson time", conflict_message="Progress was updated concurrently, please retry"):
        lesson_progress = _get_lesson_progress(db, enrollment.id, lesson_id)
        if lesson_progress is None:
            lesson_progress = LessonProgress(
                enrollment_id=enrollment.id,
                lesson_id=lesson_id,
                is_completed=False,
                time_spent_seconds=0
            )
            db.add(lesson_progress)
            started = True

        lesson_progress.time_spent_seconds = (lesson_progress.time_spent_seconds or 0) + time_spent
        enrollment.last_accessed_at = datetime.utcnow()

    db.refresh(lesson_progress)

    if started:
        record_activity(
            db, student.id, ActivityType.LESSON_STARTED.value,
            course_id=course_id, lesson_id=lesson_id
        )

    return {"lessonProgress": lesson_progress.to_dict()}


def get_student_progress(db: Session, student: User) -> List[Dict[str, Any]]:
    """Every enrolled course with total and completed lesson counts."""
    total_lessons = (
        db.query(Lesson.course_id, func.count(Lesson.id).label("total"))
        .group_by(Lesson.course_id)
        .subquery()
    )
    completed_lessons = (
        db.query(LessonProgress.enrollment_id, func.count(LessonProgress.id).label("completed"))
        .filter(LessonProgress.is_completed.is_(True))
        .group_by(LessonProgress.enrollment_id)
        .subquery()
    )

    rows = (
        db.query(
            Enrollment,
            Course,
            func.coalesce(total_lessons.c.total, 0),
            func.coalesce(completed_lessons.c.completed, 0)
        )
        .join(Course, Enrollment.course_id == Course.id)
        .outerjoin(total_lessons, total_lessons.c.course_id == Course.id)
        .outerjoin(completed_lessons, completed_lessons.c.enrollment_id == Enrollment.id)
        .filter(Enrollment.student_id == student.id)
        .order_by(Enrollment.last_accessed_at.desc(), Enrollment.id.desc())
        .all()
    )

    courses = []
    for enrollment, course, total, completed in rows:
        data = enrollment.to_dict()
        data.update({
            "course_title": course.title,
            "course_slug": course.slug,
            "thumbnail_url": course.thumbnail_url,
            "totalLessons": total,
            "completedLessons": completed,
        })
        courses.append(data)
    return courses
