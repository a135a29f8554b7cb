"""
Activity and audit log service for the Visnet E-Learning API.

Writes are best-effort: a failed insert is rolled back and logged, never
surfaced to the caller. Call them after the primary operation has
committed so a failure cannot undo it.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from elearning.models.activity import (
    ACTIVITY_LABELS,
    INSTRUCTOR_FEED_TYPES,
    ActivityType,
    StudentActivity
)
from elearning.models.admin import AuditLog
from elearning.models.course import Course, Lesson
from elearning.models.user import User
from elearning.utils.formatting import format_audit_timestamp, format_relative_time


logger = logging.getLogger(__name__)


def record_activity(
    db: Session,
    student_id: int,
    activity_type: str,
    course_id: Optional[int] = None,
    lesson_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Optional[StudentActivity]:
    """
    Append an activity row.

    Returns:
        The stored row, or None when the write failed
    """
    activity = StudentActivity(
        student_id=student_id,
        course_id=course_id,
        lesson_id=lesson_id,
        activity_type=activity_type,
        activity_metadata=metadata
    )
    try:
        db.add(activity)
        db.commit()
        return activity
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Failed to record {activity_type} activity for user {student_id}: {e}")
        return None


def record_audit_log(
    db: Session,
    action: str,
    email: Optional[str] = None,
    details: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_id: Optional[int] = None
) -> Optional[AuditLog]:
    """Append an audit row. Returns None when the write failed."""
    entry = AuditLog(
        action=action,
        user_id=user_id,
        email=email,
        details=details,
        ip_address=ip_address
    )
    try:
        db.add(entry)
        db.commit()
        return entry
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Failed to write audit log '{action}' for {email}: {e}")
        return None


def _newest_first(query):
    return query.order_by(StudentActivity.created_at.desc(), StudentActivity.id.desc())


def _activity_row(
    activity: StudentActivity,
    course_title: Optional[str] = None,
    lesson_title: Optional[str] = None
) -> Dict[str, Any]:
    data = activity.to_dict()
    data["course_title"] = course_title
    data["lesson_title"] = lesson_title
    return data


def get_student_activities(db: Session, student_id: int, limit: int = 10) -> List[Dict[str, Any]]:
    """Recent activity of one user, newest first."""
    rows = _newest_first(
        db.query(StudentActivity, Course.title, Lesson.title)
        .outerjoin(Course, StudentActivity.course_id == Course.id)
        .outerjoin(Lesson, StudentActivity.lesson_id == Lesson.id)
        .filter(StudentActivity.student_id == student_id)
    ).limit(limit).all()

    return [_activity_row(activity, course_title, lesson_title) for activity, course_title, lesson_title in rows]


def get_course_activities(
    db: Session,
    student_id: int,
    course_id: int,
    limit: int = 20
) -> List[Dict[str, Any]]:
    """The caller's own activity within one course."""
    rows = _newest_first(
        db.query(StudentActivity, Lesson.title)
        .outerjoin(Lesson, StudentActivity.lesson_id == Lesson.id)
        .filter(
            StudentActivity.student_id == student_id,
            StudentActivity.course_id == course_id
        )
    ).limit(limit).all()

    return [_activity_row(activity, lesson_title=lesson_title) for activity, lesson_title in rows]


def get_instructor_activities(db: Session, instructor: User, limit: int = 20) -> List[Dict[str, Any]]:
    """
    Student activity inside the instructor's courses. Admins see every course.
    """
    query = (
        db.query(StudentActivity, Course.title, User)
        .join(Course, StudentActivity.course_id == Course.id)
        .join(User, StudentActivity.student_id == User.id)
        .filter(StudentActivity.activity_type.in_(INSTRUCTOR_FEED_TYPES))
    )
    if not instructor.is_admin:
        query = query.filter(Course.instructor_id == instructor.id)

    rows = _newest_first(query).limit(limit).all()

    activities = []
    for activity, course_title, student in rows:
        data = _activity_row(activity, course_title=course_title)
        data["student_name"] = student.full_name
        activities.append(data)
    return activities


def get_notifications(db: Session, user_id: int, limit: int = 20) -> List[Dict[str, Any]]:
    """Course status notifications addressed to the user."""
    rows = _newest_first(
        db.query(StudentActivity, Course.title)
        .outerjoin(Course, StudentActivity.course_id == Course.id)
        .filter(
            StudentActivity.student_id == user_id,
            StudentActivity.activity_type == ActivityType.COURSE_STATUS_NOTIFICATION.value
        )
    ).limit(limit).all()

    return [_activity_row(activity, course_title=course_title) for activity, course_title in rows]


def get_activity_stats(db: Session, student_id: int, period: int = 30) -> List[Dict[str, Any]]:
    """
    Activity counts grouped by type and day over the last ``period`` days.
    """
    since = datetime.utcnow() - timedelta(days=period)
    activity_date = func.date(StudentActivity.created_at)

    rows = (
        db.query(
            StudentActivity.activity_type,
            func.count(StudentActivity.id),
            activity_date
        )
        .filter(
            StudentActivity.student_id == student_id,
            StudentActivity.created_at >= since
        )
        .group_by(StudentActivity.activity_type, activity_date)
        .order_by(activity_date.desc(), StudentActivity.activity_type)
        .all()
    )

    return [
        {
            "activity_type": activity_type,
            "count": count,
            "activity_date": str(day) if day is not None else None,
        }
        for activity_type, count, day in rows
    ]


def get_recent_activities(db: Session, limit: int = 10) -> List[Dict[str, Any]]:
    """Platform-wide feed for the admin dashboard."""
    rows = _newest_first(
        db.query(StudentActivity, User, Course.title)
        .join(User, StudentActivity.student_id == User.id)
        .outerjoin(Course, StudentActivity.course_id == Course.id)
    ).limit(limit).all()

    return [
        {
            "id": activity.id,
            "type": activity.activity_type,
            "action": ACTIVITY_LABELS.get(activity.activity_type, activity.activity_type),
            "user": user.full_name,
            "courseName": course_title,
            "time": format_relative_time(activity.created_at),
        }
        for activity, user, course_title in rows
    ]


def get_audit_logs(db: Session, limit: int = 50) -> List[Dict[str, Any]]:
    """Audit trail, newest first."""
    entries = (
        db.query(AuditLog)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )

    return [
        {
            "id": entry.id,
            "timestamp": format_audit_timestamp(entry.created_at),
            "action": entry.action,
            "user": entry.email or "System",
            "details": entry.details or "",
            "ip_address": entry.ip_address or "N/A",
        }
        for entry in entries
    ]
