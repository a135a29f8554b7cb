"""
Admin service for the Visnet E-Learning API.

Platform statistics and user management, including the hard-delete
cascade for user accounts.
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from elearning.core.database import transaction
from elearning.core.exceptions import NotFoundError, ValidationError
from elearning.models.activity import StudentActivity
from elearning.models.admin import AuditAction
from elearning.models.course import Course, CourseStatus
from elearning.models.progress import Enrollment, LessonProgress
from elearning.models.user import User, UserRole
from elearning.services.activity_service import record_audit_log
from elearning.services.course_service import delete_course_rows
from elearning.services.enrollment_service import decrement_enrollment_count


logger = logging.getLogger(__name__)


def get_platform_stats(db: Session) -> Dict[str, int]:
    """
    Dashboard counters. Users count only when active, courses only when
    published.
    """
    def count_active(role: Optional[UserRole] = None) -> int:
        query = db.query(func.count(User.id)).filter(User.is_active.is_(True))
        if role is not None:
            query = query.filter(User.role == role.value)
        return query.scalar()

    return {
        "totalUsers": count_active(),
        "totalCourses": db.query(func.count(Course.id)).filter(
            Course.status == CourseStatus.PUBLISHED.value
        ).scalar(),
        "totalInstructors": count_active(UserRole.INSTRUCTOR),
        "totalStudents": count_active(UserRole.STUDENT),
        "totalEnrollments": db.query(func.count(Enrollment.id)).scalar(),
        "completedEnrollments": db.query(func.count(Enrollment.id)).filter(
            Enrollment.completed_at.isnot(None)
        ).scalar(),
    }


def list_users(
    db: Session,
    role: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> Dict[str, Any]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)

    total = query.count()
    users = query.order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(limit).all()

    return {
        "users": [user.to_dict(include_profile=True) for user in users],
        "total": total,
        "limit": limit,
        "offset": offset,
    }


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def set_user_status(
    db: Session,
    admin: User,
    user_id: int,
    is_active: bool,
    ip_address: Optional[str] = None
) -> User:
    """
    Activate or deactivate an account. Takes effect on the user's next request.
    """
    if user_id == admin.id and not is_active:
        raise ValidationError("You cannot deactivate your own account")

    user = get_user_or_404(db, user_id)

    with transaction(db, "Failed to update user status"):
        user.is_active = is_active
    db.refresh(user)

    action = AuditAction.USER_ACTIVATED if is_active else AuditAction.USER_DEACTIVATED
    logger.info(f"User {user.id} {'activated' if is_active else 'deactivated'} by admin {admin.email}")
    record_audit_log(
        db,
        action.value,
        email=admin.email,
        details=f"{'Activated' if is_active else 'Deactivated'} user {user.email}",
        ip_address=ip_address,
        user_id=admin.id
    )
    return user


def delete_user(
    db: Session,
    admin: User,
    user_id: int,
    ip_address: Optional[str] = None
) -> int:
    """
    Hard-delete a user with the courses they own, their enrollments and
    their activity, in one transaction.
    """
    if user_id == admin.id:
        raise ValidationError("You cannot delete your own account")

    user = get_user_or_404(db, user_id)
    email = user.email

    owned_course_ids = [
        course_id for (course_id,) in db.query(Course.id).filter(Course.instructor_id == user_id).all()
    ]
    enrollments = db.query(Enrollment.id, Enrollment.course_id).filter(
        Enrollment.student_id == user_id,
        Enrollment.course_id.notin_(owned_course_ids)
    ).all()

    with transaction(db, "Failed to delete user"):
        delete_course_rows(db, owned_course_ids)

        enrollment_ids = [enrollment_id for enrollment_id, _ in enrollments]
        if enrollment_ids:
            db.query(LessonProgress).filter(
                LessonProgress.enrollment_id.in_(enrollment_ids)
            ).delete(synchronize_session=False)
            db.query(Enrollment).filter(Enrollment.id.in_(enrollment_ids)).delete(synchronize_session=False)
            for _, course_id in enrollments:
                decrement_enrollment_count(db, course_id)

        db.query(StudentActivity).filter(StudentActivity.student_id == user_id).delete(synchronize_session=False)
        db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    db.expire_all()

    logger.info(
        f"User {user_id} ({email}) deleted by admin {admin.email}: "
        f"{len(owned_course_ids)} courses, {len(enrollments)} enrollments removed"
    )
    record_audit_log(
        db,
        AuditAction.USER_DELETED.value,
        email=admin.email,
        details=f"Deleted user {email} (id {user_id})",
        ip_address=ip_address,
        user_id=admin.id
    )
    return user_id
