"""
Admin courses router for the Visnet E-Learning API.

Handles moderation of every course: listing across statuses, approval,
rejection and deletion.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.orm import Session

from elearning.core.database import get_db
from elearning.core.responses import client_ip, success
from elearning.models.admin import AuditAction
from elearning.models.user import User
from elearning.routers.auth import get_current_admin_user
from elearning.schemas.course import CourseApprove, CourseReject
from elearning.services import activity_service, course_service


router = APIRouter()


@router.get("")
def list_courses(
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=100),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List courses of every status, pending first.
    """
    return success(course_service.list_admin_courses(db, page=page, limit=limit))


@router.patch("/{course_id}/approve")
def approve_course(
    course_id: int,
    payload: Optional[CourseApprove] = Body(None),
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    feedback = payload.feedback if payload else None
    course = course_service.approve_course(db, current_admin, course_id, feedback)
    return success({"course": course.to_dict()}, "Course approved and published successfully")


@router.patch("/{course_id}/reject")
def reject_course(
    course_id: int,
    payload: Optional[CourseReject] = Body(None),
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    reason = payload.reason if payload else None
    course = course_service.reject_course(db, current_admin, course_id, reason)
    return success(
        {"course": course.to_dict(), "rejection_reason": course.rejection_reason},
        "Course rejected and returned to draft"
    )


@router.delete("/{course_id}")
def delete_course(
    course_id: int,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Delete any course with its lessons, enrollments and activity.
    """
    course = course_service.get_course_or_404(db, course_id)
    title = course.title

    course_service.delete_course(db, current_admin, course_id)

    activity_service.record_audit_log(
        db,
        AuditAction.COURSE_DELETED.value,
        email=current_admin.email,
        details=f"Deleted course '{title}' (id {course_id})",
        ip_address=client_ip(request),
        user_id=current_admin.id
    )
    return success({"courseId": course_id}, "Course deleted successfully")
