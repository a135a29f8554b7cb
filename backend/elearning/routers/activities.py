"""
Activities router for the Visnet E-Learning API.

Read-only feeds over the activity log.
"""

from typing import Any, Dict
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from elearning.core.database import get_db
from elearning.core.responses import success
from elearning.models.user import User
from elearning.routers.auth import get_current_instructor_user, get_current_user
from elearning.services import activity_service


router = APIRouter()


@router.get("/my-activities")
def get_my_activities(
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    activities = activity_service.get_student_activities(db, current_user.id, limit)
    return success({"activities": activities})


@router.get("/courses/{course_id}")
def get_course_activities(
    course_id: int,
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    activities = activity_service.get_course_activities(db, current_user.id, course_id, limit)
    return success({"activities": activities})


@router.get("/instructor")
def get_instructor_activities(
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Student activity in the caller's courses.
    """
    activities = activity_service.get_instructor_activities(db, current_user, limit)
    return success({"activities": activities})


@router.get("/notifications")
def get_notifications(
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Course status notifications addressed to the caller.
    """
    notifications = activity_service.get_notifications(db, current_user.id, limit)
    return success({"notifications": notifications})


@router.get("/stats")
def get_activity_stats(
    period: int = Query(30, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Activity counts per type and day over the last ``period`` days.
    """
    statistics = activity_service.get_activity_stats(db, current_user.id, period)
    return success({"statistics": statistics, "period": period})
