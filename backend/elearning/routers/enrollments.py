"""
Enrollments router for the Visnet E-Learning API.
"""

from typing import Any, Dict
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from elearning.core.database import get_db
from elearning.core.responses import success
from elearning.models.user import User
from elearning.routers.auth import get_current_user
from elearning.services import enrollment_service


router = APIRouter()


@router.get("/my-courses")
def get_my_enrollments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Courses the caller is enrolled in, most recently accessed first.
    """
    return success({"enrollments": enrollment_service.get_my_enrollments(db, current_user)})


@router.get("/check/{course_id}")
def check_enrollment(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success({"isEnrolled": enrollment_service.is_enrolled(db, current_user.id, course_id)})


@router.post("/{course_id}", status_code=status.HTTP_201_CREATED)
def enroll_in_course(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    enrollment = enrollment_service.enroll(db, current_user, course_id)
    return success({"enrollment": enrollment.to_dict()}, "Successfully enrolled in course")


@router.delete("/{course_id}")
def unenroll_from_course(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    enrollment_service.unenroll(db, current_user, course_id)
    return success({"courseId": course_id}, "Successfully unenrolled from course")
