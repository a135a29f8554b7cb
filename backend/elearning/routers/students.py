"""
Students router for the Visnet E-Learning API.

Instructor view of the students enrolled in their courses.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from elearning.core.database import get_db
from elearning.core.responses import success
from elearning.models.user import User
from elearning.routers.auth import get_current_instructor_user
from elearning.services import enrollment_service


router = APIRouter()


@router.get("")
def get_instructor_students(
    course_id: Optional[int] = Query(None, alias="courseId"),
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    students = enrollment_service.get_instructor_students(db, current_user, course_id)
    return success({"students": students})


@router.get("/{student_id}/course/{course_id}")
def get_student_details(
    student_id: int,
    course_id: int,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    One student's enrollment and lesson progress in one of the caller's courses.
    """
    return success(enrollment_service.get_student_details(db, current_user, student_id, course_id))
