"""
Progress router for the Visnet E-Learning API.

Per-lesson completion and time tracking for enrolled students.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from elearning.core.database import get_db
from elearning.core.responses import success
from elearning.models.user import User
from elearning.routers.auth import get_current_user
from elearning.schemas.progress import LessonTime
from elearning.services import progress_service


router = APIRouter()


@router.get("/my-progress")
def get_my_progress(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success({"courses": progress_service.get_student_progress(db, current_user)})


@router.get("/courses/{course_id}")
def get_course_progress(
    course_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get the caller's progress through every lesson of a course.
    """
    return success(progress_service.get_course_progress(db, current_user, course_id))


@router.post("/courses/{course_id}/lessons/{lesson_id}/complete")
def mark_lesson_complete(
    course_id: int,
    lesson_id: int,
    payload: Optional[LessonTime] = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Mark a lesson complete and add the time spent on it.
    """
    time_spent = payload.time_spent if payload else 0
    result = progress_service.mark_lesson_complete(db, current_user, course_id, lesson_id, time_spent)
    message = "Course completed" if result["courseCompleted"] else "Lesson marked as complete"
    return success(result, message)


@router.post("/courses/{course_id}/lessons/{lesson_id}/time")
def update_lesson_time(
    course_id: int,
    lesson_id: int,
    payload: Optional[LessonTime] = Body(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    time_spent = payload.time_spent if payload else 0
    result = progress_service.update_lesson_time(db, current_user, course_id, lesson_id, time_spent)
    return success(result, "Lesson time updated")
