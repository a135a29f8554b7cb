"""
Courses router for the Visnet E-Learning API.

Public catalog endpoints plus the instructor-facing course lifecycle
and lesson management.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from elearning.core.config import settings
from elearning.core.database import get_db
from elearning.core.responses import success
from elearning.models.course import CourseLevel
from elearning.models.user import User
from elearning.routers.auth import (
    get_current_admin_user,
    get_current_instructor_user,
    get_current_user_optional
)
from elearning.schemas.course import (
    CategoryCreate,
    CourseApprove,
    CourseCreate,
    CourseReject,
    CourseUpdate,
    LessonCreate,
    LessonUpdate
)
from elearning.services import course_service


router = APIRouter()


# Catalog
@router.get("")
def list_courses(
    category: Optional[int] = None,
    level: Optional[CourseLevel] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List published courses with optional filters.
    """
    result = course_service.list_published_courses(
        db,
        category=category,
        level=level.value if level else None,
        search=search,
        page=page,
        limit=limit
    )
    return success(result)


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)) -> Dict[str, Any]:
    return success({"categories": course_service.list_categories(db)})


@router.post("/categories", status_code=status.HTTP_201_CREATED)
def create_category(
    category_data: CategoryCreate,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    category = course_service.create_category(db, category_data)
    return success({"category": category.to_dict()}, "Category created successfully")


@router.get("/instructor/my-courses")
def list_my_courses(
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Courses owned by the calling instructor.
    """
    return success({"courses": course_service.list_instructor_courses(db, current_user)})


@router.get("/{id_or_slug}")
def get_course(
    id_or_slug: str,
    current_user: Optional[User] = Depends(get_current_user_optional),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Get a course by numeric id or slug, with its lessons.
    """
    return success(course_service.get_course_detail(db, id_or_slug, viewer=current_user))


# Course lifecycle
@router.post("", status_code=status.HTTP_201_CREATED)
def create_course(
    course_data: CourseCreate,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    course = course_service.create_course(db, current_user, course_data)
    message = (
        "Course created and published successfully"
        if course.is_published else "Course created as draft"
    )
    return success({"course": course.to_dict()}, message)


@router.put("/{course_id}")
def update_course(
    course_id: int,
    course_data: CourseUpdate,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    course = course_service.update_course(db, current_user, course_id, course_data)
    return success({"course": course.to_dict()}, "Course updated successfully")


@router.put("/{course_id}/publish")
def publish_course(
    course_id: int,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    course = course_service.publish_course(db, current_user, course_id)
    return success({"course": course.to_dict()}, "Course published successfully")


@router.put("/{course_id}/archive")
def archive_course(
    course_id: int,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    course = course_service.archive_course(db, current_user, course_id)
    return success({"course": course.to_dict()}, "Course archived successfully")


@router.patch("/{course_id}/approve")
def approve_course(
    course_id: int,
    payload: Optional[CourseApprove] = Body(None),
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Approve a draft course (admin only).
    """
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
    """
    Reject a course back to draft with a reason (admin only).
    """
    reason = payload.reason if payload else None
    course = course_service.reject_course(db, current_admin, course_id, reason)
    return success(
        {"course": course.to_dict(), "rejection_reason": course.rejection_reason},
        "Course rejected and returned to draft"
    )


@router.delete("/{course_id}")
def delete_course(
    course_id: int,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    deleted_id = course_service.delete_course(db, current_user, course_id)
    return success({"courseId": deleted_id}, "Course deleted successfully")


# Lessons
@router.post("/{course_id}/lessons", status_code=status.HTTP_201_CREATED)
def add_lesson(
    course_id: int,
    lesson_data: LessonCreate,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    lesson = course_service.add_lesson(db, current_user, course_id, lesson_data)
    return success({"lesson": lesson.to_dict()}, "Lesson added successfully")


@router.put("/{course_id}/lessons/{lesson_id}")
def update_lesson(
    course_id: int,
    lesson_id: int,
    lesson_data: LessonUpdate,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    lesson = course_service.update_lesson(db, current_user, course_id, lesson_id, lesson_data)
    return success({"lesson": lesson.to_dict()}, "Lesson updated successfully")


@router.delete("/{course_id}/lessons/{lesson_id}")
def delete_lesson(
    course_id: int,
    lesson_id: int,
    current_user: User = Depends(get_current_instructor_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    course_service.delete_lesson(db, current_user, course_id, lesson_id)
    return success({"lessonId": lesson_id}, "Lesson deleted successfully")
