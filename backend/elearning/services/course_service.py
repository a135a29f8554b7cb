"""
Course service for the Visnet E-Learning API.

Catalog queries, the course lifecycle (publish, approve, reject, archive),
lesson management and the course deletion cascade.
"""

from datetime import datetime
from math import ceil
from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session

from elearning.core.database import transaction
from elearning.core.exceptions import ConflictError, NotFoundError, ValidationError
from elearning.core.security import authorize
from elearning.models.activity import ActivityType, StudentActivity
from elearning.models.course import Category, Course, CourseStatus, Lesson
from elearning.models.progress import Enrollment, LessonProgress
from elearning.models.user import User, UserRole
from elearning.schemas.course import (
    CategoryCreate,
    CourseCreate,
    CourseUpdate,
    LessonCreate,
    LessonUpdate
)
from elearning.services.activity_service import record_activity
from elearning.utils.formatting import slugify


logger = logging.getLogger(__name__)

COURSE_MANAGERS = (UserRole.INSTRUCTOR, UserRole.ADMIN)

# Course fields that may be cleared with an explicit null
NULLABLE_COURSE_FIELDS = ("short_description", "thumbnail_url")

# Admin listing order: pending, published, draft, anything else
STATUS_PRIORITY = case(
    (Course.status == CourseStatus.PENDING.value, 1),
    (Course.status == CourseStatus.PUBLISHED.value, 2),
    (Course.status == CourseStatus.DRAFT.value, 3),
    else_=4
)


def paginate(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": ceil(total / limit) if limit else 0,
    }


# Categories

def list_categories(db: Session) -> List[Dict[str, Any]]:
    return [category.to_dict() for category in db.query(Category).order_by(Category.name).all()]


def create_category(db: Session, data: CategoryCreate) -> Category:
    """
    Raises:
        ConflictError: A category with the same name exists
    """
    if db.query(Category).filter(func.lower(Category.name) == data.name.lower()).first():
        raise ConflictError("Category already exists")

    category = Category(name=data.name, slug=slugify(data.name), description=data.description)
    with transaction(db, "Failed to create category", conflict_message="Category already exists"):
        db.add(category)
    db.refresh(category)
    return category


# Lookups

def get_course_or_404(db: Session, course_id: int) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return course


def _ensure_category(db: Session, category_id: int) -> None:
    if db.get(Category, category_id) is None:
        raise ValidationError("Category does not exist")


def _lesson_view(lesson: Lesson, full: bool) -> Dict[str, Any]:
    if full or lesson.is_preview:
        return lesson.to_dict()
    return {
        "id": lesson.id,
        "title": lesson.title,
        "description": lesson.description,
        "duration_minutes": lesson.duration_minutes,
        "order_index": lesson.order_index,
        "is_preview": lesson.is_preview,
    }


def list_published_courses(
    db: Session,
    category: Optional[int] = None,
    level: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10
) -> Dict[str, Any]:
    """
    Public catalog. The total is counted with the same filters as the page.
    """
    query = db.query(Course).filter(Course.status == CourseStatus.PUBLISHED.value)

    if category is not None:
        query = query.filter(Course.category_id == category)

    if level:
        query = query.filter(Course.level == level)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Course.title.ilike(search_term),
                Course.description.ilike(search_term)
            )
        )

    total = query.count()
    courses = (
        query.order_by(Course.created_at.desc(), Course.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "courses": [course.to_dict() for course in courses],
        **paginate(total, page, limit),
    }


def get_course_detail(db: Session, id_or_slug: str, viewer: Optional[User] = None) -> Dict[str, Any]:
    """
    Look a course up by numeric id or by slug and return it with its lessons.

    Unpublished courses are only visible to their owner and admins.
    """
    if id_or_slug.isascii() and id_or_slug.isdigit():
        course = db.get(Course, int(id_or_slug))
    else:
        course = db.query(Course).filter(Course.slug == id_or_slug).first()

    if course is None:
        raise NotFoundError("Course not found")

    privileged = viewer is not None and (viewer.is_admin or viewer.id == course.instructor_id)
    if not course.is_published and not privileged:
        raise NotFoundError("Course not found")

    enrolled = viewer is not None and db.query(Enrollment.id).filter(
        Enrollment.student_id == viewer.id,
        Enrollment.course_id == course.id
    ).first() is not None

    data = course.to_dict()
    if course.instructor:
        data["instructor_email"] = course.instructor.email
    if course.category:
        data["category_slug"] = course.category.slug

    return {
        "course": data,
        "lessons": [_lesson_view(lesson, privileged or enrolled) for lesson in course.lessons],
    }


def list_instructor_courses(db: Session, instructor: User) -> List[Dict[str, Any]]:
    """Courses owned by the caller with their live student count."""
    student_count = func.count(Enrollment.id)
    rows = (
        db.query(Course, student_count)
        .outerjoin(Enrollment, Enrollment.course_id == Course.id)
        .filter(Course.instructor_id == instructor.id)
        .group_by(Course.id)
        .order_by(Course.created_at.desc(), Course.id.desc())
        .all()
    )

    courses = []
    for course, count in rows:
        data = course.to_dict()
        data["student_count"] = count
        courses.append(data)
    return courses


def list_admin_courses(db: Session, page: int = 1, limit: int = 100) -> Dict[str, Any]:
    """Every course, pending first, then newest first within each status."""
    live_count = (
        select(func.count(Enrollment.id))
        .where(Enrollment.course_id == Course.id)
        .correlate(Course)
        .scalar_subquery()
    )

    total = db.query(func.count(Course.id)).scalar()
    rows = (
        db.query(Course, live_count)
        .order_by(STATUS_PRIORITY, Course.created_at.desc(), Course.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    courses = []
    for course, count in rows:
        data = course.to_dict()
        data["instructor_email"] = course.instructor.email if course.instructor else None
        data["enrolled_students"] = count
        courses.append(data)

    return {"courses": courses, **paginate(total, page, limit)}


# Lifecycle

def create_course(db: Session, actor: User, data: CourseCreate) -> Course:
    """
    Create a course owned by ``actor``.

    Instructor courses start as drafts; admin courses are published at once.
    """
    authorize(actor, roles=COURSE_MANAGERS)

    slug = slugify(data.title)
    if not slug:
        raise ValidationError("Course title must contain letters or digits")

    if db.query(Course.id).filter(Course.slug == slug).first():
        raise ConflictError("A course with similar title already exists. Please use a different title.")

    _ensure_category(db, data.category_id)

    status = CourseStatus.PUBLISHED if actor.is_admin else CourseStatus.DRAFT
    course = Course(
        title=data.title,
        slug=slug,
        description=data.description,
        short_description=data.short_description or "",
        instructor_id=actor.id,
        category_id=data.category_id,
        level=data.level.value,
        language=data.language,
        price=data.price,
        thumbnail_url=data.thumbnail_url,
        status=status.value,
        published_at=datetime.utcnow() if status == CourseStatus.PUBLISHED else None
    )

    with transaction(
        db,
        "Failed to create course",
        conflict_message="A course with similar title already exists. Please use a different title."
    ):
        db.add(course)
    db.refresh(course)

    logger.info(f"Course created: {course.id} '{course.title}' ({course.status}) by user {actor.id}")
    record_activity(db, actor.id, ActivityType.COURSE_CREATED.value, course_id=course.id)
    return course


def update_course(db: Session, actor: User, course_id: int, data: CourseUpdate) -> Course:
    """Apply a partial update to the whitelisted course fields."""
    course = get_course_or_404(db, course_id)
    authorize(actor, owner_id=course.instructor_id, message="Not authorized to update this course")

    updates = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_COURSE_FIELDS
    }
    if not updates:
        raise ValidationError("No valid fields to update")

    if "category_id" in updates:
        _ensure_category(db, updates["category_id"])
    if "level" in updates:
        updates["level"] = updates["level"].value

    with transaction(db, "Failed to update course"):
        for field, value in updates.items():
            setattr(course, field, value)
    db.refresh(course)
    return course


def publish_course(db: Session, actor: User, course_id: int) -> Course:
    course = get_course_or_404(db, course_id)
    authorize(actor, owner_id=course.instructor_id, message="You don't have permission to publish this course")

    with transaction(db, "Failed to publish course"):
        course.status = CourseStatus.PUBLISHED.value
        course.rejection_reason = None
        course.published_at = datetime.utcnow()
    db.refresh(course)

    logger.info(f"Course {course.id} published by user {actor.id}")
    record_activity(db, actor.id, ActivityType.COURSE_PUBLISHED.value, course_id=course.id)
    return course


def archive_course(db: Session, actor: User, course_id: int) -> Course:
    course = get_course_or_404(db, course_id)
    authorize(actor, owner_id=course.instructor_id, message="You don't have permission to archive this course")

    if course.status != CourseStatus.PUBLISHED.value:
        raise ValidationError(
            f"Cannot archive course with status: {course.status}. Only published courses can be archived."
        )

    with transaction(db, "Failed to archive course"):
        course.status = CourseStatus.ARCHIVED.value
    db.refresh(course)
    return course


def approve_course(db: Session, actor: User, course_id: int, feedback: Optional[str] = None) -> Course:
    """
    Admin approval: draft → published. The owner is notified.
    """
    authorize(actor, roles=[UserRole.ADMIN])
    course = get_course_or_404(db, course_id)

    if course.status != CourseStatus.DRAFT.value:
        raise ValidationError(
            f"Cannot approve course with status: {course.status}. Only draft courses can be approved."
        )

    with transaction(db, "Failed to approve course"):
        course.status = CourseStatus.PUBLISHED.value
        course.rejection_reason = None
        course.published_at = datetime.utcnow()
    db.refresh(course)

    logger.info(f"Course {course.id} approved by admin {actor.email}")
    record_activity(db, actor.id, ActivityType.COURSE_APPROVED.value, course_id=course.id)
    record_activity(
        db,
        course.instructor_id,
        ActivityType.COURSE_STATUS_NOTIFICATION.value,
        course_id=course.id,
        metadata={"status": "approved", "course_title": course.title, "feedback": feedback}
    )
    return course


def reject_course(db: Session, actor: User, course_id: int, reason: Optional[str]) -> Course:
    """
    Admin rejection: the course returns to draft with the reason stored.

    Raises:
        ValidationError: Missing or blank reason; the course is left unchanged
    """
    authorize(actor, roles=[UserRole.ADMIN])

    if not reason or not reason.strip():
        raise ValidationError("Rejection reason is required")

    course = get_course_or_404(db, course_id)

    with transaction(db, "Failed to reject course"):
        course.status = CourseStatus.DRAFT.value
        course.rejection_reason = reason.strip()
    db.refresh(course)

    logger.info(f"Course {course.id} rejected by admin {actor.email}: {course.rejection_reason}")
    record_activity(db, actor.id, ActivityType.COURSE_REJECTED.value, course_id=course.id)
    record_activity(
        db,
        course.instructor_id,
        ActivityType.COURSE_STATUS_NOTIFICATION.value,
        course_id=course.id,
        metadata={"status": "rejected", "course_title": course.title, "reason": course.rejection_reason}
    )
    return course


def delete_course_rows(db: Session, course_ids: Iterable[int]) -> None:
    """
    Remove courses with their lesson progress, enrollments, activities
    and lessons. Runs inside the caller's transaction.
    """
    course_ids = list(course_ids)
    if not course_ids:
        return

    enrollment_ids = select(Enrollment.id).where(Enrollment.course_id.in_(course_ids))
    lesson_ids = select(Lesson.id).where(Lesson.course_id.in_(course_ids))

    db.query(LessonProgress).filter(
        or_(
            LessonProgress.enrollment_id.in_(enrollment_ids),
            LessonProgress.lesson_id.in_(lesson_ids)
        )
    ).delete(synchronize_session=False)
    db.query(Enrollment).filter(Enrollment.course_id.in_(course_ids)).delete(synchronize_session=False)
    db.query(StudentActivity).filter(
        or_(
            StudentActivity.course_id.in_(course_ids),
            StudentActivity.lesson_id.in_(lesson_ids)
        )
    ).delete(synchronize_session=False)
    db.query(Lesson).filter(Lesson.course_id.in_(course_ids)).delete(synchronize_session=False)
    db.query(Course).filter(Course.id.in_(course_ids)).delete(synchronize_session=False)


def delete_course(db: Session, actor: User, course_id: int) -> int:
    """
    Delete a course and everything hanging off it in one transaction.
    Owners may delete their own courses, admins any course.
    """
    course = get_course_or_404(db, course_id)
    authorize(actor, owner_id=course.instructor_id, message="Not authorized to delete this course")
    title = course.title

    with transaction(db, "Failed to delete course"):
        delete_course_rows(db, [course_id])
    db.expire_all()

    logger.info(f"Course deleted: {course_id} '{title}' by user {actor.id}")
    return course_id


# Lessons

def _get_lesson_or_404(db: Session, course_id: int, lesson_id: int) -> Lesson:
    lesson = db.get(Lesson, lesson_id)
    if lesson is None or lesson.course_id != course_id:
        raise NotFoundError("Lesson not found in this course")
    return lesson


def add_lesson(db: Session, actor: User, course_id: int, data: LessonCreate) -> Lesson:
    course = get_course_or_404(db, course_id)
    authorize(actor, owner_id=course.instructor_id, message="Not authorized to modify this course")

    order_index = data.order_index
    if order_index is None:
        current_max = db.query(func.max(Lesson.order_index)).filter(Lesson.course_id == course_id).scalar()
        order_index = (current_max or 0) + 1

    lesson = Lesson(
        course_id=course_id,
        title=data.title,
        description=data.description,
        content=data.content,
        video_url=data.video_url,
        duration_minutes=data.duration_minutes,
        order_index=order_index,
        is_preview=data.is_preview
    )
    with transaction(db, "Failed to add lesson"):
        db.add(lesson)
    db.refresh(lesson)
    return lesson


def update_lesson(db: Session, actor: User, course_id: int, lesson_id: int, data: LessonUpdate) -> Lesson:
    course = get_course_or_404(db, course_id)
    authorize(actor, owner_id=course.instructor_id, message="Not authorized to modify this course")
    lesson = _get_lesson_or_404(db, course_id, lesson_id)

    updates = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}
    if not updates:
        raise ValidationError("No valid fields to update")

    with transaction(db, "Failed to update lesson"):
        for field, value in updates.items():
            setattr(lesson, field, value)
    db.refresh(lesson)
    return lesson


def delete_lesson(db: Session, actor: User, course_id: int, lesson_id: int) -> None:
    """Delete a lesson with its progress and activity rows."""
    course = get_course_or_404(db, course_id)
    authorize(actor, owner_id=course.instructor_id, message="Not authorized to modify this course")
    _get_lesson_or_404(db, course_id, lesson_id)

    with transaction(db, "Failed to delete lesson"):
        db.query(LessonProgress).filter(LessonProgress.lesson_id == lesson_id).delete(synchronize_session=False)
        db.query(StudentActivity).filter(StudentActivity.lesson_id == lesson_id).delete(synchronize_session=False)
        db.query(Lesson).filter(Lesson.id == lesson_id).delete(synchronize_session=False)
    db.expire_all()
