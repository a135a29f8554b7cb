"""
Activity log model for the Visnet E-Learning API.

StudentActivity is an append-only event log that feeds the student,
instructor and admin dashboards as well as course status notifications.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from enum import Enum
from sqlalchemy import Integer, String, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from elearning.core.database import Base


class ActivityType(str, Enum):
    """Types of activity rows."""
    USER_REGISTERED = "user_registered"
    COURSE_CREATED = "course_created"
    COURSE_PUBLISHED = "course_published"
    COURSE_APPROVED = "course_approved"
    COURSE_REJECTED = "course_rejected"
    COURSE_STATUS_NOTIFICATION = "course_status_notification"
    COURSE_ENROLLED = "course_enrolled"
    COURSE_UNENROLLED = "course_unenrolled"
    LESSON_STARTED = "lesson_started"
    LESSON_COMPLETED = "lesson_completed"
    COURSE_COMPLETED = "course_completed"


# Human readable labels for the admin feed
ACTIVITY_LABELS = {
    ActivityType.COURSE_ENROLLED.value: "Student enrolled in course",
    ActivityType.LESSON_COMPLETED.value: "Lesson completed",
    ActivityType.COURSE_COMPLETED.value: "Course completed",
    ActivityType.USER_REGISTERED.value: "New user registered",
}

# Student activity shown to the instructors of a course
INSTRUCTOR_FEED_TYPES = (
    ActivityType.COURSE_ENROLLED.value,
    ActivityType.LESSON_STARTED.value,
    ActivityType.LESSON_COMPLETED.value,
    ActivityType.COURSE_COMPLETED.value,
    ActivityType.COURSE_UNENROLLED.value,
)


class StudentActivity(Base):
    """
    Append-only activity row. ``student_id`` is the acting user.
    """
    __tablename__ = "student_activities"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    student_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("courses.id"), nullable=True, index=True)
    lesson_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("lessons.id"), nullable=True)

    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    # "metadata" is reserved on declarative classes
    activity_metadata: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Table constraints
    __table_args__ = (
        Index("idx_activity_student_created", "student_id", "created_at"),
        Index("idx_activity_type_created", "activity_type", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<StudentActivity(id={self.id}, type='{self.activity_type}', student_id={self.student_id})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "course_id": self.course_id,
            "lesson_id": self.lesson_id,
            "activity_type": self.activity_type,
            "metadata": self.activity_metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
