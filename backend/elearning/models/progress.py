"""
Progress tracking models for the Visnet E-Learning API.

Defines Enrollment and LessonProgress models for tracking students
through courses.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import (
    Boolean, Integer, DateTime, Float,
    ForeignKey, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from elearning.core.database import Base


class Enrollment(Base):
    """
    A student's membership in a course.

    ``progress`` is derived from the student's lesson progress and
    ``completed_at`` is set once, when every lesson is complete.
    """
    __tablename__ = "enrollments"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Student and course relationship
    student_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    # Progress tracking
    progress: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)

    # Timestamps
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    student = relationship("User")
    course = relationship("Course")

    # Table constraints
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
        CheckConstraint("progress >= 0 AND progress <= 100", name="check_progress_range"),
        Index("idx_enrollment_student_accessed", "student_id", "last_accessed_at"),
    )

    def __repr__(self) -> str:
        return f"<Enrollment(student_id={self.student_id}, course_id={self.course_id}, progress={self.progress})>"

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "course_id": self.course_id,
            "progress": self.progress,
            "enrolled_at": self.enrolled_at.isoformat() if self.enrolled_at else None,
            "last_accessed_at": self.last_accessed_at.isoformat() if self.last_accessed_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


class LessonProgress(Base):
    """
    Per-lesson completion flag and accumulated time for one enrollment.
    """
    __tablename__ = "lesson_progress"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    enrollment_id: Mapped[int] = mapped_column(Integer, ForeignKey("enrollments.id"), nullable=False, index=True)
    lesson_id: Mapped[int] = mapped_column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)

    # Completion tracking
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    time_spent_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Table constraints
    __table_args__ = (
        UniqueConstraint("enrollment_id", "lesson_id", name="uq_lesson_progress_enrollment_lesson"),
        CheckConstraint("time_spent_seconds >= 0", name="check_time_spent_positive"),
    )

    def __repr__(self) -> str:
        return f"<LessonProgress(enrollment_id={self.enrollment_id}, lesson_id={self.lesson_id}, completed={self.is_completed})>"

    def to_dict(self) -> dict:
        return {
            "lesson_id": self.lesson_id,
            "is_completed": self.is_completed,
            "time_spent_seconds": self.time_spent_seconds,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
