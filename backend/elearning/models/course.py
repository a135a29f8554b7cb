"""
Course models for the Visnet E-Learning API.

Defines Category, Course and Lesson models for the catalog and the
learning content structure.
"""

from datetime import datetime
from typing import Optional, List
from enum import Enum
from sqlalchemy import (
    Boolean, Integer, String, DateTime, Text, Numeric,
    ForeignKey, Index, CheckConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

from elearning.core.database import Base


class CourseLevel(str, Enum):
    """Difficulty levels for courses."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class CourseStatus(str, Enum):
    """Lifecycle status of a course."""
    DRAFT = "draft"
    PENDING = "pending"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Category(Base):
    """
    Course category used to group the catalog.
    """
    __tablename__ = "categories"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class Course(Base):
    """
    Course model owned by an instructor.

    ``enrollment_count`` is a denormalised counter maintained by the
    enrollment operations.
    """
    __tablename__ = "courses"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Basic information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Course metadata
    level: Mapped[str] = mapped_column(
        String(20),
        default=CourseLevel.BEGINNER.value,
        nullable=False
    )
    language: Mapped[str] = mapped_column(String(50), default="English", nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0, nullable=False)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Publishing
    status: Mapped[str] = mapped_column(
        String(20),
        default=CourseStatus.DRAFT.value,
        nullable=False
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Ownership and organization
    instructor_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("categories.id"), nullable=True)

    # Statistics
    enrollment_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    instructor = relationship("User")
    category = relationship("Category")
    lessons: Mapped[List["Lesson"]] = relationship(
        "Lesson",
        back_populates="course",
        order_by="Lesson.order_index"
    )

    # Table constraints
    __table_args__ = (
        CheckConstraint("enrollment_count >= 0", name="check_enrollment_count_positive"),
        CheckConstraint("price >= 0", name="check_price_positive"),
        Index("idx_course_status_category", "status", "category_id"),
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}', slug='{self.slug}')>"

    @property
    def is_published(self) -> bool:
        return self.status == CourseStatus.PUBLISHED.value

    def to_dict(self, include_relations: bool = True) -> dict:
        """Convert course to dictionary representation."""
        data = {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "short_description": self.short_description,
            "status": self.status,
            "level": self.level,
            "language": self.language,
            "price": self.price,
            "thumbnail_url": self.thumbnail_url,
            "instructor_id": self.instructor_id,
            "category_id": self.category_id,
            "enrollment_count": self.enrollment_count,
            "rejection_reason": self.rejection_reason,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_relations:
            data["category_name"] = self.category.name if self.category else None
            data["instructor_name"] = self.instructor.full_name if self.instructor else None

        return data


class Lesson(Base):
    """
    Lesson within a course. ``order_index`` is the display and progress order.
    """
    __tablename__ = "lessons"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False, index=True)

    # Content
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Ordering
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_preview: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    course = relationship("Course", back_populates="lessons")

    # Table constraints
    __table_args__ = (
        CheckConstraint("duration_minutes >= 0", name="check_duration_positive"),
        Index("idx_lesson_course_order", "course_id", "order_index"),
    )

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, course_id={self.course_id}, title='{self.title}')>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "video_url": self.video_url,
            "duration_minutes": self.duration_minutes,
            "order_index": self.order_index,
            "is_preview": self.is_preview,
        }
