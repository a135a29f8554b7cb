"""
Database models for the Visnet E-Learning API.

This module contains all SQLAlchemy models for the application:
- User model for authentication and profiles
- Course models for the catalog and lessons
- Progress models for enrollments and lesson completion
- Activity and audit models for event logs
"""

from elearning.core.database import Base

# Import all models to ensure they're registered with SQLAlchemy
from .user import User, UserRole
from .course import Category, Course, Lesson, CourseLevel, CourseStatus
from .progress import Enrollment, LessonProgress
from .activity import StudentActivity, ActivityType
from .admin import AuditLog, AuditAction

# Export all models
__all__ = [
    "Base",
    "User",
    "UserRole",
    "Category",
    "Course",
    "Lesson",
    "CourseLevel",
    "CourseStatus",
    "Enrollment",
    "LessonProgress",
    "StudentActivity",
    "ActivityType",
    "AuditLog",
    "AuditAction"
]
