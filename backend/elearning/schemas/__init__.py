"""
Request schemas for the Visnet E-Learning API.
"""

from .auth import UserRegister, UserLogin, ProfileUpdate, PasswordChange
from .course import (
    CourseCreate,
    CourseUpdate,
    CategoryCreate,
    LessonCreate,
    LessonUpdate,
    CourseApprove,
    CourseReject
)
from .progress import LessonTime
from .admin import UserStatusUpdate

__all__ = [
    "UserRegister",
    "UserLogin",
    "ProfileUpdate",
    "PasswordChange",
    "CourseCreate",
    "CourseUpdate",
    "CategoryCreate",
    "LessonCreate",
    "LessonUpdate",
    "CourseApprove",
    "CourseReject",
    "LessonTime",
    "UserStatusUpdate"
]
