"""
API routers for the Visnet E-Learning API.

This module contains all API endpoint routers:
- auth: Registration, login and profile
- courses: Catalog, course lifecycle and lessons
- enrollments: Enroll, unenroll and enrolled courses
- progress: Lesson completion and time tracking
- activities: Activity feeds and notifications
- students: Instructor view of enrolled students
- admin: Administrative endpoints for moderation and reporting
"""

from fastapi import APIRouter

# Import individual routers
from .auth import router as auth_router
from .courses import router as courses_router
from .enrollments import router as enrollments_router
from .progress import router as progress_router
from .activities import router as activities_router
from .students import router as students_router

# Import admin sub-routers
from .admin import admin_router

# Create main API router
api_router = APIRouter()

# Include all routers with their prefixes
api_router.include_router(
    auth_router,
    prefix="/auth",
    tags=["authentication"]
)

api_router.include_router(
    courses_router,
    prefix="/courses",
    tags=["courses"]
)

api_router.include_router(
    enrollments_router,
    prefix="/enrollments",
    tags=["enrollments"]
)

api_router.include_router(
    progress_router,
    prefix="/progress",
    tags=["progress"]
)

api_router.include_router(
    activities_router,
    prefix="/activities",
    tags=["activities"]
)

api_router.include_router(
    students_router,
    prefix="/students",
    tags=["students"]
)

api_router.include_router(
    admin_router,
    prefix="/admin",
    tags=["admin"]
)

# Export all routers
__all__ = [
    "api_router",
    "auth_router",
    "courses_router",
    "enrollments_router",
    "progress_router",
    "activities_router",
    "students_router",
    "admin_router"
]
