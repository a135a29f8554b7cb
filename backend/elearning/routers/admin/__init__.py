"""
Admin routers for the Visnet E-Learning API.

This module contains all admin-specific API endpoints:
- courses: Course moderation (list, approve, reject, delete)
- users: User management (list, activate/deactivate, delete)
- dashboard endpoints: platform stats, recent activity, audit logs
"""

from typing import Any, Dict
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from elearning.core.database import get_db
from elearning.core.responses import success
from elearning.routers.auth import get_current_admin_user
from elearning.services import activity_service, admin_service

# Import admin sub-routers
from .courses import router as courses_router
from .users import router as users_router


# Create admin router; every endpoint below requires an admin
admin_router = APIRouter(dependencies=[Depends(get_current_admin_user)])

# Include all admin sub-routers
admin_router.include_router(
    courses_router,
    prefix="/courses",
    tags=["admin-courses"]
)

admin_router.include_router(
    users_router,
    prefix="/users",
    tags=["admin-users"]
)


@admin_router.get("/stats")
def get_platform_stats(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Get platform statistics for the admin dashboard.
    """
    return success(admin_service.get_platform_stats(db))


@admin_router.get("/activities")
def get_recent_activities(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success({"activities": activity_service.get_recent_activities(db, limit)})


@admin_router.get("/audit-logs")
def get_audit_logs(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return success({"logs": activity_service.get_audit_logs(db, limit)})
