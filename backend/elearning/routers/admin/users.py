"""
Admin users router for the Visnet E-Learning API.

Handles listing, activation and hard deletion of user accounts.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from elearning.core.database import get_db
from elearning.core.responses import client_ip, success
from elearning.models.user import User, UserRole
from elearning.routers.auth import get_current_admin_user
from elearning.schemas.admin import UserStatusUpdate
from elearning.services import admin_service


router = APIRouter()


@router.get("")
def list_users(
    role: Optional[UserRole] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    List users, optionally filtered by role. ``total`` honours the filter.
    """
    result = admin_service.list_users(
        db,
        role=role.value if role else None,
        limit=limit,
        offset=offset
    )
    return success(result)


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    user = admin_service.get_user_or_404(db, user_id)
    return success({"user": user.to_dict(include_profile=True)})


@router.patch("/{user_id}/status")
def update_user_status(
    user_id: int,
    status_data: UserStatusUpdate,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    user = admin_service.set_user_status(
        db, current_admin, user_id, status_data.is_active, ip_address=client_ip(request)
    )
    message = "User activated successfully" if user.is_active else "User deactivated successfully"
    return success({"user": user.to_dict(include_profile=True)}, message)


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    current_admin: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Permanently delete a user and everything they own.
    """
    deleted_id = admin_service.delete_user(db, current_admin, user_id, ip_address=client_ip(request))
    return success({"userId": deleted_id}, "User permanently deleted")
