"""
Authentication router for the Visnet E-Learning API.

Handles registration, login and profile endpoints, and provides the
dependencies that resolve and gate the acting user.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from elearning.core.config import settings
from elearning.core.database import get_db
from elearning.core.exceptions import AuthError
from elearning.core.responses import client_ip, success
from elearning.core.security import authorize
from elearning.models.user import User, UserRole
from elearning.schemas.auth import PasswordChange, ProfileUpdate, UserLogin, UserRegister
from elearning.services import auth_service


router = APIRouter()

# Bearer scheme; missing tokens are reported by get_current_user
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login",
    auto_error=False
)


# Dependencies
def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token.

    The user row is re-fetched on every request so deactivation takes
    effect immediately.
    """
    if not token:
        raise AuthError("Access token required")
    return auth_service.resolve_token_user(db, token)


def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Resolve the user when a valid token is present, otherwise None.
    """
    if not token:
        return None
    try:
        return auth_service.resolve_token_user(db, token)
    except AuthError:
        return None


def require_roles(*roles: UserRole):
    """
    Build a dependency that admits only users holding one of ``roles``.
    """
    def dependency(current_user: User = Depends(get_current_user)) -> User:
        authorize(current_user, roles=roles)
        return current_user

    return dependency


get_current_admin_user = require_roles(UserRole.ADMIN)
get_current_instructor_user = require_roles(UserRole.INSTRUCTOR, UserRole.ADMIN)


# Endpoints
@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    request: Request,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Register a new user.
    """
    result = auth_service.register_user(db, user_data, ip_address=client_ip(request))
    return success(result, "User registered successfully")


@router.post("/login")
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """
    Log in with email and password.
    """
    result = auth_service.authenticate_user(db, credentials.email, credentials.password)
    return success(result, "Login successful")


@router.get("/profile")
def get_profile(current_user: User = Depends(get_current_user)) -> Dict[str, Any]:
    return success({"user": current_user.to_dict(include_profile=True)})


@router.put("/profile")
def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    user = auth_service.update_profile(db, current_user, profile_data)
    return success({"user": user.to_dict(include_profile=True)}, "Profile updated successfully")


@router.put("/password")
def change_password(
    password_data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    auth_service.change_password(db, current_user, password_data)
    return success(message="Password changed successfully")
