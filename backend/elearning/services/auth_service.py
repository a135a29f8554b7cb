"""
Authentication service for the Visnet E-Learning API.

Handles registration, login, token resolution and profile management.
"""

from datetime import datetime
from typing import Any, Dict, Optional
import logging

from sqlalchemy.orm import Session

from elearning.core.config import settings
from elearning.core.database import transaction
from elearning.core.exceptions import AuthError, ConflictError, ValidationError
from elearning.core.security import (
    create_user_token,
    get_password_hash,
    verify_password,
    verify_token
)
from elearning.models.activity import ActivityType
from elearning.models.admin import AuditAction
from elearning.models.user import User, UserRole
from elearning.schemas.auth import PasswordChange, ProfileUpdate, UserRegister
from elearning.services.activity_service import record_activity, record_audit_log


logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower()).first()


def register_user(
    db: Session,
    data: UserRegister,
    ip_address: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a new account and issue its token.

    Raises:
        ConflictError: Email already registered (any casing)
        ValidationError: Admin self-registration while it is disabled
    """
    email = data.email.lower()
    role = data.role.value

    if role == UserRole.ADMIN.value and not settings.ALLOW_ADMIN_REGISTRATION:
        raise ValidationError("Admin accounts cannot be self-registered")

    if get_user_by_email(db, email):
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        password_hash=get_password_hash(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=role,
        is_active=True,
        is_verified=True
    )

    with transaction(db, "Registration failed", conflict_message="Email already registered"):
        db.add(user)
    db.refresh(user)

    logger.info(f"New {role} registered: {user.full_name} ({email})")

    record_activity(db, user.id, ActivityType.USER_REGISTERED.value)
    record_audit_log(
        db,
        AuditAction.USER_REGISTERED.value,
        email=email,
        details=f"New {role} registered: {user.full_name}",
        ip_address=ip_address,
        user_id=user.id
    )

    return {"user": user.to_dict(), "token": create_user_token(user)}


def authenticate_user(db: Session, email: str, password: str) -> Dict[str, Any]:
    """
    Check credentials, stamp ``last_login`` and issue a token.

    Raises:
        AuthError: Unknown email, wrong password or deactivated account
    """
    user = get_user_by_email(db, email)

    if not user or not verify_password(password, user.password_hash):
        raise AuthError("Invalid email or password")

    if not user.is_active:
        raise AuthError("Account is deactivated")

    with transaction(db, "Login failed"):
        user.last_login = datetime.utcnow()
    db.refresh(user)

    logger.info(f"User logged in: {user.email}")

    return {"user": user.to_dict(), "token": create_user_token(user)}


def resolve_token_user(db: Session, token: str) -> User:
    """
    Map a bearer token to a live, active user row.

    Raises:
        AuthError: Invalid or expired token, missing user, inactive account
    """
    payload = verify_token(token)
    if payload is None:
        raise AuthError("Invalid or expired token")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthError("Invalid token")

    user = db.get(User, user_id)
    if user is None:
        raise AuthError("Invalid token")

    if not user.is_active:
        raise AuthError("Account is deactivated")

    return user


def update_profile(db: Session, user: User, data: ProfileUpdate) -> User:
    """Update name, bio, phone and date of birth."""
    with transaction(db, "Failed to update profile"):
        user.first_name = data.first_name
        user.last_name = data.last_name
        user.bio = data.bio
        user.phone = data.phone
        user.date_of_birth = data.date_of_birth
    db.refresh(user)
    return user


def change_password(db: Session, user: User, data: PasswordChange) -> None:
    """
    Replace the password after checking the current one.

    Raises:
        ValidationError: Current password is wrong
    """
    if not verify_password(data.current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    with transaction(db, "Failed to change password"):
        user.password_hash = get_password_hash(data.new_password)

    logger.info(f"Password changed for user {user.id}")
