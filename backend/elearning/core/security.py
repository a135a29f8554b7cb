"""
Security utilities for the Visnet E-Learning API.

Handles password hashing, JWT token creation/verification and the
ownership/role predicate shared by every protected operation.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings
from .exceptions import AuthorizationError


# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        bool: True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        str: The hashed password
    """
    return pwd_context.hash(password)


def create_access_token(
    subject: str | Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[Dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: The subject of the token (the user id)
        expires_delta: Optional custom expiration time
        additional_claims: Optional additional claims to include in the token

    Returns:
        str: The encoded JWT token
    """
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode: Dict[str, Any] = {"exp": expire}

    # Handle subject
    if isinstance(subject, str):
        to_encode["sub"] = subject
    elif isinstance(subject, dict):
        to_encode.update(subject)

    # Add additional claims if provided
    if additional_claims:
        to_encode.update(additional_claims)

    # Add issued at time
    to_encode["iat"] = datetime.utcnow()

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def create_user_token(user) -> str:
    """Issue the access token for a user row."""
    return create_access_token(
        subject=str(user.id),
        additional_claims={"email": user.email, "role": user.role}
    )


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify and decode a JWT token.

    Signature and expiry are both checked.

    Args:
        token: The JWT token to verify

    Returns:
        Optional[Dict[str, Any]]: The decoded token payload if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def authorize(
    actor,
    *,
    roles: Optional[Iterable[str]] = None,
    owner_id: Optional[int] = None,
    message: str = "Insufficient permissions"
) -> None:
    """
    Check that ``actor`` may act on a resource.

    The actor must hold one of ``roles`` (when given) and must own the
    resource (when ``owner_id`` is given). Admins always pass the
    ownership test.

    Raises:
        AuthorizationError: When either check fails
    """
    if roles is not None and actor.role not in {getattr(role, "value", role) for role in roles}:
        raise AuthorizationError(message)

    if owner_id is not None and actor.role != "admin" and actor.id != owner_id:
        raise AuthorizationError(message)
