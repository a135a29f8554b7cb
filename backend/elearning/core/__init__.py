"""
Core module for the Visnet E-Learning backend.

This module contains core functionality including:
- Configuration management
- Database connections and transactions
- Security utilities (JWT, password hashing, authorization)
- Error taxonomy and logging setup
"""

from .config import settings
from .database import get_db, engine, SessionLocal, transaction
from .security import (
    create_access_token,
    verify_password,
    get_password_hash,
    verify_token,
    authorize
)

__all__ = [
    "settings",
    "get_db",
    "engine",
    "SessionLocal",
    "transaction",
    "create_access_token",
    "verify_password",
    "get_password_hash",
    "verify_token",
    "authorize"
]
