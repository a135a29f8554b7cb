"""
Admin-specific models for the Visnet E-Learning API.

Defines the AuditLog model for administrative and account events.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from sqlalchemy import Integer, String, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from elearning.core.database import Base


class AuditAction(str, Enum):
    """Types of audited actions."""
    USER_REGISTERED = "user_registered"
    USER_ACTIVATED = "user_activated"
    USER_DEACTIVATED = "user_deactivated"
    USER_DELETED = "user_deleted"
    COURSE_DELETED = "course_deleted"


class AuditLog(Base):
    """
    Append-only audit trail.

    ``user_id`` is not a foreign key so rows outlive the user they describe.
    """
    __tablename__ = "audit_logs"

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    # Action details
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)  # Supports IPv6

    # Timestamp
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index("idx_audit_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action='{self.action}', email='{self.email}')>"
