"""
Database configuration and session management for the Visnet E-Learning API.

Sets up SQLAlchemy engine, session factory, base model and the
transaction helper used by every multi-statement operation.
"""

from contextlib import contextmanager
from typing import Dict, Generator, Iterator, Optional
from sqlalchemy import create_engine, MetaData, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import logging

from .config import settings
from .exceptions import ConflictError, InternalError


# Configure logging
logger = logging.getLogger(__name__)


# SQLAlchemy metadata conventions for better constraint naming
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


# Create engine based on environment
if settings.TESTING:
    # Use in-memory SQLite for testing
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    # Use PostgreSQL for development/production
    engine = create_engine(
        settings.sqlalchemy_database_uri,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        echo=settings.DEBUG,
    )


# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Base class for models
Base = declarative_base(metadata=metadata)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(
    db: Session,
    error_message: str,
    conflict_message: Optional[str] = None
) -> Iterator[Session]:
    """
    Run a group of statements as one unit of work.

    Commits when the block exits cleanly and rolls back on any error.
    Integrity violations surface as ConflictError, other database errors
    as InternalError carrying ``error_message``.

    Args:
        db: Database session
        error_message: Message reported if the database fails
        conflict_message: Message reported on a uniqueness violation
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"{error_message}: integrity violation ({e.orig})")
        raise ConflictError(conflict_message or "Resource already exists")
    except SQLAlchemyError:
        db.rollback()
        logger.exception(error_message)
        raise InternalError(error_message)
    except Exception:
        db.rollback()
        raise


def init_db(db: Session) -> None:
    """
    Initialize database with required data.

    Creates the first admin account and the default categories when
    they do not exist yet. Safe to run on every startup.

    Args:
        db: Database session
    """
    from elearning.models.user import User, UserRole
    from elearning.models.course import Category
    from elearning.core.security import get_password_hash
    from elearning.utils.formatting import slugify

    admin_email = settings.FIRST_ADMIN_EMAIL.lower()

    # Check if admin user exists
    admin_user = db.query(User).filter(User.email == admin_email).first()

    if not admin_user:
        admin_user = User(
            email=admin_email,
            password_hash=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            first_name=settings.FIRST_ADMIN_FIRST_NAME,
            last_name=settings.FIRST_ADMIN_LAST_NAME,
            role=UserRole.ADMIN.value,
            is_active=True,
            is_verified=True
        )
        db.add(admin_user)
        db.commit()
        logger.info(f"Admin user created: {admin_email}")

    existing = {name for (name,) in db.query(Category.name).all()}
    missing = [name for name in settings.DEFAULT_CATEGORIES if name not in existing]
    for name in missing:
        db.add(Category(name=name, slug=slugify(name)))
    if missing:
        db.commit()
        logger.info(f"Default categories created: {', '.join(missing)}")


def check_database_connection() -> bool:
    """
    Check if database is accessible.

    Returns:
        bool: True if database is accessible, False otherwise
    """
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False
    finally:
        db.close()


class DatabaseManager:
    """
    Database manager for handling database operations.
    """

    @staticmethod
    def create_all_tables():
        """Create all database tables."""
        import elearning.models  # noqa: F401  registers every model on Base

        Base.metadata.create_all(bind=engine)
        logger.info("All database tables created successfully")

    @staticmethod
    def drop_all_tables():
        """Drop all database tables. USE WITH CAUTION!"""
        import elearning.models  # noqa: F401

        Base.metadata.drop_all(bind=engine)
        logger.warning("All database tables dropped")

    @staticmethod
    def reset_database():
        """Reset database by dropping and recreating all tables."""
        DatabaseManager.drop_all_tables()
        DatabaseManager.create_all_tables()

        # Initialize with default data
        db = SessionLocal()
        try:
            init_db(db)
            logger.info("Database reset completed")
        finally:
            db.close()

    @staticmethod
    def get_table_stats() -> Dict[str, dict]:
        """
        Get statistics about database tables.

        Returns:
            dict: Row count per table
        """
        from elearning.models import (
            User, Category, Course, Lesson, Enrollment,
            LessonProgress, StudentActivity, AuditLog
        )

        stats = {}
        db = SessionLocal()
        try:
            models = [
                User, Category, Course, Lesson, Enrollment,
                LessonProgress, StudentActivity, AuditLog
            ]

            for model in models:
                count = db.query(model).count()
                stats[model.__tablename__] = {
                    "count": count,
                    "model": model.__name__
                }

            return stats
        finally:
            db.close()
