"""
SQLAlchemy declarative base and metadata shared by models and Alembic.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models. Enables Alembic migrations."""

    pass
