"""
SQLAlchemy 2.0 DeclarativeBase for TCG Market Watch.

All models inherit from this Base.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all TCG Market Watch database models."""
    pass
