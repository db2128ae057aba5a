"""
Shared building blocks used across modules.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from school_registry.core.database import Base
from school_registry.modules.shared.errors import (
    ConflictError,
    NotFoundError,
    ServiceError,
    StoreError,
    ValidationError,
)


class BaseModel(Base):
    """Abstract model with an integer primary key and audit timestamps."""

    __abstract__ = True

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


__all__ = [
    "BaseModel",
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StoreError",
]
