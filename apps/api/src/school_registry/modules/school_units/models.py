"""
School Unit Models

School units and their append-only homologation history.
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_registry.core.database import Base
from school_registry.modules.catalog.models import Municipality, Typology
from school_registry.modules.shared import BaseModel

# Values of SchoolUnit.status. Anything else is treated as inactive.
STATUS_ACTIVE = "1"
STATUS_INACTIVE = "0"


class HomologationAction(str, enum.Enum):
    """Action recorded by a homologation event. Also the derived approval state."""

    HOMOLOGATED = "HOMOLOGATED"
    UNHOMOLOGATED = "UNHOMOLOGATED"


class SchoolUnit(BaseModel):
    """
    School unit record.

    Belongs to exactly one municipality (and through it, one NTE) and to at
    most one typology. Deleted physically; its homologation events go with it.
    """

    __tablename__ = "school_units"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # Ministry code
    sec_code: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    # Operational unit code
    uo_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default=STATUS_ACTIVE)

    municipality_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("municipalities.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    typology_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("typologies.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Relationships
    municipality: Mapped["Municipality"] = relationship("Municipality", lazy="selectin")
    typology: Mapped["Typology | None"] = relationship("Typology", lazy="selectin")
    homologations: Mapped[list["Homologation"]] = relationship(
        "Homologation",
        back_populates="school_unit",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<SchoolUnit(id={self.id}, name={self.name}, status={self.status})>"


class Homologation(Base):
    """
    Homologation event.

    Rows are only ever inserted. The newest event of a unit is its current
    approval state.
    """

    __tablename__ = "homologations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_unit_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("school_units.id", ondelete="CASCADE"),
        nullable=False,
    )
    action: Mapped[HomologationAction] = mapped_column(
        Enum(HomologationAction, name="homologation_action"),
        nullable=False,
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    performed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    school_unit: Mapped["SchoolUnit"] = relationship(
        "SchoolUnit",
        back_populates="homologations",
        lazy="noload",
    )

    __table_args__ = (
        Index("ix_homologations_unit_created", "school_unit_id", "created_at"),
    )
