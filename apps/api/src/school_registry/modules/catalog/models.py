"""
Catalog Models

Reference tables that school units point at. They are seeded and maintained
outside this service, which only reads them.
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_registry.core.database import Base


class Nte(Base):
    """Regional education-technology authority (NTE). Parent of municipalities."""

    __tablename__ = "ntes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    municipalities: Mapped[list["Municipality"]] = relationship(
        "Municipality",
        back_populates="nte",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<Nte(id={self.id}, name={self.name})>"


class Municipality(Base):
    """Municipality, always attached to exactly one NTE."""

    __tablename__ = "municipalities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    nte_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("ntes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    nte: Mapped["Nte"] = relationship(
        "Nte",
        back_populates="municipalities",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Municipality(id={self.id}, name={self.name}, nte_id={self.nte_id})>"


class Typology(Base):
    """Categorical tag for a school unit (SEDE, ANEXO, CEMIT, ...)."""

    __tablename__ = "typologies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Typology(id={self.id}, name={self.name})>"
