"""Mapped classes shared by the SQLAlchemy test modules."""

from __future__ import annotations

import datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Numeric, String
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class PersonRecord(Base):
    __tablename__ = "people"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(50))
    last_name: Mapped[str | None] = mapped_column(String(50))
    favorite_number: Mapped[int | None]
    favorite_letter: Mapped[str | None] = mapped_column(String(1))
    rating: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    favorite_date: Mapped[datetime.date | None] = mapped_column(Date)
    favorite_datetime_offset: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True)
    )
    _audit_note: Mapped[str | None] = mapped_column("audit_note", String(50))

    pets: Mapped[list[PetRecord]] = relationship(back_populates="owner")

    @hybrid_property
    def full_name(self) -> str:
        return self.first_name + " " + self.last_name


class PetRecord(Base):
    __tablename__ = "pets"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50))
    owner_id: Mapped[int] = mapped_column(ForeignKey("people.id"))

    owner: Mapped[PersonRecord] = relationship(back_populates="pets")


def make_people() -> list[PersonRecord]:
    utc = datetime.timezone.utc
    return [
        PersonRecord(
            id=1,
            first_name="John",
            last_name="Doe",
            favorite_number=5,
            favorite_letter="a",
            rating=None,
            favorite_date=datetime.date(2000, 1, 1),
            favorite_datetime_offset=datetime.datetime(2010, 1, 1, tzinfo=utc),
        ),
        PersonRecord(
            id=2,
            first_name="Tim",
            last_name="Smith",
            favorite_number=10,
            favorite_letter="b",
            rating=Decimal("4.5"),
            favorite_date=datetime.date(2000, 1, 2),
            favorite_datetime_offset=datetime.datetime(2010, 1, 2, tzinfo=utc),
        ),
    ]
