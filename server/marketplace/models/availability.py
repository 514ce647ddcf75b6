"""Availability model definitions."""

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, Float, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base


class Availability(Base):
    """Dated inventory record for a tour, priced independently of the tour itself."""

    __tablename__ = "availabilities"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )

    dates: Mapped[list["AvailabilityDate"]] = relationship(
        "AvailabilityDate",
        back_populates="availability",
        cascade="all, delete-orphan",
        order_by="AvailabilityDate.day",
        lazy="selectin"
    )
    room_types: Mapped[list["AvailabilityRoomType"]] = relationship(
        "AvailabilityRoomType",
        back_populates="availability",
        cascade="all, delete-orphan",
        order_by="AvailabilityRoomType.position",
        lazy="selectin"
    )
    discounts: Mapped[list["AvailabilityDiscount"]] = relationship(
        "AvailabilityDiscount",
        back_populates="availability",
        cascade="all, delete-orphan",
        order_by="AvailabilityDiscount.position",
        lazy="selectin"
    )

    @property
    def days(self) -> list[date]:
        return [entry.day for entry in self.dates]

    def __repr__(self) -> str:
        return f"<Availability(id={self.id}, tour_id={self.tour_id}, days={self.days})>"


class AvailabilityDate(Base):
    """Calendar date covered by an availability record."""

    __tablename__ = "availability_dates"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    availability_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("availabilities.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    availability: Mapped["Availability"] = relationship("Availability", back_populates="dates")


class AvailabilityRoomType(Base):
    """Room/rate definition valid on the dates of one availability record."""

    __tablename__ = "availability_room_types"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    availability_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("availabilities.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Prices in minor currency units
    net_price: Mapped[int] = mapped_column(Integer, nullable=False)
    derived_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    child_occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    adult_occupancy: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("net_price >= 0", name="ck_availability_room_type_net_price_non_negative"),
        CheckConstraint(
            "derived_price >= 0",
            name="ck_availability_room_type_derived_price_non_negative"
        ),
    )

    availability: Mapped["Availability"] = relationship("Availability", back_populates="room_types")


class AvailabilityDiscount(Base):
    """Group discount applied once a booking reaches a minimum party size."""

    __tablename__ = "availability_discounts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    availability_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("availabilities.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    min_users: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_percentage: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        CheckConstraint("min_users > 0", name="ck_availability_discount_min_users_positive"),
        CheckConstraint(
            "discount_percentage >= 0 AND discount_percentage <= 100",
            name="ck_availability_discount_percentage_range"
        ),
    )

    availability: Mapped["Availability"] = relationship("Availability", back_populates="discounts")
