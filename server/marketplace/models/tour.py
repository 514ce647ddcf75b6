"""Tour model definitions."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .vendor import Vendor


class TourStatus(str, Enum):
    """Tour approval status enumeration."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Tour(Base):
    """Tour entity representing a vendor's tour offering."""

    __tablename__ = "tours"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Owning vendor; the vendor row may disappear, pricing then uses the default rate
    vendor_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Tour information
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    # Availability window (inclusive)
    available_from: Mapped[date] = mapped_column(Date, nullable=False)
    available_to: Mapped[date] = mapped_column(Date, nullable=False)

    # Aggregate rating, maintained by the rating aggregator only
    rating_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Approval workflow
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TourStatus.PENDING.value,
        index=True
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Optimistic concurrency counter
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("available_from <= available_to", name="ck_tour_window_ordered"),
        CheckConstraint("rating_count >= 0", name="ck_tour_rating_count_non_negative"),
        CheckConstraint(
            "rating_average >= 0 AND rating_average <= 5",
            name="ck_tour_rating_average_range"
        ),
        CheckConstraint("length(currency) = 3", name="ck_tour_currency_length"),
    )

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    vendor: Mapped[Optional["Vendor"]] = relationship("Vendor", lazy="selectin")
    room_types: Mapped[list["TourRoomType"]] = relationship(
        "TourRoomType",
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="TourRoomType.position",
        lazy="selectin"
    )
    blackout_days: Mapped[list["TourBlackoutDay"]] = relationship(
        "TourBlackoutDay",
        back_populates="tour",
        cascade="all, delete-orphan",
        order_by="TourBlackoutDay.day",
        lazy="selectin"
    )

    @property
    def blackout_dates(self) -> set[date]:
        """Blackout days as a set of calendar dates."""
        return {blackout.day for blackout in self.blackout_days}

    def __repr__(self) -> str:
        return (
            f"<Tour(id={self.id}, slug='{self.slug}', status={self.status}, "
            f"rating={self.rating_average}/{self.rating_count})>"
        )


class TourRoomType(Base):
    """Room/rate definition of a tour, priced from the vendor commission."""

    __tablename__ = "tour_room_types"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
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
        CheckConstraint("net_price >= 0", name="ck_tour_room_type_net_price_non_negative"),
        CheckConstraint("derived_price >= 0", name="ck_tour_room_type_derived_price_non_negative"),
    )

    tour: Mapped["Tour"] = relationship("Tour", back_populates="room_types")


class TourBlackoutDay(Base):
    """A date inside the availability window that cannot be booked."""

    __tablename__ = "tour_blackout_days"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        UniqueConstraint("tour_id", "day", name="uq_tour_blackout_day"),
    )

    tour: Mapped["Tour"] = relationship("Tour", back_populates="blackout_days")
