"""Vendor model definition."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class Vendor(Base):
    """Vendor entity: the operator that owns tours and pays commission."""

    __tablename__ = "vendors"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    # Percentage added on top of net prices; NULL falls back to the configured default
    commission_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2),
        nullable=True,
        default=Decimal("15")
    )

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
        CheckConstraint("commission_rate >= 0", name="ck_vendor_commission_rate_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, name='{self.name}', commission_rate={self.commission_rate})>"
