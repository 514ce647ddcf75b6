"""Review model definition."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


class Review(Base):
    """A customer's rating and comment for a tour."""

    __tablename__ = "reviews"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Subject of the bearer token that submitted the review
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # Copied from the tour when the review is created
    vendor_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)

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
        UniqueConstraint("user_id", "tour_id", name="uq_review_user_tour"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
        CheckConstraint("length(comment) > 0", name="ck_review_comment_not_empty"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, tour_id={self.tour_id}, user_id='{self.user_id}', rating={self.rating})>"
