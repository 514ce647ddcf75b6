"""Initial marketplace schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create vendors table
    op.create_table('vendors',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('commission_rate', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('commission_rate >= 0', name='ck_vendor_commission_rate_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_vendors_email'), 'vendors', ['email'], unique=True)

    # Create tours table
    op.create_table('tours',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('vendor_id', sa.Uuid(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('available_from', sa.Date(), nullable=False),
        sa.Column('available_to', sa.Date(), nullable=False),
        sa.Column('rating_average', sa.Float(), nullable=False),
        sa.Column('rating_count', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('available_from <= available_to', name='ck_tour_window_ordered'),
        sa.CheckConstraint('rating_count >= 0', name='ck_tour_rating_count_non_negative'),
        sa.CheckConstraint(
            'rating_average >= 0 AND rating_average <= 5',
            name='ck_tour_rating_average_range'
        ),
        sa.CheckConstraint('length(currency) = 3', name='ck_tour_currency_length'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tours_vendor_id'), 'tours', ['vendor_id'], unique=False)
    op.create_index(op.f('ix_tours_name'), 'tours', ['name'], unique=False)
    op.create_index(op.f('ix_tours_slug'), 'tours', ['slug'], unique=True)
    op.create_index(op.f('ix_tours_status'), 'tours', ['status'], unique=False)

    # Create tour_room_types table
    op.create_table('tour_room_types',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tour_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('net_price', sa.Integer(), nullable=False),
        sa.Column('derived_price', sa.Integer(), nullable=True),
        sa.Column('child_occupancy', sa.Integer(), nullable=False),
        sa.Column('adult_occupancy', sa.Integer(), nullable=False),
        sa.CheckConstraint('net_price >= 0', name='ck_tour_room_type_net_price_non_negative'),
        sa.CheckConstraint('derived_price >= 0', name='ck_tour_room_type_derived_price_non_negative'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_tour_room_types_tour_id'), 'tour_room_types', ['tour_id'], unique=False)

    # Create tour_blackout_days table
    op.create_table('tour_blackout_days',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tour_id', sa.Uuid(), nullable=False),
        sa.Column('day', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tour_id', 'day', name='uq_tour_blackout_day')
    )
    op.create_index(op.f('ix_tour_blackout_days_tour_id'), 'tour_blackout_days', ['tour_id'], unique=False)

    # Create availabilities table
    op.create_table('availabilities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('tour_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_availabilities_tour_id'), 'availabilities', ['tour_id'], unique=False)

    # Create availability_dates table
    op.create_table('availability_dates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('availability_id', sa.Uuid(), nullable=False),
        sa.Column('day', sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(['availability_id'], ['availabilities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        op.f('ix_availability_dates_availability_id'), 'availability_dates', ['availability_id'], unique=False
    )
    op.create_index(op.f('ix_availability_dates_day'), 'availability_dates', ['day'], unique=False)

    # Create availability_room_types table
    op.create_table('availability_room_types',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('availability_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('net_price', sa.Integer(), nullable=False),
        sa.Column('derived_price', sa.Integer(), nullable=True),
        sa.Column('child_occupancy', sa.Integer(), nullable=False),
        sa.Column('adult_occupancy', sa.Integer(), nullable=False),
        sa.CheckConstraint('net_price >= 0', name='ck_availability_room_type_net_price_non_negative'),
        sa.CheckConstraint(
            'derived_price >= 0',
            name='ck_availability_room_type_derived_price_non_negative'
        ),
        sa.ForeignKeyConstraint(['availability_id'], ['availabilities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        op.f('ix_availability_room_types_availability_id'), 'availability_room_types', ['availability_id'], unique=False
    )

    # Create availability_discounts table
    op.create_table('availability_discounts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('availability_id', sa.Uuid(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('min_users', sa.Integer(), nullable=False),
        sa.Column('discount_percentage', sa.Float(), nullable=False),
        sa.CheckConstraint('min_users > 0', name='ck_availability_discount_min_users_positive'),
        sa.CheckConstraint(
            'discount_percentage >= 0 AND discount_percentage <= 100',
            name='ck_availability_discount_percentage_range'
        ),
        sa.ForeignKeyConstraint(['availability_id'], ['availabilities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        op.f('ix_availability_discounts_availability_id'), 'availability_discounts', ['availability_id'], unique=False
    )

    # Create reviews table
    op.create_table('reviews',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('tour_id', sa.Uuid(), nullable=False),
        sa.Column('vendor_id', sa.Uuid(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.CheckConstraint('length(comment) > 0', name='ck_review_comment_not_empty'),
        sa.ForeignKeyConstraint(['tour_id'], ['tours.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'tour_id', name='uq_review_user_tour')
    )
    op.create_index(op.f('ix_reviews_user_id'), 'reviews', ['user_id'], unique=False)
    op.create_index(op.f('ix_reviews_tour_id'), 'reviews', ['tour_id'], unique=False)
    op.create_index(op.f('ix_reviews_vendor_id'), 'reviews', ['vendor_id'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(op.f('ix_reviews_vendor_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_tour_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_user_id'), table_name='reviews')
    op.drop_table('reviews')

    op.drop_index(op.f('ix_availability_discounts_availability_id'), table_name='availability_discounts')
    op.drop_table('availability_discounts')

    op.drop_index(op.f('ix_availability_room_types_availability_id'), table_name='availability_room_types')
    op.drop_table('availability_room_types')

    op.drop_index(op.f('ix_availability_dates_day'), table_name='availability_dates')
    op.drop_index(op.f('ix_availability_dates_availability_id'), table_name='availability_dates')
    op.drop_table('availability_dates')

    op.drop_index(op.f('ix_availabilities_tour_id'), table_name='availabilities')
    op.drop_table('availabilities')

    op.drop_index(op.f('ix_tour_blackout_days_tour_id'), table_name='tour_blackout_days')
    op.drop_table('tour_blackout_days')

    op.drop_index(op.f('ix_tour_room_types_tour_id'), table_name='tour_room_types')
    op.drop_table('tour_room_types')

    op.drop_index(op.f('ix_tours_status'), table_name='tours')
    op.drop_index(op.f('ix_tours_slug'), table_name='tours')
    op.drop_index(op.f('ix_tours_name'), table_name='tours')
    op.drop_index(op.f('ix_tours_vendor_id'), table_name='tours')
    op.drop_table('tours')

    op.drop_index(op.f('ix_vendors_email'), table_name='vendors')
    op.drop_table('vendors')
