#!/usr/bin/env python3
"""Migrate the database and seed a sample vendor with an accepted tour."""

import asyncio
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from marketplace.core.database import async_session_factory, close_db
from marketplace.models import Vendor
from marketplace.schemas.tour import (
    AvailabilityWindow,
    CreateTourRequest,
    RoomTypeInput,
    TourStatusValue,
    UpdateTourStatusRequest,
)
from marketplace.schemas.vendor import CreateVendorRequest
from marketplace.services.tour_service import TourService
from marketplace.services.vendor_service import VendorService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def run_migrations() -> None:
    """Upgrade the schema to the latest Alembic revision."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data() -> None:
    """Create a vendor and an accepted tour unless vendors already exist."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing = await db.execute(select(func.count(Vendor.id)))
        if existing.scalar_one() > 0:
            logger.info("Sample data already exists, skipping...")
            return

        vendor = await VendorService(db).create_vendor(
            CreateVendorRequest(
                name="Aurora Outfitters",
                email="bookings@aurora-outfitters.example",
                commission_rate=15,
            )
        )

        start = date.today() + timedelta(days=30)
        tour_service = TourService(db)
        tour = await tour_service.create_tour(
            CreateTourRequest(
                vendor_id=vendor.id,
                name="Northern Lights Adventure",
                slug="northern-lights-adventure",
                description="Experience the magical Aurora Borealis in Iceland with expert guides",
                availability_window=AvailabilityWindow(
                    available_from=start,
                    available_to=start + timedelta(days=90),
                    blackout_days=[start + timedelta(days=14)],
                ),
                room_types=[
                    RoomTypeInput(name="Double", net_price=29999, adult_occupancy=2),
                    RoomTypeInput(name="Family", net_price=54999, child_occupancy=2, adult_occupancy=2),
                ],
            )
        )
        await tour_service.set_status(
            UpdateTourStatusRequest(tour_id=tour.id, status=TourStatusValue.ACCEPTED)
        )

    logger.info("Sample data created successfully!")


async def seed() -> None:
    try:
        await create_sample_data()
    finally:
        await close_db()


def main():
    """Main setup function."""
    logger.info("Starting marketplace API setup...")

    run_migrations()
    asyncio.run(seed())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn marketplace.main:app --reload")


if __name__ == "__main__":
    main()
