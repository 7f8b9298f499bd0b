"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 1 administrator (admin@example.com / the ADMIN_PASSWORD env var)
  - 5 sample customers
  - 8 sample bookings on the Haridwar <-> Dehradun Airport corridor
    (mix of PENDING, CONFIRMED, COMPLETED, CANCELLED)

The administrator is the only way an ``admin`` role comes into existence:
sign-up always creates plain users.
"""

import asyncio
import os
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import text

from airport_transfer.domain.enums import BookingStatus, Role, VehicleClass
from airport_transfer.domain.pricing import estimate
from airport_transfer.infrastructure.database import async_session_factory, engine
from airport_transfer.infrastructure.models import (
    AccountModel,
    BookingModel,
    ProfileModel,
)
from airport_transfer.infrastructure.security import hash_password

HARIDWAR = "Haridwar, Uttarakhand"
AIRPORT = "Dehradun Airport (DED)"


CUSTOMERS = [
    {"display_name": "Aarav Sharma", "email": "aarav@example.com", "phone": "+919810000001"},
    {"display_name": "Priya Patel", "email": "priya@example.com", "phone": "+919810000002"},
    {"display_name": "Rohan Mehta", "email": "rohan@example.com", "phone": "+919810000003"},
    {"display_name": "Sneha Gupta", "email": "sneha@example.com", "phone": "+919810000004"},
    {"display_name": "Vikram Singh", "email": "vikram@example.com", "phone": "+919810000005"},
]

# (customer index, pickup, drop, vehicle class, status, days from now)
BOOKINGS = [
    (0, HARIDWAR, AIRPORT, VehicleClass.STANDARD, BookingStatus.PENDING, 2),
    (1, AIRPORT, HARIDWAR, VehicleClass.PREMIUM_LARGE, BookingStatus.PENDING, 3),
    (2, "Rishikesh, Uttarakhand", AIRPORT, VehicleClass.PREMIUM_SEDAN, BookingStatus.CONFIRMED, 1),
    (3, HARIDWAR, AIRPORT, VehicleClass.STANDARD, BookingStatus.CONFIRMED, 4),
    (4, AIRPORT, "Har Ki Pauri, Haridwar", VehicleClass.PREMIUM_LARGE, BookingStatus.COMPLETED, -3),
    (0, AIRPORT, HARIDWAR, VehicleClass.STANDARD, BookingStatus.COMPLETED, -7),
    (1, HARIDWAR, AIRPORT, VehicleClass.PREMIUM_SEDAN, BookingStatus.CANCELLED, 5),
    (2, AIRPORT, "Jwalapur, Haridwar", VehicleClass.STANDARD, BookingStatus.PENDING, 6),
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM accounts"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Administrator ─────────────────────────────────────────────
        admin_id = uuid.uuid4().hex
        session.add(
            AccountModel(
                id=admin_id,
                email="admin@example.com",
                hashed_password=hash_password(os.getenv("ADMIN_PASSWORD", "admin123")),
            )
        )
        await session.flush()
        session.add(
            ProfileModel(
                id=admin_id,
                role=Role.ADMIN,
                email="admin@example.com",
                display_name="Operations Desk",
            )
        )
        print("  Created administrator admin@example.com")

        # ── Customers ─────────────────────────────────────────────────
        customer_ids = []
        for c in CUSTOMERS:
            account_id = uuid.uuid4().hex
            session.add(
                AccountModel(
                    id=account_id,
                    email=c["email"],
                    phone_number=c["phone"],
                    hashed_password=hash_password("password123"),
                )
            )
            await session.flush()
            session.add(
                ProfileModel(
                    id=account_id,
                    role=Role.USER,
                    email=c["email"],
                    display_name=c["display_name"],
                    contact_phone=c["phone"],
                )
            )
            customer_ids.append(account_id)
        await session.flush()
        print(f"  Created {len(customer_ids)} customers")

        # ── Bookings ──────────────────────────────────────────────────
        now = datetime.now(timezone.utc)
        for i, (who, pickup, drop, vc, status, days) in enumerate(BOOKINGS):
            session.add(
                BookingModel(
                    id=uuid.uuid4().hex,
                    owner_id=customer_ids[who],
                    pickup=pickup,
                    drop=drop,
                    scheduled_at=now + timedelta(days=days),
                    vehicle_class=vc,
                    fare=estimate(vc),
                    status=status,
                    created_at=now - timedelta(days=10) + timedelta(hours=i),
                )
            )
        await session.flush()
        print(f"  Created {len(BOOKINGS)} bookings")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
