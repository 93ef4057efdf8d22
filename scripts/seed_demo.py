#!/usr/bin/env python3
"""
Seed script to create demo tables, hours and policies
"""

import asyncio
from datetime import time
from decimal import Decimal

DEMO_TABLES = [
    # table_number, capacity, zone, base_price, surcharge
    ("1", 2, "Main", "20.00", "0.00"),
    ("2", 2, "Main", "20.00", "0.00"),
    ("3", 4, "Main", "25.00", "0.00"),
    ("4", 4, "Main", "25.00", "0.00"),
    ("5", 6, "Main", "35.00", "0.00"),
    ("6", 8, "Main", "45.00", "5.00"),
    ("7", 2, "Patio", "30.00", "10.00"),
    ("8", 4, "Patio", "30.00", "10.00"),
]

# ISO day of week -> (open, close)
DEMO_HOURS = {
    1: (time(11, 0), time(22, 0)),
    2: (time(11, 0), time(22, 0)),
    3: (time(11, 0), time(22, 0)),
    4: (time(11, 0), time(22, 0)),
    5: (time(11, 0), time(23, 0)),
    6: (time(11, 0), time(23, 0)),
    7: (time(12, 0), time(21, 0)),
}


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select, func
    from tablebook.database import SessionLocal, engine, Base
    from tablebook.models import Customer, DiningTable
    from tablebook.reservations.policy_store import PolicyStore
    from tablebook.reservations.table_catalog import TableCatalog
    from tablebook.reservations.types import Actor, CutoffKind, Role
    from tablebook.api.auth import create_access_token
    import tablebook.models  # noqa: F401

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo tables already exist
        result = await db.execute(select(func.count(DiningTable.id)))
        if result.scalar() > 0:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo tables...")

        catalog = TableCatalog(db)
        for table_number, capacity, zone, base_price, surcharge in DEMO_TABLES:
            await catalog.add(
                table_number=table_number,
                capacity=capacity,
                zone=zone,
                base_price=Decimal(base_price),
                surcharge=Decimal(surcharge),
            )

        policies = PolicyStore(db)
        for day, (open_time, close_time) in DEMO_HOURS.items():
            await policies.set_business_hours(day, open_time, close_time)

        await policies.set_cutoff_hours(
            CutoffKind.CANCELLATION, 2, "Please cancel reservations at least 2 hours in advance."
        )
        await policies.set_cutoff_hours(
            CutoffKind.MODIFICATION, 2, "Changes must be made at least 2 hours in advance."
        )

        customer = Customer(name="Demo Guest", email="guest@example.com", phone="+15055550123")
        db.add(customer)
        await db.commit()
        await db.refresh(customer)

        customer_token = create_access_token(Actor(id=customer.id, role=Role.CUSTOMER))
        staff_token = create_access_token(Actor(id=1000, role=Role.STAFF))
        admin_token = create_access_token(Actor(id=1001, role=Role.ADMIN))

        print(f"""
Demo data created successfully!

Tables: {len(DEMO_TABLES)} created
Business hours: Mon-Thu 11:00-22:00, Fri-Sat 11:00-23:00, Sun 12:00-21:00
Cutoffs: cancellation 2h, modification 2h

Customer: {customer.name} (ID: {customer.id})

Access tokens (short-lived):
  Customer: {customer_token}
  Staff:    {staff_token}
  Admin:    {admin_token}
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
