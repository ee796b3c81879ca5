"""Create the database tables and seed the vendor registry.

Only needed with RECORD_STORE=database; Supabase projects manage their
own schema.

Usage:
    RECORD_STORE=database DATABASE_URL=sqlite+aiosqlite:///./pricewatch.db \\
        python scripts/seed_vendors.py
"""

import asyncio

from sqlalchemy import select

from pricewatch.config import settings
from pricewatch.db.session import create_session_factory
from pricewatch.models import Vendor
from pricewatch.stores.database import DatabaseRecordStore

VENDORS = [
    {"id": 1, "name": "Galaxus"},
    {"id": 2, "name": "Brack"},
    {"id": 3, "name": "Digitec"},
    {"id": 4, "name": "Interdiscount"},
]


async def seed_vendors():
    """Seed all vendors into the database.

    This function is idempotent - running it multiple times will not
    create duplicate vendors. Vendors are identified by their id.
    """
    print(f"\n{'='*60}")
    print(f"  Seeding Vendors")
    print(f"{'='*60}\n")

    engine, session_factory = create_session_factory(settings.DATABASE_URL)
    store = DatabaseRecordStore(session_factory, engine=engine)
    await store.create_schema()

    added_count = 0
    skipped_count = 0

    async with session_factory() as session:
        for vendor_data in VENDORS:
            existing = await session.execute(
                select(Vendor).where(Vendor.id == vendor_data["id"])
            )
            if existing.scalar_one_or_none():
                print(f"  ⏭️  Vendor '{vendor_data['name']}' already exists, skipping")
                skipped_count += 1
                continue

            session.add(Vendor(**vendor_data))
            print(f"  ✅ Added vendor: {vendor_data['name']}")
            added_count += 1

        await session.commit()

    await store.close()

    print(f"\n{'='*60}")
    print(f"  ✅ Added: {added_count} vendors")
    print(f"  ⏭️  Skipped: {skipped_count} vendors (already exist)\n")


if __name__ == "__main__":
    asyncio.run(seed_vendors())
