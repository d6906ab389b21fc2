"""Script to initialize the database and create the first administrator."""

import argparse
import asyncio

from app.config import settings
from app.database import AsyncSessionLocal, engine
from app.models import locations, metadata, staff_groups
from app.services.staff_repository import StaffRepository


async def init_db(admin: argparse.Namespace) -> None:
    """Create all tables, the default group and location, and an admin login."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    print("✓ Database tables created")

    if not admin.username:
        return

    async with AsyncSessionLocal() as session:
        group = await session.execute(
            staff_groups.insert().values(staff_group_name="Administrator")
        )
        location = await session.execute(
            locations.insert().values(location_name=admin.location_name)
        )
        await session.commit()

        repository = StaffRepository.from_settings(settings)
        staff_id = await repository.save(
            session,
            None,
            {
                "staff_name": admin.name,
                "staff_email": admin.email,
                "staff_group_id": group.inserted_primary_key[0],
                "staff_location_id": location.inserted_primary_key[0],
                "staff_status": "1",
                "username": admin.username,
                "password": admin.password,
            },
        )

    print(f"✓ Administrator '{admin.username}' created with staff id {staff_id}")


def parse_args() -> argparse.Namespace:
    """Parse administrator details from the command line."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--username", help="Administrator username; skip to only create tables")
    parser.add_argument("--password", default="")
    parser.add_argument("--name", default="Administrator")
    parser.add_argument("--email", default="admin@example.com")
    parser.add_argument("--location-name", default="Main Location")
    args = parser.parse_args()
    if args.username and not args.password:
        parser.error("--password is required with --username")
    return args


if __name__ == "__main__":
    asyncio.run(init_db(parse_args()))
