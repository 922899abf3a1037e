"""Seed the database with a demo workshop, staff, client, vehicle and assessment."""

import asyncio

from repairshop.db import crud
from repairshop.db.engine import async_session_factory, create_tables
from repairshop.services import accounts, assessments

DEMO_PASSWORD = "demo1234"


async def seed():
    await create_tables()

    async with async_session_factory() as db:
        if await crud.get_user_by_email(db, "owner@demo-workshop.com"):
            print("Demo workshop already exists, skipping seed.")
            return

        if not await crud.get_web_owner(db):
            admin = await accounts.register(
                db, national_id="000000000", full_name="Site Admin", email="admin@repairshop.local",
                password=DEMO_PASSWORD, role="web_owner",
            )
            print(f"Created site admin: {admin.data.email}")

        created = await accounts.create_workshop_with_owner(
            db, name="Demo Workshop", owner_national_id="101110111", owner_name="Olivia Owner",
            email="owner@demo-workshop.com", password=DEMO_PASSWORD,
            phone="555-0100", address="1 Garage Lane",
        )
        workshop, owner = created.data["workshop"], created.data["user"]
        print(f"Created workshop: {workshop.name} (id: {workshop.id})")

        mechanic = await accounts.create_mechanic(
            db, workshop.id, national_id="202220222", full_name="Mario Mechanic",
            email="mechanic@demo-workshop.com", password=DEMO_PASSWORD, specialty="Brakes",
        )
        client = await accounts.create_client(
            db, national_id="303330333", full_name="Carla Client", email="client@example.com",
            password=DEMO_PASSWORD,
            vehicle={"plate": "ABC123", "make": "Toyota", "model": "Corolla", "year": 2018, "color": "Blue"},
        )
        vehicle = client.data["vehicle"]
        print(f"Created client {client.data['user'].email} with vehicle {vehicle.describe()}")

        assessment = await assessments.create_assessment(
            db, vehicle_id=vehicle.id, owner_id=owner.id,
            workshop_id=workshop.id, mechanic_id=mechanic.data.id,
        )
        await assessments.add_task(
            db, assessment.data.id, "Brake pads", "Replace front pads", 80.0, mandatory=True,
        )
        await assessments.add_task(db, assessment.data.id, "Oil change", "Synthetic 5W-30", 45.0)
        await assessments.send_to_client(db, assessment.data.id)
        print(f"Created assessment {assessment.data.id} awaiting client review")

    print(f"\nSeed complete. Every demo account uses the password '{DEMO_PASSWORD}'.")
    print("Start the server with: python -m repairshop.cli serve")


if __name__ == "__main__":
    asyncio.run(seed())
