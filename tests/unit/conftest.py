from types import SimpleNamespace

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from repairshop.db import crud
from repairshop.models import Base, Workshop


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def shop(db):
    """A workshop with its owner, one mechanic, one client and the client's vehicle."""
    owner = await crud.create_user(
        db, national_id="1", full_name="Olivia Owner", email="owner@shop.com",
        password_hash="x", role="workshop_owner",
    )
    workshop = Workshop(
        name="Main Street Garage", owner_national_id="1", owner_name="Olivia Owner",
        email="owner@shop.com", phone="555-0100", address="1 Main St", owner_id=owner.id,
    )
    db.add(workshop)
    await db.commit()
    owner = await crud.update_record(db, owner, workshop_id=workshop.id)

    mechanic = await crud.create_user(
        db, national_id="2", full_name="Mario Mechanic", email="mario@shop.com",
        password_hash="x", role="mechanic", workshop_id=workshop.id,
    )
    client = await crud.create_user(
        db, national_id="3", full_name="Carla Client", email="carla@example.com",
        password_hash="x", role="client", phone="555-0199",
    )
    vehicle = await crud.create_vehicle(
        db, plate="ABC123", make="Toyota", model="Corolla", year=2018, client_id=client.id,
    )
    # Plain ids: a failed service call rolls back and expires the ORM instances
    records = dict(workshop=workshop, owner=owner, mechanic=mechanic, client=client, vehicle=vehicle)
    return SimpleNamespace(**{name: SimpleNamespace(id=row.id) for name, row in records.items()})
