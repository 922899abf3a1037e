"""Integration tests for API endpoints."""

from __future__ import annotations

from datetime import datetime, timezone, timedelta

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from repairshop.db import crud
from repairshop.db.engine import get_db
from repairshop.main import app
from repairshop.models import Base, UserSession, Workshop
from repairshop.services.auth import SESSION_COOKIE_NAME, _hash_token, hash_password

# Raw session tokens per seeded user
TOKENS = {
    "admin": "token-admin",
    "owner": "token-owner",
    "mechanic": "token-mechanic",
    "client": "token-client",
    "stranger": "token-stranger",
}


def auth(who: str) -> dict:
    return {"Authorization": f"Bearer {TOKENS[who]}"}


@pytest_asyncio.fixture
async def ctx():
    """Test client over an in-memory database with one user per role."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with factory() as db:
        admin = await crud.create_user(
            db, national_id="0", full_name="Site Admin", email="admin@site.com",
            password_hash=hash_password("adminpass"), role="web_owner",
        )
        workshop = Workshop(
            name="Main Street Garage", owner_national_id="1", owner_name="Olivia Owner",
            email="owner@shop.com",
        )
        db.add(workshop)
        await db.commit()
        owner = await crud.create_user(
            db, national_id="1", full_name="Olivia Owner", email="owner@shop.com",
            password_hash="x", role="workshop_owner", workshop_id=workshop.id,
        )
        mechanic = await crud.create_user(
            db, national_id="2", full_name="Mario Mechanic", email="mario@shop.com",
            password_hash="x", role="mechanic", workshop_id=workshop.id,
        )
        client = await crud.create_user(
            db, national_id="3", full_name="Carla Client", email="carla@example.com",
            password_hash="x", role="client",
        )
        stranger = await crud.create_user(
            db, national_id="4", full_name="Sam Stranger", email="sam@example.com",
            password_hash="x", role="client",
        )
        vehicle = await crud.create_vehicle(
            db, plate="ABC123", make="Toyota", model="Corolla", year=2018, client_id=client.id,
        )
        users = {"admin": admin, "owner": owner, "mechanic": mechanic, "client": client, "stranger": stranger}
        for key, user in users.items():
            db.add(UserSession(
                user_id=user.id,
                token_hash=_hash_token(TOKENS[key]),
                expires_at=datetime.now(timezone.utc) + timedelta(hours=24),
                ip_address="127.0.0.1",
            ))
        await db.commit()

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield {"http": http, "users": users, "workshop": workshop, "vehicle": vehicle}

    app.dependency_overrides.clear()
    await engine.dispose()


async def test_health(ctx):
    resp = await ctx["http"].get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_requires_authentication(ctx):
    resp = await ctx["http"].get("/api/vehicles")
    assert resp.status_code == 401


async def test_login_sets_cookie(ctx):
    http = ctx["http"]
    bad = await http.post("/api/auth/login", json={"email": "admin@site.com", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "INVALID_CREDENTIALS"

    resp = await http.post("/api/auth/login", json={"email": "admin@site.com", "password": "adminpass"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["user"]["role"] == "web_owner"
    assert "password_hash" not in body["data"]["user"]
    assert SESSION_COOKIE_NAME in resp.cookies

    me = await http.get("/api/auth/me", cookies={SESSION_COOKIE_NAME: body["data"]["token"]})
    assert me.status_code == 200
    assert me.json()["email"] == "admin@site.com"


async def test_register_client(ctx):
    resp = await ctx["http"].post("/api/auth/register", json={
        "national_id": "9", "full_name": "New Client", "email": "new@example.com", "password": "secret1",
    })
    assert resp.status_code == 201
    assert resp.json()["data"]["role"] == "client"

    weak = await ctx["http"].post("/api/auth/register", json={
        "national_id": "9", "full_name": "X", "email": "x@example.com", "password": "1",
    })
    assert weak.status_code == 400
    assert weak.json()["error"] == "WEAK_PASSWORD"


async def test_create_workshop_with_owner(ctx):
    http = ctx["http"]
    payload = {
        "name": "North Garage", "owner_national_id": "55", "owner_name": "Nora",
        "email": "nora@north.com", "password": "secret1",
    }
    resp = await http.post("/api/create-workshop-with-owner", json=payload, headers=auth("admin"))
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["user"]["workshop_id"] == data["workshop"]["id"]

    dup = await http.post("/api/create-workshop-with-owner", json=payload, headers=auth("admin"))
    assert dup.status_code == 400
    assert dup.json()["error"] == "DUPLICATE_EMAIL"

    missing = await http.post(
        "/api/create-workshop-with-owner", json={"name": "Only name"}, headers=auth("admin"),
    )
    assert missing.status_code == 400
    assert missing.json()["error"] == "MISSING_FIELDS"

    forbidden = await http.post("/api/create-workshop-with-owner", json=payload, headers=auth("owner"))
    assert forbidden.status_code == 403

    listed = await http.get("/api/workshops", headers=auth("admin"))
    assert {w["name"] for w in listed.json()} == {"Main Street Garage", "North Garage"}


async def test_assessment_to_invoice_flow(ctx):
    http = ctx["http"]
    vehicle = ctx["vehicle"]
    mechanic = ctx["users"]["mechanic"]

    resp = await http.post(
        "/api/assessments", json={"vehicle_id": vehicle.id, "mechanic_id": mechanic.id}, headers=auth("owner"),
    )
    assert resp.status_code == 201
    assessment_id = resp.json()["data"]["id"]

    task_a = (await http.post(
        f"/api/assessments/{assessment_id}/tasks",
        json={"name": "Brake pads", "description": "Front", "estimated_price": 80},
        headers=auth("mechanic"),
    )).json()["data"]
    task_b = (await http.post(
        f"/api/assessments/{assessment_id}/tasks",
        json={"name": "Oil change", "estimated_price": 45},
        headers=auth("mechanic"),
    )).json()["data"]
    sent = await http.post(f"/api/assessments/{assessment_id}/send-to-client", headers=auth("mechanic"))
    assert sent.json()["data"]["status"] == "awaiting_client"

    # Another client may not answer
    denied = await http.post(
        f"/api/assessments/{assessment_id}/tasks/{task_a['id']}/respond",
        json={"accepted": True}, headers=auth("stranger"),
    )
    assert denied.status_code == 403

    first = await http.post(
        f"/api/assessments/{assessment_id}/tasks/{task_a['id']}/respond",
        json={"accepted": True}, headers=auth("client"),
    )
    assert first.status_code == 200
    assert first.json()["data"]["assessment"]["client_status"] == "reviewed"
    assert first.json()["data"]["work_order"] is None

    second = await http.post(
        f"/api/assessments/{assessment_id}/tasks/{task_b['id']}/respond",
        json={"accepted": False}, headers=auth("client"),
    )
    body = second.json()["data"]
    assert body["assessment"]["client_status"] == "partially_accepted"
    order = body["work_order"]
    assert [t["name"] for t in order["approved_tasks"]] == ["Brake pads"]
    assert order["total_cost"] == 80.0

    again = await http.post(f"/api/assessments/{assessment_id}/work-order", headers=auth("owner"))
    assert again.status_code == 409
    assert again.json()["data"]["id"] == order["id"]

    pending = await http.get("/api/work-orders/pending", headers=auth("owner"))
    assert [o["id"] for o in pending.json()["data"]] == [order["id"]]

    assigned = await http.post(
        f"/api/work-orders/{order['id']}/assign", json={"mechanic_id": mechanic.id}, headers=auth("owner"),
    )
    assert assigned.json()["data"]["status"] == "assigned"

    done = await http.put(
        f"/api/work-orders/{order['id']}",
        json={"status": "completed", "hours_worked": 1, "labour_cost": 40, "parts_cost": 30},
        headers=auth("mechanic"),
    )
    assert done.json()["data"]["total_cost"] == 70.0

    invoice = await http.post("/api/invoices", json={"work_order_id": order["id"]}, headers=auth("owner"))
    assert invoice.status_code == 201
    assert invoice.json()["data"]["number"].startswith("FACT-")

    duplicate = await http.post("/api/invoices", json={"work_order_id": order["id"]}, headers=auth("owner"))
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "INVOICE_ALREADY_EXISTS"

    mine = await http.get("/api/invoices", headers=auth("client"))
    assert len(mine.json()["data"]) == 1

    dashboard = await http.get("/api/dashboard", headers=auth("client"))
    assert dashboard.json()["role"] == "client"
    assert len(dashboard.json()["work_orders"]) == 1


async def test_missing_records_map_to_404(ctx):
    http = ctx["http"]
    resp = await http.post(
        "/api/assessments/ghost/tasks", json={"name": "X"}, headers=auth("owner"),
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "assessment not found"

    created = await http.post(
        "/api/assessments", json={"vehicle_id": ctx["vehicle"].id}, headers=auth("owner"),
    )
    assessment_id = created.json()["data"]["id"]
    gone = await http.delete(f"/api/assessments/{assessment_id}/tasks/ghost", headers=auth("owner"))
    assert gone.status_code == 404
    assert gone.json()["message"] == "task not found"


async def test_role_enforcement(ctx):
    resp = await ctx["http"].post(
        "/api/assessments", json={"vehicle_id": ctx["vehicle"].id}, headers=auth("client"),
    )
    assert resp.status_code == 403


async def test_admin_dashboard_counts(ctx):
    resp = await ctx["http"].get("/api/dashboard", headers=auth("admin"))
    assert resp.status_code == 200
    data = resp.json()
    assert data["workshops"] == 1
    assert data["users_by_role"]["client"] == 2
    assert data["vehicles"] == 1


async def test_vehicle_history_is_scoped_to_the_staff_workshop(ctx):
    http = ctx["http"]
    vehicle_id = ctx["vehicle"].id
    await http.post(
        "/api/create-workshop-with-owner",
        json={"name": "North Garage", "owner_national_id": "55", "owner_name": "Nora",
              "email": "nora@north.com", "password": "secret1"},
        headers=auth("admin"),
    )
    login = await http.post("/api/auth/login", json={"email": "nora@north.com", "password": "secret1"})
    rival = {"Authorization": f"Bearer {login.json()['data']['token']}"}

    await http.post("/api/assessments", json={"vehicle_id": vehicle_id}, headers=auth("owner"))
    await http.post("/api/work-orders", json={"vehicle_id": vehicle_id}, headers=auth("owner"))

    for path in ("/api/assessments", "/api/work-orders"):
        own = await http.get(path, params={"vehicle_id": vehicle_id}, headers=auth("owner"))
        assert len(own.json()["data"]) == 1
        other = await http.get(path, params={"vehicle_id": vehicle_id}, headers=rival)
        assert other.status_code == 200
        assert other.json()["data"] == []
        mine = await http.get(path, params={"vehicle_id": vehicle_id}, headers=auth("client"))
        assert len(mine.json()["data"]) == 1
