"""CLI for the repair shop service: bootstrap the database, admin and workshops."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys


def _read_password(given: str) -> str:
    password = given
    if not password:
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match")
            sys.exit(1)
    return password


async def cmd_init_db(args):
    """Create all tables (idempotent)."""
    from repairshop.db.engine import create_tables

    await create_tables()
    print("Database tables created")


async def cmd_create_admin(args):
    """Create the site admin (web_owner) account."""
    from repairshop.db import crud
    from repairshop.db.engine import async_session_factory, create_tables
    from repairshop.services import accounts

    await create_tables()
    password = _read_password(args.password)

    async with async_session_factory() as db:
        if await crud.get_web_owner(db):
            print("A site admin already exists")
            sys.exit(1)
        result = await accounts.register(
            db, national_id=args.national_id, full_name=args.name, email=args.email,
            password=password, role="web_owner",
        )

    if not result.success:
        print(f"Error: {result.message} ({result.error})")
        sys.exit(1)
    print(f"Site admin created: {result.data.email} (id={result.data.id})")


async def cmd_create_workshop(args):
    """Create a workshop with its owner account."""
    from repairshop.db.engine import async_session_factory, create_tables
    from repairshop.services import accounts

    await create_tables()
    password = _read_password(args.password)

    async with async_session_factory() as db:
        result = await accounts.create_workshop_with_owner(
            db,
            name=args.name,
            owner_national_id=args.owner_national_id,
            owner_name=args.owner_name,
            email=args.email,
            password=password,
            phone=args.phone,
            address=args.address,
        )

    if not result.success:
        print(f"Error: {result.message} ({result.error})")
        sys.exit(1)
    workshop, owner = result.data["workshop"], result.data["user"]
    print(f"Workshop created: {workshop.name} (id={workshop.id})")
    print(f"Owner user: {owner.email} (id={owner.id})")


def cmd_serve(args):
    import uvicorn

    uvicorn.run("repairshop.main:app", host=args.host, port=args.port, reload=args.reload)


def main():
    parser = argparse.ArgumentParser(description="Repair shop CLI")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    subparsers = parser.add_subparsers(dest="command")

    # init-db
    subparsers.add_parser("init-db", help="Create database tables")

    # create-admin
    ca = subparsers.add_parser("create-admin", help="Create the site admin account")
    ca.add_argument("--email", required=True, help="Admin email")
    ca.add_argument("--name", required=True, help="Admin full name")
    ca.add_argument("--national-id", required=True, help="Admin national id")
    ca.add_argument("--password", default="", help="Admin password (prompted if not given)")

    # create-workshop
    cw = subparsers.add_parser("create-workshop", help="Create a workshop with its owner")
    cw.add_argument("--name", required=True, help="Workshop name")
    cw.add_argument("--owner-name", required=True, help="Owner full name")
    cw.add_argument("--owner-national-id", required=True, help="Owner national id")
    cw.add_argument("--email", required=True, help="Owner/workshop email")
    cw.add_argument("--password", default="", help="Owner password (prompted if not given)")
    cw.add_argument("--phone", default="", help="Workshop phone")
    cw.add_argument("--address", default="", help="Workshop address")

    # serve
    sv = subparsers.add_parser("serve", help="Run the HTTP API")
    sv.add_argument("--host", default="127.0.0.1")
    sv.add_argument("--port", type=int, default=8000)
    sv.add_argument("--reload", action="store_true")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(level=args.log_level.upper())

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "create-admin":
        asyncio.run(cmd_create_admin(args))
    elif args.command == "create-workshop":
        asyncio.run(cmd_create_workshop(args))
    elif args.command == "serve":
        cmd_serve(args)


if __name__ == "__main__":
    main()
