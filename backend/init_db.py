#!/usr/bin/env python3
"""
Database initialization + seeding script for Kind Kandles API.

- Creates tables (optionally drops them first).
- Creates an admin account from --admin-email / --admin-password.
- Optionally seeds a few sample discount codes (ONLY FOR LOCAL/DEV USE).
"""

import asyncio
import argparse
from decimal import Decimal

from sqlalchemy import select
from core.database import Base, db_manager, initialize_db
from core.config import settings
import models  # noqa: F401  registers every table on Base.metadata
from models.discounts import DiscountCode, DiscountType
from services.auth import AuthService

SAMPLE_DISCOUNTS = [
    {"code": "WELCOME10", "type": DiscountType.PERCENTAGE, "value": Decimal("10")},
    {"code": "FLAT5", "type": DiscountType.FIXED, "value": Decimal("5.00"), "min_purchase": Decimal("25.00")},
    {"code": "SHIPFREE", "type": DiscountType.FREE_SHIPPING, "value": Decimal("0"), "max_uses": 100},
]


async def create_tables(drop: bool = False):
    """Create all database tables, dropping them first when asked."""
    db_uri = settings.SQLALCHEMY_DATABASE_URI
    print(f"🔗 Connecting to: {db_uri.split('@')[-1] if '@' in db_uri else 'database'}")

    async with db_manager.engine.begin() as conn:
        if drop:
            print("🗑️  Dropping existing tables...")
            await conn.run_sync(Base.metadata.drop_all)
        print("🏗️  Creating tables...")
        await conn.run_sync(Base.metadata.create_all)


async def seed_admin(email: str, password: str):
    async with db_manager.session_factory() as session:
        auth_service = AuthService(session)
        if await auth_service.get_admin_by_email(email):
            print(f"👤 Admin {email} already exists.")
            return
        await auth_service.create_admin(email=email, password=password)
        print(f"👤 Created admin {email}.")


async def seed_discounts():
    async with db_manager.session_factory() as session:
        created = 0
        for data in SAMPLE_DISCOUNTS:
            existing = await session.execute(select(DiscountCode.id).where(DiscountCode.code == data["code"]))
            if existing.first():
                continue
            session.add(DiscountCode(uses=0, active=True, **data))
            created += 1
        await session.commit()
    print(f"🏷️  Created {created} discount codes.")


async def main():
    parser = argparse.ArgumentParser(description="Initialize DB and optionally seed an admin and sample codes.")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    parser.add_argument("--admin-email", help="Create an admin account with this email")
    parser.add_argument("--admin-password", help="Password for --admin-email")
    parser.add_argument("--seed", action="store_true", help="Seed sample discount codes")
    args = parser.parse_args()

    if args.admin_email and not args.admin_password:
        parser.error("--admin-password is required with --admin-email")

    print("🚀 Initializing Kind Kandles database...")
    initialize_db(settings.SQLALCHEMY_DATABASE_URI, settings.ENVIRONMENT == "local")

    try:
        await create_tables(drop=args.drop)
        if args.admin_email:
            await seed_admin(args.admin_email, args.admin_password)
        if args.seed:
            await seed_discounts()
        print("✅ Database initialization complete!")
    finally:
        await db_manager.dispose()


if __name__ == "__main__":
    asyncio.run(main())
