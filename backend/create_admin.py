"""Create (or promote) the staff account used to log in to /admin."""
import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy.future import select

from aas_portal.core.security import hash_pin
from aas_portal.db.init_db import init_models
from aas_portal.db.session import SessionLocal, engine
from aas_portal.models.user import User, UserRole


async def create_admin(full_name: str, phone_number: str, pin: str, car_number: str):
    await init_models(engine)
    try:
        await _upsert_admin(full_name, phone_number, pin, car_number)
    finally:
        await engine.dispose()


async def _upsert_admin(full_name: str, phone_number: str, pin: str, car_number: str):
    async with SessionLocal() as session:
        result = await session.execute(select(User).where(User.phone_number == phone_number))
        user = result.scalar_one_or_none()
        if user:
            user.role = UserRole.ADMIN
            user.is_verified = True
            user.pin_hash = hash_pin(pin)
            user.version = user.version + 1
            await session.commit()
            print(f"[OK] Promoted {phone_number} to admin")
            return

        session.add(User(
            full_name=full_name,
            phone_number=phone_number,
            pin_hash=hash_pin(pin),
            car_number=car_number,
            is_verified=True,
            role=UserRole.ADMIN,
        ))
        await session.commit()
        print(f"[OK] Created admin {phone_number}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("phone_number", help="8-digit phone number")
    parser.add_argument("pin", help="4-digit PIN")
    parser.add_argument("--name", default="Administrateur")
    parser.add_argument("--car", default="-")
    args = parser.parse_args()
    if not (len(args.phone_number) == 8 and args.phone_number.isdigit()):
        parser.error("phone number must be 8 digits")
    if not (len(args.pin) == 4 and args.pin.isdigit()):
        parser.error("PIN must be 4 digits")
    asyncio.run(create_admin(args.name, args.phone_number, args.pin, args.car))
