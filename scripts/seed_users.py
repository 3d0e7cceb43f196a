"""
Seed staff accounts (officer, manager, admin).
Run: python -m scripts.seed_users (from the project root).
"""
import asyncio
import os
import sys

# Add parent so we can import from the project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import AsyncSessionLocal, init_db
from models import Role
from repositories import UserRepository
from services import users


STAFF_DATA = [
    {"username": "officer", "email": "officer@example.com", "role": Role.OFFICER},
    {"username": "manager", "email": "manager@example.com", "role": Role.MANAGER},
    {"username": "admin", "email": "admin@example.com", "role": Role.ADMIN},
]


async def seed():
    await init_db()
    async with AsyncSessionLocal() as session:
        repo = UserRepository(session)
        for data in STAFF_DATA:
            existing = await repo.find_by_username(data["username"])
            if existing:
                print(f"User {data['username']} already exists ({existing.id}), skipping")
                continue
            user = await users.register(session, data["username"], email=data["email"], role=data["role"])
            print(f"Seeded {user.role}: {user.username} ({user.id})")
        await session.commit()
    print("Seed complete.")


if __name__ == "__main__":
    asyncio.run(seed())
