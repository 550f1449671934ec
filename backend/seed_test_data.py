"""
Seed database with demo members, claims in every status, posts and comments.
Performs a full clean (DROP ALL) before seeding.
"""
import asyncio
import sys
import os

# Ensure backend directory is in path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from datetime import date, datetime, timedelta

from aas_portal.core.security import hash_pin
from aas_portal.db.init_db import init_models
from aas_portal.db.session import SessionLocal, engine
from aas_portal.models.audit import ClaimUpdate
from aas_portal.models.claim import Claim, ClaimStatus
from aas_portal.models.post import Comment, Post
from aas_portal.models.user import User, UserRole

DEMO_IMAGE = "/storage/claims/demo-accident.jpg"
DEMO_DOC = "/storage/profiles/demo-document.pdf"


def member(full_name: str, phone_number: str, pin: str, car_number: str, verified: bool) -> User:
    today = date.today()
    return User(
        full_name=full_name,
        phone_number=phone_number,
        pin_hash=hash_pin(pin),
        car_number=car_number,
        profile_image="/storage/profiles/demo-profile.jpg",
        driver_license=DEMO_DOC,
        insurance_image=DEMO_DOC,
        insurance_start=today - timedelta(days=90),
        insurance_end=today + timedelta(days=275),
        is_verified=verified,
        role=UserRole.USER,
    )


async def seed_database():
    print("[*] Resetting database...")
    await init_models(engine, drop=True)
    print("[*] Tables recreated.")

    async with SessionLocal() as session:
        print("[*] Seeding database with demo data...")

        admin = User(
            full_name="Administrateur",
            phone_number="22000000",
            pin_hash=hash_pin("0000"),
            car_number="-",
            is_verified=True,
            role=UserRole.ADMIN,
        )
        users = [
            admin,
            member("Ahmed Salem", "22111111", "1111", "1234AA00", verified=True),
            member("Mariem Cheikh", "22222222", "2222", "5678AB00", verified=True),
            # Awaiting verification: can log in, cannot submit claims
            member("Sidi Mohamed", "22333333", "3333", "9012AC00", verified=False),
        ]
        session.add_all(users)
        await session.commit()
        for user in users:
            await session.refresh(user)
        print(f"[OK] Created {len(users)} users")

        now = datetime.utcnow()
        claims = [
            Claim(
                user_id=users[1].id,
                title="Collision at a roundabout",
                description="Rear bumper and trunk damaged by a taxi.",
                date=(now - timedelta(days=3)).date(),
                accident_images=[DEMO_IMAGE, DEMO_IMAGE],
                police_report=DEMO_DOC,
                insurance_receipt=DEMO_DOC,
                status=ClaimStatus.PENDING,
                progress=0,
            ),
            Claim(
                user_id=users[2].id,
                title="Side impact while parked",
                description="Driver door dented, third party identified.",
                date=(now - timedelta(days=12)).date(),
                accident_images=[DEMO_IMAGE, DEMO_IMAGE, DEMO_IMAGE],
                police_report=DEMO_DOC,
                insurance_receipt=DEMO_DOC,
                status=ClaimStatus.IN_PROGRESS,
                progress=40,
            ),
            Claim(
                user_id=users[1].id,
                title="Windscreen broken by debris",
                description="Windscreen replaced, compensation received.",
                date=(now - timedelta(days=40)).date(),
                accident_images=[DEMO_IMAGE, DEMO_IMAGE],
                police_report=DEMO_DOC,
                insurance_receipt=DEMO_DOC,
                status=ClaimStatus.RESOLVED,
                progress=100,
            ),
        ]
        session.add_all(claims)
        await session.commit()
        for claim in claims:
            await session.refresh(claim)
        print(f"[OK] Created {len(claims)} sample claims")

        session.add_all([
            ClaimUpdate(claim_id=claims[1].id, updated_by=admin.id, new_status=ClaimStatus.IN_PROGRESS,
                        new_progress=40, note="File sent to the insurer"),
            ClaimUpdate(claim_id=claims[2].id, updated_by=admin.id, new_status=ClaimStatus.RESOLVED,
                        new_progress=100, note="Compensation paid"),
        ])

        post = Post(
            title="Know your rights after an accident",
            content="Keep the police report and your insurance receipt: both are required for any claim.",
            media="/storage/posts/demo-awareness.jpg",
            created_by=admin.id,
        )
        session.add(post)
        await session.commit()
        await session.refresh(post)

        session.add(Comment(post_id=post.id, user_id=users[1].id, content="Thank you for the advice."))
        await session.commit()
        print("[OK] Created audit entries, 1 post and 1 comment")

        print("\n" + "=" * 60)
        print("TEST CREDENTIALS (phone / PIN)")
        print("=" * 60)
        print("\nADMIN:")
        print("  - 22000000 / 0000")
        print("\nVERIFIED MEMBERS:")
        print("  - 22111111 / 1111")
        print("  - 22222222 / 2222")
        print("\nAWAITING VERIFICATION:")
        print("  - 22333333 / 3333")

        print("\n[SUCCESS] Database cleaned and seeded successfully!")

    await engine.dispose()


if __name__ == "__main__":
    if os.name == 'nt':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(seed_database())
