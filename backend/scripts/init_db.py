#!/usr/bin/env python3
"""
Database Initialization Script for the Final-Year Project Repository

This script:
1. Tests database connectivity
2. Creates any missing tables
3. Creates (or resets) the admin account
4. Seeds sample approved projects if asked

Usage:
    python scripts/init_db.py                                   # Tables only
    python scripts/init_db.py --check                           # Only check connectivity
    python scripts/init_db.py --create-admin --email a@b.edu    # Password from ADMIN_PASSWORD or prompt
    python scripts/init_db.py --create-admin --reset-password   # Overwrite an existing admin's password
    python scripts/init_db.py --seed                            # Add sample approved projects
"""

import asyncio
import sys
import os
import argparse
import getpass
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Minimal valid one-page PDF used for seeded sample files
SAMPLE_PDF = (
    b"%PDF-1.4\n1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
    b"2 0 obj<</Type/Pages/Kids[3 0 R]/Count 1>>endobj\n"
    b"3 0 obj<</Type/Page/Parent 2 0 R/MediaBox[0 0 612 792]>>endobj\n"
    b"trailer<</Root 1 0 R>>\n%%EOF\n"
)

SAMPLE_PROJECTS = [
    {
        "title": "Advanced GIS Applications in Urban Planning and Land Management",
        "author": "Kofi Mensah",
        "department": "Surveying & Geoinformatics",
        "year": 2024,
        "abstract": (
            "This research explores the integration of Geographic Information Systems "
            "with urban planning methodologies to improve spatial decision-making for "
            "land use optimization and infrastructure planning in growing cities."
        ),
        "supervisor": "Prof. Ama Asante",
        "file_name": "GIS_Urban_Planning_2024.pdf",
    },
    {
        "title": "Drone Photogrammetry for Cadastral Boundary Mapping",
        "author": "Abena Owusu",
        "department": "Cadastral Survey",
        "year": 2023,
        "abstract": (
            "An evaluation of low-cost UAV photogrammetry for producing cadastral maps, "
            "comparing boundary accuracy against conventional total station surveys "
            "across peri-urban parcels."
        ),
        "supervisor": "Dr. Kwame Boateng",
        "file_name": "Drone_Cadastral_Mapping_2023.pdf",
    },
    {
        "title": "Flood Risk Modelling with Open Elevation Data",
        "author": "Yaw Darko",
        "department": "Geoinformatics",
        "year": 2024,
        "abstract": (
            "This project builds a flood susceptibility model from open digital elevation "
            "models, rainfall records and land cover classification, and validates it "
            "against recorded flood events."
        ),
        "supervisor": "Dr. Efua Mensah",
        "file_name": "Flood_Risk_Modelling_2024.pdf",
    },
]


async def test_connection() -> bool:
    """Test database connectivity"""
    print("\n[InitDB] Testing database connection...")

    try:
        from sqlalchemy import text
        from fyp_repository.core.config import settings
        from fyp_repository.core.database import get_engine

        db_url = settings.DATABASE_URL
        print(f"[InitDB] Connecting to: {db_url.split('@')[1] if '@' in db_url else 'database'}")

        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))

        print("[InitDB] Database connection successful!")
        return True

    except Exception as e:
        print(f"[InitDB] ERROR: Database connection failed: {e}")
        return False


async def create_tables() -> bool:
    """Create database tables using SQLAlchemy"""
    print("\n[InitDB] Creating/verifying database tables...")

    try:
        from fyp_repository.core.database import init_db

        await init_db()

        print("[InitDB] Database tables created/verified!")
        return True

    except Exception as e:
        print(f"[InitDB] ERROR: Table creation failed: {e}")
        import traceback
        traceback.print_exc()
        return False


async def create_admin(email: str, password: str, reset_password: bool) -> bool:
    """Create the admin account, or reset its password"""
    print("\n[InitDB] Creating admin account...")

    from fyp_repository.core.database import AsyncSessionLocal
    from fyp_repository.core.exceptions import ValidationFailedError
    from fyp_repository.services.auth_service import bootstrap_admin

    try:
        async with AsyncSessionLocal() as session:
            admin, created = await bootstrap_admin(session, email, password, reset_password=reset_password)
    except ValidationFailedError as e:
        print(f"[InitDB] ERROR: {e.message}")
        return False

    if created:
        print(f"[InitDB] Admin created (email: {admin.email})")
    elif reset_password:
        print(f"[InitDB] Admin password reset (email: {admin.email})")
    else:
        print(f"[InitDB] Admin already exists (email: {admin.email}); use --reset-password to change it")
    return True


async def seed_data() -> bool:
    """Add sample approved projects with placeholder PDFs"""
    print("\n[InitDB] Seeding sample projects...")

    from sqlalchemy import select
    from fyp_repository.core.config import settings
    from fyp_repository.core.database import AsyncSessionLocal
    from fyp_repository.models.project import Project, ProjectStatus
    from fyp_repository.utils.helpers import generate_project_id

    settings.ensure_directories()

    async with AsyncSessionLocal() as session:
        created = 0
        for index, sample in enumerate(SAMPLE_PROJECTS, start=1):
            result = await session.execute(select(Project).where(Project.title == sample["title"]))
            if result.scalar_one_or_none():
                continue

            file_path = settings.UPLOAD_DIR / f"sample-{index}.pdf"
            file_path.write_bytes(SAMPLE_PDF)

            session.add(Project(
                project_id=generate_project_id(),
                status=ProjectStatus.APPROVED,
                file_path=str(file_path),
                file_size=len(SAMPLE_PDF),
                **sample,
            ))
            created += 1

        await session.commit()

    print(f"[InitDB] Seeded {created} sample project(s)")
    return True


async def main():
    """Main initialization function"""
    parser = argparse.ArgumentParser(description="Project Repository Database Initialization")
    parser.add_argument("--check", action="store_true", help="Only check connectivity")
    parser.add_argument("--create-admin", action="store_true", help="Create the admin account")
    parser.add_argument("--email", help="Admin email (defaults to ADMIN_EMAIL)")
    parser.add_argument("--password", help="Admin password (defaults to ADMIN_PASSWORD, else prompt)")
    parser.add_argument("--reset-password", action="store_true", help="Reset the password of an existing admin")
    parser.add_argument("--seed", action="store_true", help="Add sample approved projects")

    args = parser.parse_args()

    print("=" * 50)
    print("  Project Repository - Database Initialization")
    print("=" * 50)

    from fyp_repository.core.database import close_db

    try:
        if not await test_connection():
            print("\n[InitDB] FAILED: Cannot connect to database")
            return 1

        if args.check:
            print("\n[InitDB] Connection check completed!")
            return 0

        if not await create_tables():
            print("[InitDB] FAILED: Could not create tables")
            return 1

        if args.create_admin:
            email = args.email or os.environ.get("ADMIN_EMAIL")
            if not email:
                print("[InitDB] ERROR: --email or ADMIN_EMAIL is required")
                return 1
            password = args.password or os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Admin password: ")
            if not await create_admin(email, password, args.reset_password):
                return 1

        if args.seed:
            await seed_data()
    finally:
        await close_db()

    print("\n" + "=" * 50)
    print("  Database Initialization Complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
