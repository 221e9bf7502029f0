#!/usr/bin/env python3
"""
Seed the pickup queue with sample packages for local development.
"""
import sys
import logging

from core.exceptions import DuplicateOrderRefError
from database.connection import SessionLocal, create_tables
from repositories.package_repository import PackageRepository
from services.package_service import PackageService

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

SAMPLE_PACKAGES = [
    ("ABC-001", "DRV-001"),
    ("ABC-002", "DRV-002"),
    ("ABC-003", "DRV-003"),
    ("DEF-001", "DRV-001"),
    ("DEF-002", "DRV-004"),
    ("GHI-001", None),
    ("GHI-002", "DRV-002"),
    ("JKL-001", "DRV-005"),
]

def seed_packages(service: PackageService, packages=SAMPLE_PACKAGES) -> int:
    """Create the sample packages, skipping ones that already exist"""
    created = 0
    for order_ref, driver_code in packages:
        try:
            service.create(order_ref, driver_code)
            created += 1
        except DuplicateOrderRefError:
            logger.info(f"Package {order_ref} already exists, skipping")
    return created

def main():
    create_tables()
    db = SessionLocal()
    try:
        created = seed_packages(PackageService(PackageRepository(db)))
        logger.info(f"Seeded {created} packages")
    finally:
        db.close()
    return 0

if __name__ == "__main__":
    sys.exit(main())
