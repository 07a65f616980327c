#!/usr/bin/env python3
"""
Database initialization script.

Creates the Caseboard database and seeds demo regions, the session owner's
profile and a set of retainers.
"""

import random
import sys
import uuid
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from caseboard.backend import LocalBackend
from caseboard.config import get_config_manager
from caseboard.database.db_manager import create_database_manager
from caseboard.models import (
    AttorneyProfile,
    Region,
    RegionStatus,
    Retainer,
    RetainerStatus,
)
from caseboard.utils import get_logger

REGION_NAMES = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "DC": "District of Columbia", "FL": "Florida", "GA": "Georgia", "HI": "Hawaii",
    "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine",
    "MD": "Maryland", "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota",
    "MS": "Mississippi", "MO": "Missouri", "MT": "Montana", "NE": "Nebraska",
    "NV": "Nevada", "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico",
    "NY": "New York", "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio",
    "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island",
    "SC": "South Carolina", "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas",
    "UT": "Utah", "VT": "Vermont", "VA": "Virginia", "WA": "Washington",
    "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
}

# Regions the firm has stopped taking intake from
INACTIVE_REGIONS = {"AK", "HI", "ND", "WY"}

CLIENT_NAMES = [
    "Maria Alvarez", "James Okafor", "Priya Raman", "Tom Becker", "Lena Fischer",
    "Darnell Brooks", "Sofia Rossi", "Kevin Nguyen", "Hannah Cole", "Omar Haddad",
    "Grace Kim", "Luis Moreno",
]
CASE_TYPES = ["Personal Injury", "Workers' Compensation", "Medical Malpractice", "Auto Accident"]


def build_regions(rng: random.Random) -> list:
    """Generate demo regions with a mix of statuses."""
    regions = []
    for code, name in REGION_NAMES.items():
        target = rng.randint(20, 120)
        if code in INACTIVE_REGIONS:
            current = 0
        else:
            current = rng.randint(target // 2, int(target * 1.3))
        fulfilled = rng.randint(0, current) if current else 0

        region = Region(
            code=code,
            display_name=name,
            current_volume=current,
            target_volume=target,
            forecast_next_30_days=rng.randint(0, target // 3),
            fulfilled_count=fulfilled,
            pending_count=current - fulfilled,
        )
        if code in INACTIVE_REGIONS:
            region.status = RegionStatus.INACTIVE
        else:
            region.recompute_status()
        regions.append(region)
    return regions


def build_retainers(rng: random.Random, owner_id: str, organization_id: str) -> list:
    """Generate demo retainers, some assigned to the session owner."""
    retainers = []
    now = datetime.now()
    for index, client in enumerate(CLIENT_NAMES):
        status = rng.choice(list(RetainerStatus))
        created_at = now - timedelta(days=rng.randint(1, 120))
        retainers.append(Retainer(
            retainer_id=str(uuid.uuid4()),
            client_name=client,
            case_type=rng.choice(CASE_TYPES),
            region_code=rng.choice(sorted(REGION_NAMES)),
            status=status,
            fee_amount=float(rng.randint(15, 90) * 100),
            assigned_to=owner_id if index % 2 == 0 else "attorney-002",
            organization_id=organization_id,
            signed_at=created_at + timedelta(days=3) if status != RetainerStatus.PENDING else None,
            created_at=created_at,
        ))
    return retainers


def main() -> None:
    """Initialize the database."""
    logger = get_logger("init_db")

    logger.info("=" * 60)
    logger.info("Caseboard Database Initialization")
    logger.info("=" * 60)

    config = get_config_manager()
    db_path = config.get("database.path", "data/caseboard.db")
    owner_id = config.get("session.owner_id", "attorney-001")
    organization_id = config.get("session.organization_id", "org-001")

    logger.info(f"Creating database at: {db_path}")
    db_manager = create_database_manager(db_path)

    try:
        db_manager.initialize_database()

        tables = [
            "regions",
            "intake_orders",
            "attorney_profiles",
            "retainers",
            "kv_cache",
            "audit_log",
        ]

        logger.info("\nVerifying database tables:")
        for table in tables:
            if db_manager.table_exists(table):
                logger.info(f"  ✓ {table}")
            else:
                logger.warning(f"  ✗ {table} - NOT FOUND")

        rng = random.Random(42)

        if db_manager.get_row_count("regions") == 0:
            for region in build_regions(rng):
                db_manager.upsert_region(region)
            logger.info(f"Seeded {len(REGION_NAMES)} regions")

        backend = LocalBackend(db_manager)
        if db_manager.get_row_count("attorney_profiles") == 0:
            backend.save_profile(AttorneyProfile(
                owner_id=owner_id,
                full_name="Dana Whitfield",
                firm_name="Whitfield & Ames LLP",
                email="dana@whitfieldames.com",
                office_state="TX",
                practice_areas=["Personal Injury", "Workers' Compensation"],
                licensed_states=["TX", "OK", "LA"],
                years_experience=12,
                max_active_cases=40,
                weekly_intake_limit=8,
            ))
            logger.info(f"Seeded profile for {owner_id}")

        if db_manager.get_row_count("retainers") == 0:
            retainers = build_retainers(rng, owner_id, organization_id)
            for retainer in retainers:
                backend.save_retainer(retainer)
            logger.info(f"Seeded {len(retainers)} retainers")

        logger.info("\n" + "=" * 60)
        logger.info("Database initialization complete!")
        logger.info("=" * 60)

    except Exception as e:
        logger.exception(f"Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
