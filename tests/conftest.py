"""
Shared fixtures for the Caseboard test suite.
"""

import pytest

from caseboard.config import reset_config_manager
from caseboard.database.db_manager import DatabaseManager
from caseboard.models import AttorneyProfile, Region, RegionStatus
from caseboard.utils import reset_loggers


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep config, logs and databases inside the test's tmp directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CASEBOARD_CONFIG_DIR", str(tmp_path / "config"))
    reset_config_manager()
    reset_loggers()
    yield
    reset_loggers()
    reset_config_manager()


@pytest.fixture
def db_manager(tmp_path):
    """Initialized database."""
    manager = DatabaseManager(str(tmp_path / "test.db"))
    manager.initialize_database()
    return manager


@pytest.fixture
def regions():
    return [
        Region(
            code="TX",
            display_name="Texas",
            current_volume=45,
            target_volume=50,
            forecast_next_30_days=5,
            status=RegionStatus.LOW,
            fulfilled_count=40,
            pending_count=5,
        ),
        Region(
            code="CA",
            display_name="California",
            current_volume=80,
            target_volume=60,
            forecast_next_30_days=12,
            status=RegionStatus.ACTIVE,
            fulfilled_count=70,
            pending_count=10,
        ),
        Region(
            code="AK",
            display_name="Alaska",
            current_volume=0,
            target_volume=20,
            status=RegionStatus.INACTIVE,
        ),
    ]


@pytest.fixture
def profile():
    return AttorneyProfile(
        owner_id="attorney-001",
        full_name="Dana Whitfield",
        firm_name="Whitfield & Ames LLP",
        email="dana@whitfieldames.com",
        office_state="TX",
        practice_areas=["Personal Injury"],
        licensed_states=["TX", "OK"],
        years_experience=12,
        max_active_cases=40,
        weekly_intake_limit=8,
    )
