"""
Pytest configuration and fixtures for the fleet monitoring tests.
"""
import asyncio
import os
import sys
from datetime import datetime

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

# Set test environment before importing the app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["DEBUG"] = "true"
os.environ["RATE_LIMIT_DEFAULT"] = "100000"
os.environ["RATE_LIMIT_DRIVER_REPORTS"] = "100000"

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from fleetmon.database import get_session
from fleetmon.main import app
from fleetmon.models import Base, Bus, Device, DriverProfile, StatusReport, Trip, User
from fleetmon.services.auth import create_access_token, hash_password

ADMIN_PASSWORD = "admin-pass-123"
DRIVER_PASSWORD = "driver-pass-123"


@pytest.fixture(scope="session")
def password_hashes():
    """bcrypt is slow on purpose; hash the fixture passwords once."""
    return {
        "admin": hash_password(ADMIN_PASSWORD),
        "driver": hash_password(DRIVER_PASSWORD),
    }


def seed_rows(password_hashes):
    return [
        Device(device_id="DEVICE-0001", name="Cabin unit", network="4G", status="ONLINE",
               last_seen=datetime(2026, 3, 1, 8, 30)),
        Device(device_id="DEVICE-0002", name=None, network="LTE-M", status="offline",
               last_seen=datetime(2026, 2, 20, 17, 0)),
        Bus(bus_id="bus_12", number="12", plate="T 123 ABC", device_id="DEVICE-0001"),
        User(user_id="usr_admin", email="admin@fleet.test", role="ADMIN",
             password_hash=password_hashes["admin"]),
        User(user_id="usr_driver", email="driver@fleet.test", role="DRIVER",
             password_hash=password_hashes["driver"]),
        User(user_id="usr_loner", email="loner@fleet.test", role="DRIVER",
             password_hash=password_hashes["driver"]),
        DriverProfile(driver_id="drv_asha", user_id="usr_driver", full_name="Asha Mwita", bus_id="bus_12"),
        StatusReport(report_id="rep_old", status="WORKING", bus_id="bus_12", driver_profile_id="drv_asha",
                     created_at=datetime(2026, 3, 1, 9, 0), updated_at=datetime(2026, 3, 1, 9, 0)),
        StatusReport(report_id="rep_new", status="NOT_WORKING", device_id="DEVICE-0001",
                     admin_status="NEEDS_CHECK", note="No GPS fix",
                     created_at=datetime(2026, 3, 2, 9, 0), updated_at=datetime(2026, 3, 2, 9, 0)),
        Trip(trip_id="trp_done", bus_id="bus_12", driver_profile_id="drv_asha", status="COMPLETED",
             origin_label="Ubungo", dest_label="Kariakoo",
             started_at=datetime(2026, 3, 1, 7, 0), ended_at=datetime(2026, 3, 1, 8, 30)),
        Trip(trip_id="trp_live", bus_id="bus_12", driver_profile_id="drv_asha", status="ONGOING",
             origin_label="Kariakoo", dest_label="Mbezi",
             started_at=datetime(2026, 3, 2, 7, 0)),
    ]


@pytest.fixture
def db_engine(tmp_path, password_hashes):
    """File-backed SQLite seeded with a small fleet. NullPool keeps connections loop-local."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fleet.db'}", poolclass=NullPool)

    async def setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with async_sessionmaker(engine)() as session:
            session.add_all(seed_rows(password_hashes))
            await session.commit()

    asyncio.run(setup())
    yield engine


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
def client(session_factory):
    """Test client with get_session bound to the seeded database."""
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('usr_admin', 'ADMIN', 'admin@fleet.test')}"}


@pytest.fixture
def driver_headers():
    return {"Authorization": f"Bearer {create_access_token('usr_driver', 'DRIVER', 'driver@fleet.test')}"}


@pytest.fixture
def loner_headers():
    """Driver account without a driver profile."""
    return {"Authorization": f"Bearer {create_access_token('usr_loner', 'DRIVER', 'loner@fleet.test')}"}
