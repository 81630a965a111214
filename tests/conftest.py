"""
Pytest configuration and fixtures.
"""

import pytest

from donor_locator.db import Database
from donor_locator.models import Donor

DELHI = (28.6139, 77.2090)
NEAR_DELHI = (28.7041, 77.1025)
MUMBAI = (19.0760, 72.8777)


@pytest.fixture
async def database(tmp_path):
    """File-backed SQLite database, fresh for every test."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'donors.db'}")
    await db.init()
    yield db
    await db.close()


@pytest.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
def donor_payload():
    """Factory for registration payloads in the wire (camelCase) shape."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "name": f"Donor {counter['n']}",
            "age": 30,
            "bloodGroup": "A+",
            "phone": f"+91 98100 {counter['n']:05d}",
            "email": f"donor{counter['n']}@example.com",
            "address": "Connaught Place, New Delhi",
            "latitude": NEAR_DELHI[0],
            "longitude": NEAR_DELHI[1],
        }
        data.update(overrides)
        return data

    return _make


def make_donor(donor_id: int, latitude: float, longitude: float, blood_group: str = "A+") -> Donor:
    return Donor(
        id=donor_id,
        name=f"Donor {donor_id}",
        age=30,
        blood_group=blood_group,
        phone=f"phone-{donor_id}",
        email=f"donor{donor_id}@example.com",
        address="somewhere",
        latitude=latitude,
        longitude=longitude,
    )
