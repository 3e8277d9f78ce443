from datetime import datetime
from itertools import count
from zoneinfo import ZoneInfo

import pytest

from vetfinder.database import Database
from vetfinder.models import Veterinarian

BERLIN = ZoneInfo("Europe/Berlin")

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def berlin(year, month, day, hour=12, minute=0):
    """Aware datetime at a Berlin wall-clock time"""
    return datetime(year, month, day, hour, minute, tzinfo=BERLIN)


def week_of(hours):
    """Same hours text for every day of the week"""
    return [{"day": d, "hours": hours} for d in WEEKDAYS]


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_vet(db):
    """Factory inserting one Veterinarian with sensible defaults"""
    ids = count(1)

    def _add(**kwargs):
        n = next(ids)
        values = {
            "google_maps_id": f"place-{n}",
            "title": f"Tierarztpraxis {n}",
            "category_name": "Veterinarian",
            "categories": ["Veterinarian"],
            "neighborhood": "Mitte",
            "address": f"Teststraße {n}, 10115 Berlin",
            "google_score": 4.0,
            "opening_hours": week_of("9 AM to 6 PM"),
        }
        values.update(kwargs)
        vet = Veterinarian(**values)
        db.add(vet)
        db.commit()
        return vet

    return _add
