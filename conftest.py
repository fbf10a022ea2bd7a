import pytest
from config import Settings
from database import Database
from manager import EventManager


@pytest.fixture
def db():
    database = Database(":memory:")
    yield database
    database.close()


@pytest.fixture
def sample_events():
    return [
        {"id": 1, "title": "TechFest 2024", "description": "Robotics and coding contests",
         "venue": "Main Hall", "category": "Technical", "district": "Thrissur",
         "date": "2024-05-03", "time": "10:00", "capacity": 300, "attendees": 40},
        {"id": 2, "title": "Music Night", "description": "Live bands on campus",
         "venue": "Open Air Theatre", "category": "Cultural", "district": "Ernakulam",
         "date": "2024-05-06", "time": "18:30", "capacity": 500, "attendees": 120},
        {"id": 3, "title": "Football Finals", "description": "Inter-college final match",
         "venue": "University Stadium", "category": "Sports", "district": "Thrissur",
         "date": "2024-06-20", "time": "16:00", "capacity": 1000, "attendees": 75},
    ]


@pytest.fixture
def manager(db):
    return EventManager(db, Settings(db_name=":memory:"), seed=[])


@pytest.fixture
def seeded_manager(db, sample_events):
    return EventManager(db, Settings(db_name=":memory:"), seed=sample_events)
