"""Test fixtures for the timetable generator."""

import copy

import pytest

from app import create_app
from models import db
from utils.catalog import Catalog


SAMPLE_CATALOG = {
    "metadata": {"acadYear": 2025, "semester": 1},
    "courses": {
        "CS F211": {
            "course_name": "Data Structures & Algorithms",
            "units": 4,
            "sections": {
                "L1": {"instructor": ["Manik Gupta"],
                       "schedule": [{"room": "F102", "days": ["M", "W"], "hours": [3]}]},
                "L2": {"instructor": ["Chittaranjan Hota"],
                       "schedule": [{"room": "F105", "days": ["T", "Th"], "hours": [2]}]},
                "P1": {"instructor": ["Apurba Das"],
                       "schedule": [{"room": "D313", "days": ["F"], "hours": [7, 8]}]},
            },
        },
        "MATH F211": {
            "course_name": "Mathematics III",
            "units": 3,
            "sections": {
                "L1": {"instructor": ["Sharan Gopal"],
                       "schedule": [{"room": "G201", "days": ["M", "W"], "hours": [3]}]},
                "L2": {"instructor": ["Pradeep Boggarapu"],
                       "schedule": [{"room": "G202", "days": ["T", "Th"], "hours": [5]}]},
                "T1": {"instructor": ["Sharan Gopal"],
                       "schedule": [{"room": "G203", "days": ["S"], "hours": [1]}]},
            },
        },
        "BITS F221": {
            "course_name": "Practice School I",
            "units": 5,
            "sections": {
                "R1": {"instructor": ["PS Division"], "schedule": []},
            },
        },
        "HSS F222": {
            "course_name": "Linguistics",
            "units": 3,
            "sections": {},
        },
    },
}


@pytest.fixture
def catalog_data():
    """Raw catalog JSON as a dict (fresh copy per test)."""
    return copy.deepcopy(SAMPLE_CATALOG)


@pytest.fixture
def catalog(catalog_data):
    return Catalog.from_dict(catalog_data)


@pytest.fixture
def app(catalog):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'CATALOG': catalog,
        'GENERATOR_MAX_TIMETABLES': 100,
        'DEFAULT_MAX_HOURS_PER_DAY': 8,
    })

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
