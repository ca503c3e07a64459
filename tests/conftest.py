import os
from datetime import datetime

import pytest

# keep the module-level store away from any trips.json in the working directory
os.environ["SPLITEASY_DATA_FILE"] = ""

from models import Trip, Person, Expense


def make_trip(names, expenses=(), name="Test trip"):
    people = [Person(id=n.lower(), name=n) for n in names]
    return Trip(id="trip-1", name=name, people=people,
                expenses=list(expenses), created_at=datetime(2024, 5, 1, 12, 0))


def expense(title, amount, paid_by, split_among, custom_splits=None):
    return Expense(title=title, amount=amount, paid_by=paid_by,
                   split_among=split_among, custom_splits=custom_splits,
                   date=datetime(2024, 5, 2))


@pytest.fixture
def dinner_trip():
    return make_trip(["Alice", "Bob", "Carol"], [
        expense("Dinner", 300, "alice", ["alice", "bob", "carol"]),
    ])


@pytest.fixture
def mixed_trip():
    return make_trip(["A", "B", "C", "D"], [
        expense("Hotel", 100, "a", ["a", "b", "c", "d"]),
        expense("Taxi", 50, "b", ["b", "c", "d"]),
        expense("Tickets", 75.5, "c", ["a", "d"], {"a": 20, "d": 55.5}),
    ])
