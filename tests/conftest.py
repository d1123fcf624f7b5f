"""
pytest configuration
"""
import sys
from pathlib import Path

import pytest

# backend modules are imported by bare name
BACKEND_DIR = Path(__file__).parent.parent / "APP" / "backend"
sys.path.insert(0, str(BACKEND_DIR))

from database import FileStorage  # noqa: E402
from models import Passenger, Train  # noqa: E402
from reservation import ReservationStore  # noqa: E402


@pytest.fixture
def storage(tmp_path):
    """Storage writing both records into a temporary directory"""
    return FileStorage(tmp_path / "trains.json", tmp_path / "bookings.json")


@pytest.fixture
def store(storage):
    """Store seeded with the default trains"""
    return ReservationStore(storage)


@pytest.fixture
def one_seat_store():
    """In-memory store with a single one-seat train T1"""
    store = ReservationStore()
    store.add_train(Train(train_id="T1", name="Shuttle", source="Mumbai", destination="Pune",
                          total_seats=1, booked_seats=0, base_fare=100.0))
    return store


@pytest.fixture
def passenger_a():
    return Passenger.request("Asha", 30, "F")


@pytest.fixture
def passenger_b():
    return Passenger.request("Bala", 42, "M")
