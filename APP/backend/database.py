"""JSON file persistence for the reservation ledger"""
import json
import logging
import os
import tempfile
from typing import List, NamedTuple

from models import BookingsRecord, Passenger, Train

logger = logging.getLogger(__name__)


def default_trains() -> List[Train]:
    """Sample trains written on first start"""
    return [
        Train(train_id="123A", name="Express One", source="Mumbai", destination="Pune",
              total_seats=100, booked_seats=0, base_fare=200.0),
        Train(train_id="456B", name="Coastal Mail", source="Chennai", destination="Bangalore",
              total_seats=80, booked_seats=0, base_fare=350.0),
        Train(train_id="789C", name="InterCity", source="Delhi", destination="Agra",
              total_seats=120, booked_seats=0, base_fare=150.0),
    ]


class PersistenceError(Exception):
    """Raised when a record cannot be written"""
    def __init__(self, path, cause):
        super().__init__(f"Could not write {path}: {cause}")
        self.path = path
        self.cause = cause


class LedgerState(NamedTuple):
    trains: List[Train]
    passengers: List[Passenger]
    waiting: List[Passenger]


class FileStorage:
    """Reads and rewrites the trains record and the bookings record"""

    def __init__(self, trains_path, bookings_path):
        self.trains_path = os.fspath(trains_path)
        self.bookings_path = os.fspath(bookings_path)

    @classmethod
    def from_env(cls):
        """Paths from RAILCONNECT_* variables, read after the entry point loads .env"""
        data_dir = os.getenv('RAILCONNECT_DATA_DIR', '.')
        return cls(
            os.path.join(data_dir, os.getenv('RAILCONNECT_TRAINS_FILE', 'trains.json')),
            os.path.join(data_dir, os.getenv('RAILCONNECT_BOOKINGS_FILE', 'bookings.json')),
        )

    def _read_json(self, path):
        """Parsed document, or None when the file is missing or malformed"""
        try:
            with open(path, encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable record {path}: {e}")
            return None

    def _stage_json(self, path, document):
        """Write document to a temp file beside path and return the temp path"""
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.tmp-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=4, ensure_ascii=False)
                f.write('\n')
        except OSError:
            os.remove(tmp_path)
            raise
        return tmp_path

    def load(self) -> LedgerState:
        """Load both records; never raises"""
        bookings_doc = self._read_json(self.bookings_path)
        if bookings_doc is not None and not isinstance(bookings_doc, dict):
            logger.warning(f"Bookings record {self.bookings_path} is not an object, starting empty")
        bookings = BookingsRecord.from_record(bookings_doc)

        trains_doc = self._read_json(self.trains_path)
        if isinstance(trains_doc, list):
            trains = [Train.from_record(item) for item in trains_doc]
            return LedgerState(trains, bookings.passengers, bookings.waiting)

        if trains_doc is not None:
            logger.warning(f"Trains record {self.trains_path} is not an array, reseeding")
        state = LedgerState(default_trains(), bookings.passengers, bookings.waiting)
        logger.info(f"Seeded {len(state.trains)} default trains into {self.trains_path}")
        try:
            self.save(state)
        except PersistenceError as e:
            logger.warning(f"Could not persist seeded trains: {e}")
        return state

    def save(self, state: LedgerState):
        """Rewrite both records; raises PersistenceError on the first failing write.

        Both records are staged before either is replaced, so a failed write
        leaves the two files as they were.
        """
        bookings = BookingsRecord(passengers=list(state.passengers), waiting=list(state.waiting))
        documents = [
            (self.trains_path, [t.to_record() for t in state.trains]),
            (self.bookings_path, bookings.to_record()),
        ]
        staged = []
        try:
            for path, document in documents:
                try:
                    staged.append((self._stage_json(path, document), path))
                except OSError as e:
                    raise PersistenceError(path, e) from e
            for tmp_path, path in staged:
                try:
                    os.replace(tmp_path, path)
                except OSError as e:
                    raise PersistenceError(path, e) from e
        finally:
            for tmp_path, _ in staged:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
