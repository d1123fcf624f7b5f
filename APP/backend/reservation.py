"""Reservation store for trains, confirmed passengers and the waiting list

The store is the only writer of its three collections. Every mutating call
flushes the whole ledger through the storage gateway once the in-memory change
is complete. A failed flush is reported on the result and never undoes the
change: memory stays authoritative and the next successful flush catches up.
"""
import logging
import random
import string
import threading
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from data_structures import LinkedList, Queue
from database import FileStorage, LedgerState, PersistenceError
from models import Passenger, Train

logger = logging.getLogger(__name__)

PNR_LENGTH = 8


def generate_pnr() -> str:
    """Generate an 8 character uppercase alphanumeric PNR"""
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=PNR_LENGTH))


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    WAITLISTED = "waitlisted"
    TRAIN_NOT_FOUND = "train_not_found"


class CancelStatus(str, Enum):
    CANCELLED = "cancelled"
    NOT_FOUND = "not_found"


class BookingResult(BaseModel):
    status: BookingStatus
    train_id: str
    pnr: Optional[str] = None
    seat_no: Optional[int] = None
    fare: Optional[float] = None
    waiting_position: Optional[int] = None
    saved: bool = True
    save_error: Optional[str] = None


class CancelResult(BaseModel):
    status: CancelStatus
    pnr: str
    train_id: Optional[str] = None
    promoted: Optional[BookingResult] = None
    saved: bool = True
    save_error: Optional[str] = None


def _same_train(train, train_id):
    return train.train_id == train_id


def _same_pnr(passenger, pnr):
    return passenger.pnr == pnr


class ReservationStore:
    """Owns the ledger; pass storage=None for a purely in-memory store"""

    def __init__(self, storage: Optional[FileStorage] = None):
        self.storage = storage
        self.last_save_error: Optional[str] = None
        self._trains = LinkedList()
        self._passengers = LinkedList()
        self._waiting = Queue()
        # Single writer: seat allocation is check-then-act
        self._lock = threading.RLock()
        if storage is not None:
            self._restore(storage.load())

    def _restore(self, state: LedgerState):
        for train in state.trains:
            self._trains.insert_at_end(train)
        for passenger in state.passengers:
            self._passengers.insert_at_end(passenger)
        for entry in state.waiting:
            self._waiting.enqueue(entry)
        logger.info(
            f"Ledger loaded: {len(self._trains)} trains, {len(self._passengers)} bookings, "
            f"{self._waiting.size()} waiting"
        )

    def snapshot(self) -> LedgerState:
        with self._lock:
            return LedgerState(self._trains.get_all(), self._passengers.get_all(), self._waiting.get_all())

    def _flush(self) -> Optional[str]:
        """Write the ledger; return the error message instead of raising"""
        if self.storage is None:
            return None
        try:
            self.storage.save(self.snapshot())
        except PersistenceError as e:
            logger.warning(f"Ledger not persisted, in-memory state kept: {e}")
            self.last_save_error = str(e)
            return self.last_save_error
        self.last_save_error = None
        return None

    def save(self) -> bool:
        """Retry a flush, e.g. after a reported write failure"""
        with self._lock:
            return self._flush() is None

    # Train operations
    def add_train(self, train: Train) -> bool:
        """Append a train; duplicate ids are accepted and lookups return the first.

        Returns False when the ledger could not be written.
        """
        with self._lock:
            self._trains.insert_at_end(train)
            logger.info(f"Added train {train.train_id} ({train.source} -> {train.destination})")
            return self._flush() is None

    def search_trains(self, source: str, destination: str) -> List[Train]:
        source = source.lower()
        destination = destination.lower()
        with self._lock:
            return self._trains.filter(
                lambda t: t.source.lower() == source and t.destination.lower() == destination
            )

    def find_train(self, train_id: str) -> Optional[Train]:
        """Live handle to the first train with this exact id"""
        with self._lock:
            return self._trains.search(train_id, _same_train)

    def all_trains(self) -> List[Train]:
        with self._lock:
            return self._trains.get_all()

    # Booking operations
    def book_ticket(self, train_id: str, request: Passenger) -> BookingResult:
        with self._lock:
            result = self._book(train_id, request)
            if result.status != BookingStatus.TRAIN_NOT_FOUND:
                self._mark_saved(result, self._flush())
            return result

    def _book(self, train_id: str, request: Passenger) -> BookingResult:
        train = self._trains.search(train_id, _same_train)
        if train is None:
            logger.info(f"Booking failed for {request.name}: train {train_id} not found")
            return BookingResult(status=BookingStatus.TRAIN_NOT_FOUND, train_id=train_id)

        if train.has_free_seat():
            train.booked_seats += 1
            seat_no = train.booked_seats
            passenger = request.model_copy(update={
                'pnr': self._new_pnr(),
                'train_id': train.train_id,
                'seat_no': seat_no,
                'fare': train.fare_for(seat_no),
            })
            self._passengers.insert_at_end(passenger)
            logger.info(f"Booked: {passenger.name} on {train.train_id} (PNR {passenger.pnr}, seat {seat_no})")
            return BookingResult(
                status=BookingStatus.CONFIRMED,
                train_id=train.train_id,
                pnr=passenger.pnr,
                seat_no=seat_no,
                fare=passenger.fare,
            )

        entry = request.model_copy(update={'pnr': '', 'train_id': train.train_id, 'seat_no': 0, 'fare': 0.0})
        self._waiting.enqueue(entry)
        logger.info(f"Added to waiting list: {entry.name} for {train.train_id}")
        return BookingResult(
            status=BookingStatus.WAITLISTED,
            train_id=train.train_id,
            waiting_position=self._waiting.size(),
        )

    def _new_pnr(self) -> str:
        pnr = generate_pnr()
        while self._passengers.search(pnr, _same_pnr) is not None:
            pnr = generate_pnr()
        return pnr

    def cancel_ticket(self, pnr: str) -> CancelResult:
        with self._lock:
            passenger = self._passengers.delete_by_value(pnr, _same_pnr)
            if passenger is None:
                return CancelResult(status=CancelStatus.NOT_FOUND, pnr=pnr)

            train = self._trains.search(passenger.train_id, _same_train)
            if train is not None:
                train.booked_seats = max(0, train.booked_seats - 1)
            logger.info(f"Cancelled PNR: {pnr} on {passenger.train_id}")

            result = CancelResult(
                status=CancelStatus.CANCELLED,
                pnr=pnr,
                train_id=passenger.train_id,
                promoted=self._promote_next(passenger.train_id),
            )
            self._mark_saved(result, self._flush())
            if result.promoted is not None:
                self._mark_saved(result.promoted, result.save_error)
            return result

    def _promote_next(self, vacated_train_id: str) -> Optional[BookingResult]:
        """Give the head of the waiting list one booking attempt"""
        entry = self._waiting.dequeue()
        if entry is None:
            return None
        outcome = self._book(entry.train_id or vacated_train_id, entry)
        if outcome.status == BookingStatus.TRAIN_NOT_FOUND:
            logger.warning(f"Dropped waiting entry {entry.name}: train {outcome.train_id} no longer exists")
        elif outcome.status == BookingStatus.CONFIRMED:
            logger.info(f"Promoted from waiting list: {entry.name} (PNR {outcome.pnr})")
        return outcome

    @staticmethod
    def _mark_saved(result, error: Optional[str]):
        result.saved = error is None
        result.save_error = error

    def find_passenger(self, pnr: str) -> Optional[Passenger]:
        with self._lock:
            return self._passengers.search(pnr, _same_pnr)

    def all_passengers(self) -> List[Passenger]:
        with self._lock:
            return self._passengers.get_all()

    def waiting_list(self) -> List[Passenger]:
        """Waiting entries, head of the queue first"""
        with self._lock:
            return self._waiting.get_all()

    def waiting_count(self, train_id: Optional[str] = None) -> int:
        with self._lock:
            if train_id is None:
                return self._waiting.size()
            return sum(1 for entry in self._waiting if entry.train_id == train_id)

    def summary(self) -> dict:
        with self._lock:
            trains = self._trains.get_all()
            total_seats = sum(t.total_seats for t in trains)
            booked_seats = sum(t.booked_seats for t in trains)
            return {
                "total_trains": len(trains),
                "total_seats": total_seats,
                "booked_seats": booked_seats,
                "available_seats": sum(t.available_seats for t in trains),
                "total_bookings": len(self._passengers),
                "waiting_count": self._waiting.size(),
            }
