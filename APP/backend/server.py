from contextlib import asynccontextmanager
from fastapi import FastAPI, APIRouter, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from typing import Optional
import os
import logging
from pathlib import Path

from database import FileStorage
from models import Passenger, Train
from reservation import ReservationStore, BookingStatus, CancelStatus

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO'),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SAVE_WARNING = "Change kept in memory but could not be written to disk"


# Pydantic Models
class TrainCreate(BaseModel):
    train_id: str = Field(min_length=1)
    name: str
    source: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    total_seats: int = Field(gt=0)
    base_fare: float = Field(ge=0)


class BookingCreate(BaseModel):
    train_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    age: int = Field(gt=0)
    gender: str = Field(min_length=1)


def get_store(request: Request) -> ReservationStore:
    """Store built by the app lifespan"""
    return request.app.state.store


def train_view(train: Train, store: ReservationStore) -> dict:
    data = train.model_dump()
    data['available_seats'] = train.available_seats
    data['waiting_count'] = store.waiting_count(train.train_id)
    return data


def save_fields(saved: bool) -> dict:
    fields = {"persisted": saved}
    if not saved:
        fields["warning"] = SAVE_WARNING
    return fields


api_router = APIRouter(prefix="/api")


# Train Routes
@api_router.get("/trains")
def get_all_trains(store: ReservationStore = Depends(get_store)):
    """All trains with seat and waiting list counts"""
    return [train_view(t, store) for t in store.all_trains()]


@api_router.post("/trains", status_code=201)
def create_train(train: TrainCreate, store: ReservationStore = Depends(get_store)):
    """Add a train; ids are not checked for uniqueness"""
    saved = store.add_train(Train(**train.model_dump()))
    return {"message": "Train added", "train_id": train.train_id, **save_fields(saved)}


@api_router.get("/trains/search")
def search_trains(source: str, destination: str, store: ReservationStore = Depends(get_store)):
    """Trains on the exact route, ignoring case"""
    results = store.search_trains(source.strip(), destination.strip())
    return [train_view(t, store) for t in results]


@api_router.get("/trains/{train_id}")
def get_train(train_id: str, store: ReservationStore = Depends(get_store)):
    train = store.find_train(train_id)
    if not train:
        raise HTTPException(status_code=404, detail="Train not found")
    return train_view(train, store)


# Booking Routes
@api_router.post("/bookings", status_code=201)
def create_booking(booking: BookingCreate, store: ReservationStore = Depends(get_store)):
    """Confirm a seat or add the passenger to the waiting list"""
    request = Passenger.request(booking.name.strip(), booking.age, booking.gender.strip())
    result = store.book_ticket(booking.train_id.strip(), request)

    if result.status == BookingStatus.TRAIN_NOT_FOUND:
        raise HTTPException(status_code=404, detail="Train not found")

    if result.status == BookingStatus.CONFIRMED:
        response = {
            "status": "confirmed",
            "pnr": result.pnr,
            "seat_number": result.seat_no,
            "fare": result.fare,
            "message": "Ticket booked",
        }
    else:
        response = {
            "status": "waitlisted",
            "position": result.waiting_position,
            "message": "Train full. Added to waiting list",
        }
    response.update(save_fields(result.saved))
    return response


@api_router.get("/bookings")
def get_all_bookings(store: ReservationStore = Depends(get_store)):
    return [p.model_dump() for p in store.all_passengers()]


@api_router.get("/bookings/pnr/{pnr}")
def get_booking_by_pnr(pnr: str, store: ReservationStore = Depends(get_store)):
    """Get booking details by PNR"""
    passenger = store.find_passenger(pnr.strip().upper())
    if not passenger:
        raise HTTPException(status_code=404, detail="Booking not found")
    return passenger.model_dump()


@api_router.delete("/bookings/{pnr}")
def cancel_booking(pnr: str, store: ReservationStore = Depends(get_store)):
    """Cancel a booking and give the head of the waiting list one attempt"""
    result = store.cancel_ticket(pnr.strip().upper())
    if result.status == CancelStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Booking not found")

    response = {"status": "cancelled", "pnr": result.pnr, "message": "Booking cancelled"}
    promoted = result.promoted
    if promoted is not None:
        response["promoted"] = promoted.model_dump(exclude={"saved", "save_error"})
        if promoted.status == BookingStatus.CONFIRMED:
            response["message"] = f"Cancelled. Waiting passenger promoted (PNR: {promoted.pnr})"
    response.update(save_fields(result.saved))
    return response


# Waiting List Routes
@api_router.get("/waiting-list")
def get_waiting_list(train_id: Optional[str] = None, store: ReservationStore = Depends(get_store)):
    """Waiting entries in queue order, optionally for one train"""
    entries = store.waiting_list()
    return [
        {"position": position, "name": w.name, "age": w.age, "gender": w.gender, "train_id": w.train_id}
        for position, w in enumerate(entries, 1)
        if train_id is None or w.train_id == train_id
    ]


# Reports
@api_router.get("/reports/summary")
def get_summary(store: ReservationStore = Depends(get_store)):
    summary = store.summary()
    summary["last_save_error"] = store.last_save_error
    return summary


def create_app(storage: Optional[FileStorage] = None) -> FastAPI:
    """Build the API around one store loaded at startup"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = ReservationStore(storage or FileStorage.from_env())
        logger.info(f"Store ready: {len(app.state.store.all_trains())} trains loaded")
        yield

    app = FastAPI(title="RailConnect", lifespan=lifespan)
    app.include_router(api_router)
    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_origins=os.environ.get('CORS_ORIGINS', '*').split(','),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
