"""Record codec for trains.json and bookings.json

Field aliases are the exact keys of the persisted records. Reading is lenient:
a missing key, a null, or a value of the wrong JSON type becomes the zero value
of the field ("", 0, 0.0). Writing always emits every field.
"""
import math
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ZERO_VALUES = {str: "", int: 0, float: 0.0}
_INT_LIMIT = 2 ** 63 - 1


def _coerce(value: Any, kind: type) -> Any:
    if kind is str:
        return value if isinstance(value, str) else ""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _ZERO_VALUES[kind]
    if isinstance(value, int):
        if kind is int:
            return value if abs(value) <= _INT_LIMIT else 0
        try:
            return float(value)
        except OverflowError:
            return 0.0
    # json.load accepts NaN and Infinity, which json.dump would write back as non-JSON tokens
    if not math.isfinite(value):
        return _ZERO_VALUES[kind]
    if kind is int:
        # 3.0 is a valid JSON encoding of 3
        return int(value) if value.is_integer() and abs(value) <= _INT_LIMIT else 0
    return value


class RecordModel(BaseModel):
    """Base for persisted records"""
    model_config = ConfigDict(populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def zero_on_bad_value(cls, value, info):
        kind = cls.model_fields[info.field_name].annotation
        if kind in _ZERO_VALUES:
            return _coerce(value, kind)
        return value

    @classmethod
    def from_record(cls, record: Any):
        """Decode one JSON object; anything that is not an object decodes to all zeros"""
        if not isinstance(record, dict):
            record = {}
        return cls.model_validate(record)

    def to_record(self) -> dict:
        return self.model_dump(by_alias=True)


class Train(RecordModel):
    train_id: str = Field(default="", alias="trainId")
    name: str = ""
    source: str = ""
    destination: str = ""
    total_seats: int = Field(default=0, alias="totalSeats")
    booked_seats: int = Field(default=0, alias="bookedSeats")
    base_fare: float = Field(default=0.0, alias="baseFare")

    @property
    def available_seats(self) -> int:
        return max(0, self.total_seats - self.booked_seats)

    def has_free_seat(self) -> bool:
        return self.booked_seats < self.total_seats

    def fare_for(self, booked_seats: int) -> float:
        """Congestion fare: 1% on top of the base fare per booked seat"""
        return self.base_fare * (1.0 + 0.01 * booked_seats)


class Passenger(RecordModel):
    """A confirmed booking, or a waiting entry when pnr is empty"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = ""
    age: int = 0
    gender: str = ""
    pnr: str = ""
    train_id: str = Field(default="", alias="trainId")
    seat_no: int = Field(default=0, alias="seatNo")
    fare: float = 0.0

    @classmethod
    def request(cls, name: str, age: int, gender: str, train_id: str = "") -> "Passenger":
        """Unconfirmed request: no PNR, seat or fare yet"""
        return cls(name=name, age=age, gender=gender, train_id=train_id)

    @property
    def is_confirmed(self) -> bool:
        return bool(self.pnr)


class BookingsRecord(BaseModel):
    """Top-level object of bookings.json"""
    passengers: List[Passenger] = Field(default_factory=list)
    waiting: List[Passenger] = Field(default_factory=list)

    @field_validator("passengers", "waiting", mode="before")
    @classmethod
    def lenient_sequence(cls, value):
        if not isinstance(value, list):
            return []
        return [item if isinstance(item, (dict, Passenger)) else {} for item in value]

    @classmethod
    def from_record(cls, record: Any) -> "BookingsRecord":
        if not isinstance(record, dict):
            record = {}
        return cls.model_validate(record)

    def to_record(self) -> dict:
        return {
            "passengers": [p.to_record() for p in self.passengers],
            "waiting": [w.to_record() for w in self.waiting],
        }
