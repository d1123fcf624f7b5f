"""Record codec field names and lenient decoding"""
import pytest
from pydantic import ValidationError

from models import BookingsRecord, Passenger, Train


class TestTrainRecord:

    def test_to_record_uses_persisted_keys(self):
        train = Train(train_id="123A", name="Express One", source="Mumbai", destination="Pune",
                      total_seats=100, booked_seats=3, base_fare=200)
        assert train.to_record() == {
            "trainId": "123A",
            "name": "Express One",
            "source": "Mumbai",
            "destination": "Pune",
            "totalSeats": 100,
            "bookedSeats": 3,
            "baseFare": 200.0,
        }
        assert isinstance(train.to_record()["baseFare"], float)

    def test_missing_fields_decode_to_zero_values(self):
        train = Train.from_record({"trainId": "X"})
        assert train.train_id == "X"
        assert train.name == ""
        assert train.total_seats == 0
        assert train.booked_seats == 0
        assert train.base_fare == 0.0

    def test_wrong_types_decode_to_zero_values(self):
        train = Train.from_record({
            "trainId": 7,
            "name": None,
            "totalSeats": "lots",
            "bookedSeats": 2.0,
            "baseFare": True,
        })
        assert train.train_id == ""
        assert train.name == ""
        assert train.total_seats == 0
        assert train.booked_seats == 2
        assert train.base_fare == 0.0

    def test_out_of_range_integers_decode_to_zero_values(self):
        train = Train.from_record({"trainId": "T1", "totalSeats": 10 ** 400, "baseFare": 10 ** 400})
        assert train.total_seats == 0
        assert train.base_fare == 0.0

    def test_non_finite_numbers_decode_to_zero_values(self):
        train = Train.from_record({"bookedSeats": float("inf"), "baseFare": float("nan")})
        assert train.booked_seats == 0
        assert train.base_fare == 0.0
        passenger = Passenger.from_record({"fare": float("-inf"), "age": float("nan")})
        assert passenger.fare == 0.0
        assert passenger.age == 0

    def test_non_object_decodes_to_empty_train(self):
        assert Train.from_record("nope") == Train()

    def test_fare_grows_one_percent_per_booked_seat(self):
        train = Train(train_id="T1", total_seats=10, base_fare=100.0)
        assert train.fare_for(1) == pytest.approx(101.0)
        assert train.fare_for(10) == pytest.approx(110.0)


class TestPassengerRecord:

    def test_round_trip_keys(self):
        record = {"name": "Asha", "age": 30, "gender": "F", "pnr": "AB12CD34",
                  "trainId": "T1", "seatNo": 1, "fare": 101.0}
        passenger = Passenger.from_record(record)
        assert passenger.seat_no == 1
        assert passenger.train_id == "T1"
        assert passenger.to_record() == record

    def test_request_has_no_booking_fields(self):
        request = Passenger.request("Bala", 42, "M")
        assert request.pnr == ""
        assert request.seat_no == 0
        assert request.fare == 0.0
        assert not request.is_confirmed

    def test_passenger_is_immutable(self):
        passenger = Passenger.request("Bala", 42, "M")
        with pytest.raises(ValidationError):
            passenger.pnr = "CHANGED1"


class TestBookingsRecord:

    def test_missing_sequences_are_empty(self):
        record = BookingsRecord.from_record({})
        assert record.passengers == []
        assert record.waiting == []

    def test_malformed_sequences_are_lenient(self):
        record = BookingsRecord.from_record({"passengers": "x", "waiting": [3, {"name": "W"}]})
        assert record.passengers == []
        assert [w.name for w in record.waiting] == ["", "W"]

    def test_to_record_shape(self):
        waiting = Passenger.request("W", 20, "M", "T1")
        record = BookingsRecord(passengers=[], waiting=[waiting]).to_record()
        assert record == {
            "passengers": [],
            "waiting": [{"name": "W", "age": 20, "gender": "M", "pnr": "",
                         "trainId": "T1", "seatNo": 0, "fare": 0.0}],
        }
