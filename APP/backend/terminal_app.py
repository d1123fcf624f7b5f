#!/usr/bin/env python3
"""Terminal front end for the RailConnect reservation ledger"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from database import FileStorage
from models import Passenger
from reservation import ReservationStore, BookingStatus, CancelStatus

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

logger = logging.getLogger(__name__)

TRAIN_HEADER = f"{'Train ID':<10} {'Name':<20} {'Route':<30} {'Seats':<10} {'Base Fare':<10}"


class RailwayTerminal:
    def __init__(self, store: ReservationStore):
        self.store = store

    def print_header(self, title):
        """Print formatted header"""
        print("\n" + "=" * 60)
        print(f"  {title}")
        print("=" * 60)

    def print_trains(self, trains):
        if not trains:
            print("\n✗ No trains found")
            return
        print(f"\n{TRAIN_HEADER}")
        print("-" * 84)
        for train in trains:
            route = f"{train.source} → {train.destination}"
            seats = f"{train.booked_seats}/{train.total_seats}"
            print(f"{train.train_id:<10} {train.name:<20} {route:<30} {seats:<10} ₹{train.base_fare:<10.2f}")

    def warn_if_unsaved(self, saved):
        if not saved:
            print("\n! Change kept but not written to disk: "
                  f"{self.store.last_save_error}")

    def view_all_trains(self):
        self.print_header("ALL TRAINS")
        self.print_trains(self.store.all_trains())

    def search_trains(self):
        self.print_header("SEARCH TRAINS")
        source = input("Source: ").strip()
        destination = input("Destination: ").strip()
        if not source or not destination:
            print("\n✗ Please enter both source and destination")
            return
        results = self.store.search_trains(source, destination)
        self.print_trains(results)
        logger.info(f"Searched trains: {source} -> {destination} (found {len(results)})")

    def book_ticket(self):
        """Book a ticket"""
        self.print_header("BOOK TICKET")
        name = input("Passenger Name: ").strip()
        try:
            age = int(input("Age: "))
        except ValueError:
            age = 0
        gender = input("Gender: ").strip()
        train_id = input("Train ID: ").strip()

        if not name or age <= 0 or not gender or not train_id:
            print("\n✗ Please fill all passenger and train ID fields")
            return

        result = self.store.book_ticket(train_id, Passenger.request(name, age, gender))

        if result.status == BookingStatus.TRAIN_NOT_FOUND:
            print("\n✗ Booking failed (train not found)")
            return

        print("\n" + "*" * 50)
        if result.status == BookingStatus.CONFIRMED:
            print("  TICKET CONFIRMED")
            print("*" * 50)
            print(f"  PNR: {result.pnr}")
            print(f"  Seat: {result.seat_no}")
            print(f"  Fare: ₹{result.fare:.2f}")
        else:
            print("  ADDED TO WAITING LIST")
            print("*" * 50)
            print(f"  Position: {result.waiting_position}")
        print("*" * 50)
        self.warn_if_unsaved(result.saved)

    def cancel_ticket(self):
        """Cancel a ticket"""
        self.print_header("CANCEL TICKET")
        pnr = input("Enter PNR to cancel: ").strip().upper()
        if not pnr:
            print("\n✗ Enter PNR to cancel")
            return

        result = self.store.cancel_ticket(pnr)
        if result.status == CancelStatus.NOT_FOUND:
            print("\n✗ PNR not found")
            return

        promoted = result.promoted
        if promoted is not None and promoted.status == BookingStatus.CONFIRMED:
            print(f"\n✓ Ticket cancelled. Waiting passenger promoted (PNR: {promoted.pnr})")
        else:
            print("\n✓ Ticket cancelled successfully")
        self.warn_if_unsaved(result.saved)

    def find_booking(self):
        self.print_header("PNR STATUS")
        pnr = input("Enter PNR: ").strip().upper()
        passenger = self.store.find_passenger(pnr)
        if not passenger:
            print("\n✗ Booking not found")
            return
        print(f"\n  PNR: {passenger.pnr}")
        print(f"  Passenger: {passenger.name}, {passenger.age} years, {passenger.gender}")
        print(f"  Train: {passenger.train_id}  Seat: {passenger.seat_no}")
        print(f"  Fare: ₹{passenger.fare:.2f}")

    def view_waiting_list(self):
        self.print_header("WAITING LIST")
        waiting = self.store.waiting_list()
        if not waiting:
            print("\nNo passengers in waiting list")
            return
        print(f"\n{'Pos':<5} {'Passenger':<20} {'Age':<5} {'Train ID':<10}")
        print("-" * 45)
        for position, w in enumerate(waiting, 1):
            print(f"{position:<5} {w.name:<20} {w.age:<5} {w.train_id:<10}")

    def system_summary(self):
        self.print_header("SYSTEM SUMMARY")
        summary = self.store.summary()
        print(f"\n  Total Trains: {summary['total_trains']}")
        print(f"  Total Confirmed Bookings: {summary['total_bookings']}")
        print(f"  Total Seats: {summary['total_seats']}")
        print(f"  Booked Seats: {summary['booked_seats']}")
        print(f"  Available Seats: {summary['available_seats']}")
        print(f"  Waiting List Count: {summary['waiting_count']}")

    def main_menu(self):
        """Main entry menu"""
        actions = {
            '1': self.search_trains,
            '2': self.view_all_trains,
            '3': self.book_ticket,
            '4': self.cancel_ticket,
            '5': self.find_booking,
            '6': self.view_waiting_list,
            '7': self.system_summary,
        }
        while True:
            self.print_header("RAIL CONNECT - TRAIN RESERVATION SYSTEM")
            print("\n1. Search Trains")
            print("2. Show All Trains")
            print("3. Book Ticket")
            print("4. Cancel Ticket")
            print("5. PNR Status")
            print("6. Waiting List")
            print("7. System Summary")
            print("8. Exit")

            choice = input("\nEnter choice: ").strip()
            if choice == '8':
                print("\nThank you for using Rail Connect!")
                break
            action = actions.get(choice)
            if action is None:
                print("\n✗ Invalid choice")
            else:
                action()


def main():
    logging.basicConfig(
        level=os.environ.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    RailwayTerminal(ReservationStore(FileStorage.from_env())).main_menu()


if __name__ == "__main__":
    main()
