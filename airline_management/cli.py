"""Command line interface and interactive menu for the airline management console."""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from tabulate import tabulate

from . import accounts, flights, maintenance, reports
from .booking import BookingError, book_flight
from .config import Settings, load_settings
from .database import create_schema, create_session_factory, session_scope
from .dataset import generate_sample_data, load_csv_directory
from .identity import (
    CustomerIdentity,
    Identity,
    PilotIdentity,
    Role,
    TechnicianIdentity,
)
from .models import FlightInstance

logger = logging.getLogger(__name__)

LOGOUT_CHOICE = 20


def render_table(rows: Iterable[dict]) -> str:
    rows = list(rows)
    if not rows:
        return "(no rows)"
    return tabulate(rows, headers="keys", tablefmt="github")


@dataclass
class MenuItem:
    label: str
    handler: Callable[["Menu", Session], None]
    roles: tuple = tuple(Role)


class Menu:
    """Line-based menu loop; ``read``/``write`` are swappable for scripting."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.session_factory = session_factory
        self.read = read
        self.write = write
        self.user: Optional[Identity] = None

    # -- prompts -----------------------------------------------------------

    def ask(self, prompt: str) -> str:
        return self.read(prompt).strip()

    def ask_date(self, prompt: str, *, optional: bool = False) -> Optional[date]:
        text = self.ask(f"{prompt} (YYYY-MM-DD): ")
        if not text and optional:
            return None
        try:
            return date.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"'{text}' is not a date in YYYY-MM-DD format") from exc

    def confirm(self, prompt: str) -> bool:
        return self.ask(f"{prompt} [y/N]: ").lower() in ("y", "yes")

    def read_choice(self) -> int:
        while True:
            try:
                return int(self.ask("Please make your choice: "))
            except ValueError:
                self.write("Your input is invalid!")

    def show(self, rows: Iterable[dict]) -> None:
        self.write(render_table(rows))

    # -- loops -------------------------------------------------------------

    def run(self) -> None:
        self.write(
            "\n\n*******************************************************\n"
            "              Airline Management Console\n"
            "*******************************************************\n"
        )
        try:
            while True:
                self.write("MAIN MENU\n---------\n1. Create user\n2. Log in\n9. < EXIT")
                choice = self.read_choice()
                if choice == 1:
                    self._guarded(self.create_user)
                elif choice == 2:
                    self._guarded(self.log_in)
                    if self.user is not None:
                        self.user_menu()
                elif choice == 9:
                    return
                else:
                    self.write("Unrecognized choice!")
        except EOFError:
            self.write("")

    def user_menu(self) -> None:
        items = {
            number: item
            for number, item in MENU_ITEMS.items()
            if self.user is not None and self.user.role in item.roles
        }
        while self.user is not None:
            self.write("MAIN MENU\n---------")
            for number, item in items.items():
                self.write(f"{number}. {item.label}")
            self.write(f"{LOGOUT_CHOICE}. Log out")
            choice = self.read_choice()
            if choice == LOGOUT_CHOICE:
                self.user = None
            elif choice in items:
                handler = items[choice].handler
                self._guarded(lambda: self._with_session(handler))
            else:
                self.write("Unrecognized choice!")

    def _with_session(self, handler: Callable[["Menu", Session], None]) -> None:
        with session_scope(self.session_factory) as session:
            handler(self, session)

    def _guarded(self, action: Callable[[], None]) -> None:
        try:
            action()
        except (BookingError, LookupError, ValueError) as exc:
            self.write(f"Error: {exc}")
        except SQLAlchemyError as exc:
            logger.warning("database error in menu action", exc_info=True)
            self.write(f"Database error: {exc}")

    # -- accounts ----------------------------------------------------------

    def create_user(self) -> None:
        self.write("========== Create New User Account ==========")
        first_name = self.ask("Enter First Name: ")
        last_name = self.ask("Enter Last Name: ")
        password = self.ask("Enter desired Password: ")
        role = Role.parse(self.ask("Select User Role (C for Customer, P for Pilot, T for Technician): "))
        full_name = f"{first_name} {last_name}"
        with session_scope(self.session_factory) as session:
            if role is Role.CUSTOMER:
                identity = accounts.create_customer(
                    session,
                    first_name=first_name,
                    last_name=last_name,
                    password=password,
                    gender=self.ask("Enter Gender (M/F/Other): ") or None,
                    dob=self.ask_date("Enter Date of Birth", optional=True),
                    address=self.ask("Enter Address: ") or None,
                    phone=self.ask("Enter Phone Number: ") or None,
                    zip_code=self.ask("Enter Zip Code: ") or None,
                )
            elif role is Role.PILOT:
                identity = accounts.create_pilot(session, name=full_name, password=password)
            else:
                identity = accounts.create_technician(session, name=full_name, password=password)
        self.write(
            f"{role.value.capitalize()} account created successfully for {full_name} "
            f"with ID: {identity.id}"
        )

    def log_in(self) -> None:
        self.write("============== User Login ==============")
        role = Role.parse(self.ask("Enter your role (Customer/Pilot/Technician): "))
        identifier = self.ask("Enter your ID: ")
        password = self.ask("Enter your password: ")
        with self.session_factory() as session:
            self.user = accounts.authenticate(session, role, identifier, password)
        if self.user is None:
            self.write("\nLogin failed. Invalid ID or password for the specified role.\n")
        else:
            self.write(f"\nWelcome, {self.user.display_name}! ({self.user.role.value} {self.user.id})\n")

    def waitlist_prompt(self, instance: FlightInstance) -> bool:
        return self.confirm(
            f"Flight instance {instance.id} is full "
            f"({instance.seats_sold}/{instance.seats_total} seats sold). Join the waitlist?"
        )


# -- menu handlers ---------------------------------------------------------


def _weekly_schedule(menu: Menu, session: Session) -> None:
    menu.show(reports.weekly_schedule(session, menu.ask("Flight number: ")))


def _seat_summary(menu: Menu, session: Session) -> None:
    flight_number = menu.ask("Flight number: ")
    menu.show([reports.seat_summary(session, flight_number, menu.ask_date("Flight date"))])


def _flight_status(menu: Menu, session: Session) -> None:
    flight_number = menu.ask("Flight number: ")
    menu.show([reports.flight_status(session, flight_number, menu.ask_date("Flight date"))])


def _flights_on_date(menu: Menu, session: Session) -> None:
    menu.show(reports.flights_on_date(session, menu.ask_date("Date")))


def _passengers_by_status(menu: Menu, session: Session) -> None:
    flight_number = menu.ask("Flight number: ")
    grouped = reports.passengers_by_status(session, flight_number, menu.ask_date("Flight date"))
    for status, passengers in grouped.items():
        menu.write(f"{status} ({len(passengers)})")
        menu.show(passengers)


def _reservation_details(menu: Menu, session: Session) -> None:
    menu.show([reports.reservation_details(session, menu.ask("Reservation ID: "))])


def _plane_details(menu: Menu, session: Session) -> None:
    menu.show([reports.plane_details(session, menu.ask("Plane ID: "))])


def _repairs_by_technician(menu: Menu, session: Session) -> None:
    menu.show(reports.repairs_by_technician(session, menu.ask("Technician ID: ")))


def _repairs_for_plane(menu: Menu, session: Session) -> None:
    plane_id = menu.ask("Plane ID: ")
    start = menu.ask_date("From")
    end = menu.ask_date("To")
    menu.show(reports.repairs_for_plane(session, plane_id, start, end))


def _flight_statistics(menu: Menu, session: Session) -> None:
    flight_number = menu.ask("Flight number: ")
    start = menu.ask_date("From")
    end = menu.ask_date("To")
    menu.show([reports.flight_statistics(session, flight_number, start, end)])


def _search_flights(menu: Menu, session: Session) -> None:
    menu.show(
        flights.search_flights(
            session,
            departure_city=menu.ask("Departure city: "),
            arrival_city=menu.ask("Destination city: "),
            flight_date=menu.ask_date("Date"),
        )
    )


def _ticket_cost(menu: Menu, session: Session) -> None:
    flight_number = menu.ask("Flight number: ")
    menu.show(flights.ticket_cost(session, flight_number, menu.ask_date("Date", optional=True)))


def _airplane_type(menu: Menu, session: Session) -> None:
    menu.show([flights.airplane_type(session, menu.ask("Flight number: "))])


def _book_flight(menu: Menu, session: Session) -> None:
    assert isinstance(menu.user, CustomerIdentity)
    reservation = book_flight(
        session,
        customer=menu.user,
        flight_instance_id=menu.ask("Flight instance ID: "),
        confirm_waitlist=menu.waitlist_prompt,
    )
    menu.write(f"Reservation {reservation.id} created with status '{reservation.status}'.")


def _my_reservations(menu: Menu, session: Session) -> None:
    assert isinstance(menu.user, CustomerIdentity)
    menu.show(flights.customer_reservations(session, menu.user))


def _maintenance_request(menu: Menu, session: Session) -> None:
    assert isinstance(menu.user, PilotIdentity)
    request = maintenance.submit_maintenance_request(
        session,
        pilot=menu.user,
        plane_id=menu.ask("Plane ID: "),
        repair_code=menu.ask("Repair code: "),
        request_date=menu.ask_date("Request date, blank for today", optional=True),
    )
    menu.write(f"Maintenance request {request.id} filed for plane {request.plane_id}.")


def _my_requests(menu: Menu, session: Session) -> None:
    assert isinstance(menu.user, PilotIdentity)
    menu.show(maintenance.requests_by_pilot(session, menu.user.id))


def _log_repair(menu: Menu, session: Session) -> None:
    assert isinstance(menu.user, TechnicianIdentity)
    repair = maintenance.log_repair(
        session,
        technician=menu.user,
        plane_id=menu.ask("Plane ID: "),
        repair_code=menu.ask("Repair code: "),
        repair_date=menu.ask_date("Repair date, blank for today", optional=True),
    )
    menu.write(f"Repair {repair.id} logged for plane {repair.plane_id}.")


def _requests_by_pilot(menu: Menu, session: Session) -> None:
    menu.show(maintenance.requests_by_pilot(session, menu.ask("Pilot ID: ")))


MENU_ITEMS: Dict[int, MenuItem] = {
    1: MenuItem("View Flight Schedule", _weekly_schedule),
    2: MenuItem("View Flight Seats", _seat_summary),
    3: MenuItem("View Flight Status", _flight_status),
    4: MenuItem("View Flights of the Day", _flights_on_date),
    5: MenuItem("View Passengers of a Flight", _passengers_by_status),
    6: MenuItem("View Reservation Details", _reservation_details),
    7: MenuItem("View Plane Details", _plane_details),
    8: MenuItem("View Repairs by Technician", _repairs_by_technician),
    9: MenuItem("View Repairs of a Plane", _repairs_for_plane),
    10: MenuItem("View Flight Statistics", _flight_statistics),
    11: MenuItem("Search Flights", _search_flights, (Role.CUSTOMER,)),
    12: MenuItem("Ticket Cost", _ticket_cost, (Role.CUSTOMER,)),
    13: MenuItem("Airplane Type", _airplane_type, (Role.CUSTOMER,)),
    14: MenuItem("Book Flight", _book_flight, (Role.CUSTOMER,)),
    15: MenuItem("My Reservations", _my_reservations, (Role.CUSTOMER,)),
    16: MenuItem("Maintenance Request", _maintenance_request, (Role.PILOT,)),
    17: MenuItem("My Maintenance Requests", _my_requests, (Role.PILOT,)),
    18: MenuItem("Log Repair", _log_repair, (Role.TECHNICIAN,)),
    19: MenuItem("Maintenance Requests by Pilot", _requests_by_pilot, (Role.TECHNICIAN,)),
}


# -- entry point -----------------------------------------------------------


def parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Airline management console backed by a SQL database.")
    parser.add_argument("--db-url", help="SQLAlchemy database URL (default: $AIRLINE_DB_URL).")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: $AIRLINE_LOG_LEVEL or WARNING).",
    )
    parser.add_argument("--echo-sql", action="store_true", help="Log every SQL statement.")

    commands = parser.add_subparsers(dest="command")
    commands.add_parser("init-db", help="Create the schema and identifier sequences.")
    seed = commands.add_parser("seed", help="Fill the database with deterministic sample data.")
    seed.add_argument("--flights", type=int, default=8)
    seed.add_argument("--days", type=int, default=7)
    seed.add_argument("--customers", type=int, default=40)
    seed.add_argument("--bookings", type=int, default=80)
    load = commands.add_parser("load-csv", help="Import the coursework CSV files from a directory.")
    load.add_argument("directory", type=Path)
    commands.add_parser("menu", help="Start the interactive menu (default).")

    args = parser.parse_args(list(argv))
    if args.command is None:
        args.command = "menu"
    return args


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    if args.db_url:
        settings.db_url = args.db_url
    if args.log_level:
        settings.log_level = args.log_level
    if args.echo_sql:
        settings.echo_sql = True
    return settings


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = _apply_overrides(load_settings(), args)
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine, session_factory = create_session_factory(settings.db_url, echo=settings.echo_sql)
    try:
        create_schema(engine, session_factory)
        if args.command == "init-db":
            print(f"Schema ready at {engine.url.render_as_string(hide_password=True)}")
        elif args.command == "seed":
            summary = generate_sample_data(
                session_factory,
                flights=args.flights,
                days=args.days,
                customers=args.customers,
                bookings=args.bookings,
            )
            print(render_table([summary]))
        elif args.command == "load-csv":
            loaded = load_csv_directory(session_factory, args.directory)
            print(render_table([{"table": name, "rows": count} for name, count in loaded.items()]))
        else:
            Menu(session_factory).run()
    except (SQLAlchemyError, OSError, ValueError) as exc:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        _disconnect(engine, announce=args.command == "menu")
    return 0


def _disconnect(engine, *, announce: bool) -> None:
    if announce:
        print("Disconnecting from database...", end="")
    try:
        engine.dispose()
    except SQLAlchemyError:
        logger.debug("ignoring error while disposing engine", exc_info=True)
    if announce:
        print("Done\n\nBye !")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
