"""Populate the database with sample data or with the coursework CSV files."""
from __future__ import annotations

import logging
import random
import re
from datetime import date, time, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple, Type

import pandas as pd
from sqlalchemy import Boolean, Date, Integer, Numeric, Time, insert
from sqlalchemy.orm import Session, sessionmaker

from .accounts import create_customer, create_pilot, create_technician
from .booking import BookingError, book_flight
from .database import session_scope
from .maintenance import log_repair, submit_maintenance_request
from .models import (
    Base,
    Customer,
    Flight,
    FlightInstance,
    MaintenanceRequest,
    Pilot,
    Plane,
    Repair,
    Reservation,
    Schedule,
    Technician,
)
from .sequences import ensure_sequences

logger = logging.getLogger(__name__)

CITIES: Sequence[str] = (
    "Los Angeles",
    "New York",
    "Chicago",
    "Seattle",
    "Denver",
    "Atlanta",
    "Boston",
    "Dallas",
)
PLANE_MODELS = (("Boeing", "737"), ("Boeing", "787"), ("Airbus", "A320"), ("Airbus", "A350"))
FIRST_NAMES = ("Ava", "Noah", "Liam", "Mia", "Lucas", "Emma", "Ethan", "Isabella")
LAST_NAMES = ("Johnson", "Williams", "Smith", "Brown", "Garcia", "Lee")
REPAIR_CODES = ("ENG-01", "HYD-02", "AVN-03", "LDG-04", "CAB-05")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def generate_sample_data(
    session_factory: sessionmaker[Session],
    *,
    planes: int = 4,
    flights: int = 8,
    days: int = 7,
    customers: int = 40,
    bookings: int = 80,
    start: Optional[date] = None,
) -> Dict[str, int]:
    """Populate the database with deterministic pseudo-random data."""

    random.seed(42)
    start = start or date.today() - timedelta(days=days // 2)
    today = date.today()
    with session_scope(session_factory) as session:
        ensure_sequences(session)
        plane_ids = []
        for index in range(planes):
            make, model = random.choice(PLANE_MODELS)
            plane = Plane(
                id=f"PL{index + 1:03d}",
                make=make,
                model=model,
                year=random.randint(1995, 2022),
            )
            session.add(plane)
            plane_ids.append(plane.id)

        instance_id = 0
        for index in range(flights):
            origin, destination = random.sample(CITIES, 2)
            flight = Flight(
                flight_number=f"AM{1000 + index}",
                plane_id=random.choice(plane_ids),
                departure_city=origin,
                arrival_city=destination,
            )
            session.add(flight)
            departure = time(hour=random.randint(5, 20), minute=random.choice((0, 15, 30, 45)))
            arrival = time(hour=min(departure.hour + random.randint(1, 3), 23), minute=departure.minute)
            for weekday in WEEKDAYS:
                session.add(
                    Schedule(
                        flight_number=flight.flight_number,
                        day_of_week=weekday,
                        departure_time=departure,
                        arrival_time=arrival,
                    )
                )
            for offset in range(days):
                instance_id += 1
                flight_date = start + timedelta(days=offset)
                flown = flight_date < today
                session.add(
                    FlightInstance(
                        id=instance_id,
                        flight_number=flight.flight_number,
                        flight_date=flight_date,
                        departed_on_time=random.random() < 0.8 if flown else None,
                        arrived_on_time=random.random() < 0.75 if flown else None,
                        seats_total=random.choice((4, 8, 12)),
                        seats_sold=0,
                        num_of_stops=random.choice((0, 0, 1)),
                        ticket_cost=Decimal(random.choice(("129.00", "189.50", "249.99"))),
                    )
                )
        session.flush()

        customer_identities = [
            create_customer(
                session,
                first_name=random.choice(FIRST_NAMES),
                last_name=random.choice(LAST_NAMES),
                password=f"secret{index}",
                phone=f"+1-555-{index:04d}",
            )
            for index in range(customers)
        ]
        pilot = create_pilot(session, name="Sam Carter", password="pilot")
        technician = create_technician(session, name="Riley Moore", password="tech")
        for plane_id in plane_ids:
            code = random.choice(REPAIR_CODES)
            submit_maintenance_request(
                session, pilot=pilot, plane_id=plane_id, repair_code=code, request_date=start
            )
            log_repair(
                session,
                technician=technician,
                plane_id=plane_id,
                repair_code=code,
                repair_date=start + timedelta(days=1),
            )

    successful = 0
    for _ in range(bookings if instance_id and customer_identities else 0):
        customer = random.choice(customer_identities)
        accept_waitlist = random.random() < 0.5
        with session_factory() as session:
            try:
                book_flight(
                    session,
                    customer=customer,
                    flight_instance_id=random.randint(1, instance_id),
                    confirm_waitlist=lambda instance: accept_waitlist,
                )
                successful += 1
            except BookingError as exc:
                logger.debug("sample booking skipped: %s", exc)
    return {
        "planes": planes,
        "flights": flights,
        "flight_instances": instance_id,
        "customers": customers,
        "bookings": successful,
    }


# File stem (normalized) -> model and CSV header -> column mapping, in foreign key order.
CSV_TABLES: Tuple[Tuple[str, Type[Base], Mapping[str, str]], ...] = (
    (
        "plane",
        Plane,
        {"PlaneID": "id", "Make": "make", "Model": "model", "Year": "year",
         "LastRepairDate": "last_repair_date"},
    ),
    ("pilot", Pilot, {"PilotID": "id", "Name": "name", "Password": "password"}),
    ("technician", Technician, {"TechnicianID": "id", "Name": "name", "Password": "password"}),
    (
        "customer",
        Customer,
        {"CustomerID": "id", "FirstName": "first_name", "LastName": "last_name",
         "Gender": "gender", "DOB": "dob", "Address": "address", "Phone": "phone",
         "Zip": "zip", "Password": "password"},
    ),
    (
        "flight",
        Flight,
        {"FlightNumber": "flight_number", "PlaneID": "plane_id",
         "DepartureCity": "departure_city", "ArrivalCity": "arrival_city"},
    ),
    (
        "schedule",
        Schedule,
        {"ScheduleID": "id", "FlightNumber": "flight_number", "DayOfWeek": "day_of_week",
         "DepartureTime": "departure_time", "ArrivalTime": "arrival_time"},
    ),
    (
        "flightinstance",
        FlightInstance,
        {"FlightInstanceID": "id", "FlightNumber": "flight_number", "FlightDate": "flight_date",
         "DepartedOnTime": "departed_on_time", "ArrivedOnTime": "arrived_on_time",
         "SeatsTotal": "seats_total", "SeatsSold": "seats_sold", "NumOfStops": "num_of_stops",
         "TicketCost": "ticket_cost"},
    ),
    (
        "reservation",
        Reservation,
        {"ReservationID": "id", "CustomerID": "customer_id",
         "FlightInstanceID": "flight_instance_id", "Status": "status"},
    ),
    (
        "maintenancerequest",
        MaintenanceRequest,
        {"RequestID": "id", "PlaneID": "plane_id", "RepairCode": "repair_code",
         "RequestDate": "request_date", "PilotID": "pilot_id"},
    ),
    (
        "repair",
        Repair,
        {"RepairID": "id", "PlaneID": "plane_id", "RepairCode": "repair_code",
         "RepairDate": "repair_date", "TechnicianID": "technician_id"},
    ),
)

_BOOLEANS = {"true": True, "t": True, "yes": True, "1": True,
             "false": False, "f": False, "no": False, "0": False}


def _normalize_stem(path: Path) -> str:
    stem = re.sub(r"[^a-z0-9]", "", path.stem.lower())
    return stem[:-1] if stem.endswith("s") else stem


def _coerce(frame: pd.DataFrame, model: Type[Base]) -> pd.DataFrame:
    for column in model.__table__.columns:
        if column.name not in frame:
            continue
        series = frame[column.name]
        if isinstance(column.type, Boolean):
            frame[column.name] = series.str.strip().str.lower().map(_BOOLEANS)
        elif isinstance(column.type, Integer):
            frame[column.name] = pd.to_numeric(series).astype("Int64")
        elif isinstance(column.type, Numeric):
            frame[column.name] = pd.to_numeric(series)
        elif isinstance(column.type, Date):
            frame[column.name] = pd.to_datetime(series).dt.date
        elif isinstance(column.type, Time):
            frame[column.name] = pd.to_datetime(series, format="mixed").dt.time
        else:
            frame[column.name] = series.str.strip()
    return frame


def _to_python(value: object, numeric: bool) -> object:
    if value is None or pd.isna(value):
        return None
    if numeric:
        return Decimal(str(value))
    # numpy scalars -> builtins so every DB-API driver can bind them
    return value.item() if hasattr(value, "item") else value


def read_csv_table(path: Path, model: Type[Base], headers: Mapping[str, str]) -> list[dict]:
    """Read one CSV file into insertable row dictionaries for ``model``."""

    frame = pd.read_csv(path, dtype=str, skipinitialspace=True)
    frame = frame.rename(columns=lambda name: headers.get(name.strip(), name.strip()))
    unknown = [name for name in frame.columns if name not in model.__table__.columns]
    if unknown:
        raise ValueError(f"{path.name}: unexpected columns {', '.join(unknown)}")
    frame = _coerce(frame, model)
    numeric = {
        column.name
        for column in model.__table__.columns
        if isinstance(column.type, Numeric)
    }
    return [
        {key: _to_python(value, key in numeric) for key, value in record.items()}
        for record in frame.astype(object).to_dict("records")
    ]


def load_csv_directory(session_factory: sessionmaker[Session], directory: Path) -> Dict[str, int]:
    """Bulk-load every recognised CSV file in ``directory`` and resync the sequences."""

    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"{directory} is not a directory")
    files = {_normalize_stem(path): path for path in directory.glob("*.csv")}
    loaded: Dict[str, int] = {}
    with session_scope(session_factory) as session:
        for stem, model, headers in CSV_TABLES:
            path = files.get(stem)
            if path is None:
                logger.info("no CSV file for %s in %s", model.__tablename__, directory)
                continue
            rows = read_csv_table(path, model, headers)
            if rows:
                session.execute(insert(model), rows)
            loaded[model.__tablename__] = len(rows)
            logger.info("loaded %d rows into %s", len(rows), model.__tablename__)
        ensure_sequences(session)
    return loaded
