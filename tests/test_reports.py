from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest

from airline_management import flights, reports
from airline_management.accounts import create_customer, create_technician
from airline_management.booking import book_flight
from airline_management.maintenance import log_repair

from factories import add_flight_instance, make_session_factory

MONDAY = date(2025, 3, 3)


def build_network():
    session_factory = make_session_factory()
    with session_factory() as session:
        add_flight_instance(session, instance_id=1, seats_total=3, flight_date=date(2025, 3, 1),
                            departed_on_time=True)
        add_flight_instance(session, instance_id=2, seats_total=3, flight_date=date(2025, 3, 2),
                            departed_on_time=False)
        add_flight_instance(session, instance_id=3, seats_total=2, flight_date=MONDAY,
                            ticket_cost="250.00")
        add_flight_instance(session, instance_id=4, seats_total=5, flight_date=MONDAY,
                            flight_number="AM200", departure_city="Chicago",
                            arrival_city="Denver", plane_id="PL002")
        customers = [
            create_customer(session, first_name=name, last_name="Tester", password="pw",
                            phone="555-0100")
            for name in ("Ann", "Ben", "Cid")
        ]
        technician = create_technician(session, name="Grace Hopper", password="cobol")
        log_repair(session, technician=technician, plane_id="PL001", repair_code="ENG-01",
                   repair_date=date(2025, 2, 10))
        log_repair(session, technician=technician, plane_id="PL001", repair_code="HYD-02",
                   repair_date=date(2025, 2, 20))
        session.commit()

    for customer in customers:
        with session_factory() as session:
            book_flight(session, customer=customer, flight_instance_id=3,
                        confirm_waitlist=lambda _: True)
    return session_factory, customers, technician


def test_search_flights_reports_schedule_seats_and_punctuality():
    session_factory, _, _ = build_network()
    with session_factory() as session:
        rows = flights.search_flights(
            session, departure_city="los angeles", arrival_city="New York", flight_date=MONDAY
        )
        assert flights.search_flights(
            session, departure_city="Chicago", arrival_city="New York", flight_date=MONDAY
        ) == []

    assert rows == [
        {
            "flight": "AM100",
            "instance": 3,
            "departs": time(9, 30),
            "arrives": time(17, 45),
            "stops": 0,
            "available": 0,
            "cost": Decimal("250.00"),
            "on_time_pct": 50.0,
        }
    ]


def test_ticket_cost_and_airplane_type():
    session_factory, _, _ = build_network()
    with session_factory() as session:
        costs = flights.ticket_cost(session, "AM100", MONDAY)
        every_day = flights.ticket_cost(session, "AM100")
        plane = flights.airplane_type(session, "AM200")
        with pytest.raises(LookupError):
            flights.airplane_type(session, "NOPE")

    assert costs == [{"instance": 3, "date": MONDAY, "cost": Decimal("250.00")}]
    assert [row["instance"] for row in every_day] == [1, 2, 3]
    assert plane == {"plane": "PL002", "make": "Boeing", "model": "737", "year": 2010}


def test_customer_reservations_lists_own_bookings():
    session_factory, customers, _ = build_network()
    with session_factory() as session:
        rows = flights.customer_reservations(session, customers[2])
    assert rows == [{"reservation": "R0003", "flight": "AM100", "date": MONDAY, "status": "waitlist"}]


def test_seat_summary_status_and_day_listing():
    session_factory, _, _ = build_network()
    with session_factory() as session:
        seats = reports.seat_summary(session, "AM100", MONDAY)
        status = reports.flight_status(session, "AM100", date(2025, 3, 2))
        day = reports.flights_on_date(session, MONDAY)
        with pytest.raises(LookupError):
            reports.seat_summary(session, "AM100", date(2030, 1, 1))

    assert seats == {"instance": 3, "seats_total": 2, "seats_sold": 2, "seats_available": 0}
    assert status == {"instance": 2, "departed_on_time": False, "arrived_on_time": False}
    assert [(row["flight"], row["from"], row["to"]) for row in day] == [
        ("AM100", "Los Angeles", "New York"),
        ("AM200", "Chicago", "Denver"),
    ]


def test_weekly_schedule_is_ordered_by_weekday():
    session_factory, _, _ = build_network()
    with session_factory() as session:
        rows = reports.weekly_schedule(session, "AM100")
    assert [row["day"] for row in rows] == ["Monday", "Saturday", "Sunday"]
    assert rows[0] == {"day": "Monday", "departs": time(9, 30), "arrives": time(17, 45)}


def test_passengers_grouped_by_status_and_reservation_details():
    session_factory, _, _ = build_network()
    with session_factory() as session:
        grouped = reports.passengers_by_status(session, "AM100", MONDAY)
        details = reports.reservation_details(session, "R0002")
        with pytest.raises(LookupError):
            reports.reservation_details(session, "R9999")

    assert [row["name"] for row in grouped["reserved"]] == ["Ann Tester", "Ben Tester"]
    assert [row["reservation"] for row in grouped["waitlist"]] == ["R0003"]
    assert grouped["flown"] == []
    assert details["name"] == "Ben Tester"
    assert details["status"] == "reserved"
    assert details["phone"] == "555-0100"


def test_plane_details_and_repair_history():
    session_factory, _, technician = build_network()
    with session_factory() as session:
        plane = reports.plane_details(session, "PL001", today=date(2025, 6, 1))
        by_technician = reports.repairs_by_technician(session, technician.id)
        in_range = reports.repairs_for_plane(session, "PL001", date(2025, 2, 15), date(2025, 2, 28))
        with pytest.raises(ValueError):
            reports.repairs_for_plane(session, "PL001", date(2025, 3, 1), date(2025, 2, 1))
        with pytest.raises(LookupError):
            reports.plane_details(session, "PL999")

    assert plane == {
        "plane": "PL001",
        "make": "Boeing",
        "model": "737",
        "age": 15,
        "last_repair": date(2025, 2, 20),
    }
    assert [row["code"] for row in by_technician] == ["ENG-01", "HYD-02"]
    assert in_range == [{"date": date(2025, 2, 20), "code": "HYD-02", "technician": "T001"}]


def test_flight_statistics_counts_sold_and_unsold():
    session_factory, _, _ = build_network()
    with session_factory() as session:
        stats = reports.flight_statistics(session, "AM100", date(2025, 3, 1), MONDAY)
        empty = reports.flight_statistics(session, "AM100", date(2024, 1, 1), date(2024, 1, 31))

    assert stats == {
        "flight": "AM100",
        "days_scheduled": 3,
        "days_flown": 2,
        "tickets_sold": 2,
        "tickets_unsold": 6,
    }
    assert empty["days_scheduled"] == 0
    assert empty["tickets_sold"] == 0
