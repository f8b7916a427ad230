from __future__ import annotations

import logging

import pytest
from sqlalchemy import delete

from airline_management.models import Customer, IdSequence, Reservation
from airline_management.sequences import (
    CUSTOMER,
    PILOT,
    RESERVATION,
    AllocationError,
    ensure_sequences,
    highest_existing,
    next_identifier,
    next_value,
)

from factories import add_flight_instance, make_session_factory


def test_identifier_formats_pad_and_widen():
    assert RESERVATION.format(1) == "R0001"
    assert RESERVATION.format(9999) == "R9999"
    assert RESERVATION.format(10000) == "R10000"
    assert PILOT.format(7) == "P007"
    assert CUSTOMER.format(12) == "12"
    with pytest.raises(ValueError):
        RESERVATION.format(0)


def test_identifier_parse_rejects_foreign_values():
    assert RESERVATION.parse("R0042") == 42
    assert RESERVATION.parse("R10000") == 10000
    for bad in ("X0042", "R", "R12a", "0042"):
        with pytest.raises(AllocationError):
            RESERVATION.parse(bad)


def test_allocation_widens_past_four_digits():
    session_factory = make_session_factory()
    with session_factory() as session:
        session.get(IdSequence, RESERVATION.name).next_value = 9999
        session.commit()
        assert next_identifier(session, RESERVATION) == "R9999"
        assert next_identifier(session, RESERVATION) == "R10000"
        session.commit()


def test_missing_counter_is_seeded_from_existing_rows(caplog):
    session_factory = make_session_factory()
    with session_factory() as session:
        add_flight_instance(session, instance_id=1, seats_total=10)
        session.add(Customer(id=1, first_name="A", last_name="B", password="pw"))
        for reservation_id in ("R0007", "R0003", "legacy-9"):
            session.add(
                Reservation(id=reservation_id, customer_id=1, flight_instance_id=1, status="reserved")
            )
        session.execute(delete(IdSequence).where(IdSequence.name == RESERVATION.name))
        session.commit()

        with caplog.at_level(logging.WARNING, logger="airline_management.sequences"):
            assert next_identifier(session, RESERVATION) == "R0008"
        assert "legacy-9" in caplog.text
        assert next_identifier(session, RESERVATION) == "R0009"
        session.commit()


def test_corrupt_identifiers_default_to_one():
    session_factory = make_session_factory()
    with session_factory() as session:
        add_flight_instance(session, instance_id=1, seats_total=10)
        session.add(Customer(id=1, first_name="A", last_name="B", password="pw"))
        session.add(Reservation(id="BOGUS", customer_id=1, flight_instance_id=1, status="waitlist"))
        session.execute(delete(IdSequence))
        session.commit()

        assert highest_existing(session, RESERVATION) == 0
        assert next_identifier(session, RESERVATION) == "R0001"


def test_ensure_sequences_moves_lagging_counters_forward():
    session_factory = make_session_factory()
    with session_factory() as session:
        session.add(Customer(id=41, first_name="A", last_name="B", password="pw"))
        session.commit()
        ensure_sequences(session)
        session.commit()
        assert next_value(session, CUSTOMER) == 42


def test_counter_survives_across_sessions():
    session_factory = make_session_factory()
    claimed = []
    for _ in range(3):
        with session_factory() as session:
            claimed.append(next_value(session, PILOT))
            session.commit()
    with session_factory() as session:
        next_value(session, PILOT)
        session.rollback()
    with session_factory() as session:
        claimed.append(next_value(session, PILOT))
        session.commit()
    assert claimed == [1, 2, 3, 4]
