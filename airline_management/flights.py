"""Customer-facing flight searches."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import Select, case, func, select
from sqlalchemy.orm import Session, aliased

from .identity import CustomerIdentity
from .models import Flight, FlightInstance, Plane, Reservation, Schedule


def _on_time_percentages():
    past = aliased(FlightInstance)
    return (
        select(
            past.flight_number.label("flight_number"),
            (
                100.0
                * func.sum(case((past.departed_on_time.is_(True), 1), else_=0))
                / func.count(past.id)
            ).label("on_time_pct"),
        )
        .where(past.departed_on_time.is_not(None))
        .group_by(past.flight_number)
        .subquery()
    )


def search_flights(
    session: Session,
    *,
    departure_city: str,
    arrival_city: str,
    flight_date: date,
) -> List[dict]:
    """List instances flying the route on ``flight_date`` with times and punctuality."""

    on_time = _on_time_percentages()
    stmt = (
        select(
            Flight.flight_number,
            FlightInstance.id.label("instance_id"),
            Schedule.departure_time,
            Schedule.arrival_time,
            FlightInstance.num_of_stops,
            (FlightInstance.seats_total - FlightInstance.seats_sold).label("seats_available"),
            FlightInstance.ticket_cost,
            on_time.c.on_time_pct,
        )
        .join(FlightInstance, FlightInstance.flight_number == Flight.flight_number)
        .outerjoin(
            Schedule,
            (Schedule.flight_number == Flight.flight_number)
            & (Schedule.day_of_week == flight_date.strftime("%A")),
        )
        .outerjoin(on_time, on_time.c.flight_number == Flight.flight_number)
        .where(
            func.lower(Flight.departure_city) == departure_city.strip().lower(),
            func.lower(Flight.arrival_city) == arrival_city.strip().lower(),
            FlightInstance.flight_date == flight_date,
        )
        .order_by(Schedule.departure_time, Flight.flight_number)
    )
    return [
        {
            "flight": row.flight_number,
            "instance": row.instance_id,
            "departs": row.departure_time,
            "arrives": row.arrival_time,
            "stops": row.num_of_stops,
            "available": row.seats_available,
            "cost": row.ticket_cost,
            "on_time_pct": None if row.on_time_pct is None else round(float(row.on_time_pct), 1),
        }
        for row in session.execute(stmt)
    ]


def ticket_cost(
    session: Session,
    flight_number: str,
    flight_date: Optional[date] = None,
) -> List[dict]:
    stmt: Select = select(
        FlightInstance.id, FlightInstance.flight_date, FlightInstance.ticket_cost
    ).where(FlightInstance.flight_number == flight_number)
    if flight_date:
        stmt = stmt.where(FlightInstance.flight_date == flight_date)
    stmt = stmt.order_by(FlightInstance.flight_date)
    return [
        {"instance": row.id, "date": row.flight_date, "cost": row.ticket_cost}
        for row in session.execute(stmt)
    ]


def airplane_type(session: Session, flight_number: str) -> dict:
    row = session.execute(
        select(Plane.id, Plane.make, Plane.model, Plane.year)
        .join(Flight, Flight.plane_id == Plane.id)
        .where(Flight.flight_number == flight_number)
    ).one_or_none()
    if row is None:
        raise LookupError(f"Flight {flight_number} does not exist")
    return {"plane": row.id, "make": row.make, "model": row.model, "year": row.year}


def customer_reservations(session: Session, customer: CustomerIdentity) -> List[dict]:
    stmt = (
        select(
            Reservation.id,
            FlightInstance.flight_number,
            FlightInstance.flight_date,
            Reservation.status,
        )
        .join(FlightInstance, FlightInstance.id == Reservation.flight_instance_id)
        .where(Reservation.customer_id == customer.id)
        .order_by(Reservation.id)
    )
    return [
        {
            "reservation": row.id,
            "flight": row.flight_number,
            "date": row.flight_date,
            "status": row.status,
        }
        for row in session.execute(stmt)
    ]
