"""Flight-operations reports shown to every logged-in user."""
from __future__ import annotations

from datetime import date
from typing import Dict, List

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from .models import (
    Customer,
    Flight,
    FlightInstance,
    Plane,
    Repair,
    Reservation,
    RESERVATION_STATUSES,
    Schedule,
)

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _instance(session: Session, flight_number: str, flight_date: date) -> FlightInstance:
    instance = session.scalars(
        select(FlightInstance).where(
            FlightInstance.flight_number == flight_number,
            FlightInstance.flight_date == flight_date,
        )
    ).first()
    if instance is None:
        raise LookupError(f"Flight {flight_number} does not fly on {flight_date.isoformat()}")
    return instance


def weekly_schedule(session: Session, flight_number: str) -> List[dict]:
    rows = session.scalars(select(Schedule).where(Schedule.flight_number == flight_number)).all()
    order = {day: index for index, day in enumerate(_WEEKDAYS)}
    rows = sorted(rows, key=lambda item: order.get(item.day_of_week, len(order)))
    return [
        {"day": row.day_of_week, "departs": row.departure_time, "arrives": row.arrival_time}
        for row in rows
    ]


def seat_summary(session: Session, flight_number: str, flight_date: date) -> dict:
    instance = _instance(session, flight_number, flight_date)
    return {
        "instance": instance.id,
        "seats_total": instance.seats_total,
        "seats_sold": instance.seats_sold,
        "seats_available": instance.seats_available,
    }


def flight_status(session: Session, flight_number: str, flight_date: date) -> dict:
    instance = _instance(session, flight_number, flight_date)
    return {
        "instance": instance.id,
        "departed_on_time": instance.departed_on_time,
        "arrived_on_time": instance.arrived_on_time,
    }


def flights_on_date(session: Session, flight_date: date) -> List[dict]:
    stmt = (
        select(
            Flight.flight_number,
            Flight.departure_city,
            Flight.arrival_city,
            FlightInstance.id,
            FlightInstance.departed_on_time,
            FlightInstance.arrived_on_time,
        )
        .join(FlightInstance, FlightInstance.flight_number == Flight.flight_number)
        .where(FlightInstance.flight_date == flight_date)
        .order_by(Flight.flight_number)
    )
    return [
        {
            "flight": row.flight_number,
            "instance": row.id,
            "from": row.departure_city,
            "to": row.arrival_city,
            "departed_on_time": row.departed_on_time,
            "arrived_on_time": row.arrived_on_time,
        }
        for row in session.execute(stmt)
    ]


def passengers_by_status(
    session: Session, flight_number: str, flight_date: date
) -> Dict[str, List[dict]]:
    """Group the customers holding a reservation on one flight instance by status."""

    instance = _instance(session, flight_number, flight_date)
    grouped: Dict[str, List[dict]] = {status: [] for status in RESERVATION_STATUSES}
    stmt = (
        select(
            Reservation.id,
            Reservation.status,
            Customer.id.label("customer_id"),
            Customer.first_name,
            Customer.last_name,
        )
        .join(Customer, Customer.id == Reservation.customer_id)
        .where(Reservation.flight_instance_id == instance.id)
        .order_by(Reservation.id)
    )
    for row in session.execute(stmt):
        grouped.setdefault(row.status, []).append(
            {
                "reservation": row.id,
                "customer": row.customer_id,
                "name": f"{row.first_name} {row.last_name}",
            }
        )
    return grouped


def reservation_details(session: Session, reservation_id: str) -> dict:
    row = session.execute(
        select(Reservation, Customer)
        .join(Customer, Customer.id == Reservation.customer_id)
        .where(Reservation.id == reservation_id.strip())
    ).one_or_none()
    if row is None:
        raise LookupError(f"Reservation {reservation_id} does not exist")
    reservation, customer = row
    return {
        "reservation": reservation.id,
        "status": reservation.status,
        "flight_instance": reservation.flight_instance_id,
        "customer": customer.id,
        "name": customer.full_name,
        "gender": customer.gender,
        "dob": customer.dob,
        "address": customer.address,
        "phone": customer.phone,
        "zip": customer.zip,
    }


def plane_details(session: Session, plane_id: str, *, today: date | None = None) -> dict:
    plane = session.get(Plane, plane_id)
    if plane is None:
        raise LookupError(f"Plane {plane_id} does not exist")
    today = today or date.today()
    return {
        "plane": plane.id,
        "make": plane.make,
        "model": plane.model,
        "age": today.year - plane.year,
        "last_repair": plane.last_repair_date,
    }


def repairs_by_technician(session: Session, technician_id: str) -> List[dict]:
    stmt = (
        select(Repair)
        .where(Repair.technician_id == technician_id)
        .order_by(Repair.repair_date, Repair.id)
    )
    return [
        {
            "repair": repair.id,
            "plane": repair.plane_id,
            "code": repair.repair_code,
            "date": repair.repair_date,
        }
        for repair in session.scalars(stmt)
    ]


def repairs_for_plane(session: Session, plane_id: str, start: date, end: date) -> List[dict]:
    if start > end:
        raise ValueError("Start date must not be after end date")
    stmt = (
        select(Repair.repair_date, Repair.repair_code, Repair.technician_id)
        .where(Repair.plane_id == plane_id, Repair.repair_date.between(start, end))
        .order_by(Repair.repair_date)
    )
    return [
        {"date": row.repair_date, "code": row.repair_code, "technician": row.technician_id}
        for row in session.execute(stmt)
    ]


def flight_statistics(session: Session, flight_number: str, start: date, end: date) -> dict:
    """Count days flown and tickets sold/unsold for a flight in ``[start, end]``."""

    if start > end:
        raise ValueError("Start date must not be after end date")
    row = session.execute(
        select(
            func.count(FlightInstance.id).label("days"),
            func.coalesce(func.sum(FlightInstance.seats_sold), 0).label("sold"),
            func.coalesce(
                func.sum(FlightInstance.seats_total - FlightInstance.seats_sold), 0
            ).label("unsold"),
            func.coalesce(
                func.sum(case((FlightInstance.departed_on_time.is_not(None), 1), else_=0)), 0
            ).label("flown"),
        ).where(
            FlightInstance.flight_number == flight_number,
            FlightInstance.flight_date.between(start, end),
        )
    ).one()
    return {
        "flight": flight_number,
        "days_scheduled": row.days,
        "days_flown": int(row.flown),
        "tickets_sold": int(row.sold),
        "tickets_unsold": int(row.unsold),
    }
