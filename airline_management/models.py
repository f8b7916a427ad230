"""SQLAlchemy models for the airline management console."""
from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Time,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

RESERVATION_STATUSES = ("reserved", "waitlist", "flown")


class Base(DeclarativeBase):
    pass


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String(10))
    dob: Mapped[Optional[date]] = mapped_column(Date)
    address: Mapped[Optional[str]] = mapped_column(String(200))
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    zip: Mapped[Optional[str]] = mapped_column(String(10))
    password: Mapped[str] = mapped_column(String(100), nullable=False)

    reservations: Mapped[List["Reservation"]] = relationship(back_populates="customer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Pilot(Base):
    __tablename__ = "pilots"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password: Mapped[str] = mapped_column(String(100), nullable=False)

    maintenance_requests: Mapped[List["MaintenanceRequest"]] = relationship(back_populates="pilot")


class Technician(Base):
    __tablename__ = "technicians"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password: Mapped[str] = mapped_column(String(100), nullable=False)

    repairs: Mapped[List["Repair"]] = relationship(back_populates="technician")


class Plane(Base):
    __tablename__ = "planes"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    make: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    last_repair_date: Mapped[Optional[date]] = mapped_column(Date)

    flights: Mapped[List["Flight"]] = relationship(back_populates="plane")


class Flight(Base):
    __tablename__ = "flights"

    flight_number: Mapped[str] = mapped_column(String(16), primary_key=True)
    plane_id: Mapped[str] = mapped_column(ForeignKey("planes.id"), nullable=False)
    departure_city: Mapped[str] = mapped_column(String(80), nullable=False)
    arrival_city: Mapped[str] = mapped_column(String(80), nullable=False)

    plane: Mapped[Plane] = relationship(back_populates="flights")
    schedules: Mapped[List["Schedule"]] = relationship(back_populates="flight")
    instances: Mapped[List["FlightInstance"]] = relationship(back_populates="flight")


class Schedule(Base):
    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    flight_number: Mapped[str] = mapped_column(ForeignKey("flights.flight_number"), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(10), nullable=False)
    departure_time: Mapped[time] = mapped_column(Time, nullable=False)
    arrival_time: Mapped[time] = mapped_column(Time, nullable=False)

    flight: Mapped[Flight] = relationship(back_populates="schedules")


class FlightInstance(Base):
    __tablename__ = "flight_instances"
    __table_args__ = (
        CheckConstraint("seats_total > 0", name="ck_seats_total_positive"),
        CheckConstraint("seats_sold >= 0", name="ck_seats_sold_non_negative"),
        CheckConstraint("seats_sold <= seats_total", name="ck_seats_sold_within_total"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    flight_number: Mapped[str] = mapped_column(ForeignKey("flights.flight_number"), nullable=False)
    flight_date: Mapped[date] = mapped_column(Date, nullable=False)
    departed_on_time: Mapped[Optional[bool]] = mapped_column(Boolean)
    arrived_on_time: Mapped[Optional[bool]] = mapped_column(Boolean)
    seats_total: Mapped[int] = mapped_column(Integer, nullable=False)
    seats_sold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    num_of_stops: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ticket_cost: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    flight: Mapped[Flight] = relationship(back_populates="instances")
    reservations: Mapped[List["Reservation"]] = relationship(back_populates="flight_instance")

    @property
    def seats_available(self) -> int:
        return self.seats_total - self.seats_sold


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint(
            "status IN ('reserved', 'waitlist', 'flown')", name="ck_reservation_status"
        ),
    )

    id: Mapped[str] = mapped_column(String(16), primary_key=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False)
    flight_instance_id: Mapped[int] = mapped_column(ForeignKey("flight_instances.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    customer: Mapped[Customer] = relationship(back_populates="reservations")
    flight_instance: Mapped[FlightInstance] = relationship(back_populates="reservations")


class MaintenanceRequest(Base):
    __tablename__ = "maintenance_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    plane_id: Mapped[str] = mapped_column(ForeignKey("planes.id"), nullable=False)
    repair_code: Mapped[str] = mapped_column(String(20), nullable=False)
    request_date: Mapped[date] = mapped_column(Date, nullable=False)
    pilot_id: Mapped[str] = mapped_column(ForeignKey("pilots.id"), nullable=False)

    pilot: Mapped[Pilot] = relationship(back_populates="maintenance_requests")


class Repair(Base):
    __tablename__ = "repairs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    plane_id: Mapped[str] = mapped_column(ForeignKey("planes.id"), nullable=False)
    repair_code: Mapped[str] = mapped_column(String(20), nullable=False)
    repair_date: Mapped[date] = mapped_column(Date, nullable=False)
    technician_id: Mapped[str] = mapped_column(ForeignKey("technicians.id"), nullable=False)

    technician: Mapped[Technician] = relationship(back_populates="repairs")


class IdSequence(Base):
    """Counter row handing out the next number of one identifier family."""

    __tablename__ = "id_sequences"

    name: Mapped[str] = mapped_column(String(40), primary_key=True)
    next_value: Mapped[int] = mapped_column(Integer, nullable=False)
