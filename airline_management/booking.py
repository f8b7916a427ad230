"""Seat booking: locked seat-ledger update plus reservation insert, atomically."""
from __future__ import annotations

import logging
from typing import Callable, Union

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .identity import CustomerIdentity
from .models import FlightInstance, Reservation
from .sequences import RESERVATION, next_identifier

logger = logging.getLogger(__name__)

WaitlistPrompt = Callable[[FlightInstance], bool]


class BookingError(RuntimeError):
    """Base class for every way a booking attempt can fail."""


class FlightNotFoundError(BookingError):
    """Raised when the requested flight instance does not exist."""


class BookingDeclinedError(BookingError):
    """Raised when the flight is full and the customer refuses the waitlist."""


class MalformedInputError(BookingError, ValueError):
    """Raised when an identifier typed by the user cannot be parsed."""


class PersistenceError(BookingError):
    """Raised when the database fails during the booking transaction."""


def parse_flight_instance_id(value: Union[int, str]) -> int:
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise MalformedInputError(
            f"Flight instance id must be a number, got {value!r}"
        ) from exc


def decline_waitlist(instance: FlightInstance) -> bool:
    return False


def lock_flight_instance(session: Session, flight_instance_id: int) -> FlightInstance | None:
    """Read the flight instance with ``FOR UPDATE`` so concurrent bookings queue up."""

    stmt = (
        select(FlightInstance)
        .where(FlightInstance.id == flight_instance_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return session.scalars(stmt).one_or_none()


def claim_seat(session: Session, instance: FlightInstance) -> bool:
    """Increment ``seats_sold`` unless the flight is already full.

    The ``seats_sold < seats_total`` guard keeps the ledger correct on
    backends that ignore ``FOR UPDATE``.
    """

    result = session.execute(
        update(FlightInstance)
        .where(
            FlightInstance.id == instance.id,
            FlightInstance.seats_sold < FlightInstance.seats_total,
        )
        .values(seats_sold=FlightInstance.seats_sold + 1)
        .execution_options(synchronize_session=False)
    )
    session.expire(instance)
    return result.rowcount == 1


def _reserve(
    session: Session,
    customer: CustomerIdentity,
    flight_instance_id: int,
    confirm_waitlist: WaitlistPrompt,
) -> Reservation:
    instance = lock_flight_instance(session, flight_instance_id)
    if instance is None:
        raise FlightNotFoundError(f"Flight instance {flight_instance_id} does not exist")

    status = None
    if instance.seats_available > 0:
        if claim_seat(session, instance):
            status = "reserved"
        else:
            logger.info("flight instance %d filled up while booking", flight_instance_id)

    if status is None:
        if not confirm_waitlist(instance):
            raise BookingDeclinedError(
                f"Flight instance {flight_instance_id} is full and the waitlist was declined"
            )
        status = "waitlist"

    reservation = Reservation(
        id=next_identifier(session, RESERVATION),
        customer_id=customer.id,
        flight_instance_id=flight_instance_id,
        status=status,
    )
    session.add(reservation)
    session.flush()
    return reservation


def book_flight(
    session: Session,
    *,
    customer: CustomerIdentity,
    flight_instance_id: Union[int, str],
    confirm_waitlist: WaitlistPrompt = decline_waitlist,
) -> Reservation:
    """Book a seat for ``customer`` and commit, or roll back and raise ``BookingError``.

    A free seat yields a ``reserved`` reservation and one more seat sold. A
    full flight asks ``confirm_waitlist``; accepting yields a ``waitlist``
    reservation with the seat counters untouched, declining raises
    ``BookingDeclinedError``. The session never holds an open transaction
    once this returns or raises.
    """

    instance_id = parse_flight_instance_id(flight_instance_id)
    try:
        reservation = _reserve(session, customer, instance_id, confirm_waitlist)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.warning("booking of flight instance %d rolled back: %s", instance_id, exc)
        raise PersistenceError(f"Database error while booking: {exc}") from exc
    except BaseException:
        session.rollback()
        raise

    logger.info(
        "reservation %s (%s) for customer %d on flight instance %d",
        reservation.id,
        reservation.status,
        customer.id,
        instance_id,
    )
    return reservation
