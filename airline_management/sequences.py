"""Identifier formats and the counter-backed identifier allocator.

Every identifier family (customers, pilots, reservations, ...) owns one row in
``id_sequences``. Claiming a number is a single ``UPDATE ... SET next_value =
next_value + 1`` which holds the row's write lock until the surrounding
transaction ends, so two sessions can never claim the same number. A missing
counter row is seeded from the highest identifier already stored in the
family's table.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Tuple

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .models import (
    Customer,
    IdSequence,
    MaintenanceRequest,
    Pilot,
    Repair,
    Reservation,
    Technician,
)

logger = logging.getLogger(__name__)


class AllocationError(ValueError):
    """Raised when a stored identifier does not match its family's format."""


@dataclass(frozen=True)
class IdFormat:
    """Textual layout of one identifier family: ``prefix`` + zero-padded number."""

    name: str
    prefix: str = ""
    width: int = 0

    def format(self, value: int) -> str:
        if value < 1:
            raise ValueError(f"{self.name} identifiers start at 1, got {value}")
        # zfill never truncates, so numbers past the padding width widen the field.
        return f"{self.prefix}{str(value).zfill(self.width)}"

    def parse(self, text: str) -> int:
        match = re.fullmatch(rf"{re.escape(self.prefix)}(\d+)", str(text).strip())
        if not match:
            raise AllocationError(f"{text!r} is not a valid {self.name} identifier")
        return int(match.group(1))


CUSTOMER = IdFormat("customer")
PILOT = IdFormat("pilot", "P", 3)
TECHNICIAN = IdFormat("technician", "T", 3)
RESERVATION = IdFormat("reservation", "R", 4)
MAINTENANCE_REQUEST = IdFormat("maintenance_request")
REPAIR = IdFormat("repair")

FAMILIES: Tuple[IdFormat, ...] = (
    CUSTOMER,
    PILOT,
    TECHNICIAN,
    RESERVATION,
    MAINTENANCE_REQUEST,
    REPAIR,
)

_ID_COLUMNS: Dict[str, object] = {
    CUSTOMER.name: Customer.id,
    PILOT.name: Pilot.id,
    TECHNICIAN.name: Technician.id,
    RESERVATION.name: Reservation.id,
    MAINTENANCE_REQUEST.name: MaintenanceRequest.id,
    REPAIR.name: Repair.id,
}


def highest_existing(session: Session, family: IdFormat) -> int:
    """Return the largest numeric suffix stored for ``family`` (0 when empty).

    Identifiers that do not match the family format are skipped with a
    warning rather than aborting allocation.
    """

    highest = 0
    for raw in session.scalars(select(_ID_COLUMNS[family.name])):
        if isinstance(raw, int):
            value = raw
        else:
            try:
                value = family.parse(raw)
            except AllocationError as exc:
                logger.warning("ignoring identifier while seeding %s: %s", family.name, exc)
                continue
        highest = max(highest, value)
    return highest


def ensure_sequences(session: Session) -> None:
    """Create missing counter rows and move lagging ones past stored identifiers."""

    existing = {row.name: row for row in session.scalars(select(IdSequence))}
    for family in FAMILIES:
        floor = highest_existing(session, family) + 1
        sequence = existing.get(family.name)
        if sequence is None:
            session.add(IdSequence(name=family.name, next_value=floor))
        elif sequence.next_value < floor:
            logger.info("advancing %s sequence from %d to %d", family.name, sequence.next_value, floor)
            sequence.next_value = floor
    session.flush()


def next_value(session: Session, family: IdFormat) -> int:
    """Claim the next number of ``family`` inside the session's transaction."""

    result = session.execute(
        update(IdSequence)
        .where(IdSequence.name == family.name)
        .values(next_value=IdSequence.next_value + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        claimed = highest_existing(session, family) + 1
        logger.info("seeding %s sequence at %d", family.name, claimed)
        session.add(IdSequence(name=family.name, next_value=claimed + 1))
        session.flush()
        return claimed
    following = session.scalar(select(IdSequence.next_value).where(IdSequence.name == family.name))
    return following - 1


def next_identifier(session: Session, family: IdFormat) -> str:
    return family.format(next_value(session, family))
