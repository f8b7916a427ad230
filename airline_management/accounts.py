"""Account creation and login for customers, pilots and technicians."""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .booking import MalformedInputError
from .identity import (
    CustomerIdentity,
    Identity,
    PilotIdentity,
    Role,
    TechnicianIdentity,
)
from .models import Customer, Pilot, Technician
from .sequences import CUSTOMER, PILOT, TECHNICIAN, next_identifier, next_value

logger = logging.getLogger(__name__)


def create_customer(
    session: Session,
    *,
    first_name: str,
    last_name: str,
    password: str,
    gender: Optional[str] = None,
    dob: Optional[date] = None,
    address: Optional[str] = None,
    phone: Optional[str] = None,
    zip_code: Optional[str] = None,
) -> CustomerIdentity:
    customer = Customer(
        id=next_value(session, CUSTOMER),
        first_name=first_name,
        last_name=last_name,
        password=password,
        gender=gender,
        dob=dob,
        address=address,
        phone=phone,
        zip=zip_code,
    )
    session.add(customer)
    session.flush()
    logger.info("created customer %d", customer.id)
    return CustomerIdentity(id=customer.id, display_name=customer.full_name)


def create_pilot(session: Session, *, name: str, password: str) -> PilotIdentity:
    pilot = Pilot(id=next_identifier(session, PILOT), name=name, password=password)
    session.add(pilot)
    session.flush()
    logger.info("created pilot %s", pilot.id)
    return PilotIdentity(id=pilot.id, display_name=pilot.name)


def create_technician(session: Session, *, name: str, password: str) -> TechnicianIdentity:
    technician = Technician(id=next_identifier(session, TECHNICIAN), name=name, password=password)
    session.add(technician)
    session.flush()
    logger.info("created technician %s", technician.id)
    return TechnicianIdentity(id=technician.id, display_name=technician.name)


def authenticate(
    session: Session,
    role: Role,
    identifier: str,
    password: str,
) -> Optional[Identity]:
    """Return the identity matching ``identifier``/``password`` for ``role``, if any."""

    identifier = identifier.strip()
    if role is Role.CUSTOMER:
        try:
            customer_id = int(identifier)
        except ValueError as exc:
            raise MalformedInputError("Customer ID must be a number.") from exc
        customer = session.scalars(
            select(Customer).where(Customer.id == customer_id, Customer.password == password)
        ).one_or_none()
        if customer is None:
            return None
        return CustomerIdentity(id=customer.id, display_name=customer.full_name)

    if role is Role.PILOT:
        pilot = session.scalars(
            select(Pilot).where(Pilot.id == identifier, Pilot.password == password)
        ).one_or_none()
        return PilotIdentity(id=pilot.id, display_name=pilot.name) if pilot else None

    technician = session.scalars(
        select(Technician).where(Technician.id == identifier, Technician.password == password)
    ).one_or_none()
    return TechnicianIdentity(id=technician.id, display_name=technician.name) if technician else None
