"""Maintenance requests filed by pilots and repairs logged by technicians."""
from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .identity import PilotIdentity, TechnicianIdentity
from .models import MaintenanceRequest, Plane, Repair
from .sequences import MAINTENANCE_REQUEST, REPAIR, next_value

logger = logging.getLogger(__name__)


def _plane(session: Session, plane_id: str) -> Plane:
    plane = session.get(Plane, plane_id.strip())
    if plane is None:
        raise LookupError(f"Plane {plane_id} does not exist")
    return plane


def submit_maintenance_request(
    session: Session,
    *,
    pilot: PilotIdentity,
    plane_id: str,
    repair_code: str,
    request_date: Optional[date] = None,
) -> MaintenanceRequest:
    plane = _plane(session, plane_id)
    request = MaintenanceRequest(
        id=next_value(session, MAINTENANCE_REQUEST),
        plane_id=plane.id,
        repair_code=repair_code.strip(),
        request_date=request_date or date.today(),
        pilot_id=pilot.id,
    )
    session.add(request)
    session.flush()
    logger.info("maintenance request %d for plane %s by %s", request.id, plane.id, pilot.id)
    return request


def log_repair(
    session: Session,
    *,
    technician: TechnicianIdentity,
    plane_id: str,
    repair_code: str,
    repair_date: Optional[date] = None,
) -> Repair:
    """Record a repair and move the plane's last repair date forward."""

    plane = _plane(session, plane_id)
    repair = Repair(
        id=next_value(session, REPAIR),
        plane_id=plane.id,
        repair_code=repair_code.strip(),
        repair_date=repair_date or date.today(),
        technician_id=technician.id,
    )
    session.add(repair)
    if plane.last_repair_date is None or plane.last_repair_date < repair.repair_date:
        plane.last_repair_date = repair.repair_date
    session.flush()
    logger.info("repair %d on plane %s by %s", repair.id, plane.id, technician.id)
    return repair


def requests_by_pilot(session: Session, pilot_id: str) -> List[dict]:
    stmt = (
        select(MaintenanceRequest)
        .where(MaintenanceRequest.pilot_id == pilot_id.strip())
        .order_by(MaintenanceRequest.request_date, MaintenanceRequest.id)
    )
    return [
        {
            "request": request.id,
            "plane": request.plane_id,
            "code": request.repair_code,
            "date": request.request_date,
        }
        for request in session.scalars(stmt)
    ]
