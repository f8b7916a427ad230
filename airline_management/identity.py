"""Authenticated actors of the console, one variant per role."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    PILOT = "pilot"
    TECHNICIAN = "technician"

    @classmethod
    def parse(cls, text: str) -> "Role":
        """Accept a role name or its initial, case-insensitively."""

        value = text.strip().lower()
        for role in cls:
            if value in (role.value, role.value[0]):
                return role
        raise ValueError(f"Unknown role '{text}'. Choose customer, pilot or technician.")


@dataclass(frozen=True)
class CustomerIdentity:
    id: int
    display_name: str = ""
    role: Role = Role.CUSTOMER


@dataclass(frozen=True)
class PilotIdentity:
    id: str
    display_name: str = ""
    role: Role = Role.PILOT


@dataclass(frozen=True)
class TechnicianIdentity:
    id: str
    display_name: str = ""
    role: Role = Role.TECHNICIAN


Identity = Union[CustomerIdentity, PilotIdentity, TechnicianIdentity]
