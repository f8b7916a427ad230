"""Airline management console package."""
from .accounts import authenticate, create_customer, create_pilot, create_technician
from .booking import (
    BookingDeclinedError,
    BookingError,
    FlightNotFoundError,
    MalformedInputError,
    PersistenceError,
    book_flight,
)
from .cli import main as cli_main
from .database import create_session_factory, init_db, session_scope
from .dataset import generate_sample_data, load_csv_directory
from .identity import CustomerIdentity, PilotIdentity, Role, TechnicianIdentity

__all__ = [
    "BookingDeclinedError",
    "BookingError",
    "CustomerIdentity",
    "FlightNotFoundError",
    "MalformedInputError",
    "PersistenceError",
    "PilotIdentity",
    "Role",
    "TechnicianIdentity",
    "authenticate",
    "book_flight",
    "cli_main",
    "create_customer",
    "create_pilot",
    "create_session_factory",
    "create_technician",
    "generate_sample_data",
    "init_db",
    "load_csv_directory",
    "session_scope",
]
