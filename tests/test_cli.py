from __future__ import annotations

from sqlalchemy import select

from airline_management.cli import Menu, main, parse_args, render_table
from airline_management.database import create_session_factory
from airline_management.models import Customer, FlightInstance, Reservation

from factories import add_flight_instance, make_session_factory


def scripted(answers):
    remaining = iter(answers)
    prompts = []

    def read(prompt):
        prompts.append(prompt)
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    return read, prompts


def run_menu(session_factory, answers):
    read, prompts = scripted(answers)
    output = []
    Menu(session_factory, read=read, write=output.append).run()
    return "\n".join(output), prompts


def test_customer_signs_up_logs_in_and_books():
    session_factory = make_session_factory()
    with session_factory() as session:
        add_flight_instance(session, instance_id=1, seats_total=1)
        session.commit()

    output, prompts = run_menu(
        session_factory,
        [
            "1", "Ada", "Lovelace", "engine", "C", "F", "1990-12-10", "", "", "02134",
            "2", "customer", "1", "engine",
            "14", "1",
            "14", "1", "y",
            "15",
            "20",
            "9",
        ],
    )

    assert "Customer account created successfully for Ada Lovelace with ID: 1" in output
    assert "Welcome, Ada Lovelace!" in output
    assert "Reservation R0001 created with status 'reserved'." in output
    assert "Reservation R0002 created with status 'waitlist'." in output
    assert any("Join the waitlist?" in prompt for prompt in prompts)
    with session_factory() as session:
        assert session.get(FlightInstance, 1).seats_sold == 1
        statuses = [row.status for row in session.scalars(select(Reservation).order_by(Reservation.id))]
    assert statuses == ["reserved", "waitlist"]


def test_menu_reports_errors_and_keeps_running():
    session_factory = make_session_factory()
    with session_factory() as session:
        add_flight_instance(session, instance_id=1, seats_total=1, seats_sold=1)
        session.commit()

    output, _ = run_menu(
        session_factory,
        [
            "x",
            "1", "Ada", "Lovelace", "engine", "Q",
            "1", "Ada", "Lovelace", "engine", "C", "", "", "", "", "",
            "2", "customer", "abc", "engine",
            "2", "customer", "1", "engine",
            "14", "404",
            "14", "nope",
            "14", "1", "n",
            "16",
            "2", "pretend", "2025-01-01",
            "20",
        ],
    )

    assert "Your input is invalid!" in output
    assert "Error: Unknown role 'Q'" in output
    assert "Error: Customer ID must be a number." in output
    assert "Error: Flight instance 404 does not exist" in output
    assert "Error: Flight instance id must be a number" in output
    assert "waitlist was declined" in output
    assert "Unrecognized choice!" in output
    assert "Error: Flight pretend does not fly on 2025-01-01" in output
    with session_factory() as session:
        assert session.scalars(select(Reservation)).all() == []


def test_pilot_and_technician_menus_only_show_their_actions():
    session_factory = make_session_factory()
    with session_factory() as session:
        add_flight_instance(session, instance_id=1, seats_total=10)
        session.commit()

    output, _ = run_menu(
        session_factory,
        [
            "1", "Amelia", "Earhart", "electra", "P",
            "1", "Grace", "Hopper", "cobol", "T",
            "2", "pilot", "P001", "electra",
            "16", "PL001", "ENG-01", "2025-01-05",
            "17",
            "14",
            "20",
            "2", "technician", "T001", "cobol",
            "18", "PL001", "ENG-01", "2025-01-06",
            "19", "P001",
            "7", "PL001",
            "20",
            "9",
        ],
    )

    assert "Pilot account created successfully for Amelia Earhart with ID: P001" in output
    assert "Technician account created successfully for Grace Hopper with ID: T001" in output
    assert "Maintenance request 1 filed for plane PL001." in output
    assert "Repair 1 logged for plane PL001." in output
    assert "16. Maintenance Request" in output
    assert "18. Log Repair" in output
    assert "14. Book Flight" not in output
    assert "2025-01-06" in output


def test_render_table_uses_github_format():
    table = render_table([{"flight": "AM100", "seats": 3}])
    assert table.splitlines()[0].startswith("| flight")
    assert render_table([]) == "(no rows)"


def test_parse_args_defaults_to_menu():
    assert parse_args([]).command == "menu"
    args = parse_args(["--db-url", "sqlite://", "load-csv", "data"])
    assert args.command == "load-csv"
    assert str(args.directory) == "data"


def test_main_initialises_and_seeds_database(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("AIRLINE_DB_URL", raising=False)
    db_url = f"sqlite+pysqlite:///{tmp_path / 'cli.db'}"

    assert main(["--db-url", db_url, "init-db"]) == 0
    assert main(["--db-url", db_url, "seed", "--flights", "2", "--days", "2",
                 "--customers", "5", "--bookings", "6"]) == 0
    out = capsys.readouterr().out
    assert "Schema ready" in out
    assert "flight_instances" in out

    _, session_factory = create_session_factory(db_url)
    with session_factory() as session:
        assert len(session.scalars(select(Customer)).all()) == 5


def test_main_reports_missing_csv_directory(tmp_path, capsys):
    db_url = f"sqlite+pysqlite:///{tmp_path / 'cli.db'}"
    assert main(["--db-url", db_url, "load-csv", str(tmp_path / "missing")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_database_url_comes_from_environment(tmp_path, monkeypatch, capsys):
    db_file = tmp_path / "env.db"
    monkeypatch.setenv("AIRLINE_DB_URL", f"sqlite+pysqlite:///{db_file}")
    assert main(["init-db"]) == 0
    assert db_file.exists()
