"""
Revezamento — Operator CLI.

Thin front end over RosterService. Every command takes the caller's role,
checks it against the operation, and prints a JSON result.

Exit codes: 0 ok, 1 storage failure, 2 invalid input, 3 unauthorized.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Callable, Optional

import typer

from src.config import settings
from src.core.access import require_role
from src.core.errors import InvalidInputError, StorageError, UnauthorizedError
from src.core.roster_service import RosterService, create_roster_service

app = typer.Typer(help="Revezamento roster CLI.")

_ROLE_OPTION = typer.Option(
    None, "--role", "-r", help="Caller role (inspetoria, ccp, turma). Defaults to REVEZAMENTO_ROLE.",
)
_DB_OPTION = typer.Option(None, "--db", help="SQLite file (defaults to DATABASE_PATH).")


def _echo(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


def _run(
    operation: str,
    role: Optional[str],
    db: Optional[str],
    action: Callable[[RosterService], Any],
) -> None:
    """Authorize, execute and render one operation, mapping errors to exit codes."""
    role = role or settings.DEFAULT_ROLE or None
    try:
        require_role(role, operation)
        result = action(create_roster_service(db_path=db))
    except UnauthorizedError as exc:
        _echo({"success": False, "error": str(exc)})
        raise typer.Exit(code=3)
    except InvalidInputError as exc:
        _echo({"success": False, "error": str(exc)})
        raise typer.Exit(code=2)
    except StorageError as exc:
        _echo({"success": False, "error": str(exc)})
        raise typer.Exit(code=1)
    _echo({"success": True, "role": role, **result})


def _done(operation: Callable[..., None], *args: Any) -> dict:
    operation(*args)
    return {}


@app.command("list")
def list_roster(role: Optional[str] = _ROLE_OPTION, db: Optional[str] = _DB_OPTION) -> None:
    """Show the roster with statuses recomputed from the clock."""
    _run("get_roster", role, db, lambda svc: {
        "pessoas": [asdict(p) for p in svc.get_roster()],
    })


@app.command("full")
def full_roster(role: Optional[str] = _ROLE_OPTION, db: Optional[str] = _DB_OPTION) -> None:
    """Show the roster exactly as stored."""
    _run("get_roster_raw", role, db, lambda svc: {
        "pessoas": [asdict(p) for p in svc.get_roster_raw()],
    })


@app.command("count")
def count(role: Optional[str] = _ROLE_OPTION, db: Optional[str] = _DB_OPTION) -> None:
    """Show how many people are on the roster."""
    _run("count_people", role, db, lambda svc: {"total": svc.count_people()})


@app.command("add")
def add(
    name: str = typer.Argument(..., help="Person's name."),
    location: str = typer.Option("", "--location", "-l", help="Fixed post."),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Add a person to the roster."""
    _run("add_person", role, db, lambda svc: {"id": svc.add_person(name, location).id})


@app.command("delete")
def delete(
    person_id: int = typer.Argument(...),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Remove a person from the roster. History is kept."""
    _run("delete_person", role, db, lambda svc: _done(svc.delete_person, person_id))


@app.command("start")
def start(
    person_id: int = typer.Argument(...),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Start a person's shift now."""
    _run("start_person", role, db, lambda svc: {
        "snapshot": asdict(svc.start_person(person_id)),
    })


@app.command("edit")
def edit(
    person_id: int = typer.Argument(...),
    start_time: str = typer.Argument(..., help="New start time, HH:MM."),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Reschedule a person's shift to start today at HH:MM."""
    _run("edit_schedule", role, db, lambda svc: {
        "snapshot": asdict(svc.edit_schedule(person_id, start_time)),
    })


@app.command("update")
def update(
    person_id: int = typer.Argument(...),
    column: str = typer.Argument(..., help="Column name, e.g. mensagem or hora_final."),
    value: Optional[str] = typer.Argument(None),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Edit a single roster column."""
    def action(svc: RosterService) -> dict:
        snapshot = svc.update_field(person_id, column, value)
        return {"snapshot": asdict(snapshot) if snapshot else None}

    _run("update_field", role, db, action)


@app.command("reset")
def reset(
    person_id: int = typer.Argument(...),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Put one person back to pending."""
    _run("reset_person", role, db, lambda svc: _done(svc.reset_person, person_id))


@app.command("reset-all")
def reset_all(role: Optional[str] = _ROLE_OPTION, db: Optional[str] = _DB_OPTION) -> None:
    """Put everyone back to pending and clear operator notes."""
    _run("reset_all", role, db, lambda svc: _done(svc.reset_all))


@app.command("history")
def history(
    day: str = typer.Argument(..., help="Civil date, YYYY-MM-DD."),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Show the snapshot recorded for a day."""
    _run("get_history_for_date", role, db, lambda svc: {
        "data": day,
        "registros": [asdict(r) for r in svc.get_history_for_date(day)],
    })


@app.command("history-recent")
def history_recent(
    days: Optional[int] = typer.Argument(
        None, help="How many days back, today included. Defaults to HISTORY_DEFAULT_DAYS.",
    ),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Show snapshots of the last N days."""
    _run("get_history_since", role, db, lambda svc: {
        "dias": svc.history_window(days),
        "registros": [asdict(r) for r in svc.get_history_since(days)],
    })


@app.command("report")
def report(
    day: str = typer.Argument(..., help="Civil date, YYYY-MM-DD."),
    role: Optional[str] = _ROLE_OPTION,
    db: Optional[str] = _DB_OPTION,
) -> None:
    """Show a day's snapshot, or live rows started that day if none was taken."""
    def action(svc: RosterService) -> dict:
        result = svc.report_for_date(day)
        return {
            "data": result.day,
            "fonte": result.source,
            "registros": [asdict(r) for r in result.records],
        }

    _run("report_for_date", role, db, action)


def main() -> None:
    """Entry point: configure logging and dispatch the command."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
