"""
Revezamento — Roster and History Database.

Two SQLite tables in one file: `pessoas` (the live roster, status cached)
and `historico_dias` (append-only daily snapshots). Column names are kept
from the first deployment so existing database files keep working.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from src.data.models import HistoryRecord, Person, SnapshotResult, Status

logger = logging.getLogger(__name__)

# Columns the operator may edit one at a time (see RosterService.update_field)
EDITABLE_COLUMNS = (
    "nome",
    "local",
    "status",
    "liberado",
    "hora_inicial",
    "hora_final",
    "retorno",
    "mensagem",
    "justificativa",
)

# Columns added after the first release; older files are migrated in place
_LATE_COLUMNS = ("hora_inicial_dt", "hora_final_dt", "created_at")


def _connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def _resolve_path(db_path: str | None) -> str:
    if db_path is None:
        from src.config import settings
        db_path = settings.DATABASE_PATH
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return db_path


class RosterDB:
    """SQLite-backed storage for the roster (`pessoas`)."""

    def __init__(self, db_path: str | None = None) -> None:
        self._db_path = _resolve_path(db_path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return _connect(self._db_path)

    def _init_db(self) -> None:
        """Create the pessoas table if it doesn't exist, and migrate schema."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS pessoas (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    nome            TEXT,
                    local           TEXT,
                    status          TEXT DEFAULT '🔴',
                    liberado        TEXT DEFAULT NULL,
                    hora_inicial    TEXT,
                    hora_final      TEXT,
                    retorno         TEXT,
                    mensagem        TEXT,
                    justificativa   TEXT,
                    hora_inicial_dt TEXT,
                    hora_final_dt   TEXT,
                    created_at      TEXT
                )
            """)
            # Migrate existing DBs: add new columns if missing
            existing_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(pessoas)").fetchall()
            }
            for column in _LATE_COLUMNS:
                if column not in existing_cols:
                    conn.execute(f"ALTER TABLE pessoas ADD COLUMN {column} TEXT")
                    logger.info("Column added to pessoas: %s", column)
        logger.debug("Pessoas table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_person(row: sqlite3.Row) -> Person:
        try:
            status = Status(row["status"])
        except ValueError:
            status = Status.PENDING
        return Person(
            id=row["id"],
            name=row["nome"] or "",
            location=row["local"] or "",
            status=status,
            released=row["liberado"],
            start_time=row["hora_inicial"],
            end_time=row["hora_final"],
            return_note=row["retorno"],
            message=row["mensagem"],
            justification=row["justificativa"],
            start_at=row["hora_inicial_dt"],
            end_at=row["hora_final_dt"],
            created_at=row["created_at"],
        )

    def add_person(self, name: str, location: str, created_at: str) -> Person:
        """Insert a new roster entry in the PENDING state."""
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO pessoas (nome, local, status, created_at) VALUES (?, ?, ?, ?)",
                (name, location, Status.PENDING.value, created_at),
            )
            person_id = cursor.lastrowid

        logger.info("Person added: #%d '%s' at '%s'", person_id, name, location)
        return Person(id=person_id, name=name, location=location, created_at=created_at)

    def get_person(self, person_id: int) -> Person | None:
        """Fetch a single roster entry by ID."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM pessoas WHERE id = ?", (person_id,)
            ).fetchone()
        if row is None:
            return None
        return self._row_to_person(row)

    def list_all(self) -> list[Person]:
        """Return the whole roster ordered by ID."""
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM pessoas ORDER BY id ASC").fetchall()
        return [self._row_to_person(r) for r in rows]

    def count(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM pessoas").fetchone()
        return row["total"]

    def list_started_on(self, day: str) -> list[Person]:
        """Roster entries whose full start instant falls on `day` (YYYY-MM-DD)."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM pessoas WHERE hora_inicial_dt LIKE ? ORDER BY hora_inicial_dt ASC",
                (f"{day}%",),
            ).fetchall()
        return [self._row_to_person(r) for r in rows]

    def delete_person(self, person_id: int) -> bool:
        """Permanently delete a roster entry. History is left untouched."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM pessoas WHERE id = ?", (person_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Person #%d deleted", person_id)
        return deleted

    def update_statuses(self, changes: list[tuple[int, Status]]) -> None:
        """Persist recomputed statuses in one transaction."""
        if not changes:
            return
        with self._connect() as conn:
            conn.executemany(
                "UPDATE pessoas SET status = ? WHERE id = ?",
                [(status.value, person_id) for person_id, status in changes],
            )
        logger.debug("Persisted %d status change(s)", len(changes))

    def set_schedule(
        self,
        person_id: int,
        start_time: str,
        end_time: str,
        start_at: str,
        end_at: str,
        status: Status | None = None,
    ) -> bool:
        """Store both the time-of-day pair and the full instants."""
        assignments = "hora_inicial = ?, hora_final = ?, hora_inicial_dt = ?, hora_final_dt = ?"
        params: list = [start_time, end_time, start_at, end_at]
        if status is not None:
            assignments = "status = ?, " + assignments
            params.insert(0, status.value)
        params.append(person_id)

        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE pessoas SET {assignments} WHERE id = ?", params,
            )
        return cursor.rowcount > 0

    def set_end(self, person_id: int, end_time: str, end_at: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE pessoas SET hora_final = ?, hora_final_dt = ? WHERE id = ?",
                (end_time, end_at, person_id),
            )
        return cursor.rowcount > 0

    def update_column(self, person_id: int, column: str, value: str | None) -> bool:
        """Set one whitelisted column verbatim."""
        if column not in EDITABLE_COLUMNS:
            raise ValueError(f"Column {column!r} is not editable")
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE pessoas SET {column} = ? WHERE id = ?", (value, person_id),
            )
        return cursor.rowcount > 0

    def reset_person(self, person_id: int) -> bool:
        """Return one entry to PENDING with no schedule and no message."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE pessoas
                SET status = ?, hora_inicial = NULL, hora_final = NULL,
                    hora_inicial_dt = NULL, hora_final_dt = NULL, mensagem = NULL
                WHERE id = ?
                """,
                (Status.PENDING.value, person_id),
            )
        reset = cursor.rowcount > 0
        if reset:
            logger.info("Person #%d reset", person_id)
        return reset

    def reset_all(self) -> int:
        """Return every entry to PENDING and clear all operator fields."""
        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE pessoas
                SET status = ?, hora_inicial = NULL, hora_final = NULL,
                    hora_inicial_dt = NULL, hora_final_dt = NULL, retorno = NULL,
                    liberado = NULL, mensagem = NULL, justificativa = NULL
                """,
                (Status.PENDING.value,),
            )
        logger.info("Roster reset: %d entries", cursor.rowcount)
        return cursor.rowcount


class HistoryDB:
    """SQLite-backed append-only storage for daily roster snapshots."""

    def __init__(self, db_path: str | None = None) -> None:
        self._db_path = _resolve_path(db_path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return _connect(self._db_path)

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS historico_dias (
                    id            INTEGER PRIMARY KEY AUTOINCREMENT,
                    pessoa_id     INTEGER,
                    data_dia      TEXT,
                    nome          TEXT,
                    local         TEXT,
                    status        TEXT,
                    hora_inicial  TEXT,
                    hora_final    TEXT,
                    mensagem      TEXT,
                    justificativa TEXT,
                    gravado_em    TEXT
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_historico_data ON historico_dias(data_dia)"
            )
        logger.debug("Historico table initialized at %s", self._db_path)

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> HistoryRecord:
        return HistoryRecord(
            id=row["id"],
            person_id=row["pessoa_id"],
            day=row["data_dia"],
            name=row["nome"],
            location=row["local"],
            status=row["status"],
            start_time=row["hora_inicial"],
            end_time=row["hora_final"],
            message=row["mensagem"],
            justification=row["justificativa"],
            recorded_at=row["gravado_em"],
        )

    def save_snapshot(self, day: str, recorded_at: str) -> SnapshotResult:
        """Copy the whole roster into history for `day`, at most once.

        The pending check, the already-recorded check and the inserts run in
        one immediate transaction, so two concurrent callers cannot both
        write a snapshot for the same day. Requires the pessoas table
        (RosterDB) in the same database file.
        """
        conn = self._connect()
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")

            pending = conn.execute(
                "SELECT COUNT(*) AS c FROM pessoas WHERE status = ?",
                (Status.PENDING.value,),
            ).fetchone()["c"]
            if pending > 0:
                conn.execute("ROLLBACK")
                return SnapshotResult(
                    saved=False, reason="pending entries remain", day=day, pending=pending,
                )

            existing = conn.execute(
                "SELECT COUNT(*) AS c FROM historico_dias WHERE data_dia = ?", (day,),
            ).fetchone()["c"]
            if existing > 0:
                conn.execute("ROLLBACK")
                return SnapshotResult(
                    saved=False, reason="already recorded", day=day, existing=existing,
                )

            rows = conn.execute("SELECT * FROM pessoas ORDER BY id ASC").fetchall()
            conn.executemany(
                """
                INSERT INTO historico_dias
                    (pessoa_id, data_dia, nome, local, status, hora_inicial,
                     hora_final, mensagem, justificativa, gravado_em)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        r["id"], day, r["nome"], r["local"], r["status"],
                        r["hora_inicial"], r["hora_final"], r["mensagem"],
                        r["justificativa"], recorded_at,
                    )
                    for r in rows
                ],
            )
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

        logger.info("Snapshot saved for %s: %d record(s)", day, len(rows))
        return SnapshotResult(saved=True, reason="saved", day=day, count=len(rows))

    def list_for_day(self, day: str) -> list[HistoryRecord]:
        """Snapshot rows captured for `day`, ordered by name."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM historico_dias WHERE data_dia = ? ORDER BY nome ASC",
                (day,),
            ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def list_since(self, first_day: str) -> list[HistoryRecord]:
        """Snapshot rows from `first_day` onwards, newest day first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM historico_dias
                WHERE data_dia >= ?
                ORDER BY data_dia DESC, nome ASC
                """,
                (first_day,),
            ).fetchall()
        return [self._row_to_record(r) for r in rows]
