"""
SQLite storage for analysis history and session notes.

Single-file database layer for the VibeSync server.
Handles:
- Analysis history rows (denormalized columns plus the full JSON record)
- Free-text notes with an optional link to an analysis
- Schema migrations through Alembic
"""

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

logger = logging.getLogger(__name__)

# Path to migrations directory
MIGRATIONS_DIR = Path(__file__).parent / "migrations"

DB_FILENAME = "vibesync.db"

# Default paths - can be overridden via environment or config
_data_dir: Optional[Path] = None
_db_path: Optional[Path] = None


def set_data_directory(path: Path) -> None:
    """Set the data directory for the database file."""
    global _data_dir, _db_path
    _data_dir = Path(path)
    _db_path = _data_dir / "database" / DB_FILENAME
    logger.info(f"Database data directory set to: {path}")


def get_data_dir() -> Path:
    """Get the data directory, creating if needed."""
    global _data_dir
    if _data_dir is None:
        env_data_dir = os.environ.get("DATA_DIR")
        _data_dir = Path(env_data_dir) if env_data_dir else Path.cwd() / "data"

    _data_dir.mkdir(parents=True, exist_ok=True)
    return _data_dir


def get_db_path() -> Path:
    """Get database path, creating directories if needed."""
    global _db_path
    if _db_path is None:
        _db_path = get_data_dir() / "database" / DB_FILENAME
    _db_path.parent.mkdir(parents=True, exist_ok=True)
    return _db_path


@contextmanager
def get_connection() -> Generator[sqlite3.Connection, None, None]:
    """Get a database connection with context manager.

    - 30 second timeout waiting for locks
    - 5 second busy timeout for retry on SQLITE_BUSY
    - Usable from the threadpool FastAPI runs sync work in
    """
    conn = sqlite3.connect(
        get_db_path(),
        timeout=30.0,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA busy_timeout=5000")
    try:
        yield conn
    finally:
        conn.close()


def run_migrations() -> bool:
    """
    Run pending Alembic migrations.

    Returns:
        True if migrations ran successfully, False otherwise
    """
    try:
        from alembic import command
        from alembic.config import Config

        db_path = get_db_path()
        logger.info(f"Running database migrations for {db_path}")

        alembic_cfg = Config()
        alembic_cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
        alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")

        command.upgrade(alembic_cfg, "head")

        logger.info("Database migrations completed successfully")
        return True

    except Exception as e:
        logger.error(f"Migration error: {e}", exc_info=True)
        return False


def _assert_schema_sanity(conn: sqlite3.Connection) -> None:
    """
    Validate that required tables/columns exist after migrations.

    Raises RuntimeError if the database schema is not compatible.
    """
    required_schema: dict[str, set[str]] = {
        "history": {"id", "timestamp", "mood", "detectedGenre", "tempo", "data"},
        "notes": {"id", "timestamp", "content", "relatedAnalysisId"},
    }

    cursor = conn.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in cursor.fetchall()}

    missing_tables = [name for name in required_schema if name not in tables]
    if missing_tables:
        raise RuntimeError(
            "Database schema validation failed; missing tables: "
            + ", ".join(sorted(missing_tables))
        )

    for table_name, required_columns in required_schema.items():
        cursor.execute(f"PRAGMA table_info({table_name})")
        existing_columns = {row[1] for row in cursor.fetchall()}
        missing_columns = sorted(required_columns - existing_columns)
        if missing_columns:
            raise RuntimeError(
                f"Database schema validation failed; table '{table_name}' is missing "
                f"columns: {', '.join(missing_columns)}"
            )


def init_db() -> None:
    """Initialize the database schema.

    This function:
    1. Ensures the database directory exists
    2. Runs pending Alembic migrations
    3. Validates required schema objects exist
    4. Enables WAL journaling
    """
    logger.info(f"Initializing database at {get_db_path()}")

    # Migrations are required. Do not silently continue on failure.
    if not run_migrations():
        raise RuntimeError(
            "Database migration failed; refusing to start with potentially invalid schema"
        )

    with get_connection() as conn:
        _assert_schema_sanity(conn)

        cursor = conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        journal_mode = cursor.fetchone()[0]
        cursor.execute("PRAGMA synchronous=NORMAL")
        logger.info(f"Database initialized successfully (journal_mode={journal_mode})")


# =============================================================================
# History operations
# =============================================================================


def _history_row_to_record(row: sqlite3.Row) -> Dict[str, Any]:
    """Decode a history row.

    The JSON blob carries the analysis content; id and timestamp columns
    are authoritative for identity and ordering.
    """
    record = json.loads(row["data"])
    record["id"] = row["id"]
    record["timestamp"] = row["timestamp"]
    return record


def insert_history_entry(entry: Dict[str, Any]) -> bool:
    """
    Store one analysis.

    The mood/genre/tempo columns are filled from the same record that is
    serialized into ``data``, so they never diverge from the blob.

    Returns:
        True if stored, False if an entry with the same id already exists
    """
    data = json.dumps(entry, ensure_ascii=False)
    with get_connection() as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO history (id, timestamp, mood, detectedGenre, tempo, data)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry["id"],
                    entry["timestamp"],
                    entry.get("mood"),
                    entry.get("detectedGenre"),
                    entry.get("tempo"),
                    data,
                ),
            )
        except sqlite3.IntegrityError:
            logger.warning(f"History entry {entry['id']} already exists")
            return False
        conn.commit()
        return True


def get_all_history() -> List[Dict[str, Any]]:
    """Get all analyses, newest first."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM history ORDER BY timestamp DESC, rowid DESC")
        return [_history_row_to_record(row) for row in cursor.fetchall()]


def get_history_entry(entry_id: str) -> Optional[Dict[str, Any]]:
    """Get a single analysis by id."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM history WHERE id = ?", (entry_id,))
        row = cursor.fetchone()
        return _history_row_to_record(row) if row else None


# =============================================================================
# Note operations
# =============================================================================


def insert_note(note: Dict[str, Any]) -> bool:
    """
    Store one note.

    Returns:
        True if stored, False if a note with the same id already exists
    """
    with get_connection() as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO notes (id, timestamp, content, relatedAnalysisId)
                VALUES (?, ?, ?, ?)
                """,
                (
                    note["id"],
                    note["timestamp"],
                    note["content"],
                    note.get("relatedAnalysisId"),
                ),
            )
        except sqlite3.IntegrityError:
            logger.warning(f"Note {note['id']} already exists")
            return False
        conn.commit()
        return True


def get_all_notes() -> List[Dict[str, Any]]:
    """Get all notes, newest first."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM notes ORDER BY timestamp DESC, rowid DESC")
        return [dict(row) for row in cursor.fetchall()]


def get_note(note_id: str) -> Optional[Dict[str, Any]]:
    """Get a note by id."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM notes WHERE id = ?", (note_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def delete_note(note_id: str) -> bool:
    """Delete exactly one note. Returns True if a row was removed."""
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        conn.commit()
        return cursor.rowcount > 0
