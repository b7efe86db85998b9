"""Initial schema: history and notes tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-18

Uses IF NOT EXISTS so a database created by an earlier build of the
backend is stamped without being rebuilt.
"""

from typing import Sequence, Union

from alembic import op
from sqlalchemy import text

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create history and notes tables if they don't exist."""
    conn = op.get_bind()

    # One row per analysis; data holds the full JSON record
    conn.execute(
        text("""
        CREATE TABLE IF NOT EXISTS history (
            id TEXT PRIMARY KEY,
            timestamp INTEGER,
            mood TEXT,
            detectedGenre TEXT,
            tempo TEXT,
            data TEXT
        )
    """)
    )

    conn.execute(
        text("""
        CREATE TABLE IF NOT EXISTS notes (
            id TEXT PRIMARY KEY,
            timestamp INTEGER,
            content TEXT,
            relatedAnalysisId TEXT
        )
    """)
    )

    conn.execute(
        text("CREATE INDEX IF NOT EXISTS idx_history_timestamp ON history(timestamp)")
    )
    conn.execute(
        text("CREATE INDEX IF NOT EXISTS idx_notes_timestamp ON notes(timestamp)")
    )


def downgrade() -> None:
    """Drop all tables."""
    conn = op.get_bind()
    conn.execute(text("DROP INDEX IF EXISTS idx_notes_timestamp"))
    conn.execute(text("DROP INDEX IF EXISTS idx_history_timestamp"))
    conn.execute(text("DROP TABLE IF EXISTS notes"))
    conn.execute(text("DROP TABLE IF EXISTS history"))
