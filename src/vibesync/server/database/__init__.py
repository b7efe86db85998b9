"""
Database layer for VibeSync.

Provides the SQLite store for analysis history and notes.
"""


# Lazy imports to avoid circular dependencies
def __getattr__(name: str):
    from vibesync.server.database import database

    return getattr(database, name)


__all__ = [
    # Core
    "init_db",
    "get_connection",
    "set_data_directory",
    "get_data_dir",
    "get_db_path",
    # History
    "insert_history_entry",
    "get_all_history",
    "get_history_entry",
    # Notes
    "insert_note",
    "get_all_notes",
    "get_note",
    "delete_note",
]
