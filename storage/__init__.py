"""SQLite and JSON persistence for the sync queue."""
