"""SQLite persistence for the hot dog ledger."""
