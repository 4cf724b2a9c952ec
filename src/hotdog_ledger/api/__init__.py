"""FastAPI application: Discord webhook plus read-only query API."""
