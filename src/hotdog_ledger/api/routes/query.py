"""Read-only ledger and statistics endpoints for external dashboards."""

import logging

from fastapi import APIRouter
from fastapi.responses import FileResponse, JSONResponse

from hotdog_ledger.api.models import ErrorResponse, HotdogEvent, HotdogTotal, StatsResponse
from hotdog_ledger.db import events_repo
from hotdog_ledger.db.connection import get_db_path
from hotdog_ledger.stats.engine import StatisticsEngine

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "hotdog-data.db"


def router(stats: StatisticsEngine) -> APIRouter:
    """Build the query router with access to the statistics engine."""
    api = APIRouter(prefix="/api")

    @api.get("/hotdog-totals", response_model=list[HotdogTotal])
    def hotdog_totals():
        """Every subject's total, highest first (subject id breaks ties)."""
        return [row.to_dict() for row in events_repo.list_totals()]

    @api.get("/hotdog-events", response_model=list[HotdogEvent])
    def hotdog_events():
        """Every ledger entry, newest first."""
        return [entry.to_dict() for entry in events_repo.list_events(newest_first=True)]

    @api.get("/stats", response_model=StatsResponse)
    def stats_bundle():
        """Aggregate statistics computed from one ledger snapshot."""
        return stats.stats_bundle()

    # Older dashboards still poll this path.
    api.add_api_route(
        "/test-stats",
        stats_bundle,
        methods=["GET"],
        response_model=StatsResponse,
        include_in_schema=False,
    )

    @api.get("/export-database", responses={404: {"model": ErrorResponse}})
    def export_database():
        """Download the raw SQLite ledger file."""
        path = get_db_path()
        if not path.is_file():
            logger.warning("Database export requested but %s does not exist", path)
            return JSONResponse(
                status_code=404,
                content=ErrorResponse(error="database file not found").model_dump(),
            )
        return FileResponse(
            path,
            media_type="application/vnd.sqlite3",
            filename=EXPORT_FILENAME,
        )

    return api
