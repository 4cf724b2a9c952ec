"""Health and root endpoints.

Provides the root ``/`` endpoint (API identity and version) and the
``/health`` endpoint (liveness check with the number of protests awaiting a
second).

The version string is read from ``hotdog_ledger.__version__`` which is
resolved at import time via ``importlib.metadata``.
"""

from fastapi import APIRouter

from hotdog_ledger import __version__
from hotdog_ledger.api.models import HealthResponse
from hotdog_ledger.protest.coordinator import ProtestCoordinator


def router(coordinator: ProtestCoordinator) -> APIRouter:
    """Build the health router with access to the protest store."""
    api = APIRouter()

    @api.get("/")
    async def root():
        """Root endpoint showing API identity and current version."""
        return {"message": "Hot Dog Ledger API", "version": __version__}

    @api.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        return HealthResponse(status="ok", pending_protests=coordinator.store.pending_count())

    return api
