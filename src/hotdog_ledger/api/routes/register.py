"""
Route registration entry point for the FastAPI application.

Each router module builds an ``APIRouter`` around the service it needs;
this module is the single place that decides which routers are mounted.
"""

from fastapi import FastAPI

from hotdog_ledger.api.routes import health, interactions, query
from hotdog_ledger.services import BotServices


def register_routes(app: FastAPI, services: BotServices) -> None:
    """Register all API routes with the FastAPI app."""
    app.include_router(health.router(services.coordinator))
    app.include_router(query.router(services.stats))
    app.include_router(interactions.router(services.dispatcher))
