"""
FastAPI backend server for the hot dog ledger.

This module builds the FastAPI application. It sets up:
- CORS middleware so browser dashboards can read the query API
- Exception handlers that turn domain and datastore errors into
  ``{"error": "<message>"}`` JSON bodies
- The service objects (ledger, statistics, protests, dispatcher)
- All route endpoints

Use :func:`create_app` as an application factory, e.g.
``uvicorn --factory hotdog_ledger.api.server:create_app``, or call
:func:`start_server` (which ``hotdog-ledger run`` does).
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hotdog_ledger import __version__
from hotdog_ledger.api.models import ErrorResponse
from hotdog_ledger.config import config
from hotdog_ledger.errors import (
    InvalidAmount,
    LedgerError,
    NoSuchProtest,
    ProtestExists,
    SelfConfirmation,
    StoreUnavailable,
    WouldGoNegative,
)
from hotdog_ledger.interactions.commands import UnknownCommand
from hotdog_ledger.services import BotServices, build_services

logger = logging.getLogger(__name__)

# ============================================================================
# ERROR MAPPING
# ============================================================================

LEDGER_ERROR_STATUS: dict[type[LedgerError], int] = {
    InvalidAmount: 400,
    WouldGoNegative: 400,
    SelfConfirmation: 403,
    NoSuchProtest: 404,
    ProtestExists: 409,
}


def status_for_ledger_error(exc: LedgerError) -> int:
    """HTTP status for a rejected ledger operation (400 when unmapped)."""
    for error_type, status_code in LEDGER_ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def _ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    return _error_response(status_for_ledger_error(exc), exc.user_message)


async def _store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("Datastore failure on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(500, "datastore unavailable")


async def _unknown_command_handler(request: Request, exc: UnknownCommand) -> JSONResponse:
    return _error_response(400, str(exc))


# ============================================================================
# APPLICATION FACTORY
# ============================================================================


def create_app(services: BotServices | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        services: Pre-built services (tests inject their own). Built from the
            global configuration when omitted.
    """
    from hotdog_ledger.api.routes.register import register_routes

    if services is None:
        services = build_services(config)

    docs_enabled = config.security.docs_enabled
    app = FastAPI(
        title="Hot Dog Ledger",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_origins,
        allow_credentials="*" not in config.security.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, _ledger_error_handler)
    app.add_exception_handler(StoreUnavailable, _store_unavailable_handler)
    app.add_exception_handler(UnknownCommand, _unknown_command_handler)

    app.state.services = services
    register_routes(app, services)
    return app


# ============================================================================
# SERVER STARTUP
# ============================================================================


def start_server(host: str | None = None, port: int | None = None) -> None:
    """Run the application under uvicorn (blocks until shutdown)."""
    import uvicorn

    host = host or config.server.host
    port = port or config.server.port
    logger.info("Starting Hot Dog Ledger API on %s:%s", host, port)
    uvicorn.run(create_app(), host=host, port=port, log_config=None)
