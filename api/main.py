"""
Home Energy CRM API - Main Application.

FastAPI application with CORS enabled for frontend communication. Core errors
are translated to HTTP status codes here so routers only call services.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import __version__
from domain.errors import (
    ConcurrencyConflictError,
    CrmError,
    InvalidAmountError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)

load_dotenv()

logging.basicConfig(
    level=os.getenv("CRM_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Home Energy CRM API",
    description="REST API for managing home-energy customers, follow-up tasks and rep commissions",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# TODO: Restrict origins once the frontend domain is fixed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(NotFoundError)
def handle_not_found(request: Request, exc: NotFoundError):
    return _error(404, exc)


@app.exception_handler(ValidationError)
def handle_validation(request: Request, exc: ValidationError):
    return _error(422, exc)


@app.exception_handler(InvalidAmountError)
def handle_invalid_amount(request: Request, exc: InvalidAmountError):
    return _error(422, exc)


@app.exception_handler(PermissionDeniedError)
def handle_permission_denied(request: Request, exc: PermissionDeniedError):
    return _error(403, exc)


@app.exception_handler(ConcurrencyConflictError)
def handle_conflict(request: Request, exc: ConcurrencyConflictError):
    logger.warning(f"Concurrent update rejected on {request.url.path}: {exc}")
    return _error(409, exc)


@app.exception_handler(PersistenceError)
def handle_persistence(request: Request, exc: PersistenceError):
    logger.error(f"Store failure on {request.url.path}: {exc}")
    return _error(503, exc)


@app.exception_handler(CrmError)
def handle_crm_error(request: Request, exc: CrmError):
    logger.exception(f"Unhandled core error on {request.url.path}")
    return _error(500, exc)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "home-energy-crm-api",
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Home Energy CRM API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


# Import and include routers
from api.routers import commissions, customers, dashboard, reps, tasks

app.include_router(customers.router, prefix="/api/v1", tags=["Customers"])
app.include_router(tasks.router, prefix="/api/v1", tags=["Tasks"])
app.include_router(commissions.router, prefix="/api/v1", tags=["Commissions"])
app.include_router(dashboard.router, prefix="/api/v1", tags=["Dashboard"])
app.include_router(reps.router, prefix="/api/v1", tags=["Reps"])
