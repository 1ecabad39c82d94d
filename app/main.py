"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings
from app.db.mirror import SqlMirror, get_mirror
from app.errors import AppError, app_error_handler, unhandled_error_handler
from app.routers import (
    agency,
    appointment,
    candidate,
    cv_analysis,
    health,
    report,
    task,
    user,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    On startup the mirror table is created when a mirror is configured.
    """
    logger.info("Starting %s...", settings.APP_NAME)
    mirror = get_mirror()
    if isinstance(mirror, SqlMirror):
        await mirror.create_schema()
        logger.info("Secondary mirror enabled")

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Backend API for HR recruitment: candidates, pipeline, agenda and reports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(user.router)
app.include_router(candidate.router)
app.include_router(cv_analysis.router)
app.include_router(task.router)
app.include_router(appointment.router)
app.include_router(agency.agency_router)
app.include_router(agency.department_router)
app.include_router(report.router)
