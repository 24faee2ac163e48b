"""Main FastAPI application entry point.

Provides CORS, health endpoints and the course access API: catalog,
enrollment, course content, submissions, messaging and calendar export.
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
import subprocess

from coursegate.db.config import close_db, init_db
from coursegate.routers import (
    calendar, content, courses, enrollments, health, messages, submissions
)
from coursegate.services.errors import CourseGateError
from coursegate.utils.settings import settings
from coursegate.utils.timeutils import isoformat, utcnow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Application metadata
APP_NAME = "CourseGate API"
VERSION = "1.0.0"
DESCRIPTION = """
CourseGate course access backend

## Features

* **Enrollment**: application forms, join codes and manager decisions
* **Course workspace**: one payload per viewer with gated materials
* **Assignments**: due-status, submissions and review
* **Messaging**: course channel and chat with staff-only posts
* **Calendar**: ICS export of scheduled sessions
"""

# Initialize FastAPI app
app = FastAPI(
    title=APP_NAME,
    description=DESCRIPTION,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


def _error_body(request, message: str) -> dict:
    return {
        "success": False,
        "error": message,
        "message": message,
        "timestamp": isoformat(utcnow()),
        "path": str(request.url)
    }


# Global exception handlers


@app.exception_handler(CourseGateError)
async def course_gate_exception_handler(request, exc: CourseGateError):
    """Map domain errors to their status code"""
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(request, exc.message)
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Handle HTTP exceptions with consistent error format"""
    return JSONResponse(
        status_code=exc.status_code, content=_error_body(request, str(exc.detail))
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Report schema failures by field name without echoing the input"""
    fields = sorted(
        {".".join(str(part) for part in error["loc"][1:]) for error in exc.errors()}
    )
    message = "Invalid request"
    if any(fields):
        message = f"Invalid request: {', '.join(f for f in fields if f)}"
    logger.info(f"Validation failed on {request.url.path}: {fields}")
    return JSONResponse(status_code=422, content=_error_body(request, message))


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500, content=_error_body(request, "Internal server error")
    )

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(courses.router, prefix="/api/v1")
app.include_router(enrollments.router, prefix="/api/v1")
app.include_router(content.router, prefix="/api/v1")
app.include_router(submissions.router, prefix="/api/v1")
app.include_router(messages.router, prefix="/api/v1")
app.include_router(calendar.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "name": APP_NAME,
        "version": VERSION,
        "status": "running",
        "environment": settings.environment,
        "timestamp": isoformat(utcnow()),
        "docs": "/docs",
        "health": "/api/v1/health"
    }


def run_migrations() -> None:
    """Run ``alembic upgrade head`` from the project root."""
    logger.info("AUTO_MIGRATE enabled: running 'alembic upgrade head'")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=os.path.join(os.path.dirname(__file__), ".."),
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.error("Alembic not found - ensure it's installed in the environment")
        return
    if result.returncode != 0:
        logger.error(
            "Alembic upgrade failed (code %s): %s\n%s",
            result.returncode,
            result.stdout,
            result.stderr,
        )
    else:
        logger.info("Alembic migration applied successfully")


@app.on_event("startup")
async def startup_event():
    """Application startup tasks"""
    logger.info(f"Starting {APP_NAME} v{VERSION}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"CORS Origins: {settings.cors_origins}")
    if settings.auto_migrate:
        run_migrations()
    elif settings.auto_create_tables:
        await init_db()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown tasks"""
    logger.info(f"Shutting down {APP_NAME}")
    await close_db()

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")

    uvicorn.run(
        "coursegate.main:app",
        host=host,
        port=port,
        reload=True,
        log_level="info"
    )
