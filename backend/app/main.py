"""FastAPI application entry point"""

import traceback
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError

from backend.app.core.config import settings
from backend.app.core.database import async_session_factory
from backend.app.core.logging import setup_logging, get_logger
from backend.app.core.middleware import RequestIDMiddleware, LoggingMiddleware
from backend.app.core.exceptions import PortalException, RateLimitException
from backend.app.core.task_queue import task_queue
from backend.app.services.auth_service import ensure_bootstrap_admin

# Setup logging
setup_logging()
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
## Leadership Registration Portal

Backend for the student leadership program: applicants register with three
documents, admins review registrations and score approved applicants.

### Authentication

Admin endpoints require a bearer token:

1. Login at `/api/v1/admin/login` to get a token (valid for 24 hours)
2. Include the token in the `Authorization` header: `Bearer <token>`

### Rate Limiting

Admin login is limited to {attempts} attempts per {minutes} minutes per IP address.
    """.format(
        attempts=settings.LOGIN_RATE_LIMIT_ATTEMPTS,
        minutes=settings.LOGIN_RATE_LIMIT_WINDOW_SECONDS // 60
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    openapi_tags=[
        {
            "name": "Registration",
            "description": "Applicant registration and document upload"
        },
        {
            "name": "Admin",
            "description": "Admin login and registration review"
        },
        {
            "name": "Evaluations",
            "description": "Scoring of approved applicants"
        },
    ],
)

# Starlette runs the last-added middleware first, so request IDs are
# assigned before the request is logged
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Stored documents are served as static files
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


# Exception handlers
@app.exception_handler(PortalException)
async def portal_exception_handler(request: Request, exc: PortalException):
    """Handle custom portal exceptions"""
    request_id = getattr(request.state, "request_id", "unknown")

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Portal exception: {exc.message}",
        extra={
            "request_id": request_id,
            "status_code": exc.status_code,
        }
    )

    headers = None
    if isinstance(exc, RateLimitException) and exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "details": exc.details,
            "request_id": request_id,
        },
        headers=headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors"""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.warning(
        f"Validation error: {exc.errors()}",
        extra={"request_id": request_id}
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation error",
            "details": {
                "errors": [
                    {
                        "field": ".".join(str(part) for part in error["loc"]),
                        "message": error["msg"],
                    }
                    for error in exc.errors()
                ]
            },
            "request_id": request_id,
        }
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """Handle database integrity errors"""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        f"Database integrity error: {str(exc)}",
        extra={"request_id": request_id},
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Database constraint violation",
            "details": {"message": "The operation violates a database constraint"},
            "request_id": request_id,
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    request_id = getattr(request.state, "request_id", "unknown")

    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={"request_id": request_id},
        exc_info=True
    )

    details = {"message": "An unexpected error occurred"}
    if settings.DEBUG:
        details["traceback"] = traceback.format_exception(type(exc), exc, exc.__traceback__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "details": details,
            "request_id": request_id,
        }
    )


@app.on_event("startup")
async def startup_event():
    """Application startup tasks"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    async with async_session_factory() as session:
        await ensure_bootstrap_admin(session)


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown tasks"""
    logger.info("Shutting down application")
    await task_queue.disconnect()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


# API routers
from backend.app.api import registrations, auth, admin, evaluations

app.include_router(registrations.router, prefix=f"{settings.API_V1_PREFIX}/registration", tags=["Registration"])
app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/admin", tags=["Admin"])
app.include_router(admin.router, prefix=f"{settings.API_V1_PREFIX}/admin", tags=["Admin"])
app.include_router(evaluations.router, prefix=f"{settings.API_V1_PREFIX}/admin/evaluations", tags=["Evaluations"])
