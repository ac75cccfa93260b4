"""
FastAPI application entry point for SparkLink backend.

This module creates the FastAPI app instance and registers all routers.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from sparklink.config import settings
from sparklink.routes.analytics import router as analytics_router
from sparklink.routes.auth import router as auth_router
from sparklink.routes.gallery import router as gallery_router
from sparklink.routes.health import router as health_router
from sparklink.routes.pages import router as pages_router
from sparklink.routes.profile import router as profile_router
from sparklink.routes.public import router as public_router
from sparklink.routes.resume import router as resume_router
from sparklink.routes.subscriptions import router as subscriptions_router
from sparklink.routes.templates import router as templates_router
from sparklink.routes.verification import router as verification_router
from sparklink.schemas.health import RootResponse

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    """
    Get allowed CORS origins based on environment.

    Environment-based configuration:
    - ENVIRONMENT=production: CORS_ALLOWED_ORIGINS, falling back to CLIENT_URL
    - ENVIRONMENT=testing/development: Allows all origins for local dev

    Returns:
        List of allowed origin URLs, or ["*"] for development.
    """
    if settings.is_production():
        origins = settings.CORS_ALLOWED_ORIGINS or [settings.CLIENT_URL]
        logger.info(f"CORS configured for production with {len(origins)} allowed origins")
        return origins

    logger.info(f"CORS configured for {settings.ENVIRONMENT}: allowing all origins")
    return ["*"]


# Create FastAPI app
app = FastAPI(
    title="SparkLink API",
    description="Backend service for SparkLink link-in-bio and portfolio pages",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)


def _jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the raw input and context objects."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# Custom validation error handler to log detailed errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Log validation errors and return them in the standard error shape.

    Only locations, messages and types are logged; submitted values can
    carry passwords.
    """
    errors = _jsonable_errors(exc)
    logger.error(f"Validation error on {request.method} {request.url.path}: {errors}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "details": errors,
        }
    )


# Configure CORS with environment-based origins
cors_origins = _get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(pages_router)
app.include_router(gallery_router)
app.include_router(resume_router)
app.include_router(templates_router)
app.include_router(analytics_router)
app.include_router(subscriptions_router)
app.include_router(verification_router)
app.include_router(public_router)


@app.get("/", response_model=RootResponse, tags=["system"])
async def root() -> RootResponse:
    """Service banner."""
    return RootResponse(message="SparkLink API is running", version=settings.APP_VERSION)

logger.info("FastAPI app initialized successfully")
