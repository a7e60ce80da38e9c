from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Our Modules
from garuda.api.v1.api import api_router
from garuda.api.v1.chat import llm_service
from garuda.core.config import settings
from garuda.core.config.logging import get_logger
from garuda.core.metrics import setup_metrics
from garuda.core.middleware import LoggingContextMiddleware, MetricsMiddleware

# Get logger
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown events.
    """
    logger.info(
        "application_startup",
        project_name=settings.PROJECT_NAME,
        version=settings.VERSION,
        api_prefix=settings.API_V1_STR,
        environment=settings.ENVIRONMENT.value,
        providers=[p.name for p in llm_service.providers if p.is_configured()],
    )

    yield  # Application runs here

    logger.info("application_shutdown")


# Initialize the Application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Garuda: wisdom from the eternal scriptures",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# 1. Set up Prometheus metrics
setup_metrics(app)

# 2. Add logging context middleware (First to bind context, last to clear it)
app.add_middleware(LoggingContextMiddleware)

# 3. Add custom metrics middleware (Tracks latency)
app.add_middleware(MetricsMiddleware)

# 4. Set up CORS (Cross-Origin Resource Sharing)
# The chat page may be served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Garuda-Provider", "X-Request-ID"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Custom handler for validation errors.
    Formats Pydantic errors into a user-friendly JSON structure.
    """
    # Warn level, not error: it's usually the client's fault
    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=str(exc.errors()),
    )

    # e.g. ["body", "messages", 0, "role"] -> "messages -> 0 -> role"
    formatted_errors = []
    for error in exc.errors():
        loc = " -> ".join([str(loc_part) for loc_part in error["loc"] if loc_part != "body"])
        formatted_errors.append({"field": loc, "message": error["msg"]})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Validation error", "errors": formatted_errors},
    )


# Include the main API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root(request: Request):
    """
    Root endpoint for basic connectivity tests.
    """
    logger.info("root_endpoint_called")
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT.value,
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """
    Health check.
    The fallback provider is only probed on demand, so the primary's
    configuration is all that is reported here.
    """
    primary = llm_service.providers[0] if llm_service.providers else None
    primary_configured = bool(primary and primary.is_configured())

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "components": {
                "api": "healthy",
                "primary_provider": "configured" if primary_configured else "unconfigured",
            },
            "timestamp": datetime.now().isoformat(),
        },
    )
