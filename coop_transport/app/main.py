"""
FastAPI Application Entry Point.

This is the main application file for the Cooperative Transport Back-Office
calculation API.
"""

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from coop_transport.app.core.config import settings
from coop_transport.app.api.v1.router import router as api_v1_router
from coop_transport.app.core.observability import ObservabilityMiddleware, configure_logging
from coop_transport.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

configure_logging(settings.log_level)

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Fare transparency, surplus allocation and permit compliance for community transport cooperatives",
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to the Cooperative Transport Back-Office API",
        "docs": "/docs",
        "health": "/health",
    }
