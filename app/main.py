import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from app.core.config import settings
from app.core.errors import GatewayError, InputError
from app.core.http import json_response
from app.controllers import queries_controller

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(title=settings.APP_TITLE)

logger.info(f"Startup: {settings!r}")


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    """Map the gateway error taxonomy to {error, details} responses"""
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.url.path} rejected: {exc}")
    return json_response(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are input errors, reported in the gateway's error shape"""
    first = exc.errors()[0] if exc.errors() else {}
    details = first.get("msg") or "Malformed request body"
    error = InputError(error="Invalid request body", details=details)
    return json_response(error.to_payload(), status_code=error.status_code)


# Include routers
app.include_router(queries_controller.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "NL→Warehouse Query Gateway",
        "docs": "/docs",
        "version": "1.0.0"
    }


@app.get("/health", tags=["system"])
def health_check() -> dict:
    """Simple health check endpoint."""
    return {
        "status": "ok",
        "completion_service": settings.has_completion_service,
        "keypair_auth": settings.has_keypair_auth,
        "password_auth": settings.has_password_auth,
    }
