from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from typing import Dict, Optional
import asyncio
import logging
import os
import uuid

import config
from logging_setup import request_id_var, setup_logging
from tryon import db
from tryon.exceptions import TryOnError

# Ensure logging is configured when the app module is imported (e.g., under uvicorn)
setup_logging()

app = FastAPI(
    title="Try-On Studio API",
    description="Virtual try-on relay: photo + prompt in, AI-edited image out.",
    version="1.0.0",
)


@app.on_event("startup")
async def startup_event():
    logging.info("Application startup event.")
    db.init_db()


@app.on_event("shutdown")
async def shutdown_event():
    logging.info("Application shutdown event.")


class ProcessRequestMiddleware(BaseHTTPMiddleware):
    """Tags every log line of a request with a request id and echoes it back."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        try:
            logging.info(f"{request.method} {request.url.path}")
            response = await call_next(request)
            response.headers["X-Request-Id"] = request_id
            return response
        finally:
            request_id_var.reset(token)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects requests whose declared Content-Length exceeds MAX_REQUEST_BYTES."""

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > config.MAX_REQUEST_BYTES:
            logging.warning(f"Rejected oversized request: {content_length} bytes")
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"error": "Payload too large"},
            )
        return await call_next(request)


app.add_middleware(BodySizeLimitMiddleware)
app.add_middleware(ProcessRequestMiddleware)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error bodies: every failure is {"error": "..."} ---

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", []) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.exception_handler(TryOnError)
async def tryon_exception_handler(request: Request, exc: TryOnError):
    logging.error(f"Unhandled application error: {exc}", exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(exc)})


# --- Health ---

class HealthCheckResult(BaseModel):
    status: str
    message: Optional[str] = None


class OverallHealthStatus(BaseModel):
    status: str
    checks: Dict[str, HealthCheckResult]


@app.get("/health", response_model=OverallHealthStatus, tags=["Health"])
async def health_check():
    application_status = HealthCheckResult(status="ok", message="Application is running")

    database_status, provider_status, uploads_status = await asyncio.gather(
        check_database_health(),
        check_provider_health(),
        check_upload_dir_health(),
    )

    all_checks = {
        "application": application_status,
        "database": database_status,
        "generation_provider": provider_status,
        "uploads": uploads_status,
    }

    overall_status = "ok"
    if any(check.status == "unavailable" for check in all_checks.values()):
        overall_status = "unavailable"
    elif any(check.status == "degraded" for check in all_checks.values()):
        overall_status = "degraded"

    return OverallHealthStatus(status=overall_status, checks=all_checks)


async def check_database_health() -> HealthCheckResult:
    logging.debug("Checking database health.")
    try:
        await asyncio.to_thread(db.ping)
        return HealthCheckResult(status="ok", message="Database connection successful")
    except Exception as e:
        logging.error(f"Database health check failed: {e}", exc_info=False)  # Avoid leaking exception details
        return HealthCheckResult(status="unavailable", message="Database connection failed")


async def check_provider_health() -> HealthCheckResult:
    logging.debug("Checking generation provider configuration.")
    provider = config.GENERATION_PROVIDER
    if provider == "vertex" and (config.GOOGLE_PROJECT_ID or config.GEMINI_API_KEY):
        return HealthCheckResult(status="ok", message="Vertex/Gemini credentials configured")
    if provider == "gateway" and config.GATEWAY_API_KEY:
        return HealthCheckResult(status="ok", message="AI gateway API key configured")
    logging.warning(f"Generation provider '{provider}' is not fully configured.")
    return HealthCheckResult(status="degraded", message=f"Generation provider '{provider}' is not configured")


async def check_upload_dir_health() -> HealthCheckResult:
    upload_dir = config.UPLOAD_DIR
    try:
        os.makedirs(upload_dir, exist_ok=True)
    except OSError as e:
        logging.error(f"Upload directory unavailable: {e}")
        return HealthCheckResult(status="unavailable", message="Upload directory cannot be created")
    if not os.access(upload_dir, os.W_OK):
        return HealthCheckResult(status="degraded", message="Upload directory is not writable")
    return HealthCheckResult(status="ok", message="Upload directory is writable")
