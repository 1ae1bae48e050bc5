"""Finance Tracker API - personal income and expense tracking."""

import logging
import time
import traceback
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.database import SessionLocal
from app.errors import AppError, InternalServerError
from app.rate_limit import limiter
from app.routers import auth_router, trans_categories_router, transactions_router, users_router
from app.services.tokens import purge_expired_tokens
from app.services.trans_category import get_trans_category_service

# Logging
logger = logging.getLogger("finance_tracker")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

settings = get_settings()

# Session factory used by startup tasks; tests point it at their own session.
startup_session_factory: Callable[[], Session] | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    for warning in settings.validate():
        logger.warning("Config: %s", warning)

    db = (startup_session_factory or SessionLocal)()
    try:
        get_trans_category_service().seed_default_categories(db)
        purge_expired_tokens(db)
    finally:
        db.close()
    yield


app = FastAPI(title="Finance Tracker API", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        response.headers["Cross-Origin-Resource-Policy"] = "same-origin"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# --- Request logging middleware ---
class RequestLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = {"/api/auth/"}

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        path = request.url.path
        method = request.method
        logger.info("%s %s -> %d (%.0fms)", method, path, response.status_code, duration_ms)

        # Auth mutations get an audit line with the client address
        if method in ("POST", "DELETE") and any(path.startswith(p) for p in self.AUDIT_PATHS):
            logger.info(
                "AUDIT %s %s -> %d from %s",
                method,
                path,
                response.status_code,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# API routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(trans_categories_router)
app.include_router(transactions_router)


# --- Error handlers ---
def _error_body(status_code: int, message: str) -> dict:
    return {"status": "fail" if status_code < 500 else "error", "detail": message}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate typed application errors."""
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.status_code, exc.message))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten validation errors into a field-keyed map."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        # loc is ("body" | "query" | "path", field, ...)
        field_path = [str(part) for part in error.get("loc", ())[1:]]
        key = ".".join(field_path) or "_global"
        errors.setdefault(key, []).append(error.get("msg", "Invalid value"))
    content = _error_body(400, "Invalid request data")
    content["errors"] = errors
    return JSONResponse(status_code=400, content=content)


def _is_unique_violation(exc: IntegrityError) -> bool:
    # 23505 is the SQLSTATE for unique_violation; SQLite only reports it in the message
    if getattr(exc.orig, "pgcode", None) == "23505":
        return True
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Duplicate keys and other constraint violations at the storage layer."""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    if _is_unique_violation(exc):
        message = "Duplicate field value entered"
    else:
        message = "Data integrity constraint violated"
    return JSONResponse(status_code=409, content=_error_body(409, message))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded."""
    return JSONResponse(status_code=429, content=_error_body(429, "Rate limit exceeded. Try again later."))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """JSON body for framework HTTP errors, including unknown routes."""
    message = exc.detail
    if exc.status_code == 404 and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: 500, with the stack trace outside production."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = InternalServerError()
    content = _error_body(error.status_code, error.message)
    if not settings.is_production:
        content["stack"] = traceback.format_exception(exc)
    return JSONResponse(status_code=error.status_code, content=content)


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "finance-tracker", "version": "0.1.0"}
